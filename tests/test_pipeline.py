"""End-to-end tests for the statement import pipeline."""

from datetime import date
from decimal import Decimal

import pytest

from bank_statement_recon import StatementImporter, import_statement
from bank_statement_recon.models.counterparty import Client, MatchSource
from bank_statement_recon.models.result import ClientTaxIdUpdate
from bank_statement_recon.models.transaction import (
    Classification,
    LedgerTransaction,
    ReconciliationStatus,
    StatementFormat,
)
from bank_statement_recon.stores import RecordingTaxIdSink
from bank_statement_recon.utils.exceptions import StatementParseError


@pytest.fixture
def ledger():
    return [
        LedgerTransaction(
            id="L1",
            date=date(2024, 3, 1),
            amount=Decimal("100000"),
            client_id="c1",
            bank_document_number="101",
            reconciliation_status=ReconciliationStatus.BANK_IMPORT,
        ),
    ]


@pytest.fixture
def sink():
    return RecordingTaxIdSink()


@pytest.fixture
def importer(config, sink):
    return StatementImporter(config, tax_id_sink=sink)


class TestImportText:
    def test_exchange_statement(self, importer, exchange_text, clients, aliases, ledger, employees):
        result = importer.import_text(
            exchange_text, "kl_to_1c.txt", clients, aliases, ledger, employees
        )

        assert result.format == StatementFormat.PROPRIETARY
        assert [t.classification for t in result.transactions] == [
            Classification.DUPLICATE,
            Classification.NEW,
        ]
        first, second = result.transactions
        assert first.counterparty.client_id == "c1"
        assert first.counterparty.match_source == MatchSource.TAX_ID
        assert second.counterparty.client_id == "c2"
        assert second.counterparty.match_source == MatchSource.NAME_FUZZY
        assert second.transaction.amount == Decimal("675600.13")

    def test_tax_id_discovered_once_per_client(self, importer, sink, clients, aliases):
        content = (
            "Дата;Плательщик;БИН;Зачислено;Назначение\n"
            "01.03.2024;ТОО Лютик;555566667777;1000;Оплата\n"
            "02.03.2024;ТОО Лютик;555566667777;2000;Оплата\n"
            "03.03.2024;ТОО Ромашка;999988887777;3000;Оплата\n"
        )
        result = importer.import_text(content, "statement.csv", clients, aliases, [])

        expected = [ClientTaxIdUpdate(client_id="c2", tax_id="555566667777")]
        assert result.tax_id_updates == expected
        assert sink.updates == expected

    def test_tax_id_match_does_not_emit_update(self, importer, sink, exchange_text, aliases):
        clients = [Client(id="c1", company="ТОО Ромашка", bin="123456789012")]
        importer.import_text(exchange_text, "kl_to_1c.txt", clients, aliases, [])

        assert sink.updates == []

    def test_unresolved_payer_needs_review(self, importer, clients, aliases):
        content = "Дата;Наименование;Зачислено;Назначение\n01.03.2024;ТОО Неизвестно;500;Оплата\n"
        result = importer.import_text(content, "statement.csv", clients, aliases, [])

        item = result.transactions[0]
        assert not item.counterparty.is_resolved
        assert item.needs_review
        assert result.summary()["unresolved"] == 1

    def test_unknown_format(self, importer, clients, aliases):
        result = importer.import_text("просто текст", "notes.txt", clients, aliases, [])

        assert result.format == StatementFormat.UNKNOWN
        assert result.transactions == []
        assert result.diagnostics.format == StatementFormat.UNKNOWN

    def test_summary(self, importer, exchange_text, clients, aliases, ledger):
        result = importer.import_text(exchange_text, "kl_to_1c.txt", clients, aliases, ledger)

        assert result.summary() == {
            "parsed": 2,
            "new": 1,
            "verified": 0,
            "discrepancy": 0,
            "duplicate": 1,
            "unresolved": 0,
            "dropped": 0,
        }
        assert result.total_amount == Decimal("775600.13")

    def test_module_function(self, csv_text, clients, aliases):
        result = import_statement(csv_text, "statement.csv", clients, aliases, [])

        assert len(result.transactions) == 1
        assert result.transactions[0].counterparty.client_id == "c1"


class TestImportBytes:
    def test_windows_1251_file(self, importer, tmp_path, exchange_text, clients, aliases, ledger):
        path = tmp_path / "kl_to_1c.txt"
        path.write_bytes(exchange_text.encode("cp1251"))

        result = importer.import_file(path, clients, aliases, ledger)

        assert result.file_name == "kl_to_1c.txt"
        assert len(result.transactions) == 2

    def test_workbook_file(self, importer, tmp_path, clients, aliases):
        from openpyxl import Workbook

        wb = Workbook()
        ws = wb.active
        ws.append(["Дата", "Плательщик", "Кредит", "Назначение"])
        ws.append(["05.03.2024", "ТОО Ромашка", 2500, "Оплата"])
        path = tmp_path / "statement.xlsx"
        wb.save(path)

        result = importer.import_file(path, clients, aliases, [])

        assert result.format == StatementFormat.DELIMITED
        assert result.transactions[0].transaction.amount == Decimal("2500")
        assert result.transactions[0].counterparty.client_id == "c1"

    def test_missing_file(self, importer, tmp_path, clients, aliases):
        with pytest.raises(StatementParseError):
            importer.import_file(tmp_path / "missing.txt", clients, aliases, [])
