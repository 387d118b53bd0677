"""Tests for the Excel review report and the command-line interface."""

from datetime import datetime

import pytest
import yaml
from click.testing import CliRunner
from openpyxl import load_workbook

from bank_statement_recon.cli import main
from bank_statement_recon.config import ImportConfig, SheetConfig
from bank_statement_recon.models.transaction import LedgerTransaction, ReconciliationStatus
from bank_statement_recon.pipeline import StatementImporter
from bank_statement_recon.reports import ReviewReportGenerator


@pytest.fixture
def result(config, exchange_text, clients, aliases):
    ledger = [
        LedgerTransaction.from_dict(
            {
                "id": "L1",
                "date": "2024-03-01",
                "amount": "100000",
                "client_id": "c1",
                "bank_document_number": "101",
                "reconciliation_status": ReconciliationStatus.BANK_IMPORT.value,
            }
        )
    ]
    return StatementImporter(config).import_text(
        exchange_text, "kl_to_1c.txt", clients, aliases, ledger
    )


class TestReviewReportGenerator:
    def test_sheets(self, config, result, tmp_path):
        path = ReviewReportGenerator(config).generate_report(result, tmp_path / "out" / "review.xlsx")

        wb = load_workbook(path)
        assert wb.sheetnames == [
            "Summary",
            "Transactions",
            "Needs Review",
            "Discrepancies",
            "Duplicates",
            "Parse Diagnostics",
        ]
        assert wb["Transactions"].max_row == 3
        assert wb["Duplicates"].max_row == 2
        assert wb["Duplicates"]["P2"].value == "L1"
        assert wb["Needs Review"].max_row == 1

    def test_needs_review_sheet_lists_unresolved_payers_only(self, config, clients, aliases, tmp_path):
        content = (
            "Дата;Наименование;Зачислено;Назначение\n"
            "01.03.2024;ТОО Ромашка;98000;Оплата\n"
            "02.03.2024;ТОО Неизвестно;500;Оплата\n"
        )
        ledger = [
            LedgerTransaction.from_dict(
                {
                    "id": "L1",
                    "date": "2024-03-01",
                    "amount": "100000",
                    "client_id": "c1",
                }
            )
        ]
        result = StatementImporter(config).import_text(
            content, "statement.csv", clients, aliases, ledger
        )

        path = ReviewReportGenerator(config).generate_report(result, tmp_path / "review.xlsx")

        wb = load_workbook(path)
        assert wb["Discrepancies"].max_row == 2
        assert wb["Needs Review"].max_row == 2
        assert [t.needs_review for t in result.transactions] == [False, True]

    def test_disabled_sheet(self, result, tmp_path):
        config = ImportConfig()
        config.output.sheets.diagnostics = SheetConfig(name="Parse Diagnostics", enabled=False)

        path = ReviewReportGenerator(config).generate_report(result, tmp_path / "review.xlsx")

        assert "Parse Diagnostics" not in load_workbook(path).sheetnames

    def test_default_output_path(self, config):
        path = ReviewReportGenerator(config).default_output_path(datetime(2024, 3, 1, 9, 30, 0))
        assert path.name == "statement_review_20240301_093000.xlsx"


@pytest.fixture
def reference_files(tmp_path, exchange_text):
    statement = tmp_path / "kl_to_1c.txt"
    statement.write_bytes(exchange_text.encode("cp1251"))

    clients = tmp_path / "clients.yaml"
    clients.write_text(
        yaml.safe_dump(
            [
                {"id": "c1", "company": "ТОО Ромашка", "bin": "123456789012"},
                {"id": "c2", "company": "ТОО Лютик"},
            ],
            allow_unicode=True,
        ),
        encoding="utf-8",
    )
    return statement, clients


class TestCli:
    def test_import_writes_report(self, reference_files, tmp_path):
        statement, clients = reference_files
        output = tmp_path / "review.xlsx"

        runner = CliRunner()
        result = runner.invoke(
            main,
            ["import", str(statement), "--clients", str(clients), "-o", str(output)],
        )

        assert result.exit_code == 0, result.output
        assert output.exists()

    def test_import_dry_run(self, reference_files, tmp_path):
        statement, clients = reference_files

        runner = CliRunner()
        result = runner.invoke(
            main, ["import", str(statement), "--clients", str(clients), "--dry-run"]
        )

        assert result.exit_code == 0, result.output
        assert "Dry run" in result.output
        assert not list(tmp_path.glob("*.xlsx"))

    def test_import_bad_reference_file(self, reference_files, tmp_path):
        statement, _ = reference_files
        bad = tmp_path / "bad.yaml"
        bad.write_text("id: c1\n", encoding="utf-8")

        result = CliRunner().invoke(main, ["import", str(statement), "--clients", str(bad)])

        assert result.exit_code == 1

    def test_parse(self, reference_files):
        statement, _ = reference_files

        result = CliRunner().invoke(main, ["parse", str(statement)])

        assert result.exit_code == 0, result.output
        assert "Total transactions: 2" in result.output

    def test_parse_shows_exchange_file_header(self, reference_files):
        statement, _ = reference_files

        result = CliRunner().invoke(main, ["parse", str(statement)])

        assert result.exit_code == 0, result.output
        assert "File Header" in result.output
        assert "Бухгалтерия" in result.output
        assert "01.03.2024" in result.output

    def test_parse_csv_has_no_file_header(self, tmp_path, csv_text):
        statement = tmp_path / "statement.csv"
        statement.write_bytes(csv_text.encode("cp1251"))

        result = CliRunner().invoke(main, ["parse", str(statement)])

        assert result.exit_code == 0, result.output
        assert "File Header" not in result.output

    def test_confirm_alias(self, tmp_path):
        aliases = tmp_path / "aliases.yaml"

        result = CliRunner().invoke(
            main,
            [
                "confirm-alias",
                str(aliases),
                "--org",
                "org1",
                "--name",
                "ТОО ЦВЕТЫ СТЕПИ",
                "--client-id",
                "c2",
            ],
        )

        assert result.exit_code == 0, result.output
        stored = yaml.safe_load(aliases.read_text(encoding="utf-8"))
        assert stored[0]["bank_name"] == "ТОО ЦВЕТЫ СТЕПИ"
        assert stored[0]["client_id"] == "c2"

    def test_init_config(self, tmp_path):
        output = tmp_path / "config.yaml"

        result = CliRunner().invoke(main, ["init-config", "-o", str(output)])

        assert result.exit_code == 0
        assert output.exists()
