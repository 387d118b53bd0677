"""Tests for the data models."""

from datetime import date, datetime
from decimal import Decimal

import pytest

from bank_statement_recon.models import (
    Client,
    CounterpartyAlias,
    DropReason,
    LedgerTransaction,
    ParseDiagnostics,
    RawTransaction,
    ReconciliationStatus,
    StatementFormat,
)


class TestRawTransaction:
    @pytest.mark.parametrize("amount", [Decimal("0"), Decimal("-1")])
    def test_amount_must_be_positive(self, amount):
        with pytest.raises(ValueError):
            RawTransaction(
                date=date(2024, 3, 1),
                amount=amount,
                amount_original=amount,
                currency="KZT",
            )


class TestLedgerTransaction:
    def test_from_dict_with_datetime(self):
        txn = LedgerTransaction.from_dict(
            {"id": 7, "date": datetime(2024, 3, 1, 12, 0), "amount": 10.5}
        )

        assert txn.id == "7"
        assert txn.date == date(2024, 3, 1)
        assert txn.amount == Decimal("10.5")
        assert txn.client_id is None
        assert txn.reconciliation_status == ReconciliationStatus.NONE

    def test_from_dict_with_timestamp_string(self):
        txn = LedgerTransaction.from_dict(
            {"id": "L1", "date": "2024-03-01T10:00:00Z", "amount": "1"}
        )
        assert txn.date == date(2024, 3, 1)

    @pytest.mark.parametrize(
        "value, expected",
        [
            ("bank_import", ReconciliationStatus.BANK_IMPORT),
            ("VERIFIED", ReconciliationStatus.VERIFIED),
            ("manual", ReconciliationStatus.NONE),
            (None, ReconciliationStatus.NONE),
        ],
    )
    def test_status_mapping(self, value, expected):
        assert ReconciliationStatus.from_value(value) == expected


class TestClient:
    def test_tax_id_prefers_bin(self):
        assert Client(id="c", bin="1", inn="2").tax_id == "1"
        assert Client(id="c", inn="2").tax_id == "2"

    def test_name_variants_order(self):
        client = Client(id="c", name="Ромашка", company="ТОО Ромашка", legal_name="")
        assert client.name_variants == ["ТОО Ромашка", "Ромашка"]


def test_alias_dict_round_trip():
    alias = CounterpartyAlias(
        organization_id="org1",
        bank_name="ТОО Ромашка",
        client_id="c1",
        bank_tax_id="123456789012",
        created_at=datetime(2024, 3, 1, 9, 0),
        updated_at=datetime(2024, 3, 2, 9, 0),
    )
    assert CounterpartyAlias.from_dict(alias.to_dict()) == alias


def test_diagnostics_as_dict():
    diagnostics = ParseDiagnostics(format=StatementFormat.DELIMITED, records_seen=3)
    diagnostics.record_drop(DropReason.DEBIT_ONLY)
    diagnostics.record_drop(DropReason.DEBIT_ONLY)

    assert diagnostics.total_dropped == 2
    assert diagnostics.as_dict() == {
        "format": "delimited",
        "records_seen": 3,
        "records_parsed": 0,
        "date_fallbacks": 0,
        "dropped": {"debit_only": 2},
    }
