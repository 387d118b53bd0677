"""Tests for the reconciliation matcher."""

from datetime import date
from decimal import Decimal

import pytest

from bank_statement_recon.config import MatchingConfig
from bank_statement_recon.matching import ReconciliationMatcher
from bank_statement_recon.models.counterparty import (
    CounterpartyKind,
    MatchSource,
    ResolvedCounterparty,
)
from bank_statement_recon.models.transaction import (
    Classification,
    ReconciliationStatus,
)
from bank_statement_recon.utils.exceptions import ReconciliationError

CLIENT_C1 = ResolvedCounterparty(CounterpartyKind.CLIENT, "c1", MatchSource.TAX_ID)
UNRESOLVED = ResolvedCounterparty.unresolved()


@pytest.fixture
def matcher():
    return ReconciliationMatcher(MatchingConfig())


class TestClientDateWindow:
    def test_same_amount_next_day_verified(self, matcher, make_txn, make_ledger_entry):
        result = matcher.match(make_txn(), CLIENT_C1, [make_ledger_entry()])

        assert result.classification == Classification.VERIFIED
        assert result.matched_transaction_id == "L1"
        assert not result.amount_differs

    def test_close_amount_is_discrepancy(self, matcher, make_txn, make_ledger_entry):
        txn = make_txn(amount=Decimal("104500"))
        result = matcher.match(txn, CLIENT_C1, [make_ledger_entry()])

        assert result.classification == Classification.DISCREPANCY
        assert result.matched_transaction_id == "L1"
        assert result.amount_differs

    def test_distant_amount_is_new(self, matcher, make_txn, make_ledger_entry):
        txn = make_txn(amount=Decimal("110000"))
        result = matcher.match(txn, CLIENT_C1, [make_ledger_entry()])

        assert result.classification == Classification.NEW
        assert result.matched_transaction_id is None

    def test_outside_date_window_is_new(self, matcher, make_txn, make_ledger_entry):
        txn = make_txn(date=date(2024, 3, 5))
        result = matcher.match(txn, CLIENT_C1, [make_ledger_entry()])

        assert result.classification == Classification.NEW

    def test_window_edge_included(self, matcher, make_txn, make_ledger_entry):
        txn = make_txn(date=date(2024, 2, 27))
        result = matcher.match(txn, CLIENT_C1, [make_ledger_entry()])

        assert result.classification == Classification.VERIFIED

    @pytest.mark.parametrize(
        "status", [ReconciliationStatus.VERIFIED, ReconciliationStatus.BANK_IMPORT]
    )
    def test_settled_entries_skipped(self, matcher, make_txn, make_ledger_entry, status):
        ledger = [make_ledger_entry(reconciliation_status=status)]
        result = matcher.match(make_txn(), CLIENT_C1, ledger)

        assert result.classification == Classification.NEW

    def test_other_client_ignored(self, matcher, make_txn, make_ledger_entry):
        ledger = [make_ledger_entry(client_id="c2")]
        result = matcher.match(make_txn(), CLIENT_C1, ledger)

        assert result.classification == Classification.NEW

    def test_unresolved_payer_is_new(self, matcher, make_txn, make_ledger_entry):
        result = matcher.match(make_txn(), UNRESOLVED, [make_ledger_entry()])

        assert result.classification == Classification.NEW

    def test_exact_amount_preferred_over_earlier_close_one(
        self, matcher, make_txn, make_ledger_entry
    ):
        ledger = [
            make_ledger_entry(id="L1", amount=Decimal("99000")),
            make_ledger_entry(id="L2", amount=Decimal("100000")),
        ]
        result = matcher.match(make_txn(), CLIENT_C1, ledger)

        assert result.matched_transaction_id == "L2"
        assert result.classification == Classification.VERIFIED

    def test_entries_not_consumed(self, matcher, make_txn, make_ledger_entry):
        ledger = [make_ledger_entry()]
        first = matcher.match(make_txn(), CLIENT_C1, ledger)
        second = matcher.match(make_txn(), CLIENT_C1, ledger)

        assert first.matched_transaction_id == second.matched_transaction_id == "L1"


class TestDocumentNumber:
    def test_already_imported_is_duplicate(self, matcher, make_txn, make_ledger_entry):
        ledger = [
            make_ledger_entry(
                bank_document_number="101",
                reconciliation_status=ReconciliationStatus.BANK_IMPORT,
            )
        ]
        result = matcher.match(make_txn(document_number="101"), UNRESOLVED, ledger)

        assert result.classification == Classification.DUPLICATE
        assert result.matched_transaction_id == "L1"

    def test_manual_entry_verified(self, matcher, make_txn, make_ledger_entry):
        ledger = [make_ledger_entry(bank_document_number="101", date=date(2024, 1, 1))]
        result = matcher.match(make_txn(document_number="101"), UNRESOLVED, ledger)

        assert result.classification == Classification.VERIFIED
        assert not result.amount_differs

    def test_amount_mismatch_is_discrepancy(self, matcher, make_txn, make_ledger_entry):
        ledger = [make_ledger_entry(bank_document_number="101", amount=Decimal("90000"))]
        result = matcher.match(make_txn(document_number="101"), CLIENT_C1, ledger)

        assert result.classification == Classification.DISCREPANCY
        assert result.amount_differs

    def test_tolerance_is_inclusive(self, matcher, make_txn, make_ledger_entry):
        ledger = [make_ledger_entry(bank_document_number="101", amount=Decimal("100000.01"))]
        result = matcher.match(make_txn(document_number="101"), CLIENT_C1, ledger)

        assert result.classification == Classification.VERIFIED

    def test_description_tag(self, matcher, make_txn, make_ledger_entry):
        ledger = [
            make_ledger_entry(
                description="Оплата [DOC:101] импорт",
                reconciliation_status=ReconciliationStatus.BANK_IMPORT,
            )
        ]
        result = matcher.match(make_txn(document_number="101"), UNRESOLVED, ledger)

        assert result.classification == Classification.DUPLICATE

    def test_unknown_number_falls_back_to_window(self, matcher, make_txn, make_ledger_entry):
        ledger = [make_ledger_entry(bank_document_number="999")]
        result = matcher.match(make_txn(document_number="101"), CLIENT_C1, ledger)

        assert result.classification == Classification.VERIFIED
        assert result.matched_transaction_id == "L1"

    def test_reason_explains_match(self, matcher, make_txn, make_ledger_entry):
        ledger = [make_ledger_entry(bank_document_number="101")]
        result = matcher.match(make_txn(document_number="101"), CLIENT_C1, ledger)

        assert "101" in result.reason


def test_missing_resolution_raises(matcher, make_txn):
    with pytest.raises(ReconciliationError):
        matcher.match(make_txn(), None, [])


def test_configured_window(make_txn, make_ledger_entry):
    matcher = ReconciliationMatcher(MatchingConfig(date_window_days=0))
    result = matcher.match(make_txn(), CLIENT_C1, [make_ledger_entry()])

    assert result.classification == Classification.NEW
