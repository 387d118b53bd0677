"""
Ledger matching strategies.

Each strategy looks for the existing ledger entry an imported transaction
corresponds to. Strategies are greedy: the first acceptable entry in ledger
order wins and entries are never consumed, so two imported transactions can
match the same ledger entry.
"""

from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Optional

from ..config import MatchingConfig
from ..models.transaction import (
    Classification,
    LedgerTransaction,
    RawTransaction,
    ReconciliationResult,
    ReconciliationStatus,
)

# Ledger entries already confirmed by a bank statement
SETTLED_STATUSES = (ReconciliationStatus.VERIFIED, ReconciliationStatus.BANK_IMPORT)


class LedgerMatchStrategy(ABC):
    """Abstract base class for ledger matching strategies."""

    def __init__(self, config: MatchingConfig):
        self.config = config
        self.amount_tolerance = Decimal(str(config.amount_tolerance))

    @abstractmethod
    def match(
        self,
        txn: RawTransaction,
        client_id: Optional[str],
        ledger: list[LedgerTransaction],
    ) -> Optional[ReconciliationResult]:
        """
        Classify a transaction against the ledger.

        Args:
            txn: Imported transaction
            client_id: Resolved client, or None
            ledger: Existing ledger transactions of the organization

        Returns:
            Result if this strategy is conclusive, else None
        """
        pass


class DocumentNumberStrategy(LedgerMatchStrategy):
    """
    Exact bank document number match.

    Older ledger records carry the number as a "[DOC:<number>]" tag in the
    description instead of the dedicated field.
    """

    def match(
        self,
        txn: RawTransaction,
        client_id: Optional[str],
        ledger: list[LedgerTransaction],
    ) -> Optional[ReconciliationResult]:
        number = txn.document_number.strip()
        if not number:
            return None

        tag = self.config.document_tag_template.format(number=number)
        entry = next(
            (
                t
                for t in ledger
                if t.bank_document_number == number or tag in (t.description or "")
            ),
            None,
        )
        if entry is None:
            return None

        amount_differs = abs(entry.amount - txn.amount) > self.amount_tolerance

        if entry.reconciliation_status is ReconciliationStatus.BANK_IMPORT:
            return ReconciliationResult(
                classification=Classification.DUPLICATE,
                matched_transaction_id=entry.id,
                amount_differs=amount_differs,
                reason=f"Document {number} was already imported",
            )

        if amount_differs:
            return ReconciliationResult(
                classification=Classification.DISCREPANCY,
                matched_transaction_id=entry.id,
                amount_differs=True,
                reason=f"Document {number} matches, amount differs by {entry.amount - txn.amount}",
            )
        return ReconciliationResult(
            classification=Classification.VERIFIED,
            matched_transaction_id=entry.id,
            amount_differs=False,
            reason=f"Document {number} matches",
        )


class ClientDateWindowStrategy(LedgerMatchStrategy):
    """
    Same client, open ledger entry, date within the window.

    Among those candidates an exact amount wins; otherwise the first entry
    within the close-amount percentage is reported as a discrepancy.
    """

    def match(
        self,
        txn: RawTransaction,
        client_id: Optional[str],
        ledger: list[LedgerTransaction],
    ) -> Optional[ReconciliationResult]:
        if not client_id:
            return None

        candidates = [
            t
            for t in ledger
            if t.client_id == client_id
            and t.reconciliation_status not in SETTLED_STATUSES
            and abs((t.date - txn.date).days) <= self.config.date_window_days
        ]

        exact = next(
            (t for t in candidates if abs(t.amount - txn.amount) < self.amount_tolerance),
            None,
        )
        if exact is not None:
            return ReconciliationResult(
                classification=Classification.VERIFIED,
                matched_transaction_id=exact.id,
                amount_differs=False,
                reason=f"Same client, amount matches, {abs((exact.date - txn.date).days)} day(s) apart",
            )

        close_limit = Decimal(str(self.config.close_amount_percent))
        for t in candidates:
            largest = max(t.amount, txn.amount)
            if largest <= 0:
                continue
            percent = abs(t.amount - txn.amount) / largest * 100
            if percent < close_limit:
                return ReconciliationResult(
                    classification=Classification.DISCREPANCY,
                    matched_transaction_id=t.id,
                    amount_differs=True,
                    reason=f"Same client, amount differs by {percent:.2f}%",
                )
        return None
