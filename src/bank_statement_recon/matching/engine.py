"""
Reconciliation matcher.

Classifies each imported transaction as new, verified, discrepancy or
duplicate relative to the existing ledger. Matching is greedy and
per-transaction; there is no global assignment between statement and
ledger, so results never depend on the other transactions in the file.
"""

from typing import Optional
import logging

from ..config import MatchingConfig
from ..models.counterparty import ResolvedCounterparty
from ..models.transaction import (
    Classification,
    LedgerTransaction,
    RawTransaction,
    ReconciliationResult,
)
from ..utils.exceptions import ReconciliationError
from .strategies import (
    ClientDateWindowStrategy,
    DocumentNumberStrategy,
    LedgerMatchStrategy,
)

logger = logging.getLogger(__name__)


class ReconciliationMatcher:
    """
    Runs the ledger matching strategies in priority order.

    Document number evidence is checked first; the client/date/amount
    window only applies when the statement carries no known document number.
    """

    def __init__(self, config: Optional[MatchingConfig] = None):
        """
        Initialize the matcher.

        Args:
            config: Matching tolerances
        """
        self.config = config or MatchingConfig()
        self.strategies: list[LedgerMatchStrategy] = [
            DocumentNumberStrategy(self.config),
            ClientDateWindowStrategy(self.config),
        ]

    def match(
        self,
        txn: RawTransaction,
        counterparty: Optional[ResolvedCounterparty],
        ledger: list[LedgerTransaction],
    ) -> ReconciliationResult:
        """
        Classify one transaction whose payer has already been resolved.

        Args:
            txn: Imported transaction
            counterparty: Resolution outcome for txn (may be UNRESOLVED, not None)
            ledger: Existing ledger transactions of the organization

        Returns:
            Reconciliation result

        Raises:
            ReconciliationError: If called before the payer was resolved
        """
        if counterparty is None:
            raise ReconciliationError(
                "Counterparty must be resolved before reconciliation; "
                "pass ResolvedCounterparty.unresolved() for unknown payers"
            )
        return self.classify(txn, counterparty.client_id, ledger)

    def classify(
        self,
        txn: RawTransaction,
        client_id: Optional[str],
        ledger: list[LedgerTransaction],
    ) -> ReconciliationResult:
        """Classify a transaction given the resolved client ID (or None)."""
        for strategy in self.strategies:
            result = strategy.match(txn, client_id, ledger)
            if result is not None:
                logger.debug(
                    f"{txn.date} {txn.amount}: {result.classification.value} "
                    f"({result.reason})"
                )
                return result

        return ReconciliationResult(
            classification=Classification.NEW,
            reason="No corresponding ledger entry",
        )
