"""Output records of a statement import job."""

from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal

from .counterparty import MatchSource, ResolvedCounterparty
from .transaction import (
    Classification,
    ParseDiagnostics,
    RawTransaction,
    ReconciliationResult,
    StatementFormat,
)


@dataclass
class ClassifiedTransaction:
    """Parsed transaction with its resolution and reconciliation outcome."""

    transaction: RawTransaction
    counterparty: ResolvedCounterparty
    reconciliation: ReconciliationResult

    @property
    def classification(self) -> Classification:
        return self.reconciliation.classification

    @property
    def needs_review(self) -> bool:
        """Unresolved payers go to manual review; discrepancies are listed separately."""
        return not self.counterparty.is_resolved


@dataclass(frozen=True)
class ClientTaxIdUpdate:
    """A tax ID discovered for a client that has none on file."""

    client_id: str
    tax_id: str


@dataclass
class ImportResult:
    """Everything the caller needs to review and commit one statement file."""

    file_name: str
    format: StatementFormat
    transactions: list[ClassifiedTransaction]
    diagnostics: ParseDiagnostics
    tax_id_updates: list[ClientTaxIdUpdate] = field(default_factory=list)
    imported_at: datetime = field(default_factory=datetime.now)
    processing_time_seconds: float = 0.0

    @property
    def total_amount(self) -> Decimal:
        return sum((t.transaction.amount for t in self.transactions), Decimal("0"))

    def count_by_classification(self) -> dict[Classification, int]:
        counts = Counter(t.classification for t in self.transactions)
        return {c: counts.get(c, 0) for c in Classification}

    def count_by_match_source(self) -> dict[MatchSource, int]:
        counts = Counter(t.counterparty.match_source for t in self.transactions)
        return {s: counts.get(s, 0) for s in MatchSource}

    def summary(self) -> dict[str, int]:
        """Flat counters for display."""
        result = {"parsed": len(self.transactions)}
        result.update({c.value: n for c, n in self.count_by_classification().items()})
        result["unresolved"] = self.count_by_match_source()[MatchSource.NONE]
        result["dropped"] = self.diagnostics.total_dropped
        return result
