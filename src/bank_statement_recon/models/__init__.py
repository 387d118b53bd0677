"""Data models for statement import and reconciliation."""

from .counterparty import (
    Client,
    Employee,
    CounterpartyAlias,
    CounterpartyKind,
    MatchSource,
    ResolvedCounterparty,
)
from .result import ClassifiedTransaction, ClientTaxIdUpdate, ImportResult
from .transaction import (
    Classification,
    DropReason,
    ExchangeSection,
    LedgerTransaction,
    ParseDiagnostics,
    PaymentType,
    RawTransaction,
    ReconciliationResult,
    ReconciliationStatus,
    StatementFormat,
    StatementRow,
)

__all__ = [
    "Client",
    "Employee",
    "CounterpartyAlias",
    "CounterpartyKind",
    "MatchSource",
    "ResolvedCounterparty",
    "ClassifiedTransaction",
    "ClientTaxIdUpdate",
    "ImportResult",
    "Classification",
    "DropReason",
    "ExchangeSection",
    "LedgerTransaction",
    "ParseDiagnostics",
    "PaymentType",
    "RawTransaction",
    "ReconciliationResult",
    "ReconciliationStatus",
    "StatementFormat",
    "StatementRow",
]
