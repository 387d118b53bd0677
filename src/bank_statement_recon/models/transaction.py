"""Data models for imported bank transactions and reconciliation results."""

from collections import Counter
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Optional


class StatementFormat(Enum):
    """Detected layout of a bank statement file."""

    PROPRIETARY = "proprietary"  # 1C client-bank exchange
    DELIMITED = "delimited"  # CSV and spreadsheet exports
    UNKNOWN = "unknown"


class PaymentType(Enum):
    """Payment purpose derived from the free-text description."""

    PREPAYMENT = "prepayment"
    FULL = "full"
    RETAINER = "retainer"
    REFUND = "refund"


class DropReason(Enum):
    """Why a source record did not become a RawTransaction."""

    INCOMPLETE_SECTION = "incomplete_section"
    TOO_FEW_CELLS = "too_few_cells"
    MISSING_DATE = "missing_date"
    MISSING_AMOUNT = "missing_amount"
    DEBIT_ONLY = "debit_only"
    NON_POSITIVE_AMOUNT = "non_positive_amount"


class ReconciliationStatus(Enum):
    """Reconciliation state of a ledger transaction."""

    NONE = "none"
    BANK_IMPORT = "bank_import"
    DISCREPANCY = "discrepancy"
    VERIFIED = "verified"

    @classmethod
    def from_value(cls, value: Optional[str]) -> "ReconciliationStatus":
        """Map a stored status; manual entries and blanks count as NONE."""
        if not value:
            return cls.NONE
        try:
            return cls(str(value).lower())
        except ValueError:
            return cls.NONE


class Classification(Enum):
    """Outcome bucket for an imported transaction."""

    NEW = "new"
    VERIFIED = "verified"
    DISCREPANCY = "discrepancy"
    DUPLICATE = "duplicate"


@dataclass(frozen=True)
class ExchangeSection:
    """
    One document section of a 1C client-bank exchange file.

    Values are kept as the raw strings found in the section; empty string
    means the field was absent.
    """

    index: int
    date_text: str
    amount_text: str
    document_number: str
    payer_name: str
    payer_tax_id: str
    description: str
    purpose_code: str
    currency: str


@dataclass(frozen=True)
class StatementRow:
    """One data row of a delimited or spreadsheet export, mapped by header keywords."""

    row_number: int
    date_text: str
    name: str
    credit_text: str
    debit_text: str
    amount_text: str
    description: str
    purpose_code: str
    tax_id: str
    currency: str = ""
    document_number: str = ""


@dataclass
class RawTransaction:
    """
    Canonical incoming bank transaction.

    amount is always positive and expressed in the organization's base
    currency; amount_original is the figure printed on the statement.
    """

    date: date
    amount: Decimal
    amount_original: Decimal
    currency: str
    counterparty_name_raw: str = ""
    counterparty_tax_id: str = ""
    description: str = ""
    document_number: str = ""
    purpose_code: str = ""
    payment_type: PaymentType = PaymentType.PREPAYMENT
    exchange_rate: Optional[Decimal] = None

    def __post_init__(self) -> None:
        if self.amount <= 0:
            raise ValueError(f"RawTransaction amount must be positive, got {self.amount}")


@dataclass
class LedgerTransaction:
    """Existing ledger entry, consumed read-only by the matcher."""

    id: str
    date: date
    amount: Decimal
    client_id: Optional[str] = None
    bank_document_number: Optional[str] = None
    description: str = ""
    reconciliation_status: ReconciliationStatus = ReconciliationStatus.NONE

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "LedgerTransaction":
        """Build from a stored record (YAML/JSON mapping)."""
        raw_date = data["date"]
        if isinstance(raw_date, datetime):
            txn_date = raw_date.date()
        elif isinstance(raw_date, date):
            txn_date = raw_date
        else:
            txn_date = date.fromisoformat(str(raw_date)[:10])
        return cls(
            id=str(data["id"]),
            date=txn_date,
            amount=Decimal(str(data["amount"])),
            client_id=str(data["client_id"]) if data.get("client_id") else None,
            bank_document_number=data.get("bank_document_number") or None,
            description=data.get("description") or "",
            reconciliation_status=ReconciliationStatus.from_value(
                data.get("reconciliation_status")
            ),
        )


@dataclass
class ReconciliationResult:
    """Classification of one imported transaction against the ledger."""

    classification: Classification
    matched_transaction_id: Optional[str] = None
    amount_differs: bool = False
    reason: str = ""


@dataclass
class ParseDiagnostics:
    """Counts of parsed and dropped source records for one file."""

    format: StatementFormat
    records_seen: int = 0
    records_parsed: int = 0
    date_fallbacks: int = 0
    dropped: Counter = field(default_factory=Counter)

    def record_drop(self, reason: DropReason) -> None:
        self.dropped[reason] += 1

    @property
    def total_dropped(self) -> int:
        return sum(self.dropped.values())

    def as_dict(self) -> dict[str, Any]:
        return {
            "format": self.format.value,
            "records_seen": self.records_seen,
            "records_parsed": self.records_parsed,
            "date_fallbacks": self.date_fallbacks,
            "dropped": {reason.value: count for reason, count in self.dropped.items()},
        }
