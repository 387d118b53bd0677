"""Known counterparties, learned aliases and resolution outcomes."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Optional


class CounterpartyKind(Enum):
    CLIENT = "client"
    EMPLOYEE = "employee"
    UNRESOLVED = "unresolved"


class MatchSource(Enum):
    """Which resolver step produced the match."""

    TAX_ID = "tax_id"
    ALIAS = "alias"
    NAME_FUZZY = "name_fuzzy"
    EMPLOYEE_TAX_ID = "employee_tax_id"
    EMPLOYEE_NAME_FUZZY = "employee_name_fuzzy"
    NONE = "none"


@dataclass(frozen=True)
class Client:
    """
    Organization client as stored by the surrounding application.

    bin is the current tax ID field, inn the legacy one; either may be empty.
    """

    id: str
    name: str = ""
    company: str = ""
    legal_name: str = ""
    bin: str = ""
    inn: str = ""

    @property
    def tax_id(self) -> str:
        return self.bin or self.inn

    @property
    def name_variants(self) -> list[str]:
        return [n for n in (self.company, self.name, self.legal_name) if n]

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Client":
        return cls(
            id=str(data["id"]),
            name=data.get("name") or "",
            company=data.get("company") or "",
            legal_name=data.get("legal_name") or "",
            bin=str(data.get("bin") or ""),
            inn=str(data.get("inn") or ""),
        )


@dataclass(frozen=True)
class Employee:
    """Organization user who may appear as a payer (refunds, advances)."""

    id: str
    name: str = ""
    iin: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Employee":
        return cls(
            id=str(data["id"]),
            name=data.get("name") or "",
            iin=str(data.get("iin") or ""),
        )


@dataclass
class CounterpartyAlias:
    """Human-confirmed mapping from a bank-displayed payer to a client."""

    organization_id: str
    bank_name: str
    client_id: str
    bank_tax_id: str = ""
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CounterpartyAlias":
        return cls(
            organization_id=str(data["organization_id"]),
            bank_name=data.get("bank_name") or "",
            client_id=str(data["client_id"]),
            bank_tax_id=str(data.get("bank_tax_id") or ""),
            created_at=_parse_timestamp(data.get("created_at")),
            updated_at=_parse_timestamp(data.get("updated_at")),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "organization_id": self.organization_id,
            "bank_name": self.bank_name,
            "bank_tax_id": self.bank_tax_id,
            "client_id": self.client_id,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }


@dataclass(frozen=True)
class ResolvedCounterparty:
    """Outcome of counterparty resolution for one transaction."""

    kind: CounterpartyKind
    entity_id: Optional[str] = None
    match_source: MatchSource = MatchSource.NONE

    @classmethod
    def unresolved(cls) -> "ResolvedCounterparty":
        return cls(kind=CounterpartyKind.UNRESOLVED)

    @property
    def is_resolved(self) -> bool:
        return self.kind is not CounterpartyKind.UNRESOLVED

    @property
    def client_id(self) -> Optional[str]:
        return self.entity_id if self.kind is CounterpartyKind.CLIENT else None

    @property
    def employee_id(self) -> Optional[str]:
        return self.entity_id if self.kind is CounterpartyKind.EMPLOYEE else None


def _parse_timestamp(value: Any) -> Optional[datetime]:
    if value is None or isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value))
