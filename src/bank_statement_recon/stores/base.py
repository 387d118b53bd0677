"""Interfaces of the external stores used during an import."""

from datetime import datetime
from typing import Optional, Protocol

from ..models.counterparty import CounterpartyAlias


class AliasStore(Protocol):
    """Persistence of confirmed counterparty aliases, keyed by organization."""

    def get_aliases(self, organization_id: str) -> list[CounterpartyAlias]:
        ...

    def save_alias(
        self, organization_id: str, bank_name: str, bank_tax_id: str, client_id: str
    ) -> None:
        ...


class ClientTaxIdSink(Protocol):
    """Receives tax IDs discovered for clients that have none on file."""

    def update_client_tax_id(self, client_id: str, tax_id: str) -> None:
        ...


def upsert_alias(
    aliases: list[CounterpartyAlias],
    organization_id: str,
    bank_name: str,
    bank_tax_id: str,
    client_id: str,
    now: Optional[datetime] = None,
) -> CounterpartyAlias:
    """
    Insert or update an alias in place.

    The conflict key is the tax ID when one is given; otherwise it is the
    case-insensitive bank name among aliases that have no tax ID. An update
    refreshes the stored name and the bound client.

    Returns:
        The inserted or updated alias
    """
    now = now or datetime.now()

    existing = None
    for alias in aliases:
        if alias.organization_id != organization_id:
            continue
        if bank_tax_id:
            if alias.bank_tax_id == bank_tax_id:
                existing = alias
                break
        elif not alias.bank_tax_id and alias.bank_name.lower() == bank_name.lower():
            existing = alias
            break

    if existing is not None:
        existing.bank_name = bank_name
        existing.client_id = client_id
        existing.updated_at = now
        return existing

    alias = CounterpartyAlias(
        organization_id=organization_id,
        bank_name=bank_name,
        bank_tax_id=bank_tax_id,
        client_id=client_id,
        created_at=now,
        updated_at=now,
    )
    aliases.append(alias)
    return alias
