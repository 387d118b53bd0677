"""In-process store implementations."""

from dataclasses import replace
from typing import Optional

from ..models.counterparty import CounterpartyAlias
from ..models.result import ClientTaxIdUpdate
from .base import upsert_alias


class InMemoryAliasStore:
    """Alias store backed by a list; used by tests and embedding applications."""

    def __init__(self, aliases: Optional[list[CounterpartyAlias]] = None):
        self._aliases: list[CounterpartyAlias] = list(aliases or [])

    def get_aliases(self, organization_id: str) -> list[CounterpartyAlias]:
        # Copies, so callers cannot mutate stored rows
        return [replace(a) for a in self._aliases if a.organization_id == organization_id]

    def save_alias(
        self, organization_id: str, bank_name: str, bank_tax_id: str, client_id: str
    ) -> None:
        upsert_alias(self._aliases, organization_id, bank_name, bank_tax_id, client_id)


class RecordingTaxIdSink:
    """Collects client tax ID updates instead of writing them anywhere."""

    def __init__(self) -> None:
        self.updates: list[ClientTaxIdUpdate] = []

    def update_client_tax_id(self, client_id: str, tax_id: str) -> None:
        self.updates.append(ClientTaxIdUpdate(client_id=client_id, tax_id=tax_id))
