"""YAML file backed stores and reference data loading for the CLI."""

from pathlib import Path
from typing import Any, Callable, TypeVar
import logging

import yaml

from ..models.counterparty import Client, CounterpartyAlias, Employee
from ..models.transaction import LedgerTransaction
from ..utils.exceptions import AliasStoreError, StatementImportError
from .base import upsert_alias

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ReferenceDataLoader(yaml.SafeLoader):
    """
    SafeLoader that keeps unquoted numbers as strings.

    BIN/IIN values such as 050140000656 would otherwise load as octal
    integers, and amounts would lose their decimal form.
    """


ReferenceDataLoader.yaml_implicit_resolvers = {
    first: [
        (tag, regexp)
        for tag, regexp in resolvers
        if tag not in ("tag:yaml.org,2002:int", "tag:yaml.org,2002:float")
    ]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}


def load_records(path: Path, factory: Callable[[dict[str, Any]], T]) -> list[T]:
    """
    Load a YAML (or JSON) list of mappings and build one model per entry.

    Numbers are read as text; the model factories convert them.

    Raises:
        StatementImportError: If the file is unreadable or not a list of mappings
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.load(f, Loader=ReferenceDataLoader) or []
    except (OSError, yaml.YAMLError) as e:
        raise StatementImportError(f"Failed to read {path}: {e}") from e

    if not isinstance(data, list):
        raise StatementImportError(f"{path} must contain a list of records")

    try:
        return [factory(item) for item in data]
    except (KeyError, TypeError, ValueError) as e:
        raise StatementImportError(f"Invalid record in {path}: {e}") from e


def load_clients(path: Path) -> list[Client]:
    return load_records(path, Client.from_dict)


def load_employees(path: Path) -> list[Employee]:
    return load_records(path, Employee.from_dict)


def load_ledger(path: Path) -> list[LedgerTransaction]:
    return load_records(path, LedgerTransaction.from_dict)


class YamlAliasStore:
    """
    Alias store persisted as a YAML list of alias mappings.

    The whole file is rewritten on every save; intended for single-user CLI
    use, not for concurrent writers.
    """

    def __init__(self, path: Path):
        self.path = path

    def _load(self) -> list[CounterpartyAlias]:
        if not self.path.exists():
            return []
        try:
            return load_records(self.path, CounterpartyAlias.from_dict)
        except StatementImportError as e:
            raise AliasStoreError(str(e)) from e

    def get_aliases(self, organization_id: str) -> list[CounterpartyAlias]:
        return [a for a in self._load() if a.organization_id == organization_id]

    def save_alias(
        self, organization_id: str, bank_name: str, bank_tax_id: str, client_id: str
    ) -> None:
        aliases = self._load()
        upsert_alias(aliases, organization_id, bank_name, bank_tax_id, client_id)

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "w", encoding="utf-8") as f:
                yaml.safe_dump(
                    [a.to_dict() for a in aliases],
                    f,
                    allow_unicode=True,
                    sort_keys=False,
                )
        except OSError as e:
            raise AliasStoreError(f"Failed to write {self.path}: {e}") from e

        logger.debug(f"Wrote {len(aliases)} aliases to {self.path}")
