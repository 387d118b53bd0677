"""Store interfaces and implementations."""

from .base import AliasStore, ClientTaxIdSink, upsert_alias
from .memory import InMemoryAliasStore, RecordingTaxIdSink
from .yaml_store import (
    YamlAliasStore,
    load_clients,
    load_employees,
    load_ledger,
    load_records,
)

__all__ = [
    "AliasStore",
    "ClientTaxIdSink",
    "upsert_alias",
    "InMemoryAliasStore",
    "RecordingTaxIdSink",
    "YamlAliasStore",
    "load_clients",
    "load_employees",
    "load_ledger",
    "load_records",
]
