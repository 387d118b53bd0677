"""
Bank statement import and reconciliation.

Parses 1C client-bank exchange files and CSV/spreadsheet exports, resolves
payers to known clients or employees, and classifies every incoming payment
against the existing ledger.
"""

from .config import ImportConfig, load_config
from .matching.engine import ReconciliationMatcher
from .models.result import ClassifiedTransaction, ClientTaxIdUpdate, ImportResult
from .pipeline import StatementImporter, import_statement
from .resolver.aliases import AliasCache, AliasRegistry
from .resolver.resolver import CounterpartyResolver, resolve_counterparty

__version__ = "0.1.0"

__all__ = [
    "ImportConfig",
    "load_config",
    "ReconciliationMatcher",
    "ClassifiedTransaction",
    "ClientTaxIdUpdate",
    "ImportResult",
    "StatementImporter",
    "import_statement",
    "AliasCache",
    "AliasRegistry",
    "CounterpartyResolver",
    "resolve_counterparty",
]
