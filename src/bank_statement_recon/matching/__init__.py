"""Reconciliation matcher and ledger matching strategies."""

from .engine import ReconciliationMatcher
from .strategies import (
    ClientDateWindowStrategy,
    DocumentNumberStrategy,
    LedgerMatchStrategy,
)

__all__ = [
    "ReconciliationMatcher",
    "ClientDateWindowStrategy",
    "DocumentNumberStrategy",
    "LedgerMatchStrategy",
]
