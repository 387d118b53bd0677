"""Counterparty resolution and alias learning."""

from .aliases import AliasCache, AliasRegistry
from .resolver import CounterpartyResolver, resolve_counterparty
from .strategies import (
    AliasStrategy,
    ClientNameStrategy,
    ClientTaxIdStrategy,
    CounterpartyQuery,
    CounterpartyStrategy,
    EmployeeNameStrategy,
    EmployeeTaxIdStrategy,
    names_partially_match,
)

__all__ = [
    "AliasCache",
    "AliasRegistry",
    "CounterpartyResolver",
    "resolve_counterparty",
    "AliasStrategy",
    "ClientNameStrategy",
    "ClientTaxIdStrategy",
    "CounterpartyQuery",
    "CounterpartyStrategy",
    "EmployeeNameStrategy",
    "EmployeeTaxIdStrategy",
    "names_partially_match",
]
