"""
Counterparty lookup steps.

Each step answers one question ("is there a client with this tax ID?") and
returns the first acceptable entity in input order. Candidates are not
ranked: the same inputs in the same order always produce the same answer.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional
import re

from ..config import ResolverConfig
from ..models.counterparty import (
    Client,
    CounterpartyAlias,
    CounterpartyKind,
    Employee,
    MatchSource,
    ResolvedCounterparty,
)
from ..normalization.text import to_comparable_form

_NON_DIGITS = re.compile(r"\D")


@dataclass(frozen=True)
class CounterpartyQuery:
    """Payer details from one bank transaction, prepared once for all steps."""

    name: str
    comparable_name: str
    tax_id: str


def names_partially_match(a: str, b: str, config: ResolverConfig) -> bool:
    """
    Partial match rule for two comparable-form names.

    The shorter name must be long enough and not much shorter than the
    longer one; then either a whole word is shared or, for names of similar
    length, one contains the other.
    """
    if not a or not b:
        return False

    shorter, longer = (a, b) if len(a) <= len(b) else (b, a)
    if len(shorter) < config.min_name_length:
        return False

    ratio = len(shorter) / len(longer)
    if ratio < config.min_length_ratio:
        return False

    words_a = {w for w in a.split(" ") if len(w) >= config.min_word_length}
    words_b = {w for w in b.split(" ") if len(w) >= config.min_word_length}
    if words_a & words_b:
        return True

    return ratio >= config.containment_ratio and shorter in longer


class CounterpartyStrategy(ABC):
    """One step of the counterparty lookup chain."""

    source: MatchSource

    @abstractmethod
    def find(self, query: CounterpartyQuery) -> Optional[str]:
        """
        Find the entity ID for a payer.

        Args:
            query: Prepared payer details

        Returns:
            Entity ID of the first acceptable candidate, or None
        """
        pass

    @property
    def kind(self) -> CounterpartyKind:
        if self.source in (MatchSource.EMPLOYEE_TAX_ID, MatchSource.EMPLOYEE_NAME_FUZZY):
            return CounterpartyKind.EMPLOYEE
        return CounterpartyKind.CLIENT

    def resolve(self, query: CounterpartyQuery) -> Optional[ResolvedCounterparty]:
        entity_id = self.find(query)
        if entity_id is None:
            return None
        return ResolvedCounterparty(kind=self.kind, entity_id=entity_id, match_source=self.source)


class ClientTaxIdStrategy(CounterpartyStrategy):
    """Exact tax ID match against the current (bin) and legacy (inn) client fields."""

    source = MatchSource.TAX_ID

    def __init__(self, clients: list[Client]):
        self.clients = clients

    def find(self, query: CounterpartyQuery) -> Optional[str]:
        if not query.tax_id:
            return None
        for client in self.clients:
            if query.tax_id in (client.bin, client.inn):
                return client.id
        return None


class EmployeeTaxIdStrategy(CounterpartyStrategy):
    """Personal tax ID match, comparing digits only."""

    source = MatchSource.EMPLOYEE_TAX_ID

    def __init__(self, employees: list[Employee], config: ResolverConfig):
        self.employees = employees
        self.min_digits = config.min_employee_tax_id_digits

    def find(self, query: CounterpartyQuery) -> Optional[str]:
        digits = _NON_DIGITS.sub("", query.tax_id)
        if len(digits) < self.min_digits:
            return None
        for employee in self.employees:
            if employee.iin and _NON_DIGITS.sub("", employee.iin) == digits:
                return employee.id
        return None


class AliasStrategy(CounterpartyStrategy):
    """Human-confirmed aliases: by tax ID first, then by comparable name."""

    source = MatchSource.ALIAS

    def __init__(self, aliases: list[CounterpartyAlias]):
        self.aliases = aliases
        self._comparable = [to_comparable_form(a.bank_name) for a in aliases]

    def find(self, query: CounterpartyQuery) -> Optional[str]:
        if query.tax_id:
            for alias in self.aliases:
                if alias.bank_tax_id == query.tax_id:
                    return alias.client_id

        if query.comparable_name:
            for alias, comparable in zip(self.aliases, self._comparable):
                if comparable == query.comparable_name:
                    return alias.client_id
        return None


class ClientNameStrategy(CounterpartyStrategy):
    """
    Client name match over company, name and legal name.

    Exact comparable-form equality is searched across all clients before
    any partial match is considered.
    """

    source = MatchSource.NAME_FUZZY

    def __init__(self, clients: list[Client], config: ResolverConfig):
        self.clients = clients
        self.config = config
        self._targets = [
            [to_comparable_form(n) for n in client.name_variants] for client in clients
        ]

    def find(self, query: CounterpartyQuery) -> Optional[str]:
        name = query.comparable_name
        if not name:
            return None

        for client, targets in zip(self.clients, self._targets):
            if name in targets:
                return client.id

        for client, targets in zip(self.clients, self._targets):
            if any(names_partially_match(t, name, self.config) for t in targets):
                return client.id
        return None


class EmployeeNameStrategy(CounterpartyStrategy):
    """Employee display name match, equality or the partial rule, first wins."""

    source = MatchSource.EMPLOYEE_NAME_FUZZY

    def __init__(self, employees: list[Employee], config: ResolverConfig):
        self.employees = employees
        self.config = config
        self._targets = [to_comparable_form(e.name) for e in employees]

    def find(self, query: CounterpartyQuery) -> Optional[str]:
        name = query.comparable_name
        if not name:
            return None

        for employee, target in zip(self.employees, self._targets):
            if not target:
                continue
            if target == name or names_partially_match(target, name, self.config):
                return employee.id
        return None
