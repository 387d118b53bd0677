"""
Layered counterparty resolution.

Lookup precedence is a policy, not a ranking: tax ID evidence always beats
name evidence, and clients always beat employees.

    1. client tax ID          4. client name (exact, then partial)
    2. employee tax ID        5. employee name
    3. confirmed alias        6. unresolved
"""

from typing import Optional
import logging

from ..config import ResolverConfig
from ..models.counterparty import (
    Client,
    CounterpartyAlias,
    Employee,
    ResolvedCounterparty,
)
from ..normalization.text import extract_tax_id, sanitize_name, to_comparable_form
from .strategies import (
    AliasStrategy,
    ClientNameStrategy,
    ClientTaxIdStrategy,
    CounterpartyQuery,
    CounterpartyStrategy,
    EmployeeNameStrategy,
    EmployeeTaxIdStrategy,
)

logger = logging.getLogger(__name__)


class CounterpartyResolver:
    """
    Resolves bank payers to known clients or employees.

    Build one resolver per import job: comparable forms of all known names
    are computed once here. The resolver only reads; new aliases are written
    through AliasRegistry.save_alias after a human confirms a match.
    """

    def __init__(
        self,
        clients: list[Client],
        aliases: list[CounterpartyAlias],
        employees: Optional[list[Employee]] = None,
        config: Optional[ResolverConfig] = None,
    ):
        """
        Initialize the resolver with the organization's reference data.

        Args:
            clients: Known clients, in the order ties should be broken
            aliases: Confirmed aliases of the organization
            employees: Known employees (optional)
            config: Partial name match thresholds
        """
        self.config = config or ResolverConfig()
        self.strategies = self._build_strategies(clients, aliases, employees or [])

    def _build_strategies(
        self,
        clients: list[Client],
        aliases: list[CounterpartyAlias],
        employees: list[Employee],
    ) -> list[CounterpartyStrategy]:
        strategies: list[CounterpartyStrategy] = [ClientTaxIdStrategy(clients)]
        if employees:
            strategies.append(EmployeeTaxIdStrategy(employees, self.config))
        strategies.append(AliasStrategy(aliases))
        strategies.append(ClientNameStrategy(clients, self.config))
        if employees:
            strategies.append(EmployeeNameStrategy(employees, self.config))
        return strategies

    def resolve(self, name: str, tax_id: str = "") -> ResolvedCounterparty:
        """
        Resolve one payer.

        When the statement has no separate tax ID field value, a 12-digit
        tax ID embedded in the payer name is used instead.

        Args:
            name: Payer name as printed by the bank
            tax_id: Payer tax ID from the statement, may be empty

        Returns:
            Resolution outcome; UNRESOLVED when no step matched
        """
        sanitized = sanitize_name(name or "")
        query = CounterpartyQuery(
            name=sanitized,
            comparable_name=to_comparable_form(sanitized),
            tax_id=(tax_id or "").strip() or extract_tax_id(sanitized),
        )

        for strategy in self.strategies:
            result = strategy.resolve(query)
            if result is not None:
                logger.debug(
                    f"Resolved {sanitized!r} to {result.kind.value} {result.entity_id} "
                    f"via {result.match_source.value}"
                )
                return result

        logger.debug(f"Could not resolve payer {sanitized!r}")
        return ResolvedCounterparty.unresolved()


def resolve_counterparty(
    name: str,
    tax_id: str,
    clients: list[Client],
    aliases: list[CounterpartyAlias],
    employees: Optional[list[Employee]] = None,
    config: Optional[ResolverConfig] = None,
) -> ResolvedCounterparty:
    """One-off resolution; prefer a shared CounterpartyResolver for batches."""
    return CounterpartyResolver(clients, aliases, employees, config).resolve(name, tax_id)
