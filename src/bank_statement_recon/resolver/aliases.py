"""Caller-owned alias cache and the write-through alias registry."""

from collections import OrderedDict
from dataclasses import replace
from typing import Callable, Optional
import logging
import time

from ..config import AliasCacheConfig
from ..models.counterparty import CounterpartyAlias
from ..normalization.text import sanitize_name
from ..stores.base import AliasStore

logger = logging.getLogger(__name__)


class AliasCache:
    """
    Bounded, expiring cache of alias lists keyed by organization.

    Entries expire ttl_seconds after they were stored; when full, the least
    recently used organization is evicted. Callers receive copies of the
    stored aliases. Instances are owned by the caller so separate jobs and
    test runs never share entries.
    """

    def __init__(
        self,
        capacity: int = 64,
        ttl_seconds: float = 300.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        if capacity < 1:
            raise ValueError("AliasCache capacity must be at least 1")
        self.capacity = capacity
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: "OrderedDict[str, tuple[float, list[CounterpartyAlias]]]" = OrderedDict()

    @classmethod
    def from_config(cls, config: AliasCacheConfig) -> "AliasCache":
        return cls(capacity=config.capacity, ttl_seconds=config.ttl_seconds)

    def get(self, organization_id: str) -> Optional[list[CounterpartyAlias]]:
        entry = self._entries.get(organization_id)
        if entry is None:
            return None

        stored_at, aliases = entry
        if self._clock() - stored_at >= self.ttl_seconds:
            del self._entries[organization_id]
            return None

        self._entries.move_to_end(organization_id)
        return [replace(a) for a in aliases]

    def put(self, organization_id: str, aliases: list[CounterpartyAlias]) -> None:
        self._entries[organization_id] = (self._clock(), [replace(a) for a in aliases])
        self._entries.move_to_end(organization_id)
        while len(self._entries) > self.capacity:
            evicted, _ = self._entries.popitem(last=False)
            logger.debug(f"Alias cache full, evicted organization {evicted}")

    def invalidate(self, organization_id: str) -> None:
        self._entries.pop(organization_id, None)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


class AliasRegistry:
    """
    Read-through / write-through access to an organization's aliases.

    save_alias is the only way aliases are created or refreshed, and it is
    meant to be called after a human confirmed a payer-to-client match.
    """

    def __init__(self, store: AliasStore, cache: Optional[AliasCache] = None):
        self.store = store
        self.cache = cache

    def get_aliases(self, organization_id: str) -> list[CounterpartyAlias]:
        if self.cache is not None:
            cached = self.cache.get(organization_id)
            if cached is not None:
                return cached

        aliases = self.store.get_aliases(organization_id)
        if self.cache is not None:
            self.cache.put(organization_id, aliases)
        return aliases

    def save_alias(
        self,
        organization_id: str,
        bank_name: str,
        bank_tax_id: str,
        client_id: str,
    ) -> None:
        """
        Record a confirmed match.

        The name is stored sanitized. Concurrent imports may race here; the
        store's upsert makes the last write win.
        """
        name = sanitize_name(bank_name)
        self.store.save_alias(organization_id, name, (bank_tax_id or "").strip(), client_id)
        if self.cache is not None:
            self.cache.invalidate(organization_id)
        logger.info(f"Saved alias {name!r} -> client {client_id} for organization {organization_id}")
