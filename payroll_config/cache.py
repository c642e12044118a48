"""
Explicit per-company policy memoization.

A ``PolicyCache`` is created by the caller and passed to whatever needs
resolved policy.  There is no module-level or implicit cache.  Entries live
until ``invalidate``/``clear`` is called or the cache object is dropped.

Thread-safe: lookups and inserts are serialized by a lock, so a batch run
sharing one cache across workers resolves each company at most once.
"""

from __future__ import annotations

import threading
from collections.abc import Callable, Mapping
from typing import Any

from payroll_config.provider import PolicyProvider
from payroll_config.schema import CompanyPolicySet
from payroll_kernel.logging_config import get_logger

logger = get_logger("config.cache")

RawPolicySource = Callable[[str], Mapping[str, Any] | None]


class PolicyCache:
    """Memoizes ``PolicyProvider.resolve`` results keyed by company id."""

    def __init__(self, provider: PolicyProvider | None = None):
        self._provider = provider or PolicyProvider()
        self._entries: dict[str, CompanyPolicySet] = {}
        self._lock = threading.Lock()
        self.hits = 0
        self.misses = 0

    def get_or_resolve(self, company_id: str, source: RawPolicySource) -> CompanyPolicySet:
        """
        Return the cached policy set, resolving it on first use.

        ``source`` is called with the company id only on a miss and must
        return the raw policy mapping (or ``None`` for "nothing configured").
        """
        with self._lock:
            cached = self._entries.get(company_id)
            if cached is not None:
                self.hits += 1
                return cached
            self.misses += 1
            policy_set = self._provider.resolve(company_id, source(company_id))
            self._entries[company_id] = policy_set
            logger.debug("policy_cache_miss", extra={"company_id": company_id})
            return policy_set

    def get(self, company_id: str) -> CompanyPolicySet | None:
        with self._lock:
            return self._entries.get(company_id)

    def invalidate(self, company_id: str) -> bool:
        """Drop one company's entry. Returns True if an entry was removed."""
        with self._lock:
            removed = self._entries.pop(company_id, None) is not None
        if removed:
            logger.info("policy_cache_invalidated", extra={"company_id": company_id})
        return removed

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self.hits = 0
            self.misses = 0

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, company_id: object) -> bool:
        with self._lock:
            return company_id in self._entries
