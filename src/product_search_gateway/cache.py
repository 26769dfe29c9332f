# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
TTL cache for product detail lookups.

An explicit service object rather than module-level state: each gateway
owns one instance, and tests inject a fake clock to expire entries
deterministically.
"""

import logging
import threading
import time
from collections import OrderedDict
from collections.abc import Callable
from typing import Generic, TypeVar

from .observability.constants import (
    CACHE_EVICTIONS_TOTAL,
    CACHE_HITS_TOTAL,
    CACHE_MISSES_TOTAL,
)
from .observability.protocols import MetricsCollectorProtocol

logger = logging.getLogger(__name__)

V = TypeVar("V")


class ProductCache(Generic[V]):
    """
    Bounded, thread-safe TTL cache.

    Entries expire ``ttl_seconds`` after they were set, measured on the
    injected clock. When full, setting a new key evicts the oldest entry.

    Example:
        >>> cache = ProductCache(ttl_seconds=60.0)
        >>> cache.set("01HX...", product)
        >>> cache.get("01HX...") is product
        True
    """

    def __init__(
        self,
        ttl_seconds: float = 60.0,
        max_entries: int = 1000,
        clock: Callable[[], float] = time.monotonic,
        metrics_collector: MetricsCollectorProtocol | None = None,
    ) -> None:
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")

        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries
        self._clock = clock
        self._metrics_collector = metrics_collector
        # key -> (expires_at, value), oldest first
        self._entries: OrderedDict[str, tuple[float, V]] = OrderedDict()
        self._lock = threading.Lock()

    def _inc(self, name: str, value: int = 1) -> None:
        if self._metrics_collector is not None and value:
            self._metrics_collector.inc_counter(name, value)

    def get(self, key: str) -> V | None:
        """Return the live value for ``key``, or None if absent or expired."""
        now = self._clock()
        with self._lock:
            entry = self._entries.get(key)
            if entry is not None and entry[0] <= now:
                del self._entries[key]
                entry = None

        if entry is None:
            self._inc(CACHE_MISSES_TOTAL)
            return None
        self._inc(CACHE_HITS_TOTAL)
        return entry[1]

    def set(self, key: str, value: V) -> None:
        expires_at = self._clock() + self.ttl_seconds
        evicted = 0
        with self._lock:
            self._entries.pop(key, None)
            self._entries[key] = (expires_at, value)
            while len(self._entries) > self.max_entries:
                self._entries.popitem(last=False)
                evicted += 1

        if evicted:
            logger.debug(f"Product cache full, evicted {evicted} oldest entr(ies)")
            self._inc(CACHE_EVICTIONS_TOTAL, evicted)

    def invalidate(self, key: str) -> bool:
        """Remove ``key``; returns True if it was present."""
        with self._lock:
            return self._entries.pop(key, None) is not None

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


__all__ = [
    "ProductCache",
]
