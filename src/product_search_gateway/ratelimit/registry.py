# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Per-identity bucket registry.

The registry lazily creates one RateBucket per caller identity and applies
the same capacity and window to all of them. One identity exhausting its
bucket never changes another identity's token count.

Memory Bounds:
    By default buckets live for the life of the process, one per distinct
    identity. Long-running deployments should set ``max_buckets`` (LRU
    eviction on insert) and/or ``cleanup_every``, which makes the registry
    run ``cleanup()`` itself after every N new identities. Callers that
    prefer their own schedule can leave it unset and call ``cleanup()``
    directly. Cleanup drops identities idle for longer than a window. An
    idle bucket has refilled to capacity, so dropping it and recreating it
    later is indistinguishable to the caller.
"""

import logging
import math
import threading
from collections import OrderedDict

from ..exceptions import RateLimitedError
from ..observability.constants import (
    RATE_LIMIT_BUCKET_EVICTIONS_TOTAL,
    RATE_LIMIT_BUCKETS_ACTIVE,
    REQUESTS_ADMITTED_TOTAL,
    REQUESTS_RATE_LIMITED_TOTAL,
)
from ..observability.protocols import MetricsCollectorProtocol
from ..types.rate_limit import Clock, RateLimitCheck
from .bucket import DEFAULT_WINDOW_MS, RateBucket, wall_clock_ms

logger = logging.getLogger(__name__)


class BucketRegistry:
    """
    Owns one RateBucket per identity.

    Thread Safety:
        Bucket creation, lookup and eviction run under a registry lock, so
        two threads seeing a new identity at once still create exactly one
        bucket. The token mutation itself runs under the bucket's own lock,
        outside the registry lock.

    Example:
        >>> registry = BucketRegistry(capacity=100)
        >>> check = registry.consume("session-a")
        >>> check.allowed, check.limit
        (True, 100)
    """

    def __init__(
        self,
        capacity: int,
        window_ms: int = DEFAULT_WINDOW_MS,
        clock: Clock | None = None,
        max_buckets: int | None = None,
        idle_ttl_ms: int | None = None,
        cleanup_every: int | None = None,
        metrics_collector: MetricsCollectorProtocol | None = None,
    ) -> None:
        """
        Initialize the registry.

        Args:
            capacity: Tokens per bucket (requests per window)
            window_ms: Time for an empty bucket to refill completely
            clock: Callable returning epoch milliseconds (injectable for tests)
            max_buckets: Optional LRU bound on tracked identities
            idle_ttl_ms: Default idle threshold for cleanup(); defaults to window_ms
            cleanup_every: Run cleanup() after this many bucket creations;
                None leaves cleanup to the caller
            metrics_collector: Optional metrics sink
        """
        if capacity <= 0:
            raise ValueError("capacity must be positive")
        if window_ms <= 0:
            raise ValueError("window_ms must be positive")
        if max_buckets is not None and max_buckets < 1:
            raise ValueError("max_buckets must be at least 1")
        if idle_ttl_ms is not None and idle_ttl_ms <= 0:
            raise ValueError("idle_ttl_ms must be positive")
        if cleanup_every is not None and cleanup_every < 1:
            raise ValueError("cleanup_every must be at least 1")

        self._capacity = capacity
        self._window_ms = window_ms
        self._clock: Clock = clock or wall_clock_ms
        self._max_buckets = max_buckets
        self._idle_ttl_ms = idle_ttl_ms if idle_ttl_ms is not None else window_ms
        self._cleanup_every = cleanup_every
        self._created_since_cleanup = 0
        self._metrics_collector = metrics_collector

        # Insertion/recency order doubles as the LRU order
        self._buckets: OrderedDict[str, RateBucket] = OrderedDict()
        self._lock = threading.Lock()

        logger.debug(
            f"BucketRegistry initialized (capacity={capacity}, "
            f"window_ms={window_ms}, max_buckets={max_buckets})"
        )

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def window_ms(self) -> int:
        return self._window_ms

    def __len__(self) -> int:
        with self._lock:
            return len(self._buckets)

    def __contains__(self, identity: object) -> bool:
        with self._lock:
            return identity in self._buckets

    def _get_or_create(self, identity: str) -> RateBucket:
        evicted: list[str] = []
        run_cleanup = False
        with self._lock:
            bucket = self._buckets.get(identity)
            if bucket is not None:
                self._buckets.move_to_end(identity)
                return bucket

            bucket = RateBucket(self._capacity, self._window_ms, clock=self._clock)
            self._buckets[identity] = bucket
            if self._max_buckets is not None:
                while len(self._buckets) > self._max_buckets:
                    oldest, _ = self._buckets.popitem(last=False)
                    evicted.append(oldest)
            active = len(self._buckets)
            if self._cleanup_every is not None:
                self._created_since_cleanup += 1
                if self._created_since_cleanup >= self._cleanup_every:
                    self._created_since_cleanup = 0
                    run_cleanup = True

        if evicted:
            logger.warning(
                f"Evicted {len(evicted)} least-recently-used rate limit "
                f"bucket(s); max_buckets={self._max_buckets} reached"
            )
        self._record_population(active, evicted=len(evicted), reason="lru")
        if run_cleanup:
            self.cleanup()
        return bucket

    def _record_population(self, active: int, evicted: int, reason: str) -> None:
        if self._metrics_collector is None:
            return
        self._metrics_collector.set_gauge(RATE_LIMIT_BUCKETS_ACTIVE, active)
        if evicted:
            self._metrics_collector.inc_counter(
                RATE_LIMIT_BUCKET_EVICTIONS_TOTAL, evicted, labels={"reason": reason}
            )

    def consume(self, identity: str) -> RateLimitCheck:
        """
        Consume one token from the identity's bucket, creating it if needed.

        Returns:
            The bucket's RateLimitCheck; never raises on denial.
        """
        check = self._get_or_create(identity).consume()
        if self._metrics_collector is not None:
            self._metrics_collector.inc_counter(
                REQUESTS_ADMITTED_TOTAL if check.allowed else REQUESTS_RATE_LIMITED_TOTAL
            )
        return check

    def retry_after_seconds(self, check: RateLimitCheck) -> int:
        """Whole seconds from now until the check's advisory reset instant."""
        return max(0, math.ceil((check.reset_epoch_ms - self._clock()) / 1000))

    def admit(self, identity: str) -> RateLimitCheck:
        """
        Consume a token or raise.

        Raises:
            RateLimitedError: When the identity's bucket is exhausted.
        """
        check = self.consume(identity)
        if not check.allowed:
            retry_after = self.retry_after_seconds(check)
            logger.debug(
                f"Rate limit exceeded (retry after {retry_after}s, "
                f"limit={check.limit})"
            )
            raise RateLimitedError(identity, check, retry_after)
        return check

    def cleanup(self, max_idle_ms: int | None = None) -> int:
        """
        Drop buckets whose identity has been idle for longer than max_idle_ms.

        Args:
            max_idle_ms: Idle threshold; defaults to the registry's idle TTL

        Returns:
            Number of buckets removed.
        """
        threshold = max_idle_ms if max_idle_ms is not None else self._idle_ttl_ms
        now = self._clock()
        with self._lock:
            stale = [
                identity
                for identity, bucket in self._buckets.items()
                if now - bucket.last_refill_at > threshold
            ]
            for identity in stale:
                del self._buckets[identity]
            active = len(self._buckets)

        if stale:
            logger.debug(f"Cleaned up {len(stale)} idle rate limit bucket(s)")
        self._record_population(active, evicted=len(stale), reason="idle")
        return len(stale)


__all__ = [
    "BucketRegistry",
]
