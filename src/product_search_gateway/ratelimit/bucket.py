# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Single-identity token bucket with continuous proportional refill.

Tokens are added in proportion to elapsed time rather than in discrete
windows: a client that waits half a window regains half its capacity.
"""

import math
import threading
import time

from ..types.rate_limit import Clock, RateLimitCheck

DEFAULT_WINDOW_MS = 60_000


def wall_clock_ms() -> int:
    """Current wall-clock time as integer epoch milliseconds."""
    return int(time.time() * 1000)


class RateBucket:
    """
    Token pool owned by exactly one identity.

    Refill and decrement run under a per-bucket lock so concurrent callers
    on worker threads observe a consistent token count. The first admitted
    of two racing calls sees the pre-decrement count, the second sees the
    post-decrement count.

    The balance can dip below zero by less than one token: a bucket holding
    a fractional token still admits one request. ``remaining`` is never
    reported below zero.

    Example:
        >>> bucket = RateBucket(capacity=2, window_ms=1000, clock=lambda: 0)
        >>> bucket.consume().remaining
        1
        >>> bucket.consume().remaining
        0
        >>> bucket.consume().allowed
        False
    """

    def __init__(
        self,
        capacity: int,
        window_ms: int = DEFAULT_WINDOW_MS,
        clock: Clock | None = None,
    ) -> None:
        if capacity <= 0:
            raise ValueError("capacity must be positive")
        if window_ms <= 0:
            raise ValueError("window_ms must be positive")

        self._capacity = capacity
        self._window_ms = window_ms
        self._clock: Clock = clock or wall_clock_ms
        self._tokens = float(capacity)
        self._last_refill_at = self._clock()
        self._lock = threading.Lock()

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def window_ms(self) -> int:
        return self._window_ms

    @property
    def tokens(self) -> float:
        """Current (un-refilled) token balance."""
        with self._lock:
            return self._tokens

    @property
    def last_refill_at(self) -> int:
        """Epoch ms of the last refill, i.e. the last call that saw time pass."""
        with self._lock:
            return self._last_refill_at

    def consume(self) -> RateLimitCheck:
        """
        Refill for elapsed time, then try to take one token.

        Returns:
            RateLimitCheck with ``reset_epoch_ms = last_refill_at + window_ms``.
        """
        with self._lock:
            now = self._clock()
            elapsed = now - self._last_refill_at
            if elapsed > 0:
                refill = (elapsed / self._window_ms) * self._capacity
                self._tokens = min(float(self._capacity), self._tokens + refill)
                self._last_refill_at = now

            reset_epoch_ms = self._last_refill_at + self._window_ms

            if self._tokens <= 0:
                return RateLimitCheck(
                    allowed=False,
                    limit=self._capacity,
                    remaining=0,
                    reset_epoch_ms=reset_epoch_ms,
                )

            self._tokens -= 1
            return RateLimitCheck(
                allowed=True,
                limit=self._capacity,
                remaining=max(0, math.floor(self._tokens)),
                reset_epoch_ms=reset_epoch_ms,
            )


__all__ = [
    "DEFAULT_WINDOW_MS",
    "RateBucket",
    "wall_clock_ms",
]
