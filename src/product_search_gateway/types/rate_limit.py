# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Rate limit result types.

This module defines the result of a token bucket admission check and the
metadata block attached to every response.
"""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

Clock = Callable[[], int]
"""Callable returning the current time as integer epoch milliseconds."""


@dataclass(frozen=True)
class RateLimitInfo:
    """
    Rate limit metadata included in every response, success or error.

    Attributes:
        limit: Bucket capacity shared by every identity
        remaining: Whole tokens left after this call
        reset_epoch_ms: Advisory instant (epoch ms) by which tokens are back
    """

    limit: int
    remaining: int
    reset_epoch_ms: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "limit": self.limit,
            "remaining": self.remaining,
            "resetEpochMs": self.reset_epoch_ms,
        }


@dataclass(frozen=True)
class RateLimitCheck:
    """
    Result of consuming a token from a bucket.

    ``reset_epoch_ms`` is always ``last_refill_at + window_ms`` at the time of
    the call. It is an upper bound on when capacity returns, not an exact
    reset instant, so callers should treat it as a retry-after hint.

    Attributes:
        allowed: Whether the request was admitted
        limit: Bucket capacity
        remaining: Whole tokens left (0 when denied)
        reset_epoch_ms: Advisory reset instant in epoch milliseconds
    """

    allowed: bool
    limit: int
    remaining: int
    reset_epoch_ms: int

    def to_info(self) -> RateLimitInfo:
        return RateLimitInfo(
            limit=self.limit,
            remaining=self.remaining,
            reset_epoch_ms=self.reset_epoch_ms,
        )


__all__ = [
    "Clock",
    "RateLimitCheck",
    "RateLimitInfo",
]
