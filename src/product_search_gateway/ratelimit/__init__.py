# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
In-process token bucket rate limiting.

State lives in process memory only: it is not persisted across restarts
and not shared between instances.

Classes:
    RateBucket: Single-identity token pool with proportional refill.
    BucketRegistry: Lazily owns one RateBucket per caller identity.
"""

from .bucket import DEFAULT_WINDOW_MS, RateBucket, wall_clock_ms
from .registry import BucketRegistry

__all__ = [
    "DEFAULT_WINDOW_MS",
    "BucketRegistry",
    "RateBucket",
    "wall_clock_ms",
]
