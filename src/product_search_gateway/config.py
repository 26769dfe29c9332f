# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Configuration for the product search gateway.

GatewayConfig holds every tunable in one dataclass. ``from_env()`` builds
one from ``CATALOG_*`` environment variables; invalid numeric values are
logged and replaced by their defaults rather than failing startup.
"""

import logging
import os
import uuid
from collections.abc import Mapping
from dataclasses import dataclass, field

from .ratelimit.bucket import DEFAULT_WINDOW_MS

logger = logging.getLogger(__name__)

DEFAULT_API_BASE_URL = "https://api.bowlly.net"
DEFAULT_RATE_LIMIT_PER_MIN = 100
DEFAULT_MAX_TRACKED_IDENTITIES = 10_000
DEFAULT_PRODUCT_CACHE_TTL = 60.0
DEFAULT_PRODUCT_CACHE_MAX_ENTRIES = 1000
DEFAULT_API_TIMEOUT_SECONDS = 8.0
DEFAULT_RATE_LIMIT_CLEANUP_EVERY = 1000
DEFAULT_MAX_RESPONSE_SIZE_BYTES = 10 * 1024 * 1024

_TRUTHY = frozenset({"1", "true", "yes", "on"})
_FALSY = frozenset({"0", "false", "no", "off"})


def _positive_int(value: str | None, default: int, name: str) -> int:
    if value is None:
        return default
    try:
        parsed = int(value.strip())
    except ValueError:
        parsed = 0
    if parsed <= 0:
        logger.warning(f"Invalid integer value {value!r} for {name}, using default: {default}")
        return default
    return parsed


def _positive_float(value: str | None, default: float, name: str) -> float:
    if value is None:
        return default
    try:
        parsed = float(value.strip())
    except ValueError:
        parsed = 0.0
    if not parsed > 0:
        logger.warning(f"Invalid numeric value {value!r} for {name}, using default: {default}")
        return default
    return parsed


def _flag(value: str | None, default: bool, name: str) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in _TRUTHY:
        return True
    if normalized in _FALSY:
        return False
    logger.warning(f"Invalid boolean value {value!r} for {name}, using default: {default}")
    return default


@dataclass
class GatewayConfig:
    """
    Gateway configuration.

    The catalog transport settings (base URL, key, agent name, timeout,
    response size bound) are handed to the catalog factory given to
    ``create_service``; the gateway itself does not make HTTP calls.
    """

    # Catalog transport
    api_base_url: str = DEFAULT_API_BASE_URL
    """Base URL of the product catalog API."""

    api_key: str | None = None
    """Optional catalog API key."""

    agent_name: str = "mcp"
    """Agent name reported to the catalog."""

    api_timeout_seconds: float = DEFAULT_API_TIMEOUT_SECONDS
    """Per-request catalog timeout, enforced by the transport."""

    # Rate limiting
    rate_limit_per_min: int = DEFAULT_RATE_LIMIT_PER_MIN
    """Requests admitted per identity per window (bucket capacity)."""

    rate_limit_window_ms: int = DEFAULT_WINDOW_MS
    """Time for an empty bucket to refill completely."""

    max_tracked_identities: int | None = DEFAULT_MAX_TRACKED_IDENTITIES
    """LRU bound on rate limit buckets. None means unbounded."""

    rate_limit_cleanup_every: int | None = DEFAULT_RATE_LIMIT_CLEANUP_EVERY
    """Drop idle buckets after this many new identities. None disables it."""

    # Product detail cache
    product_cache_ttl: float = DEFAULT_PRODUCT_CACHE_TTL
    """Product detail cache TTL in seconds."""

    product_cache_max_entries: int = DEFAULT_PRODUCT_CACHE_MAX_ENTRIES
    """Maximum cached product details."""

    # Responses
    max_response_size_bytes: int = DEFAULT_MAX_RESPONSE_SIZE_BYTES
    """Upper bound on a catalog response body, enforced by the transport."""

    # Observability
    metrics_enabled: bool = True
    """Register metrics with Prometheus."""

    session_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    """Identity used when a caller supplies none. Random per process."""

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        if not self.api_base_url:
            raise ValueError("api_base_url must not be empty")
        if self.rate_limit_per_min < 1:
            raise ValueError("rate_limit_per_min must be at least 1")
        if self.rate_limit_window_ms < 1:
            raise ValueError("rate_limit_window_ms must be at least 1")
        if self.max_tracked_identities is not None and self.max_tracked_identities < 1:
            raise ValueError("max_tracked_identities must be at least 1")
        if (
            self.rate_limit_cleanup_every is not None
            and self.rate_limit_cleanup_every < 1
        ):
            raise ValueError("rate_limit_cleanup_every must be at least 1")
        if self.product_cache_ttl <= 0:
            raise ValueError("product_cache_ttl must be positive")
        if self.product_cache_max_entries < 1:
            raise ValueError("product_cache_max_entries must be at least 1")
        if self.max_response_size_bytes < 1:
            raise ValueError("max_response_size_bytes must be at least 1")
        if self.api_timeout_seconds <= 0:
            raise ValueError("api_timeout_seconds must be positive")

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "GatewayConfig":
        """
        Build a config from ``CATALOG_*`` environment variables.

        Args:
            environ: Mapping to read instead of ``os.environ`` (for tests)
        """
        env = os.environ if environ is None else environ
        return cls(
            api_base_url=env.get("CATALOG_API_BASE_URL") or DEFAULT_API_BASE_URL,
            api_key=env.get("CATALOG_API_KEY") or None,
            agent_name=env.get("CATALOG_AGENT_NAME") or "mcp",
            api_timeout_seconds=_positive_float(
                env.get("CATALOG_API_TIMEOUT_SECONDS"),
                DEFAULT_API_TIMEOUT_SECONDS,
                "CATALOG_API_TIMEOUT_SECONDS",
            ),
            rate_limit_per_min=_positive_int(
                env.get("CATALOG_RATE_LIMIT_PER_MIN"),
                DEFAULT_RATE_LIMIT_PER_MIN,
                "CATALOG_RATE_LIMIT_PER_MIN",
            ),
            rate_limit_window_ms=_positive_int(
                env.get("CATALOG_RATE_LIMIT_WINDOW_MS"),
                DEFAULT_WINDOW_MS,
                "CATALOG_RATE_LIMIT_WINDOW_MS",
            ),
            max_tracked_identities=_positive_int(
                env.get("CATALOG_MAX_TRACKED_IDENTITIES"),
                DEFAULT_MAX_TRACKED_IDENTITIES,
                "CATALOG_MAX_TRACKED_IDENTITIES",
            ),
            rate_limit_cleanup_every=_positive_int(
                env.get("CATALOG_RATE_LIMIT_CLEANUP_EVERY"),
                DEFAULT_RATE_LIMIT_CLEANUP_EVERY,
                "CATALOG_RATE_LIMIT_CLEANUP_EVERY",
            ),
            product_cache_ttl=_positive_float(
                env.get("CATALOG_PRODUCT_CACHE_TTL"),
                DEFAULT_PRODUCT_CACHE_TTL,
                "CATALOG_PRODUCT_CACHE_TTL",
            ),
            product_cache_max_entries=_positive_int(
                env.get("CATALOG_PRODUCT_CACHE_MAX_ENTRIES"),
                DEFAULT_PRODUCT_CACHE_MAX_ENTRIES,
                "CATALOG_PRODUCT_CACHE_MAX_ENTRIES",
            ),
            max_response_size_bytes=_positive_int(
                env.get("CATALOG_MAX_RESPONSE_SIZE_BYTES"),
                DEFAULT_MAX_RESPONSE_SIZE_BYTES,
                "CATALOG_MAX_RESPONSE_SIZE_BYTES",
            ),
            metrics_enabled=_flag(
                env.get("CATALOG_METRICS_ENABLED"), True, "CATALOG_METRICS_ENABLED"
            ),
        )


__all__ = [
    "DEFAULT_API_BASE_URL",
    "DEFAULT_API_TIMEOUT_SECONDS",
    "DEFAULT_MAX_RESPONSE_SIZE_BYTES",
    "DEFAULT_MAX_TRACKED_IDENTITIES",
    "DEFAULT_PRODUCT_CACHE_MAX_ENTRIES",
    "DEFAULT_PRODUCT_CACHE_TTL",
    "DEFAULT_RATE_LIMIT_CLEANUP_EVERY",
    "DEFAULT_RATE_LIMIT_PER_MIN",
    "GatewayConfig",
]
