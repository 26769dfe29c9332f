# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Metric name constants following Prometheus naming conventions.

All metric names use the `product_gateway_` prefix.

Naming Conventions:
    - Counter metrics end with `_total`
    - Histogram metrics for time end with `_seconds`
    - Gauges use present-tense descriptive names

Label Best Practices:
    To prevent label cardinality explosion, use only:
    - `tool` - Surface operation (search_products, get_product_detail, ...)
    - `mode` - Search processing mode (client, passthrough)
    - `error_type` - Response error type (RATE_LIMITED, VALIDATION, ...)
    - `reason` - Eviction reason (lru, idle)

    NEVER use:
    - `identity` - Unique per caller session (unbounded!)
    - `product_id` - Unique per product (unbounded!)
"""


# =============================================================================
# Global Prefix
# =============================================================================

METRIC_PREFIX = "product_gateway"
"""Prefix for all Prometheus metrics in this library."""


# =============================================================================
# Admission Metrics (ratelimit/registry.py)
# =============================================================================

REQUESTS_ADMITTED_TOTAL = f"{METRIC_PREFIX}_requests_admitted_total"
"""Total requests admitted by a token bucket."""

REQUESTS_RATE_LIMITED_TOTAL = f"{METRIC_PREFIX}_requests_rate_limited_total"
"""Total requests denied by a token bucket."""

RATE_LIMIT_BUCKETS_ACTIVE = f"{METRIC_PREFIX}_rate_limit_buckets_active"
"""Number of identities currently holding a bucket."""

RATE_LIMIT_BUCKET_EVICTIONS_TOTAL = (
    f"{METRIC_PREFIX}_rate_limit_bucket_evictions_total"
)
"""Total buckets evicted (LRU bound or idle expiry)."""


# =============================================================================
# Search Metrics (search/pipeline.py)
# =============================================================================

SEARCHES_TOTAL = f"{METRIC_PREFIX}_searches_total"
"""Total searches executed, by processing mode."""

SEARCH_CAPABILITY_MISMATCHES_TOTAL = (
    f"{METRIC_PREFIX}_search_capability_mismatches_total"
)
"""Total searches rejected because the catalog lacks ingredient data."""

SEARCH_SUGGESTIONS_TOTAL = f"{METRIC_PREFIX}_search_suggestions_total"
"""Total empty searches that produced relaxed-match suggestions."""

CATALOG_FETCH_LATENCY_SECONDS = f"{METRIC_PREFIX}_catalog_fetch_latency_seconds"
"""Catalog batch fetch latency (histogram)."""


# =============================================================================
# Service Metrics (service.py)
# =============================================================================

TOOL_ERRORS_TOTAL = f"{METRIC_PREFIX}_tool_errors_total"
"""Total error responses returned, by tool and error type."""


# =============================================================================
# Cache Metrics (cache.py)
# =============================================================================

CACHE_HITS_TOTAL = f"{METRIC_PREFIX}_cache_hits_total"
"""Total product cache hits."""

CACHE_MISSES_TOTAL = f"{METRIC_PREFIX}_cache_misses_total"
"""Total product cache misses (absent or expired)."""

CACHE_EVICTIONS_TOTAL = f"{METRIC_PREFIX}_cache_evictions_total"
"""Total product cache evictions (entries removed due to size limit)."""


# =============================================================================
# Histogram Buckets
# =============================================================================

LATENCY_BUCKETS: list[float] = [
    0.005,
    0.01,
    0.025,
    0.05,
    0.1,
    0.25,
    0.5,
    1.0,
    2.5,
    5.0,
    10.0,
]
"""Default latency buckets for request duration histograms (in seconds)."""


__all__ = [
    "CACHE_EVICTIONS_TOTAL",
    # Cache
    "CACHE_HITS_TOTAL",
    "CACHE_MISSES_TOTAL",
    "CATALOG_FETCH_LATENCY_SECONDS",
    # Buckets
    "LATENCY_BUCKETS",
    # Prefix
    "METRIC_PREFIX",
    "RATE_LIMIT_BUCKETS_ACTIVE",
    "RATE_LIMIT_BUCKET_EVICTIONS_TOTAL",
    # Admission
    "REQUESTS_ADMITTED_TOTAL",
    "REQUESTS_RATE_LIMITED_TOTAL",
    # Search
    "SEARCHES_TOTAL",
    "SEARCH_CAPABILITY_MISMATCHES_TOTAL",
    "SEARCH_SUGGESTIONS_TOTAL",
    # Service
    "TOOL_ERRORS_TOTAL",
]
