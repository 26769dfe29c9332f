# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Observability and metrics for the product search gateway.

Classes:
    UnifiedMetricsCollector: Dict snapshot plus Prometheus metrics.

Protocols:
    MetricsCollectorProtocol: Protocol for metrics collection backends.

Functions:
    get_metrics_collector: Get the process-wide metrics collector.
    reset_metrics_collector: Reset the process-wide metrics collector.
"""

from .collector import (
    METRIC_DEFINITIONS,
    MetricDefinition,
    UnifiedMetricsCollector,
    get_metrics_collector,
    reset_metrics_collector,
)
from .constants import (
    CACHE_EVICTIONS_TOTAL,
    CACHE_HITS_TOTAL,
    CACHE_MISSES_TOTAL,
    CATALOG_FETCH_LATENCY_SECONDS,
    LATENCY_BUCKETS,
    METRIC_PREFIX,
    RATE_LIMIT_BUCKET_EVICTIONS_TOTAL,
    RATE_LIMIT_BUCKETS_ACTIVE,
    REQUESTS_ADMITTED_TOTAL,
    REQUESTS_RATE_LIMITED_TOTAL,
    SEARCH_CAPABILITY_MISMATCHES_TOTAL,
    SEARCH_SUGGESTIONS_TOTAL,
    SEARCHES_TOTAL,
    TOOL_ERRORS_TOTAL,
)
from .protocols import MetricsCollectorProtocol

__all__ = [
    "CACHE_EVICTIONS_TOTAL",
    "CACHE_HITS_TOTAL",
    "CACHE_MISSES_TOTAL",
    "CATALOG_FETCH_LATENCY_SECONDS",
    "LATENCY_BUCKETS",
    "METRIC_DEFINITIONS",
    "METRIC_PREFIX",
    "RATE_LIMIT_BUCKETS_ACTIVE",
    "RATE_LIMIT_BUCKET_EVICTIONS_TOTAL",
    "REQUESTS_ADMITTED_TOTAL",
    "REQUESTS_RATE_LIMITED_TOTAL",
    "SEARCHES_TOTAL",
    "SEARCH_CAPABILITY_MISMATCHES_TOTAL",
    "SEARCH_SUGGESTIONS_TOTAL",
    "TOOL_ERRORS_TOTAL",
    "MetricDefinition",
    "MetricsCollectorProtocol",
    "UnifiedMetricsCollector",
    "get_metrics_collector",
    "reset_metrics_collector",
]
