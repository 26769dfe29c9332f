# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Unified metrics collector backed by a dict snapshot and Prometheus.

Features:
    1. Thread-safe counter/gauge/histogram operations
    2. Prometheus metric registration (default or injected registry)
    3. Dict snapshot for JSON export and assertions in tests
    4. Label cardinality protection (max 1000 unique combinations per metric)
    5. Optional HTTP server for Prometheus scraping

Usage:
    >>> from product_search_gateway.observability import get_metrics_collector
    >>> collector = get_metrics_collector()
    >>> collector.inc_counter('product_gateway_searches_total',
    ...                       labels={'mode': 'client'})
    >>> metrics = collector.get_metrics()
"""

from __future__ import annotations

import logging
import threading
from collections import defaultdict
from dataclasses import dataclass
from typing import Any, ClassVar

from prometheus_client import (
    REGISTRY,
    CollectorRegistry,
    Counter,
    Gauge,
    Histogram,
    start_http_server,
)

from .constants import (
    CACHE_EVICTIONS_TOTAL,
    CACHE_HITS_TOTAL,
    CACHE_MISSES_TOTAL,
    CATALOG_FETCH_LATENCY_SECONDS,
    LATENCY_BUCKETS,
    RATE_LIMIT_BUCKET_EVICTIONS_TOTAL,
    RATE_LIMIT_BUCKETS_ACTIVE,
    REQUESTS_ADMITTED_TOTAL,
    REQUESTS_RATE_LIMITED_TOTAL,
    SEARCH_CAPABILITY_MISMATCHES_TOTAL,
    SEARCH_SUGGESTIONS_TOTAL,
    SEARCHES_TOTAL,
    TOOL_ERRORS_TOTAL,
)

logger = logging.getLogger(__name__)


@dataclass
class MetricDefinition:
    """
    Definition for a metric that can be instantiated.

    Defines the type, description, labels and histogram buckets of a metric.
    """

    name: str
    metric_type: str  # 'counter', 'gauge', 'histogram'
    description: str
    label_names: tuple[str, ...] = ()
    buckets: list[float] | None = None


METRIC_DEFINITIONS: dict[str, MetricDefinition] = {
    # === Admission ===
    REQUESTS_ADMITTED_TOTAL: MetricDefinition(
        REQUESTS_ADMITTED_TOTAL,
        "counter",
        "Total requests admitted by a token bucket",
    ),
    REQUESTS_RATE_LIMITED_TOTAL: MetricDefinition(
        REQUESTS_RATE_LIMITED_TOTAL,
        "counter",
        "Total requests denied by a token bucket",
    ),
    RATE_LIMIT_BUCKETS_ACTIVE: MetricDefinition(
        RATE_LIMIT_BUCKETS_ACTIVE,
        "gauge",
        "Identities currently holding a bucket",
    ),
    RATE_LIMIT_BUCKET_EVICTIONS_TOTAL: MetricDefinition(
        RATE_LIMIT_BUCKET_EVICTIONS_TOTAL,
        "counter",
        "Total rate limit buckets evicted",
        ("reason",),
    ),
    # === Search ===
    SEARCHES_TOTAL: MetricDefinition(
        SEARCHES_TOTAL,
        "counter",
        "Total searches executed",
        ("mode",),
    ),
    SEARCH_CAPABILITY_MISMATCHES_TOTAL: MetricDefinition(
        SEARCH_CAPABILITY_MISMATCHES_TOTAL,
        "counter",
        "Total searches rejected for missing ingredient data",
    ),
    SEARCH_SUGGESTIONS_TOTAL: MetricDefinition(
        SEARCH_SUGGESTIONS_TOTAL,
        "counter",
        "Total empty searches that produced suggestions",
    ),
    CATALOG_FETCH_LATENCY_SECONDS: MetricDefinition(
        CATALOG_FETCH_LATENCY_SECONDS,
        "histogram",
        "Catalog batch fetch latency",
        ("mode",),
        buckets=LATENCY_BUCKETS,
    ),
    # === Service ===
    TOOL_ERRORS_TOTAL: MetricDefinition(
        TOOL_ERRORS_TOTAL,
        "counter",
        "Total error responses returned",
        ("tool", "error_type"),
    ),
    # === Cache ===
    CACHE_HITS_TOTAL: MetricDefinition(
        CACHE_HITS_TOTAL,
        "counter",
        "Total product cache hits",
    ),
    CACHE_MISSES_TOTAL: MetricDefinition(
        CACHE_MISSES_TOTAL,
        "counter",
        "Total product cache misses",
    ),
    CACHE_EVICTIONS_TOTAL: MetricDefinition(
        CACHE_EVICTIONS_TOTAL,
        "counter",
        "Total product cache evictions",
    ),
}


class UnifiedMetricsCollector:
    """
    Metrics collector keeping a dict snapshot alongside Prometheus metrics.

    Thread Safety:
        All dict operations use an RLock. Prometheus client objects are
        thread-safe on their own.

    Cardinality Protection:
        At most MAX_LABEL_COMBINATIONS unique label combinations are tracked
        per metric; further combinations are dropped with a warning.

    Example:
        >>> collector = UnifiedMetricsCollector(registry=CollectorRegistry())
        >>> collector.inc_counter('product_gateway_searches_total',
        ...                       labels={'mode': 'passthrough'})
    """

    MAX_LABEL_COMBINATIONS: ClassVar[int] = 1000

    def __init__(
        self,
        enable_prometheus: bool = True,
        registry: CollectorRegistry | None = None,
    ) -> None:
        """
        Initialize the metrics collector.

        Args:
            enable_prometheus: Whether to register Prometheus metrics
            registry: Optional Prometheus CollectorRegistry (isolates tests)
        """
        self._enable_prometheus = enable_prometheus
        self._registry = registry if registry is not None else REGISTRY

        self._counters: dict[str, dict[str, int]] = defaultdict(
            lambda: defaultdict(int)
        )
        self._gauges: dict[str, dict[str, float]] = defaultdict(
            lambda: defaultdict(float)
        )
        self._histograms: dict[str, dict[str, list[float]]] = defaultdict(
            lambda: defaultdict(list)
        )

        self._lock = threading.RLock()

        self._prom_metrics: dict[str, Any] = {}
        self._label_combinations: dict[str, set[str]] = defaultdict(set)
        self._server_running = False

        logger.debug(
            f"UnifiedMetricsCollector initialized "
            f"(prometheus={'enabled' if self._enable_prometheus else 'disabled'})"
        )

    def _labels_to_key(self, labels: dict[str, str] | None) -> str:
        """Convert labels dict to a stable string key."""
        if not labels:
            return ""
        return ",".join(f"{k}={v}" for k, v in sorted(labels.items()))

    def _check_cardinality(self, name: str, label_key: str) -> bool:
        """Return False when a new label combination would exceed the limit."""
        if label_key in self._label_combinations[name]:
            return True
        if len(self._label_combinations[name]) >= self.MAX_LABEL_COMBINATIONS:
            logger.warning(
                f"Cardinality limit ({self.MAX_LABEL_COMBINATIONS}) reached "
                f"for metric {name}. Dropping label combination: {label_key}"
            )
            return False
        self._label_combinations[name].add(label_key)
        return True

    def _get_or_create_prom(self, name: str, metric_type: str) -> Any | None:
        """Get or lazily register a Prometheus metric of the given type."""
        if not self._enable_prometheus:
            return None

        with self._lock:
            if name in self._prom_metrics:
                return self._prom_metrics[name]

            defn = METRIC_DEFINITIONS.get(name)
            description = defn.description if defn else f"Dynamic {metric_type}: {name}"
            label_names = list(defn.label_names) if defn else []
            try:
                if metric_type == "counter":
                    metric: Any = Counter(
                        name, description, label_names, registry=self._registry
                    )
                elif metric_type == "gauge":
                    metric = Gauge(
                        name, description, label_names, registry=self._registry
                    )
                else:
                    buckets = defn.buckets if defn and defn.buckets else LATENCY_BUCKETS
                    metric = Histogram(
                        name,
                        description,
                        label_names,
                        buckets=buckets,
                        registry=self._registry,
                    )
            except ValueError as e:
                # Name already registered elsewhere; cache the failure
                logger.warning(f"Failed to create Prometheus {metric_type} {name}: {e}")
                self._prom_metrics[name] = None
                return None

            self._prom_metrics[name] = metric
            return metric

    @staticmethod
    def _labelled(metric: Any, labels: dict[str, str] | None) -> Any:
        return metric.labels(**labels) if labels else metric

    # === Counter Operations ===

    def inc_counter(
        self,
        name: str,
        value: int = 1,
        labels: dict[str, str] | None = None,
    ) -> None:
        """
        Increment a counter metric.

        Raises:
            ValueError: If value is negative
        """
        if value < 0:
            raise ValueError("Counter increment must be non-negative")

        label_key = self._labels_to_key(labels)

        with self._lock:
            if not self._check_cardinality(name, label_key):
                return
            self._counters[name][label_key] += value

        prom_counter = self._get_or_create_prom(name, "counter")
        if prom_counter is not None:
            self._labelled(prom_counter, labels).inc(value)

    # === Gauge Operations ===

    def set_gauge(
        self,
        name: str,
        value: float,
        labels: dict[str, str] | None = None,
    ) -> None:
        """Set a gauge metric to a specific value."""
        label_key = self._labels_to_key(labels)

        with self._lock:
            if not self._check_cardinality(name, label_key):
                return
            self._gauges[name][label_key] = value

        prom_gauge = self._get_or_create_prom(name, "gauge")
        if prom_gauge is not None:
            self._labelled(prom_gauge, labels).set(value)

    # === Histogram Operations ===

    def observe_histogram(
        self,
        name: str,
        value: float,
        labels: dict[str, str] | None = None,
    ) -> None:
        """Record an observation in a histogram."""
        label_key = self._labels_to_key(labels)

        with self._lock:
            if not self._check_cardinality(name, label_key):
                return
            observations = self._histograms[name][label_key]
            observations.append(value)
            # Keep only recent observations to bound memory
            if len(observations) > 10000:
                self._histograms[name][label_key] = observations[-5000:]

        prom_histogram = self._get_or_create_prom(name, "histogram")
        if prom_histogram is not None:
            self._labelled(prom_histogram, labels).observe(value)

    # === Snapshot Operations ===

    def get_metrics(self) -> dict[str, Any]:
        """
        Get a snapshot of all metrics.

        Returns a dict suitable for JSON serialization with structure:
        {
            "counters": {"metric_name": {"label_key": value, ...}, ...},
            "gauges": {"metric_name": {"label_key": value, ...}, ...},
            "histograms": {"metric_name": {"label_key": {...}, ...}, ...}
        }
        """
        with self._lock:
            counters = {
                name: dict(label_values)
                for name, label_values in self._counters.items()
            }
            gauges = {
                name: dict(label_values) for name, label_values in self._gauges.items()
            }

            histograms: dict[str, dict[str, dict[str, Any]]] = {}
            for name, label_values in self._histograms.items():
                histograms[name] = {}
                for label_key, observations in label_values.items():
                    if observations:
                        histograms[name][label_key] = {
                            "count": len(observations),
                            "sum": sum(observations),
                            "avg": sum(observations) / len(observations),
                            "min": min(observations),
                            "max": max(observations),
                        }

        return {
            "counters": counters,
            "gauges": gauges,
            "histograms": histograms,
        }

    def reset(self) -> None:
        """Reset the dict snapshot. Prometheus series are left registered."""
        with self._lock:
            self._counters.clear()
            self._gauges.clear()
            self._histograms.clear()
            self._label_combinations.clear()

        logger.debug("Metrics collector reset")

    # === Prometheus HTTP Server ===

    def start_http_server(self, host: str = "127.0.0.1", port: int = 9090) -> bool:
        """
        Start the Prometheus HTTP server for metrics scraping.

        Binds to localhost by default. Pass host="0.0.0.0" explicitly for
        containerized deployments.

        Returns:
            True if the server is running, False if it failed to start
        """
        if self._server_running:
            logger.warning("Prometheus server already running")
            return True

        try:
            start_http_server(port, addr=host, registry=self._registry)
        except OSError as e:
            logger.error(f"Failed to start Prometheus server: {e}")
            return False

        self._server_running = True
        logger.info(f"Prometheus metrics server started on {host}:{port}")
        return True

    @property
    def prometheus_enabled(self) -> bool:
        return self._enable_prometheus

    @property
    def server_running(self) -> bool:
        return self._server_running


# =============================================================================
# Singleton Pattern
# =============================================================================

_global_collector: UnifiedMetricsCollector | None = None
_collector_lock = threading.Lock()


def get_metrics_collector(
    enable_prometheus: bool = True,
) -> UnifiedMetricsCollector:
    """
    Get or create the process-wide metrics collector.

    Args:
        enable_prometheus: Whether to enable Prometheus metrics
            (only used on first call)
    """
    global _global_collector

    if _global_collector is None:
        with _collector_lock:
            if _global_collector is None:
                _global_collector = UnifiedMetricsCollector(
                    enable_prometheus=enable_prometheus
                )

    return _global_collector


def reset_metrics_collector() -> None:
    """
    Drop the process-wide collector (mainly for testing).

    The next get_metrics_collector() call creates a fresh instance.
    """
    global _global_collector
    with _collector_lock:
        if _global_collector:
            _global_collector.reset()
        _global_collector = None


__all__ = [
    "METRIC_DEFINITIONS",
    "MetricDefinition",
    "UnifiedMetricsCollector",
    "get_metrics_collector",
    "reset_metrics_collector",
]
