# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Prometheus metrics collector implementation."""

import logging
import threading

from prometheus_client import REGISTRY, CollectorRegistry, Counter, Histogram

from .metrics import MetricsCollector

logger = logging.getLogger(__name__)

# Prometheus refuses to register a metric name twice on one registry, so
# every collector bound to the same registry shares these objects.
_metrics: dict[tuple, Counter | Histogram] = {}
_metrics_lock = threading.Lock()


class PrometheusMetricsCollector(MetricsCollector):
    """Prometheus metrics collector for delivery accounting.

    Counters and histograms are registered lazily on first use and can be
    scraped from the registry by the host application.

    All calls to the same metric name must use consistent label keys;
    prometheus_client raises ValueError otherwise, which is logged and counted
    unless ``raise_on_error`` is set.
    """

    def __init__(
        self,
        registry: CollectorRegistry | None = None,
        namespace: str = "",
        raise_on_error: bool = False,
    ):
        """Initialize Prometheus metrics collector.

        Args:
            registry: Prometheus registry (uses the default registry if None)
            namespace: Namespace prefix for all metrics
            raise_on_error: If True, raise exceptions on metric errors (useful for testing)
        """
        self.registry = registry if registry is not None else REGISTRY
        self.namespace = namespace
        self.raise_on_error = raise_on_error
        self._metrics_errors_count = 0

    def _get_or_create(self, metric_type: type, name: str, tags: dict[str, str] | None):
        labelnames = tuple(sorted(tags.keys())) if tags else ()
        cache_key = (self.registry, metric_type, self.namespace, name, labelnames)

        with _metrics_lock:
            if cache_key not in _metrics:
                _metrics[cache_key] = metric_type(
                    name=name,
                    documentation=f"{metric_type.__name__} metric: {name}",
                    labelnames=labelnames,
                    namespace=self.namespace,
                    registry=self.registry,
                )
            return _metrics[cache_key]

    def increment(self, name: str, value: float = 1.0, tags: dict[str, str] | None = None) -> None:
        try:
            counter = self._get_or_create(Counter, name, tags)
            if tags:
                counter.labels(**tags).inc(value)
            else:
                counter.inc(value)
        except Exception as e:
            self._metrics_errors_count += 1
            logger.error(f"Failed to increment counter {name}: {e}")
            if self.raise_on_error:
                raise

    def observe(self, name: str, value: float, tags: dict[str, str] | None = None) -> None:
        try:
            histogram = self._get_or_create(Histogram, name, tags)
            if tags:
                histogram.labels(**tags).observe(value)
            else:
                histogram.observe(value)
        except Exception as e:
            self._metrics_errors_count += 1
            logger.error(f"Failed to observe histogram {name}: {e}")
            if self.raise_on_error:
                raise

    def get_errors_count(self) -> int:
        """Get the count of metrics collection errors."""
        return self._metrics_errors_count
