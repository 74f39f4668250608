# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Metrics abstraction used for delivery failure accounting."""

import logging
from abc import ABC, abstractmethod

logger = logging.getLogger(__name__)


class MetricsCollector(ABC):
    """Abstract base class for metrics collectors."""

    @abstractmethod
    def increment(self, name: str, value: float = 1.0, tags: dict[str, str] | None = None) -> None:
        """Increment a counter metric.

        Args:
            name: Name of the counter metric
            value: Amount to increment by (default: 1.0)
            tags: Optional dictionary of tags/labels for the metric
        """
        pass

    @abstractmethod
    def observe(self, name: str, value: float, tags: dict[str, str] | None = None) -> None:
        """Observe a value for histogram/summary metrics.

        Args:
            name: Name of the histogram/summary metric
            value: Value to observe
            tags: Optional dictionary of tags/labels for the metric
        """
        pass


class NoOpMetricsCollector(MetricsCollector):
    """Metrics collector that keeps every call in memory.

    Intended for tests and local development: nothing is ever discarded, so
    long-running processes should use the Prometheus collector instead.
    """

    def __init__(self) -> None:
        self.counters: list[tuple[str, float, dict[str, str] | None]] = []
        self.observations: list[tuple[str, float, dict[str, str] | None]] = []

    def increment(self, name: str, value: float = 1.0, tags: dict[str, str] | None = None) -> None:
        self.counters.append((name, value, tags))
        logger.debug(f"NoOpMetricsCollector: increment {name} by {value} with tags {tags}")

    def observe(self, name: str, value: float, tags: dict[str, str] | None = None) -> None:
        self.observations.append((name, value, tags))
        logger.debug(f"NoOpMetricsCollector: observe {name} value {value} with tags {tags}")

    def get_counter_total(self, name: str) -> float:
        """Get the summed value of a counter metric.

        Args:
            name: Name of the counter metric

        Returns:
            Total of all increments recorded under ``name``
        """
        return sum(value for counter, value, _ in self.counters if counter == name)

    def clear_metrics(self) -> None:
        """Clear all stored metrics."""
        self.counters.clear()
        self.observations.clear()


METRICS_TYPES = ("prometheus", "noop")


def create_metrics_collector(metrics_type: str = "prometheus", **kwargs) -> MetricsCollector:
    """Create a metrics collector based on type.

    Args:
        metrics_type: "prometheus" or "noop"
        **kwargs: Passed to the collector constructor (Prometheus only)

    Returns:
        MetricsCollector instance

    Raises:
        ValueError: If metrics_type is not recognized
    """
    metrics_type = metrics_type.lower()

    if metrics_type == "prometheus":
        from .prometheus_metrics import PrometheusMetricsCollector

        return PrometheusMetricsCollector(**kwargs)
    elif metrics_type == "noop":
        return NoOpMetricsCollector()
    else:
        raise ValueError(
            f"Unknown metrics_type: {metrics_type}. "
            f"Must be one of: {', '.join(METRICS_TYPES)}"
        )
