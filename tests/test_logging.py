# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Tests for the structured logging and metrics abstractions."""

import json
import logging

import pytest
from prometheus_client import CollectorRegistry

from webhook_reporter import (
    NoOpMetricsCollector,
    SilentLogger,
    StdoutLogger,
    create_logger,
    create_metrics_collector,
)
from webhook_reporter.prometheus_metrics import PrometheusMetricsCollector


class TestCreateLogger:
    """Tests for create_logger factory."""

    def test_stdout_default(self, monkeypatch):
        monkeypatch.delenv("LOG_TYPE", raising=False)
        monkeypatch.delenv("LOG_NAME", raising=False)
        logger = create_logger()
        assert isinstance(logger, StdoutLogger)
        assert logger.name == "webhook_reporter"

    def test_from_environment(self, monkeypatch):
        monkeypatch.setenv("LOG_TYPE", "silent")
        monkeypatch.setenv("LOG_LEVEL", "debug")
        monkeypatch.setenv("LOG_NAME", "shop")
        logger = create_logger()
        assert isinstance(logger, SilentLogger)
        assert logger.level == "DEBUG"
        assert logger.name == "shop"

    def test_unknown_type(self):
        with pytest.raises(ValueError, match="Unknown logger_type"):
            create_logger(logger_type="syslog")

    def test_invalid_level(self):
        with pytest.raises(ValueError, match="Invalid log level"):
            create_logger(logger_type="stdout", level="LOUD")


class TestStdoutLogger:
    """Tests for StdoutLogger."""

    def test_json_line(self, capsys):
        StdoutLogger(name="webhook_reporter").info("Error reported successfully", hash="hash-1a2b3c4d")

        entry = json.loads(capsys.readouterr().out.strip())
        assert entry["level"] == "INFO"
        assert entry["logger"] == "webhook_reporter"
        assert entry["message"] == "Error reported successfully"
        assert entry["extra"] == {"hash": "hash-1a2b3c4d"}
        assert entry["timestamp"].endswith("Z")

    def test_level_filtering(self, capsys):
        logger = StdoutLogger(level="WARNING")
        logger.info("hidden")
        logger.debug("hidden")
        logger.warning("shown")

        lines = capsys.readouterr().out.strip().splitlines()
        assert len(lines) == 1
        assert json.loads(lines[0])["message"] == "shown"

    def test_non_serializable_extra(self, capsys):
        StdoutLogger().error("Failed", payload=object())
        assert json.loads(capsys.readouterr().out)["message"] == "Failed"

    def test_reemits_to_stdlib(self, caplog):
        with caplog.at_level(logging.ERROR, logger="webhook_reporter.test"):
            StdoutLogger(name="webhook_reporter.test").error("Failed to report error", status=500)

        assert caplog.records[0].getMessage() == "Failed to report error"
        assert caplog.records[0].extra == {"status": 500}

    def test_exception_includes_traceback(self, caplog):
        with caplog.at_level(logging.ERROR, logger="webhook_reporter.test"):
            try:
                raise RuntimeError("boom")
            except RuntimeError:
                StdoutLogger(name="webhook_reporter.test").exception("Error reporter failed")

        assert caplog.records[0].exc_info[0] is RuntimeError


class TestSilentLogger:
    """Tests for SilentLogger."""

    def test_captures_entries(self):
        logger = SilentLogger()
        logger.warning("Webhook URL is not configured")
        logger.error("Failed", status=500)

        assert logger.has_log("Webhook URL", level="WARNING")
        assert not logger.has_log("Webhook URL", level="ERROR")
        assert logger.get_logs("ERROR")[0]["extra"] == {"status": 500}

        logger.clear_logs()
        assert logger.get_logs() == []


class TestNoOpMetricsCollector:
    """Tests for NoOpMetricsCollector."""

    def test_counters(self):
        metrics = NoOpMetricsCollector()
        metrics.increment("webhook_reporter_delivery_failure_total")
        metrics.increment("webhook_reporter_delivery_failure_total", 2)
        metrics.observe("webhook_reporter_delivery_latency_ms", 12.5)

        assert metrics.get_counter_total("webhook_reporter_delivery_failure_total") == 3
        assert metrics.observations == [("webhook_reporter_delivery_latency_ms", 12.5, None)]

        metrics.clear_metrics()
        assert metrics.counters == []


class TestPrometheusMetricsCollector:
    """Tests for PrometheusMetricsCollector."""

    def test_counter_and_histogram(self):
        registry = CollectorRegistry()
        metrics = PrometheusMetricsCollector(registry=registry)

        for _ in range(1000):
            metrics.increment("webhook_reporter_delivery_success_total")
        metrics.observe("webhook_reporter_delivery_latency_ms", 12.5)

        assert registry.get_sample_value("webhook_reporter_delivery_success_total") == 1000
        assert registry.get_sample_value("webhook_reporter_delivery_latency_ms_count") == 1
        assert registry.get_sample_value("webhook_reporter_delivery_latency_ms_sum") == 12.5

    def test_labels(self):
        registry = CollectorRegistry()
        PrometheusMetricsCollector(registry=registry).increment(
            "webhook_reporter_delivery_failure_total", tags={"status": "500"}
        )

        assert registry.get_sample_value(
            "webhook_reporter_delivery_failure_total", {"status": "500"}
        ) == 1

    def test_collectors_share_a_registry(self):
        """A second collector on the same registry reuses the registered metric."""
        registry = CollectorRegistry()
        PrometheusMetricsCollector(registry=registry).increment("webhook_reporter_job_exhausted_total")
        second = PrometheusMetricsCollector(registry=registry)
        second.increment("webhook_reporter_job_exhausted_total")

        assert registry.get_sample_value("webhook_reporter_job_exhausted_total") == 2
        assert second.get_errors_count() == 0

    def test_inconsistent_labels_are_logged(self):
        registry = CollectorRegistry()
        metrics = PrometheusMetricsCollector(registry=registry)
        metrics.increment("webhook_reporter_delivery_failure_total", tags={"status": "500"})
        metrics.increment("webhook_reporter_delivery_failure_total", tags={"reason": "timeout"})

        assert metrics.get_errors_count() == 1

    def test_raise_on_error(self):
        metrics = PrometheusMetricsCollector(registry=CollectorRegistry(), raise_on_error=True)
        metrics.increment("webhook_reporter_delivery_failure_total", tags={"status": "500"})

        with pytest.raises(ValueError):
            metrics.increment("webhook_reporter_delivery_failure_total", tags={"reason": "timeout"})


class TestCreateMetricsCollector:
    """Tests for create_metrics_collector factory."""

    def test_prometheus(self):
        metrics = create_metrics_collector("prometheus", registry=CollectorRegistry())
        assert isinstance(metrics, PrometheusMetricsCollector)

    def test_noop(self):
        assert isinstance(create_metrics_collector("NoOp"), NoOpMetricsCollector)

    def test_unknown(self):
        with pytest.raises(ValueError, match="Unknown metrics_type"):
            create_metrics_collector("statsd")
