# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Webhook error reporter.

Filters application errors, suppresses repeats of the same fingerprint within
a time window, formats a report and posts it to a webhook, either inline or
through a job queue.

Example:
    >>> from webhook_reporter import create_reporter
    >>> reporter = create_reporter()
    >>> try:
    ...     1 / 0
    ... except ZeroDivisionError as e:
    ...     reporter.report(e, context={"order_id": 42})
"""

from .config import HttpConfig, RateLimitConfig, ReporterConfig, load_config
from .delivery import DeliveryResult, WebhookDelivery
from .dispatch import Dispatcher
from .eligibility import EligibilityFilter, matches_kind
from .exceptions import (
    ConfigurationError,
    JobExhaustedError,
    ReporterError,
    WebhookDeliveryError,
)
from .fingerprint import fingerprint
from .integrations import ReportingHandler, install_excepthook
from .jobs import (
    InMemoryJobQueue,
    JobQueue,
    ThreadedJobQueue,
    create_job_queue,
    run_delivery_job,
)
from .logger import Logger
from .logger_factory import create_logger
from .metrics import MetricsCollector, NoOpMetricsCollector, create_metrics_collector
from .models import (
    DeliveryJob,
    DeliverySettings,
    Occurrence,
    ReportPayload,
    RequestContext,
    StackFrame,
)
from .payload import PayloadBuilder, mask_sensitive
from .providers import ConfigProvider, EnvConfigProvider, StaticConfigProvider
from .reporter import ErrorReporter, create_reporter
from .silent_logger import SilentLogger
from .stdout_logger import StdoutLogger
from .store import DedupStore, InMemoryDedupStore, RedisDedupStore, create_dedup_store

__all__ = [
    # Pipeline
    "ErrorReporter",
    "create_reporter",
    "EligibilityFilter",
    "matches_kind",
    "PayloadBuilder",
    "mask_sensitive",
    "WebhookDelivery",
    "DeliveryResult",
    "Dispatcher",
    "fingerprint",
    # Models
    "Occurrence",
    "StackFrame",
    "RequestContext",
    "ReportPayload",
    "DeliverySettings",
    "DeliveryJob",
    # Stores
    "DedupStore",
    "InMemoryDedupStore",
    "RedisDedupStore",
    "create_dedup_store",
    # Jobs
    "JobQueue",
    "InMemoryJobQueue",
    "ThreadedJobQueue",
    "create_job_queue",
    "run_delivery_job",
    # Configuration
    "ReporterConfig",
    "HttpConfig",
    "RateLimitConfig",
    "load_config",
    "ConfigProvider",
    "EnvConfigProvider",
    "StaticConfigProvider",
    # Logging and metrics
    "Logger",
    "StdoutLogger",
    "SilentLogger",
    "create_logger",
    "MetricsCollector",
    "NoOpMetricsCollector",
    "create_metrics_collector",
    # Host integration
    "ReportingHandler",
    "install_excepthook",
    # Exceptions
    "ReporterError",
    "ConfigurationError",
    "WebhookDeliveryError",
    "JobExhaustedError",
]

__version__ = "1.0.0"
