# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""ErrorReporter facade: the inbound entry point of the reporting pipeline."""

from collections.abc import Mapping
from dataclasses import replace
from typing import Any

from .config import ReporterConfig, load_config
from .delivery import WebhookDelivery
from .dispatch import Dispatcher
from .eligibility import EligibilityFilter
from .jobs import JobQueue, create_job_queue
from .logger import Logger
from .logger_factory import create_logger
from .metrics import MetricsCollector, create_metrics_collector
from .models import Occurrence, RequestContext
from .payload import PayloadBuilder
from .store import DedupStore, create_dedup_store


class ErrorReporter:
    """Filters, formats and dispatches error reports.

    ``report`` is fire-and-forget: whatever goes wrong inside the pipeline ends
    in a log record and never reaches the caller.
    """

    def __init__(
        self,
        config: ReporterConfig,
        eligibility: EligibilityFilter,
        builder: PayloadBuilder,
        dispatcher: Dispatcher,
        logger: Logger,
    ):
        self.config = config
        self.eligibility = eligibility
        self.builder = builder
        self.dispatcher = dispatcher
        self.logger = logger

    @property
    def is_degraded(self) -> bool:
        """True while synchronous delivery keeps failing."""
        return self.dispatcher.delivery.is_degraded

    def report(
        self,
        error: BaseException | Occurrence,
        context: Mapping[str, Any] | None = None,
        request: RequestContext | None = None,
    ) -> bool:
        """Report an error to the webhook.

        Args:
            error: An exception, or an Occurrence captured by the host
            context: Optional caller supplied context
            request: Optional request context the error originated from

        Returns:
            True if the occurrence passed the eligibility checks and was
            dispatched, False if it was filtered out or the pipeline failed
        """
        try:
            if isinstance(error, Occurrence):
                occurrence = error
                if context:
                    occurrence = replace(occurrence, context={**occurrence.context, **context})
                if request is not None:
                    occurrence = replace(occurrence, request=request)
            else:
                occurrence = Occurrence.from_exception(error, context=context, request=request)

            if not self.eligibility.should_report(occurrence):
                return False

            payload = self.builder.build(occurrence)
            self.dispatcher.dispatch(payload)
            return True
        except Exception:
            self.logger.exception("Error reporter failed")
            return False

    def close(self) -> None:
        """Release the job queue, if any."""
        if self.dispatcher.queue is not None:
            self.dispatcher.queue.close()


def create_reporter(
    config: ReporterConfig | None = None,
    logger: Logger | None = None,
    metrics: MetricsCollector | None = None,
    store: DedupStore | None = None,
    queue: JobQueue | None = None,
    delivery: WebhookDelivery | None = None,
) -> ErrorReporter:
    """Wire an ErrorReporter from configuration.

    Every collaborator can be injected; anything omitted is built from
    ``config`` (loaded from the environment when not given).

    Args:
        config: Reporter configuration
        logger: Structured logger
        metrics: Metrics collector
        store: Dedup/rate-limit store
        queue: Job queue for deferred delivery
        delivery: Delivery engine for synchronous sends

    Returns:
        ErrorReporter instance
    """
    config = config or load_config()
    logger = logger or create_logger()
    metrics = metrics or create_metrics_collector(config.metrics_type)
    if store is None:
        store = create_dedup_store(config.rate_limiting.cache_url, logger=logger)
    delivery = delivery or WebhookDelivery(
        config.delivery_settings(),
        logger=logger,
        metrics=metrics,
    )
    if queue is None and config.use_queue:
        queue = create_job_queue(config, logger=logger, metrics=metrics)

    return ErrorReporter(
        config=config,
        eligibility=EligibilityFilter(config, store, logger=logger),
        builder=PayloadBuilder(config),
        dispatcher=Dispatcher(config, delivery, queue=queue, logger=logger),
        logger=logger,
    )
