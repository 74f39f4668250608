# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Dispatch mode selection: deliver inline or hand off to a job queue."""

from .config import ReporterConfig
from .delivery import WebhookDelivery
from .jobs import JobQueue
from .logger import Logger
from .models import DeliveryJob, ReportPayload
from .silent_logger import SilentLogger

JOB_TRIES = 3
JOB_BACKOFF_SECONDS = [10, 30, 60]


class Dispatcher:
    """Routes built payloads to synchronous or deferred delivery."""

    def __init__(
        self,
        config: ReporterConfig,
        delivery: WebhookDelivery,
        queue: JobQueue | None = None,
        logger: Logger | None = None,
    ):
        """Initialize dispatcher.

        Args:
            config: Reporter configuration
            delivery: Delivery engine used for synchronous sends
            queue: Job queue used when ``config.use_queue`` is set
            logger: Structured logger
        """
        self.config = config
        self.delivery = delivery
        self.queue = queue
        self.logger = logger or SilentLogger()

    def create_job(self, payload: ReportPayload) -> DeliveryJob:
        """Wrap ``payload`` with a settings snapshot for deferred delivery."""
        return DeliveryJob(
            payload=payload,
            settings=self.config.delivery_settings(),
            queue_name=self.config.queue_name,
            tries=JOB_TRIES,
            backoff=list(JOB_BACKOFF_SECONDS),
        )

    def dispatch(self, payload: ReportPayload) -> None:
        """Send ``payload`` now, or submit it as a DeliveryJob when queueing is enabled.

        A queue that refuses the job is logged; the payload is not sent inline
        as a fallback.
        """
        if not self.config.use_queue:
            self.delivery.send(payload)
            return

        if self.queue is None:
            self.logger.error(
                "Error reporter queue is not configured; dropping report",
                hash=payload.fingerprint,
            )
            return

        job = self.create_job(payload)
        try:
            self.queue.submit(job)
        except Exception as e:
            self.logger.error(
                f"Failed to queue error report: {e}",
                hash=payload.fingerprint,
                queue=job.queue_name,
                payload=payload.to_wire(),
            )
            return

        self.logger.debug(
            "Error report queued",
            hash=payload.fingerprint,
            job_id=job.job_id,
            queue=job.queue_name,
        )
