# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Deferred delivery: job execution and in-process job queues.

A job queue only has to accept a DeliveryJob and eventually run it with
``run_delivery_job``, which owns the job-level retry schedule and the terminal
failure hook.
"""

import time
from abc import ABC, abstractmethod
from collections.abc import Callable
from concurrent.futures import Future, ThreadPoolExecutor

from .config import ReporterConfig
from .delivery import WebhookDelivery
from .exceptions import JobExhaustedError, WebhookDeliveryError
from .logger import Logger
from .metrics import MetricsCollector, NoOpMetricsCollector
from .models import DeliveryJob
from .retry import RetryConfig, RetryContext, RetryPolicy
from .silent_logger import SilentLogger

FailureHook = Callable[[JobExhaustedError], None]


def log_job_failure(logger: Logger) -> FailureHook:
    """Build the default terminal failure hook.

    The hook logs the final exception together with the full payload so the
    report can be recovered by hand.
    """
    def _hook(error: JobExhaustedError) -> None:
        logger.error(
            "Failed to send error report to webhook",
            exception=str(error.last_error) if error.last_error else str(error),
            status=getattr(error.last_error, "status_code", None),
            body=getattr(error.last_error, "body", None),
            payload=error.job.payload.to_wire(),
            job_id=error.job.job_id,
        )
    return _hook


def run_delivery_job(
    job: DeliveryJob,
    logger: Logger | None = None,
    metrics: MetricsCollector | None = None,
    delivery_factory: Callable[[DeliveryJob], WebhookDelivery] | None = None,
    on_failure: FailureHook | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> bool:
    """Execute a deferred delivery job with its own retry schedule.

    Each attempt runs the full HTTP-level delivery. A failed attempt waits
    ``job.backoff[attempt - 1]`` seconds (the last value repeats) until
    ``job.tries`` attempts have been made, then the failure hook runs.

    Args:
        job: The job to execute
        logger: Structured logger
        metrics: Metrics collector
        delivery_factory: Builds the delivery engine for the job's settings
        on_failure: Terminal failure hook (defaults to logging the payload)
        sleep: Sleep function taking seconds, injectable for tests

    Returns:
        True if the payload was delivered, False if the job was exhausted or
        no webhook URL is configured (a warning, not a failure)
    """
    logger = logger or SilentLogger()
    metrics = metrics or NoOpMetricsCollector()

    def _default_delivery(j: DeliveryJob) -> WebhookDelivery:
        return WebhookDelivery(j.settings, logger=logger, metrics=metrics, sleep=sleep)

    delivery_factory = delivery_factory or _default_delivery
    on_failure = on_failure or log_job_failure(logger)

    if not job.settings.webhook_url:
        logger.warning("Error Reporter: Webhook URL is not configured", job_id=job.job_id)
        return False

    policy = RetryPolicy(
        RetryConfig(
            max_attempts=max(job.tries, 1),
            schedule_ms=[seconds * 1000 for seconds in job.backoff],
            max_delay_ms=max([seconds * 1000 for seconds in job.backoff] or [0]),
        ),
        sleep=sleep,
    )
    context = RetryContext(metadata={"job_id": job.job_id, "queue": job.queue_name})
    delivery = delivery_factory(job)

    while True:
        try:
            result = delivery.deliver(job.payload)
        except WebhookDeliveryError as e:
            context.last_exception = e
        else:
            metrics.increment("webhook_reporter_delivery_success_total")
            logger.info(
                "Error reported successfully",
                hash=job.payload.fingerprint,
                response=result.body,
                job_id=job.job_id,
                job_attempts=context.attempt_number,
            )
            return True

        if not policy.should_retry(context):
            break

        delay_ms = policy.calculate_delay_ms(context.attempt_number + 1)
        logger.warning(
            f"Delivery job attempt {context.attempt_number} failed, "
            f"retrying in {delay_ms}ms: {context.last_exception}",
            job_id=job.job_id,
            status=context.last_exception.status_code,
            body=context.last_exception.body,
        )
        policy.sleep(delay_ms)
        context.attempt_number += 1

    metrics.increment("webhook_reporter_job_exhausted_total")
    on_failure(
        JobExhaustedError(
            f"Delivery job exhausted after {context.attempt_number} attempts",
            job=job,
            last_error=context.last_exception,
        )
    )
    return False


class JobQueue(ABC):
    """Abstract asynchronous execution facility for delivery jobs."""

    @abstractmethod
    def submit(self, job: DeliveryJob) -> None:
        """Accept a job for later execution.

        Raises:
            Exception: If the job could not be accepted
        """
        pass

    def close(self) -> None:
        """Release resources; pending jobs may be dropped."""
        pass


class InMemoryJobQueue(JobQueue):
    """Queue that only records submitted jobs (useful for tests)."""

    def __init__(self) -> None:
        self.jobs: list[DeliveryJob] = []

    def submit(self, job: DeliveryJob) -> None:
        self.jobs.append(job)

    def drain(self, **kwargs) -> list[bool]:
        """Run and remove every recorded job.

        Args:
            **kwargs: Passed through to run_delivery_job

        Returns:
            Result of each job in submission order
        """
        jobs, self.jobs = self.jobs, []
        return [run_delivery_job(job, **kwargs) for job in jobs]


class ThreadedJobQueue(JobQueue):
    """In-process worker pool running jobs on background threads."""

    def __init__(
        self,
        max_workers: int = 2,
        logger: Logger | None = None,
        metrics: MetricsCollector | None = None,
        on_failure: FailureHook | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """Initialize threaded job queue.

        Args:
            max_workers: Number of worker threads
            logger: Structured logger passed to each job run
            metrics: Metrics collector passed to each job run
            on_failure: Terminal failure hook passed to each job run
            sleep: Sleep function taking seconds
        """
        self.logger = logger or SilentLogger()
        self.metrics = metrics
        self.on_failure = on_failure
        self._sleep = sleep
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers,
            thread_name_prefix="webhook-reporter",
        )

    def submit(self, job: DeliveryJob) -> Future:
        return self._executor.submit(self._run, job)

    def _run(self, job: DeliveryJob) -> bool:
        try:
            return run_delivery_job(
                job,
                logger=self.logger,
                metrics=self.metrics,
                on_failure=self.on_failure,
                sleep=self._sleep,
            )
        except Exception as e:
            self.logger.exception(f"Delivery job crashed: {e}", job_id=job.job_id)
            return False

    def close(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)


def create_job_queue(
    config: ReporterConfig,
    logger: Logger | None = None,
    metrics: MetricsCollector | None = None,
) -> JobQueue:
    """Create the job queue selected by ``config.queue_driver``.

    Args:
        config: Reporter configuration
        logger: Structured logger
        metrics: Metrics collector

    Returns:
        JobQueue instance

    Raises:
        ValueError: If the queue driver is not recognized
    """
    driver = config.queue_driver.lower()

    if driver == "thread":
        return ThreadedJobQueue(logger=logger, metrics=metrics)
    elif driver == "rabbitmq":
        from .rabbitmq_queue import RabbitMQJobQueue

        return RabbitMQJobQueue(config.queue_url, logger=logger)
    elif driver == "memory":
        return InMemoryJobQueue()
    else:
        raise ValueError(
            f"Unknown queue driver: {driver}. "
            f"Must be one of: thread, rabbitmq, memory"
        )
