# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Delivery engine posting report payloads to the webhook."""

import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

import requests

from .exceptions import WebhookDeliveryError
from .logger import Logger
from .metrics import MetricsCollector, NoOpMetricsCollector
from .models import DeliverySettings, ReportPayload
from .retry import RetryConfig, RetryContext, RetryPolicy
from .silent_logger import SilentLogger

SECRET_HEADER = "X-Laravel-Secret"
DEGRADED_THRESHOLD = 3


@dataclass
class DeliveryResult:
    """Outcome of a successful delivery."""
    status_code: int
    body: Any
    attempts: int


def is_success(status_code: int) -> bool:
    return 200 <= status_code < 300


def _response_body(response: requests.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text


class WebhookDelivery:
    """Sends payloads over HTTP with timeout, fixed-delay retries and a secret header.

    ``send`` is the fire-and-forget entry point and never raises. ``deliver``
    raises WebhookDeliveryError once every HTTP attempt has failed, so that
    queue workers can apply their own retry schedule on top.
    """

    def __init__(
        self,
        settings: DeliverySettings,
        logger: Logger | None = None,
        metrics: MetricsCollector | None = None,
        session: requests.Session | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """Initialize delivery engine.

        Args:
            settings: Webhook URL, secret, timeout and retry settings
            logger: Structured logger for success/failure records
            metrics: Metrics collector for delivery accounting
            session: HTTP session (a new requests.Session by default)
            sleep: Sleep function taking seconds, injectable for tests
        """
        self.settings = settings
        self.logger = logger or SilentLogger()
        self.metrics = metrics or NoOpMetricsCollector()
        self.session = session or requests.Session()
        self.policy = RetryPolicy(
            RetryConfig(
                max_attempts=1 + max(settings.retry_times, 0),
                base_delay_ms=settings.retry_delay,
                backoff_factor=1.0,
                use_jitter=False,
            ),
            sleep=sleep,
        )
        self.consecutive_failures = 0
        self.last_error: str | None = None

    @property
    def is_degraded(self) -> bool:
        """True after several consecutive sends have failed."""
        return self.consecutive_failures >= DEGRADED_THRESHOLD

    def _headers(self) -> dict[str, str]:
        if self.settings.secret_key:
            return {SECRET_HEADER: self.settings.secret_key}
        return {}

    def _post(self, payload: ReportPayload) -> requests.Response:
        self.metrics.increment("webhook_reporter_delivery_attempts_total")
        return self.session.post(
            self.settings.webhook_url,
            json=payload.to_wire(),
            headers=self._headers(),
            timeout=self.settings.timeout,
        )

    def deliver(self, payload: ReportPayload) -> DeliveryResult:
        """Post ``payload`` to the webhook, retrying on failure.

        A transport error or a non-2xx response counts as a failed attempt.

        Args:
            payload: The report to send

        Returns:
            DeliveryResult for the successful attempt

        Raises:
            WebhookDeliveryError: If the webhook URL is empty or every attempt failed
        """
        if not self.settings.webhook_url:
            raise WebhookDeliveryError("Webhook URL is not configured")

        context = RetryContext(metadata={"fingerprint": payload.fingerprint})
        while True:
            response = None
            try:
                response = self._post(payload)
            except requests.RequestException as e:
                context.last_exception = e
            else:
                if is_success(response.status_code):
                    self.metrics.observe(
                        "webhook_reporter_delivery_latency_ms",
                        context.elapsed_seconds() * 1000,
                    )
                    return DeliveryResult(
                        status_code=response.status_code,
                        body=_response_body(response),
                        attempts=context.attempt_number,
                    )

            if not self.policy.should_retry(context):
                break

            delay_ms = self.policy.calculate_delay_ms(context.attempt_number + 1)
            self.logger.debug(
                "Webhook attempt failed, retrying",
                attempt=context.attempt_number,
                delay_ms=delay_ms,
                status=response.status_code if response is not None else None,
            )
            self.policy.sleep(delay_ms)
            context.attempt_number += 1

        if response is not None:
            raise WebhookDeliveryError(
                f"Webhook responded with HTTP {response.status_code}",
                status_code=response.status_code,
                body=response.text,
                attempts=context.attempt_number,
            )
        raise WebhookDeliveryError(
            str(context.last_exception),
            attempts=context.attempt_number,
        ) from context.last_exception

    def send(self, payload: ReportPayload) -> bool:
        """Deliver ``payload`` and log the outcome; never raises.

        Args:
            payload: The report to send

        Returns:
            True if the webhook accepted the report
        """
        if not self.settings.webhook_url:
            self.logger.warning("Error Reporter: Webhook URL is not configured")
            return False

        try:
            result = self.deliver(payload)
        except WebhookDeliveryError as e:
            self._record_failure(str(e))
            if e.status_code is not None:
                self.logger.error(
                    "Failed to report error",
                    status=e.status_code,
                    body=e.body,
                    attempts=e.attempts,
                )
            else:
                self.logger.error(f"Error reporter exception: {e}", attempts=e.attempts)
            return False
        except Exception as e:
            self._record_failure(str(e))
            self.logger.error(f"Error reporter exception: {e}")
            return False

        self.consecutive_failures = 0
        self.metrics.increment("webhook_reporter_delivery_success_total")
        self.logger.info(
            "Error reported successfully",
            hash=payload.fingerprint,
            response=result.body,
        )
        return True

    def _record_failure(self, error: str) -> None:
        self.consecutive_failures += 1
        self.last_error = error
        self.metrics.increment("webhook_reporter_delivery_failure_total")
