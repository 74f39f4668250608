# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Exception types raised inside the reporting pipeline.

None of these ever propagate out of ``ErrorReporter.report``; they travel
between pipeline components and end up in a log record.
"""

from typing import Any


class ReporterError(Exception):
    """Base exception for webhook reporter errors."""
    pass


class ConfigurationError(ReporterError):
    """Reporter is disabled or missing required settings such as the webhook URL."""
    pass


class WebhookDeliveryError(ReporterError):
    """Webhook delivery failed after all HTTP-level attempts.

    Attributes:
        status_code: Final HTTP status, or None for transport failures
        body: Final response body, if any
        attempts: Number of HTTP attempts made
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        body: str | None = None,
        attempts: int = 0,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.body = body
        self.attempts = attempts


class JobExhaustedError(ReporterError):
    """A deferred delivery job failed on every queue-level attempt."""

    def __init__(self, message: str, job: Any, last_error: Exception | None = None):
        """Initialize job exhausted error.

        Args:
            message: Error message
            job: The DeliveryJob that was abandoned
            last_error: Exception raised by the final attempt
        """
        super().__init__(message)
        self.job = job
        self.last_error = last_error
