# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Structured logger interface for the reporting pipeline.

The pipeline never formats data into the message text. Structured fields go
in keyword arguments instead, most commonly:

    hash / fingerprint   the occurrence fingerprint ("hash-1a2b3c4d")
    kind                 exception kind of a rejected occurrence
    status, body         final webhook response status code and body
    response             parsed webhook response on success
    payload              the full wire payload when a report is given up on
    job_id, job_attempts deferred job identity and attempt count
"""

from abc import ABC, abstractmethod
from typing import Any


class Logger(ABC):
    """Logger accepting a message plus structured keyword fields."""

    @abstractmethod
    def info(self, message: str, **kwargs: Any) -> None:
        """Log a successful delivery or other normal progress."""
        pass

    @abstractmethod
    def warning(self, message: str, **kwargs: Any) -> None:
        """Log a recoverable problem.

        Used for a missing webhook URL, a failed attempt that will be
        retried, and dedup store outages.
        """
        pass

    @abstractmethod
    def error(self, message: str, **kwargs: Any) -> None:
        """Log a report that could not be delivered.

        Args:
            message: The log message
            **kwargs: Structured fields, typically ``status``, ``body`` and ``payload``
        """
        pass

    @abstractmethod
    def debug(self, message: str, **kwargs: Any) -> None:
        """Log why an occurrence was filtered out."""
        pass

    @abstractmethod
    def exception(self, message: str, **kwargs: Any) -> None:
        """Log an error-level message with the active exception's traceback.

        Only valid inside an ``except`` block.
        """
        pass
