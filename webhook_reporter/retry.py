# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Retry policy shared by HTTP-level and job-level delivery retries."""

import random
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any


@dataclass
class RetryConfig:
    """Configuration for retry behavior.

    Attributes:
        max_attempts: Total attempts including the first one (default: 4)
        base_delay_ms: Base delay in milliseconds (default: 100)
        backoff_factor: Exponential multiplier; 1.0 keeps the delay fixed (default: 1.0)
        max_delay_ms: Maximum delay cap in milliseconds (default: 60000)
        schedule_ms: Explicit per-retry delays; overrides the exponential
            calculation, the last value repeats (default: empty)
        use_jitter: Whether to apply full jitter to delays (default: False)
    """
    max_attempts: int = 4
    base_delay_ms: int = 100
    backoff_factor: float = 1.0
    max_delay_ms: int = 60000
    schedule_ms: list[int] = field(default_factory=list)
    use_jitter: bool = False


@dataclass
class RetryContext:
    """Retry state tracked across attempts.

    Attributes:
        attempt_number: Current attempt number (1-indexed)
        start_time: Timestamp when first attempt started
        last_exception: Last exception encountered
        metadata: Additional context metadata
    """
    attempt_number: int = 1
    start_time: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    last_exception: Exception | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def elapsed_seconds(self) -> float:
        """Calculate elapsed time since first attempt."""
        return (datetime.now(timezone.utc) - self.start_time).total_seconds()


class RetryPolicy:
    """Bounded retry policy with fixed, scheduled or exponential delays."""

    def __init__(
        self,
        config: RetryConfig | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """Initialize retry policy.

        Args:
            config: Retry configuration (uses defaults if None)
            sleep: Sleep function taking seconds, injectable for tests
        """
        self.config = config or RetryConfig()
        self._sleep = sleep

    def calculate_delay_ms(self, attempt_number: int) -> int:
        """Calculate the wait before the given attempt.

        Args:
            attempt_number: Attempt about to be made (1-indexed)

        Returns:
            Delay in milliseconds; always 0 for the first attempt
        """
        if attempt_number <= 1:
            return 0

        if self.config.schedule_ms:
            index = min(attempt_number - 2, len(self.config.schedule_ms) - 1)
            delay_ms = self.config.schedule_ms[index]
        else:
            exponent = attempt_number - 2
            delay_ms = int(self.config.base_delay_ms * (self.config.backoff_factor ** exponent))

        delay_ms = min(delay_ms, self.config.max_delay_ms)

        if self.config.use_jitter:
            delay_ms = random.randint(0, delay_ms)

        return delay_ms

    def should_retry(self, context: RetryContext) -> bool:
        """Return True if another attempt is allowed after ``context.attempt_number``."""
        return context.attempt_number < self.config.max_attempts

    def sleep(self, delay_ms: int) -> None:
        if delay_ms > 0:
            self._sleep(delay_ms / 1000.0)
