# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Tests for retry policy implementation."""

from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

from webhook_reporter.retry import RetryConfig, RetryContext, RetryPolicy


class TestRetryConfig:
    """Tests for RetryConfig."""

    def test_default_config(self):
        """Test default configuration values."""
        config = RetryConfig()
        assert config.max_attempts == 4
        assert config.base_delay_ms == 100
        assert config.backoff_factor == 1.0
        assert config.max_delay_ms == 60000
        assert config.schedule_ms == []
        assert config.use_jitter is False


class TestRetryContext:
    """Tests for RetryContext."""

    def test_initial_state(self):
        context = RetryContext()
        assert context.attempt_number == 1
        assert context.last_exception is None
        assert context.metadata == {}

    def test_elapsed_seconds(self):
        past_time = datetime.now(timezone.utc) - timedelta(seconds=5)
        context = RetryContext(start_time=past_time)
        assert 4.5 <= context.elapsed_seconds() <= 5.5


class TestRetryPolicy:
    """Tests for RetryPolicy."""

    def test_first_attempt_has_no_delay(self):
        assert RetryPolicy(RetryConfig(base_delay_ms=500)).calculate_delay_ms(1) == 0

    def test_fixed_delay(self):
        """Backoff factor 1 keeps the same delay for every retry."""
        policy = RetryPolicy(RetryConfig(base_delay_ms=250))
        assert [policy.calculate_delay_ms(n) for n in range(2, 6)] == [250, 250, 250, 250]

    def test_exponential_delay(self):
        policy = RetryPolicy(RetryConfig(base_delay_ms=100, backoff_factor=2.0))
        assert [policy.calculate_delay_ms(n) for n in range(2, 6)] == [100, 200, 400, 800]

    def test_max_delay_cap(self):
        policy = RetryPolicy(RetryConfig(base_delay_ms=1000, backoff_factor=10.0, max_delay_ms=5000))
        assert policy.calculate_delay_ms(4) == 5000

    def test_schedule_last_value_repeats(self):
        policy = RetryPolicy(RetryConfig(schedule_ms=[10000, 30000, 60000]))
        assert [policy.calculate_delay_ms(n) for n in range(2, 7)] == [10000, 30000, 60000, 60000, 60000]

    def test_jitter_bounded(self):
        policy = RetryPolicy(RetryConfig(base_delay_ms=1000, use_jitter=True))
        for _ in range(50):
            assert 0 <= policy.calculate_delay_ms(2) <= 1000

    def test_should_retry(self):
        policy = RetryPolicy(RetryConfig(max_attempts=3))
        assert policy.should_retry(RetryContext(attempt_number=1)) is True
        assert policy.should_retry(RetryContext(attempt_number=2)) is True
        assert policy.should_retry(RetryContext(attempt_number=3)) is False

    def test_sleep_converts_to_seconds(self):
        sleep = MagicMock()
        policy = RetryPolicy(sleep=sleep)
        policy.sleep(1500)
        policy.sleep(0)
        sleep.assert_called_once_with(1.5)
