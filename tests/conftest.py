# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Shared fixtures for webhook_reporter tests."""

from unittest.mock import MagicMock

import pytest
import requests

from webhook_reporter import (
    InMemoryDedupStore,
    NoOpMetricsCollector,
    ReporterConfig,
    SilentLogger,
)
from tests.helpers import WEBHOOK_URL, FakeClock, make_response


@pytest.fixture
def config():
    """Default configuration with a webhook URL and no HTTP retry delay."""
    config = ReporterConfig(webhook_url=WEBHOOK_URL, environment="production")
    config.http.retry_delay = 0
    return config


@pytest.fixture
def logger():
    return SilentLogger()


@pytest.fixture
def metrics():
    return NoOpMetricsCollector()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store(clock):
    return InMemoryDedupStore(clock=clock)


@pytest.fixture
def session():
    """requests.Session mock answering every POST with 200."""
    session = MagicMock(spec=requests.Session)
    session.post.return_value = make_response(200, json_body={"issue": 1})
    return session
