# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Deduplication / rate-limit stores.

A store maps a fingerprint to a "recently reported" marker that expires after
a TTL. Absence of a live marker means the fingerprint may be reported again.
"""

import threading
import time
from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any

import redis

from .logger import Logger
from .silent_logger import SilentLogger

KEY_PREFIX = "error_reporter_"


class DedupStore(ABC):
    """Abstract time-bounded presence cache."""

    @abstractmethod
    def has(self, key: str) -> bool:
        """Return True if a live (unexpired) marker exists for ``key``."""
        pass

    @abstractmethod
    def put(self, key: str, ttl_seconds: float) -> None:
        """Record ``key`` as present for ``ttl_seconds``."""
        pass


class InMemoryDedupStore(DedupStore):
    """Thread-safe in-process store with per-entry expiry.

    Expiry is checked lazily on ``has``; expired entries are also swept on
    ``put`` once the store grows past ``max_entries`` so memory stays bounded.

    If the store is still over ``max_entries`` after the sweep, the oldest
    live markers are evicted before their TTL ends. An evicted fingerprint
    reads as absent and may be reported again inside its window; this only
    happens with more than ``max_entries`` distinct fingerprints per window.
    Use RedisDedupStore when that bound is too small.
    """

    def __init__(
        self,
        max_entries: int = 10000,
        clock: Callable[[], float] = time.monotonic,
    ):
        """Initialize in-memory store.

        Args:
            max_entries: Size above which expired entries are swept and the
                oldest live entries evicted
            clock: Monotonic time source in seconds
        """
        self.max_entries = max_entries
        self._clock = clock
        self._lock = threading.Lock()
        self._entries: dict[str, float] = {}

    def has(self, key: str) -> bool:
        with self._lock:
            expires_at = self._entries.get(key)
            if expires_at is None:
                return False
            if expires_at <= self._clock():
                del self._entries[key]
                return False
            return True

    def put(self, key: str, ttl_seconds: float) -> None:
        with self._lock:
            now = self._clock()
            # Re-insert so dict order tracks insertion time for eviction
            self._entries.pop(key, None)
            self._entries[key] = now + ttl_seconds
            if len(self._entries) > self.max_entries:
                self._sweep(now)

    def _sweep(self, now: float) -> None:
        expired = [k for k, expires_at in self._entries.items() if expires_at <= now]
        for k in expired:
            del self._entries[k]

        overflow = len(self._entries) - self.max_entries
        if overflow > 0:
            for k in list(self._entries.keys())[:overflow]:
                del self._entries[k]

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


class RedisDedupStore(DedupStore):
    """Store backed by Redis keys with native expiry.

    Shares deduplication state between processes. Redis expiry guarantees an
    expired marker is never reported as present.
    """

    def __init__(self, client: Any, prefix: str = KEY_PREFIX, logger: Logger | None = None):
        """Initialize Redis store.

        Args:
            client: redis-py compatible client
            prefix: Key namespace prefix
            logger: Structured logger for backend errors
        """
        self.client = client
        self.prefix = prefix
        self.logger = logger or SilentLogger()

    @classmethod
    def from_url(cls, url: str, timeout: float = 5.0, logger: Logger | None = None) -> "RedisDedupStore":
        """Create a store connected to the Redis server at ``url``.

        Args:
            url: Redis URL (redis://host:port/db)
            timeout: Socket connect/read timeout in seconds
            logger: Structured logger for backend errors

        Returns:
            RedisDedupStore instance
        """
        client = redis.from_url(
            url,
            decode_responses=True,
            socket_connect_timeout=timeout,
            socket_timeout=timeout,
            retry_on_timeout=True,
        )
        return cls(client, logger=logger)

    def has(self, key: str) -> bool:
        # An unreachable backend reports nothing as present so errors still flow
        try:
            return bool(self.client.exists(self.prefix + key))
        except redis.RedisError as e:
            self.logger.warning(f"Dedup store lookup failed: {e}", key=key)
            return False

    def put(self, key: str, ttl_seconds: float) -> None:
        # Redis expiry resolution is one second; never store a zero TTL
        try:
            self.client.set(self.prefix + key, "1", ex=max(1, int(ttl_seconds)))
        except redis.RedisError as e:
            self.logger.warning(f"Dedup store write failed: {e}", key=key)


def create_dedup_store(cache_url: str = "", logger: Logger | None = None) -> DedupStore:
    """Create a dedup store.

    Args:
        cache_url: Redis URL for a shared store; empty for in-process state
        logger: Structured logger for backend errors

    Returns:
        DedupStore instance
    """
    if cache_url:
        return RedisDedupStore.from_url(cache_url, logger=logger)
    return InMemoryDedupStore()
