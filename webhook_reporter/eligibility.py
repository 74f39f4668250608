# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Eligibility filter deciding whether an occurrence is reported."""

from .config import ReporterConfig
from .fingerprint import fingerprint
from .logger import Logger
from .models import Occurrence
from .silent_logger import SilentLogger
from .store import DedupStore


def matches_kind(occurrence: Occurrence, patterns: list[str]) -> str | None:
    """Find the first pattern matching the occurrence's kind or categories.

    A pattern matches when it equals the kind identifier or one of its
    categories. A pattern ending in ``.*`` matches every identifier under
    that namespace prefix.

    Args:
        occurrence: The occurrence to classify
        patterns: Kind identifiers or ``namespace.*`` prefixes

    Returns:
        The matching pattern, or None
    """
    identifiers = (occurrence.kind, *occurrence.categories)
    for pattern in patterns:
        if pattern.endswith(".*"):
            prefix = pattern[:-1]
            if any(identifier.startswith(prefix) for identifier in identifiers):
                return pattern
        elif pattern in identifiers:
            return pattern
    return None


class EligibilityFilter:
    """Applies enablement, environment, ignore-list and dedup rules in order."""

    def __init__(
        self,
        config: ReporterConfig,
        store: DedupStore,
        logger: Logger | None = None,
    ):
        self.config = config
        self.store = store
        self.logger = logger or SilentLogger()

    def should_report(self, occurrence: Occurrence) -> bool:
        """Decide whether ``occurrence`` should be reported.

        Checks short-circuit on the first failure. Only the final rate-limit
        step has a side effect: an accepted occurrence records its fingerprint
        in the store for ``cache_minutes``.

        Args:
            occurrence: The occurrence to evaluate

        Returns:
            True if the occurrence should be reported
        """
        config = self.config

        if not config.enabled:
            self.logger.debug("Report skipped: reporter disabled", kind=occurrence.kind)
            return False

        if config.environment not in config.environments:
            self.logger.debug(
                "Report skipped: inactive environment",
                kind=occurrence.kind,
                environment=config.environment,
            )
            return False

        ignored_by = matches_kind(occurrence, config.ignore)
        if ignored_by is not None:
            self.logger.debug(
                "Report skipped: ignored exception kind",
                kind=occurrence.kind,
                pattern=ignored_by,
            )
            return False

        if config.rate_limiting.enabled:
            hash_tag = fingerprint(occurrence.kind, occurrence.file, occurrence.line)
            if self.store.has(hash_tag):
                self.logger.debug(
                    "Report skipped: duplicate within rate limit window",
                    fingerprint=hash_tag,
                )
                return False
            self.store.put(hash_tag, config.rate_limiting.cache_minutes * 60)

        return True
