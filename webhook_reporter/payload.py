# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Payload builder turning an occurrence into a webhook report."""

import json
import os
import platform
from collections.abc import Callable, Mapping
from datetime import datetime, timezone
from typing import Any
from urllib.parse import urlparse

from .config import ReporterConfig
from .fingerprint import fingerprint
from .models import Occurrence, ReportPayload, RequestContext, StackFrame

MASK = "***MASKED***"
CIRCULAR = "<circular>"
TITLE_MESSAGE_LIMIT = 80
ELLIPSIS = "..."


def truncate(text: str, limit: int = TITLE_MESSAGE_LIMIT) -> str:
    """Cut ``text`` to ``limit`` characters, marking the cut with an ellipsis."""
    if len(text) <= limit:
        return text
    return text[:limit].rstrip() + ELLIPSIS


def mask_sensitive(data: Any, sensitive_keys: list[str], _seen: frozenset[int] = frozenset()) -> Any:
    """Return a copy of ``data`` with sensitive values replaced by a mask.

    Keys are matched exactly and case-sensitively at every nesting level of
    mappings and lists. Circular references are replaced with "<circular>".

    Args:
        data: Request data (mapping, list or scalar)
        sensitive_keys: Keys whose values must not leave the process

    Returns:
        Masked copy of the data
    """
    if not isinstance(data, (Mapping, list, tuple)):
        return data
    if id(data) in _seen:
        return CIRCULAR
    seen = _seen | {id(data)}
    if isinstance(data, Mapping):
        return {
            key: MASK if key in sensitive_keys else mask_sensitive(value, sensitive_keys, seen)
            for key, value in data.items()
        }
    return [mask_sensitive(item, sensitive_keys, seen) for item in data]


def format_frame(index: int, frame: StackFrame) -> str:
    enclosing = frame.enclosing_type or ""
    operator = (frame.call_operator or ".") if frame.enclosing_type else ""
    return (
        f"#{index} {frame.file or 'unknown'}({frame.line or 0}): "
        f"{enclosing}{operator}{frame.function or 'unknown'}()"
    )


def json_safe(data: Any, _seen: frozenset[int] = frozenset()) -> Any:
    """Return a copy of ``data`` that json.dumps accepts.

    Mapping keys become strings, sets and tuples become lists, circular
    references become "<circular>" and anything else unknown is left for the
    encoder's ``default=str``.
    """
    if isinstance(data, (Mapping, list, tuple, set, frozenset)):
        if id(data) in _seen:
            return CIRCULAR
        seen = _seen | {id(data)}
        if isinstance(data, Mapping):
            return {
                key if isinstance(key, str) else str(key): json_safe(value, seen)
                for key, value in data.items()
            }
        return [json_safe(item, seen) for item in data]
    return data


def _dump_json(data: Any) -> str:
    try:
        return json.dumps(data, indent=4, default=str, ensure_ascii=False)
    except (TypeError, ValueError):
        pass
    try:
        return json.dumps(json_safe(data), indent=4, default=str, ensure_ascii=False)
    except (TypeError, ValueError):
        return repr(data)


class PayloadBuilder:
    """Builds a ReportPayload from an occurrence and the configuration.

    ``build`` is pure apart from reading the clock; missing optional fields are
    rendered as "N/A" or "unknown" placeholders rather than raising.
    """

    def __init__(
        self,
        config: ReporterConfig,
        clock: Callable[[], datetime] | None = None,
    ):
        """Initialize payload builder.

        Args:
            config: Reporter configuration
            clock: Source of the current UTC time (defaults to datetime.now(timezone.utc))
        """
        self.config = config
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def build(self, occurrence: Occurrence) -> ReportPayload:
        """Format an occurrence into a webhook payload.

        Args:
            occurrence: The eligible occurrence

        Returns:
            ReportPayload ready for delivery
        """
        return ReportPayload(
            repository=self.repository_name(),
            issue_title=self.format_title(occurrence),
            issue_tags=self.generate_tags(occurrence),
            issue_message=self.format_message(occurrence),
        )

    def repository_name(self) -> str:
        """Return the configured repository, or one derived from the app URL host."""
        if self.config.repository:
            return self.config.repository

        host = urlparse(self.config.app_url).hostname if self.config.app_url else None
        if not host:
            return "unknown"
        return host.replace(".", "-")

    def format_title(self, occurrence: Occurrence) -> str:
        return (
            f"{occurrence.short_kind}: {truncate(occurrence.message)} "
            f"({os.path.basename(occurrence.file)} line {occurrence.line})"
        )

    def generate_tags(self, occurrence: Occurrence) -> list[str]:
        """Return base tags plus configured tags, deduplicated in first-seen order."""
        tags = [
            "bug",
            "error",
            fingerprint(occurrence.kind, occurrence.file, occurrence.line),
            occurrence.short_kind.lower(),
            *self.config.additional_tags,
        ]
        return list(dict.fromkeys(tags))

    def format_stack_trace(self, occurrence: Occurrence) -> str:
        frames = occurrence.frames[: max(self.config.stack_trace_lines, 0)]
        return "\n".join(format_frame(index, frame) for index, frame in enumerate(frames))

    def format_request_data(self, request: RequestContext | None) -> str:
        if request is None:
            return "**Running in Console**\n"

        data = mask_sensitive(dict(request.data), self.config.sensitive_keys)
        return (
            f"**URL:** {request.url or 'N/A'}\n"
            f"**Method:** {request.method or 'N/A'}\n"
            f"**IP:** {request.ip or 'N/A'}\n"
            f"**User Agent:** {request.user_agent or 'N/A'}\n"
            f"**User:** {request.user or 'Guest'}\n"
            f"**Request Data:**\n```json\n{_dump_json(data) if data else 'N/A'}\n```\n"
        )

    def format_message(self, occurrence: Occurrence) -> str:
        message = (
            f"**Error:** {occurrence.message}\n\n"
            f"**File:** {occurrence.file}\n"
            f"**Line:** {occurrence.line}\n\n"
            f"**Stack Trace:**\n```\n{self.format_stack_trace(occurrence)}\n```\n\n"
        )

        if self.config.include_request_data:
            message += self.format_request_data(occurrence.request)

        if occurrence.context:
            message += f"\n\n**Context:**\n```json\n{_dump_json(dict(occurrence.context))}\n```"

        message += (
            f"\n\n**Environment:** {self.config.environment or 'unknown'}\n"
            f"**Python Version:** {platform.python_version()}\n"
            f"**App Version:** {self.config.app_version or 'unknown'}\n"
            f"**Time:** {self._clock().strftime('%Y-%m-%d %H:%M:%S')} UTC"
        )
        return message
