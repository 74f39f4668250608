# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Data models for error occurrences, report payloads and delivery jobs."""

import traceback
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any
from urllib.parse import quote
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field

FINGERPRINT_PREFIX = "hash-"


def kind_of(error_type: type) -> str:
    """Return the stable kind identifier for an exception class.

    Builtin exceptions use their bare name (``KeyError``); everything else is
    qualified with its module (``myapp.errors.PaymentDeclined``).
    """
    if error_type.__module__ == "builtins":
        return error_type.__qualname__
    return f"{error_type.__module__}.{error_type.__qualname__}"


@dataclass(frozen=True)
class StackFrame:
    """One entry of a captured stack trace."""
    file: str
    line: int
    function: str
    enclosing_type: str | None = None
    call_operator: str | None = None

    @classmethod
    def from_frame(cls, frame: Any, lineno: int) -> "StackFrame":
        """Build a StackFrame from a live Python frame object.

        ``co_qualname`` (``Class.method``) is split into the enclosing type
        and the function name; functions nested in other functions keep no
        enclosing type.
        """
        code = frame.f_code
        qualname = getattr(code, "co_qualname", code.co_name)
        enclosing, _, function = qualname.rpartition(".")
        if not enclosing or enclosing.endswith("<locals>"):
            return cls(file=code.co_filename, line=lineno, function=function)
        return cls(
            file=code.co_filename,
            line=lineno,
            function=function,
            enclosing_type=enclosing,
            call_operator=".",
        )


@dataclass(frozen=True)
class RequestContext:
    """Request-serving context an occurrence originated from."""
    url: str | None = None
    method: str | None = None
    ip: str | None = None
    user_agent: str | None = None
    user: str | None = None
    data: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def from_wsgi_environ(
        cls,
        environ: Mapping[str, Any],
        data: Mapping[str, Any] | None = None,
        user: str | None = None,
    ) -> "RequestContext":
        """Build a request context from a WSGI environ.

        Args:
            environ: WSGI environ mapping
            data: Parsed request data (form/JSON body, query parameters)
            user: Authenticated user identifier, if any

        Returns:
            RequestContext instance
        """
        scheme = environ.get("wsgi.url_scheme", "http")
        host = environ.get("HTTP_HOST") or environ.get("SERVER_NAME")
        url = None
        if host:
            path = quote(environ.get("SCRIPT_NAME", "") + environ.get("PATH_INFO", ""))
            url = f"{scheme}://{host}{path}"
            if environ.get("QUERY_STRING"):
                url += f"?{environ['QUERY_STRING']}"

        forwarded = environ.get("HTTP_X_FORWARDED_FOR", "")
        ip = forwarded.split(",")[0].strip() if forwarded else environ.get("REMOTE_ADDR")

        return cls(
            url=url,
            method=environ.get("REQUEST_METHOD"),
            ip=ip or None,
            user_agent=environ.get("HTTP_USER_AGENT"),
            user=user,
            data=dict(data or {}),
        )


@dataclass(frozen=True)
class Occurrence:
    """Immutable capture of one runtime error.

    Attributes:
        kind: Stable kind identifier (see ``kind_of``)
        message: Human readable error message
        file: Source file of the raise point
        line: Source line of the raise point
        frames: Stack frames, innermost (raise point) first
        categories: Kind identifiers of every ancestor, most specific first
        context: Caller supplied context data
        request: Request context, None outside request handling
    """
    kind: str
    message: str
    file: str
    line: int
    frames: tuple[StackFrame, ...] = ()
    categories: tuple[str, ...] = ()
    context: Mapping[str, Any] = field(default_factory=dict)
    request: RequestContext | None = None

    @property
    def short_kind(self) -> str:
        return self.kind.rsplit(".", 1)[-1]

    @classmethod
    def from_exception(
        cls,
        error: BaseException,
        context: Mapping[str, Any] | None = None,
        request: RequestContext | None = None,
    ) -> "Occurrence":
        """Capture an exception as an Occurrence.

        Args:
            error: The exception to capture
            context: Optional caller supplied context
            request: Optional request context

        Returns:
            Occurrence describing the exception at its raise point
        """
        walked = list(traceback.walk_tb(error.__traceback__))
        frames = tuple(StackFrame.from_frame(frame, lineno) for frame, lineno in reversed(walked))

        if frames:
            file, line = frames[0].file, frames[0].line
        else:
            file, line = "unknown", 0

        error_type = type(error)
        categories = tuple(
            kind_of(base) for base in error_type.__mro__[1:] if base is not object
        )

        return cls(
            kind=kind_of(error_type),
            message=str(error),
            file=file,
            line=line,
            frames=frames,
            categories=categories,
            context=dict(context or {}),
            request=request,
        )


class ReportPayload(BaseModel):
    """Formatted report ready for transmission to the webhook."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    repository: str
    issue_title: str = Field(..., alias="issueTitle")
    issue_tags: list[str] = Field(default_factory=list, alias="issueTags")
    issue_message: str = Field(..., alias="issueMessage")

    @property
    def fingerprint(self) -> str:
        """Return the fingerprint tag, or "unknown" if none is present."""
        for tag in self.issue_tags:
            if tag.startswith(FINGERPRINT_PREFIX):
                return tag
        return "unknown"

    def to_wire(self) -> dict[str, Any]:
        """Return the JSON body sent to the webhook."""
        return self.model_dump(by_alias=True)


class DeliverySettings(BaseModel):
    """Snapshot of the configuration needed to send one payload."""

    model_config = ConfigDict(frozen=True)

    webhook_url: str = ""
    secret_key: str | None = None
    timeout: int = 10
    retry_times: int = 3
    retry_delay: int = Field(default=100, description="Delay between HTTP attempts in milliseconds")


class DeliveryJob(BaseModel):
    """Deferred unit of work handed to a job queue."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    job_id: str = Field(default_factory=lambda: uuid4().hex)
    payload: ReportPayload
    settings: DeliverySettings
    queue_name: str = "default"
    tries: int = 3
    backoff: list[int] = Field(
        default_factory=lambda: [10, 30, 60],
        description="Seconds to wait before each retry; the last value repeats",
    )
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True)

    @classmethod
    def from_json(cls, data: str | bytes) -> "DeliveryJob":
        return cls.model_validate_json(data)
