# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Hooks connecting the host application's error sources to a reporter."""

import logging
import sys
import threading

from .reporter import ErrorReporter

REPORTER_LOGGER_PREFIX = "webhook_reporter"


class ReportingHandler(logging.Handler):
    """Logging handler reporting records that carry an exception.

    Only records at ``level`` or above with ``exc_info`` are reported. Records
    from the reporter's own loggers are skipped, and a per-thread guard stops
    a report from recursing through the logging it triggers.
    """

    def __init__(self, reporter: ErrorReporter, level: int = logging.ERROR):
        super().__init__(level=level)
        self.reporter = reporter
        self._local = threading.local()

    def emit(self, record: logging.LogRecord) -> None:
        if not record.exc_info or record.exc_info[1] is None:
            return
        if record.name.startswith(REPORTER_LOGGER_PREFIX):
            return
        if getattr(self._local, "active", False):
            return

        self._local.active = True
        try:
            self.reporter.report(
                record.exc_info[1],
                context={"logger": record.name, "log_message": record.getMessage()},
            )
        except Exception:
            self.handleError(record)
        finally:
            self._local.active = False


def install_excepthook(reporter: ErrorReporter) -> None:
    """Report uncaught exceptions before the previous hooks run.

    Chains both ``sys.excepthook`` and ``threading.excepthook``.
    """
    previous_hook = sys.excepthook
    previous_thread_hook = threading.excepthook

    def _excepthook(exc_type, exc_value, exc_traceback):
        if exc_value is not None:
            reporter.report(exc_value, context={"uncaught": True})
        previous_hook(exc_type, exc_value, exc_traceback)

    def _thread_excepthook(args):
        if args.exc_value is not None:
            thread_name = args.thread.name if args.thread is not None else None
            reporter.report(args.exc_value, context={"uncaught": True, "thread": thread_name})
        previous_thread_hook(args)

    sys.excepthook = _excepthook
    threading.excepthook = _thread_excepthook
