# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Command line tool for checking the reporter configuration and webhook.

Usage:
    webhook-reporter test             # post a connectivity probe
    webhook-reporter test --dry-run   # build and print a payload, send nothing
    webhook-reporter test --real      # report a test exception end to end
"""

import argparse
import hashlib
import json
import sys
import time
from datetime import datetime, timezone

import requests

from .config import ReporterConfig, load_config
from .delivery import SECRET_HEADER, is_success
from .exceptions import ConfigurationError
from .models import Occurrence
from .payload import PayloadBuilder
from .reporter import create_reporter

PROBE_TIMEOUT = 10


def _yes_no(flag: bool, yes: str = "✓ Yes", no: str = "✗ No") -> str:
    return yes if flag else no


def print_config_table(config: ReporterConfig) -> None:
    rows = [
        ("Enabled", _yes_no(config.enabled)),
        ("Webhook URL", config.webhook_url or "✗ Not configured"),
        ("Repository", config.repository or "Auto-detect from APP_URL"),
        ("Secret Key", _yes_no(bool(config.secret_key), "✓ Configured", "✗ Not set")),
        ("Use Queue", _yes_no(config.use_queue)),
        ("Rate Limiting", _yes_no(config.rate_limiting.enabled, "✓ Enabled", "✗ Disabled")),
        ("Environment", config.environment),
        ("Active Environments", ", ".join(config.environments)),
    ]
    width = max(len(name) for name, _ in rows)
    print(f"{'Configuration'.ljust(width)}  Value")
    print(f"{'-' * width}  {'-' * 5}")
    for name, value in rows:
        print(f"{name.ljust(width)}  {value}")
    print()


def build_probe_payload(config: ReporterConfig) -> dict:
    """Return the connectivity probe body posted by the default test mode."""
    probe_hash = hashlib.md5(str(time.time()).encode("utf-8"), usedforsecurity=False).hexdigest()[:4]
    now = datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S")
    return {
        "repository": PayloadBuilder(config).repository_name(),
        "issueTitle": "Test Error: Connection test from webhook-reporter test",
        "issueTags": ["test", "error-reporter", f"hash-test{probe_hash}"],
        "issueMessage": (
            "**Test Error**\n\n"
            "This is a test message from the webhook error reporter.\n\n"
            f"**Time:** {now}\n"
            f"**Environment:** {config.environment}\n\n"
            "*This is a test message and can be safely ignored.*"
        ),
    }


def run_dry_run(config: ReporterConfig) -> None:
    print("Generating test payload...")
    try:
        raise Exception("This is a test exception from webhook-reporter test command")
    except Exception as e:
        occurrence = Occurrence.from_exception(e, context={"test": True})

    payload = PayloadBuilder(config).build(occurrence)
    print("Generated payload:")
    print(json.dumps(payload.to_wire(), indent=4, ensure_ascii=False))


def run_probe(config: ReporterConfig, session: requests.Session | None = None) -> None:
    print("Testing webhook connection...")
    session = session or requests.Session()
    headers = {SECRET_HEADER: config.secret_key} if config.secret_key else {}

    try:
        response = session.post(
            config.webhook_url,
            json=build_probe_payload(config),
            headers=headers,
            timeout=PROBE_TIMEOUT,
        )
    except requests.RequestException as e:
        print(f"✗ Connection failed: {e}")
        return

    if is_success(response.status_code):
        print("✓ Webhook test successful!")
        print(f"Response: {response.text}")
    else:
        print("✗ Webhook test failed!")
        print(f"Status: {response.status_code}")
        print(f"Response: {response.text}")


def run_real(config: ReporterConfig) -> None:
    print("Sending real test exception to webhook...")
    reporter = create_reporter(config)
    try:
        raise RuntimeError(
            "Test exception from webhook error reporter - "
            "This is a test error that can be safely ignored."
        )
    except RuntimeError as e:
        reporter.report(e, context={"source": "test_command", "test": True})
    finally:
        reporter.close()

    print("✓ Test exception sent to webhook!")
    print("Check your webhook endpoint for the error report.")


def parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="webhook-reporter",
        description="Webhook error reporter tools.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    test_parser = subparsers.add_parser(
        "test",
        help="Test the error reporter configuration and webhook",
    )
    mode = test_parser.add_mutually_exclusive_group()
    mode.add_argument(
        "--real",
        action="store_true",
        help="Send a real test exception to the webhook",
    )
    mode.add_argument(
        "--dry-run",
        action="store_true",
        help="Test the configuration without sending",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None, config: ReporterConfig | None = None) -> int:
    args = parse_args(sys.argv[1:] if argv is None else argv)
    config = config or load_config()

    print("Testing Error Reporter Configuration...")
    print()
    print_config_table(config)

    try:
        config.validate()
    except ConfigurationError as e:
        print(str(e), file=sys.stderr)
        return 1

    if args.dry_run:
        run_dry_run(config)
    elif args.real:
        run_real(config)
    else:
        run_probe(config)

    return 0


if __name__ == "__main__":
    sys.exit(main())
