# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Fingerprint generation for deduplication and report tagging."""

import hashlib

from .models import FINGERPRINT_PREFIX

FINGERPRINT_LENGTH = 8


def fingerprint(kind: str, file: str, line: int) -> str:
    """Derive the short identity of an error occurrence.

    The same (kind, file, line) always yields the same fingerprint. The hash
    is truncated, so distinct triples may collide.

    Args:
        kind: Exception kind identifier
        file: Source file of the raise point
        line: Source line of the raise point

    Returns:
        Fingerprint of the form ``hash-`` followed by 8 hex characters
    """
    identifier = f"{kind}:{file}:{line}"
    digest = hashlib.md5(identifier.encode("utf-8"), usedforsecurity=False).hexdigest()
    return FINGERPRINT_PREFIX + digest[:FINGERPRINT_LENGTH]
