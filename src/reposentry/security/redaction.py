"""Redaction utilities for tokens and credentials in logs and CLI output."""

from __future__ import annotations

import re

REDACTED = "[REDACTED]"
# Patterns whose first group is a prefix to keep.
PREFIXED_PATTERNS = [
    re.compile(r"(?i)\b(authorization\s*:\s*(?:bearer|token)\s+)[A-Za-z0-9._:-]+"),
    re.compile(r"(?i)\b(api[-_ ]?key\s*[=:]\s*)[\"']?[A-Za-z0-9._:-]{8,}[\"']?"),
    re.compile(r"(?i)\b(token\s*[=:]\s*)[\"']?[A-Za-z0-9._:-]{8,}[\"']?"),
    re.compile(r"(?i)\b(password\s*[=:]\s*)[\"']?[^\s\"']{4,}[\"']?"),
]
TOKEN_PATTERNS = [
    re.compile(r"\bgh[pousr]_[A-Za-z0-9]{20,}\b"),
    re.compile(r"\bgithub_pat_[A-Za-z0-9_]{20,}\b"),
    re.compile(r"\bsk-[A-Za-z0-9:_-]{16,}\b"),
]
URL_CREDENTIALS = re.compile(r"(?i)\b([a-z][a-z0-9+.-]*://[^:/\s@]+:)[^@\s]+(@)")


def redact_text(value: str) -> str:
    """Redact secrets from a text value."""
    redacted = URL_CREDENTIALS.sub(r"\1" + REDACTED + r"\2", value)
    for pattern in PREFIXED_PATTERNS:
        redacted = pattern.sub(r"\1" + REDACTED, redacted)
    for pattern in TOKEN_PATTERNS:
        redacted = pattern.sub(REDACTED, redacted)
    return redacted
