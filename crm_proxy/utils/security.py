"""Redaction helpers that keep credentials out of log output."""

from __future__ import annotations

import logging
import re
from typing import Pattern, Sequence, Tuple

REDACTED = "[REDACTED]"

_PATTERNS: Sequence[Tuple[Pattern[str], str]] = (
    (
        re.compile(
            r"-----BEGIN [A-Z ]*PRIVATE KEY-----.*?-----END [A-Z ]*PRIVATE KEY-----",
            re.DOTALL,
        ),
        REDACTED,
    ),
    (re.compile(r"(?i)(bearer\s+)[A-Za-z0-9._~+/!=-]+"), rf"\1{REDACTED}"),
    (
        re.compile(
            r"(?i)([\"']?(?:access_token|accessToken|assertion|password|client_secret|"
            r"refresh_token|session_token)[\"']?\s*[:=]\s*[\"']?)[^\"'&,\s}]+"
        ),
        rf"\1{REDACTED}",
    ),
)


def redact(text: str) -> str:
    """Strip bearer tokens, secrets and key material from ``text``."""
    for pattern, replacement in _PATTERNS:
        text = pattern.sub(replacement, text)
    return text


def mask_token(token: str | None) -> str:
    """Return a short, non-reversible description of a token for debugging."""
    if not token:
        return "<empty>"
    return f"[{len(token)} chars]"


class SanitizingFormatter(logging.Formatter):
    """Formatter that redacts secrets from the rendered message.

    The record is mutated in place so that callers formatting a copy (see
    :class:`crm_proxy.utils.logging.StructuredFormatter`) pick up the
    sanitized message.
    """

    def redact(self, text: str) -> str:
        return redact(text)

    def format(self, record: logging.LogRecord) -> str:
        record.msg = redact(record.getMessage())
        record.args = None
        return super().format(record)
