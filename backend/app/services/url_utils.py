"""Helpers for URLs and free text arriving from clients (bookmarklet, forms)."""

import re
from urllib.parse import unquote

_HTTP_PROTOCOL_RE = re.compile(r"^https?://", re.IGNORECASE)
_MISSING_H_PREFIX_RE = re.compile(r"^ttps://", re.IGNORECASE)


def is_http_url(value: str) -> bool:
    return bool(_HTTP_PROTOCOL_RE.match(value or ""))


def normalize_incoming_url(value: str) -> str:
    """Clean a URL pasted by a user or passed through the bookmarklet.

    - Trims whitespace
    - Percent-decodes once when the value looks encoded
    - Repairs a truncated ``ttps://`` scheme
    """
    trimmed = (value or "").strip()
    if not trimmed:
        return ""

    decoded = trimmed
    if "%" in trimmed:
        try:
            decoded = unquote(trimmed, errors="strict")
        except UnicodeDecodeError:
            decoded = trimmed

    if _MISSING_H_PREFIX_RE.match(decoded):
        return f"h{decoded}"
    return decoded


def sanitize_text(value: str) -> str:
    """Trim and drop angle brackets to avoid obvious markup injection."""
    return value.strip().replace("<", "").replace(">", "")
