from __future__ import annotations

import re
from typing import Any, Optional
from urllib.parse import urlparse

_LEADING_INT_RE = re.compile(r"^\s*([+-]?\d+)")


def clean_text(value: Any) -> Optional[str]:
    """Return a trimmed string, or None for missing and blank values."""
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def parse_leading_int(value: Any) -> Optional[int]:
    """Read the integer at the start of ``value`` ("12 people" -> 12)."""
    if value is None:
        return None
    if isinstance(value, int):
        return value
    match = _LEADING_INT_RE.match(str(value))
    if not match:
        return None
    return int(match.group(1))


def is_valid_link(value: Any) -> bool:
    text = clean_text(value)
    if not text or any(ch.isspace() for ch in text):
        return False
    try:
        parsed = urlparse(text)
    except ValueError:
        return False
    return parsed.scheme in {"http", "https"} and bool(parsed.netloc)


def truncate_text(value: str, limit: int, marker: str = "...") -> str:
    if len(value) <= limit:
        return value
    return value[:limit] + marker
