"""RFC 3339 timestamps as used by Atom feeds and commit messages."""

from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import Optional

FETCHED_AT_FORMAT = "%Y-%m-%dT%H:%M:%SZ"

_SECONDS_FRACTION = re.compile(r"(\d{2}:\d{2}:\d{2})\.(\d+)")


def _microseconds(match: re.Match) -> str:
    return f"{match.group(1)}.{match.group(2)[:6].ljust(6, '0')}"


def parse_rfc3339(value: str) -> datetime:
    """Parse an RFC 3339 timestamp into an aware datetime.

    ``datetime.fromisoformat`` on Python 3.10 only takes 3 or 6 digit
    fractions and an uppercase ``T``, so both are normalised first.
    Fractions finer than a microsecond are truncated.

    Raises:
        ValueError: if the value is not a valid timestamp or has no offset.
    """
    text = value.strip()
    if text[10:11] in {"t", " "}:
        text = f"{text[:10]}T{text[11:]}"
    if text[-1:] in {"Z", "z"}:
        text = text[:-1] + "+00:00"
    text = _SECONDS_FRACTION.sub(_microseconds, text, count=1)
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        raise ValueError(f"Timestamp has no UTC offset: {value!r}")
    return parsed


def format_fetched_at(now: Optional[datetime] = None) -> str:
    now = now or datetime.now(timezone.utc)
    return now.astimezone(timezone.utc).strftime(FETCHED_AT_FORMAT)
