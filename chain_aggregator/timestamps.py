"""Timestamp parsing for node responses."""
from __future__ import annotations

import re
from datetime import datetime, timedelta, timezone
from typing import Any

# Tendermint emits nanosecond fractions; datetime keeps microseconds.
_FRACTION_RE = re.compile(r"\.(\d{6})\d+")


def parse_timestamp(value: Any) -> datetime | None:
    """Parse an RFC 3339 string or a millisecond epoch into an aware datetime."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, (int, float)) or (isinstance(value, str) and value.isdigit()):
        return datetime.fromtimestamp(int(value) / 1000, tz=timezone.utc)
    text = _FRACTION_RE.sub(r".\1", str(value).strip())
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def blocks_from_now(
    blocks: int, block_time_seconds: int, now: datetime | None = None
) -> datetime:
    """Wall-clock estimate of when a block ``blocks`` ahead will be produced."""
    return (now or utc_now()) + timedelta(seconds=blocks * block_time_seconds)
