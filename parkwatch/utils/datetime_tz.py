from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def ensure_utc(dt: datetime) -> datetime:
    """Normalize `dt` to UTC.

    Naive values are assumed to already be UTC (SQLite drops the offset of
    timezone-aware columns on the way back).
    """
    if dt.tzinfo is None or dt.tzinfo.utcoffset(dt) is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def to_iso_utc(dt: datetime | None) -> str | None:
    """Render as ISO-8601 UTC with milliseconds and a trailing 'Z'."""
    if dt is None:
        return None
    text = ensure_utc(dt).isoformat(timespec="milliseconds")
    return text.replace("+00:00", "Z")
