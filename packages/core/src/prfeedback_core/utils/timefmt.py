"""Human-readable relative times and durations.

All functions are pure: the caller passes ``now`` so that rendering the same
report twice at the same instant yields identical output.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

_MINUTE = 60
_HOUR = 60 * _MINUTE
_DAY = 24 * _HOUR


def parse_timestamp(value: str | None) -> datetime | None:
    """Parse an RFC 3339 timestamp, returning None when absent or malformed.

    gh reports checks that never started with the zero instant
    (``0001-01-01T00:00:00Z``); that is treated as absent too.
    """
    if not value:
        return None
    text = value.strip()
    if text.endswith("Z") or text.endswith("z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    if parsed.year == 1:
        return None
    return parsed


def _plural(count: int, unit: str) -> str:
    if count == 1:
        return f"1 {unit} ago"
    return f"{count} {unit}s ago"


def format_relative(now: datetime, timestamp: datetime) -> str:
    """Describe how long before ``now`` the ``timestamp`` was, e.g. "3 hours ago"."""
    seconds = int((now - timestamp).total_seconds())
    if seconds < _MINUTE:
        return "just now"
    if seconds < _HOUR:
        return _plural(seconds // _MINUTE, "minute")
    if seconds < _DAY:
        return _plural(seconds // _HOUR, "hour")
    days = seconds // _DAY
    if days < 30:
        return _plural(days, "day")
    if days < 365:
        return _plural(days // 30, "month")
    return _plural(days // 365, "year")


def format_duration(elapsed: timedelta) -> str:
    """Format an elapsed time as "45s", "2m 5s" or "2h 2m" (truncating, never rounding)."""
    seconds = int(elapsed.total_seconds())
    if seconds < _MINUTE:
        return f"{seconds}s"
    if seconds < _HOUR:
        return f"{seconds // _MINUTE}m {seconds % _MINUTE}s"
    return f"{seconds // _HOUR}h {(seconds % _HOUR) // _MINUTE}m"
