"""
Timestamp utilities for measurement signals.

Measurement timestamps travel on the wire as RFC-3339 strings with
nanosecond precision. Python datetimes carry microseconds, so formatting
pads with zeros and parsing truncates anything finer than a microsecond.
"""

import re
from datetime import datetime, timezone
from typing import Optional

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

_RFC3339_RE = re.compile(
    r"^(?P<base>\d{4}-\d{2}-\d{2}[Tt ]\d{2}:\d{2}:\d{2})"
    r"(?:\.(?P<frac>\d{1,9}))?"
    r"(?P<tz>[Zz]|[+-]\d{2}:\d{2})$"
)


def utc_now() -> datetime:
    """Current wall-clock time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def _as_utc(ts: datetime) -> datetime:
    if ts.tzinfo is None:
        return ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc)


def is_zero_timestamp(ts: Optional[datetime]) -> bool:
    """
    Check whether a timestamp is the zero sentinel.

    None, ``datetime.min`` and the Unix epoch all count as "no timestamp".
    """
    if ts is None:
        return True

    if ts.replace(tzinfo=None) == datetime.min:
        return True

    return _as_utc(ts) == EPOCH


def timestamp_drift_seconds(first: datetime, second: datetime) -> float:
    """Absolute difference between two timestamps in seconds."""
    return abs((_as_utc(first) - _as_utc(second)).total_seconds())


def format_rfc3339_nano(ts: datetime) -> str:
    """
    Format a timestamp as RFC-3339 with nine fractional digits.

    Args:
        ts: Timestamp to format; naive values are treated as UTC

    Returns:
        String such as ``2024-05-01T12:00:00.123456000Z``
    """
    utc_ts = _as_utc(ts)
    return utc_ts.strftime("%Y-%m-%dT%H:%M:%S") + f".{utc_ts.microsecond:06d}000Z"


def parse_rfc3339_nano(text: str) -> datetime:
    """
    Parse an RFC-3339 timestamp with up to nine fractional digits.

    Args:
        text: Timestamp string

    Returns:
        Aware UTC datetime

    Raises:
        ValueError: If the string is not RFC-3339
    """
    match = _RFC3339_RE.match(text.strip())
    if not match:
        raise ValueError(f"Invalid RFC-3339 timestamp: {text!r}")

    frac = (match.group("frac") or "").ljust(6, "0")[:6]
    tz = match.group("tz")
    if tz in ("Z", "z"):
        tz = "+00:00"

    base = match.group("base").replace("t", "T").replace(" ", "T")
    parsed = datetime.fromisoformat(f"{base}.{frac}{tz}")
    return parsed.astimezone(timezone.utc)
