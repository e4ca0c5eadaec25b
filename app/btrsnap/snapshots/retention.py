"""Age-based retention policy.

A snapshot is eligible for deletion when its encoded creation instant
is strictly before ``now - keep``. Nothing is persisted; the cutoff is
recomputed from the wall clock on every run.
"""

import re
from datetime import datetime, timedelta

import humanfriendly

# One "<number><unit>" group, e.g. "7d", "12 hours", "1.5h"
_SPAN_TOKEN = re.compile(r"(\d+(?:\.\d+)?)\s*([^\d\s.]*)")

# Calendar units humanfriendly lacks or sizes differently (its year is 52
# weeks). Lengths match the usual month and year averages. Units are case
# sensitive, so "M" is a month and "m" a minute.
_CALENDAR_UNITS = {
    "M": 2_630_016.0,
    "month": 2_630_016.0,
    "months": 2_630_016.0,
    "y": 31_557_600.0,
    "year": 31_557_600.0,
    "years": 31_557_600.0,
}


def parse_duration(text: str) -> timedelta:
    """Parse a human-friendly retention duration.

    Accepts anything humanfriendly understands ("7d", "30m", "2 weeks")
    plus months ("1M", "2months", 30.44 days) and years ("1y", 365.25
    days), and sums compounds such as "1d 12h" or "1w2d".

    Args:
        text: Duration text.

    Returns:
        Positive timedelta.

    Raises:
        ValueError: If text is empty, malformed, or not positive.
    """
    stripped = text.strip() if isinstance(text, str) else ""
    if not stripped:
        msg = "Duration cannot be empty"
        raise ValueError(msg)

    matches = list(_SPAN_TOKEN.finditer(stripped))
    if "".join(m.group(0) for m in matches).replace(" ", "") != stripped.replace(" ", ""):
        msg = f"Invalid duration: {text!r}"
        raise ValueError(msg)

    try:
        seconds = sum(_span_seconds(m.group(1), m.group(2)) for m in matches)
    except humanfriendly.InvalidTimespan as e:
        msg = f"Invalid duration: {text!r}"
        raise ValueError(msg) from e

    if seconds <= 0:
        msg = f"Duration must be positive: {text!r}"
        raise ValueError(msg)

    return timedelta(seconds=seconds)


def _span_seconds(number: str, unit: str) -> float:
    """Convert one number/unit pair to seconds.

    Raises:
        humanfriendly.InvalidTimespan: If the unit is unknown.
    """
    if unit in _CALENDAR_UNITS:
        return float(number) * _CALENDAR_UNITS[unit]
    if unit != unit.lower():
        # humanfriendly folds case; "M" is the only upper-case unit
        msg = f"Unknown time unit: {unit!r}"
        raise humanfriendly.InvalidTimespan(msg)
    return humanfriendly.parse_timespan(f"{number}{unit}")


def format_duration(duration: timedelta) -> str:
    """Format a duration for display (e.g. "1 week and 2 days")."""
    return humanfriendly.format_timespan(duration.total_seconds())


def compute_cutoff(now: datetime, keep: timedelta) -> datetime:
    """Return the instant before which snapshots expire."""
    return now - keep


def is_expired(created_at: datetime, cutoff: datetime) -> bool:
    """Check whether a snapshot created at created_at has expired.

    The comparison is strict: a snapshot exactly at the cutoff is kept.
    """
    return created_at < cutoff
