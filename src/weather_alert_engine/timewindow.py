# Project: weather-alert-engine
# Owner: GreenUnicorn
"""
timewindow.py — Time-of-day window matching on minutes since midnight.

The same primitive serves two callers with opposite polarity:
rule active windows ("inside = allowed") and quiet hours
("inside = suppressed"). Each caller decides what inclusion means.
"""

from datetime import datetime

MINUTES_PER_DAY = 24 * 60


def parse_hhmm(value: str) -> int:
    """Convert an 'HH:MM' string to minutes since midnight.

    Args:
        value: Time of day such as '07:30' or '22:00'.

    Returns:
        Integer in the range 0–1439.

    Raises:
        ValueError: If the string is not a valid HH:MM time.
    """
    try:
        hour_str, minute_str = value.strip().split(":")
        hour, minute = int(hour_str), int(minute_str)
    except (AttributeError, ValueError):
        raise ValueError(f"Invalid time of day: {value!r} (expected HH:MM)")
    if not (0 <= hour < 24 and 0 <= minute < 60):
        raise ValueError(f"Invalid time of day: {value!r} (expected HH:MM)")
    return hour * 60 + minute


def minutes_since_midnight(now: datetime) -> int:
    return now.hour * 60 + now.minute


def in_range(start: int, end: int, now: int) -> bool:
    """Closed-interval inclusion test that wraps midnight when start > end."""
    if start <= end:
        return start <= now <= end
    # Crosses midnight
    return now >= start or now <= end


def in_time_window(window, now: datetime) -> bool:
    """True if `now` falls inside `window` (anything with .start/.end HH:MM).

    A missing window is never "in range".
    """
    if window is None:
        return False
    return in_range(
        parse_hhmm(window.start),
        parse_hhmm(window.end),
        minutes_since_midnight(now),
    )


def rule_time_matches(rule, now: datetime) -> bool:
    """A rule with no time_range is always armed."""
    if rule.time_range is None:
        return True
    return in_time_window(rule.time_range, now)
