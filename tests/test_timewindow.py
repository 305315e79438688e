# Project: weather-alert-engine
# Owner: GreenUnicorn
"""
test_timewindow.py — Unit tests for HH:MM parsing and window inclusion.
"""

from datetime import datetime

import pytest

from weather_alert_engine.models import TimeRange
from weather_alert_engine.timewindow import (
    in_range,
    in_time_window,
    minutes_since_midnight,
    parse_hhmm,
    rule_time_matches,
)


def at(hour: int, minute: int = 0) -> datetime:
    return datetime(2026, 2, 23, hour, minute)


class FakeRule:
    def __init__(self, time_range=None):
        self.time_range = time_range


# ---------------------------------------------------------------------------
# parse_hhmm
# ---------------------------------------------------------------------------

def test_parse_hhmm_midnight():
    assert parse_hhmm("00:00") == 0


def test_parse_hhmm_last_minute_of_day():
    assert parse_hhmm("23:59") == 23 * 60 + 59


def test_parse_hhmm_allows_single_digit_hour():
    assert parse_hhmm("7:30") == 450


@pytest.mark.parametrize("bad", ["24:00", "12:60", "noon", "12", "", "12:3x"])
def test_parse_hhmm_rejects_invalid(bad):
    with pytest.raises(ValueError, match="Invalid time of day"):
        parse_hhmm(bad)


def test_minutes_since_midnight():
    assert minutes_since_midnight(at(13, 45)) == 13 * 60 + 45


# ---------------------------------------------------------------------------
# in_range — simple windows
# ---------------------------------------------------------------------------

def test_simple_window_includes_both_bounds():
    assert in_range(540, 1020, 540)
    assert in_range(540, 1020, 1020)


def test_simple_window_excludes_outside():
    assert not in_range(540, 1020, 539)
    assert not in_range(540, 1020, 1021)


def test_zero_length_window_matches_only_that_minute():
    assert in_range(600, 600, 600)
    assert not in_range(600, 600, 601)


# ---------------------------------------------------------------------------
# in_range — windows crossing midnight
# ---------------------------------------------------------------------------

def test_wrapping_window_includes_late_evening():
    assert in_range(22 * 60, 7 * 60, 23 * 60)


def test_wrapping_window_includes_early_morning():
    assert in_range(22 * 60, 7 * 60, 3 * 60)


def test_wrapping_window_includes_both_bounds():
    assert in_range(22 * 60, 7 * 60, 22 * 60)
    assert in_range(22 * 60, 7 * 60, 7 * 60)


def test_wrapping_window_excludes_daytime():
    assert not in_range(22 * 60, 7 * 60, 12 * 60)
    assert not in_range(22 * 60, 7 * 60, 7 * 60 + 1)


def test_in_range_matches_definition_for_every_minute():
    """start > end: t >= start or t <= end; start <= end: start <= t <= end."""
    for start, end in [(1320, 420), (60, 1380), (0, 0), (1439, 0)]:
        for t in range(0, 1440, 7):
            if start <= end:
                expected = start <= t <= end
            else:
                expected = t >= start or t <= end
            assert in_range(start, end, t) is expected


# ---------------------------------------------------------------------------
# in_time_window / rule_time_matches
# ---------------------------------------------------------------------------

def test_missing_window_is_never_in_range():
    assert in_time_window(None, at(12)) is False


def test_in_time_window_uses_hhmm_bounds():
    window = TimeRange(start="09:00", end="17:00")
    assert in_time_window(window, at(12))
    assert not in_time_window(window, at(18))


def test_rule_without_time_range_always_matches():
    assert rule_time_matches(FakeRule(), at(3))


def test_rule_with_night_window():
    rule = FakeRule(TimeRange(start="20:00", end="06:00"))
    assert rule_time_matches(rule, at(23, 30))
    assert not rule_time_matches(rule, at(14))
