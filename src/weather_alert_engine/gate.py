# Project: weather-alert-engine
# Owner: GreenUnicorn
"""
gate.py — Global throttle for the evaluation pass, and the quiet-hours test.

The throttle is one gate for the whole pass: a gated call skips every rule
and the weather-code check alike. The daily counter is shared by every
location, so one busy location can use up the budget for all of them.
"""

from datetime import date, datetime, timedelta
from typing import Optional

from weather_alert_engine.models import AlertPreferences
from weather_alert_engine.timewindow import in_time_window

MIN_CHECK_INTERVAL = timedelta(minutes=5)


def day_key(moment: datetime | date) -> str:
    """Calendar-date key used by the daily counters, e.g. '2026-02-23'."""
    if isinstance(moment, datetime):
        moment = moment.date()
    return moment.isoformat()


class RateLimiter:
    def __init__(self, counts: Optional[dict[str, int]] = None):
        self.counts: dict[str, int] = dict(counts or {})
        self.last_check: Optional[datetime] = None

    def count_for(self, moment: datetime | date) -> int:
        return self.counts.get(day_key(moment), 0)

    def budget_left(self, now: datetime, max_per_day: int) -> int:
        return max(0, max_per_day - self.count_for(now))

    def should_process(self, now: datetime, max_per_day: int) -> bool:
        if self.count_for(now) >= max_per_day:
            return False
        if self.last_check is not None and now - self.last_check < MIN_CHECK_INTERVAL:
            return False
        return True

    def record_pass(self, now: datetime) -> None:
        self.last_check = now

    def record_alert(self, now: datetime) -> None:
        key = day_key(now)
        self.counts[key] = self.counts.get(key, 0) + 1

    def clear(self) -> None:
        self.counts.clear()
        self.last_check = None


def is_quiet_hours(preferences: AlertPreferences, now: datetime) -> bool:
    """True while `now` is inside the quiet-hours window (notifications held)."""
    return in_time_window(preferences.quiet_hours, now)
