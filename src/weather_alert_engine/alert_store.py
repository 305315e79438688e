# Project: weather-alert-engine
# Owner: GreenUnicorn
"""
alert_store.py — Most-recent-first history of generated alerts.

Old alerts are pruned only when a new one is inserted. If nothing fires,
stale history stays where it is until the next insertion.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Optional

from weather_alert_engine.models import AlertType, WeatherAlert


class AlertStore:
    def __init__(self, alerts: Optional[list[WeatherAlert]] = None):
        self._alerts: list[WeatherAlert] = list(alerts or [])

    def __len__(self) -> int:
        return len(self._alerts)

    def all(self) -> list[WeatherAlert]:
        """The live list, for persistence. Callers must not mutate it."""
        return self._alerts

    def get(self, alert_id: str) -> Optional[WeatherAlert]:
        for alert in self._alerts:
            if alert.id == alert_id:
                return alert
        return None

    def add(self, alert: WeatherAlert, now: datetime, history_days: int) -> None:
        """Insert at the head, then drop anything older than the history window."""
        self._alerts.insert(0, alert)
        cutoff = now - timedelta(days=history_days)
        self._alerts = [a for a in self._alerts if a.created_at >= cutoff]

    def find_recent_duplicate(
        self,
        alert_type: AlertType,
        location: str,
        within_minutes: int,
        now: datetime,
    ) -> Optional[WeatherAlert]:
        cutoff = now - timedelta(minutes=within_minutes)
        for alert in self._alerts:
            if (
                alert.type == alert_type
                and alert.location == location
                and alert.created_at >= cutoff
            ):
                return alert
        return None

    def mark_read(self, alert_id: str) -> bool:
        alert = self.get(alert_id)
        if alert is None:
            return False
        alert.is_read = True
        return True

    def mark_all_read(self) -> None:
        for alert in self._alerts:
            alert.is_read = True

    def dismiss(self, alert_id: str) -> bool:
        alert = self.get(alert_id)
        if alert is None:
            return False
        alert.is_active = False
        alert.is_read = True
        return True

    def clear(self) -> None:
        self._alerts.clear()

    def list(
        self,
        active_only: bool = False,
        unread_only: bool = False,
        since_days: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> list[WeatherAlert]:
        """Filtered copies of the history, newest first. No side effects."""
        cutoff = None
        if since_days:
            cutoff = (now or datetime.now()) - timedelta(days=since_days)

        result = []
        for alert in self._alerts:
            if active_only and not alert.is_active:
                continue
            if unread_only and alert.is_read:
                continue
            if cutoff is not None and alert.created_at < cutoff:
                continue
            result.append(alert.model_copy(deep=True))
        return result
