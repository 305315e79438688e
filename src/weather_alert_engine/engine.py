# Project: weather-alert-engine
# Owner: GreenUnicorn
"""
engine.py — The alert engine: one object that owns all alerting state.

AlertEngine holds the rule list, the alert history, the preferences and the
daily counters. Every mutation goes through one of its methods and is
followed by a full persistence flush.

process_weather_data() is called once per refresh with a snapshot and a
location name. One call runs in this order:

    gate        — daily budget and 5-minute floor; a gated call does nothing
    rule sweep  — enabled rules: location, time window, conditions, 60 min dedup
    code check  — severe/extreme WMO codes, independent of rules, 120 min dedup
    notify      — every alert created in this call
    persist     — all four slices

The engine does no locking. Callers must not run two passes at once.
"""

from collections.abc import Callable
from datetime import datetime
from typing import Optional
from uuid import uuid4

import structlog

from weather_alert_engine.alert_store import AlertStore
from weather_alert_engine.gate import RateLimiter
from weather_alert_engine.models import (
    AlertPreferences,
    AlertRule,
    AlertRuleCreate,
    AlertRuleUpdate,
    AlertSeverity,
    AlertType,
    CURRENT_LOCATION,
    Coordinates,
    WeatherAlert,
)
from weather_alert_engine.notify import NotificationDispatcher, NotificationService, Vibrator
from weather_alert_engine.rule_store import RuleStore
from weather_alert_engine.rules import (
    classify_severity,
    evaluate_rule,
    read_temperature,
    read_weather_code,
    read_wind_speed,
    weather_code_description,
    weather_code_title,
)
from weather_alert_engine.storage import (
    KeyValueStore,
    PersistedState,
    clear_state,
    load_state,
    save_state,
)
from weather_alert_engine.timewindow import rule_time_matches
from weather_alert_engine.units import UnitFormatter

logger = structlog.get_logger(__name__)

RULE_DEDUP_MINUTES = 60
SEVERE_CODE_DEDUP_MINUTES = 120


class AlertEngine:
    def __init__(
        self,
        store: KeyValueStore,
        notifier: Optional[NotificationService] = None,
        vibrator: Optional[Vibrator] = None,
        units: Optional[UnitFormatter] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.store = store
        self.units = units or UnitFormatter()
        self.clock = clock

        state = load_state(store)
        self.preferences: AlertPreferences = state.preferences
        self.alerts = AlertStore(state.alerts)
        self.rules = RuleStore(state.rules, clock=clock)
        self.limiter = RateLimiter(state.counts)

        self.dispatcher = NotificationDispatcher(
            notifier,
            self.preferences,
            on_interaction=self.mark_alert_as_read,
            vibrator=vibrator,
        )

        if self.rules.seed_defaults():
            self._persist()

    # ===== Processing pipeline =====

    def process_weather_data(
        self,
        snapshot: dict,
        location: str,
        coordinates: Optional[Coordinates | dict] = None,
    ) -> list[WeatherAlert]:
        """Evaluate one snapshot for one location and notify on new alerts.

        Never raises. Returns copies of the alerts created by this call
        (possibly none).
        """
        try:
            now = self.clock()
            if isinstance(coordinates, dict):
                coordinates = Coordinates.model_validate(coordinates)
            snapshot = snapshot or {}

            if not self.limiter.should_process(now, self.preferences.max_alerts_per_day):
                logger.info("Alert processing gated", location=location)
                return []

            triggered = self._sweep_rules(snapshot, location, coordinates, now)
            triggered.extend(self._check_severe_code(snapshot, location, coordinates, now))

            for alert in triggered:
                if self._notification_allowed(alert):
                    self.dispatcher.dispatch(alert, now)

            self.limiter.record_pass(now)
            self._persist()

            logger.info(
                f"Processed weather alerts for {location}",
                alertsTriggered=len(triggered),
                location=location,
                timestamp=now.isoformat(),
            )
            return [alert.model_copy(deep=True) for alert in triggered]
        except Exception as e:
            logger.error(
                "Error processing weather data for alerts",
                error=str(e),
                location=location,
            )
            return []

    def _sweep_rules(self, snapshot, location, coordinates, now) -> list[WeatherAlert]:
        created = []
        for rule in self.rules.enabled():
            if not self._budget_left(now):
                logger.info("Daily alert limit reached", location=location)
                break
            if not self._location_matches(rule, location, coordinates):
                continue
            if not rule_time_matches(rule, now):
                continue
            if not evaluate_rule(rule, snapshot, location):
                continue
            if self.alerts.find_recent_duplicate(rule.type, location, RULE_DEDUP_MINUTES, now):
                continue

            alert = self._create_rule_alert(rule, snapshot, location, coordinates, now)
            self._add_alert(alert, now)
            created.append(alert)
        return created

    def _check_severe_code(self, snapshot, location, coordinates, now) -> list[WeatherAlert]:
        try:
            code = read_weather_code(snapshot)
            if code is None:
                return []
            severity = classify_severity(code)
            if severity not in (AlertSeverity.SEVERE, AlertSeverity.EXTREME):
                return []
            if not self._budget_left(now):
                return []
            if self.alerts.find_recent_duplicate(
                AlertType.STORM, location, SEVERE_CODE_DEDUP_MINUTES, now
            ):
                return []

            alert = WeatherAlert(
                id=f"severe-{uuid4().hex}",
                type=AlertType.STORM,
                severity=severity,
                title=weather_code_title(code),
                description=weather_code_description(code, snapshot, self.units),
                location=location,
                coordinates=coordinates,
                start_time=now,
                created_at=now,
            )
            self._add_alert(alert, now)
            return [alert]
        except Exception as e:
            logger.error("Error processing severe weather warnings", error=str(e), location=location)
            return []

    def _budget_left(self, now: datetime) -> bool:
        return self.limiter.budget_left(now, self.preferences.max_alerts_per_day) > 0

    def _location_matches(self, rule: AlertRule, location: str, coordinates) -> bool:
        if (
            CURRENT_LOCATION in rule.locations
            and coordinates is not None
            and self.preferences.location_alerts_enabled
        ):
            return True
        wanted = location.lower()
        return any(
            name.lower() == wanted for name in rule.locations if name != CURRENT_LOCATION
        )

    def _notification_allowed(self, alert: WeatherAlert) -> bool:
        if alert.rule_id is None:
            return True
        rule = self.rules.get(alert.rule_id)
        return rule is None or rule.notification_enabled

    def _create_rule_alert(self, rule, snapshot, location, coordinates, now) -> WeatherAlert:
        return WeatherAlert(
            id=f"{rule.id}-{uuid4().hex[:12]}",
            type=rule.type,
            severity=rule.severity,
            title=rule.title,
            description=self.format_description(rule.description, snapshot, location, now),
            location=location,
            coordinates=coordinates,
            start_time=now,
            created_at=now,
            rule_id=rule.id,
        )

    def format_description(self, template: str, snapshot: dict, location: str, now: datetime) -> str:
        """Fill {location} {temperature} {windSpeed} {time} in a rule template."""
        values = {
            "{location}": location,
            "{temperature}": self.units.format_temperature(read_temperature(snapshot)),
            "{windSpeed}": self.units.format_wind_speed(read_wind_speed(snapshot)),
            "{time}": now.strftime("%H:%M:%S"),
        }
        for placeholder, value in values.items():
            template = template.replace(placeholder, value)
        return template

    def _add_alert(self, alert: WeatherAlert, now: datetime) -> None:
        self.alerts.add(alert, now, self.preferences.alert_history_days)
        self.limiter.record_alert(now)

    # ===== Persistence =====

    def _persist(self) -> bool:
        return save_state(
            self.store,
            PersistedState(
                alerts=self.alerts.all(),
                rules=self.rules.list(),
                preferences=self.preferences,
                counts=self.limiter.counts,
            ),
        )

    # ===== Alerts =====

    def get_active_alerts(self) -> list[WeatherAlert]:
        return self.alerts.list(active_only=True)

    def get_unread_alerts(self) -> list[WeatherAlert]:
        return self.alerts.list(active_only=True, unread_only=True)

    def get_alert_history(self, days: Optional[int] = None) -> list[WeatherAlert]:
        return self.alerts.list(since_days=days, now=self.clock())

    def mark_alert_as_read(self, alert_id: str) -> bool:
        if not self.alerts.mark_read(alert_id):
            return False
        self._persist()
        return True

    def mark_all_alerts_as_read(self) -> None:
        self.alerts.mark_all_read()
        self._persist()

    def dismiss_alert(self, alert_id: str) -> bool:
        if not self.alerts.dismiss(alert_id):
            return False
        self._persist()
        return True

    def daily_count(self, day: Optional[datetime] = None) -> int:
        return self.limiter.count_for(day or self.clock())

    # ===== Rules =====

    def get_alert_rules(self) -> list[AlertRule]:
        return self.rules.list()

    def add_alert_rule(self, rule: AlertRuleCreate | dict) -> str:
        if isinstance(rule, dict):
            rule = AlertRuleCreate.model_validate(rule)
        rule_id = self.rules.add(rule)
        self._persist()
        return rule_id

    def update_alert_rule(self, rule_id: str, updates: AlertRuleUpdate | dict) -> bool:
        if not self.rules.update(rule_id, updates):
            return False
        self._persist()
        return True

    def delete_alert_rule(self, rule_id: str) -> bool:
        if not self.rules.delete(rule_id):
            return False
        self._persist()
        return True

    # ===== Preferences =====

    def get_preferences(self) -> AlertPreferences:
        return self.preferences.model_copy(deep=True)

    def update_preferences(self, updates: dict) -> None:
        """Apply updates to the one preferences object in place.

        All updates are validated before any is applied.

        Raises:
            ValueError: On an unknown key or an invalid value.
        """
        for key in updates:
            if key not in AlertPreferences.model_fields:
                raise ValueError(f"Unknown preference: {key}")
        candidate = AlertPreferences.model_validate(
            {**self.preferences.model_dump(), **updates}
        )
        self._copy_preferences_from(candidate)
        self._persist()

    def reset_preferences(self) -> None:
        self._copy_preferences_from(AlertPreferences())
        self._persist()

    def _copy_preferences_from(self, source: AlertPreferences) -> None:
        # The dispatcher holds a reference to this object; never replace it.
        for key in AlertPreferences.model_fields:
            setattr(self.preferences, key, getattr(source, key))

    def clear_all_data(self) -> None:
        """Forget everything, then re-seed the default rules."""
        self.alerts.clear()
        self.rules.clear()
        self.limiter.clear()
        self._copy_preferences_from(AlertPreferences())
        clear_state(self.store)
        self.rules.seed_defaults()
        self._persist()
