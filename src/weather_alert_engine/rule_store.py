# Project: weather-alert-engine
# Owner: GreenUnicorn
"""
rule_store.py — In-memory CRUD over alert rules.

Ids and creation timestamps are assigned here, never by the caller.
Thresholds are stored as raw numbers; the store knows nothing about units.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime
from typing import Optional
from uuid import uuid4

from weather_alert_engine.models import (
    AlertConditions,
    AlertRule,
    AlertRuleCreate,
    AlertRuleUpdate,
    AlertSeverity,
    AlertType,
    CURRENT_LOCATION,
    TemperatureCondition,
    ThresholdCondition,
)

DEFAULT_RULES = [
    AlertRuleCreate(
        type=AlertType.TEMPERATURE,
        conditions=AlertConditions(temperature=TemperatureCondition(max=100)),
        locations=[CURRENT_LOCATION],
        severity=AlertSeverity.WARNING,
        title="Extreme Heat Warning",
        description=(
            "Temperature is extremely high at {temperature} in {location}. "
            "Stay hydrated and avoid outdoor activities."
        ),
    ),
    AlertRuleCreate(
        type=AlertType.TEMPERATURE,
        conditions=AlertConditions(temperature=TemperatureCondition(min=20)),
        locations=[CURRENT_LOCATION],
        severity=AlertSeverity.WARNING,
        title="Extreme Cold Warning",
        description=(
            "Temperature is dangerously low at {temperature} in {location}. "
            "Dress warmly and limit outdoor exposure."
        ),
    ),
    AlertRuleCreate(
        type=AlertType.WIND,
        conditions=AlertConditions(wind_speed=ThresholdCondition(threshold=40)),
        locations=[CURRENT_LOCATION],
        severity=AlertSeverity.SEVERE,
        title="High Wind Warning",
        description=(
            "Dangerous wind speeds of {windSpeed} detected in {location}. "
            "Secure outdoor items and avoid driving."
        ),
    ),
    # No numeric conditions: only ever fires through the weather-code pass.
    AlertRuleCreate(
        type=AlertType.STORM,
        conditions=AlertConditions(),
        locations=[CURRENT_LOCATION],
        severity=AlertSeverity.EXTREME,
        title="Severe Weather Alert",
        description=(
            "Severe weather conditions detected in {location}. "
            "Take immediate shelter and stay indoors."
        ),
    ),
]


class RuleStore:
    def __init__(
        self,
        rules: Optional[list[AlertRule]] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self._rules: list[AlertRule] = list(rules or [])
        self._clock = clock

    def __len__(self) -> int:
        return len(self._rules)

    def list(self) -> list[AlertRule]:
        """Return copies so callers cannot mutate stored rules."""
        return [rule.model_copy(deep=True) for rule in self._rules]

    def enabled(self) -> list[AlertRule]:
        return [rule for rule in self._rules if rule.enabled]

    def get(self, rule_id: str) -> Optional[AlertRule]:
        for rule in self._rules:
            if rule.id == rule_id:
                return rule
        return None

    def add(self, payload: AlertRuleCreate) -> str:
        rule = AlertRule(
            **payload.model_dump(),
            id=f"rule-{uuid4().hex}",
            created_at=self._clock(),
        )
        self._rules.append(rule)
        return rule.id

    def update(self, rule_id: str, payload: AlertRuleUpdate | dict) -> bool:
        """Merge explicitly-set fields into a rule. id and created_at are kept."""
        if isinstance(payload, dict):
            payload = AlertRuleUpdate.model_validate(payload)
        for index, rule in enumerate(self._rules):
            if rule.id == rule_id:
                merged = rule.model_dump()
                merged.update(payload.model_dump(exclude_unset=True))
                merged["id"] = rule.id
                merged["created_at"] = rule.created_at
                self._rules[index] = AlertRule.model_validate(merged)
                return True
        return False

    def delete(self, rule_id: str) -> bool:
        for index, rule in enumerate(self._rules):
            if rule.id == rule_id:
                del self._rules[index]
                return True
        return False

    def clear(self) -> None:
        self._rules.clear()

    def seed_defaults(self) -> list[str]:
        """Install the default rules if the store is empty.

        Returns:
            Ids of the rules that were added (empty if nothing was seeded).
        """
        if self._rules:
            return []
        return [self.add(rule) for rule in DEFAULT_RULES]
