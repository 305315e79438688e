# Project: weather-alert-engine
# Owner: GreenUnicorn
"""
models.py — Pydantic models for rules, alerts and preferences.

These are the shapes that live in memory and in the key-value store.
Timestamps are datetimes in memory and ISO-8601 strings once dumped with
mode="json"; model_validate turns them back into datetimes.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from weather_alert_engine.timewindow import parse_hhmm


class AlertSeverity(str, Enum):
    INFO = "info"
    WARNING = "warning"
    SEVERE = "severe"
    EXTREME = "extreme"

    @property
    def rank(self) -> int:
        return _SEVERITY_ORDER.index(self)


_SEVERITY_ORDER = [
    AlertSeverity.INFO,
    AlertSeverity.WARNING,
    AlertSeverity.SEVERE,
    AlertSeverity.EXTREME,
]


class AlertType(str, Enum):
    TEMPERATURE = "temperature"
    PRECIPITATION = "precipitation"
    WIND = "wind"
    STORM = "storm"
    VISIBILITY = "visibility"
    GENERAL = "general"


CURRENT_LOCATION = "current"


class Coordinates(BaseModel):
    lat: float = Field(..., ge=-90, le=90)
    lon: float = Field(..., ge=-180, le=180)


class TimeRange(BaseModel):
    """A time-of-day window in HH:MM form. start > end wraps past midnight."""

    start: str
    end: str

    @field_validator("start", "end")
    @classmethod
    def _check_hhmm(cls, value: str) -> str:
        parse_hhmm(value)
        return value


# ---------------------------------------------------------------------------
# Rule conditions
# ---------------------------------------------------------------------------

class TemperatureCondition(BaseModel):
    min: Optional[float] = None
    max: Optional[float] = None


class PrecipitationCondition(BaseModel):
    threshold: float
    duration: Optional[int] = None


class ThresholdCondition(BaseModel):
    threshold: float


class AlertConditions(BaseModel):
    """Any subset of threshold groups. A breach of any one is enough."""

    model_config = ConfigDict(populate_by_name=True)

    temperature: Optional[TemperatureCondition] = None
    precipitation: Optional[PrecipitationCondition] = None
    wind_speed: Optional[ThresholdCondition] = Field(default=None, alias="windSpeed")
    visibility: Optional[ThresholdCondition] = None

    def is_empty(self) -> bool:
        return not any(
            (self.temperature, self.precipitation, self.wind_speed, self.visibility)
        )


# ---------------------------------------------------------------------------
# Rules
# ---------------------------------------------------------------------------

class AlertRuleCreate(BaseModel):
    """A rule as supplied by the caller: no id, no created_at.

    Unknown keys are rejected. timeRange and notificationEnabled are
    accepted as aliases, like windSpeed in AlertConditions.
    """

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    type: AlertType
    enabled: bool = True
    conditions: AlertConditions = Field(default_factory=AlertConditions)
    locations: list[str] = Field(default_factory=lambda: [CURRENT_LOCATION])
    time_range: Optional[TimeRange] = Field(default=None, alias="timeRange")
    severity: AlertSeverity = AlertSeverity.WARNING
    notification_enabled: bool = Field(default=True, alias="notificationEnabled")
    title: str = Field(..., min_length=1)
    description: str = ""


class AlertRuleUpdate(BaseModel):
    """Partial update. Only fields that were explicitly set are applied."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    type: Optional[AlertType] = None
    enabled: Optional[bool] = None
    conditions: Optional[AlertConditions] = None
    locations: Optional[list[str]] = None
    time_range: Optional[TimeRange] = Field(default=None, alias="timeRange")
    severity: Optional[AlertSeverity] = None
    notification_enabled: Optional[bool] = Field(default=None, alias="notificationEnabled")
    title: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None


class AlertRule(AlertRuleCreate):
    id: str
    created_at: datetime


# ---------------------------------------------------------------------------
# Alerts
# ---------------------------------------------------------------------------

class WeatherAlert(BaseModel):
    id: str
    type: AlertType
    severity: AlertSeverity
    title: str
    description: str
    location: str
    coordinates: Optional[Coordinates] = None
    start_time: datetime
    end_time: Optional[datetime] = None
    is_active: bool = True
    is_read: bool = False
    notification_sent: bool = False
    created_at: datetime
    # Id of the rule that produced the alert; None for the severe-code pass.
    rule_id: Optional[str] = None


# ---------------------------------------------------------------------------
# Preferences
# ---------------------------------------------------------------------------

class AlertPreferences(BaseModel):
    model_config = ConfigDict(validate_assignment=True)

    enable_notifications: bool = True
    enable_sounds: bool = True
    enable_vibration: bool = True
    quiet_hours: TimeRange = Field(
        default_factory=lambda: TimeRange(start="22:00", end="07:00")
    )
    minimum_severity: AlertSeverity = AlertSeverity.WARNING
    location_alerts_enabled: bool = True
    favorite_location_alerts_only: bool = False
    max_alerts_per_day: int = Field(default=10, ge=0)
    alert_history_days: int = Field(default=7, ge=0)


class NotificationRequest(BaseModel):
    """Everything a notification backend needs to display one alert."""

    title: str
    body: str
    icon: str
    badge: str
    tag: str
    data: dict = Field(default_factory=dict)
    require_interaction: bool = False
    silent: bool = False
