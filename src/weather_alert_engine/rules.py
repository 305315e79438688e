# Project: weather-alert-engine
# Owner: GreenUnicorn
"""
rules.py — Evaluate alert rule conditions against a weather snapshot.

A snapshot is the loose mapping the Open-Meteo client hands us. Current
readings live under "current_weather" or "current" (older and newer API
shapes) or at the top level, with either the short or the *_2m / *_10m
field names. Hourly
precipitation may be present as a list whose first entry is this hour.

Each check_* function receives the snapshot and one condition group and
returns True if that group is breached. A reading that is absent never
breaches anything.

classify_severity() maps a WMO weather code onto an alert severity; it is
independent of the user's rules and feeds the severe-weather-code pass.
"""

from typing import Optional

import structlog

from weather_alert_engine.models import AlertConditions, AlertSeverity
from weather_alert_engine.units import UnitFormatter

logger = structlog.get_logger(__name__)


# ---------------------------------------------------------------------------
# Snapshot access
# ---------------------------------------------------------------------------

def current_conditions(snapshot: dict) -> dict:
    """The block of current readings. A flat snapshot is its own block."""
    for key in ("current_weather", "current"):
        if key in snapshot:
            return snapshot[key] or {}
    return snapshot


def _first_number(source: dict, *keys: str) -> Optional[float]:
    """Return the first key whose value is a real number (bools excluded)."""
    for key in keys:
        value = source.get(key)
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return value
    return None


def read_temperature(snapshot: dict) -> Optional[float]:
    return _first_number(current_conditions(snapshot), "temperature", "temperature_2m")


def read_wind_speed(snapshot: dict) -> Optional[float]:
    return _first_number(current_conditions(snapshot), "windspeed", "wind_speed_10m")


def read_weather_code(snapshot: dict) -> Optional[int]:
    code = _first_number(current_conditions(snapshot), "weathercode", "weather_code")
    return int(code) if code is not None else None


def read_visibility(snapshot: dict) -> Optional[float]:
    return _first_number(current_conditions(snapshot), "visibility")


def read_precipitation(snapshot: dict) -> Optional[float]:
    """Instantaneous precipitation, falling back to this hour's forecast."""
    value = _first_number(current_conditions(snapshot), "precipitation")
    if value is not None:
        return value
    hourly = (snapshot.get("hourly") or {}).get("precipitation") or []
    if hourly:
        return _first_number({"precipitation": hourly[0]}, "precipitation")
    return None


# ---------------------------------------------------------------------------
# Condition checks
# ---------------------------------------------------------------------------

def check_temperature(snapshot: dict, condition) -> bool:
    """Breached if the temperature is below min or above max."""
    temp = read_temperature(snapshot)
    if temp is None:
        return False
    if condition.min is not None and temp < condition.min:
        return True
    if condition.max is not None and temp > condition.max:
        return True
    return False


def check_precipitation(snapshot: dict, condition) -> bool:
    precipitation = read_precipitation(snapshot)
    return precipitation is not None and precipitation >= condition.threshold


def check_wind(snapshot: dict, condition) -> bool:
    speed = read_wind_speed(snapshot)
    return speed is not None and speed >= condition.threshold


def check_visibility(snapshot: dict, condition) -> bool:
    """Low visibility is the one "at or below" breach."""
    visibility = read_visibility(snapshot)
    return visibility is not None and visibility <= condition.threshold


def evaluate_conditions(conditions: AlertConditions, snapshot: dict) -> bool:
    """Return True if any configured condition group is breached.

    Empty conditions never trigger.
    """
    checks = [
        (conditions.temperature, check_temperature),
        (conditions.precipitation, check_precipitation),
        (conditions.wind_speed, check_wind),
        (conditions.visibility, check_visibility),
    ]
    return any(check(snapshot, group) for group, check in checks if group is not None)


def evaluate_rule(rule, snapshot: dict, location: str) -> bool:
    """evaluate_conditions() for one rule, treating any error as "no trigger".

    The rule stays enabled; it simply does not fire on this pass.
    """
    try:
        return evaluate_conditions(rule.conditions, snapshot)
    except Exception as e:
        logger.error(
            "Error evaluating alert conditions",
            error=str(e),
            rule=rule.id,
            location=location,
        )
        return False


# ---------------------------------------------------------------------------
# Weather-code classification
# ---------------------------------------------------------------------------

# WMO codes as used by Open-Meteo: https://open-meteo.com/en/docs
EXTREME_CODES = {95, 96, 97}               # thunderstorms, with hail
SEVERE_CODES = {71, 73, 75, 77, 85, 86}    # snow
WARNING_CODES = {65, 67, 81, 82}           # heavy rain, showers

WEATHER_CODE_TITLES = {
    95: "Severe Thunderstorm Warning",
    96: "Thunderstorm with Light Hail",
    97: "Thunderstorm with Heavy Hail",
    75: "Heavy Snow Warning",
    77: "Snow Grains Warning",
    85: "Heavy Snow Showers",
    86: "Heavy Snow Showers",
    67: "Heavy Freezing Rain",
    82: "Heavy Rain Showers",
}

DEFAULT_CODE_TITLE = "Severe Weather Alert"


def classify_severity(weather_code: int) -> AlertSeverity:
    if weather_code in EXTREME_CODES:
        return AlertSeverity.EXTREME
    if weather_code in SEVERE_CODES:
        return AlertSeverity.SEVERE
    if weather_code in WARNING_CODES:
        return AlertSeverity.WARNING
    return AlertSeverity.INFO


def weather_code_title(weather_code: int) -> str:
    return WEATHER_CODE_TITLES.get(weather_code, DEFAULT_CODE_TITLE)


def weather_code_description(weather_code: int, snapshot: dict, units: UnitFormatter) -> str:
    """Advice text for a severe weather code, with current readings filled in."""
    temp = units.format_temperature(read_temperature(snapshot))
    wind = units.format_wind_speed(read_wind_speed(snapshot))

    descriptions = {
        95: f"Severe thunderstorms in your area. Temperature: {temp}, Wind: {wind}. "
            "Stay indoors and avoid travel.",
        96: f"Thunderstorm with light hail reported. Temperature: {temp}. "
            "Protect vehicles and stay inside.",
        97: f"Dangerous thunderstorm with heavy hail. Temperature: {temp}, Wind: {wind}. "
            "Seek shelter immediately.",
        75: f"Heavy snowfall warning in effect. Temperature: {temp}. "
            "Avoid unnecessary travel.",
        82: f"Heavy rain showers expected. Temperature: {temp}. "
            "Watch for flooding and reduced visibility.",
    }
    return descriptions.get(
        weather_code,
        f"Severe weather conditions detected. Temperature: {temp}, Wind: {wind}.",
    )
