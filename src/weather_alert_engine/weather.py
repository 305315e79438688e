# Project: weather-alert-engine
# Owner: GreenUnicorn
"""
weather.py — Fetch a current-conditions snapshot from Open-Meteo.

Open-Meteo is free and requires no API key. We ask for the current
readings the alert rules look at, plus this hour's precipitation forecast,
in the unit system the user configured. The engine itself never converts
units, so this is where the choice is made.

API docs: https://open-meteo.com/en/docs
"""

import requests

from weather_alert_engine.units import IMPERIAL
from weather_alert_engine.utils import with_retry

OPEN_METEO_URL = "https://api.open-meteo.com/v1/forecast"

# Fields the rules and the weather-code check read
CURRENT_VARIABLES = [
    "temperature_2m",
    "precipitation",
    "weather_code",
    "wind_speed_10m",
    "visibility",
]

HOURLY_VARIABLES = ["precipitation"]


def unit_params(system: str) -> dict:
    """Open-Meteo query parameters for a unit system (metric is the API default)."""
    if system == IMPERIAL:
        return {
            "temperature_unit": "fahrenheit",
            "wind_speed_unit": "mph",
            "precipitation_unit": "inch",
        }
    return {}


def fetch_current(latitude: float, longitude: float, units: str = "metric") -> dict:
    """Fetch the current weather snapshot for a location.

    Args:
        latitude: Location latitude in decimal degrees.
        longitude: Location longitude in decimal degrees.
        units: "metric" or "imperial".

    Returns:
        Snapshot dict with a "current" block (temperature_2m, precipitation,
        weather_code, wind_speed_10m, visibility) and an "hourly" block whose
        "precipitation" list starts at the current hour.

    Raises:
        RuntimeError: If all retry attempts fail.
    """
    params = {
        "latitude": latitude,
        "longitude": longitude,
        "current": ",".join(CURRENT_VARIABLES),
        "hourly": ",".join(HOURLY_VARIABLES),
        "forecast_hours": 6,
        "timezone": "auto",
        **unit_params(units),
    }

    def _call():
        r = requests.get(OPEN_METEO_URL, params=params, timeout=10)
        r.raise_for_status()
        return r.json()

    data = with_retry(_call, label="Open-Meteo forecast API")
    return _parse_snapshot(data)


def _parse_snapshot(data: dict) -> dict:
    """Keep only the parts of the response the engine reads.

    Missing blocks come back empty rather than raising: the engine treats
    absent readings as "no breach".
    """
    current = data.get("current") or {}
    hourly = data.get("hourly") or {}
    return {
        "current": {key: current.get(key) for key in CURRENT_VARIABLES if key in current},
        "hourly": {"precipitation": list(hourly.get("precipitation") or [])},
    }
