# Project: weather-alert-engine
# Owner: GreenUnicorn
"""
geocode.py — Look up coordinates for a place name using Open-Meteo Geocoding API.

Free, no API key required.
API docs: https://open-meteo.com/en/docs/geocoding-api
"""

import requests

from weather_alert_engine.utils import with_retry

GEOCODING_URL = "https://geocoding-api.open-meteo.com/v1/search"


class LocationNotFoundError(ValueError):
    """No geocoding result for the requested place name."""


def geocode(place: str) -> dict:
    """Look up coordinates for a place name.

    Args:
        place: Human-readable place name, e.g. 'Tokyo' or 'London, UK'.

    Returns:
        Dict with keys latitude (float), longitude (float) and name (str),
        where name is a canonical 'City, Region, Country' string.

    Raises:
        LocationNotFoundError: If no results are found for the place name.
        RuntimeError: If all API retry attempts fail.
    """
    params = {
        "name": place,
        "count": 1,
        "language": "en",
        "format": "json",
    }

    def _call():
        r = requests.get(GEOCODING_URL, params=params, timeout=10)
        r.raise_for_status()
        return r.json()

    data = with_retry(_call, label=f"Geocoding API for '{place}'")

    results = data.get("results")
    if not results:
        raise LocationNotFoundError(f'Location "{place}" not found. Try a more specific name.')

    result = results[0]
    name_parts = [result.get("name", place)]
    if result.get("admin1"):
        name_parts.append(result["admin1"])
    if result.get("country"):
        name_parts.append(result["country"])

    return {
        "latitude": result["latitude"],
        "longitude": result["longitude"],
        "name": ", ".join(name_parts),
    }
