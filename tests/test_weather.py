# Project: weather-alert-engine
# Owner: GreenUnicorn
"""
test_weather.py — Unit tests for weather.py.

All tests use in-memory fake API payloads — no network calls.
"""

from unittest.mock import MagicMock, patch

from weather_alert_engine.rules import read_precipitation, read_weather_code, read_wind_speed
from weather_alert_engine.weather import _parse_snapshot, fetch_current, unit_params


def _make_payload() -> dict:
    return {
        "latitude": 39.74,
        "longitude": -104.99,
        "current": {
            "time": "2026-02-23T12:00",
            "interval": 900,
            "temperature_2m": 3.4,
            "precipitation": 0.0,
            "weather_code": 95,
            "wind_speed_10m": 45.0,
            "visibility": 2400.0,
        },
        "hourly": {
            "time": ["2026-02-23T12:00", "2026-02-23T13:00"],
            "precipitation": [1.2, 0.4],
        },
    }


# ---------------------------------------------------------------------------
# _parse_snapshot
# ---------------------------------------------------------------------------

def test_parse_snapshot_keeps_requested_fields_only():
    snapshot = _parse_snapshot(_make_payload())

    assert set(snapshot["current"]) == {
        "temperature_2m", "precipitation", "weather_code", "wind_speed_10m", "visibility",
    }
    assert snapshot["hourly"] == {"precipitation": [1.2, 0.4]}


def test_parsed_snapshot_is_readable_by_rules():
    snapshot = _parse_snapshot(_make_payload())
    assert read_weather_code(snapshot) == 95
    assert read_wind_speed(snapshot) == 45.0
    assert read_precipitation(snapshot) == 0.0


def test_parse_snapshot_tolerates_missing_blocks():
    snapshot = _parse_snapshot({})
    assert snapshot == {"current": {}, "hourly": {"precipitation": []}}
    assert read_weather_code(snapshot) is None


# ---------------------------------------------------------------------------
# unit_params / fetch_current
# ---------------------------------------------------------------------------

def test_unit_params():
    assert unit_params("metric") == {}
    assert unit_params("imperial") == {
        "temperature_unit": "fahrenheit",
        "wind_speed_unit": "mph",
        "precipitation_unit": "inch",
    }


def test_fetch_current_uses_retry_and_parses(monkeypatch):
    monkeypatch.setattr(
        "weather_alert_engine.weather.with_retry",
        lambda fn, **kw: _make_payload(),
    )
    snapshot = fetch_current(39.74, -104.99)
    assert snapshot["current"]["weather_code"] == 95


@patch("weather_alert_engine.weather.requests.get")
def test_fetch_current_sends_unit_params(mock_get):
    response = MagicMock()
    response.json.return_value = _make_payload()
    mock_get.return_value = response

    fetch_current(39.74, -104.99, units="imperial")

    params = mock_get.call_args.kwargs["params"]
    assert params["temperature_unit"] == "fahrenheit"
    assert "weather_code" in params["current"]
    assert params["latitude"] == 39.74
