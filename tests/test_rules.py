# Project: weather-alert-engine
# Owner: GreenUnicorn
"""
test_rules.py — Unit tests for each condition check and the code classifier.

We use hardcoded fake snapshots — no API calls here.
The principle: each test focuses on one condition and one boundary.
"""

import pytest
from structlog.testing import capture_logs

from weather_alert_engine.models import (
    AlertConditions,
    AlertSeverity,
    PrecipitationCondition,
    TemperatureCondition,
    ThresholdCondition,
)
from weather_alert_engine.rules import (
    classify_severity,
    evaluate_conditions,
    evaluate_rule,
    read_precipitation,
    read_temperature,
    read_weather_code,
    read_wind_speed,
    weather_code_description,
    weather_code_title,
)
from weather_alert_engine.units import UnitFormatter


# ---------------------------------------------------------------------------
# Helpers: build minimal fake snapshots and conditions
# ---------------------------------------------------------------------------

def make_snapshot(**current) -> dict:
    return {"current_weather": current}


def temp(min=None, max=None) -> AlertConditions:
    return AlertConditions(temperature=TemperatureCondition(min=min, max=max))


def wind(threshold) -> AlertConditions:
    return AlertConditions(wind_speed=ThresholdCondition(threshold=threshold))


def rain(threshold) -> AlertConditions:
    return AlertConditions(precipitation=PrecipitationCondition(threshold=threshold))


def visibility(threshold) -> AlertConditions:
    return AlertConditions(visibility=ThresholdCondition(threshold=threshold))


class FakeRule:
    id = "rule-fake"

    def __init__(self, conditions):
        self.conditions = conditions


# ---------------------------------------------------------------------------
# Snapshot access
# ---------------------------------------------------------------------------

def test_reads_current_weather_block():
    assert read_temperature(make_snapshot(temperature=12.5)) == 12.5


def test_reads_newer_current_block_with_long_names():
    snapshot = {"current": {"temperature_2m": 3.0, "wind_speed_10m": 22, "weather_code": 95}}
    assert read_temperature(snapshot) == 3.0
    assert read_wind_speed(snapshot) == 22
    assert read_weather_code(snapshot) == 95


def test_reads_flat_snapshot():
    assert read_wind_speed({"windspeed": 45}) == 45


def test_zero_is_a_real_reading():
    """0 °C must not fall through to the alternative field name."""
    snapshot = make_snapshot(temperature=0, temperature_2m=30)
    assert read_temperature(snapshot) == 0


def test_non_numeric_reading_counts_as_absent():
    assert read_temperature(make_snapshot(temperature="hot")) is None
    assert read_wind_speed(make_snapshot(windspeed=True)) is None


def test_precipitation_prefers_instantaneous_value():
    snapshot = {"current": {"precipitation": 1.0}, "hourly": {"precipitation": [9.0]}}
    assert read_precipitation(snapshot) == 1.0


def test_precipitation_falls_back_to_first_hourly_entry():
    snapshot = {"current": {}, "hourly": {"precipitation": [4.2, 8.0]}}
    assert read_precipitation(snapshot) == 4.2


def test_precipitation_absent_everywhere():
    assert read_precipitation({"current": {}, "hourly": {"precipitation": []}}) is None


# ---------------------------------------------------------------------------
# Temperature
# ---------------------------------------------------------------------------

def test_temperature_triggers_above_max():
    assert evaluate_conditions(temp(max=100), make_snapshot(temperature=101))


def test_temperature_does_not_trigger_at_max():
    """max is a strict "greater than" breach."""
    assert not evaluate_conditions(temp(max=100), make_snapshot(temperature=100))


def test_temperature_triggers_below_min():
    assert evaluate_conditions(temp(min=20), make_snapshot(temperature=19.9))


def test_temperature_does_not_trigger_at_min():
    assert not evaluate_conditions(temp(min=20), make_snapshot(temperature=20))


def test_temperature_missing_never_triggers():
    assert not evaluate_conditions(temp(min=20, max=30), make_snapshot())


# ---------------------------------------------------------------------------
# Precipitation, wind, visibility
# ---------------------------------------------------------------------------

def test_precipitation_triggers_at_threshold():
    assert evaluate_conditions(rain(5), make_snapshot(precipitation=5))


def test_precipitation_below_threshold():
    assert not evaluate_conditions(rain(5), make_snapshot(precipitation=4.9))


def test_precipitation_missing_never_triggers_even_with_zero_threshold():
    assert not evaluate_conditions(rain(0), make_snapshot())


def test_wind_triggers_at_threshold():
    assert evaluate_conditions(wind(40), make_snapshot(windspeed=40))


def test_wind_below_threshold():
    assert not evaluate_conditions(wind(40), make_snapshot(windspeed=39))


def test_wind_missing_never_triggers():
    assert not evaluate_conditions(wind(0), make_snapshot())


def test_visibility_triggers_at_or_below_threshold():
    assert evaluate_conditions(visibility(1000), make_snapshot(visibility=1000))
    assert evaluate_conditions(visibility(1000), make_snapshot(visibility=200))


def test_visibility_above_threshold():
    assert not evaluate_conditions(visibility(1000), make_snapshot(visibility=1001))


def test_visibility_missing_never_triggers():
    assert not evaluate_conditions(visibility(1000), make_snapshot())


# ---------------------------------------------------------------------------
# evaluate_conditions / evaluate_rule
# ---------------------------------------------------------------------------

def test_any_breached_group_is_enough():
    conditions = AlertConditions(
        temperature=TemperatureCondition(max=35),
        wind_speed=ThresholdCondition(threshold=40),
    )
    assert evaluate_conditions(conditions, make_snapshot(temperature=20, windspeed=50))


def test_no_group_breached():
    conditions = AlertConditions(
        temperature=TemperatureCondition(max=35),
        wind_speed=ThresholdCondition(threshold=40),
    )
    assert not evaluate_conditions(conditions, make_snapshot(temperature=20, windspeed=10))


def test_empty_conditions_never_trigger():
    assert not evaluate_conditions(AlertConditions(), make_snapshot(temperature=200))


def test_evaluate_rule_swallows_errors_and_logs():
    class Exploding:
        @property
        def temperature(self):
            raise ZeroDivisionError("boom")

    with capture_logs() as logs:
        result = evaluate_rule(FakeRule(Exploding()), make_snapshot(), "Oslo")

    assert result is False
    assert logs[0]["log_level"] == "error"
    assert logs[0]["rule"] == "rule-fake"
    assert logs[0]["location"] == "Oslo"


def test_evaluate_rule_passes_through_result():
    assert evaluate_rule(FakeRule(wind(40)), make_snapshot(windspeed=45), "Denver")


# ---------------------------------------------------------------------------
# classify_severity and code text
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("code", [95, 96, 97])
def test_thunderstorms_are_extreme(code):
    assert classify_severity(code) == AlertSeverity.EXTREME


@pytest.mark.parametrize("code", [71, 73, 75, 77, 85, 86])
def test_snow_codes_are_severe(code):
    assert classify_severity(code) == AlertSeverity.SEVERE


@pytest.mark.parametrize("code", [65, 67, 81, 82])
def test_heavy_rain_codes_are_warning(code):
    assert classify_severity(code) == AlertSeverity.WARNING


@pytest.mark.parametrize("code", [0, 1, 3, 45, 61, 80, 999])
def test_other_codes_are_info(code):
    assert classify_severity(code) == AlertSeverity.INFO


def test_code_title_known_and_fallback():
    assert weather_code_title(97) == "Thunderstorm with Heavy Hail"
    assert weather_code_title(71) == "Severe Weather Alert"


def test_code_description_includes_readings():
    text = weather_code_description(
        97, make_snapshot(temperature=18, windspeed=60), UnitFormatter("metric")
    )
    assert "heavy hail" in text
    assert "18°C" in text
    assert "60 km/h" in text


def test_code_description_fallback_with_missing_readings():
    text = weather_code_description(73, make_snapshot(), UnitFormatter("imperial"))
    assert text.startswith("Severe weather conditions detected")
    assert "N/A°F" in text
