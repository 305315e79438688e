# Project: weather-alert-engine
# Owner: GreenUnicorn
"""
units.py — Render temperatures and wind speeds for alert text.

The engine never converts between unit systems. Readings arrive already
in the configured system (the fetcher asks Open-Meteo for it), and this
module only decides which suffix to print next to the number.
"""

METRIC = "metric"
IMPERIAL = "imperial"

_TEMPERATURE_SYMBOLS = {METRIC: "°C", IMPERIAL: "°F"}
_WIND_SPEED_LABELS = {METRIC: "km/h", IMPERIAL: "mph"}

NOT_AVAILABLE = "N/A"


class UnitFormatter:
    def __init__(self, system: str = METRIC):
        if system not in _TEMPERATURE_SYMBOLS:
            raise ValueError(
                f"Unknown unit system: {system!r} (expected '{METRIC}' or '{IMPERIAL}')"
            )
        self.system = system

    def temperature_symbol(self) -> str:
        return _TEMPERATURE_SYMBOLS[self.system]

    def wind_speed_label(self) -> str:
        return _WIND_SPEED_LABELS[self.system]

    def format_temperature(self, value) -> str:
        shown = NOT_AVAILABLE if value is None else value
        return f"{shown}{self.temperature_symbol()}"

    def format_wind_speed(self, value) -> str:
        shown = NOT_AVAILABLE if value is None else value
        return f"{shown} {self.wind_speed_label()}"
