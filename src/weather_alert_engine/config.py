# Project: weather-alert-engine
# Owner: GreenUnicorn
"""
config.py — Load and validate the TOML configuration file.

We use tomllib (Python 3.11+ stdlib) so no extra install is needed.
The config path defaults to "config.toml" in the current working directory,
but can be overridden with --config or for testing.

The file only describes the machine: where you are, where state is kept,
which units and notification backend to use. Alert preferences and rules
are engine state and live in the store.
"""

import tomllib
from pathlib import Path

from weather_alert_engine.units import IMPERIAL, METRIC

DEFAULT_CONFIG_PATH = Path("config.toml")

NOTIFICATION_BACKENDS = ("macos", "log", "none")


def load_config(path: Path = DEFAULT_CONFIG_PATH) -> dict:
    """Load and validate a TOML configuration file.

    Optional sections are filled with defaults so callers can index freely.

    Args:
        path: Path to the TOML config file.

    Returns:
        Nested dict of configuration values.

    Raises:
        FileNotFoundError: If the config file does not exist.
        ValueError: If required keys or sections are missing or invalid.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(
            f"Config file not found: {path}\n"
            "Copy config.toml.example to config.toml and fill in your location."
        )

    with open(path, "rb") as f:
        config = tomllib.load(f)

    _validate(config)
    config.setdefault("units", {}).setdefault("system", METRIC)
    config.setdefault("notifications", {}).setdefault("backend", "macos")
    config["log"].setdefault("level", "INFO")
    return config


def _validate(config: dict) -> None:
    """Validate that all required config sections and keys are present.

    Expected config schema::

        [location]
        latitude  = <float>   # decimal degrees, e.g. 40.7128
        longitude = <float>   # decimal degrees, e.g. -74.0060
        name      = <str>     # display name, e.g. "New York, NY"

        [storage]
        path = <str>          # directory holding the alert state files

        [units]               # optional
        system = <str>        # "metric" (default) or "imperial"

        [notifications]       # optional
        backend = <str>       # "macos" (default), "log" or "none"
        path    = <str>       # file used by the "log" backend

        [log]
        path  = <str>         # relative or absolute path to the log file
        level = <str>         # optional, default "INFO"

    Args:
        config: Parsed TOML config dict.

    Raises:
        ValueError: If any required section or key is absent, or a value
            is not one of the allowed choices.
    """
    required_sections = ["location", "storage", "log"]
    for section in required_sections:
        if section not in config:
            raise ValueError(f"Missing required config section: [{section}]")

    location = config["location"]
    for key in ("latitude", "longitude", "name"):
        if key not in location:
            raise ValueError(f"Missing required config key: [location].{key}")

    if "path" not in config["storage"]:
        raise ValueError("Missing required config key: [storage].path")

    if "path" not in config["log"]:
        raise ValueError("Missing required config key: [log].path")

    system = config.get("units", {}).get("system", METRIC)
    if system not in (METRIC, IMPERIAL):
        raise ValueError(f"Invalid [units].system: {system!r}")

    backend = config.get("notifications", {}).get("backend", "macos")
    if backend not in NOTIFICATION_BACKENDS:
        raise ValueError(f"Invalid [notifications].backend: {backend!r}")
