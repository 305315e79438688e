# Project: weather-alert-engine
# Owner: GreenUnicorn
"""
test_config.py — Tests for config loading and validation.

We write a temporary TOML file in each test so we don't depend on
a real config.toml existing in the project.
"""

import pytest

from weather_alert_engine.config import load_config


VALID_TOML = """
[location]
latitude = 51.5074
longitude = -0.1278
name = "London"

[storage]
path = "data"

[units]
system = "imperial"

[notifications]
backend = "log"

[log]
path = "logs/weather_alert_engine.log"
level = "DEBUG"
"""

MINIMAL_TOML = """
[location]
latitude = 1.0
longitude = 2.0
name = "X"

[storage]
path = "data"

[log]
path = "logs/weather_alert_engine.log"
"""


def write_config(tmp_path, text):
    config_file = tmp_path / "config.toml"
    config_file.write_text(text)
    return config_file


def test_load_valid_config(tmp_path):
    """A valid config file should load without error."""
    config = load_config(write_config(tmp_path, VALID_TOML))

    assert config["location"]["name"] == "London"
    assert config["storage"]["path"] == "data"
    assert config["units"]["system"] == "imperial"
    assert config["notifications"]["backend"] == "log"
    assert config["log"]["level"] == "DEBUG"


def test_optional_sections_get_defaults(tmp_path):
    config = load_config(write_config(tmp_path, MINIMAL_TOML))

    assert config["units"]["system"] == "metric"
    assert config["notifications"]["backend"] == "macos"
    assert config["log"]["level"] == "INFO"


def test_missing_file_raises(tmp_path):
    """A missing config file should raise FileNotFoundError."""
    with pytest.raises(FileNotFoundError, match="config.toml.example"):
        load_config(tmp_path / "nonexistent.toml")


def test_missing_section_raises(tmp_path):
    """A config without a required section should raise ValueError."""
    bad_toml = "[location]\nlatitude = 1.0\nlongitude = 2.0\nname = 'X'\n"

    with pytest.raises(ValueError, match="Missing required config section"):
        load_config(write_config(tmp_path, bad_toml))


def test_missing_key_raises(tmp_path):
    """A config missing a required key inside a section should raise ValueError."""
    bad_toml = MINIMAL_TOML.replace('name = "X"\n', "")

    with pytest.raises(ValueError, match="name"):
        load_config(write_config(tmp_path, bad_toml))


def test_missing_storage_path_raises(tmp_path):
    bad_toml = MINIMAL_TOML.replace('[storage]\npath = "data"\n', "[storage]\n")

    with pytest.raises(ValueError, match=r"\[storage\].path"):
        load_config(write_config(tmp_path, bad_toml))


def test_unknown_unit_system_raises(tmp_path):
    bad_toml = MINIMAL_TOML + '\n[units]\nsystem = "kelvin"\n'

    with pytest.raises(ValueError, match="units"):
        load_config(write_config(tmp_path, bad_toml))


def test_unknown_notification_backend_raises(tmp_path):
    bad_toml = MINIMAL_TOML + '\n[notifications]\nbackend = "pager"\n'

    with pytest.raises(ValueError, match="backend"):
        load_config(write_config(tmp_path, bad_toml))
