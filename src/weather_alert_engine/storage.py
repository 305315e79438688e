# Project: weather-alert-engine
# Owner: GreenUnicorn
"""
storage.py — Persist the engine's four state slices to a key-value store.

Each slice is one JSON string under its own key. Writes happen one key at
a time with no transaction: if the third write fails, the first two stay
written and the rest keep their previous value. Loading is forgiving: a
missing or corrupt slice falls back to its default and is logged, never
raised.
"""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Protocol

import structlog
from pydantic import TypeAdapter, ValidationError

from weather_alert_engine.models import AlertPreferences, AlertRule, WeatherAlert

logger = structlog.get_logger(__name__)

ALERTS_KEY = "weatherAlerts"
RULES_KEY = "weatherAlertRules"
PREFERENCES_KEY = "weatherAlertPreferences"
COUNTS_KEY = "weatherAlertCounts"

STATE_KEYS = (ALERTS_KEY, RULES_KEY, PREFERENCES_KEY, COUNTS_KEY)

_alerts_adapter = TypeAdapter(list[WeatherAlert])
_rules_adapter = TypeAdapter(list[AlertRule])
_counts_adapter = TypeAdapter(dict[str, int])


class KeyValueStore(Protocol):
    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...

    def remove(self, key: str) -> None: ...


class MemoryStore:
    """Dict-backed store. Lives as long as the process."""

    def __init__(self, data: Optional[dict[str, str]] = None):
        self.data: dict[str, str] = dict(data or {})

    def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value

    def remove(self, key: str) -> None:
        self.data.pop(key, None)


class FileStore:
    """One file per key under `directory`, e.g. data/weatherAlerts.json."""

    def __init__(self, directory: Path):
        self.directory = Path(directory)

    def _path(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def get(self, key: str) -> Optional[str]:
        path = self._path(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def set(self, key: str, value: str) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        self._path(key).write_text(value, encoding="utf-8")

    def remove(self, key: str) -> None:
        self._path(key).unlink(missing_ok=True)


@dataclass
class PersistedState:
    alerts: list[WeatherAlert] = field(default_factory=list)
    rules: list[AlertRule] = field(default_factory=list)
    preferences: AlertPreferences = field(default_factory=AlertPreferences)
    counts: dict[str, int] = field(default_factory=dict)


# ---------------------------------------------------------------------------
# Load
# ---------------------------------------------------------------------------

def _read_slice(store: KeyValueStore, key: str, parse):
    """Parse one key, returning None if it is missing, unreadable or invalid."""
    try:
        raw = store.get(key)
        if raw is None:
            return None
        return parse(raw)
    except (OSError, TypeError, ValueError, ValidationError) as e:
        logger.error("Error loading stored alert data", key=key, error=str(e))
        return None


def _parse_preferences(raw: str) -> AlertPreferences:
    """Stored fields override defaults; unknown fields are ignored."""
    stored = json.loads(raw)
    if not isinstance(stored, dict):
        raise ValueError("preferences must be a JSON object")
    merged = AlertPreferences().model_dump()
    merged.update({k: v for k, v in stored.items() if k in merged})
    return AlertPreferences.model_validate(merged)


def _parse_counts(raw: str) -> dict[str, int]:
    data = json.loads(raw)
    # Older files stored the counter map as a list of [day, count] pairs.
    if isinstance(data, list):
        data = dict(data)
    return _counts_adapter.validate_python(data)


def load_state(store: KeyValueStore) -> PersistedState:
    state = PersistedState()

    alerts = _read_slice(store, ALERTS_KEY, _alerts_adapter.validate_json)
    if alerts is not None:
        state.alerts = alerts

    rules = _read_slice(store, RULES_KEY, _rules_adapter.validate_json)
    if rules is not None:
        state.rules = rules

    preferences = _read_slice(store, PREFERENCES_KEY, _parse_preferences)
    if preferences is not None:
        state.preferences = preferences

    counts = _read_slice(store, COUNTS_KEY, _parse_counts)
    if counts is not None:
        state.counts = counts

    return state


# ---------------------------------------------------------------------------
# Save
# ---------------------------------------------------------------------------

def dump_state(state: PersistedState) -> dict[str, str]:
    """Serialize every slice to its JSON string, keyed by store key."""
    return {
        ALERTS_KEY: _alerts_adapter.dump_json(state.alerts).decode("utf-8"),
        RULES_KEY: _rules_adapter.dump_json(state.rules).decode("utf-8"),
        PREFERENCES_KEY: state.preferences.model_dump_json(),
        COUNTS_KEY: json.dumps(state.counts),
    }


def save_state(store: KeyValueStore, state: PersistedState) -> bool:
    """Write all four keys in order. Returns False (after logging) on failure."""
    try:
        for key, value in dump_state(state).items():
            store.set(key, value)
        return True
    except Exception as e:
        logger.error("Error saving alert data", error=str(e))
        return False


def clear_state(store: KeyValueStore) -> None:
    for key in STATE_KEYS:
        try:
            store.remove(key)
        except OSError as e:
            logger.error("Error removing stored alert data", key=key, error=str(e))
