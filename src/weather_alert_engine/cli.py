# Project: weather-alert-engine
# Owner: GreenUnicorn
"""
cli.py — Command-line interface for weather-alert-engine.

We use argparse (stdlib) rather than click: no extra dependency, and it is
plenty for a handful of flat subcommands.

Commands:
  weather-alert-engine run-once             — fetch + evaluate + notify
  weather-alert-engine alerts               — list stored alerts
  weather-alert-engine read / dismiss       — acknowledge alerts
  weather-alert-engine rules / rule-*       — manage alert rules
  weather-alert-engine prefs / prefs-*      — show or change preferences
  weather-alert-engine test-notification    — send a fake alert
  weather-alert-engine clear-data           — forget all alert state
"""

import argparse
from datetime import datetime
from pathlib import Path

from weather_alert_engine.config import DEFAULT_CONFIG_PATH, load_config
from weather_alert_engine.engine import AlertEngine
from weather_alert_engine.geocode import LocationNotFoundError, geocode
from weather_alert_engine.logging_setup import configure_logging
from weather_alert_engine.models import (
    AlertConditions,
    AlertRuleCreate,
    AlertSeverity,
    AlertType,
    CURRENT_LOCATION,
    PrecipitationCondition,
    TemperatureCondition,
    ThresholdCondition,
    TimeRange,
    WeatherAlert,
)
from weather_alert_engine.notify import PERMISSION_GRANTED, build_notifier
from weather_alert_engine.storage import FileStore
from weather_alert_engine.units import UnitFormatter
from weather_alert_engine.utils import fmt_timestamp
from weather_alert_engine.weather import fetch_current

SEVERITY_ICONS = {
    AlertSeverity.INFO: "ℹ️ ",
    AlertSeverity.WARNING: "⚠️ ",
    AlertSeverity.SEVERE: "🟠",
    AlertSeverity.EXTREME: "🔴",
}


def build_engine(config: dict) -> AlertEngine:
    """Wire an AlertEngine to the store, notifier and units from config."""
    return AlertEngine(
        store=FileStore(Path(config["storage"]["path"])),
        notifier=build_notifier(config),
        units=UnitFormatter(config["units"]["system"]),
    )


def _load(args) -> dict:
    try:
        config = load_config(Path(args.config))
    except (FileNotFoundError, ValueError) as e:
        print(f"[error] {e}")
        raise SystemExit(1)
    configure_logging(config["log"]["level"], Path(config["log"]["path"]))
    return config


def format_alert(alert: WeatherAlert) -> str:
    flags = []
    if not alert.is_active:
        flags.append("dismissed")
    elif not alert.is_read:
        flags.append("unread")
    if alert.notification_sent:
        flags.append("notified")
    flag_str = f" [{', '.join(flags)}]" if flags else ""
    return (
        f"{SEVERITY_ICONS[alert.severity]} {alert.title} — {alert.location} "
        f"({fmt_timestamp(alert.created_at)}){flag_str}\n"
        f"    {alert.description}\n"
        f"    id: {alert.id}"
    )


# ---------------------------------------------------------------------------
# Alerts
# ---------------------------------------------------------------------------

def cmd_run_once(args) -> None:
    """Fetch current weather, run the alert engine, print what fired."""
    config = _load(args)

    try:
        if args.location:
            loc = geocode(args.location)
        else:
            loc = config["location"]
        latitude, longitude, display_name = loc["latitude"], loc["longitude"], loc["name"]

        print(f"Fetching current weather for {display_name}...")
        snapshot = fetch_current(latitude, longitude, units=config["units"]["system"])
    except (LocationNotFoundError, RuntimeError) as e:
        print(f"[error] {e}")
        raise SystemExit(1)

    engine = build_engine(config)
    alerts = engine.process_weather_data(
        snapshot,
        display_name,
        coordinates={"lat": latitude, "lon": longitude},
    )

    if alerts:
        for alert in alerts:
            print(format_alert(alert))
    else:
        print("✅ No new alerts.")


def cmd_alerts(args) -> None:
    config = _load(args)
    engine = build_engine(config)
    alerts = engine.alerts.list(
        active_only=args.active,
        unread_only=args.unread,
        since_days=args.days,
        now=datetime.now(),
    )
    if not alerts:
        print("No alerts.")
        return
    for alert in alerts:
        print(format_alert(alert))


def cmd_read(args) -> None:
    config = _load(args)
    engine = build_engine(config)
    if args.all:
        engine.mark_all_alerts_as_read()
        print("All alerts marked as read.")
        return
    if not args.alert_id:
        print("[error] Give an alert id or --all.")
        raise SystemExit(1)
    if not engine.mark_alert_as_read(args.alert_id):
        print(f"[error] No alert with id {args.alert_id}")
        raise SystemExit(1)
    print(f"Alert {args.alert_id} marked as read.")


def cmd_dismiss(args) -> None:
    config = _load(args)
    engine = build_engine(config)
    if not engine.dismiss_alert(args.alert_id):
        print(f"[error] No alert with id {args.alert_id}")
        raise SystemExit(1)
    print(f"Alert {args.alert_id} dismissed.")


# ---------------------------------------------------------------------------
# Rules
# ---------------------------------------------------------------------------

def cmd_rules(args) -> None:
    config = _load(args)
    engine = build_engine(config)
    for rule in engine.get_alert_rules():
        status = "on " if rule.enabled else "off"
        conditions = rule.conditions.model_dump(exclude_none=True)
        window = f" {rule.time_range.start}-{rule.time_range.end}" if rule.time_range else ""
        print(
            f"[{status}] {rule.id}  {rule.type.value:<13} {rule.severity.value:<8} "
            f"{rule.title}  {conditions}  @ {', '.join(rule.locations)}{window}"
        )


def parse_time_range(raw: str) -> TimeRange:
    """'22:00-07:00' -> TimeRange(start='22:00', end='07:00')."""
    start, sep, end = raw.partition("-")
    if not sep:
        raise ValueError(f"Invalid time range {raw!r}; use HH:MM-HH:MM")
    return TimeRange(start=start.strip(), end=end.strip())


def rule_from_args(args) -> AlertRuleCreate:
    temperature = None
    if args.temp_min is not None or args.temp_max is not None:
        temperature = TemperatureCondition(min=args.temp_min, max=args.temp_max)
    conditions = AlertConditions(
        temperature=temperature,
        precipitation=(
            PrecipitationCondition(threshold=args.precip) if args.precip is not None else None
        ),
        wind_speed=ThresholdCondition(threshold=args.wind) if args.wind is not None else None,
        visibility=(
            ThresholdCondition(threshold=args.visibility) if args.visibility is not None else None
        ),
    )
    return AlertRuleCreate(
        type=AlertType(args.type),
        conditions=conditions,
        locations=args.locations or [CURRENT_LOCATION],
        time_range=parse_time_range(args.time_range) if args.time_range else None,
        severity=AlertSeverity(args.severity),
        notification_enabled=not args.no_notify,
        title=args.title,
        description=args.description,
    )


def cmd_rule_add(args) -> None:
    config = _load(args)
    try:
        rule = rule_from_args(args)
    except ValueError as e:
        print(f"[error] {e}")
        raise SystemExit(1)
    engine = build_engine(config)
    rule_id = engine.add_alert_rule(rule)
    print(f"Rule added: {rule_id}")


def _set_rule_enabled(args, enabled: bool) -> None:
    config = _load(args)
    engine = build_engine(config)
    if not engine.update_alert_rule(args.rule_id, {"enabled": enabled}):
        print(f"[error] No rule with id {args.rule_id}")
        raise SystemExit(1)
    print(f"Rule {args.rule_id} {'enabled' if enabled else 'disabled'}.")


def cmd_rule_enable(args) -> None:
    _set_rule_enabled(args, True)


def cmd_rule_disable(args) -> None:
    _set_rule_enabled(args, False)


def cmd_rule_delete(args) -> None:
    config = _load(args)
    engine = build_engine(config)
    if not engine.delete_alert_rule(args.rule_id):
        print(f"[error] No rule with id {args.rule_id}")
        raise SystemExit(1)
    print(f"Rule {args.rule_id} deleted.")


# ---------------------------------------------------------------------------
# Preferences
# ---------------------------------------------------------------------------

def cmd_prefs(args) -> None:
    config = _load(args)
    engine = build_engine(config)
    prefs = engine.get_preferences()
    for key, value in prefs.model_dump(mode="json").items():
        if key == "quiet_hours":
            value = f"{value['start']}-{value['end']}"
        print(f"  {key:<30} {value}")
    print(f"  {'alerts today':<30} {engine.daily_count()}/{prefs.max_alerts_per_day}")


def parse_preference_assignments(pairs: list[str]) -> dict:
    """['max_alerts_per_day=5', 'quiet_hours=23:00-06:00'] -> update dict.

    Values stay strings (pydantic coerces them) except quiet_hours.
    """
    updates = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep:
            raise ValueError(f"Expected KEY=VALUE, got {pair!r}")
        key = key.strip()
        value = value.strip()
        if key == "quiet_hours":
            updates[key] = parse_time_range(value).model_dump()
        else:
            updates[key] = value
    return updates


def cmd_prefs_set(args) -> None:
    config = _load(args)
    engine = build_engine(config)
    try:
        engine.update_preferences(parse_preference_assignments(args.assignments))
    except ValueError as e:
        print(f"[error] {e}")
        raise SystemExit(1)
    print("Preferences updated.")


def cmd_prefs_reset(args) -> None:
    config = _load(args)
    engine = build_engine(config)
    engine.reset_preferences()
    print("Preferences reset to defaults.")


# ---------------------------------------------------------------------------
# Maintenance
# ---------------------------------------------------------------------------

def cmd_test_notification(args) -> None:
    """Push a fake extreme alert through the configured notification backend."""
    config = _load(args)
    engine = build_engine(config)
    now = datetime.now()
    alert = WeatherAlert(
        id="test-notification",
        type=AlertType.GENERAL,
        severity=AlertSeverity.EXTREME,
        title="Weather Alert Test",
        description="This is a test notification.",
        location=config["location"]["name"],
        start_time=now,
        created_at=now,
    )
    # Bypasses quiet hours and preferences; only a backend and permission are needed.
    dispatcher = engine.dispatcher
    if dispatcher.service is None or dispatcher.permission != PERMISSION_GRANTED:
        print("[notify] No notification backend available, or permission not granted.")
        raise SystemExit(1)
    try:
        dispatcher.service.show(
            dispatcher.build_request(alert),
            on_click=lambda: None,
            on_close=lambda: None,
        )
    except (OSError, RuntimeError) as e:
        print(f"[notify] Test notification failed: {e}")
        raise SystemExit(1)
    print("[notify] Test notification sent.")


def cmd_clear_data(args) -> None:
    config = _load(args)
    engine = build_engine(config)
    engine.clear_all_data()
    print("All alert data cleared. Default rules restored.")


def main() -> None:
    parser = argparse.ArgumentParser(
        prog="weather-alert-engine",
        description="Rule-driven weather alerts using Open-Meteo",
    )
    parser.add_argument(
        "--config",
        metavar="PATH",
        default=str(DEFAULT_CONFIG_PATH),
        help="Path to the TOML config file (default: config.toml)",
    )
    subparsers = parser.add_subparsers(dest="command", metavar="command")
    subparsers.required = True

    p_run = subparsers.add_parser("run-once", help="Fetch weather and raise alerts if triggered")
    p_run.add_argument(
        "--location",
        metavar="PLACE",
        default=None,
        help='Look up coordinates by place name, e.g. "Tokyo" or "London, UK"',
    )

    p_alerts = subparsers.add_parser("alerts", help="List stored alerts, newest first")
    p_alerts.add_argument("--active", action="store_true", help="Only alerts not dismissed")
    p_alerts.add_argument("--unread", action="store_true", help="Only unread alerts")
    p_alerts.add_argument("--days", type=int, default=None, help="Only the last N days")

    p_read = subparsers.add_parser("read", help="Mark an alert (or all alerts) as read")
    p_read.add_argument("alert_id", nargs="?", default=None)
    p_read.add_argument("--all", action="store_true", help="Mark every alert as read")

    p_dismiss = subparsers.add_parser("dismiss", help="Dismiss an alert")
    p_dismiss.add_argument("alert_id")

    subparsers.add_parser("rules", help="List alert rules")

    p_add = subparsers.add_parser("rule-add", help="Add an alert rule")
    p_add.add_argument("--type", required=True, choices=[t.value for t in AlertType])
    p_add.add_argument("--title", required=True)
    p_add.add_argument("--description", default="", help="May use {location} {temperature} {windSpeed} {time}")
    p_add.add_argument("--severity", default="warning", choices=[s.value for s in AlertSeverity])
    p_add.add_argument("--temp-min", type=float, default=None)
    p_add.add_argument("--temp-max", type=float, default=None)
    p_add.add_argument("--precip", type=float, default=None, help="Precipitation threshold")
    p_add.add_argument("--wind", type=float, default=None, help="Wind speed threshold")
    p_add.add_argument("--visibility", type=float, default=None, help="Visibility threshold")
    p_add.add_argument(
        "--location",
        dest="locations",
        action="append",
        metavar="NAME",
        help='Location name (repeatable). Default: "current"',
    )
    p_add.add_argument("--time-range", metavar="HH:MM-HH:MM", default=None)
    p_add.add_argument("--no-notify", action="store_true", help="Store alerts but never notify")

    for name, help_text in (
        ("rule-enable", "Enable a rule"),
        ("rule-disable", "Disable a rule"),
        ("rule-delete", "Delete a rule"),
    ):
        p = subparsers.add_parser(name, help=help_text)
        p.add_argument("rule_id")

    subparsers.add_parser("prefs", help="Show alert preferences")
    p_set = subparsers.add_parser("prefs-set", help="Change preferences, e.g. max_alerts_per_day=5")
    p_set.add_argument("assignments", nargs="+", metavar="KEY=VALUE")
    subparsers.add_parser("prefs-reset", help="Reset preferences to defaults")

    subparsers.add_parser("test-notification", help="Send a test notification")
    subparsers.add_parser("clear-data", help="Delete all alerts, rules, preferences and counters")

    args = parser.parse_args()

    commands = {
        "run-once": cmd_run_once,
        "alerts": cmd_alerts,
        "read": cmd_read,
        "dismiss": cmd_dismiss,
        "rules": cmd_rules,
        "rule-add": cmd_rule_add,
        "rule-enable": cmd_rule_enable,
        "rule-disable": cmd_rule_disable,
        "rule-delete": cmd_rule_delete,
        "prefs": cmd_prefs,
        "prefs-set": cmd_prefs_set,
        "prefs-reset": cmd_prefs_reset,
        "test-notification": cmd_test_notification,
        "clear-data": cmd_clear_data,
    }
    commands[args.command](args)


if __name__ == "__main__":
    main()
