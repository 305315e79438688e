# Project: weather-alert-engine
# Owner: GreenUnicorn
"""
notify.py — Turn stored alerts into platform notifications.

NotificationDispatcher decides *whether* an alert may be shown (global
switch, permission, quiet hours, minimum severity) and builds the request.
The backends below decide *how* it is shown:

- MacOSNotifier uses osascript (AppleScript via subprocess). It is built
  into macOS, so no third-party library is needed. AppleScript
  notifications cannot report clicks, so interaction callbacks are kept
  but never fire.
- LogFileNotifier appends a timestamped line to a file. Useful on Linux,
  under cron, and in tests.

A missing backend, a missing vibrator, or a denied permission is never an
error: the dispatcher logs it and carries on.
"""

import os
import shutil
import subprocess
import sys
from collections.abc import Callable
from datetime import datetime
from pathlib import Path
from typing import Optional, Protocol

import structlog

from weather_alert_engine.gate import is_quiet_hours
from weather_alert_engine.models import (
    AlertPreferences,
    AlertSeverity,
    NotificationRequest,
    WeatherAlert,
)

logger = structlog.get_logger(__name__)

PERMISSION_DEFAULT = "default"
PERMISSION_GRANTED = "granted"
PERMISSION_DENIED = "denied"

ALERT_ICON = "/icons/weather-alert.png"
ALERT_BADGE = "/icons/weather-badge.png"

EXTREME_VIBRATION = [200, 100, 200, 100, 200]
STANDARD_VIBRATION = [200, 100, 200]


class NotificationService(Protocol):
    def permission(self) -> str: ...

    def request_permission(self) -> str: ...

    def show(
        self,
        request: NotificationRequest,
        on_click: Callable[[], None],
        on_close: Callable[[], None],
    ) -> None: ...


class Vibrator(Protocol):
    def vibrate(self, pattern: list[int]) -> None: ...


# ---------------------------------------------------------------------------
# Dispatcher
# ---------------------------------------------------------------------------

class NotificationDispatcher:
    """Gatekeeper between new alerts and the notification backend.

    Permission is requested once, at construction, and only if the backend
    reports it as undetermined. Individual alerts never re-prompt.
    """

    def __init__(
        self,
        service: Optional[NotificationService],
        preferences: AlertPreferences,
        on_interaction: Callable[[str], None],
        vibrator: Optional[Vibrator] = None,
    ):
        self.service = service
        self.preferences = preferences
        self.on_interaction = on_interaction
        self.vibrator = vibrator
        self.permission = PERMISSION_DENIED
        self._request_permission()

    def _request_permission(self) -> None:
        if self.service is None:
            logger.warning("Notifications not supported on this platform")
            return
        try:
            self.permission = self.service.permission()
            if self.permission == PERMISSION_DEFAULT:
                self.permission = self.service.request_permission()
                logger.info("Notification permission requested", permission=self.permission)
        except Exception as e:
            logger.error("Error requesting notification permission", error=str(e))
            self.permission = PERMISSION_DENIED

    def build_request(self, alert: WeatherAlert) -> NotificationRequest:
        return NotificationRequest(
            title=alert.title,
            body=alert.description,
            icon=ALERT_ICON,
            badge=ALERT_BADGE,
            tag=f"weather-alert-{alert.type.value}",
            data={"alertId": alert.id, "location": alert.location},
            require_interaction=alert.severity == AlertSeverity.EXTREME,
            silent=not self.preferences.enable_sounds,
        )

    def dispatch(self, alert: WeatherAlert, now: Optional[datetime] = None) -> bool:
        """Show a notification for `alert` if every guard allows it.

        Returns:
            True if the notification was handed to the backend.
        """
        now = now or datetime.now()
        try:
            if alert.notification_sent:
                return False

            if not self.preferences.enable_notifications:
                logger.info("Notifications disabled, skipping notification", alert=alert.id)
                return False

            if self.service is None or self.permission != PERMISSION_GRANTED:
                logger.warning(
                    "Notification permission not granted, skipping notification",
                    alert=alert.id,
                )
                return False

            if is_quiet_hours(self.preferences, now):
                logger.info("Within quiet hours, skipping notification", alert=alert.id)
                return False

            if alert.severity.rank < self.preferences.minimum_severity.rank:
                logger.info(
                    "Alert below minimum severity, skipping notification",
                    alert=alert.id,
                    severity=alert.severity.value,
                    minimum=self.preferences.minimum_severity.value,
                )
                return False

            alert_id = alert.id
            self.service.show(
                self.build_request(alert),
                on_click=lambda: self.on_interaction(alert_id),
                on_close=lambda: self.on_interaction(alert_id),
            )

            if self.preferences.enable_vibration and self.vibrator is not None:
                pattern = (
                    EXTREME_VIBRATION
                    if alert.severity == AlertSeverity.EXTREME
                    else STANDARD_VIBRATION
                )
                self.vibrator.vibrate(list(pattern))

            alert.notification_sent = True
            logger.info(
                "Notification sent successfully",
                alertId=alert.id,
                type=alert.type.value,
                severity=alert.severity.value,
            )
            return True
        except Exception as e:
            logger.error("Error sending notification", error=str(e), alertId=alert.id)
            return False


# ---------------------------------------------------------------------------
# Backends
# ---------------------------------------------------------------------------

class MacOSNotifier:
    """Native macOS notifications through osascript."""

    def permission(self) -> str:
        if sys.platform == "darwin" and shutil.which("osascript"):
            return PERMISSION_GRANTED
        return PERMISSION_DENIED

    def request_permission(self) -> str:
        # macOS prompts on first display; there is nothing to ask up front.
        return self.permission()

    def show(self, request, on_click, on_close) -> None:
        """Display a notification via osascript.

        Title and body go through environment variables so that quotes or
        backslashes in weather text cannot inject AppleScript.
        """
        script = (
            'display notification (system attribute "WA_MSG") '
            'with title (system attribute "WA_TITLE")'
        )
        if not request.silent:
            script += ' sound name "default"'
        env = {**os.environ, "WA_TITLE": request.title, "WA_MSG": request.body}

        result = subprocess.run(
            ["osascript", "-e", script],
            capture_output=True,
            text=True,
            env=env,
        )
        if result.returncode != 0:
            err = result.stderr.strip() or result.stdout.strip()
            raise RuntimeError(f"osascript failed: {err}")


class LogFileNotifier:
    """Append each notification to a text file instead of showing it."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def permission(self) -> str:
        return PERMISSION_GRANTED

    def request_permission(self) -> str:
        return PERMISSION_GRANTED

    def show(self, request, on_click, on_close) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
        line = f"[{timestamp}] [{request.tag}] {request.title}: {request.body}\n"
        with open(self.path, "a") as f:
            f.write(line)


def build_notifier(config: dict) -> Optional[NotificationService]:
    """Pick a backend from the [notifications] config section.

    backend = "macos" | "log" | "none". "log" writes next to the main log
    file as notifications.log unless [notifications].path is given.
    """
    notif_config = config.get("notifications", {})
    backend = notif_config.get("backend", "macos")

    if backend == "macos":
        return MacOSNotifier()
    if backend == "log":
        default_path = Path(config["log"]["path"]).parent / "notifications.log"
        return LogFileNotifier(Path(notif_config.get("path", default_path)))
    if backend == "none":
        return None
    raise ValueError(f"Unknown notification backend: {backend!r}")
