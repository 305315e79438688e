# Project: weather-alert-engine
# Owner: GreenUnicorn
"""
utils.py — Shared utilities: retry logic and display formatting.
"""

import time
from collections.abc import Callable
from datetime import datetime
from typing import Any

import structlog

logger = structlog.get_logger(__name__)

MAX_ATTEMPTS = 3
RETRY_DELAY_SECONDS = 5


def fmt_timestamp(moment: datetime) -> str:
    """Format a datetime as a short human-readable label.

    Args:
        moment: Any datetime.

    Returns:
        Formatted string like 'Mon 24 Feb, 15:04'.
    """
    return moment.strftime("%a %d %b, %H:%M")


def with_retry(
    fn: Callable[..., Any],
    *args: Any,
    label: str = "API call",
    **kwargs: Any,
) -> Any:
    """Call a function up to MAX_ATTEMPTS times, retrying on any exception.

    Args:
        fn: Callable to invoke (usually a zero-argument closure).
        *args: Positional arguments forwarded to fn.
        label: Human-readable name for the call, used in log messages.
        **kwargs: Keyword arguments forwarded to fn.

    Returns:
        The return value of fn on success.

    Raises:
        RuntimeError: If all MAX_ATTEMPTS attempts raise exceptions.
    """
    for attempt in range(1, MAX_ATTEMPTS + 1):
        try:
            return fn(*args, **kwargs)
        except Exception as e:
            if attempt < MAX_ATTEMPTS:
                logger.warning(
                    f"{label} failed, retrying",
                    attempt=attempt,
                    max_attempts=MAX_ATTEMPTS,
                    error=str(e),
                    retry_in_seconds=RETRY_DELAY_SECONDS,
                )
                time.sleep(RETRY_DELAY_SECONDS)
            else:
                msg = f"All {MAX_ATTEMPTS} attempts failed for {label}. Check your internet connection."
                logger.error(msg, error=str(e))
                raise RuntimeError(msg) from e
