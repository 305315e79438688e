# Project: weather-alert-engine
# Owner: GreenUnicorn
"""
logging_setup.py — structlog configuration for the command-line tool.

Console output goes to stderr so that command output on stdout stays
clean. When a log path is given, the same lines are appended there too,
which is what cron runs rely on.
"""

import logging
import sys
from pathlib import Path
from typing import Optional

import structlog


def configure_logging(level: str = "INFO", log_path: Optional[Path] = None) -> None:
    """Route structlog through stdlib logging with a timestamped console format.

    Args:
        level: Minimum level name, e.g. "INFO" or "DEBUG".
        log_path: Optional file that receives a copy of every log line.
    """
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_path is not None:
        log_path = Path(log_path)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_path))

    logging.basicConfig(
        format="%(message)s",
        level=getattr(logging, level.upper(), logging.INFO),
        handlers=handlers,
        force=True,
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.dev.ConsoleRenderer(colors=False),
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
