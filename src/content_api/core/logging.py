"""Loguru logging configuration.

One stderr sink, human-readable by default or one JSON object per line when
``json_logs`` is set, plus an optional rotating file sink in the same format.
"""

import sys
from pathlib import Path

from loguru import logger

_LOG_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level:<8} | {name}:{function}:{line} | {message}"
_LOG_FILE_NAME = "content-api.log"


def setup_logging(log_level: str = "INFO", log_dir: str | None = None, *, json_logs: bool = False) -> None:
    """Replace all Loguru sinks with the configured set.

    Args:
        log_level: Minimum log level to emit (case-insensitive).
        log_dir: Optional directory for log files.  When set, a file sink is
            added that rotates every 24 hours and keeps 7 days of history.
        json_logs: Serialize records as JSON instead of the text format.
    """
    level = log_level.upper()
    logger.remove()
    logger.add(sys.stderr, level=level, format=_LOG_FORMAT, serialize=json_logs)

    if not log_dir:
        return
    log_path = Path(log_dir)
    log_path.mkdir(parents=True, exist_ok=True)
    logger.add(
        log_path / _LOG_FILE_NAME,
        level=level,
        format=_LOG_FORMAT,
        serialize=json_logs,
        rotation="24h",
        retention="7 days",
    )
