"""Loguru logging configuration.

Every record is written to stderr in a human-readable line.  Summary records
from directory syncs and outreach batches are bound with ``json_output=True``
and are also emitted to stderr as serialized JSON.  When a ``log_dir`` is
given, all records are appended as JSON lines to ``outreach-api.log``.
"""

import sys
from pathlib import Path

from loguru import logger

_LOG_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level:<8} | {name}:{function}:{line} | {message}"
LOG_FILE_NAME = "outreach-api.log"


def _is_json_record(record: dict) -> bool:
    return bool(record["extra"].get("json_output", False))


def setup_logging(log_level: str = "INFO", log_dir: str | None = None) -> None:
    """Configure Loguru sinks.

    Args:
        log_level: Minimum log level to emit.
        log_dir: Optional directory for a JSON-lines log file, rotated every
            24 hours and retained for 7 days.
    """
    level = log_level.upper()
    logger.remove()
    logger.add(sys.stderr, level=level, format=_LOG_FORMAT)
    logger.add(sys.stderr, level=level, serialize=True, filter=_is_json_record)

    if log_dir:
        log_path = Path(log_dir)
        log_path.mkdir(parents=True, exist_ok=True)
        logger.add(
            log_path / LOG_FILE_NAME,
            level=level,
            serialize=True,
            rotation="24h",
            retention="7 days",
        )
