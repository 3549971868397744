"""JSONL activity log for a teamtwin project.

Every CLI command and the wizard server append one JSON object per record to
.teamtwin/teamtwin.log (rotated at 5MB, 3 backups). Editors attach context
through ``extra={"team": ..., "op": ..., "error": ...}``; those keys become
top-level fields so the log can be filtered per team or per operation.
The threshold comes from ``log_level`` in config.json.
"""

from __future__ import annotations

import json
import logging
import os
import threading
from datetime import UTC, datetime
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

_LOG_FILENAME = "teamtwin.log"
_PACKAGE_LOGGER = "teamtwin"
_EXTRA_FIELDS = ("team", "op", "error")
_MAX_BYTES = 5 * 1024 * 1024  # 5MB
_BACKUP_COUNT = 3
DEFAULT_LOG_LEVEL = "INFO"
_setup_lock = threading.Lock()


class _JsonFormatter(logging.Formatter):
    """One JSON object per record, with wizard context lifted to the top level."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=UTC).isoformat(timespec="milliseconds"),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        entry.update({name: getattr(record, name) for name in _EXTRA_FIELDS if hasattr(record, name)})
        if record.exc_info and record.exc_info[1]:
            entry["exception"] = str(record.exc_info[1])
        return json.dumps(entry, default=str)


def _resolve_level(level: str | int) -> int:
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(level.strip().upper())
    return resolved if isinstance(resolved, int) else logging.INFO


def _project_handler(logger: logging.Logger) -> RotatingFileHandler | None:
    for h in logger.handlers:
        if isinstance(h, RotatingFileHandler):
            return h
    return None


def setup_logging(teamtwin_dir: Path, *, level: str | int = DEFAULT_LOG_LEVEL) -> logging.Logger:
    """Attach the project log file to the ``teamtwin`` logger and return it.

    One project log at a time: pointing at another directory swaps the file.
    Unknown level names fall back to INFO.
    """
    logger = logging.getLogger(_PACKAGE_LOGGER)
    log_path = teamtwin_dir / _LOG_FILENAME
    target_filename = os.path.abspath(str(log_path))

    with _setup_lock:
        logger.setLevel(_resolve_level(level))
        current = _project_handler(logger)
        if current is not None:
            if current.baseFilename == target_filename:
                return logger
            logger.removeHandler(current)
            current.close()

        handler = RotatingFileHandler(str(log_path), maxBytes=_MAX_BYTES, backupCount=_BACKUP_COUNT, encoding="utf-8")
        handler.setFormatter(_JsonFormatter())
        logger.addHandler(handler)
    return logger
