"""Logging helpers for the fetcher."""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
import os
from pathlib import Path
from typing import Optional

_CONFIGURED = False

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def setup_logging(log_path: Optional[Path] = None) -> Optional[Path]:
    """Configure root logging to stderr and, optionally, a rotating file.

    The file handler is attached when ``log_path`` is given or
    ``FCO_BACKUP_LOG_FILE`` is set. Returns the log file path, if any.
    """
    global _CONFIGURED
    resolved = _resolve_log_path(log_path)
    if _CONFIGURED:
        return resolved

    level_name = os.environ.get("FCO_BACKUP_LOG_LEVEL", "INFO").upper()
    level = getattr(logging, level_name, logging.INFO)

    formatter = logging.Formatter(LOG_FORMAT)

    root = logging.getLogger()
    root.setLevel(level)

    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(formatter)
    root.addHandler(stream_handler)

    if resolved is not None:
        resolved.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            resolved,
            maxBytes=5 * 1024 * 1024,
            backupCount=3,
            encoding="utf-8",
        )
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)

    # urllib3 logs every connection at DEBUG.
    logging.getLogger("urllib3").setLevel(max(level, logging.INFO))

    _CONFIGURED = True
    logging.getLogger("fco_backup").debug("Logging initialized: %s", resolved or "stderr")
    return resolved


def _resolve_log_path(log_path: Optional[Path]) -> Optional[Path]:
    if log_path is not None:
        return log_path
    env_path = os.environ.get("FCO_BACKUP_LOG_FILE")
    if env_path:
        return Path(env_path)
    return None
