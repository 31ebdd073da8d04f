# SPDX-License-Identifier: GPL-3.0-or-later
# Logging setup

"""Local logging configuration: rotating JSON log file plus console output."""

from __future__ import annotations

import json
import logging
import logging.handlers
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict

_LOGGER_NAME = "nvidia_monitor"


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "ts_utc": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=True)


def configure_logging(config_dir: Path, keep_files: int = 7, console: bool = True,
                      level: int = logging.INFO) -> logging.Logger:
    """Configure the application logger once.

    Log files go to ``<config_dir>/logs`` and rotate at midnight.
    Calling this again returns the already configured logger.
    """
    logger = logging.getLogger(_LOGGER_NAME)
    if logger.handlers:
        return logger

    logger.setLevel(level)

    log_dir = config_dir / "logs"
    try:
        log_dir.mkdir(parents=True, exist_ok=True)
        handler = logging.handlers.TimedRotatingFileHandler(
            filename=str(log_dir / "nvidia-monitor.log"),
            when="midnight",
            backupCount=max(2, keep_files),
            encoding="utf-8",
        )
    except OSError as e:
        # Console logging still works without a writable config directory
        console = True
        file_error = e
    else:
        handler.setFormatter(JsonFormatter())
        logger.addHandler(handler)
        file_error = None

    if console:
        stream_handler = logging.StreamHandler()
        stream_handler.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))
        logger.addHandler(stream_handler)

    if file_error is not None:
        logger.warning("Could not open log file in %s: %s", log_dir, file_error)
    logger.debug("logging configured")
    return logger


def get_logger() -> logging.Logger:
    return logging.getLogger(_LOGGER_NAME)
