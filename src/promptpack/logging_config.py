"""
Logging configuration for promptpack.

Configures the "promptpack" logger hierarchy from Settings: console output
split between stdout (DEBUG/INFO) and stderr (WARNING and above), and an
optional rotating log file per context ("cli", "host", ...).
"""

import json
import logging
import logging.handlers
import sys
from typing import Optional

from promptpack.config import Settings

PACKAGE_LOGGER = "promptpack"

STANDARD_FORMAT = "[%(asctime)s] [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Marks handlers installed here so repeated setup replaces them
_HANDLER_ATTR = "_promptpack_handler"


class JSONFormatter(logging.Formatter):
    """One JSON object per log line."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": self.formatTime(record, DATE_FORMAT),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info and record.exc_info[0]:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False)


class _MaxLevelFilter(logging.Filter):
    def __init__(self, max_level: int) -> None:
        super().__init__()
        self.max_level = max_level

    def filter(self, record: logging.LogRecord) -> bool:
        return record.levelno <= self.max_level


def _build_formatter(log_format: str) -> logging.Formatter:
    if log_format.lower() == "json":
        return JSONFormatter()
    return logging.Formatter(fmt=STANDARD_FORMAT, datefmt=DATE_FORMAT)


def setup_logging(
    context: str = "promptpack",
    settings: Optional[Settings] = None,
) -> logging.Logger:
    """
    Configure the promptpack logger.

    Args:
        context: Name of the log file (<log_dir>/<context>.log)
        settings: Settings to use (defaults to the global settings)

    Returns:
        The configured package logger

    Raises:
        PermissionError: If file logging is enabled but the log directory is
                         not writable
    """
    if settings is None:
        from promptpack.config import settings as global_settings

        settings = global_settings

    logger = logging.getLogger(PACKAGE_LOGGER)
    level = getattr(logging, settings.log_level.upper(), logging.INFO)
    logger.setLevel(level)

    for handler in list(logger.handlers):
        if getattr(handler, _HANDLER_ATTR, False):
            logger.removeHandler(handler)
            handler.close()

    formatter = _build_formatter(settings.log_format)
    handlers: list[logging.Handler] = []

    if settings.log_console_enabled:
        stdout_handler = logging.StreamHandler(sys.stdout)
        stdout_handler.addFilter(_MaxLevelFilter(logging.INFO))
        stderr_handler = logging.StreamHandler(sys.stderr)
        stderr_handler.setLevel(logging.WARNING)
        handlers.extend([stdout_handler, stderr_handler])

    if settings.log_file_enabled:
        log_dir = settings.log_directory
        log_dir.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            log_dir / f"{context}.log",
            maxBytes=settings.log_max_bytes,
            backupCount=settings.log_backup_count,
            encoding="utf-8",
        )
        handlers.append(file_handler)

    for handler in handlers:
        handler.setFormatter(formatter)
        setattr(handler, _HANDLER_ATTR, True)
        logger.addHandler(handler)

    logger.debug(f"Logging configured (context={context}, level={settings.log_level})")
    return logger
