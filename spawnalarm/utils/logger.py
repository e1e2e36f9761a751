#!/usr/bin/env python3
"""
🔍 Centralized Logging System for SpawnAlarm
Console logging everywhere, rotating files on request
Supports structured JSON logging for production observability
"""

import json
import logging
import logging.handlers
import os
import platform
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

from ..core.game_time import GameClock, format_game_time

IS_PRODUCTION = os.getenv('SPAWNALARM_ENV', 'development') == 'production'
IS_DEV_MODE = '--dev' in sys.argv or os.getenv('SPAWNALARM_DEV') == '1'

ENABLE_JSON_LOGS = os.getenv('SPAWNALARM_JSON_LOGS', '0') == '1'

if IS_PRODUCTION and not IS_DEV_MODE:
    LOG_LEVEL = logging.WARNING
    ENABLE_FILE_LOGGING = False
    MAX_LOG_SIZE = 1 * 1024 * 1024
    BACKUP_COUNT = 1
    # JSON logs by default in production unless explicitly disabled
    if os.getenv('SPAWNALARM_JSON_LOGS') is None:
        ENABLE_JSON_LOGS = True
else:
    LOG_LEVEL = logging.INFO
    ENABLE_FILE_LOGGING = os.getenv('SPAWNALARM_FORCE_FILE_LOG') == '1'
    MAX_LOG_SIZE = 10 * 1024 * 1024
    BACKUP_COUNT = 5


def _get_app_log_dir() -> Path:
    """Get application log directory path-agnostically"""
    env_log_dir = os.getenv('SPAWNALARM_LOG_DIR')
    if env_log_dir:
        return Path(env_log_dir)
    return Path.home() / ".spawnalarm" / "logs"


LOG_DIR = _get_app_log_dir()

# ---- Environment overrides (systemd friendly) ----
_env_level = os.getenv('SPAWNALARM_LOG_LEVEL')
if _env_level:
    LOG_LEVEL = getattr(logging, _env_level.upper(), LOG_LEVEL)

if os.getenv('SPAWNALARM_FORCE_FILE_LOG') == '1':
    ENABLE_FILE_LOGGING = True

_RESERVED_RECORD_KEYS = frozenset((
    'name', 'msg', 'args', 'created', 'filename', 'funcName',
    'levelname', 'levelno', 'lineno', 'module', 'msecs',
    'message', 'pathname', 'process', 'processName', 'relativeCreated',
    'thread', 'threadName', 'exc_info', 'exc_text', 'stack_info',
    'taskName', 'no_color'
))


class GameClockFilter(logging.Filter):
    """Stamp records with the in-game clock (``game_clock``, HH:MM)."""

    def __init__(self, clock: Any = None):
        super().__init__()
        self.clock = clock or GameClock()

    def filter(self, record: logging.LogRecord) -> bool:
        record.game_clock = format_game_time(self.clock.now())
        return True


class ColoredFormatter(logging.Formatter):
    """Custom formatter with colors for console output."""

    COLORS = {
        'DEBUG': '\033[36m',     # Cyan
        'INFO': '\033[32m',      # Green
        'WARNING': '\033[33m',   # Yellow
        'ERROR': '\033[31m',     # Red
        'CRITICAL': '\033[35m',  # Magenta
        'RESET': '\033[0m'       # Reset
    }

    def format(self, record: logging.LogRecord) -> str:
        if getattr(record, 'no_color', False):
            return super().format(record)

        color = self.COLORS.get(record.levelname, self.COLORS['RESET'])
        reset = self.COLORS['RESET']
        original = record.levelname
        record.levelname = f"{color}{record.levelname}{reset}"
        try:
            return super().format(record)
        finally:
            record.levelname = original


class JSONFormatter(logging.Formatter):
    """Structured JSON formatter for production observability.

    Example output:
        {"timestamp": "2025-11-04T10:30:00.123Z", "level": "WARNING",
         "logger": "alarm_views", "message": "Alarm could not be resolved",
         "alarm_key": "b41c", "error_code": "scheduling_timeout"}
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            'timestamp': datetime.fromtimestamp(record.created, tz=timezone.utc)
            .isoformat(timespec='milliseconds').replace('+00:00', 'Z'),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
        }

        # Add source location for errors and warnings
        if record.levelno >= logging.WARNING:
            log_data['source'] = f"{record.filename}:{record.lineno}"
            log_data['function'] = record.funcName

        if record.exc_info:
            log_data['exception'] = self.formatException(record.exc_info)

        # Extra fields passed via logger.info("msg", extra={...})
        for key, value in record.__dict__.items():
            if key in _RESERVED_RECORD_KEYS or key in log_data:
                continue
            try:
                json.dumps(value)
                log_data[key] = value
            except (TypeError, ValueError):
                log_data[key] = str(value)

        try:
            return json.dumps(log_data, ensure_ascii=True, sort_keys=True)
        except (TypeError, ValueError) as e:
            safe_data = {k: str(v) for k, v in log_data.items()}
            safe_data['_json_error'] = str(e)
            return json.dumps(safe_data, ensure_ascii=True, sort_keys=True)


def _file_formatter() -> logging.Formatter:
    if ENABLE_JSON_LOGS:
        return JSONFormatter()
    return logging.Formatter(
        '%(asctime)s | game %(game_clock)s | %(name)s | %(levelname)s | %(filename)s:%(lineno)d | %(message)s'
    )


def setup_logging() -> logging.Logger:
    """Initialize logging system for the application."""
    return setup_logger("spawnalarm")


def apply_log_level(level_name: Optional[str], name: str = "spawnalarm") -> int:
    """Apply the configured ``log_level`` to a logger and its handlers.

    ``SPAWNALARM_LOG_LEVEL`` wins over the configured value.
    """
    if _env_level or not level_name:
        level = LOG_LEVEL
    else:
        level = getattr(logging, str(level_name).upper(), LOG_LEVEL)
    logger = logging.getLogger(name)
    logger.setLevel(level)
    for handler in logger.handlers:
        handler.setLevel(level)
    return level


def setup_logger(name: str) -> logging.Logger:
    """
    Sets up a logger with appropriate handlers based on environment

    Args:
        name: Logger name (usually module name)

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)

    # Prevent duplicate handlers if logger already exists
    if logger.handlers:
        return logger

    logger.setLevel(LOG_LEVEL)
    game_clock = GameClockFilter()

    console_handler = logging.StreamHandler()
    console_handler.setLevel(LOG_LEVEL)
    console_handler.addFilter(game_clock)
    if ENABLE_JSON_LOGS:
        console_handler.setFormatter(JSONFormatter())
    elif IS_PRODUCTION and not IS_DEV_MODE:
        console_handler.setFormatter(logging.Formatter('%(asctime)s | game %(game_clock)s | %(levelname)s | %(message)s'))
    else:
        console_handler.setFormatter(ColoredFormatter('%(asctime)s | game %(game_clock)s | %(name)s | %(levelname)s | %(message)s'))
    logger.addHandler(console_handler)

    if ENABLE_FILE_LOGGING:
        try:
            LOG_DIR.mkdir(parents=True, exist_ok=True)
            file_handler = logging.handlers.RotatingFileHandler(
                LOG_DIR / "spawnalarm.log",
                maxBytes=MAX_LOG_SIZE,
                backupCount=BACKUP_COUNT,
                encoding='utf-8'
            )
            file_handler.setLevel(LOG_LEVEL)
            file_handler.addFilter(game_clock)
            file_handler.setFormatter(_file_formatter())
            logger.addHandler(file_handler)
        except OSError as exc:
            logger.warning("File logging disabled, %s not writable: %s", LOG_DIR, exc)

    return logger


def log_startup(module_name: str) -> None:
    """Log startup information for a module."""
    logger = logging.getLogger(module_name)
    logger.info(f"🚀 Starting {module_name}")
    logger.info(f"🐍 Python {platform.python_version()} on {platform.platform()}")
    if ENABLE_FILE_LOGGING:
        logger.info(f"📂 Logs: {LOG_DIR}")


def log_shutdown(logger: logging.Logger, component_name: str) -> None:
    """Log component shutdown and flush handlers."""
    logger.info(f"🛑 Shutting down {component_name}")
    for handler in logger.handlers:
        handler.flush()


def log_structured(logger: logging.Logger, level: int, message: str, **context: Any) -> None:
    """Log a message with structured context fields.

    In JSON mode, context fields appear as separate JSON keys. In traditional
    mode, they're appended to the message as key=value pairs.

    Example:
        >>> log_structured(logger, logging.WARNING, "Alarm could not be resolved",
        ...                alarm_key="b41c", error_code="scheduling_timeout")
    """
    if ENABLE_JSON_LOGS:
        logger.log(level, message, extra=context)
    elif context:
        context_str = " ".join(f"{k}={v}" for k, v in context.items())
        logger.log(level, f"{message} | {context_str}")
    else:
        logger.log(level, message)
