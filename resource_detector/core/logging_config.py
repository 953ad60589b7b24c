"""
Logging Configuration Module.

Importing the detector never touches the root logger. An application that
embeds it calls :func:`setup_logging` once at startup to get a console handler,
an optional file handler and quieter third-party loggers.

Environment:
- ``RESOURCE_DETECTOR_LOG_LEVEL`` (through :class:`Settings`): default level
- ``LOG_FORMAT``: ``simple``, ``detailed`` (default) or ``json``
- ``LOG_FILE_DIR``: directory of ``resource_detector.log`` (default ``logs``)
- ``ENABLE_FILE_LOGGING``: global switch for the file handler (default off)
"""

import logging
import os
from pathlib import Path
from typing import Dict, List, Optional


def _default_level() -> str:
    # Settings is imported lazily; a broken .env must not break logging
    try:
        from resource_detector.core.config import settings

        return settings.log_level.upper()
    except Exception:
        return os.getenv("RESOURCE_DETECTOR_LOG_LEVEL", "INFO").upper()


LOG_LEVEL = _default_level()
LOG_FORMAT = os.getenv("LOG_FORMAT", "detailed")
LOG_FILE_DIR = os.getenv("LOG_FILE_DIR", "logs")
ENABLE_FILE_LOGGING = os.getenv("ENABLE_FILE_LOGGING", "false").lower() in ("true", "1", "yes")

LOG_FILE_NAME = "resource_detector.log"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

SIMPLE_FORMAT = "%(levelname)s - %(name)s - %(message)s"

# Detection runs on its own thread, so the thread name is part of every line
DETAILED_FORMAT = (
    "%(asctime)s - %(name)s - %(levelname)s - [%(threadName)s] - [%(filename)s:%(lineno)d] - %(message)s"
)

JSON_FORMAT = (
    '{"timestamp": "%(asctime)s", "level": "%(levelname)s", "logger": "%(name)s", '
    '"thread": "%(threadName)s", "module": "%(filename)s", "line": %(lineno)d, '
    '"message": "%(message)s"}'
)

_FORMATS: Dict[str, str] = {
    "simple": SIMPLE_FORMAT,
    "detailed": DETAILED_FORMAT,
    "json": JSON_FORMAT,
}

MODULE_LOG_LEVELS: Dict[str, str] = {
    "resource_detector": "INFO",
    "resource_detector.detector": "INFO",
    "resource_detector.discovery": "INFO",
    # Discovery polls every tick; per-request lines drown everything else
    "httpx": "WARNING",
    "httpcore": "WARNING",
}


def _replace_root_handlers(handlers: List[logging.Handler]) -> logging.Logger:
    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
    for handler in handlers:
        root_logger.addHandler(handler)
    # Handlers filter; the root logger lets everything through
    root_logger.setLevel(logging.DEBUG)
    return root_logger


def setup_logging(
    log_level: Optional[str] = None,
    log_format: Optional[str] = None,
    enable_file: bool = True,
) -> None:
    """
    Configure process logging for an application embedding the detector.

    Calling it again replaces the handlers installed by the previous call.

    Args:
        log_level: Console level (DEBUG, INFO, WARNING, ERROR, CRITICAL); defaults to LOG_LEVEL
        log_format: simple, detailed or json; unknown names fall back to detailed
        enable_file: Add the DEBUG file handler; only honored when ENABLE_FILE_LOGGING is on
    """
    level = (log_level or LOG_LEVEL).upper()
    fmt = log_format or LOG_FORMAT
    formatter = logging.Formatter(_FORMATS.get(fmt, DETAILED_FORMAT), datefmt=DATE_FORMAT)

    console = logging.StreamHandler()
    console.setLevel(level)
    console.setFormatter(formatter)
    handlers: List[logging.Handler] = [console]

    file_logging = enable_file and ENABLE_FILE_LOGGING
    if file_logging:
        log_dir = Path(LOG_FILE_DIR)
        log_dir.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_dir / LOG_FILE_NAME)
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    root_logger = _replace_root_handlers(handlers)
    for module_name, module_level in MODULE_LOG_LEVELS.items():
        logging.getLogger(module_name).setLevel(module_level)

    root_logger.info("Logging configured: level=%s, format=%s, file_logging=%s", level, fmt, file_logging)


def get_logger(name: str) -> logging.Logger:
    """Return the logger for ``name`` (typically ``__name__``)."""
    return logging.getLogger(name)
