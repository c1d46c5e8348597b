# -*- coding: utf-8 -*-
"""
i18nmark Central Logging Module

Provides the standard logging configuration for the whole tool.
Log files are kept under ~/.i18nmark/logs/.

Handlers are only configured on the root 'i18nmark' logger.
Child loggers propagate to root and do not add handlers themselves.
"""

import logging
from pathlib import Path
from datetime import datetime

# Log directory
LOG_DIR = Path.home() / ".i18nmark" / "logs"

# Log file name (dated)
LOG_FILE = LOG_DIR / f"i18nmark_{datetime.now().strftime('%Y%m%d')}.log"

# Log format
LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)-20s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Console verbosity per `log` config option
CONSOLE_LEVELS = {
    "none": logging.WARNING,
    "file": logging.INFO,
    "line": logging.DEBUG,
}

# Flag to track if root logger is configured
_root_configured = False
_console_handler = None


def _configure_root_logger():
    """Configure the root 'i18nmark' logger with handlers (once only)."""
    global _root_configured, _console_handler
    if _root_configured:
        return

    root_logger = logging.getLogger("i18nmark")
    root_logger.setLevel(logging.DEBUG)

    # Prevent propagation to Python's root logger to avoid duplicates
    root_logger.propagate = False

    # Console handler
    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.INFO)
    console_handler.setFormatter(logging.Formatter(LOG_FORMAT, DATE_FORMAT))
    root_logger.addHandler(console_handler)
    _console_handler = console_handler

    # File handler
    try:
        LOG_DIR.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(LOG_FILE, encoding='utf-8')
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT, DATE_FORMAT))
        root_logger.addHandler(file_handler)
    except OSError as e:
        root_logger.warning(f"Log file disabled, cannot write to {LOG_DIR}: {e}")

    _root_configured = True


def set_console_level(mode: str):
    """
    Adjust console verbosity from the `log` config option.

    Args:
        mode: One of "none", "file", "line". Unknown values keep INFO.
    """
    _configure_root_logger()
    level = CONSOLE_LEVELS.get(mode, logging.INFO)
    _console_handler.setLevel(level)


# Main tool logger - configure root on module load
_configure_root_logger()
logger = logging.getLogger("i18nmark")


def get_logger(name: str) -> logging.Logger:
    """
    Return a child logger for a module.

    Child loggers do NOT add handlers - they propagate to the root 'i18nmark' logger.

    Args:
        name: Module name

    Returns:
        Logger named i18nmark.{name}
    """
    _configure_root_logger()
    return logging.getLogger(f"i18nmark.{name}")
