"""
Configuration paths and debug logging setup.
"""
from __future__ import annotations

import logging
import os

APP_NAME: str = "termcourse"
CONFIG_DIR_NAME: str = ".termcourse"
VERSION: str = "0.3.0"

ENV_CONFIG_DIR: str = f"{APP_NAME.upper()}_DIR"

_DEBUG_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"


def get_config_dir() -> str:
    """Get the config directory (e.g., ~/.termcourse/)."""
    env_dir = os.environ.get(ENV_CONFIG_DIR)
    if env_dir:
        return os.path.expanduser(env_dir)
    return os.path.join(os.path.expanduser("~"), CONFIG_DIR_NAME)


def get_settings_path() -> str:
    """Get path to settings.json."""
    return os.path.join(get_config_dir(), "settings.json")


def get_debug_log_path() -> str:
    """Get path to the render debug log."""
    return os.path.join(get_config_dir(), f"{APP_NAME}-debug.log")


def setup_debug_logging(path: str | None = None) -> logging.Handler:
    """
    Send DEBUG records from the termcourse loggers to a file.

    Returns the handler so callers (and tests) can detach it again.
    """
    path = path or get_debug_log_path()
    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
    handler = logging.FileHandler(path, encoding="utf-8")
    handler.setFormatter(logging.Formatter(_DEBUG_FORMAT))
    handler.setLevel(logging.DEBUG)

    logger = logging.getLogger(APP_NAME)
    logger.setLevel(logging.DEBUG)
    logger.addHandler(handler)
    return handler
