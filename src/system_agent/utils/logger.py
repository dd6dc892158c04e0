"""
Logging configuration for System Agent.

This module provides centralized logging configuration for the entire application.
"""

from __future__ import annotations

import logging
import os
import sys
from pathlib import Path
from typing import Optional

DEFAULT_NAME = "system-agent"


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """
    Get a configured logger instance.

    Loggers below ``system-agent`` (e.g. ``system-agent.network``) propagate to
    the root service logger and are not given handlers of their own.

    Args:
        name: Logger name. If None, uses the default service name.

    Returns:
        Configured logger instance.
    """
    if name is None:
        name = DEFAULT_NAME

    logger_instance = logging.getLogger(name)

    if name == DEFAULT_NAME or not name.startswith(DEFAULT_NAME + "."):
        if not logger_instance.handlers:
            configure_logger(logger_instance)
    else:
        get_logger(DEFAULT_NAME)

    return logger_instance


def configure_logger(logger_instance: logging.Logger) -> None:
    """
    Configure a logger instance with console and optional file handlers.

    Args:
        logger_instance: Logger instance to configure.
    """
    level_name = os.environ.get("LOG_LEVEL", "INFO").upper()
    logger_instance.setLevel(getattr(logging, level_name, logging.INFO))

    formatter = logging.Formatter(
        '[%(asctime)s] [%(name)s] [%(levelname)s] %(message)s'
    )

    log_file = os.environ.get("LOG_FILE")
    if log_file:
        try:
            path = Path(log_file)
            path.parent.mkdir(parents=True, exist_ok=True)

            file_handler = logging.FileHandler(path)
            file_handler.setFormatter(formatter)
            logger_instance.addHandler(file_handler)
        except OSError as e:
            # If file logging fails, just use console
            print(f"Warning: Could not set up file logging: {e}", file=sys.stderr)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    logger_instance.addHandler(console_handler)


logger = get_logger(DEFAULT_NAME)


__all__ = ["get_logger", "logger", "configure_logger"]
