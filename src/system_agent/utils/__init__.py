"""
Utilities module for System Agent.

This module provides common utilities like logging configuration.
"""

from __future__ import annotations

from system_agent.utils.logger import get_logger, logger

__all__ = ["get_logger", "logger"]
