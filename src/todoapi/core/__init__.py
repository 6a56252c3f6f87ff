"""Core Todo API utilities.

This module exports configuration and logging helpers used throughout the application.
"""

from todoapi.core.config import SeedUser, Settings, get_settings
from todoapi.core.logging import (
    bind_correlation_id,
    clear_context,
    configure_logging,
    get_logger,
)

__all__ = [
    "SeedUser",
    "Settings",
    "get_settings",
    "configure_logging",
    "get_logger",
    "bind_correlation_id",
    "clear_context",
]
