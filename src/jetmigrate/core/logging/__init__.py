"""Structured logging for jetmigrate."""

from .log_events import LogEvents, emit
from .logger import MANDATORY_FIELDS, LogConfig, LogFormat, UnifiedLogger, configure_logging

__all__ = [
    "LogConfig",
    "LogEvents",
    "LogFormat",
    "MANDATORY_FIELDS",
    "UnifiedLogger",
    "configure_logging",
    "emit",
]
