"""Utility modules."""

from .log_sanitizer import LogSanitizationFilter, install_log_sanitizer, sanitize_string
from .logging_config import configure_logging

__all__ = [
    "LogSanitizationFilter",
    "configure_logging",
    "install_log_sanitizer",
    "sanitize_string",
]
