"""Logging setup shared by the API and the CLI."""

import logging
from typing import Optional

from ..config import get_settings
from .log_sanitizer import install_log_sanitizer

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

# Chatty third-party loggers
_QUIET_LOGGERS = ("httpx", "httpcore", "openai")


def configure_logging(level: Optional[str] = None) -> None:
    """
    Configure root logging and install the sanitizer.

    Args:
        level: Level name such as "INFO"; defaults to settings.log_level
    """
    if level is None:
        level = get_settings().log_level

    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        numeric_level = logging.INFO

    logging.basicConfig(level=numeric_level, format=LOG_FORMAT)
    logging.getLogger().setLevel(numeric_level)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(numeric_level, logging.WARNING))

    install_log_sanitizer()
