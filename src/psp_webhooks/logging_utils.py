"""Logging setup and helpers."""

import logging
from typing import Optional

from .config import get_log_level

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: Optional[str] = None) -> None:
    """Configure root logging for the service.

    Args:
        level: Log level name. Falls back to the LOG_LEVEL env var.
    """
    logging.basicConfig(level=level or get_log_level(), format=LOG_FORMAT)


def redact_log_value(value: Optional[str]) -> str:
    """Mask a secret so only its last four characters are visible."""
    if not value:
        return ""
    if len(value) <= 4:
        return "*" * len(value)
    return "*" * (len(value) - 4) + value[-4:]
