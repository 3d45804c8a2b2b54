"""
Logging configuration.

Modules log through ``logging.getLogger(__name__)``; this wires a single
stream handler on the package logger at the configured level.
"""

import logging
from typing import Optional

from .settings import get_settings


LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: Optional[str] = None) -> logging.Logger:
    """Configure the ``account_intel`` logger (idempotent)."""
    level_name = (level or get_settings().log_level).upper()

    package_logger = logging.getLogger("account_intel")
    package_logger.setLevel(getattr(logging, level_name, logging.INFO))

    if not package_logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        package_logger.addHandler(handler)

    return package_logger
