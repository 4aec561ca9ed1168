"""
Logging setup - stdlib logging configured once at startup.
Modules log through logging.getLogger(__name__).
"""

import logging

from app.core.config import get_settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging() -> None:
    settings = get_settings()
    level = getattr(logging, settings.log_level.upper(), logging.INFO)
    logging.basicConfig(level=level, format=LOG_FORMAT)
    # pymongo is chatty at DEBUG
    logging.getLogger("pymongo").setLevel(max(level, logging.INFO))
