"""
Configuration module: Settings, logging, constants.
"""

from crud_shared.config.settings import settings, get_settings, DATABASE_URL
from crud_shared.config.logging import get_logger, setup_logging
from crud_shared.config.constants import Limits, ErrorCodes, DEFAULT_DENIED_MESSAGE

__all__ = [
    # settings
    "settings",
    "get_settings",
    "DATABASE_URL",
    # logging
    "get_logger",
    "setup_logging",
    # constants
    "Limits",
    "ErrorCodes",
    "DEFAULT_DENIED_MESSAGE",
]
