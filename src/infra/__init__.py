"""
Infrastructure module - settings and logging.
"""

from .logging_config import setup_logging, DailyRotatingFileHandler
from .settings import Settings, load_settings, create_store

__all__ = [
    "setup_logging",
    "DailyRotatingFileHandler",
    "Settings",
    "load_settings",
    "create_store",
]
