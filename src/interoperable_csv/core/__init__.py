"""
Core utilities for the iCSV engine.

Provides configuration, logging, constants, date handling and the error type.
"""

from .config import Config
from .logger import setup_logger, LoggerContext
from . import constants
from .date_utils import DateUtils
from .exceptions import FormatError

__all__ = [
    "Config",
    "setup_logger",
    "LoggerContext",
    "constants",
    "DateUtils",
    "FormatError",
]
