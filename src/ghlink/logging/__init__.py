"""
Logging system for ghlink.
"""

from .logger_config import (
    setup_logging, get_logger, get_logging_manager, close_logging,
    LoggerConfig, LoggingManager, get_log_level, verbosity_to_level
)
from .log_formatter import StructuredFormatter, ColoredFormatter
from .log_handler import RotatingFileHandler, ConsoleHandler

__all__ = [
    "setup_logging",
    "get_logger",
    "get_logging_manager",
    "close_logging",
    "LoggerConfig",
    "LoggingManager",
    "get_log_level",
    "verbosity_to_level",
    "StructuredFormatter",
    "ColoredFormatter",
    "RotatingFileHandler",
    "ConsoleHandler"
]
