"""
Logger configuration and setup for ghlink.
"""

import logging
from typing import Optional, Dict
from dataclasses import dataclass

from ..config import LoggingConfig
from .log_formatter import StructuredFormatter, ColoredFormatter
from .log_handler import RotatingFileHandler, ConsoleHandler


LEVELS = {
    'DEBUG': logging.DEBUG,
    'INFO': logging.INFO,
    'WARNING': logging.WARNING,
    'ERROR': logging.ERROR,
    'CRITICAL': logging.CRITICAL
}

# Libraries that are chatty at INFO/DEBUG
THIRD_PARTY_LOGGERS = ('urllib3', 'requests', 'charset_normalizer')


@dataclass
class LoggerConfig:
    """Configuration for the logging system."""
    level: str = "WARNING"
    file_path: Optional[str] = None
    format_string: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    max_file_size: int = 10  # MB
    backup_count: int = 5
    enable_console: bool = True
    enable_structured: bool = False
    enable_colors: bool = True
    quiet_third_party: bool = True

    @classmethod
    def from_app_config(cls, config: LoggingConfig, **overrides) -> 'LoggerConfig':
        """Build a logger config from the ``logging`` section of the app config."""
        values = dict(
            level=config.level,
            file_path=config.file,
            format_string=config.format,
            max_file_size=config.max_file_size,
            backup_count=config.backup_count,
            enable_structured=config.structured
        )
        values.update(overrides)
        return cls(**values)


class LoggingManager:
    """
    Owns the handlers ghlink installs on the root logger.

    Calling ``setup_logging`` again replaces the handlers installed by the
    previous call, so the CLI can reconfigure per invocation.
    """

    def __init__(self):
        self._handlers: Dict[str, logging.Handler] = {}
        self.config: Optional[LoggerConfig] = None

    @property
    def configured(self) -> bool:
        return self.config is not None

    def setup_logging(self, config: Optional[LoggerConfig] = None) -> None:
        """
        Set up the logging system with the specified configuration.

        Args:
            config: Logging configuration (defaults to ``LoggerConfig()``)
        """
        config = config or LoggerConfig()
        self.close_handlers()
        self.config = config

        level = get_log_level(config.level)
        root_logger = logging.getLogger()
        root_logger.setLevel(level)

        if config.enable_console:
            self._add_handler('console', self._create_console_handler(config), level)

        if config.file_path:
            self._add_handler('file', self._create_file_handler(config), level)

        if config.quiet_third_party:
            for name in THIRD_PARTY_LOGGERS:
                logging.getLogger(name).setLevel(max(logging.WARNING, level))

        logging.getLogger(__name__).debug(f"Logging initialized with level: {config.level}")

    def _add_handler(self, name: str, handler: logging.Handler, level: int) -> None:
        handler.setLevel(level)
        logging.getLogger().addHandler(handler)
        self._handlers[name] = handler

    def _create_console_handler(self, config: LoggerConfig) -> logging.Handler:
        handler = ConsoleHandler()

        if config.enable_structured:
            formatter: logging.Formatter = StructuredFormatter()
        elif config.enable_colors and handler.is_tty():
            formatter = ColoredFormatter(config.format_string)
        else:
            formatter = logging.Formatter(config.format_string)

        handler.setFormatter(formatter)
        return handler

    def _create_file_handler(self, config: LoggerConfig) -> logging.Handler:
        handler = RotatingFileHandler(
            filename=config.file_path,
            maxBytes=config.max_file_size * 1024 * 1024,
            backupCount=config.backup_count
        )

        if config.enable_structured:
            handler.setFormatter(StructuredFormatter())
        else:
            handler.setFormatter(logging.Formatter(config.format_string))
        return handler

    def get_handler(self, name: str) -> Optional[logging.Handler]:
        return self._handlers.get(name)

    def close_handlers(self) -> None:
        """Detach and close every handler installed by this manager."""
        root_logger = logging.getLogger()
        for handler in self._handlers.values():
            root_logger.removeHandler(handler)
            handler.close()

        self._handlers.clear()
        self.config = None


def get_log_level(level_str: str) -> int:
    """Convert a level name to its logging constant (INFO if unknown)."""
    return LEVELS.get(str(level_str).upper(), logging.INFO)


def verbosity_to_level(verbose: int, default: str = "WARNING") -> str:
    """Map the CLI's ``-v`` count to a level name."""
    if verbose <= 0:
        return default
    if verbose == 1:
        return "INFO"
    return "DEBUG"


# Global logging manager instance
_logging_manager = LoggingManager()


def setup_logging(config: Optional[LoggerConfig] = None) -> None:
    """
    Set up the global logging system.

    Args:
        config: Logging configuration
    """
    _logging_manager.setup_logging(config)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def get_logging_manager() -> LoggingManager:
    return _logging_manager


def close_logging() -> None:
    """Close logging system and clean up resources."""
    _logging_manager.close_handlers()
