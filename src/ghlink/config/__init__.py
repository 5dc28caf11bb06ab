"""
Configuration management for ghlink.
"""

from .config_manager import (
    ConfigManager, AppConfig, GitHubConfig, RegistryConfig, LoggingConfig,
    SETTINGS_FIELDS, default_config_path, get_config_manager,
    reset_config_manager, get_config
)

__all__ = [
    "ConfigManager",
    "AppConfig",
    "GitHubConfig",
    "RegistryConfig",
    "LoggingConfig",
    "SETTINGS_FIELDS",
    "default_config_path",
    "get_config_manager",
    "reset_config_manager",
    "get_config"
]
