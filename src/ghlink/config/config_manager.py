"""
Configuration management for ghlink.

The settings file holds the GitHub token, account and repository the
links are written to.
"""

import os
import yaml
from pathlib import Path
from typing import Dict, Any, Optional, Union, Callable, Tuple
from dataclasses import dataclass, field, asdict
import logging

from ..error_handling import ConfigurationError

logger = logging.getLogger(__name__)


VALID_BACKENDS = {"json", "folder"}
VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}

# Fields written by ``save_settings``; everything else stays file/env only.
SETTINGS_FIELDS = (
    "github.token",
    "github.username",
    "github.repo",
    "github.custom_domain",
    "registry.backend",
)


@dataclass
class GitHubConfig:
    """GitHub account and API configuration."""
    token: Optional[str] = None
    username: Optional[str] = None
    repo: Optional[str] = None
    custom_domain: Optional[str] = None
    branch: Optional[str] = None
    api_base_url: str = "https://api.github.com"
    timeout: int = 30
    max_retries: int = 0
    user_agent: str = "ghlink/0.1"

    @property
    def has_credentials(self) -> bool:
        """True when token, username and repository are all set."""
        return bool(self.token and self.username and self.repo)


@dataclass
class RegistryConfig:
    """Where and how links are stored in the repository."""
    backend: str = "json"
    database_path: str = "database.json"
    pdf_directory: str = "pdfs"
    slug_length: int = 6
    max_pdf_size_mb: int = 25
    conflict_retries: int = 0


@dataclass
class LoggingConfig:
    """Logging configuration."""
    level: str = "WARNING"
    file: Optional[str] = None
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    max_file_size: int = 10  # MB
    backup_count: int = 5
    structured: bool = False  # JSON lines instead of format


@dataclass
class AppConfig:
    """Complete application configuration."""
    github: GitHubConfig = field(default_factory=GitHubConfig)
    registry: RegistryConfig = field(default_factory=RegistryConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def default_config_path() -> Path:
    """Settings file used when none is given explicitly."""
    env_path = os.getenv("GHLINK_CONFIG")
    if env_path:
        return Path(env_path).expanduser()
    return Path.home() / ".config" / "ghlink" / "config.yaml"


def _to_optional_str(value: str) -> Optional[str]:
    value = value.strip()
    return value or None


def _to_log_structured(value: str) -> bool:
    value = value.strip().lower()
    if value in ("json", "true", "yes", "on", "1"):
        return True
    if value in ("text", "false", "no", "off", "0", ""):
        return False
    raise ValueError(f"unknown log format: {value}")


class ConfigManager:
    """
    Manages application configuration from multiple sources.

    Configuration is loaded in the following order (later sources override earlier):
    1. Default configuration
    2. Configuration file
    3. Environment variables
    """

    def __init__(self, config_file: Optional[Union[str, Path]] = None):
        """
        Initialize configuration manager.

        Args:
            config_file: Path to configuration file (defaults to ``default_config_path()``)
        """
        self.config_file = Path(config_file) if config_file else default_config_path()
        self._config: Optional[AppConfig] = None
        self._env_var_mapping = self._create_env_var_mapping()

    def _create_env_var_mapping(self) -> Dict[str, Tuple[str, Callable[[str], Any]]]:
        """Create mapping of environment variables to config paths and converters."""
        return {
            # GitHub configuration
            "GITHUB_TOKEN": ("github.token", _to_optional_str),
            "GITHUB_USERNAME": ("github.username", _to_optional_str),
            "GITHUB_REPO": ("github.repo", _to_optional_str),
            "GHLINK_CUSTOM_DOMAIN": ("github.custom_domain", _to_optional_str),
            "GHLINK_BRANCH": ("github.branch", _to_optional_str),
            "GITHUB_API_URL": ("github.api_base_url", str.strip),
            "GITHUB_TIMEOUT": ("github.timeout", int),
            "GITHUB_MAX_RETRIES": ("github.max_retries", int),

            # Registry configuration
            "GHLINK_BACKEND": ("registry.backend", lambda v: v.strip().lower()),
            "GHLINK_SLUG_LENGTH": ("registry.slug_length", int),
            "GHLINK_MAX_PDF_SIZE": ("registry.max_pdf_size_mb", int),
            "GHLINK_CONFLICT_RETRIES": ("registry.conflict_retries", int),

            # Logging configuration
            "LOG_LEVEL": ("logging.level", lambda v: v.strip().upper()),
            "LOG_FILE": ("logging.file", _to_optional_str),
            "LOG_FORMAT": ("logging.structured", _to_log_structured),
        }

    def load_config(self) -> AppConfig:
        """
        Load configuration from all sources.

        Returns:
            Complete application configuration
        """
        if self._config is not None:
            return self._config

        config_dict = AppConfig().to_dict()

        file_config = self._load_config_file(self.config_file)
        config_dict = self._merge_configs(config_dict, file_config)

        env_config = self._load_env_config()
        config_dict = self._merge_configs(config_dict, env_config)

        config_dict = self._substitute_env_vars(config_dict)
        config_dict = self._convert_file_values(config_dict)

        self._validate_config(config_dict)

        self._config = self._dict_to_config(config_dict)
        return self._config

    def _load_config_file(self, config_path: Path) -> Dict[str, Any]:
        """
        Load configuration from YAML file.

        Args:
            config_path: Path to configuration file

        Returns:
            Configuration dictionary (empty if the file does not exist)
        """
        if not config_path.exists():
            logger.debug(f"No configuration file at {config_path}")
            return {}

        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                config = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            raise ConfigurationError(
                f"Failed to load config file {config_path}: {e}",
                error_code="config_unreadable",
                cause=e
            ) from e

        if config is None:
            return {}
        if not isinstance(config, dict):
            raise ConfigurationError(
                f"Config file {config_path} must contain a mapping",
                error_code="config_unreadable"
            )

        logger.info(f"Loaded configuration from {config_path}")
        return config

    def _load_env_config(self) -> Dict[str, Any]:
        """
        Load configuration from environment variables.

        Returns:
            Configuration dictionary from environment variables
        """
        env_config: Dict[str, Any] = {}

        for env_var, (config_path, convert) in self._env_var_mapping.items():
            value = os.getenv(env_var)
            if value is None:
                continue
            try:
                converted = convert(value)
            except ValueError as e:
                raise ConfigurationError(
                    f"Invalid value for {env_var}: {value!r}",
                    error_code="invalid_env",
                    cause=e
                ) from e
            self._set_nested_value(env_config, config_path, converted)

        return env_config

    def _convert_file_values(self, config: Dict[str, Any]) -> Dict[str, Any]:
        """
        Convert string values from the settings file to their field's type.

        YAML leaves quoted scalars such as ``timeout: "30"`` as strings; they
        go through the same converters as the environment variables.

        Raises:
            ConfigurationError: If a value cannot be converted
        """
        for config_path, convert in self._env_var_mapping.values():
            value = self._get_nested_value(config, config_path)
            if not isinstance(value, str):
                continue
            try:
                converted = convert(value)
            except ValueError as e:
                raise ConfigurationError(
                    f"Invalid value for {config_path}: {value!r}",
                    error_code="invalid_value",
                    cause=e
                ) from e
            self._set_nested_value(config, config_path, converted)

        return config

    def _set_nested_value(self, config: Dict[str, Any], path: str, value: Any) -> None:
        """
        Set a nested configuration value using dot notation.

        Args:
            config: Configuration dictionary
            path: Dot-separated path (e.g., 'github.token')
            value: Value to set
        """
        keys = path.split('.')
        current = config

        for key in keys[:-1]:
            if key not in current or not isinstance(current[key], dict):
                current[key] = {}
            current = current[key]

        current[keys[-1]] = value

    def _delete_nested_value(self, config: Dict[str, Any], path: str) -> None:
        *parents, leaf = path.split('.')
        current: Any = config
        for key in parents:
            if not isinstance(current, dict) or key not in current:
                return
            current = current[key]
        if isinstance(current, dict):
            current.pop(leaf, None)

    def _get_nested_value(self, config: Dict[str, Any], path: str) -> Any:
        current: Any = config
        for key in path.split('.'):
            if not isinstance(current, dict) or key not in current:
                return None
            current = current[key]
        return current

    def _substitute_env_vars(self, config: Dict[str, Any]) -> Dict[str, Any]:
        """
        Substitute ``${VAR}`` references in configuration values.

        Args:
            config: Configuration dictionary

        Returns:
            Configuration with environment variables substituted
        """
        def substitute_recursive(obj):
            if isinstance(obj, dict):
                return {k: substitute_recursive(v) for k, v in obj.items()}
            elif isinstance(obj, list):
                return [substitute_recursive(item) for item in obj]
            elif isinstance(obj, str) and obj.startswith('${') and obj.endswith('}'):
                env_var = obj[2:-1]
                return os.getenv(env_var, obj)
            else:
                return obj

        return substitute_recursive(config)

    def _merge_configs(self, base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        """
        Merge two configuration dictionaries.

        Args:
            base: Base configuration
            override: Override configuration

        Returns:
            Merged configuration
        """
        result = base.copy()

        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._merge_configs(result[key], value)
            else:
                result[key] = value

        return result

    def _validate_config(self, config: Dict[str, Any]) -> None:
        """
        Validate configuration values.

        Args:
            config: Configuration dictionary

        Raises:
            ConfigurationError: If configuration is invalid
        """
        github = config.get("github", {})
        if not (github.get("token") and github.get("username") and github.get("repo")):
            logger.debug("GitHub credentials incomplete - only manual entries are available")

        backend = config.get("registry", {}).get("backend", "json")
        if backend not in VALID_BACKENDS:
            raise ConfigurationError(
                f"Invalid registry backend: {backend}. Valid backends: {sorted(VALID_BACKENDS)}",
                error_code="invalid_backend"
            )

        registry = config.get("registry", {})
        try:
            slug_length = int(registry.get("slug_length", 6))
        except (TypeError, ValueError) as e:
            raise ConfigurationError(
                f"registry.slug_length must be a whole number, got {registry.get('slug_length')!r}",
                error_code="invalid_slug_length",
                cause=e
            ) from e
        if slug_length < 1:
            raise ConfigurationError("registry.slug_length must be at least 1", error_code="invalid_slug_length")

        log_level = str(config.get("logging", {}).get("level", "WARNING")).upper()
        if log_level not in VALID_LOG_LEVELS:
            raise ConfigurationError(
                f"Invalid log level: {log_level}. Valid levels: {sorted(VALID_LOG_LEVELS)}",
                error_code="invalid_log_level"
            )

    def _dict_to_config(self, config_dict: Dict[str, Any]) -> AppConfig:
        """
        Convert configuration dictionary to AppConfig object.

        Unknown keys in the file are ignored so settings written by newer
        versions do not break older ones.
        """
        def build(cls, values: Optional[Dict[str, Any]]):
            known = {f for f in cls.__dataclass_fields__}
            return cls(**{k: v for k, v in (values or {}).items() if k in known})

        return AppConfig(
            github=build(GitHubConfig, config_dict.get("github")),
            registry=build(RegistryConfig, config_dict.get("registry")),
            logging=build(LoggingConfig, config_dict.get("logging"))
        )

    def get_config(self) -> AppConfig:
        """
        Get the current configuration.

        Returns:
            Application configuration
        """
        if self._config is None:
            return self.load_config()
        return self._config

    def reload_config(self) -> AppConfig:
        """
        Reload configuration from all sources.

        Returns:
            Reloaded application configuration
        """
        self._config = None
        return self.load_config()

    def load_settings(self) -> Dict[str, Optional[str]]:
        """
        Read the persisted settings fields from the settings file only.

        Returns:
            Mapping of dotted field name to stored value (``None`` if unset)
        """
        file_config = self._load_config_file(self.config_file)
        return {name: self._get_nested_value(file_config, name) for name in SETTINGS_FIELDS}

    def save_settings(self, settings: Dict[str, Optional[str]]) -> Path:
        """
        Persist settings fields to the settings file.

        String values are trimmed; an empty string clears the field. Other
        keys already present in the file are left untouched.

        Args:
            settings: Mapping of dotted field name (see ``SETTINGS_FIELDS``) to value

        Returns:
            Path of the written file
        """
        unknown = set(settings) - set(SETTINGS_FIELDS)
        if unknown:
            raise ConfigurationError(
                f"Unknown settings: {', '.join(sorted(unknown))}",
                error_code="unknown_setting"
            )

        file_config = self._load_config_file(self.config_file)

        for name, value in settings.items():
            if isinstance(value, str):
                value = value.strip() or None
            if name == "registry.backend" and value is not None and value not in VALID_BACKENDS:
                raise ConfigurationError(f"Invalid registry backend: {value}", error_code="invalid_backend")
            if value is None:
                self._delete_nested_value(file_config, name)
            else:
                self._set_nested_value(file_config, name, value)

        self.config_file.parent.mkdir(parents=True, exist_ok=True)
        with open(self.config_file, 'w', encoding='utf-8') as f:
            yaml.safe_dump(file_config, f, default_flow_style=False, indent=2, allow_unicode=True)

        try:
            self.config_file.chmod(0o600)
        except OSError as e:
            logger.warning(f"Could not restrict permissions on {self.config_file}: {e}")

        logger.info(f"Settings saved to {self.config_file}")
        self._config = None
        return self.config_file


# Global configuration manager instance
_config_manager: Optional[ConfigManager] = None


def get_config_manager(config_file: Optional[Union[str, Path]] = None) -> ConfigManager:
    """
    Get the global configuration manager instance.

    Args:
        config_file: Path to configuration file (only used on first call)

    Returns:
        ConfigManager instance
    """
    global _config_manager
    if _config_manager is None:
        _config_manager = ConfigManager(config_file)
    return _config_manager


def reset_config_manager() -> None:
    """Forget the global configuration manager."""
    global _config_manager
    _config_manager = None


def get_config() -> AppConfig:
    """
    Get the current application configuration.

    Returns:
        Application configuration
    """
    return get_config_manager().get_config()
