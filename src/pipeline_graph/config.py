"""Configuration management for pipeline-graph using YAML files."""

from pathlib import Path
from typing import Any

import structlog
import yaml

logger = structlog.get_logger()

CONFIG_DIR_NAME = ".pipeline-graph"

TRUE_VALUES = {"1", "true", "yes", "on"}
FALSE_VALUES = {"0", "false", "no", "off"}

SOURCES = ("api", "snapshot")


def parse_float(key: str, value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError) as e:
        raise ValueError(f"Config value {key}={value!r} is not a number") from e


def parse_int(key: str, value: Any) -> int:
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise ValueError(f"Config value {key}={value!r} is not an integer") from e


def parse_bool(key: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in TRUE_VALUES:
        return True
    if text in FALSE_VALUES:
        return False
    raise ValueError(f"Config value {key}={value!r} is not a boolean")


def _source(key: str, value: Any) -> None:
    if value not in SOURCES:
        raise ValueError(f"Config value {key}={value!r} must be one of: {', '.join(SOURCES)}")


def _positive_float(key: str, value: Any) -> None:
    if parse_float(key, value) <= 0:
        raise ValueError(f"Config value {key}={value!r} must be positive")


def _non_negative_int(key: str, value: Any) -> None:
    if parse_int(key, value) < 0:
        raise ValueError(f"Config value {key}={value!r} must not be negative")


def _text(key: str, value: Any) -> None:
    if not str(value).strip():
        raise ValueError(f"Config value {key} must not be empty")


# Known settings and the check each value must pass
SETTINGS = {
    "source": _source,
    "api.base_url": _text,
    "api.token": _text,
    "snapshot.path": _text,
    "graph.base_radius": _positive_float,
    "graph.min_spacing": _positive_float,
    "graph.cluster_problem_limit": _non_negative_int,
    "catalog.include_orphaned": parse_bool,
}


def validate_setting(key: str, value: Any) -> None:
    """Check a setting before it is stored.

    Raises:
        ValueError: If the key is unknown or the value is invalid for it
    """
    check = SETTINGS.get(key)
    if check is None:
        raise ValueError(f"Unknown config key: {key}. Known keys: {', '.join(SETTINGS)}")
    check(key, value)


class Config:
    """Configuration manager using YAML file storage.

    Supports both local (directory-level) and global (user-level) configuration.
    Local config is stored in .pipeline-graph/config.yaml in the current directory.
    Global config is stored in ~/.pipeline-graph/config.yaml.

    When reading, values are looked up in local config first, then global config.
    """

    def __init__(self, use_global: bool = False, config_dir: Path | None = None) -> None:
        """Initialize configuration manager.

        Args:
            use_global: If True, use global config only. If False, use local config with global fallback.
            config_dir: Custom directory to store config file (overrides use_global)
        """
        if config_dir is not None:
            self.config_dir = Path(config_dir)
            self.is_global = use_global
        elif use_global:
            self.config_dir = Path.home() / CONFIG_DIR_NAME
            self.is_global = True
        else:
            self.config_dir = Path.cwd() / CONFIG_DIR_NAME
            self.is_global = False

        self.config_file = self.config_dir / "config.yaml"

        self.config_dir.mkdir(parents=True, exist_ok=True)

        self._config: dict[str, Any] = self._load()

        # For local config, also load global config as fallback
        self._global_config: dict[str, Any] = {}
        if not self.is_global:
            global_config_file = Path.home() / CONFIG_DIR_NAME / "config.yaml"
            if global_config_file.exists() and global_config_file != self.config_file:
                try:
                    with open(global_config_file, "r") as f:
                        self._global_config = yaml.safe_load(f) or {}
                except (OSError, yaml.YAMLError) as e:
                    logger.warning("Failed to load global config", error=str(e))

        logger.debug("Config initialized", config_file=str(self.config_file), is_global=self.is_global)

    def _load(self) -> dict[str, Any]:
        """Load configuration from YAML file.

        Returns:
            Configuration dictionary
        """
        if not self.config_file.exists():
            logger.debug("Config file does not exist, initializing empty config")
            return {}

        try:
            with open(self.config_file, "r") as f:
                config = yaml.safe_load(f) or {}
                logger.debug("Config loaded successfully", keys=list(config.keys()))
                return config
        except (OSError, yaml.YAMLError) as e:
            logger.error("Failed to load config", error=str(e))
            raise ValueError(f"Failed to load config from {self.config_file}: {e}") from e

    def _save(self) -> None:
        """Save configuration to YAML file."""
        try:
            with open(self.config_file, "w") as f:
                yaml.safe_dump(self._config, f, default_flow_style=False, sort_keys=False)
            logger.debug("Config saved successfully")
        except (OSError, yaml.YAMLError) as e:
            logger.error("Failed to save config", error=str(e))
            raise ValueError(f"Failed to save config to {self.config_file}: {e}") from e

    def get(self, key: str, default: Any = None) -> Any:
        """Get a configuration value.

        For local config, checks local config first, then falls back to global config.

        Args:
            key: Configuration key
            default: Default value if key doesn't exist

        Returns:
            Configuration value or default
        """
        if key in self._config:
            logger.debug("Getting config value from local", key=key)
            return self._config[key]

        if not self.is_global and key in self._global_config:
            logger.debug("Getting config value from global", key=key)
            return self._global_config[key]

        logger.debug("Config value not found", key=key)
        return default

    def get_float(self, key: str, default: float) -> float:
        """Get a numeric configuration value."""
        value = self.get(key)
        return default if value is None else parse_float(key, value)

    def get_int(self, key: str, default: int) -> int:
        """Get an integer configuration value."""
        value = self.get(key)
        return default if value is None else parse_int(key, value)

    def get_bool(self, key: str, default: bool) -> bool:
        """Get a boolean configuration value. Accepts true/false, yes/no, on/off and 1/0."""
        value = self.get(key)
        return default if value is None else parse_bool(key, value)

    def set(self, key: str, value: str) -> None:
        """Set a configuration value.

        Args:
            key: Configuration key
            value: Configuration value

        Raises:
            ValueError: If the key is unknown or the value is invalid for it
        """
        validate_setting(key, value)
        logger.debug("Setting config value", key=key)
        self._config[key] = value
        self._save()

    def unset(self, key: str) -> None:
        """Remove a configuration value.

        Args:
            key: Configuration key
        """
        logger.debug("Unsetting config value", key=key)
        if key in self._config:
            del self._config[key]
            self._save()

    def list(self) -> dict[str, Any]:
        """List all configuration settings.

        For local config, merges global config with local config (local takes precedence).

        Returns:
            Dictionary of all config settings
        """
        if self.is_global:
            logger.debug("Listing global config values", count=len(self._config))
            return self._config.copy()
        merged = self._global_config.copy()
        merged.update(self._config)
        logger.debug("Listing merged config values", count=len(merged))
        return merged


def get_config(use_global: bool = False) -> Config:
    """Get a configuration instance.

    Args:
        use_global: If True, return global config. If False, return local config with global fallback.

    Returns:
        Config instance
    """
    return Config(use_global=use_global)
