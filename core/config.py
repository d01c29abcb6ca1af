"""
Configuration Management - YAML-based configuration with environment overrides
=============================================================================

This module handles all configuration aspects including:
- Loading from YAML files
- Environment variable overrides
- Default values
- Configuration validation
"""

import os
import yaml
from pathlib import Path
from typing import Any, Dict, Optional, List
from dataclasses import dataclass, field, asdict
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .exceptions import ConfigError


ENV_PREFIX = "RULE_AGENT_"


@dataclass
class ResponderConfig:
    """
    Responder configuration.

    The responder itself is fixed; these settings only pin down its two
    sources of variation, the insight picker and the wall clock.
    """
    # Seed for the insight filler picker. None = fresh randomness.
    insight_seed: Optional[int] = None

    # IANA timezone for time/date replies. Empty = system local zone.
    timezone: str = ""

    def validate(self) -> None:
        """Validate responder configuration."""
        if self.insight_seed is not None and not isinstance(self.insight_seed, int):
            raise ConfigError(f"insight_seed must be an integer, got {self.insight_seed!r}")

        if self.timezone:
            try:
                ZoneInfo(self.timezone)
            except (ZoneInfoNotFoundError, ValueError) as e:
                raise ConfigError(f"Unknown timezone: {self.timezone}", {"error": str(e)})


@dataclass
class UIConfig:
    """
    User interface configuration.

    Covers the web server hosting the endpoint and chat page, and the
    terminal chat surface that talks to it.
    """
    # Web server settings
    web_host: str = "127.0.0.1"
    web_port: int = 8080
    web_debug: bool = False
    cors_origins: List[str] = field(default_factory=lambda: ["*"])

    # Terminal chat surface. Empty endpoint = answer in-process.
    endpoint_url: str = ""
    request_timeout: float = 30.0

    def validate(self) -> None:
        """Validate UI configuration."""
        if self.web_port < 1 or self.web_port > 65535:
            raise ConfigError(f"Invalid web port: {self.web_port}")

        if self.request_timeout <= 0:
            raise ConfigError(f"request_timeout must be positive, got {self.request_timeout}")

        if self.endpoint_url and not self.endpoint_url.startswith(("http://", "https://")):
            raise ConfigError(f"endpoint_url must be an http(s) URL, got {self.endpoint_url}")


@dataclass
class LoggingConfig:
    """Logging configuration."""
    level: str = "INFO"
    json_format: bool = False
    console_output: bool = True

    def validate(self) -> None:
        """Validate logging configuration."""
        if self.level.upper() not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ConfigError(f"Invalid log level: {self.level}")


@dataclass
class Config:
    """
    Main configuration container.

    Aggregates all configuration sections into a single object
    and provides methods for validating and serialising them.
    """
    app_name: str = "Rule Agent"
    version: str = "1.0.0"
    debug: bool = False

    responder: ResponderConfig = field(default_factory=ResponderConfig)
    ui: UIConfig = field(default_factory=UIConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    # Paths (set at runtime)
    config_dir: str = ""
    data_dir: str = ""
    log_dir: str = ""

    def validate(self) -> None:
        """
        Validate all configuration sections.

        Raises:
            ConfigError: If any configuration section is invalid
        """
        self.responder.validate()
        self.ui.validate()
        self.logging.validate()

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary."""
        return {
            "app_name": self.app_name,
            "version": self.version,
            "debug": self.debug,
            "responder": asdict(self.responder),
            "ui": asdict(self.ui),
            "logging": asdict(self.logging),
        }


_SECTIONS = ("responder", "ui", "logging")


def get_default_config_dir() -> Path:
    """
    Get the default configuration directory path.

    Returns:
        Path to the configuration directory
    """
    if f"{ENV_PREFIX}CONFIG_DIR" in os.environ:
        return Path(os.environ[f"{ENV_PREFIX}CONFIG_DIR"])

    if "XDG_CONFIG_HOME" in os.environ:
        return Path(os.environ["XDG_CONFIG_HOME"]) / "rule-agent"

    return Path.home() / ".config" / "rule-agent"


def get_default_data_dir() -> Path:
    """
    Get the default data directory path.

    Returns:
        Path to the data directory
    """
    if f"{ENV_PREFIX}DATA_DIR" in os.environ:
        return Path(os.environ[f"{ENV_PREFIX}DATA_DIR"])

    if "XDG_DATA_HOME" in os.environ:
        return Path(os.environ["XDG_DATA_HOME"]) / "rule-agent"

    return Path.home() / ".local" / "share" / "rule-agent"


def load_config(config_path: Optional[str] = None, load_env: bool = True) -> Config:
    """
    Load configuration from YAML file with environment variable overrides.

    This function loads configuration in the following order:
    1. Default values from dataclass
    2. Values from YAML file
    3. Environment variable overrides

    Args:
        config_path: Path to configuration file (optional)
        load_env: Whether to load environment variable overrides

    Returns:
        Config object with loaded values

    Raises:
        ConfigError: If configuration is invalid or cannot be loaded
    """
    config = Config()

    config.config_dir = str(get_default_config_dir())
    config.data_dir = str(get_default_data_dir())
    config.log_dir = str(Path(config.data_dir) / "logs")

    if config_path:
        yaml_path = Path(config_path)
        if not yaml_path.exists():
            raise ConfigError("Config file not found", {"path": str(yaml_path)})
    else:
        yaml_path = Path(config.config_dir) / "config.yaml"

    if yaml_path.exists():
        try:
            with open(yaml_path, "r", encoding="utf-8") as f:
                yaml_config = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Failed to parse config file: {e}", {"path": str(yaml_path)})
        except IOError as e:
            raise ConfigError(f"Failed to read config file: {e}", {"path": str(yaml_path)})

        if not isinstance(yaml_config, dict):
            raise ConfigError("Config file must contain a mapping", {"path": str(yaml_path)})

        _apply_yaml_config(config, yaml_config)

    if load_env:
        _apply_env_overrides(config)

    config.validate()

    return config


def _apply_yaml_config(config: Config, yaml_config: Dict[str, Any]) -> None:
    """
    Apply YAML configuration values to Config object.

    Unknown keys are ignored.
    """
    for key in ("app_name", "version", "debug", "log_dir"):
        if key in yaml_config:
            setattr(config, key, yaml_config[key])

    for section in _SECTIONS:
        values = yaml_config.get(section)
        if not values:
            continue
        if not isinstance(values, dict):
            raise ConfigError(f"Config section '{section}' must be a mapping")
        section_obj = getattr(config, section)
        for key, value in values.items():
            if hasattr(section_obj, key):
                setattr(section_obj, key, value)


def _to_bool(value: str) -> bool:
    return value.lower() in ("true", "1", "yes", "on")


def _to_list(value: str) -> List[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


def _apply_env_overrides(config: Config) -> None:
    """
    Apply environment variable overrides to Config object.

    Environment variables follow the pattern: RULE_AGENT_SECTION_KEY
    For example: RULE_AGENT_UI_WEB_PORT, RULE_AGENT_RESPONDER_TIMEZONE
    """
    env_mappings = {
        "RULE_AGENT_DEBUG": (None, "debug", _to_bool),
        "RULE_AGENT_LOG_DIR": (None, "log_dir"),

        "RULE_AGENT_RESPONDER_INSIGHT_SEED": ("responder", "insight_seed", int),
        "RULE_AGENT_RESPONDER_TIMEZONE": ("responder", "timezone"),

        "RULE_AGENT_UI_WEB_HOST": ("ui", "web_host"),
        "RULE_AGENT_UI_WEB_PORT": ("ui", "web_port", int),
        "RULE_AGENT_UI_WEB_DEBUG": ("ui", "web_debug", _to_bool),
        "RULE_AGENT_UI_CORS_ORIGINS": ("ui", "cors_origins", _to_list),
        "RULE_AGENT_UI_ENDPOINT_URL": ("ui", "endpoint_url"),
        "RULE_AGENT_UI_REQUEST_TIMEOUT": ("ui", "request_timeout", float),

        "RULE_AGENT_LOGGING_LEVEL": ("logging", "level"),
        "RULE_AGENT_LOGGING_JSON_FORMAT": ("logging", "json_format", _to_bool),
    }

    for env_var, mapping in env_mappings.items():
        value = os.environ.get(env_var)
        if value is None:
            continue

        section, key = mapping[0], mapping[1]
        converter = mapping[2] if len(mapping) > 2 else str
        target = config if section is None else getattr(config, section)

        try:
            converted = converter(value)
        except ValueError as e:
            raise ConfigError(f"Invalid value for {env_var}: {value}", {"error": str(e)})

        setattr(target, key, converted)


def save_config(config: Config, config_path: Optional[str] = None) -> None:
    """
    Save configuration to YAML file.

    Raises:
        ConfigError: If configuration cannot be saved
    """
    if config_path:
        yaml_path = Path(config_path)
    else:
        yaml_path = Path(config.config_dir) / "config.yaml"

    yaml_path.parent.mkdir(parents=True, exist_ok=True)

    try:
        with open(yaml_path, "w", encoding="utf-8") as f:
            yaml.dump(config.to_dict(), f, default_flow_style=False, sort_keys=False)
    except IOError as e:
        raise ConfigError(f"Failed to save config file: {e}", {"path": str(yaml_path)})
