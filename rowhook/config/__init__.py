"""Configuration for rowhook: YAML file, ROWHOOK_* environment, runtime overrides."""

from rowhook.config.loader import ConfigLoadError, load_yaml, resolve_config_path
from rowhook.config.manager import ConfigManager, env_overrides
from rowhook.config.models import (
    LoggingConfig,
    MySQLConfig,
    RowHookConfig,
    StreamConfig,
    TriggerConfig,
)

__all__ = [
    "ConfigLoadError",
    "ConfigManager",
    "LoggingConfig",
    "MySQLConfig",
    "RowHookConfig",
    "StreamConfig",
    "TriggerConfig",
    "env_overrides",
    "load_yaml",
    "resolve_config_path",
]
