"""Configuration models and loaders."""

from .environment import EnvironmentSettings, load_environment_settings
from .loader import load_config, load_raw_config
from .models import LoggingConfig, MigrateConfig

__all__ = [
    "EnvironmentSettings",
    "LoggingConfig",
    "MigrateConfig",
    "load_config",
    "load_environment_settings",
    "load_raw_config",
]
