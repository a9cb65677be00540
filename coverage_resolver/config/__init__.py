"""Configuration management module for the Coverage Area Resolver."""

from .environment import EnvironmentConfig, load_environment_config
from .exceptions import ConfigurationError
from .loader import load_config, validate_config_file
from .models import (
    AppConfig,
    CatalogConfig,
    DatasetConfig,
    DatasetSource,
    LogFormat,
    LogLevel,
    LoggingConfig,
)

__all__ = [
    # Main loader functions
    "load_config",
    "validate_config_file",
    "load_environment_config",
    # Configuration models
    "AppConfig",
    "DatasetConfig",
    "CatalogConfig",
    "LoggingConfig",
    "EnvironmentConfig",
    # Enums
    "DatasetSource",
    "LogLevel",
    "LogFormat",
    # Exceptions
    "ConfigurationError",
]
