"""Configuration management module for the job search engine."""

from .environment import EnvironmentConfig, load_environment_config
from .exceptions import ConfigurationError
from .loader import load_config, parse_config
from .models import (
    AppConfig,
    CorpusConfig,
    LogFormat,
    LogLevel,
    LoggingConfig,
    SearchSettings,
)

__all__ = [
    # Main loader functions
    "load_config",
    "parse_config",
    "load_environment_config",
    # Configuration models
    "AppConfig",
    "SearchSettings",
    "CorpusConfig",
    "LoggingConfig",
    "EnvironmentConfig",
    # Enums
    "LogLevel",
    "LogFormat",
    # Exceptions
    "ConfigurationError",
]
