"""
Configuration system with Pydantic models and validation.

Provides typed configuration for the hole detector with support for
JSON, YAML and TOML configuration files.
"""

from .models import (
    Config,
    HoleDetectionConfig,
    LoggingConfig,
    LogLevel,
)
from .loader import (
    load_config,
    load_config_from_dict,
    save_config,
    get_default_config,
    validate_config_file,
)

__all__ = [
    # Configuration models
    "Config",
    "HoleDetectionConfig",
    "LoggingConfig",
    "LogLevel",
    # Configuration loading
    "load_config",
    "load_config_from_dict",
    "save_config",
    "get_default_config",
    "validate_config_file",
]
