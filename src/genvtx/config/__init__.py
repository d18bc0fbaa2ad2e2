"""Configuration loading.

This package provides a YAML configuration loader with:
- Hierarchical file includes with cycle detection
- Override semantics with dot-notation
- Typed exceptions

Main Entry Point
----------------
load_config : Load a configuration file
"""

from .errors import (
    ConfigCycleError,
    ConfigError,
    ConfigIncludeError,
    ConfigPathError,
    ConfigTypeError,
)
from .loader import load_config
from .operations import deep_merge, parse_value, set_nested_value

__all__ = [
    "load_config",
    "deep_merge",
    "parse_value",
    "set_nested_value",
    "ConfigError",
    "ConfigIncludeError",
    "ConfigCycleError",
    "ConfigPathError",
    "ConfigTypeError",
]
