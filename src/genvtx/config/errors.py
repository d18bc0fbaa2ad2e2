"""Typed exceptions raised while loading configuration files."""

from typing import List


class ConfigError(Exception):
    """Base exception for all configuration errors."""


class ConfigIncludeError(ConfigError):
    """Raised when an included file cannot be found or parsed."""


class ConfigCycleError(ConfigError):
    """Raised when configuration files include each other in a loop."""

    def __init__(self, cycle_path: List[str]):
        """Initialize with the cycle path.

        Parameters
        ----------
        cycle_path : List[str]
            List of file paths showing the include cycle
        """
        self.cycle_path = cycle_path
        cycle_str = " -> ".join(cycle_path)
        super().__init__(f"Circular include detected: {cycle_str}")


class ConfigPathError(ConfigError):
    """Raised when a dot-separated configuration path does not exist."""


class ConfigTypeError(ConfigError):
    """Raised when a configuration path traverses a value which is not a
    dictionary, or when a directive has the wrong type."""
