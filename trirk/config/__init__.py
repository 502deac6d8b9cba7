"""Configuration package exports."""

from .loader import ConfigError, ConfigLoader, get_configuration  # noqa: F401
from .model import TwitchConfig  # noqa: F401

__all__ = ["ConfigError", "ConfigLoader", "TwitchConfig", "get_configuration"]
