"""Configuration management package for the Personal Assistant client"""

from .environments import DEVELOPMENT, PRODUCTION, Environment, select_environment
from .loader import ConfigLoader, get_config_loader

__all__ = [
    "ConfigLoader",
    "get_config_loader",
    "Environment",
    "DEVELOPMENT",
    "PRODUCTION",
    "select_environment",
]
