"""
Configuration management for Uptimechamps.

This module handles loading and validating configuration settings, including
the Jamf credentials read from the environment or a .env file.
"""

from uptimechamps.config.settings import (
    CacheConfig,
    ConfigurationError,
    JamfConfig,
    ReportConfig,
    Settings,
    load_config,
)

__all__ = [
    "Settings",
    "JamfConfig",
    "CacheConfig",
    "ReportConfig",
    "load_config",
    "ConfigurationError",
]
