"""
Configuration settings management for Uptimechamps.

This module handles loading and validating configuration settings from an
optional YAML file, a ``.env`` file holding Jamf credentials, and
environment variable overrides.

Configuration is loaded from ~/.uptimechamps/config.yaml by default, with the
path overridable via the UPTIMECHAMPS_CONFIG environment variable.

Precedence (lowest to highest):
    1. Built-in defaults
    2. YAML config file
    3. .env file (JAMF_URL, JAMF_CLIENT_ID, JAMF_CLIENT_SECRET)
    4. Process environment
"""

from __future__ import annotations

import dataclasses
import os
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from dotenv import dotenv_values

# Default configuration directory
DEFAULT_CONFIG_DIR = Path.home() / ".uptimechamps"
DEFAULT_CONFIG_FILE = DEFAULT_CONFIG_DIR / "config.yaml"
DEFAULT_ENV_FILE = Path(".env")

# Same location the shell report used, so existing caches keep working
DEFAULT_CACHE_PATH = Path.home() / ".jamf_uptime_cache" / "top50_cache.txt"

CREDENTIAL_ENV_VARS = {
    "JAMF_URL": "url",
    "JAMF_CLIENT_ID": "client_id",
    "JAMF_CLIENT_SECRET": "client_secret",
}


class ConfigurationError(Exception):
    """Raised when configuration is invalid or cannot be loaded."""

    pass


@dataclass(frozen=True)
class JamfConfig:
    """Jamf Pro connection settings."""

    url: str = ""
    client_id: str = ""
    client_secret: str = field(default="", repr=False)
    timeout: float = 30.0
    request_delay: float = 0.1


@dataclass(frozen=True)
class CacheConfig:
    """Top-N cache settings."""

    path: str = str(DEFAULT_CACHE_PATH)
    max_age_days: int = 14
    top_n: int = 50


@dataclass(frozen=True)
class ReportConfig:
    """Report settings."""

    attribute_name: str = "Uptime"
    display_top_k: int = 25


@dataclass(frozen=True)
class Settings:
    """
    Complete Uptimechamps configuration.

    Built once at startup and passed to every component that needs it.

    Attributes:
        log_level: Logging verbosity (DEBUG, INFO, WARNING, ERROR).
        jamf: Jamf Pro URL, client credentials and request tuning.
        cache: Cache file location, maximum age and size.
        report: Extension Attribute name and number of rows shown.
    """

    log_level: str = "WARNING"
    jamf: JamfConfig = field(default_factory=JamfConfig)
    cache: CacheConfig = field(default_factory=CacheConfig)
    report: ReportConfig = field(default_factory=ReportConfig)

    @property
    def cache_path(self) -> Path:
        return Path(self.cache.path).expanduser()

    def require_credentials(self) -> None:
        """
        Check that Jamf credentials are present.

        Raises:
            ConfigurationError: Naming every missing variable.
        """
        missing = [
            env_var
            for env_var, attr in CREDENTIAL_ENV_VARS.items()
            if not getattr(self.jamf, attr)
        ]
        if missing:
            raise ConfigurationError(
                f"Missing required Jamf credentials: {', '.join(missing)}. "
                "Set them in the environment or in a .env file "
                "(JAMF_URL, JAMF_CLIENT_ID, JAMF_CLIENT_SECRET)."
            )


def get_config_path(environ: Mapping[str, str] | None = None) -> Path:
    """
    Get the configuration file path.

    Returns the path from UPTIMECHAMPS_CONFIG if set, otherwise the default
    path (~/.uptimechamps/config.yaml).
    """
    environ = os.environ if environ is None else environ
    env_path = environ.get("UPTIMECHAMPS_CONFIG")
    if env_path:
        return Path(env_path).expanduser()
    return DEFAULT_CONFIG_FILE


def load_config(
    config_path: Path | None = None,
    env_file: Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> Settings:
    """
    Load configuration.

    Args:
        config_path: Optional YAML config file. Defaults to UPTIMECHAMPS_CONFIG
            or ~/.uptimechamps/config.yaml; a missing file is not an error.
        env_file: Optional .env file with Jamf credentials. Defaults to ./.env.
        environ: Environment mapping (defaults to os.environ).

    Returns:
        Validated Settings instance.

    Raises:
        ConfigurationError: If a file cannot be read or a value is invalid.
    """
    environ = os.environ if environ is None else environ
    if config_path is None:
        config_path = get_config_path(environ)
    if env_file is None:
        env_file = DEFAULT_ENV_FILE

    settings = Settings()

    if config_path.exists():
        try:
            with open(config_path) as f:
                config_data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in config file: {e}") from e
        except OSError as e:
            raise ConfigurationError(f"Cannot read config file: {e}") from e

        if not isinstance(config_data, dict):
            raise ConfigurationError(f"Config file {config_path} must contain a mapping")
        settings = _apply_config_data(settings, config_data)

    dotenv_data: dict[str, str] = {}
    if env_file.exists():
        dotenv_data = {k: v for k, v in dotenv_values(env_file).items() if v is not None}

    settings = _apply_environment_overrides(settings, {**dotenv_data, **environ})

    _validate_config(settings)

    return settings


def _apply_config_data(settings: Settings, data: dict[str, Any]) -> Settings:
    """Apply configuration data from parsed YAML to settings."""
    try:
        if data.get("log_level") is not None:
            settings = dataclasses.replace(settings, log_level=str(data["log_level"]).upper())

        sections: dict[str, dict[str, Callable[[Any], Any]]] = {
            "jamf": {"url": str, "timeout": float, "request_delay": float},
            "cache": {"path": str, "max_age_days": int, "top_n": int},
            "report": {"attribute_name": str, "display_top_k": int},
        }
        for section_name, fields in sections.items():
            section = data.get(section_name) or {}
            if not isinstance(section, dict):
                raise ConfigurationError(f"Config section '{section_name}' must be a mapping")

            # Null values (e.g. "url:" with nothing after it) keep the default
            changes = {
                key: converter(section[key])
                for key, converter in fields.items()
                if section.get(key) is not None
            }
            if changes:
                current = getattr(settings, section_name)
                settings = dataclasses.replace(
                    settings, **{section_name: dataclasses.replace(current, **changes)}
                )
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Invalid value in config file: {e}") from e

    return settings


def _apply_environment_overrides(settings: Settings, environ: Mapping[str, str]) -> Settings:
    """Apply environment variable overrides to settings."""
    env_map: dict[str, tuple[str, Callable[[str], Any]]] = {
        "JAMF_URL": ("jamf.url", str),
        "JAMF_CLIENT_ID": ("jamf.client_id", str),
        "JAMF_CLIENT_SECRET": ("jamf.client_secret", str),
        "UPTIMECHAMPS_LOG_LEVEL": ("log_level", str.upper),
        "UPTIMECHAMPS_ATTRIBUTE_NAME": ("report.attribute_name", str),
        "UPTIMECHAMPS_DISPLAY_TOP_K": ("report.display_top_k", int),
        "UPTIMECHAMPS_CACHE_PATH": ("cache.path", str),
        "UPTIMECHAMPS_CACHE_MAX_AGE_DAYS": ("cache.max_age_days", int),
        "UPTIMECHAMPS_CACHE_TOP_N": ("cache.top_n", int),
    }

    for env_var, (attr_path, converter) in env_map.items():
        value = environ.get(env_var)
        if value is None or value == "":
            continue
        try:
            converted = converter(value.strip())
        except ValueError as e:
            raise ConfigurationError(f"Invalid value for {env_var}: {value!r}") from e
        settings = _replace_nested(settings, attr_path, converted)

    return settings


def _replace_nested(obj: Any, path: str, value: Any) -> Any:
    """Return a copy of a frozen dataclass with a dotted attribute replaced."""
    head, _, rest = path.partition(".")
    if not rest:
        return dataclasses.replace(obj, **{head: value})
    return dataclasses.replace(obj, **{head: _replace_nested(getattr(obj, head), rest, value)})


def _validate_config(settings: Settings) -> None:
    """
    Validate configuration settings.

    Raises:
        ConfigurationError: If configuration is invalid.
    """
    valid_log_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
    if settings.log_level not in valid_log_levels:
        raise ConfigurationError(
            f"Invalid log_level: {settings.log_level}. "
            f"Must be one of: {', '.join(sorted(valid_log_levels))}"
        )

    if settings.cache.max_age_days < 1:
        raise ConfigurationError("cache.max_age_days must be at least 1")
    if settings.cache.top_n < 1:
        raise ConfigurationError("cache.top_n must be at least 1")
    if settings.report.display_top_k < 1:
        raise ConfigurationError("report.display_top_k must be at least 1")
    if not settings.report.attribute_name.strip():
        raise ConfigurationError("report.attribute_name must not be empty")
    if settings.jamf.timeout <= 0:
        raise ConfigurationError("jamf.timeout must be positive")
    if settings.jamf.request_delay < 0:
        raise ConfigurationError("jamf.request_delay must not be negative")
