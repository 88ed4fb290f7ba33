"""Configuration loader with JSON/INI file and environment variable support."""

import configparser
import json
import logging
import os
import stat
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from procwarden.errors import ConfigError

from .models import Settings

logger = logging.getLogger(__name__)

INI_SUFFIXES = {".ini", ".cfg"}

# env var -> (section, key)
ENV_OVERRIDES: dict[str, tuple[str, str]] = {
    "PROCWARDEN_DATABASE_HOST": ("database", "host"),
    "PROCWARDEN_DATABASE_USER": ("database", "user"),
    "PROCWARDEN_DATABASE_PASSWORD": ("database", "password"),
    "PROCWARDEN_DATABASE_NAME": ("database", "database"),
    "PROCWARDEN_DATABASE_URL": ("database", "url"),
    "PROCWARDEN_MONITOR_CHECK_INTERVAL": ("monitor", "check_interval"),
    "PROCWARDEN_MONITOR_MAX_RESTART_FAILURES": ("monitor", "max_restart_failures"),
    "PROCWARDEN_MONITOR_CIRCUIT_RESET_TIME": ("monitor", "circuit_reset_time"),
    "PROCWARDEN_MONITOR_MODE": ("monitor", "mode"),
}


def load_config(config_path: str | None = None) -> Settings:
    """
    Load settings from a config file with environment variable overrides.

    Priority: env vars > config file > defaults

    Args:
        config_path: Path to a JSON or INI config file. If None, uses the
                     PROCWARDEN_CONFIG_PATH env var or defaults to 'config.json'
                     in the working directory.

    Returns:
        Validated Settings instance

    Raises:
        ConfigError: If the file is missing or unreadable, cannot be parsed,
                     or any value fails validation
    """
    if config_path is None:
        config_path = os.environ.get("PROCWARDEN_CONFIG_PATH", "config.json")

    config_file = Path(config_path)
    if not config_file.is_file():
        raise ConfigError(f"Config file not found: {config_file}")

    _check_permissions(config_file)

    try:
        if config_file.suffix.lower() in INI_SUFFIXES:
            config_data = _read_ini(config_file)
        else:
            with open(config_file) as f:
                config_data = json.load(f)
    except OSError as e:
        raise ConfigError(f"Config file {config_file} is not readable: {e}") from e
    except (json.JSONDecodeError, configparser.Error) as e:
        raise ConfigError(f"Config file {config_file} could not be parsed: {e}") from e

    if not isinstance(config_data, dict):
        raise ConfigError(f"Config file {config_file} must contain an object at the top level")

    for env_var, (section, key) in ENV_OVERRIDES.items():
        if value := os.environ.get(env_var):
            config_data.setdefault(section, {})[key] = value

    try:
        settings = Settings(**config_data)
    except ValidationError as e:
        raise ConfigError(f"Configuration validation failed: {e}") from e

    logger.debug("Parsed configuration values:")
    logger.debug(f"DB_HOST='{settings.database.host}'")
    logger.debug(f"DB_USER='{settings.database.user}'")
    logger.debug(f"DB_NAME='{settings.database.database}'")
    logger.debug(f"CHECK_INTERVAL='{settings.monitor.check_interval}'")
    logger.info("Configuration validation successful")
    return settings


def _read_ini(config_file: Path) -> dict[str, Any]:
    """Read an INI file into nested section dictionaries."""
    parser = configparser.ConfigParser(interpolation=None)
    with open(config_file) as f:
        parser.read_file(f)
    return {section: dict(parser.items(section)) for section in parser.sections()}


def _check_permissions(config_file: Path) -> None:
    """Warn when the config file is readable by anyone but its owner."""
    perms = stat.S_IMODE(config_file.stat().st_mode)
    if perms != 0o600:
        logger.warning(
            f"Configuration file {config_file} has insecure permissions: "
            f"{perms:o}. Recommended: 600"
        )
