"""Configuration loading utilities."""

from __future__ import annotations

import json
import logging
import os
import sys
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from ..constants import DEFAULT_CONFIG_FILE
from ..errors.internal import ConfigError
from .model import BotConfig


def config_path() -> str:
    """Return the configuration file path (``FOSSBOT_CONF_FILE`` or default)."""
    return os.environ.get("FOSSBOT_CONF_FILE", DEFAULT_CONFIG_FILE)


def load_raw(path: str | os.PathLike[str]) -> dict[str, Any]:
    """Read the JSON configuration file into a dictionary.

    Raises:
        ConfigError: If the file is missing, unreadable or not a JSON object.
    """
    try:
        with Path(path).open(encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError as e:
        raise ConfigError(f"Configuration file not found: {path}") from e
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigError(f"Cannot read configuration file {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"Configuration file {path} must contain a JSON object")
    return data


def load_config(path: str | os.PathLike[str]) -> BotConfig:
    """Load and validate the bot configuration.

    Args:
        path: Path to the JSON configuration file.

    Returns:
        A validated BotConfig.

    Raises:
        ConfigError: If the file cannot be read or fails validation.
    """
    raw = load_raw(path)
    try:
        return BotConfig.from_dict(raw)
    except ValidationError as e:
        raise ConfigError(
            f"Invalid configuration in {path}: {e.error_count()} error(s)",
            data={"errors": [err["loc"] for err in e.errors()]},
        ) from e


def get_configuration() -> BotConfig:
    """Load the configuration named by the environment, exiting on failure.

    Raises:
        SystemExit: If the file is missing or invalid.
    """
    path = config_path()
    try:
        config = load_config(path)
    except ConfigError as e:
        logging.error(f"Configuration error: {e}")
        sys.exit(1)
    logging.info(
        f"Configuration loaded server={config.server}:{config.port} "
        f"nick={config.nick} channels={len(config.channels)}"
    )
    return config
