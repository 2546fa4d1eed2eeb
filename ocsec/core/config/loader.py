"""
Configuration loader — reads ocsec.yml into the Settings model.

This is the primary entry point for loading configuration. It reads
YAML, applies environment overrides, validates against the Pydantic
schema, and returns typed settings. A missing file is not an error:
defaults apply.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml

from ocsec.core.models.settings import Settings

logger = logging.getLogger(__name__)

# Default config filename
CONFIG_FILE = "ocsec.yml"

# Environment overrides: variable → settings key
_ENV_OVERRIDES = {
    "OCSEC_DATA_DIR": "data_dir",
    "OCSEC_TIMEOUT": "command_timeout_s",
}


class ConfigError(Exception):
    """Raised when configuration is invalid or unreadable."""


def find_config_file(start_dir: Path | None = None) -> Path | None:
    """Search for ocsec.yml starting from the given directory, walking up.

    Args:
        start_dir: Directory to start searching from (default: cwd).

    Returns:
        Path to ocsec.yml, or None if not found.
    """
    current = (start_dir or Path.cwd()).resolve()

    for _ in range(20):  # safety limit
        candidate = current / CONFIG_FILE
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:
            break  # filesystem root
        current = parent

    return None


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Expected a YAML mapping in {path}, got {type(data).__name__}")

    # The YAML may wrap everything under an "ocsec" key or be flat
    section = data.get("ocsec", data)
    if not isinstance(section, dict):
        raise ConfigError(f"Expected a mapping under 'ocsec' in {path}")
    return section


def load_settings(
    path: Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> Settings:
    """Load and validate settings.

    Args:
        path: Explicit path to ocsec.yml. If None, searches upward from cwd.
        environ: Environment mapping for overrides (default: os.environ).

    Returns:
        Validated Settings model.

    Raises:
        ConfigError: If an explicit file is missing, or any file is invalid.
    """
    env = os.environ if environ is None else environ
    data: dict[str, Any] = {}

    if path is not None:
        if not path.is_file():
            raise ConfigError(f"Config file not found: {path}")
    else:
        path = find_config_file()

    if path is not None:
        logger.debug("Loading settings from %s", path)
        data = _read_yaml(path)
    else:
        logger.debug("No %s found, using defaults", CONFIG_FILE)

    for var, key in _ENV_OVERRIDES.items():
        if env.get(var):
            data[key] = env[var]

    try:
        settings = Settings.model_validate(data)
    except Exception as e:
        raise ConfigError(f"Invalid configuration: {e}") from e

    logger.info("Settings loaded (data_dir=%s)", settings.data_dir)
    return settings
