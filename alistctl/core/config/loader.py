"""
Configuration loader: installer config YAML into ``AlistctlConfig``.

Lookup order: explicit path  >  ALISTCTL_CONFIG env var  >
/etc/alistctl/config.yml  >  built-in defaults.

An explicitly named file must exist and validate.  The system-wide
default file is optional.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

import yaml
from pydantic import ValidationError

from alistctl.core.models.config import AlistctlConfig

logger = logging.getLogger(__name__)

# Default system-wide config location
DEFAULT_CONFIG_FILE = Path("/etc/alistctl/config.yml")
CONFIG_ENV_VAR = "ALISTCTL_CONFIG"


class ConfigError(Exception):
    """Raised when installer configuration is invalid or missing."""


def find_config_file(explicit: Path | None = None) -> tuple[Path | None, bool]:
    """Locate the config file.

    Returns:
        ``(path, required)``: ``required`` is True when the path came
        from the caller or the environment and therefore must exist.
    """
    if explicit is not None:
        return explicit, True

    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        return Path(env_path), True

    if DEFAULT_CONFIG_FILE.is_file():
        return DEFAULT_CONFIG_FILE, False

    return None, False


def load_config(path: Path | None = None) -> AlistctlConfig:
    """Load and validate installer configuration.

    Args:
        path: Explicit path to a YAML file. If None, searches the
            environment and the system default.

    Returns:
        Validated AlistctlConfig (defaults when no file is found).

    Raises:
        ConfigError: If a required file is missing or the content is invalid.
    """
    path, required = find_config_file(path)

    if path is None:
        logger.debug("No config file found, using defaults")
        return AlistctlConfig()

    if not path.is_file():
        if required:
            raise ConfigError(f"Config file not found: {path}")
        return AlistctlConfig()

    logger.debug("Loading config from %s", path)

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"Expected a YAML mapping in {path}, got {type(data).__name__}")

    try:
        config = AlistctlConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration in {path}: {e}") from e

    logger.info("Loaded config from %s (service '%s')", path, config.service_name)
    return config
