"""Configuration management for qfu."""

import logging
import os
from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict, ValidationError

from .backend import DEFAULT_BACKEND

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path.home() / ".config" / "qfu" / "qfu.config"
CONFIG_ENV = "QFU_CONFIG"
LOCAL_CONFIG_NAME = ".qfu.config"


class QfuConfig(BaseModel):
    """Settings read from the qfu config file."""

    model_config = ConfigDict(extra="forbid")

    backend: str = DEFAULT_BACKEND
    device_open_proxy: bool = False
    verbose_log: Path | None = None


def config_candidates() -> list[tuple[str, Path]]:
    """Config file locations to try, most specific first."""
    candidates = []
    env_config = os.environ.get(CONFIG_ENV)
    if env_config:
        candidates.append((CONFIG_ENV, Path(env_config).expanduser()))
    candidates.append(("current directory", Path.cwd() / LOCAL_CONFIG_NAME))
    candidates.append(("default location", DEFAULT_CONFIG_PATH))
    return candidates


def discover_config_path() -> Path | None:
    """
    Find the config file: $QFU_CONFIG, then .qfu.config in the current
    directory, then ~/.config/qfu/qfu.config.

    Returns:
        Path to the first config file that exists, None if there is none.
    """
    for origin, path in config_candidates():
        if path.exists():
            logger.debug(f"Using config from {origin}: {path}")
            return path
        if origin == CONFIG_ENV:
            logger.warning(f"{CONFIG_ENV} points to non-existent file: {path}")

    logger.debug("No config file found")
    return None


def get_config(config_path: Path | None = None) -> QfuConfig:
    """
    Read the config file.

    Args:
        config_path: Path to config file. If None, discovers using:
            1. QFU_CONFIG environment variable
            2. .qfu.config in current directory
            3. ~/.config/qfu/qfu.config (default)

    Returns:
        QfuConfig. Defaults are returned if there is no usable config file.
    """
    if config_path is None:
        config_path = discover_config_path()

    if config_path is None:
        return QfuConfig()

    try:
        with open(config_path) as f:
            config = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        logger.error(f"Error reading config file {config_path}: {e}")
        return QfuConfig()

    if config is None:
        logger.debug(f"Empty config file: {config_path}")
        return QfuConfig()

    try:
        return QfuConfig.model_validate(config)
    except ValidationError as e:
        logger.warning(f"Invalid config in {config_path}, using defaults: {e}")
        return QfuConfig()

