"""Configuration loading with environment variable substitution."""

import os
from pathlib import Path
from typing import Any

import yaml
from loguru import logger
from pydantic_core import ValidationError

from store_provisioner.app.runtime.config.config_data import ConfigData
from store_provisioner.app.runtime.config.config_utils import substitute_env_vars

CONFIG_PATH = Path(os.getenv("STORE_PROVISIONER_CONFIG", "config.yaml"))


def apply_environment_overrides(env_mode: str) -> int:
    """Promote `{ENV_MODE}_*` variables to their unprefixed names.

    For example with APP_ENVIRONMENT=production, PRODUCTION_DATABASE_URL
    becomes DATABASE_URL before placeholders are substituted.

    Returns:
        Number of variables promoted
    """
    prefix = f"{env_mode.upper()}_"
    overrides = [
        (var, value) for var, value in os.environ.items() if var.startswith(prefix)
    ]
    for var_name, var_value in overrides:
        os.environ[var_name[len(prefix) :]] = var_value
        logger.debug(f"Set environment variable {var_name[len(prefix):]} from {var_name}")
    return len(overrides)


def load_config(file_path: Path = CONFIG_PATH) -> ConfigData:
    """
    Load a YAML file with environment variable substitution.

    The YAML file must have a top-level 'config:' key containing the
    configuration data.

    Args:
        file_path: Path to the YAML file (default: config.yaml)

    Returns:
        Validated ConfigData

    Raises:
        ValueError: If required environment variables are missing, validation
            fails, or the YAML structure is invalid (missing 'config' key)
        FileNotFoundError: If the YAML file doesn't exist
    """
    with open(file_path) as f:
        content = f.read()

    env_mode = os.getenv("APP_ENVIRONMENT", "development")
    logger.info(f"Loading configuration for environment: {env_mode}")
    promoted = apply_environment_overrides(env_mode)
    logger.info(f"Applied {promoted} environment-specific overrides")

    content = substitute_env_vars(content)

    try:
        loaded: dict[str, Any] | None = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise ValueError(f"Error parsing YAML: {e}") from e

    if not loaded or "config" not in loaded:
        raise ValueError("Invalid YAML structure: missing 'config' key")

    try:
        config = ConfigData(**(loaded["config"] or {}))
    except ValidationError as e:
        raise ValueError(f"Invalid configuration: {e}") from e

    return config
