"""Process-wide access to the loaded configuration."""

from functools import lru_cache

from store_provisioner.app.runtime.config.config_data import ConfigData
from store_provisioner.app.runtime.config.config_loader import load_config


@lru_cache(maxsize=1)
def get_config() -> ConfigData:
    """Load config.yaml once per process."""
    return load_config()
