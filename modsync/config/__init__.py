# MODSYNC Configuration Module
# Handles YAML-based configuration loading, validation, and defaults

from modsync.config.defaults import DEFAULT_CONFIG, generate_default_config, get_default_config
from modsync.config.loader import (
    CONFIG_FILE_NAME,
    ensure_config_exists,
    get_config_path,
    load_config,
    validate_config_file,
)
from modsync.config.schema import (
    GitConfig,
    ModsyncConfig,
    ModuleEntry,
    OutputConfig,
    RegistryConfig,
)

__all__ = [
    # Schema
    "ModsyncConfig",
    "GitConfig",
    "RegistryConfig",
    "ModuleEntry",
    "OutputConfig",
    # Loader
    "CONFIG_FILE_NAME",
    "load_config",
    "get_config_path",
    "ensure_config_exists",
    "validate_config_file",
    # Defaults
    "DEFAULT_CONFIG",
    "get_default_config",
    "generate_default_config",
]
