# MODSYNC Configuration Loader
# Load, save, and validate YAML configuration files

import os
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import ValidationError

from modsync.config.defaults import generate_default_config, get_default_config
from modsync.config.schema import ModsyncConfig
from modsync.utils.paths import atomic_write

CONFIG_FILE_NAME = "modsync.yaml"


def get_config_path() -> Path:
    """Get the path to the configuration file."""
    # Allow override via environment variable
    env_path = os.environ.get("MODSYNC_CONFIG")
    if env_path:
        return Path(env_path).expanduser()
    return Path.cwd() / CONFIG_FILE_NAME


def load_config(config_path: Optional[Path] = None) -> ModsyncConfig:
    """
    Load configuration from YAML file.

    Args:
        config_path: Optional path to config file. When not given the default
            location is used, and a missing file yields the defaults.

    Returns:
        ModsyncConfig: Validated configuration object.

    Raises:
        FileNotFoundError: If an explicitly given config file doesn't exist.
        ValidationError: If config file is invalid.
        yaml.YAMLError: If config file is not valid YAML.
    """
    explicit = config_path is not None
    if config_path is None:
        config_path = get_config_path()

    if not config_path.exists():
        if explicit:
            raise FileNotFoundError(f"Configuration file not found: {config_path}")
        return ModsyncConfig.model_validate(get_default_config())

    with open(config_path, encoding="utf-8") as f:
        data = yaml.safe_load(f)

    if data is None:
        data = {}

    return ModsyncConfig.model_validate(_merge_with_defaults(data))


def ensure_config_exists(config_path: Optional[Path] = None) -> tuple[Path, bool]:
    """
    Ensure configuration file exists, creating default if needed.

    Returns:
        Tuple of (config_path, was_created).
    """
    if config_path is None:
        config_path = get_config_path()

    if config_path.exists():
        return config_path, False

    atomic_write(config_path, generate_default_config())
    return config_path, True


def validate_config_file(config_path: Optional[Path] = None) -> tuple[bool, list[str]]:
    """
    Validate a configuration file without loading it into the system.

    Args:
        config_path: Path to config file to validate.

    Returns:
        Tuple of (is_valid, error_messages).
    """
    if config_path is None:
        config_path = get_config_path()

    if not config_path.exists():
        return False, [f"Configuration file not found: {config_path}"]

    try:
        with open(config_path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        return False, [f"Invalid YAML syntax: {e}"]

    if data is None:
        return False, ["Configuration file is empty"]
    if not isinstance(data, dict):
        return False, ["Configuration file must contain a mapping"]

    try:
        config = ModsyncConfig.model_validate(data)
    except ValidationError as e:
        errors = []
        for error in e.errors():
            loc = " -> ".join(str(l) for l in error["loc"])
            errors.append(f"{loc}: {error['msg']}")
        return False, errors

    if not config.modules:
        return False, ["No modules defined"]

    return True, []


def _merge_with_defaults(data: dict[str, Any]) -> dict[str, Any]:
    """Merge loaded data with default values for missing keys."""
    result = get_default_config()

    for section in ("git", "registry", "output"):
        if section in data:
            result[section] = {**result[section], **(data[section] or {})}

    for key in ("modules", "all_branches"):
        if key in data:
            result[key] = data[key]

    return result
