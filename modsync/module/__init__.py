# MODSYNC Module Package
# Module identity, declaration parsing and build validation

from modsync.module.build import BuildError, build_module, find_imports
from modsync.module.config import (
    CONFIG_FILE_NAMES,
    BuildConfig,
    ConfigVersion,
    ModuleConfig,
    ModuleConfigError,
    parse_module_config,
)
from modsync.module.identity import InvalidModuleIdentityError, ModuleIdentity

__all__ = [
    # Identity
    "ModuleIdentity",
    "InvalidModuleIdentityError",
    # Declaration
    "CONFIG_FILE_NAMES",
    "BuildConfig",
    "ConfigVersion",
    "ModuleConfig",
    "ModuleConfigError",
    "parse_module_config",
    # Build
    "BuildError",
    "build_module",
    "find_imports",
]
