# MODSYNC Default Configuration
# Full default configuration as Python dict and YAML generator

import copy
from typing import Any

import yaml

DEFAULT_CONFIG: dict[str, Any] = {
    "git": {
        "remote": "origin",
    },
    "registry": {
        "path": "~/.config/modsync/registry",
    },
    "modules": [],
    "all_branches": False,
    "output": {
        "verbose": False,
        "colored": True,
    },
}


def get_default_config() -> dict[str, Any]:
    """Get a deep copy of the default configuration."""
    return copy.deepcopy(DEFAULT_CONFIG)


def generate_default_config() -> str:
    """Generate default configuration as YAML string with comments."""
    header = """# MODSYNC - Module history sync configuration
# Version: 1.0
#
# Modules are directories of the git repository, synced commit by commit.
# Each entry takes a dir and an optional identity override:
#
#   modules:
#     - dir: proto
#       identity: buf.build/acme/petapis
#
# Only branches pushed to git.remote are synced. With all_branches the
# remote's default branch is synced first, then the rest by name.
#
# registry.create_visibility (public or private) creates missing module
# repositories on first push.

"""
    return header + yaml.dump(DEFAULT_CONFIG, default_flow_style=False, sort_keys=False, allow_unicode=True)
