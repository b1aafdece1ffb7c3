# MODSYNC Module Configuration
# Pydantic model and parser for a module's buf.yaml declaration

from __future__ import annotations

from enum import Enum
from typing import Any, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from modsync.module.identity import ModuleIdentity
from modsync.storage.bucket import ReadBucket

# Looked up in this order at the module root.
CONFIG_FILE_NAMES = ("buf.yaml", "buf.mod")


class ModuleConfigError(Exception):
    """Raised when a module declaration is missing or malformed."""

    def __init__(self, message: str, problems: Optional[list[str]] = None):
        self.message = message
        self.problems = problems or []
        super().__init__(message if not self.problems else f"{message}: {'; '.join(self.problems)}")


class ConfigVersion(str, Enum):
    """Supported module declaration versions."""

    V1BETA1 = "v1beta1"
    V1 = "v1"


class BuildConfig(BaseModel):
    """Build section of a module declaration."""

    model_config = ConfigDict(extra="forbid")

    excludes: list[str] = Field(default_factory=list, description="Directories excluded from the module")
    # Only present in v1beta1 declarations; accepted and ignored.
    roots: list[str] = Field(default_factory=list, description="Legacy v1beta1 roots")


class ModuleConfig(BaseModel):
    """A module's declared configuration."""

    model_config = ConfigDict(extra="forbid")

    version: ConfigVersion = Field(description="Declaration version")
    name: Optional[str] = Field(default=None, description="Module identity, remote/owner/repository")
    deps: list[str] = Field(default_factory=list, description="Module dependencies")
    build: BuildConfig = Field(default_factory=BuildConfig, description="Build settings")
    lint: dict[str, Any] = Field(default_factory=dict, description="Lint settings")
    breaking: dict[str, Any] = Field(default_factory=dict, description="Breaking change settings")

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: Optional[str]) -> Optional[str]:
        """Reject names that are not module identities."""
        if v is not None:
            ModuleIdentity.parse(v)
        return v

    @field_validator("deps")
    @classmethod
    def validate_deps(cls, v: list[str]) -> list[str]:
        """Dependencies are identities, optionally pinned with :reference."""
        for dep in v:
            ModuleIdentity.parse(dep.split(":", 1)[0])
        return v

    @property
    def identity(self) -> Optional[ModuleIdentity]:
        """The declared identity, if any."""
        return ModuleIdentity.parse(self.name) if self.name else None


def parse_module_config(bucket: ReadBucket) -> ModuleConfig:
    """
    Parse the module declaration found at the root of a bucket.

    Args:
        bucket: Snapshot of the module directory.

    Returns:
        ModuleConfig: Validated declaration.

    Raises:
        ModuleConfigError: If no declaration exists or it is invalid.
    """
    for file_name in CONFIG_FILE_NAMES:
        if file_name in bucket:
            break
    else:
        raise ModuleConfigError(f"module declaration not found, expected one of {', '.join(CONFIG_FILE_NAMES)}")

    try:
        data = yaml.safe_load(bucket.get(file_name))
    except yaml.YAMLError as e:
        raise ModuleConfigError(f"invalid YAML syntax in {file_name}: {e}") from e

    if data is None:
        raise ModuleConfigError(f"{file_name} is empty")
    if not isinstance(data, dict):
        raise ModuleConfigError(f"{file_name} must contain a mapping")

    try:
        return ModuleConfig.model_validate(data)
    except ValidationError as e:
        problems = []
        for error in e.errors():
            loc = " -> ".join(str(l) for l in error["loc"])
            problems.append(f"{loc}: {error['msg']}")
        raise ModuleConfigError(f"invalid {file_name}", problems) from e
