# MODSYNC Configuration Schema
# Pydantic models for YAML configuration validation

from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from modsync.git.repository import DEFAULT_REMOTE
from modsync.module.identity import ModuleIdentity
from modsync.registry.local import Visibility
from modsync.sync.module import Module
from modsync.utils.paths import normalize_path


class GitConfig(BaseModel):
    """Repository settings."""

    remote: str = Field(default=DEFAULT_REMOTE, description="Remote whose branches are synced")


class RegistryConfig(BaseModel):
    """Registry settings."""

    path: str = Field(
        default="~/.config/modsync/registry", validate_default=True, description="Local registry directory"
    )
    create_visibility: Optional[Visibility] = Field(
        default=None, description="Create missing module repositories with this visibility"
    )

    @field_validator("path")
    @classmethod
    def expand_path(cls, v: str) -> str:
        """Expand ~ in path."""
        return str(Path(v).expanduser())


class ModuleEntry(BaseModel):
    """A module to sync."""

    dir: str = Field(description="Module directory relative to the repository root")
    identity: Optional[str] = Field(default=None, description="Registry identity override")

    @field_validator("dir")
    @classmethod
    def normalize_dir(cls, v: str) -> str:
        """Normalize the module directory."""
        return normalize_path(v)

    @field_validator("identity")
    @classmethod
    def validate_identity(cls, v: Optional[str]) -> Optional[str]:
        """Reject malformed identities."""
        if v is not None:
            ModuleIdentity.parse(v)
        return v

    def to_module(self) -> Module:
        """Build the Syncer module."""
        override = ModuleIdentity.parse(self.identity) if self.identity else None
        return Module(self.dir, override)


class OutputConfig(BaseModel):
    """Output and logging configuration."""

    verbose: bool = Field(default=False, description="Enable verbose output")
    colored: bool = Field(default=True, description="Enable colored output")


class ModsyncConfig(BaseModel):
    """Root configuration model for MODSYNC."""

    git: GitConfig = Field(default_factory=GitConfig, description="Repository settings")
    registry: RegistryConfig = Field(default_factory=RegistryConfig, description="Registry settings")
    modules: list[ModuleEntry] = Field(default_factory=list, description="Modules to sync, in order")
    all_branches: bool = Field(default=False, description="Sync all remote branches")
    output: OutputConfig = Field(default_factory=OutputConfig, description="Output settings")

    @field_validator("modules")
    @classmethod
    def reject_duplicates(cls, v: list[ModuleEntry]) -> list[ModuleEntry]:
        """Each module may only be listed once."""
        seen: set[str] = set()
        for entry in v:
            key = str(entry.to_module())
            if key in seen:
                raise ValueError(f"duplicate module {key}")
            seen.add(key)
        return v

    def get_modules(self) -> list[Module]:
        """Return the configured modules as Syncer modules."""
        return [entry.to_module() for entry in self.modules]
