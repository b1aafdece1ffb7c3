# MODSYNC Sync Module
# A repository subdirectory registered for sync

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from modsync.module.identity import InvalidModuleIdentityError, ModuleIdentity
from modsync.sync.errors import InvalidModuleError
from modsync.utils.paths import normalize_path


@dataclass(frozen=True)
class Module:
    """
    A module synced by the Syncer.

    Attributes:
        dir: Path of the module relative to the repository root.
        identity_override: Registry identity to sync to. When unset, the
            identity declared by the module itself is used.
    """

    dir: str
    identity_override: Optional[ModuleIdentity] = None

    def __post_init__(self) -> None:
        try:
            object.__setattr__(self, "dir", normalize_path(self.dir))
        except ValueError as e:
            raise InvalidModuleError(f"invalid module directory: {e}") from e

    @classmethod
    def parse(cls, value: str, *, require_identity: bool = False) -> Module:
        """
        Parse a module from <dir> or <dir>:<remote>/<owner>/<repository>.

        Raises:
            InvalidModuleError: If the directory or identity is malformed, or
                the identity is missing while required.
        """
        directory, sep, identity = value.partition(":")
        if not sep or not identity.strip():
            if require_identity:
                raise InvalidModuleError(f"module {value!r} is missing an identity")
            return cls(directory)
        try:
            override = ModuleIdentity.parse(identity)
        except InvalidModuleIdentityError as e:
            raise InvalidModuleError(f"module {value!r}: {e}") from e
        return cls(directory, override)

    def __str__(self) -> str:
        if self.identity_override is None:
            return self.dir
        return f"{self.dir}:{self.identity_override}"
