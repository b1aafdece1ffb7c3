# MODSYNC Module Identity
# Registry identity of a module: remote/owner/repository

from __future__ import annotations

import re
from dataclasses import dataclass

_REMOTE_PATTERN = re.compile(r"^[A-Za-z0-9](?:[A-Za-z0-9.-]*[A-Za-z0-9])?(?::[0-9]{1,5})?$")
_NAME_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_-]*$")


class InvalidModuleIdentityError(ValueError):
    """Raised when a string is not a valid module identity."""


@dataclass(frozen=True, order=True)
class ModuleIdentity:
    """Fully qualified module name, e.g. buf.build/acme/petapis."""

    remote: str
    owner: str
    repository: str

    def __post_init__(self) -> None:
        if not _REMOTE_PATTERN.match(self.remote):
            raise InvalidModuleIdentityError(f"invalid remote {self.remote!r}")
        for part, value in (("owner", self.owner), ("repository", self.repository)):
            if not _NAME_PATTERN.match(value):
                raise InvalidModuleIdentityError(f"invalid {part} {value!r}")

    @classmethod
    def parse(cls, value: str) -> ModuleIdentity:
        """
        Parse a module identity string.

        Args:
            value: String in the form remote/owner/repository.

        Raises:
            InvalidModuleIdentityError: If the string is malformed.
        """
        parts = value.strip().split("/")
        if len(parts) != 3 or not all(parts):
            raise InvalidModuleIdentityError(
                f"module identity {value!r} must be in the form remote/owner/repository"
            )
        return cls(remote=parts[0], owner=parts[1], repository=parts[2])

    @property
    def full_name(self) -> str:
        """Owner and repository, without the remote."""
        return f"{self.owner}/{self.repository}"

    def __str__(self) -> str:
        return f"{self.remote}/{self.owner}/{self.repository}"
