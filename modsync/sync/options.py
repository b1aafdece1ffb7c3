# MODSYNC Syncer Options
# Collaborator callback types and the validated Syncer configuration

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Optional, Union

from modsync.module.identity import ModuleIdentity
from modsync.sync.errors import DuplicateModuleError
from modsync.sync.module import Module

if TYPE_CHECKING:
    from modsync.sync.syncer import ModuleCommit


class ModuleLookup(str, Enum):
    """Non-branch outcomes of looking up a module's default branch."""

    DOES_NOT_EXIST = "does_not_exist"


# Receives every commit to sync. Raising aborts the sync.
SyncFunc = Callable[["ModuleCommit"], None]

# Returns the last synced commit hash of a module on a branch, or None.
SyncPointResolver = Callable[[ModuleIdentity, str], Optional[str]]

# Returns the subset of the given commit hashes already synced for a module.
SyncedGitCommitChecker = Callable[[ModuleIdentity, set[str]], set[str]]

# Returns the registry's default branch of a module, or ModuleLookup.DOES_NOT_EXIST.
ModuleDefaultBranchGetter = Callable[[ModuleIdentity], Union[str, ModuleLookup]]


@dataclass(frozen=True)
class SyncerConfig:
    """
    Immutable Syncer configuration.

    Attributes:
        modules: Modules to sync, in the order they are processed per commit.
        sync_point_resolver: Resolves where to resume. Without it every
            branch is synced from its root.
        synced_commit_checker: Reports commits already synced by hash.
        default_branch_getter: Reads the registry default branch of each
            module. Without it the default branch check is skipped.
        all_branches: Sync every remote branch instead of only the checked
            out one.
    """

    modules: tuple[Module, ...] = ()
    sync_point_resolver: Optional[SyncPointResolver] = None
    synced_commit_checker: Optional[SyncedGitCommitChecker] = None
    default_branch_getter: Optional[ModuleDefaultBranchGetter] = None
    all_branches: bool = False

    def __post_init__(self) -> None:
        seen: set[str] = set()
        for module in self.modules:
            if str(module) in seen:
                raise DuplicateModuleError(module)
            seen.add(str(module))


class SyncerConfigBuilder:
    """Accumulates options and builds a SyncerConfig."""

    def __init__(self) -> None:
        self._modules: list[Module] = []
        self._resolver: Optional[SyncPointResolver] = None
        self._checker: Optional[SyncedGitCommitChecker] = None
        self._getter: Optional[ModuleDefaultBranchGetter] = None
        self._all_branches = False

    def with_module(self, module: Module) -> SyncerConfigBuilder:
        """
        Add a module to sync. Can be called multiple times for distinct modules.

        Raises:
            DuplicateModuleError: If an equal module was already added.
        """
        if any(str(existing) == str(module) for existing in self._modules):
            raise DuplicateModuleError(module)
        self._modules.append(module)
        return self

    def with_resumption(self, resolver: SyncPointResolver) -> SyncerConfigBuilder:
        """Resume each branch from the sync point the resolver returns."""
        self._resolver = resolver
        return self

    def with_commit_checker(self, checker: SyncedGitCommitChecker) -> SyncerConfigBuilder:
        """Skip commits the checker reports as already synced."""
        self._checker = checker
        return self

    def with_default_branch_getter(self, getter: ModuleDefaultBranchGetter) -> SyncerConfigBuilder:
        """Check each module's registry default branch against the repository's."""
        self._getter = getter
        return self

    def with_all_branches(self, all_branches: bool = True) -> SyncerConfigBuilder:
        """Sync all remote branches, not only the checked out one."""
        self._all_branches = all_branches
        return self

    def build(self) -> SyncerConfig:
        return SyncerConfig(
            modules=tuple(self._modules),
            sync_point_resolver=self._resolver,
            synced_commit_checker=self._checker,
            default_branch_getter=self._getter,
            all_branches=self._all_branches,
        )
