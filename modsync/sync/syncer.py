# MODSYNC Syncer
# Replays the commits of a repository's modules into a sink, resuming from sync points

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Optional

from modsync.git.operations import ObjectNotFoundError
from modsync.git.repository import Commit, Repository
from modsync.logger import SyncLogger
from modsync.module.build import BuildError, build_module
from modsync.module.config import ModuleConfigError, parse_module_config
from modsync.module.identity import ModuleIdentity
from modsync.storage.bucket import ReadBucket
from modsync.storage.provider import GitStorageProvider
from modsync.sync.branches import select_branches
from modsync.sync.errors import (
    DefaultBranchMismatchError,
    InvalidModuleError,
    SyncCancelledError,
    SyncError,
    SyncPointNotReachableError,
)
from modsync.sync.handler import ErrorHandler
from modsync.sync.module import Module
from modsync.sync.options import ModuleLookup, SyncerConfig, SyncFunc
from modsync.sync.walker import walk_first_parent


@dataclass(frozen=True)
class ModuleCommit:
    """A module at a particular commit, handed to the sink."""

    identity: ModuleIdentity
    bucket: ReadBucket
    commit: Commit
    branch: str
    tags: tuple[str, ...] = ()


@dataclass
class _ModulePlan:
    """Where a module resumes on the branch being synced."""

    module: Module
    identity: Optional[ModuleIdentity]
    sync_point: Optional[str] = None
    start: int = 0
    synced: set[str] = field(default_factory=set)


class Syncer:
    """
    Syncs the modules of a repository.

    Branches are synced one after the other, each to completion. Within a
    branch commits are visited oldest first along first parents, and for
    each commit the modules in the order they were configured. Only commits
    reachable from the remote-tracking refs of the repository's remote are
    considered.
    """

    def __init__(
        self,
        repository: Repository,
        storage_provider: GitStorageProvider,
        error_handler: ErrorHandler,
        config: SyncerConfig,
        *,
        logger: Optional[SyncLogger] = None,
    ):
        """
        Initialize syncer.

        Args:
            repository: Repository to read history from.
            storage_provider: Provider of module snapshots.
            error_handler: Policy for recoverable defects.
            config: Modules and collaborators.
            logger: Optional logger (debug output only when verbose).
        """
        self.repository = repository
        self.storage_provider = storage_provider
        self.error_handler = error_handler
        self.config = config
        self.logger = logger or SyncLogger()
        self._identities: dict[tuple[str, str], ModuleIdentity] = {}

    def sync(self, sync_func: SyncFunc, *, cancel_event: Optional[threading.Event] = None) -> None:
        """
        Sync all configured modules.

        For every commit that carries a valid, buildable module and is not
        synced yet, sync_func is called with a ModuleCommit. The bucket of
        that ModuleCommit is only readable during the call.

        Args:
            sync_func: Sink for module commits. Any exception it raises aborts
                the sync and is propagated unchanged.
            cancel_event: Checked before each commit and module; when set the
                sync stops with SyncCancelledError.

        Raises:
            SyncError: If the sync is aborted.
            GitError: If reading the repository fails.
        """
        if not self.config.modules:
            self.logger.debug("no modules configured")
            return

        branches = select_branches(self.repository, all_branches=self.config.all_branches, logger=self.logger)
        self._check_default_branches()
        for branch in branches:
            self._sync_branch(branch, sync_func, cancel_event)

    def _check_default_branches(self) -> None:
        getter = self.config.default_branch_getter
        if getter is None:
            return
        local_default = self.repository.default_branch()
        head = self.repository.branch_head(local_default)
        for module in self.config.modules:
            identity = self._remote_identity(module, local_default, head)
            remote_default = getter(identity)
            if remote_default is ModuleLookup.DOES_NOT_EXIST:
                self.logger.debug(f"module {identity} does not exist yet, skipping default branch check")
                continue
            if remote_default != local_default:
                raise DefaultBranchMismatchError(identity, remote_default, local_default)

    def _sync_branch(self, branch: str, sync_func: SyncFunc, cancel_event: Optional[threading.Event]) -> None:
        head = self.repository.branch_head(branch)
        if head is None:
            self.logger.debug(f"branch {branch} has no remote-tracking ref, skipping")
            return

        plans = [self._plan(module, branch, head) for module in self.config.modules]
        sync_points = [plan.sync_point for plan in plans if plan.sync_point is not None]
        history = walk_first_parent(
            self.repository,
            head,
            boundaries=sync_points,
            to_root=len(sync_points) < len(plans),
        )
        positions = {commit.hash: index for index, commit in enumerate(history)}

        for plan in plans:
            self._resume(plan, branch, head, history, positions)

        first = min(plan.start for plan in plans)
        self.logger.debug(f"branch {branch}: {len(history) - first} commit(s) to visit")
        for index in range(first, len(history)):
            commit = history[index]
            for plan in plans:
                if cancel_event is not None and cancel_event.is_set():
                    raise SyncCancelledError(f"sync cancelled at {commit.hash} on branch {branch}")
                if index < plan.start:
                    continue
                if commit.hash in plan.synced:
                    self.logger.debug(f"{plan.module} at {commit.short_hash} already synced, skipping")
                    continue
                self._sync_module_commit(plan.module, commit, branch, sync_func)

    def _plan(self, module: Module, branch: str, head: str) -> _ModulePlan:
        identity = None
        sync_point = None
        if self.config.sync_point_resolver is not None or self.config.synced_commit_checker is not None:
            identity = self._remote_identity(module, branch, head)
        if self.config.sync_point_resolver is not None:
            sync_point = self.config.sync_point_resolver(identity, branch)
            self.logger.debug(f"{module} on {branch}: sync point {sync_point or 'none'}")
        return _ModulePlan(module=module, identity=identity, sync_point=sync_point)

    def _resume(
        self,
        plan: _ModulePlan,
        branch: str,
        head: str,
        history: list[Commit],
        positions: dict[str, int],
    ) -> None:
        if plan.sync_point is not None:
            position = positions.get(plan.sync_point)
            if position is not None:
                plan.start = position + 1
            elif self.repository.has_object(plan.sync_point) and self.repository.is_ancestor(plan.sync_point, head):
                # Merged in through a second parent; the checker skips what the merge brought in.
                plan.start = self._merged_start(plan.sync_point, history)
                self.logger.debug(f"{plan.module} on {branch}: sync point was merged in, resuming at {plan.start}")
            else:
                err: Exception
                if self.repository.has_object(plan.sync_point):
                    err = SyncPointNotReachableError(plan.sync_point, branch)
                else:
                    err = ObjectNotFoundError(plan.sync_point)
                self.error_handler.invalid_sync_point(plan.module, branch, plan.sync_point, err)
                self.logger.debug(f"{plan.module} on {branch}: resuming from the root")
                plan.start = 0

        checker = self.config.synced_commit_checker
        candidates = {commit.hash for commit in history[plan.start :]}
        if checker is None or not candidates:
            return
        synced = set(checker(plan.identity, set(candidates)))
        unexpected = synced - candidates
        if unexpected:
            raise SyncError(f"received unexpected synced hashes {sorted(unexpected)} for module {plan.module}")
        plan.synced = synced

    def _merged_start(self, sync_point: str, history: list[Commit]) -> int:
        """Index after the newest first-parent commit the sync point descends from."""
        for index in range(len(history) - 1, -1, -1):
            if self.repository.is_ancestor(history[index].hash, sync_point):
                return index + 1
        return 0

    def _sync_module_commit(self, module: Module, commit: Commit, branch: str, sync_func: SyncFunc) -> None:
        with self.storage_provider.snapshot(commit.hash, module.dir) as bucket:
            try:
                module_config = parse_module_config(bucket)
            except ModuleConfigError as e:
                self.error_handler.invalid_module_config(module, commit, e)
                return

            identity = module.identity_override or module_config.identity
            if identity is None:
                self.error_handler.invalid_module_config(
                    module,
                    commit,
                    ModuleConfigError("module has no name and no identity override is configured"),
                )
                return

            try:
                build_module(bucket, module_config)
            except BuildError as e:
                self.error_handler.build_failure(module, commit, e)
                return

            module_commit = ModuleCommit(
                identity=identity,
                bucket=bucket,
                commit=commit,
                branch=branch,
                tags=tuple(self.repository.tags_for(commit.hash)),
            )
            self.logger.debug(f"syncing {module} at {commit.short_hash} on {branch}")
            sync_func(module_commit)

    def _remote_identity(self, module: Module, branch: str, head: Optional[str]) -> ModuleIdentity:
        """The identity a module is resumed and checked under on a branch."""
        if module.identity_override is not None:
            return module.identity_override
        if head is None:
            raise InvalidModuleError(f"module {module} has no identity override and branch {branch} has no head")
        key = (str(module), head)
        cached = self._identities.get(key)
        if cached is not None:
            return cached
        with self.storage_provider.snapshot(head, module.dir) as bucket:
            try:
                identity = parse_module_config(bucket).identity
            except ModuleConfigError as e:
                raise InvalidModuleError(
                    f"cannot determine the identity of module {module} at the head of {branch}: {e}"
                ) from e
        if identity is None:
            raise InvalidModuleError(f"module {module} declares no name at the head of {branch}")
        self._identities[key] = identity
        return identity
