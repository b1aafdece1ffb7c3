# MODSYNC Local Registry
# File-backed module registry that records synced commits and sync points

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Optional, Union

import yaml

from modsync.git.repository import Ident
from modsync.module.identity import ModuleIdentity
from modsync.sync.options import (
    ModuleDefaultBranchGetter,
    ModuleLookup,
    SyncedGitCommitChecker,
    SyncPointResolver,
)
from modsync.sync.syncer import ModuleCommit
from modsync.utils.hashing import content_hash
from modsync.utils.paths import atomic_write

REPOSITORY_FILE = "repository.yaml"
SYNC_POINTS_FILE = "sync_points.yaml"
COMMITS_FILE = "commits.yaml"
BLOBS_DIR = "blobs"


class RegistryError(Exception):
    """Exception raised for registry operation errors."""


class RepositoryNotFoundError(RegistryError):
    """Raised when a module repository does not exist in the registry."""

    def __init__(self, identity: ModuleIdentity):
        self.identity = identity
        super().__init__(f"repository {identity} does not exist")


class RepositoryExistsError(RegistryError):
    """Raised when creating a module repository that already exists."""

    def __init__(self, identity: ModuleIdentity):
        self.identity = identity
        super().__init__(f"expected repository {identity} to be missing but found it to already exist")


class Visibility(str, Enum):
    """Visibility of a module repository."""

    PUBLIC = "public"
    PRIVATE = "private"


@dataclass
class RepositoryRecord:
    """A module repository in the registry."""

    identity: ModuleIdentity
    visibility: Visibility
    default_branch: str
    created: str  # ISO format datetime

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "identity": str(self.identity),
            "visibility": self.visibility.value,
            "default_branch": self.default_branch,
            "created": self.created,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RepositoryRecord:
        """Create from dictionary."""
        return cls(
            identity=ModuleIdentity.parse(data["identity"]),
            visibility=Visibility(data.get("visibility", Visibility.PRIVATE.value)),
            default_branch=data.get("default_branch", "main"),
            created=data.get("created", ""),
        )


@dataclass(frozen=True)
class GitSyncPoint:
    """The registry commit a git commit was synced to."""

    identity: ModuleIdentity
    branch: str
    git_commit_hash: str
    registry_commit_name: str


class LocalRegistry:
    """
    Module registry stored in a directory.

    Layout, per module identity under <root>/<remote>/<owner>/<repository>/:
    repository.yaml (visibility and default branch), sync_points.yaml
    (branch to last synced git hash) and commits.yaml (git hash to registry
    commit). File contents are stored once under <root>/blobs/, addressed by
    their sha256 digest.
    """

    def __init__(self, root: Path):
        """
        Initialize registry.

        Args:
            root: Registry directory. Created on first write.
        """
        self.root = root

    def _repository_dir(self, identity: ModuleIdentity) -> Path:
        return self.root / identity.remote / identity.owner / identity.repository

    @staticmethod
    def _load(path: Path) -> dict[str, Any]:
        if not path.exists():
            return {}
        try:
            with open(path, encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise RegistryError(f"corrupt registry file {path}: {e}") from e
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise RegistryError(f"corrupt registry file {path}: expected a mapping")
        return data

    @staticmethod
    def _save(path: Path, data: dict[str, Any]) -> None:
        atomic_write(path, yaml.dump(data, default_flow_style=False, sort_keys=False, allow_unicode=True))

    def exists(self, identity: ModuleIdentity) -> bool:
        """Check if a module repository exists."""
        return (self._repository_dir(identity) / REPOSITORY_FILE).exists()

    def get_repository(self, identity: ModuleIdentity) -> RepositoryRecord:
        """
        Get a module repository.

        Raises:
            RepositoryNotFoundError: If it does not exist.
        """
        path = self._repository_dir(identity) / REPOSITORY_FILE
        if not path.exists():
            raise RepositoryNotFoundError(identity)
        return RepositoryRecord.from_dict(self._load(path))

    def create_repository(
        self,
        identity: ModuleIdentity,
        visibility: Visibility,
        *,
        default_branch: str = "main",
    ) -> RepositoryRecord:
        """
        Create a module repository.

        Raises:
            RepositoryExistsError: If it already exists.
        """
        if self.exists(identity):
            raise RepositoryExistsError(identity)
        record = RepositoryRecord(
            identity=identity,
            visibility=visibility,
            default_branch=default_branch,
            created=datetime.now(timezone.utc).isoformat(),
        )
        self._save(self._repository_dir(identity) / REPOSITORY_FILE, record.to_dict())
        return record

    def default_branch(self, identity: ModuleIdentity) -> str:
        """Get the default branch of a module repository."""
        return self.get_repository(identity).default_branch

    def get_sync_point(self, identity: ModuleIdentity, branch: str) -> Optional[str]:
        """
        Get the last synced git hash of a module on a branch.

        Returns:
            Git commit hash, or None if nothing was synced yet.
        """
        if not self.exists(identity):
            return None
        sync_points = self._load(self._repository_dir(identity) / SYNC_POINTS_FILE)
        return sync_points.get(branch)

    def synced_git_commits(self, identity: ModuleIdentity, hashes: set[str]) -> set[str]:
        """Get the subset of git hashes already synced for a module, on any branch."""
        if not self.exists(identity):
            return set()
        commits = self._load(self._repository_dir(identity) / COMMITS_FILE)
        return {h for h in hashes if h in commits}

    def read_blob(self, digest: str) -> bytes:
        """Read a stored file by content digest."""
        path = self.root / BLOBS_DIR / digest[:2] / digest
        if not path.exists():
            raise RegistryError(f"blob {digest} not found")
        return path.read_bytes()

    def push(self, module_commit: ModuleCommit) -> GitSyncPoint:
        """
        Record a module commit and move the branch's sync point to it.

        Pushing a git commit that is already recorded adds the branch and
        tags to the existing registry commit.

        Raises:
            RepositoryNotFoundError: If the module repository does not exist.
        """
        identity = module_commit.identity
        if not self.exists(identity):
            raise RepositoryNotFoundError(identity)

        bucket = module_commit.bucket
        for info in bucket.walk():
            blob_path = self.root / BLOBS_DIR / info.digest[:2] / info.digest
            if not blob_path.exists():
                atomic_write(blob_path, bucket.get(info.path))

        repo_dir = self._repository_dir(identity)
        commits = self._load(repo_dir / COMMITS_FILE)
        git_hash = module_commit.commit.hash
        record = commits.get(git_hash)
        if record is None:
            record = {
                "name": content_hash(f"{identity}:{git_hash}:{bucket.digest}")[:32],
                "digest": bucket.digest,
                "branches": [],
                "tags": [],
                "author": _ident_to_dict(module_commit.commit.author),
                "committer": _ident_to_dict(module_commit.commit.committer),
                "manifest": bucket.manifest(),
            }
        if module_commit.branch not in record["branches"]:
            record["branches"].append(module_commit.branch)
        record["tags"] = sorted(set(record["tags"]) | set(module_commit.tags))
        commits[git_hash] = record
        self._save(repo_dir / COMMITS_FILE, commits)

        sync_points = self._load(repo_dir / SYNC_POINTS_FILE)
        sync_points[module_commit.branch] = git_hash
        self._save(repo_dir / SYNC_POINTS_FILE, sync_points)

        return GitSyncPoint(
            identity=identity,
            branch=module_commit.branch,
            git_commit_hash=git_hash,
            registry_commit_name=record["name"],
        )


def _ident_to_dict(ident: Ident) -> dict[str, str]:
    return {"name": ident.name, "email": ident.email, "time": ident.timestamp.isoformat()}


def push_or_create(
    registry: LocalRegistry,
    module_commit: ModuleCommit,
    *,
    create_visibility: Optional[Visibility] = None,
    default_branch: str = "main",
) -> GitSyncPoint:
    """
    Push a module commit, creating its repository first if needed.

    The repository is only created when create_visibility is set and the
    push fails because the repository does not exist; the push is then
    retried once.

    Raises:
        RegistryError: If the push fails.
    """
    try:
        return registry.push(module_commit)
    except RepositoryNotFoundError:
        if create_visibility is None:
            raise
    registry.create_repository(module_commit.identity, create_visibility, default_branch=default_branch)
    return registry.push(module_commit)


def sync_point_resolver(registry: LocalRegistry) -> SyncPointResolver:
    """Adapt a registry to the Syncer's sync point resolver."""

    def resolve(identity: ModuleIdentity, branch: str) -> Optional[str]:
        return registry.get_sync_point(identity, branch)

    return resolve


def synced_git_commit_checker(registry: LocalRegistry) -> SyncedGitCommitChecker:
    """Adapt a registry to the Syncer's synced commit checker."""

    def check(identity: ModuleIdentity, hashes: set[str]) -> set[str]:
        return registry.synced_git_commits(identity, hashes)

    return check


def module_default_branch_getter(registry: LocalRegistry) -> ModuleDefaultBranchGetter:
    """Adapt a registry to the Syncer's default branch getter."""

    def get(identity: ModuleIdentity) -> Union[str, ModuleLookup]:
        try:
            return registry.default_branch(identity)
        except RepositoryNotFoundError:
            return ModuleLookup.DOES_NOT_EXIST

    return get
