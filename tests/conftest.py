# MODSYNC Test Fixtures
# Pytest fixtures for MODSYNC tests

import hashlib
import io
import os
import shutil
import subprocess
import tempfile
from collections.abc import Generator, Iterator
from contextlib import contextmanager
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Optional

import pytest
from rich.console import Console

from modsync.git.operations import GitError, ObjectNotFoundError
from modsync.git.repository import Commit, Ident
from modsync.logger import SyncLogger
from modsync.storage.bucket import ReadBucket

PET_PROTO = 'syntax = "proto3";\n\npackage pet.v1;\n\nmessage Pet {\n  string name = 1;\n}\n'


class FakeRepository:
    """In-memory repository with remote-tracking branches, commits and tags."""

    def __init__(self, remote: str = "origin", current: Optional[str] = "main", default: Optional[str] = "main"):
        self.remote = remote
        self.current = current
        self.default = default
        self.commits: dict[str, Commit] = {}
        self.trees: dict[str, dict[str, bytes]] = {}
        self.refs: dict[str, str] = {}
        self.tags: dict[str, list[str]] = {}

    def add_commit(
        self,
        name: str,
        parents: tuple[str, ...] = (),
        files: Optional[dict[str, bytes]] = None,
        branch: Optional[str] = None,
    ) -> str:
        """Add a commit named name; returns its hash."""
        commit_hash = hashlib.sha1(name.encode("utf-8")).hexdigest()
        when = datetime(2024, 1, 1, tzinfo=timezone.utc) + timedelta(minutes=len(self.commits))
        ident = Ident(name="Dev", email="dev@example.com", timestamp=when)
        self.commits[commit_hash] = Commit(
            hash=commit_hash,
            parents=tuple(parents),
            author=ident,
            committer=ident,
            message=name,
        )
        self.trees[commit_hash] = dict(files or {})
        if branch is not None:
            self.refs[branch] = commit_hash
        return commit_hash

    def add_history(
        self,
        names: list[str],
        files: dict[str, bytes],
        branch: str = "main",
        parent: Optional[str] = None,
    ) -> list[str]:
        """Add a linear chain of commits sharing the same tree."""
        hashes = []
        for name in names:
            parent = self.add_commit(name, (parent,) if parent else (), files, branch=branch)
            hashes.append(parent)
        return hashes

    def current_branch(self) -> Optional[str]:
        return self.current

    def default_branch(self) -> str:
        if self.default is None:
            raise GitError(f"Default branch of remote '{self.remote}' is unknown.")
        return self.default

    def remote_branches(self) -> list[str]:
        return sorted(self.refs)

    def branch_head(self, branch: str) -> Optional[str]:
        return self.refs.get(branch)

    def has_object(self, object_hash: str) -> bool:
        return object_hash in self.commits

    def is_ancestor(self, ancestor: str, descendant: str) -> bool:
        pending = [descendant]
        seen = set()
        while pending:
            current = pending.pop()
            if current == ancestor:
                return True
            if current in seen:
                continue
            seen.add(current)
            pending.extend(self.read_commit(current).parents)
        return False

    def read_commit(self, object_hash: str) -> Commit:
        if object_hash not in self.commits:
            raise ObjectNotFoundError(object_hash)
        return self.commits[object_hash]

    def tags_for(self, object_hash: str) -> list[str]:
        return sorted(set(self.tags.get(object_hash, [])))


class FakeStorageProvider:
    """Storage provider serving the trees of a FakeRepository."""

    def __init__(self, repository: FakeRepository):
        self.repository = repository
        self.opened: list[ReadBucket] = []

    @contextmanager
    def snapshot(self, commit_hash: str, subdir: str) -> Iterator[ReadBucket]:
        prefix = "" if subdir == "." else subdir + "/"
        tree = self.repository.trees[commit_hash]
        bucket = ReadBucket({path[len(prefix) :]: data for path, data in tree.items() if path.startswith(prefix)})
        self.opened.append(bucket)
        try:
            yield bucket
        finally:
            bucket.close()


def make_module_files(
    directory: str = "proto",
    name: Optional[str] = "buf.build/acme/petapis",
    protos: Optional[dict[str, str]] = None,
    config: Optional[str] = None,
) -> dict[str, bytes]:
    """Files of a valid module under directory."""
    if config is None:
        config = "version: v1\n" + (f"name: {name}\n" if name else "")
    prefix = "" if directory == "." else directory + "/"
    files = {f"{prefix}buf.yaml": config.encode("utf-8")}
    for path, source in (protos or {"pet/v1/pet.proto": PET_PROTO}).items():
        files[f"{prefix}{path}"] = source.encode("utf-8")
    return files


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def fake_repo() -> FakeRepository:
    """Empty in-memory repository checked out on main."""
    return FakeRepository()


@pytest.fixture
def storage(fake_repo: FakeRepository) -> FakeStorageProvider:
    """Storage provider for fake_repo."""
    return FakeStorageProvider(fake_repo)


@pytest.fixture
def module_files():
    """Factory for the files of a module."""
    return make_module_files


@pytest.fixture
def logger() -> SyncLogger:
    """Verbose logger writing to a string buffer (logger.console.file)."""
    return SyncLogger(Console(file=io.StringIO(), width=400, color_system=None), verbose=True)


# Real git repositories

GIT_ENV = {
    "GIT_AUTHOR_NAME": "Dev",
    "GIT_AUTHOR_EMAIL": "dev@example.com",
    "GIT_COMMITTER_NAME": "Dev",
    "GIT_COMMITTER_EMAIL": "dev@example.com",
    "GIT_CONFIG_NOSYSTEM": "1",
}

requires_git = pytest.mark.skipif(shutil.which("git") is None, reason="git is not installed")


def run_git(cwd: Path, *args: str) -> str:
    """Run git in cwd with a fixed identity; returns stripped stdout."""
    env = {**os.environ, **GIT_ENV, "HOME": str(cwd.parent)}
    result = subprocess.run(["git", *args], cwd=cwd, env=env, check=True, capture_output=True, text=True)
    return result.stdout.strip()


class GitWorkspace:
    """A clone with a bare origin, for building history in tests."""

    def __init__(self, work: Path, origin: Path):
        self.work = work
        self.origin = origin

    def git(self, *args: str) -> str:
        return run_git(self.work, *args)

    def write(self, files: dict[str, bytes]) -> None:
        for path, data in files.items():
            target = self.work / path
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(data)

    def commit(self, message: str, files: Optional[dict[str, bytes]] = None) -> str:
        """Write files, commit everything and return the new hash."""
        if files:
            self.write(files)
        self.git("add", "-A")
        self.git("commit", "--allow-empty", "-q", "-m", message)
        return self.git("rev-parse", "HEAD")

    def push(self, *branches: str) -> None:
        self.git("push", "-q", "origin", *(branches or ("HEAD",)))
        self.git("fetch", "-q", "origin")

    def set_head(self) -> None:
        self.git("remote", "set-head", "origin", "--auto")


@pytest.fixture
def git_workspace(temp_dir: Path) -> GitWorkspace:
    """Work repository on main with a bare origin whose HEAD is main."""
    origin = temp_dir / "origin.git"
    work = temp_dir / "work"
    origin.mkdir()
    work.mkdir()
    run_git(origin, "init", "-q", "--bare", "-b", "main")
    run_git(work, "init", "-q", "-b", "main")
    run_git(work, "remote", "add", "origin", str(origin))
    return GitWorkspace(work, origin)
