# MODSYNC Git Repository
# Read-only view of a repository: remote branches, commits and tags

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Optional

from modsync.git.operations import GitError, ObjectNotFoundError, _run_git, get_repo_root, is_valid_hash

DEFAULT_REMOTE = "origin"

# Fields of a commit, NUL separated; the message comes last since it may contain anything.
_COMMIT_FORMAT = "%H%x00%P%x00%an%x00%ae%x00%aI%x00%cn%x00%ce%x00%cI%x00%B"


@dataclass(frozen=True)
class Ident:
    """Author or committer identity of a commit."""

    name: str
    email: str
    timestamp: datetime


@dataclass(frozen=True)
class Commit:
    """A commit as read from the repository. Never mutated by modsync."""

    hash: str
    parents: tuple[str, ...]
    author: Ident
    committer: Ident
    message: str = ""

    @property
    def is_root(self) -> bool:
        """Check if the commit has no parents."""
        return not self.parents

    @property
    def short_hash(self) -> str:
        return self.hash[:12]


@dataclass
class Repository:
    """
    Git repository accessed through the git command line.

    Only remote-tracking refs of a single remote are exposed as branches.
    Commits are cached per instance since they are immutable.
    """

    path: Path
    remote: str = DEFAULT_REMOTE
    _commits: dict[str, Commit] = field(default_factory=dict, init=False, repr=False)
    _tags: Optional[dict[str, set[str]]] = field(default=None, init=False, repr=False)

    @classmethod
    def open(cls, path: Optional[Path] = None, *, remote: str = DEFAULT_REMOTE) -> "Repository":
        """
        Open the repository containing path.

        Args:
            path: Any path inside the repository (defaults to current directory).
            remote: Name of the remote whose branches are synced.

        Raises:
            GitError: If path is not inside a git repository.
        """
        root = get_repo_root(path)
        if root is None:
            raise GitError(f"Not a git repository: {path or Path.cwd()}")
        return cls(path=root, remote=remote)

    def git(self, *args: str, check: bool = True, text: bool = True):
        return _run_git(*args, cwd=self.path, check=check, text=text)

    def current_branch(self) -> Optional[str]:
        """
        Get the checked out branch name.

        Returns:
            Branch name or None if HEAD is detached.
        """
        result = self.git("symbolic-ref", "--quiet", "--short", "HEAD", check=False)
        if result.returncode != 0:
            return None
        return result.stdout.strip() or None

    def default_branch(self) -> str:
        """
        Get the remote's default branch, read from refs/remotes/<remote>/HEAD.

        Raises:
            GitError: If the remote HEAD is not set.
        """
        ref = f"refs/remotes/{self.remote}/HEAD"
        result = self.git("symbolic-ref", "--quiet", ref, check=False)
        target = result.stdout.strip()
        prefix = f"refs/remotes/{self.remote}/"
        if result.returncode != 0 or not target.startswith(prefix):
            raise GitError(
                f"Default branch of remote '{self.remote}' is unknown. "
                f"Run 'git remote set-head {self.remote} --auto' to set it.",
                returncode=result.returncode,
            )
        return target[len(prefix) :]

    def remote_branches(self) -> list[str]:
        """Get names of all remote-tracking branches of the remote, sorted."""
        prefix = f"refs/remotes/{self.remote}/"
        result = self.git("for-each-ref", "--format=%(refname)", prefix)
        branches = []
        for line in result.stdout.splitlines():
            name = line.strip()[len(prefix) :]
            if name and name != "HEAD":
                branches.append(name)
        return sorted(branches)

    def branch_head(self, branch: str) -> Optional[str]:
        """
        Get the commit hash a remote-tracking branch points at.

        Returns:
            Commit hash, or None if the remote has no such branch.
        """
        ref = f"refs/remotes/{self.remote}/{branch}^{{commit}}"
        result = self.git("rev-parse", "--verify", "--quiet", ref, check=False)
        if result.returncode != 0:
            return None
        return result.stdout.strip() or None

    def has_object(self, object_hash: str) -> bool:
        """Check if a hash names a commit in the object store."""
        if object_hash in self._commits:
            return True
        if not is_valid_hash(object_hash):
            return False
        result = self.git("cat-file", "-t", object_hash, check=False)
        return result.returncode == 0 and result.stdout.strip() == "commit"

    def is_ancestor(self, ancestor: str, descendant: str) -> bool:
        """
        Check if ancestor is reachable from descendant through any parents.

        A commit is its own ancestor.

        Raises:
            GitError: If either hash does not name a commit.
        """
        result = self.git("merge-base", "--is-ancestor", ancestor, descendant, check=False)
        if result.returncode in (0, 1):
            return result.returncode == 0
        raise GitError(
            f"Git command failed: git merge-base --is-ancestor {ancestor} {descendant}",
            returncode=result.returncode,
            stderr=result.stderr.strip(),
        )

    def read_commit(self, object_hash: str) -> Commit:
        """
        Read a commit.

        Raises:
            ObjectNotFoundError: If the hash does not name a commit.
        """
        cached = self._commits.get(object_hash)
        if cached is not None:
            return cached
        if not self.has_object(object_hash):
            raise ObjectNotFoundError(object_hash)

        result = self.git("show", "-s", f"--format={_COMMIT_FORMAT}", object_hash)
        commit = parse_commit(result.stdout)
        self._commits[commit.hash] = commit
        return commit

    def tags_for(self, object_hash: str) -> list[str]:
        """Get the names of all tags pointing at a commit, sorted and unique."""
        if self._tags is None:
            self._tags = self._load_tags()
        return sorted(self._tags.get(object_hash, ()))

    def _load_tags(self) -> dict[str, set[str]]:
        # Annotated tags are peeled to the commit they point at.
        result = self.git(
            "for-each-ref",
            "--format=%(objectname)%00%(*objectname)%00%(refname:strip=2)",
            "refs/tags",
        )
        tags: dict[str, set[str]] = {}
        for line in result.stdout.splitlines():
            if not line:
                continue
            object_name, peeled, name = line.split("\0", 2)
            tags.setdefault(peeled or object_name, set()).add(name)
        return tags


def parse_commit(output: str) -> Commit:
    """
    Parse the output of git show with the modsync commit format.

    Raises:
        GitError: If the output is not in the expected format.
    """
    parts = output.split("\0", 8)
    if len(parts) != 9:
        raise GitError(f"Unexpected commit format: {output[:80]!r}")
    commit_hash, parents, a_name, a_email, a_time, c_name, c_email, c_time, message = parts
    return Commit(
        hash=commit_hash.strip(),
        parents=tuple(parents.split()),
        author=Ident(name=a_name, email=a_email, timestamp=datetime.fromisoformat(a_time.strip())),
        committer=Ident(name=c_name, email=c_email, timestamp=datetime.fromisoformat(c_time.strip())),
        message=message.rstrip("\n"),
    )
