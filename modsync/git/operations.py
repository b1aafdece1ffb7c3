# MODSYNC Git Operations
# Git command execution for read-only repository access

import re
import subprocess
from pathlib import Path
from typing import Optional

HASH_PATTERN = re.compile(r"^(?:[0-9a-f]{40}|[0-9a-f]{64})$")


class GitError(Exception):
    """Exception raised for git operation errors."""

    def __init__(self, message: str, returncode: int = 1, stderr: str = ""):
        self.message = message
        self.returncode = returncode
        self.stderr = stderr
        super().__init__(message)


class ObjectNotFoundError(GitError):
    """Raised when a hash does not name an object in the repository."""

    def __init__(self, object_hash: str):
        self.object_hash = object_hash
        super().__init__(f"object not found: {object_hash}")


def is_valid_hash(value: str) -> bool:
    """Check whether value is a full lowercase SHA-1 or SHA-256 hex hash."""
    return bool(HASH_PATTERN.match(value))


def _run_git(
    *args: str,
    cwd: Optional[Path] = None,
    check: bool = True,
    text: bool = True,
) -> subprocess.CompletedProcess:
    """
    Run a git command.

    Args:
        *args: Git command arguments.
        cwd: Working directory.
        check: Whether to raise on non-zero exit.
        text: Decode stdout/stderr as text. Use False for blob contents.

    Returns:
        CompletedProcess with result.

    Raises:
        GitError: If command fails and check is True.
    """
    cmd = ["git", *args]
    try:
        result = subprocess.run(
            cmd,
            cwd=cwd,
            check=False,
            capture_output=True,
            text=text,
        )
    except FileNotFoundError:
        raise GitError("git command not found. Is git installed?")
    if check and result.returncode != 0:
        stderr = result.stderr
        if isinstance(stderr, bytes):
            stderr = stderr.decode("utf-8", errors="replace")
        raise GitError(
            f"Git command failed: {' '.join(cmd)}",
            returncode=result.returncode,
            stderr=stderr.strip() if stderr else "",
        )
    return result


def get_repo_root(path: Optional[Path] = None) -> Optional[Path]:
    """
    Get the root directory of a git repository.

    Args:
        path: Starting path (defaults to current directory).

    Returns:
        Path to repo root, or None if not in a repo.
    """
    try:
        result = _run_git("rev-parse", "--show-toplevel", cwd=path)
        return Path(result.stdout.strip())
    except GitError:
        return None


def is_git_repo(path: Optional[Path] = None) -> bool:
    """Check if path is within a git repository."""
    return get_repo_root(path) is not None
