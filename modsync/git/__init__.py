# MODSYNC Git Module
# Read-only repository access through the git command line

from modsync.git.operations import (
    GitError,
    ObjectNotFoundError,
    get_repo_root,
    is_git_repo,
    is_valid_hash,
)
from modsync.git.repository import DEFAULT_REMOTE, Commit, Ident, Repository

__all__ = [
    "GitError",
    "ObjectNotFoundError",
    "get_repo_root",
    "is_git_repo",
    "is_valid_hash",
    "DEFAULT_REMOTE",
    "Commit",
    "Ident",
    "Repository",
]
