# MODSYNC Branch Selection
# Picks the remote branches to sync and the order to sync them in

from typing import Optional

from modsync.git.repository import Repository
from modsync.logger import SyncLogger
from modsync.sync.errors import SyncError


def select_branches(
    repository: Repository,
    *,
    all_branches: bool = False,
    logger: Optional[SyncLogger] = None,
) -> list[str]:
    """
    Select the branches to sync.

    Only branches with a remote-tracking ref on the repository's remote are
    eligible. In single-branch mode this is the checked out branch, if the
    remote has it. Otherwise all remote branches are returned with the
    remote's default branch first and the rest in lexicographic order.

    Args:
        repository: Repository to read refs from.
        all_branches: Select every remote branch.
        logger: Optional logger for skipped branches.

    Returns:
        Branch names, without the remote prefix, in sync order.

    Raises:
        SyncError: If HEAD is detached in single-branch mode.
        GitError: If the remote's default branch is unknown in all-branches mode.
    """
    if not all_branches:
        current = repository.current_branch()
        if current is None:
            raise SyncError("HEAD is detached; check out a branch or sync all branches")
        if repository.branch_head(current) is None:
            if logger:
                logger.info(f"Branch {current} is not pushed to {repository.remote}, nothing to sync")
            return []
        return [current]

    default = repository.default_branch()
    remote_branches = repository.remote_branches()
    if default not in remote_branches:
        raise SyncError(f"default branch {default} has no remote-tracking ref on {repository.remote}")
    return [default] + sorted(b for b in remote_branches if b != default)
