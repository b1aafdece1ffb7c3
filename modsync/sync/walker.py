# MODSYNC Commit Walker
# Linear first-parent history of a branch

from collections.abc import Collection

from modsync.git.repository import Commit, Repository


def walk_first_parent(
    repository: Repository,
    head: str,
    *,
    boundaries: Collection[str] = (),
    to_root: bool = True,
) -> list[Commit]:
    """
    Walk the history of a branch head along first parents.

    Merge commits are part of the history; the commits they merge in from
    other parents are not. The walk stops at the root, or, when to_root is
    False, as soon as every boundary has been visited. Boundary commits
    themselves are included.

    Args:
        repository: Repository to read commits from.
        head: Commit hash the branch points at.
        boundaries: Commits the walk may stop at.
        to_root: Walk to the root even when all boundaries were found.

    Returns:
        Commits oldest first, so every commit comes after its first parent.
    """
    remaining = set(boundaries)
    stop_early = not to_root and bool(remaining)
    history: list[Commit] = []
    current = head
    while current is not None:
        commit = repository.read_commit(current)
        history.append(commit)
        remaining.discard(commit.hash)
        if stop_early and not remaining:
            break
        current = commit.parents[0] if commit.parents else None
    history.reverse()
    return history
