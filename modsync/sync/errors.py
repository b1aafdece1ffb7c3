# MODSYNC Sync Errors
# Exceptions raised by the Syncer engine

from typing import Optional


class SyncError(Exception):
    """Base class for errors that abort a sync."""


class InvalidModuleError(SyncError):
    """Raised when a module cannot be configured for sync."""


class DuplicateModuleError(InvalidModuleError):
    """Raised when the same module is registered twice."""

    def __init__(self, module: object):
        self.module = module
        super().__init__(f"duplicate module {module}")


class DefaultBranchMismatchError(SyncError):
    """Raised when the registry and the repository disagree on the default branch."""

    def __init__(self, module: object, remote_branch: str, local_branch: str):
        self.module = module
        self.remote_branch = remote_branch
        self.local_branch = local_branch
        super().__init__(
            f"remote module {module} has default branch {remote_branch!r}, which does not match "
            f"the git repository's default branch {local_branch!r}, aborting sync"
        )


class SyncPointError(SyncError):
    """Raised when a recorded sync point cannot be used to resume."""

    def __init__(self, message: str, sync_point: Optional[str] = None):
        self.sync_point = sync_point
        super().__init__(message)


class SyncPointNotReachableError(SyncPointError):
    """Raised when a sync point exists but is not in the branch's history."""

    def __init__(self, sync_point: str, branch: str):
        self.branch = branch
        super().__init__(f"sync point {sync_point} is not in the history of branch {branch}", sync_point)


class SyncCancelledError(SyncError):
    """Raised when a sync is cancelled before it completes."""
