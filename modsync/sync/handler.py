# MODSYNC Error Handler
# Policy deciding whether a defect found during sync aborts it

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from modsync.git.operations import ObjectNotFoundError
from modsync.git.repository import Commit
from modsync.logger import SyncLogger
from modsync.sync.errors import SyncPointError

if TYPE_CHECKING:
    from modsync.sync.module import Module


class ErrorHandler:
    """
    Handles defects reported by the Syncer.

    Each hook returns normally to let the sync continue, or raises to abort
    it in a partially synced state. The base class aborts on everything.
    """

    def invalid_module_config(self, module: Module, commit: Commit, err: Exception) -> None:
        """Called for a module whose declaration is missing or malformed at a commit."""
        raise err

    def build_failure(self, module: Module, commit: Commit, err: Exception) -> None:
        """Called for a module that fails to build at a commit."""
        raise err

    def invalid_sync_point(self, module: Module, branch: str, sync_point: str, err: Exception) -> None:
        """
        Called when a module's sync point on a branch is unusable.

        Typically the commit cannot be found anymore, or it is no longer part
        of the branch's history. Returning resumes the branch from its root.
        """
        raise err


class LoggingErrorHandler(ErrorHandler):
    """
    Default policy: warn and carry on for invalid or broken modules, abort
    on invalid sync points.

    Because of resumption, a commit is normally visited only once, so each
    warning is shown once per commit.
    """

    def __init__(self, logger: Optional[SyncLogger] = None):
        self.logger = logger or SyncLogger()

    def invalid_module_config(self, module: Module, commit: Commit, err: Exception) -> None:
        self.logger.warning("invalid module config", commit=commit.hash, module=module, error=err)

    def build_failure(self, module: Module, commit: Commit, err: Exception) -> None:
        self.logger.warning("module build failure", commit=commit.hash, module=module, error=err)

    def invalid_sync_point(self, module: Module, branch: str, sync_point: str, err: Exception) -> None:
        # Usually a rebase dropped the last synced commit.
        if isinstance(err, ObjectNotFoundError):
            raise SyncPointError(
                f"last synced commit {sync_point} was not found for module {module}; did you rebase?",
                sync_point,
            ) from err
        raise err
