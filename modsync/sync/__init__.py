# MODSYNC Sync Module
# Syncer engine and its configuration

from modsync.sync.branches import select_branches
from modsync.sync.errors import (
    DefaultBranchMismatchError,
    DuplicateModuleError,
    InvalidModuleError,
    SyncCancelledError,
    SyncError,
    SyncPointError,
    SyncPointNotReachableError,
)
from modsync.sync.handler import ErrorHandler, LoggingErrorHandler
from modsync.sync.module import Module
from modsync.sync.options import (
    ModuleDefaultBranchGetter,
    ModuleLookup,
    SyncedGitCommitChecker,
    SyncerConfig,
    SyncerConfigBuilder,
    SyncFunc,
    SyncPointResolver,
)
from modsync.sync.syncer import ModuleCommit, Syncer
from modsync.sync.walker import walk_first_parent

__all__ = [
    # Module
    "Module",
    "ModuleCommit",
    # Configuration
    "SyncerConfig",
    "SyncerConfigBuilder",
    "SyncFunc",
    "SyncPointResolver",
    "SyncedGitCommitChecker",
    "ModuleDefaultBranchGetter",
    "ModuleLookup",
    # Error handling
    "ErrorHandler",
    "LoggingErrorHandler",
    "SyncError",
    "InvalidModuleError",
    "DuplicateModuleError",
    "DefaultBranchMismatchError",
    "SyncPointError",
    "SyncPointNotReachableError",
    "SyncCancelledError",
    # Engine
    "Syncer",
    "select_branches",
    "walk_first_parent",
]
