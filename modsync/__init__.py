"""MODSYNC - Module history sync for Git repositories.

Replays the commit history of modules rooted in a Git repository into a
module registry, resuming from the last synced commit on every run.
"""

__version__ = "1.0.0"
__author__ = "Equitania Software GmbH"
__email__ = "info@equitania.de"

__all__ = [
    "__version__",
    "Module",
    "ModuleCommit",
    "ModuleIdentity",
    "Syncer",
    "SyncerConfig",
    "SyncerConfigBuilder",
    "ErrorHandler",
    "LoggingErrorHandler",
    "Repository",
    "GitStorageProvider",
    "LocalRegistry",
]


def __getattr__(name: str):
    """Lazy import to avoid loading dependencies during setup."""
    if name in ("Module", "ModuleCommit", "Syncer", "SyncerConfig", "SyncerConfigBuilder"):
        from modsync import sync

        return getattr(sync, name)
    if name in ("ErrorHandler", "LoggingErrorHandler"):
        from modsync.sync import handler

        return getattr(handler, name)
    if name == "ModuleIdentity":
        from modsync.module.identity import ModuleIdentity

        return ModuleIdentity
    if name == "Repository":
        from modsync.git.repository import Repository

        return Repository
    if name == "GitStorageProvider":
        from modsync.storage.provider import GitStorageProvider

        return GitStorageProvider
    if name == "LocalRegistry":
        from modsync.registry.local import LocalRegistry

        return LocalRegistry
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
