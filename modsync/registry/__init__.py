# MODSYNC Registry Module
# File-backed module registry and its adapters to the Syncer collaborators

from modsync.registry.local import (
    GitSyncPoint,
    LocalRegistry,
    RegistryError,
    RepositoryExistsError,
    RepositoryNotFoundError,
    RepositoryRecord,
    Visibility,
    module_default_branch_getter,
    push_or_create,
    sync_point_resolver,
    synced_git_commit_checker,
)

__all__ = [
    "LocalRegistry",
    "RepositoryRecord",
    "GitSyncPoint",
    "Visibility",
    "RegistryError",
    "RepositoryNotFoundError",
    "RepositoryExistsError",
    "push_or_create",
    "sync_point_resolver",
    "synced_git_commit_checker",
    "module_default_branch_getter",
]
