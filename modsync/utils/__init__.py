# MODSYNC Utilities Module
# Helper functions for path handling and content hashing

from modsync.utils.hashing import content_hash, manifest_digest
from modsync.utils.paths import atomic_write, ensure_dir, is_within, normalize_path

__all__ = [
    # Paths
    "normalize_path",
    "is_within",
    "ensure_dir",
    "atomic_write",
    # Hashing
    "content_hash",
    "manifest_digest",
]
