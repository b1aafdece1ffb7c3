# MODSYNC Storage Module
# Content-addressable snapshots of repository subtrees

from modsync.storage.bucket import BucketClosedError, ObjectInfo, ReadBucket
from modsync.storage.provider import GitStorageProvider

__all__ = [
    "BucketClosedError",
    "ObjectInfo",
    "ReadBucket",
    "GitStorageProvider",
]
