# MODSYNC Storage Bucket
# Read-only, content-addressable snapshot of a directory tree

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass

from modsync.utils.hashing import content_hash, manifest_digest


class BucketClosedError(RuntimeError):
    """Raised when a released snapshot is read."""


@dataclass(frozen=True)
class ObjectInfo:
    """A file in a bucket, addressed by the sha256 digest of its content."""

    path: str
    digest: str
    size: int


class ReadBucket:
    """
    Read-only snapshot of files keyed by relative POSIX path.

    Every file is addressed by the digest of its content, and the bucket as
    a whole by the digest of its manifest. A bucket is released with close();
    reading a released bucket raises BucketClosedError.
    """

    def __init__(self, files: Mapping[str, bytes]):
        self._files: dict[str, bytes] = dict(files)
        self._infos = {
            path: ObjectInfo(path=path, digest=content_hash(data), size=len(data)) for path, data in self._files.items()
        }
        self.digest = manifest_digest((info.path, info.digest) for info in self._infos.values())
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        """Release the snapshot contents."""
        self._files.clear()
        self._infos.clear()
        self._closed = True

    def __enter__(self) -> ReadBucket:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _check_open(self) -> None:
        if self._closed:
            raise BucketClosedError("bucket has been released")

    def __len__(self) -> int:
        self._check_open()
        return len(self._files)

    def __contains__(self, path: object) -> bool:
        self._check_open()
        return path in self._files

    def get(self, path: str) -> bytes:
        """
        Get the content of a file.

        Raises:
            FileNotFoundError: If the bucket has no such file.
        """
        self._check_open()
        try:
            return self._files[path]
        except KeyError:
            raise FileNotFoundError(path) from None

    def stat(self, path: str) -> ObjectInfo:
        """Get the object info of a file."""
        self._check_open()
        try:
            return self._infos[path]
        except KeyError:
            raise FileNotFoundError(path) from None

    def walk(self, prefix: str = "") -> Iterator[ObjectInfo]:
        """Iterate over files whose path starts with prefix, in path order."""
        self._check_open()
        for path in sorted(self._infos):
            if path.startswith(prefix):
                yield self._infos[path]

    def manifest(self) -> dict[str, str]:
        """Get the mapping of path to content digest."""
        self._check_open()
        return {path: info.digest for path, info in sorted(self._infos.items())}
