# MODSYNC Hashing Utilities
# Content hashing for content-addressable snapshots

import hashlib
from collections.abc import Iterable


def content_hash(content: str | bytes, *, algorithm: str = "sha256") -> str:
    """
    Calculate hash of content.

    Args:
        content: String or bytes content.
        algorithm: Hash algorithm (default sha256).

    Returns:
        Hex digest of hash.
    """
    if isinstance(content, str):
        content = content.encode("utf-8")

    hasher = hashlib.new(algorithm)
    hasher.update(content)
    return hasher.hexdigest()


def manifest_digest(entries: Iterable[tuple[str, str]], *, algorithm: str = "sha256") -> str:
    """
    Calculate the digest of a manifest of (path, content digest) pairs.

    Entries are sorted by path so the digest does not depend on input order.
    Both names and contents contribute, so renames change the digest too.

    Args:
        entries: Pairs of relative path and hex digest of the file content.
        algorithm: Hash algorithm (default sha256).

    Returns:
        Hex digest of the manifest.
    """
    hasher = hashlib.new(algorithm)
    for path, digest in sorted(entries):
        hasher.update(f"{algorithm}:{digest}  {path}\n".encode("utf-8"))
    return hasher.hexdigest()
