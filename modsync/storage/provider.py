# MODSYNC Storage Provider
# Snapshots of a repository subtree at a given commit

from __future__ import annotations

import posixpath
from collections.abc import Iterator
from contextlib import contextmanager

from modsync.git.repository import Repository
from modsync.storage.bucket import ReadBucket
from modsync.utils.paths import normalize_path

SYMLINK_MODE = "120000"


class GitStorageProvider:
    """
    Produces read-only buckets from the git object store.

    Submodules are skipped. Symlinks are skipped unless enabled, in which
    case a link is replaced by the content of its target when the target is
    a file inside the same subtree.
    """

    def __init__(self, repository: Repository, *, symlinks: bool = False):
        self.repository = repository
        self.symlinks = symlinks

    @contextmanager
    def snapshot(self, commit_hash: str, subdir: str) -> Iterator[ReadBucket]:
        """
        Open a snapshot of subdir at a commit, released when the block exits.

        Args:
            commit_hash: Commit to read the tree of.
            subdir: Repository-relative directory, "." for the root.

        Yields:
            ReadBucket with paths relative to subdir. Empty if subdir does not
            exist at that commit.
        """
        bucket = self.read_bucket(commit_hash, subdir)
        try:
            yield bucket
        finally:
            bucket.close()

    def read_bucket(self, commit_hash: str, subdir: str) -> ReadBucket:
        """Read subdir at a commit into a new bucket. The caller must close it."""
        subdir = normalize_path(subdir)
        entries = self._list_tree(commit_hash, subdir)

        files: dict[str, bytes] = {}
        links: dict[str, str] = {}
        for path, (mode, object_hash) in entries.items():
            if mode == SYMLINK_MODE:
                if self.symlinks:
                    links[path] = object_hash
                continue
            files[path] = self._read_blob(object_hash)

        for path, object_hash in links.items():
            target = self._resolve_link(path, self._read_blob(object_hash))
            if target is not None and target in files:
                files[path] = files[target]

        return ReadBucket(files)

    def _list_tree(self, commit_hash: str, subdir: str) -> dict[str, tuple[str, str]]:
        args = ["ls-tree", "-r", "-z", "--full-tree", commit_hash]
        if subdir != ".":
            args.extend(["--", subdir])
        result = self.repository.git(*args)

        prefix = "" if subdir == "." else subdir + "/"
        entries: dict[str, tuple[str, str]] = {}
        for record in result.stdout.split("\0"):
            if not record:
                continue
            # Format: <mode> SP <type> SP <object> TAB <path>
            meta, path = record.split("\t", 1)
            mode, object_type, object_hash = meta.split()
            if object_type != "blob" or not path.startswith(prefix):
                continue
            entries[path[len(prefix) :]] = (mode, object_hash)
        return entries

    def _read_blob(self, object_hash: str) -> bytes:
        return self.repository.git("cat-file", "blob", object_hash, text=False).stdout

    @staticmethod
    def _resolve_link(path: str, target: bytes) -> str | None:
        link = target.decode("utf-8", errors="replace")
        if link.startswith("/"):
            return None
        resolved = posixpath.normpath(posixpath.join(posixpath.dirname(path), link))
        if resolved == ".." or resolved.startswith("../"):
            return None
        return resolved
