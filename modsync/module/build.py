# MODSYNC Module Build
# Structural validation of a module snapshot against its declaration

import re
from typing import Optional

from modsync.module.config import ModuleConfig
from modsync.storage.bucket import ReadBucket
from modsync.utils.paths import is_within, normalize_path

PROTO_SUFFIX = ".proto"
WELL_KNOWN_PREFIX = "google/protobuf/"

_IMPORT_PATTERN = re.compile(r'^\s*import\s+(?:public\s+|weak\s+)?"([^"]+)"\s*;', re.MULTILINE)


class BuildError(Exception):
    """Raised when a module snapshot does not build."""

    def __init__(self, message: str, problems: Optional[list[str]] = None):
        self.message = message
        self.problems = problems or []
        super().__init__(message if not self.problems else f"{message}: {'; '.join(self.problems)}")


def find_imports(source: str) -> list[str]:
    """Get the import paths of a .proto source, in order of appearance."""
    return _IMPORT_PATTERN.findall(source)


def build_module(bucket: ReadBucket, config: ModuleConfig) -> list[str]:
    """
    Validate that a module builds.

    The declared excludes must be directories inside the module, at least one
    .proto file must remain, every file must be UTF-8 and each import must
    resolve inside the module. Imports are not checked for modules that
    declare dependencies, except that well-known types always resolve.

    Args:
        bucket: Snapshot of the module directory.
        config: The module's parsed declaration.

    Returns:
        Paths of the .proto files that make up the module, sorted.

    Raises:
        BuildError: If the module does not build.
    """
    excludes: list[str] = []
    problems: list[str] = []
    for exclude in config.build.excludes:
        try:
            normalized = normalize_path(exclude)
        except ValueError as e:
            problems.append(f"build.excludes: {e}")
            continue
        if normalized == ".":
            problems.append("build.excludes: cannot exclude the module root")
            continue
        excludes.append(normalized)
    if problems:
        raise BuildError("invalid build configuration", problems)

    proto_files = [
        info.path
        for info in bucket.walk()
        if info.path.endswith(PROTO_SUFFIX) and not any(is_within(info.path, e) for e in excludes)
    ]
    if not proto_files:
        raise BuildError("module has no .proto files")

    known = set(proto_files)
    for path in proto_files:
        try:
            source = bucket.get(path).decode("utf-8")
        except UnicodeDecodeError:
            problems.append(f"{path}: file is not valid UTF-8")
            continue
        if config.deps:
            continue
        for imported in find_imports(source):
            if imported in known or imported.startswith(WELL_KNOWN_PREFIX):
                continue
            problems.append(f'{path}: import "{imported}" was not found')

    if problems:
        raise BuildError("module failed to build", problems)
    return proto_files
