"""Test file discovery.

Expands file and directory arguments into a flat list of test sources.
"""

import logging
import os
from typing import Iterable

from ..errors import MissingFileError

logger = logging.getLogger(__name__)

# Extension of runnable test sources
TEST_EXTENSION = ".js"


def _locate(path: str, extension: str) -> str:
    """Resolve a path that may be missing only its extension."""
    if os.path.exists(path + extension):
        return path + extension
    if os.path.exists(path):
        return path
    raise MissingFileError(path)


def _expand(path: str, extension: str) -> list[str]:
    if os.path.isdir(path):
        result: list[str] = []
        for name in sorted(os.listdir(path)):
            result.extend(_expand(os.path.join(path, name), extension))
        return result
    if os.path.splitext(path)[1] == extension:
        return [path]
    logger.debug("Skipping non-test file: %s", path)
    return []


def resolve_files(paths: Iterable[str], extension: str = TEST_EXTENSION) -> list[str]:
    """Resolve test paths into a flat, deduplicated list of test files.

    Each entry is tried as ``path + extension`` first, then as given.
    Directories are expanded recursively in place, children in name order.
    Files with another extension are dropped.

    Args:
        paths: File or directory paths.
        extension: Extension of test sources (with leading dot).

    Returns:
        Test files in first-discovered order.

    Raises:
        MissingFileError: If an entry exists neither with nor without
            the extension.
    """
    seen: set[str] = set()
    result: list[str] = []

    for path in paths:
        for file in _expand(_locate(path, extension), extension):
            if file in seen:
                continue
            seen.add(file)
            result.append(file)

    return result
