"""Discovery module - test file resolution and exclusion."""

from .file_resolver import TEST_EXTENSION, resolve_files
from .patterns import compile_pattern, exclude_files

__all__ = [
    "TEST_EXTENSION",
    "resolve_files",
    "compile_pattern",
    "exclude_files",
]
