"""Shell-style exclusion patterns.

Patterns understand three special characters:
    .   literal dot
    *   one or more characters
    ?   exactly one character

Every other character matches itself. Matching is unanchored, so
``*.spec`` excludes ``test/x.spec.js`` too.
"""

import re
from typing import Iterable, Sequence


_WILDCARDS = {"*": ".+", "?": "."}


def compile_pattern(pattern: str) -> re.Pattern:
    """Translate a glob-like pattern into a compiled regular expression."""
    return re.compile("".join(_WILDCARDS.get(c, re.escape(c)) for c in pattern))


def exclude_files(files: Sequence[str], patterns: Iterable[str]) -> list[str]:
    """Drop every file matched by any of the patterns, keeping order.

    Args:
        files: Resolved test file paths.
        patterns: Raw exclusion patterns.

    Returns:
        The files that no pattern matches.
    """
    result = list(files)
    for regexp in (compile_pattern(p) for p in patterns):
        result = [f for f in result if not regexp.search(f)]
    return result
