"""
Glob-style pattern matching for include/exclude rules.

Supported syntax: `*` (any run of non-separator characters), `**` (any run
including separators) and `?` (one non-separator character). Patterns
without wildcards match the whole path or any trailing path segment(s).
"""

import logging
import re
from functools import lru_cache
from typing import Pattern

from .path_utils import PathUtils

logger = logging.getLogger(__name__)

WILDCARDS = ('*', '?')


def has_wildcard(pattern: str) -> bool:
    return any(char in pattern for char in WILDCARDS)


@lru_cache(maxsize=1024)
def compile_pattern(pattern: str) -> Pattern:
    """Translate a glob pattern into an anchored regular expression."""
    parts = []
    i = 0
    while i < len(pattern):
        char = pattern[i]
        if char == '*':
            if pattern.startswith('**', i):
                parts.append('.*')
                i += 2
                continue
            parts.append('[^/]*')
        elif char == '?':
            parts.append('[^/]')
        else:
            parts.append(re.escape(char))
        i += 1
    return re.compile('^' + ''.join(parts) + '$')


def _strip_first_wildcard(pattern: str) -> str:
    for i, char in enumerate(pattern):
        if char in WILDCARDS:
            return pattern[:i] + pattern[i + 1:]
    return pattern


def matches(path: str, pattern: str) -> bool:
    """
    Check whether `path` matches the glob `pattern`.

    Never raises: if the pattern cannot be evaluated the match degrades to a
    substring check.

    Args:
        path: Relative path (any separator style)
        pattern: Glob pattern

    Returns:
        True if the full path or, for wildcard patterns, its basename matches
    """
    path = PathUtils.normalize_path(path)

    if not has_wildcard(pattern):
        return path == pattern or path.endswith('/' + pattern)

    try:
        regex = compile_pattern(pattern)
        name = path.rsplit('/', 1)[-1]
        return bool(regex.match(path) or regex.match(name))
    except (re.error, RecursionError, TypeError) as e:
        logger.warning(f"Error matching pattern {pattern!r} against {path!r}: {e}")
        return _strip_first_wildcard(pattern) in path


def matches_any(path: str, patterns) -> bool:
    """True if `path` matches at least one of `patterns`."""
    return any(matches(path, pattern) for pattern in patterns)
