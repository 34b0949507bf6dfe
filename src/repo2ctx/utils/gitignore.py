"""
Reading a repository's .gitignore into GitignorePatterns.

Only the documented subset of gitignore syntax is understood: comments,
blank lines, `!` negation, a leading `/` anchor and a trailing `/` for
directories. Patterns are rewritten into the glob dialect of
`pattern_matcher` so the file classifier can evaluate them directly.
"""

import logging
import os
from typing import Iterable, List

from ..core.models import GitignorePatterns

logger = logging.getLogger(__name__)


def _translate(pattern: str) -> List[str]:
    """Rewrite one gitignore pattern into matcher globs."""
    anchored = pattern.startswith('/')
    pattern = pattern.lstrip('/')

    if pattern.endswith('/'):
        name = pattern.rstrip('/')
        if anchored or '/' in name:
            return [f"{name}/**"]
        # Directory name at any depth
        return [f"{name}/**", f"**/{name}/**"]

    return [pattern]


def parse_gitignore(lines: Iterable[str]) -> GitignorePatterns:
    """
    Parse gitignore lines.

    Args:
        lines: Raw lines of a .gitignore file

    Returns:
        GitignorePatterns with `!` lines collected as include overrides
    """
    excludes: List[str] = []
    includes: List[str] = []

    for raw in lines:
        line = raw.strip()
        if not line or line.startswith('#'):
            continue
        # "\#" and "\!" escape a literal leading character
        if line.startswith('\\#') or line.startswith('\\!'):
            excludes.extend(_translate(line[1:]))
        elif line.startswith('!'):
            if len(line) > 1:
                includes.extend(_translate(line[1:]))
        else:
            excludes.extend(_translate(line))

    return GitignorePatterns(
        exclude_patterns=tuple(excludes),
        include_patterns=tuple(includes),
    )


def load_gitignore_patterns(root_path: str) -> GitignorePatterns:
    """Load `<root_path>/.gitignore`; a missing or unreadable file yields no patterns."""
    gitignore_path = os.path.join(root_path, '.gitignore')
    if not os.path.isfile(gitignore_path):
        return GitignorePatterns()

    try:
        with open(gitignore_path, 'r', encoding='utf-8') as f:
            return parse_gitignore(f.read().splitlines())
    except (OSError, UnicodeDecodeError) as e:
        logger.warning(f"Could not read {gitignore_path}: {e}")
        return GitignorePatterns()
