"""
Core data models for repo2ctx.

This module contains the fundamental data structures used throughout
the application for configuration, directory trees, analysis results
and the assembled output document.
"""

import threading
from dataclasses import dataclass, field
from datetime import datetime
from typing import FrozenSet, List, Optional, Tuple, Union

from .exceptions import OperationCancelled


# Patterns applied by the directory walker when the caller supplies none
DEFAULT_EXCLUDE_PATTERNS: Tuple[str, ...] = (
    '**/node_modules/**',
    '**/.git/**',
    '**/dist/**',
    '**/build/**',
)

DEFAULT_INCLUDE_EXTENSIONS: FrozenSet[str] = frozenset({
    '.py', '.ts', '.js', '.md', '.ini', '.yaml', '.yml',
    '.kt', '.go', '.scm', '.php',
})


def normalize_extension(ext: str) -> str:
    """Lowercase an extension and make sure it starts with a dot."""
    ext = ext.strip().lower()
    if ext and not ext.startswith('.'):
        ext = '.' + ext
    return ext


@dataclass(frozen=True)
class Config:
    """Filtering configuration for a single pipeline invocation."""

    include_extensions: FrozenSet[str] = DEFAULT_INCLUDE_EXTENSIONS
    exclude_patterns: Tuple[str, ...] = DEFAULT_EXCLUDE_PATTERNS
    use_custom_excludes: bool = True
    use_gitignore: bool = False
    token_encoder: str = "cl100k_base"

    def __post_init__(self):
        # Accept any iterable from callers, store immutable normalized copies
        object.__setattr__(
            self,
            'include_extensions',
            frozenset(normalize_extension(e) for e in self.include_extensions if e),
        )
        object.__setattr__(self, 'exclude_patterns', tuple(self.exclude_patterns))


@dataclass(frozen=True)
class GitignorePatterns:
    """Exclude patterns and the negated (`!pattern`) include overrides."""

    exclude_patterns: Tuple[str, ...] = ()
    include_patterns: Tuple[str, ...] = ()

    def __bool__(self) -> bool:
        return bool(self.exclude_patterns or self.include_patterns)


@dataclass
class FileNode:
    """A file entry in a directory listing."""

    name: str
    path: str
    size: int
    last_modified: datetime
    extension: str

    def is_file(self) -> bool:
        return True

    def is_directory(self) -> bool:
        return False


@dataclass
class DirectoryNode:
    """A directory entry in a directory listing, with its surviving children."""

    name: str
    path: str
    size: int
    last_modified: datetime
    children: List['TreeNode'] = field(default_factory=list)
    item_count: int = 0

    def is_file(self) -> bool:
        return False

    def is_directory(self) -> bool:
        return True


TreeNode = Union[FileNode, DirectoryNode]


@dataclass(frozen=True)
class FileAnalysisEntry:
    """Token count of one selected file, keyed by its relative path."""

    path: str
    tokens: int


@dataclass
class AnalysisResult:
    """Result of the analysis phase."""

    files_info: List[FileAnalysisEntry] = field(default_factory=list)
    total_tokens: int = 0

    @property
    def total_files(self) -> int:
        return len(self.files_info)


@dataclass(frozen=True)
class ProcessOptions:
    """Options for the assembly phase."""

    show_token_count: bool = True
    include_tree_view: bool = False


@dataclass
class ProcessedResult:
    """The assembled document and its statistics."""

    content: str
    total_tokens: int = 0
    processed_files: int = 0
    skipped_files: int = 0


class CancellationToken:
    """
    Cooperative cancellation for long-running walks and loops.

    The walker and the pipeline call `raise_if_cancelled()` at every
    file/directory boundary.
    """

    def __init__(self):
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise OperationCancelled("Operation cancelled")
