"""Directory tree walking and tree-view rendering."""

import logging
import os
from datetime import datetime
from typing import Dict, Iterable, Iterator, List, Optional, Sequence, Set

from ..core.models import (
    CancellationToken,
    DEFAULT_EXCLUDE_PATTERNS,
    DirectoryNode,
    FileNode,
    TreeNode,
)
from ..core.exceptions import RootPathError
from .file_filter import FileFilter
from .path_utils import PathUtils
from .pattern_matcher import matches_any

logger = logging.getLogger(__name__)


def _name_key(name: str):
    return (name.casefold(), name)


def sort_nodes(nodes: Iterable[TreeNode]) -> List[TreeNode]:
    """Directories first, then files; each group by case-insensitive name."""
    return sorted(nodes, key=lambda node: (node.is_file(), _name_key(node.name)))


class FileTreeBuilder:
    """Utilities for building directory trees and their text renderings."""

    @staticmethod
    def from_directory(
        root_path: str,
        exclude_patterns: Optional[Sequence[str]] = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> List[TreeNode]:
        """
        Recursively list a directory, pruning excluded entries before descending.

        Args:
            root_path: Directory to list
            exclude_patterns: Glob patterns matched against each entry's
                root-relative path and name. None selects the defaults.
            cancel_token: Checked at every entry

        Returns:
            Ordered list of top-level TreeNodes. Directories without any
            surviving children are omitted.

        Raises:
            RootPathError: If root_path is not a readable directory
            OperationCancelled: If cancel_token fires
        """
        if not os.path.isdir(root_path):
            raise RootPathError(f"Path is not a directory: {root_path}")

        patterns = DEFAULT_EXCLUDE_PATTERNS if exclude_patterns is None else tuple(exclude_patterns)
        root_path = os.path.abspath(root_path)

        def should_exclude(item_path: str, name: str) -> bool:
            if FileFilter.is_hard_excluded(name):
                return True
            return matches_any(PathUtils.relative_to(item_path, root_path), patterns)

        visited: Set[str] = {os.path.realpath(root_path)}

        def walk(directory: str) -> List[TreeNode]:
            result: List[TreeNode] = []

            for name in os.listdir(directory):
                if cancel_token is not None:
                    cancel_token.raise_if_cancelled()

                item_path = os.path.join(directory, name)
                try:
                    if should_exclude(item_path, name):
                        continue

                    stats = os.stat(item_path)
                    modified = datetime.fromtimestamp(stats.st_mtime)

                    if os.path.isdir(item_path):
                        real = os.path.realpath(item_path)
                        if real in visited:
                            logger.debug(f"Skipping already visited directory {item_path}")
                            continue
                        visited.add(real)

                        children = walk(item_path)
                        if children:
                            result.append(DirectoryNode(
                                name=name,
                                path=item_path,
                                size=stats.st_size,
                                last_modified=modified,
                                children=children,
                                item_count=len(children),
                            ))
                    else:
                        result.append(FileNode(
                            name=name,
                            path=item_path,
                            size=stats.st_size,
                            last_modified=modified,
                            extension=os.path.splitext(name)[1].lower(),
                        ))
                except OSError as e:
                    logger.warning(f"Error processing {item_path}: {e}")

            return sort_nodes(result)

        try:
            return walk(root_path)
        except OSError as e:
            raise RootPathError(f"Cannot read directory {root_path}: {e}") from e

    @staticmethod
    def iter_files(nodes: Iterable[TreeNode]) -> Iterator[FileNode]:
        """Yield every FileNode in tree order (depth-first)."""
        for node in nodes:
            if node.is_directory():
                yield from FileTreeBuilder.iter_files(node.children)
            else:
                yield node

    @staticmethod
    def render_paths(relative_paths: Iterable[str]) -> str:
        """
        Render a plain-text tree of the given relative file paths.

        Folders are listed before files and each level is ordered by
        case-insensitive name. The result has one line per entry and ends
        with a newline (empty string for no paths).
        """
        tree: Dict[str, dict] = {}

        for rel_path in relative_paths:
            parts = PathUtils.normalize_and_split(rel_path)
            if not parts:
                continue
            level = tree
            for part in parts:
                level = level.setdefault(part, {})

        lines: List[str] = []

        def render(level: Dict[str, dict], prefix: str) -> None:
            entries = sorted(
                level.items(),
                key=lambda item: (not item[1], _name_key(item[0])),
            )
            for i, (name, children) in enumerate(entries):
                is_last = i == len(entries) - 1
                lines.append(f"{prefix}{'└── ' if is_last else '├── '}{name}")
                if children:
                    render(children, prefix + ('    ' if is_last else '│   '))

        render(tree, "")
        return "".join(line + "\n" for line in lines)
