"""
File/folder selection over a directory tree.

A Selection is an immutable pair of path sets. Every change produces a new
Selection computed from the tree, so file and folder state cannot drift
apart.
"""

from dataclasses import dataclass
from typing import FrozenSet, Iterable, List, Optional

from .models import DirectoryNode, TreeNode
from ..utils.tree_builder import FileTreeBuilder


@dataclass(frozen=True)
class Selection:
    """Selected file paths and fully selected folder paths."""

    files: FrozenSet[str] = frozenset()
    folders: FrozenSet[str] = frozenset()

    def __len__(self) -> int:
        return len(self.files)

    def __contains__(self, path: str) -> bool:
        return path in self.files

    def sorted_files(self, tree: Iterable[TreeNode]) -> List[str]:
        """Selected files in tree order."""
        return [node.path for node in FileTreeBuilder.iter_files(tree) if node.path in self.files]


def find_directory(tree: Iterable[TreeNode], path: str) -> Optional[DirectoryNode]:
    for node in tree:
        if node.is_directory():
            if node.path == path:
                return node
            found = find_directory(node.children, path)
            if found is not None:
                return found
    return None


def _folders_fully_selected(tree: Iterable[TreeNode], files: FrozenSet[str]) -> FrozenSet[str]:
    """Folders whose every descendant file is selected."""
    folders = set()

    def visit(node: DirectoryNode) -> bool:
        complete = True
        for child in node.children:
            if child.is_directory():
                complete = visit(child) and complete
            elif child.path not in files:
                complete = False
        if complete:
            folders.add(node.path)
        return complete

    for node in tree:
        if node.is_directory():
            visit(node)
    return frozenset(folders)


def _rebuild(tree: List[TreeNode], files: Iterable[str]) -> Selection:
    known = {node.path for node in FileTreeBuilder.iter_files(tree)}
    files = frozenset(path for path in files if path in known)
    return Selection(files=files, folders=_folders_fully_selected(tree, files))


def select_all(tree: List[TreeNode]) -> Selection:
    return _rebuild(tree, (node.path for node in FileTreeBuilder.iter_files(tree)))


def toggle_file(tree: List[TreeNode], selection: Selection, path: str, selected: bool) -> Selection:
    """New selection with one file added or removed."""
    files = selection.files | {path} if selected else selection.files - {path}
    return _rebuild(tree, files)


def toggle_folder(tree: List[TreeNode], selection: Selection, path: str, selected: bool) -> Selection:
    """New selection with every file under a folder added or removed."""
    folder = find_directory(tree, path)
    if folder is None:
        return selection

    folder_files = {node.path for node in FileTreeBuilder.iter_files(folder.children)}
    files = selection.files | folder_files if selected else selection.files - folder_files
    return _rebuild(tree, files)


def prune_to_tree(tree: List[TreeNode], selection: Selection) -> Selection:
    """Drop selected paths that are no longer present in a refreshed tree."""
    return _rebuild(tree, selection.files)
