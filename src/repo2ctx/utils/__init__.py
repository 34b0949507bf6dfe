"""Utility modules for repo2ctx."""

from .file_filter import FileFilter
from .path_utils import PathUtils
from .pattern_matcher import matches
from .gitignore import load_gitignore_patterns, parse_gitignore
from .tree_builder import FileTreeBuilder

__all__ = [
    "FileFilter",
    "PathUtils",
    "matches",
    "load_gitignore_patterns",
    "parse_gitignore",
    "FileTreeBuilder",
]
