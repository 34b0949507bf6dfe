"""Path normalization utilities for cross-platform compatibility."""

import os
from typing import List


class PathUtils:
    """Utilities for consistent path handling across platforms."""

    @staticmethod
    def normalize_path(path: str) -> str:
        """
        Normalize path separators to forward slashes.

        Args:
            path: File path with potentially mixed separators

        Returns:
            Path with forward slashes only
        """
        return path.replace('\\\\', '/').replace('\\', '/')

    @staticmethod
    def normalize_and_split(path: str) -> List[str]:
        """Normalize path and split into non-empty components."""
        return [part for part in PathUtils.normalize_path(path).split('/') if part]

    @staticmethod
    def relative_to(path: str, root: str) -> str:
        """
        Path of `path` relative to `root`, with forward slashes.

        Args:
            path: Absolute (or root-relative) file path
            root: Root directory

        Returns:
            Forward-slash relative path
        """
        return PathUtils.normalize_path(os.path.relpath(path, root))

    @staticmethod
    def join_root(root: str, relative_path: str) -> str:
        """Join a forward-slash relative path onto a native root directory."""
        return os.path.join(root, *PathUtils.normalize_and_split(relative_path))

    @staticmethod
    def extension(path: str) -> str:
        """Lowercase extension including the dot, '' when there is none."""
        return os.path.splitext(PathUtils.normalize_path(path).rsplit('/', 1)[-1])[1].lower()
