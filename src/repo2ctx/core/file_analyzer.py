"""
File analysis module for repo2ctx.

This module handles per-file decisions and measurements:
- Classification of relative paths against the configuration
- Reading file content as UTF-8
- Token counting
"""

import logging
from typing import Optional

from .models import Config, GitignorePatterns
from .tokenizer import TokenCounter
from ..utils.path_utils import PathUtils
from ..utils.pattern_matcher import matches, matches_any

logger = logging.getLogger(__name__)


class FileAnalyzer:
    """Decides which files are processed and counts their tokens."""

    def __init__(
        self,
        config: Config,
        token_counter: Optional[TokenCounter] = None,
        gitignore_patterns: Optional[GitignorePatterns] = None,
        use_gitignore: Optional[bool] = None,
    ):
        self.config = config
        self.token_counter = token_counter or TokenCounter(config.token_encoder)
        self.gitignore_patterns = gitignore_patterns
        self.use_gitignore = config.use_gitignore if use_gitignore is None else use_gitignore

    def _matches_custom_exclude(self, normalized_path: str) -> Optional[str]:
        """Return the first custom exclude pattern matching any suffix of the path."""
        parts = normalized_path.split('/')
        for i in range(len(parts)):
            current_path = '/'.join(parts[i:])
            for pattern in self.config.exclude_patterns:
                clean_pattern = pattern.replace('**/', '', 1)
                if matches(current_path, clean_pattern) or matches(current_path, pattern):
                    return pattern
        return None

    def _gitignore_decision(self, normalized_path: str) -> Optional[bool]:
        """
        Apply gitignore patterns.

        Returns:
            False if excluded, True if an include override keeps the file,
            None when gitignore has no opinion.
        """
        patterns = self.gitignore_patterns
        if not (self.use_gitignore and patterns):
            return None
        if not matches_any(normalized_path, patterns.exclude_patterns):
            return None
        return matches_any(normalized_path, patterns.include_patterns)

    def should_process_file(self, relative_path: str) -> bool:
        """
        Check if a file should be analyzed and processed.

        Args:
            relative_path: Path relative to the repository root.

        Returns:
            True if the file passes every configured filter.
        """
        return self.get_excluded_reason(relative_path) is None

    def get_excluded_reason(self, relative_path: str) -> Optional[str]:
        """
        Get the reason why a file would be excluded.

        Args:
            relative_path: Path relative to the repository root.

        Returns:
            Reason string if the file would be excluded, None otherwise.
        """
        normalized_path = PathUtils.normalize_path(relative_path)

        if 'node_modules' in normalized_path.split('/'):
            return "Inside node_modules"

        if self.config.use_custom_excludes:
            pattern = self._matches_custom_exclude(normalized_path)
            if pattern is not None:
                return f"Matches exclude pattern '{pattern}'"

        decision = self._gitignore_decision(normalized_path)
        if decision is True:
            return None
        if decision is False:
            return "Ignored by .gitignore"

        ext = PathUtils.extension(normalized_path)
        if ext not in self.config.include_extensions:
            return f"Extension '{ext}' not included" if ext else "No file extension"

        return None

    def read_file_content(self, file_path: str) -> str:
        """
        Read a file as UTF-8 text.

        Raises:
            OSError: If the file cannot be read.
            UnicodeDecodeError: If the content is not valid UTF-8.
        """
        with open(file_path, 'r', encoding='utf-8') as f:
            return f.read()

    def analyze_file(self, file_path: str) -> Optional[int]:
        """
        Count the tokens of one file.

        Returns:
            Token count, or None if the file could not be read or counted.
        """
        try:
            content = self.read_file_content(file_path)
            return self.token_counter.count(content)
        except (OSError, UnicodeDecodeError) as e:
            logger.warning(f"Error analyzing file {file_path}: {e}")
            return None
