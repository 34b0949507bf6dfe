"""
Per-file rendering and the analysis file format.

Each processed file becomes a block of the form::

    ######
    src/app.js (42 tokens)
    ######

    ```
    <content>
    ```

Binary files get a stand-in block with their type and size instead.
"""

import logging
import os
from typing import Iterable, List, Optional

from .models import AnalysisResult, FileAnalysisEntry, ProcessOptions
from .tokenizer import TokenCounter
from ..utils.file_filter import FileFilter
from ..utils.path_utils import PathUtils

logger = logging.getLogger(__name__)

TOTAL_TOKENS_PREFIX = 'Total tokens:'


def _header(text: str) -> str:
    return f"######\n{text}\n######\n\n"


class ContentProcessor:
    """Formats file sections for the assembled document."""

    def __init__(self, token_counter: Optional[TokenCounter] = None, file_filter: Optional[FileFilter] = None):
        self.token_counter = token_counter or TokenCounter()
        self.file_filter = file_filter or FileFilter()

    def render_binary(self, file_path: str, relative_path: str) -> str:
        """Stand-in block for a binary file; the content is never read."""
        size_kib = os.path.getsize(file_path) / 1024
        ext = os.path.splitext(relative_path)[1].lstrip('.').upper() or 'UNKNOWN'
        return (
            _header(f"{relative_path} (binary file)")
            + f"File type: {ext}\n"
            + f"Size: {size_kib:.2f} KB\n\n"
        )

    def render_text(self, content: str, relative_path: str, options: ProcessOptions) -> str:
        if options.show_token_count:
            header = f"{relative_path} ({self.token_counter.count(content)} tokens)"
        else:
            header = relative_path
        return _header(header) + f"```\n{content}\n```\n\n"

    def render_file(
        self,
        file_path: str,
        relative_path: str,
        options: Optional[ProcessOptions] = None,
    ) -> Optional[str]:
        """
        Render one file as a document block.

        Args:
            file_path: Absolute path of the file
            relative_path: Path shown in the header
            options: Rendering options (token count shown by default)

        Returns:
            Formatted block, or None if the file could not be processed.
        """
        options = options or ProcessOptions()
        try:
            if self.file_filter.is_binary(file_path):
                return self.render_binary(file_path, relative_path)

            with open(file_path, 'r', encoding='utf-8') as f:
                content = f.read()
            return self.render_text(content, relative_path, options)
        except (OSError, UnicodeDecodeError) as e:
            logger.warning(f"Error processing file {file_path}: {e}")
            return None

    @staticmethod
    def format_analysis(result: AnalysisResult) -> str:
        """Serialize an analysis as alternating path/token lines plus a total line."""
        lines = []
        for entry in result.files_info:
            lines.append(entry.path)
            lines.append(str(entry.tokens))
        lines.append(f"{TOTAL_TOKENS_PREFIX} {result.total_tokens}")
        return "\n".join(lines) + "\n"

    @staticmethod
    def read_analysis(lines: Iterable[str]) -> List[FileAnalysisEntry]:
        """
        Parse the analysis format back into entries.

        Pairs of (path, token count) lines are read until a line starting
        with 'Total tokens:'. Pairs with an unparsable count are skipped.
        """
        lines = [line.strip() for line in lines]
        entries: List[FileAnalysisEntry] = []

        for i in range(0, len(lines) - 1, 2):
            path = lines[i]
            if path.startswith(TOTAL_TOKENS_PREFIX):
                break
            try:
                tokens = int(lines[i + 1])
            except ValueError:
                logger.warning(f"Failed to parse token count on line {i + 2}: {lines[i + 1]!r}")
                continue
            if tokens < 0:
                logger.warning(f"Negative token count for {path}, skipping")
                continue
            entries.append(FileAnalysisEntry(path=PathUtils.normalize_path(path), tokens=tokens))

        return entries

    @classmethod
    def read_analysis_file(cls, analysis_path: str) -> List[FileAnalysisEntry]:
        """Load an analysis file; unreadable files yield no entries."""
        try:
            with open(analysis_path, 'r', encoding='utf-8') as f:
                return cls.read_analysis(f.read().splitlines())
        except (OSError, UnicodeDecodeError) as e:
            logger.error(f"Error reading analysis file {analysis_path}: {e}")
            return []
