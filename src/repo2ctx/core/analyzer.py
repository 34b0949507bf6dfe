"""Pipeline orchestrator: analysis phase and assembly phase."""

import logging
import os
from typing import Callable, Iterable, List, Optional, Sequence

from .config import parse_config
from .content_processor import ContentProcessor
from .exceptions import RootPathError
from .file_analyzer import FileAnalyzer
from .models import (
    AnalysisResult,
    CancellationToken,
    Config,
    FileAnalysisEntry,
    GitignorePatterns,
    ProcessedResult,
    ProcessOptions,
    TreeNode,
)
from .tokenizer import TokenCounter
from ..utils.gitignore import load_gitignore_patterns
from ..utils.path_utils import PathUtils
from ..utils.tree_builder import FileTreeBuilder

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[str], None]


class RepositoryAnalyzer:
    """
    Drives classification, token counting and document assembly.

    Holds no per-run state: every call takes its root path, configuration
    and file set as arguments and returns a fresh result.
    """

    def __init__(
        self,
        token_counter: Optional[TokenCounter] = None,
        content_processor: Optional[ContentProcessor] = None,
    ):
        self.token_counter = token_counter
        self.content_processor = content_processor

    def _counter_for(self, config: Config) -> TokenCounter:
        return self.token_counter or TokenCounter(config.token_encoder)

    @staticmethod
    def _check_root(root_path: str) -> str:
        if not os.path.isdir(root_path):
            raise RootPathError(f"Path is not a directory: {root_path}")
        return os.path.abspath(root_path)

    def analyze(
        self,
        root_path: str,
        config: Config,
        selected_files: Iterable[str],
        gitignore_patterns: Optional[GitignorePatterns] = None,
        cancel_token: Optional[CancellationToken] = None,
        progress: Optional[ProgressCallback] = None,
    ) -> AnalysisResult:
        """
        Filter and token-count the selected files.

        Args:
            root_path: Repository root
            config: Filtering configuration
            selected_files: Absolute paths chosen by the caller
            gitignore_patterns: Patterns to honour when config.use_gitignore
                is set; loaded from the root .gitignore when omitted
            cancel_token: Checked before each file
            progress: Called with each relative path as it is examined

        Returns:
            AnalysisResult with entries sorted by descending token count
        """
        root_path = self._check_root(root_path)

        if config.use_gitignore and gitignore_patterns is None:
            gitignore_patterns = load_gitignore_patterns(root_path)

        file_analyzer = FileAnalyzer(config, self._counter_for(config), gitignore_patterns)

        files_info: List[FileAnalysisEntry] = []
        total_tokens = 0

        for file_path in selected_files:
            if cancel_token is not None:
                cancel_token.raise_if_cancelled()

            relative_path = PathUtils.relative_to(os.path.join(root_path, file_path), root_path)
            if progress is not None:
                progress(relative_path)

            if not file_analyzer.should_process_file(relative_path):
                logger.debug(f"Skipping {relative_path}: {file_analyzer.get_excluded_reason(relative_path)}")
                continue

            token_count = file_analyzer.analyze_file(os.path.join(root_path, file_path))
            if token_count is None:
                continue

            files_info.append(FileAnalysisEntry(path=relative_path, tokens=token_count))
            total_tokens += token_count

        # sorted() is stable, so equal counts keep their selection order
        files_info = sorted(files_info, key=lambda entry: entry.tokens, reverse=True)

        logger.info(f"Analyzed {len(files_info)} files, {total_tokens} tokens")
        return AnalysisResult(files_info=files_info, total_tokens=total_tokens)

    def process(
        self,
        root_path: str,
        files_info: Sequence[FileAnalysisEntry],
        tree_view: Optional[str] = None,
        options: Optional[ProcessOptions] = None,
        cancel_token: Optional[CancellationToken] = None,
        progress: Optional[ProgressCallback] = None,
    ) -> ProcessedResult:
        """
        Assemble the analyzed files into one document.

        Token totals are the analysis-phase counts of the files that were
        rendered successfully; file contents are not re-counted here.

        Args:
            root_path: Repository root
            files_info: Entries in the order they should appear
            tree_view: Optional plain-text tree placed before the contents
            options: Rendering options
            cancel_token: Checked before each file
            progress: Called with each relative path as it is rendered

        Returns:
            ProcessedResult with the document and its counters
        """
        root_path = self._check_root(root_path)
        options = options or ProcessOptions()
        processor = self.content_processor or ContentProcessor(self.token_counter or TokenCounter())

        parts = ['# Repository Content\n\n']
        if tree_view:
            parts.append('## File Structure\n\n')
            parts.append('```\n')
            parts.append(tree_view if tree_view.endswith('\n') else tree_view + '\n')
            parts.append('```\n\n')
            parts.append('## File Contents\n\n')

        total_tokens = 0
        processed_files = 0
        skipped_files = 0

        for entry in files_info:
            if cancel_token is not None:
                cancel_token.raise_if_cancelled()
            if progress is not None:
                progress(entry.path)

            full_path = PathUtils.join_root(root_path, entry.path)
            if not os.path.isfile(full_path):
                logger.warning(f"File not found: {entry.path}")
                skipped_files += 1
                continue

            try:
                content = processor.render_file(full_path, entry.path, options)
            except Exception as e:
                logger.warning(f"Failed to process {entry.path}: {e}")
                content = None

            if content is None:
                skipped_files += 1
                continue

            parts.append(content)
            total_tokens += entry.tokens
            processed_files += 1

        parts.append('\n--END--\n')
        parts.append(f'Total tokens: {total_tokens}\n')
        parts.append(f'Processed files: {processed_files}\n')
        if skipped_files > 0:
            parts.append(f'Skipped files: {skipped_files}\n')

        logger.info(f"Processed {processed_files} files, skipped {skipped_files}")
        return ProcessedResult(
            content=''.join(parts),
            total_tokens=total_tokens,
            processed_files=processed_files,
            skipped_files=skipped_files,
        )


def list_tree_request(
    root_path: str,
    exclude_patterns: Optional[Sequence[str]] = None,
    cancel_token: Optional[CancellationToken] = None,
) -> List[TreeNode]:
    """Directory listing request."""
    return FileTreeBuilder.from_directory(root_path, exclude_patterns, cancel_token)


def analyze_request(
    root_path: str,
    config_content: Optional[str],
    selected_files: Iterable[str],
    cancel_token: Optional[CancellationToken] = None,
) -> AnalysisResult:
    """
    Analyze request taking raw configuration text.

    Raises:
        ConfigError: If the configuration text is malformed.
        RootPathError: If the root path is not a directory.
    """
    config = parse_config(config_content)
    return RepositoryAnalyzer().analyze(root_path, config, selected_files, cancel_token=cancel_token)


def process_request(
    root_path: str,
    files_info: Sequence[FileAnalysisEntry],
    tree_view: Optional[str] = None,
    options: Optional[ProcessOptions] = None,
    cancel_token: Optional[CancellationToken] = None,
) -> ProcessedResult:
    """
    Process request.

    When `options.include_tree_view` is set and no tree view is given, one
    is rendered from the entries' paths.
    """
    options = options or ProcessOptions()
    if tree_view is None and options.include_tree_view:
        tree_view = FileTreeBuilder.render_paths(entry.path for entry in files_info)
    return RepositoryAnalyzer().process(root_path, files_info, tree_view, options, cancel_token)
