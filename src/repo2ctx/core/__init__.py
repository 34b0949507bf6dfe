"""Core components for repo2ctx."""

from .exceptions import Repo2CtxError, ConfigError, RootPathError, OperationCancelled
from .models import (
    Config,
    GitignorePatterns,
    FileNode,
    DirectoryNode,
    FileAnalysisEntry,
    AnalysisResult,
    ProcessOptions,
    ProcessedResult,
    CancellationToken,
)
from .config import parse_config, load_config_file, DEFAULT_CONFIG_YAML
from .tokenizer import TokenCounter
from .selection import Selection, select_all, toggle_file, toggle_folder, prune_to_tree

__all__ = [
    "Repo2CtxError",
    "ConfigError",
    "RootPathError",
    "OperationCancelled",
    "Config",
    "GitignorePatterns",
    "FileNode",
    "DirectoryNode",
    "FileAnalysisEntry",
    "AnalysisResult",
    "ProcessOptions",
    "ProcessedResult",
    "CancellationToken",
    "parse_config",
    "load_config_file",
    "DEFAULT_CONFIG_YAML",
    "TokenCounter",
    "Selection",
    "select_all",
    "toggle_file",
    "toggle_folder",
    "prune_to_tree",
]
