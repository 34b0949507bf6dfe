"""
File filtering utilities for repo2ctx.

This module provides binary detection for the content processor and the
cheap name-based exclusions used by the directory walker.
"""

import logging
from pathlib import Path
from typing import FrozenSet, Iterable, Optional

logger = logging.getLogger(__name__)


# Entry names the walker prunes before any pattern is evaluated
HARD_EXCLUDED_NAMES: FrozenSet[str] = frozenset({'node_modules', '.git', 'dist', 'build'})

# Common binary/non-text extensions
BINARY_EXTENSIONS: FrozenSet[str] = frozenset({
    # Executables & Libraries
    '.exe', '.dll', '.so', '.a', '.lib', '.dylib', '.o', '.obj',
    # Archives
    '.zip', '.tar', '.gz', '.bz2', '.7z', '.rar', '.jar', '.war',
    # Media
    '.jpg', '.jpeg', '.png', '.gif', '.bmp', '.ico', '.webp',
    '.mp3', '.mp4', '.avi', '.mov', '.wmv', '.flv', '.webm',
    '.wav', '.flac', '.ogg', '.m4a', '.aac',
    # Documents
    '.pdf', '.doc', '.docx', '.xls', '.xlsx', '.ppt', '.pptx',
    # Data
    '.db', '.sqlite', '.mdb', '.accdb', '.onnx',
    # Other
    '.pyc', '.pyo', '.pyd', '.whl', '.class', '.dex', '.apk', '.ipa',
})


class FileFilter:
    """Binary detection and name-based exclusion."""

    def __init__(
        self,
        binary_extensions: Optional[Iterable[str]] = None,
        sample_size: int = 8192,
    ):
        self.binary_extensions = (
            frozenset(binary_extensions) if binary_extensions is not None else BINARY_EXTENSIONS
        )
        self.sample_size = sample_size

    @staticmethod
    def is_hard_excluded(name: str) -> bool:
        """Check if an entry name is always pruned by the walker."""
        return name in HARD_EXCLUDED_NAMES

    def is_binary_extension(self, file_path: str) -> bool:
        return Path(file_path).suffix.lower() in self.binary_extensions

    @staticmethod
    def is_binary_content(sample: bytes) -> bool:
        """
        Check if a leading sample of a file looks binary.

        Null bytes or invalid UTF-8 mark content as binary.
        """
        if b'\x00' in sample:
            return True

        try:
            sample.decode('utf-8')
        except UnicodeDecodeError as e:
            # A multibyte character cut off by the sample boundary is still text
            return not (e.reason == 'unexpected end of data' and e.start >= len(sample) - 3)
        return False

    def is_binary(self, file_path: str) -> bool:
        """
        Determine whether a file is binary.

        Uses the extension list first, then sniffs the first `sample_size`
        bytes.

        Raises:
            OSError: If the file cannot be opened for sniffing.
        """
        if self.is_binary_extension(file_path):
            return True

        with open(file_path, 'rb') as f:
            sample = f.read(self.sample_size)

        binary = self.is_binary_content(sample)
        if binary:
            logger.debug(f"Detected binary content in {file_path}")
        return binary
