"""
Token counting functionality for repo2ctx.

This module provides token counting using OpenAI's tiktoken library.
When the encoder cannot be loaded (offline, unknown encoding name) it
falls back to a deterministic character/word estimate.
"""

import logging
from typing import Optional, Any

import tiktoken

logger = logging.getLogger(__name__)


class TokenCounter:
    """
    Counts tokens in text content.

    The pipeline only depends on `count()` being deterministic and
    returning a non-negative integer.
    """

    def __init__(self, encoding_name: str = "cl100k_base"):
        """
        Initialize the token counter.

        Args:
            encoding_name: The name of the tiktoken encoding to use.
                         Default is cl100k_base (used by GPT-4).
        """
        self.encoding_name = encoding_name
        self.encoder: Optional[Any] = None

        try:
            self.encoder = tiktoken.get_encoding(encoding_name)
        except Exception as e:
            logger.warning(f"Failed to initialize token encoder '{encoding_name}', using estimates: {e}")

    @property
    def is_available(self) -> bool:
        """Check if exact tiktoken counting is available."""
        return self.encoder is not None

    def count(self, text: str) -> int:
        """
        Count tokens in the given text.

        Args:
            text: The text to count tokens for.

        Returns:
            Number of tokens; 0 for empty text.
        """
        if not text:
            return 0

        if self.is_available:
            try:
                return len(self.encoder.encode(text, disallowed_special=()))
            except Exception as e:
                logger.debug(f"Error counting tokens, using estimate: {e}")

        return self.estimate_tokens(text)

    @staticmethod
    def estimate_tokens(text: str) -> int:
        """
        Estimate token count without tiktoken.

        Args:
            text: The text to estimate tokens for.

        Returns:
            Estimated number of tokens.
        """
        if not text:
            return 0

        # ~4 characters per token on average for GPT models
        char_estimate = len(text) / 4
        word_estimate = len(text.split()) * 1.3

        return max(1, int((char_estimate + word_estimate) / 2))
