"""
Configuration loading for repo2ctx.

Configuration is a YAML document such as `DEFAULT_CONFIG_YAML`. It is parsed
once per operation into an immutable `Config`; anything malformed is reported
as a `ConfigError` rather than silently defaulted.
"""

import logging
import os
from typing import Any, Dict, Optional

import yaml

from .exceptions import ConfigError
from .models import Config, DEFAULT_EXCLUDE_PATTERNS, DEFAULT_INCLUDE_EXTENSIONS

logger = logging.getLogger(__name__)


DEFAULT_CONFIG_YAML = """\
# File extensions to include (with dot)
include_extensions:
  - .py
  - .ts
  - .js
  - .md
  - .ini
  - .yaml
  - .yml
  - .kt
  - .go
  - .scm
  - .php

# Apply exclude_patterns below
use_custom_excludes: true

# Also honour the root .gitignore
use_gitignore: false

# Patterns to exclude (glob syntax, ** crosses directories)
exclude_patterns:
  # Version Control
  - "**/.git/**"
  - "**/.svn/**"
  - "**/.hg/**"
  - "**/vocab.txt"
  - "**.onnx"
  - "**/test*.py"

  # Dependencies
  - "**/node_modules/**"
  - "**/venv/**"
  - "**/env/**"
  - "**/.venv/**"
  - "**/.github/**"
  - "**/vendor/**"
  - "**/website/**"

  # Build outputs
  - "**/test/**"
  - "**/dist/**"
  - "**/build/**"
  - "**/__pycache__/**"
  - "**/*.pyc"

  # Config files
  - "**/.DS_Store"
  - "**/.env"
  - "**/package-lock.json"
  - "**/yarn.lock"
  - "**/.prettierrc"
  - "**/.prettierignore"
  - "**/.gitignore"
  - "**/.gitattributes"
  - "**/.npmrc"

  # Documentation
  - "**/LICENSE*"
  - "**/LICENSE.*"
  - "**/COPYING"
  - "**/CODE_OF**"
  - "**/CONTRIBUTING**"

  # Test files
  - "**/tests/**"
  - "**/test/**"
  - "**/__tests__/**"
"""


def _string_list(data: Dict[str, Any], key: str) -> Optional[list]:
    """Return `data[key]` as a list of strings, or None when absent."""
    value = data.get(key)
    if value is None:
        return None
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, list):
        raise ConfigError(f"'{key}' must be a list of strings, got {type(value).__name__}")
    bad = [item for item in value if not isinstance(item, str)]
    if bad:
        raise ConfigError(f"'{key}' must contain only strings, got {bad[0]!r}")
    return value


def _flag(data: Dict[str, Any], key: str, default: bool) -> bool:
    value = data.get(key)
    if value is None:
        return default
    if not isinstance(value, bool):
        raise ConfigError(f"'{key}' must be true or false, got {value!r}")
    return value


def parse_config(content: Optional[str]) -> Config:
    """
    Parse YAML configuration text into a Config.

    Args:
        content: YAML text. None or blank text yields the default Config.

    Returns:
        Immutable Config with defaults filled in for absent keys.

    Raises:
        ConfigError: If the text is not valid YAML, is not a mapping, or
            contains wrongly typed values.
    """
    if content is None or not content.strip():
        return Config()

    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid configuration: {e}") from e

    if data is None:
        return Config()
    if not isinstance(data, dict):
        raise ConfigError(f"Configuration must be a mapping, got {type(data).__name__}")

    extensions = _string_list(data, 'include_extensions')
    patterns = _string_list(data, 'exclude_patterns')

    token_encoder = data.get('token_encoder', Config.token_encoder)
    if not isinstance(token_encoder, str):
        raise ConfigError(f"'token_encoder' must be a string, got {token_encoder!r}")

    config = Config(
        include_extensions=DEFAULT_INCLUDE_EXTENSIONS if extensions is None else extensions,
        exclude_patterns=DEFAULT_EXCLUDE_PATTERNS if patterns is None else patterns,
        use_custom_excludes=_flag(data, 'use_custom_excludes', True),
        use_gitignore=_flag(data, 'use_gitignore', False),
        token_encoder=token_encoder,
    )
    logger.debug(
        f"Loaded config: {len(config.include_extensions)} extensions, "
        f"{len(config.exclude_patterns)} exclude patterns"
    )
    return config


def load_config_file(path: Optional[str]) -> Config:
    """
    Load configuration from a YAML file.

    Falls back to the file named by REPO2CTX_CONFIG, then to the default
    configuration.
    """
    path = path or os.getenv('REPO2CTX_CONFIG')
    if not path:
        return parse_config(DEFAULT_CONFIG_YAML)

    try:
        with open(path, 'r', encoding='utf-8') as f:
            content = f.read()
    except OSError as e:
        raise ConfigError(f"Cannot read configuration file {path}: {e}") from e

    return parse_config(content)
