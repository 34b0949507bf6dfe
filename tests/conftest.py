import pytest
import tempfile
import shutil
from pathlib import Path

from repo2ctx.core.tokenizer import TokenCounter


class WordTokenCounter(TokenCounter):
    """Deterministic counter: one token per whitespace-separated word."""

    def __init__(self):
        self.encoding_name = "words"
        self.encoder = None

    def count(self, text: str) -> int:
        return len(text.split())


@pytest.fixture
def token_counter():
    return WordTokenCounter()


@pytest.fixture
def temp_workspace():
    """Create a temporary directory for test files."""
    temp_dir = tempfile.mkdtemp()
    yield Path(temp_dir)
    shutil.rmtree(temp_dir)


@pytest.fixture
def sample_repo(temp_workspace):
    """Create a sample repository structure for testing."""
    repo_root = temp_workspace / "sample_repo"
    repo_root.mkdir()

    # Create directory structure
    (repo_root / "src").mkdir()
    (repo_root / "src" / "utils").mkdir()
    (repo_root / "src" / "node_modules" / "pkg").mkdir(parents=True)
    (repo_root / "docs").mkdir()
    (repo_root / "empty").mkdir()
    (repo_root / ".git").mkdir()
    (repo_root / "dist").mkdir()

    # Create files
    (repo_root / "README.md").write_text("# Sample Repository\n\nTest repository for repo2ctx")
    (repo_root / "setup.py").write_text("from setuptools import setup\n\nsetup(name='sample')")
    (repo_root / "src" / "app.js").write_text("console.log('hello world');")
    (repo_root / "src" / "main.py").write_text("def main():\n    print('Hello, World!')")
    (repo_root / "src" / "styles.css").write_text("body { color: red; }")
    (repo_root / "src" / "utils" / "helpers.py").write_text("def helper():\n    return 42")
    (repo_root / "src" / "node_modules" / "pkg" / "index.js").write_text("module.exports = {};")
    (repo_root / "docs" / "guide.md").write_text("# Guide")
    (repo_root / ".git" / "config").write_text("[core]\n    repositoryformatversion = 0")
    (repo_root / "dist" / "bundle.js").write_text("var a=1;")

    # Create binary file
    (repo_root / "image.png").write_bytes(b'\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR')

    return repo_root
