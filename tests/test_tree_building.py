"""Tests for directory walking, tree rendering and path handling utilities."""

import os
import pytest
from unittest.mock import patch

from repo2ctx.core.exceptions import OperationCancelled, RootPathError
from repo2ctx.core.models import CancellationToken, DirectoryNode, FileNode
from repo2ctx.utils import PathUtils, FileTreeBuilder


def _names(nodes):
    return [node.name for node in nodes]


def _all_paths(nodes, root):
    return sorted(
        PathUtils.relative_to(node.path, str(root)) for node in FileTreeBuilder.iter_files(nodes)
    )


class TestPathUtils:
    """Test path normalization and manipulation utilities."""

    def test_normalize_path_backslashes(self):
        """Windows-style paths should be normalized to forward slashes."""
        assert PathUtils.normalize_path("src\\utils\\helper.py") == "src/utils/helper.py"

    def test_normalize_path_mixed_separators(self):
        assert PathUtils.normalize_path("src/utils\\subfolder/file.py") == "src/utils/subfolder/file.py"

    def test_normalize_and_split_drops_empty_parts(self):
        assert PathUtils.normalize_and_split("/src//main.py") == ["src", "main.py"]

    def test_relative_to(self, tmp_path):
        path = os.path.join(str(tmp_path), "src", "main.py")
        assert PathUtils.relative_to(path, str(tmp_path)) == "src/main.py"

    def test_join_root(self, tmp_path):
        assert PathUtils.join_root(str(tmp_path), "src/main.py") == os.path.join(str(tmp_path), "src", "main.py")

    def test_extension(self):
        assert PathUtils.extension("src/App.JSX") == ".jsx"
        assert PathUtils.extension("Makefile") == ""
        assert PathUtils.extension("dir.d/Makefile") == ""


class TestFromDirectory:
    def test_prunes_default_excludes(self, sample_repo):
        nodes = FileTreeBuilder.from_directory(str(sample_repo))
        paths = _all_paths(nodes, sample_repo)

        assert "src/app.js" in paths
        assert not any("node_modules" in p for p in paths)
        assert not any(p.startswith(".git/") or p.startswith("dist/") for p in paths)

    def test_excluded_subtrees_are_never_walked(self, sample_repo):
        real_listdir = os.listdir
        visited = []

        def spy(path):
            visited.append(PathUtils.normalize_path(str(path)))
            return real_listdir(path)

        with patch('repo2ctx.utils.tree_builder.os.listdir', side_effect=spy):
            FileTreeBuilder.from_directory(str(sample_repo))

        assert not any("node_modules" in p for p in visited)
        assert not any(p.endswith("/.git") for p in visited)

    def test_directories_first_then_case_insensitive(self, tmp_path):
        (tmp_path / "b_dir").mkdir()
        (tmp_path / "b_dir" / "x.txt").write_text("x")
        (tmp_path / "A_dir").mkdir()
        (tmp_path / "A_dir" / "y.txt").write_text("y")
        for name in ("zeta.py", "Alpha.py", "beta.py"):
            (tmp_path / name).write_text("")

        nodes = FileTreeBuilder.from_directory(str(tmp_path))

        assert _names(nodes) == ["A_dir", "b_dir", "Alpha.py", "beta.py", "zeta.py"]
        assert isinstance(nodes[0], DirectoryNode)
        assert isinstance(nodes[-1], FileNode)

    def test_empty_directories_are_omitted(self, sample_repo):
        (sample_repo / "only_excluded").mkdir()
        (sample_repo / "only_excluded" / "build").mkdir()
        (sample_repo / "only_excluded" / "build" / "x.js").write_text("x")

        nodes = FileTreeBuilder.from_directory(str(sample_repo))

        assert "empty" not in _names(nodes)
        assert "only_excluded" not in _names(nodes)

    def test_node_fields(self, sample_repo):
        nodes = FileTreeBuilder.from_directory(str(sample_repo))
        src = next(n for n in nodes if n.name == "src")
        app = next(n for n in src.children if n.name == "app.js")

        assert src.item_count == len(src.children)
        assert src.path == os.path.join(str(sample_repo), "src")
        assert app.extension == ".js"
        assert app.size == len("console.log('hello world');")
        assert app.last_modified is not None

    def test_custom_patterns(self, sample_repo):
        nodes = FileTreeBuilder.from_directory(str(sample_repo), ["*.css", "docs"])
        paths = _all_paths(nodes, sample_repo)

        assert "src/styles.css" not in paths
        assert not any(p.startswith("docs/") for p in paths)
        assert "src/app.js" in paths

    def test_double_star_directory_pattern_skips_top_level_match(self, tmp_path):
        # "**/.venv/**" needs a parent segment, so a root-level .venv is still walked
        (tmp_path / ".venv" / "lib").mkdir(parents=True)
        (tmp_path / ".venv" / "lib" / "x.py").write_text("x")
        (tmp_path / "pkg" / ".venv").mkdir(parents=True)
        (tmp_path / "pkg" / ".venv" / "y.py").write_text("y")
        (tmp_path / "pkg" / "a.py").write_text("a")
        (tmp_path / "app.py").write_text("app")

        nodes = FileTreeBuilder.from_directory(str(tmp_path), ["**/.venv/**"])

        assert _names(nodes) == [".venv", "pkg", "app.py"]
        assert _all_paths(nodes, tmp_path) == [".venv/lib/x.py", "app.py", "pkg/a.py"]

    def test_empty_pattern_list_still_prunes_hard_coded_names(self, sample_repo):
        paths = _all_paths(FileTreeBuilder.from_directory(str(sample_repo), []), sample_repo)

        assert "src/styles.css" in paths
        assert not any("node_modules" in p for p in paths)

    def test_bad_entry_is_skipped(self, sample_repo):
        real_stat = os.stat

        def flaky_stat(path, *args, **kwargs):
            if str(path).endswith("main.py"):
                raise PermissionError("denied")
            return real_stat(path, *args, **kwargs)

        with patch('repo2ctx.utils.tree_builder.os.stat', side_effect=flaky_stat):
            paths = _all_paths(FileTreeBuilder.from_directory(str(sample_repo)), sample_repo)

        assert "src/main.py" not in paths
        assert "src/app.js" in paths

    @pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks unavailable")
    def test_broken_symlink_is_skipped(self, tmp_path):
        (tmp_path / "a.py").write_text("x")
        try:
            os.symlink(str(tmp_path / "missing"), str(tmp_path / "dangling"))
        except OSError:
            pytest.skip("cannot create symlinks")

        assert _names(FileTreeBuilder.from_directory(str(tmp_path))) == ["a.py"]

    @pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks unavailable")
    def test_symlink_cycle_terminates(self, tmp_path):
        (tmp_path / "pkg").mkdir()
        (tmp_path / "pkg" / "a.py").write_text("x")
        try:
            os.symlink(str(tmp_path), str(tmp_path / "pkg" / "loop"), target_is_directory=True)
        except OSError:
            pytest.skip("cannot create symlinks")

        paths = _all_paths(FileTreeBuilder.from_directory(str(tmp_path)), tmp_path)

        assert paths == ["pkg/a.py"]

    def test_missing_root(self, tmp_path):
        with pytest.raises(RootPathError):
            FileTreeBuilder.from_directory(str(tmp_path / "missing"))

    def test_cancellation(self, sample_repo):
        token = CancellationToken()
        token.cancel()

        with pytest.raises(OperationCancelled):
            FileTreeBuilder.from_directory(str(sample_repo), cancel_token=token)


class TestRenderPaths:
    def test_folders_first(self):
        tree = FileTreeBuilder.render_paths(["README.md", "src/main.py", "src/utils/helper.py", "app.py"])

        assert tree == (
            "├── src\n"
            "│   ├── utils\n"
            "│   │   └── helper.py\n"
            "│   └── main.py\n"
            "├── app.py\n"
            "└── README.md\n"
        )

    def test_empty(self):
        assert FileTreeBuilder.render_paths([]) == ""

    def test_backslash_paths(self):
        assert FileTreeBuilder.render_paths(["src\\a.py"]) == "└── src\n    └── a.py\n"
