"""
Tests for the local repository source.

Tests cover:
- Directory listing with dotfiles, ignore patterns and .gitignore
- File reading limits
- Metadata
- Missing roots

Author: RepoGraph Team
"""

import pytest

from repograph.config import AnalysisConfig, reset_config
from repograph.exceptions import RepositoryNotFoundError
from repograph.models.source import TreeItemKind
from repograph.services.local_source import GitIgnoreRules, LocalRepositorySource


@pytest.fixture(autouse=True)
def reset_config_fixture():
    """Reset config before and after each test."""
    reset_config()
    yield
    reset_config()


@pytest.fixture
def repo(tmp_path):
    """A small checkout with files that should and should not be listed."""
    (tmp_path / "src" / "services").mkdir(parents=True)
    (tmp_path / "src" / "index.ts").write_text("import { a } from './services/a'\n")
    (tmp_path / "src" / "services" / "a.ts").write_text("export function a() {}\n")
    (tmp_path / "node_modules" / "react").mkdir(parents=True)
    (tmp_path / "node_modules" / "react" / "index.js").write_text("module.exports = {}\n")
    (tmp_path / ".git").mkdir()
    (tmp_path / ".git" / "HEAD").write_text("ref: refs/heads/main\n")
    (tmp_path / ".env").write_text("SECRET=1\n")
    (tmp_path / "logs").mkdir()
    (tmp_path / "logs" / "app.log").write_text("line\n")
    (tmp_path / "debug.log").write_text("line\n")
    (tmp_path / "keep.log").write_text("line\n")
    (tmp_path / ".gitignore").write_text("# build output\nlogs/\n*.log\n!keep.log\n")
    return tmp_path


class TestListTree:
    """Tests for directory listing."""

    def test_listing(self, repo):
        """Test that only visible, non-ignored entries are listed."""
        items = LocalRepositorySource(repo, AnalysisConfig()).list_tree()

        assert [(i.path, i.kind) for i in items] == [
            ("keep.log", TreeItemKind.BLOB),
            ("src", TreeItemKind.TREE),
            ("src/index.ts", TreeItemKind.BLOB),
            ("src/services", TreeItemKind.TREE),
            ("src/services/a.ts", TreeItemKind.BLOB),
        ]

    def test_sizes(self, repo):
        """Test that file sizes are reported."""
        items = {i.path: i for i in LocalRepositorySource(repo, AnalysisConfig()).list_tree()}
        assert items["src/services/a.ts"].size == len("export function a() {}\n")

    def test_custom_ignore_patterns(self, repo):
        """Test configured ignore patterns."""
        config = AnalysisConfig(ignore_patterns=["src/services/**"])
        paths = [i.path for i in LocalRepositorySource(repo, config).list_tree()]

        assert "src/services/a.ts" not in paths
        assert "src/services" not in paths
        assert "node_modules/react/index.js" in paths

    @pytest.mark.asyncio
    async def test_get_tree(self, repo):
        """Test the async source contract."""
        source = LocalRepositorySource(repo, AnalysisConfig())
        assert await source.get_tree("local", repo.name) == source.list_tree()


class TestGitIgnoreRules:
    """Tests for GitIgnoreRules."""

    def test_patterns(self, tmp_path):
        """Test file, directory, anchored and negated patterns."""
        (tmp_path / ".gitignore").write_text("*.pyc\nbuild/\n/docs/generated\n!important.pyc\n")
        rules = GitIgnoreRules(tmp_path)

        assert rules.is_ignored("a/b.pyc")
        assert not rules.is_ignored("important.pyc")
        assert rules.is_ignored("build", is_dir=True)
        assert not rules.is_ignored("build", is_dir=False)
        assert rules.is_ignored("docs/generated")
        assert not rules.is_ignored("src/docs/generated")

    def test_missing_file(self, tmp_path):
        """Test that no .gitignore ignores nothing."""
        assert not GitIgnoreRules(tmp_path).is_ignored("anything.py")


class TestReadFile:
    """Tests for file reading."""

    def test_read(self, repo):
        """Test reading a file below the root."""
        source = LocalRepositorySource(repo, AnalysisConfig())
        assert source.read_file("src/services/a.ts") == "export function a() {}\n"

    @pytest.mark.asyncio
    async def test_unreadable_files_yield_empty(self, repo):
        """Test missing, escaping, oversized and binary files."""
        (repo / "big.ts").write_text("x" * 100)
        (repo / "blob.ts").write_bytes(b"\xff\xfe\x00\x01")
        (repo.parent / "outside.ts").write_text("secret")
        source = LocalRepositorySource(repo, AnalysisConfig(max_file_bytes=50))

        assert source.read_file("missing.ts") == ""
        assert source.read_file("../outside.ts") == ""
        assert source.read_file("big.ts") == ""
        assert source.read_file("blob.ts") == ""
        assert await source.get_file_content("local", repo.name, "src") == ""


class TestMeta:
    """Tests for metadata and construction."""

    @pytest.mark.asyncio
    async def test_meta(self, repo):
        """Test metadata derived from the directory."""
        meta = await LocalRepositorySource(repo, AnalysisConfig()).get_meta()

        assert meta.name == repo.name
        assert meta.default_branch == "local"
        assert meta.language is None

    def test_missing_root(self, tmp_path):
        """Test that a missing directory is rejected."""
        with pytest.raises(RepositoryNotFoundError):
            LocalRepositorySource(tmp_path / "nope")
