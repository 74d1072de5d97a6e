"""
Comprehensive tests for the configuration module.

Tests cover:
- AnalysisConfig defaults, parseable extensions and ignore patterns
- LayoutConfig, CacheConfig, SchemaConfig, DiagramConfig defaults
- GitHubConfig token from the environment
- Validation of bounded fields
- Global config management functions

Author: RepoGraph Team
"""

import pytest
from pydantic import ValidationError

from repograph.config import (
    AnalysisConfig,
    CacheConfig,
    Config,
    DiagramConfig,
    GitHubConfig,
    LayoutConfig,
    SchemaConfig,
    get_config,
    reset_config,
    set_config,
)


@pytest.fixture(autouse=True)
def reset_config_fixture():
    """Reset config before and after each test."""
    reset_config()
    yield
    reset_config()


class TestAnalysisConfig:
    """Tests for AnalysisConfig."""

    def test_default_values(self):
        """Test default configuration values."""
        config = AnalysisConfig()

        assert config.max_parsed_files == 60
        assert config.fetch_batch_size == 10
        assert config.max_schema_files == 10
        assert "ts" in config.parseable_extensions
        assert "py" in config.parseable_extensions

    def test_is_parseable(self):
        """Test extension matching is case-insensitive on the last suffix."""
        config = AnalysisConfig()

        assert config.is_parseable("src/index.ts")
        assert config.is_parseable("src/App.TSX")
        assert not config.is_parseable("README.md")
        assert not config.is_parseable("Makefile")
        assert not config.is_parseable("src.ts/readme")

    def test_custom_extensions(self):
        """Test restricting the parseable set."""
        config = AnalysisConfig(parseable_extensions=["py"])

        assert config.is_parseable("a.py")
        assert not config.is_parseable("a.ts")

    def test_ignore_patterns(self):
        """Test default ignore patterns."""
        config = AnalysisConfig()

        assert config.is_ignored("node_modules/react/index.js")
        assert config.is_ignored("packages/web/node_modules/x.js")
        assert config.is_ignored("dist/bundle.min.js")
        assert not config.is_ignored("src/index.ts")

    def test_batch_size_must_be_positive(self):
        """Test that a zero batch size is rejected."""
        with pytest.raises(ValidationError):
            AnalysisConfig(fetch_batch_size=0)


class TestOtherSections:
    """Tests for the remaining configuration sections."""

    def test_layout_defaults(self):
        """Test layout spacing and sizing defaults."""
        config = LayoutConfig()

        assert config.rank_direction == "LR"
        assert config.node_separation == 60
        assert config.rank_separation == 200
        assert config.min_node_width == 160

    def test_cache_defaults(self):
        """Test cache sizes and expiry."""
        config = CacheConfig()

        assert config.repo_max_entries == 50
        assert config.repo_ttl_seconds == 600
        assert config.file_max_entries == 500

    def test_cache_limits_validated(self):
        """Test that a cache must hold at least one entry."""
        with pytest.raises(ValidationError):
            CacheConfig(repo_max_entries=0)

    def test_schema_defaults(self):
        """Test that schema files are not merged by default."""
        assert SchemaConfig().merge_schema_files is False

    def test_diagram_defaults(self):
        """Test sequence diagram participant limits."""
        config = DiagramConfig()

        assert config.max_sequence_services == 3
        assert config.max_sequence_models == 2

    def test_github_token_from_environment(self, monkeypatch):
        """Test that GITHUB_TOKEN is picked up."""
        monkeypatch.setenv("GITHUB_TOKEN", "ghp_test")
        assert GitHubConfig().token == "ghp_test"

    def test_github_token_absent(self, monkeypatch):
        """Test that an empty GITHUB_TOKEN means no token."""
        monkeypatch.setenv("GITHUB_TOKEN", "")
        assert GitHubConfig().token is None


class TestConfig:
    """Tests for the main Config class."""

    def test_default_config(self):
        """Test default Config has all sections."""
        config = Config()

        assert isinstance(config.analysis, AnalysisConfig)
        assert isinstance(config.layout, LayoutConfig)
        assert isinstance(config.cache, CacheConfig)
        assert isinstance(config.schemas, SchemaConfig)
        assert isinstance(config.diagram, DiagramConfig)
        assert isinstance(config.github, GitHubConfig)

    def test_load_default(self):
        """Test load_default class method."""
        assert Config.load_default().analysis.max_parsed_files == 60


class TestGlobalConfig:
    """Tests for global config management."""

    def test_get_config_creates_default(self):
        """Test get_config creates default if none set."""
        assert isinstance(get_config(), Config)

    def test_get_config_returns_same_instance(self):
        """Test get_config returns same instance."""
        assert get_config() is get_config()

    def test_set_config(self):
        """Test set_config sets global config."""
        custom = Config(schemas=SchemaConfig(merge_schema_files=True))
        set_config(custom)

        assert get_config() is custom

    def test_reset_config(self):
        """Test reset_config clears global config."""
        first = get_config()
        reset_config()

        assert get_config() is not first
