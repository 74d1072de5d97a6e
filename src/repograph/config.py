"""
Configuration Module for RepoGraph.

The configuration follows a hierarchical structure:
    - AnalysisConfig: Which files are fetched and parsed, and how
    - LayoutConfig: Node sizing and spacing for the hierarchical layout
    - CacheConfig: Entry limits and expiry for the result caches
    - SchemaConfig: How schema files are combined into one model
    - DiagramConfig: Participant limits for sequence diagrams
    - GitHubConfig: Source collaborator settings
    - Config: Main configuration aggregating all sub-configs

Example Usage:
    >>> from repograph.config import get_config, set_config, Config
    >>> config = Config(schemas=SchemaConfig(merge_schema_files=True))
    >>> set_config(config)
    >>> current_config = get_config()

Author: RepoGraph Team
"""

import fnmatch
import os
from typing import Optional

from pydantic import BaseModel, Field

from .constants import DEFAULT_PARSEABLE_EXTENSIONS


class AnalysisConfig(BaseModel):
    """
    Configuration for file selection and content retrieval.

    Attributes:
        parseable_extensions: Extensions whose content is fetched and parsed
        max_parsed_files: Upper bound on fetched source files per analysis
        fetch_batch_size: Concurrent content requests per batch
        max_schema_files: Upper bound on schema files fetched per analysis
        max_file_bytes: Files larger than this are skipped by local sources
        ignore_patterns: Glob patterns skipped when walking a local checkout
    """

    parseable_extensions: list[str] = Field(
        default_factory=lambda: list(DEFAULT_PARSEABLE_EXTENSIONS),
        description="File extensions (without dot) to fetch and parse",
    )
    max_parsed_files: int = Field(default=60, ge=0, description="Maximum files to parse")
    fetch_batch_size: int = Field(default=10, ge=1, description="Concurrent fetches per batch")
    max_schema_files: int = Field(default=10, ge=0, description="Maximum schema files to fetch")
    max_file_bytes: int = Field(default=500_000, ge=1, description="Maximum local file size")

    ignore_patterns: list[str] = Field(
        default=[
            "node_modules/**",
            "**/node_modules/**",
            "**/__pycache__/**",
            "**/dist/**",
            "dist/**",
            "**/build/**",
            "build/**",
            "**/target/**",
            "**/*.min.js",
            "**/vendor/**",
            "**/.venv/**",
            "**/venv/**",
            "venv/**",
        ],
        description="Glob patterns to ignore when walking a local repository",
    )

    def is_parseable(self, path: str) -> bool:
        """Check whether a path has one of the parseable extensions."""
        name = path.rsplit("/", 1)[-1]
        if "." not in name:
            return False
        return name.rsplit(".", 1)[-1].lower() in self.parseable_extensions

    def is_ignored(self, path: str) -> bool:
        """Check whether a repository-relative path matches an ignore pattern."""
        return any(fnmatch.fnmatch(path, pattern) for pattern in self.ignore_patterns)


class LayoutConfig(BaseModel):
    """Configuration for the left-to-right hierarchical layout."""

    rank_direction: str = Field(default="LR", description="LR (left-to-right) or TB (top-to-bottom)")
    node_separation: int = Field(default=60, description="Spacing between nodes in one rank")
    rank_separation: int = Field(default=200, description="Spacing between ranks")
    margin_x: int = Field(default=40)
    margin_y: int = Field(default=40)

    # Node sizing: width = max(min_node_width, len(label) * char_width + label_padding)
    min_node_width: int = Field(default=160)
    char_width: int = Field(default=9)
    label_padding: int = Field(default=80)
    file_node_height: int = Field(default=55)
    api_node_height: int = Field(default=70)


class CacheConfig(BaseModel):
    """Entry limits and time-to-live (seconds) for each cache."""

    repo_max_entries: int = Field(default=50, ge=1)
    repo_ttl_seconds: int = Field(default=600, ge=1)
    file_max_entries: int = Field(default=500, ge=1)
    file_ttl_seconds: int = Field(default=900, ge=1)
    summary_max_entries: int = Field(default=200, ge=1)
    summary_ttl_seconds: int = Field(default=1800, ge=1)
    tree_max_entries: int = Field(default=50, ge=1)
    tree_ttl_seconds: int = Field(default=600, ge=1)


class SchemaConfig(BaseModel):
    """Configuration for schema extraction."""

    merge_schema_files: bool = Field(
        default=False,
        description=(
            "Merge entities from every schema file instead of using the "
            "first file that yields at least one entity"
        ),
    )


class DiagramConfig(BaseModel):
    """Limits applied when synthesizing per-endpoint sequence diagrams."""

    max_sequence_services: int = Field(default=3, ge=0)
    max_sequence_models: int = Field(default=2, ge=0)
    max_traced_functions: int = Field(default=2, ge=1)


class GitHubConfig(BaseModel):
    """Configuration for the GitHub source collaborator."""

    api_url: str = Field(default="https://api.github.com")
    token: Optional[str] = Field(
        default_factory=lambda: os.environ.get("GITHUB_TOKEN") or None,
        description="Personal access token (defaults to GITHUB_TOKEN)",
    )
    timeout_seconds: float = Field(default=30.0, gt=0)
    user_agent: str = Field(default="RepoGraph")


class Config(BaseModel):
    """
    Main configuration for RepoGraph.

    Example:
        >>> config = Config(
        ...     analysis=AnalysisConfig(max_parsed_files=200),
        ...     schemas=SchemaConfig(merge_schema_files=True),
        ... )
    """

    analysis: AnalysisConfig = Field(default_factory=AnalysisConfig)
    layout: LayoutConfig = Field(default_factory=LayoutConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)
    schemas: SchemaConfig = Field(default_factory=SchemaConfig)
    diagram: DiagramConfig = Field(default_factory=DiagramConfig)
    github: GitHubConfig = Field(default_factory=GitHubConfig)

    @classmethod
    def load_default(cls) -> "Config":
        """Load default configuration."""
        return cls()


# Global config instance
_config: Optional[Config] = None


def get_config() -> Config:
    """
    Get the global configuration instance.

    Creates a default configuration if none has been set.
    """
    global _config
    if _config is None:
        _config = Config.load_default()
    return _config


def set_config(config: Config) -> None:
    """Set the global configuration instance."""
    global _config
    _config = config


def reset_config() -> None:
    """Reset the global configuration to None."""
    global _config
    _config = None
