"""
Services Layer for RepoGraph.

**Role classifier**:
    Maps a path (and optionally its content) to an architectural role.

**GraphBuilder**:
    Level-1 structural graph, Level-2 dependency edges and the enrichment
    overlay merged onto the structural nodes.

**LayoutEngine**:
    Deterministic layered layout on networkx.

**AnalysisCaches**:
    Bounded, expiring caches for results, file contents, trees and
    summaries (cachetools).

**GitHubSource / LocalRepositorySource**:
    Repository content providers (httpx / filesystem).
"""

from .cache import AnalysisCaches, ResultCache, content_hash
from .github_client import GitHubSource, detect_primary_language, parse_github_url
from .graph_builder import (
    GraphBuilder,
    filter_architecture_nodes,
    language_for_path,
    merge_enrichment,
    resolve_import_target,
)
from .layout import LayoutEngine, layout_graph
from .local_source import LocalRepositorySource
from .role_classifier import classify_role

__all__ = [
    "AnalysisCaches",
    "ResultCache",
    "content_hash",
    "GitHubSource",
    "detect_primary_language",
    "parse_github_url",
    "GraphBuilder",
    "filter_architecture_nodes",
    "language_for_path",
    "merge_enrichment",
    "resolve_import_target",
    "LayoutEngine",
    "layout_graph",
    "LocalRepositorySource",
    "classify_role",
]
