"""
Data models for RepoGraph.

- **GraphNode / GraphEdge**: the repository graph (folders, files, typed edges)
- **NodeRole / NodeKind / EdgeCategory**: classification enums
- **CallTrace / NodeEnrichment / StructuralGraph**: the two-phase build model
- **SchemaEntity / SchemaField**: normalized schema model
- **TreeItem / RepoMeta / RepoRef / RepositorySource**: source collaborator shapes
"""

from .graph import (
    CallTrace,
    EdgeCategory,
    GraphEdge,
    GraphNode,
    NodeEnrichment,
    NodeKind,
    NodeRole,
    Position,
    StructuralGraph,
)
from .schema import SchemaEntity, SchemaField
from .source import RepoMeta, RepoRef, RepositorySource, TreeItem, TreeItemKind

__all__ = [
    "CallTrace",
    "EdgeCategory",
    "GraphEdge",
    "GraphNode",
    "NodeEnrichment",
    "NodeKind",
    "NodeRole",
    "Position",
    "StructuralGraph",
    "SchemaEntity",
    "SchemaField",
    "RepoMeta",
    "RepoRef",
    "RepositorySource",
    "TreeItem",
    "TreeItemKind",
]
