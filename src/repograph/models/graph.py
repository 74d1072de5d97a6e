"""Graph Data Models for Repository Structure.

This module defines the node/edge model produced by the graph builder:

1. **NodeRole**: Architectural role of a file (entry, controller, service, ...)
2. **NodeKind**: Rendered kind of a node (folder, file, api)
3. **EdgeCategory**: tree (parent/child), import, call
4. **GraphNode**: A folder or file keyed by its repository-relative path
5. **GraphEdge**: A typed directed connection between two nodes
6. **CallTrace**: Symbols observed as called on one resolved import target
7. **NodeEnrichment**: Content-derived data overlaid onto a structural node
8. **StructuralGraph**: The immutable Level-1 graph

Nodes and edges are frozen. Later passes never mutate a node in place; they
produce a replacement with ``dataclasses.replace`` so the structural graph
and each overlay can be tested on their own.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Optional


class NodeRole(str, Enum):
    """Architectural role of a node."""
    ENTRY = "entry"
    CONTROLLER = "controller"
    SERVICE = "service"
    MODEL = "model"
    UTIL = "util"
    CONFIG = "config"
    TEST = "test"
    API = "api"
    FILE = "file"
    FOLDER = "folder"

    @property
    def is_endpoint(self) -> bool:
        """API routes and controllers are both rendered as endpoint nodes."""
        return self in (NodeRole.API, NodeRole.CONTROLLER)


class NodeKind(str, Enum):
    """Display kind of a node."""
    FOLDER = "folder"
    FILE = "file"
    API = "api"

    @property
    def render_type(self) -> str:
        """Node component name used by the graph renderer."""
        return f"{self.value}Node"


class EdgeCategory(str, Enum):
    """Category of a graph edge."""
    TREE = "tree"       # structural parent -> child
    IMPORT = "import"   # static import resolved to another node
    CALL = "call"       # import carrying traced function calls

    @property
    def is_dependency(self) -> bool:
        return self is not EdgeCategory.TREE


@dataclass(frozen=True)
class Position:
    """Top-left corner of a laid-out node."""
    x: float = 0.0
    y: float = 0.0

    def to_dict(self) -> dict:
        return {"x": self.x, "y": self.y}


@dataclass(frozen=True)
class CallTrace:
    """Symbols called on a resolved import target.

    Attributes:
        target: Node id of the imported file
        functions: Called symbol names, in order of first appearance
    """
    target: str
    functions: tuple[str, ...] = ()

    def to_dict(self) -> dict:
        return {"target": self.target, "functions": list(self.functions)}


@dataclass(frozen=True)
class GraphNode:
    """A folder or file in the repository graph.

    Identity is the full repository-relative path. Attributes filled by the
    dependency pass stay ``None`` for folders and for files whose content
    was never fetched.
    """
    id: str
    label: str
    kind: NodeKind
    role: NodeRole
    language: Optional[str] = None
    size: Optional[int] = None
    imports: Optional[tuple[str, ...]] = None
    exports: Optional[tuple[str, ...]] = None
    external_apis: Optional[tuple[str, ...]] = None
    api_methods: Optional[tuple[str, ...]] = None
    call_traces: Optional[tuple[CallTrace, ...]] = None
    position: Position = field(default_factory=Position)

    @property
    def path(self) -> str:
        return self.id

    @property
    def parent_id(self) -> Optional[str]:
        """Path of the containing folder, or None at repository root."""
        if "/" not in self.id:
            return None
        return self.id.rsplit("/", 1)[0]

    def functions_called_on(self, target: str) -> tuple[str, ...]:
        """Traced function names this node calls on ``target``."""
        for trace in self.call_traces or ():
            if trace.target == target:
                return trace.functions
        return ()

    def with_position(self, x: float, y: float) -> "GraphNode":
        return replace(self, position=Position(x=x, y=y))

    def to_dict(self) -> dict:
        """Convert to the renderer-facing dictionary shape."""
        data: dict = {
            "label": self.label,
            "path": self.id,
            "type": self.kind.value,
            "role": self.role.value,
        }
        if self.language is not None:
            data["language"] = self.language
        if self.size is not None:
            data["size"] = self.size
        if self.imports is not None:
            data["imports"] = list(self.imports)
        if self.exports is not None:
            data["exports"] = list(self.exports)
        if self.external_apis is not None:
            data["externalApis"] = list(self.external_apis)
        if self.api_methods is not None:
            data["apiMethods"] = list(self.api_methods)
        if self.call_traces is not None:
            data["functionCalls"] = [trace.to_dict() for trace in self.call_traces]

        return {
            "id": self.id,
            "type": self.kind.render_type,
            "position": self.position.to_dict(),
            "data": data,
        }


@dataclass(frozen=True)
class GraphEdge:
    """A directed, typed edge between two node ids."""
    source: str
    target: str
    category: EdgeCategory
    label: Optional[str] = None
    functions: tuple[str, ...] = ()

    @property
    def id(self) -> str:
        return f"{self.category.value}:{self.source}->{self.target}"

    @property
    def animated(self) -> bool:
        return self.category.is_dependency

    def to_dict(self) -> dict:
        result = {
            "id": self.id,
            "source": self.source,
            "target": self.target,
            "animated": self.animated,
            "data": {"type": self.category.value},
        }
        if self.label is not None:
            result["label"] = self.label
            result["data"]["label"] = self.label
        if self.functions:
            result["data"]["functions"] = list(self.functions)
        return result


@dataclass(frozen=True)
class NodeEnrichment:
    """Content-derived attributes for one file node.

    Produced by the dependency pass and merged onto the structural node.
    ``role`` and ``kind`` overwrite the path-only guess from Level 1.
    """
    role: NodeRole
    kind: NodeKind
    imports: tuple[str, ...] = ()
    exports: tuple[str, ...] = ()
    external_apis: tuple[str, ...] = ()
    api_methods: Optional[tuple[str, ...]] = None
    call_traces: tuple[CallTrace, ...] = ()

    def apply(self, node: GraphNode) -> GraphNode:
        return replace(
            node,
            role=self.role,
            kind=self.kind,
            imports=self.imports,
            exports=self.exports,
            external_apis=self.external_apis,
            api_methods=self.api_methods,
            call_traces=self.call_traces,
        )


@dataclass(frozen=True)
class StructuralGraph:
    """Level-1 graph: folders, files and tree edges."""
    nodes: tuple[GraphNode, ...]
    edges: tuple[GraphEdge, ...]

    @property
    def node_ids(self) -> frozenset[str]:
        return frozenset(node.id for node in self.nodes)

    def get(self, node_id: str) -> Optional[GraphNode]:
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None
