"""Graph Builder Service.

Builds the repository graph in two independent phases:

**Level 1 (structure)**: from the tree listing, one folder node per implied
ancestor directory, one file node per blob, and a ``tree`` edge from every
node to its parent. File nodes get a path-only role guess.

**Level 2 (dependencies)**: for every fetched file, relative imports are
resolved against the node-id set and become ``import`` edges, or ``call``
edges when the call tracer saw symbols being called. The same pass yields a
``NodeEnrichment`` per file (content-aware role, imports, exports, external
APIs, HTTP methods, call traces) which ``merge_enrichment`` lays over the
structural nodes without mutating them.

Example:
    >>> builder = GraphBuilder()
    >>> structure = builder.build_structure(["src/index.ts", "src/services/user.ts"])
    >>> sorted(structure.node_ids)
    ['src', 'src/index.ts', 'src/services', 'src/services/user.ts']
"""

from collections.abc import Iterable, Mapping, Sequence
from typing import Optional, Union

from ..constants import EXTENSION_TO_LANGUAGE, IMPORT_RESOLUTION_SUFFIXES
from ..logging import get_logger
from ..models.graph import (
    CallTrace,
    EdgeCategory,
    GraphEdge,
    GraphNode,
    NodeEnrichment,
    NodeKind,
    NodeRole,
    StructuralGraph,
)
from ..models.source import TreeItem
from ..parsers import ExtractorSet
from .role_classifier import classify_role

logger = get_logger(__name__)

PathEntry = Union[TreeItem, str]


def language_for_path(path: str) -> str:
    """Display language of a file from its extension."""
    name = path.rsplit("/", 1)[-1]
    ext = name.rsplit(".", 1)[-1].lower() if "." in name else name.lower()
    return EXTENSION_TO_LANGUAGE.get(ext, ext.upper())


def resolve_import_target(
    import_path: str,
    node_ids: Iterable[str],
    file_ids: Optional[set[str]] = None,
) -> Optional[str]:
    """Find the node an extension-less import path refers to.

    Candidates are tried in IMPORT_RESOLUTION_SUFFIXES order (bare path,
    ``.ts/.tsx/.js/.jsx``, ``/index.*``, ``.py``) and the first existing
    node id wins.

    Args:
        import_path: Resolved, repository-relative import path
        node_ids: Existing node ids
        file_ids: Optional subset of ids that are files; when given, a bare
                  path only matches a file node, never a folder

    Returns:
        The matching node id, or None when the import is unresolved
    """
    ids = node_ids if isinstance(node_ids, (set, frozenset)) else set(node_ids)
    for suffix in IMPORT_RESOLUTION_SUFFIXES:
        candidate = f"{import_path}{suffix}"
        if candidate not in ids:
            continue
        if file_ids is not None and candidate not in file_ids:
            continue
        return candidate
    return None


class GraphBuilder:
    """Composes the structural graph and its dependency overlay."""

    def __init__(self, extractors: Optional[ExtractorSet] = None):
        self.extractors = extractors or ExtractorSet()

    # ------------------------------------------------------------------
    # Level 1
    # ------------------------------------------------------------------

    def build_structure(self, entries: Sequence[PathEntry]) -> StructuralGraph:
        """Build folder/file nodes and tree edges from a path listing.

        Args:
            entries: TreeItems, or bare path strings treated as files

        Returns:
            StructuralGraph with folders (sorted) followed by files
            (listing order)
        """
        items = [entry if isinstance(entry, TreeItem) else TreeItem(path=entry) for entry in entries]

        folders: set[str] = set()
        for item in items:
            parts = [part for part in item.path.split("/") if part]
            for i in range(1, len(parts)):
                folders.add("/".join(parts[:i]))

        nodes: list[GraphNode] = []
        edges: list[GraphEdge] = []

        for folder in sorted(folders):
            nodes.append(GraphNode(
                id=folder,
                label=folder.rsplit("/", 1)[-1],
                kind=NodeKind.FOLDER,
                role=NodeRole.FOLDER,
            ))
            self._add_tree_edge(edges, folder, folders)

        seen_files: set[str] = set()
        for item in items:
            path = "/".join(part for part in item.path.split("/") if part)
            if not item.is_file or not path or path in folders or path in seen_files:
                continue
            seen_files.add(path)

            role = classify_role(path)
            nodes.append(GraphNode(
                id=path,
                label=path.rsplit("/", 1)[-1],
                kind=NodeKind.API if role.is_endpoint else NodeKind.FILE,
                role=role,
                language=language_for_path(path),
                size=item.size,
            ))
            self._add_tree_edge(edges, path, folders)

        return StructuralGraph(nodes=tuple(nodes), edges=tuple(edges))

    @staticmethod
    def _add_tree_edge(edges: list[GraphEdge], node_id: str, folders: set[str]) -> None:
        if "/" not in node_id:
            return
        parent = node_id.rsplit("/", 1)[0]
        if parent in folders:
            edges.append(GraphEdge(source=parent, target=node_id, category=EdgeCategory.TREE))

    # ------------------------------------------------------------------
    # Level 2
    # ------------------------------------------------------------------

    def resolve_imports(self, structure: StructuralGraph, file_path: str, content: str) -> tuple[str, ...]:
        """Resolve a file's relative imports to existing file node ids."""
        node_ids = structure.node_ids
        file_ids = {node.id for node in structure.nodes if node.kind is not NodeKind.FOLDER}

        targets = []
        for import_path in self.extractors.imports.extract(content, file_path):
            target = resolve_import_target(import_path, node_ids, file_ids)
            if target is not None and target != file_path and target not in targets:
                targets.append(target)
        return tuple(targets)

    def build_dependency_edges(
        self,
        structure: StructuralGraph,
        contents: Mapping[str, str],
    ) -> list[GraphEdge]:
        """Create import/call edges for every fetched file.

        Unresolved imports and self references produce no edge.
        """
        edges: list[GraphEdge] = []
        node_ids = structure.node_ids

        for file_path in sorted(contents):
            content = contents[file_path]
            if not content or file_path not in node_ids:
                continue

            targets = self.resolve_imports(structure, file_path, content)
            traces = {
                trace.target: trace.functions
                for trace in self.extractors.call_tracer.trace(content, file_path, targets)
            }

            for target in targets:
                functions = traces.get(target, ())
                if functions:
                    edges.append(GraphEdge(
                        source=file_path,
                        target=target,
                        category=EdgeCategory.CALL,
                        label=f"calls {', '.join(functions[:2])}",
                        functions=functions,
                    ))
                else:
                    edges.append(GraphEdge(
                        source=file_path,
                        target=target,
                        category=EdgeCategory.IMPORT,
                        label="imports",
                    ))

        logger.debug("Dependency edges built", extra={"edges": len(edges), "files": len(contents)})
        return edges

    def build_enrichment(
        self,
        structure: StructuralGraph,
        contents: Mapping[str, str],
    ) -> dict[str, NodeEnrichment]:
        """Derive content-aware attributes for every fetched file node."""
        overlay: dict[str, NodeEnrichment] = {}

        for node in structure.nodes:
            if node.kind is NodeKind.FOLDER:
                continue
            content = contents.get(node.id)
            if not content:
                continue

            role = classify_role(node.id, content)
            targets = self.resolve_imports(structure, node.id, content)
            call_traces: tuple[CallTrace, ...] = self.extractors.call_tracer.trace(content, node.id, targets)

            overlay[node.id] = NodeEnrichment(
                role=role,
                kind=NodeKind.API if role.is_endpoint else NodeKind.FILE,
                imports=self.extractors.imports.extract(content, node.id),
                exports=self.extractors.exports.extract(content, node.id),
                external_apis=self.extractors.external_apis.extract(content, node.id),
                api_methods=self.extractors.http_methods.extract(content, node.id) if role.is_endpoint else None,
                call_traces=call_traces,
            )

        return overlay


def merge_enrichment(
    structure: StructuralGraph,
    overlay: Mapping[str, NodeEnrichment],
) -> list[GraphNode]:
    """Lay an enrichment overlay over the structural nodes.

    Enriched attributes replace the Level-1 values; nodes without an
    overlay entry are returned unchanged.
    """
    return [
        overlay[node.id].apply(node) if node.id in overlay else node
        for node in structure.nodes
    ]


def filter_architecture_nodes(
    nodes: Sequence[GraphNode],
    edges: Sequence[GraphEdge],
) -> tuple[list[GraphNode], list[GraphEdge]]:
    """Reduce the graph to the architecturally interesting part.

    Keeps files with an entry/controller/api/service/model role or any
    dependency edge, plus all of their ancestor folders. Edges touching a
    dropped node are dropped too.
    """
    important_roles = {NodeRole.ENTRY, NodeRole.CONTROLLER, NodeRole.API, NodeRole.SERVICE, NodeRole.MODEL}

    connected: set[str] = set()
    for edge in edges:
        if edge.category.is_dependency:
            connected.add(edge.source)
            connected.add(edge.target)

    keep: set[str] = set()
    for node in nodes:
        if node.kind is NodeKind.FOLDER:
            continue
        if node.role in important_roles or node.id in connected:
            keep.add(node.id)

    for node_id in list(keep):
        parts = node_id.split("/")
        for i in range(1, len(parts)):
            keep.add("/".join(parts[:i]))

    kept_nodes = [node for node in nodes if node.id in keep]
    kept_edges = [edge for edge in edges if edge.source in keep and edge.target in keep]
    return kept_nodes, kept_edges
