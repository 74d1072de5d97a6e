"""Mermaid Diagram Generator.

Renders the analyzed repository graph as Mermaid text:

1. Architecture diagrams (``graph TD``): every node taking part in an
   import/call edge, styled by role, with labeled dependency edges
2. Sequence diagrams (``sequenceDiagram``): an illustrative request flow per
   API endpoint, synthesized from its direct dependencies. It reads as a
   plausible call sequence given the static import graph, not a captured trace
3. ER diagrams (``erDiagram``): parsed schema entities and the relations
   whose field type names another entity exactly

Degenerate input (no dependency edges, no entities) renders as an empty
string. Identifiers are reduced to ``[A-Za-z0-9_]`` with leading and
trailing underscores stripped.

Example Usage:
    generator = DiagramGenerator()
    flow = generator.architecture(nodes, edges)
    erd = generator.erd(entities)

    # As an MCP tool, analyzing the repository first
    result = await generate_diagram("vercel/next.js", diagram_type="sequence")

Author: RepoGraph Team
"""

import re
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Optional

from ..config import DiagramConfig, get_config
from ..constants import (
    DEFAULT_EDGE_LABEL,
    DEFAULT_REQUEST_LABEL,
    DEFAULT_SERVICE_CALL,
    ROLE_CLASS_DEFS,
    DiagramType,
)
from ..logging import get_logger
from ..models.graph import GraphEdge, GraphNode, NodeKind, NodeRole
from ..models.schema import SchemaEntity
from ..services.cache import AnalysisCaches
from ..services.github_client import parse_github_url

logger = get_logger(__name__)


def sanitize_id(name: str, fallback: str = "node") -> str:
    """Reduce a path or name to a Mermaid-safe identifier."""
    sanitized = re.sub(r"[^a-zA-Z0-9_]", "_", name or "").strip("_")
    return sanitized or fallback


def _escape_label(label: str) -> str:
    return label.replace('"', "#quot;")


@dataclass
class DiagramResult:
    """Result of rendering one diagram."""
    diagram_type: DiagramType
    content: str
    title: str
    endpoint: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "diagram_type": self.diagram_type.value,
            "format": "mermaid",
            "title": self.title,
            "endpoint": self.endpoint,
            "content": self.content,
            "empty": not self.content,
        }


class DiagramGenerator:
    """Generates Mermaid diagrams from the analyzed graph and schema."""

    def __init__(self, config: Optional[DiagramConfig] = None):
        self.config = config or get_config().diagram

    # ------------------------------------------------------------------
    # Architecture
    # ------------------------------------------------------------------

    def architecture(self, nodes: Sequence[GraphNode], edges: Sequence[GraphEdge]) -> str:
        """Flowchart of the nodes that take part in a dependency edge."""
        dependency_edges = [edge for edge in edges if edge.category.is_dependency]
        if not dependency_edges:
            return ""

        connected: set[str] = set()
        for edge in dependency_edges:
            connected.add(edge.source)
            connected.add(edge.target)

        lines = ["graph TD"]
        for role, style in ROLE_CLASS_DEFS.items():
            lines.append(f"    classDef {role} {style}")

        for node in nodes:
            if node.id not in connected:
                continue
            style = f":::{node.role.value}" if node.role.value in ROLE_CLASS_DEFS else ""
            lines.append(f'    {sanitize_id(node.id)}["{_escape_label(node.label)}"]{style}')

        for edge in dependency_edges:
            label = _escape_label(edge.label or DEFAULT_EDGE_LABEL)
            lines.append(f'    {sanitize_id(edge.source)} -->|"{label}"| {sanitize_id(edge.target)}')

        return "\n".join(lines) + "\n"

    # ------------------------------------------------------------------
    # Sequence
    # ------------------------------------------------------------------

    def sequence(
        self,
        endpoint: GraphNode,
        nodes: Sequence[GraphNode],
        edges: Sequence[GraphEdge],
    ) -> str:
        """Synthetic request flow for one API endpoint.

        Participants are the client, the endpoint, up to
        ``max_sequence_services`` service/util dependencies and up to
        ``max_sequence_models`` model dependencies. Every service call
        wraps a query/data round-trip to each included model.
        """
        by_id = {node.id: node for node in nodes}
        dependencies: list[GraphNode] = []
        for edge in edges:
            if edge.source != endpoint.id or not edge.category.is_dependency:
                continue
            target = by_id.get(edge.target)
            if target is not None and target not in dependencies:
                dependencies.append(target)

        services = [n for n in dependencies if n.role in (NodeRole.SERVICE, NodeRole.UTIL)]
        services = services[: self.config.max_sequence_services]
        models = [n for n in dependencies if n.role is NodeRole.MODEL][: self.config.max_sequence_models]

        ep = sanitize_id(endpoint.id)
        methods = ", ".join(endpoint.api_methods or ()) or DEFAULT_REQUEST_LABEL

        lines = ["sequenceDiagram", "    participant Client"]
        lines.append(f"    participant {ep} as {endpoint.label}")
        for node in services + models:
            lines.append(f"    participant {sanitize_id(node.id)} as {node.label}")

        lines.append(f"    Client->>+{ep}: {methods} Request")

        for service in services:
            svc = sanitize_id(service.id)
            functions = endpoint.functions_called_on(service.id)[: self.config.max_traced_functions]
            call = ", ".join(functions) or DEFAULT_SERVICE_CALL
            lines.append(f"    {ep}->>+{svc}: {call}()")

            for model in models:
                mdl = sanitize_id(model.id)
                lines.append(f"    {svc}->>+{mdl}: query")
                lines.append(f"    {mdl}-->>-{svc}: data")

            lines.append(f"    {svc}-->>-{ep}: result")

        lines.append(f"    {ep}-->>-Client: Response")
        return "\n".join(lines) + "\n"

    def logic_flows(self, nodes: Sequence[GraphNode], edges: Sequence[GraphEdge]) -> dict[str, str]:
        """Sequence diagram per API node, keyed by the endpoint path."""
        return {
            node.id: self.sequence(node, nodes, edges)
            for node in nodes
            if node.kind is NodeKind.API
        }

    # ------------------------------------------------------------------
    # ERD
    # ------------------------------------------------------------------

    def erd(self, entities: Sequence[SchemaEntity]) -> str:
        """Entity-relationship diagram for the parsed schema."""
        if not entities:
            return ""

        lines = ["erDiagram"]
        for entity in entities:
            lines.append(f"    {sanitize_id(entity.name, 'entity')} {{")
            for field in entity.fields:
                marker = "PK" if field.is_primary else "FK" if field.is_relation else ""
                line = f"        {sanitize_id(field.type, 'unknown')} {sanitize_id(field.name, 'field')}"
                lines.append(f"{line} {marker}" if marker else line)
            lines.append("    }")

        names = {entity.name for entity in entities}
        for entity in entities:
            for field in entity.fields:
                if field.is_relation and field.type in names:
                    lines.append(
                        f'    {sanitize_id(entity.name, "entity")} ||--o{{ '
                        f'{sanitize_id(field.type, "entity")} : "{_escape_label(field.name)}"'
                    )

        return "\n".join(lines) + "\n"

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def render(
        self,
        diagram_type: DiagramType,
        nodes: Sequence[GraphNode],
        edges: Sequence[GraphEdge],
        entities: Sequence[SchemaEntity] = (),
        endpoint: Optional[str] = None,
    ) -> DiagramResult:
        """Render a diagram by type.

        For sequence diagrams ``endpoint`` selects the API node; the first
        API node is used when it is omitted.

        Raises:
            ValueError: If ``endpoint`` does not name an API node
        """
        if diagram_type is DiagramType.ARCHITECTURE:
            return DiagramResult(diagram_type, self.architecture(nodes, edges), "Architecture")

        if diagram_type is DiagramType.ERD:
            return DiagramResult(diagram_type, self.erd(entities), "Entity relationships")

        endpoints = [node for node in nodes if node.kind is NodeKind.API]
        if endpoint is not None:
            endpoints = [node for node in endpoints if node.id == endpoint]
            if not endpoints:
                raise ValueError(f"No API endpoint at {endpoint}")
        if not endpoints:
            return DiagramResult(diagram_type, "", "Logic flow")

        selected = endpoints[0]
        return DiagramResult(
            diagram_type,
            self.sequence(selected, nodes, edges),
            f"Logic flow for {selected.id}",
            endpoint=selected.id,
        )


def render_cached(
    diagram_type: DiagramType,
    analysis: dict,
    endpoint: Optional[str] = None,
) -> DiagramResult:
    """Pick a diagram out of a cached ``analyze_repository`` response.

    The response already carries every diagram ``render`` would produce for
    the same graph, so nothing is recomputed.

    Raises:
        ValueError: If ``endpoint`` has no logic flow
    """
    if diagram_type is DiagramType.ARCHITECTURE:
        return DiagramResult(diagram_type, analysis["mermaid"]["flow"], "Architecture")

    if diagram_type is DiagramType.ERD:
        return DiagramResult(diagram_type, analysis["erdDiagram"], "Entity relationships")

    flows = analysis["logicFlows"]
    if endpoint is not None and endpoint not in flows:
        raise ValueError(f"No API endpoint at {endpoint}")
    selected = endpoint if endpoint is not None else next(iter(flows), None)
    if selected is None:
        return DiagramResult(diagram_type, "", "Logic flow")

    return DiagramResult(
        diagram_type,
        flows[selected],
        f"Logic flow for {selected}",
        endpoint=selected,
    )


async def generate_diagram(
    repository: str,
    diagram_type: str = "architecture",
    endpoint: Optional[str] = None,
    local: bool = False,
    caches: Optional[AnalysisCaches] = None,
) -> dict:
    """Analyze a repository and render one Mermaid diagram.

    Args:
        repository: GitHub URL or ``owner/repo``; a directory when ``local``
        diagram_type: One of "architecture", "sequence", "erd"
        endpoint: API node path for sequence diagrams (first endpoint if omitted)
        local: Treat ``repository`` as a local checkout
        caches: Caches for remote fetches; a fresh set when omitted. When
                ``caches.repos`` holds an analysis of ``repository``, the
                diagram is taken from it without re-running the pipeline

    Returns:
        Dictionary with diagram content and metadata, or ``{"error": ...}``

    Example:
        >>> result = await generate_diagram("acme/shop", diagram_type="erd")
    """
    try:
        kind = DiagramType(diagram_type)
    except ValueError:
        return {"error": f"Invalid diagram_type. Valid options: {[t.value for t in DiagramType]}"}

    if not local and caches is not None:
        ref = parse_github_url(repository)
        cached = caches.repos.get(ref.cache_key) if ref is not None else None
        if cached is not None:
            logger.info("Rendering %s diagram from cached analysis of %s", kind.value, ref)
            try:
                result = render_cached(kind, cached, endpoint=endpoint)
            except ValueError as e:
                return {"error": str(e), "endpoints": list(cached["logicFlows"])}
            payload = result.to_dict()
            payload["repository"] = repository
            payload["cached"] = True
            return payload

    from .analyze_repo import run_analysis

    try:
        analysis = await run_analysis(repository, local=local, caches=caches)
    except Exception as e:
        logger.error("Diagram analysis failed for %s: %s", repository, e)
        return {"error": str(e)}

    try:
        result = DiagramGenerator().render(
            kind,
            analysis.nodes,
            analysis.edges,
            analysis.schema_entities,
            endpoint=endpoint,
        )
    except ValueError as e:
        return {"error": str(e), "endpoints": analysis.endpoints}

    payload = result.to_dict()
    payload["repository"] = repository
    return payload
