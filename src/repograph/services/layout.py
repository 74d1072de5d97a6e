"""Hierarchical Layout Engine.

Positions graph nodes in ranks along the configured direction (left to
right by default):

1. Build a ``networkx.DiGraph`` from the node set and every edge whose ends
   both exist.
2. Collapse cycles with ``nx.condensation`` and rank each component by the
   longest path from a source component.
3. Order each rank once by the barycentre of its predecessors in earlier
   ranks, falling back to input order.
4. Place ranks ``rank_separation`` apart and nodes within a rank
   ``node_separation`` apart, starting at the margins.

Every step is deterministic, so identical input yields identical positions.
Positions are the top-left corner of each node.
"""

from collections.abc import Sequence
from typing import Optional

import networkx as nx

from ..config import LayoutConfig, get_config
from ..logging import get_logger
from ..models.graph import GraphEdge, GraphNode, NodeKind

logger = get_logger(__name__)


class LayoutEngine:
    """Layered layout over a directed graph."""

    def __init__(self, config: Optional[LayoutConfig] = None):
        self.config = config or get_config().layout

    def node_size(self, node: GraphNode) -> tuple[int, int]:
        """Width and height of a rendered node."""
        width = max(
            self.config.min_node_width,
            len(node.label) * self.config.char_width + self.config.label_padding,
        )
        height = self.config.api_node_height if node.kind is NodeKind.API else self.config.file_node_height
        return width, height

    def build_graph(self, nodes: Sequence[GraphNode], edges: Sequence[GraphEdge]) -> nx.DiGraph:
        """Directed graph over node ids; self loops and dangling edges are skipped."""
        graph = nx.DiGraph()
        graph.add_nodes_from(node.id for node in nodes)
        for edge in edges:
            if edge.source != edge.target and edge.source in graph and edge.target in graph:
                graph.add_edge(edge.source, edge.target)
        return graph

    def compute_ranks(self, graph: nx.DiGraph) -> dict[str, int]:
        """Rank of every node: length of the longest path reaching it."""
        condensed = nx.condensation(graph)
        mapping = condensed.graph["mapping"]

        component_rank: dict[int, int] = {}
        for component in nx.topological_sort(condensed):
            predecessors = list(condensed.predecessors(component))
            component_rank[component] = (
                max(component_rank[p] for p in predecessors) + 1 if predecessors else 0
            )

        return {node_id: component_rank[mapping[node_id]] for node_id in graph.nodes}

    def order_ranks(
        self,
        nodes: Sequence[GraphNode],
        graph: nx.DiGraph,
        ranks: dict[str, int],
    ) -> list[list[str]]:
        """Group node ids by rank and apply one barycentre ordering pass."""
        layers: list[list[str]] = [[] for _ in range(max(ranks.values(), default=-1) + 1)]
        for node in nodes:
            layers[ranks[node.id]].append(node.id)

        position_in_layer: dict[str, int] = {}
        for rank, layer in enumerate(layers):
            if rank > 0:
                keys = {}
                for i, node_id in enumerate(layer):
                    placed = [
                        position_in_layer[p] for p in graph.predecessors(node_id)
                        if p in position_in_layer and ranks[p] < rank
                    ]
                    centre = sum(placed) / len(placed) if placed else float(i)
                    keys[node_id] = (centre, i)
                layer.sort(key=keys.__getitem__)
            for i, node_id in enumerate(layer):
                position_in_layer[node_id] = i

        return layers

    def layout(self, nodes: Sequence[GraphNode], edges: Sequence[GraphEdge]) -> list[GraphNode]:
        """Return copies of ``nodes`` with positions assigned.

        Args:
            nodes: Nodes to place; output keeps this order
            edges: Edges of any category; edges to unknown ids are ignored

        Returns:
            New GraphNode instances carrying their positions
        """
        if not nodes:
            return []

        graph = self.build_graph(nodes, edges)
        ranks = self.compute_ranks(graph)
        layers = self.order_ranks(nodes, graph, ranks)
        sizes = {node.id: self.node_size(node) for node in nodes}
        horizontal = self.config.rank_direction.upper() != "TB"

        coordinates: dict[str, tuple[float, float]] = {}
        rank_offset = float(self.config.margin_x if horizontal else self.config.margin_y)

        for layer in layers:
            if not layer:
                continue
            # Along the rank axis a layer is as deep as its largest node
            depth = max(sizes[n][0] if horizontal else sizes[n][1] for n in layer)
            cross_offset = float(self.config.margin_y if horizontal else self.config.margin_x)

            for node_id in layer:
                width, height = sizes[node_id]
                if horizontal:
                    coordinates[node_id] = (rank_offset, cross_offset)
                    cross_offset += height + self.config.node_separation
                else:
                    coordinates[node_id] = (cross_offset, rank_offset)
                    cross_offset += width + self.config.node_separation

            rank_offset += depth + self.config.rank_separation

        logger.debug("Layout computed", extra={"nodes": len(nodes), "ranks": len(layers)})
        return [node.with_position(*coordinates[node.id]) for node in nodes]


def layout_graph(
    nodes: Sequence[GraphNode],
    edges: Sequence[GraphEdge],
    config: Optional[LayoutConfig] = None,
) -> list[GraphNode]:
    """Lay out ``nodes`` with a fresh LayoutEngine."""
    return LayoutEngine(config).layout(nodes, edges)
