"""
Tests for the hierarchical layout engine.

Tests cover:
- Node sizing
- Longest-path ranking, including cycles
- Left-to-right and top-to-bottom placement
- Determinism and input order
- Dangling edges and empty input

Author: RepoGraph Team
"""

import pytest

from repograph.config import LayoutConfig
from repograph.models.graph import EdgeCategory, GraphEdge, GraphNode, NodeKind, NodeRole
from repograph.services.graph_builder import GraphBuilder
from repograph.services.layout import LayoutEngine, layout_graph


def _file(node_id: str, kind: NodeKind = NodeKind.FILE) -> GraphNode:
    return GraphNode(id=node_id, label=node_id.rsplit("/", 1)[-1], kind=kind, role=NodeRole.FILE)


def _edge(source: str, target: str, category: EdgeCategory = EdgeCategory.IMPORT) -> GraphEdge:
    return GraphEdge(source=source, target=target, category=category)


@pytest.fixture
def engine():
    return LayoutEngine(LayoutConfig())


class TestNodeSize:
    """Tests for node sizing."""

    def test_minimum_width(self, engine):
        """Test that short labels get the minimum width."""
        assert engine.node_size(_file("a.ts")) == (160, 55)

    def test_width_grows_with_label(self, engine):
        """Test width = len(label) * char_width + padding for long labels."""
        node = _file("a_really_long_file_name.ts")
        assert engine.node_size(node)[0] == len(node.label) * 9 + 80

    def test_api_height(self, engine):
        """Test that API nodes are taller."""
        assert engine.node_size(_file("route.ts", NodeKind.API))[1] == 70


class TestRanks:
    """Tests for rank computation."""

    def test_longest_path(self, engine):
        """Test that a node sits one rank after its deepest predecessor."""
        nodes = [_file(n) for n in ("a", "b", "c", "d")]
        edges = [_edge("a", "b"), _edge("b", "c"), _edge("a", "c"), _edge("d", "c")]

        ranks = engine.compute_ranks(engine.build_graph(nodes, edges))

        assert ranks == {"a": 0, "b": 1, "c": 2, "d": 0}

    def test_cycle_shares_rank(self, engine):
        """Test that nodes on a cycle share one rank."""
        nodes = [_file(n) for n in ("root", "x", "y")]
        edges = [_edge("root", "x"), _edge("x", "y"), _edge("y", "x")]

        ranks = engine.compute_ranks(engine.build_graph(nodes, edges))

        assert ranks["x"] == ranks["y"] == 1

    def test_self_loops_and_dangling_edges_skipped(self, engine):
        """Test that invalid edges do not enter the layout graph."""
        nodes = [_file("a"), _file("b")]
        graph = engine.build_graph(nodes, [_edge("a", "a"), _edge("a", "ghost"), _edge("a", "b")])

        assert sorted(graph.edges) == [("a", "b")]


class TestLayout:
    """Tests for node placement."""

    @pytest.fixture
    def graph(self):
        builder = GraphBuilder()
        structure = builder.build_structure(["src/index.ts", "src/services/user.ts"])
        contents = {"src/index.ts": "import { getUser } from './services/user'\ngetUser()\n"}
        edges = list(structure.edges) + builder.build_dependency_edges(structure, contents)
        return list(structure.nodes), edges

    def test_left_to_right(self, engine, graph):
        """Test that x grows with rank and the first rank starts at the margin."""
        nodes, edges = graph
        placed = {n.id: n.position for n in engine.layout(nodes, edges)}

        assert placed["src"].x == 40 and placed["src"].y == 40
        assert placed["src/index.ts"].x == placed["src/services"].x == 400
        assert placed["src/services/user.ts"].x == 760

    def test_same_rank_nodes_stacked(self, engine, graph):
        """Test vertical spacing inside one rank."""
        nodes, edges = graph
        placed = {n.id: n.position for n in engine.layout(nodes, edges)}

        ys = sorted([placed["src/index.ts"].y, placed["src/services"].y])
        assert ys == [40, 40 + 55 + 60]

    def test_top_to_bottom(self, graph):
        """Test that TB swaps the rank axis."""
        nodes, edges = graph
        placed = {n.id: n.position for n in LayoutEngine(LayoutConfig(rank_direction="TB")).layout(nodes, edges)}

        assert placed["src"].y == 40
        assert placed["src/index.ts"].y == placed["src/services"].y > placed["src"].y
        assert placed["src/services/user.ts"].y > placed["src/index.ts"].y

    def test_output_order_and_immutability(self, engine, graph):
        """Test that output keeps input order and inputs are unchanged."""
        nodes, edges = graph
        placed = engine.layout(nodes, edges)

        assert [n.id for n in placed] == [n.id for n in nodes]
        assert all(n.position.x == 0 and n.position.y == 0 for n in nodes)

    def test_deterministic(self, engine, graph):
        """Test that identical input yields identical positions."""
        nodes, edges = graph
        assert engine.layout(nodes, edges) == engine.layout(nodes, edges)

    def test_barycentre_ordering(self, engine):
        """Test that children follow the order of their parents."""
        nodes = [_file(n) for n in ("p1", "p2", "c2", "c1")]
        edges = [_edge("p1", "c1"), _edge("p2", "c2")]

        placed = {n.id: n.position for n in engine.layout(nodes, edges)}

        assert placed["p1"].y < placed["p2"].y
        assert placed["c1"].y < placed["c2"].y

    def test_dangling_edges_ignored(self, engine):
        """Test that edges to unknown ids do not break layout."""
        placed = engine.layout([_file("a")], [_edge("a", "missing")])
        assert placed[0].position.x == 40

    def test_empty(self, engine):
        """Test empty input."""
        assert engine.layout([], []) == []
        assert layout_graph([], []) == []
