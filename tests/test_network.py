"""
Tests for network construction and graph kinds.
"""

import pytest
import networkx as nx

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from netsig.exceptions import GraphKindError
from netsig.network import (
    GraphKind,
    build_network,
    graph_kind,
    validate_graph,
    project_two_mode,
    max_edges,
    degree_sequence,
    dyad_census,
)


class TestBuildNetwork:
    """Tests for build_network and kind validation."""

    def test_simple_graph(self):
        """Test that a simple graph is tagged and keeps isolates."""
        G = build_network([(0, 1), (1, 2)], nodes=[0, 1, 2, 3])
        assert graph_kind(G) is GraphKind.SIMPLE
        assert G.number_of_nodes() == 4
        assert G.number_of_edges() == 2
        assert not G.is_directed()

    def test_directed_graph(self):
        """Test directed construction."""
        G = build_network([("a", "b"), ("b", "a")], directed=True)
        assert G.is_directed()
        assert G.number_of_edges() == 2

    def test_self_loop_rejected(self):
        """Test that self-loops need loops=True."""
        with pytest.raises(ValueError):
            build_network([(0, 0)])

        G = build_network([(0, 0), (0, 1)], loops=True)
        assert nx.number_of_selfloops(G) == 1
        assert G.graph["loops"] is True

    def test_kind_from_string(self):
        """Test that kinds can be named by value."""
        G = build_network([(0, 1, {"sign": -1})], kind="signed")
        assert graph_kind(G) is GraphKind.SIGNED

    def test_signed_requires_signs(self):
        """Test that signed graphs reject edges without a valid sign."""
        with pytest.raises(GraphKindError):
            build_network([(0, 1, {"sign": 1}), (1, 2)], kind=GraphKind.SIGNED)

        with pytest.raises(GraphKindError):
            build_network([(0, 1, {"sign": 2})], kind=GraphKind.SIGNED)

    def test_bipartite_rejects_same_side_edge(self):
        """Test that edges inside one mode are rejected."""
        with pytest.raises(GraphKindError):
            build_network(
                [("a", "b")],
                kind=GraphKind.BIPARTITE,
                node_modes={"a": 0, "b": 0},
            )

    def test_bipartite_requires_modes(self):
        """Test that every node needs a mode."""
        with pytest.raises(GraphKindError):
            build_network([("a", "e")], kind=GraphKind.BIPARTITE, node_modes={"a": 0})

    def test_two_mode_requires_both_modes(self):
        """Test that a two-mode graph needs nodes in both modes."""
        with pytest.raises(GraphKindError):
            build_network([], kind=GraphKind.TWO_MODE, node_modes={"a": 0, "b": 0})

    def test_kind_error_is_value_error(self):
        """Test that GraphKindError can be caught as ValueError."""
        G = nx.Graph([(0, 1)])
        G.graph["kind"] = GraphKind.SIGNED
        with pytest.raises(ValueError):
            validate_graph(G)

    def test_untagged_graph_is_simple(self):
        """Test that plain networkx graphs count as SIMPLE."""
        assert graph_kind(nx.path_graph(3)) is GraphKind.SIMPLE


class TestTwoModeProjection:
    """Tests for two-mode projection."""

    @pytest.fixture
    def affiliation(self):
        """Actors a, b, c attending events e1, e2."""
        return build_network(
            [("a", "e1"), ("b", "e1"), ("b", "e2"), ("c", "e2"), ("a", "e2")],
            kind=GraphKind.TWO_MODE,
            node_modes={"a": 0, "b": 0, "c": 0, "e1": 1, "e2": 1},
        )

    def test_actor_projection_weights(self, affiliation):
        """Test that weights count shared events."""
        P = project_two_mode(affiliation, mode=0)
        assert set(P.nodes()) == {"a", "b", "c"}
        assert P["a"]["b"]["weight"] == 2
        assert P["a"]["c"]["weight"] == 1
        assert P["b"]["c"]["weight"] == 1
        assert graph_kind(P) is GraphKind.SIMPLE

    def test_event_projection(self, affiliation):
        """Test that events sharing actors are linked."""
        P = project_two_mode(affiliation, mode=1)
        assert set(P.nodes()) == {"e1", "e2"}
        assert P["e1"]["e2"]["weight"] == 2

    def test_projection_needs_two_mode_graph(self):
        """Test that projecting a simple graph fails."""
        with pytest.raises(GraphKindError):
            project_two_mode(build_network([(0, 1)]))

    def test_invalid_mode(self, affiliation):
        """Test that only modes 0 and 1 exist."""
        with pytest.raises(ValueError):
            project_two_mode(affiliation, mode=2)


class TestStructure:
    """Tests for structural summaries."""

    def test_max_edges(self):
        """Test dyad capacities."""
        assert max_edges(73, directed=True) == 5256
        assert max_edges(4, directed=False) == 6
        assert max_edges(4, directed=False, loops=True) == 10
        assert max_edges(0, directed=True) == 0

    def test_degree_sequence_undirected(self):
        """Test degrees in node order."""
        G = nx.star_graph(3)
        assert degree_sequence(G) == [3, 1, 1, 1]

    def test_degree_sequence_directed(self):
        """Test out- and in-degrees of a directed graph."""
        G = nx.DiGraph([(0, 1), (0, 2), (2, 0)])
        out_deg, in_deg = degree_sequence(G)
        assert out_deg == [2, 0, 1]
        assert in_deg == [1, 1, 1]

    def test_dyad_census(self):
        """Test mutual, asymmetric and null counts."""
        G = nx.DiGraph([(0, 1), (1, 0), (1, 2)])
        G.add_node(3)
        census = dyad_census(G)
        assert census == (1, 1, 4)
        assert sum(census) == 4 * 3 // 2

    def test_dyad_census_ignores_self_loops(self):
        """Test that self-loops are not dyads."""
        G = nx.DiGraph([(0, 1), (0, 0)])
        assert dyad_census(G) == (0, 1, 0)

    def test_dyad_census_needs_directed_graph(self):
        """Test that undirected graphs are rejected."""
        with pytest.raises(GraphKindError):
            dyad_census(nx.path_graph(3))
