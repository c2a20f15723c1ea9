"""
Tests for metrics module.

Tests for the statistic registry, individual statistics and network
descriptions.
"""

import math

import pytest
import networkx as nx
import numpy as np

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from netsig.metrics import (
    STATISTICS,
    UnconnectedPairs,
    get_statistic,
    evaluate_statistic,
    mutual_dyads,
    asymmetric_dyads,
    reciprocity,
    transitivity,
    triangle_count,
    degree_centralization,
    betweenness_centralization,
    closeness_centralization,
    eigenvector_centralization,
    average_geodesic_distance,
    partition_modularity,
    assortativity,
    balanced_triangle_fraction,
    core_periphery_fit,
    compute_component_stats,
    compute_distance_stats,
    describe_network,
)
from netsig.exceptions import GraphKindError
from netsig.network import GraphKind, build_network


class TestDyadStatistics:
    """Tests for dyad-level statistics."""

    def test_mutual_and_asymmetric(self):
        """Test reciprocated and one-way dyads."""
        G = nx.DiGraph([(0, 1), (1, 0), (1, 2), (2, 3)])
        assert mutual_dyads(G) == 1.0
        assert asymmetric_dyads(G) == 2.0

    def test_reciprocity(self):
        """Test the share of reciprocated arcs."""
        G = nx.DiGraph([(0, 1), (1, 0), (1, 2), (2, 3)])
        assert reciprocity(G) == pytest.approx(0.5)

    def test_reciprocity_empty_graph(self):
        """Test that reciprocity of a graph without arcs is NaN."""
        G = nx.DiGraph()
        G.add_nodes_from(range(3))
        assert math.isnan(reciprocity(G))


class TestClustering:
    """Tests for clustering statistics."""

    def test_triangle(self):
        """Test a single triangle."""
        G = nx.complete_graph(3)
        assert transitivity(G) == 1.0
        assert triangle_count(G) == 1.0

    def test_directed_read_as_undirected(self):
        """Test that arc direction is ignored."""
        G = nx.DiGraph([(0, 1), (1, 2), (2, 0)])
        assert triangle_count(G) == 1.0

    def test_tree_has_no_triangles(self):
        """Test a star graph."""
        assert transitivity(nx.star_graph(4)) == 0.0


class TestCentralization:
    """Tests for degree centralization."""

    def test_star_is_maximal(self):
        """Test that a star has centralization 1."""
        assert degree_centralization(nx.star_graph(5)) == pytest.approx(1.0)

    def test_regular_graph_is_zero(self):
        """Test that a regular graph has centralization 0."""
        assert degree_centralization(nx.cycle_graph(6)) == 0.0

    def test_directed_out_star(self):
        """Test out-degree centralization of a directed star."""
        G = nx.DiGraph([(0, i) for i in range(1, 5)])
        assert degree_centralization(G, mode="out") == pytest.approx(1.0)

    def test_unknown_mode(self):
        """Test that unknown modes are rejected."""
        with pytest.raises(ValueError):
            degree_centralization(nx.DiGraph([(0, 1), (1, 2)]), mode="both")

    @pytest.mark.parametrize(
        "centralization", [betweenness_centralization, closeness_centralization]
    )
    def test_path_based_star_is_maximal(self, centralization):
        """Test that a star maximizes betweenness and closeness centralization."""
        assert centralization(nx.star_graph(6)) == pytest.approx(1.0)

    @pytest.mark.parametrize(
        "centralization",
        [betweenness_centralization, closeness_centralization, eigenvector_centralization],
    )
    def test_complete_graph_is_zero(self, centralization):
        """Test that every node of a complete graph is equally central."""
        assert centralization(nx.complete_graph(6)) == pytest.approx(0.0, abs=1e-6)

    def test_eigenvector_star(self):
        """Test eigenvector centralization of a star against its closed form."""
        # Leaves score 1/sqrt(n - 1) of the center; n = 5
        assert eigenvector_centralization(nx.star_graph(4)) == pytest.approx(2 / 3, rel=1e-6)

    def test_eigenvector_without_edges(self):
        """Test that an edgeless graph has no eigenvector centralization."""
        assert eigenvector_centralization(nx.empty_graph(5)) == 0.0

    def test_star_beats_path(self):
        """Test that a path is less centralized than a star of the same size."""
        assert betweenness_centralization(nx.path_graph(7)) < betweenness_centralization(nx.star_graph(6))


class TestCorePeriphery:
    """Tests for the core-periphery fit."""

    def test_ideal_pattern(self):
        """Test that a clique with pendant nodes fits perfectly."""
        G = nx.complete_graph(4)
        G.add_edges_from([(0, 4), (1, 5), (2, 6)])
        assert core_periphery_fit(G) == pytest.approx(1.0)

    def test_inverted_pattern(self):
        """Test that a dense periphery around an empty core fits negatively."""
        G = nx.complete_graph([2, 3, 4])
        G.add_edges_from([(0, 2), (1, 3)])
        assert core_periphery_fit(G, core=[0, 1]) == pytest.approx(-1.0)

    def test_directed_counts_ordered_pairs(self):
        """Test that a fully reciprocated core in a directed graph fits perfectly."""
        G = nx.DiGraph(nx.complete_graph(3))
        G.add_edges_from([(3, 0), (4, 1)])
        assert core_periphery_fit(G, core=[0, 1, 2]) == pytest.approx(1.0)

    def test_undefined_without_ties(self):
        """Test that an edgeless graph has no defined fit."""
        assert math.isnan(core_periphery_fit(nx.empty_graph(4)))

    def test_registered(self):
        """Test that the fit and the centralizations are in the registry."""
        for name in [
            "core_periphery",
            "betweenness_centralization",
            "closeness_centralization",
            "eigenvector_centralization",
        ]:
            assert name in STATISTICS


class TestGeodesicDistance:
    """Tests for mean geodesic distance on disconnected graphs."""

    @pytest.fixture
    def two_components(self):
        """A path of three nodes plus a separate edge."""
        return nx.Graph([(0, 1), (1, 2), (3, 4)])

    def test_exclude(self, two_components):
        """Test that unconnected pairs can be excluded."""
        assert average_geodesic_distance(two_components, "exclude") == pytest.approx(1.25)

    def test_infinity(self, two_components):
        """Test that unconnected pairs can count as infinite."""
        assert math.isinf(average_geodesic_distance(two_components, UnconnectedPairs.INFINITY))

    def test_node_count(self, two_components):
        """Test that unconnected pairs can count as n."""
        assert average_geodesic_distance(two_components, "node_count") == pytest.approx(3.5)

    def test_options_differ(self, two_components):
        """Test that the options disagree when components are separate."""
        stats = compute_distance_stats(two_components)
        values = {stats["mean_distance_exclude"], stats["mean_distance_node_count"]}
        assert len(values) == 2

    def test_options_agree_when_connected(self):
        """Test that a connected graph gives one answer."""
        G = nx.path_graph(4)
        values = {average_geodesic_distance(G, option) for option in UnconnectedPairs}
        assert len(values) == 1

    def test_directed_paths(self):
        """Test that arcs are followed in their direction."""
        G = nx.DiGraph([(0, 1), (1, 2)])
        assert average_geodesic_distance(G, "exclude") == pytest.approx(4 / 3)


class TestPartitionStatistics:
    """Tests for modularity, assortativity and balance."""

    def test_modularity_of_two_cliques(self):
        """Test that the natural split of two joined cliques is modular."""
        G = nx.barbell_graph(5, 0)
        partition = {v: int(v >= 5) for v in G.nodes()}
        assert partition_modularity(G, partition) > 0.4

    def test_modularity_accepts_sets(self):
        """Test list-of-sets partitions."""
        G = nx.barbell_graph(5, 0)
        as_dict = {v: int(v >= 5) for v in G.nodes()}
        as_sets = [set(range(5)), set(range(5, 10))]
        assert partition_modularity(G, as_sets) == pytest.approx(partition_modularity(G, as_dict))

    def test_assortativity(self):
        """Test perfect homophily."""
        G = nx.Graph([(0, 1), (2, 3), (0, 2)])
        nx.set_node_attributes(G, {0: "x", 1: "x", 2: "y", 3: "y"}, "group")
        assert assortativity(G, "group") < 1.0
        H = nx.Graph([(0, 1), (2, 3)])
        nx.set_node_attributes(H, {0: "x", 1: "x", 2: "y", 3: "y"}, "group")
        assert assortativity(H, "group") == pytest.approx(1.0)

    def test_balanced_triangles(self):
        """Test that two enemies sharing a friend form a balanced triangle."""
        G = build_network(
            [(0, 1, {"sign": 1}), (1, 2, {"sign": -1}), (0, 2, {"sign": -1}),
             (2, 3, {"sign": 1}), (3, 0, {"sign": 1})],
            kind=GraphKind.SIGNED,
        )
        # Triangles 0-1-2 (+,-,-) balanced, 0-2-3 (-,+,+) unbalanced
        assert balanced_triangle_fraction(G) == pytest.approx(0.5)

    def test_balance_without_triangles(self):
        """Test that balance is undefined without triangles."""
        G = build_network([(0, 1, {"sign": 1}), (1, 2, {"sign": -1})], kind=GraphKind.SIGNED)
        assert math.isnan(balanced_triangle_fraction(G))

    def test_balance_needs_signs(self):
        """Test that unsigned edges are rejected instead of read as positive."""
        with pytest.raises(GraphKindError):
            balanced_triangle_fraction(nx.complete_graph(3))


class TestRegistry:
    """Tests for the statistic registry."""

    def test_known_names(self):
        """Test that the standard statistics are registered."""
        for name in ["edges", "density", "mutual", "transitivity", "mean_distance", "modularity"]:
            assert name in STATISTICS

    def test_unknown_name(self):
        """Test that unknown names raise ValueError."""
        with pytest.raises(ValueError):
            get_statistic("eigenvector_magic")

    def test_bound_parameters(self):
        """Test that parameters are bound to the statistic."""
        stat = get_statistic("mean_distance", unconnected="infinity")
        assert math.isinf(stat(nx.Graph([(0, 1), (2, 3)])))

    def test_evaluate_statistic_returns_float(self):
        """Test that values are converted to float."""
        value = evaluate_statistic(nx.path_graph(4), lambda G: G.number_of_edges())
        assert isinstance(value, float)
        assert value == 3.0


class TestDescribeNetwork:
    """Tests for describe_network."""

    def test_undirected_summary(self):
        """Test the categories of an undirected summary."""
        props = describe_network(nx.karate_club_graph())
        assert props["basic"]["n_nodes"] == 34
        assert props["components"]["is_connected"]
        assert "dyads" not in props
        assert "distance" in props

    def test_directed_summary(self):
        """Test that directed graphs get a dyad census."""
        G = nx.DiGraph([(0, 1), (1, 0), (1, 2)])
        props = describe_network(G, compute_expensive=False)
        assert props["dyads"]["mutual"] == 1
        assert props["dyads"]["asymmetric"] == 1
        assert "distance" not in props

    def test_partition_and_balance(self):
        """Test optional community and balance sections."""
        G = build_network([(0, 1, {"sign": 1}), (1, 2, {"sign": -1})], kind="signed")
        props = describe_network(G, partition={0: 0, 1: 0, 2: 1})
        assert props["community"]["n_communities"] == 2
        assert props["balance"]["n_negative"] == 1
        assert np.isnan(props["balance"]["balanced_triangle_fraction"])

    def test_empty_graph_components(self):
        """Test that an empty graph reports the same component keys."""
        empty = compute_component_stats(nx.Graph())
        assert empty == {"n_components": 0, "largest_component": 0, "n_isolates": 0, "is_connected": False}
        assert set(empty) == set(compute_component_stats(nx.path_graph(3)))
