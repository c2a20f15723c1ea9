"""
Graph Statistics Module
=======================

Scalar statistics (Graph -> float) evaluated on observed and null-model
graphs: dyad counts, reciprocity, transitivity, centralization, geodesic
distances, partition modularity, assortativity, structural balance and
core-periphery fit.

Every statistic is a pure, module-level function so it can be pickled and
sent to worker processes. Parametrised statistics are obtained with
:func:`get_statistic`, which wraps them in ``functools.partial``.
"""

import logging
import math
from enum import Enum
from functools import partial
from typing import Any, Callable, Dict, Hashable, Iterable, List, Optional, Set, Union

import networkx as nx
import numpy as np

from ..exceptions import GraphKindError
from ..network.construction import dyad_census

logger = logging.getLogger(__name__)

StatisticFunction = Callable[[nx.Graph], float]
Partition = Union[Dict[Hashable, Hashable], Iterable[Iterable[Hashable]]]


class UnconnectedPairs(Enum):
    """
    Treatment of node pairs without a connecting path in distance statistics.

    EXCLUDE
        Average over connected pairs only.
    INFINITY
        Unconnected pairs have infinite distance; any such pair makes the
        average infinite.
    NODE_COUNT
        Unconnected pairs count as distance ``n`` (one more than the longest
        possible geodesic), the igraph convention.
    """

    EXCLUDE = "exclude"
    INFINITY = "infinity"
    NODE_COUNT = "node_count"


def evaluate_statistic(G: nx.Graph, statistic: StatisticFunction) -> float:
    """Apply ``statistic`` to ``G`` and return the value as a float."""
    return float(statistic(G))


# ----------------------------------------------------------------------
# Counts and dyads
# ----------------------------------------------------------------------


def edge_count(G: nx.Graph) -> float:
    return float(G.number_of_edges())


def density(G: nx.Graph) -> float:
    return float(nx.density(G))


def mutual_dyads(G: nx.DiGraph) -> float:
    """
    Number of reciprocated dyads of a directed graph.

    Examples
    --------
    >>> mutual_dyads(nx.DiGraph([(0, 1), (1, 0), (1, 2)]))
    1.0
    """
    return float(dyad_census(G).mutual)


def asymmetric_dyads(G: nx.DiGraph) -> float:
    """Number of dyads with exactly one arc."""
    return float(dyad_census(G).asymmetric)


def reciprocity(G: nx.DiGraph) -> float:
    """
    Share of arcs that are reciprocated.

    Returns NaN for a graph without arcs, where reciprocity is undefined.
    """
    if G.number_of_edges() == 0:
        return float("nan")
    return float(nx.overall_reciprocity(G))


# ----------------------------------------------------------------------
# Clustering
# ----------------------------------------------------------------------


def transitivity(G: nx.Graph) -> float:
    """
    Global transitivity (ratio of closed to connected triples).

    Directed graphs are read as undirected, ignoring arc direction.
    """
    return float(nx.transitivity(_undirected(G)))


def average_clustering(G: nx.Graph) -> float:
    """Mean local clustering coefficient (direction ignored)."""
    return float(nx.average_clustering(_undirected(G)))


def triangle_count(G: nx.Graph) -> float:
    """Number of triangles (direction ignored)."""
    return float(sum(nx.triangles(_undirected(G)).values()) // 3)


# ----------------------------------------------------------------------
# Centralization and distances
# ----------------------------------------------------------------------


def degree_centralization(G: nx.Graph, mode: str = "all") -> float:
    """
    Freeman degree centralization, normalised by its maximum for the graph size.

    Parameters
    ----------
    G : nx.Graph
        Input graph
    mode : str, optional
        For directed graphs: ``"out"``, ``"in"`` or ``"all"`` (default: "all")

    Returns
    -------
    float
        Value in [0, 1]; 1 for a star

    Examples
    --------
    >>> degree_centralization(nx.star_graph(5))
    1.0
    """
    n = G.number_of_nodes()
    if n < 3:
        return 0.0

    if G.is_directed():
        if mode == "out":
            degrees = [d for _, d in G.out_degree()]
            t_max = (n - 1) ** 2
        elif mode == "in":
            degrees = [d for _, d in G.in_degree()]
            t_max = (n - 1) ** 2
        elif mode == "all":
            degrees = [d for _, d in G.degree()]
            t_max = (n - 1) * (2 * n - 2)
        else:
            raise ValueError(f"Unknown mode: {mode}")
    else:
        degrees = [d for _, d in G.degree()]
        t_max = (n - 1) * (n - 2)

    d_max = max(degrees)
    return float(sum(d_max - d for d in degrees) / t_max)


def betweenness_centralization(G: nx.Graph) -> float:
    """
    Freeman betweenness centralization (direction ignored).

    Sum of the gaps between the largest and every normalised betweenness
    score, divided by its value for a star (``n - 1``).

    Examples
    --------
    >>> round(betweenness_centralization(nx.star_graph(4)), 6)
    1.0
    """
    U = _undirected(G)
    n = U.number_of_nodes()
    if n < 3:
        return 0.0
    scores = nx.betweenness_centrality(U, normalized=True).values()
    return _freeman(scores, n - 1)


def closeness_centralization(G: nx.Graph) -> float:
    """
    Freeman closeness centralization (direction ignored).

    Uses the normalised closeness ``(n - 1) / sum of distances``; the gap
    sum of a star, ``(n - 1)(n - 2) / (2n - 3)``, is the maximum. On
    disconnected graphs networkx scales closeness by the reachable share of
    the graph.

    Examples
    --------
    >>> round(closeness_centralization(nx.star_graph(4)), 6)
    1.0
    """
    U = _undirected(G)
    n = U.number_of_nodes()
    if n < 3:
        return 0.0
    scores = nx.closeness_centrality(U).values()
    return _freeman(scores, (n - 1) * (n - 2) / (2 * n - 3))


def eigenvector_centralization(G: nx.Graph) -> float:
    """
    Eigenvector centralization (direction ignored).

    Eigenvector scores are scaled so the largest is 1 and the gap sum is
    divided by ``n - 2``, the igraph bound for undirected graphs.

    Returns
    -------
    float
        Value in [0, 1]; 0 for graphs without edges
    """
    U = _undirected(G)
    n = U.number_of_nodes()
    if n < 3 or U.number_of_edges() == 0:
        return 0.0
    scores = np.abs(np.fromiter(nx.eigenvector_centrality_numpy(U).values(), dtype=float))
    return _freeman(scores / scores.max(), n - 2)


def _freeman(scores: Iterable[float], t_max: float) -> float:
    scores = list(scores)
    top = max(scores)
    return float(sum(top - s for s in scores) / t_max)


def average_geodesic_distance(
    G: nx.Graph,
    unconnected: Union[UnconnectedPairs, str] = UnconnectedPairs.EXCLUDE,
) -> float:
    """
    Mean shortest-path length over ordered pairs of distinct nodes.

    Paths follow arc direction in directed graphs; edge weights are ignored.

    Parameters
    ----------
    G : nx.Graph
        Input graph
    unconnected : UnconnectedPairs or str, optional
        Treatment of pairs without a path (default: EXCLUDE). Callers
        comparing graphs with several components should choose explicitly,
        the options give different numbers on such graphs.

    Returns
    -------
    float
        Mean geodesic distance. NaN if no pair is connected under EXCLUDE.

    Examples
    --------
    >>> G = nx.Graph([(0, 1), (1, 2), (3, 4)])
    >>> round(average_geodesic_distance(G, "exclude"), 4)
    1.25
    >>> average_geodesic_distance(G, "infinity")
    inf
    >>> round(average_geodesic_distance(G, "node_count"), 4)
    3.5
    """
    unconnected = UnconnectedPairs(unconnected)
    n = G.number_of_nodes()
    n_pairs = n * (n - 1)
    if n_pairs == 0:
        return float("nan")

    total = 0
    connected = 0
    for _, lengths in nx.all_pairs_shortest_path_length(G):
        for length in lengths.values():
            if length > 0:
                total += length
                connected += 1

    missing = n_pairs - connected

    if unconnected is UnconnectedPairs.EXCLUDE:
        return total / connected if connected else float("nan")
    if unconnected is UnconnectedPairs.INFINITY:
        return float("inf") if missing else total / connected
    return (total + missing * n) / n_pairs


# ----------------------------------------------------------------------
# Partitions and attributes
# ----------------------------------------------------------------------


def partition_to_sets(partition: Partition) -> List[Set[Hashable]]:
    """
    Convert a partition to a list of node sets.

    Accepts a ``node -> community`` mapping or an iterable of node groups.

    Examples
    --------
    >>> partition_to_sets({0: "a", 1: "a", 2: "b"})
    [{0, 1}, {2}]
    """
    if isinstance(partition, dict):
        community_sets: Dict[Hashable, Set[Hashable]] = {}
        for node, comm in partition.items():
            community_sets.setdefault(comm, set()).add(node)
        return list(community_sets.values())
    return [set(group) for group in partition]


def partition_modularity(
    G: nx.Graph,
    partition: Partition,
    resolution: float = 1.0,
) -> float:
    """
    Modularity of a fixed node partition on ``G``.

    Null-model graphs reuse the observed node labels, so the partition found
    on the observed graph can be scored on every reference graph.

    Parameters
    ----------
    G : nx.Graph
        Input graph
    partition : Dict or Iterable of Iterables
        Node -> community mapping or list of node groups covering all nodes
    resolution : float, optional
        Resolution parameter (default: 1.0)

    Returns
    -------
    float
        Modularity value
    """
    return float(nx.community.modularity(G, partition_to_sets(partition), resolution=resolution))


def assortativity(G: nx.Graph, attribute: str, numeric: bool = False) -> float:
    """
    Attribute assortativity (homophily) coefficient.

    Parameters
    ----------
    G : nx.Graph
        Graph whose nodes carry ``attribute``
    attribute : str
        Node attribute name
    numeric : bool, optional
        Treat the attribute as numeric instead of categorical (default: False)
    """
    if numeric:
        return float(nx.numeric_assortativity_coefficient(G, attribute))
    return float(nx.attribute_assortativity_coefficient(G, attribute))


def balanced_triangle_fraction(G: nx.Graph) -> float:
    """
    Share of triangles of a signed graph that are structurally balanced.

    A triangle is balanced when the product of its edge signs is positive
    (all friends, or two enemies sharing a friend). Direction is ignored.

    Returns
    -------
    float
        Balanced fraction in [0, 1], NaN when the graph has no triangle

    Raises
    ------
    GraphKindError
        If an edge has no ``sign`` attribute

    Examples
    --------
    >>> G = nx.Graph()
    >>> G.add_edges_from([(0, 1), (1, 2)], sign=1)
    >>> G.add_edge(0, 2, sign=-1)
    >>> balanced_triangle_fraction(G)
    0.0
    """
    U = _undirected(G)
    unsigned = sum(1 for _, _, s in U.edges(data="sign") if s is None)
    if unsigned:
        raise GraphKindError(
            "Balance needs a sign on every edge",
            details={"unsigned_edges": unsigned},
        )

    index = {node: i for i, node in enumerate(U.nodes())}
    balanced = 0
    total = 0

    for u, v, sign_uv in U.edges(data="sign"):
        for w in nx.common_neighbors(U, u, v):
            # Count each triangle once, from its edge opposite the highest node
            if index[w] < max(index[u], index[v]):
                continue
            sign = sign_uv * U[u][w]["sign"] * U[v][w]["sign"]
            total += 1
            if sign > 0:
                balanced += 1

    if total == 0:
        return float("nan")
    return balanced / total


# ----------------------------------------------------------------------
# Core-periphery
# ----------------------------------------------------------------------


def core_periphery_fit(
    G: nx.Graph,
    core: Optional[Iterable[Hashable]] = None,
) -> float:
    """
    Correlation of a graph with the ideal discrete core-periphery pattern.

    In the ideal pattern (Borgatti and Everett) every pair of core nodes is
    tied and no pair of periphery nodes is; core-periphery pairs are left
    out. The fit is the Pearson correlation between observed ties and the
    pattern over the remaining pairs, computed from tie counts. Pairs are
    ordered in directed graphs; self-loops are ignored.

    Parameters
    ----------
    G : nx.Graph
        Input graph
    core : Iterable[Hashable], optional
        Core nodes. Default: the main k-core (largest ``k``) of the graph
        the statistic is applied to, so each null graph gets its own core.

    Returns
    -------
    float
        Correlation in [-1, 1]; NaN when the ties or the pattern are
        constant over the compared pairs

    Examples
    --------
    >>> G = nx.complete_graph(4)
    >>> G.add_edges_from([(0, 4), (1, 5), (2, 6)])
    >>> core_periphery_fit(G)
    1.0
    """
    directed = G.is_directed()
    if core is None:
        U = _undirected(G)
        if nx.number_of_selfloops(U):
            U = nx.Graph(U)
            U.remove_edges_from(list(nx.selfloop_edges(U)))
        core_set = set(nx.k_core(U))
    else:
        core_set = set(core) & set(G.nodes())

    n_core = len(core_set)
    n_periphery = G.number_of_nodes() - n_core
    per_pair = 1 if directed else 2
    core_pairs = n_core * (n_core - 1) // per_pair
    periphery_pairs = n_periphery * (n_periphery - 1) // per_pair
    n_pairs = core_pairs + periphery_pairs

    core_ties = 0
    periphery_ties = 0
    for u, v in G.edges():
        if u == v:
            continue
        if u in core_set and v in core_set:
            core_ties += 1
        elif u not in core_set and v not in core_set:
            periphery_ties += 1
    ties = core_ties + periphery_ties

    denominator = math.sqrt(
        (n_pairs * ties - ties ** 2) * (n_pairs * core_pairs - core_pairs ** 2)
    )
    if denominator == 0:
        return float("nan")
    return (n_pairs * core_ties - ties * core_pairs) / denominator


def _undirected(G: nx.Graph) -> nx.Graph:
    return G.to_undirected(as_view=True) if G.is_directed() else G


# ----------------------------------------------------------------------
# Registry
# ----------------------------------------------------------------------

STATISTICS: Dict[str, StatisticFunction] = {
    "edges": edge_count,
    "density": density,
    "mutual": mutual_dyads,
    "asymmetric": asymmetric_dyads,
    "reciprocity": reciprocity,
    "transitivity": transitivity,
    "average_clustering": average_clustering,
    "triangles": triangle_count,
    "degree_centralization": degree_centralization,
    "betweenness_centralization": betweenness_centralization,
    "closeness_centralization": closeness_centralization,
    "eigenvector_centralization": eigenvector_centralization,
    "mean_distance": average_geodesic_distance,
    "modularity": partition_modularity,
    "assortativity": assortativity,
    "balance": balanced_triangle_fraction,
    "core_periphery": core_periphery_fit,
}


def get_statistic(name: str, **params: Any) -> StatisticFunction:
    """
    Look up a statistic by name, binding any parameters.

    Parameters
    ----------
    name : str
        Registry name (see ``STATISTICS``)
    **params
        Keyword arguments bound to the statistic, e.g. ``unconnected`` for
        ``"mean_distance"`` or ``partition`` for ``"modularity"``

    Returns
    -------
    Callable[[nx.Graph], float]
        Picklable statistic function

    Examples
    --------
    >>> stat = get_statistic("mean_distance", unconnected="infinity")
    >>> stat(nx.path_graph(3))
    1.3333333333333333
    """
    try:
        func = STATISTICS[name]
    except KeyError:
        raise ValueError(
            f"Unknown statistic: {name}. Available: {sorted(STATISTICS)}"
        ) from None

    if params:
        return partial(func, **params)
    return func
