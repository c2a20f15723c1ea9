"""
Network Construction Module
===========================

Builds networkx graphs with an explicit, validated graph kind and extracts
the structural invariants that null models condition on (degree sequences,
dyad census).

The graph kind is stored in ``G.graph["kind"]`` when the graph is built and
is never guessed from the presence of node or edge attributes. A graph
without a tag is treated as :attr:`GraphKind.SIMPLE`.
"""

import logging
from enum import Enum
from typing import Any, Dict, Hashable, Iterable, List, NamedTuple, Optional, Tuple, Union

import networkx as nx
from networkx.algorithms import bipartite

from ..exceptions import GraphKindError

logger = logging.getLogger(__name__)


class GraphKind(Enum):
    """Tagged variant for the kinds of network handled by the library."""

    SIMPLE = "simple"
    BIPARTITE = "bipartite"
    SIGNED = "signed"
    TWO_MODE = "two_mode"


class DyadCensus(NamedTuple):
    """Counts of mutual, asymmetric and null dyads of a directed graph."""

    mutual: int
    asymmetric: int
    null: int


EdgeInput = Union[Tuple[Hashable, Hashable], Tuple[Hashable, Hashable, Dict[str, Any]]]


def build_network(
    edges: Iterable[EdgeInput],
    kind: Union[GraphKind, str] = GraphKind.SIMPLE,
    directed: bool = False,
    nodes: Optional[Iterable[Hashable]] = None,
    node_modes: Optional[Dict[Hashable, int]] = None,
    loops: bool = False,
) -> nx.Graph:
    """
    Build a graph from an edge list and tag it with its kind.

    Parameters
    ----------
    edges : Iterable
        Edge tuples ``(u, v)`` or ``(u, v, attrs)``. Signed networks
        need ``attrs["sign"]`` in ``{+1, -1}``.
    kind : GraphKind or str, optional
        Kind of the network (default: SIMPLE)
    directed : bool, optional
        Build a ``DiGraph`` instead of a ``Graph`` (default: False)
    nodes : Iterable, optional
        Extra nodes to add, including isolates. Node order is the order of
        first appearance (``nodes`` first, then edge endpoints).
    node_modes : Dict[Hashable, int], optional
        Mode (0 or 1) of every node; required for BIPARTITE and TWO_MODE.
        Stored as the ``bipartite`` node attribute, the networkx convention.
    loops : bool, optional
        Allow self-loops (default: False)

    Returns
    -------
    nx.Graph
        Graph with ``G.graph["kind"]`` set

    Raises
    ------
    GraphKindError
        If the graph does not satisfy its declared kind
    ValueError
        If a self-loop is given while ``loops`` is False

    Examples
    --------
    >>> G = build_network([(0, 1, {"sign": 1}), (1, 2, {"sign": -1})], kind="signed")
    >>> graph_kind(G)
    <GraphKind.SIGNED: 'signed'>
    """
    kind = GraphKind(kind)
    G = nx.DiGraph() if directed else nx.Graph()

    if nodes is not None:
        G.add_nodes_from(nodes)

    for edge in edges:
        if len(edge) == 2:
            u, v = edge
            attrs: Dict[str, Any] = {}
        elif len(edge) == 3:
            u, v, attrs = edge
        else:
            raise ValueError(f"Edge must have 2 or 3 entries, got {edge!r}")

        if u == v and not loops:
            raise ValueError(f"Self-loop on node {u!r} but loops are not allowed")
        G.add_edge(u, v, **attrs)

    if node_modes is not None:
        for node, mode in node_modes.items():
            if node not in G:
                G.add_node(node)
            G.nodes[node]["bipartite"] = mode

    G.graph["kind"] = kind
    G.graph["loops"] = loops
    validate_graph(G)

    logger.debug(
        f"Built {kind.value} graph: {G.number_of_nodes()} nodes, "
        f"{G.number_of_edges()} edges, directed={directed}"
    )
    return G


def graph_kind(G: nx.Graph) -> GraphKind:
    """Return the declared kind of ``G`` (SIMPLE when untagged)."""
    return GraphKind(G.graph.get("kind", GraphKind.SIMPLE))


def validate_graph(G: nx.Graph) -> None:
    """
    Check that ``G`` satisfies its declared kind.

    Parameters
    ----------
    G : nx.Graph
        Graph to validate

    Raises
    ------
    GraphKindError
        SIGNED graphs need ``sign`` in {+1, -1} on every edge; BIPARTITE
        and TWO_MODE graphs need ``bipartite`` in {0, 1} on every node and
        no edge inside a mode; TWO_MODE graphs need both modes non-empty.
    """
    kind = graph_kind(G)

    if kind is GraphKind.SIGNED:
        bad = [(u, v) for u, v, s in G.edges(data="sign") if s not in (1, -1)]
        if bad:
            logger.error(f"{len(bad)} edges without a valid sign")
            raise GraphKindError(
                "Signed graph has edges without sign +1/-1",
                details={"n_invalid": len(bad), "example": bad[0]},
            )

    elif kind in (GraphKind.BIPARTITE, GraphKind.TWO_MODE):
        modes = dict(G.nodes(data="bipartite"))
        missing = [node for node, mode in modes.items() if mode not in (0, 1)]
        if missing:
            raise GraphKindError(
                f"{kind.value} graph has nodes without mode 0/1",
                details={"n_invalid": len(missing), "example": missing[0]},
            )

        same_side = [(u, v) for u, v in G.edges() if modes[u] == modes[v]]
        if same_side:
            raise GraphKindError(
                f"{kind.value} graph has edges inside one mode",
                details={"n_invalid": len(same_side), "example": same_side[0]},
            )

        if kind is GraphKind.TWO_MODE and len(set(modes.values())) < 2:
            raise GraphKindError("Two-mode graph needs nodes in both modes")


def project_two_mode(
    G: nx.Graph,
    mode: int = 0,
) -> nx.Graph:
    """
    Project a two-mode network onto one of its modes.

    Two nodes of the chosen mode are linked when they share at least one
    neighbour in the other mode; the ``weight`` attribute counts the shared
    neighbours (e.g., the number of events two actors both attended).

    Parameters
    ----------
    G : nx.Graph
        BIPARTITE or TWO_MODE graph
    mode : int, optional
        Mode to keep, 0 (actors) or 1 (events) (default: 0)

    Returns
    -------
    nx.Graph
        Weighted SIMPLE graph on the nodes of the chosen mode

    Examples
    --------
    >>> G = build_network(
    ...     [("a", "e1"), ("b", "e1"), ("b", "e2"), ("c", "e2"), ("a", "e2")],
    ...     kind="two_mode",
    ...     node_modes={"a": 0, "b": 0, "c": 0, "e1": 1, "e2": 1},
    ... )
    >>> P = project_two_mode(G)
    >>> P["a"]["b"]["weight"]
    2
    """
    kind = graph_kind(G)
    if kind not in (GraphKind.BIPARTITE, GraphKind.TWO_MODE):
        raise GraphKindError(
            "Projection needs a bipartite or two-mode graph",
            details={"kind": kind.value},
        )
    if mode not in (0, 1):
        raise ValueError(f"mode must be 0 or 1, got {mode}")

    keep = [node for node, m in G.nodes(data="bipartite") if m == mode]
    P = bipartite.weighted_projected_graph(G, keep)
    P.graph["kind"] = GraphKind.SIMPLE

    logger.info(
        f"Projected mode {mode}: {P.number_of_nodes()} nodes, {P.number_of_edges()} edges"
    )
    return P


def max_edges(n: int, directed: bool, loops: bool = False) -> int:
    """
    Number of distinct edges a simple graph on ``n`` nodes can hold.

    Examples
    --------
    >>> max_edges(73, directed=True)
    5256
    >>> max_edges(4, directed=False)
    6
    """
    pairs = n * (n - 1) if directed else n * (n - 1) // 2
    if loops:
        pairs += n
    return pairs


def degree_sequence(G: nx.Graph) -> Union[List[int], Tuple[List[int], List[int]]]:
    """
    Degree sequence of ``G`` in node order.

    Returns
    -------
    List[int] or Tuple[List[int], List[int]]
        Degrees for undirected graphs; ``(out_degrees, in_degrees)`` for
        directed graphs
    """
    nodes = list(G.nodes())
    if G.is_directed():
        out_deg = dict(G.out_degree())
        in_deg = dict(G.in_degree())
        return [out_deg[v] for v in nodes], [in_deg[v] for v in nodes]

    deg = dict(G.degree())
    return [deg[v] for v in nodes]


def dyad_census(G: nx.DiGraph) -> DyadCensus:
    """
    Count mutual, asymmetric and null dyads of a directed graph.

    Self-loops are ignored; every unordered pair of distinct nodes falls in
    exactly one class.

    Parameters
    ----------
    G : nx.DiGraph
        Directed graph

    Returns
    -------
    DyadCensus
        ``(mutual, asymmetric, null)``

    Examples
    --------
    >>> G = nx.DiGraph([(0, 1), (1, 0), (1, 2)])
    >>> G.add_node(3)
    >>> dyad_census(G)
    DyadCensus(mutual=1, asymmetric=1, null=4)
    """
    if not G.is_directed():
        raise GraphKindError("Dyad census needs a directed graph")

    n = G.number_of_nodes()
    arcs = sum(1 for u, v in G.edges() if u != v)
    reciprocated = sum(1 for u, v in G.edges() if u != v and G.has_edge(v, u))

    mutual = reciprocated // 2
    asymmetric = arcs - reciprocated
    null = n * (n - 1) // 2 - mutual - asymmetric
    return DyadCensus(mutual, asymmetric, null)
