"""
Null Model Generators
=====================

Random graph generators conditioned on a structural constraint: edge count
(U|L), density, degree sequence and dyad census (U|MAN). These are the
reference distributions of conditional uniform graph (CUG) tests.

Every generator takes an explicit ``numpy.random.Generator`` (or a seed) and
never touches a global random state. Generated graphs reuse the node labels
of the observed graph so that node-level statistics (partitions, attributes)
remain meaningful, but they are built from scratch: the observed graph is
never used as a starting point.

Sampling guarantees
-------------------
- Edge count: exactly uniform over graphs with ``m`` edges.
- Density: independent Bernoulli dyads, density holds in expectation.
- Degree sequence, ``method="stub"``: exactly uniform over simple
  realizations (``nx.configuration_model`` with rejection of loops and
  multi-edges), bounded by ``max_retries``.
- Degree sequence, ``method="swap"``: ``nx.double_edge_swap`` /
  ``nx.directed_edge_swap`` chain started from the Havel-Hakimi
  realization. Undirected swaps connect all realizations, so the chain
  approaches uniformity as ``swaps_per_edge`` grows. The directed chain has
  no such guarantee, and graphs with fewer than four nodes keep their
  Havel-Hakimi realization.
- Dyad census: exactly uniform over graphs with the given census.

Dyads are sampled by index and unranked to node pairs, so memory grows with
the number of edges drawn, not with the number of possible dyads.
"""

import logging
from typing import Hashable, Iterator, Optional, Sequence, Tuple, Union

import networkx as nx
import numpy as np
from networkx.algorithms.threshold import is_threshold_graph
from numpy.typing import NDArray

from ..exceptions import ConstraintInfeasible, GenerationRetryExhausted
from ..network.construction import GraphKind, max_edges
from .constraints import ConstraintFamily, ConstraintSpec

logger = logging.getLogger(__name__)

RandomLike = Union[None, int, np.random.Generator]

# Swap attempts allowed per requested swap before the chain gives up
MAX_TRIES_PER_SWAP = 100


def draw_rng(seed: int, index: int) -> np.random.Generator:
    """
    Independent random stream for draw ``index`` of a run seeded with ``seed``.

    The stream is the ``index``-th child of ``SeedSequence(seed)``, the same
    stream ``SeedSequence(seed).spawn(n)[index]`` would give, so a draw depends
    only on the master seed and its index.
    """
    return np.random.default_rng(np.random.SeedSequence(entropy=seed, spawn_key=(index,)))


def generate_null_graph(
    spec: ConstraintSpec,
    rng: RandomLike = None,
) -> nx.Graph:
    """
    Draw one random graph satisfying ``spec``.

    Parameters
    ----------
    spec : ConstraintSpec
        Constraint family and targets
    rng : np.random.Generator or int, optional
        Random source or seed

    Returns
    -------
    nx.Graph
        ``Graph`` or ``DiGraph`` on ``spec.node_labels``, carrying the node
        attributes recorded in the spec. When the spec records edge signs,
        the graph is tagged SIGNED and its edges carry a random assignment
        of those signs.

    Raises
    ------
    ConstraintInfeasible
        If no simple graph satisfies the constraint
    GenerationRetryExhausted
        If a degree-sequence sampler runs out of attempts

    Examples
    --------
    >>> spec = ConstraintSpec.for_edge_count(10, 12)
    >>> generate_null_graph(spec, rng=1).number_of_edges()
    12
    """
    rng = np.random.default_rng(rng)
    family = spec.family
    nodes = spec.node_labels

    if family is ConstraintFamily.EDGE_COUNT:
        G = sample_fixed_edge_count(
            spec.n_nodes, spec.n_edges, directed=spec.directed,
            loops=spec.loops, rng=rng, nodes=nodes,
        )
    elif family is ConstraintFamily.DENSITY:
        G = sample_fixed_density(
            spec.n_nodes, spec.density, directed=spec.directed,
            loops=spec.loops, rng=rng, nodes=nodes,
        )
    elif family is ConstraintFamily.DEGREE_SEQUENCE:
        options = dict(
            rng=rng,
            method=spec.method,
            swaps_per_edge=spec.swaps_per_edge,
            max_retries=spec.max_retries,
            nodes=nodes,
        )
        if spec.directed:
            G = sample_fixed_directed_degree_sequence(spec.out_degrees, spec.in_degrees, **options)
        else:
            G = sample_fixed_degree_sequence(spec.degree_sequence, **options)
    elif family is ConstraintFamily.DYAD_CENSUS:
        if not spec.directed:
            raise ConstraintInfeasible(
                "Dyad census constraints are defined for directed graphs only",
                details={"n_nodes": spec.n_nodes},
            )
        G = sample_fixed_dyad_census(spec.n_nodes, *spec.dyad_census, rng=rng, nodes=nodes)
    else:
        raise ValueError(f"Unknown constraint family: {family}")

    if spec.node_attributes:
        for node, attrs in spec.node_attributes.items():
            G.nodes[node].update(attrs)

    if spec.edge_signs is not None:
        assign_edge_signs(G, spec.edge_signs, rng)

    G.graph["null_model"] = family.value
    return G


def iter_null_graphs(
    spec: ConstraintSpec,
    n_draws: int,
    seed: int,
) -> Iterator[nx.Graph]:
    """
    Yield ``n_draws`` null graphs, draw ``i`` generated from ``draw_rng(seed, i)``.

    The graphs are those an evaluation with the same seed would use.
    """
    for index in range(n_draws):
        yield generate_null_graph(spec, draw_rng(seed, index))


def assign_edge_signs(
    G: nx.Graph,
    signs: Sequence[int],
    rng: RandomLike = None,
) -> nx.Graph:
    """
    Put a random assignment of ``signs`` on the edges of ``G`` (in place).

    When ``G`` has as many edges as there are signs, the signs are randomly
    permuted, so the numbers of positive and negative ties match the
    observed graph exactly. Otherwise (density nulls) each edge draws its
    sign from the observed signs with replacement.

    Examples
    --------
    >>> G = assign_edge_signs(nx.path_graph(4), [1, -1, -1], rng=3)
    >>> sorted(s for _, _, s in G.edges(data="sign"))
    [-1, -1, 1]
    """
    rng = np.random.default_rng(rng)
    pool = np.asarray(signs, dtype=np.int64)
    m = G.number_of_edges()

    if m == pool.size:
        drawn = rng.permutation(pool)
    elif pool.size > 0:
        drawn = rng.choice(pool, size=m)
    else:
        raise ConstraintInfeasible(
            "No observed signs to assign to generated edges",
            details={"n_edges": m},
        )

    for (u, v), sign in zip(G.edges(), drawn.tolist()):
        G[u][v]["sign"] = sign
    G.graph["kind"] = GraphKind.SIGNED
    return G


# ----------------------------------------------------------------------
# Edge count and density
# ----------------------------------------------------------------------


def sample_fixed_edge_count(
    n: int,
    m: int,
    directed: bool = False,
    loops: bool = False,
    rng: RandomLike = None,
    nodes: Optional[Sequence[Hashable]] = None,
) -> nx.Graph:
    """
    Uniform random graph with exactly ``m`` edges.

    Draws ``m`` distinct dyads without replacement from all dyads allowed
    by ``directed`` and ``loops``, so every graph with ``m`` edges is
    equally likely.

    Parameters
    ----------
    n : int
        Number of nodes
    m : int
        Number of edges
    directed : bool, optional
        Draw arcs instead of edges (default: False)
    loops : bool, optional
        Allow self-loops (default: False)
    rng : np.random.Generator or int, optional
        Random source or seed
    nodes : Sequence[Hashable], optional
        Node labels (default: ``range(n)``)

    Returns
    -------
    nx.Graph
        Random graph with ``m`` edges

    Raises
    ------
    ConstraintInfeasible
        If ``m`` is negative or exceeds the number of available dyads

    Examples
    --------
    >>> G = sample_fixed_edge_count(73, 230, directed=True, rng=42)
    >>> G.number_of_edges()
    230
    """
    capacity = max_edges(n, directed, loops)
    if m < 0 or m > capacity:
        logger.error(f"Edge count {m} infeasible for n={n} (max {capacity})")
        raise ConstraintInfeasible(
            "Edge count outside the feasible range",
            details={"n": n, "m": m, "max_edges": capacity, "directed": directed},
        )

    rng = np.random.default_rng(rng)
    return _graph_from_dyads(n, m, directed, loops, rng, nodes)


def sample_fixed_density(
    n: int,
    p: float,
    directed: bool = False,
    loops: bool = False,
    rng: RandomLike = None,
    nodes: Optional[Sequence[Hashable]] = None,
) -> nx.Graph:
    """
    Bernoulli random graph: each allowed dyad is present with probability ``p``.

    The density of a single draw varies; it equals ``p`` in expectation.
    The number of edges is drawn from ``Binomial(max_edges, p)`` and that
    many distinct dyads are then chosen uniformly, which gives the same
    distribution as flipping a coin for every dyad.

    Raises
    ------
    ConstraintInfeasible
        If ``p`` is outside [0, 1]
    """
    if not 0.0 <= p <= 1.0:
        raise ConstraintInfeasible("Density must lie in [0, 1]", details={"p": p})

    rng = np.random.default_rng(rng)
    capacity = max_edges(n, directed, loops)
    m = int(rng.binomial(capacity, p)) if capacity > 0 else 0
    return _graph_from_dyads(n, m, directed, loops, rng, nodes)


def _graph_from_dyads(
    n: int,
    m: int,
    directed: bool,
    loops: bool,
    rng: np.random.Generator,
    nodes: Optional[Sequence[Hashable]],
) -> nx.Graph:
    """Graph on ``n`` nodes whose edges are ``m`` distinct uniform dyads."""
    capacity = max_edges(n, directed, loops)
    chosen = np.sort(rng.choice(capacity, size=m, replace=False)) if m else np.empty(0, dtype=np.int64)
    rows, cols = unrank_dyads(chosen, n, directed, loops)

    G = _empty_graph(n, directed, nodes)
    labels = list(G.nodes())
    G.add_edges_from((labels[u], labels[v]) for u, v in zip(rows.tolist(), cols.tolist()))
    return G


# ----------------------------------------------------------------------
# Degree sequences
# ----------------------------------------------------------------------


def sample_fixed_degree_sequence(
    degrees: Sequence[int],
    rng: RandomLike = None,
    method: str = "swap",
    swaps_per_edge: int = 10,
    max_retries: int = 1000,
    nodes: Optional[Sequence[Hashable]] = None,
) -> nx.Graph:
    """
    Random simple undirected graph with degree sequence ``degrees``.

    Node ``i`` of the result (``nodes[i]`` when labels are given) has degree
    ``degrees[i]``.

    Parameters
    ----------
    degrees : Sequence[int]
        Target degree of every node
    rng : np.random.Generator or int, optional
        Random source or seed
    method : str, optional
        ``"swap"``: ``swaps_per_edge * m`` double-edge swaps from the
        Havel-Hakimi realization. ``"stub"``: configuration-model pairing
        with rejection of loops and multi-edges (exactly uniform, may
        exhaust its retries). Default: ``"swap"``
    swaps_per_edge : int, optional
        Swaps per edge for ``"swap"`` (default: 10)
    max_retries : int, optional
        Maximum pairing attempts for ``"stub"`` (default: 1000)
    nodes : Sequence[Hashable], optional
        Node labels (default: ``range(len(degrees))``)

    Returns
    -------
    nx.Graph
        Random graph with the exact degree sequence

    Raises
    ------
    ConstraintInfeasible
        If the sequence is not graphical (e.g., odd degree sum)
    GenerationRetryExhausted
        If ``"stub"`` finds no simple pairing within ``max_retries`` attempts,
        or the swap chain cannot complete its swaps

    Examples
    --------
    >>> G = sample_fixed_degree_sequence([1, 1, 1, 1], rng=0)
    >>> sorted(d for _, d in G.degree())
    [1, 1, 1, 1]
    """
    degrees = [int(d) for d in degrees]
    if any(d < 0 for d in degrees) or not nx.is_graphical(degrees, method="eg"):
        logger.error(f"Degree sequence not graphical (sum={sum(degrees)})")
        raise ConstraintInfeasible(
            "Degree sequence is not graphical",
            details={"n": len(degrees), "degree_sum": sum(degrees), "odd_sum": sum(degrees) % 2 == 1},
        )

    rng = np.random.default_rng(rng)
    if method == "stub":
        H = _stub_pairing(degrees, degrees, False, rng, max_retries)
    elif method == "swap":
        H = _swap_chain(nx.havel_hakimi_graph(degrees), rng, swaps_per_edge)
    else:
        raise ValueError(f"Unknown degree-sequence method: {method}")

    return _relabel(H, len(degrees), False, nodes)


def sample_fixed_directed_degree_sequence(
    out_degrees: Sequence[int],
    in_degrees: Sequence[int],
    rng: RandomLike = None,
    method: str = "swap",
    swaps_per_edge: int = 10,
    max_retries: int = 1000,
    nodes: Optional[Sequence[Hashable]] = None,
) -> nx.DiGraph:
    """
    Random simple directed graph with the given out- and in-degrees.

    Same methods and errors as :func:`sample_fixed_degree_sequence`, using
    ``nx.directed_edge_swap`` and ``nx.directed_configuration_model``.
    """
    out_degrees = [int(d) for d in out_degrees]
    in_degrees = [int(d) for d in in_degrees]
    if len(out_degrees) != len(in_degrees):
        raise ValueError("out_degrees and in_degrees must have the same length")

    if (
        any(d < 0 for d in out_degrees + in_degrees)
        or not nx.is_digraphical(in_degrees, out_degrees)
    ):
        logger.error(
            f"Directed degree sequence not digraphical "
            f"(out sum={sum(out_degrees)}, in sum={sum(in_degrees)})"
        )
        raise ConstraintInfeasible(
            "Directed degree sequence is not digraphical",
            details={
                "n": len(out_degrees),
                "out_sum": sum(out_degrees),
                "in_sum": sum(in_degrees),
            },
        )

    rng = np.random.default_rng(rng)
    if method == "stub":
        H = _stub_pairing(out_degrees, in_degrees, True, rng, max_retries)
    elif method == "swap":
        H = _swap_chain(nx.directed_havel_hakimi_graph(in_degrees, out_degrees), rng, swaps_per_edge)
    else:
        raise ValueError(f"Unknown degree-sequence method: {method}")

    return _relabel(H, len(out_degrees), True, nodes)


def _swap_chain(
    H: nx.Graph,
    rng: np.random.Generator,
    swaps_per_edge: int,
) -> nx.Graph:
    """
    Apply ``swaps_per_edge * m`` degree-preserving swaps to ``H`` in place.

    Undirected threshold graphs are the only realization of their degree
    sequence, so they are returned unchanged. Graphs too small for the
    networkx swap routines (fewer than four nodes, or fewer than two edges,
    three when directed) are also returned unchanged.
    """
    directed = H.is_directed()
    n = H.number_of_nodes()
    m = H.number_of_edges()
    nswap = swaps_per_edge * m

    if nswap == 0 or n < 4 or m < (3 if directed else 2):
        return H
    if directed and m == n * (n - 1):
        return H
    if not directed and is_threshold_graph(H):
        logger.debug("Degree sequence has a unique realization, no swaps applied")
        return H

    max_tries = MAX_TRIES_PER_SWAP * nswap
    seed = _nx_seed(rng)
    try:
        if directed:
            nx.directed_edge_swap(H, nswap=nswap, max_tries=max_tries, seed=seed)
        else:
            nx.double_edge_swap(H, nswap=nswap, max_tries=max_tries, seed=seed)
    except nx.NetworkXAlgorithmError as exc:
        logger.error(f"Swap chain stalled: {nswap} swaps not reached in {max_tries} attempts")
        raise GenerationRetryExhausted(
            "Edge-swap chain could not complete its swaps",
            attempts=max_tries,
            details={"n": n, "n_edges": m, "n_swaps": nswap, "directed": directed},
            cause=exc,
        ) from exc

    logger.debug(f"Swap chain applied {nswap} swaps to {m} edges")
    return H


def _stub_pairing(
    out_degrees: Sequence[int],
    in_degrees: Sequence[int],
    directed: bool,
    rng: np.random.Generator,
    max_retries: int,
) -> nx.Graph:
    """
    Draw configuration-model pairings until one is a simple graph.

    For undirected graphs ``out_degrees`` and ``in_degrees`` are the same
    sequence and only ``out_degrees`` is used.
    """
    n = len(out_degrees)
    n_edges = sum(out_degrees) if directed else sum(out_degrees) // 2
    if n_edges == 0:
        return nx.empty_graph(n, create_using=nx.DiGraph if directed else nx.Graph)

    for attempt in range(1, max_retries + 1):
        seed = _nx_seed(rng)
        if directed:
            M = nx.directed_configuration_model(in_degrees, out_degrees, seed=seed)
            H = nx.DiGraph(M)
        else:
            M = nx.configuration_model(out_degrees, seed=seed)
            H = nx.Graph(M)

        if nx.number_of_selfloops(M) == 0 and H.number_of_edges() == M.number_of_edges():
            logger.debug(f"Stub pairing succeeded after {attempt} attempts")
            return H

    logger.error(f"Stub pairing failed after {max_retries} attempts")
    raise GenerationRetryExhausted(
        "Stub pairing produced no simple graph",
        attempts=max_retries,
        details={"n": n, "n_edges": n_edges},
    )


# ----------------------------------------------------------------------
# Dyad census
# ----------------------------------------------------------------------


def sample_fixed_dyad_census(
    n: int,
    mutual: int,
    asymmetric: int,
    null: int,
    rng: RandomLike = None,
    nodes: Optional[Sequence[Hashable]] = None,
) -> nx.DiGraph:
    """
    Uniform random directed graph with a fixed dyad census (U|MAN).

    ``mutual + asymmetric`` distinct unordered pairs are drawn in random
    order; the first ``mutual`` become reciprocated ties, the rest get a
    single arc in a random direction, all other pairs stay empty.

    Raises
    ------
    ConstraintInfeasible
        If a count is negative or the counts do not add up to the number of
        dyads

    Examples
    --------
    >>> G = sample_fixed_dyad_census(5, 2, 3, 5, rng=7)
    >>> G.number_of_edges()
    7
    """
    n_dyads = n * (n - 1) // 2
    if min(mutual, asymmetric, null) < 0 or mutual + asymmetric + null != n_dyads:
        logger.error(f"Dyad census ({mutual}, {asymmetric}, {null}) infeasible for n={n}")
        raise ConstraintInfeasible(
            "Dyad census does not match the number of dyads",
            details={"n": n, "census": (mutual, asymmetric, null), "n_dyads": n_dyads},
        )

    rng = np.random.default_rng(rng)
    k = mutual + asymmetric
    chosen = rng.choice(n_dyads, size=k, replace=False) if k else np.empty(0, dtype=np.int64)
    rows, cols = unrank_dyads(chosen, n, directed=False, loops=False)
    reverse = rng.random(asymmetric) < 0.5

    G = _empty_graph(n, True, nodes)
    labels = list(G.nodes())
    pairs = list(zip(rows.tolist(), cols.tolist()))
    for i, j in pairs[:mutual]:
        G.add_edge(labels[i], labels[j])
        G.add_edge(labels[j], labels[i])
    for (i, j), rev in zip(pairs[mutual:], reverse):
        if rev:
            G.add_edge(labels[j], labels[i])
        else:
            G.add_edge(labels[i], labels[j])
    return G


# ----------------------------------------------------------------------
# Helpers
# ----------------------------------------------------------------------


def unrank_dyads(
    index: NDArray[np.int64],
    n: int,
    directed: bool,
    loops: bool,
) -> Tuple[NDArray[np.int64], NDArray[np.int64]]:
    """
    Map dyad indices in ``[0, max_edges(n, directed, loops))`` to node pairs.

    Directed dyads are numbered row by row over the ``n x n`` matrix
    (skipping the diagonal unless ``loops``). Undirected dyads are numbered
    over the lower triangle, row ``r`` holding pairs ``(r, 0) .. (r, r - 1)``
    (or up to ``(r, r)`` with ``loops``). Distinct indices give distinct
    dyads.

    Examples
    --------
    >>> rows, cols = unrank_dyads(np.arange(3), 3, directed=False, loops=False)
    >>> list(zip(rows.tolist(), cols.tolist()))
    [(1, 0), (2, 0), (2, 1)]
    """
    index = np.asarray(index, dtype=np.int64)
    if index.size == 0:
        return index.copy(), index.copy()

    if directed:
        if loops:
            return index // n, index % n
        rows = index // (n - 1)
        cols = index % (n - 1)
        return rows, cols + (cols >= rows)

    def first(r: NDArray[np.int64]) -> NDArray[np.int64]:
        return r * (r + 1) // 2 if loops else r * (r - 1) // 2

    root = np.sqrt(8.0 * index + 1.0)
    rows = np.floor((root - 1.0) / 2.0 if loops else (root + 1.0) / 2.0).astype(np.int64)
    # Float rounding can misplace very large indices by one row
    rows -= (first(rows) > index).astype(np.int64)
    rows += (first(rows + 1) <= index).astype(np.int64)
    return rows, index - first(rows)


def _nx_seed(rng: np.random.Generator) -> int:
    """Integer seed for a networkx routine, drawn from ``rng``."""
    return int(rng.integers(0, 2**32))


def _relabel(
    H: nx.Graph,
    n: int,
    directed: bool,
    nodes: Optional[Sequence[Hashable]],
) -> nx.Graph:
    """Copy the edges of ``H`` (nodes ``0..n-1``) onto a graph with ``nodes``."""
    G = _empty_graph(n, directed, nodes)
    labels = list(G.nodes())
    G.add_edges_from((labels[u], labels[v]) for u, v in H.edges())
    return G


def _empty_graph(
    n: int,
    directed: bool,
    nodes: Optional[Sequence[Hashable]] = None,
) -> nx.Graph:
    G = nx.DiGraph() if directed else nx.Graph()
    if nodes is None:
        G.add_nodes_from(range(n))
    else:
        if len(nodes) != n:
            raise ValueError(f"{len(nodes)} node labels given for n={n}")
        G.add_nodes_from(nodes)
    return G
