"""
Constraints Module
==================

Describes which structural invariant a null model must preserve.

A :class:`ConstraintSpec` holds exactly one active constraint family plus
the target values of that family, usually extracted from an observed graph
with :meth:`ConstraintSpec.from_graph`. Specs are immutable and picklable so
they can be shipped to worker processes.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Hashable, Optional, Tuple, Union

import networkx as nx

from ..config import DEFAULT_DEGREE_METHOD, DEFAULT_MAX_RETRIES, DEFAULT_SWAPS_PER_EDGE
from ..exceptions import ConstraintInfeasible
from ..network.construction import GraphKind, degree_sequence, dyad_census, graph_kind, max_edges

logger = logging.getLogger(__name__)


class ConstraintFamily(Enum):
    """Structural invariant preserved by a null model."""

    EDGE_COUNT = "edge_count"
    DENSITY = "density"
    DEGREE_SEQUENCE = "degree_sequence"
    DYAD_CENSUS = "dyad_census"


DEGREE_METHODS = ("swap", "stub")


@dataclass(frozen=True)
class ConstraintSpec:
    """
    Null-model constraint and its target values.

    Attributes
    ----------
    family : ConstraintFamily
        Active constraint family
    n_nodes : int
        Number of nodes of every generated graph
    directed : bool
        Generate directed graphs
    loops : bool
        Allow self-loops (EDGE_COUNT and DENSITY only)
    nodes : Tuple[Hashable, ...], optional
        Node labels reused by generated graphs; ``range(n_nodes)`` if None
    n_edges : int, optional
        Target edge count (EDGE_COUNT)
    density : float, optional
        Target density (DENSITY)
    degree_sequence : Tuple[int, ...], optional
        Target degrees, undirected DEGREE_SEQUENCE
    out_degrees, in_degrees : Tuple[int, ...], optional
        Target out-/in-degrees, directed DEGREE_SEQUENCE
    dyad_census : Tuple[int, int, int], optional
        Target (mutual, asymmetric, null) counts (DYAD_CENSUS)
    method : str
        Degree-sequence sampler, ``"swap"`` or ``"stub"``
    swaps_per_edge : int
        Swap proposals per edge for the ``"swap"`` sampler
    max_retries : int
        Retry budget for the ``"stub"`` sampler
    node_attributes : Dict[Hashable, Dict[str, Any]], optional
        Node attributes copied onto generated graphs
    edge_signs : Tuple[int, ...], optional
        Observed edge signs of a signed graph; generated graphs get a random
        assignment of this multiset
    """

    family: ConstraintFamily
    n_nodes: int
    directed: bool = False
    loops: bool = False
    nodes: Optional[Tuple[Hashable, ...]] = None
    n_edges: Optional[int] = None
    density: Optional[float] = None
    degree_sequence: Optional[Tuple[int, ...]] = None
    out_degrees: Optional[Tuple[int, ...]] = None
    in_degrees: Optional[Tuple[int, ...]] = None
    dyad_census: Optional[Tuple[int, int, int]] = None
    method: str = DEFAULT_DEGREE_METHOD
    swaps_per_edge: int = DEFAULT_SWAPS_PER_EDGE
    max_retries: int = DEFAULT_MAX_RETRIES
    node_attributes: Optional[Dict[Hashable, Dict[str, Any]]] = field(
        default=None, compare=False, hash=False, repr=False
    )
    edge_signs: Optional[Tuple[int, ...]] = field(default=None, repr=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "family", ConstraintFamily(self.family))

        if self.n_nodes < 0:
            raise ValueError(f"n_nodes must be non-negative, got {self.n_nodes}")
        if self.nodes is not None and len(self.nodes) != self.n_nodes:
            raise ValueError(
                f"{len(self.nodes)} node labels given for n_nodes={self.n_nodes}"
            )
        if self.method not in DEGREE_METHODS:
            raise ValueError(f"Unknown degree-sequence method: {self.method}")
        if self.swaps_per_edge < 0 or self.max_retries < 0:
            raise ValueError("swaps_per_edge and max_retries must be non-negative")

        family = self.family
        if family is ConstraintFamily.EDGE_COUNT and self.n_edges is None:
            raise ValueError("EDGE_COUNT constraint needs n_edges")
        if family is ConstraintFamily.DENSITY and self.density is None:
            raise ValueError("DENSITY constraint needs density")
        if family is ConstraintFamily.DEGREE_SEQUENCE:
            if self.directed and (self.out_degrees is None or self.in_degrees is None):
                raise ValueError("Directed DEGREE_SEQUENCE constraint needs out_degrees and in_degrees")
            if not self.directed and self.degree_sequence is None:
                raise ValueError("DEGREE_SEQUENCE constraint needs degree_sequence")
        if family is ConstraintFamily.DYAD_CENSUS and self.dyad_census is None:
            raise ValueError("DYAD_CENSUS constraint needs dyad_census")
        if self.loops and family in (ConstraintFamily.DEGREE_SEQUENCE, ConstraintFamily.DYAD_CENSUS):
            raise ValueError(f"{family.value} constraint is defined for loop-free graphs only")
        if self.edge_signs is not None and any(s not in (1, -1) for s in self.edge_signs):
            raise ValueError("edge_signs must contain only +1 and -1")

    @property
    def node_labels(self) -> Tuple[Hashable, ...]:
        """Labels of generated nodes, in order."""
        if self.nodes is None:
            return tuple(range(self.n_nodes))
        return self.nodes

    def describe(self) -> str:
        """Short human-readable description used in log messages."""
        kind = "directed" if self.directed else "undirected"
        if self.family is ConstraintFamily.EDGE_COUNT:
            target = f"m={self.n_edges}"
        elif self.family is ConstraintFamily.DENSITY:
            target = f"p={self.density:.4f}"
        elif self.family is ConstraintFamily.DEGREE_SEQUENCE:
            target = f"method={self.method}"
        else:
            target = "census=({}, {}, {})".format(*self.dyad_census)
        return f"{self.family.value}({kind}, n={self.n_nodes}, {target})"

    # ------------------------------------------------------------------
    # Constructors
    # ------------------------------------------------------------------

    @classmethod
    def for_edge_count(
        cls,
        n_nodes: int,
        n_edges: int,
        directed: bool = False,
        loops: bool = False,
        **kwargs: Any,
    ) -> "ConstraintSpec":
        """Uniform graphs with exactly ``n_edges`` edges (U|L)."""
        return cls(
            family=ConstraintFamily.EDGE_COUNT,
            n_nodes=n_nodes,
            n_edges=n_edges,
            directed=directed,
            loops=loops,
            **kwargs,
        )

    @classmethod
    def for_density(
        cls,
        n_nodes: int,
        density: float,
        directed: bool = False,
        loops: bool = False,
        **kwargs: Any,
    ) -> "ConstraintSpec":
        """Bernoulli graphs with expected density ``density``."""
        return cls(
            family=ConstraintFamily.DENSITY,
            n_nodes=n_nodes,
            density=density,
            directed=directed,
            loops=loops,
            **kwargs,
        )

    @classmethod
    def for_degree_sequence(
        cls,
        degrees: Tuple[int, ...],
        **kwargs: Any,
    ) -> "ConstraintSpec":
        """Undirected simple graphs with degree sequence ``degrees``."""
        degrees = tuple(int(d) for d in degrees)
        return cls(
            family=ConstraintFamily.DEGREE_SEQUENCE,
            n_nodes=len(degrees),
            degree_sequence=degrees,
            **kwargs,
        )

    @classmethod
    def for_directed_degrees(
        cls,
        out_degrees: Tuple[int, ...],
        in_degrees: Tuple[int, ...],
        **kwargs: Any,
    ) -> "ConstraintSpec":
        """Directed simple graphs with the given out- and in-degrees."""
        if len(out_degrees) != len(in_degrees):
            raise ValueError("out_degrees and in_degrees must have the same length")
        return cls(
            family=ConstraintFamily.DEGREE_SEQUENCE,
            n_nodes=len(out_degrees),
            directed=True,
            out_degrees=tuple(int(d) for d in out_degrees),
            in_degrees=tuple(int(d) for d in in_degrees),
            **kwargs,
        )

    @classmethod
    def for_dyad_census(
        cls,
        n_nodes: int,
        mutual: int,
        asymmetric: int,
        null: int,
        **kwargs: Any,
    ) -> "ConstraintSpec":
        """Directed graphs with a fixed dyad census (U|MAN)."""
        return cls(
            family=ConstraintFamily.DYAD_CENSUS,
            n_nodes=n_nodes,
            directed=True,
            dyad_census=(int(mutual), int(asymmetric), int(null)),
            **kwargs,
        )

    @classmethod
    def from_graph(
        cls,
        G: nx.Graph,
        family: Union[ConstraintFamily, str],
        loops: bool = False,
        keep_node_attributes: bool = True,
        **kwargs: Any,
    ) -> "ConstraintSpec":
        """
        Extract a constraint from an observed graph.

        The observed graph is not modified. Self-loops of the observed graph
        are ignored unless ``loops`` is True.
        The edge signs of a SIGNED graph are recorded so that generated
        graphs carry the same mix of positive and negative ties.

        Parameters
        ----------
        G : nx.Graph
            Observed graph (``Graph`` or ``DiGraph``)
        family : ConstraintFamily or str
            Constraint family to extract
        loops : bool, optional
            Whether generated graphs may contain self-loops (default: False)
        keep_node_attributes : bool, optional
            Copy node attributes onto generated graphs (default: True)
        **kwargs
            Sampler options (``method``, ``swaps_per_edge``, ``max_retries``)

        Returns
        -------
        ConstraintSpec
            Constraint whose targets match ``G``

        Examples
        --------
        >>> G = nx.DiGraph([(0, 1), (1, 0), (1, 2)])
        >>> spec = ConstraintSpec.from_graph(G, "dyad_census")
        >>> spec.dyad_census
        (1, 1, 1)
        """
        if G.is_multigraph():
            raise ValueError("Multigraphs are not supported")

        family = ConstraintFamily(family)
        n = G.number_of_nodes()
        directed = G.is_directed()
        nodes = tuple(G.nodes())
        attributes = (
            {v: dict(data) for v, data in G.nodes(data=True)} if keep_node_attributes else None
        )

        n_loops = nx.number_of_selfloops(G)
        if n_loops and not loops:
            logger.warning(f"Ignoring {n_loops} self-loops of the observed graph")
            H = G.copy()
            H.remove_edges_from(list(nx.selfloop_edges(H)))
        else:
            H = G

        signs = None
        if graph_kind(G) is GraphKind.SIGNED:
            signs = tuple(int(s) for _, _, s in H.edges(data="sign"))

        common = dict(nodes=nodes, node_attributes=attributes, edge_signs=signs, **kwargs)

        if family is ConstraintFamily.EDGE_COUNT:
            m = H.number_of_edges()
            return cls.for_edge_count(n, m, directed=directed, loops=loops, **common)

        if family is ConstraintFamily.DENSITY:
            m = H.number_of_edges()
            capacity = max_edges(n, directed, loops)
            p = m / capacity if capacity > 0 else 0.0
            return cls.for_density(n, p, directed=directed, loops=loops, **common)

        if family is ConstraintFamily.DEGREE_SEQUENCE:
            if directed:
                out_deg, in_deg = degree_sequence(H)
                return cls.for_directed_degrees(out_deg, in_deg, **common)
            return cls.for_degree_sequence(degree_sequence(H), **common)

        if not directed:
            logger.error("Dyad census constraint requested for an undirected graph")
            raise ConstraintInfeasible(
                "Dyad census constraints are defined for directed graphs only",
                details={"n_nodes": n},
            )
        census = dyad_census(H)
        return cls.for_dyad_census(n, *census, **common)
