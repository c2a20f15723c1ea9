"""
Network Module
==============

Graph construction with an explicit graph kind, two-mode projection and
extraction of structural invariants.

Submodules
----------
construction
    GraphKind, build_network, validation, degree sequences and dyad census
"""

from .construction import (
    GraphKind,
    DyadCensus,
    build_network,
    graph_kind,
    validate_graph,
    project_two_mode,
    max_edges,
    degree_sequence,
    dyad_census,
)

__all__ = [
    "GraphKind",
    "DyadCensus",
    "build_network",
    "graph_kind",
    "validate_graph",
    "project_two_mode",
    "max_edges",
    "degree_sequence",
    "dyad_census",
]
