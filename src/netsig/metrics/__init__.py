"""
Metrics Module
==============

This module provides the scalar graph statistics tested against null
models and a descriptive summary of networks.

Submodules
----------
statistics
    Picklable Graph -> float statistics and the statistic registry
network_properties
    Descriptive network summary
"""

from .statistics import (
    STATISTICS,
    UnconnectedPairs,
    evaluate_statistic,
    get_statistic,
    edge_count,
    density,
    mutual_dyads,
    asymmetric_dyads,
    reciprocity,
    transitivity,
    average_clustering,
    triangle_count,
    degree_centralization,
    betweenness_centralization,
    closeness_centralization,
    eigenvector_centralization,
    average_geodesic_distance,
    partition_to_sets,
    partition_modularity,
    assortativity,
    balanced_triangle_fraction,
    core_periphery_fit,
)
from .network_properties import (
    describe_network,
    compute_degree_stats,
    compute_component_stats,
    compute_distance_stats,
)

__all__ = [
    # Statistics
    "STATISTICS",
    "UnconnectedPairs",
    "evaluate_statistic",
    "get_statistic",
    "edge_count",
    "density",
    "mutual_dyads",
    "asymmetric_dyads",
    "reciprocity",
    "transitivity",
    "average_clustering",
    "triangle_count",
    "degree_centralization",
    "betweenness_centralization",
    "closeness_centralization",
    "eigenvector_centralization",
    "average_geodesic_distance",
    "partition_to_sets",
    "partition_modularity",
    "assortativity",
    "balanced_triangle_fraction",
    "core_periphery_fit",
    # Network properties
    "describe_network",
    "compute_degree_stats",
    "compute_component_stats",
    "compute_distance_stats",
]
