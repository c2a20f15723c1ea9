"""
Algorithms Module
=================

Community detection algorithms and the comparison of their modularity
against null-model reference distributions.
"""

from .community_detection import (
    ALGORITHMS,
    detect_communities,
    detect_communities_louvain,
    detect_communities_leiden,
    detect_communities_greedy,
    detect_communities_label_propagation,
    detect_communities_walktrap,
    detect_communities_infomap,
    compute_nmi,
    compute_ari,
    detected_modularity,
    compare_clustering_algorithms,
)

__all__ = [
    "ALGORITHMS",
    "detect_communities",
    "detect_communities_louvain",
    "detect_communities_leiden",
    "detect_communities_greedy",
    "detect_communities_label_propagation",
    "detect_communities_walktrap",
    "detect_communities_infomap",
    "compute_nmi",
    "compute_ari",
    "detected_modularity",
    "compare_clustering_algorithms",
]
