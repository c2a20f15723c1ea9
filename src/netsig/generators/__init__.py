"""
Generators Module
=================

This module provides the constraint descriptions and the null-model
graph generators used to build reference distributions.

Submodules
----------
constraints
    ConstraintFamily and ConstraintSpec
null_models
    Edge-count, density, degree-sequence and dyad-census generators
"""

from .constraints import ConstraintFamily, ConstraintSpec
from .null_models import (
    assign_edge_signs,
    draw_rng,
    generate_null_graph,
    iter_null_graphs,
    sample_fixed_edge_count,
    sample_fixed_density,
    sample_fixed_degree_sequence,
    sample_fixed_directed_degree_sequence,
    sample_fixed_dyad_census,
    unrank_dyads,
)

__all__ = [
    # Constraints
    "ConstraintFamily",
    "ConstraintSpec",
    # Null models
    "assign_edge_signs",
    "draw_rng",
    "generate_null_graph",
    "iter_null_graphs",
    "sample_fixed_edge_count",
    "sample_fixed_density",
    "sample_fixed_degree_sequence",
    "sample_fixed_directed_degree_sequence",
    "sample_fixed_dyad_census",
    "unrank_dyads",
]
