"""
Experiments Module
==================

Command-line scripts for running null-model tests.

Scripts
-------
run_cug_test
    Test a statistic of an edge list against a null model, or compare
    clustering algorithms by modularity significance
"""

__all__ = [
    "run_cug_test",
]
