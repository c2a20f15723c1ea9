"""
Validation Module
=================

This module tests observed network statistics against null-model
reference distributions.

Submodules
----------
evaluator
    Reference distribution builder and the ``evaluate`` entry point
significance
    Empirical ranks and p-values
statistical_tests
    z-scores, acceptance intervals and multiple testing corrections
"""

from .evaluator import (
    EvaluationResult,
    build_reference_distribution,
    evaluate,
    simulate_draw,
)
from .significance import (
    TAILS,
    SignificanceAssessment,
    assess_significance,
    format_p_value,
)
from .statistical_tests import (
    null_z_score,
    empirical_interval,
    summarize_null_distribution,
    CORRECTIONS,
    bonferroni_correction,
    correct_p_values,
    fdr_correction,
)

__all__ = [
    # Evaluation
    "EvaluationResult",
    "build_reference_distribution",
    "evaluate",
    "simulate_draw",
    # Significance
    "TAILS",
    "SignificanceAssessment",
    "assess_significance",
    "format_p_value",
    # Statistical tests
    "null_z_score",
    "empirical_interval",
    "summarize_null_distribution",
    "CORRECTIONS",
    "bonferroni_correction",
    "correct_p_values",
    "fdr_correction",
]
