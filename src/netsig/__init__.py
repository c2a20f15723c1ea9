"""
netsig: Conditional Uniform Graph Tests
=======================================

Tests whether a statistic of an observed network is unusual compared with
random graphs that share chosen structural features (edge count, density,
degree sequence or dyad census).

Modules
-------
network
    Graph kinds, construction, validation and structural summaries
generators
    Constraint descriptions and null-model graph generators
metrics
    Network statistics and descriptive summaries
validation
    Reference distributions, empirical ranks and p-values
algorithms
    Community detection and modularity comparison against null models
"""

__version__ = "0.1.0"

from . import network
from . import generators
from . import metrics
from . import validation
from . import algorithms

from .exceptions import (
    NetworkSignificanceError,
    ConstraintInfeasible,
    GenerationRetryExhausted,
    EvaluationTimeout,
    GraphKindError,
)
from .generators import ConstraintFamily, ConstraintSpec
from .network import GraphKind, build_network
from .validation import EvaluationResult, build_reference_distribution, evaluate

__all__ = [
    "network",
    "generators",
    "metrics",
    "validation",
    "algorithms",
    "NetworkSignificanceError",
    "ConstraintInfeasible",
    "GenerationRetryExhausted",
    "EvaluationTimeout",
    "GraphKindError",
    "ConstraintFamily",
    "ConstraintSpec",
    "GraphKind",
    "build_network",
    "EvaluationResult",
    "build_reference_distribution",
    "evaluate",
    "__version__",
]
