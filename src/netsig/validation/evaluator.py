"""
Evaluator Module
================

Conditional uniform graph (CUG) evaluation: compute a statistic on an
observed graph, build its reference distribution over ``N`` null-model
graphs, and rank the observed value within it.

Reproducibility
---------------
Draw ``i`` is generated from its own random stream, child ``i`` of
``SeedSequence(seed)``. Results are written to an index-addressed array, so
the same master seed gives the same distribution whether draws run serially,
in threads, or in worker processes, and in whatever order they finish.

The observed graph is only ever passed to the statistic; null graphs are
built from the extracted :class:`ConstraintSpec`, so the observed graph is
never part of its own reference distribution.
"""

import logging
import math
import os
import time
from concurrent.futures import (
    FIRST_EXCEPTION,
    ProcessPoolExecutor,
    ThreadPoolExecutor,
    wait,
)
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

import networkx as nx
import numpy as np
from numpy.typing import NDArray

from ..config import DEFAULT_BACKEND, DEFAULT_N_DRAWS, DEFAULT_N_JOBS, DEFAULT_TAIL
from ..exceptions import EvaluationTimeout
from ..generators.constraints import ConstraintFamily, ConstraintSpec
from ..generators.null_models import draw_rng, generate_null_graph
from ..metrics.statistics import StatisticFunction, evaluate_statistic, get_statistic
from .significance import assess_significance, format_p_value, validate_tail
from .statistical_tests import null_z_score

logger = logging.getLogger(__name__)

BACKENDS = ("process", "thread")


@dataclass(frozen=True)
class EvaluationResult:
    """
    Outcome of a CUG evaluation. Immutable once produced.

    Attributes
    ----------
    observed_value : float
        Statistic of the observed graph
    simulated_values : Tuple[float, ...]
        Statistic of each null draw, in draw order
    tail : str
        Tested tail
    rank : int
        Rank of the observed value for ``tail``
    rank_left, rank_right : int
        Number of draws <= / >= the observed value
    percentile : float
        Share of draws strictly below the observed value
    p_value_one_sided : float
        ``rank / N`` (0.0 stands for ``< 1/N``, see ``p_value_label``)
    p_value_two_sided : float
        ``min(1, 2 * min(rank_left, rank_right) / N)``
    p_value_is_bound : bool
        True when the rank is 0 and the p-value is only bounded by ``1/N``
    n_draws : int
        Number of null draws
    seed : int
        Master seed; re-running with it reproduces the result
    statistic : str
        Name of the statistic
    constraint : ConstraintSpec
        Null-model constraint used
    """

    observed_value: float
    simulated_values: Tuple[float, ...]
    tail: str
    rank: int
    rank_left: int
    rank_right: int
    percentile: float
    p_value_one_sided: float
    p_value_two_sided: float
    p_value_is_bound: bool
    n_draws: int
    seed: int
    statistic: str
    constraint: ConstraintSpec = field(repr=False)

    @property
    def p_value_label(self) -> str:
        """One-sided p-value as reported, e.g. ``"< 1/1000"``."""
        return format_p_value(self.p_value_one_sided, self.n_draws, self.p_value_is_bound)

    @property
    def p_value_reported(self) -> float:
        """
        One-sided p-value for numeric use.

        A rank of 0 is reported as its bound ``1/N`` instead of 0.0, so
        multiple-testing corrections and JSON reports never see an exact
        zero.
        """
        if self.p_value_is_bound:
            return 1.0 / self.n_draws
        return self.p_value_one_sided

    @property
    def null_mean(self) -> float:
        return float(np.mean(self.simulated_values))

    @property
    def null_std(self) -> float:
        if self.n_draws < 2:
            return 0.0
        return float(np.std(self.simulated_values, ddof=1))

    @property
    def z_score(self) -> float:
        return null_z_score(self.observed_value, self.simulated_values)

    def to_dict(self, include_values: bool = True) -> Dict[str, Any]:
        """
        Plain-dict view for JSON reporting.

        Parameters
        ----------
        include_values : bool, optional
            Include the simulated values (default: True)

        ``p_value_one_sided`` holds :attr:`p_value_reported`; check
        ``p_value_is_bound`` to tell a bound from an exact value.
        """
        data = asdict(self)
        data.pop("constraint")
        data["constraint"] = self.constraint.describe()
        data["family"] = self.constraint.family.value
        data["p_value_one_sided"] = self.p_value_reported
        data["p_value_label"] = self.p_value_label
        data["null_mean"] = self.null_mean
        data["null_std"] = self.null_std
        data["z_score"] = self.z_score
        data["seed"] = str(self.seed)
        if include_values:
            data["simulated_values"] = list(self.simulated_values)
        else:
            data.pop("simulated_values")
        return data


def simulate_draw(
    spec: ConstraintSpec,
    statistic: StatisticFunction,
    seed: int,
    index: int,
) -> float:
    """Generate null graph ``index`` of the run seeded with ``seed`` and score it."""
    G = generate_null_graph(spec, draw_rng(seed, index))
    return evaluate_statistic(G, statistic)


def _simulate_block(
    spec: ConstraintSpec,
    statistic: StatisticFunction,
    seed: int,
    indices: Sequence[int],
) -> List[float]:
    return [simulate_draw(spec, statistic, seed, i) for i in indices]


def build_reference_distribution(
    spec: ConstraintSpec,
    statistic: StatisticFunction,
    n_draws: int = DEFAULT_N_DRAWS,
    seed: Optional[int] = None,
    n_jobs: int = DEFAULT_N_JOBS,
    backend: str = DEFAULT_BACKEND,
    timeout: Optional[float] = None,
) -> NDArray[np.float64]:
    """
    Statistic values of ``n_draws`` independent null-model graphs.

    Parameters
    ----------
    spec : ConstraintSpec
        Null-model constraint
    statistic : Callable[[nx.Graph], float]
        Statistic; must be picklable for ``backend="process"`` with
        ``n_jobs > 1``
    n_draws : int, optional
        Number of draws (default: 1000)
    seed : int, optional
        Master seed. None draws fresh entropy (the run is then not
        reproducible; :func:`evaluate` records the seed it used)
    n_jobs : int, optional
        Number of workers; -1 uses all CPUs (default: 1, serial)
    backend : str, optional
        ``"process"`` or ``"thread"`` workers (default: "process")
    timeout : float, optional
        Overall deadline in seconds

    Returns
    -------
    NDArray[np.float64]
        Values in draw order

    Raises
    ------
    ConstraintInfeasible, GenerationRetryExhausted
        Raised by any draw; the whole build fails, no draw is dropped
    EvaluationTimeout
        If the deadline passes before all draws finish
    ValueError
        If ``n_draws`` is not a positive integer or ``backend`` is unknown

    Examples
    --------
    >>> from netsig.metrics.statistics import mutual_dyads
    >>> spec = ConstraintSpec.for_edge_count(10, 20, directed=True)
    >>> values = build_reference_distribution(spec, mutual_dyads, n_draws=50, seed=1)
    >>> values.shape
    (50,)
    """
    _check_run_options(n_draws, backend)
    if seed is None:
        seed = np.random.SeedSequence().entropy
    deadline = None if timeout is None else time.monotonic() + timeout
    return _run_draws(spec, statistic, n_draws, seed, n_jobs, backend, deadline, timeout)


def _check_run_options(n_draws: int, backend: str) -> None:
    if isinstance(n_draws, bool) or not isinstance(n_draws, (int, np.integer)) or n_draws < 1:
        raise ValueError(f"n_draws must be a positive integer, got {n_draws!r}")
    if backend not in BACKENDS:
        raise ValueError(f"Unknown backend: {backend!r}. Expected one of {BACKENDS}")


def _run_draws(
    spec: ConstraintSpec,
    statistic: StatisticFunction,
    n_draws: int,
    seed: int,
    n_jobs: int,
    backend: str,
    deadline: Optional[float],
    timeout: Optional[float],
) -> NDArray[np.float64]:
    """Run the draws, failing once ``deadline`` (a ``time.monotonic`` value) passes."""
    if n_jobs == -1:
        n_jobs = os.cpu_count() or 1
    n_jobs = max(1, min(int(n_jobs), n_draws))
    values = np.empty(n_draws, dtype=float)

    logger.debug(
        f"Building reference distribution: {spec.describe()}, "
        f"n_draws={n_draws}, n_jobs={n_jobs}, backend={backend}"
    )

    if n_jobs == 1:
        for index in range(n_draws):
            if deadline is not None and time.monotonic() >= deadline:
                _raise_timeout(index, n_draws, timeout)
            values[index] = simulate_draw(spec, statistic, seed, index)
        if deadline is not None and time.monotonic() > deadline:
            _raise_timeout(n_draws, n_draws, timeout)
        return values

    # Several blocks per worker keep workers busy when draw costs vary
    block_size = max(1, math.ceil(n_draws / (n_jobs * 4)))
    blocks = [
        list(range(start, min(start + block_size, n_draws)))
        for start in range(0, n_draws, block_size)
    ]

    executor_cls = ProcessPoolExecutor if backend == "process" else ThreadPoolExecutor
    executor = executor_cls(max_workers=n_jobs)
    completed = 0
    try:
        futures = {
            executor.submit(_simulate_block, spec, statistic, seed, block): block
            for block in blocks
        }
        pending = set(futures)

        while pending:
            remaining = None
            if deadline is not None:
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    _raise_timeout(completed, n_draws, timeout)

            done, pending = wait(pending, timeout=remaining, return_when=FIRST_EXCEPTION)
            for future in done:
                block = futures[future]
                # Re-raises the first failed draw of the block
                values[block] = future.result()
                completed += len(block)
    finally:
        executor.shutdown(wait=False, cancel_futures=True)

    if deadline is not None and time.monotonic() > deadline:
        _raise_timeout(completed, n_draws, timeout)
    return values


def _raise_timeout(completed: int, n_draws: int, timeout: Optional[float]) -> None:
    logger.error(
        f"Evaluation deadline of {timeout}s exceeded after {completed}/{n_draws} draws; "
        f"discarding partial distribution"
    )
    raise EvaluationTimeout(
        "Evaluation deadline exceeded",
        completed=completed,
        n_draws=n_draws,
        details={"timeout": timeout},
    )


def evaluate(
    graph: nx.Graph,
    statistic: Union[StatisticFunction, str],
    constraint: Union[ConstraintSpec, ConstraintFamily, str] = ConstraintFamily.EDGE_COUNT,
    tail: str = DEFAULT_TAIL,
    n_draws: int = DEFAULT_N_DRAWS,
    seed: Optional[int] = None,
    n_jobs: int = DEFAULT_N_JOBS,
    backend: str = DEFAULT_BACKEND,
    timeout: Optional[float] = None,
    statistic_params: Optional[Dict[str, Any]] = None,
    **constraint_options: Any,
) -> EvaluationResult:
    """
    Conditional uniform graph test of a statistic on an observed graph.

    Parameters
    ----------
    graph : nx.Graph
        Observed graph; not modified
    statistic : Callable or str
        Statistic function, or a registry name (see
        ``netsig.metrics.statistics.STATISTICS``)
    constraint : ConstraintSpec, ConstraintFamily or str, optional
        Null-model constraint, or a family to extract from ``graph``
        (default: EDGE_COUNT)
    tail : str, optional
        ``"right"``, ``"left"`` or ``"two-sided"`` (default: "right")
    n_draws : int, optional
        Number of null draws (default: 1000)
    seed : int, optional
        Master seed; None draws fresh entropy, recorded in the result
    n_jobs : int, optional
        Parallel workers (default: 1)
    backend : str, optional
        ``"process"`` or ``"thread"`` (default: "process")
    timeout : float, optional
        Deadline in seconds for the whole evaluation, observed statistic
        included
    statistic_params : Dict[str, Any], optional
        Parameters bound to a named statistic
    **constraint_options
        Passed to :meth:`ConstraintSpec.from_graph` (``loops``,
        ``method``, ``swaps_per_edge``, ``max_retries``)

    Returns
    -------
    EvaluationResult
        Observed value, simulated values, ranks and p-values

    Examples
    --------
    >>> G = nx.gnm_random_graph(30, 60, seed=3, directed=True)
    >>> result = evaluate(G, "mutual", "edge_count", n_draws=100, seed=42)
    >>> 0.0 <= result.p_value_one_sided <= 1.0
    True
    """
    validate_tail(tail)
    _check_run_options(n_draws, backend)
    start_time = time.monotonic()
    deadline = None if timeout is None else start_time + timeout

    if isinstance(statistic, str):
        statistic_name = statistic
        statistic = get_statistic(statistic, **(statistic_params or {}))
    else:
        statistic_name = _statistic_name(statistic)

    if isinstance(constraint, ConstraintSpec):
        spec = constraint
    else:
        spec = ConstraintSpec.from_graph(graph, constraint, **constraint_options)

    if seed is None:
        seed = np.random.SeedSequence().entropy
        logger.info(f"No seed given, using generated seed {seed}")

    logger.info(
        f"Evaluating '{statistic_name}' against {spec.describe()} "
        f"with {n_draws} draws (tail={tail})"
    )

    observed = evaluate_statistic(graph, statistic)
    if deadline is not None and time.monotonic() > deadline:
        _raise_timeout(0, n_draws, timeout)
    simulated = _run_draws(spec, statistic, n_draws, seed, n_jobs, backend, deadline, timeout)
    assessment = assess_significance(observed, simulated, tail=tail)

    elapsed = time.monotonic() - start_time
    logger.info(
        f"'{statistic_name}': observed={observed:.4g}, null mean={np.mean(simulated):.4g}, "
        f"rank={assessment.rank}/{n_draws}, p={assessment.p_value_label} "
        f"(two-sided {assessment.p_value_two_sided:.4g}) in {elapsed:.1f}s"
    )

    return EvaluationResult(
        observed_value=assessment.observed,
        simulated_values=tuple(float(v) for v in simulated),
        tail=tail,
        rank=assessment.rank,
        rank_left=assessment.rank_left,
        rank_right=assessment.rank_right,
        percentile=assessment.percentile,
        p_value_one_sided=assessment.p_value_one_sided,
        p_value_two_sided=assessment.p_value_two_sided,
        p_value_is_bound=assessment.p_value_is_bound,
        n_draws=assessment.n_draws,
        seed=seed,
        statistic=statistic_name,
        constraint=spec,
    )


def _statistic_name(statistic: StatisticFunction) -> str:
    func = getattr(statistic, "func", statistic)
    return getattr(func, "__name__", type(func).__name__)
