"""
Significance Module
===================

Empirical significance of an observed statistic against a reference
distribution simulated from a null model.

For ``N`` simulated values:

- right-tail rank = number of simulated values >= observed
- left-tail rank = number of simulated values <= observed
- one-sided p-value = rank / N; a rank of 0 is reported as ``"< 1/N"``
- two-sided p-value = 2 * min(left rank, right rank) / N, capped at 1
"""

import logging
from dataclasses import dataclass
from typing import Sequence, Union

import numpy as np
from numpy.typing import NDArray

logger = logging.getLogger(__name__)

TAILS = ("right", "left", "two-sided")


@dataclass(frozen=True)
class SignificanceAssessment:
    """Ranks and empirical p-values of an observed value."""

    observed: float
    n_draws: int
    tail: str
    rank: int
    rank_left: int
    rank_right: int
    percentile: float
    p_value_one_sided: float
    p_value_two_sided: float
    p_value_is_bound: bool

    @property
    def p_value_label(self) -> str:
        """One-sided p-value as reported, e.g. ``"0.012"`` or ``"< 1/1000"``."""
        return format_p_value(self.p_value_one_sided, self.n_draws, self.p_value_is_bound)


def validate_tail(tail: str) -> str:
    """Return ``tail`` if it names a supported test tail."""
    if tail not in TAILS:
        raise ValueError(f"Unknown tail: {tail!r}. Expected one of {TAILS}")
    return tail


def assess_significance(
    observed: float,
    simulated: Union[Sequence[float], NDArray[np.float64]],
    tail: str = "right",
) -> SignificanceAssessment:
    """
    Rank an observed value within a simulated null distribution.

    Parameters
    ----------
    observed : float
        Statistic of the observed graph
    simulated : Sequence[float]
        Statistic of each null-model draw (never including the observed
        graph)
    tail : str, optional
        ``"right"`` (observed unusually large), ``"left"`` (unusually
        small) or ``"two-sided"``; for ``"two-sided"`` the reported rank is
        the smaller of the two tail ranks (default: "right")

    Returns
    -------
    SignificanceAssessment
        Ranks, percentile and p-values

    Raises
    ------
    ValueError
        If ``simulated`` is empty, any value is NaN, or ``tail`` is unknown

    Examples
    --------
    >>> res = assess_significance(70.0, [10.0, 12.0, 9.0, 11.0])
    >>> res.rank, res.p_value_label
    (0, '< 1/4')
    >>> assess_significance(3.0, [1.0, 2.0, 3.0, 4.0]).p_value_one_sided
    0.5
    """
    validate_tail(tail)
    values = np.asarray(simulated, dtype=float)
    if values.ndim != 1 or values.size == 0:
        raise ValueError("Simulated distribution must be a non-empty 1-D sequence")
    if np.isnan(observed) or np.isnan(values).any():
        raise ValueError(
            f"NaN statistic values are not allowed "
            f"(observed={observed}, {int(np.isnan(values).sum())} NaN draws)"
        )

    n = values.size
    rank_right = int(np.count_nonzero(values >= observed))
    rank_left = int(np.count_nonzero(values <= observed))

    if tail == "right":
        rank = rank_right
    elif tail == "left":
        rank = rank_left
    else:
        rank = min(rank_left, rank_right)

    p_one = rank / n
    p_two = min(1.0, 2.0 * min(rank_left, rank_right) / n)
    percentile = float(np.count_nonzero(values < observed) / n)

    return SignificanceAssessment(
        observed=float(observed),
        n_draws=n,
        tail=tail,
        rank=rank,
        rank_left=rank_left,
        rank_right=rank_right,
        percentile=percentile,
        p_value_one_sided=p_one,
        p_value_two_sided=p_two,
        p_value_is_bound=rank == 0,
    )


def format_p_value(p_value: float, n_draws: int, is_bound: bool = False) -> str:
    """
    Render an empirical p-value.

    Examples
    --------
    >>> format_p_value(0.0, 1000, is_bound=True)
    '< 1/1000'
    >>> format_p_value(0.0125, 1000)
    '0.0125'
    """
    if is_bound:
        return f"< 1/{n_draws}"
    return f"{p_value:.4g}"
