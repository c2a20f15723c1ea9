"""
Exceptions Module
=================

Typed errors raised while generating null-model graphs and building
reference distributions.

All library errors derive from :class:`NetworkSignificanceError`, so callers
can catch every failure of an evaluation with a single except clause.
"""

from typing import Any, Dict, Optional


class NetworkSignificanceError(Exception):
    """
    Base exception for all netsig errors.

    Parameters
    ----------
    message : str
        Human-readable description of the failure
    details : Dict[str, Any], optional
        Structured information about the failure (constraint values,
        retry counts, ...)
    cause : Exception, optional
        Underlying exception, chained as ``__cause__``

    Examples
    --------
    >>> err = NetworkSignificanceError("failed", details={"n": 3})
    >>> str(err)
    'failed (Details: n=3)'
    """

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None,
    ) -> None:
        self.message = message
        self.details = details or {}
        self.cause = cause

        full_message = message
        if self.details:
            detail_parts = []
            for key, value in self.details.items():
                if isinstance(value, (list, tuple, dict)) and len(str(value)) > 100:
                    detail_parts.append(f"{key}=<{type(value).__name__} with {len(value)} items>")
                else:
                    detail_parts.append(f"{key}={value}")
            full_message += f" (Details: {', '.join(detail_parts)})"

        super().__init__(full_message)

        if cause is not None:
            self.__cause__ = cause

    def __reduce__(self):
        # Rebuild from the original arguments when raised in a worker process
        return (type(self), (self.message, self.details, self.cause))


class ConstraintInfeasible(NetworkSignificanceError, ValueError):
    """
    No simple graph satisfies the requested exact constraint.

    Raised immediately and never retried: an odd degree sum, a non-graphical
    degree sequence, an edge count above the number of available dyads, or a
    dyad census that does not add up to ``n * (n - 1) / 2``.
    """


class GenerationRetryExhausted(NetworkSignificanceError):
    """
    A bounded-retry generation algorithm gave up.

    The partially built graph is discarded. Callers may raise the retry
    budget and call again.

    Parameters
    ----------
    message : str
        Error message
    attempts : int
        Number of attempts made before giving up
    details : Dict[str, Any], optional
        Additional details
    """

    def __init__(
        self,
        message: str,
        attempts: int,
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None,
    ) -> None:
        self.attempts = attempts
        enhanced = dict(details or {})
        enhanced["attempts"] = attempts
        super().__init__(message, details=enhanced, cause=cause)

    def __reduce__(self):
        return (type(self), (self.message, self.attempts, self.details, self.cause))


class EvaluationTimeout(NetworkSignificanceError, TimeoutError):
    """
    The overall evaluation deadline was exceeded.

    Partial results are discarded; a truncated reference distribution is
    never returned.

    Parameters
    ----------
    message : str
        Error message
    completed : int
        Number of draws finished before the deadline
    n_draws : int
        Number of draws requested
    """

    def __init__(
        self,
        message: str,
        completed: int,
        n_draws: int,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.completed = completed
        self.n_draws = n_draws
        enhanced = dict(details or {})
        enhanced.update({"completed": completed, "n_draws": n_draws})
        super().__init__(message, details=enhanced)

    def __reduce__(self):
        return (type(self), (self.message, self.completed, self.n_draws, self.details))


class GraphKindError(NetworkSignificanceError, ValueError):
    """A graph does not satisfy its declared GraphKind."""
