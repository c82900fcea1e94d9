"""
Exceptions raised by the assessment harness.

Fatal conditions (``ConfigurationError``, ``BatchAbort``,
``AssessmentCancelled``) propagate to the caller. ``GeneratorFailure`` and
``StatisticComputeFailure`` are recorded per iteration and never escape a
completed batch.
"""

from typing import Any, Optional


class NetGofError(Exception):
    """Base class for all harness errors."""


class ConfigurationError(NetGofError, ValueError):
    """Invalid assessment configuration, detected before any draw."""


class GeneratorFailure(NetGofError):
    """A generator draw failed after the retry bound was exhausted."""

    def __init__(self, index: int, attempts: int, message: str):
        super().__init__(
            f"Draw {index} failed after {attempts} attempt(s): {message}"
        )
        self.index = index
        self.attempts = attempts
        self.message = message


class StatisticComputeFailure(NetGofError):
    """A single statistic could not be evaluated on a single graph."""

    def __init__(self, name: str, cause: BaseException):
        super().__init__(f"Statistic '{name}' failed: {type(cause).__name__}: {cause}")
        self.name = name
        self.cause = cause


class BatchAbort(NetGofError):
    """
    The cumulative failure rate exceeded the configured threshold.

    Attributes
    ----------
    batch : SimulationBatch
        The partial batch collected before the abort, for diagnosis.
    failure_rate : float
        Failures divided by the nominal number of iterations.
    """

    def __init__(self, batch: Any, failure_rate: float, threshold: float):
        super().__init__(
            f"Aborted: failure rate {failure_rate:.1%} exceeds threshold "
            f"{threshold:.1%} ({batch.failure_count}/{batch.n_iter} draws failed)"
        )
        self.batch = batch
        self.failure_rate = failure_rate
        self.threshold = threshold


class AssessmentCancelled(NetGofError):
    """The simulation was cancelled between iterations."""

    def __init__(self, completed: int, n_iter: int, reason: Optional[str] = None):
        message = f"Cancelled after {completed}/{n_iter} iterations"
        if reason:
            message += f": {reason}"
        super().__init__(message)
        self.completed = completed
        self.n_iter = n_iter
