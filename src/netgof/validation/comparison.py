"""
Empirical Comparison Module
===========================

This module positions the observed network's statistics within the
empirical distributions built from a simulation batch.

For every scalar statistic the observed value receives a percentile rank
with midpoint tie handling,

    rank = (#{x < obs} + 0.5 * #{x == obs}) / n_valid

and is flagged as extreme when ``rank < alpha / 2`` or
``rank > 1 - alpha / 2`` (a two-sided empirical test: the candidate model
is rejected for that statistic at level ``alpha``). Vector statistics
such as the degree sequence are kept for visual comparison only.
"""

import logging
import math
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple

import numpy as np
from scipy import stats

from ..config import DEFAULT_ALPHA, validate_alpha
from ..exceptions import ConfigurationError
from ..metrics.registry import SCALAR
from .simulation import ObservedStats, SimulationBatch

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StatisticComparison:
    """
    Observed value of one scalar statistic against its empirical distribution.

    Attributes
    ----------
    name : str
        Statistic name
    observed : float
        Value on the observed graph (NaN if it could not be computed)
    samples : Tuple[float, ...]
        Valid sampled values in iteration order
    n_valid : int
        Number of valid samples
    n_missing : int
        Runs in which the statistic could not be evaluated
    percentile_rank : float
        Midpoint percentile rank of the observed value, in [0, 1]
    extreme : bool
        True when the observed value falls outside the central
        ``1 - alpha`` region of the empirical distribution
    mean, sd : float
        Empirical mean and sample standard deviation
    z_score : float
        ``(observed - mean) / sd``; 0 or +/-inf for a constant distribution
    p_value : float
        Two-sided empirical p-value, ``min(1, 2 * min(rank, 1 - rank))``
    label : str
        Human-readable name
    """

    name: str
    observed: float
    samples: Tuple[float, ...]
    n_valid: int
    n_missing: int
    percentile_rank: float
    extreme: bool
    mean: float
    sd: float
    z_score: float
    p_value: float
    label: str = ""

    def to_dict(self, include_samples: bool = True) -> Dict[str, Any]:
        result = {
            "statistic": self.name,
            "label": self.label,
            "observed": _json_float(self.observed),
            "percentile_rank": _json_float(self.percentile_rank),
            "extreme": bool(self.extreme),
            "mean": _json_float(self.mean),
            "sd": _json_float(self.sd),
            "z_score": _json_float(self.z_score),
            "p_value": _json_float(self.p_value),
            "n_valid": self.n_valid,
            "n_missing": self.n_missing,
        }
        if include_samples:
            result["samples"] = list(self.samples)
        return result


@dataclass(frozen=True)
class DistributionComparison:
    """
    Observed vector statistic (e.g. degree sequence) against sampled vectors.

    ``ks_statistic`` is the Kolmogorov-Smirnov distance between the
    observed values and the pooled sampled values; it is a diagnostic and
    is never used for flagging.
    """

    name: str
    observed: Optional[Tuple[float, ...]]
    samples: Tuple[Tuple[float, ...], ...]
    n_valid: int
    n_missing: int
    ks_statistic: float
    label: str = ""

    def to_dict(self, include_samples: bool = True) -> Dict[str, Any]:
        result = {
            "statistic": self.name,
            "label": self.label,
            "observed": list(self.observed) if self.observed is not None else None,
            "ks_statistic": _json_float(self.ks_statistic),
            "n_valid": self.n_valid,
            "n_missing": self.n_missing,
        }
        if include_samples:
            result["samples"] = [list(s) for s in self.samples]
        return result


@dataclass(frozen=True)
class AssessmentResult(Mapping):
    """
    Immutable mapping of statistic name to ``StatisticComparison``.

    Vector statistics are available through ``distributions``.
    """

    comparisons: Mapping[str, StatisticComparison]
    distributions: Mapping[str, DistributionComparison] = field(default_factory=dict)
    alpha: float = DEFAULT_ALPHA
    n_iter: int = 0
    failure_count: int = 0

    def __post_init__(self):
        object.__setattr__(self, "comparisons", MappingProxyType(dict(self.comparisons)))
        object.__setattr__(self, "distributions", MappingProxyType(dict(self.distributions)))

    def __getitem__(self, name: str) -> StatisticComparison:
        return self.comparisons[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self.comparisons)

    def __len__(self) -> int:
        return len(self.comparisons)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AssessmentResult):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    @property
    def n_valid_draws(self) -> int:
        return self.n_iter - self.failure_count

    def extreme_statistics(self) -> List[str]:
        """Names of the statistics flagged as extreme."""
        return [name for name, c in self.comparisons.items() if c.extreme]

    def to_dict(self, include_samples: bool = True) -> Dict[str, Any]:
        """JSON-serializable representation (NaN and inf become None / strings)."""
        return {
            "alpha": self.alpha,
            "n_iter": self.n_iter,
            "failure_count": self.failure_count,
            "statistics": {
                name: c.to_dict(include_samples) for name, c in self.comparisons.items()
            },
            "distributions": {
                name: d.to_dict(include_samples) for name, d in self.distributions.items()
            },
        }


def percentile_rank(samples: Sequence[float], observed: float) -> float:
    """
    Midpoint percentile rank of ``observed`` among ``samples``.

    Equals ``(#{x < observed} + 0.5 * #{x == observed}) / n``, i.e.
    ``scipy.stats.percentileofscore(..., kind="mean") / 100``.
    Returns NaN for an empty sample or a missing observed value.

    Examples
    --------
    >>> percentile_rank([1.0, 2.0, 3.0, 4.0], 2.0)
    0.375
    >>> percentile_rank([5.0, 5.0, 5.0], 5.0)
    0.5
    """
    samples = np.asarray(samples, dtype=float)
    if samples.size == 0 or observed is None or not np.isfinite(observed):
        return float("nan")
    return float(stats.percentileofscore(samples, observed, kind="mean")) / 100.0


def is_extreme(rank: float, alpha: float = DEFAULT_ALPHA) -> bool:
    """
    Two-sided empirical test at level ``alpha``.

    Examples
    --------
    >>> is_extreme(0.01), is_extreme(0.5), is_extreme(0.99)
    (True, False, True)
    """
    if rank is None or np.isnan(rank):
        return False
    return bool(rank < alpha / 2 or rank > 1 - alpha / 2)


def compare(
    batch: SimulationBatch,
    observed_stats: ObservedStats,
    alpha: float = DEFAULT_ALPHA,
) -> AssessmentResult:
    """
    Score the observed statistics against the empirical distributions.

    Parameters
    ----------
    batch : SimulationBatch
        Output of ``run_simulations``
    observed_stats : ObservedStats
        Output of ``observe`` with the same registry
    alpha : float, optional
        Level of the two-sided empirical test (default: 0.05)

    Returns
    -------
    AssessmentResult

    Raises
    ------
    ConfigurationError
        If ``alpha`` is outside (0, 1) or the batch and the observed
        statistics were computed with different registries
    """
    validate_alpha(alpha)
    if batch.registry != observed_stats.registry:
        raise ConfigurationError(
            "Observed and simulated statistics must come from the same registry: "
            f"{list(observed_stats.registry)} vs {list(batch.registry)}"
        )
    if not batch.complete:
        logger.warning("Comparing a partial batch")

    comparisons: Dict[str, StatisticComparison] = {}
    distributions: Dict[str, DistributionComparison] = {}

    for name, spec in batch.registry.items():
        values = batch.values(name)
        valid = [v for v in values if v is not None]
        n_missing = len(values) - len(valid)
        if n_missing:
            logger.info(f"{name}: {n_missing} of {len(values)} runs missing, using {len(valid)}")

        if spec.kind == SCALAR:
            comparisons[name] = _compare_scalar(
                name, spec.label, observed_stats.values.get(name), valid, n_missing, alpha
            )
        else:
            distributions[name] = _compare_vector(
                name, spec.label, observed_stats.values.get(name), valid, n_missing
            )

    return AssessmentResult(
        comparisons=comparisons,
        distributions=distributions,
        alpha=alpha,
        n_iter=batch.n_iter,
        failure_count=batch.failure_count,
    )


def _compare_scalar(
    name: str,
    label: str,
    observed: Optional[float],
    valid: List[float],
    n_missing: int,
    alpha: float,
) -> StatisticComparison:
    samples = np.asarray(valid, dtype=float)
    nan = float("nan")

    if observed is None:
        logger.warning(f"{name}: observed value missing, statistic not scored")
        observed = nan

    if samples.size == 0:
        logger.warning(f"{name}: no valid samples, statistic not scored")
        return StatisticComparison(
            name=name, observed=observed, samples=(), n_valid=0, n_missing=n_missing,
            percentile_rank=nan, extreme=False, mean=nan, sd=nan, z_score=nan,
            p_value=nan, label=label,
        )

    mean = float(np.mean(samples))
    constant = bool(np.all(samples == samples[0]))
    sd = 0.0 if constant else float(np.std(samples, ddof=1))
    rank = percentile_rank(samples, observed)

    if math.isnan(observed):
        z_score, extreme = nan, False
    elif constant:
        # Zero variance: only a departure from the constant counts
        differs = observed != samples[0]
        z_score = math.copysign(math.inf, observed - samples[0]) if differs else 0.0
        extreme = bool(differs)
    else:
        z_score = (observed - mean) / sd
        extreme = is_extreme(rank, alpha)

    p_value = nan if math.isnan(rank) else min(1.0, 2.0 * min(rank, 1.0 - rank))

    return StatisticComparison(
        name=name,
        observed=float(observed),
        samples=tuple(float(v) for v in samples),
        n_valid=int(samples.size),
        n_missing=n_missing,
        percentile_rank=rank,
        extreme=extreme,
        mean=mean,
        sd=sd,
        z_score=float(z_score),
        p_value=float(p_value),
        label=label,
    )


def _compare_vector(
    name: str,
    label: str,
    observed: Optional[Tuple[float, ...]],
    valid: List[Tuple[float, ...]],
    n_missing: int,
) -> DistributionComparison:
    ks_statistic = float("nan")
    pooled = [v for sample in valid for v in sample]
    if observed and pooled:
        ks_statistic = float(stats.ks_2samp(observed, pooled).statistic)

    return DistributionComparison(
        name=name,
        observed=tuple(observed) if observed is not None else None,
        samples=tuple(tuple(s) for s in valid),
        n_valid=len(valid),
        n_missing=n_missing,
        ks_statistic=ks_statistic,
        label=label,
    )


def _json_float(value: float) -> Any:
    if value is None or math.isnan(value):
        return None
    if math.isinf(value):
        return "inf" if value > 0 else "-inf"
    return float(value)
