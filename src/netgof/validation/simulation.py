"""
Simulation Module
=================

This module draws repeated samples from a candidate generative model and
extracts the registered statistics from every sample.

Each iteration receives its own child of one ``numpy.random.SeedSequence``,
so a batch is reproducible from its seed whatever the number of worker
threads and whatever order the draws complete in. Sampled graphs are
discarded as soon as their statistics are extracted; only the values are
kept.

Failure policy
--------------
- A failed draw is retried ``max_retries`` times with the same
  per-iteration stream, then recorded as a failure.
- A statistic that cannot be evaluated is recorded as missing for that
  run only.
- Once the failure rate exceeds ``max_failure_rate`` the batch aborts with
  ``BatchAbort`` carrying the partial batch.
"""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

import networkx as nx
import numpy as np

from ..config import (
    DEFAULT_LOG_EVERY,
    DEFAULT_MAX_FAILURE_RATE,
    DEFAULT_MAX_RETRIES,
    DEFAULT_N_ITER,
    DEFAULT_N_JOBS,
    validate_n_iter,
    validate_retry_settings,
)
from ..exceptions import AssessmentCancelled, BatchAbort, ConfigurationError, GeneratorFailure
from ..generators.samplers import SampleGenerator
from ..metrics.registry import StatisticRegistry, default_registry

logger = logging.getLogger(__name__)

SeedLike = Union[None, int, np.random.SeedSequence]


@dataclass(frozen=True)
class SimulationRun:
    """
    Statistic values extracted from one simulated graph.

    ``values`` maps every registered statistic to its value, or to None
    when the statistic could not be evaluated; ``errors`` holds the
    messages of those failures.
    """

    index: int
    values: Mapping[str, Any]
    errors: Mapping[str, str] = field(default_factory=dict)

    def is_missing(self, name: str) -> bool:
        return self.values.get(name) is None


@dataclass(frozen=True)
class ObservedStats:
    """The registry applied once to the observed graph."""

    registry: StatisticRegistry
    values: Mapping[str, Any]
    errors: Mapping[str, str] = field(default_factory=dict)

    def is_missing(self, name: str) -> bool:
        return self.values.get(name) is None


@dataclass(frozen=True)
class SimulationBatch:
    """
    Ordered statistic values from ``n_iter`` nominal draws.

    Attributes
    ----------
    n_iter : int
        Number of iterations requested
    registry : StatisticRegistry
        Statistics evaluated on every sample
    runs : Tuple[SimulationRun, ...]
        Successful iterations in index order
    failures : Tuple[GeneratorFailure, ...]
        Failed iterations in index order
    entropy : int, optional
        Entropy of the root seed sequence
    complete : bool
        False for the partial batch attached to ``BatchAbort``
    """

    n_iter: int
    registry: StatisticRegistry
    runs: Tuple[SimulationRun, ...]
    failures: Tuple[GeneratorFailure, ...] = ()
    entropy: Optional[int] = None
    complete: bool = True

    def __len__(self) -> int:
        return len(self.runs)

    @property
    def statistic_names(self) -> Tuple[str, ...]:
        return self.registry.names

    @property
    def failure_count(self) -> int:
        return len(self.failures)

    @property
    def failure_rate(self) -> float:
        return self.failure_count / self.n_iter

    def values(self, name: str) -> List[Any]:
        """Values of one statistic across runs, None marking missing ones."""
        self._check_name(name)
        return [run.values.get(name) for run in self.runs]

    def valid_values(self, name: str) -> List[Any]:
        """Non-missing values of one statistic, in index order."""
        return [v for v in self.values(name) if v is not None]

    def n_missing(self, name: str) -> int:
        """Number of runs in which ``name`` could not be evaluated."""
        return sum(1 for v in self.values(name) if v is None)

    def _check_name(self, name: str) -> None:
        if name not in self.registry:
            raise KeyError(f"Statistic '{name}' was not computed in this batch")


def observe(G: nx.Graph, registry: Optional[StatisticRegistry] = None) -> ObservedStats:
    """
    Apply the registry to the observed graph.

    Parameters
    ----------
    G : nx.Graph
        Observed (reference) graph
    registry : StatisticRegistry, optional
        Statistics to compute (default: ``default_registry()``)

    Returns
    -------
    ObservedStats
    """
    if not isinstance(G, nx.Graph):
        raise ConfigurationError(f"Observed graph must be a networkx Graph, got {type(G).__name__}")
    if registry is None:
        registry = default_registry()

    values, errors = registry.evaluate(G)
    for message in errors.values():
        logger.warning(f"Observed graph: {message}")
    return ObservedStats(registry=registry, values=values, errors=errors)


def run_simulations(
    generator: SampleGenerator,
    n_iter: int = DEFAULT_N_ITER,
    registry: Optional[StatisticRegistry] = None,
    seed: SeedLike = None,
    max_retries: int = DEFAULT_MAX_RETRIES,
    max_failure_rate: float = DEFAULT_MAX_FAILURE_RATE,
    n_jobs: int = DEFAULT_N_JOBS,
    cancel_event: Optional[threading.Event] = None,
    log_every: int = DEFAULT_LOG_EVERY,
) -> SimulationBatch:
    """
    Draw ``n_iter`` graphs from ``generator`` and extract their statistics.

    Parameters
    ----------
    generator : SampleGenerator
        Callable mapping a ``numpy.random.Generator`` to an ``nx.Graph``
    n_iter : int, optional
        Number of draws (default: 1000)
    registry : StatisticRegistry, optional
        Statistics to evaluate (default: ``default_registry()``)
    seed : int or np.random.SeedSequence, optional
        Root of the randomness for this batch. Passing one SeedSequence to
        several calls yields distinct, reproducible batches.
    max_retries : int, optional
        Retries per failed draw (default: 1)
    max_failure_rate : float, optional
        Abort threshold on the fraction of failed draws (default: 0.5)
    n_jobs : int, optional
        Worker threads (default: 1, sequential)
    cancel_event : threading.Event, optional
        Checked between iterations; when set the batch is discarded and
        ``AssessmentCancelled`` is raised
    log_every : int, optional
        Progress logging interval (default: 100)

    Returns
    -------
    SimulationBatch
        Runs in index order; ``len(batch) == n_iter - batch.failure_count``

    Raises
    ------
    ConfigurationError
        On invalid settings, before any draw
    BatchAbort
        When the failure rate exceeds ``max_failure_rate``
    AssessmentCancelled
        When ``cancel_event`` is set

    Examples
    --------
    >>> import networkx as nx
    >>> from netgof.generators import erdos_renyi_gnm
    >>> from netgof.metrics import default_registry
    >>> batch = run_simulations(
    ...     erdos_renyi_gnm(20, 40), n_iter=10,
    ...     registry=default_registry().subset(["transitivity"]), seed=42,
    ... )
    >>> len(batch)
    10
    """
    validate_n_iter(n_iter)
    validate_retry_settings(max_retries, max_failure_rate)
    if not callable(generator):
        raise ConfigurationError("generator must be callable")
    if not isinstance(n_jobs, (int, np.integer)) or isinstance(n_jobs, bool) or n_jobs < 1:
        raise ConfigurationError(f"n_jobs must be a positive integer, got {n_jobs!r}")
    if registry is None:
        registry = default_registry()
    if not isinstance(registry, StatisticRegistry):
        raise ConfigurationError("registry must be a StatisticRegistry")

    root = seed if isinstance(seed, np.random.SeedSequence) else np.random.SeedSequence(seed)
    children = root.spawn(n_iter)
    name = getattr(generator, "__name__", type(generator).__name__)

    logger.info(
        f"Simulating {n_iter} draws from {name} "
        f"({len(registry)} statistics, n_jobs={n_jobs})"
    )

    tracker = _BatchTracker(n_iter, registry, root.entropy, max_failure_rate, log_every)

    if n_jobs == 1:
        for index, child in enumerate(children):
            _check_cancelled(cancel_event, tracker)
            tracker.record(_run_iteration(index, child, generator, registry, max_retries))
    else:
        with ThreadPoolExecutor(max_workers=n_jobs) as executor:
            futures = {
                executor.submit(
                    _run_iteration, index, child, generator, registry, max_retries, cancel_event
                ): index
                for index, child in enumerate(children)
            }
            try:
                for future in as_completed(futures):
                    _check_cancelled(cancel_event, tracker)
                    tracker.record(future.result())
            except BaseException:
                for future in futures:
                    future.cancel()
                raise

    batch = tracker.batch(complete=True)
    logger.info(
        f"Simulation complete: {len(batch)}/{n_iter} successful draws, "
        f"{batch.failure_count} failed"
    )
    return batch


class _BatchTracker:
    """Collects iteration outcomes keyed by index and enforces the abort threshold."""

    def __init__(
        self,
        n_iter: int,
        registry: StatisticRegistry,
        entropy: Optional[int],
        max_failure_rate: float,
        log_every: int,
    ):
        self.n_iter = n_iter
        self.registry = registry
        self.entropy = entropy
        self.max_failure_rate = max_failure_rate
        self.log_every = log_every
        self.runs: Dict[int, SimulationRun] = {}
        self.failures: Dict[int, GeneratorFailure] = {}

    @property
    def completed(self) -> int:
        return len(self.runs) + len(self.failures)

    def record(self, outcome: Union[SimulationRun, GeneratorFailure, None]) -> None:
        if outcome is None:
            return

        if isinstance(outcome, GeneratorFailure):
            self.failures[outcome.index] = outcome
            logger.warning(
                f"Draw {outcome.index} failed after {outcome.attempts} attempt(s): "
                f"{outcome.message}"
            )
            failure_rate = len(self.failures) / self.n_iter
            if failure_rate > self.max_failure_rate:
                partial = self.batch(complete=False)
                logger.error(
                    f"Failure rate {failure_rate:.1%} exceeds {self.max_failure_rate:.1%}, "
                    f"aborting after {self.completed}/{self.n_iter} iterations"
                )
                raise BatchAbort(partial, failure_rate, self.max_failure_rate)
        else:
            self.runs[outcome.index] = outcome
            for message in outcome.errors.values():
                logger.debug(f"Draw {outcome.index}: {message}")

        if self.completed % self.log_every == 0:
            logger.info(f"  {self.completed}/{self.n_iter} draws")

    def batch(self, complete: bool) -> SimulationBatch:
        return SimulationBatch(
            n_iter=self.n_iter,
            registry=self.registry,
            runs=tuple(self.runs[i] for i in sorted(self.runs)),
            failures=tuple(self.failures[i] for i in sorted(self.failures)),
            entropy=self.entropy,
            complete=complete,
        )


def _check_cancelled(cancel_event: Optional[threading.Event], tracker: _BatchTracker) -> None:
    if cancel_event is not None and cancel_event.is_set():
        logger.info(f"Simulation cancelled after {tracker.completed}/{tracker.n_iter} draws")
        raise AssessmentCancelled(tracker.completed, tracker.n_iter)


def _run_iteration(
    index: int,
    seed_sequence: np.random.SeedSequence,
    generator: SampleGenerator,
    registry: StatisticRegistry,
    max_retries: int,
    cancel_event: Optional[threading.Event] = None,
) -> Union[SimulationRun, GeneratorFailure, None]:
    """Draw one graph (with retries) and evaluate the registry on it."""
    if cancel_event is not None and cancel_event.is_set():
        return None

    rng = np.random.default_rng(seed_sequence)
    last_error: Optional[Exception] = None

    for attempt in range(1, max_retries + 2):
        try:
            G = generator(rng)
            if not isinstance(G, nx.Graph):
                raise TypeError(f"generator returned {type(G).__name__}, not a networkx Graph")
        except Exception as e:
            last_error = e
            logger.debug(f"Draw {index}, attempt {attempt} failed: {e}")
            continue

        values, errors = registry.evaluate(G)
        return SimulationRun(index=index, values=values, errors=errors)

    return GeneratorFailure(
        index=index,
        attempts=max_retries + 1,
        message=f"{type(last_error).__name__}: {last_error}",
    )
