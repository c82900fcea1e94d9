"""
Assessment Module
=================

This module ties the harness together: apply the registry to the observed
graph, simulate from a candidate model, compare, and package the outcome
as an ``AssessmentReport`` (numeric table, multi-panel figure, and the
underlying ``AssessmentResult`` for further analysis).

``compare_models`` assesses several candidate models against the same
observed graph from one session seed.
"""

import dataclasses
import logging
import threading
from typing import Any, Dict, Mapping, Optional, Tuple

import matplotlib.pyplot as plt
import networkx as nx
import numpy as np
import pandas as pd

from ..config import RANDOM_SEED, AssessmentConfig
from ..exceptions import ConfigurationError
from ..generators.samplers import SampleGenerator
from ..metrics.registry import StatisticRegistry
from ..visualization.plots import plot_assessment
from ..visualization.tables import assessment_table
from .comparison import AssessmentResult, compare
from .simulation import SeedLike, observe, run_simulations

logger = logging.getLogger(__name__)


class AssessmentReport:
    """
    Renderable outcome of one assessment.

    Parameters
    ----------
    result : AssessmentResult
        Comparison of the observed graph with one candidate model
    model_name : str, optional
        Name of the candidate model, used in titles and tables

    Examples
    --------
    >>> import networkx as nx
    >>> from netgof.generators import gnm_like
    >>> G = nx.florentine_families_graph()
    >>> report = assess(G, gnm_like(G), n_iter=50, seed=1,
    ...                 statistics=("transitivity", "n_edges"))
    >>> report.result["n_edges"].extreme
    False
    """

    def __init__(self, result: AssessmentResult, model_name: str = "model"):
        self.result = result
        self.model_name = model_name

    def __repr__(self) -> str:
        flagged = self.result.extreme_statistics()
        return (
            f"AssessmentReport(model={self.model_name!r}, statistics={len(self.result)}, "
            f"extreme={flagged})"
        )

    def table(self) -> pd.DataFrame:
        """Numeric table: one row per scalar statistic."""
        return assessment_table(self.result)

    def plot(self, title: Optional[str] = None, **kwargs: Any) -> plt.Figure:
        """Multi-panel figure: one histogram per statistic, observed value marked."""
        if title is None:
            title = (
                f"{self.model_name}: {self.result.n_valid_draws}/{self.result.n_iter} draws, "
                f"alpha = {self.result.alpha}"
            )
        return plot_assessment(self.result, title=title, **kwargs)

    def render(self, **kwargs: Any) -> Tuple[plt.Figure, AssessmentResult]:
        """Return the rendered figure together with the underlying result."""
        return self.plot(**kwargs), self.result

    def summary(self) -> str:
        """One-line textual summary."""
        flagged = self.result.extreme_statistics()
        verdict = f"extreme: {', '.join(flagged)}" if flagged else "no statistic flagged"
        return (
            f"{self.model_name}: {len(self.result)} statistics, {verdict} "
            f"(alpha = {self.result.alpha}, {self.result.failure_count} failed draws)"
        )

    def to_dict(self, include_samples: bool = True) -> Dict[str, Any]:
        data = self.result.to_dict(include_samples=include_samples)
        data["model"] = self.model_name
        return data


def assess(
    observed: nx.Graph,
    generator: SampleGenerator,
    registry: Optional[StatisticRegistry] = None,
    config: Optional[AssessmentConfig] = None,
    seed: SeedLike = None,
    model_name: Optional[str] = None,
    cancel_event: Optional[threading.Event] = None,
    **overrides: Any,
) -> AssessmentReport:
    """
    Assess how well a generative model reproduces an observed graph.

    Parameters
    ----------
    observed : nx.Graph
        Observed (reference) graph
    generator : SampleGenerator
        Candidate model; its scale should match ``observed``
    registry : StatisticRegistry, optional
        Statistics to compare. Takes precedence over ``config.statistics``.
    config : AssessmentConfig, optional
        Settings (default: ``AssessmentConfig()``)
    seed : int or np.random.SeedSequence, optional
        Randomness root for the simulation
    model_name : str, optional
        Label of the model (default: the generator's ``__name__``)
    cancel_event : threading.Event, optional
        Cooperative cancellation flag
    **overrides
        Individual ``AssessmentConfig`` fields (n_iter, alpha, max_retries,
        max_failure_rate, n_jobs, statistics, log_every)

    Returns
    -------
    AssessmentReport

    Raises
    ------
    ConfigurationError
        Invalid settings, before any draw
    BatchAbort
        Too many generator failures
    AssessmentCancelled
        ``cancel_event`` was set
    """
    config = _resolve_config(config, overrides)
    if registry is None:
        registry = config.registry()
    if not isinstance(observed, nx.Graph):
        raise ConfigurationError(
            f"Observed graph must be a networkx Graph, got {type(observed).__name__}"
        )
    if model_name is None:
        model_name = getattr(generator, "__name__", type(generator).__name__)

    logger.info(
        f"Assessing {model_name} against observed graph "
        f"({observed.number_of_nodes()} nodes, {observed.number_of_edges()} edges)"
    )

    observed_stats = observe(observed, registry)
    batch = run_simulations(
        generator,
        n_iter=config.n_iter,
        registry=registry,
        seed=seed,
        max_retries=config.max_retries,
        max_failure_rate=config.max_failure_rate,
        n_jobs=config.n_jobs,
        cancel_event=cancel_event,
        log_every=config.log_every,
    )
    result = compare(batch, observed_stats, alpha=config.alpha)

    report = AssessmentReport(result, model_name=model_name)
    logger.info(report.summary())
    return report


def compare_models(
    observed: nx.Graph,
    generators: Mapping[str, SampleGenerator],
    registry: Optional[StatisticRegistry] = None,
    config: Optional[AssessmentConfig] = None,
    seed: SeedLike = RANDOM_SEED,
    cancel_event: Optional[threading.Event] = None,
    **overrides: Any,
) -> Dict[str, AssessmentReport]:
    """
    Assess several candidate models against the same observed graph.

    The session seed is spawned into one independent stream per model, in
    the order of ``generators``, so the whole comparison is reproducible.

    Parameters
    ----------
    observed : nx.Graph
        Observed graph
    generators : Mapping[str, SampleGenerator]
        Model name -> generator
    registry, config, cancel_event, **overrides
        As for ``assess``
    seed : int or np.random.SeedSequence, optional
        Session seed (default: ``RANDOM_SEED``)

    Returns
    -------
    Dict[str, AssessmentReport]
        Model name -> report, in the order of ``generators``
    """
    if not generators:
        raise ConfigurationError("At least one candidate model is required")
    config = _resolve_config(config, overrides)
    if registry is None:
        registry = config.registry()

    session = seed if isinstance(seed, np.random.SeedSequence) else np.random.SeedSequence(seed)
    streams = session.spawn(len(generators))

    reports: Dict[str, AssessmentReport] = {}
    for stream, (name, generator) in zip(streams, generators.items()):
        reports[name] = assess(
            observed,
            generator,
            registry=registry,
            config=config,
            seed=stream,
            model_name=name,
            cancel_event=cancel_event,
        )
    return reports


def _resolve_config(
    config: Optional[AssessmentConfig],
    overrides: Dict[str, Any],
) -> AssessmentConfig:
    if config is None:
        config = AssessmentConfig()
    if not overrides:
        return config

    unknown = sorted(set(overrides) - set(AssessmentConfig.__dataclass_fields__))
    if unknown:
        raise ConfigurationError(f"Unknown assessment settings: {unknown}")
    # replace() re-runs validation
    return dataclasses.replace(config, **overrides)
