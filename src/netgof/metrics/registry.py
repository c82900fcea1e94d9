"""
Statistic Registry Module
=========================

This module provides ``StatisticSpec`` and ``StatisticRegistry``, the
explicit, immutable set of named statistics applied identically to the
observed graph and to every simulated graph.

Statistics are resolved once when the registry is built; evaluating a
registry never looks a function up by name.
"""

import logging
from dataclasses import dataclass
from types import MappingProxyType
from collections.abc import Mapping
from typing import Any, Callable, Dict, Iterable, Iterator, List, Optional, Tuple

import networkx as nx
import numpy as np

from ..exceptions import ConfigurationError, StatisticComputeFailure
from . import graph_statistics as gs

logger = logging.getLogger(__name__)

SCALAR = "scalar"
VECTOR = "vector"


@dataclass(frozen=True)
class StatisticSpec:
    """
    Named graph summary function.

    Parameters
    ----------
    name : str
        Unique identifier
    compute : Callable[[nx.Graph], Any]
        Pure function of the graph returning a real scalar (``kind="scalar"``)
        or a sequence of reals (``kind="vector"``)
    kind : str
        ``"scalar"`` or ``"vector"``. Only scalar statistics are scored;
        vector statistics are kept for visual comparison.
    description : str, optional
        Label used in tables and figures
    """

    name: str
    compute: Callable[[nx.Graph], Any]
    kind: str = SCALAR
    description: Optional[str] = None

    def __post_init__(self):
        if not isinstance(self.name, str) or not self.name:
            raise ConfigurationError(f"Statistic name must be a non-empty string, got {self.name!r}")
        if not callable(self.compute):
            raise ConfigurationError(f"Statistic '{self.name}' compute is not callable")
        if self.kind not in (SCALAR, VECTOR):
            raise ConfigurationError(
                f"Statistic '{self.name}' kind must be '{SCALAR}' or '{VECTOR}', got {self.kind!r}"
            )

    @property
    def label(self) -> str:
        return self.description or self.name.replace("_", " ").capitalize()

    def evaluate(self, G: nx.Graph) -> Any:
        """
        Compute the statistic on ``G``, normalizing the value.

        Raises
        ------
        StatisticComputeFailure
            If the underlying function fails, returns something that is not
            a real number (or a sequence of them for vectors), or returns a
            non-finite scalar
        """
        try:
            value = self.compute(G)
            if self.kind == VECTOR:
                return tuple(float(v) for v in value)
            value = float(value)
        except Exception as e:
            raise StatisticComputeFailure(self.name, e) from e

        if not np.isfinite(value):
            raise StatisticComputeFailure(
                self.name, ValueError(f"non-finite value {value}")
            )
        return value


class StatisticRegistry(Mapping):
    """
    Immutable, ordered mapping of statistic name to ``StatisticSpec``.

    Parameters
    ----------
    specs : Iterable[StatisticSpec]
        Statistics to register. Names must be unique and at least one
        statistic is required.

    Examples
    --------
    >>> import networkx as nx
    >>> registry = default_registry().subset(["transitivity", "max_degree"])
    >>> values, errors = registry.evaluate(nx.complete_graph(4))
    >>> values
    {'transitivity': 1.0, 'max_degree': 3.0}
    """

    def __init__(self, specs: Iterable[StatisticSpec]):
        specs = list(specs)
        if not specs:
            raise ConfigurationError("Statistic registry must contain at least one statistic")

        table: Dict[str, StatisticSpec] = {}
        for spec in specs:
            if not isinstance(spec, StatisticSpec):
                raise ConfigurationError(f"Expected StatisticSpec, got {type(spec).__name__}")
            if spec.name in table:
                raise ConfigurationError(f"Duplicate statistic name: '{spec.name}'")
            table[spec.name] = spec

        self._specs = MappingProxyType(table)

    def __getitem__(self, name: str) -> StatisticSpec:
        return self._specs[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._specs)

    def __len__(self) -> int:
        return len(self._specs)

    def __repr__(self) -> str:
        return f"StatisticRegistry({list(self._specs)})"

    @property
    def names(self) -> Tuple[str, ...]:
        return tuple(self._specs)

    @property
    def scalar_names(self) -> Tuple[str, ...]:
        return tuple(n for n, s in self._specs.items() if s.kind == SCALAR)

    @property
    def vector_names(self) -> Tuple[str, ...]:
        return tuple(n for n, s in self._specs.items() if s.kind == VECTOR)

    def subset(self, names: Iterable[str]) -> "StatisticRegistry":
        """Return a registry restricted to ``names``, in the given order."""
        names = list(names)
        missing = [n for n in names if n not in self._specs]
        if missing:
            raise ConfigurationError(f"Unknown statistics: {missing}")
        return StatisticRegistry(self._specs[n] for n in names)

    def extend(self, specs: Iterable[StatisticSpec]) -> "StatisticRegistry":
        """Return a registry with ``specs`` appended."""
        return StatisticRegistry(list(self._specs.values()) + list(specs))

    def evaluate(self, G: nx.Graph) -> Tuple[Dict[str, Any], Dict[str, str]]:
        """
        Evaluate every statistic on ``G``.

        A failing statistic is recorded as missing (``None``) without
        affecting the others.

        Returns
        -------
        Tuple[Dict[str, Any], Dict[str, str]]
            (values, errors): values maps every name to its value or None;
            errors maps the names of failed statistics to their message
        """
        values: Dict[str, Any] = {}
        errors: Dict[str, str] = {}

        for name, spec in self._specs.items():
            try:
                values[name] = spec.evaluate(G)
            except StatisticComputeFailure as e:
                values[name] = None
                errors[name] = str(e)
                logger.debug(f"{e}")

        return values, errors


_CATALOGUE: Dict[str, StatisticSpec] = {
    spec.name: spec
    for spec in [
        StatisticSpec("transitivity", gs.transitivity, description="Transitivity"),
        StatisticSpec("diameter", gs.diameter, description="Diameter (largest component)"),
        StatisticSpec(
            "mean_distance", gs.mean_distance, description="Mean distance (largest component)"
        ),
        StatisticSpec("max_degree", gs.max_degree, description="Maximum degree"),
        StatisticSpec("n_components", gs.n_components, description="Connected components"),
        StatisticSpec("n_communities", gs.n_communities, description="Communities (greedy modularity)"),
        StatisticSpec("degree_sequence", gs.degree_sequence, kind=VECTOR, description="Degree"),
        StatisticSpec("n_edges", gs.n_edges, description="Edges"),
        StatisticSpec("density", gs.density, description="Density"),
        StatisticSpec("average_clustering", gs.average_clustering, description="Average clustering"),
        StatisticSpec(
            "degree_assortativity", gs.degree_assortativity, description="Degree assortativity"
        ),
    ]
}

DEFAULT_STATISTICS: Tuple[str, ...] = (
    "transitivity",
    "diameter",
    "mean_distance",
    "max_degree",
    "n_components",
    "n_communities",
    "degree_sequence",
)


def available_statistics() -> List[str]:
    """Names of all built-in statistics."""
    return list(_CATALOGUE)


def get_statistic(name: str) -> StatisticSpec:
    """Look up a built-in statistic by name."""
    try:
        return _CATALOGUE[name]
    except KeyError:
        raise ConfigurationError(
            f"Unknown statistic '{name}'. Available: {available_statistics()}"
        ) from None


def registry_from_names(names: Iterable[str]) -> StatisticRegistry:
    """Build a registry from built-in statistic names."""
    return StatisticRegistry(get_statistic(n) for n in names)


def default_registry() -> StatisticRegistry:
    """
    The default statistic battery.

    transitivity, diameter, mean distance, maximum degree, component count,
    community count and the degree sequence (vector).
    """
    return registry_from_names(DEFAULT_STATISTICS)
