"""
Metrics Module
==============

This module provides the graph statistics computed on observed and
simulated networks, and the registry that binds them to names.

Submodules
----------
graph_statistics
    Topological summary statistics (transitivity, distances, degrees, ...)
registry
    StatisticSpec, StatisticRegistry and the default statistic battery
"""

from .graph_statistics import (
    largest_connected_component,
    transitivity,
    average_clustering,
    diameter,
    mean_distance,
    max_degree,
    n_components,
    n_communities,
    n_edges,
    density,
    degree_assortativity,
    degree_sequence,
)
from .registry import (
    StatisticSpec,
    StatisticRegistry,
    DEFAULT_STATISTICS,
    available_statistics,
    get_statistic,
    registry_from_names,
    default_registry,
)

__all__ = [
    # Graph statistics
    "largest_connected_component",
    "transitivity",
    "average_clustering",
    "diameter",
    "mean_distance",
    "max_degree",
    "n_components",
    "n_communities",
    "n_edges",
    "density",
    "degree_assortativity",
    "degree_sequence",
    # Registry
    "StatisticSpec",
    "StatisticRegistry",
    "DEFAULT_STATISTICS",
    "available_statistics",
    "get_statistic",
    "registry_from_names",
    "default_registry",
]
