"""
Tests for graph statistics and the statistic registry.
"""

import pytest
import networkx as nx
import numpy as np

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from netgof.exceptions import ConfigurationError, StatisticComputeFailure
from netgof.metrics.graph_statistics import (
    largest_connected_component,
    transitivity,
    diameter,
    mean_distance,
    max_degree,
    n_components,
    n_communities,
    n_edges,
    density,
    degree_sequence,
)
from netgof.metrics.registry import (
    StatisticSpec,
    StatisticRegistry,
    DEFAULT_STATISTICS,
    available_statistics,
    default_registry,
    get_statistic,
    registry_from_names,
)


class TestGraphStatistics:
    """Tests for individual graph statistics."""

    def test_transitivity_complete_and_ring(self):
        """Complete graphs are fully transitive, rings have no triangles."""
        assert transitivity(nx.complete_graph(5)) == 1.0
        assert transitivity(nx.cycle_graph(5)) == 0.0

    def test_transitivity_edgeless(self):
        """Edgeless graphs have zero transitivity."""
        assert transitivity(nx.empty_graph(4)) == 0.0

    def test_ring_distances(self):
        """Distances on a 5-node ring."""
        G = nx.cycle_graph(5)
        assert diameter(G) == 2.0
        assert mean_distance(G) == pytest.approx(1.5)

    def test_distances_use_largest_component(self):
        """Disconnected graphs are measured on their largest component."""
        G = nx.disjoint_union(nx.path_graph(5), nx.path_graph(2))
        assert diameter(G) == 4.0
        assert mean_distance(G) == pytest.approx(nx.average_shortest_path_length(nx.path_graph(5)))

    def test_largest_component_connected_graph(self):
        """A connected graph is its own largest component."""
        G = nx.path_graph(4)
        assert largest_connected_component(G) is G

    def test_largest_component_selection(self):
        """The largest component is selected by size."""
        G = nx.disjoint_union(nx.path_graph(2), nx.complete_graph(4))
        H = largest_connected_component(G)
        assert H.number_of_nodes() == 4
        assert H.number_of_edges() == 6

    def test_distances_single_node_component(self):
        """Graphs whose largest component is one node have zero distances."""
        G = nx.empty_graph(3)
        assert diameter(G) == 0.0
        assert mean_distance(G) == 0.0

    def test_distances_empty_graph_raise(self):
        """Graphs without nodes have no distances."""
        with pytest.raises(ValueError):
            diameter(nx.Graph())
        with pytest.raises(ValueError):
            mean_distance(nx.Graph())

    def test_degree_statistics(self):
        """Maximum degree and degree sequence of a star."""
        G = nx.star_graph(4)
        assert max_degree(G) == 4.0
        assert degree_sequence(G) == (4, 1, 1, 1, 1)

    def test_component_count(self):
        """Isolated nodes count as components."""
        G = nx.disjoint_union(nx.path_graph(3), nx.empty_graph(2))
        assert n_components(G) == 3.0

    def test_community_count_two_cliques(self):
        """Two disjoint cliques form two communities."""
        G = nx.disjoint_union(nx.complete_graph(5), nx.complete_graph(5))
        assert n_communities(G) == 2.0

    def test_community_count_deterministic(self):
        """Community counting gives the same answer on repeated calls."""
        G = nx.karate_club_graph()
        assert n_communities(G) == n_communities(G)

    def test_community_count_edgeless_raises(self):
        """Community detection is undefined on an edgeless graph."""
        with pytest.raises(ValueError):
            n_communities(nx.empty_graph(5))

    def test_edge_count_and_density(self):
        """Edge count and density of a complete graph."""
        G = nx.complete_graph(4)
        assert n_edges(G) == 6.0
        assert density(G) == 1.0


class TestStatisticSpec:
    """Tests for StatisticSpec."""

    def test_scalar_evaluation_returns_float(self):
        """Scalar statistics are returned as floats."""
        spec = StatisticSpec("edges", lambda G: G.number_of_edges())
        value = spec.evaluate(nx.path_graph(4))
        assert isinstance(value, float)
        assert value == 3.0

    def test_vector_evaluation_returns_tuple(self):
        """Vector statistics are returned as tuples of floats."""
        spec = StatisticSpec("degrees", degree_sequence, kind="vector")
        assert spec.evaluate(nx.path_graph(3)) == (2.0, 1.0, 1.0)

    def test_failure_is_wrapped(self):
        """Errors raised by the function become StatisticComputeFailure."""
        def broken(G):
            raise RuntimeError("boom")

        spec = StatisticSpec("broken", broken)
        with pytest.raises(StatisticComputeFailure) as exc_info:
            spec.evaluate(nx.path_graph(3))
        assert exc_info.value.name == "broken"
        assert isinstance(exc_info.value.cause, RuntimeError)

    def test_non_finite_scalar_is_failure(self):
        """NaN results are reported as failures, not as values."""
        spec = StatisticSpec("nan", lambda G: float("nan"))
        with pytest.raises(StatisticComputeFailure):
            spec.evaluate(nx.path_graph(3))

    def test_unconvertible_value_is_failure(self):
        """Values that are not real numbers are reported as failures."""
        with pytest.raises(StatisticComputeFailure):
            StatisticSpec("none", lambda G: None).evaluate(nx.path_graph(3))
        with pytest.raises(StatisticComputeFailure):
            StatisticSpec("text", lambda G: "many").evaluate(nx.path_graph(3))
        with pytest.raises(StatisticComputeFailure):
            StatisticSpec("edges", lambda G: 3, kind="vector").evaluate(nx.path_graph(3))

    def test_invalid_spec(self):
        """Invalid names, kinds and functions are configuration errors."""
        with pytest.raises(ConfigurationError):
            StatisticSpec("", transitivity)
        with pytest.raises(ConfigurationError):
            StatisticSpec("x", transitivity, kind="matrix")
        with pytest.raises(ConfigurationError):
            StatisticSpec("x", "transitivity")

    def test_label_defaults_to_name(self):
        """Labels fall back to a prettified name."""
        assert StatisticSpec("max_degree", max_degree).label == "Max degree"


class TestStatisticRegistry:
    """Tests for StatisticRegistry."""

    def test_default_registry_contents(self):
        """The default registry holds the default battery in order."""
        registry = default_registry()
        assert registry.names == DEFAULT_STATISTICS
        assert registry.vector_names == ("degree_sequence",)
        assert "transitivity" in registry.scalar_names

    def test_empty_registry_rejected(self):
        """An empty registry is a configuration error."""
        with pytest.raises(ConfigurationError):
            StatisticRegistry([])

    def test_duplicate_names_rejected(self):
        """Statistic names must be unique."""
        spec = get_statistic("transitivity")
        with pytest.raises(ConfigurationError):
            StatisticRegistry([spec, spec])

    def test_unknown_statistic(self):
        """Unknown names are rejected eagerly."""
        with pytest.raises(ConfigurationError):
            get_statistic("eigenvector_centrality")
        with pytest.raises(ConfigurationError):
            default_registry().subset(["transitivity", "nope"])

    def test_subset_preserves_given_order(self):
        """Subsets follow the requested order."""
        registry = default_registry().subset(["max_degree", "transitivity"])
        assert registry.names == ("max_degree", "transitivity")

    def test_extend(self):
        """Extending appends new statistics."""
        registry = default_registry().extend([get_statistic("n_edges")])
        assert registry.names[-1] == "n_edges"
        assert len(registry) == len(DEFAULT_STATISTICS) + 1

    def test_registry_is_read_only(self):
        """Registries cannot be modified in place."""
        registry = default_registry()
        with pytest.raises(TypeError):
            registry["transitivity"] = get_statistic("density")

    def test_registry_equality(self):
        """Registries built from the same specs compare equal."""
        assert registry_from_names(["transitivity"]) == registry_from_names(["transitivity"])
        assert registry_from_names(["transitivity"]) != registry_from_names(["density"])

    def test_catalogue(self):
        """All default statistics are in the catalogue."""
        assert set(DEFAULT_STATISTICS) <= set(available_statistics())

    def test_evaluate_isolates_failures(self):
        """A failing statistic leaves the others intact."""
        values, errors = default_registry().evaluate(nx.empty_graph(5))

        assert values["n_communities"] is None
        assert set(errors) == {"n_communities"}
        assert values["transitivity"] == 0.0
        assert values["n_components"] == 5.0
        assert values["diameter"] == 0.0
        assert values["degree_sequence"] == (0.0,) * 5

    def test_evaluate_complete_graph(self):
        """Evaluation of the default battery on a complete graph."""
        values, errors = default_registry().evaluate(nx.complete_graph(6))

        assert errors == {}
        assert values["transitivity"] == 1.0
        assert values["diameter"] == 1.0
        assert values["mean_distance"] == 1.0
        assert values["max_degree"] == 5.0
        assert values["n_components"] == 1.0
        assert values["n_communities"] == 1.0


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
