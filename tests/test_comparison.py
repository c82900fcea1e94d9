"""
Tests for the empirical distribution comparison.
"""

import json
import math

import pytest
import networkx as nx
import numpy as np
from scipy import stats

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from netgof.exceptions import ConfigurationError
from netgof.generators.samplers import erdos_renyi_gnm, zero_argument
from netgof.metrics.registry import (
    StatisticSpec,
    StatisticRegistry,
    default_registry,
    registry_from_names,
)
from netgof.validation.comparison import (
    AssessmentResult,
    compare,
    is_extreme,
    percentile_rank,
)
from netgof.validation.simulation import (
    ObservedStats,
    SimulationBatch,
    SimulationRun,
    observe,
    run_simulations,
)


def _statistic(name):
    return StatisticSpec(name, lambda G: 0.0)


def _batch(registry, rows):
    """Build a batch directly from per-run value dictionaries."""
    runs = tuple(SimulationRun(index=i, values=row) for i, row in enumerate(rows))
    return SimulationBatch(n_iter=len(rows), registry=registry, runs=runs)


@pytest.fixture
def stat_x():
    return StatisticRegistry([_statistic("x")])


class TestPercentileRank:
    """Tests for percentile_rank and is_extreme."""

    def test_midpoint_ties(self):
        """Ties count as half."""
        assert percentile_rank([1.0, 2.0, 3.0, 4.0], 2.0) == pytest.approx(0.375)
        assert percentile_rank([5.0, 5.0, 5.0], 5.0) == 0.5

    def test_outside_range(self):
        """Values beyond the sample have rank 0 or 1."""
        assert percentile_rank([1.0, 2.0, 3.0], 0.0) == 0.0
        assert percentile_rank([1.0, 2.0, 3.0], 10.0) == 1.0

    def test_rank_bounds(self):
        """Ranks always lie in [0, 1]."""
        rng = np.random.default_rng(0)
        samples = rng.integers(0, 5, size=50).astype(float)
        for observed in [-1.0, 0.0, 2.0, 2.5, 4.0, 9.0]:
            assert 0.0 <= percentile_rank(samples, observed) <= 1.0

    def test_synthetic_minimum(self):
        """Adding the sample minimum as an extra draw gives rank 1/(n+1)."""
        rng = np.random.default_rng(1)
        samples = list(rng.normal(size=99))
        extended = samples + [min(samples)]
        assert percentile_rank(extended, min(samples)) == pytest.approx(1 / 100)

    def test_matches_scipy(self):
        rng = np.random.default_rng(2)
        samples = rng.integers(0, 10, size=200).astype(float)
        expected = stats.percentileofscore(samples, 4.0, kind="mean") / 100
        assert percentile_rank(samples, 4.0) == pytest.approx(expected)

    def test_undefined_rank(self):
        """Empty samples and missing observations give NaN."""
        assert math.isnan(percentile_rank([], 1.0))
        assert math.isnan(percentile_rank([1.0, 2.0], float("nan")))

    def test_is_extreme_thresholds(self):
        assert is_extreme(0.02, alpha=0.05)
        assert is_extreme(0.98, alpha=0.05)
        assert not is_extreme(0.025, alpha=0.05)
        assert not is_extreme(0.5, alpha=0.05)
        assert not is_extreme(float("nan"), alpha=0.05)
        assert is_extreme(0.04, alpha=0.1)


class TestCompare:
    """Tests for compare."""

    def test_basic_statistics(self, stat_x):
        batch = _batch(stat_x, [{"x": float(v)} for v in range(1, 11)])
        observed = ObservedStats(registry=stat_x, values={"x": 5.0})

        c = compare(batch, observed)["x"]

        assert c.n_valid == 10
        assert c.samples == tuple(float(v) for v in range(1, 11))
        assert c.percentile_rank == pytest.approx(0.45)
        assert c.mean == pytest.approx(5.5)
        assert c.sd == pytest.approx(np.std(range(1, 11), ddof=1))
        assert c.z_score == pytest.approx((5.0 - 5.5) / c.sd)
        assert c.p_value == pytest.approx(0.9)
        assert not c.extreme

    def test_observed_beyond_samples_is_extreme(self, stat_x):
        batch = _batch(stat_x, [{"x": float(v)} for v in range(100)])
        observed = ObservedStats(registry=stat_x, values={"x": 1000.0})

        c = compare(batch, observed)["x"]

        assert c.percentile_rank == 1.0
        assert c.extreme
        assert c.p_value == 0.0

    def test_constant_distribution_equal_observed(self, stat_x):
        """Zero variance with a matching observed value is not extreme."""
        batch = _batch(stat_x, [{"x": 3.0}] * 20)
        observed = ObservedStats(registry=stat_x, values={"x": 3.0})

        c = compare(batch, observed)["x"]

        assert c.sd == 0.0
        assert c.z_score == 0.0
        assert c.percentile_rank == 0.5
        assert not c.extreme

    def test_constant_distribution_differing_observed(self, stat_x):
        """Zero variance with a different observed value is extreme, not a division error."""
        batch = _batch(stat_x, [{"x": 3.0}] * 20)
        observed = ObservedStats(registry=stat_x, values={"x": 1.0})

        c = compare(batch, observed)["x"]

        assert c.extreme
        assert c.z_score == -math.inf
        assert c.percentile_rank == 0.0

    def test_missing_values_excluded(self, stat_x):
        """Missing values are dropped from the empirical sequence and counted."""
        rows = [{"x": 1.0}, {"x": None}, {"x": 2.0}, {"x": None}, {"x": 3.0}]
        batch = _batch(stat_x, rows)
        observed = ObservedStats(registry=stat_x, values={"x": 2.0})

        c = compare(batch, observed)["x"]

        assert c.samples == (1.0, 2.0, 3.0)
        assert c.n_valid == 3
        assert c.n_missing == 2
        assert c.percentile_rank == pytest.approx(0.5)

    def test_missing_observed_not_scored(self, stat_x):
        batch = _batch(stat_x, [{"x": 1.0}, {"x": 2.0}])
        observed = ObservedStats(registry=stat_x, values={"x": None}, errors={"x": "failed"})

        c = compare(batch, observed)["x"]

        assert math.isnan(c.percentile_rank)
        assert math.isnan(c.z_score)
        assert not c.extreme

    def test_no_valid_samples(self, stat_x):
        batch = _batch(stat_x, [{"x": None}] * 4)
        observed = ObservedStats(registry=stat_x, values={"x": 1.0})

        c = compare(batch, observed)["x"]

        assert c.n_valid == 0
        assert c.n_missing == 4
        assert math.isnan(c.percentile_rank)
        assert not c.extreme

    def test_alpha_changes_flag(self, stat_x):
        batch = _batch(stat_x, [{"x": float(v)} for v in range(100)])
        observed = ObservedStats(registry=stat_x, values={"x": 3.0})

        assert compare(batch, observed, alpha=0.1)["x"].extreme
        assert not compare(batch, observed, alpha=0.05)["x"].extreme

    def test_invalid_alpha(self, stat_x):
        batch = _batch(stat_x, [{"x": 1.0}])
        observed = ObservedStats(registry=stat_x, values={"x": 1.0})
        for alpha in [0, 1, -0.1, 1.5]:
            with pytest.raises(ConfigurationError):
                compare(batch, observed, alpha=alpha)

    def test_registry_mismatch(self, stat_x):
        other = StatisticRegistry([_statistic("y")])
        batch = _batch(stat_x, [{"x": 1.0}])
        observed = ObservedStats(registry=other, values={"y": 1.0})
        with pytest.raises(ConfigurationError):
            compare(batch, observed)

    def test_compare_is_pure(self):
        """Comparing twice gives equal results and leaves the batch untouched."""
        registry = default_registry()
        G = nx.karate_club_graph()
        batch = run_simulations(erdos_renyi_gnm(34, 78), n_iter=30, registry=registry, seed=4)
        observed = observe(G, registry)
        runs_before = batch.runs

        first = compare(batch, observed)
        second = compare(batch, observed)

        assert first == second
        assert batch.runs == runs_before

    def test_vector_statistic_not_scored(self):
        """Degree sequences are compared as distributions only."""
        registry = registry_from_names(["transitivity", "degree_sequence"])
        G = nx.karate_club_graph()
        batch = run_simulations(erdos_renyi_gnm(34, 78), n_iter=20, registry=registry, seed=0)

        result = compare(batch, observe(G, registry))

        assert list(result) == ["transitivity"]
        distribution = result.distributions["degree_sequence"]
        assert distribution.n_valid == 20
        assert 0.0 < distribution.ks_statistic <= 1.0
        assert len(distribution.observed) == 34


class TestZeroVarianceScenario:
    """Deterministic generator equal to the observed graph."""

    def test_ring_against_itself(self):
        """A constant generator reproducing the observed ring flags nothing."""
        ring = nx.cycle_graph(5)
        registry = default_registry()
        batch = run_simulations(zero_argument(lambda: nx.cycle_graph(5)), n_iter=100,
                                registry=registry, seed=0)

        result = compare(batch, observe(ring, registry))

        assert result.extreme_statistics() == []
        transitivity = result["transitivity"]
        assert transitivity.sd == 0.0
        assert transitivity.percentile_rank == 0.5
        assert transitivity.z_score == 0.0
        assert transitivity.samples == (0.0,) * 100


class TestAssessmentResult:
    """Tests for the AssessmentResult container."""

    @pytest.fixture
    def result(self, stat_x):
        batch = _batch(stat_x, [{"x": float(v)} for v in range(20)])
        return compare(batch, ObservedStats(registry=stat_x, values={"x": 50.0}))

    def test_mapping_interface(self, result):
        assert isinstance(result, AssessmentResult)
        assert "x" in result
        assert len(result) == 1
        assert result.extreme_statistics() == ["x"]
        assert result.n_valid_draws == 20

    def test_read_only(self, result):
        with pytest.raises(TypeError):
            result.comparisons["y"] = result["x"]
        with pytest.raises(AttributeError):
            result.alpha = 0.1

    def test_to_dict_is_json_serializable(self, stat_x):
        batch = _batch(stat_x, [{"x": 3.0}] * 5)
        result = compare(batch, ObservedStats(registry=stat_x, values={"x": 4.0}))

        data = json.loads(json.dumps(result.to_dict()))

        assert data["statistics"]["x"]["z_score"] == "inf"
        assert data["statistics"]["x"]["extreme"] is True
        assert data["statistics"]["x"]["samples"] == [3.0] * 5
        assert "samples" not in result.to_dict(include_samples=False)["statistics"]["x"]


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
