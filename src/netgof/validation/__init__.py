"""
Validation Module
=================

This module provides the Monte Carlo goodness-of-fit machinery.

Submodules
----------
simulation
    Repeated draws from a candidate model and statistic extraction
comparison
    Empirical distributions, percentile ranks and extremity flags
assessment
    One-call assessment, multi-model comparison and reports
"""

from .simulation import (
    SimulationRun,
    SimulationBatch,
    ObservedStats,
    observe,
    run_simulations,
)
from .comparison import (
    StatisticComparison,
    DistributionComparison,
    AssessmentResult,
    percentile_rank,
    is_extreme,
    compare,
)
from .assessment import (
    AssessmentReport,
    assess,
    compare_models,
)

__all__ = [
    # Simulation
    "SimulationRun",
    "SimulationBatch",
    "ObservedStats",
    "observe",
    "run_simulations",
    # Comparison
    "StatisticComparison",
    "DistributionComparison",
    "AssessmentResult",
    "percentile_rank",
    "is_extreme",
    "compare",
    # Assessment
    "AssessmentReport",
    "assess",
    "compare_models",
]
