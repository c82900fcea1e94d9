"""
Network Goodness-of-Fit Framework
=================================

A Monte Carlo goodness-of-fit harness for random graph models.

Candidate generative models (Erdos-Renyi, configuration model, small-world,
preferential attachment, a fitted ERGM's simulate step, ...) are sampled
repeatedly, a battery of topological statistics is computed on every
sample, and the observed network is positioned within the resulting
empirical distributions.

Modules
-------
metrics
    Graph statistics and the statistic registry
generators
    Sample generator protocol and networkx-backed adapters
validation
    Simulation runner, empirical comparator and assessment reports
visualization
    Plotting and table generation utilities
"""

__version__ = "0.1.0"

from . import metrics
from . import generators
from . import validation
from . import visualization
from .config import AssessmentConfig, load_assessment_config
from .exceptions import (
    NetGofError,
    ConfigurationError,
    GeneratorFailure,
    StatisticComputeFailure,
    BatchAbort,
    AssessmentCancelled,
)
from .metrics import StatisticSpec, StatisticRegistry, default_registry
from .validation import (
    run_simulations,
    compare,
    assess,
    compare_models,
    AssessmentReport,
)

__all__ = [
    "metrics",
    "generators",
    "validation",
    "visualization",
    "AssessmentConfig",
    "load_assessment_config",
    "NetGofError",
    "ConfigurationError",
    "GeneratorFailure",
    "StatisticComputeFailure",
    "BatchAbort",
    "AssessmentCancelled",
    "StatisticSpec",
    "StatisticRegistry",
    "default_registry",
    "run_simulations",
    "compare",
    "assess",
    "compare_models",
    "AssessmentReport",
    "__version__",
]
