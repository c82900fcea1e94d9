"""
Configuration for the Network Goodness-of-Fit Framework.
========================================================

This module contains the configuration constants used throughout the
harness together with ``AssessmentConfig``, the validated bundle of
settings consumed by the simulation runner and the comparator.
Centralizing these ensures consistency and reproducibility.
"""

import logging
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Union

import numpy as np
import yaml

from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)

# Random seed for a logical session of assessments
RANDOM_SEED = 42

# Simulation defaults
DEFAULT_N_ITER = 1000
DEFAULT_MAX_RETRIES = 1
DEFAULT_MAX_FAILURE_RATE = 0.5
DEFAULT_N_JOBS = 1
DEFAULT_LOG_EVERY = 100

# Two-sided empirical test level
DEFAULT_ALPHA = 0.05

# File paths
DEFAULT_RESULTS_DIR = "data/results"


@dataclass(frozen=True)
class AssessmentConfig:
    """
    Validated settings for one assessment.

    Parameters
    ----------
    n_iter : int
        Number of generator draws (default: 1000)
    alpha : float
        Two-sided level of the empirical test (default: 0.05)
    max_retries : int
        Retries per failed draw before it is recorded as failed (default: 1)
    max_failure_rate : float
        Fraction of failed draws above which the batch aborts (default: 0.5)
    n_jobs : int
        Worker threads used for the draws (default: 1)
    statistics : Tuple[str, ...], optional
        Names of the statistics to compute. None selects the default
        registry.
    log_every : int
        Progress logging interval in iterations (default: 100)

    Raises
    ------
    ConfigurationError
        If any value is out of range. Validation runs at construction.
    """

    n_iter: int = DEFAULT_N_ITER
    alpha: float = DEFAULT_ALPHA
    max_retries: int = DEFAULT_MAX_RETRIES
    max_failure_rate: float = DEFAULT_MAX_FAILURE_RATE
    n_jobs: int = DEFAULT_N_JOBS
    statistics: Optional[Tuple[str, ...]] = None
    log_every: int = DEFAULT_LOG_EVERY

    def __post_init__(self):
        if self.statistics is not None and not isinstance(self.statistics, tuple):
            object.__setattr__(self, "statistics", tuple(self.statistics))
        self.validate()

    def validate(self) -> None:
        """Check every field, raising ``ConfigurationError`` on the first bad one."""
        validate_n_iter(self.n_iter)
        validate_alpha(self.alpha)
        validate_retry_settings(self.max_retries, self.max_failure_rate)
        if not _is_int(self.n_jobs) or self.n_jobs < 1:
            raise ConfigurationError(f"n_jobs must be a positive integer, got {self.n_jobs!r}")
        if not _is_int(self.log_every) or self.log_every < 1:
            raise ConfigurationError(
                f"log_every must be a positive integer, got {self.log_every!r}"
            )
        if self.statistics is not None and len(self.statistics) == 0:
            raise ConfigurationError("statistics must name at least one statistic")

    def registry(self):
        """Resolve the configured statistic names into a registry."""
        from .metrics.registry import default_registry, registry_from_names

        if self.statistics is None:
            return default_registry()
        return registry_from_names(self.statistics)

    @classmethod
    def from_dict(cls, values: Dict[str, Any]) -> "AssessmentConfig":
        """
        Build a configuration from a plain dictionary.

        Unknown keys are rejected so that typos in configuration files
        do not silently fall back to defaults.
        """
        known = set(cls.__dataclass_fields__)
        unknown = sorted(set(values) - known)
        if unknown:
            raise ConfigurationError(f"Unknown configuration keys: {unknown}")
        return cls(**values)

    def to_dict(self) -> Dict[str, Any]:
        """Return a plain, YAML/JSON serializable dictionary."""
        values = asdict(self)
        if values["statistics"] is not None:
            values["statistics"] = list(values["statistics"])
        return values


def load_assessment_config(path: Union[str, Path]) -> AssessmentConfig:
    """
    Load an ``AssessmentConfig`` from a YAML file.

    The file may either contain the settings at top level or nest them
    under an ``assessment`` key.

    Parameters
    ----------
    path : str or Path
        Path to the YAML file

    Returns
    -------
    AssessmentConfig
        Validated configuration
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {path}")

    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    if "assessment" in data:
        data = data["assessment"] or {}

    config = AssessmentConfig.from_dict(data)
    logger.info(f"Loaded assessment configuration from {path}")
    return config


def validate_n_iter(n_iter: Any) -> None:
    if not _is_int(n_iter) or n_iter <= 0:
        raise ConfigurationError(f"n_iter must be a positive integer, got {n_iter!r}")


def validate_alpha(alpha: Any) -> None:
    if not isinstance(alpha, (int, float)) or isinstance(alpha, bool) or not 0 < alpha < 1:
        raise ConfigurationError(f"alpha must lie strictly between 0 and 1, got {alpha!r}")


def validate_retry_settings(max_retries: Any, max_failure_rate: Any) -> None:
    if not _is_int(max_retries) or max_retries < 0:
        raise ConfigurationError(
            f"max_retries must be a non-negative integer, got {max_retries!r}"
        )
    if (
        not isinstance(max_failure_rate, (int, float))
        or isinstance(max_failure_rate, bool)
        or not 0 <= max_failure_rate <= 1
    ):
        raise ConfigurationError(
            f"max_failure_rate must lie in [0, 1], got {max_failure_rate!r}"
        )


def _is_int(value: Any) -> bool:
    # numpy integers are accepted, bools are not
    return isinstance(value, (int, np.integer)) and not isinstance(value, bool)
