"""
Tests for assessment configuration.
"""

import numpy as np
import pytest

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))
sys.path.insert(0, str(Path(__file__).parent.parent))

from netgof.config import (
    DEFAULT_ALPHA,
    DEFAULT_N_ITER,
    AssessmentConfig,
    load_assessment_config,
)
from netgof.exceptions import ConfigurationError
from netgof.metrics.registry import DEFAULT_STATISTICS

from config import load_assessment_settings, load_model_settings


CONFIG_FILE = Path(__file__).parent.parent / "config" / "assessment_config.yaml"


class TestAssessmentConfig:
    """Tests for AssessmentConfig."""

    def test_defaults(self):
        config = AssessmentConfig()
        assert config.n_iter == DEFAULT_N_ITER
        assert config.alpha == DEFAULT_ALPHA
        assert config.max_retries == 1
        assert config.max_failure_rate == 0.5
        assert config.registry().names == DEFAULT_STATISTICS

    @pytest.mark.parametrize("n_iter", [0, -1, 1.5, True, "100"])
    def test_invalid_n_iter(self, n_iter):
        with pytest.raises(ConfigurationError):
            AssessmentConfig(n_iter=n_iter)

    @pytest.mark.parametrize("alpha", [0, 1, -0.05, 1.2, "0.05"])
    def test_invalid_alpha(self, alpha):
        with pytest.raises(ConfigurationError):
            AssessmentConfig(alpha=alpha)

    def test_invalid_failure_settings(self):
        with pytest.raises(ConfigurationError):
            AssessmentConfig(max_retries=-1)
        with pytest.raises(ConfigurationError):
            AssessmentConfig(max_failure_rate=2.0)
        with pytest.raises(ConfigurationError):
            AssessmentConfig(n_jobs=0)

    def test_numpy_integers_accepted(self):
        assert AssessmentConfig(n_iter=np.int64(50)).n_iter == 50

    def test_statistics_normalized_to_tuple(self):
        config = AssessmentConfig(statistics=["transitivity", "diameter"])
        assert config.statistics == ("transitivity", "diameter")
        assert config.registry().names == ("transitivity", "diameter")

    def test_empty_statistics_rejected(self):
        with pytest.raises(ConfigurationError):
            AssessmentConfig(statistics=[])

    def test_unknown_statistic_rejected_on_resolution(self):
        with pytest.raises(ConfigurationError):
            AssessmentConfig(statistics=["transitivity", "girth"]).registry()

    def test_from_dict_rejects_unknown_keys(self):
        with pytest.raises(ConfigurationError):
            AssessmentConfig.from_dict({"n_iter": 10, "iterations": 10})

    def test_dict_round_trip(self):
        config = AssessmentConfig(n_iter=20, statistics=("transitivity",))
        assert AssessmentConfig.from_dict(config.to_dict()) == config


class TestLoading:
    """Tests for YAML loading."""

    def test_load_nested(self, tmp_path):
        path = tmp_path / "settings.yaml"
        path.write_text("assessment:\n  n_iter: 200\n  alpha: 0.1\n")

        config = load_assessment_config(path)

        assert config.n_iter == 200
        assert config.alpha == 0.1

    def test_load_flat(self, tmp_path):
        path = tmp_path / "settings.yaml"
        path.write_text("n_iter: 30\nstatistics: [transitivity, max_degree]\n")

        config = load_assessment_config(path)

        assert config.statistics == ("transitivity", "max_degree")

    def test_load_empty_file(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert load_assessment_config(path) == AssessmentConfig()

    def test_load_invalid_values(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("assessment:\n  n_iter: 0\n")
        with pytest.raises(ConfigurationError):
            load_assessment_config(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_assessment_config(tmp_path / "missing.yaml")

    def test_shipped_configuration(self):
        config = load_assessment_config(CONFIG_FILE)
        assert config.n_iter == 1000
        assert config.statistics == DEFAULT_STATISTICS

    def test_project_settings(self):
        assert load_assessment_settings()["alpha"] == 0.05
        assert load_model_settings()["configuration"] == {"method": "erased"}


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
