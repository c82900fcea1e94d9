"""
Visualization Module
====================

This module provides plotting and table generation utilities
for assessment results.

Submodules
----------
plots
    Matplotlib/seaborn multi-panel diagnostic figures
tables
    Summary table generation
"""

from .plots import (
    plot_statistic_panel,
    plot_degree_panel,
    plot_assessment,
    plot_model_comparison,
    save_figure,
)
from .tables import (
    assessment_table,
    model_comparison_table,
    extreme_count_summary,
    results_to_latex,
    results_to_markdown,
    save_table,
)

__all__ = [
    # Plots
    "plot_statistic_panel",
    "plot_degree_panel",
    "plot_assessment",
    "plot_model_comparison",
    "save_figure",
    # Tables
    "assessment_table",
    "model_comparison_table",
    "extreme_count_summary",
    "results_to_latex",
    "results_to_markdown",
    "save_table",
]
