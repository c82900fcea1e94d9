"""
Plotting Module
===============

This module provides matplotlib-based plotting functions for
visualizing goodness-of-fit assessments.

All functions return matplotlib Figure objects for flexibility.
"""

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

import matplotlib.pyplot as plt
import numpy as np
from numpy.typing import NDArray
import seaborn as sns

logger = logging.getLogger(__name__)

# Set default style
plt.style.use("seaborn-v0_8-whitegrid")
sns.set_palette("colorblind")

OBSERVED_COLOR = "crimson"


def plot_statistic_panel(
    ax: plt.Axes,
    comparison: Any,
    bins: Any = "auto",
    color: Optional[str] = None,
    label: Optional[str] = None,
    mark_observed: bool = True,
) -> plt.Axes:
    """
    Draw the empirical distribution of one scalar statistic.

    Parameters
    ----------
    ax : plt.Axes
        Target axes
    comparison : StatisticComparison
        Comparison to draw
    bins : optional
        Histogram bins, passed to seaborn (default: 'auto')
    color : str, optional
        Histogram color
    label : str, optional
        Legend label for the histogram
    mark_observed : bool, optional
        If True, mark the observed value with a vertical line

    Returns
    -------
    plt.Axes
    """
    samples = np.asarray(comparison.samples, dtype=float)

    if samples.size:
        sns.histplot(
            samples,
            ax=ax,
            bins=bins,
            discrete=_is_discrete(samples),
            stat="density",
            color=color,
            alpha=0.6,
            label=label,
        )
    else:
        ax.text(0.5, 0.5, "no valid samples", ha="center", va="center",
                transform=ax.transAxes)

    if mark_observed and np.isfinite(comparison.observed):
        ax.axvline(comparison.observed, color=OBSERVED_COLOR, linestyle="--",
                   linewidth=2, label="Observed")

    title = comparison.label or comparison.name
    if comparison.extreme:
        title += " (extreme)"
    ax.set_title(title, fontsize=11)
    ax.set_xlabel(
        f"rank = {_format_rank(comparison.percentile_rank)}, n = {comparison.n_valid}",
        fontsize=9,
    )
    ax.set_ylabel("Density", fontsize=9)
    return ax


def plot_degree_panel(
    ax: plt.Axes,
    distribution: Any,
    color: Optional[str] = None,
    label: str = "Simulated",
    mark_observed: bool = True,
    interval: float = 0.95,
) -> plt.Axes:
    """
    Draw sampled degree distributions with the observed one overlaid.

    The simulated curve is the mean relative frequency of each degree
    across samples, with a pointwise ``interval`` band.

    Parameters
    ----------
    ax : plt.Axes
        Target axes
    distribution : DistributionComparison
        Comparison of a degree-like vector statistic
    color : str, optional
        Line color for the simulated distribution
    label : str, optional
        Legend label for the simulated distribution
    mark_observed : bool, optional
        If True, overlay the observed distribution
    interval : float, optional
        Width of the pointwise band (default: 0.95)

    Returns
    -------
    plt.Axes
    """
    observed = distribution.observed
    samples = distribution.samples

    max_value = 0
    for values in list(samples) + ([observed] if observed else []):
        if values:
            max_value = max(max_value, int(max(values)))
    support = np.arange(max_value + 1)

    if samples:
        frequencies = np.vstack([_relative_frequencies(s, max_value) for s in samples])
        tail = (1 - interval) / 2
        lower = np.quantile(frequencies, tail, axis=0)
        upper = np.quantile(frequencies, 1 - tail, axis=0)
        line, = ax.plot(support, frequencies.mean(axis=0), color=color, linewidth=2, label=label)
        ax.fill_between(support, lower, upper, color=line.get_color(), alpha=0.2)

    if mark_observed and observed:
        ax.plot(
            support, _relative_frequencies(observed, max_value),
            "o", color=OBSERVED_COLOR, markersize=4, label="Observed",
        )

    title = distribution.label or distribution.name
    if np.isfinite(distribution.ks_statistic):
        title += f" (KS = {distribution.ks_statistic:.3f})"
    ax.set_title(title, fontsize=11)
    ax.set_xlabel("Degree", fontsize=9)
    ax.set_ylabel("Relative frequency", fontsize=9)
    return ax


def plot_assessment(
    result: Any,
    title: Optional[str] = None,
    n_cols: int = 3,
    panel_size: Tuple[float, float] = (4.0, 3.0),
    bins: Any = "auto",
    statistics: Optional[Sequence[str]] = None,
) -> plt.Figure:
    """
    Combined multi-panel figure for one assessment.

    One panel per scalar statistic (empirical histogram with the observed
    value marked) followed by one panel per vector statistic.

    Parameters
    ----------
    result : AssessmentResult
        Assessment to draw
    title : str, optional
        Figure title
    n_cols : int, optional
        Panels per row (default: 3)
    panel_size : Tuple[float, float], optional
        Size of each panel in inches
    bins : optional
        Histogram bins (default: 'auto')
    statistics : Sequence[str], optional
        Restrict to these statistics

    Returns
    -------
    plt.Figure
        Matplotlib figure object
    """
    scalar_names = [n for n in result.comparisons if statistics is None or n in statistics]
    vector_names = [n for n in result.distributions if statistics is None or n in statistics]

    fig, axes = _panel_grid(len(scalar_names) + len(vector_names), n_cols, panel_size)

    for ax, name in zip(axes, scalar_names):
        plot_statistic_panel(ax, result.comparisons[name], bins=bins)
    for ax, name in zip(axes[len(scalar_names):], vector_names):
        plot_degree_panel(ax, result.distributions[name])

    if len(axes):
        axes[0].legend(fontsize=8)

    if title is None:
        title = f"Goodness of fit ({result.n_valid_draws}/{result.n_iter} draws)"
    fig.suptitle(title, fontsize=14)
    fig.tight_layout()
    return fig


def plot_model_comparison(
    results: Dict[str, Any],
    title: str = "Candidate model comparison",
    n_cols: int = 3,
    panel_size: Tuple[float, float] = (4.0, 3.0),
    bins: Any = "auto",
    statistics: Optional[Sequence[str]] = None,
) -> plt.Figure:
    """
    Overlay the empirical distributions of several candidate models.

    All results must have been computed for the same observed graph; the
    observed value is taken from the first result.

    Parameters
    ----------
    results : Dict[str, AssessmentResult]
        Model name -> assessment result (or AssessmentReport)
    title : str, optional
        Figure title
    n_cols : int, optional
        Panels per row (default: 3)
    panel_size : Tuple[float, float], optional
        Size of each panel in inches
    bins : optional
        Histogram bins (default: 'auto')
    statistics : Sequence[str], optional
        Restrict to these statistics (default: those common to all results)

    Returns
    -------
    plt.Figure
    """
    if not results:
        raise ValueError("At least one result is required")

    # Reports carry their result
    results = {name: getattr(r, "result", r) for name, r in results.items()}

    models = list(results)
    first = results[models[0]]
    scalar_names = [
        n for n in first.comparisons
        if all(n in r.comparisons for r in results.values())
        and (statistics is None or n in statistics)
    ]
    vector_names = [
        n for n in first.distributions
        if all(n in r.distributions for r in results.values())
        and (statistics is None or n in statistics)
    ]

    fig, axes = _panel_grid(len(scalar_names) + len(vector_names), n_cols, panel_size)
    palette = sns.color_palette("colorblind", len(models))

    for ax, name in zip(axes, scalar_names):
        for i, model in enumerate(models):
            plot_statistic_panel(
                ax, results[model].comparisons[name], bins=bins, color=palette[i],
                label=model, mark_observed=(i == len(models) - 1),
            )
        flagged = [m for m in models if results[m].comparisons[name].extreme]
        title_suffix = f" (extreme: {', '.join(flagged)})" if flagged else ""
        ax.set_title(f"{first.comparisons[name].label or name}{title_suffix}", fontsize=10)
        ax.set_xlabel("")

    for ax, name in zip(axes[len(scalar_names):], vector_names):
        for i, model in enumerate(models):
            plot_degree_panel(
                ax, results[model].distributions[name], color=palette[i],
                label=model, mark_observed=(i == len(models) - 1),
            )
        ax.set_title(first.distributions[name].label or name, fontsize=10)

    if len(axes):
        axes[0].legend(fontsize=8)

    fig.suptitle(title, fontsize=14)
    fig.tight_layout()
    return fig


def save_figure(
    fig: plt.Figure,
    filepath: str,
    dpi: int = 300,
    bbox_inches: str = "tight",
) -> None:
    """
    Save an assessment figure to file.

    Parent directories are created as needed, so per-model figures can be
    written straight into a fresh results directory.

    Parameters
    ----------
    fig : plt.Figure
        Figure to save
    filepath : str
        Output path (extension determines format)
    dpi : int, optional
        Resolution (default: 300)
    bbox_inches : str, optional
        Bounding box (default: 'tight')
    """
    Path(filepath).parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(filepath, dpi=dpi, bbox_inches=bbox_inches)
    logger.info(f"Saved figure to {filepath}")


def _panel_grid(
    n_panels: int,
    n_cols: int,
    panel_size: Tuple[float, float],
) -> Tuple[plt.Figure, List[plt.Axes]]:
    """Create a grid with at least ``n_panels`` axes, hiding the unused ones."""
    n_panels = max(n_panels, 1)
    n_cols = max(1, min(n_cols, n_panels))
    n_rows = (n_panels + n_cols - 1) // n_cols

    fig, axes = plt.subplots(
        n_rows, n_cols,
        figsize=(panel_size[0] * n_cols, panel_size[1] * n_rows),
        squeeze=False,
    )
    axes = list(axes.flatten())

    # Hide unused axes
    for ax in axes[n_panels:]:
        ax.set_visible(False)

    return fig, axes[:n_panels]


def _relative_frequencies(values: Sequence[float], max_value: int) -> NDArray[np.float64]:
    counts = np.bincount(np.asarray(values, dtype=int), minlength=max_value + 1)
    total = counts.sum()
    return counts / total if total else counts.astype(float)


def _is_discrete(samples: NDArray[np.float64]) -> bool:
    if np.ptp(samples) == 0:
        return True
    return bool(np.all(np.mod(samples, 1) == 0) and np.ptp(samples) <= 50)


def _format_rank(rank: float) -> str:
    return "N/A" if rank is None or np.isnan(rank) else f"{rank:.3f}"
