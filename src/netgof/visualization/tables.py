"""
Tables Module
=============

This module provides functions for generating summary tables
from assessment results in various formats.
"""

import logging
from pathlib import Path
from typing import Any, Dict, List

import numpy as np
import pandas as pd

logger = logging.getLogger(__name__)

TABLE_COLUMNS: List[str] = [
    "statistic",
    "observed",
    "percentile_rank",
    "extreme",
    "mean",
    "sd",
    "z_score",
    "p_value",
    "n_valid",
    "n_missing",
]


def assessment_table(result: Any) -> pd.DataFrame:
    """
    Create the numeric table of one assessment.

    Parameters
    ----------
    result : AssessmentResult
        Assessment result

    Returns
    -------
    pd.DataFrame
        One row per scalar statistic with columns statistic, observed,
        percentile_rank, extreme, mean, sd, z_score, p_value, n_valid,
        n_missing. ``alpha``, ``n_iter`` and ``failure_count`` are stored
        in ``df.attrs``.
    """
    rows = []
    for name, c in result.comparisons.items():
        rows.append({
            "statistic": name,
            "observed": c.observed,
            "percentile_rank": c.percentile_rank,
            "extreme": bool(c.extreme),
            "mean": c.mean,
            "sd": c.sd,
            "z_score": c.z_score,
            "p_value": c.p_value,
            "n_valid": c.n_valid,
            "n_missing": c.n_missing,
        })

    df = pd.DataFrame(rows, columns=TABLE_COLUMNS)
    df.attrs["alpha"] = result.alpha
    df.attrs["n_iter"] = result.n_iter
    df.attrs["failure_count"] = result.failure_count
    return df


def model_comparison_table(results: Dict[str, Any]) -> pd.DataFrame:
    """
    Stack the tables of several candidate models for one observed graph.

    Parameters
    ----------
    results : Dict[str, AssessmentResult]
        Model name -> assessment result (or AssessmentReport)

    Returns
    -------
    pd.DataFrame
        Long table with a leading ``model`` column
    """
    frames = []
    for model, result in results.items():
        result = getattr(result, "result", result)
        df = assessment_table(result)
        df.insert(0, "model", model)
        df["failure_count"] = result.failure_count
        frames.append(df)

    if not frames:
        return pd.DataFrame(columns=["model"] + TABLE_COLUMNS + ["failure_count"])
    return pd.concat(frames, ignore_index=True)


def extreme_count_summary(results: Dict[str, Any]) -> pd.DataFrame:
    """
    Count flagged statistics per model.

    Fewer flagged statistics means the candidate model reproduces more of
    the observed structure.
    """
    rows = []
    for model, result in results.items():
        result = getattr(result, "result", result)
        flagged = result.extreme_statistics()
        rows.append({
            "model": model,
            "n_statistics": len(result),
            "n_extreme": len(flagged),
            "extreme_statistics": ", ".join(flagged),
            "failure_count": result.failure_count,
        })
    return pd.DataFrame(rows)


def results_to_latex(
    df: pd.DataFrame,
    caption: str = "",
    label: str = "",
    float_format: str = "%.3f",
) -> str:
    """
    Convert DataFrame to LaTeX table format.

    Parameters
    ----------
    df : pd.DataFrame
        Input DataFrame
    caption : str, optional
        Table caption
    label : str, optional
        LaTeX label
    float_format : str, optional
        Format string for floats

    Returns
    -------
    str
        LaTeX table code
    """
    latex = df.to_latex(
        index=False,
        float_format=lambda x: float_format % x,
        caption=caption or None,
        label=label or None,
        escape=True,
    )

    # Escaped column names use \_ for underscores
    for col in df.columns:
        escaped = str(col).replace("_", "\\_")
        latex = latex.replace(escaped, str(col).replace("_", " "))

    return latex


def results_to_markdown(
    df: pd.DataFrame,
    float_format: str = "%.3f",
) -> str:
    """
    Convert DataFrame to Markdown table format.

    Finite floats use ``float_format``; NaN (an unscored statistic) is shown
    as ``N/A`` and infinite z-scores from constant distributions as
    ``inf`` or ``-inf``.

    Parameters
    ----------
    df : pd.DataFrame
        Input DataFrame
    float_format : str, optional
        Format string for floats

    Returns
    -------
    str
        Markdown table
    """
    # Format floats
    df_formatted = df.copy()
    for col in df_formatted.select_dtypes(include=[np.floating]).columns:
        df_formatted[col] = df_formatted[col].apply(
            lambda x: float_format % x if np.isfinite(x) else ("N/A" if np.isnan(x) else str(x))
        )

    return df_formatted.to_markdown(index=False)


def save_table(
    df: pd.DataFrame,
    filepath: str,
    format: str = "csv",
) -> None:
    """
    Save an assessment table to file.

    Parent directories are created as needed. Markdown output uses the
    N/A and inf formatting of ``results_to_markdown``.

    Parameters
    ----------
    df : pd.DataFrame
        Table to save
    filepath : str
        Output path
    format : str, optional
        Output format: 'csv', 'latex', 'markdown'
    """
    Path(filepath).parent.mkdir(parents=True, exist_ok=True)

    if format == "csv":
        df.to_csv(filepath, index=False)
    elif format == "latex":
        with open(filepath, "w", encoding="utf-8") as f:
            f.write(results_to_latex(df))
    elif format == "markdown":
        with open(filepath, "w", encoding="utf-8") as f:
            f.write(results_to_markdown(df))
    else:
        raise ValueError(f"Unknown format: {format}")

    logger.info(f"Saved table to {filepath}")
