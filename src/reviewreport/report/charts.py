"""
Static charts for the report.

Every function takes the data to draw, a :class:`Palette` and the output path,
saves a PNG and returns the path. Figures are always closed after saving.
"""

import logging
import os
from pathlib import Path
from typing import Any, Optional

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd

from ..analysis.smoothing import SmoothedCurve, smooth_series
from ..config import settings
from .palette import Palette

logger = logging.getLogger(__name__)

STYLE = "seaborn-v0_8-whitegrid"
TREND_POINTS = 300


def _save(fig, output_path, dpi: Optional[int] = None) -> Path:
    output_path = Path(output_path)
    output_dir = os.path.dirname(output_path)
    if output_dir:
        os.makedirs(output_dir, exist_ok=True)
    fig.savefig(output_path, dpi=dpi or settings.figure_dpi, bbox_inches="tight", facecolor="white")
    plt.close(fig)
    logger.info("Plot saved to %s", output_path)
    return output_path


def _despine(ax) -> None:
    ax.spines["top"].set_visible(False)
    ax.spines["right"].set_visible(False)


def trend_grid(curve: SmoothedCurve, n_points: int = TREND_POINTS):
    """Evaluation points spanning the curve's knots: an even grid plus the knots themselves."""
    lo, hi = curve.domain
    if lo is None or lo == hi:
        return curve.knots.index
    if curve.is_datelike:
        grid = pd.date_range(lo, hi, periods=n_points)
        return grid.union(curve.knots.index)
    grid = np.linspace(float(lo), float(hi), n_points)
    return np.union1d(grid, curve.knots.index.to_numpy(dtype=float))


def plot_submissions_by_track(pivot: pd.DataFrame, palette: Palette, output_path) -> Path:
    """Stacked bars of submissions per year, one segment per track."""
    plt.style.use(STYLE)
    fig, ax = plt.subplots(figsize=(12, 6))

    years = pivot.index.astype(str)
    bottom = np.zeros(len(pivot))
    for track in pivot.columns:
        values = pivot[track].to_numpy(dtype=float)
        ax.bar(years, values, bottom=bottom, label=str(track), color=palette.color_for(track),
               edgecolor="white", linewidth=0.5)
        bottom += values

    ax.set_title("Submissions per year by track", fontsize=16)
    ax.set_xlabel("Submission year", fontsize=12)
    ax.set_ylabel("Submissions", fontsize=12)
    if len(pivot.columns):
        ax.legend(fontsize=10, loc="upper left")
    _despine(ax)
    return _save(fig, output_path)


def plot_yearly_counts(summary: pd.DataFrame, palette: Palette, output_path) -> Path:
    """Side by side bars of submitted and published papers per year."""
    plt.style.use(STYLE)
    fig, ax = plt.subplots(figsize=(12, 6))

    positions = np.arange(len(summary))
    width = 0.4
    ax.bar(positions - width / 2, summary["submitted"], width, label="Submitted",
           color=palette.color_for("submitted"))
    ax.bar(positions + width / 2, summary["published"], width, label="Published",
           color=palette.color_for("published"))
    ax.set_xticks(positions)
    ax.set_xticklabels(summary["year"].astype(str))

    ax.set_title("Submitted and published papers per year", fontsize=16)
    ax.set_xlabel("Submission year", fontsize=12)
    ax.set_ylabel("Papers", fontsize=12)
    ax.legend(fontsize=10)
    _despine(ax)
    return _save(fig, output_path)


def plot_scatter_with_trend(
    df: pd.DataFrame,
    x_col: str,
    y_col: str,
    palette: Palette,
    output_path,
    window: Any,
    title: str,
    ylabel: str,
    color_col: Optional[str] = None,
    xlabel: Optional[str] = None,
) -> Path:
    """
    Scatter of ``y_col`` against ``x_col`` with a windowed median trend line.

    Parameters
    ----------
    df : DataFrame
        Source rows. Rows with missing x are not drawn.
    x_col, y_col : str
        Columns to plot; x may be numeric or datetime.
    palette : Palette
        Point colours by ``color_col`` label, and the trend colour.
    window : float or timedelta
        Width of the median window (days for datetime x).
    color_col : str, optional
        Category column used to colour the points.
    """
    data = df.dropna(subset=[x_col])
    if data.empty:
        raise ValueError(f"No rows with a value in {x_col!r} to plot.")

    curve = smooth_series(data[x_col], data[y_col], window)
    grid = trend_grid(curve)
    trend = curve(grid)

    plt.style.use(STYLE)
    fig, ax = plt.subplots(figsize=(12, 6))

    if color_col:
        for label, group in data.groupby(color_col, sort=True):
            ax.scatter(group[x_col], group[y_col], s=12, alpha=0.6, label=str(label),
                       color=palette.color_for(label))
    else:
        ax.scatter(data[x_col], data[y_col], s=12, alpha=0.6, color=palette.default)

    # NaN knots leave gaps in the line
    ax.plot(grid, trend, color=palette.trend, linewidth=2.0, label="Rolling median")

    ax.set_title(title, fontsize=16)
    ax.set_xlabel(xlabel or x_col, fontsize=12)
    ax.set_ylabel(ylabel, fontsize=12)
    ax.legend(fontsize=10, loc="upper left")
    ax.tick_params(axis="x", rotation=45)
    _despine(ax)
    return _save(fig, output_path)


def plot_table(df: pd.DataFrame, output_path, title: str = "", float_format: str = "{:.2f}") -> Path:
    """Render a DataFrame as a static table figure."""
    def _fmt(value):
        if isinstance(value, (float, np.floating)):
            return "" if np.isnan(value) else float_format.format(value)
        if value is None or value is pd.NA:
            return ""
        return str(value)

    if len(df.columns) == 0:
        raise ValueError("Cannot render a table without columns.")
    cells = [[_fmt(v) for v in row] for row in df.itertuples(index=False, name=None)]
    if not cells:
        cells = [[""] * len(df.columns)]
    height = 0.6 + 0.3 * (len(cells) + 1)

    fig, ax = plt.subplots(figsize=(max(6, 1.6 * len(df.columns)), height))
    ax.axis("off")
    table = ax.table(
        cellText=cells,
        colLabels=[str(c) for c in df.columns],
        loc="center",
        cellLoc="center",
    )
    table.auto_set_font_size(False)
    table.set_fontsize(9)
    table.scale(1, 1.3)
    for (row, _), cell in table.get_celld().items():
        if row == 0:
            cell.set_text_props(fontweight="bold")
            cell.set_facecolor("#e9ecef")
    if title:
        ax.set_title(title, fontsize=12, fontweight="bold")
    return _save(fig, output_path)
