"""Report layer: colour palette, static charts, and the end-to-end build."""

from .palette import Palette, DEFAULT_PALETTE
from .charts import (
    plot_scatter_with_trend,
    plot_submissions_by_track,
    plot_table,
    plot_yearly_counts,
)

__all__ = [
    "Palette",
    "DEFAULT_PALETTE",
    "plot_scatter_with_trend",
    "plot_submissions_by_track",
    "plot_table",
    "plot_yearly_counts",
]
