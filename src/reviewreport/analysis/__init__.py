"""Analysis helpers: the windowed median trend smoother."""

from .smoothing import (
    InvalidArgumentError,
    SmoothedCurve,
    smooth,
    smooth_rows,
    smooth_series,
    windowed_median,
)

__all__ = [
    "InvalidArgumentError",
    "SmoothedCurve",
    "smooth",
    "smooth_rows",
    "smooth_series",
    "windowed_median",
]
