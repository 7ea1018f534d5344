"""
Windowed median smoothing used for the trend lines of the report charts.

For every distinct x the smoothed value is the median of all y whose x lies
in the open window ``(x - width/2, x + width/2)``. Missing y values are
ignored; a window without any valid y yields NaN. The resulting knots are
joined by a piecewise-linear curve that can be evaluated at arbitrary x and
returns NaN outside the knot range.

Date-like x values are handled in days since the Unix epoch.
"""

import datetime
from typing import Any, Iterable, Sequence, Tuple

import numpy as np
import pandas as pd

_EPOCH = pd.Timestamp("1970-01-01")
_ONE_DAY = pd.Timedelta(days=1)


class InvalidArgumentError(ValueError):
    """Raised when the smoother is called with arguments it cannot work with."""


def _as_series(values: Any) -> pd.Series:
    if isinstance(values, pd.Series):
        return values.reset_index(drop=True)
    if isinstance(values, pd.Index):
        return pd.Series(values.to_numpy())
    if np.ndim(values) == 0:
        return pd.Series([values])
    return pd.Series(list(values))


def _is_datelike(s: pd.Series) -> bool:
    if pd.api.types.is_datetime64_any_dtype(s):
        return True
    if not (pd.api.types.is_object_dtype(s) or pd.api.types.is_string_dtype(s)):
        return False
    present = s.dropna()
    return len(present) > 0 and all(
        isinstance(v, (str, datetime.date, np.datetime64)) for v in present
    )


def _to_naive_datetimes(s: pd.Series) -> pd.Series:
    try:
        dates = pd.to_datetime(s)
    except (TypeError, ValueError) as exc:
        raise InvalidArgumentError(f"x values are not convertible to dates: {exc}") from exc
    if dates.dt.tz is not None:
        dates = dates.dt.tz_convert(None)
    return dates


def _days(dates: pd.Series) -> np.ndarray:
    return ((dates - _EPOCH) / _ONE_DAY).to_numpy(dtype=float)


def _coerce_x(x: Any) -> Tuple[pd.Series, np.ndarray, bool]:
    """Return (x values, float positions, is_datelike)."""
    s = _as_series(x)
    if _is_datelike(s):
        dates = _to_naive_datetimes(s)
        return dates, _days(dates), True

    try:
        numeric = pd.to_numeric(s)
    except (TypeError, ValueError) as exc:
        raise InvalidArgumentError(f"x values must be numeric or date-like: {exc}") from exc
    return numeric, numeric.to_numpy(dtype=float), False


def _coerce_y(y: Any) -> np.ndarray:
    try:
        return pd.to_numeric(_as_series(y)).to_numpy(dtype=float)
    except (TypeError, ValueError) as exc:
        raise InvalidArgumentError(f"y values must be numeric or missing: {exc}") from exc


def _window_in_units(window_width: Any, datelike: bool) -> float:
    if isinstance(window_width, (datetime.timedelta, np.timedelta64)):
        if not datelike:
            raise InvalidArgumentError("A timedelta window_width requires date-like x values.")
        width = pd.Timedelta(window_width) / _ONE_DAY
    elif isinstance(window_width, bool):
        raise InvalidArgumentError(f"window_width must be a number, got {window_width!r}.")
    else:
        try:
            width = float(window_width)
        except (TypeError, ValueError) as exc:
            raise InvalidArgumentError(f"window_width must be a number, got {window_width!r}.") from exc

    if not np.isfinite(width) or width <= 0:
        raise InvalidArgumentError(f"window_width must be positive, got {window_width!r}.")
    return width


def _window_medians(pos: np.ndarray, y: np.ndarray, centers: np.ndarray, width: float) -> np.ndarray:
    half = width / 2.0
    medians = np.full(centers.shape, np.nan)

    usable = ~np.isnan(pos) & ~np.isnan(y)
    order = np.argsort(pos[usable], kind="mergesort")
    pos_sorted = pos[usable][order]
    y_sorted = y[usable][order]

    # strict on both sides: c - half < x < c + half
    lo = np.searchsorted(pos_sorted, centers - half, side="right")
    hi = np.searchsorted(pos_sorted, centers + half, side="left")
    for i, (a, b) in enumerate(zip(lo, hi)):
        if b > a:
            medians[i] = np.median(y_sorted[a:b])
    return medians


def _interpolate(q: np.ndarray, xp: np.ndarray, fp: np.ndarray) -> np.ndarray:
    out = np.full(q.shape, np.nan)
    if xp.size == 0:
        return out

    inside = ~np.isnan(q) & (q >= xp[0]) & (q <= xp[-1])
    if not inside.any():
        return out

    qi = q[inside]
    idx = np.searchsorted(xp, qi, side="left")
    exact = xp[idx] == qi
    res = np.empty(qi.shape)
    res[exact] = fp[idx[exact]]

    j = idx[~exact]
    x0, x1 = xp[j - 1], xp[j]
    y0, y1 = fp[j - 1], fp[j]
    # NaN at either end stays NaN
    res[~exact] = y0 + (y1 - y0) * (qi[~exact] - x0) / (x1 - x0)

    out[inside] = res
    return out


def windowed_median(x: Any, y: Any, window_width: Any) -> pd.Series:
    """
    Median of y over an open window centred on each distinct x.

    Parameters
    ----------
    x : array-like
        Numeric or date-like ordering key. Missing entries are dropped.
    y : array-like
        Numeric values, may contain missing entries.
    window_width : float or timedelta
        Full width of the window. For date-like x a plain number means days.

    Returns
    -------
    Series indexed by the sorted distinct x values. Knots whose window holds
    no valid y are NaN.
    """
    x_values, pos, datelike = _coerce_x(x)
    y_values = _coerce_y(y)

    if len(x_values) == 0:
        raise InvalidArgumentError("Cannot smooth an empty set of observations.")
    if len(x_values) != len(y_values):
        raise InvalidArgumentError(
            f"x and y must have the same length ({len(x_values)} != {len(y_values)})."
        )

    width = _window_in_units(window_width, datelike)

    present = ~np.isnan(pos)
    if datelike:
        keys = pd.DatetimeIndex(np.unique(x_values[present].to_numpy()))
        centers = _days(pd.Series(keys))
    else:
        keys = pd.Index(np.unique(x_values[present].to_numpy()))
        centers = keys.to_numpy(dtype=float)
    keys.name = "x"

    medians = _window_medians(pos, y_values, centers, width)
    return pd.Series(medians, index=keys, name="smoothed")


class SmoothedCurve:
    """Knot set from :func:`windowed_median` plus its piecewise-linear interpolant."""

    def __init__(self, knots: pd.Series, window_width: Any = None):
        self.knots = knots
        self.window_width = window_width
        self.is_datelike = isinstance(knots.index, pd.DatetimeIndex)
        if self.is_datelike:
            self._xp = _days(pd.Series(knots.index))
        else:
            self._xp = knots.index.to_numpy(dtype=float)
        self._fp = knots.to_numpy(dtype=float)

    def __len__(self) -> int:
        return len(self.knots)

    def __call__(self, query: Any):
        return self.evaluate(query)

    def __repr__(self) -> str:
        return f"SmoothedCurve(n_knots={len(self)}, window_width={self.window_width!r})"

    @property
    def domain(self) -> Tuple[Any, Any]:
        """(min, max) of the knot x values, or (None, None) for an empty curve."""
        if len(self.knots) == 0:
            return None, None
        return self.knots.index[0], self.knots.index[-1]

    def _query_positions(self, query: Any) -> np.ndarray:
        s = _as_series(query)
        if self.is_datelike:
            return _days(_to_naive_datetimes(s))
        try:
            return pd.to_numeric(s).to_numpy(dtype=float)
        except (TypeError, ValueError) as exc:
            raise InvalidArgumentError(f"Query must be numeric for a numeric curve: {exc}") from exc

    def evaluate(self, query: Any):
        """
        Interpolate the curve at ``query``.

        Scalars give a float, array-likes a float ndarray. Queries outside the
        knot range, or next to a missing knot, give NaN.
        """
        values = _interpolate(self._query_positions(query), self._xp, self._fp)
        if np.ndim(query) == 0:
            return float(values[0])
        return values

    def to_frame(self) -> pd.DataFrame:
        return self.knots.reset_index()


def smooth(observations: Iterable[Sequence[Any]], window_width: Any) -> SmoothedCurve:
    """Smooth a sequence of ``(x, y)`` pairs into a :class:`SmoothedCurve`."""
    pairs = list(observations)
    if not pairs:
        raise InvalidArgumentError("Cannot smooth an empty set of observations.")
    for pair in pairs:
        if isinstance(pair, (str, bytes)) or not hasattr(pair, "__len__") or len(pair) != 2:
            raise InvalidArgumentError(f"Observations must be (x, y) pairs, got {pair!r}.")

    xs = [p[0] for p in pairs]
    ys = [p[1] for p in pairs]
    return SmoothedCurve(windowed_median(xs, ys, window_width), window_width)


def smooth_series(x: Any, y: Any, window_width: Any) -> SmoothedCurve:
    """Column form of :func:`smooth`, e.g. ``smooth_series(df["published"], df["days"], 180)``."""
    return SmoothedCurve(windowed_median(x, y, window_width), window_width)


def smooth_rows(x: Any, y: Any, window_width: Any) -> np.ndarray:
    """Smoothed value for every input row; rows with missing x get NaN."""
    curve = smooth_series(x, y, window_width)
    return np.asarray(curve.evaluate(_as_series(x)), dtype=float)


__all__ = [
    "InvalidArgumentError",
    "SmoothedCurve",
    "smooth",
    "smooth_rows",
    "smooth_series",
    "windowed_median",
]
