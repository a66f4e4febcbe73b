"""
Bar Series Utilities - NumPy/Numba Implementation

Pure functions over an ordered bar series:
1. Per-bar return percentages, average return and consistency score
2. Calendar-field grouping (explicit time zone)
3. Trailing simple moving averages and crossover detection
4. Strict local minima/maxima
5. Greedy recurring-level clustering

Numerical kernels use @njit; grouping and record assembly stay in Python.
"""

from dataclasses import dataclass
from datetime import tzinfo
from typing import Dict, List, Sequence, Tuple

import numpy as np
from numba import njit

from pattern_scout.analyzer.calendar_fields import CalendarField, calendar_keys
from pattern_scout.analyzer.exceptions import MixedSymbolError
from pattern_scout.analyzer.models import PriceBar

CONSISTENCY_STDDEV_SCALE = 10.0


@dataclass(frozen=True, slots=True)
class BarArrays:
    """Column view of a bar series, sorted by timestamp."""
    symbol: str
    timestamps: np.ndarray
    open: np.ndarray
    high: np.ndarray
    low: np.ndarray
    close: np.ndarray
    volume: np.ndarray

    def __len__(self) -> int:
        return len(self.timestamps)

    @classmethod
    def from_bars(cls, bars: Sequence[PriceBar]) -> "BarArrays":
        """Build sorted columns from price bars; all bars must share one symbol."""
        symbols = {bar.symbol for bar in bars}
        if len(symbols) > 1:
            raise MixedSymbolError(symbols)

        ordered = sorted(bars, key=lambda bar: bar.timestamp)
        return cls(
            symbol=ordered[0].symbol if ordered else "",
            timestamps=np.array([bar.timestamp for bar in ordered], dtype=np.int64),
            open=np.array([bar.open for bar in ordered], dtype=np.float64),
            high=np.array([bar.high for bar in ordered], dtype=np.float64),
            low=np.array([bar.low for bar in ordered], dtype=np.float64),
            close=np.array([bar.close for bar in ordered], dtype=np.float64),
            volume=np.array([bar.volume for bar in ordered], dtype=np.float64),
        )

    def take(self, indices: np.ndarray) -> "BarArrays":
        """Subset by positional indices (or boolean mask), preserving order."""
        return BarArrays(
            symbol=self.symbol,
            timestamps=self.timestamps[indices],
            open=self.open[indices],
            high=self.high[indices],
            low=self.low[indices],
            close=self.close[indices],
            volume=self.volume[indices],
        )

    @property
    def returns(self) -> np.ndarray:
        return percent_returns_numba(self.open, self.close)


@njit(cache=True)
def percent_returns_numba(open_: np.ndarray, close: np.ndarray) -> np.ndarray:
    """(close - open) / open * 100 per bar; a zero open yields 0.0."""
    n = len(open_)
    out = np.zeros(n, dtype=np.float64)
    for i in range(n):
        if open_[i] != 0.0:
            out[i] = (close[i] - open_[i]) / open_[i] * 100.0
    return out


@njit(cache=True)
def mean_numba(values: np.ndarray) -> float:
    n = len(values)
    if n == 0:
        return np.nan
    total = 0.0
    for i in range(n):
        total += values[i]
    return total / n


@njit(cache=True)
def consistency_numba(returns: np.ndarray, scale: float = 10.0) -> float:
    """
    Map the population standard deviation of returns to a [0, 1] score.

    Lower dispersion means higher consistency; ``scale`` percentage points of
    standard deviation zeroes the score.
    """
    n = len(returns)
    if n == 0:
        return np.nan
    mean = mean_numba(returns)
    variance = 0.0
    for i in range(n):
        diff = returns[i] - mean
        variance += diff * diff
    std_dev = np.sqrt(variance / n)
    return max(0.0, 1.0 - std_dev / scale)


def average_return(bars: BarArrays) -> float:
    """Mean per-bar return percentage. NaN for an empty series, callers guard."""
    return float(mean_numba(bars.returns))


def consistency(bars: BarArrays) -> float:
    return float(consistency_numba(bars.returns, CONSISTENCY_STDDEV_SCALE))


def group_by_calendar_field(bars: BarArrays, field: CalendarField, tz: tzinfo) -> Dict[int, BarArrays]:
    """
    Partition bars by a calendar field evaluated in ``tz``.

    Keys appear in order of their first bar.
    """
    if len(bars) == 0:
        return {}
    keys = calendar_keys(bars.timestamps, field, tz)
    groups: Dict[int, List[int]] = {}
    for index, key in enumerate(keys):
        groups.setdefault(int(key), []).append(index)
    return {key: bars.take(np.array(indices, dtype=np.int64)) for key, indices in groups.items()}


@njit(cache=True)
def moving_average_numba(values: np.ndarray, period: int) -> np.ndarray:
    """Trailing simple moving average; output has len(values) - period + 1 points."""
    n = len(values)
    if period <= 0 or n < period:
        return np.empty(0, dtype=np.float64)
    out = np.empty(n - period + 1, dtype=np.float64)
    for i in range(n - period + 1):
        total = 0.0
        for j in range(i, i + period):
            total += values[j]
        out[i] = total / period
    return out


def moving_average(bars: BarArrays, period: int) -> Tuple[np.ndarray, np.ndarray]:
    """
    Close-price SMA over ``period`` bars.

    Returns (timestamps, values), each point tagged with its window's last timestamp.
    """
    values = moving_average_numba(bars.close, period)
    if len(values) == 0:
        return np.empty(0, dtype=np.int64), values
    return bars.timestamps[period - 1:], values


@njit(cache=True)
def find_crossovers_numba(series_a: np.ndarray, series_b: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """
    Detect index-aligned crossovers of series_a against series_b.

    An event at i requires a strict sign flip of (a - b) between i-1 and i;
    touching (difference exactly zero) is not a crossing.

    Returns:
        (indices, is_bullish) where is_bullish means a crossed above b.
    """
    n = min(len(series_a), len(series_b))
    indices = np.empty(max(n, 0), dtype=np.int64)
    bullish = np.empty(max(n, 0), dtype=np.bool_)
    count = 0
    for i in range(1, n):
        prev_diff = series_a[i - 1] - series_b[i - 1]
        curr_diff = series_a[i] - series_b[i]
        if prev_diff < 0.0 and curr_diff > 0.0:
            indices[count] = i
            bullish[count] = True
            count += 1
        elif prev_diff > 0.0 and curr_diff < 0.0:
            indices[count] = i
            bullish[count] = False
            count += 1
    return indices[:count], bullish[:count]


def find_crossovers(series_a: np.ndarray, series_b: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """Crossover events between two equal-length, index-aligned series."""
    if len(series_a) != len(series_b):
        raise ValueError(f"Series must be aligned: {len(series_a)} != {len(series_b)}")
    return find_crossovers_numba(
        np.asarray(series_a, dtype=np.float64),
        np.asarray(series_b, dtype=np.float64),
    )


@njit(cache=True)
def _local_extrema_numba(values: np.ndarray, find_maxima: bool) -> np.ndarray:
    n = len(values)
    if n < 3:
        return np.empty(0, dtype=np.int64)
    out = np.empty(n - 2, dtype=np.int64)
    count = 0
    for i in range(1, n - 1):
        if find_maxima:
            hit = values[i] > values[i - 1] and values[i] > values[i + 1]
        else:
            hit = values[i] < values[i - 1] and values[i] < values[i + 1]
        if hit:
            out[count] = i
            count += 1
    return out[:count]


def local_minima(values: np.ndarray) -> np.ndarray:
    """Strict interior valleys; flat plateaus are never extrema."""
    return _local_extrema_numba(np.asarray(values, dtype=np.float64), False)


def local_maxima(values: np.ndarray) -> np.ndarray:
    """Strict interior peaks; flat plateaus are never extrema."""
    return _local_extrema_numba(np.asarray(values, dtype=np.float64), True)


@njit(cache=True)
def assign_levels_numba(values: np.ndarray, tolerance: float) -> Tuple[np.ndarray, np.ndarray]:
    """
    Greedy single-pass level clustering.

    Each value joins the first existing cluster whose representative is within
    ``tolerance`` relative distance, otherwise it seeds a new cluster. A zero
    representative only absorbs exact zeros.

    Returns:
        (cluster_id per value, representative per cluster)
    """
    n = len(values)
    cluster_ids = np.empty(n, dtype=np.int64)
    representatives = np.empty(n, dtype=np.float64)
    cluster_count = 0
    for i in range(n):
        price = values[i]
        assigned = -1
        for c in range(cluster_count):
            level = representatives[c]
            if level == 0.0:
                if price == 0.0:
                    assigned = c
                    break
            elif abs(price - level) / abs(level) < tolerance:
                assigned = c
                break
        if assigned == -1:
            representatives[cluster_count] = price
            assigned = cluster_count
            cluster_count += 1
        cluster_ids[i] = assigned
    return cluster_ids, representatives[:cluster_count]


def find_recurring_levels(values: np.ndarray, tolerance: float, min_touches: int = 3) -> Dict[float, List[int]]:
    """
    Cluster prices into recurring levels and keep those touched ``min_touches`` times.

    Order-sensitive: clusters depend on the iteration order of ``values``.

    Returns:
        Mapping of level representative -> ascending member indices.
    """
    values = np.asarray(values, dtype=np.float64)
    if len(values) == 0:
        return {}
    cluster_ids, representatives = assign_levels_numba(values, tolerance)

    members: Dict[int, List[int]] = {}
    for index, cluster in enumerate(cluster_ids):
        members.setdefault(int(cluster), []).append(index)

    return {
        float(representatives[cluster]): indices
        for cluster, indices in members.items()
        if len(indices) >= min_touches
    }


@njit(cache=True)
def forward_returns_numba(close: np.ndarray, indices: np.ndarray, horizon: int) -> np.ndarray:
    """
    Close-to-close return percentage ``horizon`` bars after each index.

    Indices without a full horizon ahead are skipped; a zero entry close yields 0.0.
    """
    n = len(close)
    out = np.empty(len(indices), dtype=np.float64)
    count = 0
    for k in range(len(indices)):
        idx = indices[k]
        if idx < 0 or idx + horizon >= n:
            continue
        entry = close[idx]
        if entry == 0.0:
            out[count] = 0.0
        else:
            out[count] = (close[idx + horizon] - entry) / entry * 100.0
        count += 1
    return out[:count]


def average_forward_return(close: np.ndarray, indices: np.ndarray, horizon: int) -> float:
    """Mean forward return after the given signal indices, 0.0 when none qualify."""
    returns = forward_returns_numba(close, np.asarray(indices, dtype=np.int64), horizon)
    if len(returns) == 0:
        return 0.0
    return float(mean_numba(returns))
