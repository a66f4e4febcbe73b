"""
Volatility Pattern Detection - NumPy/Numba Implementation

Classifies bars by their high-low range relative to the mean range:
1. High volatility (range above 1.5x mean)
2. Low volatility consolidation (range below 0.5x mean)
"""

from typing import Tuple

import numpy as np
from numba import njit

from pattern_scout.analyzer.bar_series import BarArrays, mean_numba
from pattern_scout.analyzer.models import Pattern, PatternType

HIGH_MULTIPLIER = 1.5
LOW_MULTIPLIER = 0.5
MIN_PERIODS = 5
VOLATILITY_CONFIDENCE = 0.7


@njit(cache=True)
def daily_range_pct_numba(high: np.ndarray, low: np.ndarray) -> np.ndarray:
    """(high - low) / low * 100 per bar; a zero low yields 0.0."""
    n = len(high)
    out = np.zeros(n, dtype=np.float64)
    for i in range(n):
        if low[i] != 0.0:
            out[i] = (high[i] - low[i]) / low[i] * 100.0
    return out


def detect_volatility_patterns(bars: BarArrays) -> Tuple[Pattern, ...]:
    if len(bars) == 0:
        return ()

    ranges = daily_range_pct_numba(bars.high, bars.low)
    avg_range = float(mean_numba(ranges))
    patterns = []

    high_periods = bars.take(ranges > avg_range * HIGH_MULTIPLIER)
    if len(high_periods) >= MIN_PERIODS:
        patterns.append(Pattern(
            symbol=bars.symbol,
            pattern_type=PatternType.HIGH_VOLATILITY,
            confidence=VOLATILITY_CONFIDENCE,
            frequency=len(high_periods),
            last_occurrence=int(high_periods.timestamps.max()),
            predicted_next_occurrence=None,
            description=(
                f"High volatility periods ({avg_range * HIGH_MULTIPLIER:.1f}%+ daily range) "
                f"occur {len(high_periods)} times"
            ),
            average_return_percentage=float(mean_numba(high_periods.returns)),
        ))

    low_periods = bars.take(ranges < avg_range * LOW_MULTIPLIER)
    if len(low_periods) >= MIN_PERIODS:
        patterns.append(Pattern(
            symbol=bars.symbol,
            pattern_type=PatternType.LOW_VOLATILITY,
            confidence=VOLATILITY_CONFIDENCE,
            frequency=len(low_periods),
            last_occurrence=int(low_periods.timestamps.max()),
            predicted_next_occurrence=None,
            description=(
                f"Low volatility consolidation periods detected {len(low_periods)} times, "
                "often precede breakouts"
            ),
            average_return_percentage=0.0,
        ))

    return tuple(patterns)
