"""
RSI Pattern Detection - NumPy/Numba Implementation

Detects RSI-based patterns on close prices:
1. Oversold conditions (RSI < 30)
2. Overbought conditions (RSI > 70)
3. Bullish divergence (price lower low, RSI higher low)
4. Bearish divergence (price higher high, RSI lower high)

RSI here is the simple-average variant over the last ``period`` deltas,
recomputed per prefix, not Wilder's smoothed series.
"""

from typing import Optional, Tuple

import numpy as np
from numba import njit

from pattern_scout.analyzer.bar_series import BarArrays, average_forward_return, local_maxima, local_minima
from pattern_scout.analyzer.models import Pattern, PatternType

RSI_PERIOD = 14
RSI_OVERSOLD = 30.0
RSI_OVERBOUGHT = 70.0
RSI_NEUTRAL = 50.0
RSI_MIN_BARS = 20
DIVERGENCE_WINDOW = 30
DIVERGENCE_CONFIDENCE = 0.75
# Illustrative return attached to divergence patterns; not derived from data.
DIVERGENCE_AVERAGE_RETURN = 3.5
FORWARD_HORIZON = 7


@njit(cache=True)
def calculate_rsi_numba(close: np.ndarray, period: int = 14) -> float:
    """
    RSI from the last ``period`` close-to-close deltas.

    Returns 50.0 with fewer than period + 1 closes and 100.0 when the
    window holds no losses.
    """
    n = len(close)
    if n < period + 1:
        return 50.0

    gain_sum = 0.0
    loss_sum = 0.0
    for i in range(n - period, n):
        delta = close[i] - close[i - 1]
        if delta > 0.0:
            gain_sum += delta
        elif delta < 0.0:
            loss_sum -= delta

    avg_gain = gain_sum / period
    avg_loss = loss_sum / period
    if avg_loss == 0.0:
        return 100.0

    rs = avg_gain / avg_loss
    return 100.0 - (100.0 / (1.0 + rs))


@njit(cache=True)
def prefix_rsi_numba(close: np.ndarray, period: int = 14) -> np.ndarray:
    """RSI of every prefix: out[i] equals calculate_rsi_numba(close[:i + 1])."""
    n = len(close)
    out = np.empty(n, dtype=np.float64)
    for i in range(n):
        out[i] = calculate_rsi_numba(close[:i + 1], period)
    return out


def calculate_rsi(bars: BarArrays, period: int = RSI_PERIOD) -> float:
    return float(calculate_rsi_numba(bars.close, period))


def rsi_confidence(rsi: float, oversold: bool) -> float:
    """
    Linear confidence map for extreme RSI readings.

    Oversold: RSI 0..30 -> 0.95..0.6. Overbought: RSI 70..100 -> 0.6..0.95.
    """
    if oversold:
        return 0.95 - (rsi / RSI_OVERSOLD * 0.35)
    return 0.6 + ((rsi - RSI_OVERBOUGHT) / (100.0 - RSI_OVERBOUGHT) * 0.35)


def _signal_indices(prefix_rsi: np.ndarray, oversold: bool, period: int, horizon: int = 0) -> np.ndarray:
    """Bar indices from ``period`` onward whose prefix RSI is beyond the threshold."""
    end = len(prefix_rsi) - horizon
    if end <= period:
        return np.empty(0, dtype=np.int64)
    window = prefix_rsi[period:end]
    hits = window < RSI_OVERSOLD if oversold else window > RSI_OVERBOUGHT
    return np.nonzero(hits)[0].astype(np.int64) + period


def count_rsi_extreme_occurrences(prefix_rsi: np.ndarray, oversold: bool, period: int = RSI_PERIOD) -> int:
    return int(len(_signal_indices(prefix_rsi, oversold, period)))


def average_return_after_rsi_extreme(
    close: np.ndarray,
    prefix_rsi: np.ndarray,
    oversold: bool,
    period: int = RSI_PERIOD,
    horizon: int = FORWARD_HORIZON
) -> float:
    """Mean ``horizon``-bar forward return after oversold (or overbought) bars."""
    indices = _signal_indices(prefix_rsi, oversold, period, horizon)
    return average_forward_return(close, indices, horizon)


def _divergence_points(
    bars: BarArrays,
    prefix_rsi: np.ndarray,
    find_maxima: bool,
    window: int
) -> Optional[Tuple[float, float, float, float]]:
    """Close and RSI at the last two extrema of the trailing window."""
    n = len(bars)
    if n < window:
        return None

    recent = bars.close[n - window:]
    extrema = local_maxima(recent) if find_maxima else local_minima(recent)
    if len(extrema) < 2:
        return None

    first, second = int(extrema[-2]), int(extrema[-1])
    offset = n - window
    return (
        float(recent[first]),
        float(recent[second]),
        float(prefix_rsi[offset + first]),
        float(prefix_rsi[offset + second]),
    )


def detect_bullish_divergence(
    bars: BarArrays,
    prefix_rsi: Optional[np.ndarray] = None,
    window: int = DIVERGENCE_WINDOW,
    average_return: float = DIVERGENCE_AVERAGE_RETURN
) -> Optional[Pattern]:
    """
    Bullish divergence: price makes a lower low while RSI makes a higher low.

    Compares the two most recent strict close-price minima in the trailing window.
    """
    if prefix_rsi is None:
        prefix_rsi = prefix_rsi_numba(bars.close, RSI_PERIOD)
    points = _divergence_points(bars, prefix_rsi, find_maxima=False, window=window)
    if points is None:
        return None

    first_price, second_price, first_rsi, second_rsi = points
    if second_price < first_price and second_rsi > first_rsi:
        return Pattern(
            symbol=bars.symbol,
            pattern_type=PatternType.RSI_BULLISH_DIVERGENCE,
            confidence=DIVERGENCE_CONFIDENCE,
            frequency=1,
            last_occurrence=int(bars.timestamps[-1]),
            predicted_next_occurrence=None,
            description=(
                "Bullish RSI Divergence detected - Price making lower lows while RSI makes higher lows "
                f"(${second_price:.2f}, RSI {second_rsi:.1f}). Reversal signal suggesting upward momentum."
            ),
            average_return_percentage=abs(average_return),
        )
    return None


def detect_bearish_divergence(
    bars: BarArrays,
    prefix_rsi: Optional[np.ndarray] = None,
    window: int = DIVERGENCE_WINDOW,
    average_return: float = DIVERGENCE_AVERAGE_RETURN
) -> Optional[Pattern]:
    """
    Bearish divergence: price makes a higher high while RSI makes a lower high.

    Compares the two most recent strict close-price maxima in the trailing window.
    """
    if prefix_rsi is None:
        prefix_rsi = prefix_rsi_numba(bars.close, RSI_PERIOD)
    points = _divergence_points(bars, prefix_rsi, find_maxima=True, window=window)
    if points is None:
        return None

    first_price, second_price, first_rsi, second_rsi = points
    if second_price > first_price and second_rsi < first_rsi:
        return Pattern(
            symbol=bars.symbol,
            pattern_type=PatternType.RSI_BEARISH_DIVERGENCE,
            confidence=DIVERGENCE_CONFIDENCE,
            frequency=1,
            last_occurrence=int(bars.timestamps[-1]),
            predicted_next_occurrence=None,
            description=(
                "Bearish RSI Divergence detected - Price making higher highs while RSI makes lower highs "
                f"(${second_price:.2f}, RSI {second_rsi:.1f}). Reversal signal suggesting downward momentum."
            ),
            average_return_percentage=-abs(average_return),
        )
    return None


def detect_rsi_patterns(
    bars: BarArrays,
    divergence_return: float = DIVERGENCE_AVERAGE_RETURN
) -> Tuple[Pattern, ...]:
    """Oversold/overbought state of the latest RSI plus divergences in the trailing window."""
    if len(bars) < RSI_MIN_BARS:
        return ()

    prefix_rsi = prefix_rsi_numba(bars.close, RSI_PERIOD)
    rsi = float(prefix_rsi[-1])
    last_timestamp = int(bars.timestamps[-1])
    patterns = []

    if rsi < RSI_OVERSOLD:
        patterns.append(Pattern(
            symbol=bars.symbol,
            pattern_type=PatternType.RSI_OVERSOLD,
            confidence=rsi_confidence(rsi, oversold=True),
            frequency=count_rsi_extreme_occurrences(prefix_rsi, oversold=True),
            last_occurrence=last_timestamp,
            predicted_next_occurrence=None,
            description=(
                f"RSI Oversold at {rsi:.1f} - Strong potential for price bounce. "
                "Historically indicates reversal to the upside."
            ),
            average_return_percentage=average_return_after_rsi_extreme(bars.close, prefix_rsi, oversold=True),
        ))

    if rsi > RSI_OVERBOUGHT:
        patterns.append(Pattern(
            symbol=bars.symbol,
            pattern_type=PatternType.RSI_OVERBOUGHT,
            confidence=rsi_confidence(rsi, oversold=False),
            frequency=count_rsi_extreme_occurrences(prefix_rsi, oversold=False),
            last_occurrence=last_timestamp,
            predicted_next_occurrence=None,
            description=(
                f"RSI Overbought at {rsi:.1f} - Potential for price pullback. "
                "Historically indicates reversal to the downside."
            ),
            average_return_percentage=average_return_after_rsi_extreme(bars.close, prefix_rsi, oversold=False),
        ))

    bullish = detect_bullish_divergence(bars, prefix_rsi, average_return=divergence_return)
    if bullish is not None:
        patterns.append(bullish)

    bearish = detect_bearish_divergence(bars, prefix_rsi, average_return=divergence_return)
    if bearish is not None:
        patterns.append(bearish)

    return tuple(patterns)
