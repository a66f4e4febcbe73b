"""
Moving Average Crossover Patterns - NumPy/Numba implementation

Counts crossings of a short close-price SMA (7) over a long SMA (30) and
reports the mean return in the week following each crossing.
"""

from typing import Tuple

import numpy as np

from pattern_scout.analyzer.bar_series import BarArrays, average_forward_return, find_crossovers, moving_average
from pattern_scout.analyzer.models import Pattern, PatternType

SHORT_PERIOD = 7
LONG_PERIOD = 30
MIN_BARS = 50
MIN_CROSSOVERS = 3
FORWARD_HORIZON = 7

PAIR_BY_INDEX = "index"
PAIR_BY_LAST_BAR = "last_bar"


def detect_ma_crossover_patterns(
    bars: BarArrays,
    short_period: int = SHORT_PERIOD,
    long_period: int = LONG_PERIOD,
    horizon: int = FORWARD_HORIZON,
    pairing: str = PAIR_BY_INDEX
) -> Tuple[Pattern, ...]:
    """
    Detect recurring short/long SMA crossovers.

    Args:
        pairing: ``"index"`` compares short[i] with long[i], so the two windows
            share their first bar. ``"last_bar"`` drops the leading short
            values so both windows end on the same bar.
    """
    if pairing not in (PAIR_BY_INDEX, PAIR_BY_LAST_BAR):
        raise ValueError(f"Unknown MA pairing: {pairing!r}")
    if len(bars) < MIN_BARS:
        return ()

    short_timestamps, short_ma = moving_average(bars, short_period)
    long_timestamps, long_ma = moving_average(bars, long_period)

    if pairing == PAIR_BY_INDEX:
        count = min(len(short_ma), len(long_ma))
        short_ma, long_ma = short_ma[:count], long_ma[:count]
        timestamps = short_timestamps[:count]
        window_end = short_period - 1
    else:
        short_ma = short_ma[len(short_ma) - len(long_ma):]
        timestamps = long_timestamps
        window_end = long_period - 1

    indices, _ = find_crossovers(short_ma, long_ma)
    if len(indices) < MIN_CROSSOVERS:
        return ()

    bar_indices = (indices + window_end).astype(np.int64)
    avg_return = average_forward_return(bars.close, bar_indices, horizon)

    return (Pattern(
        symbol=bars.symbol,
        pattern_type=PatternType.MOVING_AVERAGE_CROSS,
        confidence=min(0.9, len(indices) / 10.0),
        frequency=int(len(indices)),
        last_occurrence=int(timestamps[indices[-1]]),
        predicted_next_occurrence=None,
        description=(
            f"{short_period}-day MA crosses {long_period}-day MA with {avg_return:.1f}% "
            "avg return in next week"
        ),
        average_return_percentage=avg_return,
    ),)
