"""
Consecutive Gain/Loss Streak Detection - NumPy/Numba Implementation

Counts how often the series strings together three or more up (or down)
bars in a row.
"""

from typing import Tuple

import numpy as np
from numba import njit

from pattern_scout.analyzer.bar_series import BarArrays
from pattern_scout.analyzer.models import Pattern, PatternType

MIN_STREAK_LENGTH = 3
MIN_STREAKS = 3


@njit(cache=True)
def count_streaks_numba(returns: np.ndarray, min_length: int = 3) -> Tuple[int, int, int, int]:
    """
    Count streak events over per-bar returns.

    Every bar that extends a run to ``min_length`` or more counts one event,
    so a five-bar run contributes three. Flat bars leave both runs untouched.

    Returns:
        (gain_streaks, max_gain_run, loss_streaks, max_loss_run)
    """
    gains = 0
    losses = 0
    gain_streaks = 0
    loss_streaks = 0
    max_gains = 0
    max_losses = 0
    for i in range(len(returns)):
        change = returns[i]
        if change > 0.0:
            gains += 1
            losses = 0
            if gains >= min_length:
                gain_streaks += 1
                max_gains = max(max_gains, gains)
        elif change < 0.0:
            losses += 1
            gains = 0
            if losses >= min_length:
                loss_streaks += 1
                max_losses = max(max_losses, losses)
    return gain_streaks, max_gains, loss_streaks, max_losses


def detect_consecutive_patterns(bars: BarArrays) -> Tuple[Pattern, ...]:
    if len(bars) == 0:
        return ()

    gain_streaks, max_gains, loss_streaks, max_losses = count_streaks_numba(bars.returns, MIN_STREAK_LENGTH)
    last_timestamp = int(bars.timestamps[-1])
    patterns = []

    if gain_streaks >= MIN_STREAKS:
        patterns.append(Pattern(
            symbol=bars.symbol,
            pattern_type=PatternType.CONSECUTIVE_GAINS,
            confidence=min(0.85, gain_streaks / 10.0),
            frequency=int(gain_streaks),
            last_occurrence=last_timestamp,
            predicted_next_occurrence=None,
            description=(
                f"Consecutive winning streak pattern: up to {max_gains} days in a row, "
                f"occurred {gain_streaks} times"
            ),
            average_return_percentage=0.0,
        ))

    if loss_streaks >= MIN_STREAKS:
        patterns.append(Pattern(
            symbol=bars.symbol,
            pattern_type=PatternType.CONSECUTIVE_LOSSES,
            confidence=min(0.85, loss_streaks / 10.0),
            frequency=int(loss_streaks),
            last_occurrence=last_timestamp,
            predicted_next_occurrence=None,
            description=(
                f"Consecutive losing streak pattern: up to {max_losses} days in a row, "
                f"occurred {loss_streaks} times"
            ),
            average_return_percentage=0.0,
        ))

    return tuple(patterns)
