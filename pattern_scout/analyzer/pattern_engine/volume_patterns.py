"""
Volume Pattern Detection

Checks whether bars with abnormally high volume (more than twice the mean)
move price consistently in one direction.
"""

from typing import Tuple

import numpy as np

from pattern_scout.analyzer.bar_series import BarArrays, mean_numba
from pattern_scout.analyzer.models import Pattern, PatternType

SPIKE_MULTIPLIER = 2.0
MIN_SPIKES = 5
MIN_PRICE_CHANGE = 1.0
MIN_CONSISTENCY = 0.6


def volume_spike_consistency(price_changes: np.ndarray) -> float:
    """1 - mean absolute deviation / 10; unclamped."""
    avg_change = float(mean_numba(price_changes))
    return 1.0 - float(np.mean(np.abs(price_changes - avg_change))) / 10.0


def detect_volume_patterns(bars: BarArrays) -> Tuple[Pattern, ...]:
    if len(bars) == 0:
        return ()

    mean_volume = float(mean_numba(bars.volume))
    spike_mask = bars.volume > mean_volume * SPIKE_MULTIPLIER
    if int(spike_mask.sum()) < MIN_SPIKES:
        return ()

    spikes = bars.take(spike_mask)
    price_changes = spikes.returns
    avg_change = float(mean_numba(price_changes))
    score = volume_spike_consistency(price_changes)

    if abs(avg_change) <= MIN_PRICE_CHANGE or score <= MIN_CONSISTENCY:
        return ()

    direction = "increase" if avg_change > 0 else "decrease"
    return (Pattern(
        symbol=bars.symbol,
        pattern_type=PatternType.VOLUME_SPIKE,
        confidence=min(1.0, max(0.0, score)),
        frequency=len(spikes),
        last_occurrence=int(spikes.timestamps.max()),
        predicted_next_occurrence=None,
        description=f"High volume spikes correlate with {avg_change:.1f}% price {direction}",
        average_return_percentage=avg_change,
    ),)
