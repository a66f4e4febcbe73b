"""
Price Spike/Drop Detection

Flags bars whose open-to-close move exceeds twice the mean absolute move.
"""

from typing import Tuple

import numpy as np

from pattern_scout.analyzer.bar_series import BarArrays, mean_numba
from pattern_scout.analyzer.models import Pattern, PatternType

MOVE_MULTIPLIER = 2.0
MIN_EVENTS = 5
MOVEMENT_CONFIDENCE = 0.75


def detect_price_movement_patterns(bars: BarArrays) -> Tuple[Pattern, ...]:
    if len(bars) == 0:
        return ()

    changes = bars.returns
    threshold = float(mean_numba(np.abs(changes))) * MOVE_MULTIPLIER
    patterns = []

    spike_mask = changes > threshold
    if int(spike_mask.sum()) >= MIN_EVENTS:
        spikes = changes[spike_mask]
        patterns.append(Pattern(
            symbol=bars.symbol,
            pattern_type=PatternType.PRICE_SPIKE,
            confidence=MOVEMENT_CONFIDENCE,
            frequency=int(len(spikes)),
            last_occurrence=int(bars.timestamps[spike_mask].max()),
            predicted_next_occurrence=None,
            description=f"Significant price spikes (>{threshold:.1f}%) detected {len(spikes)} times",
            average_return_percentage=float(mean_numba(spikes)),
        ))

    drop_mask = changes < -threshold
    if int(drop_mask.sum()) >= MIN_EVENTS:
        drops = changes[drop_mask]
        patterns.append(Pattern(
            symbol=bars.symbol,
            pattern_type=PatternType.PRICE_DROP,
            confidence=MOVEMENT_CONFIDENCE,
            frequency=int(len(drops)),
            last_occurrence=int(bars.timestamps[drop_mask].max()),
            predicted_next_occurrence=None,
            description=f"Significant price drops (<{-threshold:.1f}%) detected {len(drops)} times",
            average_return_percentage=float(mean_numba(drops)),
        ))

    return tuple(patterns)
