"""
Support and Resistance Level Detection

Clusters bar lows (support) and highs (resistance) into recurring price
levels within a 2% relative tolerance.
"""

from typing import Tuple

from pattern_scout.analyzer.bar_series import BarArrays, find_recurring_levels
from pattern_scout.analyzer.models import Pattern, PatternType

LEVEL_TOLERANCE = 0.02
MIN_TOUCHES = 3


def _level_patterns(bars: BarArrays, support: bool) -> Tuple[Pattern, ...]:
    prices = bars.low if support else bars.high
    label = "Support" if support else "Resistance"
    pattern_type = PatternType.SUPPORT_LEVEL if support else PatternType.RESISTANCE_LEVEL

    patterns = []
    for level, touches in find_recurring_levels(prices, LEVEL_TOLERANCE, MIN_TOUCHES).items():
        patterns.append(Pattern(
            symbol=bars.symbol,
            pattern_type=pattern_type,
            confidence=min(0.95, len(touches) / 8.0),
            frequency=len(touches),
            last_occurrence=int(bars.timestamps[touches[-1]]),
            predicted_next_occurrence=None,
            description=f"{label} level at ${level:.2f} tested {len(touches)} times",
            average_return_percentage=0.0,
        ))
    return tuple(patterns)


def detect_support_resistance_patterns(bars: BarArrays) -> Tuple[Pattern, ...]:
    if len(bars) == 0:
        return ()
    return _level_patterns(bars, support=True) + _level_patterns(bars, support=False)
