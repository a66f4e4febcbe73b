"""
RSI Confidence Enhancer

Single post-pass over detected patterns: the current RSI either corroborates
a pattern (its confidence is boosted and the description annotated) or
leaves it untouched. Rules are a total mapping from PatternType.
"""

from dataclasses import dataclass, replace
from typing import Dict, Optional, Sequence, Tuple

from pattern_scout.analyzer.bar_series import BarArrays
from pattern_scout.analyzer.models import Pattern, PatternType
from pattern_scout.analyzer.pattern_engine.rsi_patterns import calculate_rsi

MIN_BARS = 15
MAX_CONFIDENCE = 0.99

BULLISH = 1
BEARISH = -1
ANY_DIRECTION = 0


@dataclass(frozen=True, slots=True)
class BoostCondition:
    """RSI comparison gated on the pattern's return direction."""
    direction: int
    rsi_below: Optional[float] = None
    rsi_above: Optional[float] = None

    def matches(self, average_return: float, rsi: float) -> bool:
        if self.direction == BULLISH and not average_return > 0:
            return False
        if self.direction == BEARISH and not average_return < 0:
            return False
        if self.rsi_below is not None and not rsi < self.rsi_below:
            return False
        if self.rsi_above is not None and not rsi > self.rsi_above:
            return False
        return True


@dataclass(frozen=True, slots=True)
class BoostRule:
    boost: float
    conditions: Tuple[BoostCondition, ...]

    def boost_for(self, pattern: Pattern, rsi: float) -> float:
        if any(c.matches(pattern.average_return_percentage, rsi) for c in self.conditions):
            return self.boost
        return 0.0


GENERIC_RULE = BoostRule(0.08, (
    BoostCondition(BULLISH, rsi_below=45.0),
    BoostCondition(BEARISH, rsi_above=55.0),
))

_SPECIFIC_RULES: Dict[PatternType, BoostRule] = {
    PatternType.MOVING_AVERAGE_CROSS: BoostRule(0.15, (
        BoostCondition(BULLISH, rsi_below=40.0),
        BoostCondition(BEARISH, rsi_above=60.0),
    )),
    PatternType.SUPPORT_LEVEL: BoostRule(0.10, (BoostCondition(ANY_DIRECTION, rsi_below=35.0),)),
    PatternType.RESISTANCE_LEVEL: BoostRule(0.10, (BoostCondition(ANY_DIRECTION, rsi_above=65.0),)),
    PatternType.PRICE_SPIKE: BoostRule(0.12, (BoostCondition(ANY_DIRECTION, rsi_above=70.0),)),
    PatternType.PRICE_DROP: BoostRule(0.12, (BoostCondition(ANY_DIRECTION, rsi_below=30.0),)),
}

BOOST_RULES: Dict[PatternType, BoostRule] = {
    pattern_type: _SPECIFIC_RULES.get(pattern_type, GENERIC_RULE) for pattern_type in PatternType
}

_missing = set(PatternType) - set(BOOST_RULES)
if _missing:
    raise RuntimeError(f"No boost rule for pattern types: {sorted(t.value for t in _missing)}")


def enhance_pattern(pattern: Pattern, rsi: float) -> Pattern:
    """
    Apply the pattern type's boost rule for the given RSI reading.

    Boosted confidence is capped at 0.99; a pattern already at or above the
    cap is returned unchanged.
    """
    boost = BOOST_RULES[pattern.pattern_type].boost_for(pattern, rsi)
    if boost <= 0:
        return pattern

    boosted = min(MAX_CONFIDENCE, pattern.confidence + boost)
    if boosted <= pattern.confidence:
        return pattern

    return replace(
        pattern,
        confidence=boosted,
        description=f"{pattern.description} [RSI Confirmed: {rsi:.1f}]",
    )


def enhance_patterns_with_rsi(patterns: Sequence[Pattern], bars: BarArrays) -> Tuple[Pattern, ...]:
    """Re-score every pattern against the current RSI; no-op below 15 bars."""
    if len(bars) < MIN_BARS:
        return tuple(patterns)

    current_rsi = calculate_rsi(bars)
    return tuple(enhance_pattern(pattern, current_rsi) for pattern in patterns)
