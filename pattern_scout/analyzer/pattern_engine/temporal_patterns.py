"""
Calendar Pattern Detection

Groups bars by a calendar field (hour, day of week, ISO week, month, quarter)
and reports groups whose average return is both large and consistent.

Each family is described by a CalendarRule; the detection loop is shared.
"""

from dataclasses import dataclass
from datetime import tzinfo
from typing import Callable, Tuple

from pattern_scout.analyzer.bar_series import BarArrays, average_return, consistency, group_by_calendar_field
from pattern_scout.analyzer.calendar_fields import DAY_NAMES, MONTH_NAMES, CalendarField, predict_next_occurrence
from pattern_scout.analyzer.models import Pattern, PatternType


@dataclass(frozen=True, slots=True)
class CalendarRule:
    """Gates and labelling for one calendar detector family."""
    field: CalendarField
    min_support: int
    min_effect: float
    min_consistency: float
    pattern_type: Callable[[float], PatternType]
    describe: Callable[[int, float], str]


def _direction(avg_return: float, up: str, down: str) -> str:
    return up if avg_return > 0 else down


def _name_of(names: Tuple[str, ...], key: int) -> str:
    return names[key - 1] if 1 <= key <= len(names) else str(key)


HOURLY_RULE = CalendarRule(
    field=CalendarField.HOUR,
    min_support=10,
    min_effect=0.5,
    min_consistency=0.6,
    pattern_type=lambda r: PatternType.HOURLY_SPIKE if r > 0 else PatternType.HOURLY_DROP,
    describe=lambda hour, r: (
        f"Price tends to {_direction(r, 'rise', 'fall')} at hour {hour} with {r:.1f}% average change"
    ),
)

DAILY_RULE = CalendarRule(
    field=CalendarField.DAY_OF_WEEK,
    min_support=8,
    min_effect=0.8,
    min_consistency=0.65,
    pattern_type=lambda r: PatternType.DAILY_PATTERN,
    describe=lambda day, r: (
        f"Price shows {_direction(r, 'positive', 'negative')} trend on {_name_of(DAY_NAMES, day)} ({r:.1f}% avg)"
    ),
)

WEEKLY_RULE = CalendarRule(
    field=CalendarField.WEEK_OF_YEAR,
    min_support=1,
    min_effect=1.5,
    min_consistency=0.6,
    pattern_type=lambda r: PatternType.WEEKLY_PATTERN,
    describe=lambda week, r: (
        f"Week {week} shows recurring {_direction(r, 'bullish', 'bearish')} pattern ({r:.1f}% avg)"
    ),
)

MONTHLY_RULE = CalendarRule(
    field=CalendarField.MONTH,
    min_support=5,
    min_effect=2.0,
    min_consistency=0.6,
    pattern_type=lambda r: PatternType.MONTHLY_PATTERN,
    describe=lambda month, r: f"{_name_of(MONTH_NAMES, month)} historically shows {r:.1f}% average change",
)

YEARLY_RULE = CalendarRule(
    field=CalendarField.QUARTER,
    min_support=3,
    min_effect=3.0,
    min_consistency=0.55,
    pattern_type=lambda r: PatternType.YEARLY_PATTERN,
    describe=lambda quarter, r: (
        f"Q{quarter} shows recurring {_direction(r, 'growth', 'decline')} pattern ({r:.1f}% avg)"
    ),
)

SEASONAL_RULE = CalendarRule(
    field=CalendarField.QUARTER,
    min_support=3,
    min_effect=5.0,
    min_consistency=0.6,
    pattern_type=lambda r: PatternType.SEASONAL_TREND,
    describe=lambda quarter, r: (
        f"Q{quarter} seasonal trend: {r:.1f}% average {_direction(r, 'gain', 'loss')}"
    ),
)


def detect_calendar_patterns(bars: BarArrays, rule: CalendarRule, tz: tzinfo, now_ms: int) -> Tuple[Pattern, ...]:
    """Apply one calendar rule to every group of the bar series."""
    patterns = []
    for key, group in group_by_calendar_field(bars, rule.field, tz).items():
        if len(group) < rule.min_support:
            continue

        avg_return = average_return(group)
        score = consistency(group)
        if abs(avg_return) <= rule.min_effect or score <= rule.min_consistency:
            continue

        patterns.append(Pattern(
            symbol=group.symbol,
            pattern_type=rule.pattern_type(avg_return),
            confidence=score,
            frequency=len(group),
            last_occurrence=int(group.timestamps.max()),
            predicted_next_occurrence=predict_next_occurrence(key, rule.field, now_ms, tz),
            description=rule.describe(key, avg_return),
            average_return_percentage=avg_return,
        ))
    return tuple(patterns)


def detect_hourly_patterns(bars: BarArrays, tz: tzinfo, now_ms: int) -> Tuple[Pattern, ...]:
    return detect_calendar_patterns(bars, HOURLY_RULE, tz, now_ms)


def detect_daily_patterns(bars: BarArrays, tz: tzinfo, now_ms: int) -> Tuple[Pattern, ...]:
    return detect_calendar_patterns(bars, DAILY_RULE, tz, now_ms)


def detect_weekly_patterns(bars: BarArrays, tz: tzinfo, now_ms: int) -> Tuple[Pattern, ...]:
    return detect_calendar_patterns(bars, WEEKLY_RULE, tz, now_ms)


def detect_monthly_patterns(bars: BarArrays, tz: tzinfo, now_ms: int) -> Tuple[Pattern, ...]:
    return detect_calendar_patterns(bars, MONTHLY_RULE, tz, now_ms)


def detect_yearly_patterns(bars: BarArrays, tz: tzinfo, now_ms: int) -> Tuple[Pattern, ...]:
    return detect_calendar_patterns(bars, YEARLY_RULE, tz, now_ms)


def detect_seasonal_patterns(bars: BarArrays, tz: tzinfo, now_ms: int) -> Tuple[Pattern, ...]:
    return detect_calendar_patterns(bars, SEASONAL_RULE, tz, now_ms)
