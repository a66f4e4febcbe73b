"""Dataclasses for the pattern detection engine."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple

from pattern_scout.utils.data_utils import SerializableMixin


class PatternType(str, Enum):
    """Closed set of pattern tags a detector may emit."""

    # Time-based patterns
    HOURLY_SPIKE = "HOURLY_SPIKE"
    HOURLY_DROP = "HOURLY_DROP"
    DAILY_PATTERN = "DAILY_PATTERN"
    WEEKLY_PATTERN = "WEEKLY_PATTERN"
    MONTHLY_PATTERN = "MONTHLY_PATTERN"
    YEARLY_PATTERN = "YEARLY_PATTERN"

    # Price movement patterns
    PRICE_SPIKE = "PRICE_SPIKE"
    PRICE_DROP = "PRICE_DROP"
    CONSOLIDATION = "CONSOLIDATION"
    BREAKOUT = "BREAKOUT"

    # Technical patterns
    MOVING_AVERAGE_CROSS = "MOVING_AVERAGE_CROSS"
    SUPPORT_LEVEL = "SUPPORT_LEVEL"
    RESISTANCE_LEVEL = "RESISTANCE_LEVEL"
    VOLUME_SPIKE = "VOLUME_SPIKE"

    # Volatility patterns
    HIGH_VOLATILITY = "HIGH_VOLATILITY"
    LOW_VOLATILITY = "LOW_VOLATILITY"

    # Consecutive patterns
    CONSECUTIVE_GAINS = "CONSECUTIVE_GAINS"
    CONSECUTIVE_LOSSES = "CONSECUTIVE_LOSSES"

    # Seasonal
    SEASONAL_TREND = "SEASONAL_TREND"
    QUARTERLY_PATTERN = "QUARTERLY_PATTERN"

    # RSI momentum patterns
    RSI_OVERSOLD = "RSI_OVERSOLD"
    RSI_OVERBOUGHT = "RSI_OVERBOUGHT"
    RSI_BULLISH_DIVERGENCE = "RSI_BULLISH_DIVERGENCE"
    RSI_BEARISH_DIVERGENCE = "RSI_BEARISH_DIVERGENCE"


@dataclass(frozen=True, slots=True)
class PriceBar(SerializableMixin):
    """One OHLCV record. Timestamp is epoch milliseconds (UTC)."""
    symbol: str
    timestamp: int
    open: float
    high: float
    low: float
    close: float
    volume: float


@dataclass(frozen=True, slots=True)
class PatternFilter(SerializableMixin):
    """Detector toggles and output thresholds for a single analysis call.

    ``time_zone`` is the IANA zone used for every calendar grouping and
    next-occurrence projection.
    """
    enable_hourly_analysis: bool = False
    enable_daily_analysis: bool = True
    enable_weekly_analysis: bool = True
    enable_monthly_analysis: bool = True
    enable_yearly_analysis: bool = False
    enable_moving_averages: bool = True
    enable_volume_correlation: bool = True
    enable_volatility_analysis: bool = False
    enable_support_resistance: bool = True
    enable_seasonal_trends: bool = False
    enable_rsi: bool = True
    minimum_confidence: float = 0.6
    minimum_frequency: int = 3
    time_zone: str = "UTC"


@dataclass(frozen=True, slots=True)
class Pattern(SerializableMixin):
    """Detected statistical regularity in a bar series."""
    symbol: str
    pattern_type: PatternType
    confidence: float
    frequency: int
    last_occurrence: int
    predicted_next_occurrence: Optional[int]
    description: str
    average_return_percentage: float


@dataclass(frozen=True, slots=True)
class AnalysisResult(SerializableMixin):
    """Outcome of one analysis run, as handed to persistence or display."""
    symbol: str
    patterns: Tuple[Pattern, ...] = field(default_factory=tuple)
    total_patterns_detected: int = 0
    analysis_timestamp: int = 0
    data_range_start: int = 0
    data_range_end: int = 0

    @property
    def ranked_patterns(self) -> Tuple[Pattern, ...]:
        """Patterns ordered by confidence, highest first."""
        return tuple(sorted(self.patterns, key=lambda p: p.confidence, reverse=True))
