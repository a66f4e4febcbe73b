"""
Pattern Detection Engine

Detector families over a single-symbol OHLCV series, the RSI confidence
enhancer, and the PatternEngine orchestrator that runs them.
"""

from .rsi_patterns import (
    calculate_rsi,
    calculate_rsi_numba,
    rsi_confidence,
    detect_bullish_divergence,
    detect_bearish_divergence,
    detect_rsi_patterns
)

from .temporal_patterns import (
    detect_hourly_patterns,
    detect_daily_patterns,
    detect_weekly_patterns,
    detect_monthly_patterns,
    detect_yearly_patterns,
    detect_seasonal_patterns
)

from .ma_crossover_patterns import detect_ma_crossover_patterns
from .volume_patterns import detect_volume_patterns
from .volatility_patterns import detect_volatility_patterns
from .level_patterns import detect_support_resistance_patterns
from .streak_patterns import detect_consecutive_patterns
from .price_movement_patterns import detect_price_movement_patterns
from .confidence_enhancer import enhance_pattern, enhance_patterns_with_rsi
from .pattern_engine import PatternEngine, PipelineOutput

__all__ = [
    # RSI engine
    'calculate_rsi',
    'calculate_rsi_numba',
    'rsi_confidence',
    'detect_bullish_divergence',
    'detect_bearish_divergence',
    'detect_rsi_patterns',
    # Calendar patterns
    'detect_hourly_patterns',
    'detect_daily_patterns',
    'detect_weekly_patterns',
    'detect_monthly_patterns',
    'detect_yearly_patterns',
    'detect_seasonal_patterns',
    # Technical / statistical patterns
    'detect_ma_crossover_patterns',
    'detect_volume_patterns',
    'detect_volatility_patterns',
    'detect_support_resistance_patterns',
    'detect_consecutive_patterns',
    'detect_price_movement_patterns',
    # Enhancer
    'enhance_pattern',
    'enhance_patterns_with_rsi',
    # Engine
    'PatternEngine',
    'PipelineOutput',
]
