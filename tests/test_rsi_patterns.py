"""RSI engine and divergence detection correctness."""
import numpy as np
import pytest

from pattern_scout.analyzer.models import PatternType
from pattern_scout.analyzer.pattern_engine.rsi_patterns import (
    DIVERGENCE_CONFIDENCE,
    calculate_rsi_numba,
    count_rsi_extreme_occurrences,
    detect_bearish_divergence,
    detect_bullish_divergence,
    detect_rsi_patterns,
    prefix_rsi_numba,
    rsi_confidence,
)


def _bullish_divergence_closes():
    """Sharp drop to a low at bar 20, bounce, then a slow grind to a slightly lower low at bar 38."""
    closes = [120.0 - i for i in range(20)]            # 0..19: 120 -> 101
    closes.append(90.0)                                 # 20: first low
    closes += [90.0 + i for i in range(1, 10)]          # 21..29: 91 -> 99
    closes += [99.0 - 1.1 * i for i in range(1, 10)]    # 30..38: 97.9 -> 89.1
    closes.append(95.0)                                 # 39: bounce
    return closes


class TestCalculateRsi:

    def test_monotonic_increase_is_100(self):
        assert calculate_rsi_numba(np.arange(1.0, 31.0), 14) == 100.0

    def test_equal_positive_deltas_is_100(self):
        assert calculate_rsi_numba(np.linspace(100.0, 114.0, 15), 14) == 100.0

    def test_monotonic_decrease_is_0(self):
        assert calculate_rsi_numba(np.arange(30.0, 0.0, -1.0), 14) == 0.0

    def test_short_input_is_neutral(self):
        assert calculate_rsi_numba(np.arange(1.0, 15.0), 14) == 50.0
        assert calculate_rsi_numba(np.array([5.0, 1.0, 9.0]), 14) == 50.0

    def test_balanced_moves(self):
        closes = np.array([100.0 + (i % 2) for i in range(15)])
        assert calculate_rsi_numba(closes, 14) == pytest.approx(50.0)

    def test_prefix_matches_direct(self):
        rng = np.random.default_rng(1)
        closes = 100.0 + np.cumsum(rng.normal(size=40))
        prefix = prefix_rsi_numba(closes, 14)
        for i in (0, 13, 14, 25, 39):
            assert prefix[i] == pytest.approx(calculate_rsi_numba(closes[:i + 1], 14))


class TestRsiConfidence:

    def test_oversold_range(self):
        assert rsi_confidence(0.0, oversold=True) == pytest.approx(0.95)
        assert rsi_confidence(30.0, oversold=True) == pytest.approx(0.6)

    def test_overbought_range(self):
        assert rsi_confidence(70.0, oversold=False) == pytest.approx(0.6)
        assert rsi_confidence(100.0, oversold=False) == pytest.approx(0.95)


class TestRsiPatterns:

    def test_requires_twenty_bars(self, make_arrays):
        assert detect_rsi_patterns(make_arrays(np.arange(100.0, 119.0))) == ()

    def test_overbought_on_rising_series(self, make_arrays):
        arrays = make_arrays(np.arange(100.0, 130.0))
        patterns = detect_rsi_patterns(arrays)

        assert [p.pattern_type for p in patterns] == [PatternType.RSI_OVERBOUGHT]
        overbought = patterns[0]
        assert overbought.confidence == pytest.approx(0.95)
        # Prefixes ending at bars 14..29 all read 100
        assert overbought.frequency == 16
        assert overbought.average_return_percentage > 0
        assert overbought.last_occurrence == int(arrays.timestamps[-1])
        assert overbought.predicted_next_occurrence is None

    def test_oversold_on_falling_series(self, make_arrays):
        patterns = detect_rsi_patterns(make_arrays(np.arange(130.0, 100.0, -1.0)))

        assert [p.pattern_type for p in patterns] == [PatternType.RSI_OVERSOLD]
        assert patterns[0].confidence == pytest.approx(0.95)
        assert patterns[0].average_return_percentage < 0

    def test_extreme_count_skips_warmup_bars(self):
        prefix = np.full(20, 10.0)
        assert count_rsi_extreme_occurrences(prefix, oversold=True) == 6
        assert count_rsi_extreme_occurrences(prefix, oversold=False) == 0


class TestDivergence:

    def test_bullish_divergence(self, make_arrays):
        arrays = make_arrays(_bullish_divergence_closes())

        pattern = detect_bullish_divergence(arrays)

        assert pattern is not None
        assert pattern.pattern_type == PatternType.RSI_BULLISH_DIVERGENCE
        assert pattern.confidence == DIVERGENCE_CONFIDENCE
        assert pattern.frequency == 1
        assert pattern.average_return_percentage == pytest.approx(3.5)
        assert detect_bearish_divergence(arrays) is None

    def test_bearish_divergence_mirror(self, make_arrays):
        arrays = make_arrays([200.0 - c for c in _bullish_divergence_closes()])

        pattern = detect_bearish_divergence(arrays)

        assert pattern is not None
        assert pattern.pattern_type == PatternType.RSI_BEARISH_DIVERGENCE
        assert pattern.average_return_percentage == pytest.approx(-3.5)
        assert detect_bullish_divergence(arrays) is None

    def test_configured_return_keeps_direction(self, make_arrays):
        arrays = make_arrays(_bullish_divergence_closes())
        pattern = detect_bullish_divergence(arrays, average_return=-2.0)
        assert pattern.average_return_percentage == pytest.approx(2.0)

    def test_needs_full_window(self, make_arrays):
        arrays = make_arrays(_bullish_divergence_closes()[-29:])
        assert detect_bullish_divergence(arrays) is None

    def test_included_in_rsi_patterns(self, make_arrays):
        patterns = detect_rsi_patterns(make_arrays(_bullish_divergence_closes()), divergence_return=1.25)
        divergences = [p for p in patterns if p.pattern_type == PatternType.RSI_BULLISH_DIVERGENCE]
        assert len(divergences) == 1
        assert divergences[0].average_return_percentage == pytest.approx(1.25)
