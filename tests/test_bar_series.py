"""Correctness tests for the bar-series kernels and helpers."""
from datetime import timezone

import numpy as np
import pytest

from conftest import DAY_MS, START_MS
from pattern_scout.analyzer.bar_series import (
    BarArrays,
    average_forward_return,
    average_return,
    consistency_numba,
    find_crossovers,
    find_recurring_levels,
    group_by_calendar_field,
    local_maxima,
    local_minima,
    moving_average,
    percent_returns_numba,
)
from pattern_scout.analyzer.calendar_fields import CalendarField
from pattern_scout.analyzer.exceptions import MixedSymbolError


class TestBarArrays:

    def test_from_bars_sorts_by_timestamp(self, make_bars):
        bars = make_bars([100, 101, 102, 103])
        arrays = BarArrays.from_bars(list(reversed(bars)))

        assert list(arrays.timestamps) == [START_MS + i * DAY_MS for i in range(4)]
        assert list(arrays.close) == [100.0, 101.0, 102.0, 103.0]
        assert arrays.symbol == "BTCUSDT"

    def test_mixed_symbols_rejected(self, make_bars):
        bars = make_bars([100, 101], symbol="ETHUSDT") + make_bars([100, 101], symbol="BTCUSDT")

        with pytest.raises(MixedSymbolError) as exc_info:
            BarArrays.from_bars(bars)
        assert exc_info.value.symbols == ("BTCUSDT", "ETHUSDT")
        assert isinstance(exc_info.value, ValueError)

    def test_empty(self):
        arrays = BarArrays.from_bars([])
        assert len(arrays) == 0
        assert arrays.symbol == ""

    def test_take_mask(self, make_arrays):
        arrays = make_arrays([100, 200, 300, 400])
        subset = arrays.take(arrays.close > 150)
        assert list(subset.close) == [200.0, 300.0, 400.0]
        assert subset.symbol == arrays.symbol


class TestReturnsAndConsistency:

    def test_percent_returns(self):
        out = percent_returns_numba(np.array([100.0, 50.0, 0.0]), np.array([110.0, 40.0, 5.0]))
        assert out[0] == pytest.approx(10.0)
        assert out[1] == pytest.approx(-20.0)
        # Zero open is guarded
        assert out[2] == 0.0

    def test_consistency_identical_returns(self):
        assert consistency_numba(np.array([2.0, 2.0, 2.0]), 10.0) == pytest.approx(1.0)

    def test_consistency_clamped_at_zero(self):
        # Population std of [10, -10] is exactly 10
        assert consistency_numba(np.array([10.0, -10.0]), 10.0) == 0.0
        assert consistency_numba(np.array([30.0, -30.0]), 10.0) == 0.0

    def test_average_return_empty_is_nan(self):
        assert np.isnan(average_return(BarArrays.from_bars([])))


class TestMovingAverage:

    def test_values_and_timestamps(self, make_arrays):
        arrays = make_arrays([1, 2, 3, 4, 5])
        timestamps, values = moving_average(arrays, 3)

        np.testing.assert_allclose(values, [2.0, 3.0, 4.0])
        assert list(timestamps) == list(arrays.timestamps[2:])

    def test_period_longer_than_series(self, make_arrays):
        timestamps, values = moving_average(make_arrays([1, 2]), 3)
        assert len(values) == 0
        assert len(timestamps) == 0


class TestCrossovers:

    def test_detects_both_directions(self):
        indices, bullish = find_crossovers(np.array([1.0, 3.0, 1.0, 3.0]), np.array([2.0, 2.0, 2.0, 2.0]))
        assert list(indices) == [1, 2, 3]
        assert list(bullish) == [True, False, True]

    def test_touching_is_not_a_crossing(self):
        indices, _ = find_crossovers(np.array([1.0, 2.0, 3.0, 2.0, 1.0]), np.full(5, 2.0))
        assert len(indices) == 0

    def test_antisymmetric(self):
        rng = np.random.default_rng(7)
        a = rng.normal(size=200)
        b = rng.normal(size=200)

        idx_ab, bull_ab = find_crossovers(a, b)
        idx_ba, bull_ba = find_crossovers(b, a)

        assert len(idx_ab) > 0
        np.testing.assert_array_equal(idx_ab, idx_ba)
        np.testing.assert_array_equal(bull_ab, ~bull_ba)

    def test_length_mismatch(self):
        with pytest.raises(ValueError):
            find_crossovers(np.zeros(3), np.zeros(4))


class TestExtrema:

    def test_strict_minima_and_maxima(self):
        values = np.array([3.0, 1.0, 3.0, 1.0, 3.0])
        assert list(local_minima(values)) == [1, 3]
        assert list(local_maxima(values)) == [2]

    def test_plateau_is_not_extremum(self):
        assert len(local_maxima(np.array([1.0, 2.0, 2.0, 1.0]))) == 0
        assert len(local_minima(np.array([2.0, 1.0, 1.0, 2.0]))) == 0

    def test_short_input(self):
        assert len(local_minima(np.array([1.0, 0.0]))) == 0


class TestRecurringLevels:

    def test_greedy_clustering(self):
        values = np.array([100.0, 101.0, 99.5, 150.0, 100.5, 151.0, 300.0])
        levels = find_recurring_levels(values, 0.02)
        assert levels == {100.0: [0, 1, 2, 4]}

    def test_clusters_have_min_touches_and_valid_indices(self):
        rng = np.random.default_rng(3)
        values = rng.choice([50.0, 75.0, 100.0], size=60) * rng.uniform(0.995, 1.005, size=60)

        levels = find_recurring_levels(values, 0.02)

        assert levels
        seen = set()
        for indices in levels.values():
            assert len(indices) >= 3
            assert set(indices) <= set(range(len(values)))
            assert seen.isdisjoint(indices)
            seen.update(indices)

    def test_zero_level_only_absorbs_zeros(self):
        levels = find_recurring_levels(np.array([0.0, 0.0, 0.0, 1.0, 1.0]), 0.02)
        assert levels == {0.0: [0, 1, 2]}

    def test_empty(self):
        assert find_recurring_levels(np.array([]), 0.02) == {}


class TestForwardReturns:

    def test_skips_indices_without_full_horizon(self):
        close = np.array([100.0, 110.0, 121.0])
        assert average_forward_return(close, np.array([0, 1, 2]), 1) == pytest.approx(10.0)

    def test_none_qualify(self):
        assert average_forward_return(np.array([100.0, 110.0]), np.array([1]), 5) == 0.0


class TestCalendarGrouping:

    def test_day_of_week_groups(self, make_arrays):
        arrays = make_arrays([100.0] * 14)
        groups = group_by_calendar_field(arrays, CalendarField.DAY_OF_WEEK, timezone.utc)

        assert len(groups) == 7
        # First bar is a Monday (2 in 1=Sunday numbering)
        assert next(iter(groups)) == 2
        assert all(len(group) == 2 for group in groups.values())
