import numpy as np
import pytest

from pattern_scout.analyzer.bar_series import BarArrays
from pattern_scout.analyzer.models import PriceBar

DAY_MS = 86_400_000
HOUR_MS = 3_600_000
# 2024-01-01 00:00 UTC, a Monday
START_MS = 1_704_067_200_000


def build_bars(closes, opens=None, highs=None, lows=None, volumes=None,
               symbol="BTCUSDT", start=START_MS, step=DAY_MS):
    """Bars from close prices; opens default to the previous close."""
    closes = [float(c) for c in closes]
    if opens is None:
        opens = [closes[0]] + closes[:-1]
    if highs is None:
        highs = [max(o, c) * 1.01 for o, c in zip(opens, closes)]
    if lows is None:
        lows = [min(o, c) * 0.99 for o, c in zip(opens, closes)]
    if volumes is None:
        volumes = [1_000.0] * len(closes)

    return [
        PriceBar(
            symbol=symbol,
            timestamp=start + i * step,
            open=float(opens[i]),
            high=float(highs[i]),
            low=float(lows[i]),
            close=closes[i],
            volume=float(volumes[i]),
        )
        for i in range(len(closes))
    ]


@pytest.fixture
def make_bars():
    return build_bars


@pytest.fixture
def make_arrays():
    def _make(*args, **kwargs):
        return BarArrays.from_bars(build_bars(*args, **kwargs))
    return _make


@pytest.fixture
def flat_bars():
    """100 daily bars with open == high == low == close and constant volume."""
    n = 100
    flat = [100.0] * n
    return build_bars(flat, opens=flat, highs=flat, lows=flat)


@pytest.fixture
def random_walk_bars():
    rng = np.random.default_rng(42)
    n = 250
    close = 100.0 * np.cumprod(1.0 + rng.normal(0.0, 0.02, n))
    volumes = rng.uniform(500.0, 5_000.0, n)
    return build_bars(close, volumes=volumes)


@pytest.fixture
def fixed_clock():
    now = START_MS + 400 * DAY_MS
    return lambda: now
