from typing import Callable, List, Optional, Sequence

import numpy as np

from pattern_scout.analyzer.models import AnalysisResult, PatternFilter, PriceBar
from pattern_scout.analyzer.pattern_engine import PatternEngine
from pattern_scout.analyzer.pattern_engine.pattern_engine import CancelToken, current_time_ms
from pattern_scout.analyzer.pattern_engine.rsi_patterns import DIVERGENCE_AVERAGE_RETURN
from pattern_scout.logger.logger import Logger

_DAY_MS = 86_400_000


class PatternAnalyzer:

    def __init__(
        self,
        logger: Optional[Logger] = None,
        clock: Optional[Callable[[], int]] = None,
        divergence_return: float = DIVERGENCE_AVERAGE_RETURN
    ):
        self.logger = logger
        self.clock = clock or current_time_ms
        self.pattern_engine = PatternEngine(logger=logger, clock=self.clock, divergence_return=divergence_return)
        self._warmed_up = False

    def analyze(
        self,
        bars: Sequence[PriceBar],
        filters: Optional[PatternFilter] = None,
        cancel_token: Optional[CancelToken] = None
    ) -> AnalysisResult:
        """
        Detect patterns for one symbol and wrap them with run metadata.

        Note: No caching - always runs fresh detection over the supplied bars.
        """
        if self.logger:
            self.logger.debug(f"Running pattern detection on {len(bars)} bars")

        output = self.pattern_engine.run_pipeline(bars, filters, cancel_token)
        timestamps = output.bars.timestamps

        result = AnalysisResult(
            symbol=output.bars.symbol,
            patterns=output.patterns,
            total_patterns_detected=len(output.candidates),
            analysis_timestamp=self.clock(),
            data_range_start=int(timestamps.min()) if len(timestamps) else 0,
            data_range_end=int(timestamps.max()) if len(timestamps) else 0,
        )

        if self.logger and len(timestamps):
            self.logger.info(
                f"[{result.symbol}] {len(result.patterns)} pattern(s) kept "
                f"of {result.total_patterns_detected} detected over {len(timestamps)} bars"
            )
        return result

    def warmup(self) -> None:
        """Run a lightweight detection pass to prime numba caches."""
        if self._warmed_up:
            return

        try:
            filters = PatternFilter(
                enable_hourly_analysis=True,
                enable_yearly_analysis=True,
                enable_volatility_analysis=True,
                enable_seasonal_trends=True,
                minimum_confidence=0.0,
                minimum_frequency=0,
            )
            self.pattern_engine.run_pipeline(self._build_dummy_bars(64), filters)
            self._warmed_up = True
            if self.logger:
                self.logger.debug("PatternAnalyzer warm-up completed (Numba cache primed)")
        except Exception as exc:
            if self.logger:
                self.logger.warning(f"PatternAnalyzer warm-up skipped: {exc}")

    def _build_dummy_bars(self, sample_count: int) -> List[PriceBar]:
        """Create deterministic daily bars for warm-up."""
        start = self.clock() - sample_count * _DAY_MS
        base = np.linspace(100.0, 110.0, sample_count)
        noise = np.sin(np.linspace(0, np.pi * 3, sample_count)) * 0.5
        close = base + noise
        volume = np.linspace(1_000.0, 1_500.0, sample_count)
        return [
            PriceBar(
                symbol="WARMUP",
                timestamp=start + i * _DAY_MS,
                open=float(close[i] - 0.1),
                high=float(close[i] + 0.5),
                low=float(close[i] - 0.5),
                close=float(close[i]),
                volume=float(volume[i]),
            )
            for i in range(sample_count)
        ]
