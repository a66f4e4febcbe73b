"""
Pattern Engine - Orchestrator

Runs every enabled detector over one bar series, lets the RSI enhancer
re-score the candidates, then applies the confidence/frequency filter.

Running -> Enhancing -> Filtering -> Done
"""

import time
from dataclasses import dataclass, field
from datetime import tzinfo
from enum import Enum
from typing import Callable, Optional, Protocol, Sequence, Tuple

from pattern_scout.analyzer.bar_series import BarArrays
from pattern_scout.analyzer.calendar_fields import resolve_zone
from pattern_scout.analyzer.exceptions import AnalysisCancelledError
from pattern_scout.analyzer.models import Pattern, PatternFilter, PriceBar
from pattern_scout.analyzer.pattern_engine.confidence_enhancer import enhance_patterns_with_rsi
from pattern_scout.analyzer.pattern_engine.level_patterns import detect_support_resistance_patterns
from pattern_scout.analyzer.pattern_engine.ma_crossover_patterns import detect_ma_crossover_patterns
from pattern_scout.analyzer.pattern_engine.price_movement_patterns import detect_price_movement_patterns
from pattern_scout.analyzer.pattern_engine.rsi_patterns import DIVERGENCE_AVERAGE_RETURN, detect_rsi_patterns
from pattern_scout.analyzer.pattern_engine.streak_patterns import detect_consecutive_patterns
from pattern_scout.analyzer.pattern_engine.temporal_patterns import (
    detect_daily_patterns,
    detect_hourly_patterns,
    detect_monthly_patterns,
    detect_seasonal_patterns,
    detect_weekly_patterns,
    detect_yearly_patterns,
)
from pattern_scout.analyzer.pattern_engine.volatility_patterns import detect_volatility_patterns
from pattern_scout.analyzer.pattern_engine.volume_patterns import detect_volume_patterns


class CancelToken(Protocol):
    """Anything with an ``is_set()`` flag, e.g. threading.Event."""

    def is_set(self) -> bool: ...


class PipelineState(str, Enum):
    RUNNING = "running"
    ENHANCING = "enhancing"
    FILTERING = "filtering"
    DONE = "done"


@dataclass(frozen=True, slots=True)
class StageContext:
    """Per-call inputs shared read-only by all detector stages."""
    tz: tzinfo
    now_ms: int
    divergence_return: float


@dataclass(frozen=True, slots=True)
class DetectorStage:
    name: str
    enabled: Callable[[PatternFilter], bool]
    run: Callable[[BarArrays, StageContext], Tuple[Pattern, ...]]


def _always(_: PatternFilter) -> bool:
    return True


DETECTOR_STAGES: Tuple[DetectorStage, ...] = (
    DetectorStage("hourly", lambda f: f.enable_hourly_analysis,
                  lambda b, ctx: detect_hourly_patterns(b, ctx.tz, ctx.now_ms)),
    DetectorStage("daily", lambda f: f.enable_daily_analysis,
                  lambda b, ctx: detect_daily_patterns(b, ctx.tz, ctx.now_ms)),
    DetectorStage("weekly", lambda f: f.enable_weekly_analysis,
                  lambda b, ctx: detect_weekly_patterns(b, ctx.tz, ctx.now_ms)),
    DetectorStage("monthly", lambda f: f.enable_monthly_analysis,
                  lambda b, ctx: detect_monthly_patterns(b, ctx.tz, ctx.now_ms)),
    DetectorStage("yearly", lambda f: f.enable_yearly_analysis,
                  lambda b, ctx: detect_yearly_patterns(b, ctx.tz, ctx.now_ms)),
    DetectorStage("moving_averages", lambda f: f.enable_moving_averages,
                  lambda b, ctx: detect_ma_crossover_patterns(b)),
    DetectorStage("volume_correlation", lambda f: f.enable_volume_correlation,
                  lambda b, ctx: detect_volume_patterns(b)),
    DetectorStage("volatility", lambda f: f.enable_volatility_analysis,
                  lambda b, ctx: detect_volatility_patterns(b)),
    DetectorStage("support_resistance", lambda f: f.enable_support_resistance,
                  lambda b, ctx: detect_support_resistance_patterns(b)),
    DetectorStage("seasonal", lambda f: f.enable_seasonal_trends,
                  lambda b, ctx: detect_seasonal_patterns(b, ctx.tz, ctx.now_ms)),
    DetectorStage("consecutive", _always,
                  lambda b, ctx: detect_consecutive_patterns(b)),
    DetectorStage("price_movement", _always,
                  lambda b, ctx: detect_price_movement_patterns(b)),
    DetectorStage("rsi", lambda f: f.enable_rsi,
                  lambda b, ctx: detect_rsi_patterns(b, ctx.divergence_return)),
)


@dataclass(frozen=True, slots=True)
class PipelineOutput:
    """Candidates before filtering and the patterns that passed the filter."""
    bars: BarArrays
    candidates: Tuple[Pattern, ...] = field(default_factory=tuple)
    patterns: Tuple[Pattern, ...] = field(default_factory=tuple)


def current_time_ms() -> int:
    return int(time.time() * 1000)


def passes_filter(pattern: Pattern, filters: PatternFilter) -> bool:
    return (
        pattern.confidence >= filters.minimum_confidence
        and pattern.frequency >= filters.minimum_frequency
    )


class PatternEngine:
    """
    Orchestrates pattern detection across calendar, technical, statistical and RSI families.

    Stateless between calls: bars and filters come in as arguments, patterns go
    out as an immutable tuple. ``clock`` supplies "now" (epoch ms) for
    next-occurrence projection.
    """

    def __init__(
        self,
        logger=None,
        clock: Optional[Callable[[], int]] = None,
        divergence_return: float = DIVERGENCE_AVERAGE_RETURN,
        stages: Sequence[DetectorStage] = DETECTOR_STAGES
    ):
        self.logger = logger
        self.clock = clock or current_time_ms
        self.divergence_return = divergence_return
        self.stages = tuple(stages)

    def analyze(
        self,
        bars: Sequence[PriceBar],
        filters: Optional[PatternFilter] = None,
        cancel_token: Optional[CancelToken] = None
    ) -> Tuple[Pattern, ...]:
        """Detect patterns in ``bars`` and return those passing the filter, in detector order."""
        return self.run_pipeline(bars, filters, cancel_token).patterns

    def run_pipeline(
        self,
        bars: Sequence[PriceBar],
        filters: Optional[PatternFilter] = None,
        cancel_token: Optional[CancelToken] = None
    ) -> PipelineOutput:
        filters = filters or PatternFilter()
        if not bars:
            self._log_debug("No bars supplied, skipping analysis")
            return PipelineOutput(bars=BarArrays.from_bars([]))

        bar_arrays = BarArrays.from_bars(bars)
        context = StageContext(
            tz=resolve_zone(filters.time_zone),
            now_ms=self.clock(),
            divergence_return=self.divergence_return,
        )

        self._transition(PipelineState.RUNNING, bar_arrays)
        candidates: Tuple[Pattern, ...] = ()
        for stage in self.stages:
            self._check_cancelled(cancel_token, stage.name)
            if not stage.enabled(filters):
                continue
            found = stage.run(bar_arrays, context)
            self._log_debug(f"Stage {stage.name}: {len(found)} candidate(s)")
            candidates = candidates + found

        self._check_cancelled(cancel_token, "enhance")
        if filters.enable_rsi:
            self._transition(PipelineState.ENHANCING, bar_arrays)
            candidates = enhance_patterns_with_rsi(candidates, bar_arrays)

        self._transition(PipelineState.FILTERING, bar_arrays)
        patterns = tuple(p for p in candidates if passes_filter(p, filters))

        self._transition(PipelineState.DONE, bar_arrays)
        self._log_debug(f"{len(patterns)} of {len(candidates)} candidate(s) passed the filter")
        return PipelineOutput(bars=bar_arrays, candidates=candidates, patterns=patterns)

    def _check_cancelled(self, cancel_token: Optional[CancelToken], stage_name: str) -> None:
        if cancel_token is not None and cancel_token.is_set():
            self._log_debug(f"Analysis cancelled before stage {stage_name}")
            raise AnalysisCancelledError(f"Analysis cancelled before stage '{stage_name}'")

    def _transition(self, state: PipelineState, bars: BarArrays) -> None:
        self._log_debug(f"[{bars.symbol}] pipeline -> {state.value}")

    def _log_debug(self, message: str) -> None:
        if self.logger:
            self.logger.debug(message)
