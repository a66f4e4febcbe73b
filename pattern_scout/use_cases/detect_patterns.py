"""
Detect-patterns use case.

Coordinates the collaborators around the analyzer: fetch bar history, run
detection off the event loop, persist what was found.
"""

import asyncio
import threading
from dataclasses import dataclass
from typing import List, Optional, Tuple

from pattern_scout.analyzer.models import AnalysisResult, Pattern, PatternFilter, PriceBar
from pattern_scout.analyzer.pattern_analyzer import PatternAnalyzer
from pattern_scout.config.loader import config
from pattern_scout.contracts import BarHistoryProviderProtocol, PatternStoreProtocol
from pattern_scout.logger.logger import Logger


@dataclass(frozen=True, slots=True)
class DetectionOutcome:
    """Success carries the analysis result; failure carries a message."""
    success: bool
    result: Optional[AnalysisResult] = None
    message: str = ""

    @property
    def patterns(self) -> Tuple[Pattern, ...]:
        return self.result.patterns if self.result is not None else ()

    @classmethod
    def ok(cls, result: AnalysisResult) -> "DetectionOutcome":
        return cls(success=True, result=result)

    @classmethod
    def error(cls, message: str) -> "DetectionOutcome":
        return cls(success=False, message=message)


class DetectPatternsUseCase:

    def __init__(
        self,
        provider: BarHistoryProviderProtocol,
        store: PatternStoreProtocol,
        analyzer: PatternAnalyzer,
        logger: Optional[Logger] = None
    ):
        self.provider = provider
        self.store = store
        self.analyzer = analyzer
        self.logger = logger

    async def execute(
        self,
        symbol: str,
        filters: Optional[PatternFilter] = None,
        days: Optional[int] = None,
        force_refresh: bool = False
    ) -> DetectionOutcome:
        """
        Fetch ``days`` of history for ``symbol``, analyze it and save the patterns.
        ``days`` defaults to the configured DEFAULT_DAYS.

        Fetch failures and empty history become an error outcome. Cancelling the
        awaiting task also stops the analysis at its next stage boundary.
        """
        if days is None:
            days = config.DEFAULT_DAYS
        try:
            bars = await self.provider.get_price_history(symbol, days, force_refresh)
        except Exception as e:
            if self.logger:
                self.logger.error(f"Failed to fetch price history for {symbol}: {e}")
            return DetectionOutcome.error(str(e) or "Failed to fetch data")

        if not bars:
            return DetectionOutcome.error("Insufficient data for analysis")

        result = await self._analyze_in_thread(bars, filters)

        if result.patterns:
            try:
                await self.store.save_patterns(result.patterns)
            except Exception as e:
                if self.logger:
                    self.logger.error(f"Failed to save {len(result.patterns)} pattern(s) for {symbol}: {e}")
                raise

        return DetectionOutcome.ok(result)

    async def _analyze_in_thread(self, bars: List[PriceBar], filters: Optional[PatternFilter]) -> AnalysisResult:
        cancel_event = threading.Event()
        try:
            return await asyncio.to_thread(self.analyzer.analyze, bars, filters, cancel_event)
        except asyncio.CancelledError:
            cancel_event.set()
            if self.logger:
                self.logger.info("Pattern detection cancelled")
            raise

    async def get_cached_patterns(self, symbol: str, min_confidence: float = 0.6) -> List[Pattern]:
        """Stored patterns without re-analyzing."""
        return await self.store.get_patterns(symbol, min_confidence)

    async def get_price_data(self, symbol: str, days: int = 90) -> List[PriceBar]:
        """Bar history for charting."""
        return await self.provider.get_price_history(symbol, days)
