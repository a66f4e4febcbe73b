"""Async use-case tests: provider/store collaborators and cancellation of the analysis thread."""
import asyncio
import threading
from unittest.mock import AsyncMock, MagicMock

import pytest

from pattern_scout.analyzer.exceptions import AnalysisCancelledError
from pattern_scout.analyzer.models import PatternFilter
from pattern_scout.analyzer.pattern_analyzer import PatternAnalyzer
from pattern_scout.config.loader import config
from pattern_scout.use_cases import DetectPatternsUseCase
from pattern_scout.use_cases.detect_patterns import DetectionOutcome


def _make_use_case(bars=None, fetch_error=None, analyzer=None):
    provider = MagicMock()
    provider.get_price_history = AsyncMock(return_value=bars or [], side_effect=fetch_error)
    store = MagicMock()
    store.save_patterns = AsyncMock()
    store.get_patterns = AsyncMock(return_value=[])
    logger = MagicMock()
    use_case = DetectPatternsUseCase(provider, store, analyzer or PatternAnalyzer(), logger=logger)
    return use_case, provider, store, logger


class TestExecute:

    @pytest.mark.asyncio
    async def test_success_saves_patterns(self, flat_bars):
        use_case, provider, store, _ = _make_use_case(bars=flat_bars)

        outcome = await use_case.execute("BTCUSDT", days=100)

        assert outcome.success
        assert outcome.result.symbol == "BTCUSDT"
        assert len(outcome.patterns) == 3
        provider.get_price_history.assert_awaited_once_with("BTCUSDT", 100, False)
        store.save_patterns.assert_awaited_once_with(outcome.patterns)

    @pytest.mark.asyncio
    async def test_days_default_to_config(self, flat_bars):
        use_case, provider, _, _ = _make_use_case(bars=flat_bars)

        await use_case.execute("BTCUSDT")

        provider.get_price_history.assert_awaited_once_with("BTCUSDT", config.DEFAULT_DAYS, False)

    @pytest.mark.asyncio
    async def test_nothing_to_save(self, flat_bars):
        use_case, _, store, _ = _make_use_case(bars=flat_bars)

        outcome = await use_case.execute("BTCUSDT", filters=PatternFilter(minimum_confidence=1.0))

        assert outcome.success
        assert outcome.patterns == ()
        store.save_patterns.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_fetch_failure(self):
        use_case, _, store, logger = _make_use_case(fetch_error=ConnectionError("exchange down"))

        outcome = await use_case.execute("BTCUSDT")

        assert not outcome.success
        assert outcome.message == "exchange down"
        assert outcome.patterns == ()
        logger.error.assert_called_once()
        store.save_patterns.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_fetch_failure_without_message(self):
        use_case, _, _, _ = _make_use_case(fetch_error=RuntimeError())
        outcome = await use_case.execute("BTCUSDT")
        assert outcome.message == "Failed to fetch data"

    @pytest.mark.asyncio
    async def test_empty_history(self):
        use_case, _, _, _ = _make_use_case(bars=[])

        outcome = await use_case.execute("BTCUSDT")

        assert not outcome.success
        assert outcome.message == "Insufficient data for analysis"

    @pytest.mark.asyncio
    async def test_store_failure_propagates(self, flat_bars):
        use_case, _, store, logger = _make_use_case(bars=flat_bars)
        store.save_patterns.side_effect = OSError("disk full")

        with pytest.raises(OSError):
            await use_case.execute("BTCUSDT")
        logger.error.assert_called_once()

    @pytest.mark.asyncio
    async def test_cancellation_reaches_analysis_thread(self, flat_bars):
        started = threading.Event()
        seen = {}

        def slow_analyze(bars, filters, cancel_token):
            seen["token"] = cancel_token
            started.set()
            cancel_token.wait(timeout=5)
            raise AnalysisCancelledError("cancelled")

        analyzer = MagicMock()
        analyzer.analyze.side_effect = slow_analyze
        use_case, _, store, _ = _make_use_case(bars=flat_bars, analyzer=analyzer)

        task = asyncio.create_task(use_case.execute("BTCUSDT"))
        await asyncio.to_thread(started.wait, 5)
        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task
        assert seen["token"].is_set()
        store.save_patterns.assert_not_awaited()


def test_outcome_patterns_follow_result(flat_bars):
    result = PatternAnalyzer().analyze(flat_bars)
    outcome = DetectionOutcome.ok(result)
    assert outcome.patterns is result.patterns
    assert DetectionOutcome.error("boom").patterns == ()

class TestQueries:

    @pytest.mark.asyncio
    async def test_cached_patterns(self):
        use_case, _, store, _ = _make_use_case()

        await use_case.get_cached_patterns("BTCUSDT")

        store.get_patterns.assert_awaited_once_with("BTCUSDT", 0.6)

    @pytest.mark.asyncio
    async def test_price_data(self, flat_bars):
        use_case, provider, _, _ = _make_use_case(bars=flat_bars)

        bars = await use_case.get_price_data("BTCUSDT")

        assert bars == flat_bars
        provider.get_price_history.assert_awaited_once_with("BTCUSDT", 90)
