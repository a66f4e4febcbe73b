"""
Pattern Scout - Entry Point
Detects recurring price patterns in a file of OHLCV bars.
"""
import argparse
import json
import sys

from rich.console import Console
from rich.table import Table

from pattern_scout.analyzer.calendar_fields import to_datetime, resolve_zone
from pattern_scout.analyzer.exceptions import PatternScoutError
from pattern_scout.analyzer.models import AnalysisResult
from pattern_scout.analyzer.pattern_analyzer import PatternAnalyzer
from pattern_scout.config.loader import config
from pattern_scout.logger.logger import Logger
from pattern_scout.utils.bar_loader import load_bars

FAMILIES = (
    "hourly", "daily", "weekly", "monthly", "yearly", "moving_averages",
    "volume_correlation", "volatility", "support_resistance", "seasonal", "rsi",
)

_FAMILY_FIELDS = {
    "hourly": "enable_hourly_analysis",
    "daily": "enable_daily_analysis",
    "weekly": "enable_weekly_analysis",
    "monthly": "enable_monthly_analysis",
    "yearly": "enable_yearly_analysis",
    "moving_averages": "enable_moving_averages",
    "volume_correlation": "enable_volume_correlation",
    "volatility": "enable_volatility_analysis",
    "support_resistance": "enable_support_resistance",
    "seasonal": "enable_seasonal_trends",
    "rsi": "enable_rsi",
}


def parse_args(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Pattern Scout - recurring pattern detection for OHLCV bars",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python start.py btc_daily.csv --symbol BTCUSDT
  python start.py eth.json --enable hourly --enable volatility
  python start.py btc_daily.csv --min-confidence 0.7 --json
        """
    )
    parser.add_argument("bars_file", help="CSV or JSON file of OHLCV bars")
    parser.add_argument("-s", "--symbol", default=None, help="Symbol for all bars (overrides file column)")
    parser.add_argument("--min-confidence", type=float, default=None, help="Minimum confidence. Default: from config")
    parser.add_argument("--min-frequency", type=int, default=None, help="Minimum frequency. Default: from config")
    parser.add_argument("--time-zone", default=None, help="IANA zone for calendar grouping. Default: from config")
    parser.add_argument("--enable", action="append", choices=FAMILIES, default=[], help="Enable a detector family")
    parser.add_argument("--disable", action="append", choices=FAMILIES, default=[], help="Disable a detector family")
    parser.add_argument("--json", action="store_true", help="Print the result as JSON")
    return parser.parse_args(argv)


def build_filter(args):
    overrides = {
        "minimum_confidence": args.min_confidence,
        "minimum_frequency": args.min_frequency,
        "time_zone": args.time_zone,
    }
    for family in args.enable:
        overrides[_FAMILY_FIELDS[family]] = True
    for family in args.disable:
        overrides[_FAMILY_FIELDS[family]] = False
    filters = config.pattern_filter(**overrides)
    resolve_zone(filters.time_zone)
    return filters


def render_table(result: AnalysisResult, time_zone: str, console: Console) -> None:
    tz = resolve_zone(time_zone)
    table = Table(title=f"{result.symbol}: {len(result.patterns)} of {result.total_patterns_detected} patterns")
    table.add_column("Type", style="cyan", no_wrap=True)
    table.add_column("Confidence", justify="right")
    table.add_column("Freq", justify="right")
    table.add_column("Avg %", justify="right")
    table.add_column("Next", style="magenta")
    table.add_column("Description")

    for pattern in result.ranked_patterns:
        next_at = pattern.predicted_next_occurrence
        table.add_row(
            pattern.pattern_type.value,
            f"{pattern.confidence:.2f}",
            str(pattern.frequency),
            f"{pattern.average_return_percentage:+.2f}",
            to_datetime(next_at, tz).strftime("%Y-%m-%d %H:%M") if next_at is not None else "-",
            pattern.description,
        )
    console.print(table)


def main(argv=None) -> int:
    args = parse_args(argv)
    logger = Logger(logger_name="PatternScout", logger_debug=config.LOGGER_DEBUG)
    console = Console()

    try:
        bars = load_bars(args.bars_file, args.symbol)
        filters = build_filter(args)
        analyzer = PatternAnalyzer(logger=logger, divergence_return=config.DIVERGENCE_AVERAGE_RETURN)
        result = analyzer.analyze(bars, filters)
    except PatternScoutError as e:
        logger.error(str(e))
        return 1

    if args.json:
        console.print_json(json.dumps(result.to_dict()))
    else:
        render_table(result, filters.time_zone, console)
    return 0


if __name__ == "__main__":
    sys.exit(main())
