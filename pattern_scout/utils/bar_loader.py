"""Load price bars from CSV or JSON files.

CSV files need a header with timestamp, open, high, low, close, volume and
optionally symbol. JSON files hold a list of objects with the same keys.
Timestamps are epoch milliseconds or ISO-8601 strings (naive values are UTC).
"""

import csv
import json
import math
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from pattern_scout.analyzer.exceptions import BarDataError
from pattern_scout.analyzer.models import PriceBar
from pattern_scout.utils.data_utils import safe_float

REQUIRED_COLUMNS = ("timestamp", "open", "high", "low", "close", "volume")


def parse_timestamp(value: Any) -> int:
    """Epoch milliseconds from an int-like value or an ISO-8601 string."""
    if isinstance(value, (int, float)):
        return int(value)

    text = str(value).strip()
    if text.lstrip("-").isdigit():
        return int(text)

    try:
        moment = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError as e:
        raise BarDataError(f"Unrecognized timestamp: {value!r}") from e
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return int(moment.timestamp() * 1000)


def _row_to_bar(row: Dict[str, Any], line: int, symbol: Optional[str]) -> PriceBar:
    if not isinstance(row, dict):
        raise BarDataError(f"Row {line}: expected an object, got {type(row).__name__}")
    missing = [col for col in REQUIRED_COLUMNS if row.get(col) in (None, "")]
    if missing:
        raise BarDataError(f"Row {line}: missing {', '.join(missing)}")

    prices = {key: safe_float(row[key]) for key in ("open", "high", "low", "close", "volume")}
    invalid = [key for key, value in prices.items() if value is None or not math.isfinite(value)]
    if invalid:
        raise BarDataError(f"Row {line}: not a finite number: {', '.join(invalid)}")
    if any(prices[key] <= 0 for key in ("open", "high", "low", "close")):
        raise BarDataError(f"Row {line}: prices must be positive")
    if prices["volume"] < 0:
        raise BarDataError(f"Row {line}: volume must be non-negative")

    bar_symbol = symbol or row.get("symbol")
    if not bar_symbol:
        raise BarDataError(f"Row {line}: no symbol in data and none given")

    return PriceBar(
        symbol=str(bar_symbol),
        timestamp=parse_timestamp(row["timestamp"]),
        open=prices["open"],
        high=prices["high"],
        low=prices["low"],
        close=prices["close"],
        volume=prices["volume"],
    )


def bars_from_records(records: Iterable[Dict[str, Any]], symbol: Optional[str] = None) -> List[PriceBar]:
    return [_row_to_bar(record, line, symbol) for line, record in enumerate(records, start=1)]


def load_bars(path: Path, symbol: Optional[str] = None) -> List[PriceBar]:
    """Read bars from ``path``; ``symbol`` overrides any symbol column."""
    path = Path(path)
    if not path.exists():
        raise BarDataError(f"Bar file not found: {path}")

    if path.suffix.lower() == ".json":
        try:
            records = json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            raise BarDataError(f"Invalid JSON in {path}: {e}") from e
        if not isinstance(records, list):
            raise BarDataError(f"{path} must contain a JSON list of bars")
        return bars_from_records(records, symbol)

    with path.open(newline="", encoding="utf-8") as handle:
        reader = csv.DictReader(handle)
        fields = {name.strip().lower() for name in (reader.fieldnames or [])}
        missing = [col for col in REQUIRED_COLUMNS if col not in fields]
        if missing:
            raise BarDataError(f"{path} is missing column(s): {', '.join(missing)}")
        rows = ({k.strip().lower(): v for k, v in row.items() if k} for row in reader)
        return bars_from_records(rows, symbol)
