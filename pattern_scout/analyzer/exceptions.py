"""Exceptions raised by the pattern detection engine and its surroundings."""


class PatternScoutError(Exception):
    """Base class for all pattern-scout errors."""


class AnalysisCancelledError(PatternScoutError):
    """Raised when a caller cancels an analysis between detector stages."""


class MixedSymbolError(PatternScoutError, ValueError):
    """Raised when one analysis call receives bars for more than one symbol."""

    def __init__(self, symbols):
        self.symbols = tuple(sorted(symbols))
        super().__init__(f"Bars span multiple symbols: {', '.join(self.symbols)}")


class BarDataError(PatternScoutError, ValueError):
    """Raised when bar input cannot be parsed into valid price bars."""


class TimeZoneError(PatternScoutError, ValueError):
    """Raised when a reference time zone name is not a known IANA zone."""
