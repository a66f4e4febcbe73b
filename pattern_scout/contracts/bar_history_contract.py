"""Protocol definition for the bar-history provider collaborator"""

from typing import List, Protocol, TYPE_CHECKING

if TYPE_CHECKING:
    from pattern_scout.analyzer.models import PriceBar


class BarHistoryProviderProtocol(Protocol):
    """
    Protocol defining the interface for fetching price history.

    Implementations own source fallback ordering and local caching; the
    analyzer only sees the returned bars.
    """

    async def get_price_history(
        self,
        symbol: str,
        days: int,
        force_refresh: bool = False
    ) -> List["PriceBar"]:
        """
        Return up to ``days`` of bars for ``symbol``, oldest first.

        Raises on unrecoverable fetch failures.
        """
        ...
