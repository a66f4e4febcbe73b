"""Protocol definition for the pattern store collaborator"""

from typing import List, Protocol, Sequence, TYPE_CHECKING

if TYPE_CHECKING:
    from pattern_scout.analyzer.models import Pattern


class PatternStoreProtocol(Protocol):
    """
    Protocol defining the interface for persisting detected patterns.
    """

    async def save_patterns(self, patterns: Sequence["Pattern"]) -> None:
        """Persist patterns as emitted by the analyzer."""
        ...

    async def get_patterns(self, symbol: str, min_confidence: float) -> List["Pattern"]:
        """Return stored patterns for ``symbol`` at or above ``min_confidence``."""
        ...
