from pattern_scout.contracts.bar_history_contract import BarHistoryProviderProtocol
from pattern_scout.contracts.pattern_store_contract import PatternStoreProtocol

__all__ = [
    'BarHistoryProviderProtocol',
    'PatternStoreProtocol',
]
