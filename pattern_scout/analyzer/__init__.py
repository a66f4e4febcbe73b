from pattern_scout.analyzer.models import AnalysisResult, Pattern, PatternFilter, PatternType, PriceBar
from pattern_scout.analyzer.pattern_analyzer import PatternAnalyzer

__all__ = [
    'AnalysisResult',
    'Pattern',
    'PatternAnalyzer',
    'PatternFilter',
    'PatternType',
    'PriceBar',
]
