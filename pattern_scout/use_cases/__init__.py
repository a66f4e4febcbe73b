from pattern_scout.use_cases.detect_patterns import DetectPatternsUseCase, DetectionOutcome

__all__ = [
    'DetectPatternsUseCase',
    'DetectionOutcome',
]
