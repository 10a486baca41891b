"""Analysis stages: normalization, time, content, emotional and recommendations."""

from lifepulse.analysis.content_patterns import ContentPatternAnalyzer
from lifepulse.analysis.emotional import EmotionalPsychologyAnalyzer
from lifepulse.analysis.normalizer import DataPointNormalizer, NormalizationResult
from lifepulse.analysis.recommendations import RecommendationEngine
from lifepulse.analysis.text import TextAnalyzer, TextEmotion
from lifepulse.analysis.time_patterns import TimePatternAnalyzer

__all__ = [
    "ContentPatternAnalyzer",
    "DataPointNormalizer",
    "EmotionalPsychologyAnalyzer",
    "NormalizationResult",
    "RecommendationEngine",
    "TextAnalyzer",
    "TextEmotion",
    "TimePatternAnalyzer",
]
