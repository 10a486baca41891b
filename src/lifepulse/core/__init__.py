"""Core data models for lifepulse.

Example:
    >>> from lifepulse.core import PersonalDataPoint, DataType
    >>> from datetime import datetime, timezone
    >>> point = PersonalDataPoint(
    ...     timestamp=datetime(2024, 5, 1, 9, tzinfo=timezone.utc),
    ...     data_type=DataType.DOCUMENT,
    ...     emotional_score=0.2,
    ... )
"""

from lifepulse.core.models import (
    AnalysisResult,
    BehaviorPatterns,
    ContentPatterns,
    DataPointMetadata,
    DataSummary,
    DataType,
    DocumentMetadata,
    EmotionalCluster,
    EmotionalPsychology,
    ImageFeatures,
    ImmediateRecommendations,
    JsonMetadata,
    KeywordScore,
    LongtermRecommendations,
    PerceivedPerformance,
    PerformanceMetrics,
    PersonalDataPoint,
    PhotoMetadata,
    Recommendations,
    SleepEstimate,
    SleepQuality,
    StepMetric,
    TimePatterns,
    TimeRange,
    UploadedFileRecord,
    WeekendSplit,
)

__all__ = [
    "AnalysisResult",
    "BehaviorPatterns",
    "ContentPatterns",
    "DataPointMetadata",
    "DataSummary",
    "DataType",
    "DocumentMetadata",
    "EmotionalCluster",
    "EmotionalPsychology",
    "ImageFeatures",
    "ImmediateRecommendations",
    "JsonMetadata",
    "KeywordScore",
    "LongtermRecommendations",
    "PerceivedPerformance",
    "PerformanceMetrics",
    "PersonalDataPoint",
    "PhotoMetadata",
    "Recommendations",
    "SleepEstimate",
    "SleepQuality",
    "StepMetric",
    "TimePatterns",
    "TimeRange",
    "UploadedFileRecord",
    "WeekendSplit",
]
