"""Core data models for lifepulse.

This module consolidates the data structures shared by every pipeline stage.
Models follow a tiered flow:

1. UPSTREAM RECORDS (UploadedFileRecord, ImageFeatures)
2. NORMALIZED DATA POINTS (PersonalDataPoint + tagged metadata)
3. DERIVED ANALYTICS (BehaviorPatterns, EmotionalPsychology, Recommendations)
4. FINAL RESULT (AnalysisResult)

Example:
    >>> from lifepulse.core.models import UploadedFileRecord
    >>> record = UploadedFileRecord.model_validate({
    ...     "name": "notes.txt",
    ...     "size": 120,
    ...     "mimeType": "text/plain",
    ...     "lastModified": 1700000000000,
    ...     "parsedContent": "what a good day",
    ... })
    >>> record.mime_type
    'text/plain'
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Annotated, Any, Literal, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


# =============================================================================
# Enums
# =============================================================================


class DataType(str, Enum):
    """Kinds of personal activity a data point can represent."""

    MESSAGE = "message"
    SEARCH = "search"
    PHOTO = "photo"
    DOCUMENT = "document"
    VOICE = "voice"
    JSON_DATA = "json_data"


class SleepQuality(str, Enum):
    """Coarse grade for the estimated sleep window."""

    GOOD = "good"
    POOR = "poor"


class PerceivedPerformance(str, Enum):
    """Qualitative bucket derived from total run duration."""

    EXCELLENT = "excellent"
    GOOD = "good"
    FAIR = "fair"
    POOR = "poor"


def _ensure_aware(value: datetime) -> datetime:
    """Treat naive datetimes as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


# =============================================================================
# Upstream Records
# =============================================================================


class ImageFeatures(BaseModel):
    """Pre-extracted image signals supplied by the vision collaborator.

    Attributes:
        scene_scores: Scene label -> score, e.g. ``{"happy moment": 0.7}``.
        dominant_colors: Hex colors, most dominant first.
        mood: Overall color mood ("warm", "cool", ...), if known.
        objects: Detected object names.
    """

    scene_scores: dict[str, float] = Field(
        default_factory=dict,
        validation_alias=AliasChoices("scene_scores", "sceneScores"),
    )
    dominant_colors: list[str] = Field(
        default_factory=list,
        validation_alias=AliasChoices("dominant_colors", "dominantColors"),
    )
    mood: str | None = None
    objects: list[str] = Field(default_factory=list)


class UploadedFileRecord(BaseModel):
    """One uploaded file as handed over by the upstream parsing layer.

    Missing optional fields mean "no signal", never an error.

    Attributes:
        name: Original file name.
        size: Size in bytes.
        mime_type: Declared MIME type used for dispatch.
        last_modified_at: Last-modified instant of the file.
        parsed_content: Already-parsed content (text or JSON-like value).
        image_features: Pre-extracted image features, photos only.
        file_id: Upstream identifier, copied onto the data point.
    """

    name: str
    size: int = Field(ge=0)
    mime_type: str = Field(validation_alias=AliasChoices("mime_type", "mimeType", "type"))
    last_modified_at: datetime = Field(
        validation_alias=AliasChoices("last_modified_at", "lastModifiedAt", "lastModified")
    )
    parsed_content: Any = Field(
        default=None,
        validation_alias=AliasChoices("parsed_content", "parsedContent", "content"),
    )
    image_features: ImageFeatures | None = Field(
        default=None,
        validation_alias=AliasChoices("image_features", "imageFeatures"),
    )
    file_id: str | None = Field(default=None, validation_alias=AliasChoices("file_id", "fileId", "id"))

    @field_validator("last_modified_at", mode="before")
    @classmethod
    def parse_last_modified(cls, v: Any) -> Any:
        """Accept datetimes, ISO strings and epoch milliseconds."""
        if isinstance(v, bool):
            raise ValueError("last_modified_at must be a timestamp, not a boolean")
        if isinstance(v, (int, float)):
            try:
                return datetime.fromtimestamp(v / 1000.0, tz=timezone.utc)
            except (OverflowError, OSError, ValueError) as e:
                raise ValueError(f"epoch milliseconds out of range: {v}") from e
        if isinstance(v, str):
            return datetime.fromisoformat(v)
        return v

    @field_validator("last_modified_at")
    @classmethod
    def make_aware(cls, v: datetime) -> datetime:
        return _ensure_aware(v)

    @property
    def last_modified_ms(self) -> int:
        """Last-modified instant as integer epoch milliseconds."""
        return int(round(self.last_modified_at.timestamp() * 1000))


# =============================================================================
# Data Point Metadata (tagged by data type)
# =============================================================================


class PhotoMetadata(BaseModel):
    """Signals carried by a photo data point."""

    kind: Literal["photo"] = "photo"
    scene_scores: dict[str, float] = Field(default_factory=dict)
    dominant_colors: list[str] = Field(default_factory=list)
    mood: str | None = None
    objects: list[str] = Field(default_factory=list)


class DocumentMetadata(BaseModel):
    """Lexical statistics of a text document."""

    kind: Literal["document"] = "document"
    polarity: float = 0.0
    subjectivity: float = 0.0
    word_count: int = 0
    exclamation_count: int = 0
    question_count: int = 0
    caps_ratio: float = 0.0


class JsonMetadata(BaseModel):
    """Shape of a structured data dump."""

    kind: Literal["json_data"] = "json_data"
    top_level_keys: list[str] = Field(default_factory=list)
    payload: Any = None


DataPointMetadata = Annotated[
    Union[PhotoMetadata, DocumentMetadata, JsonMetadata],
    Field(discriminator="kind"),
]


class PersonalDataPoint(BaseModel):
    """One normalized, timestamped unit of personal activity.

    Immutable once created and owned by the analysis run that produced it.

    Attributes:
        timestamp: When the activity happened (timezone-aware).
        data_type: Kind of activity.
        content: Text content, or file name for binary media.
        metadata: Type-specific metadata.
        emotional_score: Polarity in [-1, 1].
        importance_score: Non-negative importance weight.
        source_file_id: Identifier of the originating upload, if any.
    """

    model_config = ConfigDict(frozen=True)

    timestamp: datetime
    data_type: DataType
    content: str = ""
    metadata: DataPointMetadata | None = None
    emotional_score: float = Field(default=0.0, ge=-1.0, le=1.0)
    importance_score: float = Field(default=0.0, ge=0.0)
    source_file_id: str | None = None

    @field_validator("timestamp")
    @classmethod
    def make_aware(cls, v: datetime) -> datetime:
        return _ensure_aware(v)


# =============================================================================
# Behavior Patterns
# =============================================================================


class SleepEstimate(BaseModel):
    """Estimated sleep window derived from low-activity hours."""

    start: int = 23
    end: int = 7
    duration_hours: int = 8
    quality: SleepQuality = SleepQuality.GOOD


class WeekendSplit(BaseModel):
    weekend: int = 0
    weekday: int = 0


class TimePatterns(BaseModel):
    """Hourly, daily and weekend activity histograms plus a sleep estimate."""

    hourly_activity: dict[int, int] = Field(default_factory=dict)
    daily_activity: dict[str, int] = Field(default_factory=dict)
    weekend_vs_weekday: WeekendSplit = Field(default_factory=WeekendSplit)
    sleep_estimate: SleepEstimate = Field(default_factory=SleepEstimate)
    most_active_hours: list[int] = Field(default_factory=list, max_length=3)
    data_type_by_hour: dict[int, dict[str, int]] = Field(default_factory=dict)


class KeywordScore(BaseModel):
    keyword: str
    score: float


class ContentPatterns(BaseModel):
    """Keyword frequencies and aggregate emotional statistics."""

    top_keywords: list[KeywordScore] = Field(default_factory=list, max_length=20)
    average_emotional_score: float = 0.0
    emotional_volatility: float = Field(default=0.0, ge=0.0)
    volume_by_type: dict[str, int] = Field(default_factory=dict)


class BehaviorPatterns(BaseModel):
    time_patterns: TimePatterns = Field(default_factory=TimePatterns)
    content_patterns: ContentPatterns = Field(default_factory=ContentPatterns)


# =============================================================================
# Emotional Psychology
# =============================================================================


class EmotionalCluster(BaseModel):
    """One tertile of the points ordered by emotional score."""

    size: int = 0
    avg_emotion: float = 0.0
    avg_importance: float = 0.0
    common_hours: list[int] = Field(default_factory=list)


class EmotionalPsychology(BaseModel):
    """Clusters, stress periods, stability and recovery time.

    Attributes:
        clusters: ``cluster_0`` (lowest emotion) .. ``cluster_2`` (highest).
        stress_periods: Timestamps of points below the stress threshold.
        emotional_stability: ``1 / (stddev + epsilon)``; higher is steadier.
        peak_emotional_hours: Hour -> summed emotional score.
        recovery_time_hours: Mean hours from a low point to the next recovery.
    """

    clusters: dict[str, EmotionalCluster] = Field(default_factory=dict)
    stress_periods: list[datetime] = Field(default_factory=list)
    emotional_stability: float = Field(default=1.0, gt=0.0)
    peak_emotional_hours: dict[int, float] = Field(default_factory=dict)
    recovery_time_hours: float = Field(default=24.0, ge=0.0)


# =============================================================================
# Recommendations
# =============================================================================


class ImmediateRecommendations(BaseModel):
    optimal_work_hours: list[str] = Field(default_factory=list)
    content_suggestions: list[str] = Field(default_factory=list)
    social_activities: list[str] = Field(default_factory=list)
    wellness_tips: list[str] = Field(default_factory=list)


class LongtermRecommendations(BaseModel):
    hobby_development: list[str] = Field(default_factory=list)
    career_direction: list[str] = Field(default_factory=list)
    relationship_improvement: list[str] = Field(default_factory=list)
    personal_growth: list[str] = Field(default_factory=list)


class Recommendations(BaseModel):
    immediate: ImmediateRecommendations = Field(default_factory=ImmediateRecommendations)
    longterm: LongtermRecommendations = Field(default_factory=LongtermRecommendations)


# =============================================================================
# Final Result
# =============================================================================


class TimeRange(BaseModel):
    start: datetime | None = None
    end: datetime | None = None


class DataSummary(BaseModel):
    """Counts describing what went into a run.

    Attributes:
        total_files: Records submitted.
        valid_points: Data points produced.
        skipped_records: Records rejected as invalid.
        data_types: Data type -> number of points.
        time_range: Earliest and latest point timestamps.
    """

    total_files: int = 0
    valid_points: int = 0
    skipped_records: int = 0
    data_types: dict[str, int] = Field(default_factory=dict)
    time_range: TimeRange = Field(default_factory=TimeRange)


class AnalysisResult(BaseModel):
    """Complete output of one pipeline run, stored verbatim in the cache."""

    data_summary: DataSummary = Field(default_factory=DataSummary)
    behavior_patterns: BehaviorPatterns = Field(default_factory=BehaviorPatterns)
    emotional_psychology: EmotionalPsychology = Field(default_factory=EmotionalPsychology)
    recommendations: Recommendations = Field(default_factory=Recommendations)
    processing_time_ms: float = 0.0
    analysis_timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    analysis_kind: str = "complete"
    cache_key: str | None = None


# =============================================================================
# Telemetry
# =============================================================================


class StepMetric(BaseModel):
    name: str
    duration_ms: float
    memory_delta_mb: float = 0.0


class PerformanceMetrics(BaseModel):
    """Finalized telemetry for one pipeline run."""

    model_config = ConfigDict(frozen=True)

    execution_time_ms: float = 0.0
    memory_delta_mb: float = 0.0
    files_processed: int = 0
    per_step: list[StepMetric] = Field(default_factory=list)
    perceived_performance: PerceivedPerformance = PerceivedPerformance.GOOD
    responsiveness_score: int = 0
