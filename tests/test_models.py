"""Tests for the core data models: validation, aliases and defaults."""

from datetime import datetime

import pytest
from pydantic import ValidationError

from lifepulse.core.models import (
    AnalysisResult,
    DataType,
    DocumentMetadata,
    EmotionalPsychology,
    PersonalDataPoint,
    PhotoMetadata,
    SleepEstimate,
    SleepQuality,
    TimePatterns,
    UploadedFileRecord,
)

from conftest import BASE_MS, BASE_TIME


# =============================================================================
# UploadedFileRecord
# =============================================================================


class TestUploadedFileRecord:
    """Tests for upstream record validation."""

    def test_camel_case_aliases(self) -> None:
        record = UploadedFileRecord.model_validate(
            {
                "name": "notes.txt",
                "size": 12,
                "mimeType": "text/plain",
                "lastModified": BASE_MS,
                "parsedContent": "hello",
                "id": "f-1",
            }
        )

        assert record.mime_type == "text/plain"
        assert record.last_modified_at == BASE_TIME
        assert record.parsed_content == "hello"
        assert record.file_id == "f-1"

    def test_iso_string_timestamp(self) -> None:
        record = UploadedFileRecord(
            name="a.txt", size=1, mime_type="text/plain", last_modified_at="2024-01-01T00:00:00Z"
        )
        assert record.last_modified_at == BASE_TIME

    def test_naive_datetime_is_utc(self) -> None:
        record = UploadedFileRecord(
            name="a.txt", size=1, mime_type="text/plain", last_modified_at=datetime(2024, 1, 1)
        )
        assert record.last_modified_at.tzinfo is not None
        assert record.last_modified_ms == BASE_MS

    def test_negative_size_rejected(self) -> None:
        with pytest.raises(ValidationError):
            UploadedFileRecord(name="a", size=-1, mime_type="text/plain", last_modified_at=BASE_TIME)

    def test_boolean_timestamp_rejected(self) -> None:
        with pytest.raises(ValidationError):
            UploadedFileRecord(name="a", size=1, mime_type="text/plain", last_modified_at=True)

    @pytest.mark.parametrize("millis", [10**30, -(10**30)])
    def test_out_of_range_epoch_rejected(self, millis: int) -> None:
        with pytest.raises(ValidationError):
            UploadedFileRecord(name="a", size=1, mime_type="text/plain", last_modified_at=millis)

    def test_image_features_aliases(self) -> None:
        record = UploadedFileRecord.model_validate(
            {
                "name": "p.jpg",
                "size": 1,
                "type": "image/jpeg",
                "lastModifiedAt": BASE_MS,
                "imageFeatures": {"sceneScores": {"travel": 0.3}, "dominantColors": ["#fff"]},
            }
        )
        assert record.image_features is not None
        assert record.image_features.scene_scores == {"travel": 0.3}
        assert record.image_features.dominant_colors == ["#fff"]


# =============================================================================
# PersonalDataPoint
# =============================================================================


class TestPersonalDataPoint:
    """Tests for score bounds and immutability."""

    @pytest.mark.parametrize("score", [-1.5, 1.01])
    def test_emotional_score_bounds(self, score: float) -> None:
        with pytest.raises(ValidationError):
            PersonalDataPoint(timestamp=BASE_TIME, data_type=DataType.DOCUMENT, emotional_score=score)

    def test_importance_must_be_non_negative(self) -> None:
        with pytest.raises(ValidationError):
            PersonalDataPoint(timestamp=BASE_TIME, data_type=DataType.PHOTO, importance_score=-0.1)

    def test_importance_may_exceed_one(self) -> None:
        point = PersonalDataPoint(timestamp=BASE_TIME, data_type=DataType.DOCUMENT, importance_score=4.2)
        assert point.importance_score == 4.2

    def test_frozen(self) -> None:
        point = PersonalDataPoint(timestamp=BASE_TIME, data_type=DataType.DOCUMENT)
        with pytest.raises(ValidationError):
            point.emotional_score = 0.5  # type: ignore[misc]

    def test_metadata_discriminated_by_kind(self) -> None:
        point = PersonalDataPoint.model_validate(
            {
                "timestamp": BASE_TIME,
                "data_type": "photo",
                "metadata": {"kind": "photo", "scene_scores": {"travel": 0.2}},
            }
        )
        assert isinstance(point.metadata, PhotoMetadata)

        doc = PersonalDataPoint.model_validate(
            {"timestamp": BASE_TIME, "data_type": "document", "metadata": {"kind": "document", "word_count": 3}}
        )
        assert isinstance(doc.metadata, DocumentMetadata)
        assert doc.metadata.word_count == 3


# =============================================================================
# Defaults
# =============================================================================


class TestDefaults:
    """Tests for documented default values."""

    def test_sleep_default(self) -> None:
        sleep = SleepEstimate()
        assert (sleep.start, sleep.end, sleep.duration_hours) == (23, 7, 8)
        assert sleep.quality == SleepQuality.GOOD

    def test_most_active_hours_capped(self) -> None:
        with pytest.raises(ValidationError):
            TimePatterns(most_active_hours=[1, 2, 3, 4])

    def test_stability_must_be_positive(self) -> None:
        with pytest.raises(ValidationError):
            EmotionalPsychology(emotional_stability=0.0)

    def test_analysis_result_roundtrips_json(self) -> None:
        result = AnalysisResult(processing_time_ms=12.5, cache_key="complete_abc")
        restored = AnalysisResult.model_validate_json(result.model_dump_json())
        assert restored == result
