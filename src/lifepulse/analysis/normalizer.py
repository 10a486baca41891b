"""Data point normalization for uploaded-file records.

Turns upstream records into typed PersonalDataPoint values. Exactly one point
is produced per valid record; dispatch happens on the declared MIME type:

- ``image/*``           -> PHOTO, scored from pre-extracted scene scores
- structured data       -> JSON_DATA, neutral emotion, importance 1.0
- ``text/*``            -> DOCUMENT, scored by the lexical polarity scorer

No I/O happens here: content and image features arrive pre-extracted.

Example:
    >>> from lifepulse.analysis.normalizer import DataPointNormalizer
    >>> normalizer = DataPointNormalizer()
    >>> result = normalizer.normalize_batch(records)
    >>> print(f"{len(result.points)} points, {result.skipped} skipped")
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from pydantic import ValidationError

from lifepulse.analysis.text import TextAnalyzer
from lifepulse.core.models import (
    DataType,
    DocumentMetadata,
    JsonMetadata,
    PersonalDataPoint,
    PhotoMetadata,
    UploadedFileRecord,
)
from lifepulse.errors import InvalidRecordError

logger = logging.getLogger(__name__)


# =============================================================================
# Constants
# =============================================================================


DEFAULT_MAX_FILE_SIZE_BYTES = 50 * 1024 * 1024

STRUCTURED_MIME_TYPES: frozenset[str] = frozenset(
    {"application/json", "text/json", "text/csv"}
)

HAPPY_SCENE = "happy moment"
SAD_SCENE = "sad moment"

IMPORTANCE_WEIGHTS: dict[str, float] = {
    "a photo of people": 2.0,
    "travel": 1.5,
    "social gathering": 1.5,
}
"""Scene label -> weight used for photo importance."""


RecordInput = UploadedFileRecord | Mapping[str, Any]


@dataclass
class NormalizationResult:
    """Outcome of normalizing a batch of records.

    Attributes:
        points: Data points in input order.
        skipped: Number of records rejected as invalid.
        errors: One message per skipped record.
    """

    points: list[PersonalDataPoint] = field(default_factory=list)
    skipped: int = 0
    errors: list[str] = field(default_factory=list)

    def extend(self, other: "NormalizationResult") -> None:
        self.points.extend(other.points)
        self.skipped += other.skipped
        self.errors.extend(other.errors)


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def coerce_record(record: RecordInput) -> UploadedFileRecord:
    """Validate a raw mapping into an UploadedFileRecord.

    Raises:
        InvalidRecordError: If the mapping does not describe a record.
    """
    if isinstance(record, UploadedFileRecord):
        return record
    if not isinstance(record, Mapping):
        raise InvalidRecordError(f"unsupported record type {type(record).__name__}")
    try:
        return UploadedFileRecord.model_validate(dict(record))
    except ValidationError as e:
        raise InvalidRecordError(
            f"{e.error_count()} validation error(s)", record_name=record.get("name")
        ) from e
    except (ValueError, TypeError, OverflowError, OSError) as e:
        raise InvalidRecordError(f"unparseable record: {e}", record_name=record.get("name")) from e


class DataPointNormalizer:
    """Dispatches uploaded records to per-type scoring rules.

    Attributes:
        max_file_size_bytes: Records larger than this are rejected.

    Example:
        >>> normalizer = DataPointNormalizer(max_file_size_bytes=10_000_000)
        >>> point = normalizer.normalize(record)
    """

    def __init__(
        self,
        text_analyzer: TextAnalyzer | None = None,
        max_file_size_bytes: int = DEFAULT_MAX_FILE_SIZE_BYTES,
    ) -> None:
        self._text = text_analyzer or TextAnalyzer()
        self.max_file_size_bytes = max_file_size_bytes
        self._logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    # =========================================================================
    # Single Record
    # =========================================================================

    def normalize(self, record: RecordInput) -> PersonalDataPoint:
        """Produce exactly one data point for a record.

        Args:
            record: Uploaded record or a mapping with the same fields.

        Returns:
            The normalized data point.

        Raises:
            InvalidRecordError: Unsupported type, oversized file, or content
                that cannot be interpreted.
        """
        rec = coerce_record(record)

        if rec.size > self.max_file_size_bytes:
            raise InvalidRecordError(
                f"size {rec.size} exceeds limit {self.max_file_size_bytes}", rec.name
            )

        mime = rec.mime_type.strip().lower()
        if mime.startswith("image/"):
            return self._normalize_photo(rec)
        if self._is_structured(mime):
            return self._normalize_structured(rec)
        if mime.startswith("text/"):
            return self._normalize_text(rec)

        raise InvalidRecordError(f"unsupported mime type '{rec.mime_type}'", rec.name)

    @staticmethod
    def _is_structured(mime: str) -> bool:
        return mime in STRUCTURED_MIME_TYPES or (
            mime.startswith("application/") and mime.endswith("+json")
        )

    def _normalize_photo(self, rec: UploadedFileRecord) -> PersonalDataPoint:
        features = rec.image_features
        scenes = features.scene_scores if features else {}

        emotional = scenes.get(HAPPY_SCENE, 0.0) - scenes.get(SAD_SCENE, 0.0)
        importance = sum(scenes.get(label, 0.0) * weight for label, weight in IMPORTANCE_WEIGHTS.items())

        metadata = PhotoMetadata(
            scene_scores=dict(scenes),
            dominant_colors=list(features.dominant_colors) if features else [],
            mood=features.mood if features else None,
            objects=list(features.objects) if features else [],
        )

        return PersonalDataPoint(
            timestamp=rec.last_modified_at,
            data_type=DataType.PHOTO,
            content=rec.name,
            metadata=metadata,
            emotional_score=_clamp(emotional, -1.0, 1.0),
            importance_score=max(0.0, importance),
            source_file_id=rec.file_id,
        )

    def _normalize_structured(self, rec: UploadedFileRecord) -> PersonalDataPoint:
        payload = rec.parsed_content
        if isinstance(payload, (bytes, bytearray)):
            try:
                payload = payload.decode("utf-8")
            except UnicodeDecodeError as e:
                raise InvalidRecordError("structured content is not UTF-8", rec.name) from e
        if isinstance(payload, str) and rec.mime_type.lower() != "text/csv":
            try:
                payload = json.loads(payload) if payload.strip() else None
            except json.JSONDecodeError as e:
                raise InvalidRecordError(f"malformed JSON ({e.msg})", rec.name) from e

        try:
            content = json.dumps(payload if payload is not None else {}, ensure_ascii=False, default=str)
        except (TypeError, ValueError) as e:
            raise InvalidRecordError("structured content is not serializable", rec.name) from e

        keys = sorted(str(k) for k in payload) if isinstance(payload, Mapping) else []

        return PersonalDataPoint(
            timestamp=rec.last_modified_at,
            data_type=DataType.JSON_DATA,
            content=content,
            metadata=JsonMetadata(top_level_keys=keys, payload=payload),
            emotional_score=0.0,
            importance_score=1.0,
            source_file_id=rec.file_id,
        )

    def _normalize_text(self, rec: UploadedFileRecord) -> PersonalDataPoint:
        raw = rec.parsed_content
        if raw is None:
            content = ""
        elif isinstance(raw, str):
            content = raw
        elif isinstance(raw, (bytes, bytearray)):
            try:
                content = raw.decode("utf-8")
            except UnicodeDecodeError as e:
                raise InvalidRecordError("text content is not UTF-8", rec.name) from e
        else:
            content = json.dumps(raw, ensure_ascii=False, default=str)

        emotion = self._text.analyze_emotion(content)

        return PersonalDataPoint(
            timestamp=rec.last_modified_at,
            data_type=DataType.DOCUMENT,
            content=content,
            metadata=DocumentMetadata(
                polarity=emotion.polarity,
                subjectivity=emotion.subjectivity,
                word_count=emotion.word_count,
                exclamation_count=emotion.exclamation_count,
                question_count=emotion.question_count,
                caps_ratio=emotion.caps_ratio,
            ),
            emotional_score=emotion.polarity,
            # Uncapped on purpose: long documents score above 1.0
            importance_score=emotion.word_count / 100,
            source_file_id=rec.file_id,
        )

    # =========================================================================
    # Batches
    # =========================================================================

    def try_normalize(self, record: RecordInput) -> NormalizationResult:
        """Normalize one record, converting InvalidRecordError into a skip."""
        result = NormalizationResult()
        try:
            result.points.append(self.normalize(record))
        except InvalidRecordError as e:
            self._logger.warning(f"Skipping record: {e}")
            result.skipped += 1
            result.errors.append(str(e))
        return result

    def normalize_batch(self, records: list[RecordInput]) -> NormalizationResult:
        """Normalize records sequentially, skipping invalid ones.

        Args:
            records: Records to normalize.

        Returns:
            NormalizationResult with points in input order.
        """
        result = NormalizationResult()
        for record in records:
            result.extend(self.try_normalize(record))

        if result.skipped:
            self._logger.info(f"Normalized {len(result.points)} records, skipped {result.skipped}")
        return result
