"""Central Pytest Fixtures for lifepulse.

Fixtures included:
- Points: make_point factory, hourly_points (one point per hour)
- Records: text_record, photo_record, json_record, sample_records
- Config: utc_config (UTC bucketing, small cache)
- Logging: package logger reset between tests
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Iterator

import pytest

from lifepulse.config import AppConfig, reset_config
from lifepulse.core.models import DataType, PersonalDataPoint

# 2024-01-01 was a Monday
BASE_TIME = datetime(2024, 1, 1, 0, 0, tzinfo=timezone.utc)
BASE_MS = int(BASE_TIME.timestamp() * 1000)


# =============================================================================
# Helper Functions
# =============================================================================


def make_point(
    hour: int = 0,
    emotional_score: float = 0.0,
    importance_score: float = 0.0,
    data_type: DataType = DataType.DOCUMENT,
    content: str = "",
    day: int = 0,
) -> PersonalDataPoint:
    """Build a data point at BASE_TIME + day days + hour hours (UTC)."""
    return PersonalDataPoint(
        timestamp=BASE_TIME + timedelta(days=day, hours=hour),
        data_type=data_type,
        content=content,
        emotional_score=emotional_score,
        importance_score=importance_score,
    )


def make_record(
    name: str,
    mime_type: str = "text/plain",
    content: Any = "",
    size: int = 100,
    hours: float = 0,
    **extra: Any,
) -> dict[str, Any]:
    """Build an upload record dict as the upstream layer sends it."""
    record = {
        "name": name,
        "size": size,
        "mimeType": mime_type,
        "lastModified": BASE_MS + int(hours * 3600 * 1000),
        "parsedContent": content,
    }
    record.update(extra)
    return record


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def reset_lifepulse_logging() -> Iterator[None]:
    """Undo setup_logging side effects so caplog keeps working."""
    yield
    package_logger = logging.getLogger("lifepulse")
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
    package_logger.propagate = True
    package_logger.setLevel(logging.NOTSET)
    reset_config()


@pytest.fixture
def point_factory() -> Callable[..., PersonalDataPoint]:
    return make_point


@pytest.fixture
def hourly_points() -> list[PersonalDataPoint]:
    """24 points, one per hour, neutral except hour 3 (-1) and hour 15 (+1)."""
    scores = {3: -1.0, 15: 1.0}
    return [make_point(hour=h, emotional_score=scores.get(h, 0.0)) for h in range(24)]


@pytest.fixture
def text_record() -> dict[str, Any]:
    return make_record("diary.txt", content="What a happy and good day with friends", hours=9)


@pytest.fixture
def photo_record() -> dict[str, Any]:
    return make_record(
        "beach.jpg",
        mime_type="image/jpeg",
        content=None,
        size=2_000_000,
        hours=14,
        imageFeatures={
            "sceneScores": {
                "happy moment": 0.7,
                "sad moment": 0.1,
                "a photo of people": 0.5,
                "travel": 0.4,
            },
            "dominantColors": ["#ffcc00", "#0066ff"],
            "mood": "warm",
        },
    )


@pytest.fixture
def json_record() -> dict[str, Any]:
    return make_record(
        "export.json",
        mime_type="application/json",
        content='{"messages": [], "owner": "me"}',
        hours=21,
    )


@pytest.fixture
def sample_records(text_record, photo_record, json_record) -> list[dict[str, Any]]:
    """A mixed batch plus one unsupported record."""
    return [
        text_record,
        photo_record,
        json_record,
        make_record("notes.txt", content="Stressful meeting, tired and upset", hours=23),
        make_record("clip.mp4", mime_type="video/mp4", content=None, hours=12),
    ]


@pytest.fixture
def utc_config() -> AppConfig:
    """Configuration bucketing hours in UTC with a small cache."""
    return AppConfig(
        pipeline={"timezone": "UTC", "max_concurrent_files": 2},
        cache={"capacity": 10, "ttl_seconds": 3600},
    )
