"""Tests for ContentPatternAnalyzer."""

import pytest

from lifepulse.analysis.content_patterns import ContentPatternAnalyzer
from lifepulse.core.models import DataType

from conftest import make_point


@pytest.fixture
def analyzer() -> ContentPatternAnalyzer:
    return ContentPatternAnalyzer()


class TestContentPatterns:
    """Tests for keyword and emotion aggregates."""

    def test_empty_input(self, analyzer: ContentPatternAnalyzer) -> None:
        patterns = analyzer.analyze([])

        assert patterns.top_keywords == []
        assert patterns.average_emotional_score == 0.0
        assert patterns.emotional_volatility == 0.0
        assert patterns.volume_by_type == {}

    def test_mean_and_population_stddev(self, analyzer: ContentPatternAnalyzer) -> None:
        points = [make_point(emotional_score=s) for s in (-0.5, 0.5, 0.5, -0.5)]
        patterns = analyzer.analyze(points)

        assert patterns.average_emotional_score == pytest.approx(0.0)
        assert patterns.emotional_volatility == pytest.approx(0.5)

    def test_single_point_has_no_volatility(self, analyzer: ContentPatternAnalyzer) -> None:
        patterns = analyzer.analyze([make_point(emotional_score=0.7)])

        assert patterns.average_emotional_score == pytest.approx(0.7)
        assert patterns.emotional_volatility == 0.0

    def test_keywords_only_from_text_points(self, analyzer: ContentPatternAnalyzer) -> None:
        points = [
            make_point(data_type=DataType.DOCUMENT, content="coffee with team"),
            make_point(data_type=DataType.MESSAGE, content="coffee later"),
            make_point(data_type=DataType.PHOTO, content="beach.jpg"),
            make_point(data_type=DataType.JSON_DATA, content='{"beach": 1}'),
        ]
        keywords = analyzer.analyze(points).top_keywords

        assert [k.keyword for k in keywords] == ["coffee", "team", "later"]
        assert keywords[0].score == pytest.approx(2 / 5)

    def test_volume_by_type(self, analyzer: ContentPatternAnalyzer) -> None:
        points = [
            make_point(data_type=DataType.PHOTO),
            make_point(data_type=DataType.PHOTO),
            make_point(data_type=DataType.DOCUMENT),
        ]
        assert analyzer.analyze(points).volume_by_type == {"photo": 2, "document": 1}

    def test_keyword_limit(self) -> None:
        analyzer = ContentPatternAnalyzer(keyword_limit=2)
        points = [make_point(content="alpha beta gamma delta")]
        assert len(analyzer.analyze(points).top_keywords) == 2
