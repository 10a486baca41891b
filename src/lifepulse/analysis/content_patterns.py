"""Keyword and emotional-score statistics over normalized content."""

from __future__ import annotations

import logging
from collections import Counter
from statistics import mean, pstdev

from lifepulse.analysis.text import MAX_KEYWORDS, TextAnalyzer
from lifepulse.core.models import ContentPatterns, DataType, PersonalDataPoint

logger = logging.getLogger(__name__)


TEXT_DATA_TYPES = frozenset({DataType.DOCUMENT, DataType.MESSAGE})
"""Data types whose content is treated as free text for keyword extraction."""


class ContentPatternAnalyzer:
    """Extracts top keywords and aggregate emotion statistics.

    Example:
        >>> analyzer = ContentPatternAnalyzer()
        >>> patterns = analyzer.analyze(points)
        >>> [k.keyword for k in patterns.top_keywords[:3]]
        ['meeting', 'coffee', 'project']
    """

    def __init__(self, text_analyzer: TextAnalyzer | None = None, keyword_limit: int = MAX_KEYWORDS) -> None:
        self._text = text_analyzer or TextAnalyzer()
        self.keyword_limit = keyword_limit
        self._logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    def analyze(self, points: list[PersonalDataPoint]) -> ContentPatterns:
        """Compute keyword frequencies and emotional aggregates.

        Args:
            points: Normalized data points.

        Returns:
            ContentPatterns. Empty input yields zeros and no keywords.
        """
        if not points:
            return ContentPatterns()

        texts = [p.content for p in points if p.data_type in TEXT_DATA_TYPES and p.content]
        keywords = self._text.extract_keywords(texts, limit=self.keyword_limit)

        scores = [p.emotional_score for p in points]
        volatility = pstdev(scores) if len(scores) > 1 else 0.0

        volume = Counter(p.data_type.value for p in points)

        self._logger.debug(f"Extracted {len(keywords)} keywords from {len(texts)} texts")

        return ContentPatterns(
            top_keywords=keywords,
            average_emotional_score=mean(scores),
            emotional_volatility=volatility,
            volume_by_type=dict(volume),
        )
