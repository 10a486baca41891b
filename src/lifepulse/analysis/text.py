"""Lexical text helpers: polarity scoring and keyword extraction.

This is a deliberately small keyword-count scorer, not an NLP model. Word
lists cover English and Korean stems; a word counts as positive (negative)
when it contains any positive (negative) stem.

Example:
    >>> from lifepulse.analysis.text import TextAnalyzer
    >>> analyzer = TextAnalyzer()
    >>> analyzer.analyze_emotion("a happy and good day").polarity
    0.4
"""

from __future__ import annotations

import re
from collections import Counter
from dataclasses import dataclass

from lifepulse.core.models import KeywordScore


# =============================================================================
# Word Lists
# =============================================================================


STOP_WORDS: frozenset[str] = frozenset(
    {
        # English
        "the", "a", "an", "and", "or", "but", "in", "on", "at", "to", "for",
        "of", "with", "by", "is", "are", "was", "were", "be", "it", "this",
        "that", "as", "from", "i", "you", "he", "she", "we", "they", "my",
        "your", "me", "so", "do", "not", "no", "if", "then", "just",
        # Korean particles and demonstratives
        "이", "그", "저", "의", "가", "을", "를", "에", "에서", "로", "으로",
        "와", "과", "도", "는", "은",
    }
)

POSITIVE_STEMS: tuple[str, ...] = (
    "good", "happy", "great", "love", "joy", "fun", "excellent", "wonderful",
    "perfect", "smile", "awesome", "glad",
    "좋", "행복", "즐거", "기쁨", "사랑", "웃음", "멋", "훌륭", "완벽",
)

NEGATIVE_STEMS: tuple[str, ...] = (
    "bad", "sad", "angry", "upset", "disappoint", "depress", "terrible",
    "awful", "stress", "tired", "problem", "difficult",
    "나쁜", "슬픔", "화", "짜증", "실망", "우울", "힘들", "어려운", "문제",
)

MIN_KEYWORD_LENGTH = 2
MAX_KEYWORDS = 20

_EDGE_PUNCTUATION = re.compile(r"^[\W_]+|[\W_]+$")
_UPPER_OR_HANGUL = re.compile(r"[A-Z가-힣]")


@dataclass(frozen=True)
class TextEmotion:
    """Result of lexical polarity scoring.

    Attributes:
        polarity: (positive - negative) / word_count, clamped to [-1, 1].
        subjectivity: (positive + negative) / word_count, clamped to [0, 1].
        word_count: Whitespace-separated tokens.
        exclamation_count: Number of '!' characters.
        question_count: Number of '?' characters.
        caps_ratio: Share of characters that are upper-case Latin or Hangul.
    """

    polarity: float
    subjectivity: float
    word_count: int
    exclamation_count: int
    question_count: int
    caps_ratio: float


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


class TextAnalyzer:
    """Keyword-count emotion scorer and term-frequency keyword extractor."""

    def __init__(
        self,
        stop_words: frozenset[str] = STOP_WORDS,
        positive_stems: tuple[str, ...] = POSITIVE_STEMS,
        negative_stems: tuple[str, ...] = NEGATIVE_STEMS,
    ) -> None:
        self._stop_words = stop_words
        self._positive = positive_stems
        self._negative = negative_stems

    def analyze_emotion(self, text: str) -> TextEmotion:
        """Score the polarity of a text by counting positive/negative words.

        Args:
            text: Raw text.

        Returns:
            TextEmotion with polarity clamped to [-1, 1]. Empty text scores 0.
        """
        words = text.lower().split()
        positive = sum(1 for w in words if any(stem in w for stem in self._positive))
        negative = sum(1 for w in words if any(stem in w for stem in self._negative))
        total = len(words)

        polarity = (positive - negative) / total if total else 0.0
        subjectivity = (positive + negative) / total if total else 0.0

        return TextEmotion(
            polarity=_clamp(polarity, -1.0, 1.0),
            subjectivity=_clamp(subjectivity, 0.0, 1.0),
            word_count=total,
            exclamation_count=text.count("!"),
            question_count=text.count("?"),
            caps_ratio=len(_UPPER_OR_HANGUL.findall(text)) / len(text) if text else 0.0,
        )

    def tokenize(self, text: str) -> list[str]:
        """Lowercase, split on whitespace, strip edge punctuation, drop stop-words."""
        tokens = []
        for raw in text.lower().split():
            word = _EDGE_PUNCTUATION.sub("", raw)
            if len(word) < MIN_KEYWORD_LENGTH or word in self._stop_words:
                continue
            tokens.append(word)
        return tokens

    def extract_keywords(self, texts: list[str], limit: int = MAX_KEYWORDS) -> list[KeywordScore]:
        """Return the most frequent keywords across texts.

        Scores are ``count / total_words`` where total_words counts every
        whitespace token of the corpus, stop-words included. Ties keep
        first-seen order.

        Args:
            texts: Corpus of documents.
            limit: Maximum number of keywords.

        Returns:
            Keywords ordered by descending score.
        """
        total_words = sum(len(text.split()) for text in texts)
        if total_words == 0:
            return []

        frequencies: Counter[str] = Counter()
        for text in texts:
            frequencies.update(self.tokenize(text))

        # Counter.most_common is stable for equal counts (insertion order)
        return [
            KeywordScore(keyword=word, score=count / total_words)
            for word, count in frequencies.most_common(limit)
        ]
