"""Emotional and psychological scoring.

Groups points into emotional tertiles, flags stress periods, and measures how
stable the emotional signal is and how quickly it recovers after a low.

Key formulas:
    stress threshold   = mean - stddev  (strictly below is stress)
    stability          = 1 / (stddev + EPSILON)
    recovery threshold = mean * 0.25
"""

from __future__ import annotations

import logging
import math
from collections import defaultdict
from datetime import datetime, tzinfo
from itertools import groupby
from statistics import mean, pstdev

from lifepulse.core.models import EmotionalCluster, EmotionalPsychology, PersonalDataPoint

logger = logging.getLogger(__name__)


# =============================================================================
# Constants
# =============================================================================


EPSILON = 0.001
CLUSTER_COUNT = 3
RECOVERY_FACTOR = 0.25
DEFAULT_RECOVERY_HOURS = 24.0
DEFAULT_STABILITY = 1.0


class EmotionalPsychologyAnalyzer:
    """Derives clusters, stress periods, stability and recovery time.

    Args:
        tz: Timezone used for hour bucketing. ``None`` uses the system local
            timezone.

    Example:
        >>> analyzer = EmotionalPsychologyAnalyzer(tz=timezone.utc)
        >>> result = analyzer.analyze(points)
        >>> result.clusters["cluster_0"].avg_emotion
        -0.6
    """

    def __init__(self, tz: tzinfo | None = None) -> None:
        self.tz = tz
        self._logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    def analyze(self, points: list[PersonalDataPoint]) -> EmotionalPsychology:
        """Run every emotional metric over a point set.

        Args:
            points: Normalized data points (any order).

        Returns:
            EmotionalPsychology. Empty input yields stability 1.0, recovery
            24.0 hours, no clusters and no stress periods.
        """
        if not points:
            return EmotionalPsychology(
                emotional_stability=DEFAULT_STABILITY,
                recovery_time_hours=DEFAULT_RECOVERY_HOURS,
            )

        scores = [p.emotional_score for p in points]
        avg = mean(scores)
        std = pstdev(scores)

        result = EmotionalPsychology(
            clusters=self.cluster(points),
            stress_periods=self.find_stress_periods(points, avg, std),
            emotional_stability=1.0 / (std + EPSILON),
            peak_emotional_hours=self.peak_hours(points),
            recovery_time_hours=self.recovery_time(points, avg),
        )
        self._logger.debug(
            f"Stability {result.emotional_stability:.3f}, "
            f"{len(result.stress_periods)} stress periods"
        )
        return result

    # =========================================================================
    # Individual Metrics
    # =========================================================================

    def cluster(self, points: list[PersonalDataPoint]) -> dict[str, EmotionalCluster]:
        """Split points sorted by emotional score into three contiguous tertiles.

        Each tertile holds ``ceil(n / 3)`` points, so the last ones may be
        short or empty. Sizes always sum to ``n``.
        """
        if not points:
            return {}

        ordered = sorted(points, key=lambda p: p.emotional_score)
        chunk = math.ceil(len(ordered) / CLUSTER_COUNT)

        clusters: dict[str, EmotionalCluster] = {}
        for index in range(CLUSTER_COUNT):
            members = ordered[index * chunk : (index + 1) * chunk]
            if not members:
                clusters[f"cluster_{index}"] = EmotionalCluster()
                continue
            clusters[f"cluster_{index}"] = EmotionalCluster(
                size=len(members),
                avg_emotion=mean(p.emotional_score for p in members),
                avg_importance=mean(p.importance_score for p in members),
                common_hours=sorted({p.timestamp.astimezone(self.tz).hour for p in members}),
            )
        return clusters

    @staticmethod
    def find_stress_periods(points: list[PersonalDataPoint], avg: float, std: float) -> list[datetime]:
        """Timestamps of points scoring strictly below ``mean - stddev``."""
        threshold = avg - std
        return sorted(p.timestamp for p in points if p.emotional_score < threshold)

    def peak_hours(self, points: list[PersonalDataPoint]) -> dict[int, float]:
        """Sum of emotional scores per local hour."""
        totals: dict[int, float] = defaultdict(float)
        for point in points:
            totals[point.timestamp.astimezone(self.tz).hour] += point.emotional_score
        return dict(sorted(totals.items()))

    @staticmethod
    def recovery_time(points: list[PersonalDataPoint], avg: float) -> float:
        """Mean hours from a low point to the next point above the low line.

        A point is low when its score is at or below ``mean * 0.25``. For each
        low point the first chronologically later point (strictly later
        timestamp) scoring above the line ends the episode. Low points with
        no later recovery contribute nothing.

        Walks the timeline once from the end, remembering the earliest
        recovery seen so far. Points sharing a timestamp are handled as a
        group so a recovery never counts for a low point at the same instant.

        Returns:
            Mean recovery in hours, or 24.0 when no episode recovered.
        """
        low = avg * RECOVERY_FACTOR
        timeline = sorted(points, key=lambda p: p.timestamp)

        deltas: list[float] = []
        next_recovery = None
        for timestamp, group in groupby(reversed(timeline), key=lambda p: p.timestamp):
            members = list(group)
            if next_recovery is not None:
                gap_hours = (next_recovery - timestamp).total_seconds() / 3600
                deltas.extend(gap_hours for p in members if p.emotional_score <= low)
            if any(p.emotional_score > low for p in members):
                next_recovery = timestamp

        if not deltas:
            return DEFAULT_RECOVERY_HOURS
        return mean(deltas)
