"""Rule-based personalization engine.

Recommendations are a pure function of the behavior and emotional analyses.
Rules fire in a fixed order so identical inputs always produce identical
output lists.
"""

from __future__ import annotations

import logging

from lifepulse.core.models import (
    BehaviorPatterns,
    EmotionalPsychology,
    ImmediateRecommendations,
    LongtermRecommendations,
    Recommendations,
    SleepQuality,
)

logger = logging.getLogger(__name__)


CONTENT_SUGGESTION_LIMIT = 5
LOW_STABILITY = 0.5
MAX_STRESS_PERIODS = 5


class RecommendationEngine:
    """Turns analysis results into immediate and long-term suggestions.

    Example:
        >>> engine = RecommendationEngine()
        >>> recs = engine.recommend(behavior, emotional)
        >>> recs.immediate.optimal_work_hours[0]
        'Your most active hours are 9, 14, 21 o'clock.'
    """

    def recommend(self, behavior: BehaviorPatterns, emotional: EmotionalPsychology) -> Recommendations:
        """Apply every rule to the analysis outputs.

        Args:
            behavior: Time and content patterns.
            emotional: Emotional psychology metrics.

        Returns:
            Recommendations with both immediate and long-term sections.
        """
        return Recommendations(
            immediate=self.immediate(behavior),
            longterm=self.longterm(emotional),
        )

    def immediate(self, behavior: BehaviorPatterns) -> ImmediateRecommendations:
        time = behavior.time_patterns
        content = behavior.content_patterns
        recs = ImmediateRecommendations()

        if time.most_active_hours:
            hours = ", ".join(str(h) for h in time.most_active_hours)
            recs.optimal_work_hours = [
                f"Your most active hours are {hours} o'clock.",
                f"Start important work around {time.most_active_hours[0]} o'clock.",
            ]

        for keyword in content.top_keywords[:CONTENT_SUGGESTION_LIMIT]:
            recs.content_suggestions.append(f"Explore more content related to '{keyword.keyword}'.")

        if time.sleep_estimate.quality == SleepQuality.POOR:
            recs.wellness_tips.append(
                "Your sleep pattern needs attention. Try to keep a regular sleep schedule."
            )

        if content.average_emotional_score < 0:
            recs.wellness_tips.append(
                "Your recent emotional state has been low. Pay attention to stress management."
            )

        return recs

    def longterm(self, emotional: EmotionalPsychology) -> LongtermRecommendations:
        recs = LongtermRecommendations()

        if emotional.emotional_stability < LOW_STABILITY:
            recs.personal_growth.append(
                "Consider starting meditation or yoga to build emotional regulation skills."
            )

        if len(emotional.stress_periods) > MAX_STRESS_PERIODS:
            recs.personal_growth.append(
                "Develop a stress management strategy and consider talking to a professional counselor."
            )

        return recs
