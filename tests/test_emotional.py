"""Tests for EmotionalPsychologyAnalyzer."""

from datetime import timedelta, timezone

import pytest

from lifepulse.analysis.emotional import EPSILON, EmotionalPsychologyAnalyzer
from lifepulse.core.models import DataType, PersonalDataPoint

from conftest import BASE_TIME, make_point


@pytest.fixture
def analyzer() -> EmotionalPsychologyAnalyzer:
    return EmotionalPsychologyAnalyzer(tz=timezone.utc)


class TestEmptyInput:
    def test_defaults(self, analyzer: EmotionalPsychologyAnalyzer) -> None:
        result = analyzer.analyze([])

        assert result.emotional_stability == 1.0
        assert result.recovery_time_hours == 24.0
        assert result.clusters == {}
        assert result.stress_periods == []
        assert result.peak_emotional_hours == {}


class TestHourlyScenario:
    """24 points, one per hour, neutral except a low at 03:00 and a high at 15:00."""

    def test_stress_period_is_the_low_hour(self, analyzer, hourly_points) -> None:
        result = analyzer.analyze(hourly_points)
        assert result.stress_periods == [BASE_TIME + timedelta(hours=3)]

    def test_stability_formula(self, analyzer, hourly_points) -> None:
        result = analyzer.analyze(hourly_points)

        std = (2 / 24) ** 0.5
        assert result.emotional_stability == pytest.approx(1 / (std + EPSILON))
        assert result.emotional_stability > 0

    def test_clusters_are_tertiles(self, analyzer, hourly_points) -> None:
        clusters = analyzer.analyze(hourly_points).clusters

        assert list(clusters) == ["cluster_0", "cluster_1", "cluster_2"]
        assert [c.size for c in clusters.values()] == [8, 8, 8]
        assert clusters["cluster_0"].avg_emotion == pytest.approx(-1 / 8)
        assert clusters["cluster_2"].avg_emotion == pytest.approx(1 / 8)
        assert clusters["cluster_0"].common_hours == [0, 1, 2, 3, 4, 5, 6, 7]
        assert 15 in clusters["cluster_2"].common_hours

    def test_peak_hours_sum_scores(self, analyzer, hourly_points) -> None:
        peaks = analyzer.analyze(hourly_points).peak_emotional_hours

        assert peaks[3] == -1.0
        assert peaks[15] == 1.0
        assert len(peaks) == 24

    def test_recovery_from_low_points(self, analyzer, hourly_points) -> None:
        # Hours 0-14 recover at 15:00 (15h .. 1h); later lows never recover
        assert analyzer.analyze(hourly_points).recovery_time_hours == pytest.approx(8.0)


class TestClusters:
    @pytest.mark.parametrize("n", [1, 2, 3, 4, 5, 7, 10])
    def test_sizes_sum_to_n(self, analyzer: EmotionalPsychologyAnalyzer, n: int) -> None:
        points = [make_point(hour=i % 24, emotional_score=(i % 5) / 5 - 0.4) for i in range(n)]
        clusters = analyzer.cluster(points)

        assert len(clusters) == 3
        assert sum(c.size for c in clusters.values()) == n

    def test_short_input_leaves_empty_clusters(self, analyzer: EmotionalPsychologyAnalyzer) -> None:
        clusters = analyzer.cluster([make_point(emotional_score=0.2)])

        assert clusters["cluster_0"].size == 1
        assert clusters["cluster_1"].size == 0
        assert clusters["cluster_2"].avg_emotion == 0.0

    def test_ordered_by_emotion(self, analyzer: EmotionalPsychologyAnalyzer) -> None:
        points = [make_point(emotional_score=s, importance_score=i) for s, i in ((0.9, 3.0), (-0.9, 1.0), (0.0, 2.0))]
        clusters = analyzer.cluster(points)

        assert clusters["cluster_0"].avg_emotion == -0.9
        assert clusters["cluster_0"].avg_importance == 1.0
        assert clusters["cluster_2"].avg_importance == 3.0


class TestRecovery:
    def test_no_recovery_defaults_to_24(self, analyzer: EmotionalPsychologyAnalyzer) -> None:
        points = [make_point(hour=h, emotional_score=0.3) for h in range(5)]
        assert analyzer.analyze(points).recovery_time_hours == 24.0

    def test_recovery_needs_strictly_later_point(self, analyzer: EmotionalPsychologyAnalyzer) -> None:
        points = [
            make_point(hour=0, emotional_score=-1.0),
            make_point(hour=0, emotional_score=1.0),
            make_point(hour=2, emotional_score=1.0),
        ]
        # mean 1/3, low line 1/12: the low at 00:00 recovers at 02:00, not 00:00
        assert analyzer.analyze(points).recovery_time_hours == pytest.approx(2.0)

    def test_input_order_does_not_matter(self, analyzer: EmotionalPsychologyAnalyzer) -> None:
        points = [
            make_point(hour=5, emotional_score=0.8),
            make_point(hour=1, emotional_score=-0.6),
            make_point(hour=3, emotional_score=-0.2),
        ]
        forward = analyzer.analyze(points).recovery_time_hours
        backward = analyzer.analyze(list(reversed(points))).recovery_time_hours

        # lows at 01:00 and 03:00 both recover at 05:00
        assert forward == backward == pytest.approx(3.0)

    def test_matches_quadratic_scan(self, analyzer: EmotionalPsychologyAnalyzer) -> None:
        scores = [0.1, -0.5, 0.4, -0.2, -0.3, 0.9, -0.8, 0.0, 0.6, -0.1]
        points = [make_point(hour=i * 2, emotional_score=s) for i, s in enumerate(scores)]

        low = (sum(scores) / len(scores)) * 0.25
        deltas = []
        for i, p in enumerate(points):
            if p.emotional_score > low:
                continue
            for later in points[i + 1 :]:
                if later.emotional_score > low:
                    deltas.append((later.timestamp - p.timestamp).total_seconds() / 3600)
                    break

        assert analyzer.analyze(points).recovery_time_hours == pytest.approx(sum(deltas) / len(deltas))


class TestStress:
    def test_stress_periods_chronological(self, analyzer: EmotionalPsychologyAnalyzer) -> None:
        points = [make_point(hour=h, emotional_score=s) for h, s in ((9, -1.0), (1, -1.0), (5, 1.0), (6, 1.0), (7, 0.9), (8, 0.9))]
        result = analyzer.analyze(points)

        assert result.stress_periods == [BASE_TIME + timedelta(hours=1), BASE_TIME + timedelta(hours=9)]

    def test_constant_scores_have_no_stress(self, analyzer: EmotionalPsychologyAnalyzer) -> None:
        points = [make_point(hour=h, emotional_score=-0.4) for h in range(4)]
        result = analyzer.analyze(points)

        assert result.stress_periods == []
        assert result.emotional_stability == pytest.approx(1 / EPSILON)

    def test_score_bounds_hold_for_points(self) -> None:
        point = PersonalDataPoint(timestamp=BASE_TIME, data_type=DataType.VOICE, emotional_score=-1.0)
        assert -1.0 <= point.emotional_score <= 1.0
