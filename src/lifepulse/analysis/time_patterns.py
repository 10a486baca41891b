"""Time-of-day and day-of-week activity patterns.

Builds hourly, daily and weekend histograms from normalized data points and
estimates a sleep window from the quietest hours.
"""

from __future__ import annotations

import logging
from collections import Counter, defaultdict
from datetime import datetime, tzinfo
from statistics import mean

from lifepulse.core.models import (
    PersonalDataPoint,
    SleepEstimate,
    SleepQuality,
    TimePatterns,
    WeekendSplit,
)

logger = logging.getLogger(__name__)


WEEKDAY_NAMES = (
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
    "Sunday",
)
WEEKEND_DAYS = frozenset({5, 6})

SLEEP_THRESHOLD_FACTOR = 0.3
GOOD_SLEEP_MIN_HOURS = 6
GOOD_SLEEP_MAX_HOURS = 9
TOP_HOURS = 3

DEFAULT_SLEEP_START = 23
DEFAULT_SLEEP_END = 7
DEFAULT_SLEEP_DURATION = 8


def grade_sleep(duration_hours: int) -> SleepQuality:
    """Good iff the window lasts between 6 and 9 hours inclusive."""
    if GOOD_SLEEP_MIN_HOURS <= duration_hours <= GOOD_SLEEP_MAX_HOURS:
        return SleepQuality.GOOD
    return SleepQuality.POOR


class TimePatternAnalyzer:
    """Computes activity histograms in a given timezone.

    Args:
        tz: Timezone used for hour and weekday bucketing. ``None`` uses the
            system local timezone.

    Example:
        >>> from datetime import timezone
        >>> analyzer = TimePatternAnalyzer(tz=timezone.utc)
        >>> patterns = analyzer.analyze(points)
        >>> patterns.most_active_hours
        [9, 14, 21]
    """

    def __init__(self, tz: tzinfo | None = None) -> None:
        self.tz = tz
        self._logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    def _localize(self, timestamp: datetime) -> datetime:
        return timestamp.astimezone(self.tz)

    def analyze(self, points: list[PersonalDataPoint]) -> TimePatterns:
        """Analyze when activity happens.

        Args:
            points: Normalized data points (any order).

        Returns:
            TimePatterns. Empty input yields the default pattern with the
            default 23:00-07:00 sleep window.
        """
        if not points:
            return TimePatterns()

        hourly: Counter[int] = Counter()
        daily: Counter[str] = Counter()
        by_hour: dict[int, Counter[str]] = defaultdict(Counter)
        weekend = 0

        for point in points:
            local = self._localize(point.timestamp)
            hourly[local.hour] += 1
            daily[WEEKDAY_NAMES[local.weekday()]] += 1
            by_hour[local.hour][point.data_type.value] += 1
            if local.weekday() in WEEKEND_DAYS:
                weekend += 1

        # Ties on count resolve to the earlier hour
        ranked = sorted(hourly.items(), key=lambda item: (-item[1], item[0]))
        most_active = [hour for hour, _ in ranked[:TOP_HOURS]]

        self._logger.debug(f"Bucketed {len(points)} points into {len(hourly)} hours")

        return TimePatterns(
            hourly_activity=dict(sorted(hourly.items())),
            daily_activity={day: daily[day] for day in WEEKDAY_NAMES if day in daily},
            weekend_vs_weekday=WeekendSplit(weekend=weekend, weekday=len(points) - weekend),
            sleep_estimate=self.estimate_sleep(hourly),
            most_active_hours=most_active,
            data_type_by_hour={hour: dict(types) for hour, types in sorted(by_hour.items())},
        )

    @staticmethod
    def estimate_sleep(hourly: dict[int, int]) -> SleepEstimate:
        """Estimate a sleep window from low-activity hours.

        Every observed hour whose count is at or below 30% of the mean hourly
        count is treated as a sleep hour. The window spans the smallest to the
        largest such hour; low hours are not required to be contiguous, so an
        afternoon lull and the night are reported as one window.

        Args:
            hourly: Hour -> activity count, observed hours only.

        Returns:
            SleepEstimate. Falls back to 23-7 (8 hours) when no hour qualifies.
        """
        if not hourly:
            return SleepEstimate()

        threshold = mean(hourly.values()) * SLEEP_THRESHOLD_FACTOR
        low_hours = [hour for hour, count in hourly.items() if count <= threshold]

        if not low_hours:
            return SleepEstimate(
                start=DEFAULT_SLEEP_START,
                end=DEFAULT_SLEEP_END,
                duration_hours=DEFAULT_SLEEP_DURATION,
                quality=grade_sleep(DEFAULT_SLEEP_DURATION),
            )

        duration = len(low_hours)
        return SleepEstimate(
            start=min(low_hours),
            end=max(low_hours),
            duration_hours=duration,
            quality=grade_sleep(duration),
        )
