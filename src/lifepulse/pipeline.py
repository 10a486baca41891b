"""Analysis pipeline orchestration.

Sequences one analysis run:

    cache check -> normalize -> time / content / emotional analysis
    -> recommendations -> cache store

Normalization runs in bounded parallel chunks on worker threads. The three
analyzers run one after another because each needs the complete point set.
A run either returns a complete AnalysisResult or raises; partial results
are never returned.

Example:
    >>> from lifepulse.pipeline import PipelineOrchestrator
    >>> from lifepulse.runtime import CacheManager
    >>>
    >>> orchestrator = PipelineOrchestrator(cache=CacheManager())
    >>> result = orchestrator.run_analysis(records)
    >>> print(result.emotional_psychology.emotional_stability)
    >>> print(orchestrator.last_metrics.perceived_performance)
"""

from __future__ import annotations

import logging
import threading
import time
from collections import Counter
from collections.abc import Callable, Sequence
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from enum import Enum
from typing import Any, TypeVar

from lifepulse.analysis.content_patterns import ContentPatternAnalyzer
from lifepulse.analysis.emotional import EmotionalPsychologyAnalyzer
from lifepulse.analysis.normalizer import DataPointNormalizer, NormalizationResult, RecordInput
from lifepulse.analysis.recommendations import RecommendationEngine
from lifepulse.analysis.time_patterns import TimePatternAnalyzer
from lifepulse.config import AppConfig, get_config
from lifepulse.core.models import (
    AnalysisResult,
    BehaviorPatterns,
    DataSummary,
    PerformanceMetrics,
    PersonalDataPoint,
    TimeRange,
)
from lifepulse.errors import AnalysisCancelledError, PipelineError, StageFailureError
from lifepulse.runtime.cache import CacheManager, CacheStats
from lifepulse.runtime.performance import PerformanceMonitor
from lifepulse.utils.logging import log_context

logger = logging.getLogger(__name__)

T = TypeVar("T")


# =============================================================================
# State
# =============================================================================


class PipelineState(str, Enum):
    """Lifecycle of a pipeline run."""

    IDLE = "idle"
    CACHE_CHECK = "cache_check"
    NORMALIZING = "normalizing"
    ANALYZING = "analyzing"
    RECOMMENDING = "recommending"
    CACHED = "cached"
    DONE = "done"
    FAILED = "failed"


# Stage names reported by StageFailureError / AnalysisCancelledError
STAGE_NORMALIZE = "normalizing"
STAGE_TIME = "time_patterns"
STAGE_CONTENT = "content_patterns"
STAGE_EMOTIONAL = "emotional"
STAGE_RECOMMEND = "recommending"


def build_summary(total_files: int, normalized: NormalizationResult) -> DataSummary:
    """Summarize what went into a run."""
    points = normalized.points
    time_range = TimeRange()
    if points:
        timestamps = [p.timestamp for p in points]
        time_range = TimeRange(start=min(timestamps), end=max(timestamps))

    return DataSummary(
        total_files=total_files,
        valid_points=len(points),
        skipped_records=normalized.skipped,
        data_types=dict(Counter(p.data_type.value for p in points)),
        time_range=time_range,
    )


# =============================================================================
# Orchestrator
# =============================================================================


class PipelineOrchestrator:
    """Runs the analysis pipeline with caching and telemetry.

    The cache and the monitor factory are injected. Pass the same
    CacheManager to several orchestrators to share results between them.
    A fresh PerformanceMonitor is created for every run.

    Attributes:
        config: Application configuration in use.
        cache: Result cache, or None when caching is off.
    """

    def __init__(
        self,
        cache: CacheManager | None = None,
        config: AppConfig | None = None,
        monitor_factory: Callable[[], PerformanceMonitor] = PerformanceMonitor,
        normalizer: DataPointNormalizer | None = None,
    ) -> None:
        """Initialize the orchestrator.

        Args:
            cache: Result cache. When None and caching is enabled in config,
                a private CacheManager is created from the cache settings.
            config: Configuration. Defaults to get_config().
            monitor_factory: Creates the per-run PerformanceMonitor.
            normalizer: Record normalizer. Defaults to one built from config.
        """
        self.config = config or get_config()
        pipeline_cfg = self.config.pipeline
        cache_cfg = self.config.cache

        if cache is None and cache_cfg.enabled:
            cache = CacheManager(capacity=cache_cfg.capacity, default_ttl_seconds=cache_cfg.ttl_seconds)
        self.cache = cache if cache_cfg.enabled else None

        tz = pipeline_cfg.get_tzinfo()
        self._normalizer = normalizer or DataPointNormalizer(max_file_size_bytes=pipeline_cfg.max_file_size_bytes)
        self._time_analyzer = TimePatternAnalyzer(tz=tz)
        self._content_analyzer = ContentPatternAnalyzer()
        self._emotional_analyzer = EmotionalPsychologyAnalyzer(tz=tz)
        self._recommender = RecommendationEngine()
        self._monitor_factory = monitor_factory

        self._state = PipelineState.IDLE
        self._state_lock = threading.Lock()
        self._last_metrics: PerformanceMetrics | None = None
        self._logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    # =========================================================================
    # Read-only Accessors
    # =========================================================================

    @property
    def state(self) -> PipelineState:
        """State of the most recent run."""
        with self._state_lock:
            return self._state

    @property
    def last_metrics(self) -> PerformanceMetrics | None:
        """Telemetry of the most recent finished run, cached or not."""
        return self._last_metrics

    def cache_stats(self) -> CacheStats | None:
        """Cache statistics, or None when caching is off."""
        return self.cache.stats() if self.cache is not None else None

    def _set_state(self, state: PipelineState) -> None:
        with self._state_lock:
            self._state = state
        self._logger.debug(f"Pipeline state -> {state.value}")

    # =========================================================================
    # Run
    # =========================================================================

    def run_analysis(
        self,
        records: Sequence[RecordInput],
        analysis_kind: str | None = None,
        cancel_event: threading.Event | None = None,
    ) -> AnalysisResult:
        """Analyze a batch of uploaded-file records.

        Args:
            records: Uploaded records or equivalent mappings.
            analysis_kind: Analysis variant. Defaults to the configured one.
            cancel_event: Set it to cancel the run at the next stage boundary.

        Returns:
            The analysis result. On a cache hit this is the stored result,
            unchanged (including its processing_time_ms).

        Raises:
            StageFailureError: A stage raised; ``.stage`` names it.
            AnalysisCancelledError: ``cancel_event`` was set.
        """
        records = list(records)
        kind = analysis_kind or self.config.pipeline.analysis_kind
        monitor = self._monitor_factory()
        monitor.start_run(len(records))
        started = time.perf_counter()

        with log_context(f"Analyzing records ({kind})", logger=self._logger, items=len(records)):
            try:
                self._set_state(PipelineState.CACHE_CHECK)
                cache_key = self._build_key(records, kind)
                cached = self._cache_get(cache_key)
                if cached is not None:
                    self._set_state(PipelineState.CACHED)
                    self._logger.info("Serving analysis result from cache")
                    self._finish(monitor, PipelineState.DONE)
                    return cached

                result = self._analyze(records, kind, cache_key, monitor, cancel_event, started)
                self._cache_set(cache_key, result)
            except PipelineError:
                self._finish(monitor, PipelineState.FAILED)
                raise
            except Exception as e:
                stage = self.state.value
                self._logger.error(f"Pipeline failed during '{stage}': {e}", exc_info=True)
                self._finish(monitor, PipelineState.FAILED)
                raise StageFailureError(f"Pipeline failed during '{stage}': {e}", stage) from e

            self._finish(monitor, PipelineState.DONE)
            return result

    def _analyze(
        self,
        records: list[RecordInput],
        kind: str,
        cache_key: str | None,
        monitor: PerformanceMonitor,
        cancel_event: threading.Event | None,
        started: float,
    ) -> AnalysisResult:
        self._check_cancelled(cancel_event, STAGE_NORMALIZE)
        self._set_state(PipelineState.NORMALIZING)
        normalized = self._run_stage(STAGE_NORMALIZE, monitor, self._normalize_all, records)
        points = normalized.points

        self._set_state(PipelineState.ANALYZING)
        self._check_cancelled(cancel_event, STAGE_TIME)
        time_patterns = self._run_stage(STAGE_TIME, monitor, self._time_analyzer.analyze, points)
        self._check_cancelled(cancel_event, STAGE_CONTENT)
        content_patterns = self._run_stage(STAGE_CONTENT, monitor, self._content_analyzer.analyze, points)
        self._check_cancelled(cancel_event, STAGE_EMOTIONAL)
        emotional = self._run_stage(STAGE_EMOTIONAL, monitor, self._emotional_analyzer.analyze, points)

        behavior = BehaviorPatterns(time_patterns=time_patterns, content_patterns=content_patterns)

        self._check_cancelled(cancel_event, STAGE_RECOMMEND)
        self._set_state(PipelineState.RECOMMENDING)
        recommendations = self._run_stage(
            STAGE_RECOMMEND, monitor, self._recommender.recommend, behavior, emotional
        )

        return AnalysisResult(
            data_summary=build_summary(len(records), normalized),
            behavior_patterns=behavior,
            emotional_psychology=emotional,
            recommendations=recommendations,
            processing_time_ms=(time.perf_counter() - started) * 1000,
            analysis_kind=kind,
            cache_key=cache_key,
        )

    def _finish(self, monitor: PerformanceMonitor, state: PipelineState) -> None:
        self._last_metrics = monitor.end_run()
        self._set_state(state)

    def _check_cancelled(self, cancel_event: threading.Event | None, stage: str) -> None:
        if cancel_event is not None and cancel_event.is_set():
            self._logger.info(f"Analysis cancelled before stage '{stage}'")
            raise AnalysisCancelledError(f"Analysis cancelled before stage '{stage}'", stage)

    def _run_stage(
        self,
        stage: str,
        monitor: PerformanceMonitor,
        func: Callable[..., T],
        *args: Any,
    ) -> T:
        """Run one stage under the monitor, converting failures to StageFailureError."""
        with monitor.step(stage):
            try:
                return func(*args)
            except PipelineError:
                raise
            except Exception as e:
                self._logger.error(f"Stage '{stage}' failed: {e}", exc_info=True)
                raise StageFailureError(f"Stage '{stage}' failed: {e}", stage) from e

    # =========================================================================
    # Normalization
    # =========================================================================

    def _normalize_all(self, records: list[RecordInput]) -> NormalizationResult:
        """Normalize records in chunks of ``max_concurrent_files``.

        Each chunk runs in parallel and completes before the next one starts.
        Points keep input order.
        """
        chunk_size = self.config.pipeline.max_concurrent_files
        result = NormalizationResult()
        if not records:
            return result

        with ThreadPoolExecutor(max_workers=chunk_size, thread_name_prefix="lifepulse-normalize") as executor:
            for offset in range(0, len(records), chunk_size):
                chunk = records[offset : offset + chunk_size]
                futures: dict[Future[NormalizationResult], int] = {
                    executor.submit(self._normalizer.try_normalize, record): index
                    for index, record in enumerate(chunk)
                }
                chunk_results: list[NormalizationResult | None] = [None] * len(chunk)
                for future in as_completed(futures):
                    chunk_results[futures[future]] = future.result()

                for item in chunk_results:
                    if item is not None:
                        result.extend(item)

        self._logger.info(f"Normalized {len(result.points)} of {len(records)} records")
        return result

    # =========================================================================
    # Cache Access
    # =========================================================================

    def _build_key(self, records: list[RecordInput], kind: str) -> str | None:
        if self.cache is None:
            return None
        try:
            return self.cache.build_key(records, kind)
        except Exception as e:
            self._logger.warning(f"Cache key unavailable, bypassing cache: {e}")
            return None

    def _cache_get(self, key: str | None) -> AnalysisResult | None:
        if self.cache is None or key is None:
            return None
        try:
            return self.cache.get(key)
        except Exception as e:
            self._logger.warning(f"Cache lookup failed, treating as miss: {e}")
            return None

    def _cache_set(self, key: str | None, result: AnalysisResult) -> None:
        if self.cache is None or key is None:
            return
        try:
            self.cache.set(key, result)
        except Exception as e:
            self._logger.warning(f"Cache store failed, result not cached: {e}")


def analyze_files(
    records: Sequence[RecordInput],
    config: AppConfig | None = None,
    analysis_kind: str | None = None,
) -> AnalysisResult:
    """Run a single analysis with a throwaway orchestrator.

    Example:
        >>> from lifepulse import analyze_files
        >>> result = analyze_files([{"name": "a.txt", "size": 10, ...}])
    """
    orchestrator = PipelineOrchestrator(config=config)
    return orchestrator.run_analysis(records, analysis_kind=analysis_kind)


__all__ = [
    "PipelineOrchestrator",
    "PipelineState",
    "analyze_files",
    "build_summary",
]
