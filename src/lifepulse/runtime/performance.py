"""Per-run performance telemetry.

Times each pipeline stage, records process memory deltas and grades the run
as it would feel to a user waiting on it.

One PerformanceMonitor belongs to one pipeline run. The orchestrator creates
a fresh instance per run, so monitors are never shared across runs.

Example:
    >>> from lifepulse.runtime.performance import PerformanceMonitor
    >>>
    >>> monitor = PerformanceMonitor()
    >>> monitor.start_run(file_count=12)
    >>> with monitor.step("normalize"):
    ...     normalize_everything()
    >>> metrics = monitor.end_run()
    >>> print(metrics.perceived_performance)
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable, Iterator
from contextlib import contextmanager

import psutil

from lifepulse.core.models import PerceivedPerformance, PerformanceMetrics, StepMetric

# Module logger
logger = logging.getLogger(__name__)

BYTES_PER_MB = 1024 * 1024

MetricsCallback = Callable[[PerformanceMetrics], None]


def rss_megabytes() -> float:
    """Resident set size of the current process in MB, 0.0 when unavailable."""
    try:
        return psutil.Process().memory_info().rss / BYTES_PER_MB
    except psutil.Error as e:
        logger.debug(f"Memory probe failed: {type(e).__name__}")
        return 0.0


def classify_performance(execution_time_ms: float) -> PerceivedPerformance:
    """Grade total run duration: <1s excellent, <3s good, <10s fair, else poor."""
    if execution_time_ms < 1000:
        return PerceivedPerformance.EXCELLENT
    if execution_time_ms < 3000:
        return PerceivedPerformance.GOOD
    if execution_time_ms < 10000:
        return PerceivedPerformance.FAIR
    return PerceivedPerformance.POOR


def responsiveness_score(steps: list[StepMetric]) -> int:
    """Score 0-100 from the mean step duration."""
    avg_ms = sum(s.duration_ms for s in steps) / len(steps) if steps else 0.0
    if avg_ms < 100:
        return 100
    if avg_ms < 500:
        return 80
    if avg_ms < 1000:
        return 60
    if avg_ms < 2000:
        return 40
    return 20


class PerformanceMonitor:
    """Collects timing and memory telemetry for a single run.

    Steps are keyed by name and may nest. Calls made outside a started run
    are ignored.

    Attributes:
        files_processed: Number of files the run was started with.
    """

    def __init__(
        self,
        clock: Callable[[], float] = time.perf_counter,
        memory_probe: Callable[[], float] = rss_megabytes,
    ) -> None:
        """Initialize the monitor.

        Args:
            clock: Monotonic clock in seconds.
            memory_probe: Returns current memory usage in MB.
        """
        self._clock = clock
        self._memory = memory_probe
        self._lock = threading.Lock()
        self._running = False
        self._run_start = 0.0
        self._run_memory = 0.0
        self._open_steps: dict[str, tuple[float, float]] = {}
        self._steps: list[StepMetric] = []
        self._subscribers: list[MetricsCallback] = []
        self._metrics = PerformanceMetrics()
        self.files_processed = 0
        self._logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def metrics(self) -> PerformanceMetrics:
        """Metrics of the last finished run (defaults before any run)."""
        return self._metrics

    # =========================================================================
    # Run Lifecycle
    # =========================================================================

    def start_run(self, file_count: int) -> None:
        """Begin a run, discarding any previous step data."""
        with self._lock:
            self._running = True
            self._run_start = self._clock()
            self._run_memory = self._memory()
            self._open_steps.clear()
            self._steps = []
            self.files_processed = file_count
        self._logger.debug(f"Monitoring started for {file_count} files")

    def start_step(self, name: str) -> None:
        if not self._running:
            return
        with self._lock:
            self._open_steps[name] = (self._clock(), self._memory())

    def end_step(self, name: str) -> StepMetric | None:
        """Close a step and notify subscribers.

        Returns:
            The recorded StepMetric, or None if no such step was open.
        """
        if not self._running:
            return None
        with self._lock:
            opened = self._open_steps.pop(name, None)
            if opened is None:
                self._logger.warning(f"end_step called for unknown step '{name}'")
                return None
            started, memory_before = opened
            metric = StepMetric(
                name=name,
                duration_ms=(self._clock() - started) * 1000,
                memory_delta_mb=self._memory() - memory_before,
            )
            self._steps.append(metric)
            snapshot = self._snapshot() if self._subscribers else None

        self._logger.debug(
            f"Step {name} done ({metric.duration_ms:.2f}ms, {metric.memory_delta_mb:+.2f}MB)"
        )
        if snapshot is not None:
            self._notify(snapshot)
        return metric

    @contextmanager
    def step(self, name: str) -> Iterator[None]:
        """Context manager wrapping start_step/end_step.

        The step is recorded even when the body raises.
        """
        self.start_step(name)
        try:
            yield
        finally:
            self.end_step(name)

    def end_run(self) -> PerformanceMetrics:
        """Finish the run and return its metrics."""
        with self._lock:
            if not self._running:
                return self._metrics
            execution_ms = (self._clock() - self._run_start) * 1000
            self._metrics = PerformanceMetrics(
                execution_time_ms=execution_ms,
                memory_delta_mb=self._memory() - self._run_memory,
                files_processed=self.files_processed,
                per_step=list(self._steps),
                perceived_performance=classify_performance(execution_ms),
                responsiveness_score=responsiveness_score(self._steps),
            )
            self._running = False
            self._open_steps.clear()

        self._logger.debug(self.generate_report())
        return self._metrics

    def _snapshot(self) -> PerformanceMetrics:
        # Caller holds the lock
        elapsed_ms = (self._clock() - self._run_start) * 1000
        return PerformanceMetrics(
            execution_time_ms=elapsed_ms,
            memory_delta_mb=self._memory() - self._run_memory,
            files_processed=self.files_processed,
            per_step=list(self._steps),
            perceived_performance=classify_performance(elapsed_ms),
            responsiveness_score=responsiveness_score(self._steps),
        )

    # =========================================================================
    # Subscribers
    # =========================================================================

    def subscribe(self, callback: MetricsCallback) -> Callable[[], None]:
        """Register a callback invoked after every finished step.

        Returns:
            A function that removes the callback.
        """
        with self._lock:
            self._subscribers.append(callback)

        def unsubscribe() -> None:
            with self._lock:
                if callback in self._subscribers:
                    self._subscribers.remove(callback)

        return unsubscribe

    def _notify(self, metrics: PerformanceMetrics) -> None:
        with self._lock:
            subscribers = list(self._subscribers)
        for callback in subscribers:
            try:
                callback(metrics)
            except Exception:
                self._logger.warning("Performance subscriber raised", exc_info=True)

    # =========================================================================
    # Report
    # =========================================================================

    def generate_report(self) -> str:
        """Generate a human-readable report of the last finished run."""
        m = self._metrics
        lines = [
            "=" * 50,
            "PERFORMANCE REPORT",
            "=" * 50,
            f"  Total time: {m.execution_time_ms:.2f}ms",
            f"  Memory delta: {m.memory_delta_mb:.2f}MB",
            f"  Files processed: {m.files_processed}",
            f"  Perceived performance: {m.perceived_performance.value}",
            f"  Responsiveness: {m.responsiveness_score}/100",
            "",
            "STEPS:",
        ]
        for step in m.per_step:
            lines.append(f"  {step.name}: {step.duration_ms:.2f}ms ({step.memory_delta_mb:+.2f}MB)")
        lines.append("=" * 50)
        return "\n".join(lines)
