"""Runtime services shared by pipeline runs: result cache and telemetry."""

from lifepulse.runtime.cache import CacheEntry, CacheManager, CacheStats, fingerprint_file_set
from lifepulse.runtime.performance import PerformanceMonitor, classify_performance, responsiveness_score

__all__ = [
    "CacheEntry",
    "CacheManager",
    "CacheStats",
    "PerformanceMonitor",
    "classify_performance",
    "fingerprint_file_set",
    "responsiveness_score",
]
