"""lifepulse - personal data analysis pipeline.

Turns uploaded personal-activity records (photos, chat exports, structured
data dumps) into time patterns, emotional scoring and recommendations.

Example:
    >>> from lifepulse import PipelineOrchestrator, CacheManager
    >>> orchestrator = PipelineOrchestrator(cache=CacheManager())
    >>> result = orchestrator.run_analysis(records)
"""

__version__ = "0.1.0"

from lifepulse.config import AppConfig, get_config, load_config
from lifepulse.core.models import AnalysisResult, PersonalDataPoint, UploadedFileRecord
from lifepulse.errors import (
    AnalysisCancelledError,
    CacheError,
    InvalidRecordError,
    LifepulseError,
    PipelineError,
    StageFailureError,
)
from lifepulse.pipeline import PipelineOrchestrator, PipelineState, analyze_files
from lifepulse.runtime.cache import CacheManager
from lifepulse.runtime.performance import PerformanceMonitor

__all__ = [
    "__version__",
    "AnalysisCancelledError",
    "AnalysisResult",
    "AppConfig",
    "CacheError",
    "CacheManager",
    "InvalidRecordError",
    "LifepulseError",
    "PerformanceMonitor",
    "PersonalDataPoint",
    "PipelineError",
    "PipelineOrchestrator",
    "PipelineState",
    "StageFailureError",
    "UploadedFileRecord",
    "analyze_files",
    "get_config",
    "load_config",
]
