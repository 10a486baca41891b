"""Exception hierarchy for lifepulse.

All library exceptions inherit from LifepulseError so callers can catch
everything raised by the pipeline with a single clause.
"""

from __future__ import annotations


class LifepulseError(Exception):
    """Base exception for all lifepulse errors."""

    pass


class InvalidRecordError(LifepulseError):
    """Raised when an uploaded record cannot be turned into a data point.

    The batch normalizer catches this, counts the record as skipped and
    moves on. It never aborts a run.

    Attributes:
        record_name: Name of the offending record, if known.
        reason: Human-readable cause.
    """

    def __init__(self, reason: str, record_name: str | None = None) -> None:
        label = record_name or "<unnamed>"
        super().__init__(f"Invalid record {label}: {reason}")
        self.record_name = record_name
        self.reason = reason


class CacheError(LifepulseError):
    """Raised when the cache backend cannot serve a request.

    The orchestrator treats this as a cache miss and keeps analyzing.
    """

    pass


class PipelineError(LifepulseError):
    """Exception for pipeline-level failures.

    Attributes:
        message: Error message.
        stage: Pipeline stage where the error occurred.
    """

    def __init__(self, message: str, stage: str) -> None:
        super().__init__(message)
        self.message = message
        self.stage = stage


class StageFailureError(PipelineError):
    """An analyzer stage raised; the run failed and produced no result."""

    pass


class AnalysisCancelledError(PipelineError):
    """The caller cancelled the run between two stages."""

    pass
