"""Shared utilities."""

from lifepulse.utils.logging import LogContext, configure_logging, log_context, setup_logging

__all__ = ["LogContext", "configure_logging", "log_context", "setup_logging"]
