"""Logging setup for lifepulse.

Library modules only create loggers (``logging.getLogger(__name__)``); the
application entry point decides where records go. configure_logging reads the
``logging`` section of an AppConfig, setup_logging does the actual work of
attaching a Rich console handler and an optional file handler to the
``lifepulse`` package logger.

Example:
    >>> from lifepulse.utils.logging import configure_logging, log_context
    >>> configure_logging(get_config())
    >>> with log_context("Analyzing", items=12) as ctx:
    ...     run()
    >>> ctx.elapsed
    0.42
"""

from __future__ import annotations

import logging
import time
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING, Any

from rich.console import Console
from rich.logging import RichHandler

if TYPE_CHECKING:
    from lifepulse.config import AppConfig


# =============================================================================
# Constants
# =============================================================================

PACKAGE_NAME = "lifepulse"

# Loggers that get chatty when the normalizer pool spins up
NOISY_LOGGERS = [
    "asyncio",
    "concurrent.futures",
    "psutil",
]

FILE_FORMAT = "%(asctime)s | %(levelname)-8s | %(threadName)s | %(name)s | %(message)s"
FILE_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_console = Console(stderr=True)


# =============================================================================
# Setup
# =============================================================================


def setup_logging(
    level: str = "INFO",
    log_file: Path | None = None,
    quiet_third_party: bool = True,
) -> logging.Logger:
    """Configure the lifepulse package logger.

    Calling it again replaces the previously installed handlers. Record
    messages may contain user content (file names, keywords), so Rich markup
    is disabled.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_file: Optional path for a plain-text log file. The file format
            includes the thread name so normalizer workers can be told apart.
        quiet_third_party: Raise noisy third-party loggers to WARNING.

    Returns:
        The configured package logger.
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    package_logger = logging.getLogger(PACKAGE_NAME)
    package_logger.setLevel(numeric_level)
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
        handler.close()

    handlers: list[logging.Handler] = [
        RichHandler(
            console=_console,
            show_time=False,
            show_path=False,
            rich_tracebacks=True,
            tracebacks_show_locals=numeric_level == logging.DEBUG,
            markup=False,
        )
    ]
    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt=FILE_DATE_FORMAT))
        handlers.append(file_handler)

    for handler in handlers:
        handler.setLevel(numeric_level)
        package_logger.addHandler(handler)

    if quiet_third_party:
        for name in NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)

    package_logger.propagate = False
    package_logger.debug(f"Logging configured: level={level}, file={log_file}")
    return package_logger


def configure_logging(config: AppConfig, level_override: str | None = None) -> logging.Logger:
    """Apply the logging section of an AppConfig.

    Args:
        config: Loaded configuration. ``debug`` forces DEBUG.
        level_override: Level chosen on the command line; wins over config.

    Returns:
        The configured package logger.
    """
    level = level_override or config.effective_log_level()
    return setup_logging(level=level, log_file=config.logging.log_file)


# =============================================================================
# Timing Context
# =============================================================================


class LogContext:
    """Context manager that logs the start, end and duration of an operation.

    When ``items`` is given the completion message also reports throughput.
    Failures are logged at ERROR (naming the pipeline stage when the exception
    carries one) and re-raised unchanged.

    Attributes:
        message: Description of the operation.
        items: Number of items processed, if known.
        elapsed: Seconds spent inside the block (set on exit).
        failed: Whether the block raised.
    """

    def __init__(
        self,
        message: str,
        level: int = logging.INFO,
        logger: logging.Logger | None = None,
        items: int | None = None,
    ) -> None:
        self.message = message
        self.level = level
        self.logger = logger or logging.getLogger(PACKAGE_NAME)
        self.items = items
        self.elapsed: float = 0.0
        self.failed = False
        self._start_time: float = 0.0

    @property
    def rate(self) -> float | None:
        """Items per second, or None when unknown."""
        if self.items is None or self.elapsed <= 0:
            return None
        return self.items / self.elapsed

    def __enter__(self) -> "LogContext":
        self._start_time = time.perf_counter()
        suffix = f" ({self.items} items)" if self.items is not None else ""
        self.logger.log(self.level, f"{self.message}{suffix}...")
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> None:
        self.elapsed = time.perf_counter() - self._start_time
        if exc_type is not None:
            self.failed = True
            stage = getattr(exc_val, "stage", None)
            where = f" at stage '{stage}'" if stage else ""
            self.logger.error(f"{self.message} failed{where} after {self.elapsed:.2f}s: {exc_val}")
            return

        rate = self.rate
        throughput = f" ({rate:.1f} items/s)" if rate is not None else ""
        self.logger.log(self.level, f"{self.message} completed in {self.elapsed:.2f}s{throughput}")


@contextmanager
def log_context(
    message: str,
    level: int = logging.INFO,
    logger: logging.Logger | None = None,
    items: int | None = None,
) -> Iterator[LogContext]:
    """Functional form of LogContext.

    Example:
        >>> with log_context("Normalizing records", items=40) as ctx:
        ...     normalize()
        >>> print(f"Took {ctx.elapsed:.2f}s")
    """
    with LogContext(message, level, logger, items) as ctx:
        yield ctx
