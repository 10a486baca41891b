"""Central configuration for lifepulse.

Every module that needs settings reads them from here. Configuration comes
from three sources (highest wins):

1. Environment variables (``LIFEPULSE_*``, nested with ``__``)
2. A YAML config file
3. In-code defaults

Example:
    >>> from lifepulse.config import get_config
    >>>
    >>> cfg = get_config()
    >>> cfg.pipeline.max_concurrent_files
    5
    >>> cfg.cache.ttl_seconds
    86400

Config File Format (YAML):
    ```yaml
    pipeline:
      max_concurrent_files: 5
      max_file_size_bytes: 52428800
      analysis_kind: complete
      timezone: Asia/Seoul   # omit for system local time

    cache:
      enabled: true
      capacity: 100
      ttl_seconds: 86400

    logging:
      level: INFO
      log_file: ~/.lifepulse/lifepulse.log

    debug: false
    verbose: false
    ```

Environment example::

    LIFEPULSE_CACHE__CAPACITY=10 LIFEPULSE_PIPELINE__TIMEZONE=UTC lifepulse analyze files.json
"""

from __future__ import annotations

import functools
import logging
from datetime import tzinfo
from pathlib import Path
from typing import Any, Literal
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

from lifepulse.errors import LifepulseError

logger = logging.getLogger(__name__)


CONFIG_FILE_NAME = "lifepulse.yaml"


# =============================================================================
# Exceptions
# =============================================================================


class ConfigError(LifepulseError):
    """Base exception for configuration errors."""

    pass


class ConfigFileError(ConfigError):
    """Raised when an explicitly requested config file cannot be used.

    Raised when:
    - The file given to load_config does not exist
    - Environment overrides fail validation
    """

    pass


# =============================================================================
# Sections
# =============================================================================


class PipelineConfig(BaseModel):
    """Settings for pipeline runs.

    Attributes:
        max_concurrent_files: Records normalized in parallel per chunk.
        max_file_size_bytes: Larger records are skipped as invalid.
        analysis_kind: Default analysis variant; prefixes cache keys.
        timezone: IANA timezone for hour/weekday bucketing, None for local.
    """

    max_concurrent_files: int = Field(default=5, ge=1, description="Parallel normalizations per chunk.")
    max_file_size_bytes: int = Field(
        default=50 * 1024 * 1024, ge=0, description="Maximum accepted record size."
    )
    analysis_kind: str = Field(default="complete", min_length=1, description="Default analysis kind.")
    timezone: str | None = Field(default=None, description="IANA timezone name, None for local.")

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, v: str | None) -> str | None:
        if v is None or not v.strip():
            return None
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"Unknown timezone: {v}") from e
        return v

    def get_tzinfo(self) -> tzinfo | None:
        """Return the configured timezone, or None for system local time."""
        return ZoneInfo(self.timezone) if self.timezone else None


class CacheConfig(BaseModel):
    """Settings for the in-process result cache."""

    enabled: bool = Field(default=True, description="Serve repeated file sets from cache.")
    capacity: int = Field(default=100, ge=1, description="Maximum cached results.")
    ttl_seconds: float = Field(default=86400, gt=0, description="Result lifetime in seconds.")


class LoggingConfig(BaseModel):
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(default="INFO")
    log_file: Path | None = Field(default=None, description="Optional log file.")

    @field_validator("level", mode="before")
    @classmethod
    def upper_level(cls, v: Any) -> Any:
        return v.upper() if isinstance(v, str) else v

    @field_validator("log_file", mode="before")
    @classmethod
    def expand_path(cls, v: Any) -> Any:
        if isinstance(v, str) and v:
            return Path(v).expanduser()
        return v or None


class AppConfig(BaseSettings):
    """Top-level application configuration.

    Attributes:
        pipeline: Pipeline run settings.
        cache: Result cache settings.
        logging: Logging settings.
        debug: Enable debug mode.
        verbose: Enable verbose console output.

    Example:
        >>> config = AppConfig(cache={"capacity": 10})
        >>> config.cache.capacity
        10
    """

    pipeline: PipelineConfig = Field(default_factory=PipelineConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    debug: bool = Field(default=False, description="Enable debug mode.")
    verbose: bool = Field(default=False, description="Enable verbose output.")

    model_config = {
        "env_prefix": "LIFEPULSE_",
        "env_nested_delimiter": "__",
        "case_sensitive": False,
        "extra": "ignore",
    }

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # Environment overrides values loaded from the YAML file
        return env_settings, init_settings, file_secret_settings

    def effective_log_level(self) -> str:
        return "DEBUG" if self.debug else self.logging.level


# =============================================================================
# Loading
# =============================================================================


def _default_search_paths() -> list[Path]:
    return [
        Path(".") / CONFIG_FILE_NAME,
        Path.home() / ".lifepulse" / "config.yaml",
    ]


def _read_yaml(config_file: Path) -> dict[str, Any]:
    """Read a YAML mapping, returning {} with a warning when unusable."""
    try:
        content = config_file.read_text(encoding="utf-8")
    except OSError as e:
        logger.warning(f"Failed to read config file {config_file}: {type(e).__name__}. Using defaults.")
        return {}

    if not content.strip():
        return {}

    try:
        loaded = yaml.safe_load(content)
    except yaml.YAMLError as e:
        logger.warning(f"Failed to parse config file {config_file}: {e}. Using defaults.")
        return {}

    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        logger.warning(f"Config file {config_file} has unexpected format. Using defaults.")
        return {}
    return loaded


def load_config(path: Path | None = None) -> AppConfig:
    """Load configuration from file, environment and defaults.

    If no config file is found, defaults and environment are used (not an
    error). A malformed file logs a warning and is ignored.

    Args:
        path: Config file to use. If None, searches ``./lifepulse.yaml``
            then ``~/.lifepulse/config.yaml``.

    Returns:
        Fully-populated AppConfig instance.

    Raises:
        ConfigFileError: If ``path`` is given but does not exist, or if the
            environment holds invalid overrides.

    Example:
        >>> config = load_config()
        >>> config = load_config(Path("./lifepulse.yaml"))
    """
    if path is not None:
        path = Path(path).expanduser()
        if not path.is_file():
            raise ConfigFileError(f"Config file not found: {path}")
        candidates = [path]
    else:
        candidates = _default_search_paths()

    config_file = next((p for p in candidates if p.is_file()), None)
    config_data = _read_yaml(config_file) if config_file is not None else {}
    if config_file is not None:
        logger.debug(f"Loaded configuration from {config_file}")

    try:
        return AppConfig(**config_data)
    except ValidationError as e:
        logger.warning(f"Error parsing config values: {e.error_count()} error(s). Using defaults.")

    try:
        return AppConfig()
    except ValidationError as e:
        raise ConfigFileError(f"Invalid LIFEPULSE_* environment settings: {e}") from e


@functools.lru_cache(maxsize=1)
def get_config() -> AppConfig:
    """Get the cached configuration singleton.

    Returns:
        Cached AppConfig instance.
    """
    return load_config()


def reset_config() -> None:
    """Clear the configuration cache so the next get_config() reloads."""
    get_config.cache_clear()
