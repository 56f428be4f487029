"""Application configuration using pydantic-settings with YAML integration."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from briefing.core.exceptions import ConfigError
from briefing.core.logger import get_logger

logger = get_logger(__name__)

# Project root directory (briefing/core/config.py -> briefing/core -> briefing -> root)
PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
CONFIG_DIR = PROJECT_ROOT / "config"

# Batches above this size make the grouping prompt too long to answer reliably.
MAX_BATCH_SIZE = 60


def _load_yaml(filename: str) -> dict[str, Any]:
    """Load a YAML file from the config directory.

    Args:
        filename: Name of the YAML file to load.

    Returns:
        Parsed YAML content as a dictionary.

    Raises:
        ConfigError: If the file cannot be loaded or parsed.
    """
    filepath = CONFIG_DIR / filename
    try:
        with open(filepath, encoding="utf-8") as f:
            data = yaml.safe_load(f)
        return data or {}
    except FileNotFoundError as e:
        raise ConfigError(
            f"Config file not found: {filepath}",
            {"file": filename},
        ) from e
    except yaml.YAMLError as e:
        raise ConfigError(
            f"Invalid YAML: {filepath}",
            {"file": filename, "error": str(e)},
        ) from e


def _resolve(path: str) -> Path:
    """Relative paths in settings are relative to the project root."""
    resolved = Path(path)
    return resolved if resolved.is_absolute() else PROJECT_ROOT / resolved


# ============================================================
# Sub-config models (from settings.yaml)
# ============================================================


class AppInfo(BaseModel):
    """Application metadata."""

    name: str = "Daily Briefing"
    version: str = "0.1.0"
    env: str = "development"


class ClaudeModelConfig(BaseModel):
    """Claude model selection per task."""

    default_model: str = "claude-haiku-4-5"
    models: dict[str, str] = Field(default_factory=lambda: {
        "enrich": "claude-haiku-4-5",
        "grouping": "claude-haiku-4-5",
    })
    max_tokens: dict[str, int] = Field(default_factory=lambda: {
        "enrich": 1024,
        "grouping": 2048,
    })
    temperature: dict[str, float] = Field(default_factory=lambda: {
        "enrich": 0.3,
        "grouping": 0.0,
    })
    timeout_sec: float = 60.0


class RetryConfig(BaseModel):
    """Bounded retry policy shared by every external call."""

    max_attempts: int = 3
    wait_min_sec: float = 1.0
    wait_max_sec: float = 30.0
    exponential: bool = True


class ClusteringConfig(BaseModel):
    """Thresholds and sizes for dedup and topic clustering.

    The two thresholds were tuned on German headlines; other languages
    need their own values.
    """

    topic_threshold: float = 0.35
    identity_threshold: float = 0.85
    identity_length_budget: int = 10
    min_topic_tokens: int = 3
    batch_size: int = 30
    retention_days: float = 4.0

    @field_validator("batch_size")
    @classmethod
    def _batch_size_bounded(cls, value: int) -> int:
        if not 1 <= value <= MAX_BATCH_SIZE:
            raise ValueError(f"batch_size must be within 1..{MAX_BATCH_SIZE}")
        return value


class PipelineConfig(BaseModel):
    """Orchestrator pacing and persistence settings."""

    call_delay_sec: float = 2.0
    data_file: str = "data/news.json"


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = "INFO"
    format: str = "json"
    file: str | None = "logs/briefing.log"


class ScheduleConfig(BaseModel):
    """Daemon schedule configuration."""

    timezone: str = "Europe/Berlin"
    interval_minutes: int = 30


# ============================================================
# Feed sources config (from feeds.yaml)
# ============================================================


class FeedSource(BaseModel):
    """Single feed definition."""

    name: str
    url: str
    enabled: bool = True


class CollectionSettings(BaseModel):
    """Feed polling settings."""

    max_items_per_source: int = 20
    request_timeout_sec: int = 15
    request_delay_sec: float = 1.0
    user_agent: str = "DailyBriefingBot/1.0"


class FeedsConfig(BaseModel):
    """Feed sources configuration."""

    sources: list[FeedSource] = Field(default_factory=list)
    collection: CollectionSettings = Field(default_factory=CollectionSettings)


# ============================================================
# Root configuration
# ============================================================


class AppConfig(BaseSettings):
    """Root application configuration.

    Loads secrets from .env file (environment variables) and
    structured settings from YAML config files.
    """

    model_config = SettingsConfigDict(
        env_file=str(PROJECT_ROOT / ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # --- Environment variables (from .env) ---
    anthropic_api_key: str = ""
    app_env: str = "development"
    log_level: str = ""

    # --- YAML-loaded sub-configs ---
    app: AppInfo = Field(default_factory=AppInfo)
    claude: ClaudeModelConfig = Field(default_factory=ClaudeModelConfig)
    retry: RetryConfig = Field(default_factory=RetryConfig)
    clustering: ClusteringConfig = Field(default_factory=ClusteringConfig)
    pipeline: PipelineConfig = Field(default_factory=PipelineConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    schedule: ScheduleConfig = Field(default_factory=ScheduleConfig)
    feeds: FeedsConfig = Field(default_factory=FeedsConfig)

    def model_post_init(self, __context: Any) -> None:
        """Load YAML configurations after env vars are initialized."""
        try:
            self._load_yaml_configs()
        except ValidationError as e:
            raise ConfigError(
                "Invalid configuration values",
                {"errors": e.errors(include_url=False)},
            ) from e
        if self.log_level:
            self.logging.level = self.log_level

    def _load_yaml_configs(self) -> None:
        """Load all YAML configuration files into sub-config models."""
        settings = _load_yaml("settings.yaml")
        if "app" in settings:
            self.app = AppInfo(**settings["app"])
        if "claude" in settings:
            self.claude = ClaudeModelConfig(**settings["claude"])
        if "retry" in settings:
            self.retry = RetryConfig(**settings["retry"])
        if "clustering" in settings:
            self.clustering = ClusteringConfig(**settings["clustering"])
        if "pipeline" in settings:
            self.pipeline = PipelineConfig(**settings["pipeline"])
        if "logging" in settings:
            self.logging = LoggingConfig(**settings["logging"])
        if "schedule" in settings:
            self.schedule = ScheduleConfig(**settings["schedule"])

        feeds_data = _load_yaml("feeds.yaml")
        self.feeds = FeedsConfig(**feeds_data)

    @property
    def data_path(self) -> Path:
        """Absolute path of the persisted working set."""
        return _resolve(self.pipeline.data_file)

    @property
    def log_path(self) -> Path | None:
        """Absolute path of the log file, or None when file logging is off."""
        if not self.logging.file:
            return None
        return _resolve(self.logging.file)


@lru_cache(maxsize=1)
def get_config() -> AppConfig:
    """Get the singleton application configuration.

    Returns:
        The AppConfig singleton instance.

    Note:
        Call ``get_config.cache_clear()`` to reload configuration in tests.
    """
    config = AppConfig()
    logger.info(
        "configuration_loaded",
        app=config.app.name,
        env=config.app.env,
        sources=len(config.feeds.sources),
    )
    return config
