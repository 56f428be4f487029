"""Core infrastructure shared by the clustering engine and workflows.

Usage::

    from briefing.core import get_config, setup_logging, get_logger, ClaudeClient
    from briefing.core.models import Article, FeedItem
"""

from briefing.core.claude_client import ClaudeClient, ClaudeResponse, CompletionClient
from briefing.core.config import (
    AppConfig,
    ClaudeModelConfig,
    ClusteringConfig,
    FeedsConfig,
    LoggingConfig,
    PipelineConfig,
    RetryConfig,
    ScheduleConfig,
    get_config,
)
from briefing.core.exceptions import (
    APIError,
    BriefingError,
    ClaudeAPIError,
    CollectionError,
    ConfigError,
    EnrichmentError,
    GroupingError,
    RateLimitError,
    StorageError,
    WorkflowError,
)
from briefing.core.logger import bind_run_context, get_logger, setup_logging
from briefing.core.models import (
    Article,
    BaseEntity,
    ClaudeTask,
    EnrichmentResult,
    FeedItem,
    PipelineState,
)

__all__ = [
    # config
    "AppConfig",
    "ClaudeModelConfig",
    "ClusteringConfig",
    "FeedsConfig",
    "LoggingConfig",
    "PipelineConfig",
    "RetryConfig",
    "ScheduleConfig",
    "get_config",
    # logger
    "setup_logging",
    "get_logger",
    "bind_run_context",
    # exceptions
    "BriefingError",
    "ConfigError",
    "APIError",
    "ClaudeAPIError",
    "RateLimitError",
    "CollectionError",
    "EnrichmentError",
    "GroupingError",
    "StorageError",
    "WorkflowError",
    # models
    "Article",
    "BaseEntity",
    "ClaudeTask",
    "EnrichmentResult",
    "FeedItem",
    "PipelineState",
    # claude client
    "ClaudeClient",
    "ClaudeResponse",
    "CompletionClient",
]
