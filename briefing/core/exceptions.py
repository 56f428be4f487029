"""Exception hierarchy for the briefing engine.

Only the workflow layer lets these abort a run. Inside the clustering core,
``GroupingError`` and ``EnrichmentError`` are raised by reply parsers and
caught right away by the adapter that owns the fallback.
"""

from typing import Any


class BriefingError(Exception):
    """Base of every error raised by this package.

    Args:
        message: Human-readable error description.
        details: Structured context, rendered after the message.
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def __str__(self) -> str:
        if not self.details:
            return self.message
        return f"{self.message} | details={self.details}"


class ConfigError(BriefingError):
    """Missing or invalid YAML, bad setting values, missing prompt template."""


class APIError(BriefingError):
    """An external service call failed."""


class ClaudeAPIError(APIError):
    """Claude call failed after retries, or was rejected outright."""


class RateLimitError(ClaudeAPIError):
    """Claude is still rate limiting after the last retry."""


class CollectionError(BriefingError):
    """A feed could not be fetched or parsed."""


class EnrichmentError(BriefingError):
    """Enrichment reply is not a usable JSON object."""


class GroupingError(BriefingError):
    """Grouping reply is not an array of integer arrays."""


class StorageError(BriefingError):
    """The persisted working set cannot be read or written."""


class WorkflowError(BriefingError):
    """A critical workflow step failed."""
