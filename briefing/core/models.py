"""Domain models and enums for the Daily Briefing engine."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, Field, field_validator


# ============================================================
# Enums
# ============================================================


class ClaudeTask(StrEnum):
    """Claude API task type for model/parameter selection."""

    ENRICH = "enrich"
    GROUPING = "grouping"


class PipelineState(StrEnum):
    """Orchestrator states, visited once each in this order."""

    PRUNE_EXISTING = "prune_existing"
    DEDUP_INCOMING = "dedup_incoming"
    BATCH_GROUP = "batch_group"
    GLUE = "glue"
    FINAL_PRUNE_SORT = "final_prune_sort"
    DONE = "done"


# ============================================================
# Base models
# ============================================================


def _utcnow() -> datetime:
    """Return current UTC time with timezone info."""
    return datetime.now(timezone.utc)


def _as_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC so comparisons never mix kinds."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class BaseEntity(BaseModel):
    """Base model with UUID id."""

    model_config = {"from_attributes": True}

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))

    def to_log_dict(self) -> dict[str, Any]:
        """Convert to a dict suitable for structured logging."""
        return self.model_dump(exclude_none=True, exclude={"related"})


# ============================================================
# Domain models
# ============================================================


class FeedItem(BaseModel):
    """A freshly polled feed entry that has not been accepted yet."""

    title: str
    link: str = ""
    date: datetime = Field(default_factory=_utcnow)
    body: str = ""
    img: str | None = None
    source: str = ""

    @field_validator("date")
    @classmethod
    def _date_is_aware(cls, value: datetime) -> datetime:
        return _as_utc(value)


class Article(BaseEntity):
    """One news item, either a top-level story or a variant nested under one.

    ``original_title`` is the untouched source headline and is the only
    title similarity checks look at; ``title`` is the display title, which
    the enrichment step may rewrite.
    """

    original_title: str
    title: str = ""
    link: str = ""
    date: datetime = Field(default_factory=_utcnow)
    img: str | None = None
    source: str = ""
    summary: str = ""
    bullets: list[str] = Field(default_factory=list)
    related: list[Article] = Field(default_factory=list)

    @field_validator("date")
    @classmethod
    def _date_is_aware(cls, value: datetime) -> datetime:
        return _as_utc(value)

    @property
    def display_title(self) -> str:
        """Rewritten title when present, else the source headline."""
        return self.title or self.original_title

    @property
    def has_image(self) -> bool:
        return bool(self.img)

    def detached(self) -> Article:
        """Copy of this article with an empty ``related`` list."""
        return self.model_copy(update={"related": []})


class EnrichmentResult(BaseModel):
    """Output of the enrichment capability for a single article."""

    title: str
    summary: str = ""
    bullets: list[str] = Field(default_factory=list)
    degraded: bool = False
