"""Shared fixtures for the clustering engine tests."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import pytest

from briefing.core.claude_client import ClaudeResponse
from briefing.core.config import (
    AppConfig,
    ClusteringConfig,
    FeedsConfig,
    FeedSource,
    RetryConfig,
)
from briefing.core.models import Article, FeedItem

NOW = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)


def make_article(
    title: str,
    *,
    hours_ago: float = 1,
    img: str | None = None,
    link: str | None = None,
    id: str | None = None,
    related: list[Article] | None = None,
) -> Article:
    fields = {
        "original_title": title,
        "title": title,
        "link": link if link is not None else f"https://news.example/{abs(hash(title))}",
        "date": NOW - timedelta(hours=hours_ago),
        "img": img,
        "related": related or [],
    }
    if id is not None:
        fields["id"] = id
    return Article(**fields)


def make_item(
    title: str,
    *,
    hours_ago: float = 0.5,
    img: str | None = None,
    link: str | None = None,
) -> FeedItem:
    return FeedItem(
        title=title,
        link=link if link is not None else f"https://feed.example/{abs(hash(title))}",
        date=NOW - timedelta(hours=hours_ago),
        img=img,
        source="Testquelle",
    )


def claude_reply(content: str) -> ClaudeResponse:
    return ClaudeResponse(
        content=content,
        model="test-model",
        input_tokens=10,
        output_tokens=5,
        stop_reason="end_turn",
    )


@pytest.fixture
def clustering_config() -> ClusteringConfig:
    return ClusteringConfig(batch_size=30, retention_days=4)


@pytest.fixture
def mock_client() -> MagicMock:
    client = MagicMock()
    client.generate.return_value = claude_reply("[]")
    return client


@pytest.fixture
def app_config() -> AppConfig:
    config = AppConfig(_env_file=None)
    config.retry = RetryConfig(max_attempts=2, wait_min_sec=0, wait_max_sec=0)
    config.feeds = FeedsConfig(
        sources=[
            FeedSource(name="Eins", url="https://eins.example/rss"),
            FeedSource(name="Aus", url="https://aus.example/rss", enabled=False),
            FeedSource(name="Zwei", url="https://zwei.example/rss"),
        ],
    )
    return config
