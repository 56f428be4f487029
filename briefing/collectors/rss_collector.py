"""RSS/Atom feed collector."""

from __future__ import annotations

import re
import time
from datetime import datetime, timezone
from typing import Any, Callable

import feedparser
import requests
from bs4 import BeautifulSoup

from briefing.collectors.base import BaseCollector
from briefing.core.config import AppConfig, CollectionSettings, FeedSource
from briefing.core.exceptions import CollectionError
from briefing.core.models import FeedItem
from briefing.core.retry import build_retrying


class RSSFeedCollector(BaseCollector):
    """Poll configured RSS feeds and convert entries to ``FeedItem``.

    A source that cannot be fetched is logged and skipped; the run goes on
    with the remaining sources.
    """

    def __init__(
        self,
        config: AppConfig | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        super().__init__(config)
        self._sources: list[FeedSource] = self._config.feeds.sources
        self._settings: CollectionSettings = self._config.feeds.collection
        self._sleep = sleep
        self._retrying = build_retrying(
            self._config.retry,
            (requests.RequestException, CollectionError),
            sleep=sleep,
        )

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def collect(self) -> list[FeedItem]:
        """Collect items from all enabled sources.

        Returns:
            Feed items, sources in configured order.
        """
        items: list[FeedItem] = []
        enabled = [s for s in self._sources if s.enabled]
        for position, source in enumerate(enabled):
            if position:
                self._sleep(self._settings.request_delay_sec)
            items.extend(self._fetch_source(source))

        self._logger.info(
            "feed_collection_complete",
            sources=len(enabled),
            total_items=len(items),
        )
        return items

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _fetch_source(self, source: FeedSource) -> list[FeedItem]:
        """Fetch and parse a single source (graceful on failure)."""
        try:
            feed = self._retrying(self._fetch_feed, source.url)
        except (requests.RequestException, CollectionError) as e:
            self._logger.warning(
                "source_fetch_failed",
                source=source.name,
                error=str(e),
            )
            return []

        entries = feed.get("entries", [])[: self._settings.max_items_per_source]
        items = [
            item
            for item in (self.parse_entry(entry, source.name) for entry in entries)
            if item is not None
        ]
        self._logger.info("source_fetched", source=source.name, count=len(items))
        return items

    def _fetch_feed(self, url: str) -> dict[str, Any]:
        """Fetch and parse one feed URL.

        Raises:
            CollectionError: If the payload is not a parseable feed.
        """
        response = requests.get(
            url,
            timeout=self._settings.request_timeout_sec,
            headers={"User-Agent": self._settings.user_agent},
        )
        response.raise_for_status()
        feed = feedparser.parse(response.content)
        if feed.bozo and not feed.entries:
            raise CollectionError(
                f"Feed parse error for {url}",
                {"bozo_exception": str(feed.bozo_exception)},
            )
        return feed

    @classmethod
    def parse_entry(cls, entry: Any, source_name: str) -> FeedItem | None:
        """Convert a feedparser entry into a FeedItem.

        Returns:
            FeedItem, or None if the entry lacks a title.
        """
        title = cls._extract_text(entry.get("title", ""))
        if not title:
            return None

        body = ""
        if entry.get("content"):
            body = entry["content"][0].get("value", "")
        if not body:
            body = entry.get("summary", "")

        return FeedItem(
            title=title,
            link=entry.get("link", ""),
            date=cls._parse_date(entry),
            body=cls._extract_text(body),
            img=cls._extract_image(entry),
            source=source_name,
        )

    @staticmethod
    def _extract_text(html: str) -> str:
        """Strip HTML tags and normalize whitespace."""
        if not html:
            return ""
        soup = BeautifulSoup(html, "html.parser")
        text = soup.get_text(separator=" ", strip=True)
        return re.sub(r"\s+", " ", text).strip()

    @staticmethod
    def _extract_image(entry: Any) -> str | None:
        """First image URL from media tags, enclosures or inline HTML."""
        for key in ("media_content", "media_thumbnail"):
            for media in entry.get(key) or []:
                url = media.get("url")
                if url and media.get("medium", "image") == "image":
                    return url
        for link in entry.get("links") or []:
            if link.get("rel") == "enclosure" and str(link.get("type", "")).startswith("image/"):
                return link.get("href")
        html = entry.get("summary", "")
        if html and "<img" in html:
            img = BeautifulSoup(html, "html.parser").find("img")
            if img is not None and img.get("src"):
                return img["src"]
        return None

    @staticmethod
    def _parse_date(entry: Any) -> datetime:
        """Published (or updated) date as aware UTC; now when absent."""
        for key in ("published_parsed", "updated_parsed"):
            parsed = entry.get(key)
            if parsed:
                try:
                    return datetime(*parsed[:6], tzinfo=timezone.utc)
                except (ValueError, TypeError):
                    continue
        return datetime.now(timezone.utc)
