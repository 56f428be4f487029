"""Strict same-article check used to skip re-enrichment of known items."""

from __future__ import annotations

from typing import Iterable

from briefing.clustering.similarity import normalize, score
from briefing.core.config import ClusteringConfig
from briefing.core.logger import get_logger
from briefing.core.models import Article, FeedItem

logger = get_logger(__name__)


class IdentityResolver:
    """Decide whether an incoming feed item is an article we already hold.

    Matches on exact link equality first, then on a strict title score, then
    on one headline containing the other with only a short qualifier added
    (outlets appending "... nach Gipfeltreffen" and the like).

    Args:
        config: Supplies ``identity_threshold`` and ``identity_length_budget``.
    """

    def __init__(self, config: ClusteringConfig) -> None:
        self._threshold = config.identity_threshold
        self._length_budget = config.identity_length_budget

    def is_same_article(self, existing: Article, incoming: FeedItem | Article) -> bool:
        """True if ``incoming`` is the same article as ``existing``."""
        if existing.link and existing.link == incoming.link:
            return True

        incoming_title = (
            incoming.original_title if isinstance(incoming, Article) else incoming.title
        )
        if score(existing.original_title, incoming_title, strict=True) > self._threshold:
            return True
        return self._is_qualified_variant(existing.original_title, incoming_title)

    def _is_qualified_variant(self, title_a: str, title_b: str) -> bool:
        norm_a = normalize(title_a)
        norm_b = normalize(title_b)
        shorter, longer = sorted((norm_a, norm_b), key=len)
        if not shorter:
            return False
        return shorter in longer and len(longer) - len(shorter) < self._length_budget

    def find_existing(
        self,
        articles: Iterable[Article],
        incoming: FeedItem,
    ) -> Article | None:
        """Return the first known article matching ``incoming``, if any."""
        for article in articles:
            if self.is_same_article(article, incoming):
                return article
        return None

    @staticmethod
    def refresh_date(existing: Article, incoming: FeedItem) -> bool:
        """Move ``existing.date`` forward to the re-observed date.

        Returns:
            True if the date changed. Dates never move backwards.
        """
        if incoming.date > existing.date:
            logger.debug(
                "article_date_refreshed",
                article_id=existing.id,
                old=existing.date.isoformat(),
                new=incoming.date.isoformat(),
            )
            existing.date = incoming.date
            return True
        return False
