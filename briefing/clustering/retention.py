"""Retention horizon: flatten article trees and drop expired articles."""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Iterable

from briefing.core.logger import get_logger
from briefing.core.models import Article

logger = get_logger(__name__)


def flatten(clusters: Iterable[Article]) -> list[Article]:
    """Turn article trees into one flat list of independent articles.

    Each parent is followed by its related articles (recursively, in
    order). Every returned article has an empty ``related`` list and ids
    appear once; the first occurrence wins.
    """
    flat: list[Article] = []
    seen: set[str] = set()

    def _visit(article: Article) -> None:
        if article.id in seen:
            logger.warning("duplicate_article_id_dropped", article_id=article.id)
        else:
            seen.add(article.id)
            flat.append(article.detached())
        for child in article.related:
            _visit(child)

    for cluster in clusters:
        _visit(cluster)
    return flat


def prune(articles: Iterable[Article], now: datetime, window: timedelta) -> list[Article]:
    """Keep an article iff ``now - article.date < window``.

    Works on whatever it is given: pass the flattened list so that parents
    and children survive or expire independently.
    """
    kept: list[Article] = []
    for article in articles:
        if now - article.date < window:
            kept.append(article)
        else:
            logger.debug(
                "article_pruned",
                article_id=article.id,
                date=article.date.isoformat(),
            )
    return kept
