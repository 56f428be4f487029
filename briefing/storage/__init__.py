"""Working set persistence.

Usage::

    from briefing.storage import ArticleStore
    clusters = ArticleStore(path).load()
"""

from briefing.storage.article_store import ArticleStore

__all__ = ["ArticleStore"]
