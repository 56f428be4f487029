"""Article enrichment through Claude.

Usage::

    from briefing.enrichment import ArticleEnricher
    result = ArticleEnricher(client).enrich(title, body, source)
"""

from briefing.enrichment.enricher import ArticleEnricher

__all__ = ["ArticleEnricher"]
