"""Feed collection.

Usage::

    from briefing.collectors import RSSFeedCollector
    items = RSSFeedCollector().collect()
"""

from briefing.collectors.base import BaseCollector
from briefing.collectors.rss_collector import RSSFeedCollector

__all__ = ["BaseCollector", "RSSFeedCollector"]
