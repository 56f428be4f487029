"""Abstract base class for feed collectors."""

from __future__ import annotations

from abc import ABC, abstractmethod

from briefing.core.config import AppConfig, get_config
from briefing.core.logger import get_logger
from briefing.core.models import FeedItem


class BaseCollector(ABC):
    """Base class for collectors that produce candidate feed items.

    Collectors stand outside the clustering engine: they only have to yield
    ``FeedItem`` values in feed order.
    """

    def __init__(self, config: AppConfig | None = None) -> None:
        self._config = config or get_config()
        self._logger = get_logger(type(self).__name__)

    @abstractmethod
    def collect(self) -> list[FeedItem]:
        """Collect candidate items from all enabled sources.

        Returns:
            Feed items in source order, then feed order.
        """
