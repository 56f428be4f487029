"""JSON file persistence for the working set of article trees."""

from __future__ import annotations

import os
import tempfile
from pathlib import Path

from pydantic import TypeAdapter, ValidationError

from briefing.core.exceptions import StorageError
from briefing.core.logger import get_logger
from briefing.core.models import Article

logger = get_logger(__name__)

_ARTICLES = TypeAdapter(list[Article])


class ArticleStore:
    """Load and save the array of article trees as one JSON document.

    Example::

        store = ArticleStore(Path("data/news.json"))
        clusters = store.load()
        store.save(clusters)
    """

    def __init__(self, path: Path) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> list[Article]:
        """Read the persisted working set.

        Returns:
            Article trees; an empty list if the file does not exist yet.

        Raises:
            StorageError: If the file cannot be read or is not a valid
                array of articles.
        """
        if not self._path.exists():
            logger.info("article_store_empty", path=str(self._path))
            return []
        try:
            raw = self._path.read_bytes()
            articles = _ARTICLES.validate_json(raw)
        except OSError as e:
            raise StorageError(
                f"Cannot read working set: {self._path}",
                {"error": str(e)},
            ) from e
        except ValidationError as e:
            raise StorageError(
                f"Corrupt working set: {self._path}",
                {"errors": e.error_count()},
            ) from e
        logger.info("article_store_loaded", path=str(self._path), clusters=len(articles))
        return articles

    def save(self, clusters: list[Article]) -> None:
        """Write the working set atomically (temp file, then replace).

        Raises:
            StorageError: If the file cannot be written.
        """
        payload = _ARTICLES.dump_json(clusters, indent=2)
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self._path.parent,
                prefix=f".{self._path.name}.",
                suffix=".tmp",
            )
            try:
                with os.fdopen(fd, "wb") as f:
                    f.write(payload)
                os.replace(tmp_name, self._path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            raise StorageError(
                f"Cannot write working set: {self._path}",
                {"error": str(e)},
            ) from e
        logger.info("article_store_saved", path=str(self._path), clusters=len(clusters))
