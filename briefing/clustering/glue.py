"""Cross-batch glue: merge clusters built in separate batches."""

from __future__ import annotations

from briefing.clustering.similarity import TopicMatcher
from briefing.clustering.tree import attach
from briefing.core.logger import get_logger
from briefing.core.models import Article

logger = get_logger(__name__)


class ClusterGlue:
    """Fold newly built clusters into the running result of a run.

    A story split across two batches is only seen together here. Each new
    cluster's parent headline is compared with the parents that were
    running before this batch, in order; the first topic-related one
    absorbs it. Clusters of the same batch are never compared with each
    other. Decisions are final.

    Args:
        matcher: Topic relatedness test.
    """

    def __init__(self, matcher: TopicMatcher) -> None:
        self._matcher = matcher

    def glue(self, running: list[Article], new: list[Article]) -> list[Article]:
        """Merge ``new`` clusters into ``running``.

        Returns:
            The updated running list; ``running`` itself is not modified.
        """
        result = list(running)
        # Promotion replaces in place, so these positions stay valid.
        limit = len(running)
        for cluster in new:
            position = self._find_related(result[:limit], cluster)
            if position is None:
                result.append(cluster)
                continue

            existing = result[position]
            if not existing.has_image and cluster.has_image:
                # The new cluster has the picture, so it leads.
                merged = attach(cluster, [existing])
            else:
                merged = attach(existing, [cluster])
            result[position] = merged
            logger.info(
                "cluster_glued",
                parent_id=merged.id,
                absorbed_id=cluster.id if merged.id == existing.id else existing.id,
                related=len(merged.related),
            )
        return result

    def _find_related(self, running: list[Article], cluster: Article) -> int | None:
        for position, existing in enumerate(running):
            if self._matcher.is_related(existing.original_title, cluster.original_title):
                return position
        return None
