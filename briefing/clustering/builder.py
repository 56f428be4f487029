"""Turn one batch partition into parent/related article clusters."""

from __future__ import annotations

from briefing.clustering.tree import attach, pick_parent
from briefing.core.logger import get_logger
from briefing.core.models import Article

logger = get_logger(__name__)


class ClusterBuilder:
    """Build clusters for one batch from an oracle partition.

    The partition is untrusted: out-of-range indices are dropped, an index
    already used by an earlier group is skipped (first assignment wins) and
    indices no group mentions become trailing singleton clusters.
    """

    def build(self, batch_items: list[Article], partition: list[list[int]]) -> list[Article]:
        """Build one cluster per non-empty group.

        Args:
            batch_items: Articles of the batch, in batch order.
            partition: Groups of indices into ``batch_items``.

        Returns:
            Clusters in group order; each parent is the first member (batch
            order) carrying an image, or the first member if none does.
        """
        n = len(batch_items)
        consumed: set[int] = set()
        clusters: list[Article] = []

        for group in partition:
            indices: list[int] = []
            for index in group:
                if not isinstance(index, int) or not 0 <= index < n:
                    logger.warning("group_index_out_of_range", index=index, batch_size=n)
                    continue
                if index in consumed:
                    logger.warning("group_index_reused", index=index)
                    continue
                consumed.add(index)
                indices.append(index)
            if indices:
                clusters.append(self._make_cluster([batch_items[i] for i in sorted(indices)]))

        for index in range(n):
            if index not in consumed:
                clusters.append(self._make_cluster([batch_items[index]]))
        return clusters

    @staticmethod
    def _make_cluster(members: list[Article]) -> Article:
        parent_pos = pick_parent(members)
        others = members[:parent_pos] + members[parent_pos + 1:]
        return attach(members[parent_pos].detached(), others)
