"""Dedup and topic-clustering engine.

Usage::

    from briefing.clustering import ClusteringPipeline, GroupingOracle
    pipeline = ClusteringPipeline(config.clustering, GroupingOracle(client), enricher.enrich)
    result = pipeline.run(existing_articles, feed_items)
"""

from briefing.clustering.builder import ClusterBuilder
from briefing.clustering.glue import ClusterGlue
from briefing.clustering.identity import IdentityResolver
from briefing.clustering.oracle import BatchItem, GroupingOracle, GroupingResult
from briefing.clustering.pipeline import (
    ClusteringPipeline,
    PipelineResult,
    RunLog,
    split_batches,
)
from briefing.clustering.retention import flatten, prune
from briefing.clustering.similarity import TopicMatcher, score, token_count

__all__ = [
    "BatchItem",
    "ClusterBuilder",
    "ClusterGlue",
    "ClusteringPipeline",
    "GroupingOracle",
    "GroupingResult",
    "IdentityResolver",
    "PipelineResult",
    "RunLog",
    "TopicMatcher",
    "flatten",
    "prune",
    "score",
    "split_batches",
    "token_count",
]
