"""Dedup + topic-clustering pipeline orchestrator.

One invocation is a single linear pass::

    PRUNE_EXISTING -> DEDUP_INCOMING -> (BATCH_GROUP -> GLUE) per batch
        -> FINAL_PRUNE_SORT -> DONE

External calls (enrichment, grouping) are made one at a time with a fixed
delay between them. None of their failures abort the run.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Iterator, Sequence, TypeVar

from briefing.clustering.builder import ClusterBuilder
from briefing.clustering.glue import ClusterGlue
from briefing.clustering.identity import IdentityResolver
from briefing.clustering.oracle import BatchItem, GroupingOracle
from briefing.clustering.retention import flatten, prune
from briefing.clustering.similarity import TopicMatcher
from briefing.clustering.tree import attach, pick_parent
from briefing.core.config import ClusteringConfig
from briefing.core.logger import get_logger
from briefing.core.models import Article, EnrichmentResult, FeedItem, PipelineState

logger = get_logger(__name__)

T = TypeVar("T")

Enrich = Callable[[str, str, str], EnrichmentResult]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def split_batches(items: Sequence[T], size: int) -> Iterator[list[T]]:
    """Consecutive slices of at most ``size`` items, in order."""
    for start in range(0, len(items), size):
        yield list(items[start: start + size])


@dataclass
class RunLog:
    """Counters and events of one pipeline run, returned to the caller.

    Attributes:
        states: Pipeline states in the order they were entered.
        existing: Articles in the persisted working set (flattened).
        expired: Articles dropped by retention pruning (both passes and
            incoming items already outside the horizon).
        incoming: Feed items offered to the run.
        duplicates: Incoming items matched to a known article.
        enriched: Articles accepted and enriched.
        enrichment_failures: Accepted articles that got the fallback.
        batches: Grouping batches processed.
        oracle_fallbacks: Batches that got the singleton partition.
        glued: Clusters merged into an earlier cluster by the glue step.
        clusters: Top-level clusters in the final output.
        events: Per-event detail dicts.
    """

    states: list[str] = field(default_factory=list)
    existing: int = 0
    expired: int = 0
    incoming: int = 0
    duplicates: int = 0
    enriched: int = 0
    enrichment_failures: int = 0
    batches: int = 0
    oracle_fallbacks: int = 0
    glued: int = 0
    clusters: int = 0
    events: list[dict[str, Any]] = field(default_factory=list)

    def enter(self, state: PipelineState) -> None:
        self.states.append(state.value)
        logger.debug("pipeline_state", state=state.value)

    def record(self, event: str, **fields: Any) -> None:
        self.events.append({"event": event, **fields})

    def summary(self) -> dict[str, int]:
        return {
            "existing": self.existing,
            "expired": self.expired,
            "incoming": self.incoming,
            "duplicates": self.duplicates,
            "enriched": self.enriched,
            "enrichment_failures": self.enrichment_failures,
            "batches": self.batches,
            "oracle_fallbacks": self.oracle_fallbacks,
            "glued": self.glued,
            "clusters": self.clusters,
        }


@dataclass
class PipelineResult:
    """Final clusters (sorted by parent date, newest first) and the run log."""

    clusters: list[Article]
    run_log: RunLog


class _Pacer:
    """Enforces the fixed delay between consecutive external calls."""

    def __init__(self, delay_sec: float, sleep: Callable[[float], None]) -> None:
        self._delay = delay_sec
        self._sleep = sleep
        self._calls = 0

    def before_call(self) -> None:
        if self._calls and self._delay > 0:
            self._sleep(self._delay)
        self._calls += 1


class ClusteringPipeline:
    """Run dedup, batch grouping, glue and retention over the working set.

    Args:
        config: Thresholds, batch size and retention window.
        oracle: Batch grouping oracle adapter.
        enrich: ``(title, body, source) -> EnrichmentResult``; must not
            raise (``ArticleEnricher.enrich`` degrades on its own).
        call_delay_sec: Pause between two external calls.
        sleep: Sleep function, replaced in tests.
        clock: Returns the current timezone-aware time.
    """

    def __init__(
        self,
        config: ClusteringConfig,
        oracle: GroupingOracle,
        enrich: Enrich,
        call_delay_sec: float = 0.0,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._config = config
        self._window = timedelta(days=config.retention_days)
        self._oracle = oracle
        self._enrich = enrich
        self._resolver = IdentityResolver(config)
        self._builder = ClusterBuilder()
        self._glue = ClusterGlue(TopicMatcher(config))
        self._call_delay_sec = call_delay_sec
        self._sleep = sleep
        self._clock = clock

    def run(self, existing: list[Article], incoming: list[FeedItem]) -> PipelineResult:
        """Run one full pass.

        Args:
            existing: Persisted working set (trees or flat, both accepted).
            incoming: Feed items observed this run, in feed order.

        Returns:
            PipelineResult with the new working set as article trees.
        """
        run_log = RunLog(incoming=len(incoming))
        pacer = _Pacer(self._call_delay_sec, self._sleep)

        run_log.enter(PipelineState.PRUNE_EXISTING)
        flat = flatten(existing)
        run_log.existing = len(flat)
        flat = self._prune_flat(flat, run_log)

        run_log.enter(PipelineState.DEDUP_INCOMING)
        for item in incoming:
            self._accept(item, flat, pacer, run_log)

        clusters: list[Article] = []
        for seq, batch in enumerate(split_batches(flat, self._config.batch_size), start=1):
            run_log.enter(PipelineState.BATCH_GROUP)
            built = self._group(batch, seq, pacer, run_log)
            run_log.enter(PipelineState.GLUE)
            before = len(clusters) + len(built)
            clusters = self._glue.glue(clusters, built)
            run_log.glued += before - len(clusters)

        run_log.enter(PipelineState.FINAL_PRUNE_SORT)
        clusters = self._final_prune(clusters, run_log)
        clusters.sort(key=lambda c: c.date, reverse=True)
        run_log.clusters = len(clusters)

        run_log.enter(PipelineState.DONE)
        logger.info("pipeline_completed", **run_log.summary())
        return PipelineResult(clusters=clusters, run_log=run_log)

    # ------------------------------------------------------------------
    # States
    # ------------------------------------------------------------------

    def _prune_flat(self, flat: list[Article], run_log: RunLog) -> list[Article]:
        kept = prune(flat, self._clock(), self._window)
        run_log.expired += len(flat) - len(kept)
        return kept

    def _accept(
        self,
        item: FeedItem,
        flat: list[Article],
        pacer: _Pacer,
        run_log: RunLog,
    ) -> None:
        """Refresh a known article or enrich and append a new one."""
        known = self._resolver.find_existing(flat, item)
        if known is not None:
            self._resolver.refresh_date(known, item)
            run_log.duplicates += 1
            run_log.record("duplicate", article_id=known.id, link=item.link)
            return

        if self._clock() - item.date >= self._window:
            run_log.expired += 1
            run_log.record("incoming_expired", link=item.link)
            return

        pacer.before_call()
        result = self._enrich(item.title, item.body, item.source)

        # The list may only be touched after the call returns; look the
        # item up again rather than trusting anything computed before it.
        known = self._resolver.find_existing(flat, item)
        if known is not None:
            self._resolver.refresh_date(known, item)
            run_log.duplicates += 1
            return

        article = Article(
            original_title=item.title,
            title=result.title or item.title,
            link=item.link,
            date=item.date,
            img=item.img,
            source=item.source,
            summary=result.summary,
            bullets=result.bullets,
        )
        flat.append(article)
        run_log.enriched += 1
        if result.degraded:
            run_log.enrichment_failures += 1
        run_log.record("accepted", article_id=article.id, degraded=result.degraded)

    def _group(
        self,
        batch: list[Article],
        seq: int,
        pacer: _Pacer,
        run_log: RunLog,
    ) -> list[Article]:
        items = [BatchItem(index, article.display_title) for index, article in enumerate(batch)]
        if len(items) > 1:
            pacer.before_call()
        grouping = self._oracle.group(items, seq)
        run_log.batches += 1
        if grouping.degraded:
            run_log.oracle_fallbacks += 1
            run_log.record("oracle_fallback", batch=seq, size=len(batch))
        return self._builder.build(batch, grouping.partition)

    def _final_prune(self, clusters: list[Article], run_log: RunLog) -> list[Article]:
        """Drop expired members of every tree, re-electing lost parents."""
        now = self._clock()
        result: list[Article] = []
        for cluster in clusters:
            members = [cluster.detached(), *cluster.related]
            kept = prune(members, now, self._window)
            run_log.expired += len(members) - len(kept)
            if not kept:
                continue
            if kept[0].id == cluster.id:
                result.append(attach(kept[0], kept[1:]))
                continue
            parent_pos = pick_parent(kept)
            result.append(attach(kept[parent_pos], kept[:parent_pos] + kept[parent_pos + 1:]))
        return result
