"""Briefing workflow: load working set, poll feeds, cluster, save."""

from __future__ import annotations

import time
from typing import Callable

from briefing.clustering.oracle import GroupingOracle
from briefing.clustering.pipeline import ClusteringPipeline, PipelineResult
from briefing.collectors.base import BaseCollector
from briefing.collectors.rss_collector import RSSFeedCollector
from briefing.core.claude_client import ClaudeClient, CompletionClient
from briefing.core.config import AppConfig
from briefing.core.models import Article, FeedItem
from briefing.enrichment.enricher import ArticleEnricher
from briefing.storage.article_store import ArticleStore
from briefing.workflows.base import BaseWorkflow, WorkflowResult


class BriefingWorkflow(BaseWorkflow):
    """One scheduled briefing pass.

    Steps:
        1. load_working_set (critical): previously persisted article trees
        2. collect_feeds (non-critical): fresh feed items; none on failure
        3. cluster (critical): the clustering pipeline
        4. save_working_set (critical): written once, at the end

    Args:
        config: Application config (defaults to ``get_config()``).
        client: Completion client shared by enrichment and grouping.
        collector: Feed collector.
        store: Working set store.
        sleep: Sleep function for the inter-call delay.
    """

    name = "briefing"

    def __init__(
        self,
        config: AppConfig | None = None,
        client: CompletionClient | None = None,
        collector: BaseCollector | None = None,
        store: ArticleStore | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        super().__init__(config)
        client = client or ClaudeClient(self._config)
        self._collector = collector or RSSFeedCollector(self._config)
        self._store = store or ArticleStore(self._config.data_path)
        self._pipeline = ClusteringPipeline(
            self._config.clustering,
            oracle=GroupingOracle(client),
            enrich=ArticleEnricher(client).enrich,
            call_delay_sec=self._config.pipeline.call_delay_sec,
            sleep=sleep,
        )

    def execute(self) -> WorkflowResult:
        """Execute the briefing steps.

        Returns:
            WorkflowResult with collected metrics and the run summary.
        """
        result = WorkflowResult(workflow_name=self.name)

        existing: list[Article] = self._run_step(
            "load_working_set",
            self._store.load,
            critical=True,
        ) or []

        items: list[FeedItem] = self._run_step(
            "collect_feeds",
            self._collector.collect,
            critical=False,
        ) or []
        result.items_collected = len(items)

        outcome: PipelineResult = self._run_step(
            "cluster",
            lambda: self._pipeline.run(existing, items),
            critical=True,
        )

        self._run_step(
            "save_working_set",
            lambda: self._store.save(outcome.clusters),
            critical=True,
        )

        result.articles_enriched = outcome.run_log.enriched
        result.clusters = len(outcome.clusters)
        result.data["run_log"] = outcome.run_log.summary()
        return result
