"""Tests for clustering.pipeline."""

from datetime import timedelta
from unittest.mock import MagicMock

from briefing.clustering.oracle import GroupingOracle
from briefing.clustering.pipeline import ClusteringPipeline, split_batches
from briefing.core.config import ClusteringConfig
from briefing.core.exceptions import ClaudeAPIError
from briefing.core.models import EnrichmentResult
from briefing.enrichment.enricher import ArticleEnricher

from tests.conftest import NOW, claude_reply, make_article, make_item

UNRELATED = [
    "Waldbrand in Brandenburg weitet sich weiter aus",
    "Bundesregierung beschließt neues Heizungsgesetz",
    "Iran droht mit Vergeltung",
    "Lokführer streiken erneut bundesweit",
    "Fußball Nationalmannschaft gewinnt Testspiel klar",
]

HEATING = [
    "Bundesregierung beschließt neues Heizungsgesetz",
    "Streit um Heizungsgesetz geht in die nächste Runde",
]


def _enrich(title: str, body: str, source: str) -> EnrichmentResult:
    return EnrichmentResult(title=f"Neu: {title}", summary="Zusammenfassung", bullets=["Fakt"])


def _pipeline(client, config=None, enrich=_enrich, sleep=None, clock=None, delay=0.0):
    return ClusteringPipeline(
        config or ClusteringConfig(),
        oracle=GroupingOracle(client),
        enrich=enrich,
        call_delay_sec=delay,
        sleep=sleep or MagicMock(),
        clock=clock or (lambda: NOW),
    )


def _all_ids(clusters) -> list[str]:
    return [c.id for c in clusters] + [r.id for c in clusters for r in c.related]


class TestSplitBatches:
    def test_slices_in_order(self) -> None:
        assert list(split_batches([1, 2, 3, 4, 5], 2)) == [[1, 2], [3, 4], [5]]

    def test_empty(self) -> None:
        assert list(split_batches([], 3)) == []


class TestClusteringPipeline:
    def test_visits_states_in_order(self, mock_client) -> None:
        result = _pipeline(mock_client).run([], [make_item(t) for t in UNRELATED[:2]])
        assert result.run_log.states == [
            "prune_existing",
            "dedup_incoming",
            "batch_group",
            "glue",
            "final_prune_sort",
            "done",
        ]

    def test_every_external_call_failing_still_yields_singletons(self, mock_client) -> None:
        mock_client.generate.side_effect = ClaudeAPIError("Claude API unavailable")
        pipeline = _pipeline(mock_client, enrich=ArticleEnricher(mock_client).enrich)
        items = [make_item(t, hours_ago=i + 1) for i, t in enumerate(UNRELATED[:3])]

        result = pipeline.run([], items)

        assert [c.title for c in result.clusters] == UNRELATED[:3]
        assert all(c.related == [] and c.summary == "" and c.bullets == [] for c in result.clusters)
        assert result.run_log.enrichment_failures == 3
        assert result.run_log.oracle_fallbacks == 1

    def test_known_link_refreshes_date_without_enrichment(self, mock_client) -> None:
        existing = make_article(UNRELATED[0], link="https://a.example/1", hours_ago=10, id="old")
        enrich = MagicMock(side_effect=_enrich)
        item = make_item("Aktualisiert: " + UNRELATED[0], link="https://a.example/1", hours_ago=1)

        result = _pipeline(mock_client, enrich=enrich).run([existing], [item])

        enrich.assert_not_called()
        assert result.run_log.duplicates == 1
        assert [c.id for c in result.clusters] == ["old"]
        assert result.clusters[0].date == NOW - timedelta(hours=1)

    def test_duplicates_within_one_poll_are_enriched_once(self, mock_client) -> None:
        enrich = MagicMock(side_effect=_enrich)
        items = [
            make_item(UNRELATED[1], link="https://a.example/1"),
            make_item(UNRELATED[1], link="https://b.example/2"),
        ]
        result = _pipeline(mock_client, enrich=enrich).run([], items)
        assert enrich.call_count == 1
        assert len(_all_ids(result.clusters)) == 1

    def test_enrichment_fields_are_stored(self, mock_client) -> None:
        result = _pipeline(mock_client).run([], [make_item(UNRELATED[0], img="w.jpg")])
        article = result.clusters[0]
        assert article.original_title == UNRELATED[0]
        assert article.title == f"Neu: {UNRELATED[0]}"
        assert article.summary == "Zusammenfassung"
        assert article.bullets == ["Fakt"]
        assert article.img == "w.jpg"

    def test_expired_existing_articles_are_pruned(self, mock_client) -> None:
        old = make_article(UNRELATED[0], hours_ago=5 * 24, id="old")
        recent = make_article(UNRELATED[1], hours_ago=3 * 24, id="recent")
        result = _pipeline(mock_client, ClusteringConfig(retention_days=4)).run([old, recent], [])
        assert _all_ids(result.clusters) == ["recent"]
        assert result.run_log.expired == 1

    def test_expired_incoming_item_is_not_enriched(self, mock_client) -> None:
        enrich = MagicMock(side_effect=_enrich)
        result = _pipeline(mock_client, enrich=enrich).run(
            [], [make_item(UNRELATED[0], hours_ago=24 * 30)],
        )
        enrich.assert_not_called()
        assert result.clusters == []

    def test_oracle_groups_same_event(self, mock_client) -> None:
        mock_client.generate.return_value = claude_reply("Antwort: [[0, 1]]")
        items = [
            make_item("Sturm Elli fegt über Deutschland", hours_ago=2),
            make_item("Unwetter 'Elli' sorgt für Chaos im Norden", hours_ago=1, img="elli.jpg"),
        ]
        result = _pipeline(mock_client).run([], items)
        assert len(result.clusters) == 1
        parent = result.clusters[0]
        assert parent.original_title == "Unwetter 'Elli' sorgt für Chaos im Norden"
        assert [r.original_title for r in parent.related] == ["Sturm Elli fegt über Deutschland"]

    def test_oracle_sees_display_titles(self, mock_client) -> None:
        _pipeline(mock_client).run([], [make_item(t) for t in UNRELATED[:2]])
        prompt = mock_client.generate.call_args.args[1]
        assert f"0: Neu: {UNRELATED[0]}" in prompt

    def test_story_split_across_batches_is_glued(self, mock_client) -> None:
        config = ClusteringConfig(batch_size=1)
        items = [
            make_item("Bundesregierung beschließt neues Heizungsgesetz", hours_ago=2),
            make_item("Streit um Heizungsgesetz geht in die nächste Runde", hours_ago=1),
        ]
        result = _pipeline(mock_client, config).run([], items)
        assert len(result.clusters) == 1
        assert len(result.clusters[0].related) == 1
        assert result.run_log.batches == 2
        assert result.run_log.glued == 1

    def test_batches_are_bounded(self, mock_client) -> None:
        config = ClusteringConfig(batch_size=2)
        result = _pipeline(mock_client, config).run([], [make_item(t) for t in UNRELATED])
        assert result.run_log.batches == 3
        # The last batch holds a single headline and needs no oracle call.
        assert mock_client.generate.call_count == 2
        for call in mock_client.generate.call_args_list:
            assert "(2 Schlagzeilen)" in call.args[1]

    def test_one_failing_batch_does_not_block_the_next(self, mock_client) -> None:
        mock_client.generate.side_effect = [RuntimeError("timeout"), claude_reply("[[0], [1]]")]
        config = ClusteringConfig(batch_size=2)
        result = _pipeline(mock_client, config).run([], [make_item(t) for t in UNRELATED[:4]])
        assert result.run_log.batches == 2
        assert result.run_log.oracle_fallbacks == 1
        assert len(result.clusters) == 4

    def test_output_sorted_by_parent_date_descending(self, mock_client) -> None:
        items = [make_item(t, hours_ago=h) for t, h in zip(UNRELATED, [5, 1, 3, 2, 4])]
        result = _pipeline(mock_client).run([], items)
        dates = [c.date for c in result.clusters]
        assert dates == sorted(dates, reverse=True)
        assert result.clusters[0].original_title == UNRELATED[1]

    def test_tree_depth_and_unique_ids(self, mock_client) -> None:
        mock_client.generate.return_value = claude_reply("[[0, 2], [1, 3, 4]]")
        nested = make_article(
            UNRELATED[0],
            id="p",
            related=[make_article("Meldung A", id="c", related=[make_article("Meldung B", id="g")])],
        )
        result = _pipeline(mock_client).run([nested], [make_item(t) for t in UNRELATED[1:]])
        ids = _all_ids(result.clusters)
        assert len(ids) == len(set(ids)) == 7
        assert all(child.related == [] for c in result.clusters for child in c.related)

    def test_inter_call_delay(self, mock_client) -> None:
        sleep = MagicMock()
        _pipeline(mock_client, sleep=sleep, delay=2.0).run([], [make_item(t) for t in UNRELATED[:3]])
        # three enrichment calls and one grouping call
        assert sleep.call_count == 3
        sleep.assert_called_with(2.0)

    def test_final_prune_uses_fresh_clock(self, mock_client) -> None:
        now = [NOW]

        def slow_enrich(title, body, source):
            now[0] += timedelta(hours=3)
            return _enrich(title, body, source)

        aging = make_article(UNRELATED[0], hours_ago=4 * 24 - 2, id="aging")
        result = _pipeline(
            mock_client,
            ClusteringConfig(retention_days=4),
            enrich=slow_enrich,
            clock=lambda: now[0],
        ).run([aging], [make_item(UNRELATED[1])])
        assert "aging" not in _all_ids(result.clusters)
        assert len(result.clusters) == 1

    def test_expired_parent_hands_over_to_surviving_child(self, mock_client) -> None:
        now = [NOW]

        def slow_enrich(title, body, source):
            now[0] += timedelta(hours=3)
            return _enrich(title, body, source)

        mock_client.generate.return_value = claude_reply("[[0, 1]]")
        parent = make_article(UNRELATED[0], hours_ago=4 * 24 - 2, id="parent", img="p.jpg")
        result = _pipeline(
            mock_client,
            ClusteringConfig(retention_days=4),
            enrich=slow_enrich,
            clock=lambda: now[0],
        ).run([parent], [make_item("Brandenburg: Feuerwehr kämpft gegen Waldbrand")])
        assert len(result.clusters) == 1
        assert result.clusters[0].id != "parent"
        assert result.clusters[0].related == []

    def test_second_run_recognises_everything(self, mock_client) -> None:
        items = [make_item(t) for t in UNRELATED[:3]]
        first = _pipeline(mock_client).run([], items)
        enrich = MagicMock(side_effect=_enrich)
        second = _pipeline(mock_client, enrich=enrich).run(first.clusters, items)
        enrich.assert_not_called()
        assert sorted(_all_ids(second.clusters)) == sorted(_all_ids(first.clusters))

    def test_oracle_decision_to_keep_related_headlines_apart_stands(self, mock_client) -> None:
        mock_client.generate.return_value = claude_reply("[[0], [1]]")
        items = [make_item(t, hours_ago=i + 1) for i, t in enumerate(HEATING)]
        result = _pipeline(mock_client).run([], items)
        assert len(result.clusters) == 2
        assert all(c.related == [] for c in result.clusters)
        assert result.run_log.glued == 0

    def test_every_call_failing_keeps_related_headlines_as_singletons(self, mock_client) -> None:
        mock_client.generate.side_effect = ClaudeAPIError("Claude API unavailable")
        pipeline = _pipeline(mock_client, enrich=ArticleEnricher(mock_client).enrich)
        items = [make_item(t, hours_ago=i + 1) for i, t in enumerate(HEATING)]

        result = pipeline.run([], items)

        assert [c.title for c in result.clusters] == HEATING
        assert all(c.related == [] for c in result.clusters)
