"""Tests for clustering.similarity."""

from briefing.clustering.similarity import (
    TopicMatcher,
    normalize,
    score,
    token_count,
    tokenize,
)
from briefing.core.config import ClusteringConfig


class TestNormalize:
    def test_lowercases_and_strips_punctuation(self) -> None:
        assert normalize("Unwetter 'Elli' sorgt für Chaos!") == "unwetter elli sorgt für chaos"

    def test_keeps_umlauts_and_sharp_s(self) -> None:
        assert normalize("Straße in Köln: Öffnung") == "straße in köln öffnung"

    def test_collapses_whitespace(self) -> None:
        assert normalize("  A  -  B\t\nC ") == "a b c"


class TestTokenize:
    def test_drops_stop_words_and_short_tokens(self) -> None:
        assert tokenize("Iran droht mit Vergeltung") == ["iran", "droht", "vergeltung"]

    def test_strict_mode_drops_three_letter_tokens(self) -> None:
        assert "elli" in tokenize("Sturm Elli fegt über Deutschland")
        assert "zoo" not in tokenize("Neuer Zoo eröffnet heute", strict=True)
        assert "zoo" in tokenize("Neuer Zoo eröffnet heute")

    def test_light_stemming_collapses_plural(self) -> None:
        assert tokenize("Landwirte") == tokenize("Landwirten")

    def test_short_tokens_are_not_stemmed(self) -> None:
        assert tokenize("Runde") == ["runde"]

    def test_duplicates_collapse(self) -> None:
        assert tokenize("Streik Streik Streik") == ["streik"]


class TestScore:
    def test_identical_titles_score_one(self) -> None:
        title = "Bundesregierung beschließt neues Heizungsgesetz"
        assert score(title, title) == 1.0

    def test_zero_when_either_side_has_no_tokens(self) -> None:
        assert score("", "Bundesregierung beschließt Haushalt") == 0.0
        assert score("Bundesregierung beschließt Haushalt", "der die das") == 0.0
        assert score("?!", "...") == 0.0

    def test_never_exceeds_one(self) -> None:
        # Every token of A is contained in the single token of B.
        value = score("Deutschland Deutschlandweit Deutschlandweiter", "Deutschlandweiterer")
        assert 0.0 < value <= 1.0

    def test_unrelated_single_shared_token_is_below_topic_threshold(self) -> None:
        assert score("Iran droht mit Vergeltung", "Iran eröffnet neue Gaspipeline") < 0.35

    def test_short_tokens_do_not_match_inside_compounds(self) -> None:
        assert score("Iran Krise Gipfel", "Irankrieg Analyse Bericht") == 0.0

    def test_long_tokens_match_inside_compounds(self) -> None:
        assert score("Heizung Debatte Kanzler", "Heizungsgesetz Analyse Bericht") > 0.0

    def test_related_event_scores_above_topic_threshold(self) -> None:
        value = score(
            "Bundesregierung beschließt neues Heizungsgesetz",
            "Streit um Heizungsgesetz geht in die nächste Runde",
        )
        assert 0.35 < value < 0.85

    def test_case_and_punctuation_do_not_matter(self) -> None:
        assert score("STURM ELLI: Chaos im Norden", "sturm elli chaos norden") == 1.0


class TestTopicMatcher:
    def test_requires_minimum_token_count(self) -> None:
        matcher = TopicMatcher(ClusteringConfig(min_topic_tokens=3))
        # One meaningful token each: identical, but too sparse to judge.
        assert token_count("Wahlen!") == 1
        assert matcher.is_related("Wahlen!", "Wahlen!") is False

    def test_related_pair(self) -> None:
        matcher = TopicMatcher(ClusteringConfig())
        assert matcher.is_related(
            "Bundesregierung beschließt neues Heizungsgesetz",
            "Streit um Heizungsgesetz geht in die nächste Runde",
        )

    def test_unrelated_pair(self) -> None:
        matcher = TopicMatcher(ClusteringConfig())
        assert not matcher.is_related(
            "Iran droht mit Vergeltung",
            "Iran eröffnet neue Gaspipeline",
        )

    def test_threshold_is_configurable(self) -> None:
        strict = TopicMatcher(ClusteringConfig(topic_threshold=0.9))
        assert not strict.is_related(
            "Bundesregierung beschließt neues Heizungsgesetz",
            "Streit um Heizungsgesetz geht in die nächste Runde",
        )
