"""Headline similarity scoring.

Scores are length-weighted token overlap between two normalised headlines:
every surviving token weighs ``len(token) ** 2`` so long, specific words
dominate and short generic ones barely count. A score above ~0.85 means
"practically the same headline", above ~0.35 "plausibly the same event";
the cut-offs themselves live in ``ClusteringConfig``.
"""

from __future__ import annotations

import re

from briefing.core.config import ClusteringConfig

# Everything that is not a word character, German letter or whitespace.
_NON_WORD = re.compile(r"[^\wäöüß\s]")
_WHITESPACE = re.compile(r"\s+")

STOP_WORDS = frozenset({
    "der", "die", "das", "den", "dem", "des",
    "ein", "eine", "einen", "einem", "einer", "eines",
    "und", "oder", "aber", "doch", "sondern", "denn",
    "in", "im", "ins", "an", "am", "auf", "aus", "bei", "beim", "mit",
    "nach", "von", "vom", "vor", "zu", "zum", "zur", "für", "über",
    "unter", "um", "durch", "gegen", "ohne", "bis", "seit", "wegen",
    "ist", "sind", "war", "waren", "wird", "werden", "wurde", "wurden",
    "hat", "haben", "hatte", "sein", "soll", "sollen", "kann", "können",
    "nicht", "kein", "keine", "auch", "noch", "nur", "schon", "jetzt",
    "so", "wie", "als", "wenn", "dass", "ob", "was", "wer", "wo",
    "sich", "es", "er", "sie", "wir", "ihr", "man", "mehr", "neu",
})

# Longest first: only one suffix is removed per token.
_SUFFIXES = ("en", "er", "es", "e", "n", "s")

TOPIC_MIN_LENGTH = 2
IDENTITY_MIN_LENGTH = 3
_STEM_MIN_LENGTH = 5
_SUBSTRING_MIN_LENGTH = 4


def normalize(title: str) -> str:
    """Lowercase, replace punctuation with spaces and collapse whitespace."""
    text = _NON_WORD.sub(" ", title.lower())
    return _WHITESPACE.sub(" ", text).strip()


def _stem(token: str) -> str:
    if len(token) <= _STEM_MIN_LENGTH:
        return token
    for suffix in _SUFFIXES:
        if token.endswith(suffix):
            return token[: -len(suffix)]
    return token


def tokenize(title: str, strict: bool = False) -> list[str]:
    """Meaningful, lightly stemmed tokens of a headline in order of appearance.

    Args:
        title: Raw headline.
        strict: Use the longer minimum token length of the identity check.

    Returns:
        De-duplicated token list.
    """
    min_length = IDENTITY_MIN_LENGTH if strict else TOPIC_MIN_LENGTH
    tokens = (
        _stem(t)
        for t in normalize(title).split(" ")
        if len(t) > min_length and t not in STOP_WORDS
    )
    return list(dict.fromkeys(tokens))


def _weight(token: str) -> int:
    return len(token) ** 2


def _token_matches(token: str, others: set[str]) -> bool:
    if token in others:
        return True
    if len(token) <= _SUBSTRING_MIN_LENGTH:
        return False
    return any(
        len(other) > _SUBSTRING_MIN_LENGTH and (token in other or other in token)
        for other in others
    )


def score(title_a: str, title_b: str, strict: bool = False) -> float:
    """Relatedness of two headlines in ``[0, 1]``.

    Not symmetric: only tokens of ``title_a`` earn match weight, while the
    denominator sums the weights of both sides.

    Args:
        title_a: First headline.
        title_b: Second headline.
        strict: Identity-check tokenisation (drops tokens of length <= 3).

    Returns:
        0.0 if either headline has no meaningful tokens.
    """
    tokens_a = tokenize(title_a, strict)
    tokens_b = tokenize(title_b, strict)
    if not tokens_a or not tokens_b:
        return 0.0

    others = set(tokens_b)
    total_weight = sum(map(_weight, tokens_a)) + sum(map(_weight, tokens_b))
    match_weight = sum(2 * _weight(t) for t in tokens_a if _token_matches(t, others))
    return min(1.0, match_weight / total_weight)


def token_count(title: str) -> int:
    """Number of meaningful topic tokens in a headline."""
    return len(tokenize(title))


class TopicMatcher:
    """Looser "same event" test used for clustering, not deduplication.

    Args:
        config: Supplies ``topic_threshold`` and ``min_topic_tokens``.
    """

    def __init__(self, config: ClusteringConfig) -> None:
        self._threshold = config.topic_threshold
        self._min_tokens = config.min_topic_tokens

    def is_related(self, title_a: str, title_b: str) -> bool:
        """True if both headlines carry enough tokens and score above threshold."""
        if token_count(title_a) < self._min_tokens or token_count(title_b) < self._min_tokens:
            return False
        return score(title_a, title_b) > self._threshold
