"""Helpers that keep article clusters a two-level tree."""

from __future__ import annotations

from typing import Iterable

from briefing.core.models import Article


def pick_parent(members: list[Article]) -> int:
    """Position of the cluster parent: first member with an image, else 0."""
    for position, article in enumerate(members):
        if article.has_image:
            return position
    return 0


def attach(parent: Article, members: Iterable[Article]) -> Article:
    """Return a copy of ``parent`` with ``members`` folded into ``related``.

    The parent's existing related articles come first, then each member
    followed by the member's own related articles, so grandchildren are
    hoisted and every child ends up with an empty ``related`` list.
    Articles whose id is already in the tree are skipped.
    """
    seen = {parent.id}
    related: list[Article] = []

    def _add(article: Article) -> None:
        if article.id not in seen:
            seen.add(article.id)
            related.append(article.detached())
        for child in article.related:
            _add(child)

    for child in parent.related:
        _add(child)
    for member in members:
        _add(member)
    return parent.model_copy(update={"related": related})
