"""Batch grouping oracle adapter.

Sends one batch of ``index: label`` lines to Claude and turns the reply into
a partition of the batch indices. The oracle is treated as unreliable: every
failure (API error, timeout, prose instead of JSON, wrong shape) degrades to
the singleton partition and is never raised to the caller.
"""

from __future__ import annotations

from typing import NamedTuple

from briefing.core.claude_client import CompletionClient
from briefing.core.exceptions import GroupingError
from briefing.core.llm_json import extract_json
from briefing.core.logger import get_logger
from briefing.core.models import ClaudeTask
from briefing.core.prompts import PromptRenderer

logger = get_logger(__name__)


class BatchItem(NamedTuple):
    """One headline offered to the oracle."""

    index: int
    label: str


class GroupingResult(NamedTuple):
    """Partition of one batch and whether it is the failure fallback."""

    partition: list[list[int]]
    degraded: bool


def singleton_partition(n: int) -> list[list[int]]:
    """Degenerate partition: every index in its own group."""
    return [[i] for i in range(n)]


def parse_partition(raw: str) -> list[list[int]]:
    """Parse an oracle reply into a list of index groups.

    Raises:
        GroupingError: If no array can be found, it is not valid JSON, or it
            is not an array of arrays of integers.
    """
    try:
        parsed = extract_json(raw, "[")
    except ValueError as e:
        raise GroupingError("Oracle reply holds no JSON array", {"error": str(e)}) from e

    if not isinstance(parsed, list):
        raise GroupingError("Oracle reply is not an array")
    for group in parsed:
        if not isinstance(group, list):
            raise GroupingError("Oracle group is not an array", {"group": repr(group)[:80]})
        for index in group:
            # bool is an int subclass
            if isinstance(index, bool) or not isinstance(index, int):
                raise GroupingError("Oracle index is not an integer", {"index": repr(index)[:40]})
    return parsed


def complete_partition(groups: list[list[int]], n: int) -> list[list[int]]:
    """Make ``groups`` a partition of ``0..n-1``.

    Out-of-range and repeated indices are dropped (first occurrence wins),
    empty groups vanish and indices nobody mentioned are appended as
    trailing singleton groups.
    """
    seen: set[int] = set()
    partition: list[list[int]] = []
    for group in groups:
        kept = []
        for index in group:
            if 0 <= index < n and index not in seen:
                seen.add(index)
                kept.append(index)
        if kept:
            partition.append(kept)
    partition.extend([i] for i in range(n) if i not in seen)
    return partition


class GroupingOracle:
    """Partition a batch of headlines into same-event groups.

    Args:
        client: Completion client (``ClaudeClient`` in production).
        renderer: Prompt template renderer.
    """

    def __init__(self, client: CompletionClient, renderer: PromptRenderer | None = None) -> None:
        self._client = client
        self._renderer = renderer or PromptRenderer()

    def group_batch(self, items: list[BatchItem], batch_seq: int) -> list[list[int]]:
        """Partition of ``0..n-1`` for one batch; never raises."""
        return self.group(items, batch_seq).partition

    def group(self, items: list[BatchItem], batch_seq: int) -> GroupingResult:
        """Group one batch.

        Args:
            items: ``(index, label)`` pairs with indices ``0..n-1``; labels
                are display titles.
            batch_seq: Sequence number of the batch within the run.

        Returns:
            GroupingResult with a partition of ``0..n-1``; ``degraded`` is set
            when it is the singleton fallback caused by an oracle failure.
        """
        n = len(items)
        if n <= 1:
            return GroupingResult(singleton_partition(n), False)

        try:
            raw = self._ask(items, batch_seq)
            groups = parse_partition(raw)
        except Exception as e:
            logger.warning(
                "oracle_fallback",
                batch=batch_seq,
                size=n,
                error_type=type(e).__name__,
                error=str(e),
            )
            return GroupingResult(singleton_partition(n), True)

        partition = complete_partition(groups, n)
        logger.info(
            "batch_grouped",
            batch=batch_seq,
            size=n,
            groups=len(partition),
            multi_groups=sum(1 for g in partition if len(g) > 1),
        )
        return GroupingResult(partition, False)

    def _ask(self, items: list[BatchItem], batch_seq: int) -> str:
        user_message = self._renderer.render(
            "prompts/group_user.j2",
            items=items,
            batch_seq=batch_seq,
        )
        system_prompt = self._renderer.render("prompts/group_system.j2")
        response = self._client.generate(
            ClaudeTask.GROUPING,
            user_message,
            system_prompt=system_prompt,
        )
        return response.content
