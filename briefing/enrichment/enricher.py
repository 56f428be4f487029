"""Article enrichment: display title, one-sentence summary and fact bullets."""

from __future__ import annotations

from typing import Any

from briefing.core.claude_client import CompletionClient
from briefing.core.exceptions import EnrichmentError
from briefing.core.llm_json import extract_json
from briefing.core.logger import get_logger
from briefing.core.models import ClaudeTask, EnrichmentResult
from briefing.core.prompts import PromptRenderer

logger = get_logger(__name__)


class ArticleEnricher:
    """Generate display metadata for a newly accepted article using Claude.

    Failure never blocks an article: the fallback keeps the source headline
    as display title with an empty summary and no bullets.

    Args:
        client: Completion client (``ClaudeClient`` in production).
        renderer: Prompt template renderer.
        max_bullets: Upper bound on returned fact bullets.
        max_body_chars: Body text is truncated to this many characters.
    """

    def __init__(
        self,
        client: CompletionClient,
        renderer: PromptRenderer | None = None,
        max_bullets: int = 4,
        max_body_chars: int = 4000,
    ) -> None:
        self._client = client
        self._renderer = renderer or PromptRenderer()
        self._max_bullets = max_bullets
        self._max_body_chars = max_body_chars

    def enrich(self, title: str, body: str = "", source: str = "") -> EnrichmentResult:
        """Enrich one article.

        Args:
            title: Source headline.
            body: Article text, may be empty.
            source: Feed label shown to the model.

        Returns:
            EnrichmentResult; ``degraded`` is True when the fallback was used.
        """
        try:
            user_message = self._renderer.render(
                "prompts/enrich_user.j2",
                title=title,
                body=body.strip(),
                source=source,
                max_body_chars=self._max_body_chars,
            )
            system_prompt = self._renderer.render(
                "prompts/enrich_system.j2",
                max_bullets=self._max_bullets,
            )
            response = self._client.generate(
                ClaudeTask.ENRICH,
                user_message,
                system_prompt=system_prompt,
            )
            return self._parse(response.content, title)
        except Exception as e:
            logger.warning(
                "enrichment_failed",
                title=title[:60],
                error_type=type(e).__name__,
                error=str(e),
            )
            return EnrichmentResult(title=title, degraded=True)

    def _parse(self, raw: str, fallback_title: str) -> EnrichmentResult:
        """Validate the model's JSON object.

        Raises:
            EnrichmentError: If the reply holds no usable JSON object.
        """
        try:
            data: Any = extract_json(raw, "{")
        except ValueError as e:
            raise EnrichmentError("Enrichment reply holds no JSON object", {"error": str(e)}) from e
        if not isinstance(data, dict):
            raise EnrichmentError("Enrichment reply is not an object")

        title = data.get("title")
        summary = data.get("summary")
        bullets = data.get("bullets")
        return EnrichmentResult(
            title=title.strip() if isinstance(title, str) and title.strip() else fallback_title,
            summary=summary.strip() if isinstance(summary, str) else "",
            bullets=[
                b.strip() for b in bullets if isinstance(b, str) and b.strip()
            ][: self._max_bullets] if isinstance(bullets, list) else [],
        )
