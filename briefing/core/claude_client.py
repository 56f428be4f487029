"""Claude API client with task-based model selection and retry logic."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Protocol

import anthropic

from briefing.core.config import AppConfig, get_config
from briefing.core.exceptions import ClaudeAPIError, RateLimitError
from briefing.core.logger import get_logger
from briefing.core.models import ClaudeTask
from briefing.core.retry import build_retrying

logger = get_logger(__name__)

_RETRYABLE = (
    anthropic.RateLimitError,
    anthropic.APIConnectionError,
    anthropic.APITimeoutError,
    anthropic.InternalServerError,
)


@dataclass(slots=True)
class ClaudeResponse:
    """Response wrapper for Claude API calls."""

    content: str
    model: str
    input_tokens: int
    output_tokens: int
    stop_reason: str


class CompletionClient(Protocol):
    """Anything with the ``ClaudeClient.generate`` signature."""

    def generate(
        self,
        task: ClaudeTask,
        user_message: str,
        system_prompt: str = "",
    ) -> ClaudeResponse:
        ...


@dataclass
class _TokenUsage:
    """Cumulative token usage tracker."""

    total_input: int = 0
    total_output: int = 0
    call_count: int = 0


class ClaudeClient:
    """Claude API client with task-based model/parameter auto-selection.

    Every call is bounded by ``claude.timeout_sec`` and retried according to
    the shared ``retry`` policy. Callers in the clustering core catch the
    errors raised here and degrade instead of aborting.

    Example::

        client = ClaudeClient()
        response = client.generate(
            ClaudeTask.GROUPING,
            "0: Sturm Elli fegt über Deutschland\\n1: ...",
            system_prompt="Du gruppierst Schlagzeilen.",
        )
        print(response.content)
    """

    def __init__(
        self,
        config: AppConfig | None = None,
        sleep: Callable[[float], None] | None = None,
    ) -> None:
        config = config or get_config()
        if not config.anthropic_api_key:
            raise ClaudeAPIError(
                "ANTHROPIC_API_KEY is not set",
                {"hint": "Set ANTHROPIC_API_KEY in your .env file"},
            )
        self._config = config.claude
        self._client = anthropic.Anthropic(
            api_key=config.anthropic_api_key,
            timeout=self._config.timeout_sec,
            max_retries=0,
        )
        self._retrying = build_retrying(config.retry, _RETRYABLE, sleep=sleep)
        self._usage = _TokenUsage()
        logger.info(
            "claude_client_initialized",
            default_model=self._config.default_model,
            timeout_sec=self._config.timeout_sec,
        )

    def _resolve_params(self, task: ClaudeTask) -> tuple[str, int, float]:
        """Resolve model, max_tokens, and temperature for a task.

        Args:
            task: The Claude task type.

        Returns:
            Tuple of (model_id, max_tokens, temperature).
        """
        task_key = task.value
        model = self._config.models.get(task_key, self._config.default_model)
        max_tokens = self._config.max_tokens.get(task_key, 1024)
        temperature = self._config.temperature.get(task_key, 0.3)
        return model, max_tokens, temperature

    def generate(
        self,
        task: ClaudeTask,
        user_message: str,
        system_prompt: str = "",
    ) -> ClaudeResponse:
        """Generate a single-turn response.

        Args:
            task: Task type for model/parameter selection.
            user_message: The user message to send.
            system_prompt: Optional system prompt.

        Returns:
            ClaudeResponse with the generated content.

        Raises:
            ClaudeAPIError: On non-retryable API errors or exhausted retries.
            RateLimitError: If still rate limited after all retries.
        """
        model, max_tokens, temperature = self._resolve_params(task)

        kwargs: dict[str, Any] = {
            "model": model,
            "max_tokens": max_tokens,
            "temperature": temperature,
            "messages": [{"role": "user", "content": user_message}],
        }
        if system_prompt:
            kwargs["system"] = system_prompt

        logger.debug("claude_api_call", task=task.value, model=model)

        try:
            response = self._retrying(self._call_api, **kwargs)
        except anthropic.RateLimitError as e:
            raise RateLimitError(
                "Claude API rate limit exceeded",
                {"task": task.value, "message": str(e)},
            ) from e
        except _RETRYABLE as e:
            raise ClaudeAPIError(
                f"Claude API unavailable: {type(e).__name__}",
                {"task": task.value, "message": str(e)},
            ) from e

        content = "".join(
            block.text for block in response.content if getattr(block, "text", None)
        )
        result = ClaudeResponse(
            content=content,
            model=response.model,
            input_tokens=response.usage.input_tokens,
            output_tokens=response.usage.output_tokens,
            stop_reason=response.stop_reason or "",
        )

        self._usage.total_input += result.input_tokens
        self._usage.total_output += result.output_tokens
        self._usage.call_count += 1

        logger.info(
            "claude_api_response",
            task=task.value,
            model=result.model,
            input_tokens=result.input_tokens,
            output_tokens=result.output_tokens,
            stop_reason=result.stop_reason,
        )
        return result

    def _call_api(self, **kwargs: Any) -> anthropic.types.Message:
        """Single Claude API call; retryable errors propagate to the policy.

        Raises:
            ClaudeAPIError: For non-retryable status errors.
        """
        try:
            return self._client.messages.create(**kwargs)
        except _RETRYABLE as e:
            logger.warning("claude_transient_error", error_type=type(e).__name__, error=str(e))
            raise
        except anthropic.APIStatusError as e:
            raise ClaudeAPIError(
                f"Claude API error: {e.status_code}",
                {"status_code": e.status_code, "message": str(e)},
            ) from e

    @property
    def token_usage(self) -> dict[str, int]:
        """Get cumulative token usage statistics.

        Returns:
            Dict with total_input_tokens, total_output_tokens, and call_count.
        """
        return {
            "total_input_tokens": self._usage.total_input,
            "total_output_tokens": self._usage.total_output,
            "call_count": self._usage.call_count,
        }
