"""Bounded retry policy shared by every external call."""

from __future__ import annotations

from typing import Callable

from tenacity import (
    RetryCallState,
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
    wait_fixed,
)

from briefing.core.config import RetryConfig
from briefing.core.logger import get_logger

logger = get_logger(__name__)


def build_retrying(
    config: RetryConfig,
    retry_on: tuple[type[BaseException], ...],
    sleep: Callable[[float], None] | None = None,
) -> Retrying:
    """Build a tenacity ``Retrying`` controller from configuration.

    The same policy object shape is used for enrichment and grouping calls
    so the attempt bound and delay live in one place.

    Args:
        config: Attempt limit and delay settings.
        retry_on: Exception types that trigger another attempt.
        sleep: Optional sleep function (tests pass a no-op).

    Returns:
        A ``Retrying`` instance that re-raises the last error when the
        attempts are exhausted.
    """
    if config.exponential:
        wait = wait_exponential(
            multiplier=1,
            min=config.wait_min_sec,
            max=config.wait_max_sec,
        )
    else:
        wait = wait_fixed(config.wait_min_sec)

    kwargs = {}
    if sleep is not None:
        kwargs["sleep"] = sleep

    return Retrying(
        retry=retry_if_exception_type(retry_on),
        stop=stop_after_attempt(max(1, config.max_attempts)),
        wait=wait,
        before_sleep=_log_retry,
        reraise=True,
        **kwargs,
    )


def _log_retry(retry_state: RetryCallState) -> None:
    outcome = retry_state.outcome
    logger.warning(
        "external_call_retry",
        attempt=retry_state.attempt_number,
        error=str(outcome.exception()) if outcome else "",
    )
