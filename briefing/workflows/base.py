"""Abstract base class for workflow orchestrators."""

from __future__ import annotations

import time
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable, TypeVar

from briefing.core.config import AppConfig, get_config
from briefing.core.exceptions import WorkflowError
from briefing.core.logger import bind_run_context, get_logger

T = TypeVar("T")


@dataclass
class WorkflowResult:
    """Result of a workflow execution.

    Attributes:
        workflow_name: Identifier for the workflow.
        run_id: Random id bound to every log line of the run.
        success: Whether the workflow completed without critical errors.
        elapsed_sec: Total execution time in seconds.
        items_collected: Feed items offered to the pipeline.
        articles_enriched: New articles accepted and enriched.
        clusters: Top-level clusters written to the store.
        errors: List of error dicts with step name and message.
        data: Arbitrary result data from the workflow.
    """

    workflow_name: str
    run_id: str = ""
    success: bool = True
    elapsed_sec: float = 0.0
    items_collected: int = 0
    articles_enriched: int = 0
    clusters: int = 0
    errors: list[dict[str, Any]] = field(default_factory=list)
    data: dict[str, Any] = field(default_factory=dict)


class BaseWorkflow(ABC):
    """Base class for workflow orchestrators.

    Provides step execution with timing, logging, and error handling.
    Critical steps abort the workflow; non-critical steps log errors and
    continue.
    """

    name: str = "base_workflow"

    def __init__(self, config: AppConfig | None = None) -> None:
        self._config = config or get_config()
        self._logger = get_logger(type(self).__name__)
        self._errors: list[dict[str, Any]] = []
        self._step_timings: list[dict[str, Any]] = []

    @abstractmethod
    def execute(self) -> WorkflowResult:
        """Execute the workflow steps using ``_run_step()`` calls."""

    def run(self) -> WorkflowResult:
        """Run the workflow with timing and top-level error handling.

        Returns:
            WorkflowResult with success flag, elapsed time, and errors.
        """
        run_id = uuid.uuid4().hex[:12]
        bind_run_context(run_id=run_id, workflow=self.name)
        self._errors = []
        self._step_timings = []
        self._logger.info("workflow_started")
        start = time.monotonic()

        try:
            result = self.execute()
        except WorkflowError as e:
            elapsed = round(time.monotonic() - start, 2)
            self._logger.error("workflow_aborted", error=str(e), elapsed_sec=elapsed)
            return WorkflowResult(
                workflow_name=self.name,
                run_id=run_id,
                success=False,
                elapsed_sec=elapsed,
                errors=self._errors,
            )

        result.run_id = run_id
        result.elapsed_sec = round(time.monotonic() - start, 2)
        result.errors = self._errors
        result.data["step_timings"] = self._step_timings

        self._logger.info(
            "workflow_completed",
            success=result.success,
            elapsed_sec=result.elapsed_sec,
            items=result.items_collected,
            enriched=result.articles_enriched,
            clusters=result.clusters,
            error_count=len(result.errors),
        )
        return result

    def _run_step(
        self,
        step_name: str,
        step_fn: Callable[[], T],
        critical: bool = False,
    ) -> T | None:
        """Execute a single workflow step with logging and error handling.

        Args:
            step_name: Human-readable name for the step.
            step_fn: Callable that performs the step work.
            critical: If True, raise WorkflowError on failure to abort
                the workflow. If False, log the error and return None.

        Returns:
            The step function's return value, or None on non-critical failure.

        Raises:
            WorkflowError: If the step fails and ``critical`` is True.
        """
        self._logger.info("step_started", step=step_name)
        start = time.monotonic()

        try:
            result = step_fn()
        except Exception as e:
            elapsed = round(time.monotonic() - start, 2)
            self._errors.append({
                "step": step_name,
                "error": str(e),
                "type": type(e).__name__,
                "elapsed_sec": elapsed,
            })
            self._step_timings.append({
                "step": step_name,
                "elapsed_sec": elapsed,
                "success": False,
            })

            if critical:
                self._logger.error(
                    "critical_step_failed",
                    step=step_name,
                    error=str(e),
                    elapsed_sec=elapsed,
                )
                raise WorkflowError(
                    f"Critical step '{step_name}' failed: {e}",
                    {"step": step_name, "original_error": str(e)},
                ) from e

            self._logger.warning(
                "step_failed",
                step=step_name,
                error=str(e),
                elapsed_sec=elapsed,
            )
            return None

        elapsed = round(time.monotonic() - start, 2)
        self._step_timings.append({
            "step": step_name,
            "elapsed_sec": elapsed,
            "success": True,
        })
        self._logger.info("step_completed", step=step_name, elapsed_sec=elapsed)
        return result
