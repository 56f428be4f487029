"""Workflow orchestration layer.

Usage::

    from briefing.workflows import BriefingWorkflow
    result = BriefingWorkflow().run()
"""

from briefing.workflows.base import BaseWorkflow, WorkflowResult
from briefing.workflows.briefing import BriefingWorkflow

__all__ = [
    "BaseWorkflow",
    "WorkflowResult",
    "BriefingWorkflow",
]
