"""Composite skills built from contract and API sub-dispatches."""

from __future__ import annotations

from typing import Dict, List

from ..context import DispatchContext
from ..envelope import FailureCode, JsonDict, failure_envelope
from .base import WorkflowHandler, WorkflowHelpers
from .p0 import P0_WORKFLOW_HANDLERS
from .p1 import P1_WORKFLOW_HANDLERS
from .p2 import P2_WORKFLOW_HANDLERS

WORKFLOW_HANDLERS: Dict[str, WorkflowHandler] = {
    **P0_WORKFLOW_HANDLERS,
    **P1_WORKFLOW_HANDLERS,
    **P2_WORKFLOW_HANDLERS,
}


async def execute_workflow(
    skill_name: str,
    envelope: JsonDict,
    ctx: DispatchContext,
    trace_id: str,
    helpers: WorkflowHelpers,
) -> JsonDict:
    handler = WORKFLOW_HANDLERS.get(skill_name)
    if handler is None:
        return failure_envelope(
            FailureCode.MAINTENANCE,
            f"Workflow handler is not available for {skill_name}.",
            maintenance=True,
            trace_id=trace_id,
            details={"skillName": skill_name},
        )
    return await handler(envelope, ctx, trace_id, helpers)


def list_workflow_handlers() -> List[str]:
    return list(WORKFLOW_HANDLERS)


__all__ = [
    "WORKFLOW_HANDLERS",
    "WorkflowHandler",
    "WorkflowHelpers",
    "execute_workflow",
    "list_workflow_handlers",
]
