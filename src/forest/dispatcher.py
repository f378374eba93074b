"""
Skill dispatcher.

Every call walks the same states: lookup, normalize, validate, gate,
execute, finalize. Each path ends in an envelope; nothing is raised to
the caller. Workflows re-enter the dispatcher for their sub-steps through
the helpers built here, so sub-steps are validated and gated exactly like
top-level calls.
"""

from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable, Dict, Optional

from opentelemetry import trace

from .config import ConfigSnapshot
from .context import DispatchContext
from .envelope import (
    FailureCode,
    JsonDict,
    build_trace_id,
    ensure_input_envelope,
    failure_envelope,
    is_success,
)
from .errors import map_error
from .executors import execute_api_method, execute_contract_method
from .invokers import get_transaction_id
from .logging import log_json
from .registry import SkillDefinition, SkillKind, get_skill
from .service import get_service_state
from .telemetry import annotate_span, dispatch_span
from .validator import validate_schema
from .workflow import WorkflowHelpers, execute_workflow

Executor = Callable[[SkillDefinition, JsonDict, DispatchContext, str, ConfigSnapshot], Awaitable[JsonDict]]

def _sub_envelope(source: JsonDict, trace_id: str, **fields: Any) -> JsonDict:
    """Envelope for a sub-dispatch; inherits env, dryRun and timeoutMs and drops unset fields."""
    merged = {
        "env": source.get("env"),
        "dryRun": source.get("dryRun"),
        "traceId": trace_id,
        "timeoutMs": source.get("timeoutMs"),
        **fields,
    }
    return {key: value for key, value in merged.items() if value is not None}


def _workflow_helpers(ctx: DispatchContext) -> WorkflowHelpers:
    async def invoke_contract(
        skill_name: str,
        method: str,
        args: Dict[str, Any],
        chain: Optional[str],
        source: JsonDict,
        trace_id: str,
    ) -> JsonDict:
        return await dispatch_skill(
            skill_name,
            _sub_envelope(source, trace_id, method=method, args=args, chain=chain),
            ctx,
        )

    async def invoke_api(
        skill_name: str,
        action: str,
        params: Dict[str, Any],
        source: JsonDict,
        trace_id: str,
    ) -> JsonDict:
        return await dispatch_skill(
            skill_name,
            _sub_envelope(source, trace_id, action=action, params=params),
            ctx,
        )

    return WorkflowHelpers(
        invoke_contract=invoke_contract,
        invoke_api=invoke_api,
        get_transaction_id=get_transaction_id,
    )


async def _run_contract(
    skill: SkillDefinition, envelope: JsonDict, ctx: DispatchContext, trace_id: str, snapshot: ConfigSnapshot
) -> JsonDict:
    return await execute_contract_method(skill.name, envelope, ctx, trace_id, snapshot)


async def _run_api(
    skill: SkillDefinition, envelope: JsonDict, ctx: DispatchContext, trace_id: str, snapshot: ConfigSnapshot
) -> JsonDict:
    return await execute_api_method(skill.name, envelope, ctx, trace_id, snapshot)


async def _run_workflow(
    skill: SkillDefinition, envelope: JsonDict, ctx: DispatchContext, trace_id: str, snapshot: ConfigSnapshot
) -> JsonDict:
    return await execute_workflow(skill.name, envelope, ctx, trace_id, _workflow_helpers(ctx))


EXECUTORS: Dict[SkillKind, Executor] = {
    SkillKind.CONTRACT: _run_contract,
    SkillKind.API: _run_api,
    SkillKind.WORKFLOW: _run_workflow,
}

_missing_kinds = set(SkillKind) - set(EXECUTORS)
if _missing_kinds:
    raise RuntimeError(f"No executor registered for skill kinds: {sorted(k.value for k in _missing_kinds)}")


def _gate(skill: SkillDefinition, snapshot: ConfigSnapshot, trace_id: str) -> Optional[JsonDict]:
    state = get_service_state(skill.service_key, snapshot)
    if not state.enabled:
        return failure_envelope(
            FailureCode.SERVICE_DISABLED,
            f"Service disabled for key {skill.service_key}.",
            maintenance=True,
            trace_id=trace_id,
            details={"serviceKey": skill.service_key},
        )
    if state.maintenance:
        return failure_envelope(
            FailureCode.MAINTENANCE,
            f"Service in maintenance for key {skill.service_key}.",
            maintenance=True,
            trace_id=trace_id,
            details={"serviceKey": skill.service_key},
        )
    return None


async def _dispatch(skill_name: str, raw_input: Any, ctx: DispatchContext, span: trace.Span) -> JsonDict:
    skill = get_skill(skill_name)
    if skill is None:
        return failure_envelope(FailureCode.INVALID_PARAMS, f"Unknown forest skill: {skill_name}")

    normalized = ensure_input_envelope(raw_input if raw_input is not None else {})
    trace_id = build_trace_id(
        normalized.get("traceId") if isinstance(normalized, dict) else None,
        skill_name,
    )
    annotate_span(span, trace_id=trace_id, service_key=skill.service_key, kind=skill.kind.value)

    validation = validate_schema(skill.input_schema, normalized)
    if not validation.valid:
        return failure_envelope(
            FailureCode.INVALID_PARAMS,
            "Input does not match schema.",
            trace_id=trace_id,
            details={"schema": skill.input_schema, "errors": validation.errors},
        )
    envelope: JsonDict = validation.data
    annotate_span(span, dry_run=bool(envelope.get("dryRun")))

    try:
        snapshot = ctx.snapshot()
        gated = _gate(skill, snapshot, trace_id)
        if gated is not None:
            return gated
        return await EXECUTORS[skill.kind](skill, envelope, ctx, trace_id, snapshot)
    except Exception as exc:
        mapped = map_error(exc)
        log_json(
            logging.WARNING,
            "skill_error_mapped",
            skill=skill_name,
            trace_id=trace_id,
            code=mapped.code.value,
            error_type=type(exc).__name__,
            message=mapped.message,
        )
        span.record_exception(exc)
        return failure_envelope(
            mapped.code,
            mapped.message,
            maintenance=mapped.maintenance,
            retryable=mapped.retryable,
            trace_id=trace_id,
            details=mapped.details,
        )


async def dispatch_skill(skill_name: str, raw_input: Any, ctx: DispatchContext) -> JsonDict:
    """Run one skill and return its success or failure envelope."""
    with dispatch_span(skill_name) as span:
        result = await _dispatch(skill_name, raw_input, ctx, span)
        annotate_span(span, code=result.get("code"))
        if is_success(result):
            log_json(
                logging.INFO,
                "skill_dispatched",
                skill=skill_name,
                trace_id=result.get("traceId"),
                warnings=len(result.get("warnings") or []),
            )
        else:
            log_json(
                logging.INFO,
                "skill_failed",
                skill=skill_name,
                trace_id=result.get("traceId"),
                code=result.get("code"),
                message=result.get("message"),
            )
        return result


__all__ = ["EXECUTORS", "dispatch_skill"]
