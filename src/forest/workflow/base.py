from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Optional

from ..context import DispatchContext
from ..envelope import JsonDict

InvokeContract = Callable[[str, str, Dict[str, Any], Optional[str], JsonDict, str], Awaitable[JsonDict]]
InvokeApi = Callable[[str, str, Dict[str, Any], JsonDict, str], Awaitable[JsonDict]]


@dataclass(frozen=True)
class WorkflowHelpers:
    """Callbacks a workflow uses to run its sub-steps through the dispatcher.

    invoke_contract(skill, method, args, chain, source_envelope, trace_id)
    invoke_api(skill, action, params, source_envelope, trace_id)

    Both return a full envelope; failure envelopes come back unmodified.
    """

    invoke_contract: InvokeContract
    invoke_api: InvokeApi
    get_transaction_id: Callable[[Any], str]


WorkflowHandler = Callable[[JsonDict, DispatchContext, str, WorkflowHelpers], Awaitable[JsonDict]]


def payload_of(envelope: JsonDict) -> Dict[str, Any]:
    payload = envelope.get("payload")
    return payload if isinstance(payload, dict) else {}


def params_of(envelope: JsonDict) -> Dict[str, Any]:
    params = envelope.get("params")
    return params if isinstance(params, dict) else {}


def result_of(sub_envelope: JsonDict) -> Any:
    """Raw invoker result carried by a successful sub-dispatch, None on dry-run."""
    data = sub_envelope.get("data")
    return data.get("result") if isinstance(data, dict) else None


__all__ = [
    "InvokeApi",
    "InvokeContract",
    "WorkflowHandler",
    "WorkflowHelpers",
    "params_of",
    "payload_of",
    "result_of",
]
