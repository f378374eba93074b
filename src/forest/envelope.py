"""Uniform request/response envelopes returned by every skill dispatch."""

from __future__ import annotations

import copy
import enum
import secrets
import time
from typing import Any, Dict, List, Mapping, Optional

JsonDict = Dict[str, Any]

DEFAULT_ENV = "mainnet"


class FailureCode(str, enum.Enum):
    INVALID_PARAMS = "INVALID_PARAMS"
    SERVICE_DISABLED = "SERVICE_DISABLED"
    MAINTENANCE = "MAINTENANCE"
    UPSTREAM_ERROR = "UPSTREAM_ERROR"
    ONCHAIN_REVERT = "ONCHAIN_REVERT"
    TX_TIMEOUT = "TX_TIMEOUT"
    UNAUTHORIZED = "UNAUTHORIZED"
    RATE_LIMITED = "RATE_LIMITED"
    INTERNAL_ERROR = "INTERNAL_ERROR"


def ensure_input_envelope(raw: Any) -> Any:
    """Return a normalized copy of the caller's envelope with defaults applied.

    Non-mapping input is handed back untouched so schema validation can reject it.
    """
    if not isinstance(raw, Mapping):
        return raw
    normalized: JsonDict = {"env": DEFAULT_ENV, "dryRun": False}
    normalized.update(copy.deepcopy(dict(raw)))
    return normalized


def build_trace_id(input_trace_id: Optional[str] = None, skill_name: Optional[str] = None) -> str:
    if input_trace_id:
        return input_trace_id
    prefix = skill_name or "forest"
    return f"{prefix}-{int(time.time() * 1000)}-{secrets.token_hex(4)}"


def success_envelope(
    data: Any,
    trace_id: Optional[str] = None,
    warnings: Optional[List[str]] = None,
) -> JsonDict:
    envelope: JsonDict = {
        "success": True,
        "code": "OK",
        "data": data,
        "warnings": list(warnings or []),
    }
    if trace_id:
        envelope["traceId"] = trace_id
    return envelope


def failure_envelope(
    code: FailureCode | str,
    message: str,
    *,
    maintenance: Optional[bool] = None,
    retryable: Optional[bool] = None,
    trace_id: Optional[str] = None,
    details: Optional[JsonDict] = None,
) -> JsonDict:
    envelope: JsonDict = {
        "success": False,
        "code": FailureCode(code).value,
        "message": message,
    }
    if maintenance is not None:
        envelope["maintenance"] = maintenance
    if retryable is not None:
        envelope["retryable"] = retryable
    if trace_id:
        envelope["traceId"] = trace_id
    if details:
        envelope["details"] = details
    return envelope


def is_failure(envelope: Mapping[str, Any]) -> bool:
    return envelope.get("success") is False


def is_success(envelope: Mapping[str, Any]) -> bool:
    return envelope.get("success") is True


__all__ = [
    "DEFAULT_ENV",
    "FailureCode",
    "JsonDict",
    "build_trace_id",
    "ensure_input_envelope",
    "failure_envelope",
    "is_failure",
    "is_success",
    "success_envelope",
]
