from __future__ import annotations

import json
import re
from dataclasses import dataclass
from typing import Any, Dict, Optional

import httpx

from .envelope import FailureCode

_MAINTENANCE_RE = re.compile(r"maintenance|disabled|offline", re.IGNORECASE)
_TIMEOUT_RE = re.compile(r"timeout|timed out", re.IGNORECASE)
_REVERT_RE = re.compile(r"revert|no permission|transaction failed|failed with status", re.IGNORECASE)


@dataclass(frozen=True)
class ErrorMapping:
    code: FailureCode
    message: str
    retryable: Optional[bool] = None
    maintenance: Optional[bool] = None
    details: Optional[Dict[str, Any]] = None


def _response_body(err: BaseException) -> Any:
    response = getattr(err, "response", None)
    if not isinstance(response, httpx.Response):
        return None
    try:
        return response.json()
    except ValueError:
        return None


def extract_http_status(err: BaseException) -> Optional[int]:
    if isinstance(err, httpx.HTTPStatusError):
        return err.response.status_code
    status = getattr(err, "status_code", None)
    return status if isinstance(status, int) else None


def extract_error_message(err: Any) -> str:
    if isinstance(err, str):
        return err
    if err is None:
        return "Unknown error"
    if isinstance(err, BaseException):
        body = _response_body(err)
        if isinstance(body, dict):
            for key in ("message", "error"):
                if isinstance(body.get(key), str) and body[key]:
                    return body[key]
        return str(err) or type(err).__name__
    try:
        return json.dumps(err, default=str)
    except (TypeError, ValueError):
        return str(err) or "Unknown error"


def map_error(err: Any) -> ErrorMapping:
    """Classify a runtime failure into the closed failure-code taxonomy."""
    message = extract_error_message(err)

    status = extract_http_status(err) if isinstance(err, BaseException) else None
    if status is not None:
        details = {"status": status}
        if status in (401, 403):
            return ErrorMapping(FailureCode.UNAUTHORIZED, message, retryable=False, details=details)
        if status == 429:
            return ErrorMapping(FailureCode.RATE_LIMITED, message, retryable=True, details=details)
        if status >= 500:
            return ErrorMapping(FailureCode.UPSTREAM_ERROR, message, retryable=True, details=details)
        return ErrorMapping(FailureCode.UPSTREAM_ERROR, message, retryable=False, details=details)

    if _MAINTENANCE_RE.search(message):
        return ErrorMapping(FailureCode.MAINTENANCE, message, retryable=True, maintenance=True)
    if _TIMEOUT_RE.search(message):
        return ErrorMapping(FailureCode.TX_TIMEOUT, message, retryable=True)
    if _REVERT_RE.search(message):
        return ErrorMapping(FailureCode.ONCHAIN_REVERT, message, retryable=False)

    return ErrorMapping(FailureCode.INTERNAL_ERROR, message, retryable=False)


__all__ = ["ErrorMapping", "extract_error_message", "extract_http_status", "map_error"]
