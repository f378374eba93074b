from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import httpx

JsonDict = Dict[str, Any]

DEFAULT_TIMEOUT_SECONDS = 60.0


def unwrap_payload(body: Any) -> Any:
    """Backend responses wrap results as {"data": ...}; return the inner value when present."""
    if isinstance(body, dict) and body.get("data") is not None:
        return body["data"]
    return body


@dataclass
class BackendHttpClient:
    """Async client for the marketplace REST API."""

    base_url: str
    token: Optional[str] = None
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    default_headers: Dict[str, str] = field(default_factory=dict)
    transport: Optional[httpx.AsyncBaseTransport] = None

    def _headers(self, headers: Optional[Dict[str, str]]) -> Dict[str, str]:
        merged = {**self.default_headers, **dict(headers or {})}
        if self.token:
            merged.setdefault("Authorization", f"Bearer {self.token}")
        return merged

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[JsonDict] = None,
        payload: Optional[JsonDict] = None,
        headers: Optional[Dict[str, str]] = None,
        timeout: Optional[float] = None,
    ) -> Any:
        async with httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout if timeout is not None else self.timeout_seconds,
            transport=self.transport,
        ) as client:
            resp = await client.request(
                method,
                path,
                params=params,
                json=payload,
                headers=self._headers(headers),
            )
            resp.raise_for_status()
            if not resp.content:
                return None
            return unwrap_payload(resp.json())

    async def get(self, path: str, params: Optional[JsonDict] = None, **kwargs: Any) -> Any:
        return await self.request("GET", path, params=params or {}, **kwargs)

    async def post(self, path: str, payload: Optional[JsonDict] = None, **kwargs: Any) -> Any:
        return await self.request("POST", path, payload=payload or {}, **kwargs)

    async def put(self, path: str, payload: Optional[JsonDict] = None, **kwargs: Any) -> Any:
        return await self.request("PUT", path, payload=payload or {}, **kwargs)

    async def delete(self, path: str, payload: Optional[JsonDict] = None, **kwargs: Any) -> Any:
        return await self.request("DELETE", path, payload=payload or {}, **kwargs)


__all__ = ["BackendHttpClient", "DEFAULT_TIMEOUT_SECONDS", "unwrap_payload"]
