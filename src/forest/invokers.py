from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, Optional

from .address_resolution import ExecutionMode
from .clients import BackendHttpClient
from .config import NetworkConfig
from .ledger import LedgerClient
from .routes import ApiRoute


@dataclass(frozen=True)
class ContractInvokeRequest:
    skill_name: str
    method: str
    args: Dict[str, Any]
    chain: str
    contract_address: str
    rpc_url: str
    mode: ExecutionMode
    config: NetworkConfig
    timeout_ms: Optional[int] = None


@dataclass(frozen=True)
class ApiInvokeRequest:
    skill_name: str
    action: str
    params: Dict[str, Any] = field(default_factory=dict)
    route: Optional[ApiRoute] = None
    config: Optional[NetworkConfig] = None
    timeout_ms: Optional[int] = None


ContractInvoker = Callable[[ContractInvokeRequest], Awaitable[Any]]
ApiInvoker = Callable[[ApiInvokeRequest], Awaitable[Any]]


def get_transaction_id(data: Any) -> str:
    if not isinstance(data, dict):
        return ""
    result = data.get("result")
    nested = result if isinstance(result, dict) else {}
    return (
        data.get("transactionId")
        or nested.get("TransactionId")
        or nested.get("transactionId")
        or data.get("TransactionId")
        or ""
    )


def _timeout_seconds(timeout_ms: Optional[int], default: float) -> float:
    return timeout_ms / 1000.0 if timeout_ms else default


async def default_contract_invoker(req: ContractInvokeRequest) -> Any:
    ledger = req.config.ledger
    if ledger is None:
        raise RuntimeError("No ledger backend configured for contract calls.")

    if req.mode is ExecutionMode.READ:
        return await ledger.call_view(req.rpc_url, req.contract_address, req.method, req.args)

    transaction_id = await ledger.send_contract_call(req.rpc_url, req.contract_address, req.method, req.args)
    poller = LedgerClient(req.rpc_url, timeout_seconds=_timeout_seconds(req.timeout_ms, 10.0))
    tx_result = await poller.wait_for_transaction(transaction_id)
    return {"TransactionId": transaction_id, "txResult": tx_result}


async def default_api_invoker(req: ApiInvokeRequest) -> Any:
    if req.config is None or req.route is None:
        raise RuntimeError(f"API action {req.skill_name}.{req.action} is missing config or route.")

    client = BackendHttpClient(
        base_url=req.config.api_url,
        token=req.config.api_token if req.route.auth_required else None,
        timeout_seconds=_timeout_seconds(req.timeout_ms, 60.0),
    )
    method = req.route.http_method
    if method == "POST":
        return await client.post(req.route.path, req.params)
    if method == "PUT":
        return await client.put(req.route.path, req.params)
    if method == "DELETE":
        return await client.delete(req.route.path, req.params)
    return await client.get(req.route.path, req.params)


__all__ = [
    "ApiInvokeRequest",
    "ApiInvoker",
    "ContractInvokeRequest",
    "ContractInvoker",
    "default_api_invoker",
    "default_contract_invoker",
    "get_transaction_id",
]
