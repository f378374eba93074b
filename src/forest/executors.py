"""Executors for the two leaf skill kinds: contract methods and backend API actions."""

from __future__ import annotations

from typing import Any, Dict

from .address_resolution import ExecutionMode, get_execution_mode, normalize_chain, resolve_contract_address
from .config import ConfigSnapshot, ROUTE_MAP_ENV_KEYS
from .context import DispatchContext
from .envelope import FailureCode, JsonDict, failure_envelope, success_envelope
from .invokers import (
    ApiInvokeRequest,
    ContractInvokeRequest,
    default_api_invoker,
    default_contract_invoker,
    get_transaction_id,
)
from .routes import resolve_route


def _as_dict(value: Any) -> Dict[str, Any]:
    return dict(value) if isinstance(value, dict) else {}


async def execute_contract_method(
    skill_name: str,
    envelope: JsonDict,
    ctx: DispatchContext,
    trace_id: str,
    snapshot: ConfigSnapshot,
) -> JsonDict:
    method = str(envelope.get("method") or "")
    args = _as_dict(envelope.get("args"))
    chain = normalize_chain(envelope.get("chain"))
    mode = get_execution_mode(skill_name, method)

    contract_address = resolve_contract_address(skill_name, chain, ctx.config.contracts or {})
    if not contract_address:
        return failure_envelope(
            FailureCode.MAINTENANCE,
            f"Contract address is not configured for {skill_name} on chain {chain}.",
            maintenance=True,
            trace_id=trace_id,
            details={"skillName": skill_name, "chain": chain},
        )

    rpc_url = (ctx.config.rpc_urls or {}).get(chain)
    if not rpc_url:
        return failure_envelope(
            FailureCode.MAINTENANCE,
            f"RPC URL is not configured for chain {chain}.",
            maintenance=True,
            trace_id=trace_id,
            details={"chain": chain},
        )

    if envelope.get("dryRun"):
        return success_envelope(
            {
                "dryRun": True,
                "executionMode": mode.value,
                "chain": chain,
                "contractAddress": contract_address,
                "method": method,
                "args": args,
                "steps": [
                    {
                        "action": "View contract method" if mode is ExecutionMode.READ else "Send contract method",
                        "contract": contract_address,
                        "method": method,
                        "params": args,
                    }
                ],
            },
            trace_id,
        )

    invoker = ctx.contract_invoker or default_contract_invoker
    result = await invoker(
        ContractInvokeRequest(
            skill_name=skill_name,
            method=method,
            args=args,
            chain=chain,
            contract_address=contract_address,
            rpc_url=rpc_url,
            mode=mode,
            config=ctx.config,
            timeout_ms=envelope.get("timeoutMs"),
        )
    )

    data: JsonDict = {
        "executionMode": mode.value,
        "chain": chain,
        "contractAddress": contract_address,
        "method": method,
        "args": args,
        "result": result,
    }
    if mode is ExecutionMode.WRITE:
        transaction_id = get_transaction_id(result)
        if transaction_id:
            data["transactionId"] = transaction_id
    return success_envelope(data, trace_id)


async def execute_api_method(
    skill_name: str,
    envelope: JsonDict,
    ctx: DispatchContext,
    trace_id: str,
    snapshot: ConfigSnapshot,
) -> JsonDict:
    action = str(envelope.get("action") or "")
    params = _as_dict(envelope.get("params"))
    route = resolve_route(skill_name, action, snapshot.api_routes)

    if envelope.get("dryRun"):
        return success_envelope(
            {
                "dryRun": True,
                "action": action,
                "params": params,
                "route": route.to_dict() if route else None,
                "steps": [
                    {
                        "action": "Invoke backend API action",
                        "apiAction": action,
                        "params": params,
                    }
                ],
            },
            trace_id,
        )

    if route is None:
        return failure_envelope(
            FailureCode.MAINTENANCE,
            f"No API route configured for {skill_name}.{action}. Configure {ROUTE_MAP_ENV_KEYS[0]}.",
            maintenance=True,
            trace_id=trace_id,
            details={"skillName": skill_name, "action": action},
        )

    invoker = ctx.api_invoker or default_api_invoker
    result = await invoker(
        ApiInvokeRequest(
            skill_name=skill_name,
            action=action,
            params=params,
            route=route,
            config=ctx.config,
            timeout_ms=envelope.get("timeoutMs"),
        )
    )
    return success_envelope(
        {"action": action, "route": route.to_dict(), "params": params, "result": result},
        trace_id,
    )


__all__ = ["execute_api_method", "execute_contract_method"]
