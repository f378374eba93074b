"""P2 workflows: AI art, platform NFTs, the mini-app, profiles, discovery and market signals."""

from __future__ import annotations

from typing import Dict

from ..context import DispatchContext
from ..envelope import JsonDict, is_failure, success_envelope
from .actions import (
    AI_RETRY_ACTION_MAP,
    COLLECTION_ACTION_MAP,
    MINIAPP_API_ACTION_MAP,
    MINIAPP_ONCHAIN_METHOD_MAP,
    NFT_API_COLLECTION_ACTIONS,
    PLATFORM_ACTION_MAP,
    WATCH_SIGNAL_ACTION_MAP,
)
from .base import WorkflowHandler, WorkflowHelpers, params_of, payload_of, result_of


def _action(envelope: JsonDict, table: Dict[str, str]) -> str:
    return table.get(str(envelope.get("action") or ""), "")


async def ai_generate(envelope: JsonDict, ctx: DispatchContext, trace_id: str, helpers: WorkflowHelpers) -> JsonDict:
    sub = await helpers.invoke_api("aelf-forest-api-ai", "fetchGenerate", payload_of(envelope), envelope, trace_id)
    if is_failure(sub):
        return sub
    result = result_of(sub)
    detail = result if isinstance(result, dict) else {}
    return success_envelope(
        {
            "transactionId": detail.get("transactionId") or "",
            "items": detail.get("items") or result or [],
        },
        trace_id,
    )


def _api_passthrough(api_skill: str, table: Dict[str, str]) -> WorkflowHandler:
    """Handler mapping the workflow action onto one API action and returning its result."""

    async def handler(envelope: JsonDict, ctx: DispatchContext, trace_id: str, helpers: WorkflowHelpers) -> JsonDict:
        sub = await helpers.invoke_api(api_skill, _action(envelope, table), params_of(envelope), envelope, trace_id)
        if is_failure(sub):
            return sub
        return success_envelope(result_of(sub) or {}, trace_id)

    return handler


ai_retry = _api_passthrough("aelf-forest-api-ai", AI_RETRY_ACTION_MAP)
create_platform_nft = _api_passthrough("aelf-forest-api-platform", PLATFORM_ACTION_MAP)


async def miniapp_action(
    envelope: JsonDict, ctx: DispatchContext, trace_id: str, helpers: WorkflowHelpers
) -> JsonDict:
    """On-chain mini-app actions go to the tree-points contract; the rest to the mini-app API."""
    action = str(envelope.get("action") or "")
    params = params_of(envelope)

    method = MINIAPP_ONCHAIN_METHOD_MAP.get(action)
    if method:
        sub = await helpers.invoke_contract(
            "aelf-forest-contract-miniapp",
            method,
            params,
            params.get("chain") or envelope.get("chain"),
            envelope,
            trace_id,
        )
        if is_failure(sub):
            return sub
        return success_envelope({"transactionId": helpers.get_transaction_id(sub["data"])}, trace_id)

    sub = await helpers.invoke_api(
        "aelf-forest-api-miniapp", MINIAPP_API_ACTION_MAP.get(action, ""), params, envelope, trace_id
    )
    if is_failure(sub):
        return sub
    return success_envelope(result_of(sub) or {}, trace_id)


async def update_profile(
    envelope: JsonDict, ctx: DispatchContext, trace_id: str, helpers: WorkflowHelpers
) -> JsonDict:
    sub = await helpers.invoke_api("aelf-forest-api-user", "saveUserSettings", payload_of(envelope), envelope, trace_id)
    if is_failure(sub):
        return sub
    return success_envelope(result_of(sub) or {}, trace_id)


async def query_collections(
    envelope: JsonDict, ctx: DispatchContext, trace_id: str, helpers: WorkflowHelpers
) -> JsonDict:
    action = _action(envelope, COLLECTION_ACTION_MAP)
    api_skill = "aelf-forest-api-nft" if action in NFT_API_COLLECTION_ACTIONS else "aelf-forest-api-collection"
    sub = await helpers.invoke_api(api_skill, action, params_of(envelope), envelope, trace_id)
    if is_failure(sub):
        return sub
    return success_envelope(result_of(sub) or {}, trace_id)


async def watch_market_signals(
    envelope: JsonDict, ctx: DispatchContext, trace_id: str, helpers: WorkflowHelpers
) -> JsonDict:
    params = {
        **params_of(envelope),
        "channels": envelope.get("channels"),
        "address": envelope.get("address"),
    }
    sub = await helpers.invoke_api(
        "aelf-forest-api-realtime", _action(envelope, WATCH_SIGNAL_ACTION_MAP), params, envelope, trace_id
    )
    if is_failure(sub):
        return sub
    return success_envelope({"events": result_of(sub) or []}, trace_id)


P2_WORKFLOW_HANDLERS: Dict[str, WorkflowHandler] = {
    "aelf-forest-ai-generate": ai_generate,
    "aelf-forest-ai-retry": ai_retry,
    "aelf-forest-create-platform-nft": create_platform_nft,
    "aelf-forest-miniapp-action": miniapp_action,
    "aelf-forest-update-profile": update_profile,
    "aelf-forest-query-collections": query_collections,
    "aelf-forest-watch-market-signals": watch_market_signals,
}
