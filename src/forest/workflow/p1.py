"""P1 workflows: issuing, auctions, drops and whitelists."""

from __future__ import annotations

from typing import Dict

from ..context import DispatchContext
from ..envelope import JsonDict, is_failure, success_envelope
from .actions import DROP_ACTION_MAP, WHITELIST_MANAGE_METHOD_MAP, WHITELIST_READ_METHOD_MAP
from .base import WorkflowHandler, WorkflowHelpers, params_of, payload_of, result_of

WHITELIST = "aelf-forest-contract-whitelist"


async def issue_item(envelope: JsonDict, ctx: DispatchContext, trace_id: str, helpers: WorkflowHelpers) -> JsonDict:
    payload = payload_of(envelope)
    sub = await helpers.invoke_contract(
        "aelf-forest-contract-multitoken", "Issue", payload, payload.get("chain"), envelope, trace_id
    )
    if is_failure(sub):
        return sub
    return success_envelope(
        {
            "transactionId": helpers.get_transaction_id(sub["data"]),
            "proxyIssuer": payload.get("issuer") or "",
        },
        trace_id,
    )


async def place_bid(envelope: JsonDict, ctx: DispatchContext, trace_id: str, helpers: WorkflowHelpers) -> JsonDict:
    payload = payload_of(envelope)
    sub = await helpers.invoke_contract(
        "aelf-forest-contract-auction", "PlaceBid", payload, payload.get("chain"), envelope, trace_id
    )
    if is_failure(sub):
        return sub
    return success_envelope({"transactionId": helpers.get_transaction_id(sub["data"])}, trace_id)


async def claim_drop(envelope: JsonDict, ctx: DispatchContext, trace_id: str, helpers: WorkflowHelpers) -> JsonDict:
    payload = payload_of(envelope)
    sub = await helpers.invoke_contract(
        "aelf-forest-contract-drop", "ClaimDrop", payload, payload.get("chain"), envelope, trace_id
    )
    if is_failure(sub):
        return sub
    return success_envelope(
        {"transactionId": helpers.get_transaction_id(sub["data"]), "claimDetailList": []},
        trace_id,
    )


async def query_drop(envelope: JsonDict, ctx: DispatchContext, trace_id: str, helpers: WorkflowHelpers) -> JsonDict:
    action = DROP_ACTION_MAP.get(str(envelope.get("action") or ""), "")
    sub = await helpers.invoke_api("aelf-forest-api-drop", action, params_of(envelope), envelope, trace_id)
    if is_failure(sub):
        return sub
    return success_envelope(result_of(sub) or {}, trace_id)


def _whitelist_chain(envelope: JsonDict):
    return params_of(envelope).get("chain") or envelope.get("chain")


async def whitelist_read(
    envelope: JsonDict, ctx: DispatchContext, trace_id: str, helpers: WorkflowHelpers
) -> JsonDict:
    method = WHITELIST_READ_METHOD_MAP.get(str(envelope.get("action") or ""), "")
    sub = await helpers.invoke_contract(
        WHITELIST, method, params_of(envelope), _whitelist_chain(envelope), envelope, trace_id
    )
    if is_failure(sub):
        return sub
    return success_envelope(result_of(sub) or {}, trace_id)


async def whitelist_manage(
    envelope: JsonDict, ctx: DispatchContext, trace_id: str, helpers: WorkflowHelpers
) -> JsonDict:
    method = WHITELIST_MANAGE_METHOD_MAP.get(str(envelope.get("action") or ""), "")
    sub = await helpers.invoke_contract(
        WHITELIST, method, params_of(envelope), _whitelist_chain(envelope), envelope, trace_id
    )
    if is_failure(sub):
        return sub
    return success_envelope({"transactionId": helpers.get_transaction_id(sub["data"])}, trace_id)


P1_WORKFLOW_HANDLERS: Dict[str, WorkflowHandler] = {
    "aelf-forest-issue-item": issue_item,
    "aelf-forest-place-bid": place_bid,
    "aelf-forest-claim-drop": claim_drop,
    "aelf-forest-query-drop": query_drop,
    "aelf-forest-whitelist-read": whitelist_read,
    "aelf-forest-whitelist-manage": whitelist_manage,
}
