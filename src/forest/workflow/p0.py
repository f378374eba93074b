"""P0 workflows: collection and item creation, listing, offers, transfers and quotes."""

from __future__ import annotations

from typing import Any, Dict, List

from ..address_resolution import MAIN_CHAIN
from ..context import DispatchContext
from ..envelope import JsonDict, is_failure, success_envelope
from .actions import DEFAULT_QUOTE_INCLUDE, QUOTE_INCLUDE_ACTIONS, QUOTE_OUTPUT_KEYS
from .base import WorkflowHandler, WorkflowHelpers, payload_of

MULTITOKEN = "aelf-forest-contract-multitoken"
MARKET = "aelf-forest-contract-market"
PROXY = "aelf-forest-contract-proxy"


async def create_collection(
    envelope: JsonDict, ctx: DispatchContext, trace_id: str, helpers: WorkflowHelpers
) -> JsonDict:
    payload = payload_of(envelope)
    sub = await helpers.invoke_contract(
        MULTITOKEN, "Create", payload, payload.get("issueChainId"), envelope, trace_id
    )
    if is_failure(sub):
        return sub
    return success_envelope(
        {
            "transactionId": helpers.get_transaction_id(sub["data"]),
            "symbol": payload.get("symbol"),
            "crossChainSynced": payload.get("issueChainId") == MAIN_CHAIN or bool(envelope.get("dryRun")),
        },
        trace_id,
    )


async def create_item(envelope: JsonDict, ctx: DispatchContext, trace_id: str, helpers: WorkflowHelpers) -> JsonDict:
    """Create the token, then mirror it onto the side chain when it is issued there.

    A failed sync does not fail the workflow; it is reported as a warning.
    """
    payload = payload_of(envelope)
    issue_chain = payload.get("issueChainId")
    sub = await helpers.invoke_contract(MULTITOKEN, "Create", payload, issue_chain, envelope, trace_id)
    if is_failure(sub):
        return sub

    warnings: List[str] = []
    transaction_id = helpers.get_transaction_id(sub["data"])
    synced = issue_chain == MAIN_CHAIN or bool(envelope.get("dryRun"))

    if not envelope.get("dryRun") and issue_chain and issue_chain != MAIN_CHAIN:
        sync = await helpers.invoke_api(
            "aelf-forest-api-sync",
            "fetchSyncCollection",
            {
                "fromChainId": MAIN_CHAIN,
                "toChainId": issue_chain,
                "symbol": payload.get("symbol"),
                "txHash": transaction_id,
            },
            envelope,
            trace_id,
        )
        if is_failure(sync):
            warnings.append(f"Cross-chain sync degraded: {sync.get('message')}")
        else:
            synced = True

    return success_envelope(
        {
            "transactionId": transaction_id,
            "symbol": payload.get("symbol"),
            "issued": True,
            "crossChainSynced": synced,
        },
        trace_id,
        warnings,
    )


async def batch_create_items(
    envelope: JsonDict, ctx: DispatchContext, trace_id: str, helpers: WorkflowHelpers
) -> JsonDict:
    payload = payload_of(envelope)
    sub = await helpers.invoke_contract(PROXY, "BatchCreateNFT", payload, payload.get("chain"), envelope, trace_id)
    if is_failure(sub):
        return sub
    items = payload.get("items")
    return success_envelope(
        {
            "transactionId": helpers.get_transaction_id(sub["data"]),
            "count": len(items) if isinstance(items, list) else 0,
        },
        trace_id,
    )


def _market_call(method: str, **extra: Any) -> WorkflowHandler:
    """Handler that sends one market contract method with the payload as args."""

    async def handler(envelope: JsonDict, ctx: DispatchContext, trace_id: str, helpers: WorkflowHelpers) -> JsonDict:
        payload = payload_of(envelope)
        sub = await helpers.invoke_contract(MARKET, method, payload, payload.get("chain"), envelope, trace_id)
        if is_failure(sub):
            return sub
        return success_envelope({"transactionId": helpers.get_transaction_id(sub["data"]), **extra}, trace_id)

    handler.__name__ = f"market_{method}"
    return handler


list_item = _market_call("ListWithFixedPrice")
buy_now = _market_call("BatchBuyNow", partialFailed=False)
make_offer = _market_call("MakeOffer")
deal_offer = _market_call("Deal")


async def cancel_offer(envelope: JsonDict, ctx: DispatchContext, trace_id: str, helpers: WorkflowHelpers) -> JsonDict:
    payload = payload_of(envelope)
    method = "BatchCancelOfferList" if payload.get("mode") == "batch" else "CancelOfferListByExpireTime"
    sub = await helpers.invoke_contract(
        MARKET, method, payload.get("params") or payload, payload.get("chain"), envelope, trace_id
    )
    if is_failure(sub):
        return sub
    return success_envelope({"transactionId": helpers.get_transaction_id(sub["data"])}, trace_id)


def _cancel_listing_method(mode: Any) -> str:
    if mode in ("batch", "batchDelist"):
        return "BatchDeList"
    if mode == "batchCancelList":
        return "BatchCancelList"
    return "Delist"


async def cancel_listing(
    envelope: JsonDict, ctx: DispatchContext, trace_id: str, helpers: WorkflowHelpers
) -> JsonDict:
    payload = payload_of(envelope)
    sub = await helpers.invoke_contract(
        MARKET,
        _cancel_listing_method(payload.get("mode")),
        payload.get("params") or payload,
        payload.get("chain"),
        envelope,
        trace_id,
    )
    if is_failure(sub):
        return sub
    return success_envelope({"transactionId": helpers.get_transaction_id(sub["data"])}, trace_id)


async def transfer_item(
    envelope: JsonDict, ctx: DispatchContext, trace_id: str, helpers: WorkflowHelpers
) -> JsonDict:
    payload = payload_of(envelope)
    sub = await helpers.invoke_contract(MULTITOKEN, "Transfer", payload, payload.get("chain"), envelope, trace_id)
    if is_failure(sub):
        return sub
    return success_envelope({"transactionId": helpers.get_transaction_id(sub["data"])}, trace_id)


async def get_price_quote(
    envelope: JsonDict, ctx: DispatchContext, trace_id: str, helpers: WorkflowHelpers
) -> JsonDict:
    """Collect the requested quote sections; each failed section degrades to a warning."""
    payload = payload_of(envelope)
    include = payload.get("include")
    sections = include if isinstance(include, list) else list(DEFAULT_QUOTE_INCLUDE)
    query = {"symbol": payload.get("symbol"), "nftId": payload.get("nftId"), "chain": payload.get("chain")}

    data: Dict[str, Any] = {}
    warnings: List[str] = []
    for section in sections:
        action = QUOTE_INCLUDE_ACTIONS.get(section)
        if not action:
            continue
        sub = await helpers.invoke_api("aelf-forest-api-market", action, dict(query), envelope, trace_id)
        if is_failure(sub):
            warnings.append(f"{section} degraded: {sub.get('message')}")
            continue
        data[QUOTE_OUTPUT_KEYS.get(section, section)] = sub["data"].get("result")

    return success_envelope(data, trace_id, warnings)


P0_WORKFLOW_HANDLERS: Dict[str, WorkflowHandler] = {
    "aelf-forest-create-collection": create_collection,
    "aelf-forest-create-item": create_item,
    "aelf-forest-batch-create-items": batch_create_items,
    "aelf-forest-list-item": list_item,
    "aelf-forest-buy-now": buy_now,
    "aelf-forest-make-offer": make_offer,
    "aelf-forest-deal-offer": deal_offer,
    "aelf-forest-cancel-offer": cancel_offer,
    "aelf-forest-cancel-listing": cancel_listing,
    "aelf-forest-transfer-item": transfer_item,
    "aelf-forest-get-price-quote": get_price_quote,
}
