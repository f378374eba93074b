import dataclasses
import json

import httpx
import pytest

from forest.dispatcher import EXECUTORS, dispatch_skill
from forest.registry import SkillKind, list_skills
from skill_inputs import minimal_input

LIST_ITEM = "aelf-forest-list-item"
API_MARKET = "aelf-forest-api-market"
CONTRACT_MARKET = "aelf-forest-contract-market"

MARKET_ROUTES = json.dumps({"aelf-forest-api-market": {"fetchTokens": {"method": "GET", "path": "/app/tokens"}}})


def test_every_kind_has_an_executor():
    assert set(EXECUTORS) == set(SkillKind)


@pytest.mark.asyncio
async def test_unknown_skill_is_invalid_params(ctx, invokers):
    result = await dispatch_skill("aelf-forest-nope", {}, ctx)
    assert result["success"] is False
    assert result["code"] == "INVALID_PARAMS"
    assert result["message"] == "Unknown forest skill: aelf-forest-nope"
    assert "traceId" not in result


@pytest.mark.asyncio
@pytest.mark.parametrize("raw", [[1, 2], "text", 42, {"env": "mainnet"}])
async def test_malformed_input_is_rejected_without_io(ctx, invokers, raw):
    result = await dispatch_skill(LIST_ITEM, raw, ctx)
    assert result["code"] == "INVALID_PARAMS"
    assert result["details"]["schema"] == "schema.workflow.listItem.in.v1"
    assert result["details"]["errors"]
    assert result["traceId"].startswith(f"{LIST_ITEM}-")
    assert invokers.contract_calls == [] and invokers.api_calls == []


@pytest.mark.asyncio
async def test_none_input_is_treated_as_empty_object(ctx):
    result = await dispatch_skill(LIST_ITEM, None, ctx)
    assert result["code"] == "INVALID_PARAMS"
    assert not any("is not of type" in err["message"] for err in result["details"]["errors"])


@pytest.mark.asyncio
async def test_list_item_live_returns_transaction_id(ctx, invokers):
    invokers.contract_results["ListWithFixedPrice"] = {"TransactionId": "tx-list"}
    result = await dispatch_skill(LIST_ITEM, minimal_input(LIST_ITEM, traceId="trace-1"), ctx)

    assert result == {
        "success": True,
        "code": "OK",
        "data": {"transactionId": "tx-list"},
        "warnings": [],
        "traceId": "trace-1",
    }
    (call,) = invokers.contract_calls
    assert call.method == "ListWithFixedPrice"
    assert call.contract_address == "market-main"
    assert call.rpc_url == "https://rpc.aelf.test"


@pytest.mark.asyncio
async def test_caller_input_is_not_mutated(ctx):
    raw = minimal_input(LIST_ITEM)
    before = json.loads(json.dumps(raw))
    await dispatch_skill(LIST_ITEM, raw, ctx)
    assert raw == before


@pytest.mark.asyncio
@pytest.mark.parametrize("skill", list_skills(), ids=lambda s: s.name)
async def test_globally_disabled_blocks_every_skill(ctx, invokers, snapshot_env, skill):
    snapshot_env["EFOREST_DISABLE_ALL_SERVICES"] = "true"
    result = await dispatch_skill(skill.name, minimal_input(skill.name), ctx)
    assert result["code"] == "SERVICE_DISABLED"
    assert result["maintenance"] is True
    assert result["details"] == {"serviceKey": skill.service_key}
    assert invokers.contract_calls == [] and invokers.api_calls == []


@pytest.mark.asyncio
async def test_maintenance_gate(ctx, invokers, snapshot_env):
    snapshot_env["EFOREST_MAINTENANCE_SERVICES"] = "forest.market.*"
    result = await dispatch_skill(LIST_ITEM, minimal_input(LIST_ITEM), ctx)
    assert result["code"] == "MAINTENANCE"
    assert result["message"] == "Service in maintenance for key forest.market.workflow."
    assert invokers.contract_calls == []


@pytest.mark.asyncio
async def test_gating_is_read_fresh_per_call(ctx, snapshot_env):
    snapshot_env["EFOREST_SERVICE_FOREST_MARKET_WORKFLOW"] = "false"
    assert (await dispatch_skill(LIST_ITEM, minimal_input(LIST_ITEM), ctx))["code"] == "SERVICE_DISABLED"
    del snapshot_env["EFOREST_SERVICE_FOREST_MARKET_WORKFLOW"]
    assert (await dispatch_skill(LIST_ITEM, minimal_input(LIST_ITEM), ctx))["success"] is True


@pytest.mark.asyncio
async def test_workflow_sub_step_is_gated_independently(ctx, invokers, snapshot_env):
    snapshot_env["EFOREST_DISABLED_SERVICES"] = "forest.market.contract"
    result = await dispatch_skill(LIST_ITEM, minimal_input(LIST_ITEM), ctx)
    assert result["code"] == "SERVICE_DISABLED"
    assert result["details"] == {"serviceKey": "forest.market.contract"}
    assert invokers.contract_calls == []


@pytest.mark.asyncio
async def test_api_skill_without_route_is_maintenance(ctx, invokers):
    result = await dispatch_skill(API_MARKET, minimal_input(API_MARKET), ctx)
    assert result["success"] is False
    assert result["code"] == "MAINTENANCE"
    assert result["maintenance"] is True
    assert result["details"] == {"skillName": API_MARKET, "action": "fetchTokens"}
    assert "EFOREST_FOREST_API_ACTION_MAP_JSON" in result["message"]
    assert invokers.api_calls == []


@pytest.mark.asyncio
async def test_api_skill_live_call(ctx, invokers, snapshot_env):
    snapshot_env["EFOREST_FOREST_API_ACTION_MAP_JSON"] = MARKET_ROUTES
    invokers.api_results["fetchTokens"] = [{"symbol": "ELF"}]
    result = await dispatch_skill(
        API_MARKET, minimal_input(API_MARKET, params={"page": 1}, timeoutMs=5000), ctx
    )
    assert result["success"] is True
    assert result["data"] == {
        "action": "fetchTokens",
        "route": {"httpMethod": "GET", "path": "/app/tokens", "authRequired": True},
        "params": {"page": 1},
        "result": [{"symbol": "ELF"}],
    }
    (call,) = invokers.api_calls
    assert call.timeout_ms == 5000
    assert call.params == {"page": 1}


@pytest.mark.asyncio
async def test_contract_read_has_no_transaction_id(ctx, invokers):
    invokers.contract_results["GetTotalOfferAmount"] = {"TransactionId": "not-a-write", "amount": 3}
    result = await dispatch_skill(CONTRACT_MARKET, minimal_input(CONTRACT_MARKET), ctx)
    assert result["data"]["executionMode"] == "read"
    assert "transactionId" not in result["data"]
    assert result["data"]["result"] == {"TransactionId": "not-a-write", "amount": 3}


@pytest.mark.asyncio
async def test_contract_side_chain_address(ctx, invokers):
    raw = minimal_input(CONTRACT_MARKET, method="MakeOffer", chain="tDVV")
    result = await dispatch_skill(CONTRACT_MARKET, raw, ctx)
    assert result["data"]["executionMode"] == "write"
    assert result["data"]["contractAddress"] == "market-side"
    assert result["data"]["transactionId"] == "tx-MakeOffer"
    assert invokers.contract_calls[0].rpc_url == "https://rpc.tdvv.test"


@pytest.mark.asyncio
async def test_missing_contract_address_is_maintenance(ctx, invokers, network_config):
    network_config.contracts.pop("nftMarketSideAddress")
    result = await dispatch_skill(CONTRACT_MARKET, minimal_input(CONTRACT_MARKET, chain="tDVV"), ctx)
    assert result["code"] == "MAINTENANCE"
    assert result["details"] == {"skillName": CONTRACT_MARKET, "chain": "tDVV"}
    assert invokers.contract_calls == []


@pytest.mark.asyncio
async def test_missing_rpc_url_is_maintenance(ctx, invokers, network_config):
    network_config.rpc_urls.pop("tDVW")
    result = await dispatch_skill(CONTRACT_MARKET, minimal_input(CONTRACT_MARKET, chain="tDVW"), ctx)
    assert result["code"] == "MAINTENANCE"
    assert result["message"] == "RPC URL is not configured for chain tDVW."


@pytest.mark.asyncio
@pytest.mark.parametrize("skill", list_skills(), ids=lambda s: s.name)
async def test_dry_run_never_invokes(ctx, invokers, snapshot_env, skill):
    snapshot_env["EFOREST_FOREST_API_ACTION_MAP_JSON"] = MARKET_ROUTES
    await dispatch_skill(skill.name, minimal_input(skill.name, dryRun=True), ctx)
    assert invokers.contract_calls == []
    assert invokers.api_calls == []


@pytest.mark.asyncio
async def test_contract_dry_run_plan(ctx):
    result = await dispatch_skill(CONTRACT_MARKET, minimal_input(CONTRACT_MARKET, dryRun=True), ctx)
    assert result["success"] is True
    assert result["data"] == {
        "dryRun": True,
        "executionMode": "read",
        "chain": "AELF",
        "contractAddress": "market-main",
        "method": "GetTotalOfferAmount",
        "args": {},
        "steps": [
            {"action": "View contract method", "contract": "market-main", "method": "GetTotalOfferAmount", "params": {}}
        ],
    }


@pytest.mark.asyncio
async def test_api_dry_run_plan_without_route(ctx):
    result = await dispatch_skill(API_MARKET, minimal_input(API_MARKET, dryRun=True), ctx)
    assert result["success"] is True
    assert result["data"]["route"] is None
    assert result["data"]["steps"] == [{"action": "Invoke backend API action", "apiAction": "fetchTokens", "params": {}}]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "error, code",
    [
        (RuntimeError("request timed out"), "TX_TIMEOUT"),
        (RuntimeError('Transaction failed with status "FAILED". TransactionId: x'), "ONCHAIN_REVERT"),
        (RuntimeError("unexpected"), "INTERNAL_ERROR"),
    ],
)
async def test_contract_invoker_errors_are_mapped(ctx, invokers, error, code):
    invokers.contract_error = error
    result = await dispatch_skill(CONTRACT_MARKET, minimal_input(CONTRACT_MARKET, traceId="t-err"), ctx)
    assert result["success"] is False
    assert result["code"] == code
    assert result["traceId"] == "t-err"


@pytest.mark.asyncio
async def test_api_http_500_is_upstream_error(ctx, invokers, snapshot_env):
    snapshot_env["EFOREST_FOREST_API_ACTION_MAP_JSON"] = MARKET_ROUTES
    request = httpx.Request("GET", "https://api.forest.test/app/tokens")
    invokers.api_errors["fetchTokens"] = httpx.HTTPStatusError(
        "server error", request=request, response=httpx.Response(500, request=request)
    )
    result = await dispatch_skill(API_MARKET, minimal_input(API_MARKET), ctx)
    assert result["code"] == "UPSTREAM_ERROR"
    assert result["retryable"] is True
    assert result["details"] == {"status": 500}


@pytest.mark.asyncio
async def test_workflow_propagates_sub_failure_verbatim(ctx, invokers):
    invokers.contract_error = RuntimeError("execution reverted: insufficient balance")
    result = await dispatch_skill(LIST_ITEM, minimal_input(LIST_ITEM, traceId="outer"), ctx)
    assert result == {
        "success": False,
        "code": "ONCHAIN_REVERT",
        "message": "execution reverted: insufficient balance",
        "retryable": False,
        "traceId": "outer",
    }


@pytest.mark.asyncio
async def test_sub_dispatch_inherits_envelope_fields(ctx, invokers):
    await dispatch_skill(LIST_ITEM, minimal_input(LIST_ITEM, env="testnet", timeoutMs=9000), ctx)
    (call,) = invokers.contract_calls
    assert call.timeout_ms == 9000
    assert call.chain == "AELF"


@pytest.mark.asyncio
async def test_generated_trace_id_is_shared_with_sub_steps(ctx):
    result = await dispatch_skill(LIST_ITEM, minimal_input(LIST_ITEM), ctx)
    assert result["traceId"].startswith(f"{LIST_ITEM}-")


@pytest.mark.asyncio
async def test_undecodable_route_file_is_maintenance_not_an_exception(ctx, invokers, snapshot_env, tmp_path):
    route_file = tmp_path / "routes.yaml"
    route_file.write_bytes(b"aelf-forest-api-market:\n  fetchTokens:\n    path: /app/caf\xe9\n")
    snapshot_env["EFOREST_FOREST_API_ACTION_MAP_FILE"] = str(route_file)
    result = await dispatch_skill(API_MARKET, minimal_input(API_MARKET), ctx)
    assert result["code"] == "MAINTENANCE"
    assert result["details"] == {"skillName": API_MARKET, "action": "fetchTokens"}
    assert invokers.api_calls == []


@pytest.mark.asyncio
async def test_snapshot_failure_becomes_envelope(ctx, invokers):
    def broken_snapshot():
        raise RuntimeError("config store unreachable")

    result = await dispatch_skill(
        LIST_ITEM, minimal_input(LIST_ITEM, traceId="snap"), dataclasses.replace(ctx, snapshot=broken_snapshot)
    )
    assert result == {
        "success": False,
        "code": "INTERNAL_ERROR",
        "message": "config store unreachable",
        "retryable": False,
        "traceId": "snap",
    }
    assert invokers.contract_calls == []
