import os
import sys
from typing import Any, Dict, List

import pytest

# Add src to sys.path so 'import forest' and 'from server import app' work when running tests from repo root
CURRENT_DIR = os.path.dirname(__file__)
SERVICE_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, os.pardir))
SRC_ROOT = os.path.join(SERVICE_ROOT, "src")

for path in (SERVICE_ROOT, SRC_ROOT):
    if path not in sys.path:
        sys.path.insert(0, path)

from forest.config import ConfigSnapshot, NetworkConfig  # noqa: E402
from forest.context import DispatchContext  # noqa: E402

GATING_ENV_KEYS = (
    "EFOREST_DISABLE_ALL_SERVICES",
    "EFOREST_ENABLED_SERVICES",
    "EFOREST_DISABLED_SERVICES",
    "EFOREST_MAINTENANCE_SERVICES",
    "EFOREST_FOREST_API_ACTION_MAP_JSON",
    "FOREST_API_ACTION_MAP_JSON",
    "EFOREST_FOREST_API_ACTION_MAP_FILE",
    "EFOREST_NETWORK",
    "AELF_ENV",
    "EFOREST_API_URL",
    "AELF_API_URL",
    "EFOREST_RPC_URL",
    "AELF_RPC_URL",
    "EFOREST_RPC_URL_TDVV",
    "AELF_RPC_URL_TDVV",
    "EFOREST_RPC_URL_TDVW",
    "AELF_RPC_URL_TDVW",
    "EFOREST_API_TOKEN",
)

CONTRACTS = {
    "mainChainAddress": "multi-main",
    "sideChainAddress": "multi-side",
    "nftMarketMainAddress": "market-main",
    "nftMarketSideAddress": "market-side",
    "tokenAdapterMainAddress": "adapter-main",
    "proxyMainAddress": "proxy-main",
    "proxySideAddress": "proxy-side",
    "auctionMainAddress": "auction-main",
    "auctionSideAddress": "auction-side",
    "dropMainAddress": "drop-main",
    "dropSideAddress": "drop-side",
    "whitelistMainAddress": "whitelist-main",
    "whitelistSideAddress": "whitelist-side",
    "miniAppMainAddress": "miniapp-main",
    "miniAppSideAddress": "miniapp-side",
}

RPC_URLS = {
    "AELF": "https://rpc.aelf.test",
    "tDVV": "https://rpc.tdvv.test",
    "tDVW": "https://rpc.tdvw.test",
}


@pytest.fixture(autouse=True)
def clear_env(monkeypatch):
    for key in GATING_ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    for key in list(os.environ):
        if key.startswith("EFOREST_SERVICE_"):
            monkeypatch.delenv(key, raising=False)
    yield


class RecordingInvokers:
    """Contract and API invokers that record requests and answer from canned results."""

    def __init__(self):
        self.contract_calls: List[Any] = []
        self.api_calls: List[Any] = []
        self.contract_results: Dict[str, Any] = {}
        self.api_results: Dict[str, Any] = {}
        self.api_errors: Dict[str, BaseException] = {}
        self.contract_error: BaseException | None = None

    async def contract(self, request):
        self.contract_calls.append(request)
        if self.contract_error is not None:
            raise self.contract_error
        return self.contract_results.get(request.method, {"TransactionId": f"tx-{request.method}"})

    async def api(self, request):
        self.api_calls.append(request)
        if request.action in self.api_errors:
            raise self.api_errors[request.action]
        return self.api_results.get(request.action, {"ok": True, "action": request.action})


@pytest.fixture
def network_config():
    return NetworkConfig(
        api_url="https://api.forest.test",
        rpc_urls=dict(RPC_URLS),
        contracts=dict(CONTRACTS),
        api_token="token-123",
    )


@pytest.fixture
def invokers():
    return RecordingInvokers()


@pytest.fixture
def snapshot_env():
    """Mutable environment mapping read by the context's snapshot on every dispatch."""
    return {}


@pytest.fixture
def ctx(network_config, invokers, snapshot_env):
    return DispatchContext(
        config=network_config,
        contract_invoker=invokers.contract,
        api_invoker=invokers.api,
        snapshot=lambda: ConfigSnapshot.from_env(snapshot_env),
    )
