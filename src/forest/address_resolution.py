from __future__ import annotations

import enum
from typing import Any, Dict, FrozenSet, Mapping, Optional, Sequence, Tuple

MAIN_CHAIN = "AELF"
CHAIN_SET: FrozenSet[str] = frozenset({"AELF", "tDVV", "tDVW"})

READ_PREFIX = "Get"


class ExecutionMode(str, enum.Enum):
    READ = "read"
    WRITE = "write"


# Methods known to be read-only even when the prefix rule would not say so.
CONTRACT_READ_METHODS: Dict[str, FrozenSet[str]] = {
    "aelf-forest-contract-market": frozenset(
        {"GetListedNFTInfoList", "GetTotalOfferAmount", "GetTotalEffectiveListedNFTAmount"}
    ),
    "aelf-forest-contract-multitoken": frozenset({"GetBalance", "GetTokenInfo", "GetAllowance"}),
    "aelf-forest-contract-token-adapter": frozenset(),
    "aelf-forest-contract-proxy": frozenset({"GetProxyAccountByProxyAccountAddress"}),
    "aelf-forest-contract-auction": frozenset(),
    "aelf-forest-contract-drop": frozenset(),
    "aelf-forest-contract-whitelist": frozenset(
        {
            "GetAddressFromWhitelist",
            "GetWhitelist",
            "GetTagInfoFromWhitelist",
            "GetWhitelistDetail",
            "GetWhitelistId",
            "GetTagInfoListByWhitelist",
        }
    ),
    "aelf-forest-contract-miniapp": frozenset(),
}

# (main chain keys, side chain keys); first non-empty value wins.
CONTRACT_ADDRESS_KEYS: Dict[str, Tuple[Sequence[str], Sequence[str]]] = {
    "aelf-forest-contract-market": (
        ("nftMarketMainAddress", "marketMainAddress", "marketAddress", "nftMarketAddress"),
        ("nftMarketSideAddress", "marketSideAddress", "sideChainMarketAddress"),
    ),
    "aelf-forest-contract-multitoken": (("mainChainAddress",), ("sideChainAddress",)),
    "aelf-forest-contract-token-adapter": (
        ("tokenAdapterMainAddress", "tokenAdapterAddress"),
        ("tokenAdapterMainAddress", "tokenAdapterAddress"),
    ),
    "aelf-forest-contract-proxy": (("proxyMainAddress",), ("proxySideAddress",)),
    "aelf-forest-contract-auction": (
        ("auctionMainAddress", "seedAuctionMainAddress", "auctionAddress"),
        ("auctionSideAddress", "seedAuctionSideAddress"),
    ),
    "aelf-forest-contract-drop": (("dropMainAddress", "dropAddress"), ("dropSideAddress",)),
    "aelf-forest-contract-whitelist": (
        ("whitelistMainAddress", "whitelistAddress"),
        ("whitelistSideAddress",),
    ),
    "aelf-forest-contract-miniapp": (
        ("miniAppMainAddress", "treePointsMainAddress", "miniAppAddress"),
        ("miniAppSideAddress", "treePointsSideAddress"),
    ),
}


def normalize_chain(chain: Optional[str] = None) -> str:
    if chain and chain in CHAIN_SET:
        return chain
    return MAIN_CHAIN


def get_execution_mode(skill_name: str, method: str) -> ExecutionMode:
    if method in CONTRACT_READ_METHODS.get(skill_name, frozenset()):
        return ExecutionMode.READ
    if method.startswith(READ_PREFIX):
        return ExecutionMode.READ
    return ExecutionMode.WRITE


def pick_contract_address(contracts: Mapping[str, Any], keys: Sequence[str]) -> str:
    for key in keys:
        value = contracts.get(key)
        if isinstance(value, str) and value.strip():
            return value
    return ""


def resolve_contract_address(skill_name: str, chain: str, contracts: Mapping[str, Any]) -> str:
    """Contract address for a skill on a chain, or '' when unconfigured."""
    keys = CONTRACT_ADDRESS_KEYS.get(skill_name)
    if keys is None:
        return ""
    main_keys, side_keys = keys
    return pick_contract_address(contracts or {}, main_keys if chain == MAIN_CHAIN else side_keys)


__all__ = [
    "CHAIN_SET",
    "CONTRACT_ADDRESS_KEYS",
    "CONTRACT_READ_METHODS",
    "ExecutionMode",
    "MAIN_CHAIN",
    "get_execution_mode",
    "normalize_chain",
    "pick_contract_address",
    "resolve_contract_address",
]
