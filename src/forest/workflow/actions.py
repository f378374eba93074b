"""Workflow action names mapped onto backend API actions and contract methods."""

from __future__ import annotations

from typing import Dict

DROP_ACTION_MAP: Dict[str, str] = {
    "list": "fetchDropList",
    "detail": "fetchDropDetail",
    "quota": "fetchDropQuota",
    "recommendation": "fetchRecommendAction",
}

WHITELIST_READ_METHOD_MAP: Dict[str, str] = {
    "getWhitelist": "GetWhitelist",
    "getWhitelistDetail": "GetWhitelistDetail",
    "getAddressFromWhitelist": "GetAddressFromWhitelist",
    "getTagInfoFromWhitelist": "GetTagInfoFromWhitelist",
    "getWhitelistId": "GetWhitelistId",
    "getTagInfoListByWhitelist": "GetTagInfoListByWhitelist",
}

WHITELIST_MANAGE_METHOD_MAP: Dict[str, str] = {
    "enable": "EnableWhitelist",
    "disable": "DisableWhitelist",
    "addAddressInfo": "AddAddressInfoListToWhitelist",
    "removeInfo": "RemoveInfoFromWhitelist",
    "updateExtraInfo": "UpdateExtraInfo",
    "addExtraInfo": "AddExtraInfo",
    "removeTagInfo": "RemoveTagInfo",
    "reset": "ResetWhitelist",
}

AI_RETRY_ACTION_MAP: Dict[str, str] = {
    "retryByTransactionId": "fetchRetryGenerateAIArts",
    "listFailed": "fetchFailedAIArtsNFT",
    "listImages": "fetchAiImages",
    "updateImageStatus": "updateAiImagesStatus",
}

PLATFORM_ACTION_MAP: Dict[str, str] = {
    "create": "fetchCreatePlatformNFT",
    "info": "fetchCreatePlatformNFTInfo",
}

MINIAPP_API_ACTION_MAP: Dict[str, str] = {
    "userInfo": "fetchMiniAppUserInfo",
    "watering": "fetchMiniAppWatering",
    "claim": "fetchMiniAppClaim",
    "levelUpdate": "fetchMiniAppLevelUpdate",
    "activityList": "fetchMiniAppActivityList",
    "activityDetail": "fetchMiniAppActivityDetail",
    "pointsConvert": "fetchMiniAppPointsConvert",
    "friendList": "fetchMiniAppFriendList",
}

MINIAPP_ONCHAIN_METHOD_MAP: Dict[str, str] = {
    "onchainAddPoints": "AddTreePoints",
    "onchainLevelUpgrade": "TreeLevelUpgrade",
    "onchainClaimPoints": "ClaimTreePoints",
}

COLLECTION_ACTION_MAP: Dict[str, str] = {
    "collections": "fetchCollections",
    "searchCollections": "fetchSearchCollections",
    "recommendedCollections": "fetchRecommendedCollections",
    "collectionInfo": "fetchNFTCollectionInfo",
    "compositeNftInfos": "fetchCompositeNftInfos",
    "traits": "fetchCollectionAllTraitsInfos",
    "generation": "fetchCollectionGenerationInfos",
    "rarity": "fetchCollectionRarityInfos",
    "activities": "fetchCollectionActivities",
    "trending": "fetchTrendingCollections",
    "hot": "fetchHotNFTs",
}

# Served by the NFT API rather than the collection API.
NFT_API_COLLECTION_ACTIONS = frozenset({"fetchHotNFTs"})

WATCH_SIGNAL_ACTION_MAP: Dict[str, str] = {
    "subscribe": "registerHandler",
    "unsubscribe": "unRegisterHandler",
    "pullSnapshot": "snapshot",
}

QUOTE_INCLUDE_ACTIONS: Dict[str, str] = {
    "tokenData": "fetchGetTokenData",
    "nftMarketData": "fetchGetNftPrices",
    "saleInfo": "fetchNftSalesInfo",
    "txFee": "fetchTransactionFee",
}

# Output keys for quote sections whose response name differs from the request name.
QUOTE_OUTPUT_KEYS: Dict[str, str] = {
    "nftMarketData": "marketPrice",
    "tokenData": "tokenPrice",
}

DEFAULT_QUOTE_INCLUDE = tuple(QUOTE_INCLUDE_ACTIONS)
