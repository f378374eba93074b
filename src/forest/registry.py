"""Forest skill registry: tier, schema references and derived service binding."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from .service import FOREST_SERVICE_KEYS


class SkillTier(str, enum.Enum):
    P0 = "P0"
    P1 = "P1"
    P2 = "P2"


class SkillKind(str, enum.Enum):
    WORKFLOW = "workflow"
    CONTRACT = "method.contract"
    API = "method.api"


_KIND_PREFIXES: Tuple[Tuple[str, SkillKind], ...] = (
    ("schema.workflow.", SkillKind.WORKFLOW),
    ("schema.method.contract.", SkillKind.CONTRACT),
    ("schema.method.api.", SkillKind.API),
)

_KIND_SUFFIX = {
    SkillKind.WORKFLOW: "workflow",
    SkillKind.CONTRACT: "contract",
    SkillKind.API: "api",
}


class RegistryError(ValueError):
    pass


@dataclass(frozen=True)
class SkillBinding:
    input_schema: str
    output_schema: str
    tier: SkillTier


@dataclass(frozen=True)
class SkillDefinition:
    name: str
    input_schema: str
    output_schema: str
    tier: SkillTier
    kind: SkillKind
    service_key: str


def _workflow(schema: str, tier: str) -> SkillBinding:
    return SkillBinding(f"schema.workflow.{schema}.in.v1", f"schema.workflow.{schema}.out.v1", SkillTier(tier))


def _contract(schema: str, tier: str) -> SkillBinding:
    return SkillBinding(
        f"schema.method.contract.{schema}.in.v1", f"schema.method.contract.{schema}.out.v1", SkillTier(tier)
    )


def _api(schema: str, tier: str) -> SkillBinding:
    return SkillBinding(f"schema.method.api.{schema}.in.v1", f"schema.method.api.{schema}.out.v1", SkillTier(tier))


SKILL_BINDINGS: Dict[str, SkillBinding] = {
    "aelf-forest-create-collection": _workflow("createCollection", "P0"),
    "aelf-forest-create-item": _workflow("createItem", "P0"),
    "aelf-forest-batch-create-items": _workflow("batchCreateItems", "P0"),
    "aelf-forest-list-item": _workflow("listItem", "P0"),
    "aelf-forest-buy-now": _workflow("buyNow", "P0"),
    "aelf-forest-make-offer": _workflow("makeOffer", "P0"),
    "aelf-forest-deal-offer": _workflow("dealOffer", "P0"),
    "aelf-forest-cancel-offer": _workflow("cancelOffer", "P0"),
    "aelf-forest-cancel-listing": _workflow("cancelListing", "P0"),
    "aelf-forest-transfer-item": _workflow("transferItem", "P0"),
    "aelf-forest-get-price-quote": _workflow("getPriceQuote", "P0"),
    "aelf-forest-issue-item": _workflow("issueItem", "P1"),
    "aelf-forest-place-bid": _workflow("placeBid", "P1"),
    "aelf-forest-claim-drop": _workflow("claimDrop", "P1"),
    "aelf-forest-query-drop": _workflow("queryDrop", "P1"),
    "aelf-forest-whitelist-read": _workflow("whitelistRead", "P1"),
    "aelf-forest-whitelist-manage": _workflow("whitelistManage", "P1"),
    "aelf-forest-ai-generate": _workflow("aiGenerate", "P2"),
    "aelf-forest-ai-retry": _workflow("aiRetry", "P2"),
    "aelf-forest-create-platform-nft": _workflow("platformNft", "P2"),
    "aelf-forest-miniapp-action": _workflow("miniappAction", "P2"),
    "aelf-forest-update-profile": _workflow("updateProfile", "P2"),
    "aelf-forest-query-collections": _workflow("queryCollections", "P2"),
    "aelf-forest-watch-market-signals": _workflow("watchSignals", "P2"),
    "aelf-forest-contract-market": _contract("market", "P0"),
    "aelf-forest-contract-multitoken": _contract("multitoken", "P0"),
    "aelf-forest-contract-token-adapter": _contract("tokenAdapter", "P0"),
    "aelf-forest-contract-proxy": _contract("proxy", "P0"),
    "aelf-forest-contract-auction": _contract("auction", "P1"),
    "aelf-forest-contract-drop": _contract("drop", "P1"),
    "aelf-forest-contract-whitelist": _contract("whitelist", "P1"),
    "aelf-forest-contract-miniapp": _contract("miniapp", "P2"),
    "aelf-forest-api-market": _api("market", "P0"),
    "aelf-forest-api-nft": _api("nft", "P0"),
    "aelf-forest-api-collection": _api("collection", "P0"),
    "aelf-forest-api-sync": _api("sync", "P0"),
    "aelf-forest-api-seed-auction": _api("seedAuction", "P0"),
    "aelf-forest-api-drop": _api("drop", "P1"),
    "aelf-forest-api-whitelist": _api("whitelist", "P1"),
    "aelf-forest-api-ai": _api("ai", "P2"),
    "aelf-forest-api-platform": _api("platform", "P2"),
    "aelf-forest-api-miniapp": _api("miniapp", "P2"),
    "aelf-forest-api-user": _api("user", "P2"),
    "aelf-forest-api-system": _api("system", "P2"),
    "aelf-forest-api-realtime": _api("realtime", "P2"),
}


def infer_kind(input_schema: str) -> SkillKind:
    for prefix, kind in _KIND_PREFIXES:
        if input_schema.startswith(prefix):
            return kind
    raise RegistryError(f"Unknown skill kind for schema: {input_schema}")


def infer_service_domain(skill_name: str) -> str:
    # Keyword order is significant: the first matching domain wins.
    if "whitelist" in skill_name:
        return "forest.whitelist"
    if "drop" in skill_name:
        return "forest.drop"
    if "ai" in skill_name:
        return "forest.ai"
    if "miniapp" in skill_name:
        return "forest.miniapp"
    if "profile" in skill_name or "-user" in skill_name:
        return "forest.profile"
    if "watch-market-signals" in skill_name or "realtime" in skill_name:
        return "forest.realtime"
    if "quote" in skill_name:
        return "forest.quote"
    if any(word in skill_name for word in ("query-collections", "collection", "discover", "-system")):
        return "forest.discover"
    if any(word in skill_name for word in ("create", "issue", "token-adapter", "sync", "platform")):
        return "forest.create"
    return "forest.market"


def infer_service_key(skill_name: str, kind: SkillKind) -> str:
    return f"{infer_service_domain(skill_name)}.{_KIND_SUFFIX[kind]}"


def is_service_key_allowed(service_key: str, allowed_domains: Iterable[str] = FOREST_SERVICE_KEYS) -> bool:
    for pattern in allowed_domains:
        prefix = pattern[:-1] if pattern.endswith(".*") else pattern
        if service_key.startswith(prefix):
            return True
    return False


def build_registry(
    bindings: Mapping[str, SkillBinding],
    allowed_domains: Iterable[str] = FOREST_SERVICE_KEYS,
) -> Mapping[str, SkillDefinition]:
    """Derive kind and service key for every binding; fail fast on foreign domains."""
    domains = tuple(allowed_domains)
    skills: Dict[str, SkillDefinition] = {}
    for name, binding in bindings.items():
        kind = infer_kind(binding.input_schema)
        service_key = infer_service_key(name, kind)
        if not is_service_key_allowed(service_key, domains):
            raise RegistryError(f'Service key "{service_key}" is outside forest service namespaces.')
        skills[name] = SkillDefinition(
            name=name,
            input_schema=binding.input_schema,
            output_schema=binding.output_schema,
            tier=binding.tier,
            kind=kind,
            service_key=service_key,
        )
    return MappingProxyType(skills)


FOREST_SKILLS: Mapping[str, SkillDefinition] = build_registry(SKILL_BINDINGS)


def get_skill(name: str) -> Optional[SkillDefinition]:
    return FOREST_SKILLS.get(name)


def list_skills() -> List[SkillDefinition]:
    return list(FOREST_SKILLS.values())


def list_skills_by_tier(tier: SkillTier | str) -> List[SkillDefinition]:
    wanted = SkillTier(tier)
    return [skill for skill in FOREST_SKILLS.values() if skill.tier is wanted]


__all__ = [
    "FOREST_SKILLS",
    "RegistryError",
    "SKILL_BINDINGS",
    "SkillBinding",
    "SkillDefinition",
    "SkillKind",
    "SkillTier",
    "build_registry",
    "get_skill",
    "infer_kind",
    "infer_service_domain",
    "infer_service_key",
    "is_service_key_allowed",
    "list_skills",
    "list_skills_by_tier",
]
