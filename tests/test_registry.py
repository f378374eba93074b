import pytest

from forest.registry import (
    FOREST_SKILLS,
    RegistryError,
    SkillBinding,
    SkillKind,
    SkillTier,
    build_registry,
    get_skill,
    infer_kind,
    infer_service_key,
    list_skills,
    list_skills_by_tier,
)
from forest.schemas import has_schema
from forest.service import FOREST_SERVICE_KEYS
from forest.workflow import list_workflow_handlers


def test_registry_has_all_skills():
    assert len(FOREST_SKILLS) == 45
    assert len(list_skills()) == 45
    kinds = [s.kind for s in list_skills()]
    assert kinds.count(SkillKind.WORKFLOW) == 24
    assert kinds.count(SkillKind.CONTRACT) == 8
    assert kinds.count(SkillKind.API) == 13


def test_every_schema_reference_resolves():
    for skill in list_skills():
        assert has_schema(skill.input_schema), skill.input_schema
        assert has_schema(skill.output_schema), skill.output_schema


def test_every_workflow_skill_has_a_handler():
    workflows = {s.name for s in list_skills() if s.kind is SkillKind.WORKFLOW}
    assert workflows == set(list_workflow_handlers())


def test_service_keys_stay_in_forest_namespaces():
    prefixes = tuple(p[:-1] for p in FOREST_SERVICE_KEYS)
    for skill in list_skills():
        assert skill.service_key.startswith(prefixes), skill.service_key


@pytest.mark.parametrize(
    "name, kind, expected",
    [
        ("aelf-forest-create-item", SkillKind.WORKFLOW, "forest.create.workflow"),
        ("aelf-forest-create-collection", SkillKind.WORKFLOW, "forest.discover.workflow"),
        ("aelf-forest-whitelist-read", SkillKind.WORKFLOW, "forest.whitelist.workflow"),
        ("aelf-forest-claim-drop", SkillKind.WORKFLOW, "forest.drop.workflow"),
        ("aelf-forest-contract-drop", SkillKind.CONTRACT, "forest.drop.contract"),
        ("aelf-forest-api-ai", SkillKind.API, "forest.ai.api"),
        ("aelf-forest-update-profile", SkillKind.WORKFLOW, "forest.profile.workflow"),
        ("aelf-forest-api-user", SkillKind.API, "forest.profile.api"),
        ("aelf-forest-watch-market-signals", SkillKind.WORKFLOW, "forest.realtime.workflow"),
        ("aelf-forest-get-price-quote", SkillKind.WORKFLOW, "forest.quote.workflow"),
        ("aelf-forest-api-collection", SkillKind.API, "forest.discover.api"),
        ("aelf-forest-api-system", SkillKind.API, "forest.discover.api"),
        ("aelf-forest-contract-token-adapter", SkillKind.CONTRACT, "forest.create.contract"),
        ("aelf-forest-api-sync", SkillKind.API, "forest.create.api"),
        ("aelf-forest-buy-now", SkillKind.WORKFLOW, "forest.market.workflow"),
        ("aelf-forest-contract-market", SkillKind.CONTRACT, "forest.market.contract"),
    ],
)
def test_service_key_inference(name, kind, expected):
    assert infer_service_key(name, kind) == expected
    assert get_skill(name).service_key == expected


def test_keyword_order_first_match_wins():
    assert get_skill("aelf-forest-create-platform-nft").service_key == "forest.create.workflow"
    assert get_skill("aelf-forest-ai-generate").service_key == "forest.ai.workflow"
    assert get_skill("aelf-forest-query-drop").service_key == "forest.drop.workflow"


def test_kind_inferred_from_schema_prefix():
    assert infer_kind("schema.workflow.listItem.in.v1") is SkillKind.WORKFLOW
    assert infer_kind("schema.method.contract.market.in.v1") is SkillKind.CONTRACT
    assert infer_kind("schema.method.api.market.in.v1") is SkillKind.API
    with pytest.raises(RegistryError):
        infer_kind("schema.other.thing.in.v1")


def test_build_registry_rejects_foreign_service_domain():
    bindings = {"aelf-forest-buy-now": SkillBinding("schema.workflow.buyNow.in.v1", "x", SkillTier.P0)}
    with pytest.raises(RegistryError):
        build_registry(bindings, allowed_domains=("forest.create.*",))


def test_registry_is_read_only():
    with pytest.raises(TypeError):
        FOREST_SKILLS["aelf-forest-new"] = None  # type: ignore[index]


def test_list_by_tier():
    p0 = list_skills_by_tier("P0")
    assert all(s.tier is SkillTier.P0 for s in p0)
    assert {s.name for s in p0} >= {"aelf-forest-buy-now", "aelf-forest-api-market"}
    total = sum(len(list_skills_by_tier(t)) for t in SkillTier)
    assert total == 45


def test_unknown_skill_lookup():
    assert get_skill("aelf-forest-nope") is None
