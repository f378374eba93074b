from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable, Dict, Optional

from fastapi import APIRouter, Body, HTTPException

from ..config import ENV_PRESETS
from ..context import DispatchContext
from ..dispatcher import dispatch_skill
from ..envelope import DEFAULT_ENV
from ..logging import SERVICE_NAME, log_json
from ..registry import SkillDefinition, SkillTier, get_skill, list_skills, list_skills_by_tier

ContextFactory = Callable[[str], Awaitable[DispatchContext]]


def _describe(skill: SkillDefinition) -> Dict[str, Any]:
    return {
        "name": skill.name,
        "tier": skill.tier.value,
        "kind": skill.kind.value,
        "serviceKey": skill.service_key,
        "inputSchema": skill.input_schema,
        "outputSchema": skill.output_schema,
    }


def register_skill_routes(app, *, context_factory: ContextFactory) -> None:
    """Expose the skill catalogue and dispatcher over HTTP.

    Dispatch always answers 200 with the envelope; callers branch on `success`.
    """
    router = APIRouter()

    @router.get("/skills")
    def list_all(tier: Optional[str] = None):
        if tier is None:
            skills = list_skills()
        else:
            try:
                skills = list_skills_by_tier(SkillTier(tier))
            except ValueError:
                raise HTTPException(status_code=400, detail=f"unknown tier: {tier}")
        return {"skills": [_describe(s) for s in skills], "count": len(skills)}

    @router.get("/skills/{name}")
    def describe(name: str):
        skill = get_skill(name)
        if skill is None:
            raise HTTPException(status_code=404, detail=f"unknown skill: {name}")
        return _describe(skill)

    @router.post("/skills/{name}")
    async def run(name: str, body: Any = Body(default=None)):
        env = body.get("env") if isinstance(body, dict) else None
        ctx = await context_factory(env if isinstance(env, str) and env in ENV_PRESETS else DEFAULT_ENV)
        envelope = await dispatch_skill(name, body if body is not None else {}, ctx)
        log_json(
            logging.INFO,
            "skill_http_dispatch",
            service=SERVICE_NAME,
            skill=name,
            code=envelope.get("code"),
            trace_id=envelope.get("traceId"),
        )
        return envelope

    app.include_router(router)


__all__ = ["ContextFactory", "register_skill_routes"]
