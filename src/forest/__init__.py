"""Forest skill orchestration: registry, validation, gating and dispatch."""

from .config import ConfigSnapshot, NetworkConfig, load_network_config
from .context import DispatchContext
from .dispatcher import dispatch_skill
from .envelope import FailureCode, failure_envelope, is_failure, is_success, success_envelope
from .registry import FOREST_SKILLS, SkillKind, SkillTier, get_skill, list_skills, list_skills_by_tier
from .service import get_service_state
from .validator import validate_schema

__all__ = [
    "ConfigSnapshot",
    "DispatchContext",
    "FOREST_SKILLS",
    "FailureCode",
    "NetworkConfig",
    "SkillKind",
    "SkillTier",
    "dispatch_skill",
    "failure_envelope",
    "get_service_state",
    "get_skill",
    "is_failure",
    "is_success",
    "list_skills",
    "list_skills_by_tier",
    "load_network_config",
    "success_envelope",
    "validate_schema",
]
