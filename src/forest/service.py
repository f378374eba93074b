"""
Service switch and maintenance gating for forest skills.

Handlers never branch on operational state themselves; every switch is
resolved here from a ConfigSnapshot taken at call time.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, Optional

from .config import SERVICE_ENV_PREFIX, ConfigSnapshot

FOREST_SERVICE_KEYS = (
    "forest.create.*",
    "forest.market.*",
    "forest.quote.*",
    "forest.drop.*",
    "forest.whitelist.*",
    "forest.ai.*",
    "forest.miniapp.*",
    "forest.profile.*",
    "forest.discover.*",
    "forest.realtime.*",
)


@dataclass(frozen=True)
class ServiceState:
    enabled: bool
    maintenance: bool


_DISABLED = ServiceState(enabled=False, maintenance=True)


def pattern_to_regex(pattern: str) -> re.Pattern[str]:
    """Anchored regex where `*` matches any substring and everything else is literal."""
    body = ".*".join(re.escape(part) for part in pattern.split("*"))
    return re.compile(f"^{body}$")


def is_pattern_matched(value: str, patterns: Iterable[str]) -> bool:
    return any(pattern_to_regex(p).match(value) for p in patterns)


def service_env_key(service_key: str) -> str:
    return SERVICE_ENV_PREFIX + service_key.replace(".", "_").replace("*", "ALL").upper()


def get_service_state(service_key: str, snapshot: Optional[ConfigSnapshot] = None) -> ServiceState:
    """Resolve enabled/maintenance for a service key; most specific rule wins."""
    config = snapshot if snapshot is not None else ConfigSnapshot.from_env()

    if config.disable_all:
        return _DISABLED

    if config.overrides.get(service_env_key(service_key)) is False:
        return _DISABLED

    allowed = not config.enabled_patterns or is_pattern_matched(service_key, config.enabled_patterns)
    if not allowed or is_pattern_matched(service_key, config.disabled_patterns):
        return _DISABLED

    return ServiceState(
        enabled=True,
        maintenance=is_pattern_matched(service_key, config.maintenance_patterns),
    )


def is_service_enabled(service_key: str, snapshot: Optional[ConfigSnapshot] = None) -> bool:
    return get_service_state(service_key, snapshot).enabled


def is_service_in_maintenance(service_key: str, snapshot: Optional[ConfigSnapshot] = None) -> bool:
    return get_service_state(service_key, snapshot).maintenance


__all__ = [
    "FOREST_SERVICE_KEYS",
    "ServiceState",
    "get_service_state",
    "is_pattern_matched",
    "is_service_enabled",
    "is_service_in_maintenance",
    "pattern_to_regex",
    "service_env_key",
]
