from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

HTTP_METHODS = frozenset({"GET", "POST", "PUT", "DELETE"})


@dataclass(frozen=True)
class ApiRoute:
    http_method: str
    path: str
    auth_required: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return {"httpMethod": self.http_method, "path": self.path, "authRequired": self.auth_required}


def resolve_route(skill_name: str, action: str, route_map: Optional[Mapping[str, Any]]) -> Optional[ApiRoute]:
    """Look up an action's HTTP route.

    The map may be keyed by "skill:action" or nested as {skill: {action: route}};
    the compound key takes precedence. A route is either a bare path string
    (GET, authenticated) or an object with method, path/url and auth.
    """
    if not route_map:
        return None

    route = route_map.get(f"{skill_name}:{action}")
    if not route:
        nested = route_map.get(skill_name)
        route = nested.get(action) if isinstance(nested, Mapping) else None
    if not route:
        return None

    if isinstance(route, str):
        return ApiRoute(http_method="GET", path=route, auth_required=True)
    if not isinstance(route, Mapping):
        return None

    path = route.get("path") or route.get("url")
    if not path:
        return None
    method = str(route.get("method") or "GET").upper()
    if method not in HTTP_METHODS:
        method = "GET"
    return ApiRoute(http_method=method, path=str(path), auth_required=route.get("auth") is not False)


__all__ = ["ApiRoute", "HTTP_METHODS", "resolve_route"]
