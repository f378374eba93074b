from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

import httpx
import yaml

from .ledger import LedgerBackend
from .logging import log_json

SERVICE_ENV_PREFIX = "EFOREST_SERVICE_"
ROUTE_MAP_ENV_KEYS = ("EFOREST_FOREST_API_ACTION_MAP_JSON", "FOREST_API_ACTION_MAP_JSON")
ROUTE_MAP_FILE_ENV_KEY = "EFOREST_FOREST_API_ACTION_MAP_FILE"

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


def _split_csv(raw: Optional[str]) -> List[str]:
    if not raw:
        return []
    return [entry.strip() for entry in raw.split(",") if entry.strip()]


def parse_bool(value: Optional[str]) -> Optional[bool]:
    """Tri-state parse: True, False, or None when unset/unrecognised."""
    if value is None:
        return None
    normalized = value.strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    return None


def _load_route_map(environ: Mapping[str, str]) -> Dict[str, Any]:
    raw = next((environ[key] for key in ROUTE_MAP_ENV_KEYS if environ.get(key)), None)
    source = "env"
    if raw is None:
        path = environ.get(ROUTE_MAP_FILE_ENV_KEY)
        if not path:
            return {}
        source = path
        try:
            raw = Path(path).expanduser().read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            log_json(logging.WARNING, "config_route_map_invalid", source=source, error=str(exc))
            return {}
    try:
        # Route files may be YAML or JSON; inline values are JSON only.
        parsed = json.loads(raw) if source == "env" else yaml.safe_load(raw)
    except (ValueError, yaml.YAMLError) as exc:
        log_json(logging.WARNING, "config_route_map_invalid", source=source, error=str(exc))
        return {}
    return parsed if isinstance(parsed, dict) else {}


@dataclass(frozen=True)
class ConfigSnapshot:
    """Operational switches and API routes as observed at one point in time."""

    disable_all: bool = False
    overrides: Mapping[str, bool] = field(default_factory=dict)
    enabled_patterns: List[str] = field(default_factory=list)
    disabled_patterns: List[str] = field(default_factory=list)
    maintenance_patterns: List[str] = field(default_factory=list)
    api_routes: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "ConfigSnapshot":
        env = os.environ if environ is None else environ
        overrides: Dict[str, bool] = {}
        for key, value in env.items():
            if key.startswith(SERVICE_ENV_PREFIX):
                parsed = parse_bool(value)
                if parsed is not None:
                    overrides[key] = parsed
        return cls(
            disable_all=parse_bool(env.get("EFOREST_DISABLE_ALL_SERVICES")) is True,
            overrides=overrides,
            enabled_patterns=_split_csv(env.get("EFOREST_ENABLED_SERVICES")),
            disabled_patterns=_split_csv(env.get("EFOREST_DISABLED_SERVICES")),
            maintenance_patterns=_split_csv(env.get("EFOREST_MAINTENANCE_SERVICES")),
            api_routes=_load_route_map(env),
        )


@dataclass(frozen=True)
class EnvPreset:
    api_url: str
    cms_url: str
    rpc_url_aelf: str
    rpc_url_tdvv: str
    rpc_url_tdvw: str


ENV_PRESETS: Dict[str, EnvPreset] = {
    "mainnet": EnvPreset(
        api_url="https://www.eforest.finance/api",
        cms_url="https://www.eforest.finance/cms",
        rpc_url_aelf="https://aelf-public-node.aelf.io",
        rpc_url_tdvv="https://tdvv-public-node.aelf.io",
        rpc_url_tdvw="",
    ),
    "testnet": EnvPreset(
        api_url="https://test.eforest.finance/api",
        cms_url="https://test.eforest.finance/cms",
        rpc_url_aelf="https://aelf-test-node.aelf.io",
        rpc_url_tdvv="https://tdvv-test-node.aelf.io",
        rpc_url_tdvw="https://tdvw-test-node.aelf.io",
    ),
}


@dataclass(frozen=True)
class NetworkConfig:
    """Resolved network configuration handed to the dispatcher."""

    api_url: str
    cms_url: str = ""
    rpc_urls: Dict[str, str] = field(default_factory=dict)
    contracts: Dict[str, Any] = field(default_factory=dict)
    ledger: Optional[LedgerBackend] = None
    api_token: Optional[str] = None


async def fetch_cms_config(cms_url: str, *, client: Optional[httpx.AsyncClient] = None) -> Dict[str, Any]:
    """Fetch the contract address table; CMS nests it as data.data."""
    try:
        if client is None:
            async with httpx.AsyncClient(timeout=10.0) as owned:
                resp = await owned.get(f"{cms_url}/items/config")
        else:
            resp = await client.get(f"{cms_url}/items/config")
        resp.raise_for_status()
        body = resp.json()
    except (httpx.HTTPError, ValueError) as exc:
        log_json(logging.WARNING, "cms_config_unavailable", cms_url=cms_url, error=str(exc))
        return {}
    outer = body.get("data") if isinstance(body, dict) else None
    if isinstance(outer, dict) and isinstance(outer.get("data"), dict):
        return outer["data"]
    if isinstance(outer, dict):
        return outer
    return body if isinstance(body, dict) else {}


async def load_network_config(
    *,
    env: Optional[str] = None,
    api_url: Optional[str] = None,
    rpc_url: Optional[str] = None,
    ledger: Optional[LedgerBackend] = None,
    environ: Optional[Mapping[str, str]] = None,
    client: Optional[httpx.AsyncClient] = None,
) -> NetworkConfig:
    """Resolve network config: explicit args > environment > preset > CMS."""
    source = os.environ if environ is None else environ
    env_name = env or source.get("EFOREST_NETWORK") or source.get("AELF_ENV") or "mainnet"
    preset = ENV_PRESETS.get(env_name)
    if preset is None:
        raise ValueError(f'Unknown env "{env_name}". Use "mainnet" or "testnet".')

    cms = await fetch_cms_config(preset.cms_url, client=client)

    rpc_urls = {
        "AELF": rpc_url
        or source.get("EFOREST_RPC_URL")
        or source.get("AELF_RPC_URL")
        or preset.rpc_url_aelf
        or cms.get("rpcUrlAELF", ""),
        "tDVV": source.get("EFOREST_RPC_URL_TDVV")
        or source.get("AELF_RPC_URL_TDVV")
        or preset.rpc_url_tdvv
        or cms.get("rpcUrlTDVV", ""),
        "tDVW": source.get("EFOREST_RPC_URL_TDVW")
        or source.get("AELF_RPC_URL_TDVW")
        or preset.rpc_url_tdvw
        or cms.get("rpcUrlTDVW", ""),
    }

    return NetworkConfig(
        api_url=api_url or source.get("EFOREST_API_URL") or source.get("AELF_API_URL") or preset.api_url,
        cms_url=preset.cms_url,
        rpc_urls=rpc_urls,
        contracts=cms,
        ledger=ledger,
        api_token=source.get("EFOREST_API_TOKEN") or None,
    )


__all__ = [
    "ConfigSnapshot",
    "ENV_PRESETS",
    "EnvPreset",
    "NetworkConfig",
    "ROUTE_MAP_ENV_KEYS",
    "ROUTE_MAP_FILE_ENV_KEY",
    "fetch_cms_config",
    "load_network_config",
    "parse_bool",
]
