#!/usr/bin/env python3
"""forest-skill: run one skill from the command line and print its envelope."""

from __future__ import annotations

import argparse
import asyncio
import json
import re
import sys
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence

from .config import NetworkConfig, load_network_config
from .context import DispatchContext
from .dispatcher import dispatch_skill
from .envelope import DEFAULT_ENV, FailureCode, JsonDict, build_trace_id, failure_envelope, is_failure
from .logging import configure_logging
from .registry import SkillTier, list_skills, list_skills_by_tier

_NUMBER_RE = re.compile(r"^-?\d+(\.\d+)?$")

_INVALID_PARAMS_HINTS = (
    "invalid --input-json",
    "invalid --field assignment",
    "invalid field path",
    "missing required parameter",
    "unrecognized arguments",
    "invalid choice",
    "the following arguments are required",
    "root value must be an object",
)


class CliError(Exception):
    """Raised for bad command-line input; reported as an envelope, never a traceback."""


class _Parser(argparse.ArgumentParser):
    def error(self, message: str) -> None:  # type: ignore[override]
        raise CliError(message)


def parse_loose_value(raw: str) -> Any:
    """Interpret a --field value: booleans, null, numbers and JSON literals; otherwise the raw text."""
    value = raw.strip()
    if not value:
        return ""
    if value == "true":
        return True
    if value == "false":
        return False
    if value == "null":
        return None
    if _NUMBER_RE.match(value):
        return float(value) if "." in value else int(value)
    if (
        (value.startswith("{") and value.endswith("}"))
        or (value.startswith("[") and value.endswith("]"))
        or (value.startswith('"') and value.endswith('"'))
    ):
        try:
            return json.loads(value)
        except ValueError:
            return raw
    return raw


def _check_path(path: str) -> List[str]:
    segments = path.split(".")
    if not all(segments):
        raise CliError(f'Invalid field path "{path}": empty segment.')
    return segments


def set_by_path(target: Dict[str, Any], path: str, value: Any) -> None:
    """Deep-set a dotted path, replacing non-object intermediates with new objects."""
    segments = _check_path(path)
    cursor = target
    for segment in segments[:-1]:
        nxt = cursor.get(segment)
        if not isinstance(nxt, dict):
            nxt = {}
            cursor[segment] = nxt
        cursor = nxt
    cursor[segments[-1]] = value


def _split_assignment(item: str) -> tuple[str, str]:
    idx = item.find("=")
    if idx <= 0:
        raise CliError(f'Invalid --field assignment "{item}". Expected format: path=value')
    return item[:idx].strip(), item[idx + 1 :]


def parse_input_json(raw: Optional[str]) -> Dict[str, Any]:
    if not raw:
        return {}
    try:
        parsed = json.loads(raw)
    except ValueError as exc:
        raise CliError(f"Invalid --input-json. {exc}") from exc
    if not isinstance(parsed, dict):
        raise CliError("Invalid --input-json. Root value must be an object.")
    return parsed


def build_skill_input(
    *,
    input_json: Optional[str] = None,
    fields: Sequence[str] = (),
    env: Optional[str] = None,
    dry_run: bool = False,
    trace_id: Optional[str] = None,
    timeout_ms: Optional[int] = None,
) -> JsonDict:
    """Merge --input-json with --field overrides, then apply the envelope flags."""
    merged = parse_input_json(input_json)
    for item in fields:
        path, raw_value = _split_assignment(item)
        set_by_path(merged, path, parse_loose_value(raw_value))

    merged["env"] = env or DEFAULT_ENV
    merged["dryRun"] = bool(dry_run)
    if trace_id:
        merged["traceId"] = trace_id
    if timeout_ms:
        merged["timeoutMs"] = timeout_ms
    return merged


def to_cli_failure_envelope(err: BaseException | JsonDict, trace_id: Optional[str] = None) -> JsonDict:
    if isinstance(err, dict) and err.get("success") is False and isinstance(err.get("code"), str):
        return err

    message = str(err) or type(err).__name__
    lowered = message.lower()
    if any(hint in lowered for hint in _INVALID_PARAMS_HINTS):
        return failure_envelope(FailureCode.INVALID_PARAMS, message, retryable=False, trace_id=trace_id)
    if "service disabled" in lowered:
        return failure_envelope(FailureCode.SERVICE_DISABLED, message, retryable=False, trace_id=trace_id)
    if "maintenance" in lowered:
        return failure_envelope(
            FailureCode.MAINTENANCE, message, maintenance=True, retryable=True, trace_id=trace_id
        )
    if "timeout" in lowered or "timed out" in lowered:
        return failure_envelope(FailureCode.TX_TIMEOUT, message, retryable=True, trace_id=trace_id)
    return failure_envelope(FailureCode.INTERNAL_ERROR, message, retryable=False, trace_id=trace_id)


ConfigLoader = Callable[..., Awaitable[NetworkConfig]]
Dispatcher = Callable[[str, Any, DispatchContext], Awaitable[JsonDict]]


async def run_skill(
    args: argparse.Namespace,
    *,
    config_loader: ConfigLoader = load_network_config,
    dispatcher: Dispatcher = dispatch_skill,
) -> JsonDict:
    if not args.skill:
        raise CliError("Missing required parameter: --skill")
    env = args.env or DEFAULT_ENV
    skill_input = build_skill_input(
        input_json=args.input_json,
        fields=args.field or [],
        env=env,
        dry_run=args.dry_run,
        trace_id=args.trace_id,
        timeout_ms=args.timeout_ms,
    )
    config = await config_loader(env=env, api_url=args.api_url, rpc_url=args.rpc_url)
    return await dispatcher(args.skill, skill_input, DispatchContext(config=config))


def build_parser() -> argparse.ArgumentParser:
    parser = _Parser(prog="forest-skill", description="Run a forest skill via the unified dispatcher.")
    sub = parser.add_subparsers(dest="command", required=True, parser_class=_Parser)

    run = sub.add_parser("run", help="Run one forest skill")
    run.add_argument("--skill", required=True, help="Skill name, e.g. aelf-forest-get-price-quote")
    run.add_argument("--env", choices=["mainnet", "testnet"], default=DEFAULT_ENV)
    run.add_argument("--dry-run", action="store_true", help="Plan the call without invoking anything")
    run.add_argument("--trace-id", help="Optional traceId for observability")
    run.add_argument("--timeout-ms", type=int, help="Optional timeout hint (1000-180000)")
    run.add_argument(
        "--field",
        action="append",
        default=[],
        metavar="PATH=VALUE",
        help="Structured field assignment; repeatable, e.g. --field payload.symbol=ABC",
    )
    run.add_argument("--input-json", help="Raw JSON object input; merged with --field")
    run.add_argument("--api-url", help="Override backend API URL")
    run.add_argument("--rpc-url", help="Override main chain RPC URL")

    lst = sub.add_parser("list", help="List registered skills")
    lst.add_argument("--tier", choices=[t.value for t in SkillTier])
    return parser


def _print_envelope(envelope: JsonDict) -> None:
    print(json.dumps(envelope, default=str))


def _list(tier: Optional[str]) -> int:
    skills = list_skills_by_tier(tier) if tier else list_skills()
    for skill in skills:
        print(f"{skill.name}\t{skill.tier.value}\t{skill.kind.value}\t{skill.service_key}")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    configure_logging()
    skill_hint: Optional[str] = None
    trace_id: Optional[str] = None
    try:
        args = build_parser().parse_args(argv)
        if args.command == "list":
            return _list(args.tier)
        skill_hint, trace_id = args.skill, args.trace_id
        result = asyncio.run(run_skill(args))
    except Exception as exc:
        failure = to_cli_failure_envelope(exc, trace_id or build_trace_id(None, skill_hint))
        _print_envelope(failure)
        return 1

    _print_envelope(result)
    return 1 if is_failure(result) else 0


if __name__ == "__main__":
    sys.exit(main())
