from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Optional

SCHEMA_DIR = Path(__file__).resolve().parent / "schema_docs"

# Load order matters only for readability of list_schema_refs().
_SCHEMA_FILES = ("common.json", "workflow.json", "contract.json", "api.json")


def _load_json(path: Path) -> Dict[str, Any]:
    return json.loads(path.read_text(encoding="utf-8"))


def load_schema_store(schema_dir: Optional[Path] = None) -> Dict[str, Dict[str, Any]]:
    """Read every namespace document and index schemas by reference name."""
    base = (schema_dir or SCHEMA_DIR).resolve()
    store: Dict[str, Dict[str, Any]] = {}
    for name in _SCHEMA_FILES:
        for ref, schema in _load_json(base / name).items():
            if ref in store:
                raise ValueError(f"duplicate schema reference {ref} in {name}")
            store[ref] = schema if "$id" in schema else {"$id": ref, **schema}
    return store


FOREST_SCHEMAS: Dict[str, Dict[str, Any]] = load_schema_store()


def has_schema(schema_ref: str) -> bool:
    return schema_ref in FOREST_SCHEMAS


def list_schema_refs() -> List[str]:
    return list(FOREST_SCHEMAS.keys())


__all__ = [
    "FOREST_SCHEMAS",
    "SCHEMA_DIR",
    "has_schema",
    "list_schema_refs",
    "load_schema_store",
]
