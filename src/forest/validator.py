from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional

import jsonschema
from jsonschema import validators
from jsonschema.protocols import Validator
from referencing import Registry
from referencing.jsonschema import DRAFT7

from .schemas import FOREST_SCHEMAS


def _extend_with_default(validator_class):
    """Validator class that writes declared `default` values into the instance."""
    validate_properties = validator_class.VALIDATORS["properties"]

    def set_defaults(validator, properties, instance, schema) -> Iterator[jsonschema.ValidationError]:
        if validator.is_type(instance, "object"):
            for prop, subschema in properties.items():
                if isinstance(subschema, dict) and "default" in subschema and prop not in instance:
                    instance[prop] = copy.deepcopy(subschema["default"])
        yield from validate_properties(validator, properties, instance, schema)

    return validators.extend(validator_class, {"properties": set_defaults})


DefaultingDraft7Validator = _extend_with_default(jsonschema.Draft7Validator)


@dataclass(frozen=True)
class ValidationResult:
    valid: bool
    errors: List[Dict[str, str]] = field(default_factory=list)
    data: Any = None


def _format_path(error: jsonschema.ValidationError) -> str:
    parts = [str(p) for p in error.absolute_path]
    return "/" + "/".join(parts) if parts else "/"


@dataclass
class SchemaValidator:
    store: Dict[str, Dict[str, Any]]
    registry: Registry
    _cache: Dict[str, Validator] = field(default_factory=dict, repr=False)

    @classmethod
    def load(cls, store: Optional[Dict[str, Dict[str, Any]]] = None) -> "SchemaValidator":
        schemas = store if store is not None else FOREST_SCHEMAS
        registry = Registry().with_resources(
            (ref, DRAFT7.create_resource(schema)) for ref, schema in schemas.items()
        )
        return cls(store=schemas, registry=registry)

    def has_schema(self, schema_ref: str) -> bool:
        return schema_ref in self.store

    def _validator(self, schema_ref: str) -> Validator:
        validator = self._cache.get(schema_ref)
        if validator is None:
            validator = DefaultingDraft7Validator(self.store[schema_ref], registry=self.registry)
            self._cache[schema_ref] = validator
        return validator

    def validate(self, schema_ref: str, data: Any) -> ValidationResult:
        """Check `data` against a schema; the caller's object is never mutated."""
        if not self.has_schema(schema_ref):
            return ValidationResult(
                valid=False,
                errors=[{"path": "/", "message": f"schema not found: {schema_ref}"}],
            )
        candidate = copy.deepcopy(data)
        errors = sorted(self._validator(schema_ref).iter_errors(candidate), key=_format_path)
        formatted = [
            {"path": _format_path(err), "message": err.message or "schema validation failed"}
            for err in errors
        ]
        return ValidationResult(valid=not formatted, errors=formatted, data=candidate)


_default_validator: Optional[SchemaValidator] = None


def get_validator() -> SchemaValidator:
    global _default_validator
    if _default_validator is None:
        _default_validator = SchemaValidator.load()
    return _default_validator


def validate_schema(schema_ref: str, data: Any) -> ValidationResult:
    return get_validator().validate(schema_ref, data)


__all__ = [
    "DefaultingDraft7Validator",
    "SchemaValidator",
    "ValidationResult",
    "get_validator",
    "validate_schema",
]
