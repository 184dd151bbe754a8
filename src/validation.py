"""JSON Schema validation helpers for CLI envelopes and the project manifest.

Wraps jsonschema Draft7 validation and reports the first error with its
location so callers can fold it into their own exception types.
"""

from __future__ import annotations

from typing import Any, Dict

from jsonschema import Draft7Validator


class SchemaError(ValueError):
    """Raised when data fails to validate against a provided schema."""


ENVELOPE_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "required": ["status"],
    "properties": {
        "status": {"type": "integer"},
        "message": {"type": "string"},
    },
}

ORG_LIST_RESULT_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "nonScratchOrgs": {"type": "array", "items": {"type": "object"}},
        "scratchOrgs": {"type": "array", "items": {"type": "object"}},
    },
}

RECORD_LIST_SCHEMA: Dict[str, Any] = {
    "type": "array",
    "items": {"type": "object"},
}

QUERY_RESULT_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "required": ["records"],
    "properties": {
        "size": {"type": "integer"},
        "totalSize": {"type": "integer"},
        "records": {"type": "array", "items": {"type": "object"}},
    },
}

MANIFEST_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "required": ["packageDirectories"],
    "properties": {
        "packageDirectories": {
            "type": "array",
            "minItems": 1,
            "items": {
                "type": "object",
                "properties": {
                    "path": {"type": "string"},
                    "default": {"type": "boolean"},
                    "dependencies": {
                        "type": "array",
                        "items": {
                            "type": "object",
                            "required": ["package"],
                            "properties": {"package": {"type": "string"}},
                        },
                    },
                },
            },
        },
        "packageAliases": {
            "type": "object",
            "additionalProperties": {"type": "string"},
        },
    },
}


def validate(schema: Dict[str, Any], data: Any, label: str = "data") -> None:
    """Validate data strictly and raise SchemaError on the first problem.

    Args:
        schema: Draft-07 JSON Schema dict.
        data:   Payload to validate.
        label:  Prefix used in the error message.
    """
    validator = Draft7Validator(schema)
    errs = sorted(validator.iter_errors(data), key=lambda e: [str(p) for p in e.path])
    if errs:
        first = errs[0]
        path = "/".join([str(p) for p in first.path])
        msg = f"Invalid {label} at '{path}': {first.message}"
        raise SchemaError(msg)
