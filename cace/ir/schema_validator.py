"""Structural validation of serialized ComponentSpecs.

Imported JSON passes through here before it is rebuilt into a
``ComponentSpec``; a spec that fails is reported as SCHEMA_INVALID.
"""

from __future__ import annotations

import re

from cace.ir.schema import get_schema


def validate_schema(data: dict) -> list[str]:
    """Validate a serialized ComponentSpec dict against the schema.

    Returns:
        List of error messages. Empty list means valid.
    """
    issues: list[str] = []
    _validate_node(data, get_schema(), "", issues)
    return issues


def _validate_node(data, schema: dict, path: str, issues: list[str]):
    """Recursively validate data against a JSON Schema node."""
    schema_type = schema.get("type")

    if schema_type and not _type_matches(data, schema_type):
        issues.append(f"{path or '/'}: expected type '{schema_type}', got {type(data).__name__}")
        return

    if "enum" in schema and data not in schema["enum"]:
        issues.append(f"{path or '/'}: value '{data}' not in allowed values {schema['enum']}")

    if schema_type == "string":
        min_len = schema.get("minLength", 0)
        if len(data) < min_len:
            issues.append(f"{path or '/'}: string too short (min {min_len}, got {len(data)})")
        if "pattern" in schema and not re.match(schema["pattern"], data):
            issues.append(f"{path or '/'}: string '{data}' does not match pattern '{schema['pattern']}'")

    if schema_type == "integer" and "minimum" in schema and data < schema["minimum"]:
        issues.append(f"{path or '/'}: value {data} is below minimum {schema['minimum']}")

    if schema_type == "object":
        required = schema.get("required", [])
        for req in required:
            if req not in data:
                issues.append(f"{path or '/'}: missing required property '{req}'")

        props = schema.get("properties", {})
        for key, value in data.items():
            # Only optional fields may be serialized as null
            if key in props and (value is not None or key in required):
                _validate_node(value, props[key], f"{path}.{key}", issues)
            elif key not in props and isinstance(schema.get("additionalProperties"), dict):
                _validate_node(value, schema["additionalProperties"], f"{path}.{key}", issues)

    if schema_type == "array":
        items_schema = schema.get("items")
        if items_schema:
            for i, item in enumerate(data):
                _validate_node(item, items_schema, f"{path}[{i}]", issues)


def _type_matches(data, schema_type: str) -> bool:
    """Check if data matches the expected JSON Schema type."""
    type_map = {
        "string": str,
        "integer": int,
        "number": (int, float),
        "boolean": bool,
        "array": list,
        "object": dict,
        "null": type(None),
    }
    expected = type_map.get(schema_type)
    if expected is None:
        return True
    # bool is a subclass of int
    if schema_type in ("integer", "number") and isinstance(data, bool):
        return False
    return isinstance(data, expected)
