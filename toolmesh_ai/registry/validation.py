"""Structural validation of tool input against a ``ToolSchema``.

The validator is intentionally flat: it inspects the top-level properties a
tool declares and nothing below them. Fields the schema does not know about
are passed through untouched so callers can forward provider specific
parameters.

Checks run in a fixed order and every violation is collected:

1. required fields are present and non-empty;
2. each provided, declared field has the declared runtime type
   (numeric strings are accepted for ``number`` fields);
3. enum membership;
4. numeric ``minimum``/``maximum`` bounds.
"""

from __future__ import annotations

from typing import Any, List, Mapping, Optional

from .models import ToolParameter, ToolSchema, ValidationResult


def json_type_name(value: Any) -> str:
    """Name a Python value by its JSON type, as callers see it."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, (list, tuple)):
        return "array"
    if isinstance(value, Mapping):
        return "object"
    return type(value).__name__


def coerce_number(value: Any) -> Optional[float]:
    """Return ``value`` as a number, accepting numeric strings; ``None`` otherwise."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return value
    if isinstance(value, str) and value.strip():
        try:
            return float(value)
        except ValueError:
            return None
    return None


def _is_missing(value: Any) -> bool:
    return value is None or value == ""


def _check_type(key: str, value: Any, param: ToolParameter, errors: List[str]) -> tuple[bool, Any]:
    """Return ``(ok, normalized_value)`` for a declared field."""
    expected = param.type
    if expected == "string":
        if not isinstance(value, str):
            errors.append(f"Field '{key}' must be a string, got {json_type_name(value)}")
            return False, value
        return True, value
    if expected in ("number", "integer"):
        number = coerce_number(value)
        if number is None:
            errors.append(f"Field '{key}' must be a {expected}, got {json_type_name(value)}")
            return False, value
        if expected == "integer" and float(number) != int(number):
            errors.append(f"Field '{key}' must be an integer, got {value}")
            return False, value
        return True, number
    if expected == "boolean":
        if not isinstance(value, bool):
            errors.append(f"Field '{key}' must be a boolean, got {json_type_name(value)}")
            return False, value
        return True, value
    if expected == "array":
        if not isinstance(value, (list, tuple)):
            errors.append(f"Field '{key}' must be an array, got {json_type_name(value)}")
            return False, value
        return True, value
    if expected == "object":
        if not isinstance(value, Mapping):
            errors.append(f"Field '{key}' must be an object, got {json_type_name(value)}")
            return False, value
        return True, value
    # Unknown schema types are not inspected.
    return True, value


def validate_against_schema(schema: ToolSchema, data: Mapping[str, Any]) -> ValidationResult:
    """Validate ``data`` against ``schema`` and report every violation."""
    errors: List[str] = []

    for field_name in schema.required:
        if _is_missing(data.get(field_name)):
            errors.append(f"Missing required field: {field_name}")

    for key, value in data.items():
        param = schema.properties.get(key)
        if param is None or value is None:
            continue

        ok, normalized = _check_type(key, value, param, errors)
        if not ok:
            continue

        if param.enum is not None and normalized not in param.enum:
            allowed = ", ".join(str(option) for option in param.enum)
            errors.append(f"Field '{key}' must be one of: {allowed}. Got: {value}")

        if param.type in ("number", "integer"):
            if param.minimum is not None and normalized < param.minimum:
                errors.append(f"Field '{key}' must be >= {param.minimum:g}, got {value}")
            if param.maximum is not None and normalized > param.maximum:
                errors.append(f"Field '{key}' must be <= {param.maximum:g}, got {value}")

    return ValidationResult(valid=not errors, errors=errors)
