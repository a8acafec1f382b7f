"""Argument validation against a tool's declared input schema.

Only the subset of JSON Schema the catalogs use is enforced: required
presence, the basic ``type`` keyword on top-level properties, and
``default`` substitution for absent optional properties.
"""

from __future__ import annotations

import copy
from typing import Any

from toolserver.protocol.errors import InvalidArgumentError, MissingArgumentError

_TYPE_CHECKS: dict[str, tuple[type, ...]] = {
    "string": (str,),
    "number": (int, float),
    "integer": (int,),
    "boolean": (bool,),
    "object": (dict,),
    "array": (list,),
}


def validate_arguments(
    tool_name: str,
    schema: dict[str, Any],
    arguments: dict[str, Any],
) -> dict[str, Any]:
    """Return a validated copy of *arguments* with defaults filled in.

    Raises:
        MissingArgumentError: A required property is absent or ``null``.
        InvalidArgumentError: A present property has the wrong basic type.
    """
    properties: dict[str, Any] = schema.get("properties", {})
    required: list[str] = list(schema.get("required", []))

    for field in required:
        if arguments.get(field) is None:
            raise MissingArgumentError(tool_name, field)

    validated = dict(arguments)
    for field, prop in properties.items():
        if field not in validated or validated[field] is None:
            if "default" in prop:
                validated[field] = copy.deepcopy(prop["default"])
            else:
                validated.pop(field, None)
            continue
        expected = prop.get("type")
        if expected is not None and not matches_type(validated[field], expected):
            raise InvalidArgumentError(tool_name, field, str(expected))
    return validated


def matches_type(value: Any, expected: str | list[str]) -> bool:
    """Check *value* against a JSON Schema ``type`` keyword."""
    if isinstance(expected, list):
        return any(matches_type(value, item) for item in expected)
    if expected == "null":
        return value is None
    allowed = _TYPE_CHECKS.get(expected)
    if allowed is None:
        return True
    # bool is an int subclass but never a JSON number
    if isinstance(value, bool) and expected != "boolean":
        return False
    if expected == "integer" and isinstance(value, float):
        return value.is_integer()
    return isinstance(value, allowed)
