"""
JSON Schema Cleaning

Cloud Code backends validate tool parameter schemas against a subset of
JSON Schema. This strips the keywords they reject.
"""
import copy
from typing import Any, Dict

# Keywords rejected by the Antigravity / Gemini CLI schema validator
UNSUPPORTED_SCHEMA_KEYWORDS = {
    "$schema",
    "$id",
    "$ref",
    "$defs",
    "$comment",
    "definitions",
    "additionalProperties",
    "propertyNames",
    "patternProperties",
    "unevaluatedProperties",
    "dependentRequired",
    "dependentSchemas",
    "minLength",
    "maxLength",
    "pattern",
    "format",
    "minimum",
    "maximum",
    "exclusiveMinimum",
    "exclusiveMaximum",
    "multipleOf",
    "minItems",
    "maxItems",
    "uniqueItems",
    "contains",
    "minContains",
    "maxContains",
    "minProperties",
    "maxProperties",
    "default",
    "examples",
    "title",
    "deprecated",
    "readOnly",
    "writeOnly",
    "if",
    "then",
    "else",
    "not",
}

_SUBSCHEMA_LIST_KEYS = ("anyOf", "oneOf", "allOf", "prefixItems")


def clean_json_schema(schema: Any) -> Any:
    """
    Return a cleaned deep copy of ``schema``.

    ``const`` becomes a single-value ``enum``; property names are preserved
    even when they collide with keyword names (e.g. a parameter called
    ``pattern``).
    """
    return _clean(copy.deepcopy(schema))


def _clean(schema: Any) -> Any:
    if isinstance(schema, list):
        return [_clean(item) for item in schema]
    if not isinstance(schema, dict):
        return schema

    cleaned: Dict[str, Any] = {}
    if "const" in schema:
        cleaned["enum"] = [schema["const"]]
        if "type" not in schema:
            cleaned["type"] = _infer_type(schema["const"])

    for key, value in schema.items():
        if key in UNSUPPORTED_SCHEMA_KEYWORDS or key == "const":
            continue
        if key == "properties" and isinstance(value, dict):
            cleaned["properties"] = {name: _clean(prop) for name, prop in value.items()}
        elif key == "items":
            cleaned["items"] = _clean(value)
        elif key in _SUBSCHEMA_LIST_KEYS and isinstance(value, list):
            cleaned[key] = [_clean(option) for option in value]
        elif key == "type" and isinstance(value, list):
            # ["string", "null"] -> "string"
            non_null = [t for t in value if t != "null"]
            cleaned["type"] = non_null[0] if non_null else "string"
        else:
            cleaned[key] = value

    if isinstance(cleaned.get("required"), list) and isinstance(cleaned.get("properties"), dict):
        cleaned["required"] = [name for name in cleaned["required"] if name in cleaned["properties"]]
    return cleaned


def _infer_type(value: Any) -> str:
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, int):
        return "integer"
    if isinstance(value, float):
        return "number"
    return "string"
