"""Compatibility checkers – JsonSchemaChecker.

Both documents are validated against their metaschema with ``jsonschema``
before a structural comparison. The comparison answers a single question:
can every document accepted by the writer schema also be accepted by the
reader schema? ``$ref`` targets are compared by value, not resolved.
Writer ``anyOf``/``oneOf`` alternatives are checked one by one; reader
``allOf`` branches must each accept the writer and reader ``anyOf``/``oneOf``
need one branch that does. Other conditional keywords added by the reader
are reported as differences.
"""
from __future__ import annotations

import json
from typing import Any

from jsonschema.exceptions import SchemaError
from jsonschema.validators import validator_for

from schema_compat.application.compatibility.checkers.base import SchemaChecker
from schema_compat.application.compatibility.result import CompatibilityDifference
from schema_compat.kernel.contracts import SchemaType
from schema_compat.kernel.errors import SchemaParseError

_UPPER_BOUNDS = ("maximum", "exclusiveMaximum", "maxLength", "maxItems", "maxProperties")
_LOWER_BOUNDS = ("minimum", "exclusiveMinimum", "minLength", "minItems", "minProperties")
# reader keywords that fail closed unless the writer declares the same value
_UNCHECKED = ("not", "if", "then", "else", "dependentSchemas", "dependentRequired", "dependencies")


def parse_json_schema(text: str) -> dict[str, Any] | bool:
    """Decode *text* and check it against its declared (or latest) metaschema."""
    try:
        document = json.loads(text)
    except json.JSONDecodeError as exc:
        raise SchemaParseError(SchemaType.JSON.value, exc.msg, location=f"{exc.lineno}:{exc.colno}") from exc
    if not isinstance(document, (dict, bool)):
        raise SchemaParseError(SchemaType.JSON.value, "a schema must be an object or a boolean")
    try:
        validator_for(document).check_schema(document)
    except SchemaError as exc:
        location = "/" + "/".join(str(part) for part in exc.absolute_path)
        raise SchemaParseError(SchemaType.JSON.value, exc.message, location=location) from exc
    return document


def _join(path: str, *parts: str) -> str:
    return path.rstrip("/") + "/" + "/".join(parts)


def _types(schema: dict[str, Any]) -> frozenset[str] | None:
    declared = schema.get("type")
    if declared is None:
        return None
    if isinstance(declared, str):
        return frozenset({declared})
    return frozenset(declared)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _check(reader: Any, writer: Any, path: str) -> list[CompatibilityDifference]:
    if reader is True or reader == {}:
        return []
    if writer is False:
        return []
    if reader is False:
        return [CompatibilityDifference("reader schema rejects every document", path)]
    if writer is True:
        writer = {}

    if reader == writer:
        return []
    if "$ref" in reader or "$ref" in writer:
        if reader.get("$ref") != writer.get("$ref"):
            return [CompatibilityDifference(
                f"reference changed from {writer.get('$ref')!r} to {reader.get('$ref')!r}", _join(path, "$ref"),
            )]
        return []

    for keyword in ("anyOf", "oneOf"):
        if keyword in writer and reader.get(keyword) != writer[keyword]:
            return _check_writer_branches(reader, writer, keyword, path)

    differences = _check_combinators(reader, writer, path)
    differences.extend(_check_types(reader, writer, path))
    differences.extend(_check_enum(reader, writer, path))
    differences.extend(_check_bounds(reader, writer, path))
    differences.extend(_check_object(reader, writer, path))
    if isinstance(reader.get("items"), (dict, bool)):
        writer_items = writer.get("items", True)
        if isinstance(writer_items, (dict, bool)):
            differences.extend(_check(reader["items"], writer_items, _join(path, "items")))
    return differences


def _check_writer_branches(
    reader: dict[str, Any], writer: dict[str, Any], keyword: str, path: str,
) -> list[CompatibilityDifference]:
    """The reader must accept each alternative the writer allows."""
    base = {k: v for k, v in writer.items() if k != keyword}
    differences: list[CompatibilityDifference] = []
    for index, branch in enumerate(writer[keyword]):
        if branch is False:
            continue
        merged = base if branch is True else {**base, **branch}
        differences.extend(_check(reader, merged, _join(path, keyword, str(index))))
    return differences


def _check_combinators(reader: dict[str, Any], writer: dict[str, Any], path: str) -> list[CompatibilityDifference]:
    differences: list[CompatibilityDifference] = []
    shared = writer.get("allOf", [])
    for index, branch in enumerate(reader.get("allOf", [])):
        if branch not in shared:
            differences.extend(_check(branch, writer, _join(path, "allOf", str(index))))

    for keyword in ("anyOf", "oneOf"):
        if keyword not in reader or reader[keyword] == writer.get(keyword):
            continue
        if not any(not _check(branch, writer, path) for branch in reader[keyword]):
            differences.append(CompatibilityDifference(
                f"no branch of the reader {keyword} accepts the writer schema", _join(path, keyword),
            ))

    for keyword in _UNCHECKED:
        if keyword in reader and reader[keyword] != writer.get(keyword):
            differences.append(CompatibilityDifference(
                f"reader adds '{keyword}', which cannot be checked against the writer schema",
                _join(path, keyword),
            ))
    return differences


def _check_types(reader: dict[str, Any], writer: dict[str, Any], path: str) -> list[CompatibilityDifference]:
    reader_types = _types(reader)
    if reader_types is None:
        return []
    writer_types = _types(writer)
    if writer_types is None:
        return [CompatibilityDifference(
            f"reader restricts type to {sorted(reader_types)} but the writer allows any type", _join(path, "type"),
        )]
    differences = []
    for kind in sorted(writer_types):
        if kind in reader_types or (kind == "integer" and "number" in reader_types):
            continue
        differences.append(CompatibilityDifference(
            f"type '{kind}' written by the writer is not accepted by the reader", _join(path, "type"),
        ))
    return differences


def _check_enum(reader: dict[str, Any], writer: dict[str, Any], path: str) -> list[CompatibilityDifference]:
    if "enum" not in reader:
        return []
    if "enum" not in writer:
        return [CompatibilityDifference("reader introduces an enum restriction", _join(path, "enum"))]
    missing = [value for value in writer["enum"] if value not in reader["enum"]]
    if missing:
        return [CompatibilityDifference(f"reader enum is missing values {missing}", _join(path, "enum"))]
    return []


def _check_bounds(reader: dict[str, Any], writer: dict[str, Any], path: str) -> list[CompatibilityDifference]:
    differences = []
    for keyword in _UPPER_BOUNDS + _LOWER_BOUNDS:
        limit = reader.get(keyword)
        if not _is_number(limit):
            continue
        previous = writer.get(keyword)
        if not _is_number(previous):
            differences.append(CompatibilityDifference(
                f"reader adds {keyword}={limit}", _join(path, keyword),
            ))
        elif (keyword in _UPPER_BOUNDS and limit < previous) or (keyword in _LOWER_BOUNDS and limit > previous):
            differences.append(CompatibilityDifference(
                f"{keyword} tightened from {previous} to {limit}", _join(path, keyword),
            ))
    return differences


def _check_object(reader: dict[str, Any], writer: dict[str, Any], path: str) -> list[CompatibilityDifference]:
    reader_props: dict[str, Any] = reader.get("properties", {})
    writer_props: dict[str, Any] = writer.get("properties", {})
    reader_required = set(reader.get("required", []))
    writer_required = set(writer.get("required", []))
    closed = reader.get("additionalProperties") is False
    differences: list[CompatibilityDifference] = []

    if reader_props or closed:
        for name in sorted(writer_required - reader_props.keys()):
            differences.append(CompatibilityDifference(
                f"property '{name}' required by the writer schema was removed", _join(path, "properties", name),
            ))
    for name in sorted(reader_required - writer_required):
        state = "optional" if name in writer_props else "absent"
        differences.append(CompatibilityDifference(
            f"property '{name}' is required by the reader but {state} in the writer schema",
            _join(path, "required"),
        ))

    additional = reader.get("additionalProperties", True)
    for name in sorted(writer_props.keys() - reader_props.keys()):
        if closed:
            differences.append(CompatibilityDifference(
                f"property '{name}' is not allowed by the reader schema", _join(path, "properties", name),
            ))
        elif isinstance(additional, dict):
            differences.extend(_check(additional, writer_props[name], _join(path, "properties", name)))
    if closed and writer.get("additionalProperties", True) is not False:
        differences.append(CompatibilityDifference(
            "reader forbids additional properties the writer allows", _join(path, "additionalProperties"),
        ))

    for name in sorted(reader_props.keys() & writer_props.keys()):
        differences.extend(_check(reader_props[name], writer_props[name], _join(path, "properties", name)))
    return differences


class JsonSchemaChecker(SchemaChecker):
    """JSON Schema compatibility."""

    schema_type = SchemaType.JSON

    def compare(self, reader: str, writer: str) -> list[CompatibilityDifference]:
        return _check(parse_json_schema(reader), parse_json_schema(writer), "/")


__all__ = ["JsonSchemaChecker", "parse_json_schema"]
