"""Compatibility checkers – AvroChecker.

Implements the reader/writer schema-resolution rules of the Avro
specification on top of the JSON schema text. Logical types are ignored;
only the underlying physical types take part in resolution.
"""
from __future__ import annotations

import json
from typing import Any, TypeAlias

from schema_compat.application.compatibility.checkers.base import SchemaChecker
from schema_compat.application.compatibility.result import CompatibilityDifference
from schema_compat.kernel.contracts import SchemaType
from schema_compat.kernel.errors import SchemaParseError

PRIMITIVES = frozenset({"null", "boolean", "int", "long", "float", "double", "bytes", "string"})

# writer type -> reader types it may be promoted to
_PROMOTIONS: dict[str, frozenset[str]] = {
    "int": frozenset({"long", "float", "double"}),
    "long": frozenset({"float", "double"}),
    "float": frozenset({"double"}),
    "string": frozenset({"bytes"}),
    "bytes": frozenset({"string"}),
}

_Node: TypeAlias = dict[str, Any]


def _fullname(name: str, namespace: str | None) -> str:
    if "." in name or not namespace:
        return name
    return f"{namespace}.{name}"


def _short(name: str) -> str:
    return name.rsplit(".", 1)[-1]


def _join(path: str, *parts: str) -> str:
    return path.rstrip("/") + "/" + "/".join(parts)


def _invalid(message: str) -> SchemaParseError:
    return SchemaParseError(SchemaType.AVRO.value, message)


def _normalize(node: Any, namespace: str | None, names: dict[str, _Node]) -> _Node:
    if isinstance(node, str):
        if node in PRIMITIVES:
            return {"type": node}
        return {"type": "ref", "candidates": (_fullname(node, namespace), node)}
    if isinstance(node, list):
        return {"type": "union", "types": [_normalize(branch, namespace, names) for branch in node]}
    if not isinstance(node, dict) or "type" not in node:
        raise _invalid(f"cannot interpret {node!r} as a schema")

    kind = node["type"]
    if isinstance(kind, (list, dict)):
        return _normalize(kind, namespace, names)
    if not isinstance(kind, str):
        raise _invalid(f"'type' must be a string, list or object, got {kind!r}")

    if kind in ("record", "error", "enum", "fixed"):
        return _normalize_named(node, kind, namespace, names)
    if kind == "array":
        return {"type": "array", "items": _normalize(node.get("items"), namespace, names)}
    if kind == "map":
        return {"type": "map", "values": _normalize(node.get("values"), namespace, names)}
    return _normalize(kind, namespace, names)


def _normalize_named(node: dict[str, Any], kind: str, namespace: str | None, names: dict[str, _Node]) -> _Node:
    name = node.get("name")
    if not isinstance(name, str) or not name:
        raise _invalid(f"{kind} is missing a name")
    fullname = _fullname(name, node.get("namespace", namespace))
    named: _Node = {
        "type": "record" if kind == "error" else kind,
        "name": fullname,
        "aliases": frozenset(_short(a) for a in node.get("aliases", [])),
    }
    # registered before the fields so recursive references resolve
    names[fullname] = named

    if kind == "enum":
        symbols = node.get("symbols")
        if not isinstance(symbols, list):
            raise _invalid(f"enum '{fullname}' has no symbols")
        named["symbols"] = list(symbols)
        named["default"] = node.get("default")
    elif kind == "fixed":
        size = node.get("size")
        if not isinstance(size, int):
            raise _invalid(f"fixed '{fullname}' has no integer size")
        named["size"] = size
    else:
        fields = node.get("fields")
        if not isinstance(fields, list):
            raise _invalid(f"record '{fullname}' has no fields")
        child_namespace = fullname.rpartition(".")[0] or None
        named["fields"] = []
        for field in fields:
            if not isinstance(field, dict) or "name" not in field or "type" not in field:
                raise _invalid(f"record '{fullname}' has a malformed field {field!r}")
            named["fields"].append({
                "name": field["name"],
                "type": _normalize(field["type"], child_namespace, names),
                "has_default": "default" in field,
                "aliases": frozenset(field.get("aliases", [])),
            })
    return named


def parse_avro(text: str) -> tuple[_Node, dict[str, _Node]]:
    """Parse an Avro schema text into a normalised tree and its named types."""
    try:
        raw = json.loads(text)
    except json.JSONDecodeError as exc:
        raise SchemaParseError(SchemaType.AVRO.value, exc.msg, location=f"{exc.lineno}:{exc.colno}") from exc
    names: dict[str, _Node] = {}
    return _normalize(raw, None, names), names


def _describe(node: _Node) -> str:
    return node.get("name", node["type"])


class _Resolver:
    """Walks a reader and a writer tree in lockstep."""

    def __init__(self, reader_names: dict[str, _Node], writer_names: dict[str, _Node]) -> None:
        self._reader_names = reader_names
        self._writer_names = writer_names
        self._seen: set[tuple[str, str]] = set()

    @staticmethod
    def _deref(node: _Node, names: dict[str, _Node]) -> _Node:
        if node["type"] != "ref":
            return node
        for candidate in node["candidates"]:
            if candidate in names:
                return names[candidate]
        raise _invalid(f"unknown type '{node['candidates'][-1]}'")

    def check(self, reader: _Node, writer: _Node, path: str) -> list[CompatibilityDifference]:
        reader = self._deref(reader, self._reader_names)
        writer = self._deref(writer, self._writer_names)
        r, w = reader["type"], writer["type"]

        if w == "union":
            differences: list[CompatibilityDifference] = []
            for index, branch in enumerate(writer["types"]):
                differences.extend(self.check(reader, branch, _join(path, str(index))))
            return differences
        if r == "union":
            for branch in reader["types"]:
                if self._readable(branch, writer, path):
                    return []
            return [CompatibilityDifference(
                f"reader union has no branch that can read writer type '{_describe(writer)}'", path,
            )]
        if r != w:
            if r in _PROMOTIONS.get(w, frozenset()):
                return []
            return [CompatibilityDifference(
                f"reader type '{_describe(reader)}' cannot read writer type '{_describe(writer)}'", path,
            )]
        if r in PRIMITIVES:
            return []
        if r == "array":
            return self.check(reader["items"], writer["items"], _join(path, "items"))
        if r == "map":
            return self.check(reader["values"], writer["values"], _join(path, "values"))

        if _short(reader["name"]) != _short(writer["name"]) and _short(writer["name"]) not in reader["aliases"]:
            return [CompatibilityDifference(
                f"reader {r} '{reader['name']}' does not match writer {w} '{writer['name']}'", path,
            )]
        if r == "fixed":
            if reader["size"] != writer["size"]:
                return [CompatibilityDifference(
                    f"fixed size changed from {writer['size']} to {reader['size']}", _join(path, "size"),
                )]
            return []
        if r == "enum":
            missing = [s for s in writer["symbols"] if s not in reader["symbols"]]
            if missing and reader["default"] is None:
                return [CompatibilityDifference(
                    f"reader enum '{reader['name']}' is missing symbols {missing}", _join(path, "symbols"),
                )]
            return []
        return self._check_record(reader, writer, path)

    def _readable(self, reader: _Node, writer: _Node, path: str) -> bool:
        snapshot = set(self._seen)
        if not self.check(reader, writer, path):
            return True
        self._seen = snapshot
        return False

    def _check_record(self, reader: _Node, writer: _Node, path: str) -> list[CompatibilityDifference]:
        key = (reader["name"], writer["name"])
        if key in self._seen:
            return []
        self._seen.add(key)

        writer_fields = {f["name"]: f for f in writer["fields"]}
        differences: list[CompatibilityDifference] = []
        for field in reader["fields"]:
            field_path = _join(path, "fields", field["name"])
            source = writer_fields.get(field["name"])
            if source is None:
                source = next((writer_fields[a] for a in field["aliases"] if a in writer_fields), None)
            if source is None:
                if not field["has_default"]:
                    differences.append(CompatibilityDifference(
                        f"reader field '{field['name']}' has no default value and is missing from the writer schema",
                        field_path,
                    ))
                continue
            differences.extend(self.check(field["type"], source["type"], _join(field_path, "type")))
        return differences


class AvroChecker(SchemaChecker):
    """Avro reader/writer compatibility."""

    schema_type = SchemaType.AVRO

    def compare(self, reader: str, writer: str) -> list[CompatibilityDifference]:
        reader_node, reader_names = parse_avro(reader)
        writer_node, writer_names = parse_avro(writer)
        return _Resolver(reader_names, writer_names).check(reader_node, writer_node, "/")


__all__ = ["AvroChecker", "parse_avro"]
