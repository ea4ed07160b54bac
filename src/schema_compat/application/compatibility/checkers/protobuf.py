"""Compatibility checkers – ProtobufChecker.

Parses ``.proto`` definitions (proto2 and proto3) far enough to compare
messages, enums and their fields by number. Only backward checks are
meaningful for Protobuf, so the base class rejects forward and full modes
for this format.
"""
from __future__ import annotations

import dataclasses
import re

from schema_compat.application.compatibility.checkers.base import SchemaChecker
from schema_compat.application.compatibility.result import CompatibilityDifference
from schema_compat.kernel.contracts import SchemaType
from schema_compat.kernel.errors import SchemaParseError

MAX_FIELD_NUMBER = 536_870_911

# string literals are matched before comments, so "//" inside a literal is kept
_TOKEN = re.compile(
    r'"(?:[^"\\]|\\.)*"'
    r"|'(?:[^'\\]|\\.)*'"
    r"|//[^\n]*"
    r"|/\*.*?\*/"
    r"|\.?[A-Za-z_][\w.]*"
    r"|-?(?:0[xX][0-9a-fA-F]+|\d+)"
    r"|\S",
    re.DOTALL,
)

# scalar types that share a wire encoding and may replace one another
_WIRE_GROUPS = (
    frozenset({"int32", "uint32", "int64", "uint64", "bool"}),
    frozenset({"sint32", "sint64"}),
    frozenset({"fixed32", "sfixed32"}),
    frozenset({"fixed64", "sfixed64"}),
    frozenset({"string", "bytes"}),
)


@dataclasses.dataclass
class ProtoField:
    name: str
    number: int
    type: str
    label: str = ""
    oneof: str | None = None


@dataclasses.dataclass
class _Reserved:
    ranges: list[range] = dataclasses.field(default_factory=list)
    names: set[str] = dataclasses.field(default_factory=set)

    def covers(self, number: int, name: str) -> bool:
        return name in self.names or any(number in r for r in self.ranges)


@dataclasses.dataclass
class ProtoMessage:
    name: str
    fields: dict[int, ProtoField] = dataclasses.field(default_factory=dict)
    reserved: _Reserved = dataclasses.field(default_factory=_Reserved)


@dataclasses.dataclass
class ProtoEnum:
    name: str
    values: dict[int, str] = dataclasses.field(default_factory=dict)
    reserved: _Reserved = dataclasses.field(default_factory=_Reserved)


@dataclasses.dataclass
class ProtoFile:
    package: str = ""
    messages: dict[str, ProtoMessage] = dataclasses.field(default_factory=dict)
    enums: dict[str, ProtoEnum] = dataclasses.field(default_factory=dict)


class _Parser:
    """Recursive-descent parser over a flat token list."""

    def __init__(self, text: str) -> None:
        self._tokens = [t for t in _TOKEN.findall(text) if not t.startswith(("//", "/*"))]
        self._pos = 0
        self.result = ProtoFile()

    # -- token helpers ------------------------------------------------

    def _peek(self) -> str | None:
        return self._tokens[self._pos] if self._pos < len(self._tokens) else None

    def _next(self) -> str:
        token = self._peek()
        if token is None:
            raise self._error("unexpected end of definition")
        self._pos += 1
        return token

    def _expect(self, expected: str) -> None:
        token = self._next()
        if token != expected:
            raise self._error(f"expected '{expected}' but found '{token}'")

    def _error(self, message: str) -> SchemaParseError:
        return SchemaParseError(SchemaType.PROTOBUF.value, message, location=f"token {self._pos}")

    def _skip_statement(self) -> None:
        depth = 0
        while True:
            token = self._next()
            if token in ("{", "[", "("):
                depth += 1
            elif token in ("}", "]", ")"):
                depth -= 1
                if depth == 0 and token == "}":
                    return
            elif token == ";" and depth == 0:
                return

    def _number(self, token: str) -> int:
        if token == "max":
            return MAX_FIELD_NUMBER
        try:
            return int(token, 0)
        except ValueError as exc:
            raise self._error(f"expected a number but found '{token}'") from exc

    # -- grammar ------------------------------------------------------

    def parse(self) -> ProtoFile:
        while (token := self._peek()) is not None:
            if token == "package":
                self._next()
                self.result.package = self._next()
                self._expect(";")
            elif token == "message":
                self._next()
                self._message(self._qualify(self._next()))
            elif token == "enum":
                self._next()
                self._enum(self._qualify(self._next()))
            elif token == ";":
                self._next()
            else:
                # syntax, edition, import, option, service, extend
                self._skip_statement()
        return self.result

    def _qualify(self, name: str, parent: str = "") -> str:
        return f"{parent}.{name}" if parent else name

    def _message(self, name: str) -> None:
        message = ProtoMessage(name)
        self.result.messages[name] = message
        self._expect("{")
        self._body(message, oneof=None)

    def _body(self, message: ProtoMessage, oneof: str | None) -> None:
        while (token := self._next()) != "}":
            if token == "message":
                self._message(self._qualify(self._next(), message.name))
            elif token == "enum":
                self._enum(self._qualify(self._next(), message.name))
            elif token == "oneof":
                group = self._next()
                self._expect("{")
                self._body(message, oneof=group)
            elif token == "reserved":
                self._reserved(message.reserved)
            elif token in ("option", "extensions", "extend"):
                self._pos -= 1
                self._skip_statement()
            elif token == ";":
                continue
            else:
                self._pos -= 1
                self._field(message, oneof)

    def _field(self, message: ProtoMessage, oneof: str | None) -> None:
        label = ""
        token = self._next()
        if token in ("repeated", "optional", "required"):
            label, token = token, self._next()
        if token == "map":
            self._expect("<")
            key = self._next()
            self._expect(",")
            value = self._next()
            self._expect(">")
            field_type = f"map<{key},{value}>"
        else:
            field_type = token.lstrip(".")
        name = self._next()
        self._expect("=")
        number = self._number(self._next())
        if self._peek() == "[":
            self._skip_statement()
        elif field_type == "group" and self._peek() == "{":
            self._next()
            group = ProtoMessage(self._qualify(name, message.name))
            self.result.messages[group.name] = group
            self._body(group, oneof=None)
        else:
            self._expect(";")
        message.fields[number] = ProtoField(name, number, field_type, label, oneof)

    def _enum(self, name: str) -> None:
        enum = ProtoEnum(name)
        self.result.enums[name] = enum
        self._expect("{")
        while (token := self._next()) != "}":
            if token == "reserved":
                self._reserved(enum.reserved)
            elif token == "option":
                self._pos -= 1
                self._skip_statement()
            elif token == ";":
                continue
            else:
                self._expect("=")
                number = self._number(self._next())
                if self._peek() == "[":
                    self._skip_statement()
                else:
                    self._expect(";")
                enum.values.setdefault(number, token)

    def _reserved(self, reserved: _Reserved) -> None:
        while (token := self._next()) != ";":
            if token == ",":
                continue
            if token[0] in "\"'":
                reserved.names.add(token[1:-1])
                continue
            start = self._number(token)
            end = start
            if self._peek() == "to":
                self._next()
                end = self._number(self._next())
            reserved.ranges.append(range(start, end + 1))


def parse_proto(text: str) -> ProtoFile:
    """Parse a ``.proto`` definition."""
    return _Parser(text).parse()


def _wire_compatible(old: str, new: str) -> bool:
    return old == new or any(old in group and new in group for group in _WIRE_GROUPS)


def _short(name: str) -> str:
    return name.rsplit(".", 1)[-1]


def _compare_message(new: ProtoMessage, old: ProtoMessage) -> list[CompatibilityDifference]:
    path = f"/{old.name}"
    differences: list[CompatibilityDifference] = []
    for number, before in sorted(old.fields.items()):
        after = new.fields.get(number)
        field_path = f"{path}/{before.name}"
        if after is None:
            if not new.reserved.covers(number, before.name):
                differences.append(CompatibilityDifference(
                    f"field '{before.name}' ({number}) was removed without being reserved", field_path,
                ))
            continue
        if after.name != before.name:
            differences.append(CompatibilityDifference(
                f"field {number} was renamed from '{before.name}' to '{after.name}'", field_path,
            ))
        if not _wire_compatible(before.type, after.type) and _short(before.type) != _short(after.type):
            differences.append(CompatibilityDifference(
                f"field '{before.name}' ({number}) changed type from '{before.type}' to '{after.type}'", field_path,
            ))
        if (before.label == "repeated") != (after.label == "repeated"):
            differences.append(CompatibilityDifference(
                f"field '{before.name}' ({number}) changed label from '{before.label or 'singular'}' "
                f"to '{after.label or 'singular'}'",
                field_path,
            ))
    for number, added in sorted(new.fields.items()):
        if number in old.fields:
            continue
        field_path = f"{path}/{added.name}"
        if old.reserved.covers(number, added.name):
            differences.append(CompatibilityDifference(
                f"field '{added.name}' ({number}) reuses a reserved number or name", field_path,
            ))
        if added.label == "required":
            differences.append(CompatibilityDifference(
                f"required field '{added.name}' ({number}) was added", field_path,
            ))
    return differences


def _compare_enum(new: ProtoEnum, old: ProtoEnum) -> list[CompatibilityDifference]:
    differences = []
    for number, symbol in sorted(old.values.items()):
        if number not in new.values and not new.reserved.covers(number, symbol):
            differences.append(CompatibilityDifference(
                f"enum value '{symbol}' ({number}) was removed without being reserved", f"/{old.name}/{symbol}",
            ))
    return differences


class ProtobufChecker(SchemaChecker):
    """Protobuf compatibility (backward only)."""

    schema_type = SchemaType.PROTOBUF

    def compare(self, reader: str, writer: str) -> list[CompatibilityDifference]:
        new, old = parse_proto(reader), parse_proto(writer)
        differences: list[CompatibilityDifference] = []
        if old.package != new.package:
            differences.append(CompatibilityDifference(
                f"package changed from '{old.package}' to '{new.package}'", "/package",
            ))
        for name, message in old.messages.items():
            if name not in new.messages:
                differences.append(CompatibilityDifference(f"message '{name}' was removed", f"/{name}"))
                continue
            differences.extend(_compare_message(new.messages[name], message))
        for name, enum in old.enums.items():
            if name not in new.enums:
                differences.append(CompatibilityDifference(f"enum '{name}' was removed", f"/{name}"))
                continue
            differences.extend(_compare_enum(new.enums[name], enum))
        return differences


__all__ = ["ProtoFile", "ProtobufChecker", "parse_proto"]
