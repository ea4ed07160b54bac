"""Kernel contracts – Schema and SchemaType value objects."""
from __future__ import annotations

import dataclasses
from enum import Enum
from typing import TypeAlias

SchemaVersion: TypeAlias = int
Subject: TypeAlias = str


class SchemaType(str, Enum):
    """Closed set of schema formats understood by the engine."""

    AVRO = "AVRO"
    JSON = "JSON"
    PROTOBUF = "PROTOBUF"
    UNKNOWN = "UNKNOWN"

    @classmethod
    def parse(cls, value: object) -> "SchemaType":
        """Map a declared type tag onto a member.

        A missing tag means Avro, as on the registry wire protocol.
        Unrecognised tags, and values that are not strings, become ``UNKNOWN``.

        Example::

            assert SchemaType.parse("protobuf") is SchemaType.PROTOBUF
            assert SchemaType.parse("xml") is SchemaType.UNKNOWN
        """
        if isinstance(value, SchemaType):
            return value
        if value is None:
            return cls.AVRO
        if not isinstance(value, str):
            return cls.UNKNOWN
        if not value.strip():
            return cls.AVRO
        try:
            return cls(value.strip().upper())
        except ValueError:
            return cls.UNKNOWN


@dataclasses.dataclass(frozen=True)
class Schema:
    """A registered (or candidate) schema version.

    ``id`` is the numeric version identifier, monotonic per subject. For a
    candidate that has not been registered yet it is conventionally ``0``.
    """

    id: SchemaVersion
    schema_type: SchemaType
    definition: str
    subject: Subject | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.schema_type, SchemaType):
            object.__setattr__(self, "schema_type", SchemaType.parse(self.schema_type))

    @classmethod
    def candidate(
        cls,
        definition: str,
        schema_type: "str | SchemaType | None" = SchemaType.AVRO,
        subject: Subject | None = None,
    ) -> "Schema":
        """Build an unregistered schema to be verified."""
        return cls(id=0, schema_type=SchemaType.parse(schema_type), definition=definition, subject=subject)


__all__ = ["Schema", "SchemaType", "SchemaVersion", "Subject"]
