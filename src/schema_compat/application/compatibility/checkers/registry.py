"""Compatibility checkers – fixed dispatch table keyed by schema type."""
from __future__ import annotations

from types import MappingProxyType
from typing import Mapping

from schema_compat.application.compatibility.checkers.avro import AvroChecker
from schema_compat.application.compatibility.checkers.base import SchemaChecker
from schema_compat.application.compatibility.checkers.json_schema import JsonSchemaChecker
from schema_compat.application.compatibility.checkers.noop import NoopChecker
from schema_compat.application.compatibility.checkers.protobuf import ProtobufChecker
from schema_compat.kernel.contracts import SchemaType

# checkers are stateless, one instance each is shared by every call
CHECKERS: Mapping[SchemaType, SchemaChecker] = MappingProxyType({
    SchemaType.AVRO: AvroChecker(),
    SchemaType.JSON: JsonSchemaChecker(),
    SchemaType.PROTOBUF: ProtobufChecker(),
    SchemaType.UNKNOWN: NoopChecker(),
})


def checker_for(
    schema_type: SchemaType | str | None,
    checkers: Mapping[SchemaType, SchemaChecker] = CHECKERS,
) -> SchemaChecker:
    """Return the checker for *schema_type*; unknown types get the no-op checker."""
    return checkers.get(SchemaType.parse(schema_type), CHECKERS[SchemaType.UNKNOWN])


__all__ = ["CHECKERS", "checker_for"]
