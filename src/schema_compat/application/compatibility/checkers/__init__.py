"""Compatibility checkers – one per schema format."""
from schema_compat.application.compatibility.checkers.avro import AvroChecker
from schema_compat.application.compatibility.checkers.base import SchemaChecker
from schema_compat.application.compatibility.checkers.json_schema import JsonSchemaChecker
from schema_compat.application.compatibility.checkers.noop import NoopChecker
from schema_compat.application.compatibility.checkers.protobuf import ProtobufChecker
from schema_compat.application.compatibility.checkers.registry import CHECKERS, checker_for

__all__ = [
    "AvroChecker",
    "CHECKERS",
    "JsonSchemaChecker",
    "NoopChecker",
    "ProtobufChecker",
    "SchemaChecker",
    "checker_for",
]
