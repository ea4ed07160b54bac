"""Unit tests for CompatibilityVerifier – the verification pipeline end to end."""

from __future__ import annotations

import asyncio
import json
from typing import Iterable

import pytest
from hypothesis import given, settings
from structlog.testing import capture_logs

from schema_compat.application.compatibility import (
    CompatibilityDifference,
    CompatibilityVerifier,
    SchemaChecker,
    verify,
)
from schema_compat.config import VerifierSettings
from schema_compat.kernel.contracts import CompatibilityMode, Schema, SchemaType, SchemaVersion
from schema_compat.kernel.errors import (
    IncompatibleSchemaChangeError,
    InvariantViolationError,
    SchemaStorageError,
)
from schema_compat.testing import FakeMetricsRegistry, InMemorySchemaStorage
from schema_compat.testing.generators import (
    LATEST_ONLY_MODES,
    TRANSITIVE_MODES,
    compatibility_mode_strategy,
    version_ids_strategy,
)

SUBJECT = "orders-value"


def avro_record(**fields: str) -> str:
    return json.dumps({
        "type": "record",
        "name": "Order",
        "fields": [{"name": name, "type": kind} for name, kind in fields.items()],
    })


ORDER_JSON_V7 = json.dumps({
    "type": "object",
    "properties": {"id": {"type": "string"}, "amount": {"type": "number"}},
    "required": ["id", "amount"],
})
ORDER_JSON_WITHOUT_AMOUNT = json.dumps({
    "type": "object",
    "properties": {"id": {"type": "string"}},
    "required": ["id"],
})

ORDER_PROTO = 'syntax = "proto3"; message Order { string id = 1; }'


def storage_with_middle_break(mode: CompatibilityMode) -> InMemorySchemaStorage:
    """v1 and v3 carry ``a: int``; only v2 changes it to a string."""
    storage = InMemorySchemaStorage(default_mode=mode)
    storage.add(SUBJECT, 1, avro_record(a="int"))
    storage.add(SUBJECT, 2, avro_record(a="string"))
    storage.add(SUBJECT, 3, avro_record(a="int"))
    return storage


class RecordingChecker(SchemaChecker):
    schema_type = SchemaType.AVRO

    def __init__(self) -> None:
        self.pairs: list[tuple[str, str]] = []

    def compare(self, reader: str, writer: str) -> list[CompatibilityDifference]:
        self.pairs.append((reader, writer))
        return []


class ReversedStorage(InMemorySchemaStorage):
    """Returns downloaded schemas newest first."""

    async def download_schemas(self, ids: Iterable[SchemaVersion]) -> list[Schema]:
        return list(reversed(await super().download_schemas(ids)))


class LossyStorage(InMemorySchemaStorage):
    """Drops the last requested schema from every download."""

    async def download_schemas(self, ids: Iterable[SchemaVersion]) -> list[Schema]:
        return (await super().download_schemas(ids))[:-1]


def run_check(storage: InMemorySchemaStorage, schema: Schema, **kwargs):
    return asyncio.run(CompatibilityVerifier(storage, **kwargs).check(schema, SUBJECT))


# ---------------------------------------------------------------------------
# Short-circuits
# ---------------------------------------------------------------------------


class TestShortCircuits:
    def test_none_mode_is_compatible_without_reading_history(self) -> None:
        storage = storage_with_middle_break(CompatibilityMode.NONE)
        candidate = Schema.candidate("this is not avro")
        assert asyncio.run(CompatibilityVerifier(storage).verify(candidate, SUBJECT)) is True
        assert storage.operations() == ["get_compatibility_mode"]

    def test_empty_history_is_compatible(self) -> None:
        storage = InMemorySchemaStorage(default_mode=CompatibilityMode.FULL_TRANSITIVE)
        result = run_check(storage, Schema.candidate(avro_record(a="int")))
        assert result.is_compatible
        assert result.differences == ()
        assert storage.operations() == ["get_compatibility_mode", "get_all_versions_for_subject"]

    def test_unrecognised_mode_still_reads_history_and_passes(self) -> None:
        storage = storage_with_middle_break(CompatibilityMode.BACKWARD)
        storage.set_mode(SUBJECT, "SIDEWAYS")
        result = run_check(storage, Schema.candidate(avro_record(a="boolean")))
        assert result.is_compatible
        assert storage.calls[-1] == ("download_schemas", [3])

    def test_missing_mode_is_treated_as_unrecognised(self) -> None:
        storage = storage_with_middle_break(CompatibilityMode.BACKWARD)
        storage.set_mode(SUBJECT, None)
        assert run_check(storage, Schema.candidate(avro_record(a="boolean"))).is_compatible


# ---------------------------------------------------------------------------
# Version selection
# ---------------------------------------------------------------------------


class TestVersionSelection:
    @pytest.mark.parametrize("mode", LATEST_ONLY_MODES)
    def test_latest_only_ignores_incompatible_middle_version(self, mode: CompatibilityMode) -> None:
        storage = storage_with_middle_break(mode)
        assert run_check(storage, Schema.candidate(avro_record(a="int"))).is_compatible
        assert storage.calls[-1] == ("download_schemas", [3])

    @pytest.mark.parametrize("mode", TRANSITIVE_MODES)
    def test_transitive_sees_incompatible_middle_version(self, mode: CompatibilityMode) -> None:
        storage = storage_with_middle_break(mode)
        result = run_check(storage, Schema.candidate(avro_record(a="int")))
        assert not result.is_compatible
        assert storage.calls[-1] == ("download_schemas", [1, 2, 3])
        assert all(d.context == "/fields/a/type" for d in result.differences)

    @settings(max_examples=30, deadline=None)
    @given(ids=version_ids_strategy(min_size=1), mode=compatibility_mode_strategy(include_none=False))
    def test_selection_matches_mode(self, ids: set[int], mode: CompatibilityMode) -> None:
        storage = InMemorySchemaStorage(default_mode=mode)
        for version in ids:
            storage.add(SUBJECT, version, avro_record(a="int"))
        assert run_check(storage, Schema.candidate(avro_record(a="int"))).is_compatible
        expected = sorted(ids) if mode.is_transitive else [max(ids)]
        assert storage.calls[-1] == ("download_schemas", expected)

    def test_history_is_compared_oldest_first(self) -> None:
        storage = ReversedStorage(default_mode=CompatibilityMode.BACKWARD_TRANSITIVE)
        for version in (3, 1, 2):
            storage.add(SUBJECT, version, f"v{version}")
        recorder = RecordingChecker()
        run_check(storage, Schema.candidate("new"), checkers={SchemaType.AVRO: recorder})
        assert recorder.pairs == [("new", "v1"), ("new", "v2"), ("new", "v3")]

    def test_storage_returning_other_versions_is_an_invariant_violation(self) -> None:
        storage = LossyStorage(default_mode=CompatibilityMode.BACKWARD_TRANSITIVE)
        storage.add(SUBJECT, 1, avro_record(a="int"))
        storage.add(SUBJECT, 2, avro_record(a="int"))
        with pytest.raises(InvariantViolationError):
            run_check(storage, Schema.candidate(avro_record(a="int")))


# ---------------------------------------------------------------------------
# Verdicts
# ---------------------------------------------------------------------------


class TestVerdicts:
    def test_dropped_required_property_is_reported(self) -> None:
        storage = InMemorySchemaStorage(default_mode=CompatibilityMode.BACKWARD)
        storage.add(SUBJECT, 7, ORDER_JSON_V7, SchemaType.JSON)
        result = run_check(storage, Schema.candidate(ORDER_JSON_WITHOUT_AMOUNT, SchemaType.JSON))
        assert not result.is_compatible
        assert result.differences[0].context == "/properties/amount"

    def test_protobuf_forward_fails_closed(self) -> None:
        storage = InMemorySchemaStorage(default_mode=CompatibilityMode.FORWARD)
        storage.add(SUBJECT, 1, ORDER_PROTO, SchemaType.PROTOBUF)
        result = run_check(storage, Schema.candidate(ORDER_PROTO, SchemaType.PROTOBUF))
        assert not result.is_compatible
        assert "not supported" in result.differences[0].message

    def test_protobuf_backward_passes(self) -> None:
        storage = InMemorySchemaStorage(default_mode=CompatibilityMode.BACKWARD)
        storage.add(SUBJECT, 1, ORDER_PROTO, SchemaType.PROTOBUF)
        assert run_check(storage, Schema.candidate(ORDER_PROTO, SchemaType.PROTOBUF)).is_compatible

    def test_unknown_type_passes_by_default(self) -> None:
        storage = InMemorySchemaStorage(default_mode=CompatibilityMode.FULL_TRANSITIVE)
        storage.add(SUBJECT, 1, "<a/>", "XML")
        assert run_check(storage, Schema.candidate("<b/>", "XML")).is_compatible

    def test_unknown_type_fails_when_strict(self) -> None:
        storage = InMemorySchemaStorage(default_mode=CompatibilityMode.FULL_TRANSITIVE)
        storage.add(SUBJECT, 1, "<a/>", "XML")
        result = run_check(
            storage,
            Schema.candidate("<b/>", "XML"),
            settings=VerifierSettings(strict_unknown_types=True),
        )
        assert not result.is_compatible

    def test_verification_is_idempotent(self) -> None:
        storage = storage_with_middle_break(CompatibilityMode.BACKWARD_TRANSITIVE)
        verifier = CompatibilityVerifier(storage)
        candidate = Schema.candidate(avro_record(a="int"))
        first = asyncio.run(verifier.check(candidate, SUBJECT))
        second = asyncio.run(verifier.check(candidate, SUBJECT))
        assert first == second

    def test_concurrent_verifications_share_storage(self) -> None:
        storage = InMemorySchemaStorage(default_mode=CompatibilityMode.BACKWARD)
        storage.add("a-value", 1, avro_record(a="int"))
        storage.add("b-value", 2, avro_record(a="string"))
        verifier = CompatibilityVerifier(storage)
        candidate = Schema.candidate(avro_record(a="int"))

        async def main() -> list[bool]:
            return await asyncio.gather(
                verifier.verify(candidate, "a-value"),
                verifier.verify(candidate, "b-value"),
                verifier.verify(candidate, "c-value"),
            )

        assert asyncio.run(main()) == [True, False, True]


# ---------------------------------------------------------------------------
# Errors and entry points
# ---------------------------------------------------------------------------


class TestEntryPoints:
    def test_ensure_compatible_raises_with_differences(self) -> None:
        storage = InMemorySchemaStorage(default_mode=CompatibilityMode.BACKWARD)
        storage.add(SUBJECT, 7, ORDER_JSON_V7, SchemaType.JSON)
        verifier = CompatibilityVerifier(storage)
        candidate = Schema.candidate(ORDER_JSON_WITHOUT_AMOUNT, SchemaType.JSON)
        with pytest.raises(IncompatibleSchemaChangeError) as exc_info:
            asyncio.run(verifier.ensure_compatible(candidate, SUBJECT))
        assert exc_info.value.detail == {"subject": SUBJECT, "schema_type": "JSON"}
        assert exc_info.value.to_dict()["differences"][0]["context"] == "/properties/amount"

    def test_ensure_compatible_returns_none_when_compatible(self) -> None:
        storage = InMemorySchemaStorage()
        verifier = CompatibilityVerifier(storage)
        assert asyncio.run(verifier.ensure_compatible(Schema.candidate('"string"'), SUBJECT)) is None

    def test_module_level_verify(self) -> None:
        storage = storage_with_middle_break(CompatibilityMode.BACKWARD_TRANSITIVE)
        assert asyncio.run(verify(Schema.candidate(avro_record(a="int")), SUBJECT, storage)) is False

    @pytest.mark.parametrize("operation", ["get_compatibility_mode", "get_all_versions_for_subject", "download_schemas"])
    def test_storage_faults_propagate(self, operation: str) -> None:
        storage = storage_with_middle_break(CompatibilityMode.BACKWARD)
        storage.fail_on.add(operation)
        with pytest.raises(SchemaStorageError):
            run_check(storage, Schema.candidate(avro_record(a="int")))
        assert storage.operations()[-1] == operation


class TestCheckDefinitions:
    def setup_method(self) -> None:
        self.verifier = CompatibilityVerifier(InMemorySchemaStorage())

    def test_latest_only_uses_last_definition(self) -> None:
        history = [avro_record(a="string"), avro_record(a="int")]
        result = self.verifier.check_definitions(avro_record(a="int"), "AVRO", "backward", history)
        assert result.is_compatible

    def test_transitive_uses_every_definition(self) -> None:
        history = [avro_record(a="string"), avro_record(a="int")]
        result = self.verifier.check_definitions(
            avro_record(a="int"), SchemaType.AVRO, CompatibilityMode.BACKWARD_TRANSITIVE, history,
        )
        assert not result.is_compatible

    def test_empty_history(self) -> None:
        assert self.verifier.check_definitions("{", "AVRO", "FULL", []).is_compatible

    def test_unsupported_mode_is_incompatible(self) -> None:
        result = self.verifier.check_definitions(ORDER_PROTO, "PROTOBUF", "FULL", [ORDER_PROTO])
        assert not result.is_compatible

    def test_unparseable_candidate(self) -> None:
        result = self.verifier.check_definitions("{", "AVRO", "BACKWARD", [avro_record(a="int")])
        assert not result.is_compatible
        assert result.differences[0].message.startswith("Invalid AVRO schema")


# ---------------------------------------------------------------------------
# Observability
# ---------------------------------------------------------------------------


class TestObservability:
    def test_counter_labels_on_success(self) -> None:
        metrics = FakeMetricsRegistry()
        storage = storage_with_middle_break(CompatibilityMode.BACKWARD)
        run_check(storage, Schema.candidate(avro_record(a="int")), metrics=metrics)
        metrics.assert_counter_incremented("schema_compat.verifications", 1)
        assert metrics.last_labels("schema_compat.verifications") == {
            "schema_type": "AVRO",
            "mode": "BACKWARD",
            "outcome": "compatible",
        }
        assert len(metrics.histogram("schema_compat.verify_latency_ms").values) == 1

    def test_counter_labels_on_incompatible(self) -> None:
        metrics = FakeMetricsRegistry()
        storage = storage_with_middle_break(CompatibilityMode.FULL_TRANSITIVE)
        run_check(storage, Schema.candidate(avro_record(a="int")), metrics=metrics)
        assert metrics.last_labels("schema_compat.verifications")["outcome"] == "incompatible"

    def test_unrecognised_mode_has_its_own_label(self) -> None:
        metrics = FakeMetricsRegistry()
        storage = storage_with_middle_break(CompatibilityMode.BACKWARD)
        storage.set_mode(SUBJECT, "SIDEWAYS")
        run_check(storage, Schema.candidate(avro_record(a="int")), metrics=metrics)
        assert metrics.last_labels("schema_compat.verifications")["mode"] == "UNRECOGNIZED"

        storage.set_mode(SUBJECT, CompatibilityMode.NONE)
        run_check(storage, Schema.candidate(avro_record(a="int")), metrics=metrics)
        assert metrics.last_labels("schema_compat.verifications")["mode"] == "NONE"

    def test_counter_labels_on_storage_error(self) -> None:
        metrics = FakeMetricsRegistry()
        storage = storage_with_middle_break(CompatibilityMode.BACKWARD)
        storage.fail_on.add("download_schemas")
        with pytest.raises(SchemaStorageError):
            run_check(storage, Schema.candidate(avro_record(a="int")), metrics=metrics)
        assert metrics.last_labels("schema_compat.verifications") == {
            "schema_type": "AVRO",
            "mode": "BACKWARD",
            "outcome": "error",
        }

    def test_logs_verdict_without_definitions_by_default(self) -> None:
        storage = storage_with_middle_break(CompatibilityMode.BACKWARD_TRANSITIVE)
        candidate = Schema.candidate(avro_record(a="int"))
        with capture_logs() as logs:
            run_check(storage, candidate)
        events = [entry["event"] for entry in logs]
        assert events[0] == "compatibility.verify.started"
        assert "compatibility.verify.completed" in events
        assert "compatibility.verify.difference" in events
        assert logs[0]["definition_length"] == len(candidate.definition)
        assert not any("definition" in entry for entry in logs)

    def test_logs_definitions_when_enabled(self) -> None:
        storage = storage_with_middle_break(CompatibilityMode.BACKWARD)
        candidate = Schema.candidate(avro_record(a="int"))
        with capture_logs() as logs:
            run_check(storage, candidate, settings=VerifierSettings(log_definitions=True))
        assert logs[0]["definition"] == candidate.definition
        existing = [entry for entry in logs if entry["event"] == "compatibility.verify.existing"]
        assert [entry["version_id"] for entry in existing] == [3]
