"""Compatibility – CompatibilityVerifier, the engine's entry point.

A verification is a short pipeline of storage reads, each depending on the
previous one::

    mode  ->  version ids  ->  selected ids  ->  schema texts  ->  checker

The verifier keeps no state between calls, so any number of verifications
may run concurrently against the same storage. It does not make
"verify then register" atomic; callers that need that must serialise
registration themselves.
"""
from __future__ import annotations

import time
from typing import Any, Mapping, Sequence

import structlog

from schema_compat.application.compatibility.checkers import CHECKERS, SchemaChecker, checker_for
from schema_compat.application.compatibility.modes import ModeResolution, resolve_mode
from schema_compat.application.compatibility.result import CompatibilityDifference, CompatibilityResult
from schema_compat.application.compatibility.selector import select_versions
from schema_compat.config.settings import VerifierSettings
from schema_compat.kernel.contracts import (
    CompatibilityMode,
    Direction,
    Schema,
    SchemaStorage,
    SchemaType,
    Subject,
)
from schema_compat.kernel.errors import IncompatibleSchemaChangeError, UnsupportedCompatibilityModeError
from schema_compat.kernel.invariant import ensure
from schema_compat.observability.logging import get_logger
from schema_compat.observability.metrics import Metrics, NoopMetrics

_log = get_logger(__name__)


class CompatibilityVerifier:
    """Decide whether a candidate schema may be registered under a subject.

    Parameters
    ----------
    storage:
        Read access to the subject's mode, versions and schema texts.
        Failures raised by it propagate unchanged; nothing is retried.
    settings:
        Logging and strictness knobs. Defaults to :class:`VerifierSettings`.
    metrics:
        Metrics backend; defaults to :class:`NoopMetrics`.
    checkers:
        Override of the schema-type to checker table (tests, extensions).

    Usage::

        verifier = CompatibilityVerifier(storage)
        if not await verifier.verify(Schema.candidate(text, "AVRO"), "orders-value"):
            ...
    """

    def __init__(
        self,
        storage: SchemaStorage,
        *,
        settings: VerifierSettings | None = None,
        metrics: Metrics | None = None,
        checkers: Mapping[SchemaType, SchemaChecker] | None = None,
    ) -> None:
        self._storage = storage
        self._settings = settings or VerifierSettings()
        self._checkers = checkers if checkers is not None else CHECKERS
        metrics = metrics or NoopMetrics()
        self._verifications = metrics.counter("schema_compat.verifications", "Compatibility verifications")
        self._latency = metrics.histogram("schema_compat.verify_latency_ms", "Compatibility verification latency", "ms")

    async def verify(self, schema: Schema, subject: Subject) -> bool:
        """Return ``True`` when *schema* is compatible with *subject*'s history."""
        return (await self.check(schema, subject)).is_compatible

    async def ensure_compatible(self, schema: Schema, subject: Subject) -> None:
        """Raise :class:`IncompatibleSchemaChangeError` unless *schema* is compatible."""
        result = await self.check(schema, subject)
        if not result.is_compatible:
            raise IncompatibleSchemaChangeError(
                f"Schema being registered is incompatible with an earlier schema for subject '{subject}'",
                differences=result.differences,
                detail={"subject": subject, "schema_type": schema.schema_type.value},
            )

    async def check(self, schema: Schema, subject: Subject) -> CompatibilityResult:
        """Run the full pipeline and return the verdict with its differences."""
        labels = {"schema_type": schema.schema_type.value, "mode": "unresolved"}
        outcome = "error"
        start = time.perf_counter()
        with structlog.contextvars.bound_contextvars(subject=subject):
            try:
                result = await self._check(schema, subject, labels)
                outcome = "compatible" if result.is_compatible else "incompatible"
                return result
            finally:
                labels["outcome"] = outcome
                self._verifications.add(1.0, labels)
                self._latency.record((time.perf_counter() - start) * 1000, labels)

    async def _check(self, schema: Schema, subject: Subject, labels: dict[str, str]) -> CompatibilityResult:
        _log.info("compatibility.verify.started", schema_type=schema.schema_type.value, **self._definition(schema.definition))

        resolution = resolve_mode(await self._storage.get_compatibility_mode(subject))
        labels["mode"] = resolution.mode.value if resolution.recognized else "UNRECOGNIZED"
        _log.info("compatibility.verify.mode", mode=resolution.mode.value, recognized=resolution.recognized)
        if resolution.is_none:
            return CompatibilityResult.compatible()

        versions = await self._storage.get_all_versions_for_subject(subject)
        ids = select_versions(resolution, versions)
        if not ids:
            _log.info("compatibility.verify.no_history")
            return CompatibilityResult.compatible()
        _log.info("compatibility.verify.selected", version_ids=ids)

        downloaded = await self._storage.download_schemas(ids)
        returned = sorted(s.id for s in downloaded)
        ensure(
            returned == sorted(set(ids)),
            f"storage returned schema versions {returned} for requested versions {sorted(set(ids))}",
        )
        ordered = sorted(downloaded, key=lambda s: s.id)
        if self._settings.log_definitions:
            for previous in ordered:
                _log.info("compatibility.verify.existing", version_id=previous.id, definition=previous.definition)
        return self.check_definitions(
            schema.definition,
            schema.schema_type,
            resolution,
            [s.definition for s in ordered],
        )

    def check_definitions(
        self,
        definition: str,
        schema_type: SchemaType | str | None,
        mode: CompatibilityMode | ModeResolution | str,
        existing: Sequence[str],
    ) -> CompatibilityResult:
        """Check *definition* against *existing* texts, oldest first, without storage.

        Latest-only modes use the last element of *existing*. An unsupported
        mode for the schema type yields an incompatible result.
        """
        resolution = mode if isinstance(mode, ModeResolution) else resolve_mode(mode)
        schema_type = SchemaType.parse(schema_type)
        if not existing or resolution.direction is Direction.NONE:
            return CompatibilityResult.compatible()
        if resolution.latest_only:
            existing = existing[-1:]

        if schema_type is SchemaType.UNKNOWN and self._settings.strict_unknown_types:
            result = CompatibilityResult.incompatible([
                CompatibilityDifference("schema type is not recognised and strict_unknown_types is enabled"),
            ])
        else:
            try:
                result = checker_for(schema_type, self._checkers).test(resolution.mode, existing, definition)
            except UnsupportedCompatibilityModeError as exc:
                _log.warning("compatibility.verify.unsupported_mode", mode=exc.mode, schema_type=exc.schema_type)
                result = CompatibilityResult.incompatible([CompatibilityDifference(exc.message)])

        _log.info("compatibility.verify.completed", compatible=result.is_compatible, compared=len(existing))
        for difference in result.differences:
            _log.info("compatibility.verify.difference", context=difference.context, message=difference.message)
        return result

    def _definition(self, definition: str) -> dict[str, Any]:
        if self._settings.log_definitions:
            return {"definition": definition}
        return {"definition_length": len(definition)}


async def verify(schema: Schema, subject: Subject, storage: SchemaStorage, **kwargs: Any) -> bool:
    """Shorthand for ``CompatibilityVerifier(storage, **kwargs).verify(schema, subject)``."""
    return await CompatibilityVerifier(storage, **kwargs).verify(schema, subject)


__all__ = ["CompatibilityVerifier", "verify"]
