"""Kernel contracts – SchemaStorage port."""
from __future__ import annotations

import abc
from typing import Any, Collection, Iterable

from schema_compat.kernel.contracts.contract import Schema, SchemaVersion, Subject


class SchemaStorage(abc.ABC):
    """Port: read access to subjects, their versions and compatibility setting.

    Concrete implementations belong to the hosting registry. The
    verifier never retries or wraps failures raised from these methods.
    """

    @abc.abstractmethod
    async def get_compatibility_mode(self, subject: Subject) -> Any:
        """Return the subject's configured mode.

        Usually a :class:`~schema_compat.kernel.contracts.CompatibilityMode`;
        plain strings are accepted. Applying a default when the subject has
        no explicit setting is the storage's concern.
        """

    @abc.abstractmethod
    async def get_all_versions_for_subject(self, subject: Subject) -> Collection[SchemaVersion]:
        """Return every registered version id; empty for unknown subjects."""

    @abc.abstractmethod
    async def download_schemas(self, ids: Iterable[SchemaVersion]) -> list[Schema]:
        """Return the schemas whose ids exactly match *ids* (any order)."""


__all__ = ["SchemaStorage"]
