"""Read/write contract for the persisted value map."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Mapping

from fieldkit.models.field_config import FieldValue, ValueMap

__all__ = ["FieldStore", "MemoryStore"]


class FieldStore(ABC):
    """Storage boundary for the whole set of field values.

    ``load`` is synchronous and runs once at startup. ``persist`` receives
    the complete current map on every commit; the host dispatches it
    without waiting on the result.
    """

    @abstractmethod
    def load(self) -> ValueMap:
        """Return the stored value map (empty if nothing is stored)."""

    @abstractmethod
    def persist(self, values: Mapping[str, FieldValue]) -> None:
        """Durably replace the stored map with ``values``."""


class MemoryStore(FieldStore):
    """In-process store, for tests and embedding hosts."""

    def __init__(self, values: Mapping[str, FieldValue] | None = None) -> None:
        self._values: ValueMap = dict(values or {})
        self.writes = 0

    def load(self) -> ValueMap:
        return dict(self._values)

    def persist(self, values: Mapping[str, FieldValue]) -> None:
        self._values = dict(values)
        self.writes += 1
