"""Host integration: bootstrap values, merge commits, persist the map.

The form core never holds the full value map. Each field's edit session
reports commits here; the host merges them into its map (last writer wins
per field id, and fields write disjoint keys) and hands the complete map to
the store after every commit.
"""

from __future__ import annotations

import logging
from typing import Callable, Mapping, Sequence, Union

from fieldkit.errors import StoreError
from fieldkit.models.field_config import FieldConfig, FieldValue, ValueMap
from fieldkit.models.scheduler import AsyncioScheduler, Scheduler
from fieldkit.store.base import FieldStore

logger = logging.getLogger(__name__)

__all__ = ["FormHost", "Defaults", "is_all_empty"]

Defaults = Union[Mapping[str, FieldValue], Callable[[], Mapping[str, FieldValue]], None]


def is_all_empty(values: Mapping[str, FieldValue]) -> bool:
    """True when every value is the empty string (or there are none)."""
    return all(value == "" for value in values.values())


class FormHost:
    """Owns the value map shared by all fields of a form.

    Attributes:
        catalog: Field configs in display order
        store: Storage boundary for the value map
        changing: Latest advisory "changing" value per field (not durable)
    """

    def __init__(
        self,
        catalog: Sequence[FieldConfig],
        store: FieldStore,
        defaults: Defaults = None,
        *,
        scheduler: Scheduler | None = None,
    ) -> None:
        self.catalog = list(catalog)
        self.store = store
        self._defaults = defaults
        self._scheduler: Scheduler = scheduler or AsyncioScheduler()
        self._values: ValueMap = {}
        self._in_process: set[str] = set()
        self._write_seq = 0
        self._written_seq = 0
        self._listeners: list[Callable[[str], None]] = []
        self.changing: ValueMap = {}
        self.last_error: StoreError | None = None

    @property
    def field_ids(self) -> list[str]:
        return [config.id for config in self.catalog]

    @property
    def values(self) -> ValueMap:
        """Snapshot of the current value map."""
        return dict(self._values)

    @property
    def queued_writes(self) -> int:
        """Writes dispatched to the store that have not run yet."""
        return self._write_seq - self._written_seq

    def get(self, field_id: str) -> FieldValue:
        return self._values.get(field_id, "")

    def subscribe(self, listener: Callable[[str], None]) -> None:
        """Register a callback invoked with a field id after any update."""
        self._listeners.append(listener)

    def _notify(self, field_id: str) -> None:
        for listener in self._listeners:
            listener(field_id)

    def _resolve_defaults(self) -> ValueMap:
        defaults = self._defaults() if callable(self._defaults) else self._defaults
        return dict(defaults or {})

    def initial_values(self) -> ValueMap:
        """Load the stored map, bootstrapping from defaults on first run.

        Every catalog id gets a value ("" when the store has none). If all
        of them are empty, the host defaults replace the loaded map.
        """
        loaded = self.store.load()
        values: ValueMap = {field_id: loaded.get(field_id, "") for field_id in self.field_ids}
        # Keep stored values for ids the catalog no longer lists
        for field_id, value in loaded.items():
            values.setdefault(field_id, value)

        if is_all_empty(values):
            defaults = self._resolve_defaults()
            if defaults:
                logger.info("No stored values, bootstrapping %d defaults", len(defaults))
                values = {field_id: defaults.get(field_id, "") for field_id in self.field_ids}
                for field_id, value in defaults.items():
                    values.setdefault(field_id, value)

        self._values = values
        return dict(values)

    def change(self, field_id: str, value: FieldValue) -> None:
        """Record an advisory live value; never persisted."""
        self.changing[field_id] = value
        self._notify(field_id)

    def commit(self, field_id: str, value: FieldValue) -> None:
        """Merge a committed value and write the whole map through."""
        if field_id not in self._values and field_id not in self.field_ids:
            logger.warning("Commit for unknown field %s", field_id)
        self._values[field_id] = value
        self.changing.pop(field_id, None)
        logger.debug("Commit %s=%r", field_id, value)

        self._write_seq += 1
        self._scheduler.call_later(0, self._write, self._write_seq, dict(self._values))
        self._notify(field_id)

    def _write(self, seq: int, snapshot: ValueMap) -> None:
        if seq <= self._written_seq:
            # A later snapshot was already written
            return
        self._written_seq = seq
        try:
            self.store.persist(snapshot)
        except StoreError as exc:
            self.last_error = exc
            logger.error("Persisting field values failed: %s", exc, extra={"error": exc.to_dict()})
        else:
            self.last_error = None

    def flush(self) -> None:
        """Write the current map synchronously (used on shutdown)."""
        if self._write_seq > self._written_seq:
            self._write(self._write_seq, dict(self._values))

    def set_in_process(self, field_id: str, in_process: bool) -> None:
        """Flag an external update running for a field."""
        if in_process:
            self._in_process.add(field_id)
        else:
            self._in_process.discard(field_id)
        self._notify(field_id)

    def is_in_process(self, field_id: str) -> bool:
        return field_id in self._in_process
