"""Value persistence boundary and host integration."""

from __future__ import annotations

from fieldkit.store.base import FieldStore, MemoryStore
from fieldkit.store.json_store import JsonFileStore
from fieldkit.store.host import FormHost, is_all_empty

__all__ = [
    "FieldStore",
    "MemoryStore",
    "JsonFileStore",
    "FormHost",
    "is_all_empty",
]
