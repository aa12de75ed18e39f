"""JSON-file key-value store for field values.

The value map lives under a single key of a JSON document, the same shape
a browser keeps in localStorage:

    {"inputValues": {"phone": "555-1234", "quantity": 4}}

Other keys in the document are preserved on write.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Mapping

from fieldkit.constants import DEFAULT_STORE_KEY
from fieldkit.errors import StoreError
from fieldkit.models.field_config import FieldValue, ValueMap
from fieldkit.store.base import FieldStore

logger = logging.getLogger(__name__)

__all__ = ["JsonFileStore"]


class JsonFileStore(FieldStore):
    """Persist the value map to a JSON file with atomic replace."""

    def __init__(self, path: str | Path, key: str = DEFAULT_STORE_KEY) -> None:
        self.path = Path(path)
        self.key = key

    def _read_document(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            document = json.loads(self.path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            logger.warning("Ignoring malformed value store %s: %s", self.path, exc)
            return {}
        except OSError as exc:
            raise StoreError("Could not read value store", path=str(self.path), cause=exc) from exc
        if not isinstance(document, dict):
            logger.warning("Ignoring value store %s: top level is not an object", self.path)
            return {}
        return document

    def load(self) -> ValueMap:
        values = self._read_document().get(self.key)
        if not isinstance(values, dict):
            return {}
        return {
            str(k): v
            for k, v in values.items()
            if isinstance(v, (str, int, float)) and not isinstance(v, bool)
        }

    def persist(self, values: Mapping[str, FieldValue]) -> None:
        # Read failures raise StoreError and leave the existing document untouched
        document = self._read_document()
        document[self.key] = dict(values)

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self.path.name}.", suffix=".tmp", dir=self.path.parent
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(document, f, indent=2, ensure_ascii=False)
                os.replace(tmp_name, self.path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as exc:
            raise StoreError("Could not write value store", path=str(self.path), cause=exc) from exc

        logger.debug("Persisted %d values to %s", len(values), self.path)
