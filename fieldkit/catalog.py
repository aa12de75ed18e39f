"""Field catalog loading.

A catalog is a YAML file listing the fields of a form in display order,
plus the values used on first run when nothing is stored yet:

    fields:
      - id: phone
        label: Phone
        mask: "999-9999"
      - id: quantity
        type: number
        prepare_number: round
      - id: size
        options:
          - {value: s, label: Small}
          - {value: m, label: Medium, sub_label: most popular}
    defaults:
      quantity: 1
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable

import yaml

from fieldkit.errors import ConfigurationError
from fieldkit.models.field_config import FieldConfig, ValueMap

logger = logging.getLogger(__name__)

__all__ = [
    "Catalog",
    "load_catalog",
    "parse_catalog",
    "default_catalog",
]


@dataclass
class Catalog:
    """Ordered field configs and their first-run defaults."""

    fields: list[FieldConfig] = field(default_factory=list)
    defaults: ValueMap = field(default_factory=dict)
    title: str = ""

    def get(self, field_id: str) -> FieldConfig | None:
        for config in self.fields:
            if config.id == field_id:
                return config
        return None


def _check_ids(fields: Iterable[FieldConfig], path: str | None) -> None:
    seen: set[str] = set()
    for config in fields:
        if not config.id:
            raise ConfigurationError(
                "Catalog entry is missing an id",
                path=path,
                suggestion="Give every field a unique id; it is the storage key",
            )
        if config.id in seen:
            raise ConfigurationError(
                f"Duplicate field id {config.id!r}",
                path=path,
                field_id=config.id,
            )
        seen.add(config.id)


def parse_catalog(data: Any, path: str | None = None) -> Catalog:
    """Build a catalog from already-parsed YAML data.

    Raises:
        ConfigurationError: If the structure is wrong, an id is missing or
            repeated, or a number transform is unknown
    """
    if not isinstance(data, dict):
        raise ConfigurationError("Catalog must be a mapping with a 'fields' list", path=path)

    raw_fields = data.get("fields") or []
    if not isinstance(raw_fields, list):
        raise ConfigurationError("'fields' must be a list", path=path)

    fields: list[FieldConfig] = []
    for index, entry in enumerate(raw_fields):
        if not isinstance(entry, dict):
            raise ConfigurationError(
                f"Field #{index + 1} must be a mapping", path=path
            )
        try:
            fields.append(FieldConfig.from_dict(entry))
        except KeyError as exc:
            raise ConfigurationError(
                f"Unknown number transform {exc.args[0]!r}",
                path=path,
                field_id=str(entry.get("id", "")),
                suggestion="Use one of: round, floor, ceil, int, abs",
            ) from exc
        except (TypeError, ValueError) as exc:
            raise ConfigurationError(
                f"Field #{index + 1} is malformed: {exc}",
                path=path,
                field_id=str(entry.get("id", "")),
            ) from exc

    _check_ids(fields, path)

    defaults = data.get("defaults") or {}
    if not isinstance(defaults, dict):
        raise ConfigurationError("'defaults' must be a mapping", path=path)

    return Catalog(
        fields=fields,
        defaults={str(k): ("" if v is None else v) for k, v in defaults.items()},
        title=str(data.get("title", "") or ""),
    )


def load_catalog(path: str | Path) -> Catalog:
    """Load a catalog YAML file.

    Raises:
        ConfigurationError: If the file cannot be read or parsed
    """
    path = Path(path)
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except OSError as exc:
        raise ConfigurationError(f"Cannot read catalog: {exc}", path=str(path)) from exc
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Invalid YAML: {exc}", path=str(path)) from exc

    catalog = parse_catalog(data, str(path))
    logger.info("Loaded %d fields from %s", len(catalog.fields), path)
    return catalog


_DEMO_CATALOG: dict[str, Any] = {
    "title": "fieldkit demo form",
    "fields": [
        {"id": "name", "label": "Name", "placeholder": "Your name"},
        {"id": "phone", "label": "Phone", "mask": "999-9999", "eventable": True},
        {"id": "plate", "label": "Plate", "mask": "aaa \\9 999"},
        {
            "id": "quantity",
            "label": "Quantity",
            "type": "number",
            "prepare_number": "round",
        },
        {
            "id": "size",
            "label": "Size",
            "options": [
                {"value": "s", "label": "Small"},
                {"value": "m", "label": "Medium", "sub_label": "most popular"},
                {"value": "l", "label": "Large"},
            ],
        },
        {
            "id": "region",
            "label": "Region",
            "options": [
                {
                    "value": "eu",
                    "label": "Europe",
                    "options": [
                        {"value": "de", "label": "Germany"},
                        {"value": "fr", "label": "France"},
                    ],
                },
                {
                    "value": "am",
                    "label": "Americas",
                    "options": [
                        {"value": "us", "label": "United States"},
                        {"value": "br", "label": "Brazil"},
                    ],
                },
            ],
        },
        {"id": "notes", "label": "Notes", "multiline": True, "min_rows": 2, "max_rows": 6},
        {"id": "query", "label": "Query", "script": True, "sub_type": "sql", "allow_tabs": True},
    ],
    "defaults": {
        "name": "",
        "phone": "",
        "plate": "",
        "quantity": 1,
        "size": "m",
        "region": "",
        "notes": "",
        "query": "",
    },
}


def default_catalog() -> Catalog:
    """Built-in demo catalog used when no catalog file is given."""
    return parse_catalog(_DEMO_CATALOG)
