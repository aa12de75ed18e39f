"""Shared fixtures for fieldkit tests."""

from __future__ import annotations

from pathlib import Path
from typing import Generator

import pytest

from fieldkit.models.scheduler import ManualScheduler


@pytest.fixture
def scheduler() -> ManualScheduler:
    """Deterministic clock for debounce and persist scheduling."""
    return ManualScheduler()


@pytest.fixture
def events() -> dict[str, list]:
    """Collected changing/commit events."""
    return {"changing": [], "commit": [], "pending": []}


@pytest.fixture
def tmp_catalog(tmp_path: Path) -> Generator[Path, None, None]:
    """Create a temporary catalog YAML file for testing."""
    catalog_file = tmp_path / "catalog.yaml"
    catalog_file.write_text(
        """
title: Order form
fields:
  - id: phone
    label: Phone
    mask: "999-9999"
    eventable: true
  - id: quantity
    type: number
    prepare_number: round
  - id: size
    options:
      - {value: a, label: A}
      - {value: b, label: B, sub_label: recommended}
  - id: notes
    multiline: true
    minRows: 2
    maxRows: 5
defaults:
  quantity: 1
  size: a
""",
        encoding="utf-8",
    )
    yield catalog_file


@pytest.fixture
def tmp_settings_root(tmp_path: Path) -> Generator[Path, None, None]:
    """Project root with a .fieldkit.yaml file."""
    (tmp_path / ".fieldkit.yaml").write_text(
        """
fieldkit:
  store_path: ./data/values.json
  store_key: formValues
  debounce_ms: 350
  log_level: DEBUG
  format_chars:
    h: "[0-9A-Fa-f]"
""",
        encoding="utf-8",
    )
    yield tmp_path
