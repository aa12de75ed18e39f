"""prompt_toolkit widget components."""

from __future__ import annotations

from fieldkit.widgets.dropdown import DropdownMenu
from fieldkit.widgets.processors import PlaceholderProcessor
from fieldkit.widgets.universal_input import UniversalInput

__all__ = [
    "DropdownMenu",
    "PlaceholderProcessor",
    "UniversalInput",
]
