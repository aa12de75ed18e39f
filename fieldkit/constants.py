"""Shared constants for fieldkit modules.

Centralizes defaults used by the mask grammar, edit sessions and widgets.
"""

from __future__ import annotations

# Quiescence window for debounced "changing" events, in seconds
DEBOUNCE_WAIT: float = 0.2

# Glyph shown in place of each editable mask position
BLANK_SLOT = "_"

# Character used to escape the next mask character as a literal
MASK_ESCAPE = "\\"

# Default editable-class markers: marker -> regex character class
DEFAULT_FORMAT_CHARS: dict[str, str] = {
    "9": "[0-9]",
    "a": "[A-Za-z]",
    "*": "[A-Za-z0-9]",
}

# Multiline auto-grow bounds
DEFAULT_MIN_ROWS = 1
DEFAULT_MAX_ROWS = 20

# Script editor height when the field config does not set rows
DEFAULT_SCRIPT_ROWS = 4

# Storage key the value map lives under in the JSON store
DEFAULT_STORE_KEY = "inputValues"

# Title shown on the pending-commit indicator
READY_TO_SEND_TITLE = "ready to send"

# Glyph rendered for the status indicator action
INDICATOR_GLYPH = "●"
