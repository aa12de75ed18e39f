"""prompt_toolkit form fields with masks, debounced edits and persisted values.

This package renders a declarative field catalog as a terminal form. Each
field picks one control variant (numeric, masked, code, select, multiline,
passthrough, plain text), reports debounced "changing" values while the
user types, and commits on blur. The host writes the whole value map to a
JSON store after each commit.

Usage:
    python -m fieldkit                 # Demo form
    python -m fieldkit catalog.yaml    # Fields from a catalog file
"""

from __future__ import annotations

__version__ = "0.1.0"

__all__ = [
    "FormApp",
    "run_form",
]


def __getattr__(name: str):
    """Lazy import of the application."""
    if name == "FormApp":
        from fieldkit.app import FormApp
        return FormApp
    if name == "run_form":
        from fieldkit.app import run_form
        return run_form
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
