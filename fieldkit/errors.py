"""Structured exception hierarchy for fieldkit.

Provides specific exception types for the few failure modes the form core
can hit, with context for debugging. Most of them are recovered locally:
an invalid mask falls back to a plain text control, a failed write is
logged by the host.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

__all__ = [
    "FieldKitError",
    "InvalidMaskError",
    "ConfigurationError",
    "StoreError",
]


class FieldKitError(Exception):
    """Base exception for all fieldkit errors.

    Provides structured error information for debugging.
    """

    def __init__(
        self,
        message: str,
        *,
        field_id: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        suggestion: Optional[str] = None,
    ) -> None:
        self.field_id = field_id
        self.details = details or {}
        self.suggestion = suggestion

        parts = [message]

        if field_id:
            parts.insert(0, f"[{field_id}]")

        if details:
            detail_lines = [f"  {k}: {v}" for k, v in details.items()]
            parts.append("\nDetails:")
            parts.extend(detail_lines)

        if suggestion:
            parts.append(f"\nSuggestion: {suggestion}")

        super().__init__("\n".join(parts) if len(parts) > 1 else message)
        self.message = message

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for structured logging."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "field_id": self.field_id,
            "details": self.details,
            "suggestion": self.suggestion,
        }


class InvalidMaskError(FieldKitError):
    """Mask pattern has no editable positions or is not a string."""

    def __init__(self, mask: Any, reason: str, **kwargs: Any) -> None:
        self.mask = mask
        details = kwargs.pop("details", {})
        details["mask"] = repr(mask)
        super().__init__(
            f"Invalid mask: {reason}",
            details=details,
            suggestion=kwargs.pop(
                "suggestion",
                "Use 9 for digits, a for letters, * for alphanumerics; "
                "escape literal markers with a backslash",
            ),
            **kwargs,
        )


class ConfigurationError(FieldKitError):
    """Field catalog or settings file is malformed."""

    def __init__(
        self,
        message: str,
        *,
        path: Optional[str] = None,
        **kwargs: Any,
    ) -> None:
        self.path = path
        details = kwargs.pop("details", {})
        if path:
            details["path"] = path
        super().__init__(message, details=details, **kwargs)


class StoreError(FieldKitError):
    """Reading or writing the persisted value map failed."""

    def __init__(
        self,
        message: str,
        *,
        path: Optional[str] = None,
        cause: Optional[Exception] = None,
        **kwargs: Any,
    ) -> None:
        self.path = path
        self.cause = cause
        details = kwargs.pop("details", {})
        if path:
            details["path"] = path
        if cause:
            details["cause"] = str(cause)
            details["cause_type"] = type(cause).__name__
        super().__init__(message, details=details, **kwargs)
