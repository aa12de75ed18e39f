"""Per-field live value with debounced changes and commit-on-blur."""

from __future__ import annotations

import logging
from typing import Any, Callable

from fieldkit.constants import DEBOUNCE_WAIT
from fieldkit.models.field_config import FieldValue, NumberTransform
from fieldkit.models.scheduler import AsyncioScheduler, Scheduler, TimerHandle

logger = logging.getLogger(__name__)

__all__ = ["EditSession", "parse_number"]

ValueListener = Callable[[FieldValue], None]


def parse_number(raw: Any) -> FieldValue | None:
    """Parse numeric input text.

    Returns:
        "" for empty input, an int or float for numeric text, or None when
        the text is not a number
    """
    if isinstance(raw, bool):
        return None
    if isinstance(raw, (int, float)):
        return raw
    text = str(raw if raw is not None else "").strip()
    if not text:
        return ""
    try:
        return int(text)
    except ValueError:
        pass
    try:
        return float(text)
    except ValueError:
        return None


class EditSession:
    """Owns one field's live interaction.

    ``live_value`` follows every edit immediately. A "changing" event
    carrying the latest value fires once the edits go quiet for ``wait``
    seconds (trailing-edge debounce). Losing focus cancels that pending
    event and, if the value moved since the last commit, fires a commit
    synchronously.

    Attributes:
        field_id: Field the session belongs to
        live_value: Current value, updated on every edit
        last_committed_value: Value reported by the most recent commit
        pending_commit: True between an edit and the blur that settles it
    """

    def __init__(
        self,
        field_id: str,
        value: FieldValue | None = "",
        *,
        on_changing: ValueListener | None = None,
        on_commit: ValueListener | None = None,
        on_pending_change: Callable[[bool], None] | None = None,
        read_only: bool = False,
        numeric: bool = False,
        prepare_number: NumberTransform | None = None,
        scheduler: Scheduler | None = None,
        wait: float = DEBOUNCE_WAIT,
    ) -> None:
        self.field_id = field_id
        self.on_changing = on_changing
        self.on_commit = on_commit
        self.on_pending_change = on_pending_change
        self.numeric = numeric
        self.prepare_number = prepare_number
        self.wait = wait
        self._read_only = read_only
        self._scheduler: Scheduler = scheduler or AsyncioScheduler()
        self._timer: TimerHandle | None = None
        self._closed = False

        initial: FieldValue = "" if value is None else value
        if numeric:
            initial = self._normalize_number(initial, fallback="")
        self.live_value: FieldValue = initial
        self.last_committed_value: FieldValue = initial
        self.pending_commit = False

    @property
    def read_only(self) -> bool:
        return self._read_only

    @property
    def has_scheduled_change(self) -> bool:
        """Whether a debounced "changing" event is waiting to fire."""
        return self._timer is not None and not self._timer.cancelled()

    def set_read_only(self, read_only: bool) -> None:
        """Switch read-only mode; entering it drops any queued change."""
        self._read_only = read_only
        if read_only:
            self._cancel_timer()
            self._set_pending(False)

    def _normalize_number(self, raw: Any, fallback: FieldValue) -> FieldValue:
        parsed = parse_number(raw)
        if parsed is None:
            logger.debug("Ignoring non-numeric input %r for %s", raw, self.field_id)
            return fallback
        if parsed == "" or self.prepare_number is None:
            return parsed
        return self.prepare_number(parsed)

    def display_text(self) -> str:
        """Text shown by non-interactive rendering."""
        return str(self.live_value)

    def on_user_edit(self, raw: Any) -> None:
        """Record a keystroke or selection and debounce the change event."""
        if self._read_only or self._closed:
            return

        if self.numeric:
            value = self._normalize_number(raw, fallback=self.live_value)
        else:
            value = "" if raw is None else raw

        self.live_value = value
        self._set_pending(True)
        self._schedule_changing(value)

    def on_focus_lost(self) -> None:
        """Settle the edit when the field loses focus."""
        if self._read_only:
            return

        self._cancel_timer()
        if self.live_value != self.last_committed_value:
            value = self.live_value
            self.last_committed_value = value
            logger.debug("Committing %s=%r", self.field_id, value)
            if self.on_commit is not None:
                self.on_commit(value)
        self._set_pending(False)

    def close(self) -> None:
        """Tear down: drop any queued change event."""
        self._cancel_timer()
        self._closed = True

    def _schedule_changing(self, value: FieldValue) -> None:
        self._cancel_timer()
        self._timer = self._scheduler.call_later(self.wait, self._emit_changing, value)

    def _emit_changing(self, value: FieldValue) -> None:
        self._timer = None
        if self.on_changing is not None:
            self.on_changing(value)

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _set_pending(self, pending: bool) -> None:
        if self.pending_commit == pending:
            return
        self.pending_commit = pending
        if self.on_pending_change is not None:
            self.on_pending_change(pending)
