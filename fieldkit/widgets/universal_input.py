"""One input widget for every field configuration.

``UniversalInput`` selects a variant for its FieldConfig, owns the field's
EditSession and ActionsOverlay, and builds the prompt_toolkit container for
that variant. Every Variant member has exactly one builder; a missing one
fails at import time.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Mapping

from prompt_toolkit.buffer import Buffer
from prompt_toolkit.document import Document
from prompt_toolkit.filters import Condition
from prompt_toolkit.formatted_text import StyleAndTextTuples, to_formatted_text
from prompt_toolkit.key_binding import KeyBindings
from prompt_toolkit.layout import (
    BufferControl,
    DynamicContainer,
    FormattedTextControl,
    VSplit,
    Window,
)
from prompt_toolkit.layout.containers import Container
from prompt_toolkit.layout.controls import UIControl
from prompt_toolkit.layout.dimension import Dimension as D

from fieldkit.constants import DEBOUNCE_WAIT
from fieldkit.models.actions import (
    ActionNode,
    ActionsOverlay,
    Measure,
    derive_actions,
    measure_cells,
)
from fieldkit.models.edit_session import EditSession
from fieldkit.models.field_config import FieldConfig, FieldValue
from fieldkit.models.mask import (
    ParsedMask,
    derive_placeholder,
    format_value,
    format_with_cursor,
    parse_mask,
)
from fieldkit.models.scheduler import Scheduler
from fieldkit.models.variant import Variant, select_variant
from fieldkit.widgets.dropdown import DropdownMenu
from fieldkit.widgets.processors import PlaceholderProcessor

logger = logging.getLogger(__name__)

__all__ = ["UniversalInput"]

ValueCallback = Callable[[str, FieldValue], None]


class UniversalInput:
    """Interactive control for one field.

    Attributes:
        config: The field's descriptor
        variant: Rendering mode chosen for the config
        session: Live/committed value state
        overlay: Trailing action measurement
        buffer: Text buffer for editable text variants (None otherwise)
        dropdown: Dropdown control for the select variant (None otherwise)
        container: prompt_toolkit container to place in a layout
    """

    # Variant -> builder method name
    _BUILDERS: dict[Variant, str] = {
        Variant.NUMERIC: "_build_numeric",
        Variant.MASKED: "_build_masked",
        Variant.CODE_EDITOR: "_build_code_editor",
        Variant.SELECT: "_build_select",
        Variant.MULTILINE: "_build_multiline",
        Variant.PASSTHROUGH: "_build_passthrough",
        Variant.PLAIN_TEXT: "_build_plain_text",
    }

    def __init__(
        self,
        config: FieldConfig,
        value: FieldValue | None = "",
        *,
        on_change: ValueCallback | None = None,
        on_end_editing: ValueCallback | None = None,
        in_process: Callable[[], bool] | None = None,
        scheduler: Scheduler | None = None,
        wait: float = DEBOUNCE_WAIT,
        format_chars: Mapping[str, str] | None = None,
        measure: Measure = measure_cells,
    ) -> None:
        self.config = config
        self.on_change = on_change
        self.on_end_editing = on_end_editing
        self._in_process = in_process or (lambda: False)
        self.variant = select_variant(config, format_chars)
        logger.debug("Field %s renders as %s", config.id, self.variant.value)

        self.parsed_mask: ParsedMask | None = None
        if self.variant is Variant.MASKED:
            self.parsed_mask = parse_mask(config.mask, format_chars)
            if isinstance(value, str):
                value = format_value(self.parsed_mask, value)

        self.session = EditSession(
            config.id,
            value,
            on_changing=self._handle_changing,
            on_commit=self._handle_commit,
            read_only=config.read_only,
            numeric=self.variant is Variant.NUMERIC,
            prepare_number=config.prepare_number,
            scheduler=scheduler,
            wait=wait,
        )
        self.overlay = ActionsOverlay(measure)
        self.base_actions = [ActionNode(text) for text in config.actions]

        self.buffer: Buffer | None = None
        self.dropdown: DropdownMenu | None = None
        self.control: UIControl | None = None
        self._edit_control: UIControl | None = None
        self._text_control: FormattedTextControl | None = None
        self._syncing = False

        builder = getattr(self, self._BUILDERS[self.variant])
        control_window = builder()
        self.container = VSplit(
            [control_window, self._build_actions_window()],
            style=self._input_style(),
        )

    # ------------------------------------------------------------------
    # Derived properties

    @property
    def field_id(self) -> str:
        return self.config.id

    @property
    def value(self) -> FieldValue:
        return self.session.live_value

    @property
    def placeholder(self) -> str:
        if self.parsed_mask is not None:
            return derive_placeholder(self.parsed_mask)
        return self.config.placeholder

    @property
    def is_focusable(self) -> bool:
        return self.control is not None and self.control.is_focusable()

    def in_process(self) -> bool:
        return bool(self._in_process())

    def actions(self) -> list[ActionNode]:
        """Current trailing actions, including the status indicator."""
        return derive_actions(
            self.base_actions,
            eventable=self.config.eventable,
            pending_commit=self.session.pending_commit,
            in_process=self.in_process(),
        )

    def _input_style(self) -> str:
        parts = ["class:field-input"]
        if self.config.read_only:
            parts.append("class:field-input.read-only")
        parts.extend(f"class:{name}" for name in self.config.class_name.split())
        if self.config.style:
            parts.append(self.config.style)
        return " ".join(parts)

    # ------------------------------------------------------------------
    # Session callbacks

    def _handle_changing(self, value: FieldValue) -> None:
        if self.on_change is not None:
            self.on_change(self.config.id, value)

    def _handle_commit(self, value: FieldValue) -> None:
        if self.on_end_editing is not None:
            self.on_end_editing(self.config.id, value)

    # ------------------------------------------------------------------
    # Events from the form

    def edit(self, raw: Any) -> None:
        """Apply a user edit as if typed or selected in the control."""
        if self.buffer is not None:
            if not self.session.read_only:
                self.buffer.document = Document(str(raw), cursor_position=len(str(raw)))
            return
        self.session.on_user_edit(raw)

    def blur(self) -> None:
        """The control lost focus: settle the edit."""
        if self.dropdown is not None:
            self.dropdown.collapse()
        self.session.on_focus_lost()
        if self.variant is Variant.NUMERIC and self.buffer is not None:
            # Show the normalized number once editing is done
            self._set_buffer_text(str(self.session.live_value))

    def set_read_only(self, read_only: bool) -> None:
        self.session.set_read_only(read_only)
        if self._edit_control is not None and self._text_control is not None:
            # Read-only numbers render as plain text, not an inert buffer
            self.control = self._text_control if read_only else self._edit_control
        if self.dropdown is not None:
            self.dropdown.read_only = read_only

    def remeasure(self) -> None:
        """Force the trailing actions to be measured again (resize)."""
        self.overlay.refresh(self.actions(), force=True)

    def close(self) -> None:
        self.session.close()

    # ------------------------------------------------------------------
    # Buffer plumbing

    def _make_buffer(self, *, multiline: bool = False) -> Buffer:
        buffer = Buffer(
            name=self.config.id,
            multiline=multiline,
            read_only=Condition(lambda: self.session.read_only),
        )
        buffer.set_document(
            Document(str(self.session.live_value)), bypass_readonly=True
        )
        buffer.on_text_changed += self._on_buffer_changed
        self.buffer = buffer
        return buffer

    def _set_buffer_text(self, text: str, cursor: int | None = None) -> None:
        if self.buffer is None or self.buffer.text == text:
            return
        if cursor is None:
            cursor = len(text)
        self._syncing = True
        try:
            self.buffer.set_document(
                Document(text, cursor_position=cursor), bypass_readonly=True
            )
        finally:
            self._syncing = False

    def _on_buffer_changed(self, buffer: Buffer) -> None:
        if self._syncing:
            return
        text = buffer.text
        if self.parsed_mask is not None:
            formatted, cursor = format_with_cursor(
                self.parsed_mask, text, buffer.cursor_position
            )
            if formatted != text:
                self._set_buffer_text(formatted, cursor)
            text = formatted
        self.session.on_user_edit(text)

    def _key_bindings(self) -> KeyBindings | None:
        if not self.config.allow_tabs:
            return None
        kb = KeyBindings()

        @kb.add("tab")
        def insert_tab(event: Any) -> None:
            event.current_buffer.insert_text("\t")

        return kb

    def _buffer_window(
        self,
        buffer: Buffer,
        *,
        height: Any = 1,
        tail_placeholder: bool = False,
    ) -> Window:
        processors = []
        if self.placeholder:
            processors.append(
                PlaceholderProcessor(lambda: self.placeholder, tail=tail_placeholder)
            )
        self.control = BufferControl(
            buffer=buffer,
            input_processors=processors,
            key_bindings=self._key_bindings(),
            focusable=True,
        )
        return Window(self.control, height=height, wrap_lines=buffer.multiline())

    # ------------------------------------------------------------------
    # Variant builders

    def _build_numeric(self) -> Container:
        self._text_control = FormattedTextControl(
            lambda: [("class:field-input.number", self.session.display_text())],
            focusable=False,
        )
        text_window = Window(self._text_control, height=1)
        if self.config.read_only:
            self.control = self._text_control
            return text_window

        buffer_window = self._buffer_window(self._make_buffer())
        self._edit_control = self.control
        return DynamicContainer(
            lambda: text_window if self.session.read_only else buffer_window
        )

    def _build_masked(self) -> Window:
        return self._buffer_window(self._make_buffer(), tail_placeholder=True)

    def _build_code_editor(self) -> Window:
        buffer = self._make_buffer(multiline=True)
        return self._buffer_window(buffer, height=D.exact(max(self.config.rows, 1)))

    def _build_select(self) -> Window:
        self.dropdown = DropdownMenu(
            self.config.options,
            get_value=lambda: self.session.live_value,
            on_select=self.session.on_user_edit,
            read_only=self.config.read_only,
            placeholder=self.config.placeholder,
        )
        self.control = self.dropdown
        return Window(
            self.dropdown,
            height=lambda: D.exact(self.dropdown.line_count()),
            dont_extend_height=True,
        )

    def _build_multiline(self) -> Window:
        buffer = self._make_buffer(multiline=True)
        return self._buffer_window(buffer, height=self._multiline_height)

    def _multiline_height(self) -> D:
        min_rows = max(self.config.min_rows, 1)
        max_rows = max(self.config.max_rows, min_rows)
        lines = self.buffer.document.line_count if self.buffer is not None else 1
        return D(min=min_rows, max=max_rows, preferred=min(max(lines, min_rows), max_rows))

    def _build_passthrough(self) -> Window:
        content = self.config.content
        self.control = FormattedTextControl(
            lambda: to_formatted_text(content), focusable=False
        )
        return Window(self.control, dont_extend_height=True)

    def _build_plain_text(self) -> Window:
        return self._buffer_window(self._make_buffer())

    # ------------------------------------------------------------------
    # Trailing actions

    def _actions_width(self) -> D:
        self.overlay.refresh(self.actions())
        return D.exact(self.overlay.padding_right)

    def _actions_fragments(self) -> StyleAndTextTuples:
        nodes = self.overlay.nodes
        if not self.overlay.visible:
            return [("", " " * self.overlay.padding_right)]
        fragments: StyleAndTextTuples = []
        for node in nodes:
            fragments.append(("", " "))
            fragments.append((node.style, node.text))
        return fragments

    def _build_actions_window(self) -> Window:
        return Window(
            FormattedTextControl(self._actions_fragments, focusable=False),
            width=self._actions_width,
            height=1,
            dont_extend_width=True,
        )

    def __pt_container__(self) -> VSplit:
        return self.container


_missing = set(Variant) - set(UniversalInput._BUILDERS)
if _missing:
    raise RuntimeError(f"UniversalInput has no builder for {sorted(v.value for v in _missing)}")
