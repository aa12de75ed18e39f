"""Full-screen prompt_toolkit application rendering a field catalog.

Every catalog entry becomes a UniversalInput. Tab/Shift+Tab move between
fields; moving focus away from a field commits its edit, and the host
writes the whole value map to the store after each commit.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from prompt_toolkit import Application
from prompt_toolkit.data_structures import Size
from prompt_toolkit.formatted_text import FormattedText
from prompt_toolkit.key_binding import KeyBindings
from prompt_toolkit.key_binding.bindings.focus import focus_next, focus_previous
from prompt_toolkit.layout import (
    FormattedTextControl,
    HSplit,
    Layout,
    ScrollablePane,
    VSplit,
    Window,
)
from prompt_toolkit.layout.controls import UIControl
from prompt_toolkit.layout.dimension import Dimension as D
from prompt_toolkit.styles import Style
from prompt_toolkit.widgets import Frame

from fieldkit.catalog import Catalog, default_catalog, load_catalog
from fieldkit.models.field_config import FieldValue
from fieldkit.models.scheduler import AsyncioScheduler, Scheduler
from fieldkit.settings import FieldKitSettings, get_settings
from fieldkit.store import FieldStore, FormHost, JsonFileStore
from fieldkit.widgets.universal_input import UniversalInput

logger = logging.getLogger(__name__)

# Application style
STYLE = Style.from_dict({
    "title": "bold bg:#005f87 #ffffff",
    "field-label": "#d7d700",
    "field-input": "bg:#1e1e1e #ffffff",
    "field-input.read-only": "bg:#262626 #a0a0a0",
    "field-input.number": "#87d7ff",
    "field-placeholder": "#606060",
    "action": "#a0a0a0",
    "action-icon": "#00d700 bold",
    "action-icon.muted": "#606060",
    "status-bar": "bg:#005f87 #ffffff",
    "status-bar.error": "bg:#870000 #ffffff bold",
    "help": "#808080 italic",
    # Dropdown styles
    "dropdown": "#d0d0d0",
    "dropdown.placeholder": "#808080",
    "dropdown.selected": "bold #00ff00",
    "dropdown.hover": "bg:#404040 #ffffff",
    "dropdown.focused": "#d0d0d0",
    "dropdown.group": "bold underline #87afff",
    "dropdown.sub-label": "#808080 italic",
})

LABEL_WIDTH = 18


class FormApp:
    """Full-screen form editor over a field catalog.

    Tab/Shift+Tab to move between fields, Ctrl+Q to quit. Values are
    loaded from the store at startup and written back on every commit.
    """

    def __init__(
        self,
        catalog: Catalog | None = None,
        store: FieldStore | None = None,
        *,
        settings: FieldKitSettings | None = None,
        scheduler: Scheduler | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.catalog = catalog or default_catalog()
        self.store = store or JsonFileStore(
            self.settings.get_store_path(), self.settings.store_key
        )
        self.scheduler: Scheduler = scheduler or AsyncioScheduler()
        self.host = FormHost(
            self.catalog.fields,
            self.store,
            self.catalog.defaults,
            scheduler=self.scheduler,
        )
        self.inputs: list[UniversalInput] = []
        self.app: Application | None = None
        self.status_message = ""
        self._focused: UniversalInput | None = None
        self._last_size: Size | None = None
        self.host.subscribe(self._on_host_update)

    # ------------------------------------------------------------------
    # Setup

    def _create_inputs(self) -> None:
        """Create one input per catalog field, seeded from the host."""
        values = self.host.initial_values()
        self.inputs = [
            UniversalInput(
                config,
                values.get(config.id, ""),
                on_change=self._on_field_changing,
                on_end_editing=self._on_field_committed,
                in_process=lambda field_id=config.id: self.host.is_in_process(field_id),
                scheduler=self.scheduler,
                wait=self.settings.debounce_wait,
                format_chars=self.settings.format_chars,
            )
            for config in self.catalog.fields
        ]
        logger.info("Created %d inputs", len(self.inputs))

    def input_for(self, field_id: str) -> UniversalInput | None:
        for field_input in self.inputs:
            if field_input.field_id == field_id:
                return field_input
        return None

    def _input_for_control(self, control: UIControl | None) -> UniversalInput | None:
        if control is None:
            return None
        for field_input in self.inputs:
            if field_input.control is control:
                return field_input
        return None

    def _create_field_row(self, field_input: UniversalInput) -> VSplit:
        label = field_input.config.display_label
        return VSplit([
            Window(
                FormattedTextControl([("class:field-label", label)]),
                width=D.exact(LABEL_WIDTH),
                dont_extend_height=True,
            ),
            field_input.container,
        ], padding=1)

    def _get_title(self) -> FormattedText:
        title = self.catalog.title or "fieldkit"
        return FormattedText([("class:title", f" {title} ")])

    def _get_status_bar(self) -> FormattedText:
        if self.host.last_error is not None:
            return FormattedText([
                ("class:status-bar.error", f" Save failed: {self.host.last_error.message} "),
            ])

        parts = []
        if self._focused is not None:
            if self._focused.session.pending_commit:
                parts.append("unsaved edit")
            titles = [node.title for node in self._focused.actions() if node.title]
            parts.extend(titles)
        if self.host.queued_writes:
            parts.append(f"{self.host.queued_writes} queued")
        if self.status_message:
            parts.append(self.status_message)

        hint = "Tab/Shift+Tab: move  Ctrl+Q: quit"
        text = " | ".join([hint] + parts)
        return FormattedText([("class:status-bar", f" {text} ")])

    def _create_layout(self) -> Layout:
        rows = [self._create_field_row(field_input) for field_input in self.inputs]
        body = Frame(
            ScrollablePane(HSplit(rows, padding=1)),
            title=self._get_title,
        )
        root = HSplit([
            body,
            Window(
                FormattedTextControl(self._get_status_bar),
                height=1,
                style="class:status-bar",
            ),
        ])
        layout = Layout(root)

        auto_focus = next(
            (i for i in self.inputs if i.config.auto_focus and i.is_focusable), None
        )
        first = auto_focus or next((i for i in self.inputs if i.is_focusable), None)
        if first is not None:
            layout.focus(first.control)
            self._focused = first
        return layout

    def _create_bindings(self) -> KeyBindings:
        kb = KeyBindings()

        @kb.add("c-q")
        @kb.add("c-c")
        def quit_(event: Any) -> None:
            self._quit_app()

        kb.add("tab")(focus_next)
        kb.add("s-tab")(focus_previous)

        return kb

    # ------------------------------------------------------------------
    # Events

    def _on_field_changing(self, field_id: str, value: FieldValue) -> None:
        self.host.change(field_id, value)

    def _on_field_committed(self, field_id: str, value: FieldValue) -> None:
        self.host.commit(field_id, value)
        self.status_message = f"Saved {field_id}"

    def _on_host_update(self, field_id: str) -> None:
        if self.app is not None:
            self.app.invalidate()

    def _track_focus(self, _app: Any = None) -> None:
        """Blur the previously focused field when focus moved away."""
        if self.app is None:
            return
        current = self._input_for_control(self.app.layout.current_control)
        self.focus_changed(current)

        size = self.app.output.get_size()
        if size != self._last_size:
            self._last_size = size
            for field_input in self.inputs:
                field_input.remeasure()

    def focus_changed(self, current: UniversalInput | None) -> None:
        """Record the newly focused field, committing the one left behind."""
        previous = self._focused
        if current is previous:
            return
        self._focused = current
        if previous is not None:
            previous.blur()

    def _quit_app(self) -> None:
        """Commit the focused field, flush pending writes, and exit."""
        if self._focused is not None:
            self._focused.blur()
            self._focused = None
        self.host.flush()
        for field_input in self.inputs:
            field_input.close()
        if self.app is not None:
            self.app.exit()

    # ------------------------------------------------------------------
    # Run

    def run(self) -> None:
        """Run the full-screen application."""
        self._create_inputs()
        self.app = Application(
            layout=self._create_layout(),
            key_bindings=self._create_bindings(),
            style=STYLE,
            full_screen=True,
            mouse_support=True,
            before_render=self._track_focus,
        )
        try:
            self.app.run()
        finally:
            self.host.flush()


def run_form(
    catalog_path: str | Path | None = None,
    store_path: str | Path | None = None,
    settings: FieldKitSettings | None = None,
) -> FormHost:
    """Open the form for a catalog file (or the demo catalog).

    Returns:
        The host, holding the final value map
    """
    settings = settings or get_settings()
    catalog = load_catalog(catalog_path) if catalog_path else default_catalog()
    store = JsonFileStore(
        store_path or settings.get_store_path(), settings.store_key
    )
    form = FormApp(catalog, store, settings=settings)
    form.run()
    return form.host
