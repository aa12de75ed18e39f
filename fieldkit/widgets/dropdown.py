"""Dropdown select control with option groups and sub-labels."""

from __future__ import annotations

from typing import Any, Callable, Sequence

from prompt_toolkit.key_binding import KeyBindings
from prompt_toolkit.keys import Keys
from prompt_toolkit.layout.controls import UIContent, UIControl
from prompt_toolkit.mouse_events import MouseEvent, MouseEventType
from prompt_toolkit.utils import get_cwidth

from fieldkit.models.field_config import SelectOption


class DropdownMenu(UIControl):
    """A dropdown menu with click-to-expand/collapse behavior.

    - When collapsed: shows the selected option with a ▼ indicator
    - Click, Enter or Space to expand and show all options
    - Group headers are shown but cannot be selected
    - Up/Down move the highlight, typing a letter jumps to a matching label
    - Enter/Space select, Escape collapses without selecting
    """

    def __init__(
        self,
        options: Sequence[SelectOption],
        get_value: Callable[[], Any],
        on_select: Callable[[str], None],
        *,
        read_only: bool = False,
        placeholder: str = "",
        on_expand: Callable[[], None] | None = None,
    ) -> None:
        self.get_value = get_value
        self.on_select = on_select
        self.read_only = read_only
        self.placeholder = placeholder or "(select...)"
        self.on_expand = on_expand
        self._expanded = False
        self._hover_idx: int | None = None
        self._highlight_idx = 0
        self.set_options(options)

    def set_options(self, options: Sequence[SelectOption]) -> None:
        """Rebuild the rows (group headers and options) in display order."""
        self.rows: list[tuple[bool, SelectOption]] = []
        for option in options:
            if option.is_group:
                self.rows.append((True, option))
                self.rows.extend((False, child) for child in option.options)
            else:
                self.rows.append((False, option))
        self._highlight_idx = self._first_selectable()

    @property
    def selectable_indices(self) -> list[int]:
        return [i for i, (is_group, _) in enumerate(self.rows) if not is_group]

    def _first_selectable(self) -> int:
        indices = self.selectable_indices
        return indices[0] if indices else 0

    def _index_of(self, value: Any) -> int | None:
        for i, (is_group, option) in enumerate(self.rows):
            if not is_group and option.value == value:
                return i
        return None

    def selected_option(self) -> SelectOption | None:
        idx = self._index_of(self.get_value())
        return self.rows[idx][1] if idx is not None else None

    def _row_text(self, is_group: bool, option: SelectOption) -> str:
        if is_group:
            return option.display
        if option.sub_label:
            return f"  {option.display}  {option.sub_label}"
        return f"  {option.display}"

    def get_min_width(self) -> int:
        """Calculate minimum width needed to display all options."""
        max_len = max(
            (get_cwidth(self._row_text(g, o)) for g, o in self.rows),
            default=get_cwidth(self.placeholder),
        )
        # Room for the indicator and padding
        return max(max_len, get_cwidth(self.placeholder)) + 4

    def line_count(self) -> int:
        return len(self.rows) if self._expanded and self.rows else 1

    def create_content(self, width: int, height: int) -> UIContent:
        min_width = self.get_min_width()
        selected_idx = self._index_of(self.get_value())

        if not self._expanded:
            selected = self.rows[selected_idx][1] if selected_idx is not None else None

            def get_line_collapsed(i: int) -> list[tuple[str, str]]:
                if i != 0:
                    return []
                if selected is None:
                    return [("class:dropdown.placeholder", f"▼ {self.placeholder}".ljust(min_width))]
                fragments = [("class:dropdown", f"▼ {selected.display}")]
                if selected.sub_label:
                    fragments.append(("class:dropdown.sub-label", f"  {selected.sub_label}"))
                used = sum(get_cwidth(text) for _, text in fragments)
                fragments.append(("class:dropdown", " " * max(min_width - used, 0)))
                return fragments

            return UIContent(get_line=get_line_collapsed, line_count=1)

        def get_line(i: int) -> list[tuple[str, str]]:
            if i >= len(self.rows):
                return []

            is_group, option = self.rows[i]
            if is_group:
                return [("class:dropdown.group", option.display.ljust(min_width))]

            if i == selected_idx:
                indicator = "● "
                style = "class:dropdown.selected"
            elif i == self._highlight_idx:
                indicator = "▸ "
                style = "class:dropdown.hover"
            else:
                indicator = "  "
                style = "class:dropdown.focused"
            if i == self._hover_idx or i == self._highlight_idx:
                style = "class:dropdown.hover"

            fragments = [(style, f"  {indicator}{option.display}")]
            if option.sub_label:
                fragments.append(("class:dropdown.sub-label", f"  {option.sub_label}"))
            used = sum(get_cwidth(text) for _, text in fragments)
            fragments.append((style, " " * max(min_width - used, 0)))
            return fragments

        return UIContent(get_line=get_line, line_count=len(self.rows))

    def mouse_handler(self, mouse_event: MouseEvent) -> None:
        if self.read_only:
            return
        if mouse_event.event_type == MouseEventType.MOUSE_UP:
            if not self._expanded:
                self.expand()
            else:
                y = mouse_event.position.y
                if y < len(self.rows) and not self.rows[y][0]:
                    self._select_and_collapse(self.rows[y][1].value)
                elif y >= len(self.rows):
                    self.collapse()
        elif mouse_event.event_type == MouseEventType.MOUSE_MOVE:
            if self._expanded and mouse_event.position.y < len(self.rows):
                self._hover_idx = mouse_event.position.y
            else:
                self._hover_idx = None

    def _select_and_collapse(self, value: str) -> None:
        self._expanded = False
        self._hover_idx = None
        self.on_select(value)

    def expand(self) -> None:
        """Expand the dropdown, highlighting the current selection."""
        if self.read_only or not self.rows:
            return
        self._expanded = True
        current = self._index_of(self.get_value())
        self._highlight_idx = current if current is not None else self._first_selectable()
        if self.on_expand is not None:
            self.on_expand()

    def collapse(self) -> None:
        self._expanded = False
        self._hover_idx = None

    def is_expanded(self) -> bool:
        return self._expanded

    def move_highlight(self, step: int) -> None:
        """Move the highlight to the next selectable row, wrapping around."""
        indices = self.selectable_indices
        if not indices:
            return
        if self._highlight_idx in indices:
            pos = (indices.index(self._highlight_idx) + step) % len(indices)
        else:
            pos = 0
        self._highlight_idx = indices[pos]

    def select_highlighted(self) -> None:
        if 0 <= self._highlight_idx < len(self.rows):
            is_group, option = self.rows[self._highlight_idx]
            if not is_group:
                self._select_and_collapse(option.value)

    def jump_to(self, char: str) -> None:
        """Highlight the next option whose label starts with ``char``."""
        char = char.lower()
        indices = self.selectable_indices
        if not indices or not char.strip():
            return
        start = indices.index(self._highlight_idx) + 1 if self._highlight_idx in indices else 0
        for offset in range(len(indices)):
            idx = indices[(start + offset) % len(indices)]
            if self.rows[idx][1].display.lower().startswith(char):
                self._highlight_idx = idx
                return

    def is_focusable(self) -> bool:
        return True

    def get_key_bindings(self) -> KeyBindings:
        """Key bindings for dropdown navigation."""
        kb = KeyBindings()

        @kb.add("up")
        def move_up(event: Any) -> None:
            if self._expanded:
                self.move_highlight(-1)
            else:
                self.expand()

        @kb.add("down")
        def move_down(event: Any) -> None:
            if self._expanded:
                self.move_highlight(1)
            else:
                self.expand()

        @kb.add("enter")
        @kb.add("space")
        def select_option(event: Any) -> None:
            if self._expanded:
                self.select_highlighted()
            else:
                self.expand()

        @kb.add("escape")
        def cancel(event: Any) -> None:
            self.collapse()

        @kb.add(Keys.Any)
        def type_ahead(event: Any) -> None:
            if self.read_only:
                return
            if not self._expanded:
                self.expand()
            self.jump_to(event.data)

        return kb
