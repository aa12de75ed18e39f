"""Trailing action affordances and the space they reserve.

A field may show a few trailing action nodes (status icons, hints). The
overlay measures them after each render and the control reserves that many
columns on its right so typed text never runs underneath.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Sequence

from prompt_toolkit.utils import get_cwidth

from fieldkit.constants import INDICATOR_GLYPH, READY_TO_SEND_TITLE

__all__ = [
    "ActionNode",
    "ActionsOverlay",
    "Measure",
    "derive_actions",
    "measure_cells",
]


@dataclass(frozen=True)
class ActionNode:
    """One trailing action rendered after the control.

    Attributes:
        text: Rendered text
        style: prompt_toolkit style string
        title: Tooltip-like description shown in the status bar
    """

    text: str
    style: str = "class:action"
    title: str = ""


Measure = Callable[[Sequence[ActionNode]], int]


def measure_cells(nodes: Sequence[ActionNode]) -> int:
    """Terminal cell width of the nodes, one separator column each."""
    return sum(get_cwidth(node.text) + 1 for node in nodes)


def derive_actions(
    base: Sequence[ActionNode],
    *,
    eventable: bool,
    pending_commit: bool,
    in_process: bool,
) -> list[ActionNode]:
    """Append the status indicator to the field's own actions when due.

    The indicator shows after a local edit on eventable fields, or while the
    host reports an external update in progress. The two flags are
    independent; the in-process flag only switches the indicator to its
    muted style.
    """
    actions = list(base)
    if (eventable and pending_commit) or in_process:
        if in_process:
            actions.append(ActionNode(INDICATOR_GLYPH, "class:action-icon.muted", ""))
        else:
            actions.append(
                ActionNode(INDICATOR_GLYPH, "class:action-icon", READY_TO_SEND_TITLE)
            )
    return actions


class ActionsOverlay:
    """Measures trailing actions and exposes the padding they need.

    Measurement happens on the first refresh (mount), whenever the number
    of nodes changes, and on demand after a resize. Until a non-zero width
    has been measured once, the overlay stays hidden so the first paint does
    not flicker.
    """

    def __init__(self, measure: Measure = measure_cells) -> None:
        self._measure = measure
        self._node_count: int | None = None
        self.measured_width = 0
        self._has_measured = False
        self.nodes: list[ActionNode] = []

    @property
    def visible(self) -> bool:
        return self._has_measured

    @property
    def padding_right(self) -> int:
        return self.measured_width

    def refresh(self, nodes: Sequence[ActionNode], force: bool = False) -> bool:
        """Take the current action nodes, re-measuring when needed.

        Args:
            nodes: Current trailing action nodes
            force: Re-measure even if the node count is unchanged (resize)

        Returns:
            True if the measured width changed
        """
        self.nodes = list(nodes)
        if not force and self._node_count == len(self.nodes):
            return False

        self._node_count = len(self.nodes)
        width = self._measure(self.nodes) if self.nodes else 0
        if width > 0:
            self._has_measured = True
        if width == self.measured_width:
            return False
        self.measured_width = width
        return True
