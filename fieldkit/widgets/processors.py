"""Input processors for field buffers."""

from __future__ import annotations

from typing import Callable, Union

from prompt_toolkit.layout.processors import (
    Processor,
    Transformation,
    TransformationInput,
)

PlaceholderSource = Union[str, Callable[[], str]]


class PlaceholderProcessor(Processor):
    """Show placeholder text in muted style.

    In ``tail`` mode (masked fields) the part of the placeholder not yet
    covered by typed text is shown after the cursor, so "555" in a
    "___-____" mask reads as "555-____". Otherwise the placeholder only
    shows while the buffer is empty.
    """

    def __init__(
        self,
        placeholder: PlaceholderSource,
        *,
        tail: bool = False,
        style: str = "class:field-placeholder",
    ) -> None:
        self.placeholder = placeholder
        self.tail = tail
        self.style = style

    def _text(self) -> str:
        return self.placeholder() if callable(self.placeholder) else self.placeholder

    def apply_transformation(self, ti: TransformationInput) -> Transformation:
        if ti.lineno != 0:
            return Transformation(ti.fragments)

        text = ti.document.text
        placeholder = self._text()
        if self.tail:
            extra = placeholder[len(text):] if "\n" not in text else ""
        else:
            extra = "" if text else placeholder

        if not extra:
            return Transformation(ti.fragments)
        return Transformation(list(ti.fragments) + [(self.style, extra)])
