"""Immutable per-field descriptors supplied by the host catalog."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Callable, Mapping, Union

from fieldkit.constants import DEFAULT_MAX_ROWS, DEFAULT_MIN_ROWS, DEFAULT_SCRIPT_ROWS

__all__ = [
    "FieldValue",
    "ValueMap",
    "NumberTransform",
    "SelectOption",
    "FieldConfig",
    "NUMBER_TRANSFORMS",
    "round_half_up",
    "resolve_number_transform",
    "flatten_options",
]

FieldValue = Union[str, int, float]
ValueMap = dict[str, FieldValue]
NumberTransform = Callable[[Any], Any]


def round_half_up(value: Any) -> Any:
    """Round to the nearest integer, halves away from negative infinity.

    Matches JavaScript's ``Math.round`` rather than Python's banker's
    rounding, so 2.5 becomes 3. Non-numeric values pass through.
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return value
    return int(math.floor(value + 0.5))


def _numeric(fn: Callable[[float], Any]) -> NumberTransform:
    def transform(value: Any) -> Any:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return value
        return fn(value)

    transform.__name__ = getattr(fn, "__name__", "transform")
    return transform


# Named transforms usable from YAML catalogs as `prepare_number: round`
NUMBER_TRANSFORMS: dict[str, NumberTransform] = {
    "round": round_half_up,
    "floor": _numeric(math.floor),
    "ceil": _numeric(math.ceil),
    "int": _numeric(int),
    "abs": _numeric(abs),
}


def resolve_number_transform(
    value: str | NumberTransform | None,
) -> NumberTransform | None:
    """Turn a transform name or callable into a callable.

    Raises:
        KeyError: If the name is not a known transform
    """
    if value is None or callable(value):
        return value
    return NUMBER_TRANSFORMS[str(value)]


@dataclass(frozen=True)
class SelectOption:
    """A selectable option, or a group of options when ``options`` is set.

    Attributes:
        value: Stored value (group key for groups)
        label: Display label
        sub_label: Muted annotation shown after the label
        options: Child options; non-empty means this entry is a group
    """

    value: str
    label: str = ""
    sub_label: str = ""
    options: tuple["SelectOption", ...] = ()

    @property
    def is_group(self) -> bool:
        return bool(self.options)

    @property
    def display(self) -> str:
        return self.label or self.value

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | str) -> "SelectOption":
        """Create from a catalog mapping (or a bare value string)."""
        if isinstance(data, str):
            return cls(value=data, label=data)
        children = data.get("options")
        return cls(
            value=str(data.get("value", data.get("label", ""))),
            label=str(data.get("label", "")),
            sub_label=str(data.get("sub_label", data.get("subLabel", "")) or ""),
            options=tuple(cls.from_dict(c) for c in children) if isinstance(children, list) else (),
        )


def flatten_options(options: tuple[SelectOption, ...]) -> list[SelectOption]:
    """List selectable leaf options in display order."""
    flat: list[SelectOption] = []
    for option in options:
        if option.is_group:
            flat.extend(option.options)
        else:
            flat.append(option)
    return flat


@dataclass(frozen=True)
class FieldConfig:
    """Declarative description of one form field.

    Created by the host catalog and read-only to the core. Control
    selection looks at ``type``, ``mask``, ``script``, ``options``,
    ``multiline`` and ``content`` in that order.

    Attributes:
        id: Stable unique id, also the storage key
        label: Display label (defaults to a title-cased id)
        type: "number" for numeric fields, anything else is text
        mask: Mask pattern for masked text input
        script: Render as a code editor
        sub_type: Language hint for the code editor
        options: Flat options and/or option groups for a select
        multiline: Auto-growing multi-row text
        content: Explicit formatted content to pass through unedited
        placeholder: Text shown while the field is empty
        read_only: Field never accepts edits
        eventable: Show the pending-commit indicator after edits
        allow_tabs: Tab inserts a tab character instead of moving focus
        auto_focus: Focus this field when the form opens
        min_rows: Lower bound for multiline height
        max_rows: Upper bound for multiline height
        rows: Code editor height
        prepare_number: Normalization applied to every numeric value
        actions: Static trailing action labels
        style: prompt_toolkit style string applied to the control
        class_name: Extra style class names for the control
    """

    id: str
    label: str = ""
    type: str = "text"
    mask: str | None = None
    script: bool = False
    sub_type: str | None = None
    options: tuple[SelectOption, ...] = ()
    multiline: bool = False
    content: Any = None
    placeholder: str = ""
    read_only: bool = False
    eventable: bool = False
    allow_tabs: bool = False
    auto_focus: bool = False
    min_rows: int = DEFAULT_MIN_ROWS
    max_rows: int = DEFAULT_MAX_ROWS
    rows: int = DEFAULT_SCRIPT_ROWS
    prepare_number: NumberTransform | None = field(default=None, compare=False)
    actions: tuple[str, ...] = ()
    style: str = ""
    class_name: str = ""

    @property
    def display_label(self) -> str:
        return self.label or self.id.replace("_", " ").title()

    @property
    def is_numeric(self) -> bool:
        return self.type == "number"

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "FieldConfig":
        """Create from a catalog mapping.

        Accepts the camelCase spellings used by web catalogs
        (``readOnly``, ``subType``, ``minRows``...) as well as snake_case.
        """

        def pick(*keys: str, default: Any = None) -> Any:
            for key in keys:
                if key in data and data[key] is not None:
                    return data[key]
            return default

        raw_options = pick("options", default=()) or ()
        raw_actions = pick("actions", default=()) or ()
        return cls(
            id=str(pick("id", "value_number", "valueNumber", default="")),
            label=str(pick("label", default="")),
            type=str(pick("type", default="text")),
            mask=pick("mask"),
            script=bool(pick("script", default=False)),
            sub_type=pick("sub_type", "subType"),
            options=tuple(SelectOption.from_dict(o) for o in raw_options),
            multiline=bool(pick("multiline", default=False)),
            content=pick("content"),
            placeholder=str(pick("placeholder", default="")),
            read_only=bool(pick("read_only", "readOnly", default=False)),
            eventable=bool(pick("eventable", default=False)),
            allow_tabs=bool(pick("allow_tabs", "allowTabs", default=False)),
            auto_focus=bool(pick("auto_focus", "autoFocus", default=False)),
            min_rows=int(pick("min_rows", "minRows", default=DEFAULT_MIN_ROWS)),
            max_rows=int(pick("max_rows", "maxRows", default=DEFAULT_MAX_ROWS)),
            rows=int(pick("rows", default=DEFAULT_SCRIPT_ROWS)),
            prepare_number=resolve_number_transform(
                pick("prepare_number", "prepareNumber")
            ),
            actions=tuple(str(a) for a in raw_actions),
            style=_style_string(pick("style")),
            class_name=str(pick("class_name", "className", default="") or ""),
        )


def _style_string(value: Any) -> str:
    # Web catalogs carry CSS mappings here; only prompt_toolkit style strings apply
    return value if isinstance(value, str) else ""
