"""UI-agnostic form state.

These classes can be used and tested without a running prompt_toolkit
application: mask grammar, control selection, edit sessions and action
layout.
"""

from fieldkit.models.field_config import (
    FieldConfig,
    FieldValue,
    SelectOption,
    ValueMap,
    round_half_up,
)
from fieldkit.models.mask import (
    ParsedMask,
    derive_placeholder,
    format_value,
    is_valid_mask,
    parse_mask,
)
from fieldkit.models.variant import Variant, select_variant
from fieldkit.models.scheduler import AsyncioScheduler, ManualScheduler, Scheduler
from fieldkit.models.edit_session import EditSession
from fieldkit.models.actions import ActionNode, ActionsOverlay, derive_actions

__all__ = [
    "FieldConfig",
    "FieldValue",
    "SelectOption",
    "ValueMap",
    "round_half_up",
    "ParsedMask",
    "derive_placeholder",
    "format_value",
    "is_valid_mask",
    "parse_mask",
    "Variant",
    "select_variant",
    "AsyncioScheduler",
    "ManualScheduler",
    "Scheduler",
    "EditSession",
    "ActionNode",
    "ActionsOverlay",
    "derive_actions",
]
