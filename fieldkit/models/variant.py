"""Control selection: pick exactly one rendering variant per field."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Mapping

from fieldkit.models.field_config import FieldConfig
from fieldkit.models.mask import is_valid_mask

logger = logging.getLogger(__name__)

__all__ = ["Variant", "select_variant"]


class Variant(str, Enum):
    """Mutually exclusive rendering modes a field can take."""

    NUMERIC = "numeric"
    MASKED = "masked"
    CODE_EDITOR = "code_editor"
    SELECT = "select"
    MULTILINE = "multiline"
    PASSTHROUGH = "passthrough"
    PLAIN_TEXT = "plain_text"


def select_variant(
    config: FieldConfig,
    format_chars: Mapping[str, str] | None = None,
) -> Variant:
    """Choose the rendering variant for a field.

    Rules are checked in priority order and the first match wins:

    1. numeric type
    2. a valid mask
    3. script mode
    4. non-empty options
    5. multiline
    6. explicit passthrough content
    7. plain text

    The last rule is unconditional, so every config gets a variant. An
    invalid mask is not an error; the field simply falls through to the
    later rules.
    """
    if config.is_numeric:
        return Variant.NUMERIC

    if config.mask:
        if is_valid_mask(config.mask, format_chars):
            return Variant.MASKED
        logger.debug("Ignoring invalid mask %r on field %s", config.mask, config.id)

    if config.script:
        return Variant.CODE_EDITOR

    if config.options:
        return Variant.SELECT

    if config.multiline:
        return Variant.MULTILINE

    if config.content is not None:
        return Variant.PASSTHROUGH

    return Variant.PLAIN_TEXT
