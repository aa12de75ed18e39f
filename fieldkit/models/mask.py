"""Mask grammar: parse mask patterns, derive placeholders, format input.

A mask is a template string where marker characters stand for a class of
allowed input characters and everything else is a literal:

    "999-9999"      -> placeholder "___-____", accepts "555-1234"
    "+7 (999) 999"  -> leading literals, digit slots
    "\\9 9"         -> the first 9 is escaped, so it is a literal

The default markers are ``9`` (digit), ``a`` (letter) and ``*``
(alphanumeric). Callers may pass their own ``format_chars`` mapping of
marker character to regex character class.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Mapping

from fieldkit.constants import BLANK_SLOT, DEFAULT_FORMAT_CHARS, MASK_ESCAPE
from fieldkit.errors import InvalidMaskError

__all__ = [
    "MaskToken",
    "ParsedMask",
    "parse_mask",
    "derive_placeholder",
    "is_valid_mask",
    "format_value",
    "format_with_cursor",
    "is_complete",
]


@dataclass(frozen=True)
class MaskToken:
    """One position of a parsed mask.

    Attributes:
        char: The literal character, or the marker for editable positions
        is_editable: Whether the user fills this position
        pattern: Regex character class for editable positions
    """

    char: str
    is_editable: bool = False
    pattern: str | None = None

    def accepts(self, value: str) -> bool:
        """Check if a single input character may fill this position."""
        if not self.is_editable or self.pattern is None:
            return False
        return _compile(self.pattern).fullmatch(value) is not None


@lru_cache(maxsize=64)
def _compile(pattern: str) -> re.Pattern[str]:
    return re.compile(pattern)


@dataclass(frozen=True)
class ParsedMask:
    """Result of parsing a mask pattern."""

    mask: str
    tokens: tuple[MaskToken, ...]

    def __len__(self) -> int:
        return len(self.tokens)

    @property
    def editable_count(self) -> int:
        return sum(1 for token in self.tokens if token.is_editable)

    @property
    def placeholder(self) -> str:
        return derive_placeholder(self)


def _tokenize(mask: str, format_chars: Mapping[str, str]) -> tuple[MaskToken, ...]:
    tokens: list[MaskToken] = []
    escaping = False

    for char in mask:
        if escaping:
            tokens.append(MaskToken(char))
            escaping = False
            continue

        if char == MASK_ESCAPE:
            escaping = True
            continue

        if char in format_chars:
            tokens.append(MaskToken(char, is_editable=True, pattern=format_chars[char]))
        else:
            tokens.append(MaskToken(char))

    # Trailing unmatched escape stands for itself
    if escaping:
        tokens.append(MaskToken(MASK_ESCAPE))

    return tuple(tokens)


def parse_mask(
    mask: Any,
    format_chars: Mapping[str, str] | None = None,
) -> ParsedMask:
    """Parse a mask pattern into literal and editable positions.

    Args:
        mask: Mask pattern string
        format_chars: Marker -> regex character class (defaults to 9/a/*)

    Returns:
        ParsedMask with one token per position

    Raises:
        InvalidMaskError: If the mask is not a string, is empty, or has no
            editable positions
    """
    if not isinstance(mask, str):
        raise InvalidMaskError(mask, "mask must be a string")
    if not mask:
        raise InvalidMaskError(mask, "mask is empty")

    tokens = _tokenize(mask, format_chars or DEFAULT_FORMAT_CHARS)
    if not any(token.is_editable for token in tokens):
        raise InvalidMaskError(mask, "mask has no editable positions")

    return ParsedMask(mask=mask, tokens=tokens)


def is_valid_mask(mask: Any, format_chars: Mapping[str, str] | None = None) -> bool:
    """Check whether a mask can be honored (never raises)."""
    try:
        parse_mask(mask, format_chars)
    except InvalidMaskError:
        return False
    return True


def derive_placeholder(parsed: ParsedMask) -> str:
    """Build the placeholder shown for an empty masked field.

    Literal positions pass through unchanged, editable positions render as
    the blank-slot glyph.
    """
    return "".join(
        BLANK_SLOT if token.is_editable else token.char for token in parsed.tokens
    )


def format_with_cursor(parsed: ParsedMask, raw: str, cursor: int) -> tuple[str, int]:
    """Conform raw user input to the mask and map a cursor into the result.

    Editable slots take the next raw characters their class accepts;
    rejected characters are skipped. A run of consecutive literals is
    consumed from the input only when the whole run appears there, so
    already formatted input formats to itself while a typed character that
    merely equals a literal (the ``7`` of ``+7 (999)``) still fills the next
    slot. Literals are only emitted once a later slot gets filled, and input
    past the end of the mask is dropped.

    Args:
        parsed: Parsed mask
        raw: Text as edited by the user
        cursor: Cursor offset into ``raw``

    Returns:
        The formatted text and the cursor offset into it. The cursor stays
        after the character it followed, shifted by inserted literals.
    """
    text = raw or ""
    tokens = parsed.tokens
    result: list[str] = []
    pending_literals: list[str] = []
    # Output length reached once each raw character has been handled
    marks: list[int] = []
    pos = 0
    index = 0
    completed = True

    while index < len(tokens):
        token = tokens[index]
        if not token.is_editable:
            end = index
            while end < len(tokens) and not tokens[end].is_editable:
                end += 1
            run = "".join(t.char for t in tokens[index:end])
            if text.startswith(run, pos):
                pos += len(run)
                marks.extend([len(result)] * len(run))
            pending_literals.extend(run)
            index = end
            continue

        while pos < len(text) and not token.accepts(text[pos]):
            marks.append(len(result))
            pos += 1
        if pos >= len(text):
            completed = False
            break

        result.extend(pending_literals)
        pending_literals.clear()
        result.append(text[pos])
        marks.append(len(result))
        pos += 1
        index += 1

    # Mask fully consumed: trailing literals complete the value
    if completed and result:
        result.extend(pending_literals)

    formatted = "".join(result)
    if cursor <= 0:
        return formatted, 0
    if cursor > len(marks):
        return formatted, len(formatted)
    return formatted, min(marks[cursor - 1], len(formatted))


def format_value(parsed: ParsedMask, raw: str) -> str:
    """Conform raw user input to the mask.

    Example:
        >>> parsed = parse_mask("999-9999")
        >>> format_value(parsed, "555")
        '555'
        >>> format_value(parsed, "5551234")
        '555-1234'
        >>> format_value(parse_mask("+7 (999)"), "7")
        '+7 (7'
    """
    text = raw or ""
    return format_with_cursor(parsed, text, len(text))[0]


def is_complete(parsed: ParsedMask, value: str) -> bool:
    """Check whether every editable position of the mask is filled."""
    formatted = format_value(parsed, value)
    return len(formatted) == len(parsed.tokens)
