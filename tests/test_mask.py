"""Tests for the mask grammar."""

from __future__ import annotations

import pytest

from fieldkit.errors import InvalidMaskError
from fieldkit.models.mask import (
    derive_placeholder,
    format_value,
    format_with_cursor,
    is_complete,
    is_valid_mask,
    parse_mask,
)


class TestParseMask:
    """Tests for parse_mask and is_valid_mask."""

    def test_positions_literal_and_editable(self) -> None:
        """Each mask character becomes one token."""
        parsed = parse_mask("99-a*")

        assert [t.is_editable for t in parsed.tokens] == [True, True, False, True, True]
        assert parsed.tokens[2].char == "-"
        assert parsed.editable_count == 4

    def test_character_classes(self) -> None:
        """Default markers accept digits, letters and alphanumerics."""
        digit, letter, alnum = parse_mask("9a*").tokens

        assert digit.accepts("7") and not digit.accepts("x")
        assert letter.accepts("x") and not letter.accepts("7")
        assert alnum.accepts("x") and alnum.accepts("7")
        assert not alnum.accepts("-")

    def test_literal_never_accepts_input(self) -> None:
        """Literal tokens are not fillable."""
        token = parse_mask("9-").tokens[1]

        assert token.is_editable is False
        assert token.accepts("-") is False

    @pytest.mark.parametrize("mask", ["---", "()", "+7 ", "bcd", "\\9\\a\\*"])
    def test_literal_only_masks_are_invalid(self, mask: str) -> None:
        """Masks without an editable marker are rejected."""
        assert is_valid_mask(mask) is False
        with pytest.raises(InvalidMaskError):
            parse_mask(mask)

    def test_empty_mask_is_invalid(self) -> None:
        assert is_valid_mask("") is False

    def test_non_string_mask_is_invalid(self) -> None:
        assert is_valid_mask(None) is False
        assert is_valid_mask(999) is False

    def test_escaped_marker_is_literal(self) -> None:
        """A backslash turns the next marker into a literal."""
        parsed = parse_mask("\\99")

        assert len(parsed) == 2
        assert parsed.tokens[0].is_editable is False
        assert parsed.tokens[0].char == "9"
        assert parsed.tokens[1].is_editable is True

    def test_escaped_backslash(self) -> None:
        """A double backslash is one literal backslash."""
        parsed = parse_mask("9\\\\9")

        assert [t.char for t in parsed.tokens] == ["9", "\\", "9"]
        assert parsed.tokens[1].is_editable is False

    def test_trailing_backslash_is_literal(self) -> None:
        """An unmatched trailing backslash stays as a literal."""
        parsed = parse_mask("99\\")

        assert len(parsed) == 3
        assert parsed.tokens[-1].char == "\\"
        assert parsed.tokens[-1].is_editable is False

    def test_custom_format_chars(self) -> None:
        """Callers can define their own markers."""
        format_chars = {"h": "[0-9a-f]"}

        assert is_valid_mask("hh:hh", format_chars) is True
        # 9 is no longer a marker with a custom table
        assert is_valid_mask("99", format_chars) is False
        assert parse_mask("h", format_chars).tokens[0].accepts("c")

    def test_error_carries_mask(self) -> None:
        with pytest.raises(InvalidMaskError) as exc_info:
            parse_mask("abc-", {"9": "[0-9]"})

        assert exc_info.value.mask == "abc-"
        assert exc_info.value.to_dict()["error_type"] == "InvalidMaskError"


class TestDerivePlaceholder:
    """Tests for placeholder derivation."""

    def test_phone_mask(self) -> None:
        assert derive_placeholder(parse_mask("999-9999")) == "___-____"

    def test_literals_pass_through(self) -> None:
        assert derive_placeholder(parse_mask("+7 (999) 999-99-99")) == "+7 (___) ___-__-__"

    def test_escapes_render_literal(self) -> None:
        """Escaped markers show as themselves, without the backslash."""
        assert derive_placeholder(parse_mask("aaa \\9 999")) == "___ 9 ___"

    @pytest.mark.parametrize("mask", ["9", "99-aa", "\\a*\\*", "(999)\\"])
    def test_one_glyph_per_position(self, mask: str) -> None:
        """Placeholder length equals the number of mask positions."""
        parsed = parse_mask(mask)
        placeholder = derive_placeholder(parsed)

        assert len(placeholder) == len(parsed.tokens)
        for token, glyph in zip(parsed.tokens, placeholder):
            assert glyph == ("_" if token.is_editable else token.char)

    def test_property_matches_function(self) -> None:
        parsed = parse_mask("99/99")
        assert parsed.placeholder == derive_placeholder(parsed) == "__/__"


class TestFormatValue:
    """Tests for conforming input to a mask."""

    @pytest.fixture
    def phone(self):
        return parse_mask("999-9999")

    def test_progressive_typing(self, phone) -> None:
        """Values grow as characters arrive, literals inserted when needed."""
        typed = "5551234"
        formatted = [format_value(phone, typed[: i + 1]) for i in range(len(typed))]

        assert formatted == [
            "5",
            "55",
            "555",
            "555-1",
            "555-12",
            "555-123",
            "555-1234",
        ]

    def test_already_formatted_input(self, phone) -> None:
        assert format_value(phone, "555-1234") == "555-1234"

    def test_rejected_characters_skipped(self, phone) -> None:
        assert format_value(phone, "5x5 5-12ab34") == "555-1234"

    def test_extra_input_dropped(self, phone) -> None:
        assert format_value(phone, "55512345678") == "555-1234"

    def test_empty_input(self, phone) -> None:
        assert format_value(phone, "") == ""

    def test_leading_literals(self) -> None:
        parsed = parse_mask("(999)")

        assert format_value(parsed, "") == ""
        assert format_value(parsed, "1") == "(1"
        assert format_value(parsed, "123") == "(123)"

    def test_escaped_literal(self) -> None:
        parsed = parse_mask("aaa \\9 999")

        assert format_value(parsed, "abc123") == "abc 9 123"

    @staticmethod
    def type_keys(parsed, keys: str) -> list[str]:
        """Format after every key, feeding each result back like an input does."""
        value = ""
        steps = []
        for key in keys:
            value = format_value(parsed, value + key)
            steps.append(value)
        return steps

    def test_typed_char_equal_to_leading_literal(self) -> None:
        parsed = parse_mask("+7 (999) 999")

        assert format_value(parsed, "7") == "+7 (7"
        assert self.type_keys(parsed, "7123456") == [
            "+7 (7",
            "+7 (71",
            "+7 (712",
            "+7 (712) 3",
            "+7 (712) 34",
            "+7 (712) 345",
            "+7 (712) 345",
        ]

    def test_typed_char_equal_to_escaped_literal(self) -> None:
        parsed = parse_mask("aaa \\9 999")

        assert self.type_keys(parsed, "abc9123") == [
            "a",
            "ab",
            "abc",
            "abc 9 9",
            "abc 9 91",
            "abc 9 912",
            "abc 9 912",
        ]

    def test_partial_literal_run_is_not_consumed(self) -> None:
        parsed = parse_mask("(999) 999")

        assert format_value(parsed, "(123) 4") == "(123) 4"
        assert format_value(parsed, "(123)4") == "(123) 4"

    @pytest.mark.parametrize("raw", ["5", "555-", "5551", "55512345", "abc"])
    def test_idempotent(self, phone, raw: str) -> None:
        once = format_value(phone, raw)
        assert format_value(phone, once) == once

    def test_is_complete(self, phone) -> None:
        assert is_complete(phone, "555-1234") is True
        assert is_complete(phone, "555-12") is False


class TestFormatWithCursor:
    """Tests for mapping the cursor through formatting."""

    @pytest.fixture
    def phone(self):
        return parse_mask("999-9999")

    def test_cursor_at_end_follows_inserted_literal(self, phone) -> None:
        assert format_with_cursor(phone, "5551", 4) == ("555-1", 5)

    def test_insert_in_the_middle_keeps_cursor(self, phone) -> None:
        # "9" typed after "55" in "555-12"
        assert format_with_cursor(phone, "5595-12", 3) == ("559-512", 3)

    def test_cursor_before_rejected_char(self, phone) -> None:
        assert format_with_cursor(phone, "55x5", 3) == ("555", 2)

    def test_cursor_bounds(self, phone) -> None:
        assert format_with_cursor(phone, "555", 0) == ("555", 0)
        assert format_with_cursor(phone, "555", 99) == ("555", 3)

    def test_matches_format_value(self, phone) -> None:
        raw = "5x5 5-12ab34"
        assert format_with_cursor(phone, raw, len(raw))[0] == format_value(phone, raw)
