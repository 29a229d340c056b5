"""Tests for the shared marker and inline pattern vocabulary."""

from __future__ import annotations

import pytest

from mdd.patterns import (
    BLOCK_DIRECTIVES,
    DIRECTIVE_SPECS,
    REFERENCE_RE,
    SELF_CLOSING_DIRECTIVES,
    SUBSCRIPT_RE,
    SUPERSCRIPT_RE,
    TRAILING_CLASS_RE,
    DirectiveKind,
    is_close_marker,
    match_open_marker,
)


class TestOpenMarkers:
    """Tests for match_open_marker."""

    @pytest.mark.parametrize(
        ("line", "expected"),
        [
            ("::letterhead", DirectiveKind.LETTERHEAD),
            ("::header", DirectiveKind.HEADER),
            ("::footer", DirectiveKind.FOOTER),
            ("::contact-info", DirectiveKind.CONTACT_INFO),
            ("::signature-block", DirectiveKind.SIGNATURE_BLOCK),
            ("::page-break::", DirectiveKind.PAGE_BREAK),
            ("::page-break", DirectiveKind.PAGE_BREAK),
            ("::: section-break", DirectiveKind.SECTION_BREAK),
            ("::: section-break :::", DirectiveKind.SECTION_BREAK),
        ],
    )
    def test_recognises_each_kind(self, line: str, expected: DirectiveKind) -> None:
        """Every documented open marker maps to its kind."""
        assert match_open_marker(line) == expected

    def test_surrounding_whitespace_is_ignored(self) -> None:
        """Leading and trailing whitespace does not affect recognition."""
        assert match_open_marker("   ::letterhead   ") == DirectiveKind.LETTERHEAD

    @pytest.mark.parametrize("line", ["::", ":::", "::letterhead Acme", "::unknown", "letterhead", ""])
    def test_rejects_non_markers(self, line: str) -> None:
        """Close tokens, unknown names and trailing text are not open markers."""
        assert match_open_marker(line) is None


class TestCloseMarkers:
    """Tests for is_close_marker."""

    def test_plain_close(self) -> None:
        """``::`` closes plain directives only."""
        assert is_close_marker("::", "::")
        assert is_close_marker("  ::  ", "::")
        assert not is_close_marker(":::", "::")

    def test_section_close(self) -> None:
        """``:::`` closes section breaks only."""
        assert is_close_marker(":::", ":::")
        assert not is_close_marker("::", ":::")


class TestDirectiveTable:
    """Tests for the directive specification table."""

    def test_every_kind_has_a_spec(self) -> None:
        """The table covers the closed set of kinds."""
        assert set(DIRECTIVE_SPECS) == set(DirectiveKind)

    def test_block_and_self_closing_partition(self) -> None:
        """Page and section breaks are the only self-closing kinds."""
        assert SELF_CLOSING_DIRECTIVES == {DirectiveKind.PAGE_BREAK, DirectiveKind.SECTION_BREAK}
        assert BLOCK_DIRECTIVES | SELF_CLOSING_DIRECTIVES == set(DirectiveKind)
        assert not BLOCK_DIRECTIVES & SELF_CLOSING_DIRECTIVES

    def test_no_kind_permits_nesting(self) -> None:
        """Every directive forbids other directives inside it."""
        assert all(not spec.may_contain for spec in DIRECTIVE_SPECS.values())


class TestInlinePatterns:
    """Tests for the inline typography patterns."""

    def test_superscript_rejects_whitespace(self) -> None:
        """Superscript content cannot contain spaces."""
        assert SUPERSCRIPT_RE.search("x^2^").group(1) == "2"
        assert SUPERSCRIPT_RE.search("a ^b c^ d") is None

    def test_subscript_rejects_opposite_marker(self) -> None:
        """Subscript content cannot contain a caret."""
        assert SUBSCRIPT_RE.search("H~2~O").group(1) == "2"
        assert SUBSCRIPT_RE.search("~a^b~") is None

    def test_reference_requires_sigil(self) -> None:
        """Only ``@word-N`` is a cross-reference; hyphenated prose is not."""
        match = REFERENCE_RE.search("See @table-3 below")
        assert match is not None
        assert match.groups() == ("table", "3")
        assert REFERENCE_RE.search("covid-19 cases") is None
        assert REFERENCE_RE.search("mail me at team@section-2") is None

    def test_trailing_class(self) -> None:
        """A trailing ``{.name}`` token is split from the text."""
        match = TRAILING_CLASS_RE.match("Payment Terms {.payment-terms}")
        assert match is not None
        assert match.groups() == ("Payment Terms", "payment-terms")
