"""Directive and inline pattern vocabulary shared by every MDD pass.

Both the tree-based directive matcher and the line-based validation extractor
read their markers from this module, so the two stay byte-identical.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Final


class DirectiveKind(str, Enum):
    """Closed set of directive kinds."""

    LETTERHEAD = "letterhead"
    HEADER = "header"
    FOOTER = "footer"
    CONTACT_INFO = "contact-info"
    SIGNATURE_BLOCK = "signature-block"
    PAGE_BREAK = "page-break"
    SECTION_BREAK = "section-break"


DIRECTIVE_CLOSE: Final[str] = "::"
SECTION_CLOSE: Final[str] = ":::"


@dataclass(frozen=True)
class DirectiveSpec:
    """Fixed behaviour for one directive kind."""

    kind: DirectiveKind
    open_pattern: re.Pattern[str]
    close_token: str | None
    self_closing: bool
    may_contain: frozenset[DirectiveKind]
    latex_env: str | None = None
    bare_marker: str | None = None

    @property
    def requires_close(self) -> bool:
        return not self.self_closing


def _block_open(name: str) -> re.Pattern[str]:
    return re.compile(rf"^::{re.escape(name)}\s*$")


DIRECTIVE_SPECS: Final[dict[DirectiveKind, DirectiveSpec]] = {
    DirectiveKind.LETTERHEAD: DirectiveSpec(
        kind=DirectiveKind.LETTERHEAD,
        open_pattern=_block_open("letterhead"),
        close_token=DIRECTIVE_CLOSE,
        self_closing=False,
        may_contain=frozenset(),
        latex_env="letterhead",
    ),
    DirectiveKind.HEADER: DirectiveSpec(
        kind=DirectiveKind.HEADER,
        open_pattern=_block_open("header"),
        close_token=DIRECTIVE_CLOSE,
        self_closing=False,
        may_contain=frozenset(),
        latex_env="header",
    ),
    DirectiveKind.FOOTER: DirectiveSpec(
        kind=DirectiveKind.FOOTER,
        open_pattern=_block_open("footer"),
        close_token=DIRECTIVE_CLOSE,
        self_closing=False,
        may_contain=frozenset(),
        latex_env="footer",
    ),
    DirectiveKind.CONTACT_INFO: DirectiveSpec(
        kind=DirectiveKind.CONTACT_INFO,
        open_pattern=_block_open("contact-info"),
        close_token=DIRECTIVE_CLOSE,
        self_closing=False,
        may_contain=frozenset(),
        latex_env="contactinfo",
    ),
    DirectiveKind.SIGNATURE_BLOCK: DirectiveSpec(
        kind=DirectiveKind.SIGNATURE_BLOCK,
        open_pattern=_block_open("signature-block"),
        close_token=DIRECTIVE_CLOSE,
        self_closing=False,
        may_contain=frozenset(),
        latex_env="signature",
    ),
    DirectiveKind.PAGE_BREAK: DirectiveSpec(
        kind=DirectiveKind.PAGE_BREAK,
        open_pattern=re.compile(r"^::page-break(?:\s*::)?\s*$"),
        close_token=None,
        self_closing=True,
        may_contain=frozenset(),
        bare_marker="\\newpage",
    ),
    DirectiveKind.SECTION_BREAK: DirectiveSpec(
        kind=DirectiveKind.SECTION_BREAK,
        open_pattern=re.compile(r"^:::\s*section-break(?:\s*:::)?\s*$"),
        close_token=SECTION_CLOSE,
        self_closing=True,
        may_contain=frozenset(),
        bare_marker="\\sectionbreak",
    ),
}

BLOCK_DIRECTIVES: Final[frozenset[DirectiveKind]] = frozenset(
    kind for kind, spec in DIRECTIVE_SPECS.items() if spec.requires_close
)
SELF_CLOSING_DIRECTIVES: Final[frozenset[DirectiveKind]] = frozenset(
    kind for kind, spec in DIRECTIVE_SPECS.items() if spec.self_closing
)

DIRECTIVE_CLOSE_RE: Final[re.Pattern[str]] = re.compile(r"^::\s*$")
SECTION_CLOSE_RE: Final[re.Pattern[str]] = re.compile(r"^:::\s*$")
# A one-line section break carries its own fence.
SECTION_BREAK_INLINE_RE: Final[re.Pattern[str]] = re.compile(r"^:::\s*section-break\s*:::\s*$")


def match_open_marker(line: str) -> DirectiveKind | None:
    """Return the directive kind whose open marker is ``line``, if any."""
    stripped = line.strip()
    for kind, spec in DIRECTIVE_SPECS.items():
        if spec.open_pattern.match(stripped):
            return kind
    return None


def is_close_marker(line: str, token: str) -> bool:
    """Check whether ``line`` is exactly the close ``token`` (whitespace ignored)."""
    if token == SECTION_CLOSE:
        return bool(SECTION_CLOSE_RE.match(line.strip()))
    return bool(DIRECTIVE_CLOSE_RE.match(line.strip()))


# Inline typography. Content may not contain whitespace or the opposite marker.
SUPERSCRIPT_RE: Final[re.Pattern[str]] = re.compile(r"\^([^\^~\s]+)\^")
SUBSCRIPT_RE: Final[re.Pattern[str]] = re.compile(r"~([^~\^\s]+)~")
REFERENCE_RE: Final[re.Pattern[str]] = re.compile(r"(?<![\w@])@([a-z]+)-(\d+)\b")
QUOTE_RE: Final[re.Pattern[str]] = re.compile(r"\"([^\"]+)\"")

# Semantic class annotations: ``{.legal-clause}``.
SEMANTIC_CLASS_NAME_RE: Final[re.Pattern[str]] = re.compile(r"^[a-z0-9-]+$")
SEMANTIC_CLASS_TOKEN_RE: Final[re.Pattern[str]] = re.compile(r"\{\.([^{}\s]+)\}")
TRAILING_CLASS_RE: Final[re.Pattern[str]] = re.compile(r"^(.*?)\s*\{\.([a-z0-9-]+)\}\s*$", re.DOTALL)

FRONTMATTER_RE: Final[re.Pattern[str]] = re.compile(r"^---[ \t]*\n(.*?)\n---[ \t]*(?:\n|$)", re.DOTALL)
CODE_FENCE_RE: Final[re.Pattern[str]] = re.compile(r"^\s*(```|~~~)")
# Leading ``>`` markers of (possibly nested) blockquote lines.
BLOCKQUOTE_PREFIX_RE: Final[re.Pattern[str]] = re.compile(r"^\s*(?:>\s?)+")
ATX_HEADING_RE: Final[re.Pattern[str]] = re.compile(r"^ {0,3}(#{1,6})(?:\s|$)")

LEGAL_CLAUSE_RE: Final[re.Pattern[str]] = re.compile(r"^(WHEREAS|THEREFORE|PROVIDED|SUBJECT TO)", re.IGNORECASE)
NUMBERED_ITEM_RE: Final[re.Pattern[str]] = re.compile(r"^\d+\.\s")
NUMBERED_HEADING_RE: Final[re.Pattern[str]] = re.compile(r"^\d+\.")
