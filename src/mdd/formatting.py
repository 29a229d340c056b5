"""Inline typography, heading numbering and paragraph classification."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from enum import Enum

from mdd.config import MDD_LONG_PARAGRAPH_THRESHOLD
from mdd.exceptions import MissingInputError
from mdd.patterns import (
    LEGAL_CLAUSE_RE,
    NUMBERED_HEADING_RE,
    NUMBERED_ITEM_RE,
    QUOTE_RE,
    REFERENCE_RE,
    SUBSCRIPT_RE,
    SUPERSCRIPT_RE,
)
from mdd.schemas import DocumentTree, Node, NodeKind, node_text
from mdd.transform import is_mdd_document

logger = logging.getLogger(__name__)

MAX_HEADING_DEPTH = 6
MAX_NUMBERED_DEPTH = 3

# Text below these kinds is never rewritten.
_OPAQUE_KINDS = frozenset({NodeKind.LINK, NodeKind.INLINE_CODE, NodeKind.CODE_BLOCK, NodeKind.HTML})


class FormatKind(str, Enum):
    """Inline pattern families, in tie-break order."""

    SUPERSCRIPT = "superscript"
    SUBSCRIPT = "subscript"
    REFERENCE = "reference"
    QUOTE = "quote"


_FAMILY_PATTERNS: tuple[tuple[FormatKind, re.Pattern[str]], ...] = (
    (FormatKind.SUPERSCRIPT, SUPERSCRIPT_RE),
    (FormatKind.SUBSCRIPT, SUBSCRIPT_RE),
    (FormatKind.REFERENCE, REFERENCE_RE),
    (FormatKind.QUOTE, QUOTE_RE),
)
_FAMILY_RANK = {kind: rank for rank, (kind, _) in enumerate(_FAMILY_PATTERNS)}


@dataclass
class FormatMatch:
    """One inline pattern occurrence inside a text run."""

    kind: FormatKind
    start: int
    end: int
    content: str
    ref_type: str | None = None
    ref_number: str | None = None


@dataclass
class SectionCounter:
    """Heading counters for depths 1-6, owned by a single formatting run."""

    counters: list[int] = field(default_factory=lambda: [0] * MAX_HEADING_DEPTH)

    def advance(self, level: int) -> None:
        """Count a heading at ``level`` and reset every deeper counter."""
        if not 1 <= level <= MAX_HEADING_DEPTH:
            raise ValueError(f"Heading level out of range: {level}")
        self.counters[level - 1] += 1
        for depth in range(level, MAX_HEADING_DEPTH):
            self.counters[depth] = 0

    def number(self, level: int) -> str:
        """Dotted number for ``level``, skipping depths that were never used."""
        return ".".join(str(count) for count in self.counters[:level] if count > 0)


def find_format_matches(text: str) -> list[FormatMatch]:
    """Collect non-overlapping inline matches in ``text``, ordered by start.

    Every family is scanned independently. The earliest start wins; equal
    starts fall back to family order. A match beginning inside an accepted
    match is dropped.
    """
    candidates: list[FormatMatch] = []
    for kind, pattern in _FAMILY_PATTERNS:
        for match in pattern.finditer(text):
            if kind == FormatKind.REFERENCE:
                candidates.append(
                    FormatMatch(
                        kind=kind,
                        start=match.start(),
                        end=match.end(),
                        content=match.group(0),
                        ref_type=match.group(1),
                        ref_number=match.group(2),
                    )
                )
            else:
                candidates.append(FormatMatch(kind=kind, start=match.start(), end=match.end(), content=match.group(1)))

    candidates.sort(key=lambda item: (item.start, _FAMILY_RANK[item.kind]))
    accepted: list[FormatMatch] = []
    for candidate in candidates:
        if accepted and candidate.start < accepted[-1].end:
            continue
        accepted.append(candidate)
    return accepted


def has_text_formatting(text: str) -> bool:
    """Check whether ``text`` contains any inline pattern."""
    return any(pattern.search(text) for _, pattern in _FAMILY_PATTERNS)


def format_text_run(text: str) -> list[Node]:
    """Split ``text`` into plain text nodes interleaved with formatted nodes."""
    matches = find_format_matches(text)
    if not matches:
        return [Node.text(text)]

    nodes: list[Node] = []
    cursor = 0
    for match in matches:
        if match.start > cursor:
            nodes.append(Node.text(text[cursor : match.start]))
        nodes.append(_formatted_node(match))
        cursor = match.end
    if cursor < len(text):
        nodes.append(Node.text(text[cursor:]))
    return nodes


def _formatted_node(match: FormatMatch) -> Node:
    if match.kind == FormatKind.SUPERSCRIPT:
        return Node(kind=NodeKind.SUPERSCRIPT, content=match.content)
    if match.kind == FormatKind.SUBSCRIPT:
        return Node(kind=NodeKind.SUBSCRIPT, content=match.content)
    if match.kind == FormatKind.REFERENCE:
        label = f"{match.ref_type.capitalize()} {match.ref_number}"
        return Node(
            kind=NodeKind.LINK,
            url=f"#{match.ref_type}-{match.ref_number}",
            title=f"Reference to {label}",
            children=[Node.text(label)],
        )
    return Node(kind=NodeKind.QUOTE, content=match.content, value=f"“{match.content}”")


def format_text_nodes(nodes: list[Node]) -> int:
    """Rewrite every eligible text node below ``nodes`` in place.

    Returns:
        Number of text runs that were split.
    """
    rewritten = 0
    index = 0
    while index < len(nodes):
        node = nodes[index]
        if node.kind == NodeKind.TEXT and node.value:
            replacement = format_text_run(node.value)
            if len(replacement) > 1 or replacement[0].kind != NodeKind.TEXT:
                nodes[index : index + 1] = replacement
                rewritten += 1
                index += len(replacement)
                continue
        elif node.children and node.kind not in _OPAQUE_KINDS:
            rewritten += format_text_nodes(node.children)
        index += 1
    return rewritten


def slugify(text: str) -> str:
    """Lowercase ``text``, drop punctuation and hyphenate whitespace."""
    slug = re.sub(r"[^\w\s-]", "", text.lower())
    slug = re.sub(r"\s+", "-", slug)
    return slug.strip("-")


def number_headings(tree: DocumentTree, counter: SectionCounter) -> None:
    """Prefix H1-H3 with their section number and give every heading an id.

    A heading that opens with a formatted node gets the prefix as a new
    leading text node.
    """
    for heading in _iter_kind(tree.children, NodeKind.HEADING):
        level = heading.level or 1
        counter.advance(level)
        number = counter.number(level)
        text = node_text(heading)
        if text.strip() and number and level <= MAX_NUMBERED_DEPTH and not NUMBERED_HEADING_RE.match(text):
            first = heading.children[0]
            if first.kind == NodeKind.TEXT:
                first.value = f"{number} {first.value}"
            else:
                heading.children.insert(0, Node.text(f"{number} "))
        heading.annotations["id"] = f"section-{number.replace('.', '-')}" if number else slugify(text)


def classify_paragraphs(tree: DocumentTree, threshold: int = MDD_LONG_PARAGRAPH_THRESHOLD) -> None:
    """Set the paragraph ``class`` slot from length and leading keywords.

    Later checks overwrite earlier ones: numbered-item beats legal-clause
    beats long-paragraph.
    """
    for paragraph in _iter_kind(tree.children, NodeKind.PARAGRAPH):
        if not paragraph.children:
            continue
        text = node_text(paragraph)
        if len(text) > threshold:
            paragraph.annotations["class"] = "long-paragraph"
        if LEGAL_CLAUSE_RE.match(text):
            paragraph.annotations["class"] = "legal-clause"
        if NUMBERED_ITEM_RE.match(text):
            paragraph.annotations["class"] = "numbered-item"


def extract_references(tree: DocumentTree) -> list[dict[str, str]]:
    """List every ``@word-N`` cross-reference still present in text nodes."""
    references: list[dict[str, str]] = []
    for node in _iter_kind(tree.children, NodeKind.TEXT):
        for match in REFERENCE_RE.finditer(node.value or ""):
            references.append(
                {"type": match.group(1), "number": match.group(2), "id": f"{match.group(1)}-{match.group(2)}"}
            )
    return references


def apply_text_formatting(tree: DocumentTree, threshold: int = MDD_LONG_PARAGRAPH_THRESHOLD) -> None:
    """Run the inline, heading and paragraph passes over an MDD document.

    Raises:
        MissingInputError: If ``tree`` is None.
    """
    if tree is None:
        raise MissingInputError("A document tree is required")
    if not is_mdd_document(tree.path):
        return
    rewritten = format_text_nodes(tree.children)
    number_headings(tree, SectionCounter())
    classify_paragraphs(tree, threshold)
    logger.debug("Text formatting applied", extra={"path": tree.path, "rewritten_runs": rewritten})


def _iter_kind(nodes: list[Node], kind: NodeKind):
    for node in nodes:
        if node.kind == kind:
            yield node
        if node.children:
            yield from _iter_kind(node.children, kind)
