"""Discover directive spans in a parsed document tree.

This is a read-only pass: it pairs open markers with close markers and
reports unterminated or nested directives, but never edits the tree.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterator, Union

from mdd.patterns import (
    DIRECTIVE_SPECS,
    SECTION_BREAK_INLINE_RE,
    DirectiveKind,
    DirectiveSpec,
    is_close_marker,
    match_open_marker,
)
from mdd.schemas import DocumentTree, IssueCode, Node, NodeKind, node_text
from mdd.schemas.tree import BLOCK_PARENT_KINDS

logger = logging.getLogger(__name__)

Container = Union[DocumentTree, Node]


@dataclass
class DirectiveSpan:
    """A directive open marker and, when found, its matching close."""

    kind: DirectiveKind
    parent: Container
    start_node: Node
    start_index: int
    raw_text: str
    end_node: Node | None = None
    end_index: int | None = None
    nested_in: DirectiveKind | None = None
    contains_nested: bool = False

    @property
    def spec(self) -> DirectiveSpec:
        return DIRECTIVE_SPECS[self.kind]

    @property
    def terminated(self) -> bool:
        return self.spec.self_closing or self.end_node is not None

    @property
    def same_container(self) -> bool:
        return self.end_node is self.start_node

    @property
    def has_nesting_violation(self) -> bool:
        return self.nested_in is not None or self.contains_nested

    @property
    def content_nodes(self) -> list[Node]:
        """Sibling nodes strictly between open and close.

        An unterminated span runs to the end of its container.
        """
        stop = self.end_index if self.end_index is not None else len(self.parent.children)
        return self.parent.children[self.start_index + 1 : stop]


@dataclass
class DirectiveIssue:
    """A structural problem found while matching."""

    code: IssueCode
    kind: DirectiveKind
    message: str
    raw_text: str


def paragraph_lines(node: Node) -> list[str]:
    """Lines of a paragraph's concatenated text, outer whitespace removed."""
    text = node_text(node).strip()
    if not text:
        return []
    return text.split("\n")


def match_directives(tree: DocumentTree) -> list[DirectiveSpan]:
    """Return every directive span in document order."""
    spans: list[DirectiveSpan] = []
    for container in _iter_containers(tree):
        spans.extend(_match_in_container(container))
    _mark_enclosed_nesting(spans)
    for span in spans:
        if not span.terminated:
            logger.debug(
                "Unterminated directive",
                extra={"directive": span.kind.value, "index": span.start_index},
            )
    return spans


def find_directive_issues(spans: list[DirectiveSpan]) -> list[DirectiveIssue]:
    """Summarise unterminated and nested directives among ``spans``."""
    issues: list[DirectiveIssue] = []
    for span in spans:
        if not span.terminated:
            issues.append(
                DirectiveIssue(
                    code=IssueCode.MISSING_END_MARKER,
                    kind=span.kind,
                    message=f"Directive ::{span.kind.value} is missing end marker {span.spec.close_token}",
                    raw_text=span.raw_text,
                )
            )
        if span.nested_in is not None:
            issues.append(
                DirectiveIssue(
                    code=IssueCode.INVALID_DIRECTIVE_NESTING,
                    kind=span.kind,
                    message=f"Directive ::{span.kind.value} cannot be nested inside ::{span.nested_in.value}",
                    raw_text=span.raw_text,
                )
            )
        elif span.contains_nested and span.same_container:
            for inner in _inline_open_kinds(span):
                issues.append(
                    DirectiveIssue(
                        code=IssueCode.INVALID_DIRECTIVE_NESTING,
                        kind=inner,
                        message=f"Directive ::{inner.value} cannot be nested inside ::{span.kind.value}",
                        raw_text=span.raw_text,
                    )
                )
    return issues


def has_document_structure(tree: DocumentTree) -> bool:
    """Check whether any paragraph in ``tree`` opens a directive."""
    for container in _iter_containers(tree):
        for child in container.children:
            if child.kind != NodeKind.PARAGRAPH:
                continue
            lines = paragraph_lines(child)
            if lines and match_open_marker(lines[0]) is not None:
                return True
    return False


def _iter_containers(tree: DocumentTree) -> Iterator[Container]:
    yield tree
    stack = list(reversed(tree.children))
    while stack:
        node = stack.pop()
        if node.kind in BLOCK_PARENT_KINDS:
            yield node
            stack.extend(reversed(node.children))


def _match_in_container(container: Container) -> list[DirectiveSpan]:
    children = container.children
    lines_by_index: dict[int, list[str]] = {
        index: paragraph_lines(child)
        for index, child in enumerate(children)
        if child.kind == NodeKind.PARAGRAPH
    }
    open_kinds: dict[int, DirectiveKind] = {}
    for index, lines in lines_by_index.items():
        if lines:
            kind = match_open_marker(lines[0])
            if kind is not None:
                open_kinds[index] = kind

    spans: list[DirectiveSpan] = []
    for index in sorted(open_kinds):
        node = children[index]
        span = DirectiveSpan(
            kind=open_kinds[index],
            parent=container,
            start_node=node,
            start_index=index,
            raw_text=node_text(node),
        )
        _pair(span, lines_by_index, open_kinds)
        spans.append(span)

    _mark_nesting(spans)
    return spans


def _pair(
    span: DirectiveSpan,
    lines_by_index: dict[int, list[str]],
    open_kinds: dict[int, DirectiveKind],
) -> None:
    token = span.spec.close_token
    if token is None:
        return
    own_lines = lines_by_index[span.start_index]
    if span.kind == DirectiveKind.SECTION_BREAK and SECTION_BREAK_INLINE_RE.match(own_lines[0].strip()):
        return

    if len(own_lines) > 1 and is_close_marker(own_lines[-1], token):
        span.end_node = span.start_node
        span.end_index = span.start_index
        if any(match_open_marker(line) is not None for line in own_lines[1:-1]):
            span.contains_nested = True
        return

    for index in range(span.start_index + 1, len(span.parent.children)):
        lines = lines_by_index.get(index)
        if not lines:
            continue
        # A section-break fence must follow before any other directive opens.
        if span.spec.self_closing and index in open_kinds:
            return
        if is_close_marker(lines[-1], token):
            span.end_node = span.parent.children[index]
            span.end_index = index
            return


def _mark_nesting(spans: list[DirectiveSpan]) -> None:
    for outer in spans:
        if outer.end_index is None or outer.same_container:
            continue
        for inner in spans:
            if inner is outer:
                continue
            if outer.start_index < inner.start_index <= outer.end_index:
                if inner.kind in outer.spec.may_contain:
                    continue
                inner.nested_in = outer.kind
                outer.contains_nested = True


def _mark_enclosed_nesting(spans: list[DirectiveSpan]) -> None:
    # Directives inside a blockquote or list that sits within another span.
    for outer in spans:
        if outer.end_index is None or outer.same_container:
            continue
        enclosed = {id(node) for child in outer.content_nodes for node in _iter_descendants(child)}
        for inner in spans:
            if inner.parent is outer.parent or id(inner.start_node) not in enclosed:
                continue
            if inner.kind in outer.spec.may_contain:
                continue
            inner.nested_in = outer.kind
            outer.contains_nested = True


def _iter_descendants(node: Node) -> Iterator[Node]:
    for child in node.children:
        yield child
        yield from _iter_descendants(child)


def _inline_open_kinds(span: DirectiveSpan) -> list[DirectiveKind]:
    inner_lines = paragraph_lines(span.start_node)[1:-1]
    return [kind for kind in map(match_open_marker, inner_lines) if kind is not None]
