"""Rewrite matched directives into structural markers.

The transformer is lenient: unterminated or nested directives stay in the
tree exactly as written so nothing is lost, and validation reports them.
"""

from __future__ import annotations

import logging

from mdd.config import MDD_FILE_EXTENSION
from mdd.directives import DirectiveSpan, match_directives, paragraph_lines
from mdd.exceptions import MissingInputError
from mdd.patterns import (
    DIRECTIVE_SPECS,
    TRAILING_CLASS_RE,
    DirectiveKind,
    is_close_marker,
)
from mdd.schemas import DocumentTree, Node, NodeKind, node_text

logger = logging.getLogger(__name__)


def is_mdd_document(path: str | None, extension: str = MDD_FILE_EXTENSION) -> bool:
    """Check whether ``path`` names an MDD document."""
    return bool(path) and path.endswith(extension)


def apply_document_structure(tree: DocumentTree) -> list[Node]:
    """Run the directive and semantic-class passes over an MDD document.

    Documents whose path lacks the MDD extension are left untouched.

    Returns:
        The structural markers inserted into the tree.

    Raises:
        MissingInputError: If ``tree`` is None.
    """
    if tree is None:
        raise MissingInputError("A document tree is required")
    if not is_mdd_document(tree.path):
        return []
    markers = transform_directives(tree)
    apply_semantic_classes(tree)
    return markers


def transform_directives(tree: DocumentTree, spans: list[DirectiveSpan] | None = None) -> list[Node]:
    """Replace each well-formed directive span with a structural marker.

    Spans are located by node identity, so earlier rewrites in the same
    container do not invalidate later spans.
    """
    if spans is None:
        spans = match_directives(tree)

    markers: list[Node] = []
    for span in spans:
        if not span.terminated:
            logger.info(
                "Leaving unterminated directive in place",
                extra={"directive": span.kind.value},
            )
            continue
        if span.has_nesting_violation:
            logger.info(
                "Leaving nested directive in place",
                extra={"directive": span.kind.value},
            )
            continue
        marker = _transform_span(span)
        if marker is not None:
            markers.append(marker)
    return markers


def _transform_span(span: DirectiveSpan) -> Node | None:
    siblings = span.parent.children
    start = _index_of(siblings, span.start_node)
    if start is None:
        logger.debug("Directive source already consumed", extra={"directive": span.kind.value})
        return None

    if span.kind == DirectiveKind.PAGE_BREAK:
        marker = _bare_marker(span.kind)
        siblings[start] = marker
        return marker

    if span.kind == DirectiveKind.SECTION_BREAK:
        return _transform_section_break(span, start)

    end = start if span.same_container else _index_of(siblings, span.end_node)
    if end is None:
        return None

    content = extract_content(span)
    spec = DIRECTIVE_SPECS[span.kind]
    marker = Node(
        kind=NodeKind.STRUCTURAL_MARKER,
        directive=span.kind,
        content=content,
        value=f"\\begin{{{spec.latex_env}}}\n{content}\n\\end{{{spec.latex_env}}}",
    )
    siblings[start] = marker
    del siblings[start + 1 : end + 1]
    return marker


def extract_content(span: DirectiveSpan) -> str:
    """Text strictly between a span's open and close markers.

    Separate block containers are joined with a blank line so paragraph
    breaks survive.
    """
    token = span.spec.close_token or ""
    open_lines = paragraph_lines(span.start_node)

    if span.same_container:
        return "\n".join(open_lines[1:-1]).strip()

    parts: list[str] = []
    trailing = "\n".join(open_lines[1:]).strip()
    if trailing:
        parts.append(trailing)
    for node in span.content_nodes:
        text = node_text(node).strip()
        if text:
            parts.append(text)
    if span.end_node is not None:
        close_lines = paragraph_lines(span.end_node)
        if close_lines and is_close_marker(close_lines[-1], token):
            leading = "\n".join(close_lines[:-1]).strip()
            if leading:
                parts.append(leading)
    return "\n\n".join(parts)


def _transform_section_break(span: DirectiveSpan, start: int) -> Node:
    siblings = span.parent.children
    marker = _bare_marker(span.kind)
    open_lines = paragraph_lines(span.start_node)

    inner = open_lines[1:]
    if span.same_container:
        inner = inner[:-1]
    siblings[start] = marker
    inserted = 0
    inner_text = "\n".join(inner).strip()
    if inner_text:
        siblings.insert(start + 1, Node.paragraph(inner_text))
        inserted = 1

    if span.end_node is not None and not span.same_container:
        end = _index_of(siblings, span.end_node)
        if end is not None:
            remaining = "\n".join(paragraph_lines(span.end_node)[:-1]).strip()
            if remaining:
                siblings[end] = Node.paragraph(remaining)
            else:
                del siblings[end]
    logger.debug("Section break inserted", extra={"kept_inline_paragraph": bool(inserted)})
    return marker


def _bare_marker(kind: DirectiveKind) -> Node:
    return Node(
        kind=NodeKind.STRUCTURAL_MARKER,
        directive=kind,
        value=DIRECTIVE_SPECS[kind].bare_marker,
    )


def _index_of(nodes: list[Node], target: Node | None) -> int | None:
    if target is None:
        return None
    for index, node in enumerate(nodes):
        if node is target:
            return index
    return None


def apply_semantic_classes(tree: DocumentTree) -> None:
    """Move trailing ``{.class}`` tokens from headings and paragraphs into annotations."""
    for node in _iter_nodes(tree.children):
        if node.kind == NodeKind.HEADING and node.children:
            _strip_class_token(node, node.children[0])
        elif node.kind == NodeKind.PARAGRAPH and node.children:
            _strip_class_token(node, node.children[-1])


def _strip_class_token(owner: Node, text_node: Node) -> None:
    if text_node.kind != NodeKind.TEXT or not text_node.value:
        return
    match = TRAILING_CLASS_RE.match(text_node.value)
    if not match:
        return
    text_node.value = match.group(1)
    owner.annotations["class"] = match.group(2)


def _iter_nodes(nodes: list[Node]):
    for node in nodes:
        yield node
        if node.children:
            yield from _iter_nodes(node.children)
