"""Document tree models."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field

from mdd.patterns import DirectiveKind


class NodeKind(str, Enum):
    """Node variants understood by the MDD passes."""

    HEADING = "heading"
    PARAGRAPH = "paragraph"
    TEXT = "text"
    EMPHASIS = "emphasis"
    STRONG = "strong"
    LINK = "link"
    INLINE_CODE = "inline-code"
    IMAGE = "image"
    BLOCKQUOTE = "blockquote"
    LIST = "list"
    LIST_ITEM = "list-item"
    CODE_BLOCK = "code-block"
    THEMATIC_BREAK = "thematic-break"
    HTML = "html"
    STRUCTURAL_MARKER = "structural-marker"
    SUPERSCRIPT = "superscript"
    SUBSCRIPT = "subscript"
    QUOTE = "quote"


BLOCK_PARENT_KINDS = frozenset({NodeKind.BLOCKQUOTE, NodeKind.LIST, NodeKind.LIST_ITEM})


class Node(BaseModel):
    """A single node of a parsed document.

    Container kinds hold ``children``; leaf kinds hold ``value``. Structural
    markers carry the ``directive`` they were built from and its extracted
    ``content``; formatted inline nodes carry their captured ``content``.
    ``annotations`` holds the semantic ``class`` slot and a heading's target
    ``id``.
    """

    kind: NodeKind
    level: int | None = Field(default=None, ge=1, le=6)
    value: str | None = None
    content: str | None = None
    directive: DirectiveKind | None = None
    url: str | None = None
    title: str | None = None
    children: list["Node"] = Field(default_factory=list)
    annotations: dict[str, str] = Field(default_factory=dict)

    @classmethod
    def text(cls, value: str) -> "Node":
        return cls(kind=NodeKind.TEXT, value=value)

    @classmethod
    def paragraph(cls, value: str) -> "Node":
        return cls(kind=NodeKind.PARAGRAPH, children=[cls.text(value)])

    @classmethod
    def heading(cls, level: int, value: str) -> "Node":
        return cls(kind=NodeKind.HEADING, level=level, children=[cls.text(value)])


class DocumentTree(BaseModel):
    """Ownership root for a parsed document.

    ``path`` is the source identifier; it is only used to decide whether the
    MDD passes apply.
    """

    path: str | None = None
    children: list[Node] = Field(default_factory=list)


def node_text(node: Node) -> str:
    """Concatenate the literal text of a node and all of its descendants."""
    if node.kind == NodeKind.TEXT or node.kind == NodeKind.INLINE_CODE:
        return node.value or ""
    if node.kind in {NodeKind.SUPERSCRIPT, NodeKind.SUBSCRIPT, NodeKind.QUOTE}:
        return node.content or ""
    if node.kind == NodeKind.STRUCTURAL_MARKER:
        return node.content or ""
    if node.children:
        return "".join(node_text(child) for child in node.children)
    return node.value or ""
