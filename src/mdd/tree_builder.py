"""Build a document tree from MDD source text.

Markdown is rendered to HTML with Python-Markdown and the HTML is walked with
BeautifulSoup. Only the elements the MDD passes care about get their own node
kinds; anything else is kept verbatim as an ``html`` node.
"""

from __future__ import annotations

import logging

from mdd.exceptions import MissingInputError, ParseError
from mdd.patterns import FRONTMATTER_RE
from mdd.schemas import DocumentTree, Node, NodeKind

try:
    import markdown
    from bs4 import BeautifulSoup
    from bs4.element import Comment, NavigableString, Tag
except ImportError as exc:  # pragma: no cover - runtime dependency check
    raise ParseError(
        "Markdown and BeautifulSoup4 are required to build trees (pip install markdown beautifulsoup4 lxml)."
    ) from exc

logger = logging.getLogger(__name__)

MARKDOWN_EXTENSIONS = ["fenced_code"]

_HEADING_TAGS = {f"h{level}": level for level in range(1, 7)}
_BLOCK_PARENTS = {"blockquote": NodeKind.BLOCKQUOTE, "li": NodeKind.LIST_ITEM}
_INLINE_CONTAINERS = {
    "em": NodeKind.EMPHASIS,
    "i": NodeKind.EMPHASIS,
    "strong": NodeKind.STRONG,
    "b": NodeKind.STRONG,
}
_INLINE_TAGS = frozenset({"em", "i", "strong", "b", "a", "code", "img", "br", "span", "sup", "sub"})


def strip_frontmatter(source: str) -> str:
    """Drop a leading ``---`` metadata block, keeping the body only."""
    match = FRONTMATTER_RE.match(source)
    if not match:
        return source
    return source[match.end() :]


def build_tree(source: str, *, path: str | None = None) -> DocumentTree:
    """Parse MDD ``source`` into a ``DocumentTree``.

    Args:
        source: Raw document text, optionally starting with frontmatter.
        path: Source identifier stored on the tree. It decides whether the
            MDD passes run later.

    Raises:
        MissingInputError: If ``source`` is None.
        ParseError: If the text cannot be rendered.
    """
    if source is None:
        raise MissingInputError("Document source is required")
    body = strip_frontmatter(source.replace("\r\n", "\n"))
    try:
        html = markdown.markdown(body, extensions=MARKDOWN_EXTENSIONS)
    except Exception as exc:
        raise ParseError(f"Failed to render markdown: {exc}") from exc
    return build_tree_from_html(html, path=path)


def build_tree_from_html(html: str, *, path: str | None = None) -> DocumentTree:
    """Convert rendered HTML into a ``DocumentTree``."""
    if html is None:
        raise MissingInputError("HTML input is required")
    soup = BeautifulSoup(html, "lxml")
    root = soup.body or soup
    tree = DocumentTree(path=path, children=_block_children(root))
    logger.debug("Built document tree", extra={"path": path, "blocks": len(tree.children)})
    return tree


def _block_children(parent: Tag) -> list[Node]:
    """Convert the children of a block container.

    Runs of inline content are wrapped in a paragraph, so tight list items
    look the same as loose ones.
    """
    blocks: list[Node] = []
    inline_run: list[Node] = []

    def flush() -> None:
        merged = _merge_text(inline_run)
        if merged and any(not _is_blank_text(node) for node in merged):
            blocks.append(Node(kind=NodeKind.PARAGRAPH, children=_trim_run(merged)))
        inline_run.clear()

    for child in parent.children:
        if isinstance(child, Comment):
            continue
        if isinstance(child, NavigableString):
            inline_run.append(Node.text(str(child)))
            continue
        if not isinstance(child, Tag):
            continue
        if child.name in _INLINE_TAGS:
            inline_run.extend(_inline_nodes(child))
            continue
        flush()
        blocks.append(_block_node(child))
    flush()
    return blocks


def _block_node(tag: Tag) -> Node:
    name = tag.name
    if name in _HEADING_TAGS:
        return Node(kind=NodeKind.HEADING, level=_HEADING_TAGS[name], children=_inline_children(tag))
    if name == "p":
        return Node(kind=NodeKind.PARAGRAPH, children=_inline_children(tag))
    if name in _BLOCK_PARENTS:
        return Node(kind=_BLOCK_PARENTS[name], children=_block_children(tag))
    if name in ("ul", "ol"):
        items = [
            Node(kind=NodeKind.LIST_ITEM, children=_block_children(item))
            for item in tag.find_all("li", recursive=False)
        ]
        annotations = {"ordered": "true"} if name == "ol" else {}
        return Node(kind=NodeKind.LIST, children=items, annotations=annotations)
    if name == "pre":
        return _code_block(tag)
    if name == "hr":
        return Node(kind=NodeKind.THEMATIC_BREAK)
    return Node(kind=NodeKind.HTML, value=str(tag))


def _code_block(tag: Tag) -> Node:
    code = tag.find("code")
    node = Node(kind=NodeKind.CODE_BLOCK, value=(code or tag).get_text())
    if code is not None:
        for cls in code.get("class", []):
            if cls.startswith("language-"):
                node.annotations["language"] = cls[len("language-") :]
                break
    return node


def _inline_children(tag: Tag) -> list[Node]:
    nodes: list[Node] = []
    for child in tag.children:
        if isinstance(child, Comment):
            continue
        if isinstance(child, NavigableString):
            nodes.append(Node.text(str(child)))
        elif isinstance(child, Tag):
            nodes.extend(_inline_nodes(child))
    return _merge_text(nodes)


def _inline_nodes(tag: Tag) -> list[Node]:
    name = tag.name
    if name in _INLINE_CONTAINERS:
        return [Node(kind=_INLINE_CONTAINERS[name], children=_inline_children(tag))]
    if name == "a":
        return [
            Node(
                kind=NodeKind.LINK,
                url=tag.get("href"),
                title=tag.get("title"),
                children=_inline_children(tag),
            )
        ]
    if name == "code":
        return [Node(kind=NodeKind.INLINE_CODE, value=tag.get_text())]
    if name == "img":
        return [Node(kind=NodeKind.IMAGE, url=tag.get("src"), title=tag.get("title"), value=tag.get("alt"))]
    if name == "br":
        return [Node.text("\n")]
    if name == "span":
        return _inline_children(tag)
    return [Node(kind=NodeKind.HTML, value=str(tag))]


def _merge_text(nodes: list[Node]) -> list[Node]:
    merged: list[Node] = []
    for node in nodes:
        if node.kind == NodeKind.TEXT and merged and merged[-1].kind == NodeKind.TEXT:
            merged[-1].value = (merged[-1].value or "") + (node.value or "")
        else:
            merged.append(node)
    return merged


def _trim_run(nodes: list[Node]) -> list[Node]:
    """Strip the whitespace HTML layout leaves around a bare inline run."""
    if nodes and nodes[0].kind == NodeKind.TEXT:
        nodes[0].value = (nodes[0].value or "").lstrip()
    if nodes and nodes[-1].kind == NodeKind.TEXT:
        nodes[-1].value = (nodes[-1].value or "").rstrip()
    return [node for node in nodes if not (node.kind == NodeKind.TEXT and not node.value)]


def _is_blank_text(node: Node) -> bool:
    return node.kind == NodeKind.TEXT and not (node.value or "").strip()
