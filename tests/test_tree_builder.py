"""Tests for building document trees from MDD source."""

from __future__ import annotations

import pytest

from mdd.exceptions import MissingInputError
from mdd.schemas import NodeKind, node_text
from mdd.tree_builder import build_tree, build_tree_from_html, strip_frontmatter


class TestBuildTree:
    """Tests for build_tree."""

    def test_directive_and_heading(self) -> None:
        """Directive lines stay together in one paragraph."""
        tree = build_tree("::letterhead\nAcme Corp\n::\n\n# Title\n", path="letter.mdd")

        assert tree.path == "letter.mdd"
        assert [node.kind for node in tree.children] == [NodeKind.PARAGRAPH, NodeKind.HEADING]
        assert node_text(tree.children[0]) == "::letterhead\nAcme Corp\n::"
        assert tree.children[1].level == 1
        assert node_text(tree.children[1]) == "Title"

    def test_frontmatter_is_not_body(self) -> None:
        """The metadata block is removed before parsing."""
        tree = build_tree("---\ntitle: Memo\ndocument-type: memo\n---\nHello\n")

        assert len(tree.children) == 1
        assert node_text(tree.children[0]) == "Hello"

    def test_inline_elements(self) -> None:
        """Emphasis, strong, links and inline code get their own kinds."""
        tree = build_tree("Some *soft* and **hard** text with [a link](https://example.test) and `code`.\n")
        kinds = [node.kind for node in tree.children[0].children]

        assert NodeKind.EMPHASIS in kinds
        assert NodeKind.STRONG in kinds
        assert NodeKind.INLINE_CODE in kinds
        link = next(node for node in tree.children[0].children if node.kind == NodeKind.LINK)
        assert link.url == "https://example.test"
        assert node_text(link) == "a link"

    def test_tight_list_items_become_paragraphs(self) -> None:
        """Every list item holds paragraphs, even in a tight list."""
        tree = build_tree("- first\n- second\n")
        items = tree.children[0].children

        assert tree.children[0].kind == NodeKind.LIST
        assert [item.kind for item in items] == [NodeKind.LIST_ITEM, NodeKind.LIST_ITEM]
        assert items[0].children[0].kind == NodeKind.PARAGRAPH
        assert node_text(items[1]) == "second"

    def test_blockquote(self) -> None:
        """Blockquotes contain block children."""
        tree = build_tree("> ::footer\n> Page 1\n> ::\n")
        quote = tree.children[0]

        assert quote.kind == NodeKind.BLOCKQUOTE
        assert quote.children[0].kind == NodeKind.PARAGRAPH
        assert node_text(quote.children[0]) == "::footer\nPage 1\n::"

    def test_fenced_code(self) -> None:
        """Fenced code is a code block and keeps its language."""
        tree = build_tree("```python\nx = 1\n```\n")
        block = tree.children[0]

        assert block.kind == NodeKind.CODE_BLOCK
        assert block.value == "x = 1\n"
        assert block.annotations["language"] == "python"

    def test_thematic_break(self) -> None:
        """Horizontal rules map to thematic breaks."""
        tree = build_tree("Above\n\n***\n\nBelow\n")

        assert [node.kind for node in tree.children] == [
            NodeKind.PARAGRAPH,
            NodeKind.THEMATIC_BREAK,
            NodeKind.PARAGRAPH,
        ]

    def test_missing_source(self) -> None:
        """None is rejected."""
        with pytest.raises(MissingInputError):
            build_tree(None)


class TestBuildTreeFromHtml:
    """Tests for build_tree_from_html."""

    def test_unknown_blocks_kept_as_html(self) -> None:
        """Tables survive verbatim as html nodes."""
        tree = build_tree_from_html("<table><tr><td>x</td></tr></table>")

        assert tree.children[0].kind == NodeKind.HTML
        assert "<td>x</td>" in tree.children[0].value

    def test_line_breaks_join_text(self) -> None:
        """``<br>`` becomes a newline inside one text run."""
        tree = build_tree_from_html("<p>one<br/>two</p>")

        assert [node.kind for node in tree.children[0].children] == [NodeKind.TEXT]
        assert tree.children[0].children[0].value == "one\ntwo"

    def test_empty_document(self) -> None:
        """Empty HTML gives an empty tree."""
        assert build_tree_from_html("").children == []


class TestStripFrontmatter:
    """Tests for strip_frontmatter."""

    def test_without_fence(self) -> None:
        """Text without a fence is returned unchanged."""
        assert strip_frontmatter("# Title\n") == "# Title\n"
