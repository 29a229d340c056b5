"""Tests for rewriting directives into structural markers."""

from __future__ import annotations

import pytest

from mdd.exceptions import MissingInputError
from mdd.patterns import DirectiveKind
from mdd.schemas import DocumentTree, Node, NodeKind, node_text
from mdd.transform import (
    apply_document_structure,
    apply_semantic_classes,
    is_mdd_document,
    transform_directives,
)


def _kinds(tree: DocumentTree) -> list[NodeKind]:
    return [node.kind for node in tree.children]


class TestTransformDirectives:
    """Tests for transform_directives and apply_document_structure."""

    def test_same_container_letterhead(self) -> None:
        """The letterhead paragraph becomes one marker and the heading stays."""
        tree = DocumentTree(
            path="letter.mdd",
            children=[Node.paragraph("::letterhead\nAcme Corp\n::"), Node.heading(1, "Title")],
        )
        markers = apply_document_structure(tree)

        assert len(markers) == 1
        marker = tree.children[0]
        assert marker is markers[0]
        assert marker.kind == NodeKind.STRUCTURAL_MARKER
        assert marker.directive == DirectiveKind.LETTERHEAD
        assert marker.content == "Acme Corp"
        assert marker.value == "\\begin{letterhead}\nAcme Corp\n\\end{letterhead}"
        assert _kinds(tree) == [NodeKind.STRUCTURAL_MARKER, NodeKind.HEADING]

    def test_multi_paragraph_content_joined_with_blank_line(self, paragraphs_tree) -> None:
        """Intervening paragraphs are joined and removed with the close."""
        tree = paragraphs_tree("::signature-block", "Jane Doe", "Chief Executive", "::", "After")
        transform_directives(tree)

        assert _kinds(tree) == [NodeKind.STRUCTURAL_MARKER, NodeKind.PARAGRAPH]
        assert tree.children[0].content == "Jane Doe\n\nChief Executive"
        assert tree.children[0].value.startswith("\\begin{signature}")
        assert node_text(tree.children[1]) == "After"

    def test_lines_around_markers_are_kept(self, paragraphs_tree) -> None:
        """Text after the open line and before the close line is content."""
        tree = paragraphs_tree("::contact-info\nphone: 555-0100", "email: info@acme.test\n::")
        transform_directives(tree)

        assert len(tree.children) == 1
        assert tree.children[0].content == "phone: 555-0100\n\nemail: info@acme.test"
        assert tree.children[0].value.startswith("\\begin{contactinfo}")

    def test_container_count_drops_by_consumed_span(self, paragraphs_tree) -> None:
        """N paired directives leave one marker each and no marker text."""
        tree = paragraphs_tree(
            "::header\nACME Ltd\n::",
            "Intro",
            "::footer",
            "Page 1",
            "::",
            "::page-break::",
            "Outro",
        )
        before = len(tree.children)
        markers = transform_directives(tree)

        assert len(markers) == 3
        assert len(tree.children) == before - 2
        for node in tree.children:
            if node.kind == NodeKind.PARAGRAPH:
                assert "::" not in node_text(node)

    def test_page_break_is_bare_marker(self, paragraphs_tree) -> None:
        """A page break becomes ``\\newpage`` with no content."""
        tree = paragraphs_tree("Before", "::page-break::", "After")
        transform_directives(tree)

        marker = tree.children[1]
        assert marker.directive == DirectiveKind.PAGE_BREAK
        assert marker.value == "\\newpage"
        assert marker.content is None

    def test_block_section_break_keeps_inner_text(self, paragraphs_tree) -> None:
        """The ``:::`` fence is dropped and inner text follows the marker."""
        tree = paragraphs_tree("::: section-break", "Part two", ":::", "Tail")
        transform_directives(tree)

        assert _kinds(tree) == [NodeKind.STRUCTURAL_MARKER, NodeKind.PARAGRAPH, NodeKind.PARAGRAPH]
        assert tree.children[0].value == "\\sectionbreak"
        assert [node_text(node) for node in tree.children[1:]] == ["Part two", "Tail"]

    def test_single_paragraph_section_break(self, paragraphs_tree) -> None:
        """Lines inside a one-paragraph section break become a paragraph."""
        tree = paragraphs_tree("::: section-break\nPart two\n:::")
        transform_directives(tree)

        assert _kinds(tree) == [NodeKind.STRUCTURAL_MARKER, NodeKind.PARAGRAPH]
        assert node_text(tree.children[1]) == "Part two"

    def test_unterminated_directive_left_untouched(self, paragraphs_tree) -> None:
        """An unterminated span is not guessed at."""
        tree = paragraphs_tree("::letterhead", "Acme Corp")
        before = tree.model_dump()

        assert transform_directives(tree) == []
        assert tree.model_dump() == before

    def test_nested_directives_left_untouched(self, paragraphs_tree) -> None:
        """Both sides of a nesting violation stay as written."""
        tree = paragraphs_tree("::letterhead", "::footer\nPage\n::", "::")
        before = tree.model_dump()

        assert transform_directives(tree) == []
        assert tree.model_dump() == before

    def test_second_run_is_a_no_op(self, paragraphs_tree) -> None:
        """Structural markers are never matched again."""
        tree = paragraphs_tree("::header\nACME\n::", "Body", "::page-break::", "::: section-break :::")
        apply_document_structure(tree)
        once = tree.model_dump()

        assert apply_document_structure(tree) == []
        assert tree.model_dump() == once

    def test_directive_inside_blockquote(self) -> None:
        """Directives are rewritten inside nested block containers."""
        quote = Node(kind=NodeKind.BLOCKQUOTE, children=[Node.paragraph("::footer\nPage 1\n::")])
        tree = DocumentTree(path="memo.mdd", children=[quote])
        transform_directives(tree)

        assert quote.children[0].kind == NodeKind.STRUCTURAL_MARKER
        assert quote.children[0].content == "Page 1"


class TestExtensionGate:
    """Tests for the MDD extension gate."""

    def test_non_mdd_document_untouched(self, paragraphs_tree) -> None:
        """Plain markdown keeps its directive-like text."""
        tree = paragraphs_tree("::letterhead\nAcme\n::", path="notes.md")
        before = tree.model_dump()

        assert apply_document_structure(tree) == []
        assert tree.model_dump() == before

    def test_is_mdd_document(self) -> None:
        """Only paths ending in the configured extension qualify."""
        assert is_mdd_document("contract.mdd")
        assert not is_mdd_document("contract.md")
        assert not is_mdd_document(None)

    def test_missing_tree_raises(self) -> None:
        """A missing tree is the one fatal input error."""
        with pytest.raises(MissingInputError):
            apply_document_structure(None)


class TestSemanticClasses:
    """Tests for apply_semantic_classes."""

    def test_heading_class(self) -> None:
        """A heading's trailing token moves into its annotations."""
        heading = Node.heading(1, "Service Agreement {.contract-title}")
        tree = DocumentTree(path="a.mdd", children=[heading])
        apply_semantic_classes(tree)

        assert heading.annotations["class"] == "contract-title"
        assert heading.children[0].value == "Service Agreement"

    def test_paragraph_class_uses_last_text_child(self) -> None:
        """A paragraph's token is read from its last text child."""
        paragraph = Node(
            kind=NodeKind.PARAGRAPH,
            children=[
                Node(kind=NodeKind.STRONG, children=[Node.text("WHEREAS")]),
                Node.text(" the parties agree {.legal-clause}"),
            ],
        )
        tree = DocumentTree(path="a.mdd", children=[paragraph])
        apply_semantic_classes(tree)

        assert paragraph.annotations["class"] == "legal-clause"
        assert paragraph.children[-1].value == " the parties agree"

    def test_text_without_token_unchanged(self) -> None:
        """Paragraphs without a token get no class."""
        paragraph = Node.paragraph("Nothing to see {here}")
        apply_semantic_classes(DocumentTree(path="a.mdd", children=[paragraph]))

        assert "class" not in paragraph.annotations
        assert paragraph.children[0].value == "Nothing to see {here}"
