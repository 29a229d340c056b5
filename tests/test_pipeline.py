"""Tests for the end-to-end processing pipeline."""

from __future__ import annotations

import pytest

from mdd.exceptions import MissingInputError
from mdd.patterns import DirectiveKind
from mdd.pipeline import ProcessingOptions, process_document
from mdd.schemas import IssueCode, NodeKind, node_text
from mdd.validator import ValidationOptions

LETTER = "::letterhead\nAcme Corp\n::\n\n# Title\n"


@pytest.mark.integration
class TestProcessDocument:
    """Tests for process_document."""

    def test_letterhead_scenario(self) -> None:
        """One letterhead marker and a numbered heading come out."""
        processed = process_document(LETTER, path="letter.mdd")
        marker, heading = processed.tree.children

        assert marker.kind == NodeKind.STRUCTURAL_MARKER
        assert marker.directive == DirectiveKind.LETTERHEAD
        assert marker.content == "Acme Corp"
        assert heading.kind == NodeKind.HEADING
        assert node_text(heading) == "1 Title"
        assert heading.annotations["id"] == "section-1"
        assert processed.markers == [marker]

    def test_non_mdd_path_skips_passes(self) -> None:
        """Plain markdown is parsed but not transformed."""
        processed = process_document(LETTER, path="letter.md")

        assert processed.markers == []
        assert processed.tree.children[0].kind == NodeKind.PARAGRAPH
        assert node_text(processed.tree.children[1]) == "Title"

    def test_no_marker_text_remains(self) -> None:
        """Every paired directive is consumed from the tree."""
        source = (
            "::header\nACME Ltd\n::\n\n"
            "Body text.\n\n"
            "::page-break::\n\n"
            "::signature-block\n\nJane Doe\n\n::\n"
        )
        processed = process_document(source, path="contract.mdd")

        assert len(processed.markers) == 3
        for node in processed.tree.children:
            if node.kind != NodeKind.STRUCTURAL_MARKER:
                assert "::" not in node_text(node)
        assert processed.markers[2].content == "Jane Doe"

    def test_formatting_can_be_disabled(self) -> None:
        """Without formatting the heading keeps its text."""
        processed = process_document(LETTER, path="letter.mdd", options=ProcessingOptions(apply_formatting=False))

        assert node_text(processed.tree.children[1]) == "Title"

    def test_references_and_inline_formatting(self) -> None:
        """References are listed and rewritten into links."""
        processed = process_document("See @section-1 and x^2^.\n", path="notes.mdd")
        paragraph = processed.tree.children[0]

        assert processed.references == [{"type": "section", "number": "1", "id": "section-1"}]
        assert [node.kind for node in paragraph.children] == [
            NodeKind.TEXT,
            NodeKind.LINK,
            NodeKind.TEXT,
            NodeKind.SUPERSCRIPT,
            NodeKind.TEXT,
        ]

    def test_formatted_headings_are_numbered(self) -> None:
        """Headings that open with a quote or strong text keep their number and id."""
        processed = process_document('# "Scope" of Work\n\n## **Terms**\n', path="a.mdd")
        first, second = processed.tree.children

        assert node_text(first) == "1 Scope of Work"
        assert first.annotations["id"] == "section-1"
        assert node_text(second) == "1.1 Terms"
        assert second.annotations["id"] == "section-1-1"

    def test_directive_in_enclosed_blockquote_left_in_place(self) -> None:
        """A directive quoted inside another directive blocks both rewrites."""
        source = "::letterhead\n\n> ::footer\n> Page\n> ::\n\nAcme\n\n::\n"
        processed = process_document(source, path="letter.mdd", options=ProcessingOptions(apply_formatting=False))

        assert processed.markers == []
        assert [node.kind for node in processed.tree.children] == [
            NodeKind.PARAGRAPH,
            NodeKind.BLOCKQUOTE,
            NodeKind.PARAGRAPH,
            NodeKind.PARAGRAPH,
        ]

    def test_semantic_class_annotation(self) -> None:
        """Trailing class tokens end up in annotations."""
        processed = process_document("WHEREAS the parties agree {.legal-clause}\n", path="nda.mdd")
        paragraph = processed.tree.children[0]

        assert paragraph.annotations["class"] == "legal-clause"
        assert "{." not in node_text(paragraph)

    def test_validation_report_attached(self) -> None:
        """Validation runs on the raw source when requested."""
        options = ProcessingOptions(validate=True, validation=ValidationOptions(check_frontmatter=False))
        processed = process_document("::letterhead\nAcme\n", path="letter.mdd", options=options)

        assert processed.report is not None
        assert [issue.code for issue in processed.report.errors] == [IssueCode.MISSING_END_MARKER]
        assert processed.markers == []

    def test_missing_source(self) -> None:
        """None is rejected before parsing."""
        with pytest.raises(MissingInputError):
            process_document(None, path="a.mdd")
