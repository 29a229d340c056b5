"""Processing pipeline for MDD source -> transformed document tree."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from mdd.config import MDD_FILE_EXTENSION, MDD_LONG_PARAGRAPH_THRESHOLD
from mdd.exceptions import MissingInputError
from mdd.formatting import apply_text_formatting, extract_references
from mdd.schemas import ProcessedDocument
from mdd.transform import apply_document_structure, is_mdd_document
from mdd.tree_builder import build_tree
from mdd.validator import DocumentValidator, ValidationOptions

logger = logging.getLogger(__name__)


@dataclass
class ProcessingOptions:
    """Options for document processing.

    Attributes:
        apply_structure: If True, rewrite directives and semantic classes.
        apply_formatting: If True, run the inline, heading and paragraph passes.
        validate: If True, attach a validation report of the raw source.
        validation: Checks to run when ``validate`` is set.
        long_paragraph_threshold: Character count above which a paragraph
            is classed as ``long-paragraph``.
    """

    apply_structure: bool = True
    apply_formatting: bool = True
    validate: bool = False
    validation: ValidationOptions = field(default_factory=ValidationOptions)
    long_paragraph_threshold: int = MDD_LONG_PARAGRAPH_THRESHOLD


def process_document(
    source: str,
    *,
    path: str | None = None,
    options: ProcessingOptions | None = None,
    validator: DocumentValidator | None = None,
) -> ProcessedDocument:
    """Parse, transform and optionally validate one document.

    Structure runs before formatting; validation reads the untouched source.
    Documents whose ``path`` lacks the MDD extension are parsed but not
    transformed.

    Args:
        source: Raw document text.
        path: Source identifier, usually the file name.
        options: Processing options. Uses defaults if None.
        validator: Validator to use instead of the shared default.

    Returns:
        The processed tree with its structural markers, remaining
        cross-references and, when requested, the validation report.

    Raises:
        MissingInputError: If ``source`` is None.
        ParseError: If the source cannot be parsed.
    """
    if source is None:
        raise MissingInputError("Document source is required")
    opts = options or ProcessingOptions()

    report = None
    if opts.validate:
        report = (validator or DocumentValidator()).validate(source, opts.validation)

    tree = build_tree(source, path=path)
    if not is_mdd_document(path):
        logger.info(
            "Skipping MDD passes",
            extra={"path": path, "expected_extension": MDD_FILE_EXTENSION},
        )
        return ProcessedDocument(tree=tree, report=report)

    markers = apply_document_structure(tree) if opts.apply_structure else []
    references = extract_references(tree)
    if opts.apply_formatting:
        apply_text_formatting(tree, opts.long_paragraph_threshold)

    logger.info(
        "Processed document",
        extra={"path": path, "markers": len(markers), "references": len(references)},
    )
    return ProcessedDocument(tree=tree, markers=markers, references=references, report=report)
