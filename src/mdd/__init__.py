"""mdd: semantic business-document directives for markdown."""

from mdd.directives import DirectiveSpan, find_directive_issues, has_document_structure, match_directives
from mdd.exceptions import ConfigurationError, MddError, MissingInputError, ParseError
from mdd.formatting import SectionCounter, apply_text_formatting, format_text_run
from mdd.patterns import DirectiveKind
from mdd.pipeline import ProcessingOptions, process_document
from mdd.schemas import DocumentTree, Node, NodeKind, ProcessedDocument, ValidationReport
from mdd.transform import apply_document_structure, transform_directives
from mdd.tree_builder import build_tree
from mdd.validator import DocumentValidator, ValidationOptions, validate_document

__all__ = [
    "ConfigurationError",
    "DirectiveKind",
    "DirectiveSpan",
    "DocumentTree",
    "DocumentValidator",
    "MddError",
    "MissingInputError",
    "Node",
    "NodeKind",
    "ParseError",
    "ProcessedDocument",
    "ProcessingOptions",
    "SectionCounter",
    "ValidationOptions",
    "ValidationReport",
    "apply_document_structure",
    "apply_text_formatting",
    "build_tree",
    "find_directive_issues",
    "format_text_run",
    "has_document_structure",
    "match_directives",
    "process_document",
    "transform_directives",
    "validate_document",
]
