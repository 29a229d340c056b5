"""Shared schemas for mdd."""

from mdd.schemas.processing import ProcessedDocument
from mdd.schemas.requirements import DocumentTypeRequirements, RequirementsTable, Vocabulary
from mdd.schemas.tree import DocumentTree, Node, NodeKind, node_text
from mdd.schemas.validation import (
    DirectiveOccurrence,
    IssueCode,
    IssueLocation,
    Severity,
    ValidationIssue,
    ValidationReport,
)

__all__ = [
    "DirectiveOccurrence",
    "DocumentTree",
    "DocumentTypeRequirements",
    "IssueCode",
    "IssueLocation",
    "Node",
    "NodeKind",
    "ProcessedDocument",
    "RequirementsTable",
    "Severity",
    "ValidationIssue",
    "ValidationReport",
    "Vocabulary",
    "node_text",
]
