"""Validation report models."""

from __future__ import annotations

from enum import Enum
from typing import Union

from pydantic import BaseModel, Field

from mdd.patterns import DirectiveKind

FrontmatterValue = Union[str, bool, list[str]]


class Severity(str, Enum):
    """Severity levels for validation issues."""

    ERROR = "error"
    WARNING = "warning"


class IssueCode(str, Enum):
    """Stable identifiers for every validation finding."""

    MISSING_FRONTMATTER = "MISSING_FRONTMATTER"
    MISSING_REQUIRED_FIELD = "MISSING_REQUIRED_FIELD"
    MISSING_RECOMMENDED_FIELD = "MISSING_RECOMMENDED_FIELD"
    INVALID_DATE_FORMAT = "INVALID_DATE_FORMAT"
    INVALID_DOCUMENT_TYPE = "INVALID_DOCUMENT_TYPE"
    INVALID_VERSION_FORMAT = "INVALID_VERSION_FORMAT"
    INVALID_STATUS = "INVALID_STATUS"
    INVALID_LANGUAGE_CODE = "INVALID_LANGUAGE_CODE"
    INVALID_CURRENCY_FORMAT = "INVALID_CURRENCY_FORMAT"
    MISSING_END_MARKER = "MISSING_END_MARKER"
    EMPTY_DIRECTIVE = "EMPTY_DIRECTIVE"
    INVALID_DIRECTIVE_NESTING = "INVALID_DIRECTIVE_NESTING"
    DUPLICATE_DIRECTIVE = "DUPLICATE_DIRECTIVE"
    MISSING_REQUIRED_DIRECTIVE = "MISSING_REQUIRED_DIRECTIVE"
    MISSING_RECOMMENDED_DIRECTIVE = "MISSING_RECOMMENDED_DIRECTIVE"
    ORPHANED_END_MARKER = "ORPHANED_END_MARKER"
    INVALID_SEMANTIC_CLASS = "INVALID_SEMANTIC_CLASS"
    UNKNOWN_SEMANTIC_CLASS = "UNKNOWN_SEMANTIC_CLASS"
    INVALID_REFERENCE = "INVALID_REFERENCE"


class IssueLocation(BaseModel):
    """Where in the document an issue was found. Lines and columns are 1-indexed."""

    line: int | None = None
    column: int | None = None
    directive: str | None = None
    field: str | None = None


class ValidationIssue(BaseModel):
    """A single error or warning."""

    severity: Severity
    code: IssueCode
    message: str
    location: IssueLocation = Field(default_factory=IssueLocation)
    suggestion: str | None = None


class DirectiveOccurrence(BaseModel):
    """A directive found by the line-based extractor."""

    kind: DirectiveKind
    content: str = ""
    start_line: int = Field(..., ge=1)
    has_end_marker: bool
    end_line: int | None = None
    nested_in: DirectiveKind | None = None


class ValidationReport(BaseModel):
    """Outcome of validating one document."""

    valid: bool
    errors: list[ValidationIssue] = Field(default_factory=list)
    warnings: list[ValidationIssue] = Field(default_factory=list)
    frontmatter: dict[str, FrontmatterValue] | None = None
    directives: list[DirectiveOccurrence] = Field(default_factory=list)
    directive_counts: dict[str, int] = Field(default_factory=dict)
