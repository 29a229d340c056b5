"""Pydantic models for the document API."""

from __future__ import annotations

from typing import Union

from pydantic import BaseModel, Field, field_validator

from mdd.schemas import DocumentTree, Node
from server.server_config import DEFAULT_DOCUMENT_PATH, MAX_CONTENT_SIZE


def _check_size(v: str) -> str:
    if len(v) > MAX_CONTENT_SIZE:
        err = f"content exceeds {MAX_CONTENT_SIZE} characters"
        raise ValueError(err)
    return v


class ValidateRequest(BaseModel):
    """Request model for the /api/validate endpoint.

    Attributes
    ----------
    content : str
        Raw MDD source text.
    strict : bool
        Treat warnings as failures.
    check_frontmatter, check_directives, check_type_requirements, check_semantic_classes, check_references : bool
        Toggle the individual checks.

    """

    content: str = Field(..., description="Raw MDD source text")
    strict: bool = Field(default=False, description="Treat warnings as failures")
    check_frontmatter: bool = Field(default=True, description="Validate frontmatter fields")
    check_directives: bool = Field(default=True, description="Validate directive structure")
    check_type_requirements: bool = Field(default=True, description="Validate document-type requirements")
    check_semantic_classes: bool = Field(default=True, description="Validate {.class} annotations")
    check_references: bool = Field(default=True, description="Validate @section-N cross-references")

    @field_validator("content")
    @classmethod
    def validate_content(cls, v: str) -> str:
        """Reject content above the configured size limit."""
        return _check_size(v)


class TransformRequest(BaseModel):
    """Request model for the /api/transform endpoint.

    Attributes
    ----------
    content : str
        Raw MDD source text.
    path : str
        Source identifier. Only paths with the MDD extension are transformed.
    apply_formatting : bool
        Run inline formatting, heading numbering and paragraph classes.

    """

    content: str = Field(..., description="Raw MDD source text")
    path: str = Field(default=DEFAULT_DOCUMENT_PATH, description="Source identifier")
    apply_formatting: bool = Field(default=True, description="Run inline formatting passes")

    @field_validator("content")
    @classmethod
    def validate_content(cls, v: str) -> str:
        """Reject content above the configured size limit."""
        return _check_size(v)

    @field_validator("path")
    @classmethod
    def validate_path(cls, v: str) -> str:
        """Validate that ``path`` is not empty."""
        if not v.strip():
            err = "path cannot be empty"
            raise ValueError(err)
        return v.strip()


class TransformSuccessResponse(BaseModel):
    """Success response model for the /api/transform endpoint."""

    tree: DocumentTree = Field(..., description="Transformed document tree")
    markers: list[Node] = Field(default_factory=list, description="Structural markers inserted")
    references: list[dict[str, str]] = Field(default_factory=list, description="Cross-references found")


class ErrorResponse(BaseModel):
    """Error response model for the document endpoints.

    Attributes
    ----------
    error : str
        Error message describing what went wrong.

    """

    error: str = Field(..., description="Error message")


TransformResponse = Union[TransformSuccessResponse, ErrorResponse]
