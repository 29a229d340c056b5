"""Processing output model."""

from __future__ import annotations

from pydantic import BaseModel, Field

from mdd.schemas.tree import DocumentTree, Node
from mdd.schemas.validation import ValidationReport


class ProcessedDocument(BaseModel):
    """Final processing output."""

    tree: DocumentTree
    markers: list[Node] = Field(default_factory=list)
    references: list[dict[str, str]] = Field(default_factory=list)
    report: ValidationReport | None = None
