"""Document-type requirement and vocabulary models."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from mdd.patterns import DirectiveKind


class DocumentTypeRequirements(BaseModel):
    """What a single document type must and should contain."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    required_directives: list[DirectiveKind] = Field(default_factory=list, alias="requiredDirectives")
    recommended_directives: list[DirectiveKind] = Field(default_factory=list, alias="recommendedDirectives")
    required_metadata: list[str] = Field(default_factory=list, alias="requiredMetadata")
    recommended_metadata: list[str] = Field(default_factory=list, alias="recommendedMetadata")
    max_directive_occurrences: dict[DirectiveKind, int] = Field(
        default_factory=dict, alias="maxDirectiveOccurrences"
    )


class RequirementsTable(BaseModel):
    """Per-type requirements keyed by document-type identifier."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    document_types: dict[str, DocumentTypeRequirements] = Field(default_factory=dict, alias="documentTypes")

    def for_type(self, document_type: str) -> DocumentTypeRequirements | None:
        return self.document_types.get(document_type)


class Vocabulary(BaseModel):
    """Enumerated values accepted in frontmatter and class annotations."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    document_types: frozenset[str] = Field(alias="documentTypes")
    statuses: frozenset[str]
    semantic_classes: frozenset[str] = Field(alias="semanticClasses")
