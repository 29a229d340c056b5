"""Run validation and transformation requests."""

from __future__ import annotations

from mdd.exceptions import MddError
from mdd.pipeline import ProcessingOptions, process_document
from mdd.schemas import ValidationReport
from mdd.utils.logging_config import get_logger
from mdd.validator import ValidationOptions, validate_document
from server.models import ErrorResponse, TransformRequest, TransformResponse, TransformSuccessResponse, ValidateRequest

logger = get_logger(__name__)


def run_validation(request: ValidateRequest) -> ValidationReport | ErrorResponse:
    """Validate the request content.

    Parameters
    ----------
    request : ValidateRequest
        Content and check toggles.

    Returns
    -------
    ValidationReport | ErrorResponse
        The report, or an error when the validator could not run.

    """
    options = ValidationOptions(
        check_frontmatter=request.check_frontmatter,
        check_directives=request.check_directives,
        check_type_requirements=request.check_type_requirements,
        check_semantic_classes=request.check_semantic_classes,
        check_references=request.check_references,
        strict=request.strict,
    )
    try:
        report = validate_document(request.content, options)
    except MddError as exc:
        logger.error("Validation failed", extra={"error": str(exc)})
        return ErrorResponse(error=str(exc))

    logger.info(
        "Validation completed",
        extra={"valid": report.valid, "errors": len(report.errors), "warnings": len(report.warnings)},
    )
    return report


def run_transform(request: TransformRequest) -> TransformResponse:
    """Parse and transform the request content.

    Parameters
    ----------
    request : TransformRequest
        Content, source path and formatting toggle.

    Returns
    -------
    TransformResponse
        The transformed tree, or an error when parsing failed.

    """
    options = ProcessingOptions(apply_formatting=request.apply_formatting)
    try:
        processed = process_document(request.content, path=request.path, options=options)
    except MddError as exc:
        logger.error("Transform failed", extra={"path": request.path, "error": str(exc)})
        return ErrorResponse(error=str(exc))

    return TransformSuccessResponse(
        tree=processed.tree,
        markers=processed.markers,
        references=processed.references,
    )
