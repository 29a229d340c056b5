"""Validate and transform endpoints for the API."""

from __future__ import annotations

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from mdd.schemas import ValidationReport
from server.document_processor import run_transform, run_validation
from server.models import ErrorResponse, TransformRequest, TransformSuccessResponse, ValidateRequest

router = APIRouter()

COMMON_DOCUMENT_RESPONSES: dict[int | str, dict] = {
    status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse, "description": "Document could not be processed"},
}


@router.post(
    "/api/validate",
    responses={status.HTTP_200_OK: {"model": ValidationReport}, **COMMON_DOCUMENT_RESPONSES},
)
def api_validate(validate_request: ValidateRequest) -> JSONResponse:
    """Validate an MDD document.

    **Checks frontmatter, directive structure, document-type requirements and
    semantic classes** and returns the full validation report. An invalid
    document is still a successful request; inspect ``valid`` in the body.

    **Parameters**

    - **validate_request** (`ValidateRequest`): content and check toggles

    **Returns**

    - **JSONResponse**: the validation report, or an error body with status 400

    """
    result = run_validation(validate_request)
    if isinstance(result, ErrorResponse):
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=result.model_dump())
    return JSONResponse(status_code=status.HTTP_200_OK, content=result.model_dump(mode="json"))


@router.post(
    "/api/transform",
    responses={status.HTTP_200_OK: {"model": TransformSuccessResponse}, **COMMON_DOCUMENT_RESPONSES},
)
def api_transform(transform_request: TransformRequest) -> JSONResponse:
    """Transform an MDD document into its structured tree.

    **Parameters**

    - **transform_request** (`TransformRequest`): content, path and formatting toggle

    **Returns**

    - **JSONResponse**: the transformed tree, or an error body with status 400

    """
    result = run_transform(transform_request)
    if isinstance(result, ErrorResponse):
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=result.model_dump())
    return JSONResponse(
        status_code=status.HTTP_200_OK,
        content=result.model_dump(mode="json", exclude_defaults=True),
    )
