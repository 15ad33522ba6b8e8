"""Document analysis endpoints."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Request

from audit_ai.core.auth import get_current_user
from audit_ai.dependencies import get_document_lifecycle_manager, get_user_service
from audit_ai.schemas.auth import CurrentUser
from audit_ai.schemas.responses import ApiResponse
from audit_ai.services.document_lifecycle_service import DocumentLifecycleManager
from audit_ai.services.user_service import UserService
from audit_ai.utils.logging import get_logger
from audit_ai.utils.responses import create_api_response

LOGGER = get_logger(__name__)

router = APIRouter()


@router.post(
    "/{document_id}",
    response_model=ApiResponse,
    summary="Analyze a document",
    description="Run extraction, AI summary, scoring and insights for a document, "
                "or return the stored analysis if one exists",
    operation_id="analyze_document",
)
async def analyze_document(
    request: Request,
    document_id: UUID,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    user_service: Annotated[UserService, Depends(get_user_service)],
    lifecycle: Annotated[DocumentLifecycleManager, Depends(get_document_lifecycle_manager)],
) -> ApiResponse:
    user = await user_service.get_or_create_user_from_jwt(current_user)
    LOGGER.info("Analysis requested", extra={"document_id": str(document_id), "user_id": str(user.id)})

    result = await lifecycle.request_analysis(document_id, user.id)

    return create_api_response(
        data={
            "analysis": result.analysis.model_dump(mode="json"),
            "reused": result.reused,
        },
        message="Analysis already exists" if result.reused else "Document analyzed successfully",
        request=request,
    )


@router.get(
    "/{document_id}",
    response_model=ApiResponse,
    summary="Get document analysis",
    operation_id="get_document_analysis",
)
async def get_document_analysis(
    request: Request,
    document_id: UUID,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    user_service: Annotated[UserService, Depends(get_user_service)],
    lifecycle: Annotated[DocumentLifecycleManager, Depends(get_document_lifecycle_manager)],
) -> ApiResponse:
    """Return the stored analysis; 404 until the document has been analyzed."""
    user = await user_service.get_or_create_user_from_jwt(current_user)
    analysis = await lifecycle.get_analysis(document_id, user.id)

    return create_api_response(
        data={"analysis": analysis.model_dump(mode="json")},
        message="Analysis retrieved successfully",
        request=request,
    )
