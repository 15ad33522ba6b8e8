"""Project chat assistant endpoints."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request

from audit_ai.core.auth import get_current_user
from audit_ai.dependencies import get_chat_context_builder, get_user_service
from audit_ai.schemas.auth import CurrentUser
from audit_ai.schemas.chat import ChatAnswer, ChatRequest, SuggestedQuestionsResponse
from audit_ai.schemas.responses import ApiResponse
from audit_ai.services.chat.chat_context_builder import ChatContextBuilder
from audit_ai.services.user_service import UserService
from audit_ai.utils.logging import get_logger
from audit_ai.utils.responses import create_api_response

LOGGER = get_logger(__name__)

router = APIRouter()


@router.post(
    "/{project_id}",
    response_model=ChatAnswer,
    summary="Ask the project assistant",
    operation_id="ask_project_assistant",
)
async def ask_question(
    project_id: UUID,
    body: ChatRequest,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    user_service: Annotated[UserService, Depends(get_user_service)],
    chat_builder: Annotated[ChatContextBuilder, Depends(get_chat_context_builder)],
) -> ChatAnswer:
    user = await user_service.get_or_create_user_from_jwt(current_user)
    LOGGER.info(
        "Assistant question received",
        extra={"project_id": str(project_id), "user_id": str(user.id), "question_length": len(body.question)},
    )
    return await chat_builder.ask(project_id, user.id, body.question)


@router.get(
    "/{project_id}/history",
    response_model=ApiResponse,
    summary="Get chat history",
    operation_id="get_chat_history",
)
async def get_chat_history(
    request: Request,
    project_id: UUID,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    user_service: Annotated[UserService, Depends(get_user_service)],
    chat_builder: Annotated[ChatContextBuilder, Depends(get_chat_context_builder)],
    limit: int = Query(50, ge=1, le=200),
) -> ApiResponse:
    """Chat history of a project, oldest first."""
    user = await user_service.get_or_create_user_from_jwt(current_user)
    history = await chat_builder.get_history(project_id, user.id, limit=limit)
    return create_api_response(
        data=history,
        message="Chat history retrieved successfully",
        request=request,
    )


@router.get(
    "/{project_id}/suggested-questions",
    response_model=SuggestedQuestionsResponse,
    summary="Get suggested questions",
    operation_id="get_suggested_questions",
)
async def get_suggested_questions(
    project_id: UUID,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    user_service: Annotated[UserService, Depends(get_user_service)],
    chat_builder: Annotated[ChatContextBuilder, Depends(get_chat_context_builder)],
) -> SuggestedQuestionsResponse:
    user = await user_service.get_or_create_user_from_jwt(current_user)
    questions = await chat_builder.suggested_questions(project_id, user.id)
    return SuggestedQuestionsResponse(suggested_questions=questions)
