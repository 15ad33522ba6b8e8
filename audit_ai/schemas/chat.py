"""Project chat assistant schemas."""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class ChatRequest(BaseModel):
    """Question sent to the project assistant."""

    question: str = Field(..., max_length=4000, description="Free-text question; blank questions are rejected with 400")


class ChatAnswer(BaseModel):
    """Answer generated for one question."""

    answer: str
    chat_id: Optional[UUID] = Field(
        None, description="Persisted turn id; None when the history write failed"
    )
    context_documents: List[UUID] = Field(default_factory=list)
    context_document_count: int = 0


class ChatTurnResponse(BaseModel):
    """Stored question/answer exchange."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    project_id: UUID
    user_id: Optional[UUID] = None
    question: str
    answer: str
    context_documents: List[UUID] = Field(default_factory=list)
    created_at: Optional[datetime] = None


class ChatHistoryResponse(BaseModel):
    """Chronological chat history of a project."""

    total: int
    messages: List[ChatTurnResponse]


class SuggestedQuestionsResponse(BaseModel):
    """Canned starter questions tailored to a project's analyses."""

    suggested_questions: List[str]
