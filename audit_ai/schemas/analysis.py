"""Analysis pipeline schemas."""

from datetime import datetime
from typing import Any, Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from audit_ai.schemas.extraction import ExtractedData


class AnalysisOutcome(BaseModel):
    """Everything the orchestrator computes for one document, before persistence."""

    extracted_data: ExtractedData
    ai_summary: str
    confidence_score: float = Field(..., ge=0.0, le=1.0)
    red_flags: List[str] = Field(default_factory=list)
    highlights: List[str] = Field(default_factory=list, max_length=5)
    processing_time_ms: int = Field(..., ge=0)
    summary_degraded: bool = Field(
        default=False, description="True when the fallback summary was substituted"
    )


class AnalysisResponse(BaseModel):
    """Persisted analysis result as returned by the API."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    document_id: UUID
    extracted_data: Dict[str, Any]
    ai_summary: str
    red_flags: List[str]
    highlights: List[str]
    confidence_score: float
    processing_time_ms: int
    created_at: Optional[datetime] = None


class AnalysisRequestResult(BaseModel):
    """Result of ``request_analysis``: the analysis plus whether it was reused."""

    analysis: AnalysisResponse
    reused: bool = False
