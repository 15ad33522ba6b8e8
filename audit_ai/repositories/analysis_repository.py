from typing import Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from audit_ai.database.models import AnalysisResult
from audit_ai.repositories.base_repository import BaseRepository
from audit_ai.schemas.analysis import AnalysisOutcome
from audit_ai.utils.logging import get_logger

LOGGER = get_logger(__name__)


class AnalysisRepository(BaseRepository[AnalysisResult]):
    """Repository for write-once AnalysisResult rows."""

    def __init__(self, session: AsyncSession):
        super().__init__(session, AnalysisResult)

    async def get_by_document_id(self, document_id: UUID) -> Optional[AnalysisResult]:
        try:
            query = select(AnalysisResult).where(AnalysisResult.document_id == document_id)
            result = await self.session.execute(query)
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            LOGGER.error(f"Error loading analysis for document {document_id}: {e}", exc_info=True)
            raise

    async def add_outcome(self, document_id: UUID, outcome: AnalysisOutcome) -> AnalysisResult:
        """Stage an AnalysisResult for ``outcome`` without committing.

        The caller commits together with the document status change.
        """
        return await self.create(
            commit=False,
            document_id=document_id,
            extracted_data=outcome.extracted_data.to_storage(),
            ai_summary=outcome.ai_summary,
            red_flags=list(outcome.red_flags),
            highlights=list(outcome.highlights),
            confidence_score=outcome.confidence_score,
            processing_time_ms=outcome.processing_time_ms,
        )
