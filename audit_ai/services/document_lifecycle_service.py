"""Document analysis lifecycle: uploaded -> processing -> analyzed | error.

This is the only place that writes ``documents.status``. It guarantees that a
document is ``analyzed`` exactly when one AnalysisResult exists for it, and
that a finished request never leaves the document in ``processing``.
"""

from uuid import UUID

from sqlalchemy.exc import IntegrityError

from audit_ai.core.config import AnalysisSettings
from audit_ai.core.exceptions import (
    AnalysisFailedError,
    AnalysisInProgressError,
    DatabaseError,
    DocumentNotFoundError,
    NotFoundError,
    ValidationError,
)
from audit_ai.database.models import AnalysisResult, Document, DocumentStatus
from audit_ai.repositories.analysis_repository import AnalysisRepository
from audit_ai.repositories.document_repository import DocumentRepository
from audit_ai.schemas.analysis import AnalysisRequestResult, AnalysisResponse
from audit_ai.services.access_service import ensure_project_access
from audit_ai.services.analysis.analysis_orchestrator import AnalysisOrchestrator
from audit_ai.services.base_service import BaseService
from audit_ai.utils.logging import get_logger

LOGGER = get_logger(__name__)


class DocumentLifecycleManager(BaseService):
    """Owns the per-document analysis state machine."""

    def __init__(
        self,
        document_repository: DocumentRepository,
        analysis_repository: AnalysisRepository,
        orchestrator: AnalysisOrchestrator,
        analysis_settings: AnalysisSettings,
    ):
        super().__init__()
        self.documents = document_repository
        self.analyses = analysis_repository
        self.orchestrator = orchestrator
        self.settings = analysis_settings

    async def request_analysis(self, document_id: UUID, requester_id: UUID) -> AnalysisRequestResult:
        """Analyze a document, or return its existing analysis.

        Args:
            document_id: Document to analyze
            requester_id: Internal id of the requesting user

        Returns:
            The analysis and whether it was reused

        Raises:
            DocumentNotFoundError: Unknown document
            AccessDeniedError: Requester may not use the document's project
            ValidationError: Document has no storage locator
            AnalysisInProgressError: Another request holds the processing claim
            AnalysisFailedError: The pipeline failed; status is now ``error``
            DatabaseError: The result could not be persisted
        """
        return await self.execute(document_id, requester_id)

    async def run(self, document_id: UUID, requester_id: UUID) -> AnalysisRequestResult:
        document = await self._load_accessible_document(document_id, requester_id)

        existing = await self.analyses.get_by_document_id(document_id)
        if existing is not None:
            LOGGER.info("Analysis already exists, returning stored result", extra={"document_id": str(document_id)})
            return self._reused(existing)

        if not document.file_path:
            raise ValidationError(f"Document {document_id} has no storage location")

        claimed = await self.documents.claim_for_processing(
            document_id, self.settings.stale_processing_seconds
        )
        if not claimed:
            raise AnalysisInProgressError(f"Document {document_id} is already being analyzed")

        # A concurrent request may have finished between the lookup and the claim
        existing = await self.analyses.get_by_document_id(document_id)
        if existing is not None:
            await self.documents.set_status(document_id, DocumentStatus.ANALYZED)
            return self._reused(existing)

        LOGGER.info("Starting document analysis", extra={"document_id": str(document_id)})

        try:
            outcome = await self.orchestrator.run(document.file_path)
        except Exception as e:
            LOGGER.error(
                f"Analysis pipeline failed for document {document_id}: {e}",
                exc_info=True,
                extra={"document_id": str(document_id)},
            )
            await self._mark_error(document_id)
            raise AnalysisFailedError(f"Analysis failed for document {document_id}", original_error=e) from e

        try:
            result = await self.analyses.add_outcome(document_id, outcome)
            await self.documents.set_status(document_id, DocumentStatus.ANALYZED, commit=False)
            await self.analyses.commit()
        except IntegrityError as e:
            await self._rollback()
            try:
                winner = await self.analyses.get_by_document_id(document_id)
            except Exception as lookup_error:
                LOGGER.error(f"Could not load the stored analysis after a conflict: {lookup_error}", exc_info=True)
                winner = None
            if winner is not None:
                LOGGER.info("Lost the result insert race, returning stored result", extra={"document_id": str(document_id)})
                await self.documents.set_status(document_id, DocumentStatus.ANALYZED)
                return self._reused(winner)
            await self._mark_error(document_id)
            raise DatabaseError(f"Failed to store analysis for document {document_id}", original_error=e) from e
        except Exception as e:
            LOGGER.error(f"Failed to store analysis for document {document_id}: {e}", exc_info=True)
            await self._rollback()
            await self._mark_error(document_id)
            raise DatabaseError(f"Failed to store analysis for document {document_id}", original_error=e) from e

        LOGGER.info(
            "Document analyzed",
            extra={
                "document_id": str(document_id),
                "confidence_score": outcome.confidence_score,
                "processing_time_ms": outcome.processing_time_ms,
                "summary_degraded": outcome.summary_degraded,
            },
        )
        return AnalysisRequestResult(analysis=AnalysisResponse.model_validate(result), reused=False)

    async def get_analysis(self, document_id: UUID, requester_id: UUID) -> AnalysisResponse:
        """Return the stored analysis of a document.

        Raises:
            DocumentNotFoundError: Unknown document
            AccessDeniedError: Requester may not use the document's project
            NotFoundError: The document has not been analyzed yet
        """
        await self._load_accessible_document(document_id, requester_id)
        result = await self.analyses.get_by_document_id(document_id)
        if result is None:
            raise NotFoundError(f"No analysis found for document {document_id}")
        return AnalysisResponse.model_validate(result)

    async def _load_accessible_document(self, document_id: UUID, requester_id: UUID) -> Document:
        document = await self.documents.get_with_project(document_id)
        if document is None:
            raise DocumentNotFoundError(f"Document {document_id} not found")
        ensure_project_access(document.project, requester_id)
        return document

    async def _rollback(self) -> None:
        try:
            await self.analyses.rollback()
        except Exception as e:
            LOGGER.error(f"Rollback after failed analysis write failed: {e}", exc_info=True)

    async def _mark_error(self, document_id: UUID) -> None:
        """Best-effort ``error`` status; the caller is already raising."""
        try:
            await self.documents.set_status(document_id, DocumentStatus.ERROR)
        except Exception as e:
            LOGGER.error(
                f"Could not mark document {document_id} as error: {e}",
                exc_info=True,
                extra={"document_id": str(document_id)},
            )

    @staticmethod
    def _reused(result: AnalysisResult) -> AnalysisRequestResult:
        return AnalysisRequestResult(analysis=AnalysisResponse.model_validate(result), reused=True)
