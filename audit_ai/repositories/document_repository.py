from datetime import datetime, timedelta, timezone
from typing import List, Optional
from uuid import UUID

from sqlalchemy import or_, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from audit_ai.database.models import Document, DocumentStatus
from audit_ai.repositories.base_repository import BaseRepository
from audit_ai.utils.logging import get_logger

LOGGER = get_logger(__name__)


class DocumentRepository(BaseRepository[Document]):
    """Repository for Document records and their lifecycle status."""

    def __init__(self, session: AsyncSession):
        super().__init__(session, Document)

    async def get_with_project(self, document_id: UUID) -> Optional[Document]:
        """Load a document together with its owning project.

        Args:
            document_id: Document ID

        Returns:
            Document with ``project`` populated, or None
        """
        try:
            query = (
                select(Document)
                .options(selectinload(Document.project))
                .where(Document.id == document_id)
            )
            result = await self.session.execute(query)
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            LOGGER.error(f"Error loading document {document_id} with project: {e}", exc_info=True)
            raise

    async def claim_for_processing(self, document_id: UUID, stale_after_seconds: int) -> bool:
        """Atomically move a document to ``processing``.

        The update only applies when no other request holds the claim, or when
        the existing claim is older than ``stale_after_seconds``. Commits.

        Args:
            document_id: Document ID
            stale_after_seconds: Age after which a ``processing`` claim is abandoned

        Returns:
            True if this call now holds the claim
        """
        now = datetime.now(timezone.utc)
        stale_cutoff = now - timedelta(seconds=stale_after_seconds)

        stmt = (
            update(Document)
            .where(Document.id == document_id)
            .where(
                or_(
                    Document.status != DocumentStatus.PROCESSING.value,
                    Document.updated_at < stale_cutoff,
                )
            )
            .values(status=DocumentStatus.PROCESSING.value, updated_at=now)
            .returning(Document.id)
            .execution_options(synchronize_session=False)
        )

        try:
            result = await self.session.execute(stmt)
            claimed = result.scalar_one_or_none() is not None
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            LOGGER.error(f"Error claiming document {document_id}: {e}", exc_info=True)
            raise

        LOGGER.debug("Processing claim attempted", extra={"document_id": str(document_id), "claimed": claimed})
        return claimed

    async def set_status(self, document_id: UUID, status: DocumentStatus, commit: bool = True) -> None:
        """Write a lifecycle status.

        Args:
            document_id: Document ID
            status: New status
            commit: Commit immediately, or leave it to the caller's transaction
        """
        stmt = (
            update(Document)
            .where(Document.id == document_id)
            .values(status=status.value, updated_at=datetime.now(timezone.utc))
            .execution_options(synchronize_session=False)
        )
        try:
            await self.session.execute(stmt)
            if commit:
                await self.session.commit()
        except SQLAlchemyError as e:
            LOGGER.error(f"Error setting document {document_id} status to {status.value}: {e}", exc_info=True)
            raise

    async def list_analyzed_with_analysis(self, project_id: UUID) -> List[Document]:
        """Analyzed documents of a project with their analysis loaded, oldest first."""
        try:
            query = (
                select(Document)
                .options(selectinload(Document.analysis))
                .where(Document.project_id == project_id)
                .where(Document.status == DocumentStatus.ANALYZED.value)
                .order_by(Document.created_at)
            )
            result = await self.session.execute(query)
            return list(result.scalars().all())
        except SQLAlchemyError as e:
            LOGGER.error(f"Error listing analyzed documents for project {project_id}: {e}", exc_info=True)
            raise
