from typing import List
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from audit_ai.database.models import ChatTurn
from audit_ai.repositories.base_repository import BaseRepository
from audit_ai.utils.logging import get_logger

LOGGER = get_logger(__name__)


class ChatRepository(BaseRepository[ChatTurn]):
    """Repository for the append-only chat history."""

    def __init__(self, session: AsyncSession):
        super().__init__(session, ChatTurn)

    async def get_recent(self, project_id: UUID, limit: int) -> List[ChatTurn]:
        """Most recent turns of a project, newest first.

        Args:
            project_id: Project ID
            limit: Maximum number of turns

        Returns:
            Up to ``limit`` ChatTurn rows
        """
        try:
            query = (
                select(ChatTurn)
                .where(ChatTurn.project_id == project_id)
                .order_by(ChatTurn.created_at.desc())
                .limit(limit)
            )
            result = await self.session.execute(query)
            return list(result.scalars().all())
        except SQLAlchemyError as e:
            LOGGER.error(f"Error loading chat history for project {project_id}: {e}", exc_info=True)
            raise

    async def get_history(self, project_id: UUID, limit: int = 50) -> List[ChatTurn]:
        """The latest ``limit`` turns in chronological order."""
        turns = await self.get_recent(project_id, limit)
        turns.reverse()
        return turns
