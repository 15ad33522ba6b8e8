from sqlalchemy.ext.asyncio import AsyncSession

from audit_ai.database.models import Project
from audit_ai.repositories.base_repository import BaseRepository


class ProjectRepository(BaseRepository[Project]):
    """Read access to Project rows; projects are managed elsewhere."""

    def __init__(self, session: AsyncSession):
        super().__init__(session, Project)
