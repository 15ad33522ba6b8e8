"""Maps authenticated Supabase identities onto local user rows."""

from sqlalchemy.ext.asyncio import AsyncSession

from audit_ai.database.models import User
from audit_ai.repositories.user_repository import UserRepository
from audit_ai.schemas.auth import CurrentUser
from audit_ai.utils.logging import get_logger

LOGGER = get_logger(__name__)


class UserService:
    """Service for user business logic operations."""

    def __init__(self, db_session: AsyncSession):
        self.repository = UserRepository(db_session)

    async def get_or_create_user_from_jwt(self, current_user: CurrentUser) -> User:
        """Get or create the local user for the JWT identity.

        Args:
            current_user: Current user from JWT claims

        Returns:
            User database instance (existing or newly created)
        """
        return await self.repository.get_or_create_from_supabase(
            supabase_user_id=current_user.id,
            email=current_user.email,
            full_name=current_user.full_name,
        )
