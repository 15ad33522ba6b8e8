"""Repository for user data access operations."""

from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from audit_ai.database.models import User
from audit_ai.repositories.base_repository import BaseRepository
from audit_ai.utils.logging import get_logger

LOGGER = get_logger(__name__)


class UserRepository(BaseRepository[User]):
    """Repository for User entity operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(session, User)

    async def get_by_supabase_id(self, supabase_user_id: str) -> Optional[User]:
        """Get user by Supabase user ID.

        Args:
            supabase_user_id: Supabase user ID

        Returns:
            User instance or None if not found
        """
        stmt = select(User).where(User.supabase_user_id == supabase_user_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_or_create_from_supabase(
        self,
        supabase_user_id: str,
        email: str,
        full_name: Optional[str] = None,
        role: str = "auditor",
    ) -> User:
        """Get existing user or create new one from Supabase data.

        Email and full name are refreshed when the token carries newer values.

        Args:
            supabase_user_id: Supabase user ID
            email: User email
            full_name: User full name (optional)
            role: Role for newly created users

        Returns:
            User instance (existing or newly created)
        """
        user = await self.get_by_supabase_id(supabase_user_id)
        if user:
            needs_update = (
                user.email != email or
                (full_name is not None and user.full_name != full_name)
            )
            if needs_update:
                user.email = email
                if full_name is not None:
                    user.full_name = full_name
                await self.session.flush()
                await self.session.commit()
                LOGGER.info(f"Updated existing user from Supabase: {user.id}")
            return user

        user = await self.create(
            supabase_user_id=supabase_user_id,
            email=email,
            full_name=full_name,
            role=role,
        )
        LOGGER.info(f"Created new user from Supabase: {user.id}")
        return user
