"""SQLAlchemy repository for the `users` table."""

import logging
import uuid
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from storerate.models.user import User

logger = logging.getLogger(__name__)


class UserRepository:
    def __init__(self, session: AsyncSession):
        self._session = session

    async def get(self, user_id: uuid.UUID) -> Optional[User]:
        return await self._session.get(User, user_id)

    async def find_by_email(self, email: str) -> Optional[User]:
        result = await self._session.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()

    async def email_taken(self, email: str, exclude_id: Optional[uuid.UUID] = None) -> bool:
        stmt = select(User.id).where(User.email == email)
        if exclude_id is not None:
            stmt = stmt.where(User.id != exclude_id)
        result = await self._session.execute(stmt.limit(1))
        return result.first() is not None

    async def list_all(self) -> List[User]:
        result = await self._session.execute(select(User).order_by(User.created_at, User.email))
        return list(result.scalars().all())

    async def add(self, user: User) -> User:
        self._session.add(user)
        await self._session.flush()
        return user

    async def save(self, user: User) -> User:
        await self._session.flush()
        return user

    async def delete(self, user: User) -> None:
        # Owned stores (and their ratings) cascade, authored ratings get
        # rater_id = NULL; both are enforced by the foreign keys.
        await self._session.delete(user)
        await self._session.flush()
        logger.debug("Deleted user row %s", user.id)
