"""SQLAlchemy repository for the `ratings` table."""

import uuid
from typing import List, Optional

from sqlalchemy import delete, desc, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from storerate.models.rating import Rating

# Responses embed the rater and the store; load both with every read
_WITH_RELATED = (selectinload(Rating.rater), selectinload(Rating.store))


class RatingRepository:
    def __init__(self, session: AsyncSession):
        self._session = session

    async def get(self, rating_id: uuid.UUID, refresh: bool = False) -> Optional[Rating]:
        """Load a rating; refresh=True re-reads the row even if it is cached."""
        stmt = select(Rating).where(Rating.id == rating_id).options(*_WITH_RELATED)
        if refresh:
            stmt = stmt.execution_options(populate_existing=True)
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def find_by_pair(self, rater_id: uuid.UUID, store_id: uuid.UUID) -> Optional[Rating]:
        result = await self._session.execute(
            select(Rating).where(Rating.rater_id == rater_id, Rating.store_id == store_id)
        )
        return result.scalar_one_or_none()

    async def list_all(self) -> List[Rating]:
        result = await self._session.execute(
            select(Rating)
            .options(*_WITH_RELATED)
            .order_by(desc(Rating.created_at), Rating.id)
        )
        return list(result.scalars().all())

    async def list_by_store(self, store_id: uuid.UUID) -> List[Rating]:
        result = await self._session.execute(
            select(Rating)
            .where(Rating.store_id == store_id)
            .options(*_WITH_RELATED)
            .order_by(desc(Rating.created_at), Rating.id)
        )
        return list(result.scalars().all())

    async def values_for_store(self, store_id: uuid.UUID) -> List[int]:
        result = await self._session.execute(
            select(Rating.value).where(Rating.store_id == store_id)
        )
        return list(result.scalars().all())

    async def add(self, rating: Rating) -> Rating:
        self._session.add(rating)
        await self._session.flush()
        return rating

    async def save(self, rating: Rating) -> Rating:
        await self._session.flush()
        return rating

    async def delete(self, rating: Rating) -> None:
        await self._session.delete(rating)
        await self._session.flush()

    async def delete_for_store(self, store_id: uuid.UUID) -> int:
        result = await self._session.execute(
            delete(Rating)
            .where(Rating.store_id == store_id)
            .execution_options(synchronize_session="fetch")
        )
        return result.rowcount or 0
