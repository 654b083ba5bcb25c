"""SQLAlchemy repository for the `stores` table."""

import uuid
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from storerate.models.store import Store


class StoreRepository:
    def __init__(self, session: AsyncSession):
        self._session = session

    async def get(self, store_id: uuid.UUID) -> Optional[Store]:
        result = await self._session.execute(
            select(Store).where(Store.id == store_id).options(selectinload(Store.owner))
        )
        return result.scalar_one_or_none()

    async def get_for_update(self, store_id: uuid.UUID) -> Optional[Store]:
        """
        Load a store and lock its row until the transaction ends.

        Every Rating write for the store takes this lock first, so rating
        writes and average recomputation for one store are serialized.
        SQLite has no row locks and ignores FOR UPDATE (it serializes writers
        at the database level instead).
        """
        stmt = (
            select(Store)
            .where(Store.id == store_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def name_taken(self, name: str, exclude_id: Optional[uuid.UUID] = None) -> bool:
        stmt = select(Store.id).where(Store.name == name)
        if exclude_id is not None:
            stmt = stmt.where(Store.id != exclude_id)
        result = await self._session.execute(stmt.limit(1))
        return result.first() is not None

    async def list_all(self, owner_id: Optional[uuid.UUID] = None) -> List[Store]:
        stmt = select(Store).options(selectinload(Store.owner))
        if owner_id is not None:
            stmt = stmt.where(Store.owner_id == owner_id)
        result = await self._session.execute(stmt.order_by(Store.name, Store.id))
        return list(result.scalars().all())

    async def add(self, store: Store) -> Store:
        self._session.add(store)
        await self._session.flush()
        return store

    async def save(self, store: Store) -> Store:
        await self._session.flush()
        return store

    async def delete(self, store: Store) -> None:
        await self._session.delete(store)
        await self._session.flush()
