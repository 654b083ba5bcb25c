"""
StoreRate Backend — Store Registry
===================================

What:  Owns Store records: creation, lookup, owner-scoped listing, update
       and deletion.
How:   Name uniqueness is checked before every write and backed by the
       unique constraint on stores.name. Deleting a store removes its
       ratings in the same transaction as the store row.
"""

import logging
import uuid
from typing import Any, List, Mapping, Optional

from sqlalchemy.exc import IntegrityError

from storerate.exceptions import DuplicateNameError, NotFoundError
from storerate.models.store import Store
from storerate.models.user import User
from storerate.repositories.rating_repository import RatingRepository
from storerate.repositories.store_repository import StoreRepository
from storerate.services.access_control import Action, ensure_allowed
from storerate.services.validation import (
    normalize_optional_email,
    optional_text,
    require_text,
)

logger = logging.getLogger(__name__)


class StoreRegistry:
    def __init__(self, stores: StoreRepository, ratings: RatingRepository):
        self._stores = stores
        self._ratings = ratings

    async def create(
        self,
        name: str,
        email: Optional[str],
        address: Optional[str],
        owner: User,
    ) -> Store:
        """Create a store owned by `owner` (always the acting user)."""
        ensure_allowed(owner, Action.STORE_CREATE)
        name = require_text(name, "name")

        if await self._stores.name_taken(name):
            logger.warning("Store creation rejected: name '%s' already exists", name)
            raise DuplicateNameError(name)

        store = Store(
            name=name,
            email=normalize_optional_email(email),
            address=optional_text(address),
            owner_id=owner.id,
            owner=owner,
        )
        try:
            await self._stores.add(store)
        except IntegrityError as e:
            raise DuplicateNameError(name) from e

        logger.info("Store created: %s '%s' (owner=%s)", store.id, store.name, owner.id)
        return store

    async def get(self, store_id: uuid.UUID) -> Store:
        store = await self._stores.get(store_id)
        if store is None:
            raise NotFoundError(resource="Store", resource_id=str(store_id))
        return store

    async def list(self, owner_only: Optional[User] = None) -> List[Store]:
        """Every store, or only those owned by `owner_only`."""
        owner_id = owner_only.id if owner_only is not None else None
        return await self._stores.list_all(owner_id=owner_id)

    async def update(self, store_id: uuid.UUID, patch: Mapping[str, Any], actor: User) -> Store:
        """
        Apply a partial update of name, email and address.

        Keys absent from `patch` are left alone. The owner and the average
        rating are not updatable here.
        """
        store = await self.get(store_id)
        ensure_allowed(actor, Action.STORE_UPDATE, store)

        if patch.get("name") is not None:
            name = require_text(patch["name"], "name")
            if name != store.name and await self._stores.name_taken(name, exclude_id=store.id):
                logger.warning("Store update rejected: name '%s' already exists", name)
                raise DuplicateNameError(name)
            store.name = name

        if "email" in patch:
            store.email = normalize_optional_email(patch["email"])

        if "address" in patch:
            store.address = optional_text(patch["address"])

        try:
            await self._stores.save(store)
        except IntegrityError as e:
            raise DuplicateNameError(store.name) from e

        logger.info("Store %s updated by %s", store.id, actor.id)
        return store

    async def delete(self, store_id: uuid.UUID, actor: User) -> None:
        store = await self.get(store_id)
        ensure_allowed(actor, Action.STORE_DELETE, store)

        # Take the row lock so no rating write for this store interleaves
        await self._stores.get_for_update(store.id)
        removed = await self._ratings.delete_for_store(store.id)
        await self._stores.delete(store)

        logger.info(
            "Store %s deleted by %s (%d ratings removed)", store_id, actor.id, removed
        )
