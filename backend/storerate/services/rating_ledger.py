"""
StoreRate Backend — Rating Ledger
==================================

What:  Owns the Rating lifecycle and keeps every store's average in step.
How:   Each write follows the same sequence inside the request transaction:

       ┌────────────┐   ┌──────────────┐   ┌────────────┐   ┌──────────────┐
       │ lock store │──▶│ check + write│──▶│   flush    │──▶│  recompute   │
       │ FOR UPDATE │   │   rating     │   │            │   │   average    │
       └────────────┘   └──────────────┘   └────────────┘   └──────────────┘

       The store lock makes the duplicate check and the insert one logical
       step for concurrent writers; the (rater_id, store_id) unique
       constraint catches anything that still gets through. If the
       recomputation fails the error propagates and the whole transaction,
       rating write included, is rolled back.
"""

import logging
import uuid
from typing import Any, List, Mapping, Optional

from sqlalchemy.exc import IntegrityError

from storerate.exceptions import (
    DuplicateRatingError,
    NotFoundError,
    StoreNotFoundError,
    ValidationError,
)
from storerate.models.rating import Rating
from storerate.models.store import Store
from storerate.models.user import User
from storerate.repositories.rating_repository import RatingRepository
from storerate.repositories.store_repository import StoreRepository
from storerate.services.access_control import Action, ensure_allowed
from storerate.services.rating_aggregator import RatingAggregator
from storerate.services.validation import optional_text

logger = logging.getLogger(__name__)


class RatingLedger:
    def __init__(
        self,
        ratings: RatingRepository,
        stores: StoreRepository,
        aggregator: RatingAggregator,
        min_value: int = 1,
        max_value: int = 5,
    ):
        self._ratings = ratings
        self._stores = stores
        self._aggregator = aggregator
        self._min_value = min_value
        self._max_value = max_value

    async def create(
        self,
        rater: User,
        store_id: uuid.UUID,
        value: int,
        comment: Optional[str] = None,
    ) -> Rating:
        """
        Record `rater`'s rating of a store and refresh the store average.

        Raises:
            ValidationError: value outside the configured range
            StoreNotFoundError: no store with this id
            DuplicateRatingError: the rater already rated this store
        """
        ensure_allowed(rater, Action.RATING_CREATE)
        self._validate_value(value)
        store = await self._lock_store(store_id)

        if await self._ratings.find_by_pair(rater.id, store_id) is not None:
            logger.warning("Duplicate rating rejected: user %s, store %s", rater.id, store_id)
            raise DuplicateRatingError(context={"user_id": str(rater.id), "store_id": str(store_id)})

        rating = Rating(
            rater_id=rater.id,
            store_id=store_id,
            rater=rater,
            store=store,
            value=value,
            comment=optional_text(comment),
        )
        try:
            await self._ratings.add(rating)
        except IntegrityError as e:
            raise DuplicateRatingError(
                context={"user_id": str(rater.id), "store_id": str(store_id)}
            ) from e

        await self._aggregator.recompute(store_id)
        logger.info("Rating %s created: user %s rated store %s with %d", rating.id, rater.id, store_id, value)
        return rating

    async def get_by_id(self, rating_id: uuid.UUID) -> Rating:
        rating = await self._ratings.get(rating_id)
        if rating is None:
            raise NotFoundError(resource="Rating", resource_id=str(rating_id))
        return rating

    async def list_all(self) -> List[Rating]:
        """Every rating, newest first."""
        return await self._ratings.list_all()

    async def list_by_store(self, store_id: uuid.UUID) -> List[Rating]:
        """Ratings of one store, newest first."""
        if await self._stores.get(store_id) is None:
            raise StoreNotFoundError(str(store_id))
        return await self._ratings.list_by_store(store_id)

    async def update(self, rating_id: uuid.UUID, patch: Mapping[str, Any], actor: User) -> Rating:
        """
        Change the value and/or comment of a rating.

        A missing or None value keeps the current one; a comment key that is
        present (even None) replaces the current comment.
        """
        rating = await self.get_by_id(rating_id)
        ensure_allowed(actor, Action.RATING_UPDATE, rating)

        value = patch.get("value")
        if value is not None:
            self._validate_value(value)

        await self._lock_store(rating.store_id)
        rating = await self._reload(rating_id)

        if value is not None:
            rating.value = value
        if "comment" in patch:
            rating.comment = optional_text(patch["comment"])

        await self._ratings.save(rating)
        await self._aggregator.recompute(rating.store_id)
        logger.info("Rating %s updated by %s", rating.id, actor.id)
        return rating

    async def delete(self, rating_id: uuid.UUID, actor: User) -> None:
        rating = await self.get_by_id(rating_id)
        ensure_allowed(actor, Action.RATING_DELETE, rating)

        store_id = rating.store_id
        await self._lock_store(store_id)
        rating = await self._reload(rating_id)

        await self._ratings.delete(rating)
        await self._aggregator.recompute(store_id)
        logger.info("Rating %s deleted by %s", rating_id, actor.id)

    # ── Helpers ───────────────────────────────────────────────────────────

    async def _lock_store(self, store_id: uuid.UUID) -> Store:
        store = await self._stores.get_for_update(store_id)
        if store is None:
            raise StoreNotFoundError(str(store_id))
        return store

    async def _reload(self, rating_id: uuid.UUID) -> Rating:
        # Re-read under the store lock; a concurrent delete may have won
        rating = await self._ratings.get(rating_id, refresh=True)
        if rating is None:
            raise NotFoundError(resource="Rating", resource_id=str(rating_id))
        return rating

    def _validate_value(self, value: Any) -> None:
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValidationError(message="Rating value must be a whole number", field="value")
        if not self._min_value <= value <= self._max_value:
            raise ValidationError(
                message=f"Rating value must be between {self._min_value} and {self._max_value}",
                field="value",
                context={"min": self._min_value, "max": self._max_value},
            )
