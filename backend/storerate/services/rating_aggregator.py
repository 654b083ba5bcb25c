"""
StoreRate Backend — Average Rating Aggregator
==============================================

What:  Recomputes a store's `average_rating` from its current rating set.
How:   Runs inside the transaction of the rating write that triggered it,
       holding the store's row lock, so the values it reads include every
       acknowledged write and no concurrent write can slip in between the
       read and the store update.
"""

import logging
import uuid
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Optional

from sqlalchemy.exc import SQLAlchemyError

from storerate.exceptions import AggregationError, StoreNotFoundError
from storerate.repositories.rating_repository import RatingRepository
from storerate.repositories.store_repository import StoreRepository

logger = logging.getLogger(__name__)

TWO_PLACES = Decimal("0.01")


def compute_average(values: Iterable[int]) -> Optional[Decimal]:
    """Arithmetic mean rounded half-up to two decimals; None for no values."""
    values = [Decimal(value) for value in values]
    if not values:
        return None
    mean = sum(values, Decimal(0)) / Decimal(len(values))
    return mean.quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


class RatingAggregator:
    def __init__(self, ratings: RatingRepository, stores: StoreRepository):
        self._ratings = ratings
        self._stores = stores

    async def recompute(self, store_id: uuid.UUID) -> Optional[Decimal]:
        """
        Store and return the fresh average for `store_id`.

        Raises:
            StoreNotFoundError: the store no longer exists
            AggregationError: the read or the write failed; the caller's
                transaction is rolled back with it
        """
        try:
            store = await self._stores.get_for_update(store_id)
            if store is None:
                raise StoreNotFoundError(str(store_id))

            values = await self._ratings.values_for_store(store_id)
            store.average_rating = compute_average(values)
            await self._stores.save(store)
        except SQLAlchemyError as e:
            logger.error("Average recomputation failed for store %s: %s", store_id, str(e))
            raise AggregationError(str(store_id), context={"error_type": type(e).__name__}) from e

        logger.debug(
            "Store %s average is now %s over %d ratings",
            store_id,
            store.average_rating,
            len(values),
        )
        return store.average_rating
