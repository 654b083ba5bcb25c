"""
StoreRate Backend — Composition Root
=====================================

What:  Builds the repositories for one session and injects them into the
       services. This is the only place that knows how the pieces fit.
Who:   The FastAPI `get_services` dependency (one container per request)
       and the test-suite.
"""

import logging
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from storerate.config import settings
from storerate.exceptions import DatabaseError
from storerate.repositories import RatingRepository, StoreRepository, UserRepository
from storerate.security import PasswordHasher, TokenService
from storerate.services import (
    IdentityService,
    RatingAggregator,
    RatingLedger,
    StoreRegistry,
)

logger = logging.getLogger(__name__)


@dataclass
class Services:
    session: AsyncSession
    identity: IdentityService
    stores: StoreRegistry
    ratings: RatingLedger
    aggregator: RatingAggregator

    async def commit(self) -> None:
        """
        Commit the request transaction.

        Write handlers call this before building their response, so a write
        is only acknowledged once it is durable. A failed commit rolls back
        and surfaces as a DatabaseError (HTTP 500).
        """
        try:
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error("Commit failed: %s", str(e))
            raise DatabaseError(context={"error_type": type(e).__name__}) from e


@lru_cache()
def get_password_hasher() -> PasswordHasher:
    return PasswordHasher(rounds=settings.bcrypt_rounds)


@lru_cache()
def get_token_service() -> TokenService:
    return TokenService(
        secret_key=settings.jwt_secret_key,
        algorithm=settings.jwt_algorithm,
        expire_minutes=settings.jwt_expire_minutes,
    )


def build_services(session: AsyncSession, hasher: Optional[PasswordHasher] = None) -> Services:
    """Wire every service onto `session`, which owns the transaction."""
    users = UserRepository(session)
    stores = StoreRepository(session)
    ratings = RatingRepository(session)

    aggregator = RatingAggregator(ratings=ratings, stores=stores)
    return Services(
        session=session,
        identity=IdentityService(users=users, hasher=hasher or get_password_hasher()),
        stores=StoreRegistry(stores=stores, ratings=ratings),
        ratings=RatingLedger(
            ratings=ratings,
            stores=stores,
            aggregator=aggregator,
            min_value=settings.rating_min_value,
            max_value=settings.rating_max_value,
        ),
        aggregator=aggregator,
    )
