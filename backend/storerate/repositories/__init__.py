"""
StoreRate Backend — Repositories
=================================

What:  Thin query layer over the three tables. Each repository wraps the
       request's AsyncSession; nothing here commits. The session scope owns
       the transaction.
"""

from storerate.repositories.rating_repository import RatingRepository
from storerate.repositories.store_repository import StoreRepository
from storerate.repositories.user_repository import UserRepository

__all__ = ["RatingRepository", "StoreRepository", "UserRepository"]
