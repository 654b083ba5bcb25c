"""
StoreRate Backend — Rating SQLAlchemy Model
============================================

What:  ORM model for the `ratings` table.

Table Design:
    - rater_id: nullable, ON DELETE SET NULL; a deleted user's ratings stay
      and keep counting towards the store average
    - store_id: ON DELETE CASCADE; ratings never outlive their store
    - uq_ratings_rater_store: one rating per (rater, store) pair
    - idx_ratings_store_created: serves "ratings of a store, newest first"
    - rater / store relationships never lazy-load; repositories eager-load
      them for responses
"""

import uuid
from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import (
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Text,
    UniqueConstraint,
    Uuid,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from storerate.database import Base
from storerate.models.user import utcnow

if TYPE_CHECKING:
    from storerate.models.store import Store
    from storerate.models.user import User


class Rating(Base):
    """One user's score (and optional comment) for one store."""

    __tablename__ = "ratings"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    rater_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="SET NULL", onupdate="CASCADE"),
        nullable=True,
    )

    store_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("stores.id", ondelete="CASCADE", onupdate="CASCADE"),
        nullable=False,
    )

    value: Mapped[int] = mapped_column(Integer, nullable=False)

    comment: Mapped[str | None] = mapped_column(Text, nullable=True, default=None)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        onupdate=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    # lazy="raise": readers load these explicitly (see RatingRepository)
    rater: Mapped[Optional["User"]] = relationship(lazy="raise")
    store: Mapped["Store"] = relationship(lazy="raise")

    __table_args__ = (
        UniqueConstraint("rater_id", "store_id", name="uq_ratings_rater_store"),
        Index("idx_ratings_store_created", "store_id", "created_at"),
    )

    def __repr__(self) -> str:
        return (
            f"<Rating(id={self.id}, store_id={self.store_id}, "
            f"rater_id={self.rater_id}, value={self.value})>"
        )
