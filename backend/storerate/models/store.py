"""
StoreRate Backend — Store SQLAlchemy Model
===========================================

What:  ORM model for the `stores` table.

Table Design:
    - name: globally unique
    - average_rating: NUMERIC(3,2), NULL until the first rating arrives.
      Written only by RatingAggregator; no input schema exposes it.
    - owner_id: exactly one owning User, removed with that User
    - owner: never lazy-loaded; StoreRepository eager-loads it
"""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, Numeric, String, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from storerate.database import Base
from storerate.models.user import utcnow

if TYPE_CHECKING:
    from storerate.models.user import User


class Store(Base):
    """A store that Users can rate."""

    __tablename__ = "stores"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)

    email: Mapped[str | None] = mapped_column(String(255), nullable=True, default=None)

    address: Mapped[str | None] = mapped_column(String(400), nullable=True, default=None)

    # e.g. 4.50: 3 total digits, 2 after the decimal point
    average_rating: Mapped[Decimal | None] = mapped_column(
        Numeric(3, 2),
        nullable=True,
        default=None,
    )

    owner_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE", onupdate="CASCADE"),
        nullable=False,
        index=True,
    )

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

    owner: Mapped["User"] = relationship(lazy="raise")

    def __repr__(self) -> str:
        return (
            f"<Store(id={self.id}, name='{self.name}', "
            f"average_rating={self.average_rating})>"
        )
