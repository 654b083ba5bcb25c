"""
StoreRate Backend — User SQLAlchemy Model
==========================================

What:  ORM model for the `users` table and the closed `UserRole` enum.
Who:   UserRepository / IdentityService; Alembic for schema management.

Table Design:
    - UUID primary key generated in Python (portable across PostgreSQL/SQLite)
    - email: unique, stored lower-cased by IdentityService
    - password_hash: bcrypt output; never part of any response schema
    - role: one of three fixed values, stored as the human-readable label
"""

import enum
import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, Enum, String, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column

from storerate.database import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UserRole(str, enum.Enum):
    """The three roles a User can hold."""

    NORMAL_USER = "Normal User"
    STORE_OWNER = "Store Owner"
    SYSTEM_ADMINISTRATOR = "System Administrator"


class User(Base):
    """
    A registered account.

    Lifecycle:
        1. Created by registration (password hashed by IdentityService)
        2. Updated by the user (name/email/address/password) or by an admin
        3. Deleted by an admin only. Owned stores are removed with it
           (ON DELETE CASCADE); ratings it wrote survive with rater_id NULL.
    """

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False)

    email: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        unique=True,
        index=True,
    )

    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)

    address: Mapped[str | None] = mapped_column(String(400), nullable=True, default=None)

    role: Mapped[UserRole] = mapped_column(
        Enum(
            UserRole,
            name="user_role",
            values_callable=lambda roles: [role.value for role in roles],
        ),
        nullable=False,
        default=UserRole.NORMAL_USER,
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

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.SYSTEM_ADMINISTRATOR

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email='{self.email}', role='{self.role.value}')>"
