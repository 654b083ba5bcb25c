"""Create users, stores and ratings tables

Revision ID: 001
Revises: None
Create Date: 2026-10-19 00:00:00.000000+00:00

What:  Initial schema: the user_role enum and the three tables.
How:   Referential rules live in the database:
         stores.owner_id  → users.id   ON DELETE CASCADE
         ratings.store_id → stores.id  ON DELETE CASCADE
         ratings.rater_id → users.id   ON DELETE SET NULL
       and (rater_id, store_id) is unique, so a second rating for the same
       pair fails even if two requests race past the service check.

Rollback: downgrade() drops all three tables and the enum type.
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

USER_ROLES = ("Normal User", "Store Owner", "System Administrator")


def _timestamps():
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
    ]


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("address", sa.String(400), nullable=True),
        sa.Column(
            "role",
            sa.Enum(*USER_ROLES, name="user_role"),
            nullable=False,
            server_default="Normal User",
        ),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("email"),
    )
    op.create_index("ix_users_email", "users", ["email"])

    op.create_table(
        "stores",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("address", sa.String(400), nullable=True),
        # NULL until the first rating arrives
        sa.Column("average_rating", sa.Numeric(3, 2), nullable=True),
        sa.Column("owner_id", sa.Uuid(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("name"),
        sa.ForeignKeyConstraint(
            ["owner_id"], ["users.id"], ondelete="CASCADE", onupdate="CASCADE"
        ),
    )
    op.create_index("ix_stores_owner_id", "stores", ["owner_id"])

    op.create_table(
        "ratings",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("rater_id", sa.Uuid(), nullable=True),
        sa.Column("store_id", sa.Uuid(), nullable=False),
        sa.Column("value", sa.Integer(), nullable=False),
        sa.Column("comment", sa.Text(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(
            ["rater_id"], ["users.id"], ondelete="SET NULL", onupdate="CASCADE"
        ),
        sa.ForeignKeyConstraint(
            ["store_id"], ["stores.id"], ondelete="CASCADE", onupdate="CASCADE"
        ),
        sa.UniqueConstraint("rater_id", "store_id", name="uq_ratings_rater_store"),
    )
    # Serves "ratings of one store, newest first"
    op.create_index(
        "idx_ratings_store_created",
        "ratings",
        ["store_id", "created_at"],
    )


def downgrade() -> None:
    """Drops every table. All data is lost."""
    op.drop_index("idx_ratings_store_created", table_name="ratings")
    op.drop_table("ratings")
    op.drop_index("ix_stores_owner_id", table_name="stores")
    op.drop_table("stores")
    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")
    sa.Enum(name="user_role").drop(op.get_bind(), checkfirst=True)
