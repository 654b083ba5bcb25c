"""StoreRate Backend — Rating Schemas."""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from storerate.schemas.store import StoreSummary
from storerate.schemas.user import UserSummary


class RatingCreate(BaseModel):
    store_id: uuid.UUID
    # Range is enforced by RatingLedger against the configured bounds
    value: int = Field(..., description="Score, by default between 1 and 5")
    comment: Optional[str] = Field(default=None, max_length=2000)

    model_config = ConfigDict(extra="forbid")


class RatingUpdate(BaseModel):
    """Omit `value` to keep it; send `comment: null` to clear the comment."""
    value: Optional[int] = None
    comment: Optional[str] = Field(default=None, max_length=2000)

    model_config = ConfigDict(extra="forbid")


class RatingResponse(BaseModel):
    id: uuid.UUID
    rater_id: Optional[uuid.UUID] = Field(
        default=None,
        description="Author of the rating; null once the author's account is deleted",
    )
    rater: Optional[UserSummary] = None
    store_id: uuid.UUID
    store: StoreSummary
    value: int
    comment: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)
