"""
StoreRate Backend — Store Schemas
==================================

`average_rating` and `owner_id` appear only in the response: input schemas
forbid unknown fields, so neither can be written through the API.
"""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from storerate.schemas.user import UserSummary


class StoreCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    email: Optional[EmailStr] = None
    address: Optional[str] = Field(default=None, max_length=400)

    model_config = ConfigDict(extra="forbid")


class StoreUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    email: Optional[EmailStr] = None
    address: Optional[str] = Field(default=None, max_length=400)

    model_config = ConfigDict(extra="forbid")


class StoreResponse(BaseModel):
    id: uuid.UUID
    name: str
    email: Optional[str] = None
    address: Optional[str] = None
    average_rating: Optional[Decimal] = Field(
        default=None,
        description="Mean rating rounded to 2 decimals; null when the store has no ratings",
    )
    owner_id: uuid.UUID
    owner: UserSummary
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class StoreSummary(BaseModel):
    id: uuid.UUID
    name: str
    address: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)
