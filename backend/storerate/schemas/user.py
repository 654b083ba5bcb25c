"""
StoreRate Backend — User & Auth Schemas
========================================

What:  Request/response contracts for registration, login and user
       management.
Why separate from the ORM model: the response schemas are an allow-list.
       `password_hash` has no field here, so it can never be serialized.
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from storerate.models.user import UserRole


# ══════════════════════════════════════════════════════════════════════════
# Requests
# ══════════════════════════════════════════════════════════════════════════

class RegisterRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr = Field(..., description="Unique login email")
    password: str = Field(..., min_length=8, max_length=72, description="Password (8-72 characters)")
    address: Optional[str] = Field(default=None, max_length=400)
    role: UserRole = Field(default=UserRole.NORMAL_USER)

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "name": "Asha Verma",
                "email": "asha@example.com",
                "password": "securepassword123",
                "address": "12 MG Road, Pune",
                "role": "Normal User",
            },
        },
    )


class LoginRequest(BaseModel):
    # Plain str: a malformed email must fail like any other bad login
    email: str
    password: str


class UserUpdate(BaseModel):
    """Partial update; omitted fields are left unchanged."""
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    email: Optional[EmailStr] = None
    password: Optional[str] = Field(default=None, min_length=8, max_length=72)
    address: Optional[str] = Field(default=None, max_length=400)
    role: Optional[UserRole] = None

    model_config = ConfigDict(extra="forbid")


# ══════════════════════════════════════════════════════════════════════════
# Responses
# ══════════════════════════════════════════════════════════════════════════

class UserSummary(BaseModel):
    """Public identity of a rater or store owner, embedded in other responses."""
    id: uuid.UUID
    name: str
    email: str

    model_config = ConfigDict(from_attributes=True)


class UserResponse(BaseModel):
    id: uuid.UUID
    name: str
    email: str
    address: Optional[str] = None
    role: UserRole
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class AuthResponse(BaseModel):
    """Returned by register and login."""
    token: str = Field(description="Bearer access token")
    token_type: str = Field(default="bearer")
    user: UserResponse
