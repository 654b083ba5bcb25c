"""
StoreRate Backend — User Management Route Handlers
===================================================

What:  /api/users: listing and deletion for System Administrators;
       read and update for the user themself or an administrator.
"""

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends

from storerate.container import Services
from storerate.dependencies import get_current_user, get_services
from storerate.models.user import User
from storerate.schemas.common import ErrorResponse, MessageResponse
from storerate.schemas.user import UserResponse, UserUpdate

router = APIRouter(prefix="/api/users", tags=["Users"])

_errors = {
    401: {"description": "Not authenticated", "model": ErrorResponse},
    403: {"description": "Not permitted", "model": ErrorResponse},
    404: {"description": "User not found", "model": ErrorResponse},
}


@router.get("", response_model=List[UserResponse], responses=_errors, summary="List all users")
async def list_users(
    current_user: User = Depends(get_current_user),
    services: Services = Depends(get_services),
) -> List[UserResponse]:
    users = await services.identity.list_users(current_user)
    return [UserResponse.model_validate(user) for user in users]


@router.get("/{user_id}", response_model=UserResponse, responses=_errors, summary="Get a user")
async def get_user(
    user_id: UUID,
    current_user: User = Depends(get_current_user),
    services: Services = Depends(get_services),
) -> UserResponse:
    user = await services.identity.get(user_id, current_user)
    return UserResponse.model_validate(user)


@router.put("/{user_id}", response_model=UserResponse, responses=_errors, summary="Update a user")
async def update_user(
    user_id: UUID,
    payload: UserUpdate,
    current_user: User = Depends(get_current_user),
    services: Services = Depends(get_services),
) -> UserResponse:
    user = await services.identity.update(
        user_id, payload.model_dump(exclude_unset=True), current_user
    )
    await services.commit()
    return UserResponse.model_validate(user)


@router.delete("/{user_id}", response_model=MessageResponse, responses=_errors, summary="Delete a user")
async def delete_user(
    user_id: UUID,
    current_user: User = Depends(get_current_user),
    services: Services = Depends(get_services),
) -> MessageResponse:
    await services.identity.delete(user_id, current_user)
    await services.commit()
    return MessageResponse(message="User deleted successfully")
