"""
StoreRate Backend — Store Route Handlers
=========================================

What:  /api/stores CRUD.

Listing:
    GET /api/stores is public. When the caller is an authenticated Store
    Owner the list is narrowed to the stores they own; anonymous callers,
    Normal Users and System Administrators see every store.
"""

import logging
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends

from storerate.container import Services
from storerate.dependencies import get_current_user, get_optional_user, get_services
from storerate.models.user import User
from storerate.schemas.common import ErrorResponse, MessageResponse
from storerate.schemas.store import StoreCreate, StoreResponse, StoreUpdate
from storerate.services.access_control import store_listing_scope

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/stores", tags=["Stores"])


@router.post(
    "",
    status_code=201,
    response_model=StoreResponse,
    responses={
        400: {"description": "Store name already exists", "model": ErrorResponse},
        401: {"description": "Not authenticated", "model": ErrorResponse},
        403: {"description": "Role may not create stores", "model": ErrorResponse},
    },
    summary="Create a store owned by the caller",
)
async def create_store(
    payload: StoreCreate,
    current_user: User = Depends(get_current_user),
    services: Services = Depends(get_services),
) -> StoreResponse:
    store = await services.stores.create(
        name=payload.name,
        email=payload.email,
        address=payload.address,
        owner=current_user,
    )
    await services.commit()
    return StoreResponse.model_validate(store)


@router.get("", response_model=List[StoreResponse], summary="List stores")
async def list_stores(
    current_user: Optional[User] = Depends(get_optional_user),
    services: Services = Depends(get_services),
) -> List[StoreResponse]:
    owner_only = store_listing_scope(current_user)
    stores = await services.stores.list(owner_only=owner_only)
    if owner_only is not None:
        logger.info("Store Owner %s listed their %d stores", owner_only.id, len(stores))
    return [StoreResponse.model_validate(store) for store in stores]


@router.get(
    "/{store_id}",
    response_model=StoreResponse,
    responses={404: {"description": "Store not found", "model": ErrorResponse}},
    summary="Get a store",
)
async def get_store(
    store_id: UUID,
    services: Services = Depends(get_services),
) -> StoreResponse:
    store = await services.stores.get(store_id)
    return StoreResponse.model_validate(store)


@router.put(
    "/{store_id}",
    response_model=StoreResponse,
    responses={
        400: {"description": "Store name already exists", "model": ErrorResponse},
        403: {"description": "Not the owner", "model": ErrorResponse},
        404: {"description": "Store not found", "model": ErrorResponse},
    },
    summary="Update a store",
)
async def update_store(
    store_id: UUID,
    payload: StoreUpdate,
    current_user: User = Depends(get_current_user),
    services: Services = Depends(get_services),
) -> StoreResponse:
    store = await services.stores.update(
        store_id, payload.model_dump(exclude_unset=True), current_user
    )
    await services.commit()
    return StoreResponse.model_validate(store)


@router.delete(
    "/{store_id}",
    response_model=MessageResponse,
    responses={
        403: {"description": "Not the owner", "model": ErrorResponse},
        404: {"description": "Store not found", "model": ErrorResponse},
    },
    summary="Delete a store and all of its ratings",
)
async def delete_store(
    store_id: UUID,
    current_user: User = Depends(get_current_user),
    services: Services = Depends(get_services),
) -> MessageResponse:
    await services.stores.delete(store_id, current_user)
    await services.commit()
    return MessageResponse(message="Store deleted successfully")
