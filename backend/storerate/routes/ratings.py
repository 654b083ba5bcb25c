"""
StoreRate Backend — Rating Route Handlers
==========================================

What:  /api/ratings CRUD plus GET /api/ratings/store/{store_id}.
       Reads are public; writes need a token. Every write returns only
       after the store's average has been recomputed and committed with it.
"""

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends

from storerate.container import Services
from storerate.dependencies import get_current_user, get_services
from storerate.models.user import User
from storerate.schemas.common import ErrorResponse, MessageResponse
from storerate.schemas.rating import RatingCreate, RatingResponse, RatingUpdate

router = APIRouter(prefix="/api/ratings", tags=["Ratings"])


@router.post(
    "",
    status_code=201,
    response_model=RatingResponse,
    responses={
        400: {"description": "Already rated or value out of range", "model": ErrorResponse},
        401: {"description": "Not authenticated", "model": ErrorResponse},
        404: {"description": "Store not found", "model": ErrorResponse},
    },
    summary="Rate a store",
)
async def create_rating(
    payload: RatingCreate,
    current_user: User = Depends(get_current_user),
    services: Services = Depends(get_services),
) -> RatingResponse:
    rating = await services.ratings.create(
        rater=current_user,
        store_id=payload.store_id,
        value=payload.value,
        comment=payload.comment,
    )
    await services.commit()
    return RatingResponse.model_validate(rating)


@router.get("", response_model=List[RatingResponse], summary="List all ratings, newest first")
async def list_ratings(services: Services = Depends(get_services)) -> List[RatingResponse]:
    ratings = await services.ratings.list_all()
    return [RatingResponse.model_validate(rating) for rating in ratings]


@router.get(
    "/store/{store_id}",
    response_model=List[RatingResponse],
    responses={404: {"description": "Store not found", "model": ErrorResponse}},
    summary="List the ratings of one store, newest first",
)
async def list_store_ratings(
    store_id: UUID,
    services: Services = Depends(get_services),
) -> List[RatingResponse]:
    ratings = await services.ratings.list_by_store(store_id)
    return [RatingResponse.model_validate(rating) for rating in ratings]


@router.get(
    "/{rating_id}",
    response_model=RatingResponse,
    responses={404: {"description": "Rating not found", "model": ErrorResponse}},
    summary="Get a rating",
)
async def get_rating(
    rating_id: UUID,
    services: Services = Depends(get_services),
) -> RatingResponse:
    rating = await services.ratings.get_by_id(rating_id)
    return RatingResponse.model_validate(rating)


@router.put(
    "/{rating_id}",
    response_model=RatingResponse,
    responses={
        400: {"description": "Value out of range", "model": ErrorResponse},
        403: {"description": "Not the author", "model": ErrorResponse},
        404: {"description": "Rating not found", "model": ErrorResponse},
    },
    summary="Update a rating",
)
async def update_rating(
    rating_id: UUID,
    payload: RatingUpdate,
    current_user: User = Depends(get_current_user),
    services: Services = Depends(get_services),
) -> RatingResponse:
    rating = await services.ratings.update(
        rating_id, payload.model_dump(exclude_unset=True), current_user
    )
    await services.commit()
    return RatingResponse.model_validate(rating)


@router.delete(
    "/{rating_id}",
    response_model=MessageResponse,
    responses={
        403: {"description": "Not the author", "model": ErrorResponse},
        404: {"description": "Rating not found", "model": ErrorResponse},
    },
    summary="Delete a rating",
)
async def delete_rating(
    rating_id: UUID,
    current_user: User = Depends(get_current_user),
    services: Services = Depends(get_services),
) -> MessageResponse:
    await services.ratings.delete(rating_id, current_user)
    await services.commit()
    return MessageResponse(message="Rating deleted successfully")
