"""
StoreRate Backend — Auth Route Handlers
========================================

What:  POST /api/auth/register, POST /api/auth/login, GET /api/auth/me.
How:   Thin handlers: validate the body, call IdentityService, issue a token.
"""

import logging

from fastapi import APIRouter, Depends

from storerate.config import settings
from storerate.container import Services, get_token_service
from storerate.dependencies import get_current_user, get_services
from storerate.exceptions import InsufficientRoleError
from storerate.models.user import User, UserRole
from storerate.schemas.common import ErrorResponse
from storerate.schemas.user import AuthResponse, LoginRequest, RegisterRequest, UserResponse
from storerate.security import TokenService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Auth"])


@router.post(
    "/register",
    status_code=201,
    response_model=AuthResponse,
    responses={
        400: {"description": "Email already registered or invalid input", "model": ErrorResponse},
        403: {"description": "Role may not be self-assigned", "model": ErrorResponse},
    },
    summary="Register a new user",
)
async def register(
    payload: RegisterRequest,
    services: Services = Depends(get_services),
    tokens: TokenService = Depends(get_token_service),
) -> AuthResponse:
    if payload.role == UserRole.SYSTEM_ADMINISTRATOR and not settings.allow_admin_registration:
        logger.warning("Registration rejected: self-assigned administrator role (%s)", payload.email)
        raise InsufficientRoleError(
            message="System Administrator accounts cannot be self-registered",
        )

    user = await services.identity.register(
        name=payload.name,
        email=payload.email,
        password=payload.password,
        address=payload.address,
        role=payload.role,
    )
    await services.commit()
    return AuthResponse(
        token=tokens.issue_token(user.id, user.role),
        user=UserResponse.model_validate(user),
    )


@router.post(
    "/login",
    response_model=AuthResponse,
    responses={401: {"description": "Invalid email or password", "model": ErrorResponse}},
    summary="Exchange email and password for an access token",
)
async def login(
    payload: LoginRequest,
    services: Services = Depends(get_services),
    tokens: TokenService = Depends(get_token_service),
) -> AuthResponse:
    user = await services.identity.verify(payload.email, payload.password)
    return AuthResponse(
        token=tokens.issue_token(user.id, user.role),
        user=UserResponse.model_validate(user),
    )


@router.get(
    "/me",
    response_model=UserResponse,
    responses={401: {"description": "Missing or invalid token", "model": ErrorResponse}},
    summary="Profile of the authenticated user",
)
async def me(current_user: User = Depends(get_current_user)) -> UserResponse:
    return UserResponse.model_validate(current_user)
