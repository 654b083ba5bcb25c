"""
StoreRate Backend — FastAPI Dependencies
=========================================

What:  Per-request service container and current-user resolution.
How:   get_services builds the services on the request's transactional
       session. get_current_user decodes the bearer token and loads the
       user; every failure along the way is a 401, including a request
       that carries no token at all.
"""

import logging
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from storerate.container import Services, build_services, get_token_service
from storerate.database import get_db_session
from storerate.exceptions import AuthenticationError
from storerate.models.user import User
from storerate.security import TokenService

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


async def get_services(db: AsyncSession = Depends(get_db_session)) -> Services:
    return build_services(db)


async def _resolve_user(token: str, services: Services, tokens: TokenService) -> User:
    claims = tokens.decode_token(token)

    user = await services.identity.find_by_id(claims.user_id)
    if user is None:
        logger.warning("Auth failed: user %s from token no longer exists", claims.user_id)
        raise AuthenticationError("Not authorized, user not found")

    # The role is part of the token; a role change invalidates old tokens
    if user.role != claims.role:
        logger.warning("Auth failed: token role mismatch for user %s", user.id)
        raise AuthenticationError("Not authorized, token role mismatch")

    return user


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    services: Services = Depends(get_services),
    tokens: TokenService = Depends(get_token_service),
) -> User:
    if credentials is None or not credentials.credentials:
        raise AuthenticationError("Not authorized, no token")
    return await _resolve_user(credentials.credentials, services, tokens)


async def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    services: Services = Depends(get_services),
    tokens: TokenService = Depends(get_token_service),
) -> Optional[User]:
    """The caller when a token was sent, None for anonymous requests."""
    if credentials is None or not credentials.credentials:
        return None
    return await _resolve_user(credentials.credentials, services, tokens)
