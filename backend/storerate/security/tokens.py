"""
StoreRate Backend — Access Tokens
==================================

What:  Issues and decodes signed access tokens carrying a user id and role.
How:   PyJWT, HMAC-signed (HS256 by default). Claims: sub (user id), role,
       iat, exp.
Who:   Auth routes issue tokens; the current-user dependency decodes them.
"""

import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import jwt

from storerate.exceptions import ExpiredTokenError, InvalidTokenError
from storerate.models.user import UserRole


@dataclass(frozen=True)
class TokenClaims:
    user_id: uuid.UUID
    role: UserRole
    expires_at: datetime


class TokenService:
    """Signs and verifies access tokens."""

    def __init__(self, secret_key: str, algorithm: str = "HS256", expire_minutes: int = 1440):
        if not secret_key:
            raise ValueError("JWT secret key cannot be empty")
        self._secret_key = secret_key
        self._algorithm = algorithm
        self._expire = timedelta(minutes=expire_minutes)

    def issue_token(self, user_id: uuid.UUID, role: UserRole) -> str:
        now = datetime.now(tz=timezone.utc)
        payload = {
            "sub": str(user_id),
            "role": role.value,
            "iat": now,
            "exp": now + self._expire,
        }
        return jwt.encode(payload, self._secret_key, algorithm=self._algorithm)

    def decode_token(self, token: str) -> TokenClaims:
        """
        Verify the signature and expiry of a token and return its claims.

        Raises:
            ExpiredTokenError: the token was valid but its exp has passed
            InvalidTokenError: bad signature, malformed token or payload
        """
        try:
            payload = jwt.decode(token, self._secret_key, algorithms=[self._algorithm])
            return TokenClaims(
                user_id=uuid.UUID(payload["sub"]),
                role=UserRole(payload["role"]),
                expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
            )
        except jwt.ExpiredSignatureError as e:
            raise ExpiredTokenError() from e
        except jwt.InvalidTokenError as e:
            raise InvalidTokenError(context={"reason": str(e)}) from e
        except (KeyError, ValueError) as e:
            raise InvalidTokenError(
                message="Not authorized, malformed token",
                context={"reason": str(e)},
            ) from e
