"""
StoreRate Backend — Identity Store
===================================

What:  Owns User records: registration, credential verification, lookup,
       self-service and administrative updates, deletion.
How:   Works on the request's session through UserRepository. Credentials
       are hashed here, explicitly, on every path that writes one; there is
       no ORM hook doing it behind the scenes.

Error Handling:
    DuplicateEmailError    → the email belongs to another user
    InvalidCredentialsError → login failed (same message for unknown email
                              and wrong password)
    NotFoundError / ForbiddenError subclasses for lookups and mutations
"""

import logging
import uuid
from typing import Any, List, Mapping, Optional

from sqlalchemy.exc import IntegrityError

from storerate.exceptions import (
    DuplicateEmailError,
    InsufficientRoleError,
    InvalidCredentialsError,
    NotFoundError,
)
from storerate.models.user import User, UserRole
from storerate.repositories.user_repository import UserRepository
from storerate.security.password import PasswordHasher
from storerate.services.access_control import Action, ensure_allowed
from storerate.services.validation import normalize_email, optional_text, require_text

logger = logging.getLogger(__name__)


class IdentityService:
    def __init__(self, users: UserRepository, hasher: PasswordHasher):
        self._users = users
        self._hasher = hasher

    async def register(
        self,
        name: str,
        email: str,
        password: str,
        address: Optional[str] = None,
        role: UserRole = UserRole.NORMAL_USER,
    ) -> User:
        """Create a user. Raises DuplicateEmailError or ValidationError."""
        name = require_text(name, "name")
        email = normalize_email(email)

        if await self._users.email_taken(email):
            logger.warning("Registration rejected: email already in use (%s)", email)
            raise DuplicateEmailError(email)

        user = User(
            name=name,
            email=email,
            password_hash=self._hasher.hash(password),
            address=optional_text(address),
            role=role,
        )
        try:
            await self._users.add(user)
        except IntegrityError as e:
            # Lost a race with a concurrent registration of the same email
            raise DuplicateEmailError(email) from e

        logger.info("User registered: %s (role=%s)", user.id, user.role.value)
        return user

    async def verify(self, email: str, password: str) -> User:
        """Return the user owning these credentials or raise InvalidCredentialsError."""
        normalized = (email or "").strip().lower()
        user = await self._users.find_by_email(normalized)

        if user is None:
            self._hasher.verify_dummy(password or "")
            logger.warning("Login failed for %s", normalized)
            raise InvalidCredentialsError()

        if not self._hasher.verify(password or "", user.password_hash):
            logger.warning("Login failed for %s", normalized)
            raise InvalidCredentialsError()

        logger.info("User logged in: %s", user.id)
        return user

    async def find_by_id(self, user_id: uuid.UUID) -> Optional[User]:
        return await self._users.get(user_id)

    async def get(self, user_id: uuid.UUID, actor: User) -> User:
        self._check_other_user(actor, Action.USER_READ, user_id)
        return await self._require(user_id)

    async def list_users(self, actor: User) -> List[User]:
        ensure_allowed(actor, Action.USER_LIST)
        return await self._users.list_all()

    async def update(self, user_id: uuid.UUID, patch: Mapping[str, Any], actor: User) -> User:
        """
        Apply a partial update.

        Users may change their own name, email, address and password; only a
        System Administrator may change anyone's role or touch other users.
        Keys absent from `patch` are left alone; None leaves name, email,
        password and role unchanged and clears the address.
        """
        self._check_other_user(actor, Action.USER_UPDATE, user_id)
        user = await self._require(user_id)
        ensure_allowed(actor, Action.USER_UPDATE, user)

        role = patch.get("role")
        if role is not None and role != user.role:
            if not actor.is_admin:
                raise InsufficientRoleError(
                    message="Only a System Administrator can change roles",
                    context={"user_id": str(actor.id)},
                )
            user.role = UserRole(role)

        if patch.get("name") is not None:
            user.name = require_text(patch["name"], "name")

        if patch.get("email") is not None:
            email = normalize_email(patch["email"])
            if email != user.email and await self._users.email_taken(email, exclude_id=user.id):
                raise DuplicateEmailError(email)
            user.email = email

        if "address" in patch:
            user.address = optional_text(patch["address"])

        if patch.get("password") is not None:
            user.password_hash = self._hasher.hash(patch["password"])

        try:
            await self._users.save(user)
        except IntegrityError as e:
            raise DuplicateEmailError(user.email) from e

        logger.info("User %s updated by %s", user.id, actor.id)
        return user

    async def delete(self, user_id: uuid.UUID, actor: User) -> None:
        ensure_allowed(actor, Action.USER_DELETE)
        user = await self._require(user_id)
        await self._users.delete(user)
        logger.info("User %s deleted by %s", user_id, actor.id)

    # ── Helpers ───────────────────────────────────────────────────────────

    async def _require(self, user_id: uuid.UUID) -> User:
        user = await self._users.get(user_id)
        if user is None:
            raise NotFoundError(resource="User", resource_id=str(user_id))
        return user

    @staticmethod
    def _check_other_user(actor: User, action: Action, user_id: uuid.UUID) -> None:
        # Decided before the lookup so non-admins cannot probe which ids exist
        if user_id != actor.id:
            ensure_allowed(actor, action)
