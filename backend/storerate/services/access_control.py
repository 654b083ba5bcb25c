"""
StoreRate Backend — Access Control
===================================

What:  Pure decision function deciding whether a user may perform an action
       on an entity. No storage, no I/O.
How:   authorize(actor, action, target) evaluates the rules below in order
       and returns Allow() or Deny(reason). ensure_allowed() raises the
       matching ForbiddenError subclass for callers that want an exception.

Rules:
    1. A System Administrator may do everything.
    2. Store update/delete: only the store's owner.
    3. Store create: Store Owners (and admins, rule 1). The new store's owner
       is always the actor.
    4. Rating update/delete: only the rater. Ratings whose rater was deleted
       are therefore admin-only.
    5. Listing or deleting users, and reading/updating *other* users: admins
       only. Users may read and update themselves.
    6. Reading stores and ratings, and creating ratings, is open to everyone
       who reached the service. Store listing for a Store Owner is narrowed to
       their own stores by store_listing_scope(); that is query shaping, not
       a denial.
"""

import enum
from dataclasses import dataclass
from typing import Optional, Union

from storerate.exceptions import InsufficientRoleError, NotOwnerError
from storerate.models.rating import Rating
from storerate.models.store import Store
from storerate.models.user import User, UserRole


class Action(str, enum.Enum):
    STORE_CREATE = "store:create"
    STORE_READ = "store:read"
    STORE_UPDATE = "store:update"
    STORE_DELETE = "store:delete"
    RATING_CREATE = "rating:create"
    RATING_READ = "rating:read"
    RATING_UPDATE = "rating:update"
    RATING_DELETE = "rating:delete"
    USER_LIST = "user:list"
    USER_READ = "user:read"
    USER_UPDATE = "user:update"
    USER_DELETE = "user:delete"


class DenyReason(str, enum.Enum):
    INSUFFICIENT_ROLE = "InsufficientRole"
    NOT_OWNER = "NotOwner"


@dataclass(frozen=True)
class Allow:
    allowed = True


@dataclass(frozen=True)
class Deny:
    reason: DenyReason
    allowed = False


Decision = Union[Allow, Deny]
Target = Union[Store, Rating, User, None]

STORE_MUTATIONS = frozenset({Action.STORE_UPDATE, Action.STORE_DELETE})
RATING_MUTATIONS = frozenset({Action.RATING_UPDATE, Action.RATING_DELETE})
OPEN_ACTIONS = frozenset({Action.STORE_READ, Action.RATING_READ, Action.RATING_CREATE})
STORE_CREATOR_ROLES = frozenset({UserRole.STORE_OWNER, UserRole.SYSTEM_ADMINISTRATOR})


def authorize(actor: User, action: Action, target: Target = None) -> Decision:
    """Decide whether `actor` may perform `action` on `target`."""
    if actor.role == UserRole.SYSTEM_ADMINISTRATOR:
        return Allow()

    if action in STORE_MUTATIONS:
        if isinstance(target, Store) and target.owner_id == actor.id:
            return Allow()
        return Deny(DenyReason.NOT_OWNER)

    if action == Action.STORE_CREATE:
        if actor.role in STORE_CREATOR_ROLES:
            return Allow()
        return Deny(DenyReason.INSUFFICIENT_ROLE)

    if action in RATING_MUTATIONS:
        if isinstance(target, Rating) and target.rater_id is not None and target.rater_id == actor.id:
            return Allow()
        return Deny(DenyReason.NOT_OWNER)

    if action in (Action.USER_LIST, Action.USER_DELETE):
        return Deny(DenyReason.INSUFFICIENT_ROLE)

    if action in (Action.USER_READ, Action.USER_UPDATE):
        if isinstance(target, User) and target.id == actor.id:
            return Allow()
        return Deny(DenyReason.INSUFFICIENT_ROLE)

    if action in OPEN_ACTIONS:
        return Allow()

    return Deny(DenyReason.INSUFFICIENT_ROLE)


def ensure_allowed(actor: User, action: Action, target: Target = None) -> None:
    """Raise InsufficientRoleError / NotOwnerError when authorize() denies."""
    decision = authorize(actor, action, target)
    if isinstance(decision, Allow):
        return

    context = {"user_id": str(actor.id), "role": actor.role.value, "action": action.value}
    if decision.reason == DenyReason.NOT_OWNER:
        raise NotOwnerError(context=context)
    raise InsufficientRoleError(context=context)


def store_listing_scope(actor: Optional[User]) -> Optional[User]:
    """The owner to filter a store listing by, or None for every store."""
    if actor is not None and actor.role == UserRole.STORE_OWNER:
        return actor
    return None
