"""
StoreRate Backend — Custom Exception Hierarchy
===============================================

What:  Application-specific exceptions, one per failure kind the API exposes.
How:   Each exception carries a user-facing message, a stable machine-readable
       `code` and an optional context dict. Global handlers registered in
       main.py translate them into JSON responses with the right status.
Who:   Raised by services, repositories, security helpers and middleware.

Exception Hierarchy:
    StoreRateError (base)
    ├── ValidationError             → 400 Bad Request
    ├── ConflictError               → 400 Bad Request (user-correctable)
    │   ├── DuplicateEmailError
    │   ├── DuplicateNameError
    │   └── DuplicateRatingError
    ├── AuthenticationError         → 401 Unauthorized
    │   ├── InvalidCredentialsError
    │   ├── InvalidTokenError
    │   └── ExpiredTokenError
    ├── ForbiddenError              → 403 Forbidden
    │   ├── InsufficientRoleError
    │   └── NotOwnerError
    ├── NotFoundError               → 404 Not Found
    │   └── StoreNotFoundError
    ├── DatabaseError               → 500 Internal Server Error
    │   └── AggregationError
    └── RateLimitExceededError      → 429 Too Many Requests

None of these are retried internally; they are terminal for the request.
"""

from typing import Any, Dict, Optional


class StoreRateError(Exception):
    """
    Base exception for all StoreRate application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        code:     Stable machine-readable error kind
        context:  Additional debug info (logged, NOT returned to the client)
    """

    code = "server_error"
    status_code = 500

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


# ══════════════════════════════════════════════════════════════════════════
# 400: client can fix the input
# ══════════════════════════════════════════════════════════════════════════

class ValidationError(StoreRateError):
    """
    Raised when input fails a business rule.

    When: malformed email, credential of the wrong length, rating value
    outside the configured range, empty store name.
    """

    code = "validation_error"
    status_code = 400

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class ConflictError(StoreRateError):
    """A uniqueness constraint would be violated."""

    code = "conflict"
    status_code = 400


class DuplicateEmailError(ConflictError):
    code = "duplicate_email"

    def __init__(self, email: str, context: Optional[Dict[str, Any]] = None):
        ctx = context or {}
        ctx["email"] = email
        super().__init__(message="A user with this email already exists.", context=ctx)


class DuplicateNameError(ConflictError):
    code = "duplicate_name"

    def __init__(self, name: str, context: Optional[Dict[str, Any]] = None):
        ctx = context or {}
        ctx["name"] = name
        super().__init__(message="A store with this name already exists.", context=ctx)


class DuplicateRatingError(ConflictError):
    """The rater already has a Rating for this Store."""

    code = "duplicate_rating"

    def __init__(self, context: Optional[Dict[str, Any]] = None):
        super().__init__(
            message="You have already rated this store. Please update your existing rating.",
            context=context,
        )


# ══════════════════════════════════════════════════════════════════════════
# 401: who are you?
# ══════════════════════════════════════════════════════════════════════════

class AuthenticationError(StoreRateError):
    code = "not_authenticated"
    status_code = 401

    def __init__(
        self,
        message: str = "Not authenticated",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class InvalidCredentialsError(AuthenticationError):
    """
    Raised on failed login.

    The message is identical whether the email is unknown or the credential
    is wrong, so responses cannot be used to enumerate accounts.
    """

    code = "invalid_credentials"

    def __init__(self, context: Optional[Dict[str, Any]] = None):
        super().__init__(message="Invalid email or password", context=context)


class InvalidTokenError(AuthenticationError):
    code = "invalid_token"

    def __init__(
        self,
        message: str = "Not authorized, token failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class ExpiredTokenError(AuthenticationError):
    code = "token_expired"

    def __init__(self, context: Optional[Dict[str, Any]] = None):
        super().__init__(message="Not authorized, token expired", context=context)


# ══════════════════════════════════════════════════════════════════════════
# 403: authenticated but not allowed
# ══════════════════════════════════════════════════════════════════════════

class ForbiddenError(StoreRateError):
    code = "forbidden"
    status_code = 403

    def __init__(
        self,
        message: str = "You are not allowed to perform this action",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class InsufficientRoleError(ForbiddenError):
    code = "insufficient_role"

    def __init__(
        self,
        message: str = "Your role does not permit this action",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotOwnerError(ForbiddenError):
    code = "not_owner"

    def __init__(
        self,
        message: str = "Only the owner may modify this resource",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


# ══════════════════════════════════════════════════════════════════════════
# 404
# ══════════════════════════════════════════════════════════════════════════

class NotFoundError(StoreRateError):
    """
    Raised when a requested entity does not exist.

    SQLAlchemy returns None for missing rows; services convert that None into
    this exception so HTTP concerns stay out of the service logic.
    """

    code = "not_found"
    status_code = 404

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource} was not found"
        if resource_id:
            message = f"{resource} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class StoreNotFoundError(NotFoundError):
    """Referential check before a Rating is attached to a Store."""

    code = "store_not_found"

    def __init__(self, store_id: Optional[str] = None, context: Optional[Dict[str, Any]] = None):
        super().__init__(resource="Store", resource_id=store_id, context=context)


# ══════════════════════════════════════════════════════════════════════════
# 5xx / 429
# ══════════════════════════════════════════════════════════════════════════

class DatabaseError(StoreRateError):
    """
    Raised when a database operation fails unexpectedly.

    The message returned to the client is always generic; details are logged
    server-side only.
    """

    code = "server_error"
    status_code = 500

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class AggregationError(DatabaseError):
    """
    The Store average could not be recomputed.

    Raised from inside the Rating mutation's transaction, so the mutation
    itself is rolled back and reported as failed.
    """

    code = "aggregation_failed"

    def __init__(self, store_id: str, context: Optional[Dict[str, Any]] = None):
        ctx = context or {}
        ctx["store_id"] = store_id
        super().__init__(
            message="The store rating could not be updated. Please try again.",
            context=ctx,
        )


class RateLimitExceededError(StoreRateError):
    """Client exceeded the per-IP request rate limit."""

    code = "rate_limit_exceeded"
    status_code = 429

    def __init__(
        self,
        retry_after: int = 60,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = (
            f"Rate limit exceeded. Please wait {retry_after} seconds before making more requests."
        )
        ctx = context or {}
        ctx["retry_after"] = retry_after
        super().__init__(message=message, context=ctx)
        self.retry_after = retry_after
