"""Error hierarchy for the Conduit core.

Every store operation fails with a subclass of ``ConduitError``. Domain errors
(validation, uniqueness, missing entities, permissions) are terminal for the
request; ``StoreUnavailableError`` marks a transient storage failure that a
caller may choose to retry.
"""

from typing import Any


class ConduitError(Exception):
    """Base exception for all Conduit errors."""

    code = "INTERNAL_ERROR"
    http_status = 500
    default_message = "An unexpected error occurred"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_response(self) -> dict[str, Any]:
        """Convert to the standard error envelope."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
            }
        }


# --- Validation (422) ---


class ValidationFailedError(ConduitError):
    """Malformed or empty input."""

    code = "VALIDATION_ERROR"
    http_status = 422
    default_message = "Validation failed"

    def __init__(self, field: str, message: str):
        super().__init__(f"{field}: {message}")
        self.field = field

    def to_response(self) -> dict[str, Any]:
        response = super().to_response()
        response["error"]["field"] = self.field
        return response


# --- Unique-key violations (409) ---


class DuplicateConstraintError(ConduitError):
    """A unique key or edge already exists."""

    code = "CONFLICT"
    http_status = 409
    default_message = "Resource already exists"


class DuplicateUsernameError(DuplicateConstraintError):
    default_message = "Username already taken"


class DuplicateEmailError(DuplicateConstraintError):
    default_message = "Email already registered"


class SlugCollisionError(DuplicateConstraintError):
    default_message = "Could not allocate a unique slug for this title"


class AlreadyFollowingError(DuplicateConstraintError):
    default_message = "Already following this user"


class AlreadyFavoritedError(DuplicateConstraintError):
    default_message = "Article already favorited"


# --- Missing entities (404) ---


class NotFoundError(ConduitError):
    """A referenced entity does not exist."""

    code = "NOT_FOUND"
    http_status = 404
    default_message = "Resource not found"


class UserNotFoundError(NotFoundError):
    default_message = "User not found"


class ArticleNotFoundError(NotFoundError):
    default_message = "Article not found"


class CommentNotFoundError(NotFoundError):
    default_message = "Comment not found"


class NotFollowingError(NotFoundError):
    default_message = "You are not following this user"


class NotFavoritedError(NotFoundError):
    default_message = "You have not favorited this article"


# --- Authentication (401) ---


class UnauthorizedError(ConduitError):
    """Missing, malformed, or expired session token."""

    code = "UNAUTHORIZED"
    http_status = 401
    default_message = "Authentication required"


class InvalidCredentialsError(UnauthorizedError):
    """Login failed. Never says which of login or password was wrong."""

    default_message = "Invalid username or password"


# --- Permissions (403) ---


class ForbiddenError(ConduitError):
    """The actor may not perform this action."""

    code = "FORBIDDEN"
    http_status = 403
    default_message = "You may not perform that action"


class NotAuthorError(ForbiddenError):
    default_message = "Only the author may modify this resource"


class SelfFollowError(ForbiddenError):
    default_message = "You cannot follow yourself"


# --- Infrastructure (503) ---


class StoreUnavailableError(ConduitError):
    """The relational store could not be reached or timed out."""

    code = "STORE_UNAVAILABLE"
    http_status = 503
    default_message = "The data store is temporarily unavailable"
