"""
Domain errors for the store rating API.

Services raise these; the exception handlers in
``storerating.middleware.errors`` turn them into JSON responses.
"""

from sqlalchemy.exc import IntegrityError


class StoreRatingError(Exception):
    """Base exception carrying the HTTP status it maps to."""

    def __init__(self, message: str, code: str = "INTERNAL_ERROR", status_code: int = 500):
        self.message = message
        self.code = code
        self.status_code = status_code
        super().__init__(message)


class ValidationFailed(StoreRatingError):
    def __init__(self, message: str = "Validation failed", errors: list[dict] | None = None):
        super().__init__(message, code="VALIDATION_ERROR", status_code=400)
        self.errors = errors or []


class DuplicateEmail(StoreRatingError):
    def __init__(self, message: str = "Email already registered"):
        super().__init__(message, code="DUPLICATE_EMAIL", status_code=400)


class Unauthenticated(StoreRatingError):
    def __init__(self, message: str = "Not authenticated"):
        super().__init__(message, code="UNAUTHENTICATED", status_code=401)


class Forbidden(StoreRatingError):
    def __init__(self, message: str = "Access denied"):
        super().__init__(message, code="FORBIDDEN", status_code=403)


class NotFound(StoreRatingError):
    def __init__(self, message: str = "Not found"):
        super().__init__(message, code="NOT_FOUND", status_code=404)


class RatingConflict(StoreRatingError):
    def __init__(self, message: str = "Rating was submitted concurrently, please try again"):
        super().__init__(message, code="RATING_CONFLICT", status_code=409)


class InvalidToken(StoreRatingError):
    """Raised by the token service; the authorization gate reports it as 401."""

    def __init__(self, message: str = "Invalid or expired token"):
        super().__init__(message, code="INVALID_TOKEN", status_code=401)


def is_unique_violation(exc: IntegrityError, constraint: str, column: str) -> bool:
    """
    Tell whether an IntegrityError was raised by a given unique constraint.

    SQLite reports the offending ``table.column`` while PostgreSQL and MySQL
    name the constraint, so both are checked.

    Args:
        exc: Error raised on flush/commit
        constraint: Constraint name, e.g. ``uq_users_email``
        column: Qualified column, e.g. ``users.email``
    """
    text = str(exc.orig) if exc.orig is not None else str(exc)
    return constraint in text or f"UNIQUE constraint failed: {column}" in text
