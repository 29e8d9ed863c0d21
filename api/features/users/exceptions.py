"""Exceptions for the Users feature."""
from api.shared.exceptions import ConflictError, NotFoundError


class UserNotFoundError(NotFoundError):
    """Raised when a user is not found."""

    def __init__(self, user_id: str):
        super().__init__("User", user_id)


class UserAlreadyExistsError(ConflictError):
    """Raised when signing up a user id that is already registered."""

    def __init__(self, user_id: str):
        message = f"User with ID '{user_id}' already exists"
        super().__init__(message, {"user_id": user_id})
