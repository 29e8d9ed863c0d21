"""DTOs for the Users feature."""
from pydantic import Field

from api.shared.dtos import BaseDTO


class UserDTO(BaseDTO):
    """User as exchanged with the chat client."""

    user_id: str = Field(alias="userID", min_length=1, description="Platform user identifier")
    user_name: str = Field(alias="userName", description="Display name")


class UpdateUserRequest(BaseDTO):
    """Rename a user."""

    user_name: str = Field(alias="userName", description="Display name")
