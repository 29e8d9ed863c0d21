"""Models for the Users feature."""
from pydantic import BaseModel, ConfigDict, Field

from api.features.users.entities.user import User as UserEntity


class UserModel(BaseModel):
    """Domain model for User."""

    model_config = ConfigDict(from_attributes=True)

    user_id: str = Field(description="Platform-assigned user identifier")
    user_name: str = Field(description="Display name")

    @classmethod
    def from_entity(cls, entity: UserEntity) -> "UserModel":
        """Create model from database entity."""
        return cls(user_id=entity.user_id, user_name=entity.user_name)

    def to_entity(self) -> UserEntity:
        """Convert model to database entity."""
        return UserEntity(user_id=self.user_id, user_name=self.user_name)
