"""User repository using base repository pattern."""
from typing import Optional

from api.features.users.entities.user import User
from api.shared.base import BaseRepository


class UserRepository(BaseRepository[User]):
    """Repository for user entities, listed by name."""

    model = User
    key_fields = ("user_id",)
    order_by = ("user_name", "user_id")

    async def get_by_user_id(self, user_id: str) -> Optional[User]:
        return await self.get(user_id=user_id)
