"""User entity: a platform user who signed up with the bot."""
from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from api.shared.entities.base import BaseEntity


class User(BaseEntity):
    """User entity keyed by the platform-assigned user id."""

    user_id: Mapped[str] = mapped_column(String(255), primary_key=True)
    user_name: Mapped[str] = mapped_column(String(255), nullable=False)
