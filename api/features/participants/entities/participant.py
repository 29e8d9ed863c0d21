"""Participant entity linking a user to a hosted event."""
from sqlalchemy import ForeignKey, ForeignKeyConstraint, String
from sqlalchemy.orm import Mapped, mapped_column

from api.shared.entities.base import BaseEntity


class Participant(BaseEntity):
    """Participant entity with composite key (host_id, event_name, participant_id)."""

    __table_args__ = (
        ForeignKeyConstraint(
            ["host_id", "event_name"],
            ["events.host_id", "events.event_name"],
            ondelete="CASCADE",
        ),
    )

    host_id: Mapped[str] = mapped_column(String(255), primary_key=True)
    event_name: Mapped[str] = mapped_column(String(255), primary_key=True)
    participant_id: Mapped[str] = mapped_column(
        String(255), ForeignKey("users.user_id"), primary_key=True
    )
