"""Event entity registered through the chat form."""
from typing import Optional

from sqlalchemy import Boolean, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from api.shared.entities.base import BaseEntity

# Column widths, also enforced on chat input and on the HTTP DTOs
EVENT_FIELD_LENGTHS = {
    "host_id": 255,
    "event_name": 255,
    "date": 255,
    "deadline": 255,
    "location": 512,
    "description": 1024,
}
# Largest value of a 32-bit INTEGER column
MEMBERS_MAX_LIMIT = 2_147_483_647


class Event(BaseEntity):
    """Event entity with composite key (host_id, event_name)."""

    host_id: Mapped[str] = mapped_column(String(EVENT_FIELD_LENGTHS["host_id"]), primary_key=True)
    event_name: Mapped[str] = mapped_column(
        String(EVENT_FIELD_LENGTHS["event_name"]), primary_key=True
    )

    # Free text exactly as collected in the chat
    date: Mapped[str] = mapped_column(String(EVENT_FIELD_LENGTHS["date"]), nullable=False)
    deadline: Mapped[str] = mapped_column(String(EVENT_FIELD_LENGTHS["deadline"]), nullable=False)
    location: Mapped[str] = mapped_column(String(EVENT_FIELD_LENGTHS["location"]), nullable=False)

    members_max: Mapped[Optional[int]] = mapped_column(Integer)
    lottery: Mapped[bool] = mapped_column(Boolean, default=False)
    description: Mapped[Optional[str]] = mapped_column(String(EVENT_FIELD_LENGTHS["description"]))
