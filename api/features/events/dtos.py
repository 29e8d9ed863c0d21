"""DTOs for the Events feature."""
from typing import Optional

from pydantic import Field

from api.features.events.entities.event import EVENT_FIELD_LENGTHS, MEMBERS_MAX_LIMIT
from api.features.events.models import EventModel
from api.shared.dtos import BaseDTO


class EventDetailsDTO(BaseDTO):
    """Event fields other than the key."""

    date: str = Field(
        max_length=EVENT_FIELD_LENGTHS["date"], description="When the event takes place"
    )
    deadline: str = Field(max_length=EVENT_FIELD_LENGTHS["deadline"], description="Entry deadline")
    location: str = Field(
        max_length=EVENT_FIELD_LENGTHS["location"], description="Where the event takes place"
    )
    members_max: int = Field(
        alias="membersMax", ge=0, le=MEMBERS_MAX_LIMIT, description="Maximum participants"
    )
    lottery: bool = Field(description="Whether entries are drawn by lottery")
    description: Optional[str] = Field(
        default="", max_length=EVENT_FIELD_LENGTHS["description"], description="Free-form details"
    )


class EventDTO(EventDetailsDTO):
    """Event as exchanged with the chat client."""

    host_id: str = Field(
        alias="hostID",
        min_length=1,
        max_length=EVENT_FIELD_LENGTHS["host_id"],
        description="Host user id",
    )
    event_name: str = Field(
        alias="eventName",
        min_length=1,
        max_length=EVENT_FIELD_LENGTHS["event_name"],
        description="Event name",
    )

    @classmethod
    def from_model(cls, event: EventModel) -> "EventDTO":
        return cls(**event.model_dump())

    def to_model(self) -> EventModel:
        return EventModel(**self.model_dump())
