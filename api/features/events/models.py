"""Models for the Events feature."""
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from api.features.events.entities.event import Event as EventEntity


class EventModel(BaseModel):
    """Domain model for Event."""

    model_config = ConfigDict(from_attributes=True)

    host_id: str = Field(description="User id of the host")
    event_name: str = Field(description="Event name, unique per host")
    date: str = Field(description="When the event takes place")
    deadline: str = Field(description="Entry deadline")
    location: str = Field(description="Where the event takes place")
    members_max: int = Field(ge=0, description="Maximum number of participants")
    lottery: bool = Field(description="Whether entries are drawn by lottery")
    description: Optional[str] = Field(default="", description="Free-form details")

    @property
    def key(self) -> dict:
        return {"host_id": self.host_id, "event_name": self.event_name}

    @classmethod
    def from_entity(cls, entity: EventEntity) -> "EventModel":
        """Create model from database entity."""
        return cls(
            host_id=entity.host_id,
            event_name=entity.event_name,
            date=entity.date,
            deadline=entity.deadline,
            location=entity.location,
            members_max=entity.members_max or 0,
            lottery=bool(entity.lottery),
            description=entity.description or "",
        )

    def to_entity(self) -> EventEntity:
        """Convert model to database entity."""
        return EventEntity(
            host_id=self.host_id,
            event_name=self.event_name,
            date=self.date,
            deadline=self.deadline,
            location=self.location,
            members_max=self.members_max,
            lottery=self.lottery,
            description=self.description,
        )
