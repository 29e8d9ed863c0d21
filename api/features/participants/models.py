"""Models for the Participants feature."""
from pydantic import BaseModel, ConfigDict, Field

from api.features.participants.entities.participant import Participant as ParticipantEntity


class ParticipantModel(BaseModel):
    """Domain model for Participant."""

    model_config = ConfigDict(from_attributes=True)

    host_id: str = Field(description="Host of the event")
    event_name: str = Field(description="Event name")
    participant_id: str = Field(description="User id of the participant")

    @property
    def key(self) -> dict:
        return self.model_dump()

    @classmethod
    def from_entity(cls, entity: ParticipantEntity) -> "ParticipantModel":
        return cls(
            host_id=entity.host_id,
            event_name=entity.event_name,
            participant_id=entity.participant_id,
        )

    def to_entity(self) -> ParticipantEntity:
        return ParticipantEntity(**self.model_dump())
