"""DTOs for the Participants feature."""
from pydantic import Field

from api.features.participants.models import ParticipantModel
from api.shared.dtos import BaseDTO


class ParticipantDTO(BaseDTO):
    """Participant as exchanged with the chat client."""

    host_id: str = Field(alias="hostID", min_length=1)
    event_name: str = Field(alias="eventName", min_length=1)
    participant_id: str = Field(alias="participantID", min_length=1)

    @classmethod
    def from_model(cls, participant: ParticipantModel) -> "ParticipantDTO":
        return cls(**participant.model_dump())

    def to_model(self) -> ParticipantModel:
        return ParticipantModel(**self.model_dump())


class TransferParticipationRequest(BaseDTO):
    """Move a participation to another user."""

    participant_id: str = Field(alias="participantID", min_length=1)
