"""Participant repository using base repository pattern."""
from typing import List

from api.features.participants.entities.participant import Participant
from api.shared.base import BaseRepository


class ParticipantRepository(BaseRepository[Participant]):
    """Repository for participants, listed by participant id."""

    model = Participant
    key_fields = ("host_id", "event_name", "participant_id")
    order_by = ("participant_id", "host_id", "event_name")

    async def list_hosted_by(self, host_id: str, event_name: str) -> List[Participant]:
        """Participants of one event ordered by event name."""
        return await self.list(
            order_by=("event_name", "participant_id"),
            host_id=host_id,
            event_name=event_name,
        )
