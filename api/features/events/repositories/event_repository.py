"""Event repository using base repository pattern."""
from typing import List

from api.features.events.entities.event import Event
from api.shared.base import BaseRepository


class EventRepository(BaseRepository[Event]):
    """Repository for events; all events are listed by host id."""

    model = Event
    key_fields = ("host_id", "event_name")
    order_by = ("host_id", "event_name")

    async def list_hosted_by(self, host_id: str) -> List[Event]:
        """Events of one host ordered by name; an empty host lists everything."""
        if not host_id:
            return await self.list()
        return await self.list(order_by=("event_name",), host_id=host_id)
