"""Service layer for the Events feature."""
import logging
from typing import List

from sqlalchemy.ext.asyncio import AsyncSession

from api.features.events.exceptions import EventAlreadyExistsError, EventNotFoundError
from api.features.events.models import EventModel
from api.features.events.repositories.event_repository import EventRepository
from api.shared.exceptions import ConflictError

logger = logging.getLogger("eventbot.events.service")


class EventService:
    """CRUD over events keyed by (host_id, event_name)."""

    async def list_events(self, *, db_session: AsyncSession) -> List[EventModel]:
        repository = EventRepository(db_session)
        return [EventModel.from_entity(e) for e in await repository.list()]

    async def list_events_hosted_by(
        self, host_id: str, *, db_session: AsyncSession
    ) -> List[EventModel]:
        repository = EventRepository(db_session)
        entities = await repository.list_hosted_by(host_id)
        return [EventModel.from_entity(e) for e in entities]

    async def get_event(
        self, host_id: str, event_name: str, *, db_session: AsyncSession
    ) -> EventModel:
        repository = EventRepository(db_session)
        entity = await repository.get(host_id=host_id, event_name=event_name)
        if entity is None:
            raise EventNotFoundError(host_id, event_name)
        return EventModel.from_entity(entity)

    async def add_event(self, event: EventModel, *, db_session: AsyncSession) -> EventModel:
        """Insert an event; a duplicate (host_id, event_name) raises EventAlreadyExistsError."""
        repository = EventRepository(db_session)
        try:
            if await repository.exists(**event.key):
                raise EventAlreadyExistsError(event.host_id, event.event_name)
            entity = await repository.create(event.to_entity())
            await db_session.commit()
        except EventAlreadyExistsError:
            await db_session.rollback()
            raise
        except ConflictError as e:
            await db_session.rollback()
            raise EventAlreadyExistsError(event.host_id, event.event_name) from e
        except Exception:
            await db_session.rollback()
            raise

        logger.info(f"Event created: {entity.host_id}/{entity.event_name}")
        return EventModel.from_entity(entity)

    async def update_event(self, event: EventModel, *, db_session: AsyncSession) -> EventModel:
        repository = EventRepository(db_session)
        values = event.model_dump(exclude={"host_id", "event_name"})
        try:
            if await repository.update_by_key(event.key, **values) == 0:
                raise EventNotFoundError(event.host_id, event.event_name)
            await db_session.commit()
        except Exception:
            await db_session.rollback()
            raise
        return event

    async def delete_event(
        self, host_id: str, event_name: str, *, db_session: AsyncSession
    ) -> None:
        repository = EventRepository(db_session)
        try:
            if await repository.delete_by_key(host_id=host_id, event_name=event_name) == 0:
                raise EventNotFoundError(host_id, event_name)
            await db_session.commit()
        except Exception:
            await db_session.rollback()
            raise
        logger.info(f"Event deleted: {host_id}/{event_name}")
