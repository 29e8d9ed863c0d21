"""Router for the Events feature."""
import logging
from typing import List

from dependency_injector.wiring import Provide, inject
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from api.features.events.dtos import EventDetailsDTO, EventDTO
from api.features.events.models import EventModel
from api.features.events.service import EventService
from api.shared.db import get_db_session
from di.container import ApplicationContainer as DependencyContainer

router = APIRouter()
logger = logging.getLogger("eventbot.events.router")


@router.post("/register", response_model=EventDTO)
@inject
async def register_event(
    request: EventDTO,
    service: EventService = Depends(Provide[DependencyContainer.services.event_service]),
    db_session: AsyncSession = Depends(get_db_session),
):
    """Register a new event."""
    event = await service.add_event(request.to_model(), db_session=db_session)
    return EventDTO.from_model(event)


@router.get("/list", response_model=List[EventDTO])
@inject
async def list_events(
    host_id: str = Query("", alias="hostID", description="Only events of this host"),
    service: EventService = Depends(Provide[DependencyContainer.services.event_service]),
    db_session: AsyncSession = Depends(get_db_session),
):
    events = await service.list_events_hosted_by(host_id, db_session=db_session)
    return [EventDTO.from_model(e) for e in events]


@router.get("/{host_id}/{event_name}", response_model=EventDTO)
@inject
async def get_event(
    host_id: str,
    event_name: str,
    service: EventService = Depends(Provide[DependencyContainer.services.event_service]),
    db_session: AsyncSession = Depends(get_db_session),
):
    event = await service.get_event(host_id, event_name, db_session=db_session)
    return EventDTO.from_model(event)


@router.put("/{host_id}/{event_name}", response_model=EventDTO)
@inject
async def update_event(
    host_id: str,
    event_name: str,
    request: EventDetailsDTO,
    service: EventService = Depends(Provide[DependencyContainer.services.event_service]),
    db_session: AsyncSession = Depends(get_db_session),
):
    event = EventModel(host_id=host_id, event_name=event_name, **request.model_dump())
    event = await service.update_event(event, db_session=db_session)
    return EventDTO.from_model(event)


@router.delete("/{host_id}/{event_name}", status_code=204)
@inject
async def delete_event(
    host_id: str,
    event_name: str,
    service: EventService = Depends(Provide[DependencyContainer.services.event_service]),
    db_session: AsyncSession = Depends(get_db_session),
):
    await service.delete_event(host_id, event_name, db_session=db_session)
