"""Router for the Participants feature."""
import logging
from typing import List, Optional

from dependency_injector.wiring import Provide, inject
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from api.features.participants.dtos import ParticipantDTO, TransferParticipationRequest
from api.features.participants.models import ParticipantModel
from api.features.participants.service import ParticipantService
from api.shared.db import get_db_session
from di.container import ApplicationContainer as DependencyContainer

router = APIRouter()
logger = logging.getLogger("eventbot.participants.router")


@router.get("/list", response_model=List[ParticipantDTO])
@inject
async def list_participants(
    host_id: Optional[str] = Query(None, alias="hostID"),
    event_name: Optional[str] = Query(None, alias="eventName"),
    service: ParticipantService = Depends(
        Provide[DependencyContainer.services.participant_service]
    ),
    db_session: AsyncSession = Depends(get_db_session),
):
    """List all participants, or those of one event when host and name are given."""
    if host_id and event_name:
        items = await service.list_participants_hosted_by(
            host_id, event_name, db_session=db_session
        )
    else:
        items = await service.list_participants(db_session=db_session)
    return [ParticipantDTO.from_model(p) for p in items]


@router.post("/join", response_model=ParticipantDTO)
@inject
async def join_event(
    request: ParticipantDTO,
    service: ParticipantService = Depends(
        Provide[DependencyContainer.services.participant_service]
    ),
    db_session: AsyncSession = Depends(get_db_session),
):
    participant = await service.add_participant(request.to_model(), db_session=db_session)
    return ParticipantDTO.from_model(participant)


@router.get("/{host_id}/{event_name}/{participant_id}", response_model=ParticipantDTO)
@inject
async def get_participant(
    host_id: str,
    event_name: str,
    participant_id: str,
    service: ParticipantService = Depends(
        Provide[DependencyContainer.services.participant_service]
    ),
    db_session: AsyncSession = Depends(get_db_session),
):
    key = ParticipantModel(
        host_id=host_id, event_name=event_name, participant_id=participant_id
    )
    return ParticipantDTO.from_model(
        await service.get_participant(key, db_session=db_session)
    )


@router.put("/{host_id}/{event_name}/{participant_id}", response_model=ParticipantDTO)
@inject
async def transfer_participation(
    host_id: str,
    event_name: str,
    participant_id: str,
    request: TransferParticipationRequest,
    service: ParticipantService = Depends(
        Provide[DependencyContainer.services.participant_service]
    ),
    db_session: AsyncSession = Depends(get_db_session),
):
    key = ParticipantModel(
        host_id=host_id, event_name=event_name, participant_id=participant_id
    )
    participant = await service.update_participant(
        key, request.participant_id, db_session=db_session
    )
    return ParticipantDTO.from_model(participant)


@router.delete("/{host_id}/{event_name}/{participant_id}", status_code=204)
@inject
async def leave_event(
    host_id: str,
    event_name: str,
    participant_id: str,
    service: ParticipantService = Depends(
        Provide[DependencyContainer.services.participant_service]
    ),
    db_session: AsyncSession = Depends(get_db_session),
):
    key = ParticipantModel(
        host_id=host_id, event_name=event_name, participant_id=participant_id
    )
    await service.delete_participant(key, db_session=db_session)
