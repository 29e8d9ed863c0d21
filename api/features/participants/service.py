"""Service layer for the Participants feature."""
import logging
from typing import List

from sqlalchemy.ext.asyncio import AsyncSession

from api.features.events.exceptions import EventNotFoundError
from api.features.events.repositories.event_repository import EventRepository
from api.features.participants.exceptions import (
    ParticipantAlreadyExistsError,
    ParticipantNotFoundError,
)
from api.features.participants.models import ParticipantModel
from api.features.participants.repositories.participant_repository import ParticipantRepository
from api.features.users.exceptions import UserNotFoundError
from api.features.users.repositories.user_repository import UserRepository
from api.shared.exceptions import ConflictError

logger = logging.getLogger("eventbot.participants.service")


class ParticipantService:
    """CRUD over participants.

    Referential integrity is the database's job; the lookups in
    `add_participant` only turn the common failure into a NotFoundError
    instead of an opaque constraint violation.
    """

    async def list_participants(self, *, db_session: AsyncSession) -> List[ParticipantModel]:
        repository = ParticipantRepository(db_session)
        return [ParticipantModel.from_entity(e) for e in await repository.list()]

    async def list_participants_hosted_by(
        self, host_id: str, event_name: str, *, db_session: AsyncSession
    ) -> List[ParticipantModel]:
        repository = ParticipantRepository(db_session)
        entities = await repository.list_hosted_by(host_id, event_name)
        return [ParticipantModel.from_entity(e) for e in entities]

    async def get_participant(
        self, participant: ParticipantModel, *, db_session: AsyncSession
    ) -> ParticipantModel:
        repository = ParticipantRepository(db_session)
        entity = await repository.get(**participant.key)
        if entity is None:
            raise ParticipantNotFoundError(**participant.key)
        return ParticipantModel.from_entity(entity)

    async def add_participant(
        self, participant: ParticipantModel, *, db_session: AsyncSession
    ) -> ParticipantModel:
        repository = ParticipantRepository(db_session)
        try:
            if not await UserRepository(db_session).exists(user_id=participant.participant_id):
                raise UserNotFoundError(participant.participant_id)
            if not await EventRepository(db_session).exists(
                host_id=participant.host_id, event_name=participant.event_name
            ):
                raise EventNotFoundError(participant.host_id, participant.event_name)
            if await repository.exists(**participant.key):
                raise ParticipantAlreadyExistsError(**participant.key)
            entity = await repository.create(participant.to_entity())
            await db_session.commit()
        except ConflictError as e:
            await db_session.rollback()
            if isinstance(e, ParticipantAlreadyExistsError):
                raise
            raise ParticipantAlreadyExistsError(**participant.key) from e
        except Exception:
            await db_session.rollback()
            raise

        logger.info(
            f"Participant {entity.participant_id} joined {entity.host_id}/{entity.event_name}"
        )
        return ParticipantModel.from_entity(entity)

    async def update_participant(
        self,
        participant: ParticipantModel,
        new_participant_id: str,
        *,
        db_session: AsyncSession,
    ) -> ParticipantModel:
        """Hand a participation slot over to another user."""
        repository = ParticipantRepository(db_session)
        try:
            affected = await repository.update_by_key(
                participant.key, participant_id=new_participant_id
            )
            if affected == 0:
                raise ParticipantNotFoundError(**participant.key)
            await db_session.commit()
        except Exception:
            await db_session.rollback()
            raise
        return participant.model_copy(update={"participant_id": new_participant_id})

    async def delete_participant(
        self, participant: ParticipantModel, *, db_session: AsyncSession
    ) -> None:
        repository = ParticipantRepository(db_session)
        try:
            if await repository.delete_by_key(**participant.key) == 0:
                raise ParticipantNotFoundError(**participant.key)
            await db_session.commit()
        except Exception:
            await db_session.rollback()
            raise
