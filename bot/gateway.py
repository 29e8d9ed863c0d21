"""Clients through which the bot reaches the persistence gateway.

`LocalGateway` shares the API's database and calls the feature services
directly. `HttpGateway` talks to a separately deployed API over its JSON
endpoints (`/signup`, `/user/{id}`, `/event/register`, `/event/list`).
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List, Optional

import httpx
import structlog
from sqlalchemy.exc import SQLAlchemyError

from api.features.events.dtos import EventDTO
from api.features.events.exceptions import EventAlreadyExistsError
from api.features.events.models import EventModel
from api.features.events.service import EventService
from api.features.users.dtos import UserDTO
from api.features.users.exceptions import UserAlreadyExistsError, UserNotFoundError
from api.features.users.models import UserModel
from api.features.users.service import UserService
from api.shared.exceptions import DatabaseError, TransportError
from infra.resources import DatabaseResource

logger = structlog.get_logger("eventbot.gateway")


class PersistenceGateway(ABC):
    """Operations the chat side needs from the persistence layer."""

    @abstractmethod
    async def add_user(self, user: UserModel) -> UserModel:
        """Raises UserAlreadyExistsError for a known user id."""

    @abstractmethod
    async def get_user(self, user_id: str) -> UserModel:
        """Raises UserNotFoundError."""

    @abstractmethod
    async def add_event(self, event: EventModel) -> EventModel:
        """Raises EventAlreadyExistsError for a duplicate (host_id, event_name)."""

    @abstractmethod
    async def list_events_hosted_by(self, host_id: str) -> List[EventModel]:
        """Events of one host ordered by name."""


class LocalGateway(PersistenceGateway):
    """In-process gateway; one database session per call."""

    def __init__(
        self,
        database: DatabaseResource,
        user_service: UserService,
        event_service: EventService,
    ):
        self.database = database
        self.user_service = user_service
        self.event_service = event_service

    async def add_user(self, user: UserModel) -> UserModel:
        try:
            async with self.database.get_session() as session:
                return await self.user_service.add_user(user, db_session=session)
        except SQLAlchemyError as e:
            raise DatabaseError("could not add user", {"user_id": user.user_id}) from e

    async def get_user(self, user_id: str) -> UserModel:
        try:
            async with self.database.get_session() as session:
                return await self.user_service.get_user(user_id, db_session=session)
        except SQLAlchemyError as e:
            raise DatabaseError("could not get user", {"user_id": user_id}) from e

    async def add_event(self, event: EventModel) -> EventModel:
        try:
            async with self.database.get_session() as session:
                return await self.event_service.add_event(event, db_session=session)
        except SQLAlchemyError as e:
            raise DatabaseError("could not add event", event.key) from e

    async def list_events_hosted_by(self, host_id: str) -> List[EventModel]:
        try:
            async with self.database.get_session() as session:
                return await self.event_service.list_events_hosted_by(
                    host_id, db_session=session
                )
        except SQLAlchemyError as e:
            raise DatabaseError("could not list events", {"host_id": host_id}) from e


class HttpGateway(PersistenceGateway):
    """Gateway deployed as a separate service."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport

    async def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        try:
            async with httpx.AsyncClient(
                base_url=self.base_url, timeout=self.timeout, transport=self.transport
            ) as client:
                return await client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            logger.error("gateway.request_failed", method=method, path=path, error=str(e))
            raise TransportError("persistence gateway", str(e), {"path": path}) from e

    @staticmethod
    def _raise_for_status(response: httpx.Response) -> None:
        if response.is_success:
            return
        raise TransportError(
            "persistence gateway",
            f"HTTP {response.status_code}: {response.text}",
            {"status_code": response.status_code, "path": response.request.url.path},
        )

    async def add_user(self, user: UserModel) -> UserModel:
        payload = UserDTO(user_id=user.user_id, user_name=user.user_name)
        response = await self._request(
            "POST", "/signup", json=payload.model_dump(by_alias=True)
        )
        if response.status_code == 409:
            raise UserAlreadyExistsError(user.user_id)
        self._raise_for_status(response)
        body = UserDTO.model_validate(response.json())
        return UserModel(user_id=body.user_id, user_name=body.user_name)

    async def get_user(self, user_id: str) -> UserModel:
        response = await self._request("GET", f"/user/{user_id}")
        if response.status_code == 404:
            raise UserNotFoundError(user_id)
        self._raise_for_status(response)
        body = UserDTO.model_validate(response.json())
        return UserModel(user_id=body.user_id, user_name=body.user_name)

    async def add_event(self, event: EventModel) -> EventModel:
        payload = EventDTO.from_model(event).model_dump(by_alias=True)
        response = await self._request("POST", "/event/register", json=payload)
        if response.status_code == 409:
            raise EventAlreadyExistsError(event.host_id, event.event_name)
        self._raise_for_status(response)
        return EventDTO.model_validate(response.json()).to_model()

    async def list_events_hosted_by(self, host_id: str) -> List[EventModel]:
        response = await self._request("GET", "/event/list", params={"hostID": host_id})
        self._raise_for_status(response)
        return [EventDTO.model_validate(item).to_model() for item in response.json()]
