"""Shared fixtures: SQLite database, in-memory gateway and chat helpers."""
import itertools
import json
from typing import Dict, List, Optional

import httpx
import pytest

from api.features.events.exceptions import EventAlreadyExistsError
from api.features.events.models import EventModel
from api.features.users.exceptions import UserAlreadyExistsError, UserNotFoundError
from api.features.users.models import UserModel
from api.shared.entities.registry import BaseEntity
from api.shared.exceptions import EventBotException
from bot.engine import RegistrationEngine
from bot.gateway import PersistenceGateway
from bot.platform import InboundMessage, LineMessagingClient
from bot.prompts import Prompts
from bot.renderer import NotificationRenderer
from bot.session_store import InMemorySessionStore
from core.settings import BotSettings, PromptSettings
from infra.resources import DatabaseResource

# Valid answers for the seven form fields, in form order
EVENT_ANSWERS = [
    "Board game night",
    "2025-11-01 18:00",
    "2025-10-25",
    "Community hall",
    "12",
    "true",
    "Bring snacks",
]


class InMemoryGateway(PersistenceGateway):
    """Gateway double keeping users and events in dictionaries."""

    def __init__(self):
        self.users: Dict[str, UserModel] = {}
        self.events: Dict[tuple, EventModel] = {}
        self.failures: List[EventBotException] = []
        self.add_event_calls = 0

    async def add_user(self, user: UserModel) -> UserModel:
        if user.user_id in self.users:
            raise UserAlreadyExistsError(user.user_id)
        self.users[user.user_id] = user
        return user

    async def get_user(self, user_id: str) -> UserModel:
        if user_id not in self.users:
            raise UserNotFoundError(user_id)
        return self.users[user_id]

    async def add_event(self, event: EventModel) -> EventModel:
        self.add_event_calls += 1
        if self.failures:
            raise self.failures.pop(0)
        key = (event.host_id, event.event_name)
        if key in self.events:
            raise EventAlreadyExistsError(event.host_id, event.event_name)
        self.events[key] = event
        return event

    async def list_events_hosted_by(self, host_id: str) -> List[EventModel]:
        return sorted(
            (e for e in self.events.values() if e.host_id == host_id),
            key=lambda e: e.event_name,
        )


class Chat:
    """Sends messages from one user with fresh message ids."""

    def __init__(self, engine: RegistrationEngine, sender_id: str = "U1"):
        self.engine = engine
        self.sender_id = sender_id
        self._ids = itertools.count(1)

    def message(self, text: str, message_id: Optional[str] = None) -> InboundMessage:
        n = next(self._ids)
        return InboundMessage(
            sender_id=self.sender_id,
            text=text,
            reply_handle=f"reply-{n}",
            message_id=message_id or f"{self.sender_id}-{n}",
        )

    async def start(self):
        return await self.engine.start(self.message("register event"))

    async def send(self, text: str):
        return await self.engine.handle(self.message(text))

    async def fill(self, answers=None):
        """Start a registration and answer every field; returns the last result."""
        await self.start()
        result = None
        for answer in answers or EVENT_ANSWERS:
            result = await self.send(answer)
        return result


class RecordingLineApi:
    """Handler for httpx.MockTransport imitating the LINE Messaging API."""

    def __init__(self, display_name: str = "Taro", status_code: int = 200):
        self.display_name = display_name
        self.status_code = status_code
        self.failing_prefix: Optional[str] = None
        self.requests: List[httpx.Request] = []

    @property
    def replies(self) -> List[dict]:
        return [
            json.loads(r.content)
            for r in self.requests
            if r.url.path == "/v2/bot/message/reply"
        ]

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.failing_prefix and request.url.path.startswith(self.failing_prefix):
            return httpx.Response(503, json={"message": "unavailable"})
        if self.status_code != 200:
            return httpx.Response(self.status_code, json={"message": "error"})
        if request.url.path.startswith("/v2/bot/profile/"):
            return httpx.Response(200, json={"displayName": self.display_name})
        return httpx.Response(200, json={})


@pytest.fixture
def prompts():
    return Prompts(PromptSettings(), confirm_token="ok")


@pytest.fixture
def bot_settings():
    return BotSettings()


@pytest.fixture
def store():
    return InMemorySessionStore(ttl_seconds=1800)


@pytest.fixture
def gateway():
    return InMemoryGateway()


@pytest.fixture
def engine(store, gateway, prompts):
    return RegistrationEngine(store, gateway, prompts, confirm_token="ok")


@pytest.fixture
def chat(engine):
    return Chat(engine)


@pytest.fixture
def line_api():
    return RecordingLineApi()


@pytest.fixture
def platform(line_api):
    return LineMessagingClient(
        channel_token="test-token",
        base_url="https://line.test",
        transport=httpx.MockTransport(line_api),
    )


@pytest.fixture
def renderer():
    return NotificationRenderer()


@pytest.fixture
async def database(tmp_path):
    resource = DatabaseResource(f"sqlite+aiosqlite:///{tmp_path / 'events.db'}")
    await resource.init()
    await resource.create_tables(BaseEntity)
    yield resource
    await resource.shutdown()


@pytest.fixture
async def db_session(database):
    session = database.get_session()
    try:
        yield session
    finally:
        await session.close()
