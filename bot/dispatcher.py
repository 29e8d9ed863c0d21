"""Routes inbound chat messages to an intent handler or the registration engine."""
from __future__ import annotations

from typing import Any, Dict, List, Optional

import structlog

from api.features.users.exceptions import UserAlreadyExistsError
from api.features.users.models import UserModel
from api.shared.exceptions import DatabaseError, NotFoundError, TransportError
from bot.engine import RegistrationEngine
from bot.gateway import PersistenceGateway
from bot.platform import InboundMessage, LineMessagingClient
from bot.prompts import Prompts
from bot.renderer import NotificationRenderer, Reply
from core.settings import BotSettings

logger = structlog.get_logger("eventbot.dispatcher")


class EntryDispatcher:
    """One inbound message in, at most one platform reply out."""

    def __init__(
        self,
        engine: RegistrationEngine,
        gateway: PersistenceGateway,
        platform: LineMessagingClient,
        renderer: NotificationRenderer,
        prompts: Prompts,
        bot_settings: BotSettings,
        owner_id: str = "",
    ):
        self.engine = engine
        self.gateway = gateway
        self.platform = platform
        self.renderer = renderer
        self.prompts = prompts
        self.keywords = bot_settings
        self.owner_id = owner_id

    async def dispatch(self, message: InboundMessage) -> Optional[List[Dict[str, Any]]]:
        """Handle one message; returns the messages sent, or None when silent."""
        if self.owner_id and message.sender_id == self.owner_id:
            logger.debug("dispatch.owner_ignored")
            return None

        replies = await self._route(message)
        if not replies:
            return None

        payload = self.renderer.render(replies)
        await self.platform.reply(message.reply_handle, payload)
        return payload

    async def _route(self, message: InboundMessage) -> List[Reply]:
        text = message.text.strip()
        intents = {
            self.keywords.SIGNUP_KEYWORD: self._signup,
            self.keywords.WHOAMI_KEYWORD: self._whoami,
            self.keywords.LIST_EVENTS_KEYWORD: self._list_events,
        }

        if text == self.keywords.REGISTER_EVENT_KEYWORD:
            logger.info("dispatch.intent", intent="register", user_key=message.sender_id)
            return (await self.engine.start(message)).replies

        handler = intents.get(text)
        if handler is None:
            result = await self.engine.handle(message)
            return result.replies if result is not None else []

        logger.info("dispatch.intent", intent=text, user_key=message.sender_id)
        try:
            return await handler(message)
        except (TransportError, DatabaseError) as e:
            logger.error(
                "dispatch.intent_failed",
                intent=text,
                user_key=message.sender_id,
                error_code=e.error_code,
                error=e.message,
            )
            return [self.prompts.unavailable()]

    async def _signup(self, message: InboundMessage) -> List[Reply]:
        user_name = await self.platform.get_display_name(message.sender_id)
        try:
            user = await self.gateway.add_user(
                UserModel(user_id=message.sender_id, user_name=user_name)
            )
        except UserAlreadyExistsError:
            return [self.prompts.signup_exists()]
        return [self.prompts.signup_done(user.user_name)]

    async def _whoami(self, message: InboundMessage) -> List[Reply]:
        try:
            user = await self.gateway.get_user(message.sender_id)
        except NotFoundError:
            return [self.prompts.not_registered(self.keywords.SIGNUP_KEYWORD)]
        return [self.prompts.whoami(user.user_id, user.user_name)]

    async def _list_events(self, message: InboundMessage) -> List[Reply]:
        events = await self.gateway.list_events_hosted_by(message.sender_id)
        return [self.prompts.event_list(events)]
