"""LINE Messaging API client: webhook parsing, replies and profiles.

Signature verification of incoming webhooks is expected to happen in front
of this service.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import httpx
import structlog
from pydantic import BaseModel, ConfigDict, Field

from api.shared.exceptions import TransportError

logger = structlog.get_logger("eventbot.platform")

# LINE accepts at most five messages per reply
MAX_REPLY_MESSAGES = 5


@dataclass(frozen=True)
class InboundMessage:
    """One text message from a user, as the dispatcher sees it."""

    sender_id: str
    text: str
    reply_handle: str
    message_id: Optional[str] = None


class WebhookSource(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    type: str = "user"
    user_id: Optional[str] = Field(default=None, alias="userId")


class WebhookMessage(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: Optional[str] = None
    type: str
    text: Optional[str] = None


class WebhookEvent(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    type: str
    reply_token: Optional[str] = Field(default=None, alias="replyToken")
    source: Optional[WebhookSource] = None
    message: Optional[WebhookMessage] = None
    webhook_event_id: Optional[str] = Field(default=None, alias="webhookEventId")


class WebhookBody(BaseModel):
    model_config = ConfigDict(extra="ignore")

    destination: Optional[str] = None
    events: List[WebhookEvent] = Field(default_factory=list)


class LineMessagingClient:
    """Thin async client over the LINE Messaging API."""

    def __init__(
        self,
        channel_token: str,
        base_url: str = "https://api.line.me",
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.channel_token = channel_token
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport

    @staticmethod
    def parse_events(body: Dict[str, Any]) -> List[InboundMessage]:
        """Text messages from users; every other event type is skipped."""
        messages = []
        for event in WebhookBody.model_validate(body).events:
            if event.type != "message" or event.message is None:
                continue
            if event.message.type != "text" or event.source is None:
                continue
            if not event.source.user_id or not event.reply_token:
                continue
            messages.append(
                InboundMessage(
                    sender_id=event.source.user_id,
                    text=event.message.text or "",
                    reply_handle=event.reply_token,
                    message_id=event.message.id or event.webhook_event_id,
                )
            )
        return messages

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.channel_token}",
            "Content-Type": "application/json",
        }

    async def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        try:
            async with httpx.AsyncClient(
                base_url=self.base_url, timeout=self.timeout, transport=self.transport
            ) as client:
                resp = await client.request(method, path, headers=self._headers(), **kwargs)
                resp.raise_for_status()
                return resp
        except httpx.HTTPError as e:
            logger.error("line.request_failed", method=method, path=path, error=str(e))
            raise TransportError("LINE", str(e), {"path": path}) from e

    async def reply(self, reply_token: str, messages: List[Dict[str, Any]]) -> None:
        if not messages:
            return
        if len(messages) > MAX_REPLY_MESSAGES:
            logger.warning("line.reply_truncated", count=len(messages))
        await self._request(
            "POST",
            "/v2/bot/message/reply",
            json={"replyToken": reply_token, "messages": messages[:MAX_REPLY_MESSAGES]},
        )

    async def get_display_name(self, user_id: str) -> str:
        resp = await self._request("GET", f"/v2/bot/profile/{user_id}")
        return resp.json().get("displayName", "")
