"""Router for the LINE webhook."""
import asyncio
import logging
from typing import Any, Dict, List

from dependency_injector.wiring import Provide, inject
from fastapi import APIRouter, Body, Depends

from api.shared.response import ResponseModel
from bot.dispatcher import EntryDispatcher
from bot.platform import InboundMessage, LineMessagingClient
from di.container import ApplicationContainer as DependencyContainer

router = APIRouter()
logger = logging.getLogger("eventbot.webhook.router")


async def _dispatch_in_order(dispatcher: EntryDispatcher, messages: List[InboundMessage]) -> None:
    for message in messages:
        await dispatcher.dispatch(message)


@router.post("/callback", response_model=ResponseModel[None])
@inject
async def callback(
    body: Dict[str, Any] = Body(...),
    dispatcher: EntryDispatcher = Depends(Provide[DependencyContainer.bot.dispatcher]),
):
    """Receive a webhook delivery.

    Messages of one sender are handled in delivery order; different senders
    run concurrently. Every sender is finished before the first failure
    propagates and the delivery answers 500.
    """
    messages = LineMessagingClient.parse_events(body)
    by_sender: Dict[str, List[InboundMessage]] = {}
    for message in messages:
        by_sender.setdefault(message.sender_id, []).append(message)

    logger.info(f"Webhook delivery with {len(messages)} text messages from {len(by_sender)} users")
    results = await asyncio.gather(
        *(_dispatch_in_order(dispatcher, group) for group in by_sender.values()),
        return_exceptions=True,
    )
    failures = [result for result in results if isinstance(result, BaseException)]
    for failure in failures[1:]:
        logger.error(f"Webhook delivery also failed with {failure!r}")
    if failures:
        raise failures[0]
    return ResponseModel.success()
