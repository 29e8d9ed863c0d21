"""Event registration state machine.

One call to `start` or `handle` is one turn: the user's session is locked,
loaded, moved through exactly one transition and saved (or invalidated)
before the lock is released. Steps run in the fixed order

    begin -> event_name -> date -> deadline -> location -> members_max
          -> lottery -> description -> done

and `done` waits for the confirmation token. The only backward move is the
reset to `begin` when the user declines the summary.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

import structlog

from api.features.events.models import EventModel
from api.shared.exceptions import ConflictError, EventBotException, ValidationError
from bot.gateway import PersistenceGateway
from bot.platform import InboundMessage
from bot.prompts import Prompts
from bot.renderer import Reply
from bot.session import RegistrationSession, Step
from bot.session_store import SessionStore
from bot.validators import first_invalid_field, parse_typed_fields, validate_field

logger = structlog.get_logger("eventbot.engine")


@dataclass
class TurnResult:
    """Outcome of one turn.

    `step` is the session's step after the turn, or None once the session
    has been invalidated.
    """

    replies: List[Reply] = field(default_factory=list)
    step: Optional[Step] = None
    committed: Optional[EventModel] = None


class RegistrationEngine:
    def __init__(
        self,
        store: SessionStore,
        gateway: PersistenceGateway,
        prompts: Prompts,
        confirm_token: str = "ok",
    ):
        self.store = store
        self.gateway = gateway
        self.prompts = prompts
        self.confirm_token = confirm_token

    async def start(self, message: InboundMessage) -> TurnResult:
        """Drop any session of the sender and begin a new registration."""
        key = message.sender_id
        async with self.store.lock(key):
            existing = await self.store.get(key)
            if existing is not None and self._is_redelivery(existing, message):
                return TurnResult(step=existing.step)
            if existing is not None:
                await self.store.invalidate(key)
                logger.info("registration.restarted", user_key=key, step=existing.step.value)

            session = self.store.create(key)
            result = self._begin(session)
            session.touch(message.message_id)
            await self.store.save(session)
            return result

    async def handle(self, message: InboundMessage) -> Optional[TurnResult]:
        """Apply one message to the sender's session; None when there is none."""
        key = message.sender_id
        async with self.store.lock(key):
            session = await self.store.get(key)
            if session is None:
                logger.debug("registration.no_session", user_key=key)
                return None
            if self._is_redelivery(session, message):
                logger.info(
                    "registration.duplicate_ignored",
                    user_key=key,
                    message_id=message.message_id,
                )
                return TurnResult(step=session.step)

            previous = session.step
            result = await self._transition(session, message.text)

            if result.step is None:
                await self.store.invalidate(key)
            else:
                session.touch(message.message_id)
                await self.store.save(session)

            logger.info(
                "registration.turn",
                user_key=key,
                from_step=previous.value,
                to_step=result.step.value if result.step else None,
            )
            return result

    @staticmethod
    def _is_redelivery(session: RegistrationSession, message: InboundMessage) -> bool:
        return message.message_id is not None and session.last_message_id == message.message_id

    async def _transition(self, session: RegistrationSession, text: str) -> TurnResult:
        step = session.step
        if step is Step.BEGIN:
            return self._begin(session)
        if step.collects:
            session.store(step, text)
            upcoming = session.advance()
            if upcoming is Step.DONE:
                return TurnResult([self.prompts.confirmation(session)], step=upcoming)
            return TurnResult([self.prompts.for_step(upcoming)], step=upcoming)
        if session.correcting is not None:
            return self._correct(session, text)
        if text.strip() != self.confirm_token:
            session.reset()
            return TurnResult([self.prompts.restart()], step=Step.BEGIN)
        return await self._finalize(session)

    def _begin(self, session: RegistrationSession) -> TurnResult:
        session.host_id = session.user_key
        session.advance()
        return TurnResult([self.prompts.start()], step=session.step)

    def _correct(self, session: RegistrationSession, text: str) -> TurnResult:
        """Re-entry of a field that failed at confirmation; the step stays at done."""
        target = session.correcting
        try:
            validate_field(target, text)
        except ValidationError as e:
            return self._ask_correction(session, e)

        session.store(target, text)
        session.correcting = None
        remaining = first_invalid_field(session)
        if remaining is not None:
            return self._ask_correction(session, remaining)
        return TurnResult([self.prompts.confirmation(session)], step=Step.DONE)

    def _ask_correction(self, session: RegistrationSession, error: ValidationError) -> TurnResult:
        target = Step(error.details["field"])
        session.correcting = target
        logger.info(
            "registration.invalid_field",
            user_key=session.user_key,
            field=target.value,
            reason=error.details["reason"],
        )
        reply = self.prompts.invalid_field(
            target, error.details["value"] or "", error.details["reason"]
        )
        return TurnResult([reply], step=Step.DONE)

    async def _finalize(self, session: RegistrationSession) -> TurnResult:
        invalid = first_invalid_field(session)
        if invalid is not None:
            return self._ask_correction(session, invalid)
        members_max, lottery = parse_typed_fields(session)

        event = EventModel(
            host_id=session.host_id or session.user_key,
            event_name=session.event_name or "",
            date=session.date or "",
            deadline=session.deadline or "",
            location=session.location or "",
            members_max=members_max,
            lottery=lottery,
            description=session.description or "",
        )
        try:
            committed = await self.gateway.add_event(event)
        except ConflictError:
            logger.info("registration.conflict", **event.key)
            return TurnResult([self.prompts.conflict(event)], step=Step.DONE)
        except EventBotException as e:
            # The session is kept so the user can confirm again
            logger.error(
                "registration.commit_failed",
                user_key=session.user_key,
                error_code=e.error_code,
                error=e.message,
            )
            return TurnResult([self.prompts.failure()], step=Step.DONE)

        session.confirmed = True
        logger.info("registration.committed", **committed.key)
        return TurnResult([self.prompts.completed(), committed], step=None, committed=committed)
