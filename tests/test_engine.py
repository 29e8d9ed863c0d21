"""Registration state machine."""
import asyncio

import pytest

from api.features.events.models import EventModel
from api.features.events.service import EventService
from api.features.users.service import UserService
from api.shared.exceptions import DatabaseError, StoreError, TransportError
from bot.engine import RegistrationEngine
from bot.gateway import LocalGateway
from bot.session import FIELD_STEPS, Step
from bot.session_store import InMemorySessionStore

from .conftest import EVENT_ANSWERS, Chat


def expected_event(**overrides) -> EventModel:
    values = dict(
        host_id="U1",
        event_name="Board game night",
        date="2025-11-01 18:00",
        deadline="2025-10-25",
        location="Community hall",
        members_max=12,
        lottery=True,
        description="Bring snacks",
    )
    values.update(overrides)
    return EventModel(**values)


class TestStart:
    async def test_start_prompts_for_event_name(self, chat, store, prompts):
        result = await chat.start()

        assert result.replies == [prompts.start()]
        assert result.step is Step.EVENT_NAME
        session = await store.get("U1")
        assert session.step is Step.EVENT_NAME
        assert session.host_id == "U1"

    async def test_keyword_discards_session_in_progress(self, chat, store):
        await chat.start()
        await chat.send("Old name")
        await chat.send("Old date")

        result = await chat.start()

        assert result.step is Step.EVENT_NAME
        session = await store.get("U1")
        assert all(getattr(session, step.value) is None for step in FIELD_STEPS)

    async def test_redelivered_keyword_is_ignored(self, chat, store):
        message = chat.message("register event")
        first = await chat.engine.start(message)
        session = await store.get("U1")

        second = await chat.engine.start(message)

        assert first.replies != []
        assert second.replies == []
        assert await store.get("U1") == session


class TestCollectingFields:
    async def test_each_field_prompts_for_the_next(self, chat, prompts):
        await chat.start()
        upcoming = list(FIELD_STEPS[1:])
        for answer, step in zip(EVENT_ANSWERS, upcoming):
            result = await chat.send(answer)
            assert result.step is step
            assert result.replies == [prompts.for_step(step)]

    async def test_last_field_asks_for_confirmation(self, chat, store, prompts):
        result = await chat.fill()

        session = await store.get("U1")
        assert result.step is Step.DONE
        assert result.replies == [prompts.confirmation(session)]
        assert session.collected() == dict(
            zip([step.value for step in FIELD_STEPS], EVENT_ANSWERS)
        )

    async def test_text_without_session_is_ignored(self, chat, gateway):
        assert await chat.send("hello") is None
        assert gateway.add_event_calls == 0

    async def test_expired_session_is_ignored(self, gateway, prompts):
        clock = [0.0]
        store = InMemorySessionStore(ttl_seconds=60, clock=lambda: clock[0])
        chat = Chat(RegistrationEngine(store, gateway, prompts))
        await chat.start()

        clock[0] = 61.0
        assert await chat.send("Board game night") is None


class TestConfirmation:
    async def test_ok_commits_collected_event(self, chat, store, gateway, prompts):
        await chat.fill()

        result = await chat.send("ok")

        assert result.step is None
        assert result.committed == expected_event()
        assert result.replies == [prompts.completed(), expected_event()]
        assert gateway.events[("U1", "Board game night")] == expected_event()
        assert await store.get("U1") is None

    async def test_ok_after_finalize_commits_nothing(self, chat, gateway):
        await chat.fill()
        await chat.send("ok")

        assert await chat.send("ok") is None
        assert gateway.add_event_calls == 1

    async def test_other_text_restarts_from_begin(self, chat, store, gateway, prompts):
        await chat.fill()

        result = await chat.send("no")

        assert result.step is Step.BEGIN
        assert result.replies == [prompts.restart()]
        session = await store.get("U1")
        assert session.step is Step.BEGIN
        assert all(value is None for value in session.collected().values())
        assert gateway.add_event_calls == 0

        result = await chat.send("anything")
        assert result.step is Step.EVENT_NAME
        assert result.replies == [prompts.start()]

    async def test_confirmation_token_is_trimmed(self, chat, gateway):
        await chat.fill()
        result = await chat.send(" ok ")
        assert result.committed is not None


class TestInvalidFields:
    async def test_invalid_members_max_commits_nothing(self, chat, store, gateway, prompts):
        answers = list(EVENT_ANSWERS)
        answers[4] = "many"
        await chat.fill(answers)

        result = await chat.send("ok")

        assert result.step is Step.DONE
        assert result.replies == [
            prompts.invalid_field(Step.MEMBERS_MAX, "many", "expected a whole number")
        ]
        assert gateway.add_event_calls == 0
        assert (await store.get("U1")).correcting is Step.MEMBERS_MAX

    async def test_corrected_value_leads_back_to_confirmation(self, chat, store, prompts):
        answers = list(EVENT_ANSWERS)
        answers[4] = "many"
        await chat.fill(answers)
        await chat.send("ok")

        result = await chat.send("10")

        session = await store.get("U1")
        assert result.step is Step.DONE
        assert result.replies == [prompts.confirmation(session)]
        assert session.correcting is None

        result = await chat.send("ok")
        assert result.committed == expected_event(members_max=10)

    async def test_invalid_correction_asks_again(self, chat, prompts):
        answers = list(EVENT_ANSWERS)
        answers[4] = "many"
        await chat.fill(answers)
        await chat.send("ok")

        result = await chat.send("-3")

        assert result.replies == [
            prompts.invalid_field(Step.MEMBERS_MAX, "-3", "must not be negative")
        ]

    async def test_fields_are_corrected_in_form_order(self, chat, gateway, prompts):
        answers = list(EVENT_ANSWERS)
        answers[4] = "x"
        answers[5] = "maybe"
        await chat.fill(answers)
        await chat.send("ok")

        result = await chat.send("5")
        assert result.replies == [
            prompts.invalid_field(Step.LOTTERY, "maybe", "expected true or false")
        ]

        await chat.send("false")
        result = await chat.send("ok")
        assert result.committed == expected_event(members_max=5, lottery=False)
        assert gateway.add_event_calls == 1

    async def test_number_beyond_column_asks_for_correction(self, chat, store, gateway, prompts):
        answers = list(EVENT_ANSWERS)
        answers[4] = "99999999999999999999"
        await chat.fill(answers)

        result = await chat.send("ok")

        assert result.step is Step.DONE
        assert result.replies == [
            prompts.invalid_field(Step.MEMBERS_MAX, "99999999999999999999", "too large")
        ]
        assert gateway.add_event_calls == 0
        assert (await store.get("U1")).correcting is Step.MEMBERS_MAX

    async def test_overlong_text_asks_for_correction(self, chat, store, gateway):
        answers = list(EVENT_ANSWERS)
        answers[0] = "x" * 300
        await chat.fill(answers)

        await chat.send("ok")
        assert gateway.add_event_calls == 0
        assert (await store.get("U1")).correcting is Step.EVENT_NAME

        result = await chat.send("Board game night")
        assert result.step is Step.DONE
        result = await chat.send("ok")
        assert result.committed == expected_event()

    async def test_number_beyond_column_never_reaches_database(self, database, store, prompts):
        gateway = LocalGateway(database, UserService(), EventService())
        chat = Chat(RegistrationEngine(store, gateway, prompts))
        answers = list(EVENT_ANSWERS)
        answers[4] = "99999999999999999999"
        await chat.fill(answers)

        result = await chat.send("ok")

        assert result.step is Step.DONE
        assert (await store.get("U1")).correcting is Step.MEMBERS_MAX
        assert await gateway.list_events_hosted_by("U1") == []

        await chat.send("12")
        result = await chat.send("ok")
        assert result.committed == expected_event()

    async def test_correction_prompt_names_restart_keyword(self, chat, store, prompts):
        answers = list(EVENT_ANSWERS)
        answers[4] = "many"
        await chat.fill(answers)

        result = await chat.send("ok")

        assert '"register event"' in result.replies[0]
        result = await chat.start()
        assert result.step is Step.EVENT_NAME
        assert (await store.get("U1")).correcting is None


class TestGatewayFailures:
    @pytest.mark.parametrize(
        "error",
        [
            TransportError("persistence gateway", "connection refused"),
            DatabaseError("could not add event"),
        ],
    )
    async def test_failure_keeps_session_for_retry(self, chat, store, gateway, prompts, error):
        gateway.failures.append(error)
        await chat.fill()

        result = await chat.send("ok")

        assert result.step is Step.DONE
        assert result.replies == [prompts.failure()]
        assert (await store.get("U1")).step is Step.DONE

        result = await chat.send("ok")
        assert result.committed == expected_event()

    async def test_conflict_keeps_session(self, chat, store, gateway, prompts):
        gateway.events[("U1", "Board game night")] = expected_event(location="Elsewhere")
        await chat.fill()

        result = await chat.send("ok")

        assert result.step is Step.DONE
        assert result.replies == [prompts.conflict(expected_event())]
        assert (await store.get("U1")) is not None
        assert gateway.events[("U1", "Board game night")].location == "Elsewhere"

    async def test_store_failure_propagates(self, gateway, prompts):
        class FailingStore(InMemorySessionStore):
            async def save(self, session):
                raise StoreError("could not save session")

        chat = Chat(RegistrationEngine(FailingStore(ttl_seconds=60), gateway, prompts))
        with pytest.raises(StoreError):
            await chat.start()


class TestRedelivery:
    async def test_same_message_advances_once(self, chat, store):
        await chat.start()
        message = chat.message("Board game night")

        first = await chat.engine.handle(message)
        second = await chat.engine.handle(message)

        assert first.step is Step.DATE
        assert second.replies == []
        assert (await store.get("U1")).step is Step.DATE

    async def test_same_text_with_new_id_is_a_new_message(self, chat, store):
        await chat.start()
        await chat.send("same")
        await chat.send("same")
        session = await store.get("U1")
        assert session.step is Step.DEADLINE
        assert session.date == "same"

    async def test_concurrent_redelivery_advances_once(self, chat, store):
        await chat.start()
        message = chat.message("Board game night")

        results = await asyncio.gather(
            chat.engine.handle(message), chat.engine.handle(message)
        )

        assert sorted(len(r.replies) for r in results) == [0, 1]
        assert (await store.get("U1")).step is Step.DATE


class TestConcurrency:
    async def test_messages_of_one_user_are_serialised(self, chat, store):
        await chat.start()

        await asyncio.gather(chat.send("first"), chat.send("second"))

        session = await store.get("U1")
        assert session.step is Step.DEADLINE
        assert {session.event_name, session.date} == {"first", "second"}

    async def test_users_are_independent(self, engine, store, gateway):
        alice, bob = Chat(engine, "Ualice"), Chat(engine, "Ubob")

        await asyncio.gather(alice.fill(), bob.fill())
        await asyncio.gather(alice.send("ok"), bob.send("ok"))

        assert set(gateway.events) == {
            ("Ualice", "Board game night"),
            ("Ubob", "Board game night"),
        }
