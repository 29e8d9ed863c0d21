"""Intent routing and reply delivery."""
import pytest

from api.features.events.models import EventModel
from api.features.users.models import UserModel
from api.shared.exceptions import TransportError
from bot.dispatcher import EntryDispatcher
from bot.platform import InboundMessage
from bot.session import Step

from .conftest import EVENT_ANSWERS


def message(text: str, message_id: str, sender_id: str = "U1") -> InboundMessage:
    return InboundMessage(
        sender_id=sender_id, text=text, reply_handle=f"token-{message_id}", message_id=message_id
    )


@pytest.fixture
def dispatcher(engine, gateway, platform, renderer, prompts, bot_settings):
    return EntryDispatcher(
        engine=engine,
        gateway=gateway,
        platform=platform,
        renderer=renderer,
        prompts=prompts,
        bot_settings=bot_settings,
        owner_id="Uowner",
    )


class TestSignup:
    async def test_signup_stores_profile_name(self, dispatcher, gateway, line_api, prompts):
        payload = await dispatcher.dispatch(message("signup", "m1"))

        assert gateway.users["U1"] == UserModel(user_id="U1", user_name="Taro")
        assert payload == [{"type": "text", "text": prompts.signup_done("Taro")}]
        assert line_api.requests[0].url.path == "/v2/bot/profile/U1"
        assert line_api.replies == [{"replyToken": "token-m1", "messages": payload}]

    async def test_signup_twice(self, dispatcher, prompts):
        await dispatcher.dispatch(message("signup", "m1"))
        payload = await dispatcher.dispatch(message("signup", "m2"))
        assert payload == [{"type": "text", "text": prompts.signup_exists()}]

    async def test_profile_failure_replies_unavailable(self, dispatcher, gateway, line_api, prompts):
        line_api.failing_prefix = "/v2/bot/profile/"

        payload = await dispatcher.dispatch(message("signup", "m1"))

        assert payload == [{"type": "text", "text": prompts.unavailable()}]
        assert gateway.users == {}


class TestWhoami:
    async def test_registered_user(self, dispatcher, gateway, prompts):
        gateway.users["U1"] = UserModel(user_id="U1", user_name="Taro")
        payload = await dispatcher.dispatch(message("whoami", "m1"))
        assert payload[0]["text"] == prompts.whoami("U1", "Taro")

    async def test_unknown_user(self, dispatcher, prompts):
        payload = await dispatcher.dispatch(message("whoami", "m1"))
        assert payload[0]["text"] == prompts.not_registered("signup")


class TestEventList:
    async def test_lists_events_of_sender(self, dispatcher, gateway, prompts):
        event = EventModel(
            host_id="U1",
            event_name="Picnic",
            date="Sunday",
            deadline="Friday",
            location="Park",
            members_max=5,
            lottery=False,
        )
        gateway.events[("U1", "Picnic")] = event
        gateway.events[("U2", "Other")] = event.model_copy(
            update={"host_id": "U2", "event_name": "Other"}
        )

        payload = await dispatcher.dispatch(message("events", "m1"))

        assert payload[0]["text"] == prompts.event_list([event])
        assert "Other" not in payload[0]["text"]

    async def test_no_events(self, dispatcher, prompts):
        payload = await dispatcher.dispatch(message("events", "m1"))
        assert payload[0]["text"] == prompts.event_list([])


class TestRegistration:
    async def test_full_registration_sends_ticket(self, dispatcher, gateway, store, line_api):
        await dispatcher.dispatch(message("register event", "m0"))
        for n, answer in enumerate(EVENT_ANSWERS, start=1):
            await dispatcher.dispatch(message(answer, f"m{n}"))
        payload = await dispatcher.dispatch(message("ok", "m-ok"))

        assert [m["type"] for m in payload] == ["text", "flex"]
        assert payload[1]["contents"]["body"]["contents"][0]["text"] == "Board game night"
        assert ("U1", "Board game night") in gateway.events
        assert await store.get("U1") is None
        assert len(line_api.replies) == len(EVENT_ANSWERS) + 2

    async def test_keyword_is_matched_after_trimming(self, dispatcher, store):
        await dispatcher.dispatch(message("  register event ", "m0"))
        assert (await store.get("U1")).step is Step.EVENT_NAME

    async def test_free_text_without_session_sends_nothing(self, dispatcher, line_api):
        assert await dispatcher.dispatch(message("hello", "m1")) is None
        assert line_api.requests == []

    async def test_owner_is_ignored(self, dispatcher, store, line_api):
        assert await dispatcher.dispatch(message("register event", "m1", "Uowner")) is None
        assert await store.get("Uowner") is None
        assert line_api.requests == []

    async def test_duplicate_delivery_sends_nothing(self, dispatcher, line_api):
        await dispatcher.dispatch(message("register event", "m0"))
        await dispatcher.dispatch(message("Board game night", "m1"))
        assert await dispatcher.dispatch(message("Board game night", "m1")) is None
        assert len(line_api.replies) == 2

    async def test_reply_failure_is_transport_error(self, dispatcher, line_api):
        line_api.status_code = 400
        with pytest.raises(TransportError):
            await dispatcher.dispatch(message("register event", "m0"))
