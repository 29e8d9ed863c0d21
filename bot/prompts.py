"""Reply texts for the registration flow, built from PromptSettings templates."""
from typing import Iterable

from api.features.events.models import EventModel
from bot.session import FIELD_STEPS, RegistrationSession, Step
from core.settings import PromptSettings


class Prompts:
    """Each prompt depends only on the state it leads into."""

    def __init__(
        self,
        settings: PromptSettings,
        confirm_token: str = "ok",
        restart_keyword: str = "register event",
    ):
        self.settings = settings
        self.confirm_token = confirm_token
        self.restart_keyword = restart_keyword

    def label(self, step: Step) -> str:
        return self.settings.PROMPT_FIELD_LABELS.get(step.value, step.value)

    def for_step(self, step: Step) -> str:
        """Input request for a collecting step."""
        return self.settings.PROMPT_INPUT_FORMAT.format(label=self.label(step))

    def start(self) -> str:
        return f"{self.settings.PROMPT_START}\n{self.for_step(Step.EVENT_NAME)}"

    def confirmation(self, session: RegistrationSession) -> str:
        lines = [self.settings.PROMPT_CONFIRM.format(token=self.confirm_token)]
        lines.extend(
            f"{self.label(step)}: {getattr(session, step.value) or ''}"
            for step in FIELD_STEPS
        )
        return "\n".join(lines)

    def invalid_field(self, step: Step, value: str, reason: str) -> str:
        message = self.settings.PROMPT_INVALID_FIELD.format(
            label=self.label(step), value=value, reason=reason, keyword=self.restart_keyword
        )
        return f"{message}\n{self.for_step(step)}"

    def completed(self) -> str:
        return self.settings.PROMPT_COMPLETED

    def restart(self) -> str:
        return self.settings.PROMPT_RESTART

    def failure(self) -> str:
        return self.settings.PROMPT_FAILURE.format(token=self.confirm_token)

    def conflict(self, event: EventModel) -> str:
        return self.settings.PROMPT_CONFLICT.format(event_name=event.event_name)

    def unavailable(self) -> str:
        return self.settings.PROMPT_UNAVAILABLE

    def signup_done(self, user_name: str) -> str:
        return self.settings.PROMPT_SIGNUP_DONE.format(user_name=user_name)

    def signup_exists(self) -> str:
        return self.settings.PROMPT_SIGNUP_EXISTS

    def whoami(self, user_id: str, user_name: str) -> str:
        return self.settings.PROMPT_WHOAMI.format(user_id=user_id, user_name=user_name)

    def not_registered(self, signup_keyword: str) -> str:
        return self.settings.PROMPT_NOT_REGISTERED.format(keyword=signup_keyword)

    def event_list(self, events: Iterable[EventModel]) -> str:
        names = [f"- {event.event_name} ({event.date})" for event in events]
        if not names:
            return self.settings.PROMPT_NO_EVENTS
        return self.settings.PROMPT_EVENT_LIST.format(events="\n".join(names))
