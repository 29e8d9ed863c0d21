"""Per-user registration session: the typed state of one multi-turn form."""
from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Dict, Optional

from pydantic import BaseModel, Field


class Step(str, Enum):
    """Form steps in their fixed forward order.

    Every collecting step's value is also the name of the session field it
    fills, so `Step.DATE` stores into `RegistrationSession.date`.
    """

    BEGIN = "begin"
    EVENT_NAME = "event_name"
    DATE = "date"
    DEADLINE = "deadline"
    LOCATION = "location"
    MEMBERS_MAX = "members_max"
    LOTTERY = "lottery"
    DESCRIPTION = "description"
    DONE = "done"

    @property
    def next(self) -> "Step":
        order = list(Step)
        index = order.index(self)
        if index == len(order) - 1:
            raise ValueError("done has no forward transition")
        return order[index + 1]

    @property
    def collects(self) -> bool:
        return self not in (Step.BEGIN, Step.DONE)


FIELD_STEPS = tuple(step for step in Step if step.collects)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class RegistrationSession(BaseModel):
    """In-progress event registration for one user."""

    user_key: str = Field(description="Platform user id owning the session")
    step: Step = Field(default=Step.BEGIN)
    host_id: Optional[str] = Field(default=None)

    event_name: Optional[str] = None
    date: Optional[str] = None
    deadline: Optional[str] = None
    location: Optional[str] = None
    members_max: Optional[str] = None
    lottery: Optional[str] = None
    description: Optional[str] = None

    confirmed: bool = Field(default=False)
    # Field awaiting re-entry after a failed confirmation
    correcting: Optional[Step] = Field(default=None)
    last_message_id: Optional[str] = Field(default=None)
    updated_at: datetime = Field(default_factory=_utcnow)

    def store(self, step: Step, text: str) -> None:
        """Record the raw text collected at a field step."""
        if not step.collects:
            raise ValueError(f"step {step.value} does not collect a field")
        setattr(self, step.value, text)

    def advance(self) -> Step:
        """Move one step forward along the fixed sequence."""
        self.step = self.step.next
        return self.step

    def reset(self) -> None:
        """Back to BEGIN with every collected value discarded."""
        for step in FIELD_STEPS:
            setattr(self, step.value, None)
        self.step = Step.BEGIN
        self.host_id = None
        self.confirmed = False
        self.correcting = None

    def collected(self) -> Dict[str, Optional[str]]:
        """Collected raw values keyed by field name, in form order."""
        return {step.value: getattr(self, step.value) for step in FIELD_STEPS}

    def touch(self, message_id: Optional[str]) -> None:
        self.last_message_id = message_id
        self.updated_at = _utcnow()
