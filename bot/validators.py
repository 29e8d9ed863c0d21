"""Checks on the fields collected as raw chat text.

Every field is bounded by its column; members_max and lottery also have to
parse into their typed values.
"""
import re
from typing import Callable, Dict, Optional, Tuple

from api.features.events.entities.event import EVENT_FIELD_LENGTHS, MEMBERS_MAX_LIMIT
from api.shared.exceptions import ValidationError
from bot.session import RegistrationSession, Step

_INTEGER = re.compile(r"[+-]?[0-9]+")

TRUE_VALUES = frozenset({"1", "t", "T", "TRUE", "true", "True"})
FALSE_VALUES = frozenset({"0", "f", "F", "FALSE", "false", "False"})


def _invalid(step: Step, value: Optional[str], reason: str) -> ValidationError:
    return ValidationError(
        f"invalid {step.value}: {reason}",
        {"field": step.value, "value": value, "reason": reason},
    )


def _bounded_text(step: Step) -> Callable[[Optional[str]], str]:
    limit = EVENT_FIELD_LENGTHS[step.value]

    def parse(text: Optional[str]) -> str:
        value = text or ""
        if len(value) > limit:
            raise _invalid(step, text, f"must be at most {limit} characters")
        return value

    return parse


def parse_members_max(text: Optional[str]) -> int:
    value = (text or "").strip()
    if not _INTEGER.fullmatch(value):
        raise _invalid(Step.MEMBERS_MAX, text, "expected a whole number")
    number = int(value)
    if number < 0:
        raise _invalid(Step.MEMBERS_MAX, text, "must not be negative")
    if number > MEMBERS_MAX_LIMIT:
        raise _invalid(Step.MEMBERS_MAX, text, "too large")
    return number


def parse_lottery(text: Optional[str]) -> bool:
    value = (text or "").strip()
    if value in TRUE_VALUES:
        return True
    if value in FALSE_VALUES:
        return False
    raise _invalid(Step.LOTTERY, text, "expected true or false")


# In form order
FIELD_PARSERS: Dict[Step, Callable[[Optional[str]], object]] = {
    Step.EVENT_NAME: _bounded_text(Step.EVENT_NAME),
    Step.DATE: _bounded_text(Step.DATE),
    Step.DEADLINE: _bounded_text(Step.DEADLINE),
    Step.LOCATION: _bounded_text(Step.LOCATION),
    Step.MEMBERS_MAX: parse_members_max,
    Step.LOTTERY: parse_lottery,
    Step.DESCRIPTION: _bounded_text(Step.DESCRIPTION),
}


def validate_field(step: Step, text: Optional[str]) -> None:
    """Raise ValidationError when `text` is not acceptable for `step`."""
    parser = FIELD_PARSERS.get(step)
    if parser is not None:
        parser(text)


def parse_typed_fields(session: RegistrationSession) -> Tuple[int, bool]:
    """Typed members_max and lottery, checked in form order."""
    return parse_members_max(session.members_max), parse_lottery(session.lottery)


def first_invalid_field(session: RegistrationSession) -> Optional[ValidationError]:
    for step in FIELD_PARSERS:
        try:
            validate_field(step, getattr(session, step.value))
        except ValidationError as e:
            return e
    return None
