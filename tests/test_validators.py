"""Parsing of the typed form fields."""
import pytest

from api.shared.exceptions import ValidationError
from bot.session import RegistrationSession, Step
from bot.validators import (
    first_invalid_field,
    parse_lottery,
    parse_members_max,
    parse_typed_fields,
    validate_field,
)


class TestMembersMax:
    @pytest.mark.parametrize("text,expected", [("0", 0), ("12", 12), (" 30 ", 30), ("+5", 5)])
    def test_accepts_whole_numbers(self, text, expected):
        assert parse_members_max(text) == expected

    @pytest.mark.parametrize("text", ["many", "", "1.5", "1e3", "12 people", None])
    def test_rejects_non_integers(self, text):
        with pytest.raises(ValidationError) as exc:
            parse_members_max(text)
        assert exc.value.details["field"] == "members_max"
        assert exc.value.details["reason"] == "expected a whole number"

    def test_rejects_negative(self):
        with pytest.raises(ValidationError) as exc:
            parse_members_max("-3")
        assert exc.value.details == {
            "field": "members_max",
            "value": "-3",
            "reason": "must not be negative",
        }

    @pytest.mark.parametrize("text", ["2147483648", "99999999999999999999"])
    def test_rejects_values_beyond_the_column(self, text):
        with pytest.raises(ValidationError) as exc:
            parse_members_max(text)
        assert exc.value.details["reason"] == "too large"

    def test_accepts_largest_storable_value(self):
        assert parse_members_max("2147483647") == 2147483647


class TestLottery:
    @pytest.mark.parametrize("text", ["1", "t", "T", "true", "TRUE", "True"])
    def test_true_values(self, text):
        assert parse_lottery(text) is True

    @pytest.mark.parametrize("text", ["0", "f", "F", "false", "FALSE", "False"])
    def test_false_values(self, text):
        assert parse_lottery(text) is False

    @pytest.mark.parametrize("text", ["yes", "no", "tRuE", "", None])
    def test_rejects_anything_else(self, text):
        with pytest.raises(ValidationError) as exc:
            parse_lottery(text)
        assert exc.value.details["field"] == "lottery"


class TestSessionChecks:
    def test_free_text_within_column_width(self):
        validate_field(Step.LOCATION, "")
        validate_field(Step.LOCATION, "x" * 512)
        validate_field(Step.DESCRIPTION, "anything at all")

    @pytest.mark.parametrize("step,limit", [(Step.EVENT_NAME, 255), (Step.DESCRIPTION, 1024)])
    def test_free_text_longer_than_column(self, step, limit):
        with pytest.raises(ValidationError) as exc:
            validate_field(step, "x" * (limit + 1))
        assert exc.value.details["field"] == step.value
        assert exc.value.details["reason"] == f"must be at most {limit} characters"

    def test_typed_fields_of_a_valid_session(self):
        session = RegistrationSession(user_key="U1", members_max="8", lottery="false")
        assert parse_typed_fields(session) == (8, False)
        assert first_invalid_field(session) is None

    def test_first_invalid_field_follows_form_order(self):
        session = RegistrationSession(user_key="U1", members_max="x", lottery="maybe")
        error = first_invalid_field(session)
        assert error.details["field"] == "members_max"

        session.members_max = "3"
        error = first_invalid_field(session)
        assert error.details["field"] == "lottery"

    def test_overlong_text_is_reported_before_typed_fields(self):
        session = RegistrationSession(
            user_key="U1", date="d" * 256, members_max="x", lottery="true"
        )
        assert first_invalid_field(session).details["field"] == "date"
