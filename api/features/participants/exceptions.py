"""Exceptions for the Participants feature."""
from api.shared.exceptions import ConflictError, NotFoundError


class ParticipantNotFoundError(NotFoundError):
    """Raised when a user is not registered as participant of an event."""

    def __init__(self, host_id: str, event_name: str, participant_id: str):
        super().__init__("Participant", f"{host_id}/{event_name}/{participant_id}")


class ParticipantAlreadyExistsError(ConflictError):
    """Raised when a user joins the same event twice."""

    def __init__(self, host_id: str, event_name: str, participant_id: str):
        message = f"User '{participant_id}' already joined '{event_name}' hosted by '{host_id}'"
        super().__init__(
            message,
            {"host_id": host_id, "event_name": event_name, "participant_id": participant_id},
        )
