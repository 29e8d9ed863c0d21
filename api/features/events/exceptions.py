"""Exceptions for the Events feature."""
from api.shared.exceptions import ConflictError, NotFoundError


class EventNotFoundError(NotFoundError):
    """Raised when no event exists for a host and event name."""

    def __init__(self, host_id: str, event_name: str):
        super().__init__("Event", f"{host_id}/{event_name}")


class EventAlreadyExistsError(ConflictError):
    """Raised when a host registers the same event name twice."""

    def __init__(self, host_id: str, event_name: str):
        message = f"Event '{event_name}' hosted by '{host_id}' already exists"
        super().__init__(message, {"host_id": host_id, "event_name": event_name})
