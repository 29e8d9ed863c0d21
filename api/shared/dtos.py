"""Shared DTOs for the event-list API."""
from datetime import datetime
from typing import Dict

from pydantic import BaseModel, ConfigDict, Field


class BaseDTO(BaseModel):
    """Base DTO with common configuration.

    Wire names are the camelCase aliases used by the chat client
    (`userID`, `hostID`, ...); snake_case names are accepted on input too.
    """

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)


class HealthCheckResponse(BaseDTO):
    """Health check response DTO."""
    status: str = Field(description="Service status")
    timestamp: datetime = Field(default_factory=datetime.utcnow)
    version: str = Field(default="0.1.0")
    dependencies: Dict[str, str] = Field(default_factory=dict)
