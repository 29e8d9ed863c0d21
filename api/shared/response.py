"""Response envelope for endpoints that report status rather than a resource."""
from typing import Generic, Optional, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class ResponseModel(BaseModel, Generic[T]):
    status: str = Field(default="ok", description="Response status")
    message: Optional[str] = Field(default=None, examples=["Webhook accepted"])
    data: Optional[T] = Field(default=None, description="Response data")

    @classmethod
    def success(
        cls, data: Optional[T] = None, message: Optional[str] = None
    ) -> "ResponseModel[T]":
        return cls(status="ok", message=message, data=data)
