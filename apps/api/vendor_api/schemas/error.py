"""API error response schemas."""

from typing import Any
from typing import Literal

from pydantic import BaseModel


class ErrorResponse(BaseModel):
    code: str
    message: str
    details: dict[str, Any] | None = None


class UnauthorizedError(BaseModel):
    code: Literal["UNAUTHORIZED"]
    message: str


class MethodNotAllowedError(BaseModel):
    code: Literal["METHOD_NOT_ALLOWED"]
    message: str
