"""Response envelopes shared by every endpoint."""

from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict

T = TypeVar("T")


class PaginationResponse(BaseModel):
    """Page/limit bookkeeping returned with list endpoints."""

    page: int
    limit: int
    total: int
    pages: int

    model_config = ConfigDict(from_attributes=True)


class Envelope(BaseModel, Generic[T]):
    """Successful response: `{"success": true, "data": ...}`."""

    success: bool = True
    data: T
    message: str | None = None


class PagedEnvelope(BaseModel, Generic[T]):
    """Successful paginated response."""

    success: bool = True
    data: list[T]
    pagination: PaginationResponse


class ErrorResponse(BaseModel):
    """Failure envelope produced by the exception handlers."""

    success: bool = False
    error: str
    code: str | None = None
