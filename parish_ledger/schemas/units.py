"""Pydantic schemas for units."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class UnitPayload(BaseModel):
    """Request payload for POST/PUT /api/units."""

    name: str = Field(..., description="Unit name, stored upper-case")
    description: str | None = Field(None, description="Free-text description")


class UnitResponse(BaseModel):
    id: int
    name: str
    description: str | None = None
    family_count: int
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)
