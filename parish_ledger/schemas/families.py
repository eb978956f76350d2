"""Pydantic schemas for families, members and the dashboard."""

from datetime import date, datetime

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from parish_ledger.models import Gender, Relation


class FamilyPayload(BaseModel):
    """Request payload for POST/PUT /api/families."""

    unit_id: int = Field(..., description="Unit the family belongs to")
    card_no: str = Field(..., description="Family card number")
    head_name: str = Field(..., description="Head of family")
    address: str | None = None
    vicar_name: str | None = None
    phone: str | None = None
    email: str | None = Field(None, description="Contact e-mail for receipts")
    pincode: str | None = None

    def details(self) -> dict[str, str | None]:
        return {
            "address": self.address,
            "vicar_name": self.vicar_name,
            "phone": self.phone,
            "pincode": self.pincode,
        }


class FamilyResponse(BaseModel):
    id: int
    unit_id: int
    unit_name: str | None = None
    card_no: str
    head_name: str
    address: str | None = None
    vicar_name: str | None = None
    phone: str | None = None
    email: str | None = None
    pincode: str | None = None
    member_count: int
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class MemberPayload(BaseModel):
    """Request payload for POST/PUT /api/families/{id}/members.

    `relationship` is the member's relation to the head of the family.
    """

    name: str
    dob: date | None = None
    gender: Gender
    relationship: Relation = Field(
        ..., validation_alias=AliasChoices("relationship", "relation")
    )
    baptism_date: date | None = None
    communion_date: date | None = None
    confirmation_date: date | None = None
    marriage_date: date | None = None
    education: str | None = None
    occupation: str | None = None
    phone_number: str | None = None
    email: str | None = None
    marital_status: str | None = None
    remarks: str | None = None

    def service_fields(self) -> dict:
        """Keyword arguments for the member service."""
        data = self.model_dump(exclude={"name", "relationship", "gender"})
        data["gender"] = self.gender.value
        data["relation"] = self.relationship.value
        return data


class MemberResponse(BaseModel):
    id: int
    family_id: int
    name: str
    dob: date | None = None
    gender: str
    relationship: str = Field(validation_alias=AliasChoices("relation", "relationship"))
    baptism_date: date | None = None
    communion_date: date | None = None
    confirmation_date: date | None = None
    marriage_date: date | None = None
    education: str | None = None
    occupation: str | None = None
    phone_number: str | None = None
    email: str | None = None
    marital_status: str | None = None
    remarks: str | None = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class RecentFamilyResponse(BaseModel):
    id: int
    name: str
    unit_name: str | None = None
    members: int
    added_date: datetime

    model_config = ConfigDict(from_attributes=True)


class DashboardStatsResponse(BaseModel):
    total_units: int
    total_families: int
    total_members: int
    recent_families: list[RecentFamilyResponse]

    model_config = ConfigDict(from_attributes=True)
