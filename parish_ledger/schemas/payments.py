"""Pydantic schemas for the payment ledger (family ledger and monthly report)."""

from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field, StrictFloat, StrictInt

from parish_ledger.models import PaymentStatus


class PaymentCreatePayload(BaseModel):
    """Request payload for POST /api/families/{id}/payments.

    Every field is optional at the schema level so that the payment service
    can report a missing field with its own message.
    """

    month: str | None = Field(None, description="Billing month, YYYY-MM")
    amount_paid: StrictInt | StrictFloat | None = Field(
        None, description="Amount in whole rupees; numeric strings are rejected"
    )
    payment_date: str | None = Field(None, description="Date the payment was made, YYYY-MM-DD")
    remarks: str | None = None


class PaymentRecordPayload(PaymentCreatePayload):
    """Request payload for POST /api/payments."""

    family_id: int = Field(..., description="Family making the payment")


class PaymentUpdatePayload(BaseModel):
    """Request payload for PUT /api/families/{id}/payments/{payment_id}."""

    amount_paid: StrictInt | StrictFloat | None = None
    payment_date: str | None = None
    remarks: str | None = None


class PaymentResponse(BaseModel):
    id: int
    family_id: int
    month: str
    amount_paid: int
    payment_date: date
    remarks: str | None = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class LedgerEntryResponse(BaseModel):
    month: str
    display_name: str
    is_current: bool
    status: PaymentStatus
    payment: PaymentResponse | None = None

    model_config = ConfigDict(from_attributes=True)


class LedgerSummaryResponse(BaseModel):
    total_months: int
    paid_months: int
    pending_months: int
    total_paid: int

    model_config = ConfigDict(from_attributes=True)


class FamilySummaryResponse(BaseModel):
    """Family header shown above the ledger."""

    id: int
    card_no: str
    head_name: str
    unit_name: str | None = None
    email: str | None = None
    member_count: int

    model_config = ConfigDict(from_attributes=True)


class FamilyLedgerResponse(BaseModel):
    family: FamilySummaryResponse
    payment_history: list[LedgerEntryResponse]
    summary: LedgerSummaryResponse
    all_payments: list[PaymentResponse]


class MonthlyReportRowResponse(BaseModel):
    """One family's status in the cross-family monthly report."""

    family_id: int
    card_no: str
    head_name: str
    unit_name: str | None = None
    member_count: int
    month: str
    status: PaymentStatus
    payment: PaymentResponse | None = None


class MonthOption(BaseModel):
    label: str
    value: str
