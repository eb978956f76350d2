"""Payment ledger API routes.

Two routers:
- `family_router` under /api/families/{family_id}/payments for one family's ledger
- `router` under /api/payments for the cross-family monthly report
"""

from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Query, Request, status

from parish_ledger.api.deps import (
    PageParams,
    get_ledger_service,
    get_payment_service,
    get_policy,
    notify_after_response,
    parse_unit_filter,
)
from parish_ledger.schemas.common import Envelope, PagedEnvelope, PaginationResponse
from parish_ledger.schemas.payments import (
    FamilyLedgerResponse,
    FamilySummaryResponse,
    LedgerEntryResponse,
    LedgerSummaryResponse,
    MonthlyReportRowResponse,
    MonthOption,
    PaymentCreatePayload,
    PaymentRecordPayload,
    PaymentResponse,
    PaymentUpdatePayload,
)
from parish_ledger.services.ledger_service import LedgerService, MonthlyReportRow
from parish_ledger.services.month_policy import MonthRangePolicy
from parish_ledger.services.payment_service import PaymentService

family_router = APIRouter(prefix="/api/families/{family_id}/payments", tags=["payments"])
router = APIRouter(prefix="/api/payments", tags=["payments"])


def _report_row(row: MonthlyReportRow) -> MonthlyReportRowResponse:
    return MonthlyReportRowResponse(
        family_id=row.family.id,
        card_no=row.family.card_no,
        head_name=row.family.head_name,
        unit_name=row.family.unit_name,
        member_count=row.member_count,
        month=row.month,
        status=row.status,
        payment=PaymentResponse.model_validate(row.payment) if row.payment else None,
    )


@family_router.get("", response_model=Envelope[FamilyLedgerResponse])
async def get_family_ledger(
    family_id: int, service: LedgerService = Depends(get_ledger_service)
) -> Envelope[FamilyLedgerResponse]:
    """
    Family payment page: every active month marked Paid or Pending.

    Returns:
        200: family summary, payment_history (newest first), summary totals,
             all_payments (raw rows, newest month first)
        404: Family not found
    """
    ledger = service.family_ledger(family_id)
    return Envelope(
        data=FamilyLedgerResponse(
            family=FamilySummaryResponse.model_validate(ledger.family),
            payment_history=[LedgerEntryResponse.model_validate(entry) for entry in ledger.entries],
            summary=LedgerSummaryResponse.model_validate(ledger.summary),
            all_payments=[PaymentResponse.model_validate(payment) for payment in ledger.payments],
        )
    )


@family_router.post(
    "", response_model=Envelope[PaymentResponse], status_code=status.HTTP_201_CREATED
)
async def record_family_payment(
    family_id: int,
    payload: PaymentCreatePayload,
    request: Request,
    background_tasks: BackgroundTasks,
    service: PaymentService = Depends(get_payment_service),
) -> Envelope[PaymentResponse]:
    """
    Record (or overwrite) a family's payment for a month.

    Returns:
        201: The stored payment
        400: Missing field, invalid month, amount below minimum, bad date
        404: Family not found
    """
    payment = service.record_payment(
        family_id,
        payload.month,
        payload.amount_paid,
        payload.payment_date,
        payload.remarks,
    )
    notify_after_response(request, background_tasks)
    return Envelope(
        data=PaymentResponse.model_validate(payment), message="Payment recorded successfully"
    )


@family_router.put("/{payment_id}", response_model=Envelope[PaymentResponse])
async def update_family_payment(
    family_id: int,
    payment_id: int,
    payload: PaymentUpdatePayload,
    service: PaymentService = Depends(get_payment_service),
) -> Envelope[PaymentResponse]:
    payment = service.update_payment(
        family_id, payment_id, payload.amount_paid, payload.payment_date, payload.remarks
    )
    return Envelope(
        data=PaymentResponse.model_validate(payment), message="Payment updated successfully"
    )


@family_router.delete("/{payment_id}", response_model=Envelope[PaymentResponse])
async def delete_family_payment(
    family_id: int,
    payment_id: int,
    service: PaymentService = Depends(get_payment_service),
) -> Envelope[PaymentResponse]:
    """Delete a payment; the month reverts to Pending in the ledger."""
    payment = service.delete_payment(family_id, payment_id)
    return Envelope(
        data=PaymentResponse.model_validate(payment), message="Payment deleted successfully"
    )


@router.get("", response_model=PagedEnvelope[MonthlyReportRowResponse])
async def monthly_report(
    month: Optional[str] = Query(None, description="Reported month, YYYY-MM"),
    unit_id: Optional[str] = Query(None, description="Unit id, or 'all'"),
    status_filter: Optional[str] = Query(None, alias="status", description="'paid' or 'pending'"),
    paging: PageParams = Depends(),
    service: LedgerService = Depends(get_ledger_service),
) -> PagedEnvelope[MonthlyReportRowResponse]:
    """
    Every family's status for one month.

    Returns:
        200: One row per family, ordered by head name
        400: Missing or invalid month, unknown status filter
    """
    if status_filter is not None and status_filter.strip() in ("", "all"):
        status_filter = None
    rows, pagination = service.monthly_report(
        month,
        unit_id=parse_unit_filter(unit_id),
        status=status_filter,
        page=paging.page,
        limit=paging.limit,
    )
    return PagedEnvelope(
        data=[_report_row(row) for row in rows],
        pagination=PaginationResponse.model_validate(pagination),
    )


@router.post("", response_model=Envelope[PaymentResponse], status_code=status.HTTP_201_CREATED)
async def record_payment(
    payload: PaymentRecordPayload,
    request: Request,
    background_tasks: BackgroundTasks,
    service: PaymentService = Depends(get_payment_service),
) -> Envelope[PaymentResponse]:
    """Record a payment from the monthly report screen (family id in the body)."""
    payment = service.record_payment(
        payload.family_id,
        payload.month,
        payload.amount_paid,
        payload.payment_date,
        payload.remarks,
    )
    notify_after_response(request, background_tasks)
    return Envelope(
        data=PaymentResponse.model_validate(payment), message="Payment recorded successfully"
    )


@router.get("/months", response_model=Envelope[list[MonthOption]])
async def month_options(
    policy: MonthRangePolicy = Depends(get_policy),
) -> Envelope[list[MonthOption]]:
    """Active months for the report filter, most recent first."""
    return Envelope(data=[MonthOption(**option) for option in policy.month_filter_options()])


@router.get("/{family_id}", response_model=Envelope[list[PaymentResponse]])
async def family_payments(
    family_id: int,
    service: PaymentService = Depends(get_payment_service),
) -> Envelope[list[PaymentResponse]]:
    """Raw payment rows of a family, most recent month first."""
    payments = service.list_payments(family_id)
    return Envelope(data=[PaymentResponse.model_validate(payment) for payment in payments])
