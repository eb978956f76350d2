"""FastAPI dependencies: database session, policy and service factories.

Everything is read from `app.state`, which `create_app` populates, so tests can
build an app around an in-memory database and a fixed clock.
"""

from typing import Iterator, Optional

from fastapi import BackgroundTasks, Depends, Query, Request
from sqlalchemy.orm import Session

from parish_ledger.config import Settings
from parish_ledger.errors import ValidationError
from parish_ledger.services.family_service import FamilyService
from parish_ledger.services.ledger_service import LedgerService
from parish_ledger.services.member_service import MemberService
from parish_ledger.services.month_policy import MonthRangePolicy
from parish_ledger.services.payment_service import PaymentService
from parish_ledger.services.unit_service import UnitService


def get_db(request: Request) -> Iterator[Session]:
    """Yield a session bound to the app's database and close it afterwards."""
    with request.app.state.database.session() as db:
        yield db


def get_policy(request: Request) -> MonthRangePolicy:
    return request.app.state.policy


def get_payment_service(request: Request, db: Session = Depends(get_db)) -> PaymentService:
    state = request.app.state
    return PaymentService(
        db,
        state.policy,
        minimum_amount=state.settings.minimum_payment_amount,
        outbox=state.outbox,
    )


def get_ledger_service(request: Request, db: Session = Depends(get_db)) -> LedgerService:
    return LedgerService(db, request.app.state.policy)


def get_family_service(request: Request, db: Session = Depends(get_db)) -> FamilyService:
    return FamilyService(db, outbox=request.app.state.outbox)


def get_member_service(db: Session = Depends(get_db)) -> MemberService:
    return MemberService(db)


def get_unit_service(db: Session = Depends(get_db)) -> UnitService:
    return UnitService(db)


class PageParams:
    """`page` and `limit` query parameters, clamped to the configured maximum."""

    def __init__(
        self,
        request: Request,
        page: int = Query(1, ge=1, description="1-based page number"),
        limit: Optional[int] = Query(None, ge=1, description="Page size"),
    ):
        settings: Settings = request.app.state.settings
        self.page = page
        self.limit = min(limit or settings.default_page_size, settings.max_page_size)


def parse_unit_filter(unit_id: Optional[str]) -> Optional[int]:
    """Turn the `unit_id` query value into an id; empty or 'all' means every unit.

    Raises:
        ValidationError: If the value is not a number
    """
    if unit_id is None or unit_id.strip() in ("", "all"):
        return None
    try:
        return int(unit_id)
    except ValueError as e:
        raise ValidationError("Invalid unit selected") from e


def notify_after_response(request: Request, background_tasks: BackgroundTasks) -> None:
    """Deliver queued notifications once the response has been sent."""
    background_tasks.add_task(request.app.state.worker.run_pending)


__all__ = [
    "get_db",
    "get_policy",
    "get_payment_service",
    "get_ledger_service",
    "get_family_service",
    "get_member_service",
    "get_unit_service",
    "PageParams",
    "parse_unit_filter",
    "notify_after_response",
]
