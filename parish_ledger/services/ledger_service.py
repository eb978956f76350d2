"""Ledger view builder.

Reconciles the active month range with stored payments to produce a family's
complete payment history (every billable month marked Paid or Pending), and the
cross-family report for a single month.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session, joinedload

from parish_ledger.errors import NotFoundError, ValidationError
from parish_ledger.models import Family, FamilyMember, FamilyPayment, PaymentStatus
from parish_ledger.services.month_policy import MonthRangePolicy
from parish_ledger.services.pagination import Pagination, paginate

logger = logging.getLogger(__name__)

STATUS_FILTERS = ("paid", "pending")


@dataclass
class LedgerEntry:
    """One billable month of a family's ledger."""

    month: str
    display_name: str
    is_current: bool
    status: PaymentStatus
    payment: Optional[FamilyPayment] = None


@dataclass
class LedgerSummary:
    total_months: int
    paid_months: int
    pending_months: int
    total_paid: int


@dataclass
class FamilyLedger:
    """Everything the family payments page shows."""

    family: Family
    entries: list[LedgerEntry]
    summary: LedgerSummary
    payments: list[FamilyPayment]


@dataclass
class MonthlyReportRow:
    """A family's status for the reported month."""

    family: Family
    member_count: int
    month: str
    status: PaymentStatus
    payment: Optional[FamilyPayment] = None


class LedgerService:
    """Read-only views over the payment ledger."""

    def __init__(self, db: Session, policy: MonthRangePolicy):
        self.db = db
        self.policy = policy

    def _get_family(self, family_id: int) -> Family:
        family = self.db.get(Family, family_id)
        if family is None:
            raise NotFoundError("Family not found")
        return family

    def _payments(self, family_id: int) -> list[FamilyPayment]:
        return list(
            self.db.execute(
                select(FamilyPayment)
                .where(FamilyPayment.family_id == family_id)
                .order_by(FamilyPayment.month.desc())
            ).scalars()
        )

    def _entries(self, payments: list[FamilyPayment]) -> list[LedgerEntry]:
        by_month = {payment.month: payment for payment in payments}
        current = self.policy.current_month()
        entries = []
        for month in self.policy.active_months():
            payment = by_month.get(month)
            entries.append(
                LedgerEntry(
                    month=month,
                    display_name=self.policy.format_month(month),
                    is_current=month == current,
                    status=PaymentStatus.PAID if payment else PaymentStatus.PENDING,
                    payment=payment,
                )
            )
        # Most recent month first
        entries.reverse()
        return entries

    def build_ledger(self, family_id: int) -> list[LedgerEntry]:
        """Build the family's ledger, one entry per active month, newest first.

        Raises:
            NotFoundError: If the family does not exist
        """
        family = self._get_family(family_id)
        return self._entries(self._payments(family.id))

    @staticmethod
    def summarize(entries: list[LedgerEntry]) -> LedgerSummary:
        """Fold a ledger into month counts and the total paid."""
        paid = [entry for entry in entries if entry.status == PaymentStatus.PAID]
        return LedgerSummary(
            total_months=len(entries),
            paid_months=len(paid),
            pending_months=len(entries) - len(paid),
            total_paid=sum(entry.payment.amount_paid for entry in paid),
        )

    def family_ledger(self, family_id: int) -> FamilyLedger:
        """Family summary, reconciled ledger, totals and raw payments."""
        family = self._get_family(family_id)
        payments = self._payments(family.id)
        entries = self._entries(payments)
        return FamilyLedger(
            family=family,
            entries=entries,
            summary=self.summarize(entries),
            payments=payments,
        )

    def monthly_report(
        self,
        month: str,
        unit_id: Optional[int] = None,
        status: Optional[str] = None,
        page: int = 1,
        limit: int = 50,
    ) -> tuple[list[MonthlyReportRow], Pagination]:
        """Every family's payment status for one month.

        Args:
            month: Reported month (required, inside the active window)
            unit_id: Restrict to one unit (None for all units)
            status: 'paid' or 'pending' to filter, None for both
            page: 1-based page number
            limit: Page size

        Raises:
            ValidationError: Missing or invalid month, unknown status filter
        """
        if not month:
            raise ValidationError("Month is required")
        self.policy.validate_month(month)
        if status is not None and status not in STATUS_FILTERS:
            raise ValidationError("Status must be 'paid' or 'pending'")

        query = select(Family).options(joinedload(Family.unit)).order_by(Family.head_name)
        if unit_id is not None:
            query = query.where(Family.unit_id == unit_id)
        families = list(self.db.execute(query).scalars())
        family_ids = [family.id for family in families]

        member_counts = dict(
            self.db.execute(
                select(FamilyMember.family_id, func.count(FamilyMember.id))
                .where(FamilyMember.family_id.in_(family_ids))
                .group_by(FamilyMember.family_id)
            ).all()
        )
        payments = {
            payment.family_id: payment
            for payment in self.db.execute(
                select(FamilyPayment).where(
                    FamilyPayment.family_id.in_(family_ids), FamilyPayment.month == month
                )
            ).scalars()
        }

        rows = []
        for family in families:
            payment = payments.get(family.id)
            row_status = PaymentStatus.PAID if payment else PaymentStatus.PENDING
            if status is not None and row_status.value.lower() != status:
                continue
            rows.append(
                MonthlyReportRow(
                    family=family,
                    member_count=member_counts.get(family.id, 0),
                    month=month,
                    status=row_status,
                    payment=payment,
                )
            )

        logger.debug(
            f"Monthly report month={month} unit={unit_id} status={status}: {len(rows)} families"
        )
        return paginate(rows, page, limit)


__all__ = [
    "LedgerEntry",
    "LedgerSummary",
    "FamilyLedger",
    "MonthlyReportRow",
    "LedgerService",
]
