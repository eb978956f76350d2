"""Payment service for the monthly family subscription ledger.

Provides methods for:
- Recording a family's payment for a month (create or update in place)
- Editing an existing payment by id
- Deleting a payment
- Listing a family's payments

Uniqueness of (family_id, month) is enforced by the database; writes use the
dialect's native INSERT ... ON CONFLICT DO UPDATE so that concurrent
submissions for the same family and month cannot create duplicates.
"""

import logging
from datetime import date, datetime, timezone
from typing import Optional

from sqlalchemy import select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from parish_ledger.errors import ConflictError, NotFoundError, ValidationError
from parish_ledger.models import Family, FamilyPayment
from parish_ledger.services.month_policy import MonthRangePolicy
from parish_ledger.services.notification_service import NotificationOutbox, PaymentRecorded

logger = logging.getLogger(__name__)

DEFAULT_MINIMUM_AMOUNT = 25

# Largest value the 32-bit amount column holds on every supported database
MAX_PAYMENT_AMOUNT = 2**31 - 1

# Dialects with a native atomic upsert
_UPSERT_INSERTS = {
    "sqlite": sqlite.insert,
    "postgresql": postgresql.insert,
}


def parse_payment_date(value) -> date:
    """Parse a payment date from a date, datetime or ISO 8601 string.

    Raises:
        ValidationError: If the value is not a valid calendar date
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str) and value.strip():
        text = value.strip()
        try:
            if len(text) == 10:
                return date.fromisoformat(text)
            return datetime.fromisoformat(text).date()
        except ValueError:
            pass
    raise ValidationError("Invalid payment date")


def _clean_remarks(remarks: Optional[str]) -> Optional[str]:
    if remarks is None:
        return None
    remarks = remarks.strip()
    return remarks or None


class PaymentService:
    """Core ledger write operations."""

    def __init__(
        self,
        db: Session,
        policy: MonthRangePolicy,
        minimum_amount: int = DEFAULT_MINIMUM_AMOUNT,
        outbox: Optional[NotificationOutbox] = None,
    ):
        """Initialize payment service.

        Args:
            db: SQLAlchemy database session
            policy: Month range policy used to validate month tokens
            minimum_amount: Smallest accepted amount in whole rupees
            outbox: Where payment confirmations are published after commit
        """
        self.db = db
        self.policy = policy
        self.minimum_amount = minimum_amount
        self.outbox = outbox

    def validate_amount(self, amount_paid) -> int:
        """Check an amount is a whole number between the minimum and MAX_PAYMENT_AMOUNT.

        Raises:
            ValidationError: If the amount is not a whole number or out of range
        """
        if isinstance(amount_paid, bool) or not isinstance(amount_paid, (int, float)):
            raise ValidationError("Amount paid must be a number")
        if isinstance(amount_paid, float) and not amount_paid.is_integer():
            raise ValidationError("Amount paid must be a whole number")
        amount = int(amount_paid)
        if amount < self.minimum_amount:
            raise ValidationError(f"Amount must be at least {self.minimum_amount}")
        if amount > MAX_PAYMENT_AMOUNT:
            raise ValidationError(f"Amount must be at most {MAX_PAYMENT_AMOUNT}")
        return amount

    def _get_family(self, family_id: int) -> Family:
        family = self.db.get(Family, family_id)
        if family is None:
            raise NotFoundError("Family not found")
        return family

    def _find(self, family_id: int, month: str) -> Optional[FamilyPayment]:
        return self.db.execute(
            select(FamilyPayment)
            .where(FamilyPayment.family_id == family_id, FamilyPayment.month == month)
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()

    def record_payment(
        self,
        family_id: int,
        month: str,
        amount_paid,
        payment_date,
        remarks: Optional[str] = None,
    ) -> FamilyPayment:
        """Record a family's payment for a month.

        Creates the payment on first submission; later submissions for the same
        family and month overwrite amount, payment date and remarks in place.

        Args:
            family_id: Family making the payment
            month: Billing month, `YYYY-MM`, inside the active window
            amount_paid: Whole rupees, at least the minimum
            payment_date: Date the payment was made (date or ISO string)
            remarks: Optional notes

        Returns:
            The stored FamilyPayment

        Raises:
            ValidationError: Missing field, bad month, amount below minimum, bad date
            NotFoundError: If the family does not exist
            ConflictError: If the store reports a uniqueness violation
        """
        if not month or amount_paid is None or not payment_date:
            raise ValidationError("Month, amount paid, and payment date are required")

        self.policy.validate_month(month)
        amount = self.validate_amount(amount_paid)
        family = self._get_family(family_id)
        paid_on = parse_payment_date(payment_date)
        remarks = _clean_remarks(remarks)

        payment = self._upsert(family.id, month, amount, paid_on, remarks)
        logger.info(
            f"Recorded payment: family={family.card_no} month={month} "
            f"amount={amount} (ID={payment.id})"
        )

        if self.outbox is not None and family.email:
            self.outbox.publish(
                PaymentRecorded(
                    email=family.email,
                    head_name=family.head_name,
                    card_no=family.card_no,
                    month=month,
                    amount_paid=amount,
                    payment_date=paid_on,
                    remarks=remarks,
                )
            )
        return payment

    def _upsert(
        self,
        family_id: int,
        month: str,
        amount: int,
        paid_on: date,
        remarks: Optional[str],
    ) -> FamilyPayment:
        now = datetime.now(timezone.utc)
        changes = {
            "amount_paid": amount,
            "payment_date": paid_on,
            "remarks": remarks,
            "updated_at": now,
        }
        dialect = self.db.get_bind().dialect.name
        try:
            if dialect in _UPSERT_INSERTS:
                stmt = (
                    _UPSERT_INSERTS[dialect](FamilyPayment)
                    .values(family_id=family_id, month=month, created_at=now, **changes)
                    .on_conflict_do_update(index_elements=["family_id", "month"], set_=changes)
                )
                self.db.execute(stmt)
            else:
                existing = self._find(family_id, month)
                if existing is None:
                    self.db.add(FamilyPayment(family_id=family_id, month=month, **changes))
                else:
                    for field, value in changes.items():
                        setattr(existing, field, value)
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            logger.warning(f"IntegrityError recording payment family={family_id} month={month}: {e}")
            raise ConflictError("Payment for this month already exists") from e

        return self._find(family_id, month)

    def update_payment(
        self,
        family_id: int,
        payment_id: int,
        amount_paid,
        payment_date,
        remarks: Optional[str] = None,
    ) -> FamilyPayment:
        """Edit amount, date and remarks of an existing payment.

        The month of a payment never changes; record a new month instead.

        Raises:
            ValidationError: Missing field, amount below minimum, bad date
            NotFoundError: If the family or the payment does not exist, or the
                payment belongs to another family
        """
        if amount_paid is None or not payment_date:
            raise ValidationError("Amount paid and payment date are required")

        amount = self.validate_amount(amount_paid)
        paid_on = parse_payment_date(payment_date)
        self._get_family(family_id)
        payment = self.get_payment(family_id, payment_id)

        payment.amount_paid = amount
        payment.payment_date = paid_on
        payment.remarks = _clean_remarks(remarks)
        self.db.commit()
        self.db.refresh(payment)
        logger.info(f"Updated payment {payment_id} for family {family_id}")
        return payment

    def get_payment(self, family_id: int, payment_id: int) -> FamilyPayment:
        """Fetch a payment that belongs to the given family.

        Raises:
            NotFoundError: If no such payment exists for the family
        """
        payment = self.db.execute(
            select(FamilyPayment).where(
                FamilyPayment.id == payment_id, FamilyPayment.family_id == family_id
            )
        ).scalar_one_or_none()
        if payment is None:
            raise NotFoundError("Payment not found")
        return payment

    def delete_payment(self, family_id: int, payment_id: int) -> FamilyPayment:
        """Delete a payment only if it belongs to the given family.

        Returns:
            The deleted FamilyPayment (detached)

        Raises:
            NotFoundError: If the family or the payment does not exist
        """
        self._get_family(family_id)
        payment = self.get_payment(family_id, payment_id)
        self.db.delete(payment)
        self.db.commit()
        logger.info(f"Deleted payment {payment_id} ({payment.month}) for family {family_id}")
        return payment

    def list_payments(self, family_id: int) -> list[FamilyPayment]:
        """All payments of a family, most recent month first.

        Raises:
            NotFoundError: If the family does not exist
        """
        self._get_family(family_id)
        return list(
            self.db.execute(
                select(FamilyPayment)
                .where(FamilyPayment.family_id == family_id)
                .order_by(FamilyPayment.month.desc())
            ).scalars()
        )


__all__ = ["PaymentService", "parse_payment_date", "DEFAULT_MINIMUM_AMOUNT", "MAX_PAYMENT_AMOUNT"]
