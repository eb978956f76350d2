"""FamilyPayment ORM model: one family's contribution for one calendar month."""

import enum
from datetime import date

from sqlalchemy import CheckConstraint, Date, ForeignKey, Index, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from parish_ledger.models import Base, BaseModel


class PaymentStatus(str, enum.Enum):
    """Derived ledger status of a family for a month."""

    PAID = "Paid"
    PENDING = "Pending"


class FamilyPayment(Base, BaseModel):
    """Model representing a monthly subscription payment.

    At most one row exists per (family_id, month); writes go through an
    upsert keyed on that pair.
    """

    __tablename__ = "family_payments"

    family_id: Mapped[int] = mapped_column(
        ForeignKey("families.id", ondelete="CASCADE"),
        nullable=False,
        comment="Family that made the payment",
    )
    month: Mapped[str] = mapped_column(
        String(7),
        nullable=False,
        comment="Billing month, YYYY-MM",
    )
    amount_paid: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        comment="Amount in whole rupees",
    )
    payment_date: Mapped[date] = mapped_column(
        Date,
        nullable=False,
        comment="Date the payment was actually made",
    )
    remarks: Mapped[str | None] = mapped_column(Text, nullable=True)

    family: Mapped["Family"] = relationship(  # noqa: F821
        "Family",
        back_populates="payments",
    )

    __table_args__ = (
        UniqueConstraint("family_id", "month", name="uq_family_payment_month"),
        Index("idx_payment_month", "month"),
        Index("idx_payment_date", "payment_date"),
        CheckConstraint("amount_paid >= 0", name="ck_payment_amount"),
    )

    def __repr__(self) -> str:
        return (
            f"<FamilyPayment(id={self.id}, family_id={self.family_id}, month={self.month}, "
            f"amount_paid={self.amount_paid}, payment_date={self.payment_date})>"
        )


__all__ = ["FamilyPayment", "PaymentStatus"]
