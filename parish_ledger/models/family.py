"""Family ORM model: a household tracked by a unique card number."""

from sqlalchemy import CheckConstraint, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from parish_ledger.models import Base, BaseModel


class Family(Base, BaseModel):
    """Model representing a registered family.

    The card number is trimmed and upper-cased before it is stored, so the
    unique constraint is effectively case-insensitive. `member_count` mirrors
    the number of FamilyMember rows and is recomputed by the member service.
    """

    __tablename__ = "families"

    unit_id: Mapped[int] = mapped_column(
        ForeignKey("units.id"),
        nullable=False,
        index=True,
        comment="Unit the family belongs to",
    )
    card_no: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        unique=True,
        comment="Family card number, upper-case",
    )
    head_name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        index=True,
        comment="Head of family",
    )
    address: Mapped[str | None] = mapped_column(Text, nullable=True)
    vicar_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    pincode: Mapped[str | None] = mapped_column(String(20), nullable=True)
    member_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    unit: Mapped["Unit"] = relationship(  # noqa: F821
        "Unit",
        back_populates="families",
    )
    members: Mapped[list["FamilyMember"]] = relationship(  # noqa: F821
        "FamilyMember",
        back_populates="family",
        cascade="all, delete-orphan",
        order_by="FamilyMember.id",
    )
    payments: Mapped[list["FamilyPayment"]] = relationship(  # noqa: F821
        "FamilyPayment",
        back_populates="family",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        Index("idx_family_unit_head", "unit_id", "head_name"),
        CheckConstraint("member_count >= 0", name="ck_family_member_count"),
    )

    @property
    def unit_name(self) -> str | None:
        return self.unit.name if self.unit else None

    def __repr__(self) -> str:
        return (
            f"<Family(id={self.id}, card_no={self.card_no}, head_name={self.head_name}, "
            f"unit_id={self.unit_id}, member_count={self.member_count})>"
        )


__all__ = ["Family"]
