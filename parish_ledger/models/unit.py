"""Unit ORM model: an organizational grouping of families."""

from sqlalchemy import CheckConstraint, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from parish_ledger.models import Base, BaseModel


class Unit(Base, BaseModel):
    """Parish unit (ward) with a denormalized family count."""

    __tablename__ = "units"

    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        unique=True,
        comment="Unit name, stored upper-case",
    )
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    family_count: Mapped[int] = mapped_column(
        Integer,
        default=0,
        nullable=False,
        comment="Number of families registered under this unit",
    )

    families: Mapped[list["Family"]] = relationship(  # noqa: F821
        "Family",
        back_populates="unit",
    )

    __table_args__ = (CheckConstraint("family_count >= 0", name="ck_unit_family_count"),)

    def __repr__(self) -> str:
        return f"<Unit(id={self.id}, name={self.name}, family_count={self.family_count})>"


__all__ = ["Unit"]
