"""FamilyMember ORM model."""

import enum
from datetime import date

from sqlalchemy import Date, ForeignKey, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from parish_ledger.models import Base, BaseModel


class Gender(str, enum.Enum):
    MALE = "Male"
    FEMALE = "Female"


class Relation(str, enum.Enum):
    """Relationship of a member to the head of the family."""

    HEAD = "Head"
    WIFE = "Wife"
    SON = "Son"
    DAUGHTER = "Daughter"
    FATHER = "Father"
    MOTHER = "Mother"
    DAUGHTER_IN_LAW = "Daughter-in-law"
    SON_IN_LAW = "Son-in-law"
    GRANDDAUGHTER = "Granddaughter"
    GRANDSON = "Grandson"
    BROTHER = "Brother"
    SISTER = "Sister"
    OTHER = "Other"


class FamilyMember(Base, BaseModel):
    """An individual belonging to exactly one family.

    Names are unique within a family; the member service compares them
    case-insensitively before insert.
    """

    __tablename__ = "family_members"

    family_id: Mapped[int] = mapped_column(
        ForeignKey("families.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    dob: Mapped[date | None] = mapped_column(Date, nullable=True)
    gender: Mapped[str] = mapped_column(String(10), nullable=False)
    relation: Mapped[str] = mapped_column(
        "relationship",
        String(30),
        nullable=False,
        comment="Relationship to head of family",
    )

    # Sacraments
    baptism_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    communion_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    confirmation_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    marriage_date: Mapped[date | None] = mapped_column(Date, nullable=True)

    education: Mapped[str | None] = mapped_column(String(255), nullable=True)
    occupation: Mapped[str | None] = mapped_column(String(255), nullable=True)
    phone_number: Mapped[str | None] = mapped_column(String(50), nullable=True)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    marital_status: Mapped[str | None] = mapped_column(String(20), nullable=True)
    remarks: Mapped[str | None] = mapped_column(Text, nullable=True)

    family: Mapped["Family"] = relationship(  # noqa: F821
        "Family",
        back_populates="members",
    )

    __table_args__ = (UniqueConstraint("family_id", "name", name="uq_family_member_name"),)

    def __repr__(self) -> str:
        return f"<FamilyMember(id={self.id}, family_id={self.family_id}, name={self.name})>"


__all__ = ["FamilyMember", "Gender", "Relation"]
