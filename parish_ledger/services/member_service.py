"""Family member service.

Every add or delete recomputes `Family.member_count` from the member rows so
the denormalized count always equals the number of members.
"""

import logging
from typing import Any, Optional

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from parish_ledger.errors import ConflictError, NotFoundError, ValidationError
from parish_ledger.models import Family, FamilyMember

logger = logging.getLogger(__name__)

DUPLICATE_MEMBER_MESSAGE = "A member with this name already exists in this family"

MEMBER_FIELDS = (
    "dob",
    "gender",
    "relation",
    "baptism_date",
    "communion_date",
    "confirmation_date",
    "marriage_date",
    "education",
    "occupation",
    "phone_number",
    "email",
    "marital_status",
    "remarks",
)


class MemberService:
    """Service for members of a family."""

    def __init__(self, db: Session):
        self.db = db

    def _get_family(self, family_id: int) -> Family:
        family = self.db.get(Family, family_id)
        if family is None:
            raise NotFoundError("Family not found")
        return family

    def _ensure_name_available(
        self, family_id: int, name: str, member_id: Optional[int] = None
    ) -> None:
        query = select(FamilyMember.id).where(
            FamilyMember.family_id == family_id,
            func.lower(FamilyMember.name) == name.lower(),
        )
        if member_id is not None:
            query = query.where(FamilyMember.id != member_id)
        if self.db.execute(query).first() is not None:
            raise ConflictError(DUPLICATE_MEMBER_MESSAGE)

    def _refresh_member_count(self, family: Family) -> None:
        family.member_count = self.db.execute(
            select(func.count(FamilyMember.id)).where(FamilyMember.family_id == family.id)
        ).scalar_one()

    def _commit(self) -> None:
        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            raise ConflictError(DUPLICATE_MEMBER_MESSAGE) from e

    def list_members(self, family_id: int) -> list[FamilyMember]:
        """Members of a family in the order they were added."""
        self._get_family(family_id)
        return list(
            self.db.execute(
                select(FamilyMember)
                .where(FamilyMember.family_id == family_id)
                .order_by(FamilyMember.created_at, FamilyMember.id)
            ).scalars()
        )

    def get_member(self, family_id: int, member_id: int) -> FamilyMember:
        member = self.db.execute(
            select(FamilyMember).where(
                FamilyMember.id == member_id, FamilyMember.family_id == family_id
            )
        ).scalar_one_or_none()
        if member is None:
            raise NotFoundError("Member not found")
        return member

    def add_member(self, family_id: int, name: str, **fields: Any) -> FamilyMember:
        """Add a member to a family.

        Raises:
            NotFoundError: If the family does not exist
            ValidationError: If the name is blank
            ConflictError: If the family already has a member with that name
        """
        family = self._get_family(family_id)
        name = (name or "").strip()
        if not name:
            raise ValidationError("Member name is required")
        self._ensure_name_available(family.id, name)

        member = FamilyMember(
            family_id=family.id,
            name=name,
            **{field: fields.get(field) for field in MEMBER_FIELDS},
        )
        self.db.add(member)
        self.db.flush()
        self._refresh_member_count(family)
        self._commit()
        self.db.refresh(member)
        logger.info(f"Added member '{member.name}' to family {family.card_no}")
        return member

    def update_member(
        self, family_id: int, member_id: int, name: str, **fields: Any
    ) -> FamilyMember:
        self._get_family(family_id)
        member = self.get_member(family_id, member_id)
        name = (name or "").strip()
        if not name:
            raise ValidationError("Member name is required")
        self._ensure_name_available(family_id, name, member_id=member.id)

        member.name = name
        for field in MEMBER_FIELDS:
            setattr(member, field, fields.get(field))
        self._commit()
        self.db.refresh(member)
        return member

    def delete_member(self, family_id: int, member_id: int) -> FamilyMember:
        """Remove a member and recount the family.

        Raises:
            NotFoundError: If the family or member does not exist
        """
        family = self._get_family(family_id)
        member = self.get_member(family_id, member_id)
        self.db.delete(member)
        self.db.flush()
        self._refresh_member_count(family)
        self.db.commit()
        logger.info(f"Removed member '{member.name}' from family {family.card_no}")
        return member


__all__ = ["MemberService", "MEMBER_FIELDS"]
