"""Family directory service.

Encapsulates Family CRUD and keeps the denormalized `Unit.family_count`
in step with the families registered under each unit.
"""

import logging
import re
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from parish_ledger.errors import ConflictError, NotFoundError, ValidationError
from parish_ledger.models import Family, FamilyMember, Unit
from parish_ledger.services.notification_service import FamilyRegistered, NotificationOutbox
from parish_ledger.services.pagination import Pagination

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^\S+@\S+\.\S+$")

# Optional contact fields copied verbatim (after trimming) from the payload
_FAMILY_FIELDS = ("address", "vicar_name", "phone", "pincode")


@dataclass
class RecentFamily:
    id: int
    name: str
    unit_name: Optional[str]
    members: int
    added_date: datetime


@dataclass
class DashboardStats:
    total_units: int
    total_families: int
    total_members: int
    recent_families: list[RecentFamily]


def normalize_card_no(card_no: Optional[str]) -> str:
    card_no = (card_no or "").strip().upper()
    if not card_no:
        raise ValidationError("Family card number is required")
    return card_no


def normalize_email(email: Optional[str]) -> Optional[str]:
    if email is None or not email.strip():
        return None
    email = email.strip().lower()
    if not EMAIL_PATTERN.match(email):
        raise ValidationError("Please provide a valid email address")
    return email


def _strip(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    return value.strip() or None


class FamilyService:
    """Service for family directory operations."""

    def __init__(self, db: Session, outbox: Optional[NotificationOutbox] = None):
        """Initialize with database session and optional notification outbox."""
        self.db = db
        self.outbox = outbox

    def get_family(self, family_id: int) -> Family:
        """Fetch a family by id.

        Raises:
            NotFoundError: If the family does not exist
        """
        family = self.db.get(Family, family_id)
        if family is None:
            raise NotFoundError("Family not found")
        return family

    def list_families(
        self,
        unit_id: Optional[int] = None,
        search: Optional[str] = None,
        page: int = 1,
        limit: int = 50,
    ) -> tuple[list[Family], Pagination]:
        """List families, newest first.

        Args:
            unit_id: Restrict to one unit
            search: Case-insensitive match on head name, card number or address
            page: 1-based page number
            limit: Page size
        """
        conditions = []
        if unit_id is not None:
            conditions.append(Family.unit_id == unit_id)
        if search and search.strip():
            pattern = f"%{search.strip()}%"
            conditions.append(
                or_(
                    Family.head_name.ilike(pattern),
                    Family.card_no.ilike(pattern),
                    Family.address.ilike(pattern),
                )
            )

        total = self.db.execute(select(func.count(Family.id)).where(*conditions)).scalar_one()
        pagination = Pagination.build(page, limit, total)
        families = list(
            self.db.execute(
                select(Family)
                .options(joinedload(Family.unit))
                .where(*conditions)
                .order_by(Family.created_at.desc(), Family.id.desc())
                .offset(pagination.offset)
                .limit(limit)
            ).scalars()
        )
        return families, pagination

    def _require_unit(self, unit_id: int) -> Unit:
        unit = self.db.get(Unit, unit_id) if unit_id is not None else None
        if unit is None:
            raise ValidationError("Invalid unit selected")
        return unit

    def _ensure_card_available(self, card_no: str, family_id: Optional[int] = None) -> None:
        query = select(Family.id).where(Family.card_no == card_no)
        if family_id is not None:
            query = query.where(Family.id != family_id)
        if self.db.execute(query).first() is not None:
            raise ConflictError("Family card number already exists")

    def _commit(self) -> None:
        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            logger.warning(f"IntegrityError saving family: {e}")
            raise ConflictError("Family card number already exists") from e

    def _adjust_family_count(self, unit_id: int, delta: int) -> None:
        unit = self.db.get(Unit, unit_id)
        if unit is not None:
            unit.family_count = max(unit.family_count + delta, 0)

    def create_family(
        self,
        unit_id: int,
        card_no: str,
        head_name: str,
        email: Optional[str] = None,
        **details: Optional[str],
    ) -> Family:
        """Register a family under a unit.

        Args:
            unit_id: Existing unit
            card_no: Family card number (stored trimmed, upper-case)
            head_name: Head of family
            email: Optional contact address; a welcome e-mail is queued when set
            **details: address, vicar_name, phone, pincode

        Raises:
            ValidationError: Unknown unit, blank card number/head name, bad e-mail
            ConflictError: If the card number is already registered
        """
        unit = self._require_unit(unit_id)
        card_no = normalize_card_no(card_no)
        head_name = _strip(head_name)
        if not head_name:
            raise ValidationError("Head of family name is required")
        email = normalize_email(email)
        self._ensure_card_available(card_no)

        family = Family(
            unit_id=unit.id,
            card_no=card_no,
            head_name=head_name,
            email=email,
            member_count=0,
            **{field: _strip(details.get(field)) for field in _FAMILY_FIELDS},
        )
        self.db.add(family)
        self._adjust_family_count(unit.id, 1)
        self._commit()
        self.db.refresh(family)
        self.db.refresh(unit)
        logger.info(f"Created family: {family.card_no} (ID={family.id}, unit={unit.name})")

        if self.outbox is not None and family.email:
            self.outbox.publish(
                FamilyRegistered(
                    email=family.email,
                    head_name=family.head_name,
                    card_no=family.card_no,
                    unit_name=unit.name,
                )
            )
        return family

    def update_family(
        self,
        family_id: int,
        unit_id: int,
        card_no: str,
        head_name: str,
        email: Optional[str] = None,
        **details: Optional[str],
    ) -> Family:
        """Update a family, moving it between units if the unit changed.

        Raises:
            NotFoundError: If the family does not exist
            ValidationError: Unknown unit, blank fields, bad e-mail
            ConflictError: If the card number belongs to another family
        """
        family = self.get_family(family_id)
        unit = self._require_unit(unit_id)
        card_no = normalize_card_no(card_no)
        head_name = _strip(head_name)
        if not head_name:
            raise ValidationError("Head of family name is required")
        email = normalize_email(email)
        self._ensure_card_available(card_no, family_id=family.id)

        old_unit_id = family.unit_id
        family.unit_id = unit.id
        family.card_no = card_no
        family.head_name = head_name
        family.email = email
        for field in _FAMILY_FIELDS:
            setattr(family, field, _strip(details.get(field)))

        if old_unit_id != unit.id:
            self._adjust_family_count(old_unit_id, -1)
            self._adjust_family_count(unit.id, 1)
            logger.info(f"Moved family {family.card_no} from unit {old_unit_id} to {unit.id}")

        self._commit()
        self.db.refresh(family)
        return family

    def delete_family(self, family_id: int) -> Family:
        """Delete a family with its members and payments.

        Raises:
            NotFoundError: If the family does not exist
        """
        family = self.get_family(family_id)
        unit_id = family.unit_id
        # Load the unit now; callers read unit_name from the deleted family
        unit_name = family.unit_name
        self.db.delete(family)
        self._adjust_family_count(unit_id, -1)
        self.db.commit()
        logger.info(f"Deleted family: {family.card_no} (ID={family_id}, unit={unit_name})")
        return family

    def dashboard_stats(self, recent: int = 5) -> DashboardStats:
        """Directory totals plus the most recently registered families."""
        total_units = self.db.execute(select(func.count(Unit.id))).scalar_one()
        total_families = self.db.execute(select(func.count(Family.id))).scalar_one()
        total_members = self.db.execute(select(func.count(FamilyMember.id))).scalar_one()
        newest = self.db.execute(
            select(Family)
            .options(joinedload(Family.unit))
            .order_by(Family.created_at.desc(), Family.id.desc())
            .limit(recent)
        ).scalars()
        return DashboardStats(
            total_units=total_units,
            total_families=total_families,
            total_members=total_members,
            recent_families=[
                RecentFamily(
                    id=family.id,
                    name=f"{family.head_name} Family",
                    unit_name=family.unit_name,
                    members=family.member_count,
                    added_date=family.created_at,
                )
                for family in newest
            ],
        )


__all__ = [
    "FamilyService",
    "DashboardStats",
    "RecentFamily",
    "normalize_card_no",
    "normalize_email",
]
