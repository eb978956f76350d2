"""Unit service for organizational groupings of families."""

import logging
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from parish_ledger.errors import ConflictError, NotFoundError, ValidationError
from parish_ledger.models import Family, Unit

logger = logging.getLogger(__name__)


def normalize_unit_name(name: Optional[str]) -> str:
    """Trim and upper-case a unit name.

    Raises:
        ValidationError: If the name is blank
    """
    name = (name or "").strip().upper()
    if not name:
        raise ValidationError("Unit name is required")
    return name


class UnitService:
    """Service for unit CRUD operations."""

    def __init__(self, db: Session):
        """Initialize with database session."""
        self.db = db

    def list_units(self) -> list[Unit]:
        """All units ordered by name."""
        return list(self.db.execute(select(Unit).order_by(Unit.name)).scalars())

    def get_unit(self, unit_id: int) -> Unit:
        unit = self.db.get(Unit, unit_id)
        if unit is None:
            raise NotFoundError("Unit not found")
        return unit

    def _commit(self, unit: Unit) -> Unit:
        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            logger.warning(f"Duplicate unit name '{unit.name}': {e}")
            raise ConflictError("Unit name already exists") from e
        self.db.refresh(unit)
        return unit

    def create_unit(self, name: str, description: Optional[str] = None) -> Unit:
        """Create a unit.

        Raises:
            ValidationError: If the name is blank
            ConflictError: If a unit with the same name exists
        """
        unit = Unit(name=normalize_unit_name(name), description=description, family_count=0)
        self.db.add(unit)
        unit = self._commit(unit)
        logger.info(f"Created unit: {unit.name} (ID={unit.id})")
        return unit

    def update_unit(self, unit_id: int, name: str, description: Optional[str] = None) -> Unit:
        unit = self.get_unit(unit_id)
        unit.name = normalize_unit_name(name)
        unit.description = description
        return self._commit(unit)

    def delete_unit(self, unit_id: int) -> Unit:
        """Delete a unit that has no families.

        Raises:
            NotFoundError: If the unit does not exist
            ValidationError: If families are still registered under the unit
        """
        unit = self.get_unit(unit_id)
        family_count = self.db.execute(
            select(func.count(Family.id)).where(Family.unit_id == unit_id)
        ).scalar_one()
        if family_count > 0:
            raise ValidationError("Cannot delete unit with existing families")

        self.db.delete(unit)
        self.db.commit()
        logger.info(f"Deleted unit: {unit.name} (ID={unit_id})")
        return unit


__all__ = ["UnitService", "normalize_unit_name"]
