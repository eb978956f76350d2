"""Unit API routes."""

from fastapi import APIRouter, Depends, status

from parish_ledger.api.deps import get_unit_service
from parish_ledger.schemas.common import Envelope
from parish_ledger.schemas.units import UnitPayload, UnitResponse
from parish_ledger.services.unit_service import UnitService

router = APIRouter(prefix="/api/units", tags=["units"])


@router.get("", response_model=Envelope[list[UnitResponse]])
async def list_units(service: UnitService = Depends(get_unit_service)) -> Envelope[list[UnitResponse]]:
    """List all units ordered by name."""
    units = service.list_units()
    return Envelope(data=[UnitResponse.model_validate(unit) for unit in units])


@router.post("", response_model=Envelope[UnitResponse], status_code=status.HTTP_201_CREATED)
async def create_unit(
    payload: UnitPayload, service: UnitService = Depends(get_unit_service)
) -> Envelope[UnitResponse]:
    """
    Create a unit.

    Returns:
        201: The new unit
        400: Blank name
        409: A unit with the same name exists
    """
    unit = service.create_unit(payload.name, payload.description)
    return Envelope(data=UnitResponse.model_validate(unit), message="Unit created successfully")


@router.put("/{unit_id}", response_model=Envelope[UnitResponse])
async def update_unit(
    unit_id: int, payload: UnitPayload, service: UnitService = Depends(get_unit_service)
) -> Envelope[UnitResponse]:
    unit = service.update_unit(unit_id, payload.name, payload.description)
    return Envelope(data=UnitResponse.model_validate(unit), message="Unit updated successfully")


@router.delete("/{unit_id}", response_model=Envelope[UnitResponse])
async def delete_unit(unit_id: int, service: UnitService = Depends(get_unit_service)) -> Envelope[UnitResponse]:
    """
    Delete a unit.

    Returns:
        200: The deleted unit
        400: The unit still has families
        404: Unit not found
    """
    unit = service.delete_unit(unit_id)
    return Envelope(data=UnitResponse.model_validate(unit), message="Unit deleted successfully")
