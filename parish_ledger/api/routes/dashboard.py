"""Dashboard API routes."""

from fastapi import APIRouter, Depends

from parish_ledger.api.deps import get_family_service
from parish_ledger.schemas.common import Envelope
from parish_ledger.schemas.families import DashboardStatsResponse
from parish_ledger.services.family_service import FamilyService

router = APIRouter(prefix="/api/dashboard", tags=["dashboard"])


@router.get("/stats", response_model=Envelope[DashboardStatsResponse])
async def dashboard_stats(
    service: FamilyService = Depends(get_family_service),
) -> Envelope[DashboardStatsResponse]:
    """Directory totals and the five most recently added families."""
    stats = service.dashboard_stats()
    return Envelope(data=DashboardStatsResponse.model_validate(stats))
