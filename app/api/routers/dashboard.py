from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends

from app.api.deps import Context, require_perm
from app.domain.models import DashboardStatsRead
from app.domain.permissions import PERM_DASHBOARD_READ
from app.services.dashboard_service import DashboardService

router = APIRouter()


def get_dashboard_service(context: Context) -> DashboardService:
    return DashboardService(context)


Service = Annotated[DashboardService, Depends(get_dashboard_service)]


@router.get(
    "/stats",
    response_model=DashboardStatsRead,
    dependencies=[Depends(require_perm(PERM_DASHBOARD_READ))],
)
def get_stats(service: Service) -> DashboardStatsRead:
    return service.get_stats()
