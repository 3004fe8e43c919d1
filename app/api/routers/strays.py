from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status

from app.api.deps import Claims, Context, require_any_perm, require_perm
from app.domain.models import StrayReportCreate, StrayReportRead, StrayStatusUpdate
from app.domain.permissions import PERM_STRAYS_READ, PERM_STRAYS_REPORT, PERM_STRAYS_WRITE
from app.infra.tenant import SESSION_KIND_PORTAL
from app.services.errors import ConflictError, NotFoundError, TenantContextError
from app.services.stray_service import StrayService

router = APIRouter()


def get_stray_service(context: Context) -> StrayService:
    return StrayService(context)


Service = Annotated[StrayService, Depends(get_stray_service)]


def _handle_stray_error(exc: Exception) -> None:
    if isinstance(exc, TenantContextError):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc)) from exc
    if isinstance(exc, NotFoundError):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    if isinstance(exc, ConflictError):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    raise exc


@router.get(
    "",
    response_model=list[StrayReportRead],
    dependencies=[Depends(require_perm(PERM_STRAYS_READ))],
)
def list_strays(service: Service) -> list[StrayReportRead]:
    return service.get_all()


@router.get(
    "/active",
    response_model=list[StrayReportRead],
    dependencies=[Depends(require_any_perm(PERM_STRAYS_READ, PERM_STRAYS_REPORT))],
)
def list_active_strays(claims: Claims, service: Service) -> list[StrayReportRead]:
    reports = service.list_active()
    if claims.get("kind") == SESSION_KIND_PORTAL:
        return [item.model_copy(update={"reporter_contact": None}) for item in reports]
    return reports


@router.get(
    "/pending",
    response_model=list[StrayReportRead],
    dependencies=[Depends(require_perm(PERM_STRAYS_WRITE))],
)
def list_pending_strays(service: Service) -> list[StrayReportRead]:
    return service.list_pending()


@router.post(
    "",
    response_model=StrayReportRead,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_any_perm(PERM_STRAYS_REPORT, PERM_STRAYS_WRITE))],
)
def create_stray(payload: StrayReportCreate, claims: Claims, service: Service) -> StrayReportRead:
    public = claims.get("kind") == SESSION_KIND_PORTAL
    try:
        return service.add(payload, public=public)
    except (TenantContextError, ConflictError) as exc:
        _handle_stray_error(exc)
        raise


@router.get(
    "/{report_id}",
    response_model=StrayReportRead,
    dependencies=[Depends(require_perm(PERM_STRAYS_READ))],
)
def get_stray(report_id: str, service: Service) -> StrayReportRead:
    report = service.get(report_id)
    if report is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="stray report not found")
    return report


@router.post(
    "/{report_id}/status",
    response_model=StrayReportRead,
    dependencies=[Depends(require_perm(PERM_STRAYS_WRITE))],
)
def update_stray_status(report_id: str, payload: StrayStatusUpdate, service: Service) -> StrayReportRead:
    try:
        return service.update_status(report_id, payload.status)
    except (TenantContextError, NotFoundError, ConflictError) as exc:
        _handle_stray_error(exc)
        raise
