from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status

from app.api.deps import Context, require_perm
from app.domain.models import IncidentCreate, IncidentRead, IncidentStatusUpdate
from app.domain.permissions import PERM_INCIDENTS_READ, PERM_INCIDENTS_WRITE
from app.services.errors import ConflictError, NotFoundError, TenantContextError
from app.services.incident_service import IncidentService

router = APIRouter()


def get_incident_service(context: Context) -> IncidentService:
    return IncidentService(context)


Service = Annotated[IncidentService, Depends(get_incident_service)]


def _handle_incident_error(exc: Exception) -> None:
    if isinstance(exc, TenantContextError):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc)) from exc
    if isinstance(exc, NotFoundError):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    if isinstance(exc, ConflictError):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    raise exc


@router.post(
    "",
    response_model=IncidentRead,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_perm(PERM_INCIDENTS_WRITE))],
)
def create_incident(payload: IncidentCreate, service: Service) -> IncidentRead:
    try:
        return service.add(payload)
    except (TenantContextError, NotFoundError, ConflictError) as exc:
        _handle_incident_error(exc)
        raise


@router.get(
    "",
    response_model=list[IncidentRead],
    dependencies=[Depends(require_perm(PERM_INCIDENTS_READ))],
)
def list_incidents(service: Service) -> list[IncidentRead]:
    return service.get_all()


@router.get(
    "/{incident_id}",
    response_model=IncidentRead,
    dependencies=[Depends(require_perm(PERM_INCIDENTS_READ))],
)
def get_incident(incident_id: str, service: Service) -> IncidentRead:
    incident = service.get(incident_id)
    if incident is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="incident not found")
    return incident


@router.post(
    "/{incident_id}/status",
    response_model=IncidentRead,
    dependencies=[Depends(require_perm(PERM_INCIDENTS_WRITE))],
)
def update_incident_status(incident_id: str, payload: IncidentStatusUpdate, service: Service) -> IncidentRead:
    try:
        return service.update_status(incident_id, payload.status)
    except (TenantContextError, NotFoundError, ConflictError) as exc:
        _handle_incident_error(exc)
        raise
