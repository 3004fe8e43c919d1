from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status

from app.api.deps import Context, require_perm
from app.domain.models import VaccinationCreate, VaccinationRead
from app.domain.permissions import PERM_VACCINATIONS_READ, PERM_VACCINATIONS_WRITE
from app.domain.vaccines import VACCINE_CATALOG
from app.services.errors import ConflictError, NotFoundError, TenantContextError
from app.services.vaccination_service import VaccinationService

router = APIRouter()


def get_vaccination_service(context: Context) -> VaccinationService:
    return VaccinationService(context)


Service = Annotated[VaccinationService, Depends(get_vaccination_service)]


def _handle_vaccination_error(exc: Exception) -> None:
    if isinstance(exc, TenantContextError):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc)) from exc
    if isinstance(exc, NotFoundError):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    if isinstance(exc, ConflictError):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    raise exc


@router.get(
    "",
    response_model=list[VaccinationRead],
    dependencies=[Depends(require_perm(PERM_VACCINATIONS_READ))],
)
def list_vaccinations(service: Service) -> list[VaccinationRead]:
    return service.get_all()


@router.post(
    "",
    response_model=VaccinationRead,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_perm(PERM_VACCINATIONS_WRITE))],
)
def create_vaccination(payload: VaccinationCreate, service: Service) -> VaccinationRead:
    try:
        return service.add(payload)
    except (TenantContextError, NotFoundError, ConflictError) as exc:
        _handle_vaccination_error(exc)
        raise


@router.get(
    "/catalog",
    dependencies=[Depends(require_perm(PERM_VACCINATIONS_READ))],
)
def list_catalog() -> list[dict[str, object]]:
    return [
        {
            "name": item.name,
            "manufacturer": item.manufacturer,
            "type": str(item.vaccine_type),
            "durationMonths": item.duration_months,
        }
        for item in VACCINE_CATALOG
    ]
