from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status

from app.api.deps import Context, require_perm
from app.domain.models import (
    PetCreate,
    PetRead,
    PetUpdate,
    VaccinationRead,
    VaccinationStatusRead,
)
from app.domain.permissions import (
    PERM_PETS_READ,
    PERM_PETS_WRITE,
    PERM_VACCINATIONS_READ,
)
from app.infra.tenant import TenantContext
from app.services.errors import ConflictError, NotFoundError, TenantContextError
from app.services.pet_service import PetService
from app.services.vaccination_service import VaccinationService

router = APIRouter()


def get_pet_service(context: Context) -> PetService:
    return PetService(context)


def get_vaccination_service(context: Context) -> VaccinationService:
    return VaccinationService(context)


Service = Annotated[PetService, Depends(get_pet_service)]
Vaccinations = Annotated[VaccinationService, Depends(get_vaccination_service)]


def _handle_pet_error(exc: Exception) -> None:
    if isinstance(exc, TenantContextError):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc)) from exc
    if isinstance(exc, NotFoundError):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    if isinstance(exc, ConflictError):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    raise exc


def _ensure_pet_visible(context: TenantContext, pet_id: str) -> None:
    if PetService(context).get(pet_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="pet not found")


@router.get(
    "",
    response_model=list[PetRead],
    dependencies=[Depends(require_perm(PERM_PETS_READ))],
)
def list_pets(service: Service) -> list[PetRead]:
    return service.get_all()


@router.post(
    "",
    response_model=PetRead,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_perm(PERM_PETS_WRITE))],
)
def create_pet(payload: PetCreate, service: Service) -> PetRead:
    try:
        return service.add(payload)
    except (TenantContextError, NotFoundError, ConflictError) as exc:
        _handle_pet_error(exc)
        raise


@router.get(
    "/{pet_id}",
    response_model=PetRead,
    dependencies=[Depends(require_perm(PERM_PETS_READ))],
)
def get_pet(pet_id: str, service: Service) -> PetRead:
    pet = service.get(pet_id)
    if pet is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="pet not found")
    return pet


@router.patch(
    "/{pet_id}",
    response_model=PetRead,
    dependencies=[Depends(require_perm(PERM_PETS_WRITE))],
)
def update_pet(pet_id: str, payload: PetUpdate, service: Service) -> PetRead:
    try:
        return service.update(pet_id, payload)
    except (TenantContextError, NotFoundError) as exc:
        _handle_pet_error(exc)
        raise


@router.delete(
    "/{pet_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_perm(PERM_PETS_WRITE))],
)
def delete_pet(pet_id: str, service: Service) -> None:
    try:
        service.delete(pet_id)
    except (TenantContextError, NotFoundError) as exc:
        _handle_pet_error(exc)
        raise


@router.get(
    "/{pet_id}/vaccinations",
    response_model=list[VaccinationRead],
    dependencies=[Depends(require_perm(PERM_VACCINATIONS_READ))],
)
def list_pet_vaccinations(pet_id: str, context: Context, vaccinations: Vaccinations) -> list[VaccinationRead]:
    _ensure_pet_visible(context, pet_id)
    return vaccinations.get_by_pet_id(pet_id)


@router.get(
    "/{pet_id}/vaccination-status",
    response_model=VaccinationStatusRead,
    dependencies=[Depends(require_perm(PERM_VACCINATIONS_READ))],
)
def get_vaccination_status(pet_id: str, context: Context, vaccinations: Vaccinations) -> VaccinationStatusRead:
    _ensure_pet_visible(context, pet_id)
    return vaccinations.status_for_pet(pet_id)
