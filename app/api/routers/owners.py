from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status

from app.api.deps import Context, require_perm
from app.domain.models import OwnerCreate, OwnerRead, PetRead
from app.domain.permissions import PERM_OWNERS_READ, PERM_OWNERS_WRITE, PERM_PETS_READ
from app.services.errors import ConflictError, TenantContextError
from app.services.owner_service import OwnerService
from app.services.pet_service import PetService

router = APIRouter()


def get_owner_service(context: Context) -> OwnerService:
    return OwnerService(context)


Service = Annotated[OwnerService, Depends(get_owner_service)]


def _handle_owner_error(exc: Exception) -> None:
    if isinstance(exc, TenantContextError):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc)) from exc
    if isinstance(exc, ConflictError):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    raise exc


@router.get(
    "",
    response_model=list[OwnerRead],
    dependencies=[Depends(require_perm(PERM_OWNERS_READ))],
)
def list_owners(service: Service) -> list[OwnerRead]:
    return service.get_all()


@router.post(
    "",
    response_model=OwnerRead,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_perm(PERM_OWNERS_WRITE))],
)
def create_owner(payload: OwnerCreate, service: Service) -> OwnerRead:
    try:
        return service.add(payload)
    except (TenantContextError, ConflictError) as exc:
        _handle_owner_error(exc)
        raise


@router.get(
    "/{owner_id}",
    response_model=OwnerRead,
    dependencies=[Depends(require_perm(PERM_OWNERS_READ))],
)
def get_owner(owner_id: str, service: Service) -> OwnerRead:
    owner = service.get(owner_id)
    if owner is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="owner not found")
    return owner


@router.get(
    "/{owner_id}/pets",
    response_model=list[PetRead],
    dependencies=[Depends(require_perm(PERM_PETS_READ))],
)
def list_owner_pets(owner_id: str, context: Context, service: Service) -> list[PetRead]:
    if service.get(owner_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="owner not found")
    return PetService(context).list_by_owner(owner_id)
