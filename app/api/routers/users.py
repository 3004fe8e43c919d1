from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status

from app.api.deps import Context, require_perm
from app.domain.models import UserCreate, UserRead, UserUpdate
from app.domain.permissions import PERM_USERS_READ, PERM_USERS_WRITE
from app.services.errors import (
    ConflictError,
    ForbiddenError,
    NotFoundError,
    TenantContextError,
)
from app.services.user_service import UserService

router = APIRouter()


def get_user_service(context: Context) -> UserService:
    return UserService(context)


Service = Annotated[UserService, Depends(get_user_service)]


def _handle_user_error(exc: Exception) -> None:
    if isinstance(exc, (TenantContextError, ForbiddenError)):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc)) from exc
    if isinstance(exc, NotFoundError):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    if isinstance(exc, ConflictError):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    raise exc


@router.get(
    "",
    response_model=list[UserRead],
    dependencies=[Depends(require_perm(PERM_USERS_READ))],
)
def list_users(service: Service) -> list[UserRead]:
    return service.get_all()


@router.post(
    "",
    response_model=UserRead,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_perm(PERM_USERS_WRITE))],
)
def create_user(payload: UserCreate, service: Service) -> UserRead:
    try:
        return service.add(payload)
    except (TenantContextError, ConflictError) as exc:
        _handle_user_error(exc)
        raise


@router.get(
    "/{user_id}",
    response_model=UserRead,
    dependencies=[Depends(require_perm(PERM_USERS_READ))],
)
def get_user(user_id: str, service: Service) -> UserRead:
    user = service.get(user_id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="user not found")
    return user


@router.patch(
    "/{user_id}",
    response_model=UserRead,
    dependencies=[Depends(require_perm(PERM_USERS_WRITE))],
)
def update_user(user_id: str, payload: UserUpdate, service: Service) -> UserRead:
    try:
        return service.update(user_id, payload)
    except (TenantContextError, NotFoundError) as exc:
        _handle_user_error(exc)
        raise


@router.delete(
    "/{user_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_perm(PERM_USERS_WRITE))],
)
def delete_user(user_id: str, service: Service) -> None:
    try:
        service.delete(user_id)
    except (TenantContextError, ForbiddenError, NotFoundError) as exc:
        _handle_user_error(exc)
        raise
