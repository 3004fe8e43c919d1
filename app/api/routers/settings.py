from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status

from app.api.deps import Context, require_perm
from app.domain.models import SystemSettingsRead, SystemSettingsUpdate
from app.domain.permissions import PERM_SETTINGS_READ, PERM_SETTINGS_WRITE
from app.services.errors import ConflictError, NotFoundError, TenantContextError
from app.services.settings_service import SettingsService

router = APIRouter()


def get_settings_service(context: Context) -> SettingsService:
    return SettingsService(context)


Service = Annotated[SettingsService, Depends(get_settings_service)]


def _handle_settings_error(exc: Exception) -> None:
    if isinstance(exc, TenantContextError):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc)) from exc
    if isinstance(exc, NotFoundError):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    if isinstance(exc, ConflictError):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    raise exc


@router.get(
    "",
    response_model=SystemSettingsRead,
    dependencies=[Depends(require_perm(PERM_SETTINGS_READ))],
)
def get_settings(service: Service) -> SystemSettingsRead:
    return service.get_current()


@router.patch(
    "",
    response_model=SystemSettingsRead,
    dependencies=[Depends(require_perm(PERM_SETTINGS_WRITE))],
)
def update_settings(payload: SystemSettingsUpdate, service: Service) -> SystemSettingsRead:
    try:
        return service.update(payload)
    except (TenantContextError, NotFoundError, ConflictError) as exc:
        _handle_settings_error(exc)
        raise


@router.post(
    "/community-code",
    response_model=SystemSettingsRead,
    dependencies=[Depends(require_perm(PERM_SETTINGS_WRITE))],
)
def regenerate_community_code(service: Service) -> SystemSettingsRead:
    try:
        return service.regenerate_community_code()
    except (TenantContextError, NotFoundError, ConflictError) as exc:
        _handle_settings_error(exc)
        raise
