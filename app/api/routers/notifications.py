from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status

from app.api.deps import Context, require_perm
from app.domain.models import NotificationCreate, NotificationRead
from app.domain.permissions import PERM_NOTIFICATIONS_READ, PERM_NOTIFICATIONS_WRITE
from app.services.errors import NotFoundError, TenantContextError
from app.services.notification_service import NotificationService

router = APIRouter()


def get_notification_service(context: Context) -> NotificationService:
    return NotificationService(context)


Service = Annotated[NotificationService, Depends(get_notification_service)]


def _handle_notification_error(exc: Exception) -> None:
    if isinstance(exc, TenantContextError):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc)) from exc
    if isinstance(exc, NotFoundError):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    raise exc


@router.get(
    "",
    response_model=list[NotificationRead],
    dependencies=[Depends(require_perm(PERM_NOTIFICATIONS_READ))],
)
def list_notifications(service: Service) -> list[NotificationRead]:
    return service.get_all()


@router.post(
    "",
    response_model=NotificationRead,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_perm(PERM_NOTIFICATIONS_WRITE))],
)
def create_notification(payload: NotificationCreate, service: Service) -> NotificationRead:
    try:
        return service.add(payload)
    except TenantContextError as exc:
        _handle_notification_error(exc)
        raise


@router.post(
    "/read-all",
    dependencies=[Depends(require_perm(PERM_NOTIFICATIONS_WRITE))],
)
def mark_all_notifications_read(service: Service) -> dict[str, int]:
    try:
        return {"updated": service.mark_all_as_read()}
    except TenantContextError as exc:
        _handle_notification_error(exc)
        raise


@router.post(
    "/{notification_id}/read",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_perm(PERM_NOTIFICATIONS_WRITE))],
)
def mark_notification_read(notification_id: str, service: Service) -> None:
    try:
        service.mark_as_read(notification_id)
    except (TenantContextError, NotFoundError) as exc:
        _handle_notification_error(exc)
        raise
