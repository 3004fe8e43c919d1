from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status

from app.api.deps import Context, require_perm, require_staff
from app.domain.models import (
    AnnouncementCreate,
    AnnouncementRead,
    LinkPreview,
    LinkPreviewRequest,
)
from app.domain.permissions import PERM_ANNOUNCEMENTS_READ, PERM_ANNOUNCEMENTS_WRITE
from app.services.announcement_service import AnnouncementService
from app.services.errors import (
    ConflictError,
    ForbiddenError,
    NotFoundError,
    TenantContextError,
)
from app.services.link_preview_service import LinkPreviewService

router = APIRouter()


def get_announcement_service(context: Context) -> AnnouncementService:
    return AnnouncementService(context)


def get_link_preview_service() -> LinkPreviewService:
    return LinkPreviewService()


Service = Annotated[AnnouncementService, Depends(get_announcement_service)]
Previews = Annotated[LinkPreviewService, Depends(get_link_preview_service)]


def _handle_announcement_error(exc: Exception) -> None:
    if isinstance(exc, (TenantContextError, ForbiddenError)):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc)) from exc
    if isinstance(exc, NotFoundError):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    if isinstance(exc, ConflictError):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    raise exc


@router.get(
    "",
    response_model=list[AnnouncementRead],
    dependencies=[Depends(require_perm(PERM_ANNOUNCEMENTS_READ))],
)
def list_announcements(service: Service) -> list[AnnouncementRead]:
    return service.get_all()


@router.post(
    "",
    response_model=AnnouncementRead,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_perm(PERM_ANNOUNCEMENTS_WRITE)), Depends(require_staff)],
)
def create_announcement(payload: AnnouncementCreate, service: Service) -> AnnouncementRead:
    try:
        return service.add(payload)
    except (TenantContextError, ForbiddenError, ConflictError) as exc:
        _handle_announcement_error(exc)
        raise


@router.post(
    "/link-preview",
    response_model=LinkPreview,
    dependencies=[Depends(require_perm(PERM_ANNOUNCEMENTS_WRITE))],
)
def preview_link(payload: LinkPreviewRequest, previews: Previews) -> LinkPreview:
    preview = previews.build(payload.url)
    if preview is None:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail="Unrecognized link")
    return preview


@router.post(
    "/{announcement_id}/like",
    response_model=AnnouncementRead,
    dependencies=[Depends(require_perm(PERM_ANNOUNCEMENTS_READ))],
)
def like_announcement(announcement_id: str, service: Service) -> AnnouncementRead:
    try:
        return service.like(announcement_id)
    except (TenantContextError, NotFoundError) as exc:
        _handle_announcement_error(exc)
        raise


@router.delete(
    "/{announcement_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_perm(PERM_ANNOUNCEMENTS_WRITE))],
)
def delete_announcement(announcement_id: str, service: Service) -> None:
    try:
        service.delete(announcement_id)
    except (TenantContextError, NotFoundError) as exc:
        _handle_announcement_error(exc)
        raise
