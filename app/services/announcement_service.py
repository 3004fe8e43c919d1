from __future__ import annotations

import sqlalchemy as sa
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from app.domain.mappers import announcement_from_storage
from app.domain.models import (
    Announcement,
    AnnouncementCreate,
    AnnouncementRead,
    ChangeKind,
    User,
    new_id,
    now_utc,
)
from app.infra.tenant import TenantContext
from app.services.base import TenantScopedService
from app.services.errors import ConflictError, ForbiddenError, NotFoundError
from app.services.link_preview_service import LinkPreviewService
from app.services.photo_service import ANNOUNCEMENT_PHOTO_BUCKET, PhotoService, is_inline_photo


class AnnouncementService(TenantScopedService):
    kind = ChangeKind.ANNOUNCEMENTS

    def __init__(
        self,
        context: TenantContext,
        photos: PhotoService | None = None,
        link_previews: LinkPreviewService | None = None,
    ) -> None:
        super().__init__(context)
        self._photos = photos or PhotoService(context)
        self._link_previews = link_previews or LinkPreviewService()

    def _get_scoped_announcement(
        self,
        session: Session,
        barangay_id: str,
        announcement_id: str,
    ) -> Announcement | None:
        return session.exec(
            select(Announcement)
            .where(Announcement.barangay_id == barangay_id)
            .where(Announcement.id == announcement_id)
        ).first()

    def _with_author(self, session: Session, announcement: Announcement) -> AnnouncementRead:
        author = session.get(User, announcement.author_id)
        return announcement_from_storage(announcement, author)

    def get_all(self) -> list[AnnouncementRead]:
        barangay_id = self._tenant_id()
        if not barangay_id:
            return []
        with self._session() as session:
            rows = session.exec(
                select(Announcement, User)
                .join(User, User.id == Announcement.author_id, isouter=True)
                .where(Announcement.barangay_id == barangay_id)
                .order_by(Announcement.date_posted.desc())
            ).all()
        return [announcement_from_storage(announcement, author) for announcement, author in rows]

    def add(self, payload: AnnouncementCreate) -> AnnouncementRead:
        barangay_id = self._require_tenant_id()
        author_id = self._context.actor_id
        if author_id is None:
            raise ForbiddenError("Only staff members can post announcements.")
        announcement_id = payload.id or new_id()

        photo_url = payload.photo_url
        if is_inline_photo(photo_url):
            photo_url = self._photos.ingest(photo_url, ANNOUNCEMENT_PHOTO_BUCKET, f"announcements/{announcement_id}")
        link_preview = payload.link_preview
        if link_preview is None and payload.link_url:
            link_preview = self._link_previews.build(payload.link_url)

        with self._session() as session:
            author = session.get(User, author_id)
            announcement = Announcement(
                id=announcement_id,
                barangay_id=barangay_id,
                author_id=author_id,
                author_name=author.full_name if author is not None else None,
                role=str(author.role) if author is not None else None,
                title=payload.title,
                content=payload.content,
                date_posted=payload.date_posted or now_utc(),
                category=payload.category,
                photo_url=photo_url,
                link_preview=link_preview.model_dump(by_alias=True) if link_preview is not None else None,
                likes=0,
            )
            session.add(announcement)
            try:
                session.commit()
            except IntegrityError as exc:
                session.rollback()
                raise ConflictError("announcement id already exists") from exc
            session.refresh(announcement)
            read = announcement_from_storage(announcement, author)

        self._emit("created", barangay_id, {"announcement_id": announcement.id})
        return read

    def delete(self, announcement_id: str) -> None:
        barangay_id = self._require_tenant_id()
        with self._session() as session:
            announcement = self._get_scoped_announcement(session, barangay_id, announcement_id)
            if announcement is None:
                raise NotFoundError("announcement not found")
            session.delete(announcement)
            session.commit()
        self._emit("deleted", barangay_id, {"announcement_id": announcement_id})

    def like(self, announcement_id: str) -> AnnouncementRead:
        barangay_id = self._require_tenant_id()
        with self._session() as session:
            result = session.execute(
                sa.update(Announcement)
                .where(Announcement.barangay_id == barangay_id)
                .where(Announcement.id == announcement_id)
                .values(likes=Announcement.likes + 1)
            )
            if result.rowcount == 0:
                session.rollback()
                raise NotFoundError("announcement not found")
            session.commit()
            announcement = self._get_scoped_announcement(session, barangay_id, announcement_id)
            read = self._with_author(session, announcement)
        self._emit("updated", barangay_id, {"announcement_id": announcement_id, "likes": read.likes})
        return read
