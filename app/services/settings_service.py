from __future__ import annotations

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from app.domain.codes import generate_community_code
from app.domain.mappers import from_storage, to_storage
from app.domain.models import (
    ChangeKind,
    SystemSettings,
    SystemSettingsRead,
    SystemSettingsUpdate,
    now_utc,
)
from app.infra.tenant import TenantContext
from app.services.base import TenantScopedService
from app.services.errors import ConflictError, NotFoundError
from app.services.photo_service import LOGO_BUCKET, PhotoService, is_inline_photo

SETUP_REQUIRED_CODE = "SETUP-REQUIRED"
DEFAULT_REMINDER_DAYS = 30


def location_key(value: str) -> str:
    return value.strip().lower()


def placeholder_settings() -> SystemSettingsRead:
    return SystemSettingsRead(
        barangay_id="",
        barangay_name="",
        municipality="",
        logo_url="",
        reminder_days=DEFAULT_REMINDER_DAYS,
        support_email="",
        emergency_hotline="",
        community_code=SETUP_REQUIRED_CODE,
    )


class SettingsService(TenantScopedService):
    kind = ChangeKind.SETTINGS

    def __init__(self, context: TenantContext, photos: PhotoService | None = None) -> None:
        super().__init__(context)
        self._photos = photos or PhotoService(context)

    def _get_row(self, session: Session, barangay_id: str) -> SystemSettings | None:
        return session.exec(
            select(SystemSettings).where(SystemSettings.barangay_id == barangay_id)
        ).first()

    def get_by_barangay_id(self, barangay_id: str) -> SystemSettingsRead:
        with self._session() as session:
            row = self._get_row(session, barangay_id)
        if row is None:
            return placeholder_settings()
        return from_storage(SystemSettingsRead, row)

    def get_current(self) -> SystemSettingsRead:
        barangay_id = self._tenant_id()
        if not barangay_id:
            return placeholder_settings()
        return self.get_by_barangay_id(barangay_id)

    def get_by_community_code(self, code: str) -> SystemSettingsRead | None:
        """Look up a barangay by its public code. Works without any context."""
        with self._session() as session:
            row = session.exec(
                select(SystemSettings).where(SystemSettings.community_code == code.strip())
            ).first()
        return from_storage(SystemSettingsRead, row) if row is not None else None

    def update(self, payload: SystemSettingsUpdate) -> SystemSettingsRead:
        barangay_id = self._require_tenant_id()
        self._ensure_same_tenant(barangay_id, payload.barangay_id, "settings")
        changes = to_storage(payload, exclude={"barangay_id"})
        if is_inline_photo(payload.logo_url):
            changes["logo_url"] = self._photos.ingest(payload.logo_url, LOGO_BUCKET, "settings/logo")
        if "barangay_name" in changes:
            changes["barangay_key"] = location_key(changes["barangay_name"])
        if "municipality" in changes:
            changes["municipality_key"] = location_key(changes["municipality"])

        with self._session() as session:
            row = self._get_row(session, barangay_id)
            if row is None:
                raise NotFoundError("settings not found")
            for field, value in changes.items():
                setattr(row, field, value)
            row.updated_at = now_utc()
            session.add(row)
            try:
                session.commit()
            except IntegrityError as exc:
                session.rollback()
                raise ConflictError("community code or location already in use") from exc
            session.refresh(row)

        self._emit("updated", barangay_id, {"fields": sorted(changes)})
        return from_storage(SystemSettingsRead, row)

    def regenerate_community_code(self) -> SystemSettingsRead:
        barangay_id = self._require_tenant_id()
        with self._session() as session:
            row = self._get_row(session, barangay_id)
            if row is None:
                raise NotFoundError("settings not found")
            row.community_code = generate_community_code()
            row.updated_at = now_utc()
            session.add(row)
            try:
                session.commit()
            except IntegrityError as exc:
                session.rollback()
                raise ConflictError("community code collision, try again") from exc
            session.refresh(row)

        self._emit("updated", barangay_id, {"fields": ["community_code"]})
        return from_storage(SystemSettingsRead, row)
