from __future__ import annotations

from collections.abc import Iterable

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from app.domain.mappers import from_storage, to_storage
from app.domain.models import (
    ChangeKind,
    StrayReport,
    StrayReportCreate,
    StrayReportRead,
    StrayStatus,
    new_id,
)
from app.domain.state_machine import ACTIVE_STRAY_STATUSES, can_stray_transition, initial_stray_status
from app.infra.tenant import TenantContext
from app.services.base import TenantScopedService
from app.services.errors import ConflictError, NotFoundError
from app.services.photo_service import STRAY_PHOTO_BUCKET, PhotoService, is_inline_photo


class StrayService(TenantScopedService):
    kind = ChangeKind.STRAYS

    def __init__(self, context: TenantContext, photos: PhotoService | None = None) -> None:
        super().__init__(context)
        self._photos = photos or PhotoService(context)

    def _get_scoped_report(self, session: Session, barangay_id: str, report_id: str) -> StrayReport | None:
        return session.exec(
            select(StrayReport)
            .where(StrayReport.barangay_id == barangay_id)
            .where(StrayReport.id == report_id)
        ).first()

    def _list(self, statuses: Iterable[StrayStatus] | None = None) -> list[StrayReportRead]:
        barangay_id = self._tenant_id()
        if not barangay_id:
            return []
        statement = select(StrayReport).where(StrayReport.barangay_id == barangay_id)
        if statuses is not None:
            statement = statement.where(StrayReport.status.in_(list(statuses)))
        with self._session() as session:
            rows = session.exec(statement.order_by(StrayReport.date_reported.desc())).all()
        return [from_storage(StrayReportRead, row) for row in rows]

    def get_all(self) -> list[StrayReportRead]:
        return self._list()

    def list_active(self) -> list[StrayReportRead]:
        return self._list(ACTIVE_STRAY_STATUSES)

    def list_pending(self) -> list[StrayReportRead]:
        return self._list([StrayStatus.PENDING])

    def get(self, report_id: str) -> StrayReportRead | None:
        barangay_id = self._tenant_id()
        if not barangay_id:
            return None
        with self._session() as session:
            report = self._get_scoped_report(session, barangay_id, report_id)
        return from_storage(StrayReportRead, report) if report is not None else None

    def add(self, payload: StrayReportCreate, *, public: bool = False) -> StrayReportRead:
        barangay_id = self._require_tenant_id()
        record = to_storage(payload)
        report_id = payload.id or new_id()
        record["id"] = report_id
        record["status"] = initial_stray_status(public=public)
        if is_inline_photo(payload.photo_url):
            record["photo_url"] = self._photos.ingest(payload.photo_url, STRAY_PHOTO_BUCKET, f"strays/{report_id}")

        with self._session() as session:
            report = StrayReport(**record, barangay_id=barangay_id)
            session.add(report)
            try:
                session.commit()
            except IntegrityError as exc:
                session.rollback()
                raise ConflictError("stray report id already exists") from exc
            session.refresh(report)

        self._emit(
            "created",
            barangay_id,
            {"stray_id": report.id, "status": str(report.status), "public": public},
        )
        return from_storage(StrayReportRead, report)

    def update_status(self, report_id: str, target: StrayStatus) -> StrayReportRead:
        barangay_id = self._require_tenant_id()
        with self._session() as session:
            report = self._get_scoped_report(session, barangay_id, report_id)
            if report is None:
                raise NotFoundError("stray report not found")
            source = report.status
            if not can_stray_transition(source, target):
                raise ConflictError(f"cannot move stray report from {source} to {target}")
            report.status = target
            session.add(report)
            session.commit()
            session.refresh(report)

        self._emit(
            "updated",
            barangay_id,
            {"stray_id": report.id, "from": str(source), "to": str(target)},
        )
        return from_storage(StrayReportRead, report)
