from __future__ import annotations

import sqlalchemy as sa
from sqlmodel import select

from app.domain.mappers import from_storage
from app.domain.models import ChangeKind, Notification, NotificationCreate, NotificationRead
from app.services.base import TenantScopedService
from app.services.errors import NotFoundError

RECENT_NOTIFICATION_LIMIT = 20


class NotificationService(TenantScopedService):
    kind = ChangeKind.NOTIFICATIONS

    def get_all(self) -> list[NotificationRead]:
        barangay_id = self._tenant_id()
        if not barangay_id:
            return []
        with self._session() as session:
            rows = session.exec(
                select(Notification)
                .where(Notification.barangay_id == barangay_id)
                .order_by(Notification.created_at.desc())
                .limit(RECENT_NOTIFICATION_LIMIT)
            ).all()
        return [from_storage(NotificationRead, row) for row in rows]

    def add(self, payload: NotificationCreate) -> NotificationRead:
        barangay_id = self._require_tenant_id()
        with self._session() as session:
            notification = Notification(
                barangay_id=barangay_id,
                title=payload.title,
                message=payload.message,
                type=payload.type,
                is_read=False,
            )
            session.add(notification)
            session.commit()
            session.refresh(notification)
        self._emit("created", barangay_id, {"notification_id": notification.id})
        return from_storage(NotificationRead, notification)

    def mark_as_read(self, notification_id: str) -> None:
        barangay_id = self._require_tenant_id()
        with self._session() as session:
            notification = session.exec(
                select(Notification)
                .where(Notification.barangay_id == barangay_id)
                .where(Notification.id == notification_id)
            ).first()
            if notification is None:
                raise NotFoundError("notification not found")
            notification.is_read = True
            session.add(notification)
            session.commit()
        self._emit("updated", barangay_id, {"notification_id": notification_id})

    def mark_all_as_read(self) -> int:
        barangay_id = self._require_tenant_id()
        with self._session() as session:
            result = session.execute(
                sa.update(Notification)
                .where(Notification.barangay_id == barangay_id)
                .where(Notification.is_read.is_(False))
                .values(is_read=True)
            )
            session.commit()
        self._emit("updated", barangay_id, {"marked_read": result.rowcount})
        return result.rowcount
