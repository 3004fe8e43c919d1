from __future__ import annotations

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from app.domain.mappers import from_storage, to_storage
from app.domain.models import ChangeKind, Owner, OwnerCreate, OwnerRead, new_id
from app.services.base import TenantScopedService
from app.services.errors import ConflictError


class OwnerService(TenantScopedService):
    kind = ChangeKind.OWNERS

    def _get_scoped_owner(self, session: Session, barangay_id: str, owner_id: str) -> Owner | None:
        return session.exec(
            select(Owner).where(Owner.barangay_id == barangay_id).where(Owner.id == owner_id)
        ).first()

    def get_all(self) -> list[OwnerRead]:
        barangay_id = self._tenant_id()
        if not barangay_id:
            return []
        with self._session() as session:
            rows = session.exec(select(Owner).where(Owner.barangay_id == barangay_id)).all()
        return [from_storage(OwnerRead, row) for row in rows]

    def get(self, owner_id: str) -> OwnerRead | None:
        barangay_id = self._tenant_id()
        if not barangay_id:
            return None
        with self._session() as session:
            owner = self._get_scoped_owner(session, barangay_id, owner_id)
        return from_storage(OwnerRead, owner) if owner is not None else None

    def add(self, payload: OwnerCreate) -> OwnerRead:
        barangay_id = self._require_tenant_id()
        record = to_storage(payload)
        record["id"] = payload.id or new_id()
        with self._session() as session:
            owner = Owner(**record, barangay_id=barangay_id)
            session.add(owner)
            try:
                session.commit()
            except IntegrityError as exc:
                session.rollback()
                raise ConflictError("owner id already exists") from exc
            session.refresh(owner)
        self._emit("created", barangay_id, {"owner_id": owner.id})
        return from_storage(OwnerRead, owner)
