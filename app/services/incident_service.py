from __future__ import annotations

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from app.domain.mappers import incident_from_storage, to_storage
from app.domain.models import (
    ChangeKind,
    Incident,
    IncidentCreate,
    IncidentRead,
    IncidentStatus,
    Pet,
    new_id,
)
from app.domain.state_machine import can_incident_transition
from app.services.base import TenantScopedService
from app.services.errors import ConflictError, NotFoundError


class IncidentService(TenantScopedService):
    kind = ChangeKind.INCIDENTS

    def _get_scoped_incident(
        self,
        session: Session,
        barangay_id: str,
        incident_id: str,
    ) -> Incident | None:
        return session.exec(
            select(Incident)
            .where(Incident.barangay_id == barangay_id)
            .where(Incident.id == incident_id)
        ).first()

    def get_all(self) -> list[IncidentRead]:
        barangay_id = self._tenant_id()
        if not barangay_id:
            return []
        with self._session() as session:
            rows = session.exec(
                select(Incident)
                .where(Incident.barangay_id == barangay_id)
                .order_by(Incident.incident_date.desc())
            ).all()
        return [incident_from_storage(row) for row in rows]

    def get(self, incident_id: str) -> IncidentRead | None:
        barangay_id = self._tenant_id()
        if not barangay_id:
            return None
        with self._session() as session:
            incident = self._get_scoped_incident(session, barangay_id, incident_id)
        return incident_from_storage(incident) if incident is not None else None

    def add(self, payload: IncidentCreate) -> IncidentRead:
        barangay_id = self._require_tenant_id()
        record = to_storage(payload)
        record["id"] = payload.id or new_id()
        record["status"] = IncidentStatus.OBSERVATION
        record.setdefault("observation_start_date", payload.incident_date)

        with self._session() as session:
            if payload.pet_id is not None:
                pet = session.exec(
                    select(Pet).where(Pet.barangay_id == barangay_id).where(Pet.id == payload.pet_id)
                ).first()
                if pet is None:
                    raise NotFoundError("pet not found")
            incident = Incident(**record, barangay_id=barangay_id)
            session.add(incident)
            try:
                session.commit()
            except IntegrityError as exc:
                session.rollback()
                raise ConflictError("incident id already exists") from exc
            session.refresh(incident)

        self._emit("created", barangay_id, {"incident_id": incident.id, "pet_id": incident.pet_id})
        return incident_from_storage(incident)

    def update_status(self, incident_id: str, target: IncidentStatus) -> IncidentRead:
        barangay_id = self._require_tenant_id()
        with self._session() as session:
            incident = self._get_scoped_incident(session, barangay_id, incident_id)
            if incident is None:
                raise NotFoundError("incident not found")
            source = incident.status
            if not can_incident_transition(source, target):
                raise ConflictError(f"cannot move incident from {source} to {target}")
            incident.status = target
            session.add(incident)
            session.commit()
            session.refresh(incident)

        self._emit(
            "updated",
            barangay_id,
            {"incident_id": incident.id, "from": str(source), "to": str(target)},
        )
        return incident_from_storage(incident)
