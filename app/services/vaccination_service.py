from __future__ import annotations

from datetime import date

from sqlalchemy.exc import IntegrityError
from sqlmodel import select

from app.domain.mappers import from_storage, to_storage
from app.domain.models import (
    ChangeKind,
    Pet,
    Vaccination,
    VaccinationCreate,
    VaccinationRead,
    VaccinationStatusRead,
    VaccineType,
    new_id,
    today_utc,
)
from app.domain.vaccines import (
    compute_next_due_date,
    find_product,
    is_protected,
    latest_core_vaccination,
    vaccination_status,
)
from app.services.base import TenantScopedService
from app.services.errors import ConflictError, NotFoundError


class VaccinationService(TenantScopedService):
    kind = ChangeKind.VACCINATIONS

    def get_all(self) -> list[VaccinationRead]:
        barangay_id = self._tenant_id()
        if not barangay_id:
            return []
        with self._session() as session:
            rows = session.exec(
                select(Vaccination)
                .where(Vaccination.barangay_id == barangay_id)
                .order_by(Vaccination.date_given.desc())
            ).all()
        return [from_storage(VaccinationRead, row) for row in rows]

    def get_by_pet_id(self, pet_id: str) -> list[VaccinationRead]:
        barangay_id = self._tenant_id()
        if not barangay_id:
            return []
        with self._session() as session:
            rows = session.exec(
                select(Vaccination)
                .where(Vaccination.barangay_id == barangay_id)
                .where(Vaccination.pet_id == pet_id)
                .order_by(Vaccination.date_given.desc())
            ).all()
        return [from_storage(VaccinationRead, row) for row in rows]

    def add(self, payload: VaccinationCreate) -> VaccinationRead:
        barangay_id = self._require_tenant_id()
        record = to_storage(payload)
        record["id"] = payload.id or new_id()

        product = find_product(payload.vaccine_name)
        if payload.vaccine_type is None:
            record["vaccine_type"] = product.vaccine_type if product is not None else VaccineType.NON_CORE
        if payload.manufacturer is None and product is not None:
            record["manufacturer"] = product.manufacturer
        next_due = payload.next_due_date or compute_next_due_date(
            payload.date_given,
            payload.vaccine_name,
            record["vaccine_type"],
        )
        record["next_due_date"] = next_due
        record.setdefault("expiration_date", next_due)

        with self._session() as session:
            pet = session.exec(
                select(Pet).where(Pet.barangay_id == barangay_id).where(Pet.id == payload.pet_id)
            ).first()
            if pet is None:
                raise NotFoundError("pet not found")
            vaccination = Vaccination(**record, barangay_id=barangay_id)
            session.add(vaccination)
            try:
                session.commit()
            except IntegrityError as exc:
                session.rollback()
                raise ConflictError("vaccination id already exists") from exc
            session.refresh(vaccination)

        self._emit(
            "created",
            barangay_id,
            {"vaccination_id": vaccination.id, "pet_id": vaccination.pet_id},
        )
        return from_storage(VaccinationRead, vaccination)

    def status_for_pet(self, pet_id: str, today: date | None = None) -> VaccinationStatusRead:
        current = today or today_utc()
        history = self.get_by_pet_id(pet_id)
        latest = latest_core_vaccination(history, pet_id)
        return VaccinationStatusRead(
            pet_id=pet_id,
            status=vaccination_status(history, pet_id, current),
            is_protected=is_protected(history, pet_id, current),
            next_due_date=latest.next_due_date if latest is not None else None,
        )
