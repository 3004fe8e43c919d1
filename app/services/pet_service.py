from __future__ import annotations

import sqlalchemy as sa
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from app.domain.mappers import from_storage, to_storage
from app.domain.models import (
    ChangeKind,
    Incident,
    Owner,
    Pet,
    PetCreate,
    PetRead,
    PetUpdate,
    Vaccination,
    new_id,
)
from app.infra.tenant import TenantContext
from app.services.base import TenantScopedService
from app.services.errors import ConflictError, NotFoundError
from app.services.photo_service import PET_PHOTO_BUCKET, PhotoService, is_inline_photo


class PetService(TenantScopedService):
    kind = ChangeKind.PETS

    def __init__(self, context: TenantContext, photos: PhotoService | None = None) -> None:
        super().__init__(context)
        self._photos = photos or PhotoService(context)

    def _get_scoped_pet(self, session: Session, barangay_id: str, pet_id: str) -> Pet | None:
        return session.exec(
            select(Pet).where(Pet.barangay_id == barangay_id).where(Pet.id == pet_id)
        ).first()

    def get_all(self) -> list[PetRead]:
        barangay_id = self._tenant_id()
        if not barangay_id:
            return []
        with self._session() as session:
            rows = session.exec(select(Pet).where(Pet.barangay_id == barangay_id)).all()
        return [from_storage(PetRead, row) for row in rows]

    def get(self, pet_id: str) -> PetRead | None:
        barangay_id = self._tenant_id()
        if not barangay_id:
            return None
        with self._session() as session:
            pet = self._get_scoped_pet(session, barangay_id, pet_id)
        return from_storage(PetRead, pet) if pet is not None else None

    def list_by_owner(self, owner_id: str) -> list[PetRead]:
        barangay_id = self._tenant_id()
        if not barangay_id:
            return []
        with self._session() as session:
            rows = session.exec(
                select(Pet).where(Pet.barangay_id == barangay_id).where(Pet.owner_id == owner_id)
            ).all()
        return [from_storage(PetRead, row) for row in rows]

    def add(self, payload: PetCreate) -> PetRead:
        barangay_id = self._require_tenant_id()
        record = to_storage(payload)
        pet_id = payload.id or new_id()
        record["id"] = pet_id

        with self._session() as session:
            owner = session.exec(
                select(Owner).where(Owner.barangay_id == barangay_id).where(Owner.id == payload.owner_id)
            ).first()
            if owner is None:
                raise NotFoundError("owner not found")
            if is_inline_photo(payload.photo_url):
                record["photo_url"] = self._photos.ingest(payload.photo_url, PET_PHOTO_BUCKET, f"pets/{pet_id}")
            pet = Pet(**record, barangay_id=barangay_id)
            session.add(pet)
            try:
                session.commit()
            except IntegrityError as exc:
                session.rollback()
                raise ConflictError("pet id already exists") from exc
            session.refresh(pet)

        self._emit("created", barangay_id, {"pet_id": pet.id, "owner_id": pet.owner_id})
        return from_storage(PetRead, pet)

    def update(self, pet_id: str, payload: PetUpdate) -> PetRead:
        barangay_id = self._require_tenant_id()
        self._ensure_same_tenant(barangay_id, payload.barangay_id, "pet")
        changes = to_storage(payload, exclude={"barangay_id"})
        if is_inline_photo(payload.photo_url):
            changes["photo_url"] = self._photos.ingest(payload.photo_url, PET_PHOTO_BUCKET, f"pets/{pet_id}")

        with self._session() as session:
            pet = self._get_scoped_pet(session, barangay_id, pet_id)
            if pet is None:
                raise NotFoundError("pet not found")
            for field, value in changes.items():
                setattr(pet, field, value)
            session.add(pet)
            session.commit()
            session.refresh(pet)

        self._emit("updated", barangay_id, {"pet_id": pet.id, "fields": sorted(changes)})
        return from_storage(PetRead, pet)

    def delete(self, pet_id: str) -> None:
        """Delete a pet, its vaccinations, and unlink it from incidents.

        All three writes share one transaction.
        """
        barangay_id = self._require_tenant_id()
        with self._session() as session:
            pet = self._get_scoped_pet(session, barangay_id, pet_id)
            if pet is None:
                raise NotFoundError("pet not found")
            vaccinations = session.execute(
                sa.delete(Vaccination)
                .where(Vaccination.barangay_id == barangay_id)
                .where(Vaccination.pet_id == pet_id)
            )
            incidents = session.execute(
                sa.update(Incident)
                .where(Incident.barangay_id == barangay_id)
                .where(Incident.pet_id == pet_id)
                .values(pet_id=None)
            )
            session.delete(pet)
            session.commit()

        self._emit(
            "deleted",
            barangay_id,
            {
                "pet_id": pet_id,
                "vaccinations_deleted": vaccinations.rowcount,
                "incidents_unlinked": incidents.rowcount,
            },
        )
