from __future__ import annotations

import math
from datetime import datetime, timedelta

from app.domain.models import (
    DashboardStatsRead,
    IncidentStatus,
    StrayStatus,
    ensure_utc,
    now_utc,
)
from app.domain.state_machine import ACTIVE_STRAY_STATUSES
from app.domain.vaccines import protected_pet_ids
from app.infra.tenant import TenantContext
from app.services.incident_service import IncidentService
from app.services.owner_service import OwnerService
from app.services.pet_service import PetService
from app.services.stray_service import StrayService
from app.services.vaccination_service import VaccinationService

RECENT_INCIDENT_DAYS = 30


def coverage_percentage(protected: int, total: int) -> int:
    if not total:
        return 0
    return math.floor(protected * 100 / total + 0.5)


class DashboardService:
    def __init__(self, context: TenantContext) -> None:
        self._pets = PetService(context)
        self._owners = OwnerService(context)
        self._vaccinations = VaccinationService(context)
        self._incidents = IncidentService(context)
        self._strays = StrayService(context)

    def get_stats(self, now: datetime | None = None) -> DashboardStatsRead:
        current = ensure_utc(now or now_utc())
        pets = self._pets.get_all()
        pet_ids = {pet.id for pet in pets}
        protected = protected_pet_ids(self._vaccinations.get_all(), current.date()) & pet_ids
        incidents = self._incidents.get_all()
        window_start = current - timedelta(days=RECENT_INCIDENT_DAYS)
        strays = self._strays.get_all()
        return DashboardStatsRead(
            total_pets=len(pets),
            total_owners=len(self._owners.get_all()),
            vaccinated_pets=len(protected),
            vaccinated_percentage=coverage_percentage(len(protected), len(pets)),
            recent_incidents=len([item for item in incidents if ensure_utc(item.incident_date) >= window_start]),
            active_observations=len([item for item in incidents if item.status == IncidentStatus.OBSERVATION]),
            pending_strays=len([item for item in strays if item.status == StrayStatus.PENDING]),
            active_strays=len([item for item in strays if item.status in ACTIVE_STRAY_STATUSES]),
        )
