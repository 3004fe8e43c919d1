from __future__ import annotations

import calendar
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date

from app.domain.models import VaccinationRead, VaccinationStatus, VaccineType

DEFAULT_DURATION_MONTHS = 12
DEWORMING_DURATION_MONTHS = 3


@dataclass(frozen=True)
class VaccineProduct:
    name: str
    manufacturer: str
    vaccine_type: VaccineType
    duration_months: int


VACCINE_CATALOG: tuple[VaccineProduct, ...] = (
    VaccineProduct("Nobivac Rabies", "MSD Animal Health", VaccineType.CORE_ANTI_RABIES, 12),
    VaccineProduct("Defensor 3", "Zoetis", VaccineType.CORE_ANTI_RABIES, 12),
    VaccineProduct("Rabisin", "Boehringer Ingelheim", VaccineType.CORE_ANTI_RABIES, 12),
    VaccineProduct("Rabvac 3", "Elanco", VaccineType.CORE_ANTI_RABIES, 12),
    VaccineProduct("Vanguard 5/L", "Zoetis", VaccineType.CORE_MULTI_5, 12),
    VaccineProduct("Nobivac DHPPi", "MSD Animal Health", VaccineType.CORE_MULTI_5, 12),
    VaccineProduct("Canigen DHPPi", "Virbac", VaccineType.CORE_MULTI_5, 12),
    VaccineProduct("Eurican DHPPi2-L", "Boehringer Ingelheim", VaccineType.CORE_MULTI_6, 12),
    VaccineProduct("Biocan DHPPi", "Bioveta", VaccineType.CORE_MULTI_5, 12),
    VaccineProduct("Nobivac KC", "MSD Animal Health", VaccineType.NON_CORE, 12),
    VaccineProduct("Bronchicine CAe", "Zoetis", VaccineType.NON_CORE, 12),
    VaccineProduct("Drontal Plus", "Elanco", VaccineType.DEWORMING, 3),
    VaccineProduct("Canex", "Zoetis", VaccineType.DEWORMING, 3),
    VaccineProduct("Nematel", "Univet", VaccineType.DEWORMING, 3),
    VaccineProduct("NexGard Spectra", "Boehringer Ingelheim", VaccineType.DEWORMING, 1),
    VaccineProduct("Bravecto", "MSD Animal Health", VaccineType.EXTERNAL_PARASITE, 3),
    VaccineProduct("Simparica", "Zoetis", VaccineType.EXTERNAL_PARASITE, 1),
    VaccineProduct("NexGard", "Boehringer Ingelheim", VaccineType.EXTERNAL_PARASITE, 1),
)

_CATALOG_BY_NAME = {item.name.lower(): item for item in VACCINE_CATALOG}


def find_product(name: str) -> VaccineProduct | None:
    return _CATALOG_BY_NAME.get(name.strip().lower())


def add_months(value: date, months: int) -> date:
    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def compute_next_due_date(
    date_given: date,
    vaccine_name: str,
    vaccine_type: VaccineType | None = None,
) -> date:
    product = find_product(vaccine_name)
    if product is not None:
        return add_months(date_given, product.duration_months)
    if vaccine_type == VaccineType.DEWORMING:
        return add_months(date_given, DEWORMING_DURATION_MONTHS)
    return add_months(date_given, DEFAULT_DURATION_MONTHS)


def latest_core_vaccination(
    vaccinations: Iterable[VaccinationRead],
    pet_id: str,
) -> VaccinationRead | None:
    core = [item for item in vaccinations if item.pet_id == pet_id and item.vaccine_type.is_core]
    if not core:
        return None
    return max(core, key=lambda item: item.date_given)


def vaccination_status(
    vaccinations: Iterable[VaccinationRead],
    pet_id: str,
    today: date,
) -> VaccinationStatus:
    latest = latest_core_vaccination(vaccinations, pet_id)
    if latest is None:
        return VaccinationStatus.UNVACCINATED
    if latest.next_due_date < today:
        return VaccinationStatus.EXPIRED
    return VaccinationStatus.ACTIVE


def is_protected(vaccinations: Iterable[VaccinationRead], pet_id: str, today: date) -> bool:
    return any(item.pet_id == pet_id and item.next_due_date > today for item in vaccinations)


def protected_pet_ids(vaccinations: Iterable[VaccinationRead], today: date) -> set[str]:
    return {item.pet_id for item in vaccinations if item.next_due_date > today}
