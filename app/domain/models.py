from __future__ import annotations

from datetime import UTC, date, datetime
from enum import StrEnum
from typing import Any
from uuid import uuid4

from pydantic import BaseModel, ConfigDict
from pydantic import Field as PydanticField
from pydantic.alias_generators import to_camel
from sqlalchemy import JSON, Column, Index, UniqueConstraint
from sqlmodel import Field, SQLModel


def now_utc() -> datetime:
    return datetime.now(UTC)


def today_utc() -> date:
    return now_utc().date()


def new_id() -> str:
    return str(uuid4())


def ensure_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


class ChangeKind(StrEnum):
    PETS = "pets"
    OWNERS = "owners"
    VACCINATIONS = "vaccinations"
    INCIDENTS = "incidents"
    STRAYS = "strays"
    USERS = "users"
    SETTINGS = "settings"
    NOTIFICATIONS = "notifications"
    ANNOUNCEMENTS = "announcements"


class Species(StrEnum):
    DOG = "Dog"
    CAT = "Cat"


class Sex(StrEnum):
    MALE = "Male"
    FEMALE = "Female"


class PetStatus(StrEnum):
    ALIVE = "Alive"
    DECEASED = "Deceased"
    LOST = "Lost"
    TRANSFERRED = "Transferred"


class VaccineType(StrEnum):
    CORE_ANTI_RABIES = "Core - Anti-Rabies"
    CORE_MULTI_5 = "Core - Multi (5-in-1)"
    CORE_MULTI_6 = "Core - Multi (6-in-1)"
    NON_CORE = "Non-Core (Optional)"
    DEWORMING = "Deworming"
    EXTERNAL_PARASITE = "External Parasite"

    @property
    def is_core(self) -> bool:
        return self.value.startswith("Core")


class IncidentStatus(StrEnum):
    OBSERVATION = "Observation"
    CLEARED = "Cleared"
    DECEASED = "Deceased"
    ESCAPED = "Escaped"


class StrayStatus(StrEnum):
    PENDING = "Pending"
    REPORTED = "Reported"
    CAPTURED = "Captured"
    RESOLVED = "Resolved"
    REJECTED = "Rejected"


class UserRole(StrEnum):
    ADMIN = "Admin"
    STAFF = "Staff"
    GUEST = "Guest"


class UserStatus(StrEnum):
    ACTIVE = "Active"
    INACTIVE = "Inactive"


class NotificationType(StrEnum):
    SUCCESS = "success"
    INFO = "info"
    WARNING = "warning"
    SYSTEM = "system"


class AnnouncementCategory(StrEnum):
    EVENT = "Event"
    NEWS = "News"
    ADVISORY = "Advisory"
    HEALTH = "Health"


class VaccinationStatus(StrEnum):
    ACTIVE = "Active"
    EXPIRED = "Expired"
    UNVACCINATED = "Unvaccinated"


class EventRecord(SQLModel, table=True):
    __tablename__ = "events"

    event_id: str = Field(default_factory=new_id, primary_key=True)
    event_type: str = Field(index=True)
    barangay_id: str = Field(index=True)
    ts: datetime = Field(default_factory=now_utc, index=True)
    actor_id: str | None = Field(default=None, index=True)
    payload: dict[str, Any] = Field(
        default_factory=dict,
        sa_column=Column(JSON, nullable=False),
    )


class AuditLog(SQLModel, table=True):
    __tablename__ = "audit_logs"

    id: str = Field(default_factory=new_id, primary_key=True)
    barangay_id: str = Field(index=True)
    actor_id: str | None = Field(default=None, index=True)
    action: str
    resource: str
    method: str
    status_code: int
    ts: datetime = Field(default_factory=now_utc, index=True)
    detail: dict[str, Any] = Field(
        default_factory=dict,
        sa_column=Column(JSON, nullable=False),
    )


class SystemSettings(SQLModel, table=True):
    __tablename__ = "system_settings"
    __table_args__ = (
        UniqueConstraint("barangay_key", "municipality_key", name="uq_system_settings_location"),
    )

    id: str = Field(default_factory=new_id, primary_key=True)
    barangay_id: str = Field(index=True, unique=True)
    barangay_name: str
    municipality: str
    province: str | None = None
    region: str | None = None
    barangay_key: str = Field(index=True)
    municipality_key: str = Field(index=True)
    logo_url: str = ""
    reminder_days: int = 30
    support_email: str = ""
    emergency_hotline: str = ""
    community_code: str = Field(index=True, unique=True)
    license_used: str | None = None
    created_at: datetime = Field(default_factory=now_utc, index=True)
    updated_at: datetime = Field(default_factory=now_utc)


class User(SQLModel, table=True):
    __tablename__ = "profiles"
    __table_args__ = (
        UniqueConstraint("barangay_id", "username_key", name="uq_profiles_barangay_username"),
    )

    id: str = Field(default_factory=new_id, primary_key=True)
    barangay_id: str = Field(foreign_key="system_settings.barangay_id", index=True)
    full_name: str
    username: str
    username_key: str = Field(index=True)
    role: UserRole = Field(default=UserRole.STAFF)
    status: UserStatus = Field(default=UserStatus.ACTIVE)
    email: str | None = None
    password_hash: str
    last_sign_in_at: datetime | None = None
    last_sign_out_at: datetime | None = None
    created_at: datetime = Field(default_factory=now_utc, index=True)


class Owner(SQLModel, table=True):
    __tablename__ = "owners"

    id: str = Field(default_factory=new_id, primary_key=True)
    barangay_id: str = Field(foreign_key="system_settings.barangay_id", index=True)
    full_name: str = Field(index=True)
    contact_number: str
    address: str
    email: str | None = None
    created_at: datetime = Field(default_factory=now_utc, index=True)


class Pet(SQLModel, table=True):
    __tablename__ = "pets"
    __table_args__ = (Index("ix_pets_barangay_owner", "barangay_id", "owner_id"),)

    id: str = Field(default_factory=new_id, primary_key=True)
    barangay_id: str = Field(foreign_key="system_settings.barangay_id", index=True)
    owner_id: str = Field(foreign_key="owners.id", index=True)
    name: str = Field(index=True)
    species: Species
    breed: str = ""
    color: str = ""
    sex: Sex
    birth_date: date | None = None
    is_spayed_neutered: bool = False
    photo_url: str = ""
    registration_date: date = Field(default_factory=today_utc)
    status: PetStatus = Field(default=PetStatus.ALIVE)
    created_at: datetime = Field(default_factory=now_utc, index=True)


class Vaccination(SQLModel, table=True):
    __tablename__ = "vaccinations"
    __table_args__ = (Index("ix_vaccinations_barangay_pet", "barangay_id", "pet_id"),)

    id: str = Field(default_factory=new_id, primary_key=True)
    barangay_id: str = Field(foreign_key="system_settings.barangay_id", index=True)
    pet_id: str = Field(foreign_key="pets.id", index=True)
    vaccine_name: str
    vaccine_type: VaccineType
    manufacturer: str | None = None
    lot_number: str
    date_given: date = Field(index=True)
    expiration_date: date
    next_due_date: date = Field(index=True)
    veterinarian: str
    vet_license_no: str
    clinic_name: str
    weight_kg: float | None = None
    temperature: float | None = None
    notes: str | None = None
    created_at: datetime = Field(default_factory=now_utc, index=True)


class Incident(SQLModel, table=True):
    __tablename__ = "incidents"
    __table_args__ = (Index("ix_incidents_barangay_status", "barangay_id", "status"),)

    id: str = Field(default_factory=new_id, primary_key=True)
    barangay_id: str = Field(foreign_key="system_settings.barangay_id", index=True)
    pet_id: str | None = Field(default=None, foreign_key="pets.id", index=True)
    victim_name: str
    victim_contact: str
    incident_date: datetime = Field(index=True)
    location: str
    description: str = ""
    body_part_bitten: str = ""
    is_provoked: bool = False
    status: IncidentStatus = Field(default=IncidentStatus.OBSERVATION)
    observation_start_date: datetime
    created_at: datetime = Field(default_factory=now_utc, index=True)


class StrayReport(SQLModel, table=True):
    __tablename__ = "stray_reports"
    __table_args__ = (Index("ix_stray_reports_barangay_status", "barangay_id", "status"),)

    id: str = Field(default_factory=new_id, primary_key=True)
    barangay_id: str = Field(foreign_key="system_settings.barangay_id", index=True)
    reporter_name: str
    reporter_contact: str | None = None
    species: Species
    location: str
    description: str = ""
    photo_url: str | None = None
    date_reported: datetime = Field(default_factory=now_utc, index=True)
    status: StrayStatus = Field(default=StrayStatus.REPORTED)
    is_ear_tipped: bool = False
    latitude: float | None = None
    longitude: float | None = None


class Notification(SQLModel, table=True):
    __tablename__ = "notifications"

    id: str = Field(default_factory=new_id, primary_key=True)
    barangay_id: str = Field(foreign_key="system_settings.barangay_id", index=True)
    title: str
    message: str
    type: NotificationType = Field(default=NotificationType.INFO)
    is_read: bool = False
    created_at: datetime = Field(default_factory=now_utc, index=True)


class Announcement(SQLModel, table=True):
    __tablename__ = "announcements"

    id: str = Field(default_factory=new_id, primary_key=True)
    barangay_id: str = Field(foreign_key="system_settings.barangay_id", index=True)
    author_id: str = Field(index=True)
    author_name: str | None = None
    role: str | None = None
    title: str
    content: str
    date_posted: datetime = Field(default_factory=now_utc, index=True)
    category: AnnouncementCategory = Field(default=AnnouncementCategory.NEWS)
    photo_url: str | None = None
    link_preview: dict[str, Any] | None = Field(
        default=None,
        sa_column=Column(JSON, nullable=True),
    )
    likes: int = 0


class SetupVerification(SQLModel, table=True):
    __tablename__ = "setup_verifications"

    id: str = Field(default_factory=new_id, primary_key=True)
    location_data: dict[str, Any] = Field(
        default_factory=dict,
        sa_column=Column(JSON, nullable=False),
    )
    public_code: str = Field(index=True)
    secret_code: str
    is_verified: bool = False
    created_at: datetime = Field(default_factory=now_utc, index=True)


class AdminAuthToken(SQLModel, table=True):
    __tablename__ = "admin_auth_tokens"

    id: str = Field(default_factory=new_id, primary_key=True)
    token: str = Field(index=True, unique=True)
    is_used: bool = False
    created_at: datetime = Field(default_factory=now_utc, index=True)
    used_at: datetime | None = None


class ChangeEvent(BaseModel):
    event_id: str = PydanticField(default_factory=new_id)
    kind: ChangeKind
    action: str
    barangay_id: str
    ts: datetime = PydanticField(default_factory=now_utc)
    actor_id: str | None = None
    payload: dict[str, Any] = PydanticField(default_factory=dict)

    @property
    def event_type(self) -> str:
        return f"{self.kind}.{self.action}"


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ORMReadModel(CamelModel):
    model_config = ConfigDict(from_attributes=True)


class LocationDetails(CamelModel):
    region: str = ""
    province: str = ""
    city: str = PydanticField(min_length=1)
    barangay: str = PydanticField(min_length=1)


class LinkPreview(CamelModel):
    url: str
    title: str
    description: str
    image_url: str | None = None
    domain: str


class OwnerCreate(CamelModel):
    id: str | None = None
    full_name: str = PydanticField(min_length=1)
    contact_number: str
    address: str
    email: str | None = None


class OwnerRead(ORMReadModel):
    id: str
    barangay_id: str
    full_name: str
    contact_number: str
    address: str
    email: str | None = None


class PetCreate(CamelModel):
    id: str | None = None
    owner_id: str
    name: str = PydanticField(min_length=1)
    species: Species
    breed: str = ""
    color: str = ""
    sex: Sex
    birth_date: date | None = None
    is_spayed_neutered: bool = False
    photo_url: str = ""
    registration_date: date | None = None
    status: PetStatus = PetStatus.ALIVE


class PetUpdate(CamelModel):
    barangay_id: str | None = None
    name: str | None = None
    breed: str | None = None
    color: str | None = None
    birth_date: date | None = None
    is_spayed_neutered: bool | None = None
    photo_url: str | None = None
    status: PetStatus | None = None


class PetRead(ORMReadModel):
    id: str
    barangay_id: str
    owner_id: str
    name: str
    species: Species
    breed: str
    color: str
    sex: Sex
    birth_date: date | None = None
    is_spayed_neutered: bool
    photo_url: str
    registration_date: date
    status: PetStatus


class VaccinationCreate(CamelModel):
    id: str | None = None
    pet_id: str
    vaccine_name: str = PydanticField(min_length=1)
    vaccine_type: VaccineType | None = None
    manufacturer: str | None = None
    lot_number: str = PydanticField(min_length=1)
    date_given: date
    expiration_date: date | None = None
    next_due_date: date | None = None
    veterinarian: str
    vet_license_no: str
    clinic_name: str
    weight_kg: float | None = PydanticField(default=None, gt=0)
    temperature: float | None = None
    notes: str | None = None


class VaccinationRead(ORMReadModel):
    id: str
    barangay_id: str
    pet_id: str
    vaccine_name: str
    vaccine_type: VaccineType
    manufacturer: str | None = None
    lot_number: str
    date_given: date
    expiration_date: date
    next_due_date: date
    veterinarian: str
    vet_license_no: str
    clinic_name: str
    weight_kg: float | None = None
    temperature: float | None = None
    notes: str | None = None


class VaccinationStatusRead(CamelModel):
    pet_id: str
    status: VaccinationStatus
    is_protected: bool
    next_due_date: date | None = None


class IncidentCreate(CamelModel):
    id: str | None = None
    pet_id: str | None = None
    victim_name: str = PydanticField(min_length=1)
    victim_contact: str
    incident_date: datetime = PydanticField(alias="date")
    location: str
    description: str = ""
    body_part_bitten: str = ""
    is_provoked: bool = False
    observation_start_date: datetime | None = None


class IncidentStatusUpdate(CamelModel):
    status: IncidentStatus


class IncidentRead(ORMReadModel):
    id: str
    barangay_id: str
    pet_id: str | None = None
    victim_name: str
    victim_contact: str
    incident_date: datetime = PydanticField(alias="date")
    location: str
    description: str
    body_part_bitten: str
    is_provoked: bool
    status: IncidentStatus
    observation_start_date: datetime
    observation_day: int = 0
    observation_overdue: bool = False


class StrayReportCreate(CamelModel):
    id: str | None = None
    reporter_name: str = PydanticField(min_length=1)
    reporter_contact: str | None = None
    species: Species
    location: str
    description: str = ""
    photo_url: str | None = None
    is_ear_tipped: bool = False
    latitude: float | None = PydanticField(default=None, ge=-90, le=90)
    longitude: float | None = PydanticField(default=None, ge=-180, le=180)


class StrayStatusUpdate(CamelModel):
    status: StrayStatus


class StrayReportRead(ORMReadModel):
    id: str
    barangay_id: str
    reporter_name: str
    reporter_contact: str | None = None
    species: Species
    location: str
    description: str
    photo_url: str | None = None
    date_reported: datetime
    status: StrayStatus
    is_ear_tipped: bool
    latitude: float | None = None
    longitude: float | None = None


class UserCreate(CamelModel):
    id: str | None = None
    full_name: str = PydanticField(min_length=1)
    username: str = PydanticField(min_length=1)
    password: str = PydanticField(min_length=1)
    role: UserRole = UserRole.STAFF
    status: UserStatus = UserStatus.ACTIVE
    email: str | None = None


class UserUpdate(CamelModel):
    barangay_id: str | None = None
    full_name: str | None = None
    role: UserRole | None = None
    status: UserStatus | None = None
    password: str | None = PydanticField(default=None, min_length=1)
    email: str | None = None


class UserRead(ORMReadModel):
    id: str
    barangay_id: str
    full_name: str
    username: str
    role: UserRole
    status: UserStatus
    email: str | None = None
    last_active: datetime | None = None


class SystemSettingsUpdate(CamelModel):
    barangay_id: str | None = None
    barangay_name: str | None = None
    municipality: str | None = None
    logo_url: str | None = None
    reminder_days: int | None = PydanticField(default=None, ge=1)
    support_email: str | None = None
    emergency_hotline: str | None = None
    community_code: str | None = PydanticField(default=None, min_length=4)
    license_used: str | None = None


class SystemSettingsRead(ORMReadModel):
    id: str | None = None
    barangay_id: str
    barangay_name: str
    municipality: str
    logo_url: str
    reminder_days: int
    support_email: str
    emergency_hotline: str
    community_code: str
    license_used: str | None = None


class NotificationCreate(CamelModel):
    title: str = PydanticField(min_length=1)
    message: str
    type: NotificationType = NotificationType.INFO


class NotificationRead(ORMReadModel):
    id: str
    barangay_id: str
    title: str
    message: str
    type: NotificationType
    created_at: datetime = PydanticField(alias="timestamp")
    is_read: bool


class AnnouncementCreate(CamelModel):
    id: str | None = None
    title: str = PydanticField(min_length=1)
    content: str
    category: AnnouncementCategory = AnnouncementCategory.NEWS
    date_posted: datetime | None = None
    photo_url: str | None = None
    link_url: str | None = None
    link_preview: LinkPreview | None = None


class AnnouncementRead(ORMReadModel):
    id: str
    barangay_id: str
    author_id: str
    author_name: str
    role: str
    title: str
    content: str
    date_posted: datetime
    category: AnnouncementCategory
    photo_url: str | None = None
    link_preview: LinkPreview | None = None
    likes: int


class LinkPreviewRequest(CamelModel):
    url: str


class SetupInitiateRead(CamelModel):
    public_code: str


class SetupVerifyRequest(CamelModel):
    public_code: str
    secret_code: str


class SetupVerifyRead(CamelModel):
    verified: bool


class SetupFinalizeRequest(CamelModel):
    admin_name: str = PydanticField(min_length=1)
    admin_username: str = PydanticField(min_length=1)
    admin_password: str = PydanticField(min_length=1)
    admin_token: str
    location: LocationDetails


class SetupFinalizeRead(CamelModel):
    success: bool = True
    barangay_id: str
    user_id: str


class LoginRequest(CamelModel):
    identifier: str
    password: str


class PortalAccessRequest(CamelModel):
    community_code: str


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    permissions: list[str]


class LoginResponse(TokenResponse):
    user: UserRead
    settings: SystemSettingsRead


class PortalAccessResponse(TokenResponse):
    settings: SystemSettingsRead


class DashboardStatsRead(CamelModel):
    total_pets: int
    total_owners: int
    vaccinated_pets: int
    vaccinated_percentage: int
    recent_incidents: int
    active_observations: int
    pending_strays: int
    active_strays: int
