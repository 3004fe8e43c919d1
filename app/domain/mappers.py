"""Conversion between stored rows and the camelCase read models.

Storage columns are snake_case; the wire format is camelCase. The read
models carry the alias mapping, so most entities go through the generic
``to_storage`` / ``from_storage`` pair. Users and announcements have
derived fields and get dedicated mappers.
"""

from __future__ import annotations

import re
from datetime import datetime
from typing import Any, TypeVar

from pydantic import BaseModel

from app.domain.models import (
    Announcement,
    AnnouncementRead,
    Incident,
    IncidentRead,
    IncidentStatus,
    User,
    UserRead,
    ensure_utc,
    now_utc,
)

ReadModelT = TypeVar("ReadModelT", bound=BaseModel)

OBSERVATION_PERIOD_DAYS = 10
UNKNOWN_AUTHOR_NAME = "Unknown"
DEFAULT_AUTHOR_ROLE = "Staff"

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


def camel_to_snake(name: str) -> str:
    return _CAMEL_BOUNDARY.sub("_", name).lower()


def to_storage(payload: BaseModel, *, exclude: set[str] | None = None) -> dict[str, Any]:
    return payload.model_dump(by_alias=False, exclude_none=True, exclude=exclude)


def dict_to_storage(record: dict[str, Any]) -> dict[str, Any]:
    return {camel_to_snake(key): value for key, value in record.items()}


def from_storage(read_model: type[ReadModelT], row: Any) -> ReadModelT:
    return read_model.model_validate(row, from_attributes=True)


def derive_last_active(
    last_sign_in_at: datetime | None,
    last_sign_out_at: datetime | None,
) -> datetime | None:
    if last_sign_in_at is None:
        return last_sign_out_at
    if last_sign_out_at is None:
        return last_sign_in_at
    if ensure_utc(last_sign_out_at) > ensure_utc(last_sign_in_at):
        return last_sign_out_at
    return last_sign_in_at


def user_from_storage(row: User) -> UserRead:
    return UserRead(
        id=row.id,
        barangay_id=row.barangay_id,
        full_name=row.full_name,
        username=row.username,
        role=row.role,
        status=row.status,
        email=row.email,
        last_active=derive_last_active(row.last_sign_in_at, row.last_sign_out_at),
    )


def announcement_from_storage(row: Announcement, author: User | None = None) -> AnnouncementRead:
    author_name = (author.full_name if author is not None else None) or row.author_name
    author_role = (str(author.role) if author is not None else None) or row.role
    return AnnouncementRead(
        id=row.id,
        barangay_id=row.barangay_id,
        author_id=row.author_id,
        author_name=author_name or UNKNOWN_AUTHOR_NAME,
        role=author_role or DEFAULT_AUTHOR_ROLE,
        title=row.title,
        content=row.content,
        date_posted=row.date_posted,
        category=row.category,
        photo_url=row.photo_url,
        link_preview=row.link_preview,
        likes=row.likes,
    )


def observation_day(start: datetime, now: datetime | None = None) -> int:
    current = ensure_utc(now or now_utc())
    elapsed = abs(current - ensure_utc(start))
    days = elapsed.days + (1 if elapsed.seconds or elapsed.microseconds else 0)
    return min(days, OBSERVATION_PERIOD_DAYS)


def incident_from_storage(row: Incident, now: datetime | None = None) -> IncidentRead:
    read = from_storage(IncidentRead, row)
    read.observation_day = observation_day(row.observation_start_date, now)
    read.observation_overdue = (
        row.status == IncidentStatus.OBSERVATION and read.observation_day >= OBSERVATION_PERIOD_DAYS
    )
    return read
