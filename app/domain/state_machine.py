from __future__ import annotations

from app.domain.models import IncidentStatus, StrayStatus

INCIDENT_ALLOWED_TRANSITIONS: dict[IncidentStatus, set[IncidentStatus]] = {
    IncidentStatus.OBSERVATION: {
        IncidentStatus.CLEARED,
        IncidentStatus.DECEASED,
        IncidentStatus.ESCAPED,
    },
    IncidentStatus.CLEARED: set(),
    IncidentStatus.DECEASED: set(),
    IncidentStatus.ESCAPED: set(),
}


def can_incident_transition(source: IncidentStatus, target: IncidentStatus) -> bool:
    return target in INCIDENT_ALLOWED_TRANSITIONS.get(source, set())


STRAY_ALLOWED_TRANSITIONS: dict[StrayStatus, set[StrayStatus]] = {
    StrayStatus.PENDING: {StrayStatus.REPORTED, StrayStatus.REJECTED},
    StrayStatus.REPORTED: {StrayStatus.CAPTURED},
    StrayStatus.CAPTURED: {StrayStatus.RESOLVED},
    StrayStatus.RESOLVED: set(),
    StrayStatus.REJECTED: set(),
}

ACTIVE_STRAY_STATUSES: frozenset[StrayStatus] = frozenset(
    {StrayStatus.REPORTED, StrayStatus.CAPTURED, StrayStatus.RESOLVED}
)


def can_stray_transition(source: StrayStatus, target: StrayStatus) -> bool:
    return target in STRAY_ALLOWED_TRANSITIONS.get(source, set())


def initial_stray_status(*, public: bool) -> StrayStatus:
    return StrayStatus.PENDING if public else StrayStatus.REPORTED
