from __future__ import annotations

from typing import Any

from app.domain.models import UserRole

PERM_WILDCARD = "*"
PERM_PETS_READ = "pets.read"
PERM_PETS_WRITE = "pets.write"
PERM_OWNERS_READ = "owners.read"
PERM_OWNERS_WRITE = "owners.write"
PERM_VACCINATIONS_READ = "vaccinations.read"
PERM_VACCINATIONS_WRITE = "vaccinations.write"
PERM_INCIDENTS_READ = "incidents.read"
PERM_INCIDENTS_WRITE = "incidents.write"
PERM_STRAYS_READ = "strays.read"
PERM_STRAYS_REPORT = "strays.report"
PERM_STRAYS_WRITE = "strays.write"
PERM_USERS_READ = "users.read"
PERM_USERS_WRITE = "users.write"
PERM_SETTINGS_READ = "settings.read"
PERM_SETTINGS_WRITE = "settings.write"
PERM_NOTIFICATIONS_READ = "notifications.read"
PERM_NOTIFICATIONS_WRITE = "notifications.write"
PERM_ANNOUNCEMENTS_READ = "announcements.read"
PERM_ANNOUNCEMENTS_WRITE = "announcements.write"
PERM_DASHBOARD_READ = "dashboard.read"

STAFF_READ_PERMISSIONS = [
    PERM_PETS_READ,
    PERM_OWNERS_READ,
    PERM_VACCINATIONS_READ,
    PERM_INCIDENTS_READ,
    PERM_STRAYS_READ,
    PERM_USERS_READ,
    PERM_SETTINGS_READ,
    PERM_NOTIFICATIONS_READ,
    PERM_ANNOUNCEMENTS_READ,
    PERM_DASHBOARD_READ,
]

STAFF_WRITE_PERMISSIONS = [
    PERM_PETS_WRITE,
    PERM_OWNERS_WRITE,
    PERM_VACCINATIONS_WRITE,
    PERM_INCIDENTS_WRITE,
    PERM_STRAYS_REPORT,
    PERM_STRAYS_WRITE,
    PERM_NOTIFICATIONS_WRITE,
    PERM_ANNOUNCEMENTS_WRITE,
]

PORTAL_PERMISSIONS = [
    PERM_PETS_READ,
    PERM_VACCINATIONS_READ,
    PERM_STRAYS_REPORT,
    PERM_SETTINGS_READ,
    PERM_ANNOUNCEMENTS_READ,
]

ROLE_PERMISSIONS: dict[UserRole, list[str]] = {
    UserRole.ADMIN: [PERM_WILDCARD],
    UserRole.STAFF: [*STAFF_READ_PERMISSIONS, *STAFF_WRITE_PERMISSIONS],
    UserRole.GUEST: list(STAFF_READ_PERMISSIONS),
}


def permissions_for_role(role: UserRole | str) -> list[str]:
    try:
        return list(ROLE_PERMISSIONS[UserRole(role)])
    except ValueError:
        return []


def has_permission(claims: dict[str, Any], permission: str) -> bool:
    permissions = claims.get("permissions", [])
    if not isinstance(permissions, list):
        return False
    return permission in permissions or PERM_WILDCARD in permissions
