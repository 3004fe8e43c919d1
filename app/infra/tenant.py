from __future__ import annotations

from dataclasses import dataclass
from typing import Any

SESSION_KIND_STAFF = "staff"
SESSION_KIND_PORTAL = "portal"


@dataclass(frozen=True)
class StaffSession:
    user_id: str
    barangay_id: str | None
    role: str


@dataclass(frozen=True)
class TenantContext:
    """Who is calling and on behalf of which barangay.

    A logged-in staff member carries a ``staff_session``; an anonymous
    visitor of the public portal carries only ``public_barangay_id``.
    """

    staff_session: StaffSession | None = None
    public_barangay_id: str | None = None

    @property
    def actor_id(self) -> str | None:
        if self.staff_session is None:
            return None
        return self.staff_session.user_id

    @property
    def is_public(self) -> bool:
        return self.staff_session is None and bool(self.public_barangay_id)


ANONYMOUS = TenantContext()


def resolve_tenant_id(context: TenantContext | None) -> str | None:
    if context is None:
        return None
    session = context.staff_session
    if session is not None and session.barangay_id:
        return session.barangay_id
    if context.public_barangay_id:
        return context.public_barangay_id
    return None


def context_from_claims(claims: dict[str, Any]) -> TenantContext:
    barangay_id = claims.get("barangay_id")
    if not isinstance(barangay_id, str) or not barangay_id:
        barangay_id = None
    if claims.get("kind") == SESSION_KIND_PORTAL:
        return TenantContext(public_barangay_id=barangay_id)
    user_id = claims.get("sub")
    if not isinstance(user_id, str) or not user_id:
        return ANONYMOUS
    return TenantContext(
        staff_session=StaffSession(
            user_id=user_id,
            barangay_id=barangay_id,
            role=str(claims.get("role", "")),
        )
    )
