from __future__ import annotations

from typing import Any, ClassVar

from sqlmodel import Session

from app.domain.models import ChangeKind
from app.infra.db import open_session
from app.infra.events import event_bus
from app.infra.tenant import TenantContext, resolve_tenant_id
from app.services.errors import NotFoundError, TenantContextError

NO_CONTEXT_MESSAGE = "User context is not set."


class TenantScopedService:
    """Common plumbing for the per-entity repositories.

    Reads degrade to empty results when no barangay resolves; writes raise
    ``TenantContextError`` before touching the store.
    """

    kind: ClassVar[ChangeKind]

    def __init__(self, context: TenantContext) -> None:
        self._context = context

    def _session(self) -> Session:
        return open_session()

    def _tenant_id(self) -> str | None:
        return resolve_tenant_id(self._context)

    def _require_tenant_id(self) -> str:
        barangay_id = self._tenant_id()
        if not barangay_id:
            raise TenantContextError(NO_CONTEXT_MESSAGE)
        return barangay_id

    def _ensure_same_tenant(self, barangay_id: str, claimed: str | None, label: str) -> None:
        if claimed is not None and claimed != barangay_id:
            raise NotFoundError(f"{label} not found")

    def _emit(self, action: str, barangay_id: str, payload: dict[str, Any]) -> None:
        event_bus.publish_change(
            self.kind,
            action,
            barangay_id,
            payload,
            actor_id=self._context.actor_id,
        )
