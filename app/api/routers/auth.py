from __future__ import annotations

import logging
from typing import Annotated, Any

from fastapi import APIRouter, Depends, HTTPException, Request, status

from app.api.deps import Context, require_staff
from app.domain.models import (
    LoginRequest,
    LoginResponse,
    PortalAccessRequest,
    PortalAccessResponse,
    UserRead,
)
from app.domain.permissions import PORTAL_PERMISSIONS, permissions_for_role
from app.infra.audit import set_audit_context
from app.infra.auth import create_access_token, create_portal_token
from app.infra.tenant import ANONYMOUS
from app.services.errors import AuthError, NotFoundError
from app.services.settings_service import SettingsService
from app.services.user_service import UserService

logger = logging.getLogger(__name__)

router = APIRouter()

StaffClaims = Annotated[dict[str, Any], Depends(require_staff)]


def _handle_auth_error(exc: Exception) -> None:
    if isinstance(exc, AuthError):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(exc)) from exc
    if isinstance(exc, NotFoundError):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    raise exc


@router.post("/login", response_model=LoginResponse)
def login(payload: LoginRequest, request: Request) -> LoginResponse:
    users = UserService(ANONYMOUS)
    try:
        user = users.login(payload.identifier, payload.password)
    except AuthError as exc:
        logger.info("failed login for %r", payload.identifier)
        _handle_auth_error(exc)
        raise
    users.log_session_start(user.id)
    permissions = permissions_for_role(user.role)
    token = create_access_token(
        user_id=user.id,
        barangay_id=user.barangay_id,
        role=str(user.role),
        permissions=permissions,
    )
    set_audit_context(request, action="auth.login", resource="profiles", barangay_id=user.barangay_id)
    settings = SettingsService(ANONYMOUS).get_by_barangay_id(user.barangay_id)
    return LoginResponse(access_token=token, permissions=permissions, user=user, settings=settings)


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
def logout(claims: StaffClaims, request: Request) -> None:
    set_audit_context(request, action="auth.logout", resource="profiles")
    try:
        UserService(ANONYMOUS).log_session_end(claims["sub"])
    except NotFoundError as exc:
        _handle_auth_error(exc)
        raise


@router.post("/portal", response_model=PortalAccessResponse)
def portal_access(payload: PortalAccessRequest, request: Request) -> PortalAccessResponse:
    settings = SettingsService(ANONYMOUS).get_by_community_code(payload.community_code)
    if settings is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Invalid community code")
    set_audit_context(request, action="auth.portal", resource="system_settings", barangay_id=settings.barangay_id)
    token = create_portal_token(barangay_id=settings.barangay_id, permissions=list(PORTAL_PERMISSIONS))
    return PortalAccessResponse(access_token=token, permissions=list(PORTAL_PERMISSIONS), settings=settings)


@router.get("/me", response_model=UserRead, dependencies=[Depends(require_staff)])
def me(context: Context) -> UserRead:
    user = UserService(context).get_by_id(context.actor_id or "")
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="user not found")
    return user
