from __future__ import annotations

import logging
import os
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Request, status

from app.domain.models import (
    LocationDetails,
    SetupFinalizeRead,
    SetupFinalizeRequest,
    SetupInitiateRead,
    SetupVerifyRead,
    SetupVerifyRequest,
)
from app.infra.audit import set_audit_context
from app.infra.notifier import get_notifier
from app.infra.redis_state import acquire_rate_limit, release_rate_limit
from app.services.errors import AuthError, ConflictError
from app.services.setup_service import SetupService

logger = logging.getLogger(__name__)

SETUP_RATE_LIMIT_SECONDS = int(os.getenv("SETUP_RATE_LIMIT_SECONDS", "1800"))

router = APIRouter()


def get_setup_service() -> SetupService:
    return SetupService(get_notifier())


Service = Annotated[SetupService, Depends(get_setup_service)]


def _handle_setup_error(exc: Exception) -> None:
    if isinstance(exc, ConflictError):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    if isinstance(exc, AuthError):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(exc)) from exc
    raise exc


def _client_key(request: Request) -> str:
    return request.client.host if request.client is not None else "unknown"


@router.post("/sessions", response_model=SetupInitiateRead, status_code=status.HTTP_201_CREATED)
def initiate_session(payload: LocationDetails, request: Request, service: Service) -> SetupInitiateRead:
    rate_key = f"setup:{_client_key(request)}"
    if not acquire_rate_limit(rate_key, SETUP_RATE_LIMIT_SECONDS):
        logger.info("setup initiation throttled for %s", _client_key(request))
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail="A setup session was started recently. Please wait before trying again.",
        )
    set_audit_context(request, action="setup.initiate", resource="setup_verifications")
    try:
        return service.initiate_session(payload)
    except Exception as exc:
        # only a session that was actually started holds the cooldown
        release_rate_limit(rate_key)
        _handle_setup_error(exc)
        raise


@router.post("/sessions/verify", response_model=SetupVerifyRead)
def verify_session(payload: SetupVerifyRequest, request: Request, service: Service) -> SetupVerifyRead:
    verified = service.verify_session(payload.public_code, payload.secret_code)
    set_audit_context(request, action="setup.verify", resource="setup_verifications", detail={"verified": verified})
    return SetupVerifyRead(verified=verified)


@router.post("/admin-token", status_code=status.HTTP_202_ACCEPTED)
def request_admin_token(request: Request, service: Service) -> dict[str, bool]:
    set_audit_context(request, action="setup.admin_token", resource="admin_auth_tokens")
    service.request_admin_auth_token()
    return {"requested": True}


@router.post("/finalize", response_model=SetupFinalizeRead, status_code=status.HTTP_201_CREATED)
def finalize_setup(payload: SetupFinalizeRequest, request: Request, service: Service) -> SetupFinalizeRead:
    set_audit_context(request, action="setup.finalize", resource="system_settings")
    try:
        result = service.finalize_setup(payload)
    except (ConflictError, AuthError) as exc:
        _handle_setup_error(exc)
        raise
    set_audit_context(request, barangay_id=result.barangay_id)
    return result
