"""Provisioning flow for a new barangay.

A barangay is brought online in four steps: open a paired-code session for
the location, prove possession of the secret half of the pair, obtain an
admin authorization token from authorized personnel, then finalize, which
creates the barangay settings and its first Admin account together.

The secret code and admin token never appear in a response; they are
handed to the out-of-band notifier.
"""

from __future__ import annotations

import logging
import os
from datetime import datetime, timedelta

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from app.domain.codes import (
    ADMIN_TOKEN_LENGTH,
    ADMIN_TOKEN_PREFIX,
    PUBLIC_CODE_PREFIX,
    SECRET_CODE_PREFIX,
    SESSION_CODE_LENGTH,
    generate_code,
    generate_community_code,
)
from app.domain.models import (
    AdminAuthToken,
    LocationDetails,
    SetupFinalizeRead,
    SetupFinalizeRequest,
    SetupInitiateRead,
    SetupVerification,
    SystemSettings,
    User,
    UserRole,
    UserStatus,
    ensure_utc,
    new_id,
    now_utc,
)
from app.infra.auth import hash_password
from app.infra.db import open_session
from app.infra.notifier import (
    CHANNEL_ADMIN_TOKEN,
    CHANNEL_SETUP_SECRET,
    OutOfBandNotifier,
    get_notifier,
)
from app.services.errors import AuthError, ConflictError
from app.services.settings_service import DEFAULT_REMINDER_DAYS, location_key
from app.services.user_service import username_key

logger = logging.getLogger(__name__)

SETUP_SESSION_TTL_MINUTES = int(os.getenv("SETUP_SESSION_TTL_MINUTES", "60"))
ADMIN_TOKEN_TTL_MINUTES = int(os.getenv("ADMIN_TOKEN_TTL_MINUTES", "30"))

DEFAULT_SUPPORT_EMAIL = "admin@petinfosys.ph"
DEFAULT_EMERGENCY_HOTLINE = "911"
INVALID_ADMIN_TOKEN = "Invalid or expired admin authorization code."


def _is_fresh(created_at: datetime, ttl_minutes: int) -> bool:
    return now_utc() - ensure_utc(created_at) <= timedelta(minutes=ttl_minutes)


class SetupService:
    def __init__(self, notifier: OutOfBandNotifier | None = None) -> None:
        self._notifier = notifier or get_notifier()

    def _session(self) -> Session:
        return open_session()

    def _find_registered(self, session: Session, barangay: str, city: str) -> SystemSettings | None:
        return session.exec(
            select(SystemSettings)
            .where(SystemSettings.barangay_key == location_key(barangay))
            .where(SystemSettings.municipality_key == location_key(city))
        ).first()

    def _find_usable_token(self, session: Session, token: str) -> AdminAuthToken | None:
        row = session.exec(
            select(AdminAuthToken)
            .where(AdminAuthToken.token == token)
            .where(AdminAuthToken.is_used == False)  # noqa: E712
        ).first()
        if row is None or not _is_fresh(row.created_at, ADMIN_TOKEN_TTL_MINUTES):
            return None
        return row

    def initiate_session(self, location: LocationDetails) -> SetupInitiateRead:
        with self._session() as session:
            if self._find_registered(session, location.barangay, location.city) is not None:
                raise ConflictError(
                    f"Barangay {location.barangay} in {location.city} is already registered. "
                    "Please login instead."
                )
            verification = SetupVerification(
                location_data=location.model_dump(by_alias=True),
                public_code=generate_code(SESSION_CODE_LENGTH, PUBLIC_CODE_PREFIX),
                secret_code=generate_code(SESSION_CODE_LENGTH, SECRET_CODE_PREFIX),
                is_verified=False,
            )
            session.add(verification)
            session.commit()
            session.refresh(verification)

        logger.info(
            "setup session %s opened for %s, %s",
            verification.public_code,
            location.barangay,
            location.city,
        )
        self._notifier.deliver(
            CHANNEL_SETUP_SECRET,
            verification.secret_code,
            {"public_code": verification.public_code, "location": verification.location_data},
        )
        return SetupInitiateRead(public_code=verification.public_code)

    def verify_session(self, public_code: str, secret_code: str) -> bool:
        with self._session() as session:
            verification = session.exec(
                select(SetupVerification)
                .where(SetupVerification.public_code == public_code)
                .where(SetupVerification.secret_code == secret_code)
                .order_by(SetupVerification.created_at.desc())
            ).first()
            if verification is None or not _is_fresh(verification.created_at, SETUP_SESSION_TTL_MINUTES):
                return False
            verification.is_verified = True
            session.add(verification)
            session.commit()
        return True

    def request_admin_auth_token(self) -> None:
        with self._session() as session:
            row = AdminAuthToken(token=generate_code(ADMIN_TOKEN_LENGTH, ADMIN_TOKEN_PREFIX), is_used=False)
            session.add(row)
            session.commit()
            session.refresh(row)
        self._notifier.deliver(CHANNEL_ADMIN_TOKEN, row.token, {"token_id": row.id})

    def verify_admin_auth_token(self, token: str) -> bool:
        with self._session() as session:
            row = self._find_usable_token(session, token)
            if row is None:
                return False
            row.is_used = True
            row.used_at = now_utc()
            session.add(row)
            session.commit()
        return True

    def finalize_setup(self, request: SetupFinalizeRequest) -> SetupFinalizeRead:
        location = request.location
        already_registered = f"Barangay {location.barangay} is already registered."
        with self._session() as session:
            if self._find_registered(session, location.barangay, location.city) is not None:
                raise ConflictError(already_registered)

            token = self._find_usable_token(session, request.admin_token)
            if token is None:
                raise AuthError(INVALID_ADMIN_TOKEN)
            token.is_used = True
            token.used_at = now_utc()
            session.add(token)

            barangay_id = new_id()
            settings = SystemSettings(
                barangay_id=barangay_id,
                barangay_name=location.barangay,
                municipality=location.city,
                province=location.province or None,
                region=location.region or None,
                barangay_key=location_key(location.barangay),
                municipality_key=location_key(location.city),
                community_code=generate_community_code(),
                reminder_days=DEFAULT_REMINDER_DAYS,
                support_email=DEFAULT_SUPPORT_EMAIL,
                emergency_hotline=DEFAULT_EMERGENCY_HOTLINE,
            )
            session.add(settings)
            try:
                session.flush()
            except IntegrityError as exc:
                session.rollback()
                raise ConflictError(already_registered) from exc

            admin = User(
                barangay_id=barangay_id,
                full_name=request.admin_name,
                username=request.admin_username.strip(),
                username_key=username_key(request.admin_username),
                role=UserRole.ADMIN,
                status=UserStatus.ACTIVE,
                password_hash=hash_password(request.admin_password),
            )
            session.add(admin)
            session.commit()
            session.refresh(admin)

        logger.info("barangay %s provisioned as %s", location.barangay, barangay_id)
        return SetupFinalizeRead(success=True, barangay_id=barangay_id, user_id=admin.id)

