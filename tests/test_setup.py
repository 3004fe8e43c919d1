from __future__ import annotations

from collections.abc import Callable
from datetime import timedelta
from typing import TYPE_CHECKING

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.engine import Engine
from sqlmodel import Session, select

from app.domain.codes import CODE_CHARSET
from app.domain.models import (
    AdminAuthToken,
    LocationDetails,
    SetupFinalizeRead,
    SetupFinalizeRequest,
    SetupVerification,
    SystemSettings,
    User,
    UserRole,
    UserStatus,
    now_utc,
)
from app.infra.notifier import CHANNEL_ADMIN_TOKEN, CHANNEL_SETUP_SECRET
from app.services import setup_service
from app.services.errors import AuthError, ConflictError
from app.services.setup_service import SetupService

if TYPE_CHECKING:
    from tests.conftest import RecordingNotifier


def _location(barangay: str = "Bagong Silangan", city: str = "Quezon City") -> dict[str, str]:
    return {"region": "NCR", "province": "Metro Manila", "city": city, "barangay": barangay}


def test_setup_full_flow_over_http(client: TestClient, notifier: RecordingNotifier) -> None:
    initiate_resp = client.post("/api/setup/sessions", json=_location())
    assert initiate_resp.status_code == 201
    public_code = initiate_resp.json()["publicCode"]
    assert public_code.startswith("PUB-")
    assert len(public_code) == 8
    assert all(char in CODE_CHARSET for char in public_code[4:])

    secret_code = notifier.last_code(CHANNEL_SETUP_SECRET)
    assert secret_code.startswith("SEC-")
    assert secret_code not in initiate_resp.text

    wrong_resp = client.post(
        "/api/setup/sessions/verify",
        json={"publicCode": public_code, "secretCode": "SEC-0000"},
    )
    assert wrong_resp.status_code == 200
    assert wrong_resp.json() == {"verified": False}

    verify_resp = client.post(
        "/api/setup/sessions/verify",
        json={"publicCode": public_code, "secretCode": secret_code},
    )
    assert verify_resp.json() == {"verified": True}

    token_resp = client.post("/api/setup/admin-token")
    assert token_resp.status_code == 202
    admin_token = notifier.last_code(CHANNEL_ADMIN_TOKEN)
    assert admin_token.startswith("ADM-")
    assert len(admin_token) == 10
    assert admin_token not in token_resp.text

    finalize_resp = client.post(
        "/api/setup/finalize",
        json={
            "adminName": "Maria Santos",
            "adminUsername": "msantos",
            "adminPassword": "s3cret-pass",
            "adminToken": admin_token,
            "location": _location(),
        },
    )
    assert finalize_resp.status_code == 201
    body = finalize_resp.json()
    assert body["success"] is True

    login_resp = client.post("/api/auth/login", json={"identifier": "MSantos", "password": "s3cret-pass"})
    assert login_resp.status_code == 200
    login_body = login_resp.json()
    assert login_body["user"]["role"] == "Admin"
    assert login_body["user"]["barangayId"] == body["barangayId"]
    assert login_body["settings"]["supportEmail"] == "admin@petinfosys.ph"
    assert login_body["settings"]["emergencyHotline"] == "911"
    assert login_body["settings"]["reminderDays"] == 30
    assert len(login_body["settings"]["communityCode"]) == 8
    assert login_body["permissions"] == ["*"]


def test_setup_initiate_is_rate_limited_per_client(client: TestClient) -> None:
    first = client.post("/api/setup/sessions", json=_location("San Roque"))
    assert first.status_code == 201
    second = client.post("/api/setup/sessions", json=_location("Santo Nino"))
    assert second.status_code == 429


def test_rejected_initiate_does_not_hold_the_cooldown(
    client: TestClient,
    provision: Callable[..., SetupFinalizeRead],
) -> None:
    provision("Bagong Silangan", "Quezon City")

    duplicate = client.post("/api/setup/sessions", json=_location())
    assert duplicate.status_code == 409
    assert "already registered" in duplicate.json()["detail"]

    retry = client.post("/api/setup/sessions", json=_location("Commonwealth"))
    assert retry.status_code == 201, retry.text
    throttled = client.post("/api/setup/sessions", json=_location("Batasan Hills"))
    assert throttled.status_code == 429


def test_setup_rejects_already_registered_barangay(
    provision: Callable[..., SetupFinalizeRead],
    notifier: RecordingNotifier,
) -> None:
    provision("Poblacion", "Makati")
    service = SetupService(notifier)

    with pytest.raises(ConflictError) as exc_info:
        service.initiate_session(LocationDetails(city="MAKATI", barangay="poblacion"))
    assert str(exc_info.value) == "Barangay poblacion in MAKATI is already registered. Please login instead."
    assert not [item for item in notifier.deliveries if item[0] == CHANNEL_SETUP_SECRET]

    service.request_admin_auth_token()
    with pytest.raises(ConflictError) as finalize_exc:
        service.finalize_setup(
            SetupFinalizeRequest(
                admin_name="Second Admin",
                admin_username="second",
                admin_password="pass",
                admin_token=notifier.last_code(CHANNEL_ADMIN_TOKEN),
                location=LocationDetails(city="Makati", barangay="POBLACION"),
            )
        )
    assert str(finalize_exc.value) == "Barangay POBLACION is already registered."


def test_admin_token_is_single_use(
    registry_engine: Engine,
    notifier: RecordingNotifier,
) -> None:
    service = SetupService(notifier)
    service.request_admin_auth_token()
    token = notifier.last_code(CHANNEL_ADMIN_TOKEN)

    first = service.finalize_setup(
        SetupFinalizeRequest(
            admin_name="First",
            admin_username="first",
            admin_password="pass",
            admin_token=token,
            location=LocationDetails(city="Pasig", barangay="Kapitolyo"),
        )
    )
    assert first.success is True

    with pytest.raises(AuthError):
        service.finalize_setup(
            SetupFinalizeRequest(
                admin_name="Second",
                admin_username="second",
                admin_password="pass",
                admin_token=token,
                location=LocationDetails(city="Pasig", barangay="Ugong"),
            )
        )

    with Session(registry_engine) as session:
        settings_rows = session.exec(select(SystemSettings)).all()
        users = session.exec(select(User)).all()
        stored_token = session.exec(select(AdminAuthToken).where(AdminAuthToken.token == token)).one()
    assert [row.barangay_name for row in settings_rows] == ["Kapitolyo"]
    assert len(users) == 1
    assert users[0].role == UserRole.ADMIN
    assert users[0].status == UserStatus.ACTIVE
    assert users[0].password_hash != "pass"
    assert stored_token.is_used is True


def test_bad_admin_token_leaves_no_state(registry_engine: Engine, notifier: RecordingNotifier) -> None:
    service = SetupService(notifier)
    with pytest.raises(AuthError):
        service.finalize_setup(
            SetupFinalizeRequest(
                admin_name="Nobody",
                admin_username="nobody",
                admin_password="pass",
                admin_token="ADM-guess1",
                location=LocationDetails(city="Taguig", barangay="Fort Bonifacio"),
            )
        )
    with Session(registry_engine) as session:
        assert session.exec(select(SystemSettings)).all() == []
        assert session.exec(select(User)).all() == []


def test_verify_admin_auth_token_consumes_token(registry_engine: Engine, notifier: RecordingNotifier) -> None:
    service = SetupService(notifier)
    service.request_admin_auth_token()
    token = notifier.last_code(CHANNEL_ADMIN_TOKEN)

    assert service.verify_admin_auth_token("ADM-nope00") is False
    assert service.verify_admin_auth_token(token) is True
    assert service.verify_admin_auth_token(token) is False


def test_expired_codes_never_match(
    registry_engine: Engine,
    notifier: RecordingNotifier,
) -> None:
    service = SetupService(notifier)
    public_code = service.initiate_session(LocationDetails(city="Cebu City", barangay="Lahug")).public_code
    secret_code = notifier.last_code(CHANNEL_SETUP_SECRET)
    service.request_admin_auth_token()
    token = notifier.last_code(CHANNEL_ADMIN_TOKEN)

    stale = now_utc() - timedelta(minutes=setup_service.SETUP_SESSION_TTL_MINUTES + 1)
    with Session(registry_engine) as session:
        verification = session.exec(
            select(SetupVerification).where(SetupVerification.public_code == public_code)
        ).one()
        verification.created_at = stale
        session.add(verification)
        admin_token = session.exec(select(AdminAuthToken).where(AdminAuthToken.token == token)).one()
        admin_token.created_at = now_utc() - timedelta(minutes=setup_service.ADMIN_TOKEN_TTL_MINUTES + 1)
        session.add(admin_token)
        session.commit()

    assert service.verify_session(public_code, secret_code) is False
    assert service.verify_admin_auth_token(token) is False
