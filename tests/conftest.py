from __future__ import annotations

from collections.abc import Callable, Generator
from pathlib import Path
from typing import Any

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import event
from sqlalchemy.engine import Engine
from sqlmodel import SQLModel, create_engine

from app import main as app_main
from app.api.routers import setup as setup_router
from app.domain.models import LocationDetails, SetupFinalizeRead, SetupFinalizeRequest
from app.infra import audit, auth, db, events, redis_state
from app.infra.notifier import CHANNEL_ADMIN_TOKEN
from app.services.setup_service import SetupService


class FakeRedis:
    def __init__(self) -> None:
        self.values: dict[str, str] = {}

    def set(self, key: str, value: str, nx: bool = False, ex: int | None = None) -> bool | None:
        if nx and key in self.values:
            return None
        self.values[key] = value
        return True

    def delete(self, *keys: str) -> int:
        removed = [key for key in keys if self.values.pop(key, None) is not None]
        return len(removed)

    def ping(self) -> bool:
        return True


class RecordingNotifier:
    def __init__(self) -> None:
        self.deliveries: list[tuple[str, str, dict[str, Any]]] = []

    def deliver(self, channel: str, code: str, context: dict[str, Any]) -> None:
        self.deliveries.append((channel, code, context))

    def last_code(self, channel: str) -> str:
        codes = [code for item_channel, code, _ in self.deliveries if item_channel == channel]
        assert codes, f"nothing delivered on {channel}"
        return codes[-1]


@pytest.fixture()
def registry_engine(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Engine:
    db_path = tmp_path / "registry_test.db"
    test_engine = create_engine(
        f"sqlite:///{db_path}",
        connect_args={"check_same_thread": False},
    )

    @event.listens_for(test_engine, "connect")
    def _enable_foreign_keys(dbapi_connection: object, _connection_record: object) -> None:
        cursor = dbapi_connection.cursor()  # type: ignore[attr-defined]
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    SQLModel.metadata.create_all(test_engine)
    monkeypatch.setattr(db, "engine", test_engine)
    monkeypatch.setattr(audit, "engine", test_engine)
    monkeypatch.setattr(events, "engine", test_engine)
    monkeypatch.setattr(auth, "PASSWORD_HASH_ITERATIONS", 1000)
    monkeypatch.setenv("OBJECT_STORAGE_ROOT", str(tmp_path / "object_storage"))
    monkeypatch.setenv("OBJECT_STORAGE_PUBLIC_BASE_URL", "/media")
    return test_engine


@pytest.fixture()
def fake_redis(monkeypatch: pytest.MonkeyPatch) -> FakeRedis:
    fake = FakeRedis()
    monkeypatch.setattr(redis_state, "get_redis", lambda: fake)
    return fake


@pytest.fixture()
def notifier(monkeypatch: pytest.MonkeyPatch) -> RecordingNotifier:
    recorder = RecordingNotifier()
    monkeypatch.setattr(setup_router, "get_notifier", lambda: recorder)
    return recorder


@pytest.fixture()
def client(
    registry_engine: Engine,
    fake_redis: FakeRedis,
    notifier: RecordingNotifier,
) -> Generator[TestClient, None, None]:
    test_client = TestClient(app_main.app)
    yield test_client
    test_client.close()


@pytest.fixture()
def provision(
    registry_engine: Engine,
    notifier: RecordingNotifier,
) -> Callable[..., SetupFinalizeRead]:
    def _provision(
        barangay: str,
        city: str,
        *,
        username: str = "admin",
        password: str = "admin-pass",
        full_name: str = "Barangay Admin",
    ) -> SetupFinalizeRead:
        service = SetupService(notifier)
        service.request_admin_auth_token()
        return service.finalize_setup(
            SetupFinalizeRequest(
                admin_name=full_name,
                admin_username=username,
                admin_password=password,
                admin_token=notifier.last_code(CHANNEL_ADMIN_TOKEN),
                location=LocationDetails(city=city, barangay=barangay),
            )
        )

    return _provision


@pytest.fixture()
def login(client: TestClient) -> Callable[[str, str], str]:
    def _login(identifier: str, password: str) -> str:
        response = client.post("/api/auth/login", json={"identifier": identifier, "password": password})
        assert response.status_code == 200, response.text
        return response.json()["access_token"]

    return _login
