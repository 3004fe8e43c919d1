from __future__ import annotations

import os
from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from pathlib import Path

from fastapi.testclient import TestClient
from sqlmodel import Session, select

from app.domain.models import AuditLog, EventRecord, SetupFinalizeRead
from app.infra import db


def _auth_header(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def _create_owner(client: TestClient, token: str, name: str = "Juan Dela Cruz") -> dict:
    response = client.post(
        "/api/owners",
        json={"fullName": name, "contactNumber": "09171234567", "address": "Purok 1"},
        headers=_auth_header(token),
    )
    assert response.status_code == 201, response.text
    return response.json()


def _create_pet(client: TestClient, token: str, owner_id: str, name: str = "Bantay") -> dict:
    response = client.post(
        "/api/pets",
        json={
            "ownerId": owner_id,
            "name": name,
            "species": "Dog",
            "breed": "Aspin",
            "color": "Brown",
            "sex": "Male",
            "isSpayedNeutered": False,
        },
        headers=_auth_header(token),
    )
    assert response.status_code == 201, response.text
    return response.json()


def test_pet_round_trip_and_tenant_stamp(
    client: TestClient,
    provision: Callable[..., SetupFinalizeRead],
    login: Callable[[str, str], str],
) -> None:
    barangay = provision("San Isidro", "Antipolo", username="admin_si", password="pass-si")
    token = login("admin_si", "pass-si")

    owner = _create_owner(client, token)
    assert owner["barangayId"] == barangay.barangay_id
    pet = _create_pet(client, token, owner["id"])
    assert pet["barangayId"] == barangay.barangay_id
    assert pet["status"] == "Alive"
    assert pet["registrationDate"] == datetime.now(UTC).date().isoformat()

    fetched = client.get(f"/api/pets/{pet['id']}", headers=_auth_header(token))
    assert fetched.status_code == 200
    assert fetched.json() == pet

    owner_pets = client.get(f"/api/owners/{owner['id']}/pets", headers=_auth_header(token))
    assert [item["id"] for item in owner_pets.json()] == [pet["id"]]

    update_resp = client.patch(
        f"/api/pets/{pet['id']}",
        json={"status": "Lost", "color": "Black"},
        headers=_auth_header(token),
    )
    assert update_resp.status_code == 200
    assert update_resp.json()["status"] == "Lost"
    assert update_resp.json()["color"] == "Black"

    with Session(db.get_engine()) as session:
        event_types = [row.event_type for row in session.exec(select(EventRecord)).all()]
        audits = session.exec(select(AuditLog).where(AuditLog.barangay_id == barangay.barangay_id)).all()
    assert "pets.created" in event_types
    assert "pets.updated" in event_types
    assert any(item.resource == "/api/pets" and item.method == "POST" for item in audits)


def test_pets_are_isolated_between_barangays(
    client: TestClient,
    provision: Callable[..., SetupFinalizeRead],
    login: Callable[[str, str], str],
) -> None:
    provision("Malanday", "Marikina", username="admin_a", password="pass-a")
    provision("Malanday", "Valenzuela", username="admin_b", password="pass-b")
    token_a = login("admin_a", "pass-a")
    token_b = login("admin_b", "pass-b")

    owner = _create_owner(client, token_a)
    pet = _create_pet(client, token_a, owner["id"])

    assert client.get(f"/api/pets/{pet['id']}", headers=_auth_header(token_b)).status_code == 404
    assert client.get("/api/pets", headers=_auth_header(token_b)).json() == []
    assert client.get(f"/api/owners/{owner['id']}", headers=_auth_header(token_b)).status_code == 404

    cross_update = client.patch(
        f"/api/pets/{pet['id']}",
        json={"status": "Deceased"},
        headers=_auth_header(token_b),
    )
    assert cross_update.status_code == 404
    assert client.delete(f"/api/pets/{pet['id']}", headers=_auth_header(token_b)).status_code == 404

    foreign_owner = client.post(
        "/api/pets",
        json={"ownerId": owner["id"], "name": "Intruder", "species": "Cat", "sex": "Female"},
        headers=_auth_header(token_b),
    )
    assert foreign_owner.status_code == 404

    still_there = client.get(f"/api/pets/{pet['id']}", headers=_auth_header(token_a))
    assert still_there.json()["status"] == "Alive"


def test_unknown_owner_stores_no_photo(
    client: TestClient,
    provision: Callable[..., SetupFinalizeRead],
    login: Callable[[str, str], str],
) -> None:
    provision("Santolan", "Pasig", username="admin_sl", password="pass-sl")
    token = login("admin_sl", "pass-sl")

    response = client.post(
        "/api/pets",
        json={
            "ownerId": "no-such-owner",
            "name": "Ghost",
            "species": "Cat",
            "sex": "Female",
            "photoUrl": "data:image/png;base64,aGVsbG8=",
        },
        headers=_auth_header(token),
    )
    assert response.status_code == 404
    assert list(Path(os.environ["OBJECT_STORAGE_ROOT"]).rglob("*.png")) == []


def test_update_with_foreign_barangay_id_is_not_found(
    client: TestClient,
    provision: Callable[..., SetupFinalizeRead],
    login: Callable[[str, str], str],
) -> None:
    provision("Tumana", "Marikina", username="admin_t", password="pass-t")
    other = provision("Concepcion", "Marikina", username="admin_c", password="pass-c")
    token = login("admin_t", "pass-t")
    owner = _create_owner(client, token)
    pet = _create_pet(client, token, owner["id"])

    response = client.patch(
        f"/api/pets/{pet['id']}",
        json={"barangayId": other.barangay_id, "name": "Renamed"},
        headers=_auth_header(token),
    )
    assert response.status_code == 404


def test_pet_delete_cascades_to_vaccinations_and_incidents(
    client: TestClient,
    provision: Callable[..., SetupFinalizeRead],
    login: Callable[[str, str], str],
) -> None:
    provision("Nangka", "Marikina", username="admin_n", password="pass-n")
    token = login("admin_n", "pass-n")
    owner = _create_owner(client, token)
    pet = _create_pet(client, token, owner["id"])
    survivor = _create_pet(client, token, owner["id"], name="Muning")

    for pet_id in (pet["id"], survivor["id"]):
        vaccination = client.post(
            "/api/vaccinations",
            json={
                "petId": pet_id,
                "vaccineName": "Nobivac Rabies",
                "lotNumber": "NR-2291",
                "dateGiven": "2026-03-01",
                "veterinarian": "Dr. Reyes",
                "vetLicenseNo": "PRC-0012",
                "clinicName": "City Vet Office",
            },
            headers=_auth_header(token),
        )
        assert vaccination.status_code == 201

    incident = client.post(
        "/api/incidents",
        json={
            "petId": pet["id"],
            "victimName": "Pedro",
            "victimContact": "09181112222",
            "date": "2026-09-01T08:30:00Z",
            "location": "Market",
            "bodyPartBitten": "Left leg",
        },
        headers=_auth_header(token),
    )
    assert incident.status_code == 201

    delete_resp = client.delete(f"/api/pets/{pet['id']}", headers=_auth_header(token))
    assert delete_resp.status_code == 204

    assert client.get(f"/api/pets/{pet['id']}", headers=_auth_header(token)).status_code == 404
    remaining = client.get("/api/vaccinations", headers=_auth_header(token)).json()
    assert [item["petId"] for item in remaining] == [survivor["id"]]
    unlinked = client.get(f"/api/incidents/{incident.json()['id']}", headers=_auth_header(token))
    assert unlinked.status_code == 200
    assert unlinked.json()["petId"] is None


def test_vaccination_defaults_and_status(
    client: TestClient,
    provision: Callable[..., SetupFinalizeRead],
    login: Callable[[str, str], str],
) -> None:
    provision("Parang", "Marikina", username="admin_p", password="pass-p")
    token = login("admin_p", "pass-p")
    owner = _create_owner(client, token)
    pet = _create_pet(client, token, owner["id"])

    status_resp = client.get(f"/api/pets/{pet['id']}/vaccination-status", headers=_auth_header(token))
    assert status_resp.json()["status"] == "Unvaccinated"
    assert status_resp.json()["isProtected"] is False

    old = (datetime.now(UTC) - timedelta(days=800)).date()
    recent = (datetime.now(UTC) - timedelta(days=10)).date()
    old_resp = client.post(
        "/api/vaccinations",
        json={
            "petId": pet["id"],
            "vaccineName": "Defensor 3",
            "lotNumber": "D3-01",
            "dateGiven": old.isoformat(),
            "veterinarian": "Dr. Cruz",
            "vetLicenseNo": "PRC-1",
            "clinicName": "Vet Clinic",
        },
        headers=_auth_header(token),
    )
    assert old_resp.status_code == 201
    body = old_resp.json()
    assert body["vaccineType"] == "Core - Anti-Rabies"
    assert body["manufacturer"] == "Zoetis"
    assert body["expirationDate"] == body["nextDueDate"]

    expired = client.get(f"/api/pets/{pet['id']}/vaccination-status", headers=_auth_header(token))
    assert expired.json()["status"] == "Expired"

    dewormer = client.post(
        "/api/vaccinations",
        json={
            "petId": pet["id"],
            "vaccineName": "Custom Dewormer",
            "vaccineType": "Deworming",
            "lotNumber": "CD-9",
            "dateGiven": recent.isoformat(),
            "veterinarian": "Dr. Cruz",
            "vetLicenseNo": "PRC-1",
            "clinicName": "Vet Clinic",
        },
        headers=_auth_header(token),
    )
    assert dewormer.status_code == 201
    still_expired = client.get(f"/api/pets/{pet['id']}/vaccination-status", headers=_auth_header(token)).json()
    assert still_expired["status"] == "Expired"
    assert still_expired["isProtected"] is True

    history = client.get(f"/api/pets/{pet['id']}/vaccinations", headers=_auth_header(token)).json()
    assert [item["dateGiven"] for item in history] == [recent.isoformat(), old.isoformat()]

    missing_lot = client.post(
        "/api/vaccinations",
        json={
            "petId": pet["id"],
            "vaccineName": "Rabisin",
            "lotNumber": "",
            "dateGiven": recent.isoformat(),
            "veterinarian": "Dr. Cruz",
            "vetLicenseNo": "PRC-1",
            "clinicName": "Vet Clinic",
        },
        headers=_auth_header(token),
    )
    assert missing_lot.status_code == 422


def test_incident_status_transitions(
    client: TestClient,
    provision: Callable[..., SetupFinalizeRead],
    login: Callable[[str, str], str],
) -> None:
    provision("Sto. Nino", "Marikina", username="admin_sn", password="pass-sn")
    token = login("admin_sn", "pass-sn")
    started = datetime.now(UTC) - timedelta(days=3, hours=2)

    created = client.post(
        "/api/incidents",
        json={
            "victimName": "Ana",
            "victimContact": "0917",
            "date": started.isoformat(),
            "location": "School",
        },
        headers=_auth_header(token),
    )
    assert created.status_code == 201
    incident = created.json()
    assert incident["status"] == "Observation"
    assert incident["observationDay"] == 4
    assert incident["observationOverdue"] is False

    cleared = client.post(
        f"/api/incidents/{incident['id']}/status",
        json={"status": "Cleared"},
        headers=_auth_header(token),
    )
    assert cleared.status_code == 200
    assert cleared.json()["status"] == "Cleared"

    reopened = client.post(
        f"/api/incidents/{incident['id']}/status",
        json={"status": "Observation"},
        headers=_auth_header(token),
    )
    assert reopened.status_code == 409


def test_vaccine_catalog_lists_products(
    client: TestClient,
    provision: Callable[..., SetupFinalizeRead],
    login: Callable[[str, str], str],
) -> None:
    provision("Jesus Dela Pena", "Marikina", username="admin_jdp", password="pass-jdp")
    token = login("admin_jdp", "pass-jdp")
    catalog = client.get("/api/vaccinations/catalog", headers=_auth_header(token))
    assert catalog.status_code == 200
    by_name = {item["name"]: item for item in catalog.json()}
    assert by_name["Drontal Plus"] == {
        "name": "Drontal Plus",
        "manufacturer": "Elanco",
        "type": "Deworming",
        "durationMonths": 3,
    }
    assert client.get("/api/vaccinations/catalog").status_code == 401
