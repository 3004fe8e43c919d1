from __future__ import annotations

from collections.abc import Callable

from fastapi.testclient import TestClient

from app.domain.models import SetupFinalizeRead


def _auth_header(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def _create_user(
    client: TestClient,
    token: str,
    username: str,
    *,
    role: str = "Staff",
    password: str = "staff-pass",
) -> dict:
    response = client.post(
        "/api/users",
        json={"fullName": f"{username.title()} Reyes", "username": username, "password": password, "role": role},
        headers=_auth_header(token),
    )
    assert response.status_code == 201, response.text
    return response.json()


def test_user_management_and_login_rules(
    client: TestClient,
    provision: Callable[..., SetupFinalizeRead],
    login: Callable[[str, str], str],
) -> None:
    barangay = provision("Kalumpang", "Marikina", username="kap_admin", password="admin-pass")
    admin_token = login("kap_admin", "admin-pass")

    staff = _create_user(client, admin_token, "Jdelacruz")
    assert staff["role"] == "Staff"
    assert staff["status"] == "Active"
    assert staff["barangayId"] == barangay.barangay_id
    assert staff["lastActive"] is None
    assert "password" not in staff
    assert "passwordHash" not in staff

    duplicate = client.post(
        "/api/users",
        json={"fullName": "Other", "username": "JDELACRUZ", "password": "x"},
        headers=_auth_header(admin_token),
    )
    assert duplicate.status_code == 409

    staff_token = login("jdelacruz", "staff-pass")
    listed = client.get("/api/users", headers=_auth_header(staff_token))
    assert listed.status_code == 200
    by_username = {item["username"]: item for item in listed.json()}
    assert by_username["Jdelacruz"]["lastActive"] is not None

    forbidden = client.post(
        "/api/users",
        json={"fullName": "Sneaky", "username": "sneaky", "password": "x"},
        headers=_auth_header(staff_token),
    )
    assert forbidden.status_code == 403

    admin_id = by_username["kap_admin"]["id"]
    self_delete = client.delete(f"/api/users/{admin_id}", headers=_auth_header(admin_token))
    assert self_delete.status_code == 403
    assert self_delete.json()["detail"] == "You cannot delete your own account."

    deactivated = client.patch(
        f"/api/users/{staff['id']}",
        json={"status": "Inactive"},
        headers=_auth_header(admin_token),
    )
    assert deactivated.status_code == 200
    assert deactivated.json()["status"] == "Inactive"

    inactive_login = client.post("/api/auth/login", json={"identifier": "jdelacruz", "password": "staff-pass"})
    assert inactive_login.status_code == 401

    wrong_password = client.post("/api/auth/login", json={"identifier": "kap_admin", "password": "nope"})
    assert wrong_password.status_code == 401

    removed = client.delete(f"/api/users/{staff['id']}", headers=_auth_header(admin_token))
    assert removed.status_code == 204
    assert client.get(f"/api/users/{staff['id']}", headers=_auth_header(admin_token)).status_code == 404


def test_same_username_in_two_barangays_logs_into_the_right_one(
    client: TestClient,
    provision: Callable[..., SetupFinalizeRead],
    login: Callable[[str, str], str],
) -> None:
    first = provision("Dela Paz", "Pasig", username="admin", password="first-pass")
    second = provision("Dela Paz", "Antipolo", username="Admin", password="second-pass")

    first_resp = client.post("/api/auth/login", json={"identifier": "admin", "password": "first-pass"})
    second_resp = client.post("/api/auth/login", json={"identifier": "ADMIN", "password": "second-pass"})
    assert first_resp.json()["user"]["barangayId"] == first.barangay_id
    assert second_resp.json()["user"]["barangayId"] == second.barangay_id
    assert second_resp.json()["settings"]["municipality"] == "Antipolo"


def test_logout_and_me(
    client: TestClient,
    provision: Callable[..., SetupFinalizeRead],
    login: Callable[[str, str], str],
) -> None:
    provision("Sta. Elena", "Marikina", username="elena", password="elena-pass", full_name="Elena Cruz")
    token = login("elena", "elena-pass")

    me = client.get("/api/auth/me", headers=_auth_header(token))
    assert me.status_code == 200
    assert me.json()["fullName"] == "Elena Cruz"
    signed_in = me.json()["lastActive"]

    logout = client.post("/api/auth/logout", headers=_auth_header(token))
    assert logout.status_code == 204
    after = client.get("/api/auth/me", headers=_auth_header(token)).json()
    assert after["lastActive"] >= signed_in


def test_settings_update_requires_admin_and_own_barangay(
    client: TestClient,
    provision: Callable[..., SetupFinalizeRead],
    login: Callable[[str, str], str],
) -> None:
    provision("Sampaloc", "Manila", username="samp_admin", password="admin-pass")
    other = provision("Tondo", "Manila", username="tondo_admin", password="admin-pass")
    admin_token = login("samp_admin", "admin-pass")
    _create_user(client, admin_token, "samp_staff")
    staff_token = login("samp_staff", "staff-pass")

    updated = client.patch(
        "/api/settings",
        json={"reminderDays": 14, "supportEmail": "vet@sampaloc.gov.ph", "emergencyHotline": "8-123-4567"},
        headers=_auth_header(admin_token),
    )
    assert updated.status_code == 200
    assert updated.json()["reminderDays"] == 14
    assert updated.json()["supportEmail"] == "vet@sampaloc.gov.ph"

    staff_view = client.get("/api/settings", headers=_auth_header(staff_token))
    assert staff_view.json()["reminderDays"] == 14
    staff_patch = client.patch("/api/settings", json={"reminderDays": 7}, headers=_auth_header(staff_token))
    assert staff_patch.status_code == 403

    cross = client.patch(
        "/api/settings",
        json={"barangayId": other.barangay_id, "reminderDays": 3},
        headers=_auth_header(admin_token),
    )
    assert cross.status_code == 404

    invalid = client.patch("/api/settings", json={"reminderDays": 0}, headers=_auth_header(admin_token))
    assert invalid.status_code == 422


def test_portal_access_and_stray_workflow(
    client: TestClient,
    provision: Callable[..., SetupFinalizeRead],
    login: Callable[[str, str], str],
) -> None:
    barangay = provision("Barangka", "Mandaluyong", username="bk_admin", password="admin-pass")
    admin_token = login("bk_admin", "admin-pass")
    community_code = client.get("/api/settings", headers=_auth_header(admin_token)).json()["communityCode"]

    unknown = client.post("/api/auth/portal", json={"communityCode": "nope"})
    assert unknown.status_code == 404

    portal_resp = client.post("/api/auth/portal", json={"communityCode": f"  {community_code} "})
    assert portal_resp.status_code == 200
    assert portal_resp.json()["settings"]["barangayId"] == barangay.barangay_id
    portal_token = portal_resp.json()["access_token"]

    assert client.get("/api/pets", headers=_auth_header(portal_token)).status_code == 200
    portal_write = client.post(
        "/api/owners",
        json={"fullName": "Outsider", "contactNumber": "0", "address": "x"},
        headers=_auth_header(portal_token),
    )
    assert portal_write.status_code == 403
    assert client.get("/api/strays/pending", headers=_auth_header(portal_token)).status_code == 403
    assert client.get("/api/auth/me", headers=_auth_header(portal_token)).status_code == 403

    public_report = client.post(
        "/api/strays",
        json={"reporterName": "Concerned Resident", "species": "Dog", "location": "Near the chapel"},
        headers=_auth_header(portal_token),
    )
    assert public_report.status_code == 201
    report = public_report.json()
    assert report["status"] == "Pending"
    assert report["barangayId"] == barangay.barangay_id

    staff_report = client.post(
        "/api/strays",
        json={"reporterName": "Tanod", "species": "Cat", "location": "Plaza", "isEarTipped": True},
        headers=_auth_header(admin_token),
    )
    assert staff_report.json()["status"] == "Reported"

    active_ids = [item["id"] for item in client.get("/api/strays/active", headers=_auth_header(portal_token)).json()]
    assert report["id"] not in active_ids
    assert staff_report.json()["id"] in active_ids
    pending = client.get("/api/strays/pending", headers=_auth_header(admin_token)).json()
    assert [item["id"] for item in pending] == [report["id"]]

    skip = client.post(
        f"/api/strays/{report['id']}/status",
        json={"status": "Captured"},
        headers=_auth_header(admin_token),
    )
    assert skip.status_code == 409

    for target in ("Reported", "Captured", "Resolved"):
        moved = client.post(
            f"/api/strays/{report['id']}/status",
            json={"status": target},
            headers=_auth_header(admin_token),
        )
        assert moved.status_code == 200, moved.text
        assert moved.json()["status"] == target

    active_ids = [item["id"] for item in client.get("/api/strays/active", headers=_auth_header(admin_token)).json()]
    assert report["id"] in active_ids

    regenerated = client.post("/api/settings/community-code", headers=_auth_header(admin_token))
    assert regenerated.status_code == 200
    assert regenerated.json()["communityCode"] != community_code
    stale = client.post("/api/auth/portal", json={"communityCode": community_code})
    assert stale.status_code == 404


def test_rejected_stray_is_terminal(
    client: TestClient,
    provision: Callable[..., SetupFinalizeRead],
    login: Callable[[str, str], str],
) -> None:
    provision("Hulo", "Mandaluyong", username="hulo_admin", password="admin-pass")
    admin_token = login("hulo_admin", "admin-pass")
    code = client.get("/api/settings", headers=_auth_header(admin_token)).json()["communityCode"]
    portal_token = client.post("/api/auth/portal", json={"communityCode": code}).json()["access_token"]

    report = client.post(
        "/api/strays",
        json={"reporterName": "Prank", "species": "Cat", "location": "Nowhere"},
        headers=_auth_header(portal_token),
    ).json()
    rejected = client.post(
        f"/api/strays/{report['id']}/status",
        json={"status": "Rejected"},
        headers=_auth_header(admin_token),
    )
    assert rejected.json()["status"] == "Rejected"
    reopened = client.post(
        f"/api/strays/{report['id']}/status",
        json={"status": "Reported"},
        headers=_auth_header(admin_token),
    )
    assert reopened.status_code == 409


def test_portal_cannot_see_pending_reports_or_contacts(
    client: TestClient,
    provision: Callable[..., SetupFinalizeRead],
    login: Callable[[str, str], str],
) -> None:
    provision("Addition Hills", "Mandaluyong", username="ah_admin", password="admin-pass")
    admin_token = login("ah_admin", "admin-pass")
    code = client.get("/api/settings", headers=_auth_header(admin_token)).json()["communityCode"]
    portal_token = client.post("/api/auth/portal", json={"communityCode": code}).json()["access_token"]

    pending = client.post(
        "/api/strays",
        json={"reporterName": "Resident", "reporterContact": "0917-555-0101", "species": "Dog", "location": "Alley"},
        headers=_auth_header(portal_token),
    ).json()
    assert pending["status"] == "Pending"
    client.post(
        "/api/strays",
        json={"reporterName": "Tanod", "reporterContact": "0918-555-0202", "species": "Cat", "location": "Market"},
        headers=_auth_header(admin_token),
    )

    assert client.get("/api/strays", headers=_auth_header(portal_token)).status_code == 403
    assert client.get(f"/api/strays/{pending['id']}", headers=_auth_header(portal_token)).status_code == 403

    portal_active = client.get("/api/strays/active", headers=_auth_header(portal_token)).json()
    assert [item["status"] for item in portal_active] == ["Reported"]
    assert [item["reporterContact"] for item in portal_active] == [None]

    staff_active = client.get("/api/strays/active", headers=_auth_header(admin_token)).json()
    assert [item["reporterContact"] for item in staff_active] == ["0918-555-0202"]


def test_shared_credentials_log_into_the_oldest_account(
    client: TestClient,
    provision: Callable[..., SetupFinalizeRead],
) -> None:
    first = provision("Ugong", "Pasig", username="kagawad", password="same-pass")
    provision("Ugong", "Valenzuela", username="Kagawad", password="same-pass")

    for _ in range(3):
        response = client.post("/api/auth/login", json={"identifier": "KAGAWAD", "password": "same-pass"})
        assert response.status_code == 200
        assert response.json()["user"]["barangayId"] == first.barangay_id
