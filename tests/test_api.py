"""
End-to-end tests for the JSON routes.

The admin is bootstrapped before the client starts so the test knows its
password; startup then finds the admin slot filled and skips creation.
"""

from datetime import date

import pytest
from fastapi.testclient import TestClient

from drivelog.auth.user_auth import generate_password, hash_password
from drivelog.services.bootstrap import initialize
from drivelog.stores.user_store import UserStore
from drivelog.utils.config import Settings
from web.auth_deps import SESSION_COOKIE_NAME
from web.main import create_app

ADMIN_EMAIL = "admin@localhost"
DRIVER_EMAIL = "driver@example.com"
DRIVER_PASSWORD = "driver-pass-1"


@pytest.fixture
def admin_password(tmp_path):
    return initialize(UserStore(tmp_path), hash_password, generate_password).admin_password


@pytest.fixture
def client(tmp_path, admin_password):
    app = create_app(Settings(data_dir=tmp_path), configure_logs=False)
    with TestClient(app) as c:
        yield c


def login(client, email, password):
    client.cookies.clear()
    response = client.post("/auth/login", json={"email": email, "password": password})
    assert response.status_code == 200, response.text
    return response.json()


def create_driver(client, admin_password, **fields):
    login(client, ADMIN_EMAIL, admin_password)
    payload = {
        "email": DRIVER_EMAIL,
        "name": "Dana Driver",
        "password": DRIVER_PASSWORD,
        "required_day_hours": 10,
        "required_night_hours": 5,
    }
    payload.update(fields)
    response = client.post("/admin/users", json=payload)
    assert response.status_code == 201, response.text
    return response.json()["user"]


def test_health(client):
    assert client.get("/health").json()["status"] == "ok"


def test_startup_creates_csrf_key_and_keeps_admin(client, tmp_path):
    assert len(client.app.state.csrf_key) == 32
    assert (tmp_path / ".csrf_key").exists()
    assert client.app.state.user_store.get_admin().email == ADMIN_EMAIL


def test_admin_login_sets_cookie(client, admin_password):
    body = login(client, ADMIN_EMAIL, admin_password)

    assert body["redirect"] == "/admin/dashboard"
    assert body["user"]["role"] == "admin"
    assert "password_hash" not in body["user"]
    assert client.cookies.get(SESSION_COOKIE_NAME) == body["token"]

    me = client.get("/auth/me").json()
    assert me["email"] == ADMIN_EMAIL
    assert client.get("/").json()["redirect"] == "/admin/dashboard"


def test_bad_login(client):
    response = client.post("/auth/login", json={"email": ADMIN_EMAIL, "password": "nope-nope"})
    assert response.status_code == 401

    response = client.post("/auth/login", json={"email": "", "password": ""})
    assert response.status_code == 400
    assert response.json()["errors"]


def test_unauthenticated_requests(client):
    assert client.get("/auth/me").status_code == 401
    assert client.get("/driver/dashboard").status_code == 401
    assert client.get("/admin/users").status_code == 401
    assert client.get("/").json()["redirect"] == "/auth/login"


def test_bearer_token_is_accepted(client, admin_password):
    token = login(client, ADMIN_EMAIL, admin_password)["token"]
    client.cookies.clear()
    response = client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 200


def test_role_checks(client, admin_password):
    create_driver(client, admin_password)

    # Admin cannot use driver pages
    assert client.get("/driver/dashboard").status_code == 403

    login(client, DRIVER_EMAIL, DRIVER_PASSWORD)
    assert client.get("/admin/dashboard").status_code == 403
    assert client.get("/admin/users").status_code == 403


def test_driver_logs_hours_and_sees_dashboard(client, admin_password):
    create_driver(client, admin_password)
    body = login(client, DRIVER_EMAIL, DRIVER_PASSWORD)
    assert body["redirect"] == "/driver/dashboard"

    today = date.today().isoformat()
    response = client.post(
        "/driver/log",
        json={"date": today, "day_hours": 2, "day_minutes": 30, "night_minutes": 30},
    )
    assert response.status_code == 200, response.text
    logged = response.json()
    assert logged["has_entry"] is True
    assert logged["celebrate"] is True
    assert logged["entry"] == {"day_hours": 2.5, "night_hours": 0.5}
    assert logged["stats"]["total_hours"] == 3.0

    dashboard = client.get("/driver/dashboard", params={"celebrate": "true"}).json()
    assert dashboard["show_fireworks"] is True
    assert dashboard["stats"]["day_progress"] == 25
    cells = {d["date"]: d for d in dashboard["calendar"]["days"]}
    assert cells[today]["has_entry"] is True
    assert cells[today]["is_today"] is True
    assert cells[today]["entry"]["day_hours"] == 2.5


def test_driver_dashboard_month_navigation(client, admin_password):
    create_driver(client, admin_password)
    login(client, DRIVER_EMAIL, DRIVER_PASSWORD)

    calendar = client.get("/driver/dashboard", params={"year": 2024, "month": 2}).json()["calendar"]
    assert (calendar["year"], calendar["month"]) == (2024, 2)
    assert (calendar["prev_month"], calendar["next_month"]) == (1, 3)

    fallback = client.get("/driver/dashboard", params={"year": 2024, "month": 13}).json()["calendar"]
    assert fallback["month"] == date.today().month


def test_driver_log_validation_and_delete(client, admin_password):
    create_driver(client, admin_password)
    login(client, DRIVER_EMAIL, DRIVER_PASSWORD)

    bad = client.post("/driver/log", json={"date": "2024-01-01", "day_hours": 20, "night_hours": 10})
    assert bad.status_code == 400

    client.post("/driver/log", json={"date": "2024-01-01", "day_hours": 1})
    removed = client.post("/driver/log", json={"date": "2024-01-01", "delete": True}).json()
    assert removed["has_entry"] is False
    assert removed["celebrate"] is False


def test_driver_profile_update(client, admin_password):
    create_driver(client, admin_password)
    login(client, DRIVER_EMAIL, DRIVER_PASSWORD)

    response = client.post(
        "/driver/profile",
        json={"name": "Dana D", "current_password": DRIVER_PASSWORD, "new_password": "brand-new-pass"},
    )
    assert response.status_code == 200
    assert response.json()["user"]["name"] == "Dana D"

    login(client, DRIVER_EMAIL, "brand-new-pass")


def test_admin_manages_users(client, admin_password):
    driver = create_driver(client, admin_password)

    dashboard = client.get("/admin/dashboard").json()
    assert [d["email"] for d in dashboard["drivers"]] == [DRIVER_EMAIL]
    assert dashboard["drivers"][0]["stats"]["total_hours"] == 0

    listed = client.get("/admin/users").json()["users"]
    assert [u["id"] for u in listed] == [driver["id"]]

    detail = client.get(f"/admin/users/{driver['id']}").json()
    assert detail["can_change_password"] is True
    assert detail["user"]["stats"]["required_day_hours"] == 10

    updated = client.put(
        f"/admin/users/{driver['id']}",
        json={"email": DRIVER_EMAIL, "name": "Renamed", "required_day_hours": 40},
    )
    assert updated.json()["user"]["name"] == "Renamed"

    hours = client.post(
        f"/admin/users/{driver['id']}/hours",
        json={"date": "2024-03-01", "night_hours": 1, "night_minutes": 15},
    ).json()
    assert hours["user"]["driving_log"] == {"2024-03-01": {"day_hours": 0.0, "night_hours": 1.25}}
    assert client.get(f"/admin/users/{driver['id']}/hours").json()["user"]["driving_log"]

    duplicate = client.post(
        "/admin/users", json={"email": DRIVER_EMAIL, "name": "Dup", "password": "password123"}
    )
    assert duplicate.status_code == 400

    assert client.delete(f"/admin/users/{driver['id']}").json()["status"] == "success"
    assert client.get(f"/admin/users/{driver['id']}").status_code == 404


def test_deleted_driver_session_is_revoked(client, admin_password):
    driver = create_driver(client, admin_password)
    token = login(client, DRIVER_EMAIL, DRIVER_PASSWORD)["token"]

    login(client, ADMIN_EMAIL, admin_password)
    client.delete(f"/admin/users/{driver['id']}")

    client.cookies.clear()
    response = client.get("/driver/dashboard", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401


def test_deleting_last_admin_conflicts(client, admin_password):
    me = login(client, ADMIN_EMAIL, admin_password)["user"]
    response = client.delete(f"/admin/users/{me['id']}")
    assert response.status_code == 409


def test_admin_profile_update(client, admin_password):
    login(client, ADMIN_EMAIL, admin_password)
    response = client.post("/admin/profile", json={"name": "Head Admin"})
    assert response.status_code == 200
    assert client.get("/admin/profile").json()["user"]["name"] == "Head Admin"


def test_logout(client, admin_password):
    login(client, ADMIN_EMAIL, admin_password)
    assert client.post("/auth/logout").json()["redirect"] == "/auth/login"
    assert client.get("/auth/me").status_code == 401


def test_corrupt_session_file_is_a_server_error(client, admin_password, tmp_path):
    login(client, ADMIN_EMAIL, admin_password)
    (tmp_path / "sessions.json").write_text("not json", encoding="utf-8")
    response = client.get("/auth/me")
    assert response.status_code == 500
    assert "not json" not in response.text
