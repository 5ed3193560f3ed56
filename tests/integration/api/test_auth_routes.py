from __future__ import annotations

ADMIN_PASSWORD = "admin-password"


def test_login_returns_token_and_user(client, admin_user):
    res = client.post(
        "/api/auth/login", json={"email": "admin@example.com", "password": ADMIN_PASSWORD}
    )

    assert res.status_code == 200
    data = res.json()["data"]
    assert data["token"]
    assert data["user"] == {
        "id": str(admin_user.id),
        "email": "admin@example.com",
        "name": "Admin",
        "role": "admin",
        "createdAt": data["user"]["createdAt"],
    }
    assert "passwordHash" not in data["user"]


def test_login_token_authenticates(client, admin_user):
    token = client.post(
        "/api/auth/login", json={"email": "admin@example.com", "password": ADMIN_PASSWORD}
    ).json()["data"]["token"]

    me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})

    assert me.status_code == 200
    assert me.json()["data"]["email"] == "admin@example.com"


def test_login_wrong_password(client, admin_user):
    res = client.post(
        "/api/auth/login", json={"email": "admin@example.com", "password": "nope"}
    )

    assert res.status_code == 401
    assert res.json() == {"success": False, "error": "Invalid credentials"}


def test_login_rate_limited(client, admin_user, rules):
    attempts = rules.rate_limits.login.max_attempts
    for _ in range(attempts):
        client.post("/api/auth/login", json={"email": "admin@example.com", "password": "x"})

    res = client.post(
        "/api/auth/login", json={"email": "admin@example.com", "password": ADMIN_PASSWORD}
    )

    assert res.status_code == 429
    assert int(res.headers["Retry-After"]) > 0


def test_me_requires_token(client):
    res = client.get("/api/auth/me")

    assert res.status_code == 401
    assert res.headers["WWW-Authenticate"] == "Bearer"


def test_first_registration_bootstraps_admin(client):
    res = client.post(
        "/api/auth/register",
        json={"email": "first@example.com", "password": "first-password", "name": "First"},
    )

    assert res.status_code == 201
    assert res.json()["data"]["role"] == "admin"


def test_registration_closed_after_bootstrap(client, admin_user):
    res = client.post(
        "/api/auth/register",
        json={"email": "new@example.com", "password": "new-password", "name": "New"},
    )

    assert res.status_code == 403


def test_admin_registers_editor(client, auth_headers):
    body = {"email": "ed@example.com", "password": "editor-password", "name": "Ed"}
    res = client.post("/api/auth/register", json=body, headers=auth_headers)

    assert res.status_code == 201
    assert res.json()["data"]["role"] == "editor"

    again = client.post("/api/auth/register", json=body, headers=auth_headers)
    assert again.status_code == 409


def test_editor_cannot_register(client, admin_user, editor_headers):
    res = client.post(
        "/api/auth/register",
        json={"email": "x@example.com", "password": "x-password", "name": "X"},
        headers=editor_headers,
    )

    assert res.status_code == 403


def test_register_validation(client):
    res = client.post(
        "/api/auth/register",
        json={"email": "first@example.com", "password": "short", "name": "First"},
    )

    assert res.status_code == 400
    assert "at least" in res.json()["error"]
