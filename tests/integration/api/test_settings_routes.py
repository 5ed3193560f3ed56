from __future__ import annotations


def test_settings_require_auth(client):
    assert client.get("/api/settings").status_code == 401
    assert client.get("/api/settings/sidebar").status_code == 401
    assert client.put("/api/settings/sidebar", json={"value": 1}).status_code == 401
    assert client.delete("/api/settings/sidebar").status_code == 401


def test_missing_key_is_null(client, auth_headers):
    res = client.get("/api/settings/sidebar", headers=auth_headers)

    assert res.status_code == 200
    assert res.json() == {"success": True, "data": None}


def test_put_then_get(client, auth_headers):
    value = {"showNewsletter": True, "links": [{"label": "GitHub", "url": "https://x"}]}

    put = client.put("/api/settings/sidebar", json={"value": value}, headers=auth_headers)
    assert put.status_code == 200
    assert put.json()["data"] == value

    got = client.get("/api/settings/sidebar", headers=auth_headers).json()["data"]
    assert got == value


def test_put_requires_value_key(client, auth_headers):
    res = client.put("/api/settings/sidebar", json={"other": 1}, headers=auth_headers)

    assert res.status_code == 400
    assert res.json()["error"] == "Value is required"


def test_null_value_is_allowed(client, auth_headers):
    res = client.put("/api/settings/banner", json={"value": None}, headers=auth_headers)

    assert res.status_code == 200
    assert res.json()["data"] is None


def test_list_all(client, auth_headers):
    client.put("/api/settings/a", json={"value": 1}, headers=auth_headers)
    client.put("/api/settings/b", json={"value": [True]}, headers=auth_headers)

    res = client.get("/api/settings", headers=auth_headers)

    assert res.json()["data"] == {"a": 1, "b": [True]}


def test_delete(client, auth_headers):
    client.put("/api/settings/a", json={"value": 1}, headers=auth_headers)

    assert client.delete("/api/settings/a", headers=auth_headers).status_code == 200
    res = client.delete("/api/settings/a", headers=auth_headers)
    assert res.status_code == 404
    assert res.json()["error"] == "Setting not found"
