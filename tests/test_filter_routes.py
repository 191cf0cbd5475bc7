"""Tests for the current filter and saved filter routes."""


def test_routes_require_token(client) -> None:
    assert client.get("/api/filters/current").status_code == 401


def test_current_filter_lifecycle(client, auth_headers) -> None:
    default = client.get("/api/filters/current", headers=auth_headers).json()
    assert default["state"] == "open"
    assert default["sort_by"] == "updated"

    updated = client.put(
        "/api/filters/current",
        json={"labels": ["bug"], "sort_by": "comments", "sort_direction": "ascending"},
        headers=auth_headers,
    ).json()
    assert updated["labels"] == ["bug"]
    assert client.get("/api/filters/current", headers=auth_headers).json()["sort_by"] == "comments"

    reset = client.delete("/api/filters/current", headers=auth_headers).json()
    assert reset == default


def test_invalid_filter_rejected(client, auth_headers) -> None:
    response = client.put("/api/filters/current", json={"sort_by": "stars"}, headers=auth_headers)
    assert response.status_code == 422


def test_saved_filter_lifecycle(client, auth_headers) -> None:
    created = client.post(
        "/api/filters/saved",
        json={"name": "Bugs", "filter": {"labels": ["bug"], "state": "all"}},
        headers=auth_headers,
    )
    assert created.status_code == 201
    filter_id = created.json()["id"]

    saved = client.get("/api/filters/saved", headers=auth_headers).json()
    assert [s["name"] for s in saved] == ["Bugs"]

    loaded = client.post(f"/api/filters/saved/{filter_id}/load", headers=auth_headers).json()
    assert loaded["labels"] == ["bug"]
    assert client.get("/api/filters/current", headers=auth_headers).json()["state"] == "all"

    assert client.delete(f"/api/filters/saved/{filter_id}", headers=auth_headers).status_code == 200
    assert client.delete(f"/api/filters/saved/{filter_id}", headers=auth_headers).status_code == 404
    assert client.post(f"/api/filters/saved/{filter_id}/load", headers=auth_headers).status_code == 404


def test_saved_filter_needs_a_name(client, auth_headers) -> None:
    response = client.post("/api/filters/saved", json={"name": "  "}, headers=auth_headers)
    assert response.status_code == 400
