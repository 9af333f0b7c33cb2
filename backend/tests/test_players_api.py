"""
Tests for the player registry endpoints.
"""

from fastapi.testclient import TestClient


def _create(client: TestClient, **fields) -> dict:
    payload = {"name": "Player", "level": 3}
    payload.update(fields)
    response = client.post("/api/players", json=payload)
    assert response.status_code == 201, response.text
    return response.json()


def test_create_player(client: TestClient):
    player = _create(client, name="  Linh  ", alias="LN", gender="female", primary_category="double")

    assert player["id"] > 0
    assert player["name"] == "Linh"
    assert player["gender"] == "female"
    assert player["primary_category"] == "double"
    assert player["active"] is True


def test_create_player_requires_name(client: TestClient):
    response = client.post("/api/players", json={"name": "   "})
    assert response.status_code == 422


def test_create_player_rejects_unknown_category(client: TestClient):
    response = client.post("/api/players", json={"name": "X", "primary_category": "mixed"})
    assert response.status_code == 422


def test_list_players_sorted_and_filtered(client: TestClient):
    _create(client, name="Minh")
    _create(client, name="anh", alias="Tiger")
    _create(client, name="Bao", active=False)

    names = [p["name"] for p in client.get("/api/players").json()]
    assert names == ["anh", "Bao", "Minh"]

    by_alias = client.get("/api/players", params={"q": "tig"}).json()
    assert [p["name"] for p in by_alias] == ["anh"]

    active = client.get("/api/players", params={"active": "true"}).json()
    assert {p["name"] for p in active} == {"anh", "Minh"}


def test_patch_player(client: TestClient):
    player = _create(client, name="Quan")
    response = client.patch(f"/api/players/{player['id']}", json={"level": 7, "active": False})

    assert response.status_code == 200
    body = response.json()
    assert body["level"] == 7
    assert body["active"] is False
    assert body["name"] == "Quan"


def test_patch_requires_a_field(client: TestClient):
    player = _create(client)
    response = client.patch(f"/api/players/{player['id']}", json={})
    assert response.status_code == 422


def test_patch_unknown_player(client: TestClient):
    response = client.patch("/api/players/999", json={"level": 2})

    assert response.status_code == 404
    assert response.json()["detail"]["code"] == "PlayerNotFound"
