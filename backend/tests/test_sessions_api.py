"""
Tests for the training session and check-in endpoints.
"""

from fastapi.testclient import TestClient


def _player(client: TestClient, name: str, **fields) -> int:
    response = client.post("/api/players", json={"name": name, **fields})
    assert response.status_code == 201
    return response.json()["id"]


def test_no_active_session(client: TestClient):
    response = client.get("/api/session/active")
    assert response.status_code == 200
    assert response.json() is None


def test_start_returns_running_session(client: TestClient):
    first = client.post("/api/session/start").json()
    second = client.post("/api/session/start").json()

    assert first["status"] == "active"
    assert first["id"] == second["id"]
    assert client.get("/api/session/active").json()["id"] == first["id"]


def test_end_session(client: TestClient):
    client.post("/api/session/start")
    response = client.post("/api/session/end")

    assert response.status_code == 200
    assert response.json()["status"] == "ended"
    assert response.json()["ended_at"] is not None
    assert client.get("/api/session/active").json() is None


def test_end_without_session(client: TestClient):
    response = client.post("/api/session/end")

    assert response.status_code == 409
    assert response.json()["detail"]["code"] == "NoActiveSession"


def test_check_in_requires_session(client: TestClient):
    player_id = _player(client, "Hoa")
    response = client.post("/api/session/check-ins", json={"player_id": player_id})

    assert response.status_code == 409
    assert response.json()["detail"]["code"] == "NoActiveSession"


def test_check_in_flow(client: TestClient):
    client.post("/api/session/start")
    first = _player(client, "Zed", level=2, gender="male", primary_category="single")
    second = _player(client, "Anna", level=5)

    assert client.post("/api/session/check-ins", json={"player_id": first}).status_code == 201
    response = client.post("/api/session/check-ins", json={"player_id": second, "max_rounds": 1})
    assert response.status_code == 201
    assert response.json()["max_rounds"] == 1

    roster = client.get("/api/session/check-ins").json()
    # Check-in order, not name order
    assert [p["player_id"] for p in roster] == [first, second]
    assert roster[0]["gender"] == "male"
    assert roster[1]["max_rounds"] == 1


def test_duplicate_check_in(client: TestClient):
    client.post("/api/session/start")
    player_id = _player(client, "Tam")
    client.post("/api/session/check-ins", json={"player_id": player_id})

    response = client.post("/api/session/check-ins", json={"player_id": player_id})
    assert response.status_code == 409
    assert response.json()["detail"]["code"] == "CheckInError"


def test_check_in_unknown_player(client: TestClient):
    client.post("/api/session/start")
    response = client.post("/api/session/check-ins", json={"player_id": 4242})
    assert response.status_code == 404


def test_check_in_rejects_zero_rounds(client: TestClient):
    client.post("/api/session/start")
    player_id = _player(client, "Vy")
    response = client.post("/api/session/check-ins", json={"player_id": player_id, "max_rounds": 0})
    assert response.status_code == 422


def test_remove_check_in(client: TestClient):
    client.post("/api/session/start")
    player_id = _player(client, "Khoa")
    client.post("/api/session/check-ins", json={"player_id": player_id})

    assert client.delete(f"/api/session/check-ins/{player_id}").status_code == 204
    assert client.get("/api/session/check-ins").json() == []

    response = client.delete(f"/api/session/check-ins/{player_id}")
    assert response.status_code == 400
    assert response.json()["detail"]["code"] == "NotCheckedIn"
