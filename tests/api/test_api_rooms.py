"""
房间管理 API 单元测试
"""
from fastapi.testclient import TestClient

from hotelmaster.models.ontology import AuditLog


ROOM_PAYLOAD = {
    "room_number": "301",
    "room_type": "suite",
    "capacity": 4,
    "price_per_night": "2500.00",
    "floor": 3,
    "amenities": ["wifi", "jacuzzi"],
}


class TestListRooms:
    def test_list_paginated(self, client: TestClient, auth_headers, sample_room, sample_room_102, sample_room_201):
        response = client.get("/rooms?per_page=2", headers=auth_headers)
        assert response.status_code == 200
        data = response.json()
        assert [r["room_number"] for r in data["items"]] == ["101", "102"]
        assert data["pagination"] == {
            "page": 1, "per_page": 2, "total": 3, "last_page": 2,
            "has_next": True, "has_prev": False,
        }

    def test_filter_by_status(self, client: TestClient, auth_headers, sample_room, sample_room_102):
        client.put(f"/rooms/{sample_room.id}/status", json={"status": "dirty"}, headers=auth_headers)
        response = client.get("/rooms?status=dirty", headers=auth_headers)
        assert [r["room_number"] for r in response.json()["items"]] == ["101"]

    def test_available(self, client: TestClient, auth_headers, sample_reservation, sample_room_102):
        response = client.get("/rooms/available?check_in=2024-06-11&check_out=2024-06-12",
                              headers=auth_headers)
        assert response.status_code == 200
        assert [r["room_number"] for r in response.json()] == ["102"]

    def test_available_invalid_range(self, client: TestClient, auth_headers):
        response = client.get("/rooms/available?check_in=2024-06-12&check_out=2024-06-11",
                              headers=auth_headers)
        assert response.status_code == 400

    def test_get_missing(self, client: TestClient, auth_headers):
        assert client.get("/rooms/999", headers=auth_headers).status_code == 404


class TestRoomWrites:
    def test_create_room(self, client: TestClient, auth_headers, db_session):
        response = client.post("/rooms", json=ROOM_PAYLOAD, headers=auth_headers)
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "available"
        assert data["amenities"] == ["jacuzzi", "wifi"]
        assert db_session.query(AuditLog).filter(AuditLog.action == "room.create").count() == 1

    def test_create_duplicate(self, client: TestClient, auth_headers, sample_room):
        response = client.post("/rooms", json={**ROOM_PAYLOAD, "room_number": "101"}, headers=auth_headers)
        assert response.status_code == 400
        assert response.json()["detail"]["code"] == "duplicate"

    def test_create_negative_price(self, client: TestClient, auth_headers):
        response = client.post("/rooms", json={**ROOM_PAYLOAD, "price_per_night": "-1"}, headers=auth_headers)
        assert response.status_code == 422

    def test_receptionist_cannot_create(self, client: TestClient, receptionist_auth_headers):
        response = client.post("/rooms", json=ROOM_PAYLOAD, headers=receptionist_auth_headers)
        assert response.status_code == 403

    def test_update_room(self, client: TestClient, auth_headers, sample_room):
        response = client.put(f"/rooms/{sample_room.id}", json={"notes": "renovated"}, headers=auth_headers)
        assert response.status_code == 200
        assert response.json()["notes"] == "renovated"

    def test_housekeeping_changes_status(self, client: TestClient, housekeeping_auth_headers, sample_room):
        response = client.put(f"/rooms/{sample_room.id}/status", json={"status": "maintenance"},
                              headers=housekeeping_auth_headers)
        assert response.status_code == 200
        assert response.json()["status"] == "maintenance"

    def test_status_missing_room(self, client: TestClient, auth_headers):
        response = client.put("/rooms/999/status", json={"status": "dirty"}, headers=auth_headers)
        assert response.status_code == 404

    def test_delete_room(self, client: TestClient, auth_headers, sample_room):
        assert client.delete(f"/rooms/{sample_room.id}", headers=auth_headers).status_code == 200
        assert client.get(f"/rooms/{sample_room.id}", headers=auth_headers).status_code == 404

    def test_delete_room_with_reservation(self, client: TestClient, auth_headers, sample_reservation):
        response = client.delete(f"/rooms/{sample_reservation.room_id}", headers=auth_headers)
        assert response.status_code == 400
        assert response.json()["detail"]["code"] == "conflict"
