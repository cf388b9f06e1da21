"""
客人管理 API 单元测试
"""
from fastapi.testclient import TestClient


class TestCustomersApi:
    def test_create_and_get(self, client: TestClient, receptionist_auth_headers):
        response = client.post("/customers", json={
            "first_name": "Zeynep", "last_name": "Aydın", "phone": "05551234567",
            "email": "zeynep@example.com",
        }, headers=receptionist_auth_headers)
        assert response.status_code == 200
        customer = response.json()
        assert customer["country"] == "Türkiye"

        response = client.get(f"/customers/{customer['id']}", headers=receptionist_auth_headers)
        assert response.json()["email"] == "zeynep@example.com"

    def test_create_requires_phone(self, client: TestClient, auth_headers):
        response = client.post("/customers", json={"first_name": "A", "last_name": "B"}, headers=auth_headers)
        assert response.status_code == 422

    def test_duplicate_phone(self, client: TestClient, auth_headers, sample_customer):
        response = client.post("/customers", json={
            "first_name": "A", "last_name": "B", "phone": sample_customer.phone,
        }, headers=auth_headers)
        assert response.status_code == 400
        assert response.json()["detail"]["code"] == "duplicate"

    def test_list_and_search(self, client: TestClient, auth_headers, sample_customer, sample_customer_2):
        data = client.get("/customers", headers=auth_headers).json()
        assert data["pagination"]["total"] == 2
        assert data["pagination"]["per_page"] == 20

        response = client.get("/customers/search?keyword=Mehmet", headers=auth_headers)
        assert [c["id"] for c in response.json()] == [sample_customer_2.id]

    def test_update(self, client: TestClient, auth_headers, sample_customer):
        response = client.put(f"/customers/{sample_customer.id}", json={"city": "Izmir"}, headers=auth_headers)
        assert response.status_code == 200
        assert response.json()["city"] == "Izmir"

    def test_update_missing(self, client: TestClient, auth_headers):
        assert client.put("/customers/999", json={"city": "Izmir"}, headers=auth_headers).status_code == 404

    def test_receptionist_cannot_delete(self, client: TestClient, receptionist_auth_headers, sample_customer):
        response = client.delete(f"/customers/{sample_customer.id}", headers=receptionist_auth_headers)
        assert response.status_code == 403

    def test_delete_with_reservations(self, client: TestClient, auth_headers, sample_reservation):
        response = client.delete(f"/customers/{sample_reservation.customer_id}", headers=auth_headers)
        assert response.status_code == 400

    def test_history(self, client: TestClient, auth_headers, sample_reservation):
        client.delete(f"/reservations/{sample_reservation.id}", headers=auth_headers)
        response = client.get(f"/customers/{sample_reservation.customer_id}/history", headers=auth_headers)
        assert response.status_code == 200
        history = response.json()
        assert history[0]["status"] == "cancelled"
        assert history[0]["room_number"] == "101"

    def test_history_missing_customer(self, client: TestClient, auth_headers):
        assert client.get("/customers/999/history", headers=auth_headers).status_code == 404
