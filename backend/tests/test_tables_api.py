"""
Tests for the tables HTTP endpoints.
"""


class TestListTables:
    def test_list(self, client, waiter_auth_headers, seed_branch, seed_tables):
        response = client.get(f"/api/tables?branch_id={seed_branch.id}", headers=waiter_auth_headers)

        assert response.status_code == 200
        assert [t["number"] for t in response.json()] == [1, 2, 3]

    def test_filter_by_section(self, client, waiter_auth_headers, seed_branch, seed_tables):
        response = client.get(
            f"/api/tables?branch_id={seed_branch.id}&section=Outdoor", headers=waiter_auth_headers
        )
        assert [t["number"] for t in response.json()] == [3]

    def test_filter_by_status(self, client, waiter_auth_headers, seed_branch, seed_tables):
        response = client.get(
            f"/api/tables?branch_id={seed_branch.id}&status=occupied", headers=waiter_auth_headers
        )
        assert response.json() == []

    def test_branch_required(self, client, waiter_auth_headers):
        response = client.get("/api/tables", headers=waiter_auth_headers)
        assert response.status_code == 422


class TestManageTables:
    def test_create(self, client, auth_headers, seed_branch):
        response = client.post(
            "/api/tables",
            json={"branch_id": seed_branch.id, "number": 12, "capacity": 2, "section": "Outdoor"},
            headers=auth_headers,
        )

        assert response.status_code == 201
        body = response.json()
        assert body["number"] == 12
        assert body["status"] == "available"
        assert body["current_order_id"] is None

    def test_create_duplicate(self, client, auth_headers, seed_branch, seed_tables):
        response = client.post(
            "/api/tables", json={"branch_id": seed_branch.id, "number": 1}, headers=auth_headers
        )
        assert response.status_code == 409

    def test_create_invalid_number(self, client, auth_headers, seed_branch):
        response = client.post(
            "/api/tables", json={"branch_id": seed_branch.id, "number": 0}, headers=auth_headers
        )
        assert response.status_code == 422

    def test_waiter_cannot_create(self, client, waiter_auth_headers, seed_branch):
        response = client.post(
            "/api/tables", json={"branch_id": seed_branch.id, "number": 30}, headers=waiter_auth_headers
        )
        assert response.status_code == 403

    def test_waiter_reserves_table(self, client, waiter_auth_headers, seed_table):
        response = client.put(
            f"/api/tables/{seed_table.id}", json={"status": "reserved"}, headers=waiter_auth_headers
        )

        assert response.status_code == 200
        assert response.json()["status"] == "reserved"

    def test_manager_updates_details(self, client, manager_auth_headers, seed_table):
        response = client.put(
            f"/api/tables/{seed_table.id}",
            json={"capacity": 8, "section": "Outdoor"},
            headers=manager_auth_headers,
        )

        assert response.status_code == 200
        assert response.json()["capacity"] == 8
        assert response.json()["section"] == "Outdoor"

    def test_delete(self, client, auth_headers, seed_table):
        url = f"/api/tables/{seed_table.id}"
        response = client.delete(url, headers=auth_headers)
        assert response.status_code == 204

        response = client.get(url, headers=auth_headers)
        assert response.status_code == 404

    def test_delete_occupied_table(self, client, auth_headers, seed_table, seed_menu):
        client.post(
            "/api/orders",
            json={
                "branch_id": seed_table.branch_id,
                "table_id": seed_table.id,
                "items": [{"menu_item_id": seed_menu["salad"].id}],
            },
            headers=auth_headers,
        )

        response = client.delete(f"/api/tables/{seed_table.id}", headers=auth_headers)
        assert response.status_code == 409
