"""
API tests for system administrator endpoints
"""
import pytest

from store_ratings.models.rating import Rating
from store_ratings.models.user import Role

NEW_USER = {
    "name": "Admin Created Account Name",
    "email": "created@example.com",
    "password": "Secret@123",
    "address": "7 Admin Avenue",
}


@pytest.mark.e2e
class TestAdminUsers:
    def test_create_user_with_role(self, client, admin_headers):
        response = client.post(
            "/api/admin/users", json=dict(NEW_USER, role="store_owner"), headers=admin_headers
        )
        assert response.status_code == 201
        assert response.json()["user"]["role"] == "store_owner"

    def test_create_user_invalid_role(self, client, admin_headers):
        response = client.post(
            "/api/admin/users", json=dict(NEW_USER, role="overlord"), headers=admin_headers
        )
        assert response.status_code == 400

    def test_list_filter_and_paginate(self, client, admin_headers, make_user):
        for _ in range(3):
            make_user(Role.STORE_OWNER)
        make_user(Role.NORMAL_USER)

        body = client.get(
            "/api/admin/users?role=store_owner&limit=2&sort_by=email", headers=admin_headers
        ).json()
        assert body["pagination"] == {"current_page": 1, "total_pages": 2, "total": 3, "limit": 2}
        assert all(u["role"] == "store_owner" for u in body["users"])

    def test_user_detail_with_store(self, client, admin_headers, store_owner, make_store):
        store = make_store(owner=store_owner)
        body = client.get(f"/api/admin/users/{store_owner.id}", headers=admin_headers).json()
        assert body["user"]["store"]["id"] == store.id

    def test_change_role(self, client, admin_headers, normal_user):
        response = client.put(
            f"/api/admin/users/{normal_user.id}/role", json={"role": "store_owner"}, headers=admin_headers
        )
        assert response.status_code == 200
        assert response.json()["role"] == "store_owner"

    def test_delete_user(self, client, test_db, admin_headers, normal_user, make_store, make_rating):
        make_rating(normal_user, make_store(), 3)
        response = client.delete(f"/api/admin/users/{normal_user.id}", headers=admin_headers)
        assert response.status_code == 200
        assert test_db.query(Rating).count() == 0
        assert client.get(f"/api/admin/users/{normal_user.id}", headers=admin_headers).status_code == 404

    def test_cannot_delete_self(self, client, admin_user, admin_headers):
        response = client.delete(f"/api/admin/users/{admin_user.id}", headers=admin_headers)
        assert response.status_code == 400

    def test_user_ratings(self, client, admin_headers, normal_user, make_store, make_rating):
        make_rating(normal_user, make_store(name="Inspected Store"), 1)
        body = client.get(f"/api/admin/users/{normal_user.id}/ratings", headers=admin_headers).json()
        assert [r["store_name"] for r in body["ratings"]] == ["Inspected Store"]


@pytest.mark.e2e
class TestAdminStores:
    def test_create_update_delete(self, client, admin_headers, store_owner):
        created = client.post(
            "/api/admin/stores",
            json={"name": "Admin Store", "email": "admin-store@example.com", "address": "1 Road"},
            headers=admin_headers,
        )
        assert created.status_code == 201
        store_id = created.json()["store"]["id"]

        updated = client.put(
            f"/api/admin/stores/{store_id}",
            json={"address": "2 Road", "owner_id": store_owner.id},
            headers=admin_headers,
        )
        assert updated.status_code == 200
        assert updated.json()["address"] == "2 Road"
        assert updated.json()["owner_id"] == store_owner.id

        assert client.delete(f"/api/admin/stores/{store_id}", headers=admin_headers).status_code == 200
        assert client.get(f"/api/stores/{store_id}").status_code == 404

    def test_duplicate_store_email(self, client, admin_headers, make_store):
        existing = make_store()
        response = client.post(
            "/api/admin/stores",
            json={"name": "Dup", "email": existing.email, "address": "1 Road"},
            headers=admin_headers,
        )
        assert response.status_code == 400
        assert response.json()["detail"] == "Store with this email already exists"

    def test_owner_must_be_store_owner(self, client, admin_headers, normal_user):
        response = client.post(
            "/api/admin/stores",
            json={"name": "Shop", "email": "shop@example.com", "address": "1 Road", "owner_id": normal_user.id},
            headers=admin_headers,
        )
        assert response.status_code == 400
        assert response.json()["detail"] == "Owner must have store_owner role"

    def test_list_with_owner_names(self, client, admin_headers, store_owner, make_store):
        make_store(name="Owned Store", owner=store_owner)
        make_store(name="Ownerless Store")
        body = client.get("/api/admin/stores?sort_by=email", headers=admin_headers).json()
        owners = {s["name"]: s["owner_name"] for s in body["stores"]}
        assert owners == {"Owned Store": store_owner.name, "Ownerless Store": None}

    def test_delete_any_rating(self, client, admin_headers, normal_user, make_store, make_rating):
        store = make_store()
        rating = make_rating(normal_user, store, 4)
        response = client.delete(f"/api/admin/ratings/{rating.id}", headers=admin_headers)
        assert response.status_code == 200
        assert response.json()["store_stats"]["total_ratings"] == 0
        assert client.delete(f"/api/admin/ratings/{rating.id}", headers=admin_headers).status_code == 404


@pytest.mark.e2e
class TestAdminDashboards:
    def test_dashboard(self, client, admin_headers, normal_user, make_store, make_rating):
        make_rating(normal_user, make_store(name="Top Store"), 5)
        body = client.get("/api/admin/dashboard", headers=admin_headers).json()
        assert body["statistics"]["total_users"] == 2
        assert body["statistics"]["total_ratings"] == 1
        assert body["analytics"]["top_stores"][0]["name"] == "Top Store"

    def test_analytics(self, client, admin_headers):
        body = client.get("/api/admin/analytics?period=7", headers=admin_headers).json()
        assert body["period"] == 7
        assert len(body["user_engagement"]) == 3
