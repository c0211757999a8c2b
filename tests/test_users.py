"""
Tests for admin user management and dashboard statistics.
"""

import pytest
from sqlalchemy import func

from conftest import ADMIN_EMAIL, auth_header, login
from storerating.errors import DuplicateEmail
from storerating.models.user import User, UserRole
from storerating.users import service


NEW_USER = {
    "name": "Grace Hopper",
    "email": "grace@example.com",
    "password": "Cobol#59",
    "address": "Arlington",
    "role": "store_owner",
}


class TestUserCrud:

    def test_create_and_fetch(self, client, admin_token):
        headers = auth_header(admin_token)

        created = client.post("/api/users", json=NEW_USER, headers=headers)

        assert created.status_code == 201
        user = created.json()["user"]
        assert user["role"] == "store_owner"
        assert "password" not in user

        fetched = client.get(f"/api/users/{user['id']}", headers=headers).json()
        assert fetched["email"] == "grace@example.com"
        assert fetched["stores"] == []

        # the admin-chosen password works
        assert login(client, "grace@example.com", "Cobol#59")

    def test_list_excludes_password_hash(self, client, admin_token, make_user):
        make_user("listed@example.com")

        users = client.get("/api/users", headers=auth_header(admin_token)).json()

        assert {u["email"] for u in users} == {ADMIN_EMAIL, "listed@example.com"}
        assert all("password_hash" not in u for u in users)

    def test_plain_user_detail_has_no_stores(self, client, admin_token, make_user):
        user = make_user("plain@example.com")

        detail = client.get(f"/api/users/{user.id}", headers=auth_header(admin_token)).json()

        assert detail["stores"] is None

    def test_owner_detail_embeds_store_aggregates(self, client, admin_token, owner_token, user_token, make_store):
        store = make_store(owner_token, "owned@example.com")
        client.post(f"/api/stores/{store['id']}/rate", json={"rating": 4}, headers=auth_header(user_token))

        detail = client.get(f"/api/users/{store['owner_id']}", headers=auth_header(admin_token)).json()

        assert len(detail["stores"]) == 1
        assert detail["stores"][0]["id"] == store["id"]
        assert detail["stores"][0]["average_rating"] == pytest.approx(4)
        assert detail["stores"][0]["total_ratings"] == 1

    def test_update_replaces_all_fields(self, client, admin_token, make_user):
        user = make_user("before@example.com")

        response = client.put(
            f"/api/users/{user.id}",
            json={"name": "After Name", "email": "after@example.com", "role": "admin"},
            headers=auth_header(admin_token),
        )

        assert response.status_code == 200
        updated = response.json()["user"]
        assert updated["email"] == "after@example.com"
        assert updated["role"] == "admin"
        assert updated["address"] is None

    def test_update_to_taken_email(self, client, admin_token, make_user):
        user = make_user("taken-by-me@example.com")

        response = client.put(
            f"/api/users/{user.id}",
            json={"name": "Name", "email": ADMIN_EMAIL, "role": "user"},
            headers=auth_header(admin_token),
        )

        assert response.status_code == 400
        assert response.json()["code"] == "DUPLICATE_EMAIL"

    def test_update_rejects_unknown_role(self, client, admin_token, make_user):
        user = make_user("role@example.com")

        response = client.put(
            f"/api/users/{user.id}",
            json={"name": "Name", "email": "role@example.com", "role": "superuser"},
            headers=auth_header(admin_token),
        )

        assert response.status_code == 400

    @pytest.mark.parametrize("method", ["get", "delete"])
    def test_missing_user_is_404(self, client, admin_token, method):
        response = getattr(client, method)("/api/users/9999", headers=auth_header(admin_token))

        assert response.status_code == 404
        assert response.json()["message"] == "User not found"

    def test_update_missing_user_is_404(self, client, admin_token):
        response = client.put(
            "/api/users/9999",
            json={"name": "Nobody", "email": "nobody@example.com", "role": "user"},
            headers=auth_header(admin_token),
        )

        assert response.status_code == 404

    def test_duplicate_email_inserts_nothing(self, client, db, admin_token):
        headers = auth_header(admin_token)
        client.post("/api/users", json=NEW_USER, headers=headers)

        response = client.post("/api/users", json={**NEW_USER, "name": "Impostor"}, headers=headers)

        assert response.status_code == 400
        assert db.query(func.count(User.id)).filter(User.email == NEW_USER["email"]).scalar() == 1

    def test_constraint_backstops_racing_insert(self, client, db, make_user, monkeypatch):
        make_user("twin@example.com")
        monkeypatch.setattr(service, "_email_taken", lambda *args, **kwargs: False)

        with pytest.raises(DuplicateEmail):
            service.create_user(db, "Twin", "twin@example.com", "Secret#1")

        assert db.query(func.count(User.id)).filter(User.email == "twin@example.com").scalar() == 1


class TestDeleteUser:

    def test_delete_keeps_owned_stores(self, client, admin_token, owner_token, make_store):
        store = make_store(owner_token, "orphan@example.com")
        headers = auth_header(admin_token)

        response = client.delete(f"/api/users/{store['owner_id']}", headers=headers)

        assert response.status_code == 200
        kept = client.get(f"/api/stores/{store['id']}")
        assert kept.status_code == 200
        assert kept.json()["owner_id"] is None

    def test_delete_removes_users_ratings(self, client, db, admin_token, owner_token, make_user, make_store):
        store = make_store(owner_token, "rated-by-gone@example.com")
        rater = make_user("gone@example.com")
        token = login(client, "gone@example.com")
        client.post(f"/api/stores/{store['id']}/rate", json={"rating": 1}, headers=auth_header(token))

        client.delete(f"/api/users/{rater.id}", headers=auth_header(admin_token))

        detail = client.get(f"/api/stores/{store['id']}").json()
        assert detail["total_ratings"] == 0
        assert detail["average_rating"] == 0


class TestDashboardStats:

    def test_counts(self, client, admin_token, owner_token, user_token, make_user, make_store):
        make_user("second-user@example.com")
        store = make_store(owner_token, "stats@example.com")
        client.post(f"/api/stores/{store['id']}/rate", json={"rating": 5}, headers=auth_header(user_token))

        stats = client.get("/api/users/dashboard/stats", headers=auth_header(admin_token)).json()

        assert stats == {
            "total_users": 4,
            "total_stores": 1,
            "total_ratings": 1,
            "total_admins": 1,
            "total_store_owners": 1,
            "total_normal_users": 2,
        }


class TestAdminBootstrap:

    def test_admin_created_once(self, client, db, settings):
        admin = service.ensure_admin(db, "Other", settings.admin_email, "Differ#1")

        assert admin.role is UserRole.ADMIN
        assert admin.name == "Test Admin"
        assert db.query(func.count(User.id)).filter(User.role == UserRole.ADMIN).scalar() == 1
