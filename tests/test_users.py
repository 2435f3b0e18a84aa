"""Tests for admin user management under /api/auth/users."""
import pytest
from fastapi import HTTPException

from app.core.auth import CurrentUser
from app.models.admin_user import AdminUser
from app.services.user_service import UserService
from conftest import make_token

URL = "/api/auth/users"


def new_user_payload(**overrides):
    payload = {
        "username": "organizadora",
        "email": "organizadora@fiesta.mx",
        "password": "password123",
        "role": "editor",
    }
    payload.update(overrides)
    return payload


class TestUserAccess:
    def test_editor_gets_403(self, client, editor_headers):
        assert client.get(URL, headers=editor_headers).status_code == 403
        assert client.post(URL, json=new_user_payload(), headers=editor_headers).status_code == 403

    def test_anonymous_gets_401(self, client):
        assert client.get(URL).status_code == 401


class TestUserCrud:
    def test_list_is_paginated_and_hides_hashes(self, client, admin_headers, editor_user):
        body = client.get(f"{URL}?page=1&limit=1", headers=admin_headers).json()

        assert body["pagination"] == {"page": 1, "limit": 1, "total": 2, "total_pages": 2}
        assert len(body["data"]) == 1
        assert "password_hash" not in body["data"][0]

    def test_create_user(self, client, db_session, admin_headers):
        response = client.post(URL, json=new_user_payload(), headers=admin_headers)

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["username"] == "organizadora"
        assert data["role"] == "editor"
        assert db_session.query(AdminUser).filter(AdminUser.username == "organizadora").count() == 1

    def test_create_validates_fields(self, client, admin_headers):
        assert client.post(URL, json=new_user_payload(username="ab"), headers=admin_headers).status_code == 400
        assert client.post(URL, json=new_user_payload(email="no-es-correo"), headers=admin_headers).status_code == 400
        assert client.post(URL, json=new_user_payload(password="corta"), headers=admin_headers).status_code == 400
        assert client.post(URL, json=new_user_payload(role="owner"), headers=admin_headers).status_code == 400

    def test_duplicate_username_or_email_returns_409(self, client, admin_headers, editor_user):
        duplicate_name = client.post(URL, json=new_user_payload(username="editor"), headers=admin_headers)
        duplicate_email = client.post(URL, json=new_user_payload(email="editor@fiesta.mx"), headers=admin_headers)

        assert duplicate_name.status_code == 409
        assert duplicate_email.status_code == 409

    def test_get_missing_user_returns_404(self, client, admin_headers):
        assert client.get(f"{URL}/999", headers=admin_headers).status_code == 404

    def test_update_user_keeps_password_when_omitted(self, client, admin_headers, editor_user):
        response = client.put(
            f"{URL}/{editor_user.id}",
            json={"username": "editora", "email": "editora@fiesta.mx", "role": "admin", "is_active": True},
            headers=admin_headers,
        )

        assert response.status_code == 200
        assert response.json()["data"]["username"] == "editora"
        assert response.json()["data"]["role"] == "admin"

        login = client.post("/api/auth/login", json={"username": "editora", "password": "editor-pass-1"})
        assert login.status_code == 200

    def test_update_conflict_with_other_user_returns_409(self, client, admin_headers, editor_user):
        response = client.put(
            f"{URL}/{editor_user.id}",
            json={"username": "admin", "email": "editor@fiesta.mx", "role": "editor"},
            headers=admin_headers,
        )

        assert response.status_code == 409


class TestUserDeletion:
    def test_delete_editor(self, client, db_session, admin_headers, editor_user):
        response = client.delete(f"{URL}/{editor_user.id}", headers=admin_headers)

        assert response.status_code == 200
        assert db_session.query(AdminUser).filter(AdminUser.username == "editor").count() == 0

    def test_delete_admin_when_another_admin_remains(self, client, db_session, admin_headers, create_user):
        jefa = create_user("jefa", role="admin")
        jefa_id = jefa.id

        response = client.delete(f"{URL}/{jefa_id}", headers=admin_headers)

        assert response.status_code == 200
        db_session.expunge_all()
        assert db_session.get(AdminUser, jefa_id) is None

    def test_protected_admin_account_cannot_be_deleted(self, client, admin_user, create_user):
        other_admin = create_user("jefa", role="admin")
        headers = {"Authorization": f"Bearer {make_token(other_admin)}"}

        response = client.delete(f"{URL}/{admin_user.id}", headers=headers)

        assert response.status_code == 400

    def test_protected_name_is_case_insensitive(self, client, admin_user, create_user):
        shouty = create_user("ADMIN", email="shouty@fiesta.mx", role="editor")
        headers = {"Authorization": f"Bearer {make_token(admin_user)}"}

        response = client.delete(f"{URL}/{shouty.id}", headers=headers)

        assert response.status_code == 400

    def test_cannot_delete_self(self, client, create_user):
        jefa = create_user("jefa", role="admin")
        create_user("otra", role="admin")
        headers = {"Authorization": f"Bearer {make_token(jefa)}"}

        response = client.delete(f"{URL}/{jefa.id}", headers=headers)

        assert response.status_code == 400

    def test_cannot_delete_last_active_admin(self, db_session, create_user):
        # Over HTTP the caller is always a second active admin, so exercise the guard directly
        jefa = create_user("jefa", role="admin")
        create_user("retirada", role="admin", is_active=False)
        system = CurrentUser(user_id=9999, username="system", role="admin")

        with pytest.raises(HTTPException) as exc_info:
            UserService(db_session).delete_user(jefa.id, system)

        assert exc_info.value.status_code == 400
        assert "last active administrator" in exc_info.value.detail

    def test_delete_missing_user_returns_404(self, client, admin_headers):
        assert client.delete(f"{URL}/999", headers=admin_headers).status_code == 404
