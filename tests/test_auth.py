"""Tests for authentication endpoints and token verification."""

from datetime import datetime, timedelta, timezone

import jwt
import pytest


def _register(client, username="newbie", password="password123"):
    return client.post("/auth/register", json={"username": username, "password": password})


class TestRegister:
    def test_register_success(self, client, db):
        response = _register(client)
        assert response.status_code == 200
        data = response.get_json()
        assert data["user"]["username"] == "newbie"
        assert isinstance(data["user"]["id"], int)
        assert data["token"]

    def test_register_token_carries_user(self, client, app, db):
        data = _register(client).get_json()
        payload = jwt.decode(data["token"], app.config["JWT_SECRET_KEY"], algorithms=["HS256"])
        assert payload["user_id"] == data["user"]["id"]
        assert payload["username"] == "newbie"

    def test_token_expires_after_one_day(self, client, app, db):
        data = _register(client).get_json()
        payload = jwt.decode(data["token"], app.config["JWT_SECRET_KEY"], algorithms=["HS256"])
        assert payload["exp"] - payload["iat"] == 24 * 3600

    def test_register_duplicate_username(self, client, user):
        from taskboard.models import User

        before = User.query.count()
        response = _register(client, username="alice")
        assert response.status_code == 400
        assert response.get_json()["error"] == "Username already exists"
        assert User.query.count() == before

    def test_register_missing_fields(self, client, db):
        response = client.post("/auth/register", json={})
        assert response.status_code == 400
        assert "username" in response.get_json()["fields"]

    def test_register_short_password(self, client, db):
        response = _register(client, password="123")
        assert response.status_code == 400

    def test_password_is_hashed(self, client, db):
        from taskboard.models import User

        _register(client)
        stored = User.query.filter_by(username="newbie").one()
        assert stored.password_hash != "password123"
        assert stored.check_password("password123")


class TestLogin:
    def test_login_success(self, client, user):
        response = client.post(
            "/auth/login", json={"username": "alice", "password": "password123"}
        )
        assert response.status_code == 200
        data = response.get_json()
        assert data["user"] == {"id": user.id, "username": "alice"}
        assert data["token"]

    def test_login_wrong_password(self, client, user):
        response = client.post(
            "/auth/login", json={"username": "alice", "password": "wrongpassword"}
        )
        assert response.status_code == 400
        assert response.get_json()["error"] == "Invalid username or password"

    def test_login_nonexistent_user(self, client, db):
        response = client.post(
            "/auth/login", json={"username": "nobody", "password": "password123"}
        )
        assert response.status_code == 400

    def test_login_under_api_prefix(self, client, user):
        response = client.post(
            "/api/auth/login", json={"username": "alice", "password": "password123"}
        )
        assert response.status_code == 200


class TestCurrentUser:
    def test_me_authenticated(self, client, user, auth_headers):
        response = client.get("/auth/me", headers=auth_headers)
        assert response.status_code == 200
        assert response.get_json()["username"] == "alice"

    def test_me_unauthenticated(self, client, db):
        response = client.get("/auth/me")
        assert response.status_code == 401


class TestTokenVerification:
    def _token(self, app, secret=None, **claims):
        now = datetime.now(timezone.utc)
        payload = {"user_id": 1, "username": "alice", "iat": now, "exp": now + timedelta(hours=1)}
        payload.update(claims)
        return jwt.encode(payload, secret or app.config["JWT_SECRET_KEY"], algorithm="HS256")

    def test_missing_header(self, client, db):
        response = client.get("/tasks")
        assert response.status_code == 401
        assert response.get_json()["error"] == "No token provided"

    def test_wrong_scheme(self, client, auth_token):
        response = client.get("/tasks", headers={"Authorization": f"Token {auth_token}"})
        assert response.status_code == 401

    def test_expired_token(self, client, app, user):
        past = datetime.now(timezone.utc) - timedelta(days=2)
        token = self._token(app, user_id=user.id, iat=past, exp=past + timedelta(days=1))
        response = client.get("/tasks", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401

    def test_tampered_token(self, client, auth_token):
        header, payload, signature = auth_token.split(".")
        forged = f"{header}.{payload}.{signature[::-1]}"
        response = client.get("/tasks", headers={"Authorization": f"Bearer {forged}"})
        assert response.status_code == 401

    def test_token_signed_with_other_secret(self, client, app, user):
        token = self._token(app, user_id=user.id, secret="not-the-server-secret")
        response = client.get("/tasks", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401

    def test_token_without_user_id(self, client, app, user):
        token = self._token(app, user_id=None)
        response = client.get("/tasks", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401

    def test_token_for_deleted_user(self, client, app, db):
        token = self._token(app, user_id=999)
        response = client.get("/tasks", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401
        assert response.get_json()["error"] == "Unauthorized: User not found"

    def test_rejected_before_store_logic(self, client, db):
        from unittest.mock import patch

        with patch("taskboard.services.tasks.list_tasks") as mock_list:
            response = client.get("/tasks", headers={"Authorization": "Bearer garbage"})

        assert response.status_code == 401
        mock_list.assert_not_called()

    @pytest.mark.parametrize("claim", ["exp", "iat"])
    def test_token_missing_required_claim(self, client, app, user, claim):
        now = datetime.now(timezone.utc)
        payload = {"user_id": user.id, "username": "alice", "iat": now, "exp": now + timedelta(hours=1)}
        del payload[claim]
        token = jwt.encode(payload, app.config["JWT_SECRET_KEY"], algorithm="HS256")

        response = client.get("/tasks", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 401
        assert response.get_json()["error"] == "Unauthorized: Invalid token"

    def test_invalid_token_error_is_chained(self, app, db):
        from taskboard.errors import Unauthorized
        from taskboard.middleware.auth import token_required

        @token_required
        def view():
            return "ok"

        with app.test_request_context(headers={"Authorization": "Bearer garbage"}):
            with pytest.raises(Unauthorized) as excinfo:
                view()

        assert isinstance(excinfo.value.__cause__, jwt.InvalidTokenError)


class TestRegisterRace:
    def test_unique_index_violation_maps_to_conflict(self, app, db):
        from unittest.mock import patch

        from sqlalchemy.exc import IntegrityError

        from taskboard.errors import ConflictError
        from taskboard.services.auth import register_user

        error = IntegrityError("INSERT INTO users", {}, Exception("UNIQUE constraint failed"))
        with patch.object(db.session, "commit", side_effect=error):
            with pytest.raises(ConflictError) as excinfo:
                register_user("racer", "password123")

        assert excinfo.value.__suppress_context__
        assert excinfo.value.__cause__ is None
