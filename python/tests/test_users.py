"""Tests for user, session and channel routes.

Tests cover:
- Registration (multipart, lowercase identity, duplicate detection, media relay)
- Login by username or email, token rotation on refresh, logout
- Account updates and image replacement
- Channel profile counters and watch history
"""

from pathlib import Path

from fastapi.testclient import TestClient

from vidshare.config import get_settings
from vidshare.db.models import User
from tests.factories import (
    DEFAULT_PASSWORD,
    create_test_user,
    create_test_video,
    refetch,
)
from tests.helpers import auth_headers, image_file


def _register(client: TestClient, username: str = "Alice", **files):
    data = {
        "username": username,
        "email": f"{username}@Example.com",
        "fullName": f"{username} Example",
        "password": "pw-12345",
    }
    return client.post(
        "/users/register", data=data, files={"avatar": image_file(), **files}
    )


def _upload_dir() -> Path:
    return Path(get_settings().upload_tmp_dir)


# =============================================================================
# Registration
# =============================================================================


class TestRegister:
    def test_register_creates_user(self, client: TestClient, media_relay):
        response = _register(client, coverImage=image_file("cover.png"))

        assert response.status_code == 201
        body = response.json()
        assert body["status"] == 201
        user = body["data"]
        assert user["username"] == "alice"
        assert user["email"] == "alice@example.com"
        assert user["fullName"] == "Alice Example"
        assert user["avatar"] in media_relay.objects
        assert user["coverImage"] in media_relay.objects
        assert "password" not in user
        assert "passwordHash" not in user

    def test_register_removes_temp_files(self, client: TestClient):
        _register(client)

        upload_dir = _upload_dir()
        assert not upload_dir.exists() or list(upload_dir.iterdir()) == []

    def test_cover_image_is_optional(self, client: TestClient):
        response = _register(client)

        assert response.status_code == 201
        assert response.json()["data"]["coverImage"] is None

    def test_duplicate_username_rejected(self, client: TestClient, media_relay):
        _register(client)
        uploaded_before = len(media_relay.objects)

        response = _register(client, "ALICE")

        assert response.status_code == 400
        assert response.json()["code"] == "E_USER_EXISTS"
        assert len(media_relay.objects) == uploaded_before

    def test_missing_avatar_rejected(self, client: TestClient):
        response = client.post(
            "/users/register",
            data={
                "username": "carol",
                "email": "carol@example.com",
                "fullName": "Carol",
                "password": "pw",
            },
        )

        assert response.status_code == 400
        assert response.json()["code"] == "E_FILE_REQUIRED"

    def test_blank_field_rejected(self, client: TestClient):
        response = client.post(
            "/users/register",
            data={"username": "  ", "email": "x@example.com", "fullName": "X", "password": "pw"},
            files={"avatar": image_file()},
        )

        assert response.status_code == 400
        assert response.json()["code"] == "E_FIELD_REQUIRED"


# =============================================================================
# Sessions
# =============================================================================


class TestLogin:
    def test_login_by_username(self, client: TestClient, db_session):
        create_test_user(db_session, "dave")

        response = client.post(
            "/users/login", json={"username": "Dave", "password": DEFAULT_PASSWORD}
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["user"]["username"] == "dave"
        assert data["accessToken"]
        assert data["refreshToken"]
        assert "accessToken" in response.cookies
        assert "refreshToken" in response.cookies

    def test_login_by_email(self, client: TestClient, db_session):
        create_test_user(db_session, "erin", email="erin@example.com")

        response = client.post(
            "/users/login", json={"email": "erin@example.com", "password": DEFAULT_PASSWORD}
        )

        assert response.status_code == 200

    def test_unknown_user_is_404(self, client: TestClient):
        response = client.post("/users/login", json={"username": "ghost", "password": "x"})

        assert response.status_code == 404
        assert response.json()["code"] == "E_USER_NOT_FOUND"

    def test_wrong_password_is_401(self, client: TestClient, db_session):
        create_test_user(db_session, "frank")

        response = client.post("/users/login", json={"username": "frank", "password": "nope"})

        assert response.status_code == 401
        assert response.json()["code"] == "E_INVALID_CREDENTIALS"

    def test_identifier_required(self, client: TestClient):
        response = client.post("/users/login", json={"password": "x"})

        assert response.status_code == 400


class TestRefreshAndLogout:
    def _login(self, client: TestClient, username: str) -> dict:
        response = client.post(
            "/users/login", json={"username": username, "password": DEFAULT_PASSWORD}
        )
        return response.json()["data"]

    def test_refresh_rotates_tokens(self, client: TestClient, db_session):
        create_test_user(db_session, "gina")
        first = self._login(client, "gina")

        response = client.post(
            "/users/refresh-token", json={"refreshToken": first["refreshToken"]}
        )

        assert response.status_code == 200
        second = response.json()["data"]
        assert second["refreshToken"] != first["refreshToken"]

    def test_refresh_token_is_single_use(self, client: TestClient, db_session):
        create_test_user(db_session, "hank")
        first = self._login(client, "hank")
        client.post("/users/refresh-token", json={"refreshToken": first["refreshToken"]})

        response = client.post(
            "/users/refresh-token", json={"refreshToken": first["refreshToken"]}
        )

        assert response.status_code == 401
        assert response.json()["code"] == "E_REFRESH_TOKEN_INVALID"

    def test_refresh_from_cookie(self, client: TestClient, db_session):
        create_test_user(db_session, "ivy")
        self._login(client, "ivy")

        response = client.post("/users/refresh-token")

        assert response.status_code == 200

    def test_logout_invalidates_refresh_token(self, client: TestClient, db_session):
        user = create_test_user(db_session, "jack")
        tokens = self._login(client, "jack")

        response = client.post(
            "/users/logout", headers={"Authorization": f"Bearer {tokens['accessToken']}"}
        )
        assert response.status_code == 200
        assert refetch(db_session, User, user.id).refresh_token_hash is None

        response = client.post(
            "/users/refresh-token", json={"refreshToken": tokens["refreshToken"]}
        )
        assert response.status_code == 401


# =============================================================================
# Account
# =============================================================================


class TestAccount:
    def test_change_password(self, client: TestClient, db_session, token_service):
        user = create_test_user(db_session, "kate")

        response = client.post(
            "/users/change-password",
            json={"oldPassword": DEFAULT_PASSWORD, "newPassword": "brand-new"},
            headers=auth_headers(token_service, user),
        )
        assert response.status_code == 200

        login = client.post("/users/login", json={"username": "kate", "password": "brand-new"})
        assert login.status_code == 200

    def test_change_password_wrong_old(self, client: TestClient, db_session, token_service):
        user = create_test_user(db_session)

        response = client.post(
            "/users/change-password",
            json={"oldPassword": "wrong", "newPassword": "brand-new"},
            headers=auth_headers(token_service, user),
        )

        assert response.status_code == 400
        assert response.json()["code"] == "E_INVALID_PASSWORD"

    def test_update_account_lowercases_email(self, client: TestClient, db_session, token_service):
        user = create_test_user(db_session)

        response = client.patch(
            "/users/update-account",
            json={"fullName": "Renamed", "email": "NEW@Example.com"},
            headers=auth_headers(token_service, user),
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["fullName"] == "Renamed"
        assert data["email"] == "new@example.com"

    def test_update_account_email_taken(self, client: TestClient, db_session, token_service):
        create_test_user(db_session, "owner1", email="taken@example.com")
        user = create_test_user(db_session)

        response = client.patch(
            "/users/update-account",
            json={"fullName": "X", "email": "taken@example.com"},
            headers=auth_headers(token_service, user),
        )

        assert response.status_code == 400
        assert response.json()["code"] == "E_USER_EXISTS"

    def test_update_avatar_releases_old_image(
        self, client: TestClient, db_session, token_service, media_relay
    ):
        user = create_test_user(db_session)
        old_avatar = user.avatar

        response = client.patch(
            "/users/avatar",
            files={"avatar": image_file("new.png")},
            headers=auth_headers(token_service, user),
        )

        assert response.status_code == 200
        assert response.json()["data"]["avatar"] in media_relay.objects
        assert old_avatar in media_relay.deleted

    def test_update_cover_image_requires_file(self, client: TestClient, db_session, token_service):
        user = create_test_user(db_session)

        response = client.patch("/users/cover-image", headers=auth_headers(token_service, user))

        assert response.status_code == 400
        assert response.json()["code"] == "E_FILE_REQUIRED"


# =============================================================================
# Channel
# =============================================================================


class TestChannelProfile:
    def test_counts_and_subscription_flag(self, client: TestClient, db_session, token_service):
        alice = create_test_user(db_session, "alice")
        bob = create_test_user(db_session, "bob")
        client.post(f"/subscriptions/c/{bob.id}", headers=auth_headers(token_service, alice))

        as_alice = client.get("/users/c/bob", headers=auth_headers(token_service, alice))
        as_bob = client.get("/users/c/BOB", headers=auth_headers(token_service, bob))

        assert as_alice.status_code == 200
        profile = as_alice.json()["data"]
        assert profile["subscribersCount"] == 1
        assert profile["subscribedToCount"] == 0
        assert profile["isSubscribed"] is True
        assert as_bob.json()["data"]["isSubscribed"] is False

    def test_unknown_channel_is_404(self, client: TestClient, db_session, token_service):
        user = create_test_user(db_session)

        response = client.get("/users/c/nobody", headers=auth_headers(token_service, user))

        assert response.status_code == 404
        assert response.json()["code"] == "E_CHANNEL_NOT_FOUND"


class TestWatchHistory:
    def test_history_in_watch_order_without_duplicates(
        self, client: TestClient, db_session, token_service
    ):
        viewer = create_test_user(db_session)
        owner = create_test_user(db_session, full_name="Channel Owner")
        first = create_test_video(db_session, owner, title="first")
        second = create_test_video(db_session, owner, title="second")
        headers = auth_headers(token_service, viewer)

        client.get(f"/videos/{first.id}", headers=headers)
        client.get(f"/videos/{second.id}", headers=headers)
        client.get(f"/videos/{first.id}", headers=headers)

        response = client.get("/users/history", headers=headers)

        assert response.status_code == 200
        history = response.json()["data"]
        assert [v["title"] for v in history] == ["second", "first"]
        assert set(history[0]["owner"]) == {"username", "fullName", "avatar"}
        assert history[0]["owner"]["fullName"] == "Channel Owner"

    def test_history_keeps_stored_order_oldest_first(
        self, client: TestClient, db_session, token_service
    ):
        viewer = create_test_user(db_session)
        owner = create_test_user(db_session)
        videos = [create_test_video(db_session, owner, title=t) for t in ("a", "b", "c")]
        headers = auth_headers(token_service, viewer)

        for video in videos:
            client.get(f"/videos/{video.id}", headers=headers)

        response = client.get("/users/history", headers=headers)

        assert [v["title"] for v in response.json()["data"]] == ["a", "b", "c"]

    def test_empty_history(self, client: TestClient, db_session, token_service):
        user = create_test_user(db_session)

        response = client.get("/users/history", headers=auth_headers(token_service, user))

        assert response.json()["data"] == []
