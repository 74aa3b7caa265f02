import uuid

import pytest

from conftest import STRONG_PASSWORD, bearer, create_verified_user

USERS = "/api/v1/users"


@pytest.fixture
def session(client, mailer):
    return create_verified_user(client, mailer)


def test_me(client, session):
    response = client.get(f"{USERS}/me", headers=bearer(session["accessToken"]))

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["user"]["email"] == "a@b.com"
    assert data["user"]["emailVerified"] is True
    assert "passwordHash" not in data["user"]
    assert data["profile"]["firstName"] == "A"


@pytest.mark.parametrize(
    "headers",
    [
        {},
        {"Authorization": "Token abc"},
        {"Authorization": "Bearer not-a-jwt"},
    ],
)
def test_me_requires_valid_access_token(client, headers):
    response = client.get(f"{USERS}/me", headers=headers)

    assert response.status_code == 401
    assert response.json()["success"] is False
    assert response.json()["message"] == "Unauthorized"


def test_refresh_token_is_not_an_access_token(client, session):
    response = client.get(f"{USERS}/me", headers=bearer(session["refreshToken"]))

    assert response.status_code == 401


def test_update_profile_changes_only_given_fields(client, session):
    response = client.patch(
        f"{USERS}/me/profile",
        json={"firstName": "Ada", "bio": "Analyst", "dateOfBirth": "1815-12-10", "isPublic": False},
        headers=bearer(session["accessToken"]),
    )

    assert response.status_code == 200
    profile = response.json()["data"]["profile"]
    assert profile["firstName"] == "Ada"
    assert profile["lastName"] == "B"
    assert profile["bio"] == "Analyst"
    assert profile["dateOfBirth"] == "1815-12-10"
    assert profile["isPublic"] is False


@pytest.mark.parametrize(
    "body, field",
    [
        ({"firstName": "A"}, "firstName"),
        ({"bio": "x" * 501}, "bio"),
        ({"avatarUrl": "ftp://example.com/a.png"}, "avatarUrl"),
    ],
)
def test_update_profile_validation(client, session, body, field):
    response = client.patch(f"{USERS}/me/profile", json=body, headers=bearer(session["accessToken"]))

    assert response.status_code == 400
    assert response.json()["message"] == "Validation failed"
    assert response.json()["errors"][0].startswith(f"{field}:")


def test_empty_avatar_url_clears_it(client, session):
    headers = bearer(session["accessToken"])
    client.patch(f"{USERS}/me/profile", json={"avatarUrl": "https://cdn.test/a.png"}, headers=headers)

    response = client.patch(f"{USERS}/me/profile", json={"avatarUrl": ""}, headers=headers)

    assert response.status_code == 200
    assert response.json()["data"]["profile"]["avatarUrl"] is None


class TestAvatarUpload:
    def test_upload(self, client, session, storage):
        response = client.post(
            f"{USERS}/me/avatar",
            files={"file": ("me.png", b"\x89PNG fake image", "image/png")},
            headers=bearer(session["accessToken"]),
        )

        assert response.status_code == 200
        key = f"avatars/{session['user']['id']}/avatar"
        assert response.json()["data"]["profile"]["avatarUrl"] == f"https://cdn.test/{key}"
        assert storage.uploads == [(key, b"\x89PNG fake image", "image/png")]

    def test_rejects_other_types(self, client, session, storage):
        response = client.post(
            f"{USERS}/me/avatar",
            files={"file": ("notes.txt", b"hello", "text/plain")},
            headers=bearer(session["accessToken"]),
        )

        assert response.status_code == 400
        assert response.json()["message"] == "Invalid file type"
        assert storage.uploads == []

    def test_rejects_large_files(self, client, session, storage):
        response = client.post(
            f"{USERS}/me/avatar",
            files={"file": ("big.jpg", b"0" * (5 * 1024 * 1024 + 1), "image/jpeg")},
            headers=bearer(session["accessToken"]),
        )

        assert response.status_code == 400
        assert response.json()["message"] == "File too large"
        assert storage.uploads == []


class TestPublicProfile:
    def test_public_view_hides_private_fields(self, client, session):
        client.patch(
            f"{USERS}/me/profile",
            json={"bio": "Hello", "phone": "+123456"},
            headers=bearer(session["accessToken"]),
        )

        response = client.get(f"{USERS}/{session['user']['id']}")

        assert response.status_code == 200
        user = response.json()["data"]["user"]
        assert user["id"] == session["user"]["id"]
        assert "email" not in user
        assert user["profile"] == {"firstName": "A", "lastName": "B", "avatarUrl": None, "bio": "Hello"}

    def test_private_profile_is_omitted(self, client, session):
        client.patch(f"{USERS}/me/profile", json={"isPublic": False}, headers=bearer(session["accessToken"]))

        response = client.get(f"{USERS}/{session['user']['id']}")

        assert response.status_code == 200
        assert response.json()["data"]["user"]["profile"] is None

    def test_unknown_user(self, client):
        response = client.get(f"{USERS}/{uuid.uuid4()}")

        assert response.status_code == 404
        assert response.json() == {"success": False, "message": "User not found"}


class TestDeleteAccount:
    def test_deleted_account_is_gone_everywhere(self, client, session):
        headers = bearer(session["accessToken"])

        response = client.delete(f"{USERS}/me", headers=headers)

        assert response.status_code == 200
        assert response.json()["message"] == "Account deleted successfully"
        assert client.get(f"{USERS}/me", headers=headers).status_code == 401
        assert client.get(f"{USERS}/{session['user']['id']}").status_code == 404
        refresh = client.post("/api/v1/auth/refresh", json={"refreshToken": session["refreshToken"]})
        assert refresh.status_code == 401
        signin = client.post("/api/v1/auth/signin", json={"email": "a@b.com", "password": STRONG_PASSWORD})
        assert signin.status_code == 401
        assert signin.json()["message"] == "Invalid credentials"

    def test_email_can_sign_up_again(self, client, mailer, session):
        client.delete(f"{USERS}/me", headers=bearer(session["accessToken"]))

        again = create_verified_user(client, mailer)

        assert again["user"]["id"] != session["user"]["id"]
