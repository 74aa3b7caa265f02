import functools
from urllib.parse import parse_qs, urlparse

import httpx
import pytest

from auth_api.services.auth.auth_service import split_display_name
from auth_api.services.google import GoogleOAuthClient, GoogleOAuthSettings

SETTINGS = GoogleOAuthSettings(CLIENT_ID="client-id", CLIENT_SECRET="client-secret")


@pytest.fixture
def google_api(monkeypatch):
    """Route the client's httpx calls to an in-process Google stand-in."""
    calls = []
    responses = {
        "token": httpx.Response(200, json={"access_token": "google-access"}),
        "userinfo": httpx.Response(
            200,
            json={"sub": "g-123", "email": "ada@b.com", "name": "Ada Lovelace", "email_verified": True},
        ),
    }

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        if request.url == httpx.URL(SETTINGS.TOKEN_URL):
            return responses["token"]
        return responses["userinfo"]

    transport = httpx.MockTransport(handler)
    monkeypatch.setattr(httpx, "AsyncClient", functools.partial(httpx.AsyncClient, transport=transport))
    return calls, responses


def test_authorization_url():
    url = urlparse(GoogleOAuthClient(SETTINGS).authorization_url("xyz"))
    params = parse_qs(url.query)

    assert f"{url.scheme}://{url.netloc}{url.path}" == SETTINGS.AUTH_URL
    assert params["client_id"] == ["client-id"]
    assert params["response_type"] == ["code"]
    assert params["state"] == ["xyz"]


@pytest.mark.asyncio
async def test_exchange_code(google_api):
    calls, _ = google_api

    response = await GoogleOAuthClient(SETTINGS).exchange_code("auth-code")

    assert response.success is True
    assert response.user.id == "g-123"
    assert response.user.email == "ada@b.com"
    assert response.user.name == "Ada Lovelace"
    assert parse_qs(calls[0].content.decode())["code"] == ["auth-code"]
    assert calls[1].headers["Authorization"] == "Bearer google-access"


@pytest.mark.asyncio
async def test_rejected_code(google_api):
    _, responses = google_api
    responses["token"] = httpx.Response(400, json={"error": "invalid_grant"})

    response = await GoogleOAuthClient(SETTINGS).exchange_code("bad")

    assert response.success is False
    assert response.user is None


@pytest.mark.asyncio
async def test_profile_without_email(google_api):
    _, responses = google_api
    responses["userinfo"] = httpx.Response(200, json={"sub": "g-123"})

    response = await GoogleOAuthClient(SETTINGS).exchange_code("auth-code")

    assert response.success is False


@pytest.mark.asyncio
async def test_unconfigured_client_fails_without_network():
    response = await GoogleOAuthClient(GoogleOAuthSettings(CLIENT_ID="", CLIENT_SECRET="")).exchange_code("x")

    assert response.success is False
    assert response.error == "Google OAuth not configured"


@pytest.mark.parametrize(
    "name, expected",
    [
        ("Ada Lovelace", ("Ada", "Lovelace")),
        ("Grace Brewster Hopper", ("Grace", "Brewster Hopper")),
        ("Cher", ("Cher", "User")),
        ("", ("Google", "User")),
        (None, ("Google", "User")),
    ],
)
def test_split_display_name(name, expected):
    assert split_display_name(name) == expected
