import uuid
from datetime import timedelta

import jwt
import pytest

from auth_api.services.accounts import account_store
from auth_api.services.tokens import ACCESS, REFRESH, TokenInvalid, TokenService

ACCESS_SECRET = "unit-access-secret-0123456789abcdefghijkl"
REFRESH_SECRET = "unit-refresh-secret-0123456789abcdefghijk"


class FakeClock:
    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def tokens(clock):
    return TokenService(
        access_secret=ACCESS_SECRET,
        refresh_secret=REFRESH_SECRET,
        access_ttl=timedelta(minutes=15),
        refresh_ttl=timedelta(days=7),
        clock=clock,
    )


def test_access_token_round_trip(tokens, clock):
    user_id = uuid.uuid4()
    payload = tokens.verify(tokens.issue_access_token(user_id), ACCESS)

    assert payload.user_id == user_id
    assert payload.type == ACCESS
    assert payload.iat == int(clock.now)
    assert payload.exp == int(clock.now) + 15 * 60
    assert payload.jti


def test_access_token_expires(tokens, clock):
    token = tokens.issue_access_token(uuid.uuid4())

    clock.now += 15 * 60 - 1
    tokens.verify(token, ACCESS)

    clock.now += 1
    with pytest.raises(TokenInvalid):
        tokens.verify(token, ACCESS)


def test_refresh_token_lifetime(tokens, clock):
    issued = tokens.issue_refresh_token(uuid.uuid4())

    clock.now += 7 * 24 * 3600 - 1
    assert tokens.verify(issued.token, REFRESH).jti == issued.jti

    clock.now += 1
    with pytest.raises(TokenInvalid):
        tokens.verify(issued.token, REFRESH)


def test_token_classes_are_isolated(tokens):
    user_id = uuid.uuid4()

    with pytest.raises(TokenInvalid):
        tokens.verify(tokens.issue_access_token(user_id), REFRESH)
    with pytest.raises(TokenInvalid):
        tokens.verify(tokens.issue_refresh_token(user_id).token, ACCESS)


def test_type_claim_is_checked_even_with_matching_secret(clock):
    same_secret = TokenService(ACCESS_SECRET, ACCESS_SECRET, clock=clock)
    refresh = same_secret.issue_refresh_token(uuid.uuid4()).token

    with pytest.raises(TokenInvalid):
        same_secret.verify(refresh, ACCESS)


@pytest.mark.parametrize(
    "token",
    [
        "",
        "not.a.jwt",
        jwt.encode({"sub": str(uuid.uuid4()), "type": "access"}, ACCESS_SECRET, algorithm="HS256"),
        jwt.encode(
            {"sub": "not-a-uuid", "iat": 1, "exp": 4_000_000_000, "type": "access", "jti": "x"},
            ACCESS_SECRET,
            algorithm="HS256",
        ),
        jwt.encode(
            {"sub": str(uuid.uuid4()), "iat": 1, "exp": 4_000_000_000, "type": "access", "jti": "x"},
            "some-other-secret-that-is-long-enough-0000",
            algorithm="HS256",
        ),
    ],
    ids=["empty", "garbage", "missing-claims", "bad-subject", "wrong-secret"],
)
def test_invalid_tokens_raise_uniformly(tokens, token):
    with pytest.raises(TokenInvalid) as exc_info:
        tokens.verify(token, ACCESS)
    assert exc_info.value.message == "Invalid token"


def test_tampered_token_is_rejected(tokens):
    token = tokens.issue_access_token(uuid.uuid4())
    header, _, signature = token.split(".")
    other_payload = tokens.issue_access_token(uuid.uuid4()).split(".")[1]
    tampered = ".".join([header, other_payload, signature])

    with pytest.raises(TokenInvalid):
        tokens.verify(tampered, ACCESS)


def test_unknown_token_type(tokens):
    with pytest.raises(ValueError):
        tokens.verify("x", "id")


async def _make_user(db):
    user = await account_store.insert_user("tokens@example.com", db, password_hash="x")
    await db.commit()
    return user


@pytest.mark.asyncio
async def test_refresh_tokens_are_persisted_and_revocable(db, tokens):
    user = await _make_user(db)
    pair = await tokens.issue_token_pair(user.id, db)
    await db.commit()

    payload = await tokens.verify_refresh_token(pair.refresh_token, db)
    assert payload.user_id == user.id

    refreshed = await tokens.refresh(pair.refresh_token, db)
    assert refreshed.refresh_token is None
    assert tokens.verify(refreshed.access_token, ACCESS).user_id == user.id

    assert await tokens.revoke(pair.refresh_token, db)
    assert not await tokens.revoke(pair.refresh_token, db)
    with pytest.raises(TokenInvalid):
        await tokens.verify_refresh_token(pair.refresh_token, db)


@pytest.mark.asyncio
async def test_unpersisted_refresh_token_is_rejected(db, tokens):
    user = await _make_user(db)
    issued = tokens.issue_refresh_token(user.id)

    with pytest.raises(TokenInvalid):
        await tokens.verify_refresh_token(issued.token, db)


@pytest.mark.asyncio
async def test_revoke_all(db, tokens):
    user = await _make_user(db)
    first = await tokens.issue_token_pair(user.id, db)
    second = await tokens.issue_token_pair(user.id, db)

    assert await tokens.revoke_all(user.id, db) == 2
    for pair in (first, second):
        with pytest.raises(TokenInvalid):
            await tokens.verify_refresh_token(pair.refresh_token, db)


@pytest.mark.asyncio
async def test_rotation_revokes_presented_token(db, clock):
    rotating = TokenService(ACCESS_SECRET, REFRESH_SECRET, rotate_refresh_tokens=True, clock=clock)
    user = await _make_user(db)
    pair = await rotating.issue_token_pair(user.id, db)

    refreshed = await rotating.refresh(pair.refresh_token, db)

    assert refreshed.refresh_token
    await rotating.verify_refresh_token(refreshed.refresh_token, db)
    with pytest.raises(TokenInvalid):
        await rotating.verify_refresh_token(pair.refresh_token, db)
