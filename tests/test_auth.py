from __future__ import annotations

from dataclasses import dataclass
from types import SimpleNamespace
from uuid import UUID, uuid4

import pytest
from httpx import AsyncClient

from app.auth.jwt import AuthError, create_access_token, decode_token
from app.auth.passwords import hash_password, validate_password_strength, verify_password
from app.main import app
from app.models.enums import UserRoleEnum
from conftest import FakeAsyncSession, FakeRedis, FakeResult, make_user


@dataclass
class _RateLimitSettingsStub:
    rate_limit_authenticated_per_minute: int = 1
    rate_limit_anonymous_per_minute: int = 1


@pytest.mark.asyncio
async def test_missing_jwt_rejected_on_protected_endpoint(auth_client: AsyncClient) -> None:
    response = await auth_client.get("/api/v1/users/profile")
    assert response.status_code == 401
    assert response.json()["detail"]["error"] == "auth_required"


def test_jwt_create_decode_roundtrip(auth_user_id: UUID) -> None:
    token = create_access_token(str(auth_user_id), expires_minutes=5)
    payload = decode_token(token)
    assert payload["sub"] == str(auth_user_id)
    assert payload["typ"] == "access"


def test_decode_invalid_token_raises_auth_error() -> None:
    with pytest.raises(AuthError) as exc_info:
        decode_token("invalid.token.payload")
    assert exc_info.value.code == "token_invalid"


def test_decode_expired_token_raises_auth_error(auth_user_id: UUID) -> None:
    token = create_access_token(str(auth_user_id), expires_minutes=-5)
    with pytest.raises(AuthError) as exc_info:
        decode_token(token)
    assert exc_info.value.code == "token_expired"


@pytest.mark.asyncio
async def test_valid_token_resolves_user(
    auth_client: AsyncClient,
    fake_db_session: FakeAsyncSession,
    access_token: str,
    auth_user_id: UUID,
) -> None:
    fake_db_session.execute.return_value = FakeResult([make_user(user_id=auth_user_id)])

    response = await auth_client.get(
        "/api/v1/users/profile",
        headers={"Authorization": f"Bearer {access_token}"},
    )

    assert response.status_code == 200
    assert response.json()["id"] == str(auth_user_id)


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("users", "expected_error"),
    [
        ([], "user_invalid"),
        ([SimpleNamespace(is_active=False)], "user_inactive"),
    ],
)
async def test_token_for_unusable_account_rejected(
    auth_client: AsyncClient,
    fake_db_session: FakeAsyncSession,
    access_token: str,
    users: list[object],
    expected_error: str,
) -> None:
    fake_db_session.execute.return_value = FakeResult(users)

    response = await auth_client.get(
        "/api/v1/users/profile",
        headers={"Authorization": f"Bearer {access_token}"},
    )

    assert response.status_code == 401
    assert response.json()["detail"]["error"] == expected_error


@pytest.mark.asyncio
async def test_garbage_token_rejected(auth_client: AsyncClient) -> None:
    response = await auth_client.get(
        "/api/v1/users/profile",
        headers={"Authorization": "Bearer not-a-jwt"},
    )
    assert response.status_code == 401
    assert response.json()["detail"]["error"] == "token_invalid"


@pytest.mark.asyncio
async def test_rbac_forbidden_for_non_admin(client: AsyncClient) -> None:
    async def _analyst() -> object:
        return make_user(UserRoleEnum.analyst)

    from app.auth.dependencies import get_current_user

    app.dependency_overrides[get_current_user] = _analyst

    response = await client.get("/api/v1/users")
    assert response.status_code == 403
    assert response.json()["detail"]["error"] == "forbidden"


@pytest.mark.asyncio
async def test_rate_limit_per_client(
    fake_redis: FakeRedis,
    client: AsyncClient,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    app.state.redis = fake_redis
    monkeypatch.setattr("app.middleware.rate_limit.get_settings", lambda: _RateLimitSettingsStub())

    first = await client.get("/api/v1/users/profile")
    second = await client.get("/api/v1/users/profile")

    assert first.status_code == 200
    assert second.status_code == 429
    assert second.json()["detail"]["error"] == "rate_limited"


@pytest.mark.asyncio
async def test_rate_limit_counts_tokens_separately(
    fake_redis: FakeRedis,
    client: AsyncClient,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    app.state.redis = fake_redis
    monkeypatch.setattr("app.middleware.rate_limit.get_settings", lambda: _RateLimitSettingsStub())

    first = await client.get("/api/v1/users/profile", headers={"Authorization": "Bearer token-a"})
    second = await client.get("/api/v1/users/profile", headers={"Authorization": "Bearer token-b"})

    assert first.status_code == 200
    assert second.status_code == 200
    assert all(key.startswith("ratelimit:token:") for key in fake_redis._counter)


@pytest.mark.asyncio
async def test_rate_limit_skips_non_api_paths(
    fake_redis: FakeRedis,
    client: AsyncClient,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    app.state.redis = fake_redis
    monkeypatch.setattr("app.middleware.rate_limit.get_settings", lambda: _RateLimitSettingsStub())

    for _ in range(3):
        response = await client.get("/health")
        assert response.status_code == 200
    fake_redis.incr.assert_not_called()


@pytest.mark.parametrize(
    ("password", "message"),
    [
        ("a1", "at least 6"),
        ("abcdefgh", "at least one number"),
        ("12345678", "at least one letter"),
        ("a1" * 65, "cannot exceed"),
    ],
)
def test_password_strength_rules(password: str, message: str) -> None:
    with pytest.raises(ValueError, match=message):
        validate_password_strength(password)


def test_password_hash_roundtrip() -> None:
    hashed = hash_password("harvest42")
    assert hashed != "harvest42"
    assert verify_password("harvest42", hashed)
    assert not verify_password("harvest43", hashed)
    assert not verify_password("harvest42", "not-a-bcrypt-hash")


def test_access_token_subject_is_user_id() -> None:
    user_id = uuid4()
    assert decode_token(create_access_token(str(user_id)))["sub"] == str(user_id)
